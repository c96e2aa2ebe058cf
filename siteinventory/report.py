"""Site list assembly and console rendering."""

import logging
from collections.abc import Iterable
from pathlib import Path

from tabulate import tabulate

from siteinventory.aggregator import aggregate
from siteinventory.models import ApplicationRecord, ContainerFact, NamingScheme

logger = logging.getLogger(__name__)

HEADERS = ("NAME", "ENVIRONMENT", "TYPE", "URL", "DATABASE URL", "STATUS")
NO_APPLICATIONS = "No applications found."

APP_TYPE_MARKERS = {
    "docroot/scripts/drupal.sh": "drupal",
    "docroot/wp": "wp",
}


class UnknownAppTypeError(LookupError):
    """The site's source tree does not match any known application type."""


def format_plural(count: int, single: str, plural: str) -> str:
    if count == 1:
        return single
    return plural


def determine_app_type(base_path: Path) -> str:
    """Detect the application type from marker files under ``<base_path>/src``."""
    for marker, app_type in APP_TYPE_MARKERS.items():
        if (base_path / "src" / marker).exists():
            return app_type
    raise UnknownAppTypeError(f"Couldn't determine app's type for {base_path}")


def site_path(base_dir: Path, record: ApplicationRecord) -> Path:
    if record.environment:
        return base_dir / record.name / record.environment
    return base_dir / record.name


def build_site_list(facts: Iterable[ContainerFact]) -> dict[NamingScheme, dict[str, ApplicationRecord]]:
    """Aggregate one snapshot into a mapping per naming scheme, legacy first."""
    snapshot = list(facts)
    return {scheme: aggregate(snapshot, scheme=scheme) for scheme in (NamingScheme.LEGACY, NamingScheme.STANDARD)}


def application_row(record: ApplicationRecord, base_dir: Path | None = None) -> list[str]:
    app_type = ""
    if base_dir is not None:
        try:
            app_type = determine_app_type(site_path(base_dir, record))
        except UnknownAppTypeError:
            logger.debug("Unknown app type", extra={"application_id": record.application_id})

    url = f"http://localhost:{record.web_public_port}" if record.web_public_port else ""
    db_url = f"localhost:{record.db_public_port}" if record.db_public_port else ""
    return [record.name, record.environment, app_type, url, db_url, record.status]


def render_app_table(
    apps: dict[str, ApplicationRecord],
    group: str,
    base_dir: Path | None = None,
) -> str:
    """Render one group of sites; an empty group renders as an empty string."""
    if not apps:
        return ""
    summary = f"{len(apps)} {group} {format_plural(len(apps), 'site', 'sites')} found."
    rows = [application_row(record, base_dir) for record in apps.values()]
    table = tabulate(rows, headers=HEADERS, tablefmt="plain")
    return f"{summary}\n{table}"


def render_site_list(
    groups: dict[NamingScheme, dict[str, ApplicationRecord]],
    base_dir: Path | None = None,
) -> str:
    sections = [
        render_app_table(apps, scheme.value, base_dir)
        for scheme, apps in groups.items()
        if apps
    ]
    if not sections:
        return NO_APPLICATIONS
    return "\n\n".join(sections)
