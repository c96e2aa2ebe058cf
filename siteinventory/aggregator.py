"""Fold container facts into per-site application records."""

import logging
from collections.abc import Iterable

from siteinventory.models import (
    ApplicationRecord,
    ClassifiedName,
    ContainerFact,
    NamingScheme,
    PublishedPort,
)
from siteinventory.naming import classify

logger = logging.getLogger(__name__)

RUNNING = "running"


def first_public_port(ports: Iterable[PublishedPort]) -> int:
    """Return the first published (non-zero) public port, or 0 when none is."""
    for port in ports:
        if port.public_port != 0:
            return port.public_port
    return 0


def classify_fact(fact: ContainerFact) -> ClassifiedName | None:
    """Classify a fact by the first of its names that matches a known scheme."""
    for name in fact.names:
        classified = classify(name)
        if classified is not None:
            return classified
    return None


def _upsert(
    records: dict[str, ApplicationRecord],
    classified: ClassifiedName,
    fact: ContainerFact,
) -> None:
    app_id = classified.application_id
    record = records.get(app_id)
    if record is None:
        record = ApplicationRecord(
            name=classified.application,
            environment=classified.environment,
            status=fact.state,
            scheme=classified.scheme,
        )
        records[app_id] = record

    public_port = first_public_port(fact.published_ports)
    if classified.role == "web":
        record.web_public_port = public_port
    elif classified.role == "db":
        record.db_public_port = public_port

    # Non-running states stick to the whole site.
    if fact.state != RUNNING:
        record.status = fact.state


def aggregate(
    facts: Iterable[ContainerFact],
    scheme: NamingScheme | None = None,
) -> dict[str, ApplicationRecord]:
    """
    Build a fresh mapping of application id to record from a container snapshot.

    Each fact contributes at most once, through the first of its names that
    classifies. When ``scheme`` is given, facts classified under another scheme
    are skipped.
    """
    records: dict[str, ApplicationRecord] = {}
    for fact in facts:
        classified = classify_fact(fact)
        if classified is None:
            logger.debug("Skipping unrecognized container", extra={"names": list(fact.names)})
            continue
        if scheme is not None and classified.scheme is not scheme:
            continue
        _upsert(records, classified, fact)
    return records
