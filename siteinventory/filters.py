"""Predicates that narrow raw container listings and local snapshot entries."""

from collections.abc import Iterable
from os import PathLike
from pathlib import Path

from siteinventory.models import ContainerFact
from siteinventory.naming import LEGACY_PREFIX, SEPARATOR

LEGACY_ENVIRONMENTS = frozenset({"default", "staging", "production"})


def filter_owned(facts: Iterable[ContainerFact], base_dir: Path) -> list[ContainerFact]:
    """Keep containers whose project directory exists under ``base_dir``."""
    owned: list[ContainerFact] = []
    for fact in facts:
        client_name = fact.canonical_name.split(SEPARATOR)[0]
        if not (base_dir / client_name).exists():
            continue
        owned.append(fact)
    return owned


def filter_legacy(facts: Iterable[ContainerFact]) -> list[ContainerFact]:
    return [fact for fact in facts if fact.canonical_name.startswith(LEGACY_PREFIX)]


def is_valid_legacy_env(environment: str) -> bool:
    return environment in LEGACY_ENVIRONMENTS


def filter_environment_snapshots(
    entries: Iterable[str | PathLike[str]],
) -> list[str | PathLike[str]]:
    """
    Keep snapshot entries named ``<project>-<environment>`` for a known environment.

    The name is split on the first separator only, so ``a-b-c`` yields the
    environment ``b-c`` and is rejected.
    """
    kept: list[str | PathLike[str]] = []
    for entry in entries:
        parts = Path(entry).name.split(SEPARATOR, 1)
        if len(parts) != 2 or not is_valid_legacy_env(parts[1]):
            continue
        kept.append(entry)
    return kept
