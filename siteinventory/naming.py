"""Container name classification for the legacy and standard naming schemes."""

from siteinventory.models import ClassifiedName, NamingScheme, strip_name_prefix

LEGACY_PREFIX = "legacy-"
SEPARATOR = "-"
ROLES = ("web", "db")


def classify(raw_name: str) -> ClassifiedName | None:
    """
    Decompose a container name into scheme, application, environment and role.

    Returns ``None`` for names that fit neither scheme. A name carrying the
    legacy prefix is always treated as legacy, even when it also ends with a
    standard role suffix.
    """
    name = strip_name_prefix(raw_name)

    if name.startswith(LEGACY_PREFIX):
        parts = name.split(SEPARATOR)
        if len(parts) != 4:
            return None
        return ClassifiedName(
            scheme=NamingScheme.LEGACY,
            application=parts[1],
            environment=parts[2],
            role=parts[3],
        )

    for role in ROLES:
        suffix = f"{SEPARATOR}{role}"
        if name.endswith(suffix):
            return ClassifiedName(
                scheme=NamingScheme.STANDARD,
                application=name[: -len(suffix)],
                environment="",
                role=role,
            )

    return None
