"""Data types shared by the classifier, aggregator, filters and port watcher."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class NamingScheme(str, Enum):
    LEGACY = "legacy"
    STANDARD = "local"


@dataclass(frozen=True, slots=True)
class PublishedPort:
    container_port: int
    public_port: int = 0


@dataclass(frozen=True, slots=True)
class ContainerFact:
    """A running container as reported by the container runtime."""

    names: tuple[str, ...]
    published_ports: tuple[PublishedPort, ...] = ()
    state: str = ""

    @property
    def canonical_name(self) -> str:
        """First name with the leading path separator stripped."""
        return strip_name_prefix(self.names[0])

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "ContainerFact":
        """Build a fact from one entry of the Docker ``/containers/json`` listing."""
        names = tuple(str(name) for name in payload.get("Names") or ())
        if not names:
            raise ValueError("Container payload did not include any names.")
        ports = tuple(
            PublishedPort(
                container_port=int(port.get("PrivatePort") or 0),
                public_port=int(port.get("PublicPort") or 0),
            )
            for port in payload.get("Ports") or ()
        )
        return cls(names=names, published_ports=ports, state=str(payload.get("State") or ""))


@dataclass(slots=True)
class ApplicationRecord:
    """Aggregated view of one logical site across its containers."""

    name: str
    environment: str
    status: str
    scheme: NamingScheme = NamingScheme.LEGACY
    web_public_port: int = 0
    db_public_port: int = 0

    @property
    def application_id(self) -> str:
        return application_id(self.name, self.environment, self.scheme)

    def as_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "environment": self.environment,
            "scheme": self.scheme.value,
            "web_public_port": self.web_public_port,
            "db_public_port": self.db_public_port,
            "status": self.status,
        }


@dataclass(frozen=True, slots=True)
class ClassifiedName:
    scheme: NamingScheme
    application: str
    environment: str
    role: str

    @property
    def application_id(self) -> str:
        return application_id(self.application, self.environment, self.scheme)


def strip_name_prefix(raw_name: str) -> str:
    return raw_name[1:] if raw_name.startswith("/") else raw_name


def application_id(name: str, environment: str, scheme: NamingScheme = NamingScheme.LEGACY) -> str:
    """
    Legacy ids are ``<name>-<environment>``; standard ids are ``local:<name>``.

    Container names never contain a colon, so the two forms cannot collide.
    """
    if scheme is NamingScheme.STANDARD:
        return f"{scheme.value}:{name}"
    return f"{name}-{environment}"


__all__ = [
    "ApplicationRecord",
    "ClassifiedName",
    "ContainerFact",
    "NamingScheme",
    "PublishedPort",
    "application_id",
    "strip_name_prefix",
]
