"""
Published-port lookup with a bounded retry budget.

``get_port`` is a single query against a fresh container snapshot.
``PortWatcher.await_port`` repeats it with a fixed delay between failed
attempts until a port shows up or the attempt ceiling is reached.
"""

import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from siteinventory.aggregator import first_public_port
from siteinventory.client import ContainerRuntimeError
from siteinventory.models import ContainerFact
from siteinventory.settings import Settings

logger = logging.getLogger(__name__)

ContainerQuery = Callable[[], Iterable[ContainerFact]]


class ContainerNotReadyError(RuntimeError):
    """No matching container currently publishes a port."""

    def __init__(self, name: str) -> None:
        super().__init__(f"{name} container not ready")
        self.container_name = name


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    max_attempts: int = 70
    delay: float = 2.0

    def __post_init__(self) -> None:
        if self.max_attempts <= 0:
            raise ValueError("max_attempts must be greater than zero.")
        if self.delay < 0:
            raise ValueError("delay must not be negative.")

    @classmethod
    def from_settings(cls, settings: Settings) -> "RetryPolicy":
        return cls(max_attempts=settings.port_poll_attempts, delay=settings.port_poll_delay)


def get_port(name: str, containers: Iterable[ContainerFact]) -> int:
    """
    Return the first non-zero public port of the first container whose
    canonical name contains ``name``.

    Raises ``ContainerNotReadyError`` when nothing matches.
    """
    for container in containers:
        if name not in container.canonical_name:
            continue
        public_port = first_public_port(container.published_ports)
        if public_port != 0:
            return public_port
    raise ContainerNotReadyError(name)


class PortWatcher:
    """Polls the live container list until a container publishes a port."""

    retryable = (ContainerNotReadyError, ContainerRuntimeError)

    def __init__(
        self,
        query: ContainerQuery,
        policy: RetryPolicy | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._query = query
        self._policy = policy or RetryPolicy()
        self._sleep = sleep

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    def await_port(self, name: str) -> int:
        """Block until ``name`` publishes a port; re-raise the last failure once the budget is spent."""
        attempt = 0
        while True:
            attempt += 1
            try:
                public_port = get_port(name, self._query())
            except self.retryable as exc:
                if attempt >= self._policy.max_attempts:
                    logger.warning(
                        "Gave up waiting for container port",
                        extra={"container": name, "attempts": attempt, "error": str(exc)},
                    )
                    raise
                logger.debug(
                    "Container port not available yet",
                    extra={"container": name, "attempt": attempt},
                )
                self._sleep(self._policy.delay)
                continue

            logger.info(
                "Container port available",
                extra={"container": name, "public_port": public_port, "attempts": attempt},
            )
            return public_port
