"""
Docker Engine API client wrapper used to snapshot running containers.

Request/response handling is normalized here so callers only ever see
``ContainerFact`` values or a ``ContainerRuntimeError``.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from siteinventory.http_client import create_docker_client
from siteinventory.models import ContainerFact
from siteinventory.settings import Settings

logger = logging.getLogger(__name__)


class ContainerRuntimeError(RuntimeError):
    """Represents failures when communicating with the container runtime."""


@dataclass(slots=True)
class DockerApiClient:
    """Typed wrapper around the shared httpx Client."""

    _client: httpx.Client

    @classmethod
    def from_settings(cls, settings: Settings) -> "DockerApiClient":
        """Factory that builds the client from Settings."""
        return cls(create_docker_client(settings))

    def close(self) -> None:
        self._client.close()

    def list_containers(self) -> list[ContainerFact]:
        """Return the running containers reported by the runtime."""
        params = {"all": "false"}
        logger.debug("Listing containers")
        payload = self._request("GET", "/containers/json", params=params)
        if not isinstance(payload, list):
            raise ContainerRuntimeError("Container runtime returned an unexpected container listing.")

        facts: list[ContainerFact] = []
        for entry in payload:
            try:
                facts.append(ContainerFact.from_api(entry))
            except (TypeError, ValueError, AttributeError) as exc:
                raise ContainerRuntimeError(
                    f"Container runtime returned a malformed container entry: {exc!s}"
                ) from exc
        return facts

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Normalized request handler for all outgoing API calls."""

        def _transport_error(message: str, *, exc: Exception | None = None) -> ContainerRuntimeError:
            logger.error(
                message,
                extra={"method": method, "path": path},
                exc_info=exc,
            )
            return ContainerRuntimeError(message)

        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as exc:
            raise _transport_error(
                f"Container runtime request timed out ({method} {path}).",
                exc=exc,
            ) from exc
        except httpx.RequestError as exc:
            raise _transport_error(
                f"Container runtime request failed ({method} {path}): {exc!s}",
                exc=exc,
            ) from exc

        if response.is_error:
            snippet = response.text.strip()
            if len(snippet) > 512:
                snippet = f"{snippet[:512]}..."
            logger.warning(
                "Container runtime responded with error",
                extra={
                    "method": method,
                    "path": path,
                    "status_code": response.status_code,
                    "content": snippet,
                },
            )
            raise ContainerRuntimeError(
                f"Container runtime error ({response.status_code}) during {method} {path}: {snippet or 'no body provided.'}"
            )

        try:
            return response.json()
        except json.JSONDecodeError as exc:
            logger.error(
                "Container runtime returned invalid JSON",
                extra={"method": method, "path": path},
            )
            raise ContainerRuntimeError(
                f"Container runtime returned invalid JSON during {method} {path}."
            ) from exc
