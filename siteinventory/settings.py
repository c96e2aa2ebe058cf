"""Environment-driven configuration utilities for the inventory server."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_DOCKER_HOST = "unix:///var/run/docker.sock"


class ConfigurationError(ValueError):
    """Raised when the runtime configuration is missing or invalid."""


def _resolve_base_dir() -> Path:
    base_dir_raw = os.getenv("DRUD_HOME", "").strip()
    if base_dir_raw:
        return Path(base_dir_raw).expanduser()
    try:
        return Path.home() / ".drud"
    except RuntimeError as exc:
        raise ConfigurationError("Could not determine the home directory; set DRUD_HOME.") from exc


@dataclass(frozen=True, slots=True)
class Settings:
    """Container for runtime configuration."""

    base_dir: Path
    docker_host: str = DEFAULT_DOCKER_HOST
    api_timeout: float = 30.0
    port_poll_attempts: int = 70
    port_poll_delay: float = 2.0
    mcp_sse_port: int = 8000

    @classmethod
    def load(cls) -> "Settings":
        """
        Load configuration from environment variables.

        Python-dotenv is used so developers can rely on a local .env file without
        exporting variables globally.
        """
        load_dotenv()

        base_dir = _resolve_base_dir()
        docker_host = os.getenv("DOCKER_HOST", "").strip() or DEFAULT_DOCKER_HOST

        api_timeout_raw = os.getenv("API_TIMEOUT", "").strip() or "30"
        try:
            api_timeout = float(api_timeout_raw)
        except ValueError as exc:
            raise ConfigurationError("API_TIMEOUT must be a numeric value.") from exc
        if api_timeout <= 0:
            raise ConfigurationError("API_TIMEOUT must be greater than zero.")

        attempts_raw = os.getenv("PORT_POLL_ATTEMPTS", "").strip() or "70"
        try:
            port_poll_attempts = int(attempts_raw)
        except ValueError as exc:
            raise ConfigurationError("PORT_POLL_ATTEMPTS must be an integer.") from exc
        if port_poll_attempts <= 0:
            raise ConfigurationError("PORT_POLL_ATTEMPTS must be greater than zero.")

        delay_raw = os.getenv("PORT_POLL_DELAY", "").strip() or "2"
        try:
            port_poll_delay = float(delay_raw)
        except ValueError as exc:
            raise ConfigurationError("PORT_POLL_DELAY must be a numeric value.") from exc
        if port_poll_delay < 0:
            raise ConfigurationError("PORT_POLL_DELAY must not be negative.")

        mcp_sse_port_raw = os.getenv("MCP_SSE_PORT", "").strip() or "8000"
        try:
            mcp_sse_port = int(mcp_sse_port_raw)
        except ValueError as exc:
            raise ConfigurationError("MCP_SSE_PORT must be an integer.") from exc
        if mcp_sse_port <= 0:
            raise ConfigurationError("MCP_SSE_PORT must be greater than zero.")

        return cls(
            base_dir=base_dir,
            docker_host=docker_host,
            api_timeout=api_timeout,
            port_poll_attempts=port_poll_attempts,
            port_poll_delay=port_poll_delay,
            mcp_sse_port=mcp_sse_port,
        )
