"""MCP tool registrations for the site inventory server."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Any, Callable

from anyio import to_thread
from fastmcp import Context, FastMCP
from pydantic import Field

from siteinventory.client import ContainerRuntimeError, DockerApiClient
from siteinventory.filters import filter_environment_snapshots, filter_legacy, filter_owned
from siteinventory.ports import ContainerNotReadyError, PortWatcher, RetryPolicy
from siteinventory.report import build_site_list, render_site_list

logger = logging.getLogger(__name__)


@dataclass
class InventoryToolDependencies:
    """Runtime dependencies required by the MCP tools."""

    base_dir: Path
    retry_policy: RetryPolicy
    docker_client: DockerApiClient | None = None

    def attach_client(self, client: DockerApiClient) -> None:
        self.docker_client = client

    def detach_client(self) -> None:
        self.docker_client = None

    def require_client(self) -> DockerApiClient:
        if self.docker_client is None:
            raise RuntimeError("Docker API client is not initialized.")
        return self.docker_client


def list_sites(dependencies: InventoryToolDependencies, *, legacy_only: bool = False) -> dict[str, Any]:
    """Snapshot the running containers and group owned sites by naming scheme."""
    client = dependencies.require_client()
    containers = filter_owned(client.list_containers(), dependencies.base_dir)
    if legacy_only:
        containers = filter_legacy(containers)

    groups = build_site_list(containers)
    return {
        "sites": {
            scheme.value: [record.as_dict() for record in apps.values()]
            for scheme, apps in groups.items()
        },
        "table": render_site_list(groups, dependencies.base_dir),
    }


def _require_client_name(client_name: str) -> str:
    if "/" in client_name or "\\" in client_name or client_name in ("", ".", ".."):
        raise ValueError(f"client_name must be a single directory name, got {client_name!r}.")
    return client_name


def list_environment_snapshots(dependencies: InventoryToolDependencies, client_name: str) -> list[str]:
    """Return the whitelisted environment snapshot entries stored for a client."""
    _require_client_name(client_name)
    client_dir = dependencies.base_dir / client_name
    if not client_dir.is_dir():
        return []
    entries = sorted(path.name for path in client_dir.iterdir())
    return [str(entry) for entry in filter_environment_snapshots(entries)]


def register_inventory_tools(
    mcp: FastMCP,
    dependencies: InventoryToolDependencies,
) -> None:
    """Register MCP tools that expose the local site inventory."""

    def _validate_non_empty(value: str, field_name: str) -> str:
        if not value or not value.strip():
            raise ValueError(f"{field_name} must be a non-empty string.")
        return value.strip()

    def _log_tool_event(tool_name: str, event: str, **fields: object) -> None:
        logger.info(
            "inventory_tool_event",
            extra={"tool": tool_name, "event": event, **fields},
        )

    async def _with_error_handling(
        tool_name: str,
        action: Callable[[], Any],
    ) -> dict[str, Any]:
        try:
            return await to_thread.run_sync(action)
        except (ContainerRuntimeError, ContainerNotReadyError) as exc:
            logger.warning("%s failed due to runtime error", tool_name, exc_info=True)
            _log_tool_event(tool_name, "runtime_error", error=str(exc))
            return {"error": str(exc)}
        except ValueError as exc:
            logger.warning("%s rejected invalid input", tool_name)
            _log_tool_event(tool_name, "invalid_input", error=str(exc))
            return {"error": str(exc)}
        except Exception as exc:  # noqa: BLE001
            logger.exception("%s failed unexpectedly", tool_name)
            _log_tool_event(tool_name, "unexpected_error", error=str(exc))
            return {"error": f"Unexpected error: {exc}"}

    @mcp.tool(
        name="list_sites",
        description="Lists the local development sites backed by running containers, grouped into 'legacy' and 'local' naming schemes, with their web/database ports and status.",
    )
    async def list_sites_tool(
        legacy_only: Annotated[bool, Field(description="Only include containers using the legacy naming scheme.")] = False,
    ) -> dict[str, Any]:
        """Return the aggregated site inventory and its rendered table."""

        def _call() -> dict[str, Any]:
            result = list_sites(dependencies, legacy_only=legacy_only)
            _log_tool_event(
                "list_sites",
                "success",
                site_count=sum(len(records) for records in result["sites"].values()),
            )
            return result

        return await _with_error_handling("list_sites", _call)

    @mcp.tool(
        name="get_site_port",
        description="Waits for a container whose name contains the given fragment to publish a port, then returns that public port. May block for several minutes while containers start.",
    )
    async def get_site_port(
        name: Annotated[str, Field(description="Container name fragment to match (e.g., 'legacy-acme-prod-web').")],
        ctx: Context,
    ) -> dict[str, Any]:
        """Poll the container runtime until the container publishes a port."""

        name_value = _validate_non_empty(name, "name")
        client = dependencies.require_client()
        watcher = PortWatcher(client.list_containers, dependencies.retry_policy)
        await ctx.info(f"Waiting for {name_value} to publish a port.")

        def _call() -> dict[str, Any]:
            public_port = watcher.await_port(name_value)
            _log_tool_event("get_site_port", "success", container=name_value, public_port=public_port)
            return {"name": name_value, "public_port": public_port}

        return await _with_error_handling("get_site_port", _call)

    @mcp.tool(
        name="list_environment_snapshots",
        description="Lists the locally stored environment snapshots for a client, keeping only the default, staging and production environments.",
    )
    async def list_environment_snapshots_tool(
        client_name: Annotated[str, Field(description="Client (project) directory name under the local drud home.")],
    ) -> dict[str, Any]:
        """Return the whitelisted snapshot entries for a client."""

        client_value = _validate_non_empty(client_name, "client_name")

        def _call() -> dict[str, Any]:
            entries = list_environment_snapshots(dependencies, client_value)
            _log_tool_event("list_environment_snapshots", "success", client=client_value, count=len(entries))
            return {"client": client_value, "snapshots": entries}

        return await _with_error_handling("list_environment_snapshots", _call)

    logger.info("Site inventory MCP tools registered.")
