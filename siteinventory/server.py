"""
Core server bootstrap for the site inventory MCP server.

Wires up the fastmcp instance, the Docker API client and the inventory tools.
"""

import logging

from fastmcp import FastMCP  # type: ignore[import-not-found]

from siteinventory.client import DockerApiClient
from siteinventory.ports import RetryPolicy
from siteinventory.settings import Settings
from siteinventory.tools import InventoryToolDependencies, register_inventory_tools


class ServerApp:
    """Server container holding settings, the runtime client and the MCP app."""

    def __init__(self, settings: Settings) -> None:
        self._logger = logging.getLogger(__name__)
        self._settings = settings
        self._docker_client: DockerApiClient | None = None
        self._tool_dependencies = InventoryToolDependencies(
            base_dir=settings.base_dir,
            retry_policy=RetryPolicy.from_settings(settings),
        )
        self._mcp_app = FastMCP(
            name="Local Site Inventory MCP Server",
            instructions=(
                "List local development sites backed by containers and wait for their ports to become available."
            ),
        )
        register_inventory_tools(self._mcp_app, self._tool_dependencies)

    def startup(self) -> None:
        """Prepare resources required to launch the SSE server."""
        self._logger.info(
            "Starting server bootstrap",
            extra={"docker_host": self._settings.docker_host, "base_dir": str(self._settings.base_dir)},
        )
        self._docker_client = DockerApiClient.from_settings(self._settings)
        self._tool_dependencies.attach_client(self._docker_client)

    def shutdown(self) -> None:
        """Release acquired resources."""
        self._logger.info("Shutting down server bootstrap")
        if self._docker_client is not None:
            self._docker_client.close()
            self._docker_client = None
        self._tool_dependencies.detach_client()

    def serve_forever(self) -> None:
        """Run the FastMCP SSE server until interrupted."""
        host = "0.0.0.0"
        port = self._settings.mcp_sse_port
        self._logger.info("Starting SSE transport", extra={"host": host, "port": port})
        self._mcp_app.run(transport="sse", host=host, port=port)

    async def serve_sse_async(self, host: str = "0.0.0.0") -> None:
        """Async helper for running the SSE transport (used by smoke tests)."""
        await self._mcp_app.run_http_async(
            transport="sse",
            host=host,
            port=self._settings.mcp_sse_port,
        )

    @property
    def mcp(self) -> FastMCP:
        """Expose the configured FastMCP instance."""
        return self._mcp_app


def build_server(settings: Settings) -> ServerApp:
    """Factory used by main.py to create the configured server instance."""
    return ServerApp(settings)
