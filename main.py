"""Entry point for the site inventory MCP server."""

import argparse
import logging
import os

from siteinventory.client import DockerApiClient
from siteinventory.filters import filter_owned
from siteinventory.report import build_site_list, render_site_list
from siteinventory.server import build_server
from siteinventory.settings import Settings


def _configure_logging() -> None:
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def _print_site_list(settings: Settings) -> None:
    client = DockerApiClient.from_settings(settings)
    try:
        containers = filter_owned(client.list_containers(), settings.base_dir)
    finally:
        client.close()
    print(render_site_list(build_site_list(containers), settings.base_dir))


def main() -> None:
    """Bootstrap and run the SSE server, or print the site list once."""
    parser = argparse.ArgumentParser(description="Local site inventory MCP server.")
    parser.add_argument("--list", action="store_true", help="print running sites and exit")
    args = parser.parse_args()

    _configure_logging()
    logger = logging.getLogger("site-inventory-mcp-server")
    settings = Settings.load()

    if args.list:
        _print_site_list(settings)
        return

    server = build_server(settings)

    try:
        server.startup()
        logger.info(
            "MCP SSE server ready at http://localhost:%s/sse",
            settings.mcp_sse_port,
        )
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutdown requested (Ctrl+C).")
    except Exception:
        logger.exception("Server stopped due to an unexpected error.")
        raise
    finally:
        server.shutdown()
        logger.info("Server shutdown complete.")


if __name__ == "__main__":
    main()
