from pathlib import Path

import pytest
from fastmcp import Client, FastMCP

from siteinventory.client import ContainerRuntimeError
from siteinventory.models import ContainerFact, PublishedPort
from siteinventory.ports import RetryPolicy
from siteinventory.tools import (
    InventoryToolDependencies,
    list_environment_snapshots,
    list_sites,
    register_inventory_tools,
)


class FakeDockerClient:
    def __init__(self, containers: list[ContainerFact]) -> None:
        self.containers = containers

    def list_containers(self) -> list[ContainerFact]:
        return list(self.containers)


def _fact(name: str, port: int, state: str = "running") -> ContainerFact:
    return ContainerFact(names=(name,), published_ports=(PublishedPort(80, port),), state=state)


def _dependencies(base_dir: Path, containers: list[ContainerFact]) -> InventoryToolDependencies:
    dependencies = InventoryToolDependencies(base_dir=base_dir, retry_policy=RetryPolicy(max_attempts=1, delay=0))
    dependencies.attach_client(FakeDockerClient(containers))  # type: ignore[arg-type]
    return dependencies


def test_require_client_before_startup(tmp_path: Path) -> None:
    dependencies = InventoryToolDependencies(base_dir=tmp_path, retry_policy=RetryPolicy())
    with pytest.raises(RuntimeError):
        dependencies.require_client()


def test_list_sites_filters_unowned_and_groups(tmp_path: Path) -> None:
    (tmp_path / "shop").mkdir()
    (tmp_path / "legacy").mkdir()
    containers = [
        _fact("/legacy-acme-prod-web", 8080),
        _fact("/legacy-acme-prod-db", 3306, state="exited"),
        _fact("/shop-web", 8000),
        _fact("/portainer", 9000),
    ]

    result = list_sites(_dependencies(tmp_path, containers))

    assert result["sites"]["legacy"] == [
        {
            "name": "acme",
            "environment": "prod",
            "scheme": "legacy",
            "web_public_port": 8080,
            "db_public_port": 3306,
            "status": "exited",
        }
    ]
    assert [site["name"] for site in result["sites"]["local"]] == ["shop"]
    assert "1 legacy site found." in result["table"]

    legacy_only = list_sites(_dependencies(tmp_path, containers), legacy_only=True)
    assert legacy_only["sites"]["local"] == []


def test_list_environment_snapshots(tmp_path: Path) -> None:
    client_dir = tmp_path / "acme"
    client_dir.mkdir()
    for name in ("acme-production", "acme-qa", "acme-default", "notes"):
        (client_dir / name).mkdir()

    dependencies = _dependencies(tmp_path, [])
    assert list_environment_snapshots(dependencies, "acme") == ["acme-default", "acme-production"]
    assert list_environment_snapshots(dependencies, "missing") == []


def test_list_environment_snapshots_rejects_paths_outside_base_dir(tmp_path: Path) -> None:
    dependencies = _dependencies(tmp_path / "drud", [])
    for client_name in ("..", "../..", "/etc", "acme/../..", "."):
        with pytest.raises(ValueError):
            list_environment_snapshots(dependencies, client_name)


class CountingDockerClient(FakeDockerClient):
    """Publishes the web port only from the ``ready_on``-th listing onwards."""

    def __init__(self, ready_on: int | None) -> None:
        super().__init__([])
        self.ready_on = ready_on
        self.calls = 0

    def list_containers(self) -> list[ContainerFact]:
        self.calls += 1
        if self.ready_on is not None and self.calls >= self.ready_on:
            return [_fact("/legacy-acme-prod-web", 8080)]
        return [_fact("/legacy-acme-prod-web", 0)]


class BrokenDockerClient:
    def list_containers(self) -> list[ContainerFact]:
        raise ContainerRuntimeError("Container runtime request timed out (GET /containers/json).")


def _build_mcp(dependencies: InventoryToolDependencies) -> FastMCP:
    mcp = FastMCP(name="inventory-test")
    register_inventory_tools(mcp, dependencies)
    return mcp


@pytest.mark.anyio
async def test_get_site_port_tool_waits_for_port(tmp_path: Path) -> None:
    docker = CountingDockerClient(ready_on=3)
    dependencies = InventoryToolDependencies(base_dir=tmp_path, retry_policy=RetryPolicy(max_attempts=5, delay=0))
    dependencies.attach_client(docker)  # type: ignore[arg-type]

    async with Client(_build_mcp(dependencies)) as client:
        result = await client.call_tool("get_site_port", {"name": "acme-prod-web"})

    assert result.structured_content == {"name": "acme-prod-web", "public_port": 8080}
    assert docker.calls == 3


@pytest.mark.anyio
async def test_get_site_port_tool_reports_exhaustion(tmp_path: Path) -> None:
    docker = CountingDockerClient(ready_on=None)
    dependencies = InventoryToolDependencies(base_dir=tmp_path, retry_policy=RetryPolicy(max_attempts=3, delay=0))
    dependencies.attach_client(docker)  # type: ignore[arg-type]

    async with Client(_build_mcp(dependencies)) as client:
        result = await client.call_tool("get_site_port", {"name": "acme-web"})

    assert result.structured_content == {"error": "acme-web container not ready"}
    assert docker.calls == 3


@pytest.mark.anyio
async def test_list_sites_tool_reports_runtime_errors(tmp_path: Path) -> None:
    dependencies = InventoryToolDependencies(base_dir=tmp_path, retry_policy=RetryPolicy(max_attempts=1, delay=0))
    dependencies.attach_client(BrokenDockerClient())  # type: ignore[arg-type]

    async with Client(_build_mcp(dependencies)) as client:
        result = await client.call_tool("list_sites", {})

    assert "timed out" in result.structured_content["error"]


@pytest.mark.anyio
async def test_list_sites_and_snapshot_tools(tmp_path: Path) -> None:
    (tmp_path / "legacy").mkdir()
    (tmp_path / "acme").mkdir()
    (tmp_path / "acme" / "acme-staging").mkdir()
    (tmp_path / "acme" / "acme-qa").mkdir()
    dependencies = _dependencies(tmp_path, [_fact("/legacy-acme-prod-web", 8080)])

    async with Client(_build_mcp(dependencies)) as client:
        sites = await client.call_tool("list_sites", {"legacy_only": True})
        snapshots = await client.call_tool("list_environment_snapshots", {"client_name": "acme"})
        escaped = await client.call_tool("list_environment_snapshots", {"client_name": "../.."})

    assert [site["name"] for site in sites.structured_content["sites"]["legacy"]] == ["acme"]
    assert snapshots.structured_content == {"client": "acme", "snapshots": ["acme-staging"]}
    assert "single directory name" in escaped.structured_content["error"]
