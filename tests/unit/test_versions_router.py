from __future__ import annotations

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from api_version_routing.common.errors import ConflictError
from api_version_routing.domain.registry import VersionRegistry
from apps.api_gateway.main import create_app
from apps.api_gateway.routers.versions import router as versions_router
from apps.api_gateway.versioned import VersionedRouter


def _registry() -> VersionRegistry:
    return VersionRegistry.from_entries([("2023-01-01", False), ("2024-01-01", True)])


def test_list_versions() -> None:
    client = TestClient(create_app(registry=_registry()))

    resp = client.get("/v1/versions")
    assert resp.status_code == 200
    assert resp.json() == {"versions": ["2023-01-01", "2024-01-01"], "default": "2024-01-01"}


def test_resolve_endpoint() -> None:
    client = TestClient(create_app(registry=_registry()))

    resp = client.get("/v1/versions/resolve", params={"value": "2023-06-01"})
    assert resp.status_code == 200
    assert resp.json() == {"requested": "2023-06-01", "resolved": "2023-01-01", "is_default": False}

    resp = client.get("/v1/versions/resolve", params={"value": "not-a-date"})
    assert resp.json()["resolved"] == "2024-01-01"
    assert resp.json()["is_default"] is True


def test_current_version_reads_header() -> None:
    client = TestClient(create_app(registry=_registry()))

    resp = client.get("/v1/versions/current", headers={"Api-Version": "2022-01-01"})
    assert resp.json()["resolved"] == "2023-01-01"

    resp = client.get("/v1/versions/current")
    assert resp.json() == {"requested": None, "resolved": "2024-01-01", "is_default": True}


def test_empty_registry_cannot_resolve() -> None:
    client = TestClient(create_app(registry=VersionRegistry()))

    resp = client.get("/v1/versions/resolve", params={"value": "2024-01-01"})
    assert resp.status_code == 404
    assert resp.json()["detail"]["code"] == "version_unresolvable"


def test_missing_registry_is_503() -> None:
    app = FastAPI()
    app.include_router(versions_router, prefix="/v1")
    client = TestClient(app)

    resp = client.get("/v1/versions")
    assert resp.status_code == 503


def test_create_app_mounts_versioned_routers() -> None:
    registry = _registry()
    router = VersionedRouter(registry)

    @router.get("/greeting", versions="2023-01-01")
    def greeting_v1(_request: Request) -> dict:
        return {"text": "hello"}

    @router.get("/greeting", versions="2024-01-01")
    def greeting_v2(_request: Request) -> dict:
        return {"text": "hello", "lang": "en"}

    client = TestClient(create_app(registry=registry, versioned_routers=[router]))
    assert client.get("/v1/greeting").json() == {"text": "hello", "lang": "en"}
    assert client.get("/v1/greeting", headers={"Api-Version": "2023-12-31"}).json() == {
        "text": "hello"
    }
    assert client.get("/health").json() == {"ok": True}
    assert client.get("/metrics").status_code == 200


def test_create_app_rejects_foreign_registry() -> None:
    router = VersionedRouter(_registry())

    with pytest.raises(RuntimeError):
        create_app(registry=_registry(), versioned_routers=[router])


def test_routers_sharing_a_path_are_ranked_together() -> None:
    registry = _registry()
    legacy = VersionedRouter(registry, versions="2023-01-01", prefix="/catalog")
    current = VersionedRouter(registry, versions="2024-01-01")

    @legacy.get("/items", versions="2023-01-01")
    def items_v1(_request: Request) -> dict:
        return {"v": 1}

    @current.get("/catalog/items", versions="2024-01-01")
    def items_v2(_request: Request) -> dict:
        return {"v": 2}

    client = TestClient(create_app(registry=registry, versioned_routers=[legacy, current]))
    assert client.get("/v1/catalog/items", headers={"Api-Version": "2024-06-01"}).json() == {"v": 2}
    assert client.get("/v1/catalog/items", headers={"Api-Version": "2023-06-01"}).json() == {"v": 1}
    assert client.get("/v1/catalog/items").json() == {"v": 2}


def test_equal_rank_across_routers_is_rejected() -> None:
    registry = _registry()
    first = VersionedRouter(registry)
    second = VersionedRouter(registry)
    first.add_versioned_route("/stock", lambda _r: {"from": "first"}, versions="2024-01-01")
    second.add_versioned_route("/stock", lambda _r: {"from": "second"}, versions="2024-01-01")

    with pytest.raises(ConflictError):
        create_app(registry=registry, versioned_routers=[first, second])
