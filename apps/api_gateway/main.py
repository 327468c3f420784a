"""
API Gateway (FastAPI).

Функции:
- /health
- /metrics
- /v1/versions - реестр версий API
- версионированные маршруты (VersionedRouter), выбор по заголовку Api-Version

Архитектурно:
- реестр версий собирается из API_VERSIONS на старте и живёт в app.state
- маршруты получают реестр явно, глобального синглтона нет
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from fastapi import FastAPI

from api_version_routing.common.config import get_settings
from api_version_routing.common.logging import get_project_logger, setup_logging
from api_version_routing.common.metrics import record_registry_size, setup_metrics_endpoint
from api_version_routing.domain.registry import VersionRegistry
from api_version_routing.services.version_bootstrap import (
    build_registry,
    enforce_registry_readiness,
)
from apps.api_gateway.routers.versions import router as versions_router
from apps.api_gateway.versioned import VersionedRouter, build_versioned_api_router

log = get_project_logger("gateway")


def create_app(
    registry: VersionRegistry | None = None,
    versioned_routers: Iterable[VersionedRouter] = (),
) -> FastAPI:
    settings = get_settings()
    if registry is None:
        registry = build_registry(settings)
    else:
        record_registry_size(len(registry))
    enforce_registry_readiness(registry, service_name=settings.service_name, settings=settings)

    app = FastAPI(title="API Version Routing", version="0.1.0")
    app.state.version_registry = registry

    setup_metrics_endpoint(app)

    @app.get("/health")
    def health() -> dict[str, Any]:
        return {"ok": True}

    app.include_router(versions_router, prefix="/v1")
    versioned_routers = list(versioned_routers)
    for versioned in versioned_routers:
        if versioned.registry is not registry:
            raise RuntimeError("VersionedRouter собран с другим реестром версий")
    # Один endpoint на path+method для всех роутеров: выбор версии идёт по всем сразу
    app.include_router(build_versioned_api_router(versioned_routers), prefix="/v1")

    log.info(
        "api_gateway_ready",
        extra={"payload": {"service": settings.service_name, "versions": len(registry)}},
    )
    return app


setup_logging()

app = create_app()
