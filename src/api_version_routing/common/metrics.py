"""
Метрики Prometheus для версионированной маршрутизации.

Назначение:
- Экспорт /metrics
- Счётчики выбора версионированных маршрутов
- Размер реестра версий
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, generate_latest

# =============================================================================
# СЧЁТЧИКИ И МЕТРИКИ
# =============================================================================

API_VERSION_SELECTIONS_TOTAL = Counter(
    "api_version_selections_total",
    "Выбор обработчика версионированного маршрута",
    ["route", "method", "result"],  # result=matched|no_match
)

API_VERSION_RESOLVED_TOTAL = Counter(
    "api_version_resolved_total",
    "Эффективные версии API, которыми обслужены запросы",
    ["version"],
)

API_VERSION_REGISTERED_VERSIONS = Gauge(
    "api_version_registered_versions",
    "Количество зарегистрированных версий API",
)


def record_version_selection(
    *,
    route: str,
    method: str,
    matched: bool,
    version: str | None,
) -> None:
    result = "matched" if matched else "no_match"
    API_VERSION_SELECTIONS_TOTAL.labels(route=route, method=method, result=result).inc()
    if matched and version:
        API_VERSION_RESOLVED_TOTAL.labels(version=version).inc()


def record_registry_size(size: int) -> None:
    API_VERSION_REGISTERED_VERSIONS.set(max(0, size))


# =============================================================================
# ENDPOINT /metrics
# =============================================================================
def setup_metrics_endpoint(app: FastAPI) -> None:
    """
    Регистрирует endpoint /metrics для Prometheus.
    """

    @app.get("/metrics")
    def metrics() -> Response:
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
