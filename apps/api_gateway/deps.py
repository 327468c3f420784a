"""
FastAPI Depends.

Сюда выносим:
- реестр версий, которым владеет приложение (app.state.version_registry)
- чтение заголовка Api-Version (отсутствие заголовка - нормальный случай)
"""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from api_version_routing.common.config import get_settings
from api_version_routing.common.errors import ErrCode, UnresolvableVersionError
from api_version_routing.common.logging import get_project_logger
from api_version_routing.domain.condition import effective_version
from api_version_routing.domain.registry import VersionRegistry
from api_version_routing.domain.version import Version

log = get_project_logger("gateway")


def api_version_token(request: Request) -> str | None:
    """
    Токен версии из заголовка (имя из API_VERSION_HEADER, регистр не важен).
    """
    header = get_settings().api_version_header
    value = request.headers.get(header)
    return value if value else None


def api_version_header_dep(request: Request) -> str | None:
    return api_version_token(request)


def registry_dep(request: Request) -> VersionRegistry:
    registry = getattr(request.app.state, "version_registry", None)
    if registry is None:
        log.error(
            "version_registry_missing",
            extra={"payload": {"endpoint": request.url.path}},
        )
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"code": ErrCode.VERSION_NOT_REGISTERED, "message": "Реестр версий не настроен"},
        )
    return registry


def require_effective_version(token: str | None, registry: VersionRegistry) -> Version:
    version = effective_version(token, registry)
    if version is None:
        raise UnresolvableVersionError(details={"token": (token or "")[:64]})
    return version
