"""
Служебные endpoints реестра версий.

Назначение:
- посмотреть, какие версии зарегистрированы и какая по умолчанию
- проверить, во что разрешится конкретная строка или заголовок Api-Version
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from api_version_routing.common.errors import ErrCode, UnresolvableVersionError
from api_version_routing.domain.registry import VersionRegistry
from apps.api_gateway.deps import api_version_header_dep, registry_dep, require_effective_version

router = APIRouter()
REGISTRY_DEP = Depends(registry_dep)
API_VERSION_DEP = Depends(api_version_header_dep)


class VersionsResponse(BaseModel):
    versions: list[str]
    default: str | None


class ResolvedVersionResponse(BaseModel):
    requested: str | None
    resolved: str
    is_default: bool


def _resolved(
    registry: VersionRegistry, requested: str | None
) -> ResolvedVersionResponse:
    try:
        version = require_effective_version(requested, registry)
    except UnresolvableVersionError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": ErrCode.VERSION_UNRESOLVABLE, "message": e.message},
        ) from e
    return ResolvedVersionResponse(
        requested=requested,
        resolved=version.value,
        is_default=version == registry.default_version(),
    )


@router.get("/versions", response_model=VersionsResponse)
def list_versions(registry: VersionRegistry = REGISTRY_DEP) -> VersionsResponse:
    default = registry.default_version()
    return VersionsResponse(
        versions=[v.value for v in registry.all_versions()],
        default=default.value if default else None,
    )


@router.get("/versions/resolve", response_model=ResolvedVersionResponse)
def resolve_version(
    value: str | None = Query(default=None, max_length=64),
    registry: VersionRegistry = REGISTRY_DEP,
) -> ResolvedVersionResponse:
    return _resolved(registry, value)


@router.get("/versions/current", response_model=ResolvedVersionResponse)
def current_version(
    api_version: str | None = API_VERSION_DEP,
    registry: VersionRegistry = REGISTRY_DEP,
) -> ResolvedVersionResponse:
    """
    Эффективная версия для заголовка Api-Version этого запроса.
    """
    return _resolved(registry, api_version)
