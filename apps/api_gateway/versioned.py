"""
Версионированные маршруты поверх FastAPI.

Таблица объявлений строится явно, без разбора декораторов в рантайме:
- VersionedRouter(registry, versions=...) - версии уровня роутера
- add_versioned_route(path, endpoint, versions=...) - версии уровня маршрута
- итоговое условие = условие роутера.combine(условие маршрута)

build_versioned_api_router() сводит объявления всех роутеров по полному
path+method и регистрирует один endpoint на ключ. На каждом запросе он
выбирает обработчик через select_candidate среди всех роутеров сразу.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Iterable, Iterator, Sequence
from typing import Any

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response

from api_version_routing.common.config import get_settings
from api_version_routing.common.errors import ConflictError, ErrCode
from api_version_routing.common.logging import get_project_logger
from api_version_routing.common.metrics import record_version_selection
from api_version_routing.domain.condition import VersionCondition, effective_version
from api_version_routing.domain.registry import VersionRegistry
from api_version_routing.routing.selection import (
    VersionedCandidate,
    find_rank_conflicts,
    select_candidate,
)
from apps.api_gateway.deps import api_version_token

log = get_project_logger("gateway")

Endpoint = Callable[[Request], Any]


def _ensure_unambiguous(
    path: str, method: str, group: Sequence[VersionedCandidate], candidate: VersionedCandidate
) -> None:
    conflicts = [pair for pair in find_rank_conflicts([*group, candidate]) if candidate in pair]
    if not conflicts:
        return
    other = conflicts[0][0]
    raise ConflictError(
        f"Неоднозначное объявление {method} {path}: {other.name} и {candidate.name}",
        details={
            "path": path,
            "method": method,
            "condition": str(candidate.condition),
            "existing": str(other.condition),
        },
    )


class VersionedRouter:
    def __init__(
        self,
        registry: VersionRegistry,
        *,
        versions: str | Iterable[str] | None = None,
        prefix: str = "",
        tags: list[str] | None = None,
    ) -> None:
        self.registry = registry
        self.prefix = prefix
        self.tags = tags
        self.condition: VersionCondition | None = (
            VersionCondition.from_version_strings(versions, registry) if versions else None
        )
        self._groups: dict[tuple[str, str], list[VersionedCandidate]] = {}

    def add_versioned_route(
        self,
        path: str,
        endpoint: Endpoint,
        *,
        versions: str | Iterable[str],
        methods: Sequence[str] = ("GET",),
        name: str | None = None,
    ) -> VersionCondition:
        condition = VersionCondition.from_version_strings(versions, self.registry)
        if self.condition is not None:
            condition = self.condition.combine(condition)

        candidate = VersionedCandidate(
            condition=condition,
            target=endpoint,
            name=name or getattr(endpoint, "__name__", "endpoint"),
        )
        for method in methods:
            key = (path, method.upper())
            group = self._groups.get(key, [])
            _ensure_unambiguous(self.prefix + path, key[1], group, candidate)
            self._groups[key] = [*group, candidate]

        log.debug(
            "versioned_route_added",
            extra={
                "payload": {
                    "path": self.prefix + path,
                    "methods": [m.upper() for m in methods],
                    "endpoint": candidate.name,
                    "condition": str(condition),
                }
            },
        )
        return condition

    def route(
        self,
        path: str,
        *,
        versions: str | Iterable[str],
        methods: Sequence[str] = ("GET",),
        name: str | None = None,
    ) -> Callable[[Endpoint], Endpoint]:
        def decorator(endpoint: Endpoint) -> Endpoint:
            self.add_versioned_route(path, endpoint, versions=versions, methods=methods, name=name)
            return endpoint

        return decorator

    def get(self, path: str, *, versions: str | Iterable[str], name: str | None = None):
        return self.route(path, versions=versions, methods=("GET",), name=name)

    def post(self, path: str, *, versions: str | Iterable[str], name: str | None = None):
        return self.route(path, versions=versions, methods=("POST",), name=name)

    def put(self, path: str, *, versions: str | Iterable[str], name: str | None = None):
        return self.route(path, versions=versions, methods=("PUT",), name=name)

    def patch(self, path: str, *, versions: str | Iterable[str], name: str | None = None):
        return self.route(path, versions=versions, methods=("PATCH",), name=name)

    def delete(self, path: str, *, versions: str | Iterable[str], name: str | None = None):
        return self.route(path, versions=versions, methods=("DELETE",), name=name)

    def candidates(self, path: str, method: str = "GET") -> tuple[VersionedCandidate, ...]:
        return tuple(self._groups.get((path, method.upper()), ()))

    def declarations(self) -> Iterator[tuple[str, str, VersionedCandidate]]:
        """
        (полный путь, метод, кандидат) в порядке объявления.
        """
        for (path, method), group in self._groups.items():
            for candidate in group:
                yield self.prefix + path, method, candidate

    def build(self) -> APIRouter:
        return build_versioned_api_router([self])


def build_versioned_api_router(routers: Iterable[VersionedRouter]) -> APIRouter:
    """
    Один APIRouter для нескольких VersionedRouter.

    Кандидаты с одинаковым полным путём и методом из разных роутеров попадают
    в одну группу: самая поздняя совпавшая версия выигрывает независимо от того,
    каким роутером она объявлена. Равный rank между роутерами -> ConflictError.
    """
    routers = list(routers)
    registries = {id(r.registry) for r in routers}
    if len(registries) > 1:
        raise RuntimeError("VersionedRouter собраны с разными реестрами версий")

    groups: dict[tuple[str, str], list[VersionedCandidate]] = {}
    tags: dict[tuple[str, str], list[str]] = {}
    for versioned in routers:
        for path, method, candidate in versioned.declarations():
            key = (path, method)
            group = groups.setdefault(key, [])
            if candidate not in group:
                _ensure_unambiguous(path, method, group, candidate)
                group.append(candidate)
            key_tags = tags.setdefault(key, [])
            key_tags.extend(t for t in versioned.tags or () if t not in key_tags)

    router = APIRouter()
    for (path, method), group in groups.items():
        router.add_api_route(
            path,
            _make_dispatcher(
                route=path,
                method=method,
                candidates=tuple(group),
                registry=routers[0].registry,
            ),
            methods=[method],
            name=f"{method.lower()}:{path}",
            tags=tags[(path, method)] or None,
        )
    return router


def _make_dispatcher(
    *,
    route: str,
    method: str,
    candidates: tuple[VersionedCandidate, ...],
    registry: VersionRegistry,
) -> Callable[[Request], Any]:
    async def dispatch(request: Request) -> Response:
        token = api_version_token(request)
        chosen = select_candidate(candidates, token, registry)
        version = effective_version(token, registry)
        record_version_selection(
            route=route,
            method=method,
            matched=chosen is not None,
            version=version.value if version else None,
        )

        if chosen is None or version is None:
            log.info(
                "api_version_no_handler",
                extra={
                    "payload": {
                        "route": route,
                        "method": method,
                        "token": (token or "")[:64],
                        "effective": version.value if version else None,
                    }
                },
            )
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={
                    "code": ErrCode.VERSION_NOT_SUPPORTED,
                    "message": "Нет обработчика для запрошенной версии API",
                },
            )

        log.debug(
            "api_version_selected",
            extra={
                "payload": {
                    "route": route,
                    "method": method,
                    "effective": version.value,
                    "endpoint": chosen.name,
                    "condition": str(chosen.condition),
                }
            },
        )

        # sync-обработчики, как и обычные endpoints FastAPI, уходят в threadpool
        if inspect.iscoroutinefunction(chosen.target):
            result = await chosen.target(request)
        else:
            result = await run_in_threadpool(chosen.target, request)
        response = result if isinstance(result, Response) else JSONResponse(jsonable_encoder(result))
        response.headers[get_settings().api_version_header] = version.value
        return response

    return dispatch
