"""
Сборка реестра версий из статической конфигурации и проверки готовности на старте.

Формат API_VERSIONS: "2023-01-01,2024-01-01*"
- даты в хронологическом порядке
- '*' в конце помечает версию по умолчанию
- API_DEFAULT_VERSION тоже задаёт default (должна входить в список)
"""

from __future__ import annotations

from dataclasses import dataclass

from api_version_routing.common.config import Settings, get_settings, is_prod_env
from api_version_routing.common.errors import ValidationError
from api_version_routing.common.logging import get_project_logger
from api_version_routing.common.metrics import record_registry_size
from api_version_routing.domain.registry import VersionRegistry
from api_version_routing.domain.version import Version

log = get_project_logger()

DEFAULT_MARKER = "*"


@dataclass
class ReadinessIssue:
    severity: str  # error|warning
    code: str
    message: str


@dataclass
class ReadinessState:
    ready: bool
    issues: list[ReadinessIssue]


def _parse_version(raw: str, *, source: str) -> Version:
    try:
        return Version.parse(raw)
    except ValueError as e:
        raise ValidationError(
            f"{source}: некорректная версия {raw!r}, ожидается YYYY-MM-DD",
            details={"source": source, "value": raw},
        ) from e


def parse_version_entries(
    raw_versions: str | None, default_version: str | None = None
) -> list[tuple[Version, bool]]:
    entries: list[tuple[Version, bool]] = []
    for part in (raw_versions or "").split(","):
        item = part.strip()
        if not item:
            continue
        is_default = item.endswith(DEFAULT_MARKER)
        if is_default:
            item = item[: -len(DEFAULT_MARKER)].strip()
        entries.append((_parse_version(item, source="API_VERSIONS"), is_default))

    explicit = (default_version or "").strip()
    if explicit:
        wanted = _parse_version(explicit, source="API_DEFAULT_VERSION")
        if all(version != wanted for version, _ in entries):
            raise ValidationError(
                "API_DEFAULT_VERSION отсутствует в API_VERSIONS",
                details={"default": wanted.value},
            )
        # API_DEFAULT_VERSION важнее маркеров '*'
        entries = [(version, version == wanted) for version, _ in entries]
    return entries


def build_registry(settings: Settings | None = None) -> VersionRegistry:
    s = settings or get_settings()
    entries = parse_version_entries(s.api_versions, s.api_default_version)
    registry = VersionRegistry.from_entries(entries)
    record_registry_size(len(registry))

    default = registry.default_version()
    log.info(
        "api_version_registry_built",
        extra={
            "payload": {
                "versions": [v.value for v in registry.all_versions()],
                "default": default.value if default else None,
            }
        },
    )
    return registry


def evaluate_registry_readiness(
    registry: VersionRegistry, settings: Settings | None = None
) -> ReadinessState:
    s = settings or get_settings()
    issues: list[ReadinessIssue] = []
    versions = registry.all_versions()

    if not versions:
        issues.append(
            ReadinessIssue(
                severity="error" if is_prod_env(s.app_env) else "warning",
                code="api_versions_empty",
                message="Реестр версий пуст: версионированные маршруты не совпадут ни с одним запросом",
            )
        )

    if any(later < earlier for earlier, later in zip(versions, versions[1:])):
        issues.append(
            ReadinessIssue(
                severity="warning",
                code="api_versions_not_chronological",
                message="API_VERSIONS не в хронологическом порядке, resolve рассчитывает на порядок регистрации",
            )
        )

    if len(set(versions)) != len(versions):
        issues.append(
            ReadinessIssue(
                severity="warning",
                code="api_versions_duplicate",
                message="API_VERSIONS содержит повторяющиеся даты",
            )
        )

    ready = all(i.severity != "error" for i in issues)
    return ReadinessState(ready=ready, issues=issues)


def enforce_registry_readiness(
    registry: VersionRegistry, *, service_name: str, settings: Settings | None = None
) -> ReadinessState:
    s = settings or get_settings()
    state = evaluate_registry_readiness(registry, s)

    for issue in state.issues:
        log.warning(
            "registry_readiness_issue",
            extra={
                "payload": {
                    "service": service_name,
                    "severity": issue.severity,
                    "code": issue.code,
                }
            },
        )

    errors = [i for i in state.issues if i.severity == "error"]
    if errors:
        log.error(
            "startup_readiness_failed",
            extra={
                "payload": {
                    "service": service_name,
                    "app_env": s.app_env,
                    "error_codes": [e.code for e in errors],
                }
            },
        )
    else:
        log.info(
            "startup_readiness_ok",
            extra={"payload": {"service": service_name, "app_env": s.app_env}},
        )

    should_fail_fast = is_prod_env(s.app_env) and bool(s.readiness_fail_fast_in_prod)
    if should_fail_fast and errors:
        msg = ", ".join(e.code for e in errors)
        raise RuntimeError(f"startup readiness failed for {service_name}: {msg}")
    return state
