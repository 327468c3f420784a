"""
Логирование проекта.

- один stdout-хэндлер на процесс, помеченный как "наш"
- json по умолчанию, text для локальной отладки (LOG_FORMAT=text)
- логгеры модулей - потомки "api-version-routing"
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

from api_version_routing.common.config import Settings, get_settings

PROJECT_LOGGER_NAME = "api-version-routing"
_HANDLER_MARK = "_api_version_routing_handler"


class JsonFormatter(logging.Formatter):
    """
    Одна JSON-строка на запись; время берётся из самой записи, а не из момента форматирования.
    """

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, UTC)
        entry: dict[str, Any] = {
            "ts": created.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        payload = getattr(record, "payload", None)
        if isinstance(payload, dict):
            entry["payload"] = payload
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def _formatter_for(settings: Settings) -> logging.Formatter:
    if (settings.log_format or "").lower() == "text":
        return logging.Formatter(
            fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    return JsonFormatter()


def _level_for(settings: Settings) -> int:
    return logging.getLevelNamesMapping().get((settings.log_level or "").upper(), logging.INFO)


def setup_logging(settings: Settings | None = None) -> logging.Handler:
    """
    Повторный вызов не добавляет хэндлер, а перенастраивает уже установленный.
    Чужие хэндлеры на root (pytest, uvicorn) не трогаем.
    """
    s = settings or get_settings()
    level = _level_for(s)
    root = logging.getLogger()
    root.setLevel(level)

    handler = next((h for h in root.handlers if getattr(h, _HANDLER_MARK, False)), None)
    if handler is None:
        handler = logging.StreamHandler(sys.stdout)
        setattr(handler, _HANDLER_MARK, True)
        root.addHandler(handler)
    handler.setLevel(level)
    handler.setFormatter(_formatter_for(s))

    for name in ("uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(level)
    return handler


def get_project_logger(suffix: str | None = None) -> logging.Logger:
    if not suffix:
        return logging.getLogger(PROJECT_LOGGER_NAME)
    return logging.getLogger(f"{PROJECT_LOGGER_NAME}.{suffix}")
