"""
Модуль логирования для AquaTrack
Реализует структурированное логирование (текст или JSON)
"""

import logging
import json
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from core.config.settings import settings

# Атрибуты LogRecord, которые нельзя перезаписывать через extra
_RESERVED_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}
_CONTEXT_ATTR = "context"


class JSONFormatter(logging.Formatter):
    """Форматтер для вывода логов в JSON формате"""

    def format(self, record: logging.LogRecord) -> str:
        """Форматирует запись лога в JSON"""
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        # Контекст, переданный через StructuredLogger
        log_entry.update(getattr(record, _CONTEXT_ATTR, {}) or {})

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False, default=str)


class ContextFormatter(logging.Formatter):
    """Текстовый форматтер, дописывающий контекст в виде key=value"""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = getattr(record, _CONTEXT_ATTR, None)
        if context:
            pairs = " ".join(f"{key}={value}" for key, value in context.items())
            line = f"{line} | {pairs}"
        return line


class StructuredLogger:
    """Структурированный логгер с дополнительным контекстом"""

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    @staticmethod
    def _build_extra(kwargs: Dict[str, Any]) -> Dict[str, Any]:
        context = {}
        for key, value in kwargs.items():
            if value is None:
                continue
            if key in _RESERVED_ATTRS:
                key = f"ctx_{key}"
            context[key] = value
        return {_CONTEXT_ATTR: context}

    def _log_with_context(self, level: int, message: str, exc_info: Any = None, **kwargs: Any) -> None:
        """Логирует сообщение с дополнительным контекстом"""
        self.logger.log(level, message, exc_info=exc_info, extra=self._build_extra(kwargs))

    def debug(self, message: str, **kwargs: Any) -> None:
        """Логирует debug сообщение"""
        self._log_with_context(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """Логирует info сообщение"""
        self._log_with_context(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Логирует warning сообщение"""
        self._log_with_context(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        """Логирует error сообщение"""
        self._log_with_context(logging.ERROR, message, **kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Логирует exception с traceback"""
        self._log_with_context(logging.ERROR, message, exc_info=True, **kwargs)


def setup_logging() -> None:
    """Настраивает логирование для приложения"""
    root_logger = logging.getLogger()
    root_logger.setLevel(settings.log_level.upper())

    # Очищаем существующие handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    if settings.log_format == "json":
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(
            ContextFormatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        )
    root_logger.addHandler(console_handler)


# Создаем основной логгер
logger = StructuredLogger("aquatrack")

# Настраиваем логирование при импорте модуля
setup_logging()
