"""
Модуль логирования AquaTrack
"""

from .logger import logger, StructuredLogger, JSONFormatter, ContextFormatter, setup_logging

__all__ = ["logger", "StructuredLogger", "JSONFormatter", "ContextFormatter", "setup_logging"]
