"""Фабрика провайдеров проверки ожидаемой суммы."""

from __future__ import annotations

from typing import Optional

from core.config.settings import settings
from core.logging.logger import logger

from .base import ExpectedAmountAdjuster
from .rules_client import RulesAdjuster
from .yandex_gpt_client import YandexGPTAdjuster


def get_expected_amount_adjuster(provider_override: Optional[str] = None) -> ExpectedAmountAdjuster:
    """
    Возвращает провайдер проверки.

    provider_override: "yandex_gpt" | "rules" - использовать вместо настроек.
    Иначе берётся ADJUSTER_PROVIDER из settings.
    """
    base = (settings.adjuster_provider or "rules").strip().lower()
    provider = (provider_override or base).strip().lower()
    logger.debug("Expected amount adjuster selected", provider=provider)

    if provider == "yandex_gpt":
        return YandexGPTAdjuster()
    if provider == "rules":
        return RulesAdjuster()

    raise ValueError(f"Unknown adjuster provider: {provider}")
