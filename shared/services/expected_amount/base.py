"""Интерфейс и типы проверки ожидаемой суммы."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional

from shared.services.reconciliation_calculator import DailyFigures, ReconciliationTotals, to_decimal


class AdjustmentError(Exception):
    """Сервис проверки не вернул пригодный результат.

    Запасного значения нет: отчет в этом случае не сохраняется.
    """


@dataclass(frozen=True)
class AdjustmentRequest:
    """Данные дня, отправляемые на проверку."""

    entry_date: date
    rider_name: str
    vehicle_name: str
    figures: DailyFigures
    totals: ReconciliationTotals
    comment: Optional[str] = None

    def as_prompt_values(self) -> Dict[str, Any]:
        """Плоский словарь значений для подстановки в промпт."""
        return {
            "date": self.entry_date.isoformat(),
            "rider_name": self.rider_name,
            "vehicle_name": self.vehicle_name,
            "liters_sold": self.figures.liters_sold,
            "rate_per_liter": self.figures.rate_per_liter,
            "cash_received": self.figures.cash_received,
            "online_received": self.figures.online_received,
            "due_collected": self.figures.due_collected,
            "token_money": self.figures.token_money,
            "staff_expense": self.figures.staff_expense,
            "extra_amount": self.figures.extra_amount,
            "comment": self.comment or "",
            "total_sale": self.totals.total_sale,
            "actual_received": self.totals.actual_received,
            "initial_adjusted_expected": self.totals.initial_adjusted_expected,
        }


@dataclass(frozen=True)
class AdjustmentResult:
    """Ответ проверки: обе части обязательны."""

    adjusted_expected_amount: Decimal
    reasoning: str

    @classmethod
    def parse(cls, amount: Any, reasoning: Any) -> "AdjustmentResult":
        """Проверить сырой ответ провайдера и собрать результат."""
        if isinstance(amount, bool) or not isinstance(amount, (int, float, str, Decimal)):
            raise AdjustmentError("adjustedExpectedAmount is missing or not a number")
        try:
            value = to_decimal(amount, "adjustedExpectedAmount")
        except ValueError as e:
            raise AdjustmentError(str(e)) from e

        if not isinstance(reasoning, str) or not reasoning.strip():
            raise AdjustmentError("reasoning is missing or empty")

        return cls(adjusted_expected_amount=value, reasoning=reasoning.strip())


class ExpectedAmountAdjuster(ABC):
    """Абстрактный провайдер проверки ожидаемой суммы."""

    name: str = "base"

    @abstractmethod
    async def adjust(self, request: AdjustmentRequest) -> AdjustmentResult:
        """Вернуть уточненную ожидаемую сумму и обоснование.

        Raises:
            AdjustmentError: при любой ошибке провайдера.
        """
        ...
