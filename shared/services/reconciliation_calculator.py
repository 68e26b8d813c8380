"""Калькулятор дневной сверки продаж.

Чистые функции: из сырых данных дня считают итоги, начальную ожидаемую сумму,
а после ответа сервиса проверки - расхождение и статус.

Соглашение о знаке: discrepancy = actual_received - expected.
Отрицательное расхождение - недостача (Shortage), положительное - излишек (Overage).
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

# Абсолютный допуск совпадения, не относительный
MATCH_TOLERANCE = Decimal("0.01")

ZERO = Decimal("0")


class ReconciliationStatus(str, enum.Enum):
    """Статус дневной сверки."""
    MATCH = "Match"
    SHORTAGE = "Shortage"
    OVERAGE = "Overage"


def to_decimal(value: Any, field_name: str = "value") -> Decimal:
    """Привести число к Decimal без потери точности десятичной записи.

    float переводится через str, чтобы 2.5 стало Decimal('2.5'), а не
    двоичным приближением. None считается нулем.
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        raise ValueError(f"{field_name} must be a number")
    elif isinstance(value, (int, float, str)):
        if isinstance(value, float) and not math.isfinite(value):
            raise ValueError(f"{field_name} must be a finite number")
        try:
            result = Decimal(str(value))
        except InvalidOperation:
            raise ValueError(f"{field_name} must be a number") from None
    else:
        raise ValueError(f"{field_name} must be a number")

    if not result.is_finite():
        raise ValueError(f"{field_name} must be a finite number")
    return result


@dataclass(frozen=True)
class DailyFigures:
    """Сырые денежные данные одного дня (после валидации формы)."""

    liters_sold: Decimal = ZERO
    rate_per_liter: Decimal = ZERO
    cash_received: Decimal = ZERO
    online_received: Decimal = ZERO
    due_collected: Decimal = ZERO
    token_money: Decimal = ZERO
    staff_expense: Decimal = ZERO
    extra_amount: Decimal = ZERO

    @classmethod
    def from_values(cls, **values: Any) -> "DailyFigures":
        """Собрать DailyFigures из чисел любого типа (int/float/str/Decimal)."""
        return cls(**{name: to_decimal(value, name) for name, value in values.items()})


@dataclass(frozen=True)
class ReconciliationTotals:
    """Итоги, рассчитанные системой до внешней проверки."""

    total_sale: Decimal
    actual_received: Decimal
    initial_adjusted_expected: Decimal


@dataclass(frozen=True)
class ReconciliationResult:
    """Полный результат сверки дня."""

    total_sale: Decimal
    actual_received: Decimal
    initial_adjusted_expected: Decimal
    ai_adjusted_expected_amount: Decimal
    ai_reasoning: str
    discrepancy: Decimal
    status: ReconciliationStatus


def resolve_liters_sold(
    previous_meter_reading: Any,
    current_meter_reading: Any,
    admin_override_liters_sold: Any = None,
) -> Decimal:
    """Определить проданные литры.

    Ручное значение администратора применяется, только если оно задано и > 0.
    Иначе литры = текущее показание - предыдущее; текущее меньше предыдущего
    без ручного значения - ошибка валидации.
    """
    previous = to_decimal(previous_meter_reading, "previous_meter_reading")
    current = to_decimal(current_meter_reading, "current_meter_reading")

    if admin_override_liters_sold is not None:
        override = to_decimal(admin_override_liters_sold, "admin_override_liters_sold")
        if override > ZERO:
            return override

    if current < previous:
        raise ValueError(
            "Current meter reading cannot be less than previous meter reading."
        )
    return current - previous


def compute_totals(figures: DailyFigures) -> ReconciliationTotals:
    """Рассчитать итог продаж, фактически полученную и начальную ожидаемую сумму.

    Округления нет; отрицательная ожидаемая сумма допустима.
    """
    total_sale = figures.liters_sold * figures.rate_per_liter
    actual_received = figures.cash_received + figures.online_received
    initial_adjusted_expected = (
        total_sale
        - figures.due_collected
        - figures.token_money
        - figures.staff_expense
        - figures.extra_amount
    )
    return ReconciliationTotals(
        total_sale=total_sale,
        actual_received=actual_received,
        initial_adjusted_expected=initial_adjusted_expected,
    )


def compute_discrepancy(actual_received: Any, adjusted_expected_amount: Any) -> Decimal:
    """Расхождение = фактически получено - ожидаемая сумма."""
    return (
        to_decimal(actual_received, "actual_received")
        - to_decimal(adjusted_expected_amount, "adjusted_expected_amount")
    )


def classify_discrepancy(discrepancy: Any) -> ReconciliationStatus:
    """Определить статус по расхождению.

    Match при |d| < 0.01, иначе Shortage при d < 0, иначе Overage.
    """
    value = to_decimal(discrepancy, "discrepancy")
    if abs(value) < MATCH_TOLERANCE:
        return ReconciliationStatus.MATCH
    if value < ZERO:
        return ReconciliationStatus.SHORTAGE
    return ReconciliationStatus.OVERAGE


def reconcile(
    figures: DailyFigures,
    adjusted_expected_amount: Any,
    reasoning: str,
    totals: Optional[ReconciliationTotals] = None,
) -> ReconciliationResult:
    """Завершить сверку дня ответом внешней проверки."""
    if totals is None:
        totals = compute_totals(figures)

    adjusted = to_decimal(adjusted_expected_amount, "adjusted_expected_amount")
    discrepancy = compute_discrepancy(totals.actual_received, adjusted)

    return ReconciliationResult(
        total_sale=totals.total_sale,
        actual_received=totals.actual_received,
        initial_adjusted_expected=totals.initial_adjusted_expected,
        ai_adjusted_expected_amount=adjusted,
        ai_reasoning=reasoning,
        discrepancy=discrepancy,
        status=classify_discrepancy(discrepancy),
    )
