"""Типизированные записи, которые отдает слой хранения.

Каждая запись из БД проходит через from_entity(): поля приводятся к Decimal/date,
статус к ReconciliationStatus, обязательные значения проверяются. Потребители
(отчеты, зарплата) получают уже проверенные данные.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from shared.services.reconciliation_calculator import ReconciliationStatus, to_decimal

MAX_HOURS_PER_DAY = Decimal("24")


def _require_text(value: Any, field_name: str) -> str:
    text = (value or "").strip() if isinstance(value, str) else value
    if not text:
        raise ValueError(f"{field_name} is required")
    return text


def _require_date(value: Any, field_name: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value)
    raise ValueError(f"{field_name} must be a date")


@dataclass(frozen=True)
class SalesEntryRecord:
    """Проверенная запись дневной сверки."""

    id: Optional[int]
    entry_date: date
    recorded_at: Optional[datetime]
    rider_name: str
    vehicle_name: str
    previous_meter_reading: Decimal
    current_meter_reading: Decimal
    liters_sold: Decimal
    admin_override_liters_sold: Optional[Decimal]
    rate_per_liter: Decimal
    cash_received: Decimal
    online_received: Decimal
    due_collected: Decimal
    new_due_amount: Decimal
    token_money: Decimal
    staff_expense: Decimal
    extra_amount: Decimal
    hours_worked: Decimal
    commission_earned: Decimal
    comment: Optional[str]
    recorded_by: str
    total_sale: Decimal
    actual_received: Decimal
    initial_adjusted_expected: Decimal
    ai_adjusted_expected_amount: Decimal
    ai_reasoning: str
    discrepancy: Decimal
    status: ReconciliationStatus

    def __post_init__(self) -> None:
        if not (Decimal("0") <= self.hours_worked <= MAX_HOURS_PER_DAY):
            raise ValueError(f"hours_worked must be between 0 and 24, got {self.hours_worked}")

    @property
    def year_month(self) -> tuple:
        return self.entry_date.year, self.entry_date.month

    @classmethod
    def from_entity(cls, entity: Any) -> "SalesEntryRecord":
        """Построить запись из ORM-объекта SalesEntry (или любого объекта с теми же атрибутами)."""
        override = getattr(entity, "admin_override_liters_sold", None)
        return cls(
            id=getattr(entity, "id", None),
            entry_date=_require_date(entity.entry_date, "entry_date"),
            recorded_at=getattr(entity, "recorded_at", None),
            rider_name=_require_text(entity.rider_name, "rider_name"),
            vehicle_name=_require_text(entity.vehicle_name, "vehicle_name"),
            previous_meter_reading=to_decimal(entity.previous_meter_reading, "previous_meter_reading"),
            current_meter_reading=to_decimal(entity.current_meter_reading, "current_meter_reading"),
            liters_sold=to_decimal(entity.liters_sold, "liters_sold"),
            admin_override_liters_sold=(
                None if override is None else to_decimal(override, "admin_override_liters_sold")
            ),
            rate_per_liter=to_decimal(entity.rate_per_liter, "rate_per_liter"),
            cash_received=to_decimal(entity.cash_received, "cash_received"),
            online_received=to_decimal(entity.online_received, "online_received"),
            due_collected=to_decimal(entity.due_collected, "due_collected"),
            new_due_amount=to_decimal(getattr(entity, "new_due_amount", None), "new_due_amount"),
            token_money=to_decimal(entity.token_money, "token_money"),
            staff_expense=to_decimal(entity.staff_expense, "staff_expense"),
            extra_amount=to_decimal(entity.extra_amount, "extra_amount"),
            hours_worked=to_decimal(entity.hours_worked, "hours_worked"),
            commission_earned=to_decimal(getattr(entity, "commission_earned", None), "commission_earned"),
            comment=getattr(entity, "comment", None),
            recorded_by=_require_text(entity.recorded_by, "recorded_by"),
            total_sale=to_decimal(entity.total_sale, "total_sale"),
            actual_received=to_decimal(entity.actual_received, "actual_received"),
            initial_adjusted_expected=to_decimal(entity.initial_adjusted_expected, "initial_adjusted_expected"),
            ai_adjusted_expected_amount=to_decimal(
                entity.ai_adjusted_expected_amount, "ai_adjusted_expected_amount"
            ),
            ai_reasoning=entity.ai_reasoning or "",
            discrepancy=to_decimal(entity.discrepancy, "discrepancy"),
            status=ReconciliationStatus(entity.status),
        )


@dataclass(frozen=True)
class SalaryPaymentRecord:
    """Проверенная запись выплаты зарплаты."""

    id: Optional[int]
    payment_date: date
    rider_name: str
    salary_giver_name: str
    salary_amount_for_period: Decimal
    amount_paid: Decimal
    deduction_amount: Decimal
    advance_payment: Decimal
    remaining_amount: Decimal
    comment: Optional[str]
    recorded_by: str
    created_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, entity: Any) -> "SalaryPaymentRecord":
        return cls(
            id=getattr(entity, "id", None),
            payment_date=_require_date(entity.payment_date, "payment_date"),
            rider_name=_require_text(entity.rider_name, "rider_name"),
            salary_giver_name=_require_text(entity.salary_giver_name, "salary_giver_name"),
            salary_amount_for_period=to_decimal(entity.salary_amount_for_period, "salary_amount_for_period"),
            amount_paid=to_decimal(entity.amount_paid, "amount_paid"),
            deduction_amount=to_decimal(getattr(entity, "deduction_amount", None), "deduction_amount"),
            advance_payment=to_decimal(getattr(entity, "advance_payment", None), "advance_payment"),
            remaining_amount=to_decimal(entity.remaining_amount, "remaining_amount"),
            comment=getattr(entity, "comment", None),
            recorded_by=_require_text(entity.recorded_by, "recorded_by"),
            created_at=getattr(entity, "created_at", None),
        )
