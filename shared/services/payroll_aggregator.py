"""Агрегатор зарплаты курьера за месяц.

Из дневных сверок одного курьера за (год, месяц) и его дневной ставки R
считает базовую зарплату, комиссию, удержание за недостачу и итог к выплате.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, List, Optional

from shared.models.records import SalesEntryRecord
from shared.services.reconciliation_calculator import ZERO, to_decimal

# Полный рабочий день, часов
FULL_DAY_HOURS = Decimal("9")

NO_DATA_MESSAGE = "No sales data found for the selected rider and period. Enter the salary amount manually."


def base_daily_salary(per_day_salary: Any, hours_worked: Any) -> Decimal:
    """Базовая зарплата за день.

    R при hours_worked >= 9, иначе R * hours_worked / 9 (линейно).
    Часы здесь не ограничиваются, это делает вызывающая сторона.
    """
    rate = to_decimal(per_day_salary, "per_day_salary")
    hours = to_decimal(hours_worked, "hours_worked")
    if hours >= FULL_DAY_HOURS:
        return rate
    return rate * hours / FULL_DAY_HOURS


def shortage_deduction(discrepancy: Any) -> Decimal:
    """Удержание за недостачу: max(-discrepancy, 0). Излишек не удерживается и не доплачивается."""
    return max(-to_decimal(discrepancy, "discrepancy"), ZERO)


def net_daily_earning(base_salary: Any, commission_earned: Any, discrepancy: Any) -> Decimal:
    """Итог за день = база + комиссия - удержание за недостачу."""
    return (
        to_decimal(base_salary, "base_salary")
        + to_decimal(commission_earned, "commission_earned")
        - shortage_deduction(discrepancy)
    )


@dataclass(frozen=True)
class DailyPayrollLine:
    """Строка дневной таблицы отчета по курьеру."""

    entry_id: Optional[int]
    entry_date: date
    vehicle_name: str
    liters_sold: Decimal
    money_collected: Decimal
    token_money: Decimal
    total_sale: Decimal
    hours_worked: Decimal
    base_daily_salary: Decimal
    commission_earned: Decimal
    discrepancy: Decimal
    shortage_deduction: Decimal
    net_earning: Decimal


@dataclass
class MonthlyPayrollSummary:
    """Итоги зарплаты курьера за месяц."""

    rider_name: str
    year: int
    month: int
    per_day_salary: Decimal
    lines: List[DailyPayrollLine] = field(default_factory=list)
    total_liters_sold: Decimal = ZERO
    total_money_collected: Decimal = ZERO
    total_token_money: Decimal = ZERO
    total_sales_generated: Decimal = ZERO
    total_base_salary: Decimal = ZERO
    total_commission: Decimal = ZERO
    total_discrepancy: Decimal = ZERO
    total_shortage_deduction: Decimal = ZERO
    net_monthly_earning: Decimal = ZERO
    days_active: int = 0
    message: Optional[str] = None

    @property
    def has_data(self) -> bool:
        return bool(self.lines)


def build_daily_line(entry: SalesEntryRecord, per_day_salary: Decimal) -> DailyPayrollLine:
    base = base_daily_salary(per_day_salary, entry.hours_worked)
    return DailyPayrollLine(
        entry_id=entry.id,
        entry_date=entry.entry_date,
        vehicle_name=entry.vehicle_name,
        liters_sold=entry.liters_sold,
        money_collected=entry.actual_received,
        token_money=entry.token_money,
        total_sale=entry.total_sale,
        hours_worked=entry.hours_worked,
        base_daily_salary=base,
        commission_earned=entry.commission_earned,
        discrepancy=entry.discrepancy,
        shortage_deduction=shortage_deduction(entry.discrepancy),
        net_earning=net_daily_earning(base, entry.commission_earned, entry.discrepancy),
    )


def aggregate_rider_month(
    entries: Iterable[SalesEntryRecord],
    rider_name: str,
    year: int,
    month: int,
    per_day_salary: Any,
) -> MonthlyPayrollSummary:
    """Свернуть записи курьера за (год, месяц) в итоги для зарплаты.

    Записи других курьеров и месяцев отбрасываются, поэтому можно передать
    всю выборку. Пустой результат - не ошибка: нули, days_active == 0 и
    сообщение для ручного ввода суммы.
    """
    rate = to_decimal(per_day_salary, "per_day_salary")
    summary = MonthlyPayrollSummary(
        rider_name=rider_name,
        year=year,
        month=month,
        per_day_salary=rate,
    )

    matching = sorted(
        (
            entry for entry in entries
            if entry.rider_name == rider_name and entry.year_month == (year, month)
        ),
        key=lambda entry: (entry.entry_date, entry.id or 0),
    )

    active_days = set()
    for entry in matching:
        line = build_daily_line(entry, rate)
        summary.lines.append(line)
        active_days.add(entry.entry_date)

        summary.total_liters_sold += line.liters_sold
        summary.total_money_collected += line.money_collected
        summary.total_token_money += line.token_money
        summary.total_sales_generated += line.total_sale
        summary.total_base_salary += line.base_daily_salary
        summary.total_commission += line.commission_earned
        summary.total_discrepancy += line.discrepancy
        summary.total_shortage_deduction += line.shortage_deduction
        summary.net_monthly_earning += line.net_earning

    summary.days_active = len(active_days)
    if not summary.lines:
        summary.message = NO_DATA_MESSAGE
    return summary
