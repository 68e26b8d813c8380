"""Агрегаторы отчетов: месячная сводка, машины, сборщики наличных, курьеры, история выплат.

Все функции чистые: группировка и суммирование по уже загруженной выборке.
"""

from __future__ import annotations

import calendar
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from shared.models.records import SalaryPaymentRecord, SalesEntryRecord
from shared.services.reconciliation_calculator import ZERO

# Ставка ниже порога считается аномалией
LOW_RATE_THRESHOLD = Decimal("0.75")

CENT = Decimal("0.01")


def month_label(year: int, month: int) -> str:
    """'January 2025'."""
    return f"{calendar.month_name[month]} {year}"


def _average(total: Decimal, days: int) -> Decimal:
    return total / days if days > 0 else ZERO


def filter_sales_entries(
    entries: Iterable[SalesEntryRecord],
    year: Optional[int] = None,
    month: Optional[int] = None,
    vehicle_name: Optional[str] = None,
    rider_name: Optional[str] = None,
) -> List[SalesEntryRecord]:
    """Отфильтровать записи по необязательным году/месяцу/машине/курьеру."""
    result = []
    for entry in entries:
        if year is not None and entry.entry_date.year != year:
            continue
        if month is not None and entry.entry_date.month != month:
            continue
        if vehicle_name is not None and entry.vehicle_name != vehicle_name:
            continue
        if rider_name is not None and entry.rider_name != rider_name:
            continue
        result.append(entry)
    return result


def available_years(entries: Iterable[SalesEntryRecord]) -> List[int]:
    """Годы, за которые есть данные, по убыванию."""
    return sorted({entry.entry_date.year for entry in entries}, reverse=True)


# ---------------------------------------------------------------------------
# Месячная сводка
# ---------------------------------------------------------------------------

@dataclass
class MonthlyChartPoint:
    month: str
    total_sales: Decimal


@dataclass
class MonthlySummary:
    """Сводка продаж за выбранный период."""

    year: Optional[int]
    month: Optional[int]
    total_sales: Decimal = ZERO
    average_daily_sales: Decimal = ZERO
    total_cash_received: Decimal = ZERO
    average_daily_cash_received: Decimal = ZERO
    total_online_received: Decimal = ZERO
    average_daily_online_received: Decimal = ZERO
    total_token_money: Decimal = ZERO
    average_daily_token_money: Decimal = ZERO
    unique_days: int = 0
    entries_count: int = 0
    chart: List[MonthlyChartPoint] = field(default_factory=list)


def build_monthly_summary(
    entries: Iterable[SalesEntryRecord],
    year: Optional[int] = None,
    month: Optional[int] = None,
) -> MonthlySummary:
    """Суммы и средние за активный день по итогу продаж, наличным, онлайн и токенам.

    Если выбран год, добавляется помесячный ряд продаж (12 точек, округление до 2 знаков).
    """
    filtered = filter_sales_entries(entries, year=year, month=month)
    summary = MonthlySummary(year=year, month=month, entries_count=len(filtered))

    days = set()
    sales_by_month: Dict[int, Decimal] = defaultdict(lambda: ZERO)
    for entry in filtered:
        summary.total_sales += entry.total_sale
        summary.total_cash_received += entry.cash_received
        summary.total_online_received += entry.online_received
        summary.total_token_money += entry.token_money
        days.add(entry.entry_date)
        sales_by_month[entry.entry_date.month] += entry.total_sale

    summary.unique_days = len(days)
    summary.average_daily_sales = _average(summary.total_sales, summary.unique_days)
    summary.average_daily_cash_received = _average(summary.total_cash_received, summary.unique_days)
    summary.average_daily_online_received = _average(summary.total_online_received, summary.unique_days)
    summary.average_daily_token_money = _average(summary.total_token_money, summary.unique_days)

    if year is not None:
        summary.chart = [
            MonthlyChartPoint(
                month=calendar.month_abbr[index],
                total_sales=sales_by_month[index].quantize(CENT, rounding=ROUND_HALF_UP),
            )
            for index in range(1, 13)
        ]
    return summary


# ---------------------------------------------------------------------------
# Отчет по машинам
# ---------------------------------------------------------------------------

@dataclass
class VehicleDailyLine:
    entry_id: Optional[int]
    entry_date: date
    rider_name: str
    initial_reading: Decimal
    final_reading: Decimal
    liters_sold: Decimal
    is_admin_override: bool
    rate_per_liter: Decimal
    is_rate_low: bool
    expected_amount: Decimal
    actual_amount: Decimal
    difference: Decimal


@dataclass
class VehicleMonthStats:
    vehicle_name: str
    year: int
    month: int
    daily_entries: List[VehicleDailyLine] = field(default_factory=list)
    total_liters_sold: Decimal = ZERO
    total_expected_amount: Decimal = ZERO
    total_actual_amount: Decimal = ZERO
    total_difference: Decimal = ZERO

    @property
    def label(self) -> str:
        return month_label(self.year, self.month)

    @property
    def anomalies_count(self) -> int:
        return sum(1 for line in self.daily_entries if line.is_rate_low or line.is_admin_override)


def build_vehicle_report(
    entries: Iterable[SalesEntryRecord],
    vehicle_name: Optional[str] = None,
    year: Optional[int] = None,
    month: Optional[int] = None,
) -> List[VehicleMonthStats]:
    """Итоги по (машина, месяц): литры, ожидаемо (итог продаж), фактически, разница.

    Строки дня помечают низкую ставку (< 0.75) и ручное значение литров.
    """
    filtered = filter_sales_entries(entries, year=year, month=month, vehicle_name=vehicle_name)
    groups: Dict[Tuple[str, int, int], VehicleMonthStats] = {}

    for entry in sorted(filtered, key=lambda e: (e.entry_date, e.id or 0)):
        key = (entry.vehicle_name, entry.entry_date.year, entry.entry_date.month)
        stats = groups.get(key)
        if stats is None:
            stats = groups[key] = VehicleMonthStats(vehicle_name=key[0], year=key[1], month=key[2])

        difference = entry.actual_received - entry.total_sale
        stats.daily_entries.append(
            VehicleDailyLine(
                entry_id=entry.id,
                entry_date=entry.entry_date,
                rider_name=entry.rider_name,
                initial_reading=entry.previous_meter_reading,
                final_reading=entry.current_meter_reading,
                liters_sold=entry.liters_sold,
                is_admin_override=entry.admin_override_liters_sold is not None,
                rate_per_liter=entry.rate_per_liter,
                is_rate_low=entry.rate_per_liter < LOW_RATE_THRESHOLD,
                expected_amount=entry.total_sale,
                actual_amount=entry.actual_received,
                difference=difference,
            )
        )
        stats.total_liters_sold += entry.liters_sold
        stats.total_expected_amount += entry.total_sale
        stats.total_actual_amount += entry.actual_received
        stats.total_difference += difference

    return [groups[key] for key in sorted(groups)]


# ---------------------------------------------------------------------------
# Наличные по сборщикам
# ---------------------------------------------------------------------------

@dataclass
class CollectorMonthCash:
    recorded_by: str
    year: int
    month: int
    total_cash_received: Decimal = ZERO

    @property
    def label(self) -> str:
        return month_label(self.year, self.month)


def build_collector_cash_report(
    entries: Iterable[SalesEntryRecord],
    year: Optional[int] = None,
    month: Optional[int] = None,
) -> List[CollectorMonthCash]:
    """Сумма наличных по тому, кто записал отчет, помесячно."""
    groups: Dict[Tuple[str, int, int], CollectorMonthCash] = {}
    for entry in filter_sales_entries(entries, year=year, month=month):
        key = (entry.recorded_by, entry.entry_date.year, entry.entry_date.month)
        stats = groups.get(key)
        if stats is None:
            stats = groups[key] = CollectorMonthCash(recorded_by=key[0], year=key[1], month=key[2])
        stats.total_cash_received += entry.cash_received
    return [groups[key] for key in sorted(groups)]


# ---------------------------------------------------------------------------
# Курьеры по месяцам
# ---------------------------------------------------------------------------

@dataclass
class RiderMonthStats:
    rider_name: str
    year: int
    month: int
    total_liters_sold: Decimal = ZERO
    total_money_collected: Decimal = ZERO
    total_token_money: Decimal = ZERO
    days_active: int = 0

    @property
    def label(self) -> str:
        return month_label(self.year, self.month)


@dataclass
class RiderMonthlyReport:
    rows: List[RiderMonthStats] = field(default_factory=list)
    overall_daily_average_collection: Decimal = ZERO


def build_rider_monthly_report(
    entries: Iterable[SalesEntryRecord],
    year: Optional[int] = None,
    month: Optional[int] = None,
) -> RiderMonthlyReport:
    """Литры, собранные деньги и токены по (курьер, месяц).

    Средний сбор за день считается по всем курьерам: сумма actual_received,
    деленная на число различных активных дней.
    """
    groups: Dict[Tuple[str, int, int], RiderMonthStats] = {}
    group_days: Dict[Tuple[str, int, int], set] = defaultdict(set)
    all_days = set()
    total_collected = ZERO

    for entry in filter_sales_entries(entries, year=year, month=month):
        key = (entry.rider_name, entry.entry_date.year, entry.entry_date.month)
        stats = groups.get(key)
        if stats is None:
            stats = groups[key] = RiderMonthStats(rider_name=key[0], year=key[1], month=key[2])
        stats.total_liters_sold += entry.liters_sold
        stats.total_money_collected += entry.actual_received
        stats.total_token_money += entry.token_money
        group_days[key].add(entry.entry_date)
        all_days.add(entry.entry_date)
        total_collected += entry.actual_received

    for key, stats in groups.items():
        stats.days_active = len(group_days[key])

    return RiderMonthlyReport(
        rows=[groups[key] for key in sorted(groups)],
        overall_daily_average_collection=_average(total_collected, len(all_days)),
    )


# ---------------------------------------------------------------------------
# История выплат
# ---------------------------------------------------------------------------

@dataclass
class SalaryHistory:
    payments: List[SalaryPaymentRecord] = field(default_factory=list)
    total_records: int = 0
    total_amount_paid: Decimal = ZERO
    total_deductions: Decimal = ZERO
    total_advance_paid: Decimal = ZERO


def build_salary_history(
    payments: Sequence[SalaryPaymentRecord],
    rider_name: Optional[str] = None,
    year: Optional[int] = None,
    month: Optional[int] = None,
) -> SalaryHistory:
    """Выплаты по фильтрам (новые сверху) и суммы выплачено/удержано/авансом."""
    filtered = [
        payment for payment in payments
        if (rider_name is None or payment.rider_name == rider_name)
        and (year is None or payment.payment_date.year == year)
        and (month is None or payment.payment_date.month == month)
    ]
    filtered.sort(key=lambda p: (p.payment_date, p.id or 0), reverse=True)

    history = SalaryHistory(payments=filtered, total_records=len(payments))
    for payment in filtered:
        history.total_amount_paid += payment.amount_paid
        history.total_deductions += payment.deduction_amount
        history.total_advance_paid += payment.advance_payment
    return history
