"""Unit-тесты агрегатора зарплаты."""

import pytest
from datetime import date
from decimal import Decimal

from shared.services.payroll_aggregator import (
    NO_DATA_MESSAGE,
    aggregate_rider_month,
    base_daily_salary,
    net_daily_earning,
    shortage_deduction,
)
from tests.utils.test_helpers import TestDataFactory


class TestDailyFormulas:
    """Формулы одного дня."""

    def test_full_day_gets_full_rate(self):
        assert base_daily_salary(900, 9) == Decimal("900")

    def test_overtime_is_not_paid_extra(self):
        assert base_daily_salary(900, 12) == Decimal("900")

    def test_half_day_is_prorated(self):
        assert base_daily_salary(900, 4.5) == Decimal("450")

    def test_zero_hours(self):
        assert base_daily_salary(900, 0) == Decimal("0")

    def test_shortage_is_deducted(self):
        """База 900, комиссия 50, недостача 50: итог 900."""
        assert shortage_deduction(Decimal("-50")) == Decimal("50")
        assert net_daily_earning(900, 50, Decimal("-50")) == Decimal("900")

    def test_overage_does_not_increase_pay(self):
        assert shortage_deduction(Decimal("75")) == Decimal("0")
        assert net_daily_earning(900, 50, Decimal("75")) == Decimal("950")


class TestAggregateRiderMonth:
    """Свертка месяца курьера."""

    def test_single_full_day_with_shortage(self):
        entry = TestDataFactory.create_sales_record(
            hours_worked=Decimal("9"),
            commission_earned=Decimal("50"),
            discrepancy=Decimal("-50"),
        )
        summary = aggregate_rider_month([entry], "Ravi", 2025, 5, Decimal("900"))

        assert summary.total_base_salary == Decimal("900")
        assert summary.total_commission == Decimal("50")
        assert summary.total_shortage_deduction == Decimal("50")
        assert summary.net_monthly_earning == Decimal("900")
        assert summary.lines[0].net_earning == Decimal("900")
        assert summary.days_active == 1
        assert summary.message is None

    def test_half_day_base_salary(self):
        entry = TestDataFactory.create_sales_record(hours_worked=Decimal("4.5"))
        summary = aggregate_rider_month([entry], "Ravi", 2025, 5, 900)
        assert summary.lines[0].base_daily_salary == Decimal("450")

    def test_no_entries_is_not_an_error(self):
        summary = aggregate_rider_month([], "Ravi", 2025, 5, 900)

        assert summary.has_data is False
        assert summary.days_active == 0
        assert summary.net_monthly_earning == Decimal("0")
        assert summary.total_liters_sold == Decimal("0")
        assert summary.message == NO_DATA_MESSAGE

    def test_other_riders_and_months_are_ignored(self, sample_entries):
        summary = aggregate_rider_month(sample_entries, "Ravi", 2025, 5, 900)

        assert [line.entry_id for line in summary.lines] == [1, 3]
        assert summary.total_liters_sold == Decimal("180")
        assert summary.total_sales_generated == Decimal("360")
        assert summary.total_money_collected == Decimal("340")
        assert summary.total_token_money == Decimal("15")
        assert summary.days_active == 2

    def test_days_active_counts_distinct_days(self):
        entries = [
            TestDataFactory.create_sales_record(id=1, entry_date=date(2025, 5, 4), vehicle_name="Alpha"),
            TestDataFactory.create_sales_record(id=2, entry_date=date(2025, 5, 4), vehicle_name="Beta"),
            TestDataFactory.create_sales_record(id=3, entry_date=date(2025, 5, 5)),
        ]
        summary = aggregate_rider_month(entries, "Ravi", 2025, 5, 900)
        assert len(summary.lines) == 3
        assert summary.days_active == 2
        assert summary.total_base_salary == Decimal("2700")

    def test_lines_sorted_by_date(self):
        entries = [
            TestDataFactory.create_sales_record(id=2, entry_date=date(2025, 5, 20)),
            TestDataFactory.create_sales_record(id=1, entry_date=date(2025, 5, 2)),
        ]
        summary = aggregate_rider_month(entries, "Ravi", 2025, 5, 900)
        assert [line.entry_date for line in summary.lines] == [date(2025, 5, 2), date(2025, 5, 20)]

    def test_invalid_rate_rejected(self):
        with pytest.raises(ValueError):
            aggregate_rider_month([], "Ravi", 2025, 5, "not-a-number")

    def test_line_net_matches_daily_formula(self):
        entries = [
            TestDataFactory.create_sales_record(
                id=1, hours_worked=Decimal("6"), commission_earned=Decimal("40"), discrepancy=Decimal("-25")
            ),
            TestDataFactory.create_sales_record(
                id=2, entry_date=date(2025, 5, 3), commission_earned=Decimal("10"), discrepancy=Decimal("30")
            ),
        ]
        summary = aggregate_rider_month(entries, "Ravi", 2025, 5, 900)

        for line in summary.lines:
            assert line.net_earning == net_daily_earning(
                line.base_daily_salary, line.commission_earned, line.discrepancy
            )
        assert [line.net_earning for line in summary.lines] == [Decimal("615"), Decimal("910")]
        assert summary.net_monthly_earning == Decimal("1525")
