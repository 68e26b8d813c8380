"""Unit-тесты проверенных записей хранения."""

import pytest
from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace

from shared.models.records import SalaryPaymentRecord, SalesEntryRecord
from shared.services.reconciliation_calculator import ReconciliationStatus


def _row(**overrides):
    values = dict(
        id=5,
        entry_date=datetime(2025, 5, 1, 18, 0),
        recorded_at=None,
        rider_name="Ravi",
        vehicle_name="Alpha",
        previous_meter_reading=1000,
        current_meter_reading="1100",
        liters_sold=100,
        admin_override_liters_sold=None,
        rate_per_liter="2.5",
        cash_received=200,
        online_received=50,
        due_collected=None,
        new_due_amount=None,
        token_money=0,
        staff_expense=0,
        extra_amount=0,
        hours_worked=9,
        commission_earned=None,
        comment=None,
        recorded_by="admin",
        total_sale=250,
        actual_received=250,
        initial_adjusted_expected=250,
        ai_adjusted_expected_amount=250,
        ai_reasoning=None,
        discrepancy=0,
        status="Match",
    )
    values.update(overrides)
    return SimpleNamespace(**values)


class TestSalesEntryRecord:

    def test_values_are_normalized(self):
        record = SalesEntryRecord.from_entity(_row())

        assert record.entry_date == date(2025, 5, 1)
        assert record.rate_per_liter == Decimal("2.5")
        assert record.due_collected == Decimal("0")
        assert record.commission_earned == Decimal("0")
        assert record.ai_reasoning == ""
        assert record.status is ReconciliationStatus.MATCH
        assert record.year_month == (2025, 5)

    def test_unknown_status_rejected(self):
        with pytest.raises(ValueError):
            SalesEntryRecord.from_entity(_row(status="Lost"))

    def test_hours_over_a_day_rejected(self):
        with pytest.raises(ValueError, match="hours_worked"):
            SalesEntryRecord.from_entity(_row(hours_worked=25))

    def test_missing_recorder_rejected(self):
        with pytest.raises(ValueError, match="recorded_by"):
            SalesEntryRecord.from_entity(_row(recorded_by=None))


class TestSalaryPaymentRecord:

    def test_from_entity(self):
        record = SalaryPaymentRecord.from_entity(SimpleNamespace(
            id=1,
            payment_date="2025-05-31",
            rider_name="Ravi",
            salary_giver_name="admin",
            salary_amount_for_period=27000,
            amount_paid=20000,
            deduction_amount=None,
            advance_payment=None,
            remaining_amount=7000,
            comment=None,
            recorded_by="admin",
        ))

        assert record.payment_date == date(2025, 5, 31)
        assert record.deduction_amount == Decimal("0")
        assert record.created_at is None
