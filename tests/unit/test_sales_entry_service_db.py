"""Unit-тесты SalesEntryServiceDB."""

import dataclasses
import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock

from sqlalchemy.exc import OperationalError

from apps.api.services.sales_entry_service_db import PersistenceError, SalesEntryServiceDB
from domain.entities.rider import Rider
from domain.entities.sales_entry import SalesEntry
from shared.services.expected_amount import AdjustmentError, AdjustmentResult
from shared.services.reconciliation_calculator import ReconciliationStatus
from tests.utils.test_helpers import TestDataFactory, make_execute_result


def _adjuster(amount="2300", reasoning="Looks right."):
    adjuster = AsyncMock()
    adjuster.adjust.return_value = AdjustmentResult(Decimal(amount), reasoning)
    return adjuster


def _entity_from_record(record) -> SalesEntry:
    values = dataclasses.asdict(record)
    values["status"] = record.status.value
    return SalesEntry(**values)


@pytest.fixture
def service(mock_db_session):
    return SalesEntryServiceDB(mock_db_session)


@pytest.fixture
def reference_form():
    return TestDataFactory.create_entry_form(
        previous_meter_reading=Decimal("5000"),
        current_meter_reading=Decimal("6000"),
        rate_per_liter=Decimal("2.5"),
        cash_received=Decimal("2000"),
        online_received=Decimal("300"),
        due_collected=Decimal("100"),
        token_money=Decimal("50"),
        staff_expense=Decimal("20"),
        extra_amount=Decimal("10"),
    )


class TestCreateEntry:
    """Сверка и сохранение."""

    @pytest.fixture(autouse=True)
    def known_rider(self, mock_db_session):
        mock_db_session.execute.return_value = make_execute_result(
            scalar=Rider(id=1, name="Ravi", per_day_salary=Decimal("900"))
        )

    @pytest.mark.asyncio
    async def test_saves_reconciled_entry(self, service, mock_db_session, reference_form):
        adjuster = _adjuster("2350", "Expected more cash.")

        entry = await service.create_entry(reference_form, "leader1", adjuster)

        mock_db_session.add.assert_called_once_with(entry)
        mock_db_session.commit.assert_awaited_once()
        assert entry.liters_sold == Decimal("1000")
        assert entry.total_sale == Decimal("2500")
        assert entry.actual_received == Decimal("2300")
        assert entry.initial_adjusted_expected == Decimal("2320")
        assert entry.ai_adjusted_expected_amount == Decimal("2350")
        assert entry.discrepancy == Decimal("-50")
        assert entry.status == ReconciliationStatus.SHORTAGE.value
        assert entry.recorded_by == "leader1"
        assert entry.admin_override_liters_sold is None

        request = adjuster.adjust.await_args.args[0]
        assert request.totals.initial_adjusted_expected == Decimal("2320")
        assert request.rider_name == "Ravi"

    @pytest.mark.asyncio
    async def test_override_replaces_meter_difference(self, service, reference_form):
        reference_form.update(current_meter_reading=Decimal("4000"), admin_override_liters_sold=Decimal("800"))

        entry = await service.create_entry(reference_form, "admin", _adjuster())

        assert entry.liters_sold == Decimal("800")
        assert entry.admin_override_liters_sold == Decimal("800")

    @pytest.mark.asyncio
    async def test_adjustment_failure_saves_nothing(self, service, mock_db_session, reference_form):
        adjuster = AsyncMock()
        adjuster.adjust.side_effect = AdjustmentError("timeout")

        with pytest.raises(AdjustmentError):
            await service.create_entry(reference_form, "admin", adjuster)

        mock_db_session.add.assert_not_called()
        mock_db_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_meter_rule_violation(self, service, mock_db_session, reference_form):
        reference_form["current_meter_reading"] = Decimal("10")
        adjuster = _adjuster()

        with pytest.raises(ValueError):
            await service.create_entry(reference_form, "admin", adjuster)

        adjuster.adjust.assert_not_awaited()
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_persistence_failure_carries_preview(self, service, mock_db_session, reference_form):
        mock_db_session.commit.side_effect = OperationalError("INSERT", {}, Exception("db down"))

        with pytest.raises(PersistenceError) as exc_info:
            await service.create_entry(reference_form, "admin", _adjuster("2300"))

        mock_db_session.rollback.assert_awaited_once()
        preview = exc_info.value.preview
        assert preview["status"] == "Match"
        assert preview["total_sale"] == Decimal("2500")
        assert preview["liters_sold"] == Decimal("1000")
        assert "db down" in exc_info.value.cause


    @pytest.mark.asyncio
    async def test_unknown_vehicle_rejected(self, service, mock_db_session, reference_form):
        reference_form["vehicle_name"] = "Omega"
        adjuster = _adjuster()

        with pytest.raises(ValueError, match="Unknown vehicle"):
            await service.create_entry(reference_form, "admin", adjuster)

        adjuster.adjust.assert_not_awaited()
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_rider_rejected(self, service, mock_db_session, reference_form):
        mock_db_session.execute.return_value = make_execute_result(scalar=None)
        adjuster = _adjuster()

        with pytest.raises(ValueError, match="not found"):
            await service.create_entry(reference_form, "admin", adjuster)

        adjuster.adjust.assert_not_awaited()
        mock_db_session.add.assert_not_called()


class TestReads:
    """Выборки."""

    @pytest.mark.asyncio
    async def test_list_records_returns_validated_records(self, service, mock_db_session):
        record = TestDataFactory.create_sales_record(id=7, cash_received=Decimal("200"))
        mock_db_session.execute.return_value = make_execute_result(scalars_list=[_entity_from_record(record)])

        records = await service.list_records(year=2025, month=5)

        assert records == [record]
        assert records[0].status == ReconciliationStatus.MATCH

    @pytest.mark.asyncio
    async def test_list_records_rejects_broken_row(self, service, mock_db_session):
        entity = _entity_from_record(TestDataFactory.create_sales_record())
        entity.rider_name = "  "
        mock_db_session.execute.return_value = make_execute_result(scalars_list=[entity])

        with pytest.raises(ValueError, match="rider_name"):
            await service.list_records()

    @pytest.mark.asyncio
    async def test_last_meter_reading(self, service, mock_db_session):
        mock_db_session.execute.return_value = make_execute_result(scalar=Decimal("15234.5"))
        assert await service.get_last_meter_reading("Alpha") == Decimal("15234.5")

    @pytest.mark.asyncio
    async def test_last_meter_reading_defaults_to_zero(self, service, mock_db_session):
        mock_db_session.execute.return_value = make_execute_result(scalar=None)
        assert await service.get_last_meter_reading("Eta") == Decimal("0")
