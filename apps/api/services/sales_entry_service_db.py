"""
Сервис дневных отчетов о продажах: сверка, сохранение, выборки
"""

from dataclasses import asdict
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import select, extract
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError

from apps.api.services.rider_service_db import RiderServiceDB
from core.config.settings import settings
from core.logging.logger import logger
from domain.entities.sales_entry import SalesEntry
from shared.models.records import SalesEntryRecord
from shared.services.expected_amount import AdjustmentRequest, ExpectedAmountAdjuster
from shared.services.reconciliation_calculator import (
    DailyFigures,
    ReconciliationResult,
    ZERO,
    compute_totals,
    reconcile,
    resolve_liters_sold,
    to_decimal,
)

# Денежные поля формы, значение по умолчанию 0
AMOUNT_FIELDS = (
    "cash_received",
    "online_received",
    "due_collected",
    "new_due_amount",
    "token_money",
    "staff_expense",
    "extra_amount",
    "commission_earned",
)


class PersistenceError(Exception):
    """Сверка посчитана, но запись не сохранена.

    preview содержит рассчитанные (несохраненные) значения.
    """

    def __init__(self, cause: str, preview: Dict[str, Any]):
        super().__init__(cause)
        self.cause = cause
        self.preview = preview


def build_preview(liters_sold: Decimal, result: ReconciliationResult) -> Dict[str, Any]:
    preview = {"liters_sold": liters_sold}
    preview.update(asdict(result))
    preview["status"] = result.status.value
    return preview


class SalesEntryServiceDB:
    """Сервис для работы с отчетами о продажах в базе данных."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def reconcile_entry(
        self,
        entry_data: Dict[str, Any],
        adjuster: ExpectedAmountAdjuster,
    ) -> tuple:
        """Посчитать сверку дня без сохранения.

        Returns:
            (liters_sold, ReconciliationResult)

        Raises:
            ValueError: нарушено правило показаний счетчика.
            AdjustmentError: сервис проверки не дал результата.
        """
        liters_sold = resolve_liters_sold(
            entry_data["previous_meter_reading"],
            entry_data["current_meter_reading"],
            entry_data.get("admin_override_liters_sold"),
        )
        figures = DailyFigures.from_values(
            liters_sold=liters_sold,
            rate_per_liter=entry_data["rate_per_liter"],
            cash_received=entry_data.get("cash_received"),
            online_received=entry_data.get("online_received"),
            due_collected=entry_data.get("due_collected"),
            token_money=entry_data.get("token_money"),
            staff_expense=entry_data.get("staff_expense"),
            extra_amount=entry_data.get("extra_amount"),
        )
        totals = compute_totals(figures)

        adjustment = await adjuster.adjust(
            AdjustmentRequest(
                entry_date=entry_data["entry_date"],
                rider_name=entry_data["rider_name"],
                vehicle_name=entry_data["vehicle_name"],
                figures=figures,
                totals=totals,
                comment=entry_data.get("comment"),
            )
        )
        result = reconcile(figures, adjustment.adjusted_expected_amount, adjustment.reasoning, totals=totals)
        return liters_sold, result

    async def _check_known_names(self, entry_data: Dict[str, Any]) -> None:
        vehicle_name = entry_data["vehicle_name"]
        if vehicle_name not in settings.vehicle_names:
            raise ValueError(f'Unknown vehicle "{vehicle_name}".')
        rider_name = entry_data["rider_name"]
        if await RiderServiceDB(self.db).get_rider_by_name(rider_name) is None:
            raise ValueError(f'Rider "{rider_name}" not found.')

    async def create_entry(
        self,
        entry_data: Dict[str, Any],
        recorded_by: str,
        adjuster: ExpectedAmountAdjuster,
    ) -> SalesEntry:
        """Сверить и сохранить дневной отчет.

        Raises:
            ValueError: неизвестная машина или курьер, нарушено правило счетчика.
            AdjustmentError: сервис проверки не дал результата; ничего не сохраняется.
            PersistenceError: ошибка БД, в исключении предпросмотр расчета.
        """
        await self._check_known_names(entry_data)
        liters_sold, result = await self.reconcile_entry(entry_data, adjuster)

        override = entry_data.get("admin_override_liters_sold")
        entry = SalesEntry(
            entry_date=entry_data["entry_date"],
            rider_name=entry_data["rider_name"],
            vehicle_name=entry_data["vehicle_name"],
            previous_meter_reading=to_decimal(entry_data["previous_meter_reading"]),
            current_meter_reading=to_decimal(entry_data["current_meter_reading"]),
            liters_sold=liters_sold,
            admin_override_liters_sold=(
                to_decimal(override) if override is not None and to_decimal(override) > ZERO else None
            ),
            rate_per_liter=to_decimal(entry_data["rate_per_liter"]),
            hours_worked=to_decimal(entry_data.get("hours_worked", 9)),
            comment=entry_data.get("comment"),
            recorded_by=recorded_by,
            total_sale=result.total_sale,
            actual_received=result.actual_received,
            initial_adjusted_expected=result.initial_adjusted_expected,
            ai_adjusted_expected_amount=result.ai_adjusted_expected_amount,
            ai_reasoning=result.ai_reasoning,
            discrepancy=result.discrepancy,
            status=result.status.value,
            **{name: to_decimal(entry_data.get(name), name) for name in AMOUNT_FIELDS},
        )

        self.db.add(entry)
        try:
            await self.db.commit()
            await self.db.refresh(entry)
        except SQLAlchemyError as e:
            logger.error(
                "Database error while saving sales entry",
                rider_name=entry.rider_name,
                vehicle_name=entry.vehicle_name,
                error=str(e),
            )
            await self.db.rollback()
            raise PersistenceError(str(e), build_preview(liters_sold, result)) from e

        logger.info(
            "Sales entry saved",
            entry_id=entry.id,
            rider_name=entry.rider_name,
            status=entry.status,
            discrepancy=str(result.discrepancy),
        )
        return entry

    async def get_entry(self, entry_id: int) -> Optional[SalesEntry]:
        """Получает отчет по ID."""
        result = await self.db.execute(select(SalesEntry).where(SalesEntry.id == entry_id))
        return result.scalar_one_or_none()

    async def list_records(
        self,
        year: Optional[int] = None,
        month: Optional[int] = None,
        vehicle_name: Optional[str] = None,
        rider_name: Optional[str] = None,
    ) -> List[SalesEntryRecord]:
        """Выборка отчетов, приведенная к проверенным SalesEntryRecord.

        Сортировка: новые дни сверху.
        """
        query = select(SalesEntry)
        if year is not None:
            query = query.where(extract("year", SalesEntry.entry_date) == year)
        if month is not None:
            query = query.where(extract("month", SalesEntry.entry_date) == month)
        if vehicle_name:
            query = query.where(SalesEntry.vehicle_name == vehicle_name)
        if rider_name:
            query = query.where(SalesEntry.rider_name == rider_name)
        query = query.order_by(SalesEntry.entry_date.desc(), SalesEntry.recorded_at.desc())

        result = await self.db.execute(query)
        records = [SalesEntryRecord.from_entity(entity) for entity in result.scalars().all()]
        logger.debug(
            "Sales entries loaded",
            count=len(records),
            year=year,
            month=month,
            vehicle_name=vehicle_name,
            rider_name=rider_name,
        )
        return records

    async def get_last_meter_reading(self, vehicle_name: str) -> Decimal:
        """Текущее показание счетчика из последнего отчета по машине, или 0."""
        query = (
            select(SalesEntry.current_meter_reading)
            .where(SalesEntry.vehicle_name == vehicle_name)
            .order_by(SalesEntry.recorded_at.desc(), SalesEntry.id.desc())
            .limit(1)
        )
        result = await self.db.execute(query)
        reading = result.scalar_one_or_none()
        return to_decimal(reading, "current_meter_reading")
