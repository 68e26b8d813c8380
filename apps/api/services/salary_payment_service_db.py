"""
Сервис выплат зарплаты и автозаполнения суммы за период
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import select, extract
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError

from apps.api.services.rider_service_db import RiderServiceDB
from apps.api.services.sales_entry_service_db import SalesEntryServiceDB
from core.logging.logger import logger
from domain.entities.salary_payment import SalaryPayment
from shared.models.records import SalaryPaymentRecord
from shared.services.payroll_aggregator import MonthlyPayrollSummary, aggregate_rider_month
from shared.services.reconciliation_calculator import ZERO, to_decimal


class RiderNotFoundError(LookupError):
    """Курьер с таким именем не заведен."""


class SalaryPaymentServiceDB:
    """Сервис для работы с выплатами зарплаты в базе данных."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def create_payment(self, payment_data: Dict[str, Any], recorded_by: str) -> SalaryPayment:
        """Сохраняет выплату. Выдавший и записавший - текущий пользователь.

        Raises:
            ValueError: отрицательные суммы или курьер не заведен.
        """
        amounts = {
            name: to_decimal(payment_data.get(name), name)
            for name in ("salary_amount_for_period", "amount_paid", "deduction_amount", "advance_payment")
        }
        for name, value in amounts.items():
            if value < ZERO:
                raise ValueError(f"{name} must be non-negative")

        rider_name = payment_data["rider_name"].strip()
        if await RiderServiceDB(self.db).get_rider_by_name(rider_name) is None:
            raise ValueError(f'Rider "{rider_name}" not found.')

        payment = SalaryPayment(
            payment_date=payment_data["payment_date"],
            rider_name=rider_name,
            salary_giver_name=recorded_by,
            comment=payment_data.get("comment"),
            recorded_by=recorded_by,
            **amounts,
        )
        payment.calculate_remaining_amount()

        self.db.add(payment)
        try:
            await self.db.commit()
            await self.db.refresh(payment)
        except SQLAlchemyError as e:
            logger.error("Database error while saving salary payment", rider_name=rider_name, error=str(e))
            await self.db.rollback()
            raise

        logger.info(
            "Salary payment saved",
            payment_id=payment.id,
            rider_name=rider_name,
            amount_paid=str(payment.amount_paid),
            remaining=str(payment.remaining_amount),
        )
        return payment

    async def list_records(
        self,
        rider_name: Optional[str] = None,
        year: Optional[int] = None,
        month: Optional[int] = None,
    ) -> List[SalaryPaymentRecord]:
        """Выплаты по фильтрам, новые сверху."""
        query = select(SalaryPayment)
        if rider_name:
            query = query.where(SalaryPayment.rider_name == rider_name)
        if year is not None:
            query = query.where(extract("year", SalaryPayment.payment_date) == year)
        if month is not None:
            query = query.where(extract("month", SalaryPayment.payment_date) == month)
        query = query.order_by(SalaryPayment.payment_date.desc(), SalaryPayment.id.desc())

        result = await self.db.execute(query)
        return [SalaryPaymentRecord.from_entity(entity) for entity in result.scalars().all()]

    async def list_all_records(self) -> List[SalaryPaymentRecord]:
        return await self.list_records()

    async def build_payroll_summary(self, rider_name: str, year: int, month: int) -> MonthlyPayrollSummary:
        """Зарплата курьера за месяц для автозаполнения формы выплаты.

        Raises:
            RiderNotFoundError: курьер не заведен.
        """
        rider = await RiderServiceDB(self.db).get_rider_by_name(rider_name)
        if rider is None:
            raise RiderNotFoundError(f'Rider "{rider_name}" not found.')

        entries = await SalesEntryServiceDB(self.db).list_records(year=year, month=month, rider_name=rider.name)
        summary = aggregate_rider_month(entries, rider.name, year, month, rider.per_day_salary)
        logger.info(
            "Payroll summary built",
            rider_name=rider.name,
            year=year,
            month=month,
            days_active=summary.days_active,
            net=str(summary.net_monthly_earning),
        )
        return summary
