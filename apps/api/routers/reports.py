"""
API роутер отчетов (только администратор)
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from apps.api.dependencies import require_admin
from apps.api.schemas import (
    CollectorCashResponse,
    MonthlySummaryResponse,
    PayrollSummaryResponse,
    RiderMonthlyReportResponse,
    SalaryHistoryResponse,
    VehicleMonthResponse,
)
from apps.api.services.auth_service import SessionContext
from apps.api.services.salary_payment_service_db import RiderNotFoundError, SalaryPaymentServiceDB
from apps.api.services.sales_entry_service_db import SalesEntryServiceDB
from core.database.session import get_db_session
from shared.services.report_aggregators import (
    available_years,
    build_collector_cash_report,
    build_monthly_summary,
    build_rider_monthly_report,
    build_salary_history,
    build_vehicle_report,
)

router = APIRouter(prefix="/reports", tags=["reports"])

YEAR_QUERY = Query(None, ge=2000, le=2100, description="Фильтр по году")
MONTH_QUERY = Query(None, ge=1, le=12, description="Фильтр по месяцу")


@router.get("/monthly-summary", response_model=MonthlySummaryResponse)
async def get_monthly_summary(
    year: Optional[int] = YEAR_QUERY,
    month: Optional[int] = MONTH_QUERY,
    context: SessionContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    """Итоги и средние за активный день по продажам, наличным, онлайн и токенам."""
    records = await SalesEntryServiceDB(db).list_records()
    summary = build_monthly_summary(records, year=year, month=month)
    response = MonthlySummaryResponse.model_validate(summary)
    return response.model_copy(update={"available_years": available_years(records)})


@router.get("/vehicles", response_model=List[VehicleMonthResponse])
async def get_vehicle_report(
    vehicle_name: Optional[str] = Query(None, description="Фильтр по машине"),
    year: Optional[int] = YEAR_QUERY,
    month: Optional[int] = MONTH_QUERY,
    context: SessionContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    """Отчет по машинам с пометками низкой ставки и ручных литров."""
    records = await SalesEntryServiceDB(db).list_records(year=year, month=month, vehicle_name=vehicle_name)
    report = build_vehicle_report(records, vehicle_name=vehicle_name, year=year, month=month)
    return [VehicleMonthResponse.model_validate(stats) for stats in report]


@router.get("/collectors", response_model=List[CollectorCashResponse])
async def get_collector_cash_report(
    year: Optional[int] = YEAR_QUERY,
    month: Optional[int] = MONTH_QUERY,
    context: SessionContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    """Наличные по тому, кто записал отчет, помесячно."""
    records = await SalesEntryServiceDB(db).list_records(year=year, month=month)
    report = build_collector_cash_report(records, year=year, month=month)
    return [CollectorCashResponse.model_validate(stats) for stats in report]


@router.get("/riders", response_model=RiderMonthlyReportResponse)
async def get_rider_monthly_report(
    year: Optional[int] = YEAR_QUERY,
    month: Optional[int] = MONTH_QUERY,
    context: SessionContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    """Литры, сборы и токены по курьерам и месяцам."""
    records = await SalesEntryServiceDB(db).list_records(year=year, month=month)
    report = build_rider_monthly_report(records, year=year, month=month)
    return RiderMonthlyReportResponse.model_validate(report)


@router.get("/riders/{rider_name}/payroll", response_model=PayrollSummaryResponse)
async def get_rider_payroll(
    rider_name: str,
    year: int = Query(..., ge=2000, le=2100),
    month: int = Query(..., ge=1, le=12),
    context: SessionContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    """Дневная таблица и итоги зарплаты курьера за месяц."""
    try:
        summary = await SalaryPaymentServiceDB(db).build_payroll_summary(rider_name, year, month)
    except RiderNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return PayrollSummaryResponse.model_validate(summary)


@router.get("/salary-history", response_model=SalaryHistoryResponse)
async def get_salary_history(
    rider_name: Optional[str] = Query(None, description="Фильтр по курьеру"),
    year: Optional[int] = YEAR_QUERY,
    month: Optional[int] = MONTH_QUERY,
    context: SessionContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    """История выплат с суммами выплачено/удержано/авансом."""
    payments = await SalaryPaymentServiceDB(db).list_all_records()
    history = build_salary_history(payments, rider_name=rider_name, year=year, month=month)
    return SalaryHistoryResponse.model_validate(history)
