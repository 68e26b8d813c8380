"""
API роутер выплат зарплаты
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from apps.api.dependencies import require_auth
from apps.api.schemas import (
    PayrollSummaryResponse, SalaryPaymentCreate, SalaryPaymentRecordResponse, SalaryPaymentResponse
)
from apps.api.services.auth_service import SessionContext
from apps.api.services.salary_payment_service_db import RiderNotFoundError, SalaryPaymentServiceDB
from core.database.session import get_db_session

router = APIRouter(prefix="/salary-payments", tags=["salary-payments"])


@router.post("/", response_model=SalaryPaymentResponse, status_code=status.HTTP_201_CREATED)
async def create_salary_payment(
    payment_data: SalaryPaymentCreate,
    context: SessionContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db_session),
):
    """Запись выплаты. Выдавший и записавший - текущий пользователь."""
    try:
        return await SalaryPaymentServiceDB(db).create_payment(payment_data.model_dump(), context.user_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/", response_model=List[SalaryPaymentRecordResponse])
async def list_salary_payments(
    rider_name: Optional[str] = Query(None, description="Фильтр по курьеру"),
    year: Optional[int] = Query(None, ge=2000, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12),
    context: SessionContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db_session),
):
    """Выплаты по фильтрам, новые сверху."""
    records = await SalaryPaymentServiceDB(db).list_records(rider_name=rider_name, year=year, month=month)
    return [SalaryPaymentRecordResponse.model_validate(record) for record in records]


@router.get("/payroll", response_model=PayrollSummaryResponse)
async def get_payroll_autofill(
    rider_name: str = Query(..., min_length=1),
    year: int = Query(..., ge=2000, le=2100),
    month: int = Query(..., ge=1, le=12),
    context: SessionContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db_session),
):
    """Сумма зарплаты за месяц для автозаполнения формы выплаты.

    Если отчетов за период нет, возвращаются нули и сообщение для ручного ввода.
    """
    try:
        summary = await SalaryPaymentServiceDB(db).build_payroll_summary(rider_name, year, month)
    except RiderNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return PayrollSummaryResponse.model_validate(summary)
