"""
API роутер дневных отчетов о продажах
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from apps.api.dependencies import get_adjuster, get_business_today, require_admin, require_auth
from apps.api.schemas import SalesEntryCreate, SalesEntryListResponse, SalesEntryResponse
from apps.api.services.auth_service import SessionContext
from apps.api.services.sales_entry_service_db import SalesEntryServiceDB
from core.database.session import get_db_session
from core.logging.logger import logger
from shared.services.expected_amount import ExpectedAmountAdjuster

router = APIRouter(prefix="/sales-entries", tags=["sales-entries"])


@router.post("/", response_model=SalesEntryResponse, status_code=status.HTTP_201_CREATED)
async def create_sales_entry(
    entry_data: SalesEntryCreate,
    context: SessionContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db_session),
    adjuster: ExpectedAmountAdjuster = Depends(get_adjuster),
    today: date = Depends(get_business_today),
):
    """Сверка и сохранение дневного отчета.

    Тимлид пишет отчет только за сегодня и не может задавать литры вручную.
    """
    data = entry_data.model_dump()

    if context.is_team_leader:
        override = data.get("admin_override_liters_sold")
        if override is not None and override > 0:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Only admins can override liters sold"
            )
        if data["entry_date"] is not None and data["entry_date"] != today:
            logger.info(
                "Team leader entry date replaced with today",
                user_id=context.user_id,
                requested=data["entry_date"],
            )
        data["entry_date"] = today
    elif data["entry_date"] is None:
        data["entry_date"] = today

    try:
        return await SalesEntryServiceDB(db).create_entry(data, context.user_id, adjuster)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/", response_model=SalesEntryListResponse)
async def list_sales_entries(
    year: Optional[int] = Query(None, ge=2000, le=2100, description="Фильтр по году"),
    month: Optional[int] = Query(None, ge=1, le=12, description="Фильтр по месяцу"),
    vehicle_name: Optional[str] = Query(None, description="Фильтр по машине"),
    rider_name: Optional[str] = Query(None, description="Фильтр по курьеру"),
    context: SessionContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    """Список отчетов с фильтрами (новые сверху)."""
    records = await SalesEntryServiceDB(db).list_records(
        year=year, month=month, vehicle_name=vehicle_name, rider_name=rider_name
    )
    return SalesEntryListResponse(
        entries=[SalesEntryResponse.model_validate(record) for record in records],
        total=len(records),
    )


@router.get("/{entry_id}", response_model=SalesEntryResponse)
async def get_sales_entry(
    entry_id: int,
    context: SessionContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    """Получение отчета по ID."""
    entry = await SalesEntryServiceDB(db).get_entry(entry_id)
    if not entry:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Sales entry not found")
    return entry
