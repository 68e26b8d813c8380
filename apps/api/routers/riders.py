"""
API роутер курьеров
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from apps.api.dependencies import require_admin, require_auth
from apps.api.schemas import RiderCreate, RiderResponse, RiderUpdate
from apps.api.services.auth_service import SessionContext
from apps.api.services.rider_service_db import RiderServiceDB
from core.database.session import get_db_session

router = APIRouter(prefix="/riders", tags=["riders"])


@router.get("/", response_model=List[RiderResponse])
async def list_riders(
    context: SessionContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db_session),
):
    """Список курьеров."""
    return await RiderServiceDB(db).list_riders()


@router.post("/", response_model=RiderResponse, status_code=status.HTTP_201_CREATED)
async def create_rider(
    rider_data: RiderCreate,
    context: SessionContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    """Создание курьера."""
    try:
        return await RiderServiceDB(db).create_rider(rider_data.name, rider_data.per_day_salary)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.patch("/{rider_id}", response_model=RiderResponse)
async def update_rider(
    rider_id: int,
    rider_data: RiderUpdate,
    context: SessionContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    """Переименование курьера или смена ставки."""
    try:
        rider = await RiderServiceDB(db).update_rider(
            rider_id, name=rider_data.name, per_day_salary=rider_data.per_day_salary
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if not rider:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Rider not found")
    return rider
