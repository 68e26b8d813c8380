"""
API роутер машин парка
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from apps.api.dependencies import require_auth
from apps.api.schemas import MeterReadingResponse, VehicleListResponse
from apps.api.services.auth_service import SessionContext
from apps.api.services.sales_entry_service_db import SalesEntryServiceDB
from core.config.settings import settings
from core.database.session import get_db_session

router = APIRouter(prefix="/vehicles", tags=["vehicles"])


@router.get("/", response_model=VehicleListResponse)
async def list_vehicles(context: SessionContext = Depends(require_auth)):
    """Машины парка."""
    return VehicleListResponse(vehicles=settings.vehicle_names)


@router.get("/{vehicle_name}/last-meter-reading", response_model=MeterReadingResponse)
async def get_last_meter_reading(
    vehicle_name: str,
    context: SessionContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db_session),
):
    """Последнее показание счетчика машины (0, если отчетов нет)."""
    if vehicle_name not in settings.vehicle_names:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown vehicle")
    reading = await SalesEntryServiceDB(db).get_last_meter_reading(vehicle_name)
    return MeterReadingResponse(vehicle_name=vehicle_name, reading=reading)
