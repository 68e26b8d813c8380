"""
Главный API роутер AquaTrack
"""
from fastapi import APIRouter

from apps.api.routers.auth import router as auth_router
from apps.api.routers.reports import router as reports_router
from apps.api.routers.riders import router as riders_router
from apps.api.routers.salary_payments import router as salary_payments_router
from apps.api.routers.sales_entries import router as sales_entries_router
from apps.api.routers.users import router as users_router
from apps.api.routers.vehicles import router as vehicles_router

# Создаем главный роутер
api_router = APIRouter(prefix="/api/v1")

# Подключаем роутеры
api_router.include_router(auth_router)
api_router.include_router(sales_entries_router)
api_router.include_router(vehicles_router)
api_router.include_router(riders_router)
api_router.include_router(salary_payments_router)
api_router.include_router(reports_router)
api_router.include_router(users_router)
