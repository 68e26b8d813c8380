"""Зависимости API: текущая сессия, проверка ролей, провайдер сверки."""

from datetime import date, datetime
from typing import Optional

import pytz
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from apps.api.services.auth_service import AuthService, SessionContext
from apps.api.services.user_service_db import UserServiceDB
from core.config.settings import settings
from core.database.session import get_db_session
from core.logging.logger import logger
from shared.services.expected_amount import ExpectedAmountAdjuster, get_expected_amount_adjuster

security = HTTPBearer(auto_error=False)


def get_auth_service() -> AuthService:
    return AuthService()


async def require_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service),
    db: AsyncSession = Depends(get_db_session),
) -> SessionContext:
    """Проверка JWT токена и пользователя в БД.

    401, если токена нет или он недействителен, а также если пользователь
    удален, сменил роль или пароль после выдачи токена.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    context = await auth_service.verify_token(credentials.credentials)
    if context is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = await UserServiceDB(db).get_user(context.user_id)
    if (
        user is None
        or user.role != context.role.value
        or (user.session_version or 0) != context.session_version
    ):
        logger.warning("Token rejected: user no longer valid", user_id=context.user_id, role=context.role.value)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User is no longer active",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return context


async def require_admin(context: SessionContext = Depends(require_auth)) -> SessionContext:
    """Только администратор."""
    if not context.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return context


def get_adjuster() -> ExpectedAmountAdjuster:
    """Провайдер проверки ожидаемой суммы из настроек."""
    return get_expected_amount_adjuster()


def get_business_today() -> date:
    """Сегодняшняя дата в часовом поясе бизнеса."""
    return datetime.now(pytz.timezone(settings.default_timezone)).date()
