"""
API роутер авторизации
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from apps.api.dependencies import get_auth_service, require_auth
from apps.api.schemas import ChangePasswordRequest, LoginRequest, MessageResponse, TokenResponse
from apps.api.services.auth_service import AuthService, SessionContext
from apps.api.services.user_service_db import UserServiceDB
from core.database.session import get_db_session
from domain.entities.user import UserRole

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
async def login(
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Вход по логину и паролю, выдача JWT токена."""
    user = await UserServiceDB(db).authenticate(credentials.user_id, credentials.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid User ID or Password."
        )
    context = SessionContext(
        user_id=user.user_id, role=UserRole(user.role), session_version=user.session_version or 0
    )
    token = await auth_service.create_token(context.user_id, context.role.value, context.session_version)
    return auth_service.token_response(token, context)


@router.get("/me", response_model=MessageResponse)
async def whoami(context: SessionContext = Depends(require_auth)):
    """Текущий пользователь."""
    return MessageResponse(message=f"{context.user_id} ({context.role.value})")


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    request: ChangePasswordRequest,
    context: SessionContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db_session),
):
    """Смена собственного пароля."""
    changed = await UserServiceDB(db).change_password(
        context.user_id, request.current_password, request.new_password
    )
    if not changed:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Current password is incorrect."
        )
    return MessageResponse(message="Password updated successfully.")
