"""
API роутер управления тимлидами (только администратор)
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from apps.api.dependencies import require_admin
from apps.api.schemas import MessageResponse, PasswordReset, TeamLeaderCreate, UserResponse
from apps.api.services.auth_service import SessionContext
from apps.api.services.user_service_db import UserServiceDB
from core.database.session import get_db_session

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/team-leaders", response_model=List[UserResponse])
async def list_team_leaders(
    context: SessionContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    """Список тимлидов."""
    return await UserServiceDB(db).list_team_leaders()


@router.post("/team-leaders", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_team_leader(
    user_data: TeamLeaderCreate,
    context: SessionContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    """Добавление тимлида."""
    try:
        return await UserServiceDB(db).create_team_leader(user_data.user_id, user_data.password)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.put("/team-leaders/{user_id}/password", response_model=MessageResponse)
async def reset_team_leader_password(
    user_id: str,
    request: PasswordReset,
    context: SessionContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    """Новый пароль тимлиду."""
    if not await UserServiceDB(db).reset_team_leader_password(user_id, request.new_password):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f'Team Leader "{user_id}" not found.')
    return MessageResponse(message=f'Password for Team Leader "{user_id}" updated successfully.')


@router.delete("/team-leaders/{user_id}", response_model=MessageResponse)
async def delete_team_leader(
    user_id: str,
    context: SessionContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    """Удаление тимлида."""
    if not await UserServiceDB(db).delete_team_leader(user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f'Team Leader "{user_id}" not found.')
    return MessageResponse(message=f'Team Leader "{user_id}" deleted successfully.')
