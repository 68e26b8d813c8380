"""
Сервис для работы с пользователями (администратор и тимлиды) через базу данных
"""

from typing import List, Optional

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError

from apps.api.services.auth_service import hash_password, verify_password
from core.logging.logger import logger
from domain.entities.user import User, UserRole


class UserServiceDB:
    """Сервис для работы с пользователями в базе данных."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def get_user(self, user_id: str) -> Optional[User]:
        """Получает пользователя по логину."""
        query = select(User).where(User.user_id == user_id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def authenticate(self, user_id: str, password: str) -> Optional[User]:
        """Проверяет логин и пароль. None, если пара неверна."""
        user = await self.get_user(user_id.strip())
        if user is None or not verify_password(password, user.password_hash):
            logger.info("Login failed", user_id=user_id)
            return None
        logger.info("Login successful", user_id=user.user_id, role=user.role)
        return user

    async def _commit(self, action: str, **context) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Database error while {action}", error=str(e), **context)
            await self.db.rollback()
            raise

    async def ensure_default_admin(self, user_id: str, password: Optional[str]) -> bool:
        """Создает администратора по умолчанию, если его нет. True, если создан."""
        if not password:
            logger.warning("Default admin password is not configured, skipping seed")
            return False
        if await self.get_user(user_id) is not None:
            return False

        self.db.add(User(user_id=user_id, password_hash=hash_password(password), role=UserRole.ADMIN.value))
        await self._commit("seeding default admin", user_id=user_id)
        logger.info("Default admin created", user_id=user_id)
        return True

    async def change_password(self, user_id: str, current_password: str, new_password: str) -> bool:
        """Смена собственного пароля. False, если текущий пароль неверен."""
        user = await self.authenticate(user_id, current_password)
        if user is None:
            return False
        user.password_hash = hash_password(new_password)
        user.session_version = (user.session_version or 0) + 1
        await self._commit("changing password", user_id=user_id)
        logger.info("Password changed", user_id=user_id)
        return True

    async def create_team_leader(self, user_id: str, password: str) -> User:
        """Добавляет тимлида.

        Raises:
            ValueError: логин уже занят.
        """
        user_id = user_id.strip()
        if await self.get_user(user_id) is not None:
            raise ValueError(f'User ID "{user_id}" already exists.')

        user = User(user_id=user_id, password_hash=hash_password(password), role=UserRole.TEAM_LEADER.value)
        self.db.add(user)
        await self._commit("creating team leader", user_id=user_id)
        await self.db.refresh(user)
        logger.info("Team leader created", user_id=user_id)
        return user

    async def _get_team_leader(self, user_id: str) -> Optional[User]:
        query = select(User).where(User.user_id == user_id, User.role == UserRole.TEAM_LEADER.value)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def reset_team_leader_password(self, user_id: str, new_password: str) -> bool:
        """Задает новый пароль тимлиду. False, если тимлид не найден."""
        user = await self._get_team_leader(user_id)
        if user is None:
            return False
        user.password_hash = hash_password(new_password)
        user.session_version = (user.session_version or 0) + 1
        await self._commit("resetting team leader password", user_id=user_id)
        logger.info("Team leader password reset", user_id=user_id)
        return True

    async def delete_team_leader(self, user_id: str) -> bool:
        """Удаляет тимлида. Администратора этим методом удалить нельзя."""
        result = await self.db.execute(
            delete(User).where(User.user_id == user_id, User.role == UserRole.TEAM_LEADER.value)
        )
        await self._commit("deleting team leader", user_id=user_id)
        deleted = (result.rowcount or 0) > 0
        if deleted:
            logger.info("Team leader deleted", user_id=user_id)
        return deleted

    async def list_team_leaders(self) -> List[User]:
        """Список тимлидов по логину."""
        query = select(User).where(User.role == UserRole.TEAM_LEADER.value).order_by(User.user_id)
        result = await self.db.execute(query)
        return list(result.scalars().all())
