"""Модель пользователя (администратор или тимлид)."""

import enum

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from domain.entities.base import Base


class UserRole(str, enum.Enum):
    """Роли пользователей."""
    ADMIN = "Admin"
    TEAM_LEADER = "TeamLeader"


class User(Base):
    """Пользователь системы."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.TEAM_LEADER.value)
    # Растет при смене пароля; токены со старой версией отклоняются
    session_version = Column(Integer, nullable=False, default=0, server_default="0")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, user_id='{self.user_id}', role='{self.role}')>"

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value
