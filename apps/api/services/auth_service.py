"""
Сервис авторизации API: хеширование паролей и JWT токены
"""

import hashlib
import hmac
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any

import jwt

from core.config.settings import settings
from core.logging.logger import logger
from domain.entities.user import UserRole

PBKDF2_ALGORITHM = "pbkdf2_sha256"
PBKDF2_ITERATIONS = 260000


def hash_password(password: str, iterations: int = PBKDF2_ITERATIONS) -> str:
    """Хеш пароля в формате pbkdf2_sha256$<итерации>$<соль>$<hex>."""
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), iterations)
    return f"{PBKDF2_ALGORITHM}${iterations}${salt}${digest.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    """Проверка пароля против сохраненного хеша."""
    try:
        algorithm, iterations, salt, expected = password_hash.split("$", 3)
        iterations = int(iterations)
    except (ValueError, AttributeError):
        return False
    if algorithm != PBKDF2_ALGORITHM:
        return False
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), iterations)
    return hmac.compare_digest(digest.hex(), expected)


@dataclass(frozen=True)
class SessionContext:
    """Аутентифицированный пользователь текущего запроса."""

    user_id: str
    role: UserRole
    session_version: int = 0

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_team_leader(self) -> bool:
        return self.role == UserRole.TEAM_LEADER


class AuthService:
    """Сервис авторизации с JWT токенами"""

    def __init__(self, secret_key: Optional[str] = None):
        self.secret_key = secret_key or settings.secret_key
        self.algorithm = settings.jwt_algorithm
        self.token_expire_minutes = settings.jwt_expire_minutes

    async def create_token(self, user_id: str, role: str, session_version: int = 0) -> str:
        """Создание JWT токена для пользователя"""
        now = datetime.now(timezone.utc)
        payload = {
            "sub": user_id,
            "role": role,
            "ver": session_version,
            "exp": now + timedelta(minutes=self.token_expire_minutes),
            "iat": now,
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    async def verify_token(self, token: str) -> Optional[SessionContext]:
        """Проверка и декодирование JWT токена"""
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
            return SessionContext(
                user_id=payload["sub"],
                role=UserRole(payload["role"]),
                session_version=int(payload.get("ver", 0)),
            )
        except jwt.ExpiredSignatureError:
            logger.info("Expired token rejected")
            return None
        except jwt.InvalidTokenError:
            logger.warning("Invalid token rejected")
            return None
        except (KeyError, TypeError, ValueError):
            logger.warning("Token payload is malformed")
            return None

    def token_response(self, token: str, context: SessionContext) -> Dict[str, Any]:
        return {
            "access_token": token,
            "token_type": "bearer",
            "expires_in": self.token_expire_minutes * 60,
            "user_id": context.user_id,
            "role": context.role.value,
        }
