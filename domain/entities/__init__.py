"""
Модуль доменных сущностей AquaTrack
"""

# Импортируем модели в правильном порядке
from .base import Base
from .user import User, UserRole
from .rider import Rider
from .sales_entry import SalesEntry
from .salary_payment import SalaryPayment

__all__ = [
    "Base",
    "User",
    "UserRole",
    "Rider",
    "SalesEntry",
    "SalaryPayment",
]
