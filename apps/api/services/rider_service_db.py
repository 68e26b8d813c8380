"""
Сервис для работы с курьерами через базу данных
"""

from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError

from core.logging.logger import logger
from domain.entities.rider import Rider
from shared.services.reconciliation_calculator import ZERO, to_decimal


class RiderServiceDB:
    """Сервис для работы с курьерами в базе данных."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def get_rider(self, rider_id: int) -> Optional[Rider]:
        """Получает курьера по ID."""
        result = await self.db.execute(select(Rider).where(Rider.id == rider_id))
        return result.scalar_one_or_none()

    async def get_rider_by_name(self, name: str) -> Optional[Rider]:
        """Получает курьера по имени."""
        result = await self.db.execute(select(Rider).where(Rider.name == name.strip()))
        return result.scalar_one_or_none()

    async def list_riders(self) -> List[Rider]:
        """Все курьеры по имени."""
        result = await self.db.execute(select(Rider).order_by(Rider.name))
        return list(result.scalars().all())

    @staticmethod
    def _validate(name: Optional[str], per_day_salary: Optional[Decimal]) -> None:
        if name is not None and not name.strip():
            raise ValueError("Rider name is required.")
        if per_day_salary is not None and to_decimal(per_day_salary, "per_day_salary") < ZERO:
            raise ValueError("Per day salary must be non-negative.")

    async def create_rider(self, name: str, per_day_salary: Decimal) -> Rider:
        """Создает курьера.

        Raises:
            ValueError: пустое имя, отрицательная ставка или имя занято.
        """
        self._validate(name, per_day_salary)
        name = name.strip()
        if await self.get_rider_by_name(name) is not None:
            raise ValueError(f'Rider "{name}" already exists.')

        rider = Rider(name=name, per_day_salary=to_decimal(per_day_salary, "per_day_salary"))
        self.db.add(rider)
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error while creating rider", rider_name=name, error=str(e))
            await self.db.rollback()
            raise
        await self.db.refresh(rider)
        logger.info("Rider created", rider_id=rider.id, rider_name=name)
        return rider

    async def update_rider(
        self,
        rider_id: int,
        name: Optional[str] = None,
        per_day_salary: Optional[Decimal] = None,
    ) -> Optional[Rider]:
        """Переименование и/или смена ставки. None, если курьер не найден."""
        self._validate(name, per_day_salary)
        rider = await self.get_rider(rider_id)
        if rider is None:
            return None

        if name is not None and name.strip() != rider.name:
            existing = await self.get_rider_by_name(name)
            if existing is not None and existing.id != rider.id:
                raise ValueError(f'Rider "{name.strip()}" already exists.')
            rider.name = name.strip()
        if per_day_salary is not None:
            rider.per_day_salary = to_decimal(per_day_salary, "per_day_salary")

        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error while updating rider", rider_id=rider_id, error=str(e))
            await self.db.rollback()
            raise
        await self.db.refresh(rider)
        logger.info("Rider updated", rider_id=rider.id, rider_name=rider.name)
        return rider
