"""Модель курьера (rider)."""

from sqlalchemy import Column, Integer, String, Numeric, DateTime, CheckConstraint
from sqlalchemy.sql import func
from domain.entities.base import Base


class Rider(Base):
    """Курьер, развозящий воду. Ставка задается за полный 9-часовой день."""

    __tablename__ = "riders"
    __table_args__ = (
        CheckConstraint("per_day_salary >= 0", name="ck_riders_per_day_salary_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, unique=True, index=True)
    per_day_salary = Column(Numeric(), nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self) -> str:
        return f"<Rider(id={self.id}, name='{self.name}', per_day_salary={self.per_day_salary})>"
