"""Модель выплаты зарплаты курьеру."""

from sqlalchemy import Column, Integer, String, Numeric, Date, DateTime, Text
from sqlalchemy.sql import func
from domain.entities.base import Base


class SalaryPayment(Base):
    """Выплата зарплаты (факт передачи денег курьеру)."""

    __tablename__ = "salary_payments"

    id = Column(Integer, primary_key=True, index=True)

    payment_date = Column(Date, nullable=False, index=True)
    rider_name = Column(String(255), nullable=False, index=True)
    salary_giver_name = Column(String(255), nullable=False)

    # Суммы
    salary_amount_for_period = Column(Numeric(), nullable=False)
    amount_paid = Column(Numeric(), nullable=False)
    deduction_amount = Column(Numeric(), nullable=False, default=0)
    advance_payment = Column(Numeric(), nullable=False, default=0)
    remaining_amount = Column(Numeric(), nullable=False)

    comment = Column(Text, nullable=True)
    recorded_by = Column(String(255), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self) -> str:
        return (
            f"<SalaryPayment(id={self.id}, rider='{self.rider_name}', "
            f"amount_paid={self.amount_paid}, remaining={self.remaining_amount})>"
        )

    def calculate_remaining_amount(self) -> None:
        """Пересчитать остаток к выплате."""
        self.remaining_amount = self.salary_amount_for_period - self.amount_paid - self.deduction_amount
