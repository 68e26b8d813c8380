"""Модель дневного отчета о продажах."""

from sqlalchemy import Column, Integer, String, Numeric, Date, DateTime, Text, Index
from sqlalchemy.sql import func
from domain.entities.base import Base


class SalesEntry(Base):
    """Сверка продаж одного курьера за один день.

    Запись создается один раз после ответа сервиса проверки ожидаемой суммы
    и больше не изменяется.
    """

    __tablename__ = "sales_entries"
    __table_args__ = (
        Index("idx_sales_entries_vehicle_recorded_at", "vehicle_name", "recorded_at"),
        Index("idx_sales_entries_rider_recorded_at", "rider_name", "recorded_at"),
    )

    id = Column(Integer, primary_key=True, index=True)

    # Календарный день отчета (локальный календарь бизнеса) и момент записи
    entry_date = Column(Date, nullable=False, index=True)
    recorded_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    rider_name = Column(String(255), nullable=False)
    vehicle_name = Column(String(255), nullable=False)

    # Показания счетчика и литры
    previous_meter_reading = Column(Numeric(), nullable=False)
    current_meter_reading = Column(Numeric(), nullable=False)
    liters_sold = Column(Numeric(), nullable=False)
    admin_override_liters_sold = Column(Numeric(), nullable=True)
    rate_per_liter = Column(Numeric(), nullable=False)

    # Сборы и расходы за день
    cash_received = Column(Numeric(), nullable=False, default=0)
    online_received = Column(Numeric(), nullable=False, default=0)
    due_collected = Column(Numeric(), nullable=False, default=0)
    new_due_amount = Column(Numeric(), nullable=False, default=0)
    token_money = Column(Numeric(), nullable=False, default=0)
    staff_expense = Column(Numeric(), nullable=False, default=0)
    extra_amount = Column(Numeric(), nullable=False, default=0)

    # Данные для зарплаты
    hours_worked = Column(Numeric(), nullable=False, default=9)
    commission_earned = Column(Numeric(), nullable=False, default=0)

    comment = Column(Text, nullable=True)
    recorded_by = Column(String(255), nullable=False, index=True)

    # Расчетные поля
    total_sale = Column(Numeric(), nullable=False)
    actual_received = Column(Numeric(), nullable=False)
    initial_adjusted_expected = Column(Numeric(), nullable=False)
    ai_adjusted_expected_amount = Column(Numeric(), nullable=False)
    ai_reasoning = Column(Text, nullable=False)
    discrepancy = Column(Numeric(), nullable=False)
    status = Column(String(20), nullable=False)  # Match | Shortage | Overage

    def __repr__(self) -> str:
        return (
            f"<SalesEntry(id={self.id}, date={self.entry_date}, rider='{self.rider_name}', "
            f"status='{self.status}')>"
        )
