"""
Схемы Pydantic для API AquaTrack
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from shared.services.reconciliation_calculator import ReconciliationStatus


def _strip_required(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Поле не может быть пустым")
    return value


# ---------------------------------------------------------------------------
# Дневной отчет
# ---------------------------------------------------------------------------

class SalesEntryCreate(BaseModel):
    """Схема формы дневного отчета."""
    entry_date: Optional[date] = Field(None, description="Дата отчета (по умолчанию сегодня)")
    rider_name: str = Field(..., min_length=1, max_length=255)
    vehicle_name: str = Field(..., min_length=1, max_length=255)
    previous_meter_reading: Decimal = Field(..., ge=0, description="Показание счетчика на начало дня")
    current_meter_reading: Decimal = Field(..., ge=0, description="Показание счетчика на конец дня")
    admin_override_liters_sold: Optional[Decimal] = Field(None, ge=0, description="Литры, заданные администратором")
    rate_per_liter: Decimal = Field(..., ge=0)
    cash_received: Decimal = Field(Decimal("0"), ge=0)
    online_received: Decimal = Field(Decimal("0"), ge=0)
    due_collected: Decimal = Field(Decimal("0"), ge=0)
    new_due_amount: Decimal = Field(Decimal("0"), ge=0)
    token_money: Decimal = Field(Decimal("0"), ge=0)
    staff_expense: Decimal = Field(Decimal("0"), ge=0)
    extra_amount: Decimal = Field(Decimal("0"), ge=0)
    hours_worked: Decimal = Field(Decimal("9"), ge=0, le=24)
    commission_earned: Decimal = Field(Decimal("0"), ge=0)
    comment: Optional[str] = Field(None, max_length=2000)

    @field_validator("rider_name", "vehicle_name")
    @classmethod
    def validate_names(cls, v):
        """Имена без пробелов по краям."""
        return _strip_required(v)

    @model_validator(mode="after")
    def validate_meter_readings(self):
        """Текущее показание не меньше предыдущего, если нет ручного значения литров."""
        has_override = self.admin_override_liters_sold is not None and self.admin_override_liters_sold > 0
        if not has_override and self.current_meter_reading < self.previous_meter_reading:
            raise ValueError("Current meter reading cannot be less than previous meter reading.")
        return self


class SalesEntryResponse(BaseModel):
    """Сохраненный дневной отчет."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    entry_date: date
    recorded_at: Optional[datetime] = None
    rider_name: str
    vehicle_name: str
    previous_meter_reading: Decimal
    current_meter_reading: Decimal
    liters_sold: Decimal
    admin_override_liters_sold: Optional[Decimal] = None
    rate_per_liter: Decimal
    cash_received: Decimal
    online_received: Decimal
    due_collected: Decimal
    new_due_amount: Decimal
    token_money: Decimal
    staff_expense: Decimal
    extra_amount: Decimal
    hours_worked: Decimal
    commission_earned: Decimal
    comment: Optional[str] = None
    recorded_by: str
    total_sale: Decimal
    actual_received: Decimal
    initial_adjusted_expected: Decimal
    ai_adjusted_expected_amount: Decimal
    ai_reasoning: str
    discrepancy: Decimal
    status: ReconciliationStatus


class SalesEntryListResponse(BaseModel):
    entries: List[SalesEntryResponse]
    total: int


class MeterReadingResponse(BaseModel):
    vehicle_name: str
    reading: Decimal


class VehicleListResponse(BaseModel):
    vehicles: List[str]


# ---------------------------------------------------------------------------
# Курьеры
# ---------------------------------------------------------------------------

class RiderCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    per_day_salary: Decimal = Field(..., ge=0, description="Ставка за полный 9-часовой день")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return _strip_required(v)


class RiderUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    per_day_salary: Optional[Decimal] = Field(None, ge=0)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return None if v is None else _strip_required(v)


class RiderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    per_day_salary: Decimal


# ---------------------------------------------------------------------------
# Выплаты зарплаты
# ---------------------------------------------------------------------------

class SalaryPaymentCreate(BaseModel):
    """Схема формы выплаты."""
    payment_date: date
    rider_name: str = Field(..., min_length=1, max_length=255)
    salary_amount_for_period: Decimal = Field(..., ge=0)
    amount_paid: Decimal = Field(..., ge=0)
    deduction_amount: Decimal = Field(Decimal("0"), ge=0)
    advance_payment: Decimal = Field(Decimal("0"), ge=0)
    comment: Optional[str] = Field(None, max_length=2000)

    @field_validator("rider_name")
    @classmethod
    def validate_rider_name(cls, v):
        return _strip_required(v)


class SalaryPaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    payment_date: date
    rider_name: str
    salary_giver_name: str
    salary_amount_for_period: Decimal
    amount_paid: Decimal
    deduction_amount: Decimal
    advance_payment: Decimal
    remaining_amount: Decimal
    comment: Optional[str] = None
    recorded_by: str


class PayrollLineResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    entry_id: Optional[int] = None
    entry_date: date
    vehicle_name: str
    liters_sold: Decimal
    money_collected: Decimal
    token_money: Decimal
    total_sale: Decimal
    hours_worked: Decimal
    base_daily_salary: Decimal
    commission_earned: Decimal
    discrepancy: Decimal
    shortage_deduction: Decimal
    net_earning: Decimal


class PayrollSummaryResponse(BaseModel):
    """Зарплата курьера за месяц (автозаполнение и отчет по курьеру)."""
    model_config = ConfigDict(from_attributes=True)

    rider_name: str
    year: int
    month: int
    per_day_salary: Decimal
    lines: List[PayrollLineResponse]
    total_liters_sold: Decimal
    total_money_collected: Decimal
    total_token_money: Decimal
    total_sales_generated: Decimal
    total_base_salary: Decimal
    total_commission: Decimal
    total_discrepancy: Decimal
    total_shortage_deduction: Decimal
    net_monthly_earning: Decimal
    days_active: int
    has_data: bool
    message: Optional[str] = None


# ---------------------------------------------------------------------------
# Отчеты
# ---------------------------------------------------------------------------

class MonthlyChartPointResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    month: str
    total_sales: Decimal


class MonthlySummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    year: Optional[int] = None
    month: Optional[int] = None
    total_sales: Decimal
    average_daily_sales: Decimal
    total_cash_received: Decimal
    average_daily_cash_received: Decimal
    total_online_received: Decimal
    average_daily_online_received: Decimal
    total_token_money: Decimal
    average_daily_token_money: Decimal
    unique_days: int
    entries_count: int
    chart: List[MonthlyChartPointResponse]
    available_years: List[int] = []


class VehicleDailyLineResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    entry_id: Optional[int] = None
    entry_date: date
    rider_name: str
    initial_reading: Decimal
    final_reading: Decimal
    liters_sold: Decimal
    is_admin_override: bool
    rate_per_liter: Decimal
    is_rate_low: bool
    expected_amount: Decimal
    actual_amount: Decimal
    difference: Decimal


class VehicleMonthResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    vehicle_name: str
    year: int
    month: int
    label: str
    daily_entries: List[VehicleDailyLineResponse]
    total_liters_sold: Decimal
    total_expected_amount: Decimal
    total_actual_amount: Decimal
    total_difference: Decimal
    anomalies_count: int


class CollectorCashResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    recorded_by: str
    year: int
    month: int
    label: str
    total_cash_received: Decimal


class RiderMonthStatsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    rider_name: str
    year: int
    month: int
    label: str
    total_liters_sold: Decimal
    total_money_collected: Decimal
    total_token_money: Decimal
    days_active: int


class RiderMonthlyReportResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    rows: List[RiderMonthStatsResponse]
    overall_daily_average_collection: Decimal


class SalaryPaymentRecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None
    payment_date: date
    rider_name: str
    salary_giver_name: str
    salary_amount_for_period: Decimal
    amount_paid: Decimal
    deduction_amount: Decimal
    advance_payment: Decimal
    remaining_amount: Decimal
    comment: Optional[str] = None
    recorded_by: str


class SalaryHistoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    payments: List[SalaryPaymentRecordResponse]
    total_records: int
    total_amount_paid: Decimal
    total_deductions: Decimal
    total_advance_paid: Decimal


# ---------------------------------------------------------------------------
# Пользователи и авторизация
# ---------------------------------------------------------------------------

class LoginRequest(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user_id: str
    role: str


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6)


class TeamLeaderCreate(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=6)

    @field_validator("user_id")
    @classmethod
    def validate_user_id(cls, v):
        return _strip_required(v)


class PasswordReset(BaseModel):
    new_password: str = Field(..., min_length=6)


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    role: str


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    """Схема для ошибок API."""
    error: str
    message: str
    details: Optional[dict] = None
