"""create_aquatrack_tables

Создание таблиц пользователей, курьеров, дневных отчетов и выплат.

Revision ID: 20250601_001
Revises:
Create Date: 2025-06-01 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20250601_001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Создание таблиц AquaTrack."""

    # === 1. USERS ===

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('session_version', sa.Integer(), server_default='0', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_user_id', 'users', ['user_id'], unique=True)

    # === 2. RIDERS ===

    op.create_table(
        'riders',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('per_day_salary', sa.Numeric(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('per_day_salary >= 0', name='ck_riders_per_day_salary_non_negative'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_riders_id', 'riders', ['id'])
    op.create_index('ix_riders_name', 'riders', ['name'], unique=True)

    # === 3. SALES_ENTRIES ===

    op.create_table(
        'sales_entries',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('entry_date', sa.Date(), nullable=False),
        sa.Column('recorded_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('rider_name', sa.String(length=255), nullable=False),
        sa.Column('vehicle_name', sa.String(length=255), nullable=False),
        sa.Column('previous_meter_reading', sa.Numeric(), nullable=False),
        sa.Column('current_meter_reading', sa.Numeric(), nullable=False),
        sa.Column('liters_sold', sa.Numeric(), nullable=False),
        sa.Column('admin_override_liters_sold', sa.Numeric(), nullable=True),
        sa.Column('rate_per_liter', sa.Numeric(), nullable=False),
        sa.Column('cash_received', sa.Numeric(), server_default='0', nullable=False),
        sa.Column('online_received', sa.Numeric(), server_default='0', nullable=False),
        sa.Column('due_collected', sa.Numeric(), server_default='0', nullable=False),
        sa.Column('new_due_amount', sa.Numeric(), server_default='0', nullable=False),
        sa.Column('token_money', sa.Numeric(), server_default='0', nullable=False),
        sa.Column('staff_expense', sa.Numeric(), server_default='0', nullable=False),
        sa.Column('extra_amount', sa.Numeric(), server_default='0', nullable=False),
        sa.Column('hours_worked', sa.Numeric(), server_default='9', nullable=False),
        sa.Column('commission_earned', sa.Numeric(), server_default='0', nullable=False),
        sa.Column('comment', sa.Text(), nullable=True),
        sa.Column('recorded_by', sa.String(length=255), nullable=False),
        sa.Column('total_sale', sa.Numeric(), nullable=False),
        sa.Column('actual_received', sa.Numeric(), nullable=False),
        sa.Column('initial_adjusted_expected', sa.Numeric(), nullable=False),
        sa.Column('ai_adjusted_expected_amount', sa.Numeric(), nullable=False),
        sa.Column('ai_reasoning', sa.Text(), nullable=False),
        sa.Column('discrepancy', sa.Numeric(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_sales_entries_id', 'sales_entries', ['id'])
    op.create_index('ix_sales_entries_entry_date', 'sales_entries', ['entry_date'])
    op.create_index('ix_sales_entries_recorded_by', 'sales_entries', ['recorded_by'])
    op.create_index('idx_sales_entries_vehicle_recorded_at', 'sales_entries', ['vehicle_name', 'recorded_at'])
    op.create_index('idx_sales_entries_rider_recorded_at', 'sales_entries', ['rider_name', 'recorded_at'])

    op.execute("COMMENT ON TABLE sales_entries IS 'Дневные сверки продаж курьеров'")
    op.execute("COMMENT ON COLUMN sales_entries.discrepancy IS 'actual_received - ai_adjusted_expected_amount'")

    # === 4. SALARY_PAYMENTS ===

    op.create_table(
        'salary_payments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('payment_date', sa.Date(), nullable=False),
        sa.Column('rider_name', sa.String(length=255), nullable=False),
        sa.Column('salary_giver_name', sa.String(length=255), nullable=False),
        sa.Column('salary_amount_for_period', sa.Numeric(), nullable=False),
        sa.Column('amount_paid', sa.Numeric(), nullable=False),
        sa.Column('deduction_amount', sa.Numeric(), server_default='0', nullable=False),
        sa.Column('advance_payment', sa.Numeric(), server_default='0', nullable=False),
        sa.Column('remaining_amount', sa.Numeric(), nullable=False),
        sa.Column('comment', sa.Text(), nullable=True),
        sa.Column('recorded_by', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_salary_payments_id', 'salary_payments', ['id'])
    op.create_index('ix_salary_payments_payment_date', 'salary_payments', ['payment_date'])
    op.create_index('ix_salary_payments_rider_name', 'salary_payments', ['rider_name'])


def downgrade() -> None:
    """Удаление таблиц AquaTrack."""
    op.drop_table('salary_payments')
    op.drop_table('sales_entries')
    op.drop_table('riders')
    op.drop_table('users')
