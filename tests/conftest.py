"""
Конфигурация pytest для тестов AquaTrack
Моки сессии БД и образцы записей для unit тестов
"""
import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from sqlalchemy.ext.asyncio import AsyncSession

from tests.utils.test_helpers import TestDataFactory


# =============================================================================
# Моки для unit тестов
# =============================================================================

@pytest.fixture
def mock_db_session():
    """Мок сессии базы данных для unit тестов"""
    session = AsyncMock(spec=AsyncSession)
    session.execute = AsyncMock()
    session.scalar = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.refresh = AsyncMock()
    session.add = MagicMock()
    session.delete = AsyncMock()
    return session


@pytest.fixture
def test_factory():
    """Фабрика тестовых данных"""
    return TestDataFactory


@pytest.fixture
def sample_entries():
    """Записи двух курьеров за май и июнь 2025"""
    return [
        TestDataFactory.create_sales_record(
            id=1, entry_date=date(2025, 5, 1), rider_name="Ravi", vehicle_name="Alpha",
            liters_sold=Decimal("100"), rate_per_liter=Decimal("2"),
            cash_received=Decimal("150"), online_received=Decimal("50"),
            token_money=Decimal("10"), recorded_by="admin",
        ),
        TestDataFactory.create_sales_record(
            id=2, entry_date=date(2025, 5, 1), rider_name="Sunil", vehicle_name="Beta",
            liters_sold=Decimal("50"), rate_per_liter=Decimal("0.5"),
            cash_received=Decimal("25"), online_received=Decimal("0"),
            admin_override_liters_sold=Decimal("50"), recorded_by="leader1",
        ),
        TestDataFactory.create_sales_record(
            id=3, entry_date=date(2025, 5, 2), rider_name="Ravi", vehicle_name="Alpha",
            liters_sold=Decimal("80"), rate_per_liter=Decimal("2"),
            cash_received=Decimal("100"), online_received=Decimal("40"),
            token_money=Decimal("5"), recorded_by="leader1",
        ),
        TestDataFactory.create_sales_record(
            id=4, entry_date=date(2025, 6, 3), rider_name="Ravi", vehicle_name="Alpha",
            liters_sold=Decimal("60"), rate_per_liter=Decimal("2"),
            cash_received=Decimal("120"), online_received=Decimal("0"),
            recorded_by="admin",
        ),
    ]
