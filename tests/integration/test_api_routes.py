"""
Интеграционные тесты API AquaTrack.

Приложение поднимается без lifespan (БД не нужна): сессия БД, сегодняшняя
дата и провайдер проверки ожидаемой суммы подменяются через dependency_overrides.
"""

import dataclasses
from datetime import date, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from apps.api.app import create_app
from apps.api.dependencies import get_adjuster, get_business_today, require_auth
from apps.api.services.auth_service import SessionContext, hash_password
from core.database.session import get_db_session
from domain.entities.rider import Rider
from domain.entities.sales_entry import SalesEntry
from domain.entities.user import User, UserRole
from shared.services.expected_amount import AdjustmentError, AdjustmentResult
from tests.utils.test_helpers import TestDataFactory, make_execute_result

TODAY = date(2025, 5, 10)

ENTRY_FORM = {
    "entry_date": "2025-05-10",
    "rider_name": "Ravi",
    "vehicle_name": "Alpha",
    "previous_meter_reading": "1000",
    "current_meter_reading": "1100",
    "rate_per_liter": "2",
    "cash_received": "150",
    "online_received": "50",
}


def _entity(record):
    values = dataclasses.asdict(record)
    values["status"] = record.status.value
    return SalesEntry(**values)


def _assign_identity(entity):
    entity.id = 42
    entity.recorded_at = datetime(2025, 5, 10, 19, 30)


@pytest.fixture
def db_session():
    session = AsyncMock(spec=AsyncSession)
    session.execute = AsyncMock(return_value=make_execute_result())
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.refresh = AsyncMock(side_effect=_assign_identity)
    session.add = MagicMock()
    session.close = AsyncMock()
    return session


@pytest.fixture
def adjuster():
    adjuster = MagicMock()
    adjuster.adjust = AsyncMock(
        return_value=AdjustmentResult(adjusted_expected_amount=Decimal("200"), reasoning="Looks consistent.")
    )
    return adjuster


@pytest.fixture
def app(db_session, adjuster):
    app = create_app()

    async def override_db():
        yield db_session

    app.dependency_overrides[get_db_session] = override_db
    app.dependency_overrides[get_adjuster] = lambda: adjuster
    app.dependency_overrides[get_business_today] = lambda: TODAY
    return app


def _login_as(app, user_id, role):
    app.dependency_overrides[require_auth] = lambda: SessionContext(user_id=user_id, role=role)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def admin_client(app):
    _login_as(app, "admin", UserRole.ADMIN)
    return TestClient(app)


@pytest.fixture
def leader_client(app):
    _login_as(app, "leader1", UserRole.TEAM_LEADER)
    return TestClient(app)


class TestServiceEndpoints:
    """Служебные эндпоинты и авторизация."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_protected_endpoints_require_token(self, client):
        endpoints = [
            "/api/v1/sales-entries/",
            "/api/v1/vehicles/",
            "/api/v1/riders/",
            "/api/v1/reports/monthly-summary",
            "/api/v1/salary-payments/",
        ]
        for endpoint in endpoints:
            response = client.get(endpoint)
            assert response.status_code == 401, endpoint
            assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_invalid_token(self, client):
        response = client.get("/api/v1/vehicles/", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_login_and_whoami(self, client, db_session):
        user = User(user_id="leader1", password_hash=hash_password("secret1", iterations=1000),
                    role=UserRole.TEAM_LEADER.value)
        db_session.execute.return_value = make_execute_result(scalar=user)

        login = client.post("/api/v1/auth/login", json={"user_id": "leader1", "password": "secret1"})
        assert login.status_code == 200
        token = login.json()["access_token"]
        assert login.json()["role"] == "TeamLeader"

        me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["message"].startswith("leader1")

    def test_login_wrong_password(self, client, db_session):
        user = User(user_id="leader1", password_hash=hash_password("secret1", iterations=1000),
                    role=UserRole.TEAM_LEADER.value)
        db_session.execute.return_value = make_execute_result(scalar=user)

        response = client.post("/api/v1/auth/login", json={"user_id": "leader1", "password": "wrong"})

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid User ID or Password."

    def _login(self, client, db_session, user):
        db_session.execute.return_value = make_execute_result(scalar=user)
        response = client.post("/api/v1/auth/login", json={"user_id": user.user_id, "password": "secret1"})
        assert response.status_code == 200
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    def test_token_of_deleted_user_rejected(self, client, db_session, adjuster):
        leader = User(user_id="leader1", password_hash=hash_password("secret1", iterations=1000),
                      role=UserRole.TEAM_LEADER.value)
        headers = self._login(client, db_session, leader)
        db_session.execute.return_value = make_execute_result(scalar=None)

        response = client.post("/api/v1/sales-entries/", json=ENTRY_FORM, headers=headers)

        assert response.status_code == 401
        adjuster.adjust.assert_not_awaited()
        db_session.add.assert_not_called()

    def test_token_issued_before_password_reset_rejected(self, client, db_session):
        leader = User(user_id="leader1", password_hash=hash_password("secret1", iterations=1000),
                      role=UserRole.TEAM_LEADER.value)
        headers = self._login(client, db_session, leader)
        leader.session_version = 1

        response = client.get("/api/v1/auth/me", headers=headers)

        assert response.status_code == 401

    def test_token_with_changed_role_rejected(self, client, db_session):
        admin = User(user_id="boss", password_hash=hash_password("secret1", iterations=1000),
                     role=UserRole.ADMIN.value)
        headers = self._login(client, db_session, admin)
        admin.role = UserRole.TEAM_LEADER.value

        response = client.get("/api/v1/reports/monthly-summary", headers=headers)

        assert response.status_code == 401

    def test_team_leader_cannot_open_reports(self, leader_client):
        response = leader_client.get("/api/v1/reports/monthly-summary")
        assert response.status_code == 403


class TestSalesEntryRoutes:
    """Сохранение дневного отчета."""

    @pytest.fixture(autouse=True)
    def known_rider(self, db_session):
        db_session.execute.return_value = make_execute_result(
            scalar=Rider(id=1, name="Ravi", per_day_salary=Decimal("900"))
        )

    def test_admin_creates_entry(self, admin_client, db_session):
        response = admin_client.post("/api/v1/sales-entries/", json=ENTRY_FORM)

        assert response.status_code == 201
        body = response.json()
        assert body["id"] == 42
        assert Decimal(body["total_sale"]) == Decimal("200")
        assert Decimal(body["discrepancy"]) == Decimal("0")
        assert body["status"] == "Match"
        assert body["recorded_by"] == "admin"
        db_session.commit.assert_awaited_once()

    def test_team_leader_date_forced_to_today(self, leader_client, db_session):
        form = dict(ENTRY_FORM, entry_date="2025-04-01")

        response = leader_client.post("/api/v1/sales-entries/", json=form)

        assert response.status_code == 201
        assert response.json()["entry_date"] == TODAY.isoformat()
        saved = db_session.add.call_args.args[0]
        assert saved.entry_date == TODAY

    def test_team_leader_cannot_override_liters(self, leader_client, db_session):
        form = dict(ENTRY_FORM, admin_override_liters_sold="120")

        response = leader_client.post("/api/v1/sales-entries/", json=form)

        assert response.status_code == 403
        db_session.add.assert_not_called()

    def test_meter_rule_violation_is_validation_error(self, admin_client, db_session):
        form = dict(ENTRY_FORM, current_meter_reading="900")

        response = admin_client.post("/api/v1/sales-entries/", json=form)

        assert response.status_code == 422
        assert response.json()["error"] == "Validation Error"
        db_session.add.assert_not_called()

    def test_adjustment_failure_saves_nothing(self, admin_client, adjuster, db_session):
        adjuster.adjust.side_effect = AdjustmentError("Yandex GPT HTTP error 500")

        response = admin_client.post("/api/v1/sales-entries/", json=ENTRY_FORM)

        assert response.status_code == 502
        assert response.json()["error"] == "processing failed"
        db_session.add.assert_not_called()
        db_session.commit.assert_not_awaited()

    def test_database_failure_returns_preview(self, admin_client, db_session):
        db_session.commit.side_effect = OperationalError("INSERT", {}, Exception("db down"))

        response = admin_client.post("/api/v1/sales-entries/", json=ENTRY_FORM)

        assert response.status_code == 503
        body = response.json()
        assert "db down" in body["message"]
        assert Decimal(body["preview"]["total_sale"]) == Decimal("200")
        assert body["preview"]["status"] == "Match"

    def test_unknown_vehicle_rejected(self, admin_client, adjuster, db_session):
        response = admin_client.post("/api/v1/sales-entries/", json=dict(ENTRY_FORM, vehicle_name="Omega"))

        assert response.status_code == 400
        assert "Unknown vehicle" in response.json()["message"]
        adjuster.adjust.assert_not_awaited()
        db_session.add.assert_not_called()

    def test_unknown_rider_rejected(self, admin_client, db_session):
        db_session.execute.return_value = make_execute_result(scalar=None)

        response = admin_client.post("/api/v1/sales-entries/", json=dict(ENTRY_FORM, rider_name="Ghost"))

        assert response.status_code == 400
        db_session.add.assert_not_called()

    def test_last_meter_reading_unknown_vehicle(self, admin_client):
        response = admin_client.get("/api/v1/vehicles/Nope/last-meter-reading")
        assert response.status_code == 404


class TestReportRoutes:
    """Отчеты администратора."""

    def test_monthly_summary(self, admin_client, db_session, sample_entries):
        db_session.execute.return_value = make_execute_result(
            scalars_list=[_entity(record) for record in sample_entries]
        )

        response = admin_client.get("/api/v1/reports/monthly-summary", params={"year": 2025, "month": 5})

        assert response.status_code == 200
        body = response.json()
        assert body["unique_days"] == 2
        assert body["entries_count"] == 3
        assert body["available_years"] == [2025]
        assert len(body["chart"]) == 12

    def test_vehicle_report_flags_anomalies(self, admin_client, db_session, sample_entries):
        db_session.execute.return_value = make_execute_result(
            scalars_list=[_entity(record) for record in sample_entries if record.vehicle_name == "Beta"]
        )

        response = admin_client.get("/api/v1/reports/vehicles", params={"vehicle_name": "Beta"})

        assert response.status_code == 200
        [month] = response.json()
        assert month["label"] == "May 2025"
        assert month["anomalies_count"] == 1
        assert month["daily_entries"][0]["is_rate_low"] is True
        assert month["daily_entries"][0]["is_admin_override"] is True

    def test_rider_payroll_unknown_rider(self, admin_client, db_session):
        db_session.execute.return_value = make_execute_result(scalar=None)

        response = admin_client.get("/api/v1/reports/riders/Ghost/payroll", params={"year": 2025, "month": 5})

        assert response.status_code == 404


class TestSalaryPaymentRoutes:
    """Выплаты и автозаполнение."""

    def test_payroll_autofill_without_entries(self, leader_client, db_session):
        rider = Rider(id=1, name="Ravi", per_day_salary=Decimal("900"))
        db_session.execute.side_effect = [
            make_execute_result(scalar=rider),
            make_execute_result(scalars_list=[]),
        ]

        response = leader_client.get(
            "/api/v1/salary-payments/payroll", params={"rider_name": "Ravi", "year": 2025, "month": 2}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["has_data"] is False
        assert body["days_active"] == 0
        assert body["message"]

    def test_payroll_autofill_with_entries(self, admin_client, db_session):
        rider = Rider(id=1, name="Ravi", per_day_salary=Decimal("900"))
        record = TestDataFactory.create_sales_record(
            hours_worked=Decimal("9"), commission_earned=Decimal("100"), discrepancy=Decimal("-200")
        )
        db_session.execute.side_effect = [
            make_execute_result(scalar=rider),
            make_execute_result(scalars_list=[_entity(record)]),
        ]

        response = admin_client.get(
            "/api/v1/salary-payments/payroll", params={"rider_name": "Ravi", "year": 2025, "month": 5}
        )

        assert response.status_code == 200
        assert Decimal(response.json()["net_monthly_earning"]) == Decimal("800")

    def test_create_payment_for_unknown_rider(self, admin_client, db_session):
        db_session.execute.return_value = make_execute_result(scalar=None)

        response = admin_client.post("/api/v1/salary-payments/", json={
            "payment_date": "2025-05-31",
            "rider_name": "Ghost",
            "salary_amount_for_period": "27000",
            "amount_paid": "20000",
        })

        assert response.status_code == 400
        assert "not found" in response.json()["message"]
