"""Tests for Reports API."""

import uuid
from datetime import date
from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from schoolfees.models.fee import Fee
from schoolfees.models.grade import Grade
from schoolfees.models.parent import Parent
from schoolfees.models.payment import ApprovalStatus, Payment
from schoolfees.models.pupil import Pupil, PupilStatus
from tests.conftest import auth_header

TERM = {"term_number": 1, "year": 2025}


# ============== Fixtures ==============


@pytest.fixture
async def second_pupil(db: AsyncSession, grade: Grade, parent: Parent) -> Pupil:
    """Second active pupil in ``grade``."""
    pupil = Pupil(full_name="Peter Banda", grade_id=grade.id, parent_id=parent.id)
    db.add(pupil)
    await db.commit()
    await db.refresh(pupil)
    return pupil


@pytest.fixture
async def inactive_pupil(db: AsyncSession, grade: Grade) -> Pupil:
    """Pupil who left the school."""
    pupil = Pupil(full_name="Ruth Phiri", grade_id=grade.id, status=PupilStatus.INACTIVE)
    db.add(pupil)
    await db.commit()
    await db.refresh(pupil)
    return pupil


@pytest.fixture
async def term_data(
    db: AsyncSession,
    grade: Grade,
    pupil: Pupil,
    second_pupil: Pupil,
    inactive_pupil: Pupil,
) -> dict:
    """
    Term 1 2025 of Grade 1:

    - fees: 1000 active, 500 inactive
    - John Banda paid 1000 (plus a term 2 payment)
    - Peter Banda paid 300, a 200 payment is waiting for deletion approval
    - Ruth Phiri is inactive
    """
    empty_grade = Grade(name="Grade 2")
    db.add(empty_grade)
    await db.flush()

    db.add_all([
        Fee(grade_id=grade.id, amount=Decimal("1000"), term_number=1, year=2025),
        Fee(grade_id=grade.id, amount=Decimal("500"), term_number=1, year=2025, is_active=False),
        Fee(grade_id=empty_grade.id, amount=Decimal("800"), term_number=1, year=2025),
        Payment(pupil_id=pupil.id, amount_paid=Decimal("1000"), payment_date=date.today(), term_number=1, year=2025),
        Payment(pupil_id=pupil.id, amount_paid=Decimal("400"), payment_date=date.today(), term_number=2, year=2025),
        Payment(
            pupil_id=second_pupil.id,
            amount_paid=Decimal("300"),
            payment_date=date.today(),
            term_number=1,
            year=2025,
        ),
        Payment(
            pupil_id=second_pupil.id,
            amount_paid=Decimal("200"),
            payment_date=date.today(),
            term_number=1,
            year=2025,
            is_deleted=True,
            approval_status=ApprovalStatus.PENDING_APPROVAL,
            deletion_reason="Duplicate entry",
        ),
    ])
    await db.commit()
    return {"empty_grade": empty_grade}


# ============== Balances ==============


class TestPupilBalances:
    """Tests for GET /reports/balances."""

    async def test_balances(self, client: AsyncClient, school_admin_token, term_data):
        """Test balances of active pupils only."""
        response = await client.get(
            "/api/v1/reports/balances",
            headers=auth_header(school_admin_token),
            params=TERM,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        by_name = {item["pupil_name"]: item for item in data["items"]}
        assert set(by_name) == {"John Banda", "Peter Banda"}

        john = by_name["John Banda"]
        assert float(john["expected_amount"]) == 1000.0
        assert float(john["collected_amount"]) == 1000.0
        assert float(john["balance_amount"]) == 0.0
        assert john["payment_status"] == "paid"
        assert john["grade_name"] == "Grade 1"
        assert john["parent_name"] == "Mary Banda"

        peter = by_name["Peter Banda"]
        assert float(peter["collected_amount"]) == 300.0
        assert float(peter["balance_amount"]) == 700.0
        assert peter["payment_status"] == "partial"

    async def test_filter_by_status(self, client: AsyncClient, school_admin_token, term_data):
        """Test filtering balances by payment status."""
        response = await client.get(
            "/api/v1/reports/balances",
            headers=auth_header(school_admin_token),
            params={**TERM, "payment_status": "partial"},
        )

        data = response.json()
        assert data["total"] == 1
        assert data["items"][0]["pupil_name"] == "Peter Banda"

    async def test_unpaid_when_nothing_paid(self, client: AsyncClient, school_admin_token, term_data):
        """Test pupils without payments in a term are unpaid."""
        response = await client.get(
            "/api/v1/reports/balances",
            headers=auth_header(school_admin_token),
            params={"term_number": 1, "year": 2025, "payment_status": "unpaid"},
        )

        assert response.json()["total"] == 0

    async def test_pupil_balance(self, client: AsyncClient, school_admin_token, term_data, inactive_pupil):
        """Test the balance of a single pupil, whatever their status."""
        response = await client.get(
            f"/api/v1/reports/balances/{inactive_pupil.id}",
            headers=auth_header(school_admin_token),
            params=TERM,
        )

        assert response.status_code == 200
        data = response.json()
        assert float(data["balance_amount"]) == 1000.0
        assert data["payment_status"] == "unpaid"

    async def test_pupil_balance_not_found(self, client: AsyncClient, school_admin_token):
        """Test balance of an unknown pupil."""
        response = await client.get(
            f"/api/v1/reports/balances/{uuid.uuid4()}",
            headers=auth_header(school_admin_token),
            params=TERM,
        )

        assert response.status_code == 404

    async def test_term_is_required(self, client: AsyncClient, school_admin_token):
        """Test reports need a term."""
        response = await client.get("/api/v1/reports/balances", headers=auth_header(school_admin_token))

        assert response.status_code == 422

    async def test_no_role_forbidden(self, client: AsyncClient, no_role_token):
        """Test a user without role cannot read reports."""
        response = await client.get(
            "/api/v1/reports/balances",
            headers=auth_header(no_role_token),
            params=TERM,
        )

        assert response.status_code == 403


# ============== Summaries ==============


class TestSummaries:
    """Tests for grade and school summaries."""

    async def test_grade_summaries(self, client: AsyncClient, school_admin_token, term_data):
        """Test per-grade totals include grades without pupils."""
        response = await client.get(
            "/api/v1/reports/grades",
            headers=auth_header(school_admin_token),
            params=TERM,
        )

        assert response.status_code == 200
        grades = response.json()
        assert [g["grade_name"] for g in grades] == ["Grade 1", "Grade 2"]

        grade_1, grade_2 = grades
        assert grade_1["total_pupils"] == 2
        assert float(grade_1["total_expected"]) == 2000.0
        assert float(grade_1["total_collected"]) == 1300.0
        assert float(grade_1["total_pending"]) == 700.0
        assert grade_1["collection_rate"] == 65.0

        assert grade_2["total_pupils"] == 0
        assert float(grade_2["total_expected"]) == 0.0
        assert grade_2["collection_rate"] == 0.0

    async def test_school_summary(self, client: AsyncClient, director_token, term_data):
        """Test school totals."""
        response = await client.get(
            "/api/v1/reports/summary",
            headers=auth_header(director_token),
            params=TERM,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["total_pupils"] == 2
        assert float(data["total_expected"]) == 2000.0
        assert float(data["total_collected"]) == 1300.0
        assert float(data["total_pending"]) == 700.0
        assert data["collection_rate"] == 65.0

    async def test_empty_term(self, client: AsyncClient, director_token, term_data):
        """Test a term without fees has a zero collection rate."""
        response = await client.get(
            "/api/v1/reports/summary",
            headers=auth_header(director_token),
            params={"term_number": 3, "year": 2025},
        )

        data = response.json()
        assert float(data["total_expected"]) == 0.0
        assert data["collection_rate"] == 0.0

    async def test_collection_stats(self, client: AsyncClient, school_admin_token, term_data):
        """Test pupil counts by payment status."""
        response = await client.get(
            "/api/v1/reports/collection-stats",
            headers=auth_header(school_admin_token),
            params=TERM,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["paid_pupils"] == 1
        assert data["partial_pupils"] == 1
        assert data["unpaid_pupils"] == 0
        assert float(data["average_payment_per_pupil"]) == 650.0

    async def test_rejected_deletion_counts_again(
        self, client: AsyncClient, director_token, term_data, second_pupil
    ):
        """Test a restored payment counts towards the balance again."""
        pending = await client.get("/api/v1/payments/pending-deletions", headers=auth_header(director_token))
        payment_id = pending.json()[0]["payment_id"]
        await client.post(
            f"/api/v1/payments/{payment_id}/reject-deletion",
            headers=auth_header(director_token),
            json={"reason": "Payment is genuine"},
        )

        response = await client.get(
            f"/api/v1/reports/balances/{second_pupil.id}",
            headers=auth_header(director_token),
            params=TERM,
        )

        assert float(response.json()["collected_amount"]) == 500.0


# ============== Dashboard ==============


class TestDashboard:
    """Tests for GET /reports/dashboard."""

    async def test_dashboard(self, client: AsyncClient, director_token, term_data):
        """Test dashboard figures for a term."""
        response = await client.get(
            "/api/v1/reports/dashboard",
            headers=auth_header(director_token),
            params=TERM,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["currency"] == "ZMW"
        assert data["term_locked"] is False

        health = data["health"]
        assert health["overall_health"] == "good"
        assert health["collection_rate"] == 65.0
        assert float(health["total_revenue"]) == 1300.0
        assert float(health["outstanding_revenue"]) == 700.0
        assert health["at_risk_grades"] == 0
        assert health["healthy_grades"] == 0

        statuses = {g["grade_name"]: g["status"] for g in data["grades"]}
        assert statuses == {"Grade 1": "good", "Grade 2": "critical"}

        risk = data["risk_exposure"]
        assert float(risk["days30"]) == 700.0
        assert float(risk["total"]) == 700.0
        assert risk["risk_level"] == "High"

        assert data["high_risk_pupils"] == 1

    async def test_dashboard_alerts(self, client: AsyncClient, director_token, term_data):
        """Test alerts raised for outstanding balances and high-risk pupils."""
        response = await client.get(
            "/api/v1/reports/dashboard",
            headers=auth_header(director_token),
            params=TERM,
        )

        alerts = {a["id"]: a for a in response.json()["alerts"]}
        assert set(alerts) == {"overdue-payments", "high-risk-pupils"}
        assert alerts["overdue-payments"]["severity"] == "high"
        assert alerts["overdue-payments"]["description"] == "ZMW 700 (35%) is still outstanding for Term 1."

    async def test_dashboard_locked_term(self, client: AsyncClient, director_token, term_data):
        """Test a locked term raises an alert."""
        await client.post("/api/v1/terms/lock", headers=auth_header(director_token), json=TERM)

        response = await client.get(
            "/api/v1/reports/dashboard",
            headers=auth_header(director_token),
            params=TERM,
        )

        data = response.json()
        assert data["term_locked"] is True
        locked = [a for a in data["alerts"] if a["id"] == "term-locked"]
        assert locked[0]["entity"] == "Term 1"
