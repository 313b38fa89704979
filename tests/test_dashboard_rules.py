"""Tests for the dashboard and balance heuristics."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from schoolfees.schemas.report import PaymentStatusView
from schoolfees.services.balance import collection_rate, payment_status
from schoolfees.services.dashboard import (
    build_alerts,
    count_high_risk_pupils,
    financial_health,
    grade_status,
    risk_exposure,
    risk_level,
)

TODAY = date(2025, 6, 30)


def row(expected: str, collected: str, last_paid: date | None = None) -> dict:
    expected_amount = Decimal(expected)
    collected_amount = Decimal(collected)
    return {
        "expected_amount": expected_amount,
        "collected_amount": collected_amount,
        "balance_amount": expected_amount - collected_amount,
        "last_payment_date": last_paid,
    }


class TestCollectionRate:
    """Tests for collection_rate."""

    def test_rate(self):
        assert collection_rate(Decimal("250"), Decimal("1000")) == 25.0

    def test_nothing_expected(self):
        """Test the rate is 0 when nothing is expected."""
        assert collection_rate(Decimal("100"), Decimal("0")) == 0.0


class TestPaymentStatus:
    """Tests for pupil payment status."""

    @pytest.mark.parametrize(
        "expected,collected,status",
        [
            ("1000", "1000", PaymentStatusView.PAID),
            ("1000", "1200", PaymentStatusView.PAID),
            ("0", "0", PaymentStatusView.PAID),
            ("1000", "1", PaymentStatusView.PARTIAL),
            ("1000", "0", PaymentStatusView.UNPAID),
        ],
    )
    def test_status(self, expected, collected, status):
        assert payment_status(Decimal(expected), Decimal(collected)) == status


class TestHealthAndGradeStatus:
    """Tests for the label thresholds."""

    @pytest.mark.parametrize(
        "rate,label",
        [(100, "excellent"), (80, "excellent"), (79.9, "good"), (60, "good"), (40, "fair"), (39, "poor"), (0, "poor")],
    )
    def test_financial_health(self, rate, label):
        assert financial_health(rate) == label

    @pytest.mark.parametrize(
        "rate,label",
        [(80, "excellent"), (50, "good"), (49, "at_risk"), (1, "at_risk"), (0, "critical")],
    )
    def test_grade_status(self, rate, label):
        assert grade_status(rate) == label


class TestRiskExposure:
    """Tests for risk level and aging buckets."""

    @pytest.mark.parametrize(
        "outstanding,expected,level",
        [
            ("600", "1000", "Critical"),
            ("500", "1000", "High"),
            ("301", "1000", "High"),
            ("300", "1000", "Medium"),
            ("2000001", "0", "Critical"),
            ("1500000", "0", "High"),
            ("1000000", "0", "Medium"),
        ],
    )
    def test_risk_level(self, outstanding, expected, level):
        assert risk_level(Decimal(outstanding), Decimal(expected)) == level

    def test_buckets_by_last_payment(self):
        """Test balances are bucketed by age of the last payment."""
        rows = [
            row("1000", "500", TODAY - timedelta(days=10)),
            row("1000", "400", TODAY - timedelta(days=30)),
            row("1000", "300", TODAY - timedelta(days=45)),
            row("1000", "200", TODAY - timedelta(days=75)),
            row("1000", "100", TODAY - timedelta(days=120)),
            row("1000", "0"),
            row("1000", "1000", TODAY),
        ]

        exposure = risk_exposure(rows, Decimal("7000"), TODAY)

        assert exposure["days30"] == Decimal("1100")
        assert exposure["days60"] == Decimal("700")
        assert exposure["days90"] == Decimal("800")
        assert exposure["total"] == Decimal("4500")
        assert exposure["risk_level"] == "Critical"

    def test_high_risk_uses_own_expected(self):
        """Test pupils are flagged against their own expected fees."""
        rows = [
            row("1000", "400"),  # owes 600 of 1000
            row("1000", "500"),  # owes exactly half
            row("200", "0"),  # owes all of 200
            row("1000", "1000"),
        ]

        assert count_high_risk_pupils(rows) == 2


class TestAlerts:
    """Tests for dashboard alerts."""

    def alerts(self, **overrides):
        params = {
            "term_number": 1,
            "year": 2025,
            "total_expected": Decimal("1000"),
            "outstanding": Decimal("0"),
            "rate": 100.0,
            "high_risk_pupils": 0,
            "term_locked": False,
        }
        params.update(overrides)
        return {a["id"]: a for a in build_alerts(**params)}

    def test_no_alerts(self):
        assert self.alerts() == {}

    @pytest.mark.parametrize(
        "outstanding,severity",
        [("500", "critical"), ("300", "high"), ("200", "medium"), ("10", "medium")],
    )
    def test_outstanding_severity(self, outstanding, severity):
        alerts = self.alerts(outstanding=Decimal(outstanding), rate=90.0)
        assert alerts["overdue-payments"]["severity"] == severity

    def test_outstanding_description(self):
        alerts = self.alerts(outstanding=Decimal("1500"), total_expected=Decimal("5000"), rate=70.0)
        assert alerts["overdue-payments"]["description"] == "ZMW 1,500 (30%) is still outstanding for Term 1."

    def test_low_collection_rate(self):
        alerts = self.alerts(rate=49.0, outstanding=Decimal("510"))
        assert alerts["low-collection-rate"]["severity"] == "high"

    def test_low_collection_rate_needs_expectations(self):
        alerts = self.alerts(rate=0.0, total_expected=Decimal("0"))
        assert "low-collection-rate" not in alerts

    def test_high_risk_pupils(self):
        alerts = self.alerts(high_risk_pupils=3)
        assert alerts["high-risk-pupils"]["description"].startswith("3 pupils")

    def test_term_locked(self):
        alerts = self.alerts(term_locked=True)
        assert alerts["term-locked"]["entity"] == "Term 1"
