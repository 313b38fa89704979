"""Dashboard service - financial health, grade status, risk exposure and alerts."""

from datetime import date, timedelta
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from schoolfees.core.config import settings
from schoolfees.services import balance as balance_service
from schoolfees.services import term as term_service

ZERO = Decimal("0")

# Thresholds used when nothing is expected for the term
DEFAULT_CRITICAL_RISK = Decimal("2000000")
DEFAULT_HIGH_RISK = Decimal("1000000")


def financial_health(rate: float) -> str:
    """Overall health label for a collection rate."""
    if rate >= 80:
        return "excellent"
    if rate >= 60:
        return "good"
    if rate >= 40:
        return "fair"
    return "poor"


def grade_status(rate: float) -> str:
    """Status label of a grade for its collection rate."""
    if rate >= 80:
        return "excellent"
    if rate >= 50:
        return "good"
    if rate > 0:
        return "at_risk"
    return "critical"


def risk_level(total_outstanding: Decimal, total_expected: Decimal) -> str:
    """Critical above half of expected, High above 30 %, else Medium."""
    if total_expected > 0:
        critical = total_expected * Decimal("0.5")
        high = total_expected * Decimal("0.3")
    else:
        critical = DEFAULT_CRITICAL_RISK
        high = DEFAULT_HIGH_RISK

    if total_outstanding > critical:
        return "Critical"
    if total_outstanding > high:
        return "High"
    return "Medium"


def risk_exposure(
    rows: list[dict[str, Any]],
    total_expected: Decimal,
    today: date | None = None,
) -> dict[str, Any]:
    """Outstanding balances bucketed by how long ago the pupil last paid.

    Pupils who never paid count towards the total only.
    """
    today = today or date.today()
    day30 = today - timedelta(days=30)
    day60 = today - timedelta(days=60)
    day90 = today - timedelta(days=90)

    buckets = {"days30": ZERO, "days60": ZERO, "days90": ZERO}
    total = ZERO
    for row in rows:
        balance = row["balance_amount"]
        if balance <= 0:
            continue
        total += balance
        last_paid = row.get("last_payment_date")
        if last_paid is None:
            continue
        if last_paid >= day30:
            buckets["days30"] += balance
        elif last_paid >= day60:
            buckets["days60"] += balance
        elif last_paid >= day90:
            buckets["days90"] += balance

    return {
        **buckets,
        "total": total,
        "risk_level": risk_level(total, total_expected),
    }


def count_high_risk_pupils(rows: list[dict[str, Any]]) -> int:
    """Pupils owing more than half of their own expected fees."""
    return sum(
        1
        for row in rows
        if row["balance_amount"] > 0
        and row["balance_amount"] > row["expected_amount"] * Decimal("0.5")
    )


def build_alerts(
    *,
    term_number: int,
    year: int,
    total_expected: Decimal,
    outstanding: Decimal,
    rate: float,
    high_risk_pupils: int,
    term_locked: bool,
    currency: str = "ZMW",
) -> list[dict[str, str]]:
    """Actionable alerts for the dashboard."""
    entity = f"Term {term_number} {year}"
    alerts = []

    if outstanding > 0:
        percentage = float(outstanding / total_expected * 100) if total_expected > 0 else 0.0
        if percentage > 40:
            severity = "critical"
        elif percentage > 20:
            severity = "high"
        else:
            severity = "medium"
        alerts.append({
            "id": "overdue-payments",
            "type": "payment_risk",
            "severity": severity,
            "title": "Outstanding balances require attention",
            "description": (
                f"{currency} {round(outstanding):,} ({round(percentage)}%) is still "
                f"outstanding for Term {term_number}."
            ),
            "entity": entity,
        })

    if total_expected > 0 and rate < 50:
        alerts.append({
            "id": "low-collection-rate",
            "type": "collection_rate",
            "severity": "high",
            "title": "Low collection rate detected",
            "description": (
                f"Only {round(rate)}% of expected fees have been collected for Term {term_number}."
            ),
            "entity": entity,
        })

    if high_risk_pupils > 0:
        alerts.append({
            "id": "high-risk-pupils",
            "type": "pupil_risk",
            "severity": "medium",
            "title": "High-risk pupils identified",
            "description": (
                f"{high_risk_pupils} pupils have outstanding balances over 50% of their expected fees."
            ),
            "entity": entity,
        })

    if term_locked:
        alerts.append({
            "id": "term-locked",
            "type": "term_override",
            "severity": "medium",
            "title": "Term is currently locked",
            "description": "Editing pupil financial data is restricted while the term is locked.",
            "entity": f"Term {term_number}",
        })

    return alerts


def _grade_status_rows(grades: list[dict[str, Any]]) -> list[dict[str, Any]]:
    rows = []
    for grade in grades:
        expected = grade["total_expected"]
        collected = grade["total_collected"]
        rate = round(balance_service.collection_rate(collected, expected))
        rows.append({
            "grade_id": grade["grade_id"],
            "grade_name": grade["grade_name"],
            "pupil_count": grade["total_pupils"],
            "expected": max(ZERO, expected),
            "collected": max(ZERO, collected),
            "outstanding": max(ZERO, expected - collected),
            "collection_rate": rate,
            "status": grade_status(rate),
        })
    return rows


async def get_dashboard(
    db: AsyncSession,
    term_number: int,
    year: int,
    today: date | None = None,
) -> dict[str, Any]:
    """Everything the dashboard shows for one term."""
    rows = await balance_service.compute_balances(db, term_number, year)
    summary = balance_service.summarize(rows)
    grades = await balance_service.get_grade_summaries(db, term_number, year)
    term_locked = await term_service.is_term_locked(db, term_number, year)

    total_expected = summary["total_expected"]
    total_collected = summary["total_collected"]
    rate = balance_service.collection_rate(total_collected, total_expected)
    exposure = risk_exposure(rows, total_expected, today)
    high_risk = count_high_risk_pupils(rows)

    graded = [g for g in grades if g["total_expected"] > 0]
    health = {
        "overall_health": financial_health(rate),
        "collection_rate": round(rate, 2),
        "total_revenue": total_collected,
        "outstanding_revenue": summary["total_pending"],
        "revenue_per_pupil": (
            (total_collected / len(rows)).quantize(Decimal("0.01")) if rows else ZERO
        ),
        "at_risk_grades": sum(1 for g in graded if g["collection_rate"] < 50),
        "healthy_grades": sum(1 for g in graded if g["collection_rate"] >= 80),
    }

    return {
        "term_number": term_number,
        "year": year,
        "currency": settings.CURRENCY,
        "summary": summary,
        "health": health,
        "grades": _grade_status_rows(grades),
        "risk_exposure": exposure,
        "high_risk_pupils": high_risk,
        "term_locked": term_locked,
        "alerts": build_alerts(
            term_number=term_number,
            year=year,
            total_expected=total_expected,
            outstanding=exposure["total"],
            rate=rate,
            high_risk_pupils=high_risk,
            term_locked=term_locked,
            currency=settings.CURRENCY,
        ),
    }
