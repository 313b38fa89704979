"""Balance service - expected vs collected fees per pupil, grade and school."""

from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolfees.models.fee import Fee
from schoolfees.models.grade import Grade
from schoolfees.models.parent import Parent
from schoolfees.models.payment import ApprovalStatus, Payment
from schoolfees.models.pupil import Pupil, PupilStatus
from schoolfees.schemas.report import PaymentStatusView

ZERO = Decimal("0")


def _decimal(value: Any) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def collection_rate(collected: Decimal, expected: Decimal) -> float:
    """Collected as a percentage of expected; 0 when nothing is expected."""
    if expected <= 0:
        return 0.0
    return float(collected / expected * 100)


def payment_status(expected: Decimal, collected: Decimal) -> PaymentStatusView:
    """Classify a pupil by what is left to pay."""
    if expected - collected <= 0:
        return PaymentStatusView.PAID
    if collected > 0:
        return PaymentStatusView.PARTIAL
    return PaymentStatusView.UNPAID


async def _expected_by_grade(db: AsyncSession, term_number: int, year: int) -> dict[UUID, Decimal]:
    result = await db.execute(
        select(Fee.grade_id, func.sum(Fee.amount))
        .where(
            Fee.term_number == term_number,
            Fee.year == year,
            Fee.is_active.is_(True),
        )
        .group_by(Fee.grade_id)
    )
    return {grade_id: _decimal(total) for grade_id, total in result.all()}


async def _collected_by_pupil(
    db: AsyncSession,
    term_number: int,
    year: int,
) -> dict[UUID, tuple[Decimal, date | None]]:
    result = await db.execute(
        select(Payment.pupil_id, func.sum(Payment.amount_paid), func.max(Payment.payment_date))
        .where(
            Payment.term_number == term_number,
            Payment.year == year,
            Payment.is_deleted.is_(False),
            Payment.approval_status == ApprovalStatus.APPROVED.value,
        )
        .group_by(Payment.pupil_id)
    )
    return {pupil_id: (_decimal(total), last_paid) for pupil_id, total, last_paid in result.all()}


async def compute_balances(
    db: AsyncSession,
    term_number: int,
    year: int,
    *,
    grade_id: UUID | None = None,
    pupil_id: UUID | None = None,
) -> list[dict[str, Any]]:
    """Balance rows for active pupils (or one pupil, whatever their status).

    Rows carry ``last_payment_date`` on top of the PupilBalance fields.
    """
    query = (
        select(Pupil, Grade.name, Parent.full_name)
        .outerjoin(Grade, Grade.id == Pupil.grade_id)
        .outerjoin(Parent, Parent.id == Pupil.parent_id)
    )
    if pupil_id:
        query = query.where(Pupil.id == pupil_id)
    else:
        query = query.where(Pupil.status == PupilStatus.ACTIVE.value)
    if grade_id:
        query = query.where(Pupil.grade_id == grade_id)
    query = query.order_by(Pupil.full_name)

    pupils = (await db.execute(query)).all()
    expected_by_grade = await _expected_by_grade(db, term_number, year)
    collected_by_pupil = await _collected_by_pupil(db, term_number, year)

    rows = []
    for pupil, grade_name, parent_name in pupils:
        expected = expected_by_grade.get(pupil.grade_id, ZERO)
        collected, last_paid = collected_by_pupil.get(pupil.id, (ZERO, None))
        rows.append({
            "pupil_id": pupil.id,
            "pupil_name": pupil.full_name,
            "grade_id": pupil.grade_id,
            "grade_name": grade_name,
            "parent_name": parent_name,
            "expected_amount": expected,
            "collected_amount": collected,
            "balance_amount": expected - collected,
            "payment_status": payment_status(expected, collected),
            "last_payment_date": last_paid,
        })
    return rows


async def get_pupil_balances(
    db: AsyncSession,
    term_number: int,
    year: int,
    *,
    grade_id: UUID | None = None,
    status: PaymentStatusView | None = None,
    skip: int = 0,
    limit: int = 100,
) -> tuple[list[dict[str, Any]], int]:
    """Balances of active pupils with filters."""
    rows = await compute_balances(db, term_number, year, grade_id=grade_id)
    if status:
        rows = [row for row in rows if row["payment_status"] == status]
    return rows[skip:skip + limit], len(rows)


async def get_pupil_balance(
    db: AsyncSession,
    pupil_id: UUID,
    term_number: int,
    year: int,
) -> dict[str, Any] | None:
    """Balance of a single pupil."""
    rows = await compute_balances(db, term_number, year, pupil_id=pupil_id)
    return rows[0] if rows else None


async def get_grade_summaries(db: AsyncSession, term_number: int, year: int) -> list[dict[str, Any]]:
    """Per-grade totals, including grades without pupils."""
    grades = (await db.execute(select(Grade).order_by(Grade.name))).scalars().all()
    rows = await compute_balances(db, term_number, year)

    summaries = []
    for grade in grades:
        grade_rows = [row for row in rows if row["grade_id"] == grade.id]
        expected = sum((row["expected_amount"] for row in grade_rows), ZERO)
        collected = sum((row["collected_amount"] for row in grade_rows), ZERO)
        summaries.append({
            "grade_id": grade.id,
            "grade_name": grade.name,
            "total_pupils": len(grade_rows),
            "total_expected": expected,
            "total_collected": collected,
            "total_pending": expected - collected,
            "collection_rate": round(collection_rate(collected, expected), 2),
        })
    return summaries


def summarize(rows: list[dict[str, Any]]) -> dict[str, Any]:
    """School totals over balance rows."""
    expected = sum((row["expected_amount"] for row in rows), ZERO)
    collected = sum((row["collected_amount"] for row in rows), ZERO)
    return {
        "total_pupils": len(rows),
        "total_expected": expected,
        "total_collected": collected,
        "total_pending": expected - collected,
        "collection_rate": round(collection_rate(collected, expected), 2),
    }


async def get_school_summary(db: AsyncSession, term_number: int, year: int) -> dict[str, Any]:
    """Totals across all active pupils."""
    return summarize(await compute_balances(db, term_number, year))


async def get_collection_stats(db: AsyncSession, term_number: int, year: int) -> dict[str, Any]:
    """School totals plus pupil counts by payment status."""
    rows = await compute_balances(db, term_number, year)
    stats = summarize(rows)

    counts = {view: 0 for view in PaymentStatusView}
    for row in rows:
        counts[row["payment_status"]] += 1

    stats.update({
        "paid_pupils": counts[PaymentStatusView.PAID],
        "partial_pupils": counts[PaymentStatusView.PARTIAL],
        "unpaid_pupils": counts[PaymentStatusView.UNPAID],
        "average_payment_per_pupil": (
            (stats["total_collected"] / len(rows)).quantize(Decimal("0.01")) if rows else ZERO
        ),
    })
    return stats
