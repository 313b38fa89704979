"""Report API routes."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolfees.core.database import get_db
from schoolfees.core.deps import require_permission
from schoolfees.core.permissions import Action, Resource
from schoolfees.core.session import ActorSession
from schoolfees.schemas.report import (
    CollectionStats,
    DashboardResponse,
    GradeSummary,
    PaymentStatusView,
    PupilBalance,
    PupilBalanceListResponse,
    SchoolSummary,
)
from schoolfees.services import balance as balance_service
from schoolfees.services import dashboard as dashboard_service

router = APIRouter(prefix="/reports", tags=["Reports"])

ReportReader = Annotated[ActorSession, Depends(require_permission(Resource.REPORTS, Action.READ))]


@router.get("/balances", response_model=PupilBalanceListResponse)
async def list_pupil_balances(
    db: Annotated[AsyncSession, Depends(get_db)],
    session: ReportReader,
    term_number: int = Query(..., ge=1, le=3, description="Term number"),
    year: int = Query(..., ge=2000, le=2100, description="Year"),
    grade_id: UUID | None = Query(None, description="Filter by grade"),
    payment_status: PaymentStatusView | None = Query(None, description="Filter by payment status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
) -> PupilBalanceListResponse:
    """Expected, collected and outstanding fees of every active pupil."""
    rows, total = await balance_service.get_pupil_balances(
        db,
        term_number,
        year,
        grade_id=grade_id,
        status=payment_status,
        skip=skip,
        limit=limit,
    )
    return PupilBalanceListResponse(
        items=[PupilBalance.model_validate(row) for row in rows],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.get("/balances/{pupil_id}", response_model=PupilBalance)
async def get_pupil_balance(
    pupil_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: ReportReader,
    term_number: int = Query(..., ge=1, le=3, description="Term number"),
    year: int = Query(..., ge=2000, le=2100, description="Year"),
) -> PupilBalance:
    """Balance of a single pupil."""
    row = await balance_service.get_pupil_balance(db, pupil_id, term_number, year)
    if row is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Pupil not found",
        )
    return PupilBalance.model_validate(row)


@router.get("/grades", response_model=list[GradeSummary])
async def get_grade_summaries(
    db: Annotated[AsyncSession, Depends(get_db)],
    session: ReportReader,
    term_number: int = Query(..., ge=1, le=3, description="Term number"),
    year: int = Query(..., ge=2000, le=2100, description="Year"),
) -> list[GradeSummary]:
    """Totals per grade."""
    summaries = await balance_service.get_grade_summaries(db, term_number, year)
    return [GradeSummary.model_validate(s) for s in summaries]


@router.get("/summary", response_model=SchoolSummary)
async def get_school_summary(
    db: Annotated[AsyncSession, Depends(get_db)],
    session: ReportReader,
    term_number: int = Query(..., ge=1, le=3, description="Term number"),
    year: int = Query(..., ge=2000, le=2100, description="Year"),
) -> SchoolSummary:
    """Totals across the school."""
    summary = await balance_service.get_school_summary(db, term_number, year)
    return SchoolSummary.model_validate(summary)


@router.get("/collection-stats", response_model=CollectionStats)
async def get_collection_stats(
    db: Annotated[AsyncSession, Depends(get_db)],
    session: ReportReader,
    term_number: int = Query(..., ge=1, le=3, description="Term number"),
    year: int = Query(..., ge=2000, le=2100, description="Year"),
) -> CollectionStats:
    """School totals plus pupil counts by payment status."""
    stats = await balance_service.get_collection_stats(db, term_number, year)
    return CollectionStats.model_validate(stats)


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    db: Annotated[AsyncSession, Depends(get_db)],
    session: ReportReader,
    term_number: int = Query(..., ge=1, le=3, description="Term number"),
    year: int = Query(..., ge=2000, le=2100, description="Year"),
) -> DashboardResponse:
    """
    Dashboard figures for a term.

    Returns financial health, per-grade status, risk exposure by age of the
    last payment, and alerts.
    """
    dashboard = await dashboard_service.get_dashboard(db, term_number, year)
    return DashboardResponse.model_validate(dashboard)
