"""Report schemas."""

from decimal import Decimal
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class PaymentStatusView(str, Enum):
    """How much of a pupil's expected fees have been collected."""

    PAID = "paid"
    PARTIAL = "partial"
    UNPAID = "unpaid"


# ============== Balances ==============


class PupilBalance(BaseModel):
    """Expected vs collected for one pupil."""

    pupil_id: UUID
    pupil_name: str
    grade_id: UUID | None
    grade_name: str | None
    parent_name: str | None
    expected_amount: Decimal
    collected_amount: Decimal
    balance_amount: Decimal
    payment_status: PaymentStatusView


class PupilBalanceListResponse(BaseModel):
    """Paginated pupil balances."""

    items: list[PupilBalance]
    total: int
    skip: int
    limit: int


class GradeSummary(BaseModel):
    """Expected vs collected for one grade."""

    grade_id: UUID
    grade_name: str
    total_pupils: int
    total_expected: Decimal
    total_collected: Decimal
    total_pending: Decimal
    collection_rate: float


class SchoolSummary(BaseModel):
    """Totals across all grades."""

    total_pupils: int
    total_expected: Decimal
    total_collected: Decimal
    total_pending: Decimal
    collection_rate: float = Field(description="Collected / expected, in percent")


class CollectionStats(SchoolSummary):
    """School summary plus pupil counts by payment status."""

    paid_pupils: int
    partial_pupils: int
    unpaid_pupils: int
    average_payment_per_pupil: Decimal


# ============== Dashboard ==============


class FinancialHealth(BaseModel):
    """Overall financial health indicators."""

    overall_health: str
    collection_rate: float
    total_revenue: Decimal
    outstanding_revenue: Decimal
    revenue_per_pupil: Decimal
    at_risk_grades: int
    healthy_grades: int


class GradeStatus(BaseModel):
    """Collection status of one grade."""

    grade_id: UUID
    grade_name: str
    pupil_count: int
    expected: Decimal
    collected: Decimal
    outstanding: Decimal
    collection_rate: int
    status: str


class RiskExposure(BaseModel):
    """Outstanding balances grouped by age of the last payment."""

    days30: Decimal
    days60: Decimal
    days90: Decimal
    total: Decimal
    risk_level: str


class DashboardAlert(BaseModel):
    """Actionable alert derived from the dashboard figures."""

    id: str
    type: str
    severity: str
    title: str
    description: str
    entity: str


class DashboardResponse(BaseModel):
    """Everything the dashboard needs for one term."""

    term_number: int
    year: int
    currency: str
    summary: SchoolSummary
    health: FinancialHealth
    grades: list[GradeStatus]
    risk_exposure: RiskExposure
    high_risk_pupils: int
    term_locked: bool
    alerts: list[DashboardAlert]
