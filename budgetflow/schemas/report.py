"""
Pydantic v2 schemas for the Reports & Analytics endpoints.

Field names follow the chart series the dashboard draws. Money is returned
as ``float`` (two decimals) and the approval rate as a whole percentage.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# KPI summary cards
# ---------------------------------------------------------------------------


class SummaryResponse(BaseModel):
    """Headline figures shown in the report cards.

    Attributes:
        total_count: Number of budgets in scope.
        total_amount: Sum of all budget amounts.
        approved_amount: Sum over Approved budgets.
        pending_amount: Sum over Submitted and Under Review budgets.
        rejected_amount: Sum over Rejected budgets.
        draft_amount: Sum over Draft budgets.
        approval_rate: Approved count / total count as a whole percentage.
    """

    total_count: int = Field(..., ge=0)
    total_amount: float
    approved_count: int = Field(..., ge=0)
    approved_amount: float
    pending_count: int = Field(..., ge=0)
    pending_amount: float
    rejected_count: int = Field(..., ge=0)
    rejected_amount: float
    draft_count: int = Field(..., ge=0)
    draft_amount: float
    approval_rate: int = Field(..., ge=0, le=100, description="Approval rate, 0-100.")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "total_count": 3,
                "total_amount": 175.0,
                "approved_count": 1,
                "approved_amount": 100.0,
                "pending_count": 1,
                "pending_amount": 50.0,
                "rejected_count": 1,
                "rejected_amount": 25.0,
                "draft_count": 0,
                "draft_amount": 0.0,
                "approval_rate": 33,
            }
        }
    )


# ---------------------------------------------------------------------------
# Chart series
# ---------------------------------------------------------------------------


class DepartmentItem(BaseModel):
    department: str
    total: float
    count: int
    approved: float
    pending: float


class MonthItem(BaseModel):
    """One point of the monthly trend line.

    Attributes:
        month: Sortable key, ``YYYY-MM``.
        label: Display label, e.g. ``Jan 2024``.
    """

    month: str
    label: str
    total: float
    count: int
    approved: float


class TypeItem(BaseModel):
    budget_type: str
    amount: float
    count: int


class StatusSliceItem(BaseModel):
    name: str
    value: float
    count: int
    color: str


class StatusCountItem(BaseModel):
    status: str
    count: int
    amount: float


class StatusBreakdownResponse(BaseModel):
    """Status pie slices (zero slices omitted) plus counts for every status."""

    slices: list[StatusSliceItem]
    counts: list[StatusCountItem]
