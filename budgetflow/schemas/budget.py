"""
Pydantic v2 schemas for budget requests and their line items.

Write schemas accept money as ``Decimal``; range checks on quantity and unit
cost are left to ``budgetflow.domain.calculator`` so that every violation
is reported with its line item path. Read schemas expose money as ``float``
like the report schemas do.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from budgetflow.utils.constants import BudgetStatus, BudgetType

_STATUSES = [s.value for s in BudgetStatus]
_TYPES = [t.value for t in BudgetType]


# ---------------------------------------------------------------------------
# Line items
# ---------------------------------------------------------------------------


class LineItemIn(BaseModel):
    """A line item as sent by the budget form.

    Attributes:
        category: Spend category, e.g. "Hardware".
        subcategory: Optional finer category.
        description: What is being bought.
        quantity: Number of units (must be >= 1).
        unit_cost: Cost per unit (must be >= 0).
        notes: Free-text notes.
    """

    category: str | None = Field(default=None, max_length=100)
    subcategory: str | None = Field(default=None, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    quantity: int = Field(default=1, description="Units requested; must be >= 1.")
    unit_cost: Decimal = Field(default=Decimal("0"), description="Cost per unit; must be >= 0.")
    notes: str | None = Field(default=None, max_length=1000)


class LineItemResponse(BaseModel):
    id: int
    category: str | None
    subcategory: str | None
    description: str | None
    quantity: int
    unit_cost: float
    total_amount: float
    notes: str | None

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# Budget write payloads
# ---------------------------------------------------------------------------


class BudgetCreate(BaseModel):
    """Payload for ``POST /api/budgets``. The budget starts as a Draft.

    Drafts may be incomplete; the full rule set runs on submission.
    """

    department: str | None = Field(default=None, max_length=200)
    cost_center: str | None = Field(default=None, max_length=50)
    budget_type: str | None = Field(default=None, description=f"One of {_TYPES}.")
    description: str | None = Field(default=None, max_length=1000)
    justification: str | None = None
    currency: str | None = Field(
        default=None,
        min_length=3,
        max_length=3,
        description="ISO currency code; defaults to the configured currency.",
    )
    period_start: date | None = None
    period_end: date | None = None
    line_items: list[LineItemIn] = Field(default_factory=list)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "department": "Information Technology",
                "cost_center": "IT-001",
                "budget_type": "CAPEX",
                "description": "Laptop refresh for the support team",
                "justification": "Current fleet is out of warranty.",
                "period_start": "2024-01-01",
                "period_end": "2024-03-31",
                "line_items": [
                    {
                        "category": "Hardware",
                        "description": "Laptop",
                        "quantity": 5,
                        "unit_cost": "1200.00",
                    }
                ],
            }
        }
    )


class BudgetUpdate(BaseModel):
    """Payload for ``PUT /api/budgets/{id}`` (the edit event).

    All fields are optional; only supplied fields are modified. When
    ``line_items`` is supplied it replaces the whole collection and the
    amount is recalculated. ``amount`` may only be set directly on a
    budget without line items.
    """

    department: str | None = Field(default=None, max_length=200)
    cost_center: str | None = Field(default=None, max_length=50)
    budget_type: str | None = None
    description: str | None = Field(default=None, max_length=1000)
    justification: str | None = None
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    period_start: date | None = None
    period_end: date | None = None
    amount: Decimal | None = None
    line_items: list[LineItemIn] | None = None


class ReviewRequest(BaseModel):
    """Body of the review decision endpoints.

    Attributes:
        comments: Reviewer comments. Mandatory for reject and
                  request-revision, optional for approve.
    """

    comments: str | None = Field(default=None, max_length=4000)

    model_config = ConfigDict(
        json_schema_extra={"example": {"comments": "Please split hardware and licences."}}
    )


# ---------------------------------------------------------------------------
# Budget read models
# ---------------------------------------------------------------------------


class BudgetResponse(BaseModel):
    """Full budget record including line items.

    Attributes:
        budget_id: Business id, e.g. "BUD-000042".
        status: One of the lifecycle statuses.
        amount: Sum of the line item totals.
    """

    id: int
    budget_id: str
    department: str | None
    cost_center: str | None
    budget_type: str | None
    amount: float
    currency: str
    description: str | None
    justification: str | None
    period_start: date | None
    period_end: date | None
    status: str = Field(..., description=f"One of {_STATUSES}.")
    submitted_by: str | None
    submitted_at: datetime | None
    reviewed_by: str | None
    reviewed_at: datetime | None
    review_comments: str | None
    created_by: str | None
    created_at: datetime
    updated_at: datetime
    line_items: list[LineItemResponse] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class BudgetListResponse(BaseModel):
    """Paginated wrapper returned by ``GET /api/budgets``.

    Attributes:
        rows: The budgets for the requested page, newest first.
        total: Total number of matching budgets (ignoring pagination).
        page: Current page number (1-based).
        page_size: Number of rows per page as requested.
    """

    rows: list[BudgetResponse]
    total: int = Field(..., ge=0, description="Total matching rows before pagination.")
    page: int = Field(..., ge=1)
    page_size: int = Field(..., ge=1)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"rows": [], "total": 12, "page": 1, "page_size": 20}
        }
    )


class FilterOptionsResponse(BaseModel):
    """Distinct values used to populate the budget table dropdowns."""

    departments: list[str]
    cost_centers: list[str]
    statuses: list[str]
    budget_types: list[str]
