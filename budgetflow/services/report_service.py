"""
Reports & Analytics service layer.

Fetches the caller's budgets (department scope and filter terms applied by
``budget_service.fetch_budgets``) and hands them to the pure aggregation
engine in ``budgetflow.domain.aggregation``. Every call recomputes from the
current rows; nothing is cached between requests.

Money leaves this module as ``float`` rounded to cents, the way the
dashboard charts consume it.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from budgetflow.domain import aggregation
from budgetflow.domain.filters import BudgetFilter
from budgetflow.models.user_profile import UserProfile
from budgetflow.schemas.report import (
    DepartmentItem,
    MonthItem,
    StatusBreakdownResponse,
    StatusCountItem,
    StatusSliceItem,
    SummaryResponse,
    TypeItem,
)
from budgetflow.services import budget_service, department_service

logger = logging.getLogger(__name__)


def _money(value: Decimal) -> float:
    return float(value)


def get_summary(db: Session, user: UserProfile, criteria: BudgetFilter) -> SummaryResponse:
    """Headline KPI cards: totals per status group and the approval rate."""
    rows = budget_service.fetch_budgets(db, user, criteria)
    s = aggregation.summarize(rows)
    logger.debug("get_summary: %d budgets, approval_rate=%s", s.total_count, s.approval_rate)
    return SummaryResponse(
        total_count=s.total_count,
        total_amount=_money(s.total_amount),
        approved_count=s.approved_count,
        approved_amount=_money(s.approved_amount),
        pending_count=s.pending_count,
        pending_amount=_money(s.pending_amount),
        rejected_count=s.rejected_count,
        rejected_amount=_money(s.rejected_amount),
        draft_count=s.draft_count,
        draft_amount=_money(s.draft_amount),
        approval_rate=s.approval_rate_percent,
    )


def get_by_department(db: Session, user: UserProfile, criteria: BudgetFilter) -> list[DepartmentItem]:
    """Per-department totals, in department catalog order.

    Budgets whose department is no longer in the catalog are appended after
    the catalog departments, alphabetically.
    """
    rows = budget_service.fetch_budgets(db, user, criteria)
    known = department_service.department_names(db)
    extra = sorted({r.department for r in rows if r.department} - set(known))
    items = aggregation.group_by_department(rows, departments=known + extra)
    return [
        DepartmentItem(
            department=i.department,
            total=_money(i.total),
            count=i.count,
            approved=_money(i.approved),
            pending=_money(i.pending),
        )
        for i in items
    ]


def get_by_month(db: Session, user: UserProfile, criteria: BudgetFilter) -> list[MonthItem]:
    rows = budget_service.fetch_budgets(db, user, criteria)
    return [
        MonthItem(
            month=b.month,
            label=b.label,
            total=_money(b.total),
            count=b.count,
            approved=_money(b.approved),
        )
        for b in aggregation.group_by_month(rows)
    ]


def get_by_type(db: Session, user: UserProfile, criteria: BudgetFilter) -> list[TypeItem]:
    rows = budget_service.fetch_budgets(db, user, criteria)
    return [
        TypeItem(budget_type=t.budget_type, amount=_money(t.amount), count=t.count)
        for t in aggregation.group_by_type(rows)
    ]


def get_by_status(db: Session, user: UserProfile, criteria: BudgetFilter) -> StatusBreakdownResponse:
    rows = budget_service.fetch_budgets(db, user, criteria)
    breakdown = aggregation.group_by_status(rows)
    return StatusBreakdownResponse(
        slices=[
            StatusSliceItem(name=s.name, value=_money(s.value), count=s.count, color=s.color)
            for s in breakdown.slices
        ],
        counts=[
            StatusCountItem(status=c.status, count=c.count, amount=_money(c.amount))
            for c in breakdown.counts
        ],
    )
