"""
Aggregation engine for dashboards and reports.

Every function takes a collection of budget records (already scoped by the
caller) plus an optional predicate, and returns frozen dataclasses. Results
are recomputed on every call; no accumulator survives between calls, so
calling twice over the same collection yields equal results.

Design notes
------------
- "Pending" means ``Submitted`` or ``Under Review``.
- The approval rate is an exact ``Fraction`` for computation; the integer
  percentage (half-up rounding) is only for display. An empty collection has
  a rate of 0 instead of dividing by zero.
- Month buckets use the record's stored ``created_at`` and are keyed
  ``YYYY-MM`` so that they sort chronologically as strings.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal
from fractions import Fraction
from typing import Any, Callable, Iterable, Sequence

from budgetflow.domain.calculator import ZERO, to_money
from budgetflow.utils.constants import (
    MONTH_LABELS,
    PENDING_STATUSES,
    STATUS_CHART_BUCKET,
    STATUS_CHART_COLORS,
    BudgetStatus,
    BudgetType,
)

Predicate = Callable[[Any], bool]


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BudgetSummary:
    total_count: int
    total_amount: Decimal
    approved_count: int
    approved_amount: Decimal
    pending_count: int
    pending_amount: Decimal
    rejected_count: int
    rejected_amount: Decimal
    draft_count: int
    draft_amount: Decimal
    approval_rate: Fraction
    approval_rate_percent: int


@dataclass(frozen=True)
class DepartmentBreakdown:
    department: str
    total: Decimal
    count: int
    approved: Decimal
    pending: Decimal


@dataclass(frozen=True)
class MonthBucket:
    month: str
    label: str
    total: Decimal
    count: int
    approved: Decimal


@dataclass(frozen=True)
class TypeBreakdown:
    budget_type: str
    amount: Decimal
    count: int


@dataclass(frozen=True)
class StatusSlice:
    name: str
    value: Decimal
    count: int
    color: str


@dataclass(frozen=True)
class StatusCount:
    status: str
    count: int
    amount: Decimal


@dataclass(frozen=True)
class StatusBreakdown:
    slices: tuple[StatusSlice, ...]
    counts: tuple[StatusCount, ...]


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _select(records: Iterable[Any], predicate: Predicate | None) -> list[Any]:
    if predicate is None:
        return list(records)
    return [r for r in records if predicate(r)]


def _status(record: Any) -> BudgetStatus:
    return BudgetStatus(record.status)


def _amount(record: Any) -> Decimal:
    return to_money(record.amount if record.amount is not None else 0)


def _sum(records: Iterable[Any]) -> Decimal:
    total = ZERO
    for r in records:
        total += _amount(r)
    return total


def _percent(rate: Fraction) -> int:
    """Round a 0–1 fraction to a whole percentage, half up."""
    return math.floor(rate * 100 + Fraction(1, 2))


# ---------------------------------------------------------------------------
# Public aggregation functions
# ---------------------------------------------------------------------------


def approval_rate(records: Iterable[Any], predicate: Predicate | None = None) -> Fraction:
    """Return ``count(Approved) / count(all)``; 0 for an empty collection."""
    rows = _select(records, predicate)
    if not rows:
        return Fraction(0)
    approved = sum(1 for r in rows if _status(r) is BudgetStatus.APPROVED)
    return Fraction(approved, len(rows))


def approval_rate_percent(records: Iterable[Any], predicate: Predicate | None = None) -> int:
    """Approval rate as a whole percentage for display (half-up rounding)."""
    return _percent(approval_rate(records, predicate))


def summarize(records: Iterable[Any], predicate: Predicate | None = None) -> BudgetSummary:
    """Compute the headline totals shown on the dashboard and report cards.

    Args:
        records: Budget records.
        predicate: Optional filter applied before aggregating.

    Returns:
        A ``BudgetSummary`` with totals per status group and the approval rate.
    """
    rows = _select(records, predicate)
    approved = [r for r in rows if _status(r) is BudgetStatus.APPROVED]
    pending = [r for r in rows if _status(r) in PENDING_STATUSES]
    rejected = [r for r in rows if _status(r) is BudgetStatus.REJECTED]
    drafts = [r for r in rows if _status(r) is BudgetStatus.DRAFT]
    rate = approval_rate(rows)

    return BudgetSummary(
        total_count=len(rows),
        total_amount=_sum(rows),
        approved_count=len(approved),
        approved_amount=_sum(approved),
        pending_count=len(pending),
        pending_amount=_sum(pending),
        rejected_count=len(rejected),
        rejected_amount=_sum(rejected),
        draft_count=len(drafts),
        draft_amount=_sum(drafts),
        approval_rate=rate,
        approval_rate_percent=_percent(rate),
    )


def group_by_department(
    records: Iterable[Any],
    departments: Sequence[str] | None = None,
    predicate: Predicate | None = None,
) -> list[DepartmentBreakdown]:
    """Total, count, approved and pending amounts per department.

    Args:
        records: Budget records.
        departments: Department names in display order. Departments without
                     any matching budget are omitted. When ``None`` the
                     names are taken from the records, sorted alphabetically.
        predicate: Optional filter applied before grouping.
    """
    rows = _select(records, predicate)
    names = list(departments) if departments is not None else sorted({r.department for r in rows if r.department})

    result: list[DepartmentBreakdown] = []
    for name in names:
        dept_rows = [r for r in rows if r.department == name]
        if not dept_rows:
            continue
        result.append(
            DepartmentBreakdown(
                department=name,
                total=_sum(dept_rows),
                count=len(dept_rows),
                approved=_sum(r for r in dept_rows if _status(r) is BudgetStatus.APPROVED),
                pending=_sum(r for r in dept_rows if _status(r) in PENDING_STATUSES),
            )
        )
    return result


def group_by_month(records: Iterable[Any], predicate: Predicate | None = None) -> list[MonthBucket]:
    """Bucket records by the calendar month of ``created_at``, oldest first."""
    buckets: dict[str, list[Any]] = {}
    for r in _select(records, predicate):
        key = f"{r.created_at.year:04d}-{r.created_at.month:02d}"
        buckets.setdefault(key, []).append(r)

    result: list[MonthBucket] = []
    for key in sorted(buckets):
        rows = buckets[key]
        year, month = key.split("-")
        result.append(
            MonthBucket(
                month=key,
                label=f"{MONTH_LABELS[int(month)]} {year}",
                total=_sum(rows),
                count=len(rows),
                approved=_sum(r for r in rows if _status(r) is BudgetStatus.APPROVED),
            )
        )
    return result


def group_by_type(records: Iterable[Any], predicate: Predicate | None = None) -> list[TypeBreakdown]:
    """Amount and count for each budget type, in ``BudgetType`` order."""
    rows = _select(records, predicate)
    result: list[TypeBreakdown] = []
    for budget_type in BudgetType:
        typed = [r for r in rows if r.budget_type == budget_type.value]
        result.append(
            TypeBreakdown(budget_type=budget_type.value, amount=_sum(typed), count=len(typed))
        )
    return result


def group_by_status(records: Iterable[Any], predicate: Predicate | None = None) -> StatusBreakdown:
    """Chart slices (Approved / Pending / Rejected / Draft) plus per-status counts.

    Slices with a zero amount are dropped, as the status pie does not draw them.
    """
    rows = _select(records, predicate)

    slices: list[StatusSlice] = []
    for bucket, color in STATUS_CHART_COLORS.items():
        members = [r for r in rows if STATUS_CHART_BUCKET[_status(r)] == bucket]
        value = _sum(members)
        if value > 0:
            slices.append(StatusSlice(name=bucket, value=value, count=len(members), color=color))

    counts = tuple(
        StatusCount(
            status=status.value,
            count=sum(1 for r in rows if _status(r) is status),
            amount=_sum(r for r in rows if _status(r) is status),
        )
        for status in BudgetStatus
    )
    return StatusBreakdown(slices=tuple(slices), counts=counts)
