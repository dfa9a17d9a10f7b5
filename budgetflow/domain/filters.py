"""
Filter / search predicate builder and business-id helpers.

A ``BudgetFilter`` holds the optional terms a table or report screen
exposes. ``build_predicate`` folds the active terms into one callable;
inactive terms (``None`` or empty string) always match, so filtering is
opt-in per field.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Iterable

from budgetflow.utils.constants import BUSINESS_ID_DIGITS

Predicate = Callable[[Any], bool]

# Fields matched by the free-text search box
SEARCH_FIELDS: tuple[str, ...] = ("budget_id", "department", "description")


@dataclass(frozen=True)
class BudgetFilter:
    """Optional filter terms combined with logical AND.

    Attributes:
        search_query: Case-insensitive substring matched against the
                      business id, department name, and description.
        status: Exact status match.
        department: Exact department name match.
        budget_type: Exact budget type match (``OPEX`` / ``CAPEX``).
        date_from: Inclusive lower bound on ``created_at`` (date part).
        date_to: Inclusive upper bound on ``created_at`` (date part).
    """

    search_query: str | None = None
    status: str | None = None
    department: str | None = None
    budget_type: str | None = None
    date_from: date | None = None
    date_to: date | None = None

    @property
    def is_empty(self) -> bool:
        return not any((
            self.search_query, self.status, self.department,
            self.budget_type, self.date_from, self.date_to,
        ))


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def build_predicate(criteria: BudgetFilter) -> Predicate:
    """Return a predicate that is true when every active term of *criteria* matches."""
    checks: list[Predicate] = []

    if criteria.search_query:
        needle = criteria.search_query.lower()
        checks.append(
            lambda r: any(needle in _text(getattr(r, f, None)).lower() for f in SEARCH_FIELDS)
        )
    if criteria.status:
        wanted_status = criteria.status
        checks.append(lambda r: _text(r.status) == wanted_status)
    if criteria.department:
        wanted_department = criteria.department
        checks.append(lambda r: r.department == wanted_department)
    if criteria.budget_type:
        wanted_type = criteria.budget_type
        checks.append(lambda r: _text(r.budget_type) == wanted_type)
    if criteria.date_from is not None:
        lower = _as_date(criteria.date_from)
        checks.append(lambda r: r.created_at is not None and _as_date(r.created_at) >= lower)
    if criteria.date_to is not None:
        upper = _as_date(criteria.date_to)
        checks.append(lambda r: r.created_at is not None and _as_date(r.created_at) <= upper)

    def predicate(record: Any) -> bool:
        return all(check(record) for check in checks)

    return predicate


def filter_records(records: Iterable[Any], criteria: BudgetFilter) -> list[Any]:
    """Return the records matching *criteria*, preserving input order."""
    predicate = build_predicate(criteria)
    return [r for r in records if predicate(r)]


def list_distinct_values(records: Iterable[Any], field: str) -> set[str]:
    """Distinct non-empty values of *field*, used to populate filter dropdowns."""
    values: set[str] = set()
    for r in records:
        value = _text(getattr(r, field, None))
        if value:
            values.add(value)
    return values


# ---------------------------------------------------------------------------
# Business ids
# ---------------------------------------------------------------------------


def format_business_id(sequence: int, prefix: str = "BUD") -> str:
    """``format_business_id(42) == "BUD-000042"``."""
    return f"{prefix}-{sequence:0{BUSINESS_ID_DIGITS}d}"


def next_business_id(existing_ids: Iterable[str | None], prefix: str = "BUD") -> str:
    """Return the id after the highest numeric ``{prefix}-nnnnnn`` in *existing_ids*.

    Ids that do not follow the pattern are ignored. The store's unique
    constraint remains the source of truth under concurrent creation.
    """
    head = f"{prefix}-"
    max_seq = 0
    for business_id in existing_ids:
        if business_id and business_id.startswith(head):
            tail = business_id[len(head):]
            if tail.isdigit():
                max_seq = max(max_seq, int(tail))
    return format_business_id(max_seq + 1, prefix)
