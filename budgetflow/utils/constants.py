"""
Application-wide constants for the BudgetFlow system.

Defines the closed domain enumerations (budget status, budget type, user
role, lifecycle event), the permission tables keyed by them, and the
business-rule constants used across routers, services, and the domain core.

Every lookup table keyed by an enumeration is checked for full coverage at
import time, so adding a member without updating its tables fails fast.
"""

from __future__ import annotations

from enum import Enum
from typing import Final, Mapping


class BudgetStatus(str, Enum):
    """Lifecycle state of a budget request."""

    DRAFT = "Draft"
    SUBMITTED = "Submitted"
    UNDER_REVIEW = "Under Review"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    REVISION_REQUIRED = "Revision Required"


class BudgetType(str, Enum):
    """Operating vs. capital expenditure classification."""

    OPEX = "OPEX"
    CAPEX = "CAPEX"


class Role(str, Enum):
    """User roles. ``finance_team`` and ``finance_manager`` review budgets."""

    ADMIN = "admin"
    FINANCE_TEAM = "finance_team"
    FINANCE_MANAGER = "finance_manager"
    DEPARTMENT_USER = "department_user"
    DEPARTMENT_MANAGER = "department_manager"
    VIEW_ONLY = "view_only"


class LifecycleEvent(str, Enum):
    """Events that drive budget status transitions."""

    SUBMIT = "submit"
    START_REVIEW = "start_review"
    APPROVE = "approve"
    REJECT = "reject"
    REQUEST_REVISION = "request_revision"
    EDIT = "edit"


def ensure_exhaustive(table: Mapping, enum_cls: type[Enum], name: str) -> None:
    """Raise ``RuntimeError`` unless *table* has a key for every member of *enum_cls*."""
    missing = set(enum_cls) - set(table)
    if missing:
        raise RuntimeError(
            f"{name} is missing entries for: {sorted(m.value for m in missing)}"
        )


# ---------------------------------------------------------------------------
# Status groupings
# ---------------------------------------------------------------------------

TERMINAL_STATUSES: Final[frozenset[BudgetStatus]] = frozenset({
    BudgetStatus.APPROVED,
    BudgetStatus.REJECTED,
})

# "Pending" in dashboards and reports means waiting on a reviewer
PENDING_STATUSES: Final[frozenset[BudgetStatus]] = frozenset({
    BudgetStatus.SUBMITTED,
    BudgetStatus.UNDER_REVIEW,
})

# Chart bucket for each status in the status breakdown series
STATUS_CHART_BUCKET: Final[dict[BudgetStatus, str | None]] = {
    BudgetStatus.DRAFT: "Draft",
    BudgetStatus.SUBMITTED: "Pending",
    BudgetStatus.UNDER_REVIEW: "Pending",
    BudgetStatus.APPROVED: "Approved",
    BudgetStatus.REJECTED: "Rejected",
    BudgetStatus.REVISION_REQUIRED: None,
}
ensure_exhaustive(STATUS_CHART_BUCKET, BudgetStatus, "STATUS_CHART_BUCKET")

STATUS_CHART_COLORS: Final[dict[str, str]] = {
    "Approved": "#22c55e",
    "Pending": "#f59e0b",
    "Rejected": "#ef4444",
    "Draft": "#6b7280",
}

# ---------------------------------------------------------------------------
# Role permissions
# ---------------------------------------------------------------------------

ROLE_LABELS: Final[dict[Role, str]] = {
    Role.ADMIN: "Administrator",
    Role.FINANCE_TEAM: "Finance Team",
    Role.FINANCE_MANAGER: "Finance Manager",
    Role.DEPARTMENT_USER: "Department User",
    Role.DEPARTMENT_MANAGER: "Department Manager",
    Role.VIEW_ONLY: "View Only",
}
ensure_exhaustive(ROLE_LABELS, Role, "ROLE_LABELS")

CAN_AUTHOR: Final[dict[Role, bool]] = {
    Role.ADMIN: True,
    Role.FINANCE_TEAM: False,
    Role.FINANCE_MANAGER: False,
    Role.DEPARTMENT_USER: True,
    Role.DEPARTMENT_MANAGER: True,
    Role.VIEW_ONLY: False,
}
ensure_exhaustive(CAN_AUTHOR, Role, "CAN_AUTHOR")

CAN_REVIEW: Final[dict[Role, bool]] = {
    Role.ADMIN: True,
    Role.FINANCE_TEAM: True,
    Role.FINANCE_MANAGER: True,
    Role.DEPARTMENT_USER: False,
    Role.DEPARTMENT_MANAGER: False,
    Role.VIEW_ONLY: False,
}
ensure_exhaustive(CAN_REVIEW, Role, "CAN_REVIEW")

# Department-scoped roles only see budgets of their own department
DEPARTMENT_SCOPED: Final[dict[Role, bool]] = {
    Role.ADMIN: False,
    Role.FINANCE_TEAM: False,
    Role.FINANCE_MANAGER: False,
    Role.DEPARTMENT_USER: True,
    Role.DEPARTMENT_MANAGER: True,
    Role.VIEW_ONLY: False,
}
ensure_exhaustive(DEPARTMENT_SCOPED, Role, "DEPARTMENT_SCOPED")

# ---------------------------------------------------------------------------
# Business rules
# ---------------------------------------------------------------------------

BUSINESS_ID_DIGITS: Final[int] = 6
MONEY_QUANT: Final[str] = "0.01"

MONTH_LABELS: Final[list[str]] = [
    "",
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]
