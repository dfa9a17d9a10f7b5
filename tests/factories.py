"""Plain helpers shared by the test modules."""

from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace

from budgetflow.models import UserProfile
from budgetflow.utils.security import create_access_token


def auth_headers(user: UserProfile) -> dict[str, str]:
    """Bearer header for *user*, built the way the login endpoint builds tokens."""
    token = create_access_token({"sub": str(user.id), "username": user.username, "role": user.role})
    return {"Authorization": f"Bearer {token}"}


def record(**fields) -> SimpleNamespace:
    """In-memory budget record for the pure domain functions."""
    defaults = {
        "id": 1,
        "budget_id": "BUD-000001",
        "department": "IT",
        "cost_center": "IT-001",
        "budget_type": "OPEX",
        "amount": Decimal("0"),
        "status": "Draft",
        "description": None,
        "created_at": datetime(2024, 1, 15, 10, 0),
        "submitted_at": None,
        "submitted_by": None,
        "reviewed_at": None,
        "reviewed_by": None,
        "review_comments": None,
        "period_start": None,
        "period_end": None,
        "line_items": [],
    }
    defaults.update(fields)
    return SimpleNamespace(**defaults)


def item(description="Laptop", quantity=1, unit_cost="100") -> SimpleNamespace:
    return SimpleNamespace(description=description, quantity=quantity, unit_cost=unit_cost, total_amount=None)
