"""SQLAlchemy models package for BudgetFlow.

Importing all models here ensures that SQLAlchemy's mapper registry is
populated before ``Base.metadata.create_all()`` or Alembic migrations run.
Parent tables are imported before their children.

Usage from other modules:
    from budgetflow.models import Budget, Department
"""

# Organisation
from budgetflow.models.department import Department  # noqa: F401
from budgetflow.models.cost_center import CostCenter  # noqa: F401

# Budget requests
from budgetflow.models.budget import Budget  # noqa: F401
from budgetflow.models.budget_line_item import BudgetLineItem  # noqa: F401

# Access control
from budgetflow.models.user_profile import UserProfile  # noqa: F401

__all__ = [
    "Department",
    "CostCenter",
    "Budget",
    "BudgetLineItem",
    "UserProfile",
]
