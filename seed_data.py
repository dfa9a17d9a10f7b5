"""Seed data script for the BudgetFlow database.

Populates the database with realistic demo data for development and testing.
The script is idempotent: it checks for existing records before inserting.

Usage (from the project root):
    python seed_data.py
"""

from __future__ import annotations

import os
import sys
from datetime import date, datetime, timezone
from decimal import Decimal

# Ensure the package is importable when running from the project root
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from budgetflow.database import Base, SessionLocal, engine  # noqa: E402
from budgetflow.domain.calculator import recalculate  # noqa: E402
from budgetflow.domain.filters import format_business_id  # noqa: E402
from budgetflow.models import (  # noqa: E402
    Budget,
    BudgetLineItem,
    CostCenter,
    Department,
    UserProfile,
)
from budgetflow.utils.constants import BudgetStatus, BudgetType, Role  # noqa: E402
from budgetflow.utils.security import hash_password  # noqa: E402

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

YEAR = 2024
DEMO_PASSWORD = "Demo1234!"


def _ts(month: int, day: int) -> datetime:
    """Shorthand UTC timestamp inside the demo year."""
    return datetime(YEAR, month, day, 9, 30, tzinfo=timezone.utc)


def _dec(value: float) -> Decimal:
    """Convert float to Decimal for Numeric columns."""
    return Decimal(str(round(value, 2)))


# ---------------------------------------------------------------------------
# Seed functions
# ---------------------------------------------------------------------------

# name, code, head, limit, cost centers
DEPARTMENTS = [
    ("IT", "IT", "Daniel Ortiz", 500_000, [("IT-001", "Infrastructure"), ("IT-002", "Applications")]),
    ("Marketing", "MKT", "Priya Nair", 250_000, [("MKT-001", "Campaigns"), ("MKT-002", "Brand")]),
    ("Operations", "OPS", "Luis Romero", 400_000, [("OPS-001", "Facilities"), ("OPS-002", "Logistics")]),
    ("HR", "HR", "Grace Kim", 150_000, [("HR-001", "Recruiting"), ("HR-002", "Training")]),
]


def seed_departments(session) -> list[Department]:
    """Insert the demo departments and their cost centers if none exist."""
    if session.query(Department).count() > 0:
        print("  [SKIP] Department: table already has data.")
        return session.query(Department).all()

    for name, code, head, limit, centers in DEPARTMENTS:
        department = Department(
            name=name,
            code=code,
            head_of_department=head,
            budget_limit=_dec(limit),
            is_active=True,
        )
        department.cost_centers = [
            CostCenter(code=cc_code, name=cc_name, is_active=True) for cc_code, cc_name in centers
        ]
        session.add(department)
    session.flush()
    print(f"  [OK] Department: {len(DEPARTMENTS)} records inserted.")
    return session.query(Department).all()


def seed_users(session) -> None:
    """Insert one demo user per role if only the admin (or nobody) exists."""
    if session.query(UserProfile).filter(UserProfile.username != "admin").count() > 0:
        print("  [SKIP] UserProfile: demo users already exist.")
        return

    registros = [
        UserProfile(
            username="sarah.chen",
            email="sarah.chen@budgetflow.io",
            password_hash=hash_password(DEMO_PASSWORD),
            full_name="Sarah Chen",
            role=Role.FINANCE_MANAGER.value,
            is_active=True,
        ),
        UserProfile(
            username="mike.johnson",
            email="mike.johnson@budgetflow.io",
            password_hash=hash_password(DEMO_PASSWORD),
            full_name="Mike Johnson",
            role=Role.FINANCE_TEAM.value,
            is_active=True,
        ),
        UserProfile(
            username="daniel.ortiz",
            email="daniel.ortiz@budgetflow.io",
            password_hash=hash_password(DEMO_PASSWORD),
            full_name="Daniel Ortiz",
            role=Role.DEPARTMENT_MANAGER.value,
            department="IT",
            cost_center="IT-001",
            is_active=True,
        ),
        UserProfile(
            username="ana.lopez",
            email="ana.lopez@budgetflow.io",
            password_hash=hash_password(DEMO_PASSWORD),
            full_name="Ana Lopez",
            role=Role.DEPARTMENT_USER.value,
            department="Marketing",
            cost_center="MKT-001",
            is_active=True,
        ),
        UserProfile(
            username="viewer",
            email="viewer@budgetflow.io",
            password_hash=hash_password(DEMO_PASSWORD),
            full_name="Read Only",
            role=Role.VIEW_ONLY.value,
            is_active=True,
        ),
    ]
    session.add_all(registros)
    session.flush()
    print(f"  [OK] UserProfile: {len(registros)} records inserted (password {DEMO_PASSWORD}).")


# department, cost center, type, status, created (month, day), author, reviewer, line items
BUDGETS = [
    ("IT", "IT-001", BudgetType.CAPEX, BudgetStatus.APPROVED, (1, 15), "daniel.ortiz", "sarah.chen",
     [("Hardware", "Rack servers", 5, 18_000), ("Hardware", "Network switches", 10, 3_500)]),
    ("Marketing", "MKT-001", BudgetType.OPEX, BudgetStatus.UNDER_REVIEW, (1, 28), "ana.lopez", "mike.johnson",
     [("Advertising", "Q1 search campaign", 3, 15_000), ("Events", "Trade show booth", 1, 40_000)]),
    ("Operations", "OPS-001", BudgetType.OPEX, BudgetStatus.SUBMITTED, (2, 3), "admin", None,
     [("Facilities", "Office lease renewal", 12, 6_500)]),
    ("HR", "HR-002", BudgetType.OPEX, BudgetStatus.REJECTED, (2, 10), "admin", "sarah.chen",
     [("Training", "Leadership program seats", 8, 2_750)]),
    ("IT", "IT-002", BudgetType.OPEX, BudgetStatus.DRAFT, (3, 1), "daniel.ortiz", None,
     [("Software", "SaaS licenses", 120, 240), ("Services", "Support contract", 1, 9_000)]),
    ("Marketing", "MKT-002", BudgetType.CAPEX, BudgetStatus.REVISION_REQUIRED, (3, 12), "ana.lopez", "mike.johnson",
     [("Production", "Studio equipment", 2, 12_500)]),
    ("Operations", "OPS-002", BudgetType.CAPEX, BudgetStatus.APPROVED, (3, 20), "admin", "sarah.chen",
     [("Vehicles", "Delivery vans", 2, 38_000)]),
]


def seed_budgets(session) -> None:
    """Insert demo budgets covering every lifecycle status."""
    if session.query(Budget).count() > 0:
        print("  [SKIP] Budget: table already has data.")
        return

    for seq, (dept, cc, btype, status, (month, day), author, reviewer, items) in enumerate(BUDGETS, 1):
        created = _ts(month, day)
        budget = Budget(
            budget_id=format_business_id(seq),
            department=dept,
            cost_center=cc,
            budget_type=btype.value,
            currency="USD",
            description=f"{dept} {btype.value} request",
            justification="Demo data generated by seed_data.py.",
            period_start=date(YEAR, 1, 1),
            period_end=date(YEAR, 12, 31),
            status=status.value,
            created_by=author,
            created_at=created.replace(tzinfo=None),
        )
        budget.line_items = [
            BudgetLineItem(category=cat, description=desc, quantity=qty, unit_cost=_dec(cost))
            for cat, desc, qty, cost in items
        ]
        recalculate(budget)

        if status is not BudgetStatus.DRAFT:
            budget.submitted_by = author
            budget.submitted_at = created
        if reviewer:
            budget.reviewed_by = reviewer
            if status in (BudgetStatus.APPROVED, BudgetStatus.REJECTED, BudgetStatus.REVISION_REQUIRED):
                budget.reviewed_at = _ts(month, day + 5)
        if status is BudgetStatus.REJECTED:
            budget.review_comments = "Program not in this year's training plan."
        elif status is BudgetStatus.REVISION_REQUIRED:
            budget.review_comments = "Please split equipment into separate line items."
        session.add(budget)

    session.flush()
    print(f"  [OK] Budget: {len(BUDGETS)} records inserted.")


def main() -> None:
    """Run the complete seed process within a single database transaction."""
    print("=" * 60)
    print("  BudgetFlow - Seed Data Script")
    print(f"  Demo year: {YEAR}")
    print("=" * 60)

    import budgetflow.models  # noqa: F401

    Base.metadata.create_all(bind=engine)

    session = SessionLocal()
    try:
        print("\n[1/3] Departments + Cost Centers...")
        seed_departments(session)

        print("\n[2/3] Users...")
        seed_users(session)

        print("\n[3/3] Budgets + Line Items...")
        seed_budgets(session)

        session.commit()
        print("\n" + "=" * 60)
        print("  Seed completed successfully.")
        print("=" * 60)

    except Exception as exc:
        session.rollback()
        print("\n[ERROR] Seed failed; rolled back.")
        print(f"  Detail: {exc}")
        raise
    finally:
        session.close()


if __name__ == "__main__":
    main()
