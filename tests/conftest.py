"""Pytest configuration and shared fixtures."""

import os

# Point the app at an in-memory database BEFORE importing anything from budgetflow
os.environ["DATABASE_URL"] = "sqlite://"

from datetime import datetime  # noqa: E402
from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import budgetflow.models  # noqa: E402,F401
from budgetflow.config import get_settings  # noqa: E402
from budgetflow.database import Base, SessionLocal, engine, get_db  # noqa: E402
from budgetflow.main import app  # noqa: E402
from budgetflow.models import Budget, CostCenter, Department, UserProfile  # noqa: E402
from budgetflow.utils.constants import Role  # noqa: E402
from budgetflow.utils.security import hash_password  # noqa: E402


@pytest.fixture(scope="function")
def test_db_session():
    """Provide a database session with all tables created, dropped afterwards."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()

    def override_get_db():
        try:
            yield session
        finally:
            pass  # the fixture closes the session

    app.dependency_overrides[get_db] = override_get_db

    yield session

    session.close()
    app.dependency_overrides.clear()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(test_db_session):
    """FastAPI test client bound to the test database."""
    return TestClient(app)


@pytest.fixture(autouse=True)
def preferences_file(tmp_path, monkeypatch):
    """Keep preference writes inside the test's temporary directory."""
    path = tmp_path / "preferences.json"
    monkeypatch.setattr(get_settings(), "PREFERENCES_FILE", path)
    return path


@pytest.fixture
def catalog(test_db_session):
    """Two departments with one cost center each."""
    it = Department(name="IT", code="IT")
    it.cost_centers = [CostCenter(code="IT-001", name="Infrastructure")]
    hr = Department(name="HR", code="HR")
    hr.cost_centers = [CostCenter(code="HR-001", name="Recruiting")]
    test_db_session.add_all([it, hr])
    test_db_session.commit()
    return {"IT": it, "HR": hr}


@pytest.fixture
def make_user(test_db_session):
    """Factory creating an active user with the given role."""

    def _make(username: str, role: Role, department: str | None = None) -> UserProfile:
        user = UserProfile(
            username=username,
            email=f"{username}@acme.com",
            password_hash=hash_password("Secret123!"),
            full_name=username.title(),
            role=role.value,
            department=department,
            is_active=True,
        )
        test_db_session.add(user)
        test_db_session.commit()
        test_db_session.refresh(user)
        return user

    return _make


@pytest.fixture
def admin(make_user):
    return make_user("root", Role.ADMIN)


@pytest.fixture
def it_user(make_user):
    return make_user("ivan", Role.DEPARTMENT_USER, department="IT")


@pytest.fixture
def hr_user(make_user):
    return make_user("helen", Role.DEPARTMENT_USER, department="HR")


@pytest.fixture
def reviewer(make_user):
    return make_user("fiona", Role.FINANCE_MANAGER)


@pytest.fixture
def viewer(make_user):
    return make_user("victor", Role.VIEW_ONLY)


@pytest.fixture
def add_budget(test_db_session):
    """Insert a budget row directly, bypassing the lifecycle."""
    counter = {"n": 0}

    def _add(
        department: str = "IT",
        status: str = "Draft",
        amount: str = "100.00",
        budget_type: str = "OPEX",
        created_at: datetime | None = None,
        created_by: str | None = None,
        **fields,
    ) -> Budget:
        counter["n"] += 1
        budget = Budget(
            budget_id=f"BUD-{counter['n']:06d}",
            department=department,
            cost_center=fields.pop("cost_center", f"{department}-001"),
            budget_type=budget_type,
            amount=Decimal(amount),
            status=status,
            created_by=created_by,
            created_at=created_at or datetime(2024, 1, 15, 10, 0),
            **fields,
        )
        test_db_session.add(budget)
        test_db_session.commit()
        test_db_session.refresh(budget)
        return budget

    return _add
