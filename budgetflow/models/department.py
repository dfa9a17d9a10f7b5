"""Department model: organisational unit that owns budgets and cost centers."""

from sqlalchemy import Boolean, Column, DateTime, Integer, Numeric, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from budgetflow.database import Base


class Department(Base):
    """Organisational unit that raises budget requests.

    Budgets and users reference a department by name; the service layer
    rewrites those references in the same transaction as a rename.

    Attributes:
        id: Primary key.
        name: Unique display name, e.g. "Information Technology".
        code: Unique short code, e.g. "IT".
        description: Free-text description.
        head_of_department: Name of the department head.
        budget_limit: Advisory spending ceiling (not enforced).
        is_active: Inactive departments are hidden from budget forms.
        created_at: Record creation timestamp.
        updated_at: Last modification timestamp.
    """

    __tablename__ = "department"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), unique=True, nullable=False)
    code = Column(String(20), unique=True, nullable=False)
    description = Column(String(1000), nullable=True)
    head_of_department = Column(String(200), nullable=True)
    budget_limit = Column(Numeric(15, 2), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    cost_centers = relationship(
        "CostCenter",
        back_populates="department",
        order_by="CostCenter.code",
        lazy="select",
        cascade="all, delete-orphan",
    )
