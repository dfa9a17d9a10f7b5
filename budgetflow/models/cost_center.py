"""CostCenter model: accounting unit inside a department."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from budgetflow.database import Base


class CostCenter(Base):
    """Cost center belonging to exactly one department.

    A budget's cost center must be one of the codes registered under its
    department; the submission validator checks this through the catalog
    built from this table.

    Attributes:
        id: Primary key.
        department_id: FK to Department.
        code: Code unique within the department, e.g. "IT-001".
        name: Display name.
        description: Free-text description.
        budget_limit: Advisory spending ceiling (not enforced).
        is_active: Whether the cost center accepts new budgets.
        created_at: Record creation timestamp.
        updated_at: Last modification timestamp.
    """

    __tablename__ = "cost_center"
    __table_args__ = (
        UniqueConstraint("department_id", "code", name="uq_cost_center_department_code"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    department_id = Column(Integer, ForeignKey("department.id"), nullable=False)
    code = Column(String(50), nullable=False)
    name = Column(String(200), nullable=False)
    description = Column(String(1000), nullable=True)
    budget_limit = Column(Numeric(15, 2), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    department = relationship(
        "Department", back_populates="cost_centers", lazy="select"
    )
