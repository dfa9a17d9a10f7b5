"""Budget model: a budget request moving through the approval lifecycle."""

from sqlalchemy import Column, Date, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from budgetflow.database import Base


class Budget(Base):
    """Budget request raised by a department for one cost center.

    ``amount`` is derived: it always equals the sum of the line item totals
    and is rewritten by ``budgetflow.domain.recalculate`` whenever line items
    change. Status changes go through ``budgetflow.domain.plan_transition``.

    Attributes:
        id: Primary key.
        budget_id: Unique business id, e.g. "BUD-000042".
        department: Department name.
        cost_center: Cost center code within the department.
        budget_type: "OPEX" or "CAPEX".
        amount: Sum of line item totals.
        currency: ISO currency code.
        description: Short description of the request.
        justification: Business justification.
        period_start: First day of the budget period.
        period_end: Last day of the budget period.
        status: Lifecycle status (see ``BudgetStatus``).
        submitted_by: Username of the author who submitted the request.
        submitted_at: Submission timestamp.
        reviewed_by: Username of the finance reviewer.
        reviewed_at: Review decision timestamp.
        review_comments: Reviewer comments (mandatory on rejection).
        created_by: Username of the author.
        created_at: Record creation timestamp.
        updated_at: Last modification timestamp.
    """

    __tablename__ = "budget"

    id = Column(Integer, primary_key=True, autoincrement=True)
    budget_id = Column(String(20), unique=True, nullable=False)
    department = Column(String(200), nullable=True, index=True)
    cost_center = Column(String(50), nullable=True)
    budget_type = Column(String(10), nullable=True)  # "OPEX", "CAPEX"
    amount = Column(Numeric(15, 2), default=0, nullable=False)
    currency = Column(String(3), default="USD", nullable=False)
    description = Column(String(1000), nullable=True)
    justification = Column(Text, nullable=True)
    period_start = Column(Date, nullable=True)
    period_end = Column(Date, nullable=True)
    status = Column(String(30), default="Draft", nullable=False, index=True)
    # "Draft", "Submitted", "Under Review", "Approved", "Rejected", "Revision Required"
    submitted_by = Column(String(100), nullable=True)
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    reviewed_by = Column(String(100), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    review_comments = Column(Text, nullable=True)
    created_by = Column(String(100), nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    line_items = relationship(
        "BudgetLineItem",
        back_populates="budget",
        order_by="BudgetLineItem.id",
        lazy="select",
        cascade="all, delete-orphan",
    )
