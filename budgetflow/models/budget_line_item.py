"""BudgetLineItem model: one costed row of a budget request."""

from sqlalchemy import Column, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from budgetflow.database import Base


class BudgetLineItem(Base):
    """Line item of a budget; ``total_amount = quantity * unit_cost``.

    Attributes:
        id: Primary key.
        budget_id: FK to Budget (surrogate id, not the business id).
        category: Spend category, e.g. "Hardware".
        subcategory: Optional finer category.
        description: What is being bought.
        quantity: Integer >= 1.
        unit_cost: Cost per unit, >= 0.
        total_amount: Derived line total.
        notes: Free-text notes.
    """

    __tablename__ = "budget_line_item"

    id = Column(Integer, primary_key=True, autoincrement=True)
    budget_id = Column(Integer, ForeignKey("budget.id", ondelete="CASCADE"), nullable=False)
    category = Column(String(100), nullable=True)
    subcategory = Column(String(100), nullable=True)
    description = Column(String(500), nullable=True)
    quantity = Column(Integer, default=1, nullable=False)
    unit_cost = Column(Numeric(15, 2), default=0, nullable=False)
    total_amount = Column(Numeric(15, 2), default=0, nullable=False)
    notes = Column(String(1000), nullable=True)

    # Relationships
    budget = relationship("Budget", back_populates="line_items", lazy="select")
