"""Error taxonomy for the budget lifecycle core.

``ValidationError`` always carries the complete list of violations so a
caller can render every problem at once. Store failures are wrapped in
``ExternalStoreError`` by the service layer; nothing here retries.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Violation:
    """A single failed rule.

    Attributes:
        field: Record field the rule applies to (``"department"``,
               ``"line_items[0].description"``, ...).
        code: Stable machine-readable identifier, e.g. ``"required"``.
        message: Human-readable explanation.
    """

    field: str
    code: str
    message: str

    def as_dict(self) -> dict[str, str]:
        return {"field": self.field, "code": self.code, "message": self.message}


class BudgetFlowError(Exception):
    """Base class for every domain error."""


class ValidationError(BudgetFlowError):
    """One or more business rules failed. Never partially applied."""

    def __init__(self, violations: list[Violation]) -> None:
        self.violations = list(violations)
        summary = "; ".join(f"{v.field}: {v.message}" for v in self.violations)
        super().__init__(summary or "validation failed")


class InvalidQuantity(ValidationError):
    def __init__(self, quantity: object, field: str = "quantity") -> None:
        super().__init__([
            Violation(field, "invalid_quantity", f"Quantity must be an integer >= 1 (got {quantity!r}).")
        ])


class InvalidCost(ValidationError):
    def __init__(self, unit_cost: object, field: str = "unit_cost") -> None:
        super().__init__([
            Violation(field, "invalid_cost", f"Unit cost must be >= 0 (got {unit_cost!r}).")
        ])


class InvalidTransition(BudgetFlowError):
    """The requested event is not legal from the record's current status."""

    def __init__(self, status: str, event: str) -> None:
        self.status = status
        self.event = event
        super().__init__(f"Cannot {event} a budget in status '{status}'.")


class NotFoundError(BudgetFlowError):
    """A referenced budget, department, cost center or user does not exist."""

    def __init__(self, entity: str, key: object) -> None:
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} {key!r} not found.")


class ConcurrentModificationError(BudgetFlowError):
    """The record changed status between read and write (compare-and-swap lost)."""

    def __init__(self, budget_id: object, expected_status: str) -> None:
        self.budget_id = budget_id
        self.expected_status = expected_status
        super().__init__(
            f"Budget {budget_id!r} is no longer in status '{expected_status}'; "
            "reload and try again."
        )


class ExternalStoreError(BudgetFlowError):
    """Any failure raised by the persistence layer."""
