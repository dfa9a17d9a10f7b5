"""
Budget record validator.

Pure predicates run before a lifecycle transition is committed. Each
function returns the complete list of violations (empty means valid) so a
caller can display every problem at once; ``ensure_valid`` turns a
non-empty list into a ``ValidationError``.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Iterable, Mapping

from budgetflow.domain.calculator import compute_line_total
from budgetflow.domain.errors import ValidationError, Violation
from budgetflow.utils.constants import BudgetType, LifecycleEvent

# department name -> codes of the cost centers that belong to it
Catalog = Mapping[str, Iterable[str]]

_COMMENT_REQUIRED: frozenset[LifecycleEvent] = frozenset({
    LifecycleEvent.REJECT,
    LifecycleEvent.REQUEST_REVISION,
})


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _budget_type_valid(value: Any) -> bool:
    try:
        BudgetType(value)
    except ValueError:
        return False
    return True


def validate_line_items(line_items: Iterable[Any]) -> list[Violation]:
    """Check every line item; at least one item with a description and positive total."""
    errors: list[Violation] = []
    items = list(line_items)
    if not items:
        errors.append(
            Violation("line_items", "required", "At least one line item is required.")
        )
        return errors

    for index, item in enumerate(items):
        prefix = f"line_items[{index}]"
        if _blank(getattr(item, "description", None)):
            errors.append(
                Violation(f"{prefix}.description", "required", "Description is required.")
            )
        try:
            total = compute_line_total(item.quantity, item.unit_cost)
        except ValidationError as exc:
            errors.extend(
                Violation(f"{prefix}.{v.field}", v.code, v.message) for v in exc.violations
            )
            continue
        if total <= Decimal("0"):
            errors.append(
                Violation(f"{prefix}.total_amount", "not_positive", "Line total must be greater than zero.")
            )
    return errors


def validate_for_submission(budget: Any, catalog: Catalog | None = None) -> list[Violation]:
    """Collect every rule a budget breaks before it can be submitted.

    Args:
        budget: The budget record (with ``line_items``).
        catalog: Department name → cost center codes. When given, the cost
                 center must belong to the selected department; ``None``
                 skips the referential check.

    Returns:
        All violations found, in field order. Empty when the budget may be
        submitted.
    """
    errors: list[Violation] = []

    department = getattr(budget, "department", None)
    cost_center = getattr(budget, "cost_center", None)

    if _blank(department):
        errors.append(Violation("department", "required", "Department is required."))
    if _blank(cost_center):
        errors.append(Violation("cost_center", "required", "Cost center is required."))
    elif catalog is not None and not _blank(department):
        if department not in catalog:
            errors.append(
                Violation("department", "unknown", f"Department '{department}' does not exist.")
            )
        elif cost_center not in set(catalog[department]):
            errors.append(
                Violation(
                    "cost_center",
                    "not_in_department",
                    f"Cost center '{cost_center}' does not belong to department '{department}'.",
                )
            )

    budget_type = getattr(budget, "budget_type", None)
    if _blank(budget_type):
        errors.append(Violation("budget_type", "required", "Budget type is required."))
    elif not _budget_type_valid(budget_type):
        errors.append(
            Violation("budget_type", "invalid", f"Budget type must be one of {[t.value for t in BudgetType]}.")
        )

    start = getattr(budget, "period_start", None)
    end = getattr(budget, "period_end", None)
    if start is not None and end is not None and start > end:
        errors.append(
            Violation("period_end", "before_start", "Period end must not be before period start.")
        )

    errors.extend(validate_line_items(getattr(budget, "line_items", None) or []))
    return errors


def validate_for_review(budget: Any, decision: LifecycleEvent | str, comments: str | None) -> list[Violation]:
    """Rejections and revision requests need comments; approvals do not."""
    event = LifecycleEvent(decision)
    if event in _COMMENT_REQUIRED and _blank(comments):
        return [
            Violation("review_comments", "required", "Comments are required when rejecting or requesting a revision.")
        ]
    return []


def ensure_valid(violations: list[Violation]) -> None:
    """Raise ``ValidationError`` carrying *violations* if there are any."""
    if violations:
        raise ValidationError(violations)
