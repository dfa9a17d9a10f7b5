"""
Line-item calculator.

Computes line totals (quantity × unit cost) and the budget amount derived
from them. A budget's ``amount`` is never edited directly while line items
exist: ``recalculate`` rewrites every line total and the budget amount in a
single synchronous step.

Records are duck-typed: any object exposing ``quantity``, ``unit_cost`` and
``total_amount`` works as a line item, and any object exposing ``amount``
and ``line_items`` works as a budget (ORM rows and plain objects alike).
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable

from budgetflow.domain.errors import InvalidCost, InvalidQuantity
from budgetflow.utils.constants import MONEY_QUANT

ZERO = Decimal("0.00")


def to_money(value: Any) -> Decimal:
    """Coerce *value* to a two-decimal ``Decimal`` (floats go through ``str``)."""
    if isinstance(value, Decimal):
        dec = value
    elif isinstance(value, float):
        dec = Decimal(str(value))
    else:
        dec = Decimal(value)
    return dec.quantize(Decimal(MONEY_QUANT), rounding=ROUND_HALF_UP)


def compute_line_total(quantity: int, unit_cost: Any) -> Decimal:
    """Return ``quantity * unit_cost`` as money.

    Raises:
        InvalidQuantity: If quantity is not an integer or is < 1.
        InvalidCost: If unit cost is negative or not a number.
    """
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise InvalidQuantity(quantity)
    try:
        cost = to_money(unit_cost)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidCost(unit_cost) from None
    if cost < 0:
        raise InvalidCost(unit_cost)
    return to_money(cost * quantity)


def compute_budget_amount(line_items: Iterable[Any]) -> Decimal:
    """Sum the recomputed totals of *line_items*. An empty collection yields 0."""
    total = ZERO
    for item in line_items:
        total += compute_line_total(item.quantity, item.unit_cost)
    return total


def recalculate(budget: Any) -> Decimal:
    """Rewrite each line item's total and the budget's amount from scratch.

    Returns:
        The new budget amount.
    """
    total = ZERO
    for index, item in enumerate(budget.line_items):
        try:
            item.total_amount = compute_line_total(item.quantity, item.unit_cost)
        except InvalidQuantity:
            raise InvalidQuantity(item.quantity, f"line_items[{index}].quantity") from None
        except InvalidCost:
            raise InvalidCost(item.unit_cost, f"line_items[{index}].unit_cost") from None
        total += item.total_amount
    budget.amount = total
    return total
