"""Unit tests for the line-item calculator."""

from decimal import Decimal

import pytest

from budgetflow.domain.calculator import compute_budget_amount, compute_line_total, recalculate, to_money
from budgetflow.domain.errors import InvalidCost, InvalidQuantity, ValidationError
from tests.factories import item, record


class TestComputeLineTotal:
    def test_quantity_times_unit_cost(self):
        assert compute_line_total(3, "19.99") == Decimal("59.97")

    def test_float_cost_goes_through_str(self):
        assert compute_line_total(3, 0.1) == Decimal("0.30")

    def test_zero_cost_is_allowed(self):
        assert compute_line_total(2, 0) == Decimal("0.00")

    @pytest.mark.parametrize("quantity", [0, -1, 1.5, True, "2"])
    def test_invalid_quantity(self, quantity):
        with pytest.raises(InvalidQuantity):
            compute_line_total(quantity, "10")

    @pytest.mark.parametrize("cost", ["-0.01", -5, "abc", None])
    def test_invalid_cost(self, cost):
        with pytest.raises(InvalidCost):
            compute_line_total(1, cost)

    def test_errors_are_validation_errors_with_a_violation(self):
        with pytest.raises(ValidationError) as exc:
            compute_line_total(0, "1")
        assert exc.value.violations[0].code == "invalid_quantity"


class TestComputeBudgetAmount:
    def test_empty_collection_is_zero(self):
        assert compute_budget_amount([]) == Decimal("0.00")

    def test_sums_line_totals(self):
        items = [item(quantity=2, unit_cost="50"), item(quantity=1, unit_cost="25.50")]
        assert compute_budget_amount(items) == Decimal("125.50")


class TestRecalculate:
    def test_rewrites_line_totals_and_amount(self):
        budget = record(amount=Decimal("999"), line_items=[item(quantity=4, unit_cost="2.5"), item(quantity=1, unit_cost="10")])

        total = recalculate(budget)

        assert total == Decimal("20.00")
        assert budget.amount == Decimal("20.00")
        assert [i.total_amount for i in budget.line_items] == [Decimal("10.00"), Decimal("10.00")]

    def test_no_line_items_resets_amount(self):
        budget = record(amount=Decimal("500"), line_items=[])
        assert recalculate(budget) == Decimal("0.00")
        assert budget.amount == Decimal("0.00")

    def test_error_names_the_line_item(self):
        budget = record(line_items=[item(), item(quantity=0)])
        with pytest.raises(InvalidQuantity) as exc:
            recalculate(budget)
        assert exc.value.violations[0].field == "line_items[1].quantity"


def test_to_money_rounds_half_up():
    assert to_money("2.345") == Decimal("2.35")
    assert to_money(Decimal("2.344")) == Decimal("2.34")
