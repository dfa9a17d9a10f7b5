"""Unit tests for the submission and review validators."""

from datetime import date

import pytest

from budgetflow.domain.errors import ValidationError
from budgetflow.domain.validator import (
    ensure_valid,
    validate_for_review,
    validate_for_submission,
    validate_line_items,
)
from tests.factories import item, record

CATALOG = {"IT": ["IT-001", "IT-002"], "HR": ["HR-001"]}


def _fields(violations):
    return [(v.field, v.code) for v in violations]


class TestValidateForSubmission:
    def test_complete_budget_passes(self):
        budget = record(line_items=[item()])
        assert validate_for_submission(budget, CATALOG) == []

    def test_collects_every_violation(self):
        budget = record(department=None, cost_center="", budget_type=None, line_items=[])

        violations = validate_for_submission(budget, CATALOG)

        assert _fields(violations) == [
            ("department", "required"),
            ("cost_center", "required"),
            ("budget_type", "required"),
            ("line_items", "required"),
        ]

    def test_cost_center_must_belong_to_department(self):
        budget = record(department="HR", cost_center="IT-001", line_items=[item()])
        assert _fields(validate_for_submission(budget, CATALOG)) == [("cost_center", "not_in_department")]

    def test_unknown_department(self):
        budget = record(department="Legal", cost_center="LG-1", line_items=[item()])
        assert _fields(validate_for_submission(budget, CATALOG)) == [("department", "unknown")]

    def test_catalog_check_skipped_without_catalog(self):
        budget = record(department="Legal", cost_center="LG-1", line_items=[item()])
        assert validate_for_submission(budget) == []

    def test_invalid_budget_type(self):
        budget = record(budget_type="OTHER", line_items=[item()])
        assert _fields(validate_for_submission(budget, CATALOG)) == [("budget_type", "invalid")]

    def test_period_end_before_start(self):
        budget = record(period_start=date(2024, 6, 1), period_end=date(2024, 1, 1), line_items=[item()])
        assert _fields(validate_for_submission(budget, CATALOG)) == [("period_end", "before_start")]


class TestValidateLineItems:
    def test_description_and_positive_total_required(self):
        violations = validate_line_items([item(description="  "), item(unit_cost="0")])
        assert _fields(violations) == [
            ("line_items[0].description", "required"),
            ("line_items[1].total_amount", "not_positive"),
        ]

    def test_arithmetic_errors_are_prefixed(self):
        violations = validate_line_items([item(quantity=0)])
        assert _fields(violations) == [("line_items[0].quantity", "invalid_quantity")]


class TestValidateForReview:
    def test_reject_requires_comments(self):
        assert _fields(validate_for_review(record(), "reject", "  ")) == [("review_comments", "required")]

    def test_request_revision_requires_comments(self):
        assert validate_for_review(record(), "request_revision", None)

    def test_approve_does_not_require_comments(self):
        assert validate_for_review(record(), "approve", None) == []


def test_ensure_valid_raises_with_all_violations():
    violations = validate_for_submission(record(department=None, line_items=[]), CATALOG)
    with pytest.raises(ValidationError) as exc:
        ensure_valid(violations)
    assert exc.value.violations == violations
    ensure_valid([])
