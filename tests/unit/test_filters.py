"""Unit tests for the filter predicate builder and business ids."""

from datetime import date, datetime

from budgetflow.domain.filters import (
    BudgetFilter,
    build_predicate,
    filter_records,
    format_business_id,
    list_distinct_values,
    next_business_id,
)
from tests.factories import record


def test_search_matches_department_only_where_present():
    rows = [record(department="IT", budget_id="BUD-001"), record(department="HR", budget_id="BUD-002")]

    result = filter_records(rows, BudgetFilter(search_query="IT", status="", department=""))

    assert [r.budget_id for r in result] == ["BUD-001"]


def test_search_is_case_insensitive_over_id_and_description():
    rows = [
        record(budget_id="BUD-000010", department="HR", description="Laptop refresh"),
        record(budget_id="BUD-000020", department="HR", description=None),
    ]
    assert len(filter_records(rows, BudgetFilter(search_query="LAPTOP"))) == 1
    assert len(filter_records(rows, BudgetFilter(search_query="bud-000020"))) == 1


def test_empty_filter_matches_everything():
    rows = [record(), record(status="Approved")]
    criteria = BudgetFilter()
    assert criteria.is_empty
    assert filter_records(rows, criteria) == rows


def test_terms_combine_with_and():
    rows = [
        record(budget_id="1", status="Approved", budget_type="OPEX"),
        record(budget_id="2", status="Approved", budget_type="CAPEX"),
        record(budget_id="3", status="Draft", budget_type="CAPEX"),
    ]
    result = filter_records(rows, BudgetFilter(status="Approved", budget_type="CAPEX"))
    assert [r.budget_id for r in result] == ["2"]


def test_date_range_is_inclusive_on_created_day():
    rows = [
        record(budget_id="jan", created_at=datetime(2024, 1, 31, 23, 59)),
        record(budget_id="feb", created_at=datetime(2024, 2, 1, 0, 0)),
        record(budget_id="mar", created_at=datetime(2024, 3, 1, 8, 0)),
    ]
    predicate = build_predicate(BudgetFilter(date_from=date(2024, 1, 31), date_to=date(2024, 2, 1)))
    assert [r.budget_id for r in rows if predicate(r)] == ["jan", "feb"]


def test_list_distinct_values_drops_blanks_and_duplicates():
    rows = [record(department="IT"), record(department="IT"), record(department=""), record(department="HR")]
    assert list_distinct_values(rows, "department") == {"IT", "HR"}


class TestBusinessIds:
    def test_format(self):
        assert format_business_id(42) == "BUD-000042"
        assert format_business_id(7, "REQ") == "REQ-000007"

    def test_next_after_highest(self):
        assert next_business_id(["BUD-000002", "BUD-000010", None, "legacy-9", "BUD-x"]) == "BUD-000011"

    def test_first_id(self):
        assert next_business_id([]) == "BUD-000001"
