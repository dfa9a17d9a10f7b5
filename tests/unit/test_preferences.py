"""Unit tests for application preferences and their file store."""

import json
from decimal import Decimal

import pytest

from budgetflow.domain.errors import ValidationError
from budgetflow.preferences import (
    BudgetPeriod,
    Theme,
    default_preferences,
    dump_preferences,
    load_preferences,
)
from budgetflow.services import preferences_service


class TestLoadPreferences:
    def test_none_gives_defaults(self):
        assert load_preferences(None).model_dump() == default_preferences().model_dump()

    def test_merges_over_defaults_and_ignores_unknown_keys(self):
        prefs = load_preferences('{"company_name": "Globex", "theme": "dark", "legacy_flag": 1}')
        assert prefs.company_name == "Globex"
        assert prefs.theme is Theme.DARK
        assert prefs.default_currency == "USD"

    def test_accepts_camel_case_keys(self):
        prefs = load_preferences({"sessionTimeoutMinutes": 30, "budgetPeriodLength": "annual"})
        assert prefs.session_timeout_minutes == 30
        assert prefs.budget_period_length is BudgetPeriod.ANNUAL

    def test_merges_over_given_base(self):
        base = load_preferences({"company_name": "Globex"})
        prefs = load_preferences({"weekly_reports": True}, base=base)
        assert prefs.company_name == "Globex"
        assert prefs.weekly_reports is True

    def test_reports_every_invalid_value(self):
        with pytest.raises(ValidationError) as exc:
            load_preferences({"session_timeout_minutes": 1, "fiscal_year_start": "13-01"})
        assert len(exc.value.violations) == 2

    @pytest.mark.parametrize("raw", ["{not json", "[1, 2]"])
    def test_rejects_non_object_documents(self, raw):
        with pytest.raises(ValidationError):
            load_preferences(raw)

    def test_rejects_bytes_that_are_not_utf8(self):
        with pytest.raises(ValidationError) as exc:
            load_preferences(b"\xff\xfe{\x00}")
        assert exc.value.violations[0].code == "invalid_encoding"


def test_dump_then_load_keeps_values():
    prefs = load_preferences({"auto_approval_threshold": "2500.50", "theme": "light"})
    text = dump_preferences(prefs)
    assert json.loads(text)["theme"] == "light"
    assert load_preferences(text).auto_approval_threshold == Decimal("2500.50")


class TestPreferencesService:
    def test_missing_file_gives_defaults(self, tmp_path):
        assert preferences_service.get_preferences(tmp_path / "none.json").model_dump() == default_preferences().model_dump()

    def test_update_persists_merge(self, tmp_path):
        path = tmp_path / "prefs.json"
        preferences_service.update_preferences({"company_name": "Initech"}, path)
        preferences_service.update_preferences({"theme": "dark"}, path)

        stored = preferences_service.get_preferences(path)
        assert stored.company_name == "Initech"
        assert stored.theme is Theme.DARK

    def test_import_replaces_previous_values(self, tmp_path):
        path = tmp_path / "prefs.json"
        preferences_service.update_preferences({"company_name": "Initech"}, path)

        prefs = preferences_service.import_preferences(b'{"weekly_reports": true}', path)

        assert prefs.company_name == default_preferences().company_name
        assert prefs.weekly_reports is True

    def test_reset(self, tmp_path):
        path = tmp_path / "prefs.json"
        preferences_service.update_preferences({"company_name": "Initech"}, path)
        assert preferences_service.reset_preferences(path).model_dump() == default_preferences().model_dump()
