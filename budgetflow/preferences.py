"""
Application preferences (company profile, notifications, workflow, display).

``AppPreferences`` is the explicit schema of the settings document that the
admin screen edits. Stored documents and imported files are merged over the
defaults: unknown keys are ignored and missing keys keep their default, so
a document written by an older release still loads. Keys may be given in
snake_case or camelCase.
"""

from __future__ import annotations

import json
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping

import pydantic
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from budgetflow.domain.errors import ValidationError, Violation


class BudgetPeriod(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    SEMI_ANNUAL = "semi-annual"
    ANNUAL = "annual"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"


class AppPreferences(BaseModel):
    """Organisation-wide preferences.

    Attributes:
        company_name: Shown in report headers.
        fiscal_year_start: ``MM-DD`` of the first fiscal day.
        default_currency: ISO code prefilled on new budgets.
        auto_approval_threshold: Amount below which the UI suggests fast-track
                                 approval. Advisory; the lifecycle never
                                 approves on its own.
        budget_period_length: Default period length on the budget form.
        session_timeout_minutes: Idle timeout enforced by the frontend.
    """

    # Company
    company_name: str = Field(default="Acme Corporation", max_length=200)
    fiscal_year_start: str = Field(default="01-01", pattern=r"^(0[1-9]|1[0-2])-(0[1-9]|[12]\d|3[01])$")
    default_currency: str = Field(default="USD", min_length=3, max_length=3)

    # Notifications
    email_notifications: bool = True
    budget_submission_alerts: bool = True
    approval_deadline_reminders: bool = True
    weekly_reports: bool = False

    # Security
    require_two_factor_auth: bool = False
    session_timeout_minutes: int = Field(default=60, ge=5, le=1440)
    password_expiry_days: int = Field(default=90, ge=0, le=365)

    # Workflow
    auto_approval_threshold: Decimal = Field(default=Decimal("1000"), ge=0)
    budget_period_length: BudgetPeriod = BudgetPeriod.QUARTERLY
    allow_draft_saving: bool = True
    require_justification: bool = True

    # Display
    theme: Theme = Theme.SYSTEM
    date_format: str = Field(default="MM/dd/yyyy", max_length=20)
    number_format: str = Field(default="en-US", max_length=20)
    timezone: str = Field(default="UTC-5", max_length=50)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


def default_preferences() -> AppPreferences:
    return AppPreferences()


def _parse_raw(raw: str | bytes | Mapping[str, Any] | None) -> dict[str, Any]:
    if raw is None:
        return {}
    if isinstance(raw, Mapping):
        return dict(raw)
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ValidationError([
                Violation("preferences", "invalid_encoding", f"Preferences must be UTF-8 text: {exc.reason}.")
            ]) from exc
    if not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValidationError([
            Violation("preferences", "invalid_json", f"Preferences are not valid JSON: {exc.msg}.")
        ]) from exc
    if not isinstance(data, dict):
        raise ValidationError([
            Violation("preferences", "invalid_document", "Preferences must be a JSON object.")
        ])
    return data


def load_preferences(
    raw: str | bytes | Mapping[str, Any] | None,
    base: AppPreferences | None = None,
) -> AppPreferences:
    """Merge a stored or imported document over *base* (the defaults when omitted).

    Args:
        raw: JSON text, an already-decoded mapping, or ``None``.
        base: Preferences to merge over.

    Returns:
        A complete ``AppPreferences``.

    Raises:
        ValidationError: If the document is not a JSON object or a known key
                         holds an invalid value. Every bad field is reported.
    """
    data = _parse_raw(raw)
    merged = (base or default_preferences()).model_dump()
    # Validate the incoming keys on their own so errors name the caller's keys.
    try:
        incoming = AppPreferences.model_validate(data).model_dump(exclude_unset=True)
    except pydantic.ValidationError as exc:
        raise ValidationError([
            Violation(
                ".".join(str(p) for p in err["loc"]) or "preferences",
                err["type"],
                err["msg"],
            )
            for err in exc.errors()
        ]) from None
    merged.update(incoming)
    return AppPreferences.model_validate(merged)


def dump_preferences(prefs: AppPreferences) -> str:
    """Serialise *prefs* to indented JSON (snake_case keys)."""
    return prefs.model_dump_json(indent=2)
