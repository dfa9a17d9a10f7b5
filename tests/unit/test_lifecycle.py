"""Unit tests for the budget lifecycle state machine."""

from datetime import datetime, timezone

import pytest

from budgetflow.domain.errors import ConcurrentModificationError, InvalidTransition, ValidationError
from budgetflow.domain.lifecycle import (
    allowed_events,
    apply_transition,
    can_transition,
    check_invariants,
    plan_transition,
)
from budgetflow.utils.constants import BudgetStatus, LifecycleEvent
from tests.factories import item, record

NOW = datetime(2024, 2, 1, 12, 0, tzinfo=timezone.utc)
CATALOG = {"IT": ["IT-001"]}


def _submittable(**fields):
    return record(line_items=[item()], **fields)


class TestTransitionTable:
    def test_draft_allows_submit_and_edit(self):
        assert allowed_events("Draft") == [LifecycleEvent.SUBMIT, LifecycleEvent.EDIT]

    def test_terminal_statuses_allow_nothing(self):
        assert allowed_events(BudgetStatus.APPROVED) == []
        assert allowed_events(BudgetStatus.REJECTED) == []

    def test_under_review_decisions(self):
        assert can_transition("Under Review", "approve")
        assert can_transition("Under Review", "reject")
        assert not can_transition("Under Review", "start_review")
        assert not can_transition("Draft", "approve")


class TestPlanTransition:
    def test_submit_records_status_and_timestamp_together(self):
        budget = _submittable()

        t = plan_transition(budget, "submit", "ivan", catalog=CATALOG, now=NOW)

        assert t.from_status is BudgetStatus.DRAFT
        assert t.to_status is BudgetStatus.SUBMITTED
        assert t.changes["status"] == "Submitted"
        assert t.changes["submitted_at"] == NOW
        assert t.changes["submitted_by"] == "ivan"
        # planning never touches the record
        assert budget.status == "Draft"
        assert budget.submitted_at is None

    def test_submit_runs_the_validator(self):
        budget = record(cost_center=None, line_items=[])
        with pytest.raises(ValidationError) as exc:
            plan_transition(budget, "submit", "ivan", catalog=CATALOG)
        assert {v.field for v in exc.value.violations} == {"cost_center", "line_items"}

    def test_resubmit_clears_previous_reviewer(self):
        budget = _submittable(
            status="Revision Required", submitted_by="ivan", reviewed_by="fiona", reviewed_at=NOW,
        )
        t = plan_transition(budget, "submit", "ivan", catalog=CATALOG, now=NOW)
        assert t.changes["reviewed_by"] is None
        assert t.changes["reviewed_at"] is None

    def test_start_review_claims_reviewer(self):
        t = plan_transition(record(status="Submitted"), "start_review", "fiona", now=NOW)
        assert t.to_status is BudgetStatus.UNDER_REVIEW
        assert t.changes["reviewed_by"] == "fiona"
        assert "reviewed_at" not in t.changes

    def test_approve_records_reviewer_and_time(self):
        t = plan_transition(record(status="Under Review"), "approve", "fiona", now=NOW)
        assert t.changes["status"] == "Approved"
        assert t.changes["reviewed_by"] == "fiona"
        assert t.changes["reviewed_at"] == NOW
        assert "review_comments" not in t.changes

    def test_reject_without_comments_fails(self):
        with pytest.raises(ValidationError):
            plan_transition(record(status="Submitted"), "reject", "fiona", comments="")

    def test_reject_keeps_trimmed_comments(self):
        t = plan_transition(record(status="Submitted"), "reject", "fiona", comments="  Too high  ")
        assert t.changes["review_comments"] == "Too high"

    def test_reject_leaves_submission_untouched(self):
        submitted_at = datetime(2024, 1, 20, 9, 30, tzinfo=timezone.utc)
        budget = record(status="Under Review", submitted_at=submitted_at, submitted_by="ivan")

        t = plan_transition(budget, "reject", "fiona", comments="Too high", now=NOW)
        apply_transition(budget, t)

        assert "submitted_at" not in t.changes
        assert budget.submitted_at == submitted_at
        assert budget.submitted_by == "ivan"
        assert budget.reviewed_at == NOW

    def test_approval_without_comments_keeps_earlier_review_comments(self):
        budget = _submittable()
        for event, comments in [
            ("submit", None),
            ("request_revision", "Split the docks"),
            ("submit", None),
            ("approve", None),
        ]:
            actor = "ivan" if event == "submit" else "fiona"
            apply_transition(budget, plan_transition(budget, event, actor, comments=comments, catalog=CATALOG, now=NOW))

        assert budget.status == "Approved"
        assert budget.review_comments == "Split the docks"

    def test_approval_comments_replace_earlier_ones(self):
        budget = record(status="Submitted", review_comments="Split the docks")
        t = plan_transition(budget, "approve", "fiona", comments=" Looks good ", now=NOW)
        assert t.changes["review_comments"] == "Looks good"

    def test_review_decision_requires_actor(self):
        with pytest.raises(ValidationError) as exc:
            plan_transition(record(status="Submitted"), "approve", None)
        assert exc.value.violations[0].field == "reviewed_by"

    def test_illegal_event(self):
        with pytest.raises(InvalidTransition) as exc:
            plan_transition(record(status="Approved"), "submit", "ivan")
        assert exc.value.status == "Approved"
        assert exc.value.event == "submit"

    def test_edit_keeps_status(self):
        t = plan_transition(record(status="Submitted"), LifecycleEvent.EDIT, "ivan", now=NOW)
        assert t.to_status is BudgetStatus.SUBMITTED
        assert dict(t.changes) == {"status": "Submitted", "updated_at": NOW}

    def test_changes_are_read_only(self):
        t = plan_transition(record(status="Submitted"), "edit", "ivan")
        with pytest.raises(TypeError):
            t.changes["status"] = "Approved"


class TestApplyTransition:
    def test_applies_every_change(self):
        budget = record(status="Submitted")
        t = plan_transition(budget, "approve", "fiona", now=NOW)

        apply_transition(budget, t)

        assert budget.status == "Approved"
        assert budget.reviewed_by == "fiona"
        assert budget.reviewed_at == NOW

    def test_stale_plan_is_refused(self):
        budget = record(status="Submitted")
        first = plan_transition(budget, "approve", "fiona", now=NOW)
        second = plan_transition(budget, "reject", "mike", comments="No", now=NOW)

        apply_transition(budget, first)
        with pytest.raises(ConcurrentModificationError):
            apply_transition(budget, second)
        assert budget.status == "Approved"
        assert budget.reviewed_by == "fiona"


class TestCheckInvariants:
    def test_full_walk_keeps_invariants(self):
        budget = _submittable()
        for event, actor, comments in [
            ("submit", "ivan", None),
            ("start_review", "fiona", None),
            ("request_revision", "fiona", "Split the hardware"),
            ("submit", "ivan", None),
            ("reject", "fiona", "Out of budget"),
        ]:
            apply_transition(budget, plan_transition(budget, event, actor, comments=comments, catalog=CATALOG, now=NOW))
            assert check_invariants(budget) == []
        assert budget.status == "Rejected"

    def test_detects_partial_update(self):
        budget = record(status="Approved", submitted_at=NOW, reviewed_by=None, reviewed_at=None)
        assert {v.field for v in check_invariants(budget)} == {"reviewed_by", "reviewed_at"}
