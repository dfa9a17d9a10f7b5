"""
Budget lifecycle state machine.

Transitions are planned, not performed: ``plan_transition`` checks that the
event is legal from the record's current status, runs the validator, and
returns an immutable ``Transition`` carrying the complete change set
(status, actor, timestamps, comments). Nothing is written to the record
until the caller applies that change set in one step, either in memory via
``apply_transition`` or as a single conditional UPDATE in the service layer.
A failed plan therefore never leaves a record half-updated.

Transition table
----------------
=================  ==================  =================  =========================================
From               Event               To                 Recorded
=================  ==================  =================  =========================================
Draft              submit              Submitted          submitted_at (validator must pass)
Revision Required  submit              Submitted          submitted_at, reviewer fields cleared
Submitted          start_review        Under Review       reviewed_by (claim)
Submitted/Review   approve             Approved           reviewed_by, reviewed_at, comments
Submitted/Review   reject              Rejected           reviewed_by, reviewed_at, comments (req.)
Submitted/Review   request_revision    Revision Required  reviewed_by, reviewed_at, comments (req.)
any non-terminal   edit                (unchanged)        updated_at
=================  ==================  =================  =========================================
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Mapping

from budgetflow.domain.errors import (
    ConcurrentModificationError,
    InvalidTransition,
    Violation,
)
from budgetflow.domain.validator import (
    Catalog,
    ensure_valid,
    validate_for_review,
    validate_for_submission,
)
from budgetflow.utils.constants import (
    TERMINAL_STATUSES,
    BudgetStatus,
    LifecycleEvent,
    ensure_exhaustive,
)

logger = logging.getLogger(__name__)

_NON_TERMINAL: frozenset[BudgetStatus] = frozenset(set(BudgetStatus) - TERMINAL_STATUSES)
_IN_REVIEW: frozenset[BudgetStatus] = frozenset({BudgetStatus.SUBMITTED, BudgetStatus.UNDER_REVIEW})

# event -> (legal source statuses, target status; None keeps the current one)
TRANSITIONS: dict[LifecycleEvent, tuple[frozenset[BudgetStatus], BudgetStatus | None]] = {
    LifecycleEvent.SUBMIT: (
        frozenset({BudgetStatus.DRAFT, BudgetStatus.REVISION_REQUIRED}),
        BudgetStatus.SUBMITTED,
    ),
    LifecycleEvent.START_REVIEW: (frozenset({BudgetStatus.SUBMITTED}), BudgetStatus.UNDER_REVIEW),
    LifecycleEvent.APPROVE: (_IN_REVIEW, BudgetStatus.APPROVED),
    LifecycleEvent.REJECT: (_IN_REVIEW, BudgetStatus.REJECTED),
    LifecycleEvent.REQUEST_REVISION: (_IN_REVIEW, BudgetStatus.REVISION_REQUIRED),
    LifecycleEvent.EDIT: (_NON_TERMINAL, None),
}
ensure_exhaustive(TRANSITIONS, LifecycleEvent, "TRANSITIONS")

_REVIEW_DECISIONS: frozenset[LifecycleEvent] = frozenset({
    LifecycleEvent.APPROVE,
    LifecycleEvent.REJECT,
    LifecycleEvent.REQUEST_REVISION,
})


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def current_status(budget: Any) -> BudgetStatus:
    """Return the record's status as a ``BudgetStatus`` (records may hold plain strings)."""
    return BudgetStatus(budget.status)


@dataclass(frozen=True)
class Transition:
    """A validated, not-yet-applied status change.

    Attributes:
        event: The lifecycle event.
        from_status: Status the record must still be in when applied.
        to_status: Resulting status.
        changes: Every field to write, including ``status``.
    """

    event: LifecycleEvent
    from_status: BudgetStatus
    to_status: BudgetStatus
    changes: Mapping[str, Any] = field(default_factory=dict)


def allowed_events(status: BudgetStatus | str) -> list[LifecycleEvent]:
    """Events that may be applied to a record in *status*, in declaration order."""
    state = BudgetStatus(status)
    return [event for event, (sources, _) in TRANSITIONS.items() if state in sources]


def can_transition(status: BudgetStatus | str, event: LifecycleEvent | str) -> bool:
    sources, _ = TRANSITIONS[LifecycleEvent(event)]
    return BudgetStatus(status) in sources


def plan_transition(
    budget: Any,
    event: LifecycleEvent | str,
    actor: str | None,
    *,
    comments: str | None = None,
    catalog: Catalog | None = None,
    now: datetime | None = None,
) -> Transition:
    """Validate *event* against *budget* and build its change set.

    Args:
        budget: The record as currently stored. Not modified.
        event: Lifecycle event to apply.
        actor: Identity of the user performing the event. Required for
               review decisions.
        comments: Review comments (mandatory for reject / request_revision).
        catalog: Department → cost center codes, used by the submission check.
        now: Timestamp to record; defaults to the current UTC time.

    Returns:
        A ``Transition`` ready to be applied atomically.

    Raises:
        InvalidTransition: If *event* is not legal from the current status.
        ValidationError: With every violation found, if validation fails.
    """
    evt = LifecycleEvent(event)
    state = current_status(budget)
    sources, target = TRANSITIONS[evt]
    if state not in sources:
        raise InvalidTransition(state.value, evt.value)

    ts = now or utcnow()
    to_status = target or state
    changes: dict[str, Any] = {"status": to_status.value, "updated_at": ts}

    if evt is LifecycleEvent.SUBMIT:
        ensure_valid(validate_for_submission(budget, catalog))
        changes["submitted_at"] = ts
        changes["submitted_by"] = getattr(budget, "submitted_by", None) or actor
        if state is BudgetStatus.REVISION_REQUIRED:
            changes["reviewed_by"] = None
            changes["reviewed_at"] = None
    elif evt is LifecycleEvent.START_REVIEW:
        if actor:
            changes["reviewed_by"] = actor
    elif evt in _REVIEW_DECISIONS:
        violations: list[Violation] = []
        if not actor:
            violations.append(Violation("reviewed_by", "required", "Reviewer identity is required."))
        violations.extend(validate_for_review(budget, evt, comments))
        ensure_valid(violations)
        changes["reviewed_by"] = actor
        changes["reviewed_at"] = ts
        # an approval without comments keeps whatever the last reviewer wrote
        if comments and comments.strip():
            changes["review_comments"] = comments.strip()

    logger.debug(
        "plan_transition: %s %s -> %s by %s",
        evt.value, state.value, to_status.value, actor,
    )
    return Transition(
        event=evt,
        from_status=state,
        to_status=to_status,
        changes=MappingProxyType(changes),
    )


def apply_transition(budget: Any, transition: Transition) -> Any:
    """Write *transition*'s change set onto *budget* in one step.

    Raises:
        ConcurrentModificationError: If the record left ``from_status``
            after the transition was planned.
    """
    if current_status(budget) is not transition.from_status:
        raise ConcurrentModificationError(getattr(budget, "id", None), transition.from_status.value)
    for name, value in transition.changes.items():
        setattr(budget, name, value)
    return budget


def check_invariants(budget: Any) -> list[Violation]:
    """Report status/timestamp/actor combinations that must never be stored."""
    errors: list[Violation] = []
    state = current_status(budget)
    if state is not BudgetStatus.DRAFT and getattr(budget, "submitted_at", None) is None:
        errors.append(
            Violation("submitted_at", "missing", f"A '{state.value}' budget must have a submission timestamp.")
        )
    if state in TERMINAL_STATUSES:
        if not getattr(budget, "reviewed_by", None):
            errors.append(Violation("reviewed_by", "missing", f"A '{state.value}' budget must have a reviewer."))
        if getattr(budget, "reviewed_at", None) is None:
            errors.append(Violation("reviewed_at", "missing", f"A '{state.value}' budget must have a review timestamp."))
    if state is BudgetStatus.REJECTED:
        comments = getattr(budget, "review_comments", None)
        if not comments or not comments.strip():
            errors.append(Violation("review_comments", "missing", "A rejected budget must have review comments."))
    return errors
