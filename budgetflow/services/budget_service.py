"""
Budget request service layer.

All database access for ``/api/budgets`` lives here. Functions receive a
SQLAlchemy ``Session`` plus the acting ``UserProfile`` and return ORM
objects or schema instances ready for serialisation by FastAPI.

Design notes
------------
- Visibility: department-scoped roles only ever see budgets of their own
  department; a budget outside the caller's scope is reported as not found.
- Filtering runs through ``budgetflow.domain.filters`` over the scoped rows
  so the table, the reports and the exports share one predicate.
- Line items are written together with ``recalculate`` in one transaction,
  so ``amount`` always equals the sum of the line totals.
- Status changes are planned by ``budgetflow.domain.plan_transition`` and
  written as one compare-and-swap UPDATE conditioned on the status read.
  Losing the race raises ``ConcurrentModificationError`` (HTTP 409).
- Business ids are ``BUD-nnnnnn`` (max + 1). The unique constraint on
  ``budget.budget_id`` settles concurrent creation; a collision is retried
  up to ``BUSINESS_ID_RETRIES`` times.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, status
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from budgetflow.config import get_settings
from budgetflow.database import commit_or_raise, store_errors
from budgetflow.domain.calculator import recalculate, to_money
from budgetflow.domain.errors import (
    ConcurrentModificationError,
    ExternalStoreError,
    NotFoundError,
    ValidationError,
    Violation,
)
from budgetflow.domain.filters import BudgetFilter, filter_records, list_distinct_values, next_business_id
from budgetflow.domain.lifecycle import Transition, plan_transition
from budgetflow.models.budget import Budget
from budgetflow.models.budget_line_item import BudgetLineItem
from budgetflow.models.user_profile import UserProfile
from budgetflow.schemas.budget import (
    BudgetCreate,
    BudgetListResponse,
    BudgetResponse,
    BudgetUpdate,
    FilterOptionsResponse,
    LineItemIn,
)
from budgetflow.schemas.common import PaginationParams
from budgetflow.services import department_service
from budgetflow.services.auth_service import can_author, can_review, department_scope
from budgetflow.utils.constants import BudgetStatus, LifecycleEvent, Role

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _scoped_query(db: Session, user: UserProfile) -> Query:
    query = db.query(Budget)
    scope = department_scope(user)
    if scope is not None:
        query = query.filter(Budget.department == scope)
    return query


def _forbidden(user: UserProfile, action: str) -> HTTPException:
    logger.warning("Denied %s for username='%s' role='%s'", action, user.username, user.role)
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail=f"Role '{user.role}' is not allowed to {action}.",
    )


def _require_author(user: UserProfile, action: str) -> None:
    if not can_author(user):
        raise _forbidden(user, action)


def _require_reviewer(user: UserProfile, action: str) -> None:
    if not can_review(user):
        raise _forbidden(user, action)


def _require_owner(user: UserProfile, budget: Budget, action: str) -> None:
    """Only the budget's author (or an admin) may change it before review."""
    if user.role != Role.ADMIN.value and budget.created_by != user.username:
        raise _forbidden(user, f"{action} budgets created by someone else")


def _check_department_scope(user: UserProfile, department: str | None) -> None:
    scope = department_scope(user)
    if scope is not None and department != scope:
        raise ValidationError([
            Violation("department", "out_of_scope", f"You can only create budgets for '{scope}'.")
        ])


def _build_line_items(items: list[LineItemIn]) -> list[BudgetLineItem]:
    return [
        BudgetLineItem(
            category=item.category,
            subcategory=item.subcategory,
            description=item.description,
            quantity=item.quantity,
            unit_cost=item.unit_cost,
            notes=item.notes,
        )
        for item in items
    ]


def _write_transition(db: Session, budget: Budget, transition: Transition) -> Budget:
    """Persist *transition* with a compare-and-swap on the status read earlier.

    Any pending changes on the session (edited fields, replaced line items)
    are committed in the same transaction.
    """
    stmt = (
        update(Budget)
        .where(Budget.id == budget.id, Budget.status == transition.from_status.value)
        .values(**dict(transition.changes))
        .execution_options(synchronize_session=False)
    )
    with store_errors(db, "write a budget transition"):
        db.flush()
        result = db.execute(stmt)
    if result.rowcount != 1:
        db.rollback()
        logger.warning(
            "Concurrent modification on %s: expected status '%s'",
            budget.budget_id, transition.from_status.value,
        )
        raise ConcurrentModificationError(budget.budget_id, transition.from_status.value)
    commit_or_raise(db)
    db.refresh(budget)
    return budget


# ---------------------------------------------------------------------------
# Read operations
# ---------------------------------------------------------------------------


def fetch_budgets(
    db: Session,
    user: UserProfile,
    criteria: BudgetFilter | None = None,
) -> list[Budget]:
    """Return every budget visible to *user* matching *criteria*, newest first."""
    with store_errors(db, "list budgets"):
        rows = _scoped_query(db, user).order_by(Budget.created_at.desc(), Budget.id.desc()).all()
    if criteria is not None and not criteria.is_empty:
        rows = filter_records(rows, criteria)
    logger.debug("fetch_budgets: %d rows for username='%s'", len(rows), user.username)
    return rows


def list_budgets(
    db: Session,
    user: UserProfile,
    criteria: BudgetFilter,
    pagination: PaginationParams,
) -> BudgetListResponse:
    """Return one page of the budget table.

    Args:
        db: Active SQLAlchemy session.
        user: Caller; determines the department scope.
        criteria: Search and filter terms.
        pagination: Page number and page size.

    Returns:
        A ``BudgetListResponse`` with the page rows and the total match count.
    """
    rows = fetch_budgets(db, user, criteria)
    start = (pagination.page - 1) * pagination.page_size
    page_rows = rows[start:start + pagination.page_size]
    return BudgetListResponse(
        rows=[BudgetResponse.model_validate(r) for r in page_rows],
        total=len(rows),
        page=pagination.page,
        page_size=pagination.page_size,
    )


def get_budget(db: Session, user: UserProfile, budget_id: str) -> Budget:
    """Return a budget by business id.

    Raises:
        NotFoundError: If the budget does not exist or is outside the
                       caller's department scope.
    """
    with store_errors(db, f"load budget {budget_id}"):
        budget: Budget | None = _scoped_query(db, user).filter(Budget.budget_id == budget_id).first()
    if budget is None:
        raise NotFoundError("Budget", budget_id)
    return budget


def filter_options(db: Session, user: UserProfile) -> FilterOptionsResponse:
    """Distinct values present in the caller's budgets, for the table dropdowns."""
    rows = fetch_budgets(db, user)
    status_order = {s.value: i for i, s in enumerate(BudgetStatus)}
    return FilterOptionsResponse(
        departments=sorted(list_distinct_values(rows, "department")),
        cost_centers=sorted(list_distinct_values(rows, "cost_center")),
        statuses=sorted(list_distinct_values(rows, "status"), key=lambda s: status_order.get(s, len(status_order))),
        budget_types=sorted(list_distinct_values(rows, "budget_type")),
    )


# ---------------------------------------------------------------------------
# Write operations
# ---------------------------------------------------------------------------


def create_budget(db: Session, user: UserProfile, data: BudgetCreate) -> Budget:
    """Create a Draft budget with a freshly generated business id.

    Drafts may be incomplete; only line item arithmetic is checked here.

    Raises:
        HTTPException 403: If the caller's role cannot author budgets.
        ValidationError: If a line item has an invalid quantity or cost, or
                         a department-scoped caller targets another department.
        ExternalStoreError: If no free business id was found after retrying.
    """
    _require_author(user, "create budgets")
    settings = get_settings()
    department = data.department or (user.department if department_scope(user) is not None else None)
    _check_department_scope(user, department)

    for attempt in range(1, settings.BUSINESS_ID_RETRIES + 1):
        with store_errors(db, "read budget ids"):
            existing = [
                bid for (bid,) in db.query(Budget.budget_id)
                .filter(Budget.budget_id.like(f"{settings.BUSINESS_ID_PREFIX}-%"))
                .all()
            ]
        budget = Budget(
            budget_id=next_business_id(existing, settings.BUSINESS_ID_PREFIX),
            department=department,
            cost_center=data.cost_center,
            budget_type=data.budget_type,
            currency=(data.currency or settings.DEFAULT_CURRENCY).upper(),
            description=data.description,
            justification=data.justification,
            period_start=data.period_start,
            period_end=data.period_end,
            status=BudgetStatus.DRAFT.value,
            created_by=user.username,
        )
        budget.line_items = _build_line_items(data.line_items)
        recalculate(budget)

        db.add(budget)
        try:
            commit_or_raise(db)
        except IntegrityError:
            logger.warning(
                "create_budget: business id %s collided (attempt %d/%d)",
                budget.budget_id, attempt, settings.BUSINESS_ID_RETRIES,
            )
            continue
        db.refresh(budget)
        logger.info(
            "create_budget: created %s (id=%d) amount=%s by '%s'",
            budget.budget_id, budget.id, budget.amount, user.username,
        )
        return budget

    raise ExternalStoreError(
        f"Could not allocate a unique budget id after {settings.BUSINESS_ID_RETRIES} attempts."
    )


def update_budget(db: Session, user: UserProfile, budget_id: str, data: BudgetUpdate) -> Budget:
    """Apply the edit event: partial field update plus optional line item replacement.

    When ``line_items`` is supplied the whole collection is replaced and the
    amount recalculated in the same transaction. ``amount`` may only be set
    directly on a budget that has no line items.

    Raises:
        HTTPException 403: If the caller cannot author budgets, or is not an
                           admin and did not create this one.
        NotFoundError: If the budget is not visible to the caller.
        InvalidTransition: If the budget is Approved or Rejected.
        ValidationError: For invalid line items, a directly-set amount on an
                         itemised budget, or an out-of-scope department.
        ConcurrentModificationError: If the status changed meanwhile.
    """
    _require_author(user, "edit budgets")
    budget = get_budget(db, user, budget_id)
    _require_owner(user, budget, "edit")
    transition = plan_transition(budget, LifecycleEvent.EDIT, user.username)

    update_data = data.model_dump(exclude_unset=True, exclude={"line_items", "amount"})
    if "department" in update_data:
        _check_department_scope(user, update_data["department"])
    if update_data.get("currency"):
        update_data["currency"] = update_data["currency"].upper()
    elif "currency" in update_data:
        del update_data["currency"]

    try:
        for field, value in update_data.items():
            setattr(budget, field, value)

        if data.line_items is not None:
            budget.line_items = _build_line_items(data.line_items)
            recalculate(budget)

        if data.amount is not None:
            if budget.line_items:
                raise ValidationError([
                    Violation("amount", "derived", "Amount is derived from line items and cannot be set directly.")
                ])
            if data.amount < 0:
                raise ValidationError([Violation("amount", "negative", "Amount must be >= 0.")])
            budget.amount = to_money(data.amount)
    except ValidationError:
        db.rollback()
        raise

    _write_transition(db, budget, transition)
    logger.info(
        "update_budget: %s fields=%s line_items=%s by '%s'",
        budget_id, sorted(data.model_fields_set), data.line_items is not None, user.username,
    )
    return budget


def delete_budget(db: Session, user: UserProfile, budget_id: str) -> None:
    """Delete a budget. Authors may delete their own Drafts; admins any budget."""
    budget = get_budget(db, user, budget_id)
    if user.role != Role.ADMIN.value:
        _require_author(user, "delete budgets")
        _require_owner(user, budget, "delete")
        if budget.status != BudgetStatus.DRAFT.value:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Only Draft budgets can be deleted (status is '{budget.status}').",
            )
    db.delete(budget)
    commit_or_raise(db)
    logger.info("delete_budget: deleted %s by '%s'", budget_id, user.username)


# ---------------------------------------------------------------------------
# Lifecycle operations
# ---------------------------------------------------------------------------


def _transition(
    db: Session,
    user: UserProfile,
    budget_id: str,
    event: LifecycleEvent,
    comments: str | None = None,
) -> Budget:
    budget = get_budget(db, user, budget_id)
    if event is LifecycleEvent.SUBMIT:
        _require_owner(user, budget, "submit")
    catalog = department_service.build_catalog(db) if event is LifecycleEvent.SUBMIT else None
    transition = plan_transition(budget, event, user.username, comments=comments, catalog=catalog)
    _write_transition(db, budget, transition)
    logger.info(
        "%s: %s %s -> %s by '%s'",
        event.value, budget_id, transition.from_status.value, transition.to_status.value, user.username,
    )
    return budget


def submit_budget(db: Session, user: UserProfile, budget_id: str) -> Budget:
    """Submit a Draft (or resubmit a Revision Required budget) for review.

    Raises:
        HTTPException 403: If the caller is neither the author nor an admin.
        ValidationError: With every rule the budget breaks.
        InvalidTransition: If the budget is not Draft or Revision Required.
    """
    _require_author(user, "submit budgets")
    return _transition(db, user, budget_id, LifecycleEvent.SUBMIT)


def start_review(db: Session, user: UserProfile, budget_id: str) -> Budget:
    _require_reviewer(user, "review budgets")
    return _transition(db, user, budget_id, LifecycleEvent.START_REVIEW)


def approve_budget(db: Session, user: UserProfile, budget_id: str, comments: str | None = None) -> Budget:
    _require_reviewer(user, "approve budgets")
    return _transition(db, user, budget_id, LifecycleEvent.APPROVE, comments)


def reject_budget(db: Session, user: UserProfile, budget_id: str, comments: str | None) -> Budget:
    """Reject a pending budget; *comments* are mandatory."""
    _require_reviewer(user, "reject budgets")
    return _transition(db, user, budget_id, LifecycleEvent.REJECT, comments)


def request_revision(db: Session, user: UserProfile, budget_id: str, comments: str | None) -> Budget:
    """Send a pending budget back to its author; *comments* are mandatory."""
    _require_reviewer(user, "request revisions")
    return _transition(db, user, budget_id, LifecycleEvent.REQUEST_REVISION, comments)
