"""
Budget requests router.

Mounts under ``/api/budgets`` (prefix set in ``main.py``).

All endpoints require a valid JWT token. Budgets are addressed by their
business id (``BUD-000042``). Role checks live in ``budget_service`` so
that department scoping and authoring/review rights are enforced in one
place.

Endpoints
---------
GET    /                         - Paginated, filterable budget table.
GET    /filter-options           - Distinct values for the table dropdowns.
GET    /{budget_id}              - One budget with its line items.
POST   /                         - Create a Draft.
PUT    /{budget_id}              - Edit (fields and/or line items).
DELETE /{budget_id}              - Delete (own Draft, or admin).
POST   /{budget_id}/submit       - Draft / Revision Required -> Submitted.
POST   /{budget_id}/start-review - Submitted -> Under Review.
POST   /{budget_id}/approve      - -> Approved.
POST   /{budget_id}/reject       - -> Rejected (comments required).
POST   /{budget_id}/request-revision - -> Revision Required (comments required).
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Body, Depends, Path, status
from sqlalchemy.orm import Session

from budgetflow.database import get_db
from budgetflow.domain.filters import BudgetFilter
from budgetflow.models.user_profile import UserProfile
from budgetflow.routers.params import budget_filter_params, pagination_params
from budgetflow.schemas.budget import (
    BudgetCreate,
    BudgetListResponse,
    BudgetResponse,
    BudgetUpdate,
    FilterOptionsResponse,
    ReviewRequest,
)
from budgetflow.schemas.common import MessageResponse, PaginationParams, ValidationErrorResponse
from budgetflow.services import budget_service
from budgetflow.services.auth_service import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Budgets"])

BudgetIdPath = Annotated[str, Path(description="Business id, e.g. 'BUD-000042'.", max_length=20)]

_COMMON_RESPONSES = {
    401: {"description": "Missing or invalid JWT."},
    403: {"description": "Role not allowed to perform this action."},
    404: {"description": "Budget not found or outside the caller's department."},
}
_TRANSITION_RESPONSES = {
    **_COMMON_RESPONSES,
    409: {"description": "Illegal transition, or the budget changed concurrently."},
    422: {"model": ValidationErrorResponse, "description": "Validation failed; every violation is listed."},
}


# ---------------------------------------------------------------------------
# Read endpoints
# ---------------------------------------------------------------------------


@router.get(
    "/",
    response_model=BudgetListResponse,
    summary="List budgets",
    description=(
        "Returns one page of the budgets visible to the caller, newest first. "
        "Department roles only see their own department."
    ),
    responses={401: _COMMON_RESPONSES[401]},
)
def list_budgets(
    criteria: Annotated[BudgetFilter, Depends(budget_filter_params)],
    pagination: Annotated[PaginationParams, Depends(pagination_params)],
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UserProfile, Depends(get_current_user)],
) -> BudgetListResponse:
    logger.debug(
        "GET /budgets filters=%s page=%d size=%d",
        criteria, pagination.page, pagination.page_size,
    )
    return budget_service.list_budgets(db, current_user, criteria, pagination)


@router.get(
    "/filter-options",
    response_model=FilterOptionsResponse,
    summary="Filter dropdown values",
    responses={401: _COMMON_RESPONSES[401]},
)
def get_filter_options(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UserProfile, Depends(get_current_user)],
) -> FilterOptionsResponse:
    return budget_service.filter_options(db, current_user)


@router.get(
    "/{budget_id}",
    response_model=BudgetResponse,
    summary="Budget detail",
    responses={401: _COMMON_RESPONSES[401], 404: _COMMON_RESPONSES[404]},
)
def get_budget(
    budget_id: BudgetIdPath,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UserProfile, Depends(get_current_user)],
) -> BudgetResponse:
    return BudgetResponse.model_validate(budget_service.get_budget(db, current_user, budget_id))


# ---------------------------------------------------------------------------
# Write endpoints
# ---------------------------------------------------------------------------


@router.post(
    "/",
    response_model=BudgetResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a Draft budget",
    description=(
        "Creates a Draft with a generated business id. Line totals and the "
        "budget amount are computed from quantity x unit cost."
    ),
    responses={
        401: _COMMON_RESPONSES[401],
        403: _COMMON_RESPONSES[403],
        422: _TRANSITION_RESPONSES[422],
        503: {"description": "Could not allocate a business id or the database is unavailable."},
    },
)
def create_budget(
    data: BudgetCreate,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UserProfile, Depends(get_current_user)],
) -> BudgetResponse:
    budget = budget_service.create_budget(db, current_user, data)
    return BudgetResponse.model_validate(budget)


@router.put(
    "/{budget_id}",
    response_model=BudgetResponse,
    summary="Edit a budget",
    description=(
        "Partial update. Supplying ``line_items`` replaces them all and "
        "recalculates the amount. Approved and Rejected budgets are read-only."
    ),
    responses=_TRANSITION_RESPONSES,
)
def update_budget(
    budget_id: BudgetIdPath,
    data: BudgetUpdate,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UserProfile, Depends(get_current_user)],
) -> BudgetResponse:
    budget = budget_service.update_budget(db, current_user, budget_id, data)
    return BudgetResponse.model_validate(budget)


@router.delete(
    "/{budget_id}",
    response_model=MessageResponse,
    summary="Delete a budget",
    responses={**_COMMON_RESPONSES, 409: {"description": "Only Draft budgets can be deleted."}},
)
def delete_budget(
    budget_id: BudgetIdPath,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UserProfile, Depends(get_current_user)],
) -> MessageResponse:
    budget_service.delete_budget(db, current_user, budget_id)
    return MessageResponse(message=f"Budget {budget_id} deleted.")


# ---------------------------------------------------------------------------
# Lifecycle endpoints
# ---------------------------------------------------------------------------


@router.post(
    "/{budget_id}/submit",
    response_model=BudgetResponse,
    summary="Submit for review",
    description="Runs the full validation; on success the budget becomes Submitted.",
    responses=_TRANSITION_RESPONSES,
)
def submit_budget(
    budget_id: BudgetIdPath,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UserProfile, Depends(get_current_user)],
) -> BudgetResponse:
    return BudgetResponse.model_validate(budget_service.submit_budget(db, current_user, budget_id))


@router.post(
    "/{budget_id}/start-review",
    response_model=BudgetResponse,
    summary="Start review",
    responses=_TRANSITION_RESPONSES,
)
def start_review(
    budget_id: BudgetIdPath,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UserProfile, Depends(get_current_user)],
) -> BudgetResponse:
    return BudgetResponse.model_validate(budget_service.start_review(db, current_user, budget_id))


@router.post(
    "/{budget_id}/approve",
    response_model=BudgetResponse,
    summary="Approve",
    responses=_TRANSITION_RESPONSES,
)
def approve_budget(
    budget_id: BudgetIdPath,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UserProfile, Depends(get_current_user)],
    review: Annotated[ReviewRequest | None, Body()] = None,
) -> BudgetResponse:
    comments = review.comments if review else None
    return BudgetResponse.model_validate(
        budget_service.approve_budget(db, current_user, budget_id, comments)
    )


@router.post(
    "/{budget_id}/reject",
    response_model=BudgetResponse,
    summary="Reject",
    description="Comments are mandatory.",
    responses=_TRANSITION_RESPONSES,
)
def reject_budget(
    budget_id: BudgetIdPath,
    review: ReviewRequest,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UserProfile, Depends(get_current_user)],
) -> BudgetResponse:
    return BudgetResponse.model_validate(
        budget_service.reject_budget(db, current_user, budget_id, review.comments)
    )


@router.post(
    "/{budget_id}/request-revision",
    response_model=BudgetResponse,
    summary="Request revision",
    description="Sends the budget back to its author. Comments are mandatory.",
    responses=_TRANSITION_RESPONSES,
)
def request_revision(
    budget_id: BudgetIdPath,
    review: ReviewRequest,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UserProfile, Depends(get_current_user)],
) -> BudgetResponse:
    return BudgetResponse.model_validate(
        budget_service.request_revision(db, current_user, budget_id, review.comments)
    )
