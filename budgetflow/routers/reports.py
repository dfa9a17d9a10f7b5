"""
Reports & Analytics router.

Mounts under ``/api/reports`` (prefix set in ``main.py``).

All endpoints require a valid JWT token and accept the same filter query
parameters as ``GET /api/budgets``. Department roles only see their own
department's figures.

Endpoints
---------
GET /summary        - KPI cards: totals per status group and approval rate.
GET /by-department  - Bar chart: total / approved / pending per department.
GET /by-month       - Line chart: monthly totals by creation date.
GET /by-type        - OPEX vs CAPEX.
GET /by-status      - Status pie slices plus per-status counts.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from budgetflow.database import get_db
from budgetflow.domain.filters import BudgetFilter
from budgetflow.models.user_profile import UserProfile
from budgetflow.routers.params import budget_filter_params
from budgetflow.schemas.report import (
    DepartmentItem,
    MonthItem,
    StatusBreakdownResponse,
    SummaryResponse,
    TypeItem,
)
from budgetflow.services import report_service
from budgetflow.services.auth_service import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Reports"])

Filters = Annotated[BudgetFilter, Depends(budget_filter_params)]
DB = Annotated[Session, Depends(get_db)]
CurrentUser = Annotated[UserProfile, Depends(get_current_user)]

_RESPONSES = {401: {"description": "Missing or invalid JWT."}}


@router.get(
    "/summary",
    response_model=SummaryResponse,
    summary="Report KPIs",
    description=(
        "Total, approved, pending (Submitted + Under Review), rejected and draft "
        "amounts and counts, plus the approval rate as a whole percentage."
    ),
    responses=_RESPONSES,
)
def get_summary(criteria: Filters, db: DB, current_user: CurrentUser) -> SummaryResponse:
    logger.debug("GET /reports/summary filters=%s", criteria)
    return report_service.get_summary(db, current_user, criteria)


@router.get(
    "/by-department",
    response_model=list[DepartmentItem],
    summary="Totals by department",
    description="Departments without budgets are omitted.",
    responses=_RESPONSES,
)
def get_by_department(criteria: Filters, db: DB, current_user: CurrentUser) -> list[DepartmentItem]:
    logger.debug("GET /reports/by-department filters=%s", criteria)
    return report_service.get_by_department(db, current_user, criteria)


@router.get(
    "/by-month",
    response_model=list[MonthItem],
    summary="Monthly trend",
    description="One bucket per calendar month of creation, oldest first.",
    responses=_RESPONSES,
)
def get_by_month(criteria: Filters, db: DB, current_user: CurrentUser) -> list[MonthItem]:
    logger.debug("GET /reports/by-month filters=%s", criteria)
    return report_service.get_by_month(db, current_user, criteria)


@router.get(
    "/by-type",
    response_model=list[TypeItem],
    summary="OPEX vs CAPEX",
    responses=_RESPONSES,
)
def get_by_type(criteria: Filters, db: DB, current_user: CurrentUser) -> list[TypeItem]:
    logger.debug("GET /reports/by-type filters=%s", criteria)
    return report_service.get_by_type(db, current_user, criteria)


@router.get(
    "/by-status",
    response_model=StatusBreakdownResponse,
    summary="Status breakdown",
    responses=_RESPONSES,
)
def get_by_status(criteria: Filters, db: DB, current_user: CurrentUser) -> StatusBreakdownResponse:
    logger.debug("GET /reports/by-status filters=%s", criteria)
    return report_service.get_by_status(db, current_user, criteria)
