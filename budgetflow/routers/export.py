"""
Export router.

Mounts under ``/api/export`` (prefix set in ``main.py``).

All endpoints require a valid JWT token and accept the budget filter query
parameters. Files are streamed with ``StreamingResponse`` and an
``attachment`` ``Content-Disposition`` so browsers prompt a download.

Endpoints
---------
GET /csv    - Budget list as CSV.
GET /excel  - Styled .xlsx with KPIs, budget table and department sheet.
GET /pdf    - Styled landscape PDF report.
"""

from __future__ import annotations

import io
import logging
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from budgetflow.database import get_db
from budgetflow.domain.filters import BudgetFilter
from budgetflow.models.user_profile import UserProfile
from budgetflow.routers.params import budget_filter_params
from budgetflow.services import export_service
from budgetflow.services.auth_service import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Export"])

_XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _make_filename(ext: str) -> str:
    """Build a dated filename, e.g. ``budget-report-2024-03-15.csv``."""
    return f"budget-report-{date.today().isoformat()}.{ext}"


def _stream(file_bytes: bytes, media_type: str, ext: str) -> StreamingResponse:
    headers = {
        "Content-Disposition": f'attachment; filename="{_make_filename(ext)}"',
        "Content-Length": str(len(file_bytes)),
    }
    return StreamingResponse(io.BytesIO(file_bytes), media_type=media_type, headers=headers)


@router.get(
    "/csv",
    summary="Export budgets to CSV",
    description=(
        "Columns: Budget ID, Department, Type, Amount, Status, Submitted Date, Reviewed Date."
    ),
    response_class=StreamingResponse,
    responses={
        200: {"description": "CSV file.", "content": {"text/csv": {}}},
        401: {"description": "Missing or invalid JWT."},
    },
)
def export_csv(
    criteria: Annotated[BudgetFilter, Depends(budget_filter_params)],
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UserProfile, Depends(get_current_user)],
) -> StreamingResponse:
    logger.info("GET /export/csv filters=%s user='%s'", criteria, current_user.username)
    return _stream(export_service.export_csv(db, current_user, criteria), "text/csv; charset=utf-8", "csv")


@router.get(
    "/excel",
    summary="Export budgets to Excel (.xlsx)",
    response_class=StreamingResponse,
    responses={
        200: {"description": "Excel workbook.", "content": {_XLSX_MEDIA_TYPE: {}}},
        401: {"description": "Missing or invalid JWT."},
    },
)
def export_excel(
    criteria: Annotated[BudgetFilter, Depends(budget_filter_params)],
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UserProfile, Depends(get_current_user)],
) -> StreamingResponse:
    logger.info("GET /export/excel filters=%s user='%s'", criteria, current_user.username)
    return _stream(export_service.export_excel(db, current_user, criteria), _XLSX_MEDIA_TYPE, "xlsx")


@router.get(
    "/pdf",
    summary="Export budgets to PDF",
    response_class=StreamingResponse,
    responses={
        200: {"description": "PDF report.", "content": {"application/pdf": {}}},
        401: {"description": "Missing or invalid JWT."},
    },
)
def export_pdf(
    criteria: Annotated[BudgetFilter, Depends(budget_filter_params)],
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UserProfile, Depends(get_current_user)],
) -> StreamingResponse:
    logger.info("GET /export/pdf filters=%s user='%s'", criteria, current_user.username)
    return _stream(export_service.export_pdf(db, current_user, criteria), "application/pdf", "pdf")
