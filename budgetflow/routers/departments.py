"""
Departments and cost centers router.

Mounts under ``/api/departments`` (prefix set in ``main.py``).

Every authenticated user may read departments (budget forms need them);
writes are restricted to the ``admin`` role.

Endpoints
---------
GET    /                                   - All departments with cost centers.
GET    /catalog                            - Department -> active cost center codes.
GET    /{id}                               - One department.
POST   /                                   - Create (optionally with cost centers).
PUT    /{id}                               - Update; renames propagate to budgets.
DELETE /{id}                               - Delete when no budget references it.
POST   /{id}/cost-centers                  - Add a cost center.
PUT    /{id}/cost-centers/{cost_center_id} - Update a cost center.
DELETE /{id}/cost-centers/{cost_center_id} - Delete a cost center.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from budgetflow.database import get_db
from budgetflow.models.user_profile import UserProfile
from budgetflow.schemas.common import MessageResponse
from budgetflow.schemas.department import (
    CostCenterCreate,
    CostCenterResponse,
    CostCenterUpdate,
    DepartmentCreate,
    DepartmentResponse,
    DepartmentUpdate,
)
from budgetflow.services import department_service
from budgetflow.services.auth_service import get_current_user, require_role
from budgetflow.utils.constants import Role

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Departments"])

DepartmentId = Annotated[int, Path(ge=1, description="Department primary key.")]
CostCenterId = Annotated[int, Path(ge=1, description="Cost center primary key.")]
AdminUser = Annotated[UserProfile, Depends(require_role(Role.ADMIN))]

_ADMIN_RESPONSES = {
    401: {"description": "Missing or invalid JWT."},
    403: {"description": "Requires the admin role."},
    404: {"description": "Department or cost center not found."},
    409: {"description": "Duplicate name/code, or still referenced by budgets."},
}


@router.get("/", response_model=list[DepartmentResponse], summary="List departments")
def list_departments(
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[UserProfile, Depends(get_current_user)],
    include_inactive: Annotated[bool, Query(description="Include inactive departments.")] = True,
) -> list[DepartmentResponse]:
    rows = department_service.list_departments(db, include_inactive)
    return [DepartmentResponse.model_validate(d) for d in rows]


@router.get(
    "/catalog",
    response_model=dict[str, list[str]],
    summary="Department / cost center catalog",
    description="Active department names mapped to their active cost center codes.",
)
def get_catalog(
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[UserProfile, Depends(get_current_user)],
) -> dict[str, list[str]]:
    return department_service.build_catalog(db)


@router.get("/{department_id}", response_model=DepartmentResponse, summary="Department detail")
def get_department(
    department_id: DepartmentId,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[UserProfile, Depends(get_current_user)],
) -> DepartmentResponse:
    return DepartmentResponse.model_validate(department_service.get_department(db, department_id))


@router.post(
    "/",
    response_model=DepartmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create department",
    responses=_ADMIN_RESPONSES,
)
def create_department(
    data: DepartmentCreate,
    db: Annotated[Session, Depends(get_db)],
    _admin: AdminUser,
) -> DepartmentResponse:
    return DepartmentResponse.model_validate(department_service.create_department(db, data))


@router.put(
    "/{department_id}",
    response_model=DepartmentResponse,
    summary="Update department",
    responses=_ADMIN_RESPONSES,
)
def update_department(
    department_id: DepartmentId,
    data: DepartmentUpdate,
    db: Annotated[Session, Depends(get_db)],
    _admin: AdminUser,
) -> DepartmentResponse:
    return DepartmentResponse.model_validate(
        department_service.update_department(db, department_id, data)
    )


@router.delete(
    "/{department_id}",
    response_model=MessageResponse,
    summary="Delete department",
    responses=_ADMIN_RESPONSES,
)
def delete_department(
    department_id: DepartmentId,
    db: Annotated[Session, Depends(get_db)],
    _admin: AdminUser,
) -> MessageResponse:
    department_service.delete_department(db, department_id)
    return MessageResponse(message=f"Department {department_id} deleted.")


# ---------------------------------------------------------------------------
# Cost centers
# ---------------------------------------------------------------------------


@router.post(
    "/{department_id}/cost-centers",
    response_model=CostCenterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add cost center",
    responses=_ADMIN_RESPONSES,
)
def create_cost_center(
    department_id: DepartmentId,
    data: CostCenterCreate,
    db: Annotated[Session, Depends(get_db)],
    _admin: AdminUser,
) -> CostCenterResponse:
    return CostCenterResponse.model_validate(
        department_service.create_cost_center(db, department_id, data)
    )


@router.put(
    "/{department_id}/cost-centers/{cost_center_id}",
    response_model=CostCenterResponse,
    summary="Update cost center",
    responses=_ADMIN_RESPONSES,
)
def update_cost_center(
    department_id: DepartmentId,
    cost_center_id: CostCenterId,
    data: CostCenterUpdate,
    db: Annotated[Session, Depends(get_db)],
    _admin: AdminUser,
) -> CostCenterResponse:
    return CostCenterResponse.model_validate(
        department_service.update_cost_center(db, department_id, cost_center_id, data)
    )


@router.delete(
    "/{department_id}/cost-centers/{cost_center_id}",
    response_model=MessageResponse,
    summary="Delete cost center",
    responses=_ADMIN_RESPONSES,
)
def delete_cost_center(
    department_id: DepartmentId,
    cost_center_id: CostCenterId,
    db: Annotated[Session, Depends(get_db)],
    _admin: AdminUser,
) -> MessageResponse:
    department_service.delete_cost_center(db, department_id, cost_center_id)
    return MessageResponse(message=f"Cost center {cost_center_id} deleted.")
