"""
User management router (admin only).

Mounts under ``/api/users`` (prefix set in ``main.py``).

Endpoints
---------
GET    /      - List users.
GET    /{id}  - One user.
POST   /      - Create a user.
PUT    /{id}  - Partial update (password, role, department, active flag).
DELETE /{id}  - Deactivate (soft delete).
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session

from budgetflow.database import get_db
from budgetflow.models.user_profile import UserProfile
from budgetflow.schemas.user import UserCreate, UserResponse, UserUpdate
from budgetflow.services import user_service
from budgetflow.services.auth_service import require_role
from budgetflow.utils.constants import Role

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Users"])

UserId = Annotated[int, Path(ge=1, description="User primary key.")]
AdminUser = Annotated[UserProfile, Depends(require_role(Role.ADMIN))]

_RESPONSES = {
    401: {"description": "Missing or invalid JWT."},
    403: {"description": "Requires the admin role."},
    404: {"description": "User not found."},
    409: {"description": "Duplicate username/email, or self-deactivation."},
}


@router.get("/", response_model=list[UserResponse], summary="List users", responses=_RESPONSES)
def list_users(
    db: Annotated[Session, Depends(get_db)],
    _admin: AdminUser,
) -> list[UserResponse]:
    return [UserResponse.model_validate(u) for u in user_service.list_users(db)]


@router.get("/{user_id}", response_model=UserResponse, summary="User detail", responses=_RESPONSES)
def get_user(
    user_id: UserId,
    db: Annotated[Session, Depends(get_db)],
    _admin: AdminUser,
) -> UserResponse:
    return UserResponse.model_validate(user_service.get_user(db, user_id))


@router.post(
    "/",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create user",
    responses=_RESPONSES,
)
def create_user(
    data: UserCreate,
    db: Annotated[Session, Depends(get_db)],
    _admin: AdminUser,
) -> UserResponse:
    return UserResponse.model_validate(user_service.create_user(db, data))


@router.put("/{user_id}", response_model=UserResponse, summary="Update user", responses=_RESPONSES)
def update_user(
    user_id: UserId,
    data: UserUpdate,
    db: Annotated[Session, Depends(get_db)],
    admin: AdminUser,
) -> UserResponse:
    return UserResponse.model_validate(user_service.update_user(db, user_id, data, admin))


@router.delete("/{user_id}", response_model=UserResponse, summary="Deactivate user", responses=_RESPONSES)
def deactivate_user(
    user_id: UserId,
    db: Annotated[Session, Depends(get_db)],
    admin: AdminUser,
) -> UserResponse:
    return UserResponse.model_validate(user_service.deactivate_user(db, user_id, admin))
