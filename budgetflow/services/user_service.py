"""
User profile management (admin only).

Passwords are hashed with bcrypt before storage. Deleting a user is a soft
delete (``is_active = False``) so budget history keeps valid author and
reviewer names. Nobody can deactivate their own account.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from budgetflow.database import commit_or_raise, store_errors
from budgetflow.domain.errors import NotFoundError
from budgetflow.models.user_profile import UserProfile
from budgetflow.schemas.user import UserCreate, UserUpdate
from budgetflow.utils.constants import DEPARTMENT_SCOPED, Role
from budgetflow.utils.security import hash_password

logger = logging.getLogger(__name__)


def _check_department(role: Role | str, department: str | None) -> None:
    if DEPARTMENT_SCOPED[Role(role)] and not department:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Role '{Role(role).value}' requires a department.",
        )


def _commit_unique(db: Session, username: str) -> None:
    try:
        commit_or_raise(db)
    except IntegrityError:
        logger.warning("create/update user '%s': duplicate username or email", username)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Username or email already in use.",
        )


def list_users(db: Session, include_inactive: bool = True) -> list[UserProfile]:
    query = db.query(UserProfile)
    if not include_inactive:
        query = query.filter(UserProfile.is_active.is_(True))
    with store_errors(db, "list users"):
        rows = query.order_by(UserProfile.username).all()
    logger.debug("list_users: %d rows", len(rows))
    return rows


def get_user(db: Session, user_id: int) -> UserProfile:
    with store_errors(db, "load user"):
        user: UserProfile | None = db.query(UserProfile).filter(UserProfile.id == user_id).first()
    if user is None:
        raise NotFoundError("User", user_id)
    return user


def create_user(db: Session, data: UserCreate) -> UserProfile:
    """Create a user account.

    Raises:
        HTTPException 409: If the username or email is already taken.
        HTTPException 422: If a department-scoped role has no department.
    """
    _check_department(data.role, data.department)
    user = UserProfile(
        username=data.username,
        email=data.email,
        password_hash=hash_password(data.password),
        full_name=data.full_name,
        role=Role(data.role).value,
        department=data.department,
        cost_center=data.cost_center,
        is_active=True,
    )
    db.add(user)
    _commit_unique(db, data.username)
    db.refresh(user)
    logger.info("create_user: created '%s' role='%s' (id=%d)", user.username, user.role, user.id)
    return user


def update_user(db: Session, user_id: int, data: UserUpdate, acting_user: UserProfile) -> UserProfile:
    """Apply a partial update. A new password replaces the stored hash."""
    user = get_user(db, user_id)
    update_data = data.model_dump(exclude_unset=True)

    if user.id == acting_user.id and update_data.get("is_active") is False:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="You cannot deactivate your own account.",
        )

    password = update_data.pop("password", None)
    # email, role and is_active are NOT NULL: an explicit null means "unchanged"
    for field in ("email", "role", "is_active"):
        if update_data.get(field, ...) is None:
            del update_data[field]
    if "role" in update_data:
        update_data["role"] = Role(update_data["role"]).value
    _check_department(
        update_data.get("role", user.role),
        update_data["department"] if "department" in update_data else user.department,
    )

    for field, value in update_data.items():
        setattr(user, field, value)
    if password:
        user.password_hash = hash_password(password)

    _commit_unique(db, user.username)
    db.refresh(user)
    logger.info("update_user: id=%d fields=%s", user_id, sorted(data.model_fields_set))
    return user


def deactivate_user(db: Session, user_id: int, acting_user: UserProfile) -> UserProfile:
    user = get_user(db, user_id)
    if user.id == acting_user.id:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="You cannot deactivate your own account.",
        )
    user.is_active = False
    commit_or_raise(db)
    db.refresh(user)
    logger.info("deactivate_user: id=%d username='%s'", user_id, user.username)
    return user
