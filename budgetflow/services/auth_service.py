"""
Authentication and authorisation logic for BudgetFlow.

Provides:
- ``authenticate_user``: credential verification against the DB.
- ``get_current_user``: FastAPI dependency that extracts and validates
  the Bearer JWT from the ``Authorization`` header.
- ``require_role``: dependency factory that enforces role-based access
  control on top of ``get_current_user``.
- ``can_author`` / ``can_review`` / ``department_scope``: role checks
  used by the budget service.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from budgetflow.database import get_db, store_errors
from budgetflow.models.user_profile import UserProfile
from budgetflow.utils.constants import CAN_AUTHOR, CAN_REVIEW, DEPARTMENT_SCOPED, Role
from budgetflow.utils.security import verify_password, verify_token

logger = logging.getLogger(__name__)

# The ``tokenUrl`` must match the login endpoint path.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


# ---------------------------------------------------------------------------
# Core authentication function
# ---------------------------------------------------------------------------


def authenticate_user(db: Session, username: str, password: str) -> UserProfile | None:
    """Verify username/password credentials against the database.

    Returns ``None`` (instead of raising) so that callers control the HTTP
    error response.

    Args:
        db: An active SQLAlchemy session.
        username: The login name submitted by the client.
        password: The plain-text password submitted by the client.

    Returns:
        The ``UserProfile`` on success, or ``None`` for an unknown user,
        inactive account or wrong password.
    """
    with store_errors(db, "look up the login user"):
        user: UserProfile | None = (
            db.query(UserProfile)
            .filter(UserProfile.username == username, UserProfile.is_active.is_(True))
            .first()
        )

    if user is None:
        logger.debug("authenticate_user: unknown or inactive user '%s'", username)
        return None

    if not verify_password(password, user.password_hash):
        logger.debug("authenticate_user: wrong password for user '%s'", username)
        return None

    # Last-login timestamp is best-effort; a failure must not block the login.
    try:
        user.last_login_at = datetime.now(timezone.utc)
        db.commit()
    except SQLAlchemyError:  # pragma: no cover
        db.rollback()
        logger.warning("Could not update last_login_at for user '%s'", username)

    return user


# ---------------------------------------------------------------------------
# FastAPI dependency: current authenticated user
# ---------------------------------------------------------------------------


def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    db: Annotated[Session, Depends(get_db)],
) -> UserProfile:
    """Resolve the caller's identity from the Bearer JWT.

    Raises:
        HTTPException 401: If the token is missing, invalid or expired, or
                           the referenced user no longer exists or has
                           been deactivated.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = verify_token(token)
    except ValueError:
        raise credentials_exception

    # ``sub`` holds the user's primary key as a string.
    user_id_str: str | None = payload.get("sub")
    if user_id_str is None:
        raise credentials_exception

    try:
        user_id = int(user_id_str)
    except (TypeError, ValueError):
        raise credentials_exception

    with store_errors(db, "load the current user"):
        user: UserProfile | None = (
            db.query(UserProfile)
            .filter(UserProfile.id == user_id, UserProfile.is_active.is_(True))
            .first()
        )

    if user is None:
        raise credentials_exception

    return user


# ---------------------------------------------------------------------------
# Role enforcement
# ---------------------------------------------------------------------------


def require_role(*roles: Role | str):
    """Return a FastAPI dependency that restricts access to the given roles.

    .. code-block:: python

        @router.post("/departments")
        def create(current_user: UserProfile = Depends(require_role(Role.ADMIN))):
            ...

    Raises:
        HTTPException 403: If the authenticated user's role is not allowed.
    """
    allowed = frozenset(Role(r).value for r in roles)

    def _check_role(
        current_user: Annotated[UserProfile, Depends(get_current_user)],
    ) -> UserProfile:
        if current_user.role not in allowed:
            logger.warning(
                "Access denied for username='%s' role='%s' (requires %s)",
                current_user.username, current_user.role, sorted(allowed),
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Requires one of the roles: {sorted(allowed)}",
            )
        return current_user

    return _check_role


def _role(user: UserProfile) -> Role | None:
    try:
        return Role(user.role)
    except ValueError:
        return None


def can_author(user: UserProfile) -> bool:
    role = _role(user)
    return role is not None and CAN_AUTHOR[role]


def can_review(user: UserProfile) -> bool:
    role = _role(user)
    return role is not None and CAN_REVIEW[role]


def department_scope(user: UserProfile) -> str | None:
    """Department a user is restricted to, or ``None`` for organisation-wide access.

    A department-scoped user without a department sees nothing; the empty
    string is returned so that no budget matches.
    """
    role = _role(user)
    if role is not None and DEPARTMENT_SCOPED[role]:
        return user.department or ""
    return None
