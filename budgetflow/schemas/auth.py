"""
Pydantic v2 schemas for the authentication endpoints.

Covers the JWT token response returned by login and refresh, and the
public user representation returned by ``GET /api/auth/me``.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, computed_field

from budgetflow.utils.constants import ROLE_LABELS, Role


class TokenResponse(BaseModel):
    """Response body returned after a successful authentication.

    Attributes:
        access_token: Signed JWT string to be sent in the
                      ``Authorization: Bearer <token>`` header.
        token_type: Always ``"bearer"`` per OAuth2 convention.
    """

    access_token: str = Field(..., description="Signed JWT access token")
    token_type: str = Field(default="bearer", description="OAuth2 token type")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "access_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                "token_type": "bearer",
            }
        }
    )


class UserResponse(BaseModel):
    """Public representation of a user.

    Returned by ``GET /api/auth/me`` and the user management endpoints.
    ``password_hash`` is never exposed.

    Attributes:
        id: Database primary key.
        username: Unique login name.
        email: Email address on record.
        full_name: Display name.
        role: Role code; one of ``Role``.
        role_label: Display name of the role, e.g. "Finance Manager".
        department: Department the user belongs to, or ``None``.
        cost_center: Default cost center code.
        is_active: Whether the account is currently active.
        last_login_at: Last successful login.
    """

    id: int
    username: str
    email: str
    full_name: str | None
    role: str
    department: str | None
    cost_center: str | None
    is_active: bool
    last_login_at: datetime | None = None

    @computed_field
    @property
    def role_label(self) -> str:
        return ROLE_LABELS.get(Role(self.role), self.role)

    # ORM mode: serialise SQLAlchemy instances directly.
    model_config = ConfigDict(from_attributes=True)
