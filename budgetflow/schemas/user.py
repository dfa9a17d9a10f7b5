"""
Pydantic v2 schemas for user management (CRUD) endpoints.

Separates write schemas (``UserCreate``, ``UserUpdate``) from the read
schema (``UserResponse``) so password material never appears in a response.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from budgetflow.utils.constants import Role

# Re-export the canonical read schema so callers can import from one place.
from budgetflow.schemas.auth import UserResponse  # noqa: F401

_ROLES = [r.value for r in Role]


class UserCreate(BaseModel):
    """Payload for creating a new user account (``POST /api/users``).

    Only accessible by users with the ``admin`` role.

    Attributes:
        username: Unique login identifier (3-50 chars, alphanumeric + _).
        email: Valid email address; must be unique in the database.
        password: Plain-text password that will be hashed before storage.
        full_name: Display name.
        role: Role code from ``Role``.
        department: Department name; required for department roles.
        cost_center: Default cost center code.
    """

    username: str = Field(
        ...,
        min_length=3,
        max_length=50,
        pattern=r"^[a-zA-Z0-9_]+$",
        description="Unique login identifier (alphanumeric and _)",
    )
    email: EmailStr = Field(..., description="Valid email address")
    password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="Plain-text password; stored as a bcrypt hash",
    )
    full_name: str | None = Field(default=None, max_length=300)
    role: Role = Field(..., description=f"Role code. Allowed values: {_ROLES}")
    department: str | None = Field(default=None, max_length=200)
    cost_center: str | None = Field(default=None, max_length=50)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "username": "jsmith",
                "email": "j.smith@example.com",
                "password": "Secure2024!",
                "full_name": "Jane Smith",
                "role": "department_manager",
                "department": "Information Technology",
                "cost_center": "IT-001",
            }
        }
    )


class UserUpdate(BaseModel):
    """Partial update of an existing user (``PUT /api/users/{id}``).

    Omitting ``password`` leaves the stored hash unchanged.
    """

    email: EmailStr | None = None
    password: str | None = Field(default=None, min_length=8, max_length=128)
    full_name: str | None = Field(default=None, max_length=300)
    role: Role | None = None
    department: str | None = Field(default=None, max_length=200)
    cost_center: str | None = Field(default=None, max_length=50)
    is_active: bool | None = Field(default=None, description="False suspends the account")
