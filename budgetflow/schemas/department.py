"""
Pydantic v2 schemas for departments and their cost centers.

Both are managed by administrators only; every authenticated user may read
them to fill budget forms.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class CostCenterCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=50, description="Code unique within the department.")
    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    budget_limit: Decimal | None = Field(default=None, ge=0)
    is_active: bool = True

    model_config = ConfigDict(
        json_schema_extra={"example": {"code": "IT-001", "name": "Infrastructure"}}
    )


class CostCenterUpdate(BaseModel):
    code: str | None = Field(default=None, min_length=1, max_length=50)
    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    budget_limit: Decimal | None = Field(default=None, ge=0)
    is_active: bool | None = None


class CostCenterResponse(BaseModel):
    id: int
    department_id: int
    code: str
    name: str
    description: str | None
    budget_limit: float | None
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class DepartmentCreate(BaseModel):
    """Payload for ``POST /api/departments``.

    Attributes:
        name: Unique display name.
        code: Unique short code.
        head_of_department: Name of the department head.
        budget_limit: Advisory ceiling, not enforced on budgets.
        cost_centers: Optional cost centers created together with the department.
    """

    name: str = Field(..., min_length=1, max_length=200)
    code: str = Field(..., min_length=1, max_length=20)
    description: str | None = Field(default=None, max_length=1000)
    head_of_department: str | None = Field(default=None, max_length=200)
    budget_limit: Decimal | None = Field(default=None, ge=0)
    is_active: bool = True
    cost_centers: list[CostCenterCreate] = Field(default_factory=list)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Information Technology",
                "code": "IT",
                "head_of_department": "Jane Smith",
                "budget_limit": "500000.00",
                "cost_centers": [{"code": "IT-001", "name": "Infrastructure"}],
            }
        }
    )


class DepartmentUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    code: str | None = Field(default=None, min_length=1, max_length=20)
    description: str | None = Field(default=None, max_length=1000)
    head_of_department: str | None = Field(default=None, max_length=200)
    budget_limit: Decimal | None = Field(default=None, ge=0)
    is_active: bool | None = None


class DepartmentResponse(BaseModel):
    id: int
    name: str
    code: str
    description: str | None
    head_of_department: str | None
    budget_limit: float | None
    is_active: bool
    created_at: datetime
    cost_centers: list[CostCenterResponse] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)
