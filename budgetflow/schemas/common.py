"""
Shared Pydantic v2 schemas reused across multiple modules.

Provides pagination, message and error envelopes so that each module can
compose them without duplicating field definitions. Budget filter terms
live in ``budgetflow.domain.filters.BudgetFilter``; routers build it from
query parameters.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class PaginationParams(BaseModel):
    """Pagination parameters for list endpoints.

    Attributes:
        page: 1-based page number.
        page_size: Number of rows per page (capped at 200 to protect DB).
    """

    page: int = Field(
        default=1,
        ge=1,
        description="Page number (1-based).",
    )
    page_size: int = Field(
        default=20,
        ge=1,
        le=200,
        description="Rows per page (maximum 200).",
    )


class MessageResponse(BaseModel):
    """Generic message envelope for operations that do not return a resource.

    Attributes:
        message: Short human-readable result summary.
        detail: Optional extended information (error description, hint, etc.).
    """

    message: str = Field(..., description="Summary of the operation result.")
    detail: str | None = Field(
        default=None,
        description="Additional information (error context, hint, etc.).",
    )


class ViolationItem(BaseModel):
    """One failed business rule inside a 422 response."""

    field: str = Field(..., description="Offending field, e.g. 'line_items[0].quantity'.")
    code: str = Field(..., description="Machine-readable rule identifier.")
    message: str = Field(..., description="Human-readable explanation.")


class ValidationErrorResponse(BaseModel):
    """Body returned when a budget fails validation.

    Attributes:
        detail: Summary message.
        violations: Every rule that failed, not only the first one.
    """

    detail: str
    violations: list[ViolationItem]
