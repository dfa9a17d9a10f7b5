"""
Query-parameter dependencies shared by the budget, report and export routers.

Filter terms are passed as URL query strings so that the frontend can build
bookmark-friendly links; each dependency assembles the corresponding model.
"""

from __future__ import annotations

from datetime import date
from typing import Annotated

from fastapi import Query

from budgetflow.domain.filters import BudgetFilter
from budgetflow.schemas.common import PaginationParams


def budget_filter_params(
    search: Annotated[
        str | None,
        Query(description="Case-insensitive match on budget id, department or description.", max_length=200),
    ] = None,
    status: Annotated[
        str | None,
        Query(description="Exact status, e.g. 'Approved'. Omit for all statuses."),
    ] = None,
    department: Annotated[
        str | None,
        Query(description="Exact department name. Omit for all departments.", max_length=200),
    ] = None,
    budget_type: Annotated[
        str | None,
        Query(alias="type", description="'OPEX' or 'CAPEX'. Omit for both."),
    ] = None,
    date_from: Annotated[
        date | None,
        Query(description="Created on or after this date (YYYY-MM-DD)."),
    ] = None,
    date_to: Annotated[
        date | None,
        Query(description="Created on or before this date (YYYY-MM-DD)."),
    ] = None,
) -> BudgetFilter:
    """Assemble a ``BudgetFilter`` from URL query parameters.

    Empty strings are treated like omitted parameters.
    """
    return BudgetFilter(
        search_query=search or None,
        status=status or None,
        department=department or None,
        budget_type=budget_type or None,
        date_from=date_from,
        date_to=date_to,
    )


def pagination_params(
    page: Annotated[int, Query(description="Page (1-based).", ge=1)] = 1,
    page_size: Annotated[
        int, Query(description="Rows per page (max 200).", ge=1, le=200)
    ] = 20,
) -> PaginationParams:
    return PaginationParams(page=page, page_size=page_size)
