"""Budget lifecycle and aggregation core.

Pure, synchronous functions over in-memory records; no I/O. The service
layer fetches records, calls into this package, and persists the results.

Usage from other modules:
    from budgetflow.domain import plan_transition, summarize, BudgetFilter
"""

from budgetflow.domain.aggregation import (  # noqa: F401
    BudgetSummary,
    DepartmentBreakdown,
    MonthBucket,
    StatusBreakdown,
    TypeBreakdown,
    approval_rate,
    approval_rate_percent,
    group_by_department,
    group_by_month,
    group_by_status,
    group_by_type,
    summarize,
)
from budgetflow.domain.calculator import (  # noqa: F401
    compute_budget_amount,
    compute_line_total,
    recalculate,
)
from budgetflow.domain.errors import (  # noqa: F401
    BudgetFlowError,
    ConcurrentModificationError,
    ExternalStoreError,
    InvalidCost,
    InvalidQuantity,
    InvalidTransition,
    NotFoundError,
    ValidationError,
    Violation,
)
from budgetflow.domain.filters import (  # noqa: F401
    BudgetFilter,
    build_predicate,
    filter_records,
    list_distinct_values,
    next_business_id,
)
from budgetflow.domain.lifecycle import (  # noqa: F401
    Transition,
    allowed_events,
    apply_transition,
    check_invariants,
    plan_transition,
)
from budgetflow.domain.validator import (  # noqa: F401
    ensure_valid,
    validate_for_review,
    validate_for_submission,
)
