"""
Department and cost center service layer.

All database access for ``/api/departments`` lives here. Budgets and users
store the department *name* and the cost center *code*, so renames are
propagated to them in the same transaction, and deleting a department or
cost center that a budget still references is refused.

``build_catalog`` produces the department -> cost center mapping that the
submission validator checks budgets against.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from budgetflow.database import commit_or_raise, store_errors
from budgetflow.domain.errors import NotFoundError
from budgetflow.models.budget import Budget
from budgetflow.models.cost_center import CostCenter
from budgetflow.models.department import Department
from budgetflow.models.user_profile import UserProfile
from budgetflow.schemas.department import (
    CostCenterCreate,
    CostCenterUpdate,
    DepartmentCreate,
    DepartmentUpdate,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _commit_unique(db: Session, what: str) -> None:
    try:
        commit_or_raise(db)
    except IntegrityError:
        logger.warning("Unique constraint violated while saving %s", what)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"{what} already exists (duplicate name or code).",
        )


def _get_cost_center(db: Session, department_id: int, cost_center_id: int) -> CostCenter:
    with store_errors(db, "load cost center"):
        cc: CostCenter | None = (
            db.query(CostCenter)
            .filter(CostCenter.id == cost_center_id, CostCenter.department_id == department_id)
            .first()
        )
    if cc is None:
        raise NotFoundError("Cost center", cost_center_id)
    return cc


# ---------------------------------------------------------------------------
# Read operations
# ---------------------------------------------------------------------------


def list_departments(db: Session, include_inactive: bool = True) -> list[Department]:
    query = db.query(Department)
    if not include_inactive:
        query = query.filter(Department.is_active.is_(True))
    with store_errors(db, "list departments"):
        rows = query.order_by(Department.name).all()
    logger.debug("list_departments: %d rows", len(rows))
    return rows


def get_department(db: Session, department_id: int) -> Department:
    """Return a department by primary key.

    Raises:
        NotFoundError: If no department with the given ID exists.
    """
    with store_errors(db, "load department"):
        dept: Department | None = db.query(Department).filter(Department.id == department_id).first()
    if dept is None:
        raise NotFoundError("Department", department_id)
    return dept


def department_names(db: Session) -> list[str]:
    """Active department names in display order."""
    with store_errors(db, "list department names"):
        rows = (
            db.query(Department.name)
            .filter(Department.is_active.is_(True))
            .order_by(Department.name)
            .all()
        )
    return [name for (name,) in rows]


def build_catalog(db: Session) -> dict[str, list[str]]:
    """Map each active department name to the codes of its active cost centers."""
    catalog: dict[str, list[str]] = {name: [] for name in department_names(db)}
    with store_errors(db, "build the department catalog"):
        rows = (
            db.query(Department.name, CostCenter.code)
            .join(CostCenter, CostCenter.department_id == Department.id)
            .filter(Department.is_active.is_(True), CostCenter.is_active.is_(True))
            .order_by(Department.name, CostCenter.code)
            .all()
        )
    for name, code in rows:
        catalog[name].append(code)
    logger.debug("build_catalog: %d departments, %d cost centers", len(catalog), len(rows))
    return catalog


# ---------------------------------------------------------------------------
# Department write operations
# ---------------------------------------------------------------------------


def create_department(db: Session, data: DepartmentCreate) -> Department:
    """Create a department together with any cost centers in the payload.

    Raises:
        HTTPException 409: If the name or code, or a cost center code within
                           the payload, is already taken.
    """
    payload = data.model_dump(exclude={"cost_centers"})
    dept = Department(**payload)
    dept.cost_centers = [CostCenter(**cc.model_dump()) for cc in data.cost_centers]

    db.add(dept)
    _commit_unique(db, f"Department '{data.name}'")
    db.refresh(dept)

    logger.info(
        "create_department: created '%s' (id=%d) with %d cost centers",
        dept.name, dept.id, len(dept.cost_centers),
    )
    return dept


def update_department(db: Session, department_id: int, data: DepartmentUpdate) -> Department:
    """Apply a partial update; a rename is propagated to budgets and users."""
    dept = get_department(db, department_id)
    update_data = data.model_dump(exclude_unset=True)

    new_name = update_data.get("name")
    if new_name and new_name != dept.name:
        old_name = dept.name
        with store_errors(db, "rename the department on budgets and users"):
            moved = (
                db.query(Budget)
                .filter(Budget.department == old_name)
                .update({Budget.department: new_name}, synchronize_session="fetch")
            )
            db.query(UserProfile).filter(UserProfile.department == old_name).update(
                {UserProfile.department: new_name}, synchronize_session="fetch"
            )
        logger.info("update_department: renaming '%s' -> '%s' (%d budgets)", old_name, new_name, moved)

    for field, value in update_data.items():
        setattr(dept, field, value)

    _commit_unique(db, f"Department '{dept.name}'")
    db.refresh(dept)

    logger.info("update_department: id=%d fields=%s", department_id, list(update_data.keys()))
    return dept


def delete_department(db: Session, department_id: int) -> None:
    """Delete a department and its cost centers.

    Raises:
        HTTPException 409: If any budget still references the department.
    """
    dept = get_department(db, department_id)
    with store_errors(db, "count department budgets"):
        in_use = db.query(Budget.id).filter(Budget.department == dept.name).count()
    if in_use:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=(
                f"Department '{dept.name}' is referenced by {in_use} budget(s); "
                "deactivate it instead."
            ),
        )
    db.delete(dept)
    commit_or_raise(db)
    logger.info("delete_department: deleted id=%d", department_id)


# ---------------------------------------------------------------------------
# Cost center write operations
# ---------------------------------------------------------------------------


def create_cost_center(db: Session, department_id: int, data: CostCenterCreate) -> CostCenter:
    dept = get_department(db, department_id)
    cc = CostCenter(department_id=dept.id, **data.model_dump())
    db.add(cc)
    _commit_unique(db, f"Cost center '{data.code}' in '{dept.name}'")
    db.refresh(cc)
    logger.info("create_cost_center: '%s' in department id=%d", cc.code, department_id)
    return cc


def update_cost_center(
    db: Session,
    department_id: int,
    cost_center_id: int,
    data: CostCenterUpdate,
) -> CostCenter:
    """Apply a partial update; a code change is propagated to the department's budgets."""
    cc = _get_cost_center(db, department_id, cost_center_id)
    update_data = data.model_dump(exclude_unset=True)

    new_code = update_data.get("code")
    if new_code and new_code != cc.code:
        with store_errors(db, "recode the cost center on budgets and users"):
            dept_name = cc.department.name
            db.query(Budget).filter(
                Budget.department == dept_name, Budget.cost_center == cc.code
            ).update({Budget.cost_center: new_code}, synchronize_session="fetch")
            db.query(UserProfile).filter(
                UserProfile.department == dept_name, UserProfile.cost_center == cc.code
            ).update({UserProfile.cost_center: new_code}, synchronize_session="fetch")

    for field, value in update_data.items():
        setattr(cc, field, value)

    _commit_unique(db, f"Cost center '{cc.code}'")
    db.refresh(cc)
    logger.info("update_cost_center: id=%d fields=%s", cost_center_id, list(update_data.keys()))
    return cc


def delete_cost_center(db: Session, department_id: int, cost_center_id: int) -> None:
    """Delete a cost center.

    Raises:
        HTTPException 409: If any budget of the department uses the code.
    """
    cc = _get_cost_center(db, department_id, cost_center_id)
    with store_errors(db, "count cost center budgets"):
        in_use = (
            db.query(Budget.id)
            .filter(Budget.department == cc.department.name, Budget.cost_center == cc.code)
            .count()
        )
    if in_use:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cost center '{cc.code}' is referenced by {in_use} budget(s).",
        )
    db.delete(cc)
    commit_or_raise(db)
    logger.info("delete_cost_center: deleted id=%d", cost_center_id)
