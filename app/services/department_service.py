"""
Department service - employee count maintenance and department reads
"""
import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.department import Department
from app.models.employee import Employee

logger = logging.getLogger(__name__)


def count_employees(db: Session, department_id: int) -> int:
    """Live COUNT of employees referencing department_id"""
    return (
        db.query(func.count(Employee.id))
        .filter(Employee.department_id == department_id)
        .scalar()
        or 0
    )


def recount_employees(db: Session, department_id: Optional[int]) -> None:
    """
    Recompute and persist a department's employee_count

    No-op when department_id is None. Idempotent: calling it again only
    rewrites the same value. This is the only writer of employee_count.

    Args:
        db: Database session
        department_id: Department whose membership changed
    """
    if department_id is None:
        return

    department = db.query(Department).filter(Department.id == department_id).first()
    if not department:
        logger.warning("Skipping employee recount: department %s not found", department_id)
        return

    count = count_employees(db, department_id)
    if department.employee_count != count:
        logger.info(
            "Department %s employee_count %s -> %s",
            department_id, department.employee_count, count
        )
    department.employee_count = count
    db.commit()


def _refresh_count(db: Session, department: Department) -> bool:
    """Repair a drifted employee_count in the session. Returns True if it changed."""
    count = count_employees(db, department.id)
    if department.employee_count == count:
        return False
    logger.warning(
        "Department %s employee_count drifted (%s stored, %s actual); repairing",
        department.id, department.employee_count, count
    )
    department.employee_count = count
    return True


def get_department(db: Session, department_id: int) -> Optional[Department]:
    """Get a department by ID, repairing its employee_count if out of sync"""
    department = db.query(Department).filter(Department.id == department_id).first()
    if department and _refresh_count(db, department):
        db.commit()
        db.refresh(department)
    return department


def list_departments(
    db: Session,
    skip: int = 0,
    limit: int = 100
) -> List[Department]:
    """
    List departments ordered by ID

    Each returned department has its employee_count recomputed if it drifted.

    Args:
        db: Database session
        skip: Number of records to skip
        limit: Maximum number of records to return

    Returns:
        List of Department instances
    """
    departments = db.query(Department).order_by(Department.id.asc()).offset(skip).limit(limit).all()

    changed = [d for d in departments if _refresh_count(db, d)]
    if changed:
        db.commit()
        for department in changed:
            db.refresh(department)

    return departments


def recount_all(db: Session) -> int:
    """
    Repair every department's employee_count

    Returns:
        Number of departments whose stored count was wrong
    """
    departments = db.query(Department).all()
    changed = [d for d in departments if _refresh_count(db, d)]
    if changed:
        db.commit()
    return len(changed)
