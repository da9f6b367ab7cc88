"""
Employee identifier generation - PREFIX + zero-padded number (EMP001)
"""
import re
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.employee import Employee


def format_employee_id(number: int, prefix: Optional[str] = None) -> str:
    """Render number as an identifier, zero-padded to at least 3 digits"""
    return f"{prefix or settings.EMPLOYEE_ID_PREFIX}{number:03d}"


def next_employee_id(db: Session) -> str:
    """
    Derive the next sequential employee identifier

    Takes the highest numeric suffix among identifiers of the form
    PREFIX + digits and adds one. When no identifier has that form, falls
    back to count(employees) + 1.

    No lock is held between this read and the insert; callers retry on a
    uniqueness conflict with a fresh candidate.

    Args:
        db: Database session

    Returns:
        Candidate identifier, e.g. "EMP008" after EMP001, EMP002, EMP007
    """
    prefix = settings.EMPLOYEE_ID_PREFIX
    pattern = re.compile(rf"^{re.escape(prefix)}(\d+)$")

    rows = db.query(Employee.id).filter(Employee.id.like(f"{prefix}%")).all()
    numbers = []
    for (employee_id,) in rows:
        match = pattern.match(employee_id)
        if match:
            numbers.append(int(match.group(1)))

    if numbers:
        return format_employee_id(max(numbers) + 1, prefix)

    count = db.query(func.count(Employee.id)).scalar() or 0
    return format_employee_id(count + 1, prefix)
