"""
Position service - position lookups and the single-holder guard for the privileged position

The privileged position ("President" by default) may be held by at most one
active employee. Its Position row is "deactive" while filled and "active"
while vacant.
"""
import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import ConflictError, InvalidValueError, NotFoundError
from app.models.employee import Employee, EmployeeStatus
from app.models.position import Position, PositionStatus
from app.utils.enums import enum_to_str

logger = logging.getLogger(__name__)


def normalize_position_name(name: Optional[str]) -> str:
    return (name or "").strip().lower()


def is_privileged_position(name: Optional[str]) -> bool:
    """True if name is the privileged position, compared case-insensitively"""
    return bool(name) and normalize_position_name(name) == normalize_position_name(settings.PRIVILEGED_POSITION)


def holds_privileged_position(position: Optional[str], status) -> bool:
    """True if an employee with this position and status counts as the active holder"""
    return is_privileged_position(position) and enum_to_str(status) == EmployeeStatus.ACTIVE.value


def get_position_by_name(db: Session, name: str) -> Optional[Position]:
    """Get a position by name (case-insensitive)"""
    return (
        db.query(Position)
        .filter(func.lower(Position.name) == normalize_position_name(name))
        .first()
    )


def find_active_holder(
    db: Session,
    exclude_employee_id: Optional[str] = None
) -> Optional[Employee]:
    """Active employee currently holding the privileged position, if any"""
    query = db.query(Employee).filter(
        func.lower(func.trim(Employee.position)) == normalize_position_name(settings.PRIVILEGED_POSITION),
        Employee.status == EmployeeStatus.ACTIVE.value,
    )
    if exclude_employee_id is not None:
        query = query.filter(Employee.id != exclude_employee_id)
    return query.first()


def ensure_privileged_position_free(db: Session, exclude_employee_id: Optional[str] = None) -> None:
    """
    Hard gate run before an employee becomes the active holder

    Raises:
        ConflictError: If another employee actively holds the position
    """
    holder = find_active_holder(db, exclude_employee_id=exclude_employee_id)
    if holder:
        raise ConflictError(
            f"{settings.PRIVILEGED_POSITION} already assigned to employee {holder.id}"
        )


def resolve_position(
    db: Session,
    name: str,
    employee_status,
    employee_id: Optional[str] = None
) -> Position:
    """
    Validate a position an employee is about to take

    Args:
        db: Database session
        name: Requested position name
        employee_status: Status the employee will have after the change
        employee_id: The employee itself (excluded from the holder check), if it exists

    Returns:
        The Position row (its name is the canonical spelling to store)

    Raises:
        NotFoundError: If no position has that name
        ConflictError: If the privileged position is already actively held
        InvalidValueError: If a regular position is deactivated
    """
    position = get_position_by_name(db, name)
    if not position:
        raise NotFoundError(f"Position '{name}' not found")

    if is_privileged_position(position.name):
        if enum_to_str(employee_status) == EmployeeStatus.ACTIVE.value:
            ensure_privileged_position_free(db, exclude_employee_id=employee_id)
        return position

    if position.status == PositionStatus.DEACTIVE.value:
        raise InvalidValueError(f"Position '{position.name}' is not available")
    return position


def _set_position_status(db: Session, position_name: str, status: PositionStatus) -> None:
    position = get_position_by_name(db, position_name)
    if not position:
        logger.warning("Position '%s' not found; status not changed", position_name)
        return
    if position.status == status.value:
        return
    position.status = status.value
    db.commit()
    logger.info("Position '%s' status set to %s", position.name, status.value)


def on_assign(db: Session, position_name: str) -> None:
    """
    Mark the privileged position as filled after a holder was committed

    The exclusivity check itself runs earlier, in resolve_position /
    ensure_privileged_position_free.
    """
    if not is_privileged_position(position_name):
        return
    _set_position_status(db, position_name, PositionStatus.DEACTIVE)


def on_vacate(db: Session, employee_id: str, old_position: Optional[str]) -> None:
    """
    Reopen the privileged position when its holder left it

    Does nothing if old_position is not privileged or another employee
    still actively holds it.
    """
    if not is_privileged_position(old_position):
        return

    holder = find_active_holder(db, exclude_employee_id=employee_id)
    if holder:
        logger.info(
            "%s still held by employee %s; position stays filled",
            settings.PRIVILEGED_POSITION, holder.id
        )
        return
    _set_position_status(db, old_position, PositionStatus.ACTIVE)


def reconcile_privileged_position(db: Session) -> Optional[str]:
    """
    Align the privileged Position's status with who actually holds it

    Used to repair state after a contained side-effect failure.

    Returns:
        The status written, or None if the position does not exist
    """
    position = get_position_by_name(db, settings.PRIVILEGED_POSITION)
    if not position:
        return None
    holder = find_active_holder(db)
    status = PositionStatus.DEACTIVE if holder else PositionStatus.ACTIVE
    _set_position_status(db, position.name, status)
    return status.value
