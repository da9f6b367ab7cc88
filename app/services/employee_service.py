"""
Employee service - employee lifecycle (create, update, delete) and reads

Ordering rule for every mutation:
1. Hard gates (lookups, uniqueness, President exclusivity) before any write.
2. Commit the employee row.
3. Side effects (department recount, position status, workflow entry), each
   isolated so one failing does not stop the next or undo step 2.
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload, selectinload
from sqlalchemy.orm.exc import FlushError

from app.core.config import settings
from app.core.errors import (
    ConflictError,
    GenerationExhaustedError,
    InvalidValueError,
    NotFoundError,
    contain_side_effect,
)
from app.models.account import Account
from app.models.department import Department
from app.models.employee import Employee, EmployeeStatus
from app.schemas.employee import EmployeeCreate, EmployeeUpdate
from app.services.department_service import recount_employees
from app.services.identifier_service import next_employee_id
from app.services.position_service import (
    ensure_privileged_position_free,
    holds_privileged_position,
    is_privileged_position,
    normalize_position_name,
    on_assign,
    on_vacate,
    resolve_position,
)
from app.services.workflow_service import (
    record_deletion,
    record_field_updates,
    record_onboarding,
    record_transfer,
)
from app.utils.enums import enum_to_str, parse_enum

logger = logging.getLogger(__name__)


# ====== VALIDATION HELPERS ======

def _resolve_account(
    db: Session,
    account_id: Optional[int],
    email: Optional[str]
) -> Account:
    """Find the account by id, or by email (case-insensitive) when no id is given"""
    if account_id is not None:
        account = db.query(Account).filter(Account.id == account_id).first()
        if not account:
            raise NotFoundError(f"Related account not found for account_id {account_id}")
        return account

    if email:
        account = db.query(Account).filter(func.lower(Account.email) == email.strip().lower()).first()
        if not account:
            raise NotFoundError(f"Related account not found for email '{email}'")
        return account

    raise InvalidValueError("Either account_id or email is required")


def _ensure_account_unlinked(
    db: Session,
    account_id: int,
    exclude_employee_id: Optional[str] = None
) -> None:
    """One employee per account"""
    query = db.query(Employee).filter(Employee.account_id == account_id)
    if exclude_employee_id is not None:
        query = query.filter(Employee.id != exclude_employee_id)
    existing = query.first()
    if existing:
        raise ConflictError(f"Account {account_id} is already linked to employee {existing.id}")


def _resolve_department(db: Session, department_id: Optional[int]) -> Optional[Department]:
    if department_id is None:
        return None
    department = db.query(Department).filter(Department.id == department_id).first()
    if not department:
        raise NotFoundError(f"Department with id {department_id} not found")
    return department


def _check_reporting_hierarchy_cycle(
    db: Session,
    employee_id: str,
    manager_id: str
) -> bool:
    """
    Check if setting manager_id would create a cycle

    Args:
        db: Database session
        employee_id: ID of employee being updated
        manager_id: Proposed manager ID

    Returns:
        True if cycle would be created, False otherwise
    """
    if employee_id == manager_id:
        return True  # Self-reference creates a cycle

    # Walk up the chain from the proposed manager
    visited = set()
    current_id = manager_id

    while current_id is not None:
        if current_id == employee_id:
            return True  # Cycle detected

        if current_id in visited:
            break  # Already checked this path

        visited.add(current_id)
        manager = db.query(Employee).filter(Employee.id == current_id).first()
        if not manager or not manager.manager_id:
            break

        current_id = manager.manager_id

    return False


def _resolve_manager(
    db: Session,
    manager_id: Optional[str],
    employee_id: Optional[str] = None
) -> Optional[Employee]:
    """
    Validate a manager reference

    Raises:
        ConflictError: If the manager is the employee itself or would close a cycle
        NotFoundError: If the manager does not exist
    """
    if manager_id is None:
        return None

    if employee_id is not None and manager_id == employee_id:
        raise ConflictError("Employee cannot be their own manager")

    manager = db.query(Employee).filter(Employee.id == manager_id).first()
    if not manager:
        raise NotFoundError(f"Manager with id {manager_id} not found")

    if employee_id is not None and _check_reporting_hierarchy_cycle(db, employee_id, manager_id):
        raise ConflictError("Cannot set manager: would create a cycle in hierarchy")

    return manager


def _parse_status(value) -> str:
    """Validate an employee status value and return its stored string"""
    if value is None:
        raise InvalidValueError("status cannot be null")
    try:
        return parse_enum(EmployeeStatus, value).value
    except ValueError as e:
        raise InvalidValueError(str(e))


def _employee_id_taken(db: Session, employee_id: str) -> bool:
    return db.query(Employee.id).filter(Employee.id == employee_id).first() is not None


def _insert_employee(db: Session, explicit_id: Optional[str], values: Dict[str, Any]) -> Employee:
    """
    Insert the employee row, generating an identifier when none was given

    Generated identifiers are retried with a fresh candidate on a uniqueness
    conflict, up to EMPLOYEE_ID_MAX_ATTEMPTS.

    Raises:
        ConflictError: If an explicit ID or the account is already taken
        GenerationExhaustedError: If every generated candidate collided
    """
    attempts = 1 if explicit_id else settings.EMPLOYEE_ID_MAX_ATTEMPTS

    for attempt in range(1, attempts + 1):
        employee_id = explicit_id or next_employee_id(db)
        employee = Employee(id=employee_id, **values)
        db.add(employee)
        try:
            db.commit()
        except (IntegrityError, FlushError):
            db.rollback()
            if _employee_id_taken(db, employee_id):
                if explicit_id:
                    raise ConflictError(f"Employee ID {employee_id} already exists")
                logger.warning(
                    "Employee ID %s collided (attempt %d/%d); retrying with a new candidate",
                    employee_id, attempt, attempts
                )
                continue
            # Lost a race on the account link
            _ensure_account_unlinked(db, values["account_id"])
            raise
        db.refresh(employee)
        return employee

    logger.error("Employee ID generation exhausted after %d attempts", attempts)
    raise GenerationExhaustedError(attempts)


# ====== SNAPSHOT / DIFF ======

def _snapshot(employee: Employee) -> Dict[str, Any]:
    """Tracked values plus display labels, taken before and after an update"""
    return {
        "account_id": employee.account_id,
        "account": employee.account.email if employee.account else employee.account_id,
        "position": employee.position,
        "department_id": employee.department_id,
        "department": employee.department.name if employee.department else None,
        "hire_date": employee.hire_date,
        "status": enum_to_str(employee.status),
        "manager": employee.manager_id,
    }


# (label in workflow details, key compared, key displayed)
_TRACKED_FIELDS = (
    ("account", "account_id", "account"),
    ("position", "position", "position"),
    ("department", "department_id", "department"),
    ("hire date", "hire_date", "hire_date"),
    ("status", "status", "status"),
    ("manager", "manager", "manager"),
)


def _diff(before: Dict[str, Any], after: Dict[str, Any]) -> List[tuple]:
    return [
        (label, before[shown], after[shown])
        for label, compared, shown in _TRACKED_FIELDS
        if before[compared] != after[compared]
    ]


# ====== LIFECYCLE ======

def create_employee(db: Session, employee_data: EmployeeCreate) -> Employee:
    """
    Create (onboard) an employee

    Args:
        db: Database session
        employee_data: Employee creation data

    Returns:
        The persisted Employee, joined with account, department, manager and workflows

    Raises:
        NotFoundError: Account, position, department or manager missing
        ConflictError: Account already linked, explicit ID taken, self-manager,
            or President already held
        InvalidValueError: Position deactivated
        GenerationExhaustedError: Identifier collisions exceeded the retry bound
    """
    account = _resolve_account(db, employee_data.account_id, employee_data.email)
    _ensure_account_unlinked(db, account.id)

    explicit_id = employee_data.id
    if explicit_id and _employee_id_taken(db, explicit_id):
        raise ConflictError(f"Employee ID {explicit_id} already exists")

    status = _parse_status(employee_data.status)

    position_name = None
    if employee_data.position:
        position_name = resolve_position(db, employee_data.position, status, employee_id=explicit_id).name

    department = _resolve_department(db, employee_data.department_id)
    if employee_data.manager_id is not None:
        # A generated ID is not known yet; compare against the current candidate
        _resolve_manager(db, employee_data.manager_id, employee_id=explicit_id or next_employee_id(db))

    employee = _insert_employee(db, explicit_id, {
        "account_id": account.id,
        "position": position_name,
        "department_id": department.id if department else None,
        "manager_id": employee_data.manager_id,
        "hire_date": employee_data.hire_date,
        "status": status,
    })
    logger.info("Employee %s created for account %s", employee.id, account.id)

    if holds_privileged_position(employee.position, employee.status):
        with contain_side_effect(db, "position_assign", employee.id, position=employee.position):
            on_assign(db, employee.position)

    with contain_side_effect(db, "department_recount", employee.id, department_id=employee.department_id):
        recount_employees(db, employee.department_id)

    record_onboarding(db, employee)

    return get_employee(db, employee.id)


def update_employee(db: Session, employee_id: str, employee_data: EmployeeUpdate) -> Employee:
    """
    Update an employee (transfer, status, position, manager, account, hire date)

    Args:
        db: Database session
        employee_id: ID of employee to update
        employee_data: Fields to change (only those present in the payload)

    Returns:
        The updated Employee, fully joined

    Raises:
        NotFoundError: Employee or any referenced entity missing
        ConflictError: Account already linked elsewhere, self-manager / cycle,
            or President already held by someone else
        InvalidValueError: Null status or deactivated position
    """
    employee = get_employee(db, employee_id)
    if not employee:
        raise NotFoundError(f"Employee with id {employee_id} not found")

    update_dict = employee_data.model_dump(exclude_unset=True)
    before = _snapshot(employee)

    # Account re-link
    account_id = employee.account_id
    if update_dict.get("account_id") is not None or update_dict.get("email"):
        account = _resolve_account(db, update_dict.get("account_id"), update_dict.get("email"))
        if account.id != employee.account_id:
            _ensure_account_unlinked(db, account.id, exclude_employee_id=employee.id)
        account_id = account.id

    # Status
    status = before["status"]
    if "status" in update_dict:
        status = _parse_status(update_dict["status"])

    # Position and the President guard
    position_name = employee.position
    position_changed = (
        "position" in update_dict
        and normalize_position_name(update_dict["position"]) != normalize_position_name(employee.position)
    )
    if position_changed:
        if update_dict["position"]:
            position_name = resolve_position(db, update_dict["position"], status, employee_id=employee.id).name
        else:
            position_name = None
    held = holds_privileged_position(before["position"], before["status"])
    will_hold = holds_privileged_position(position_name, status)
    if will_hold and not held and not position_changed:
        # Re-activating the current holder of the position
        ensure_privileged_position_free(db, exclude_employee_id=employee.id)

    # Department
    department_id = employee.department_id
    if "department_id" in update_dict:
        department = _resolve_department(db, update_dict["department_id"])
        department_id = department.id if department else None

    # Manager
    manager_id = employee.manager_id
    if "manager_id" in update_dict:
        _resolve_manager(db, update_dict["manager_id"], employee_id=employee.id)
        manager_id = update_dict["manager_id"]

    employee.account_id = account_id
    employee.position = position_name
    employee.department_id = department_id
    employee.manager_id = manager_id
    employee.status = status
    if "hire_date" in update_dict:
        employee.hire_date = update_dict["hire_date"]

    db.commit()
    db.refresh(employee)
    after = _snapshot(employee)

    if before["department_id"] != after["department_id"]:
        with contain_side_effect(db, "department_recount", employee.id, department_id=before["department_id"]):
            recount_employees(db, before["department_id"])
        with contain_side_effect(db, "department_recount", employee.id, department_id=after["department_id"]):
            recount_employees(db, after["department_id"])
        record_transfer(db, employee.id, before["department"], after["department"])

    if held and not will_hold:
        with contain_side_effect(db, "position_vacate", employee.id, position=before["position"]):
            on_vacate(db, employee.id, before["position"])
    if will_hold and not held:
        with contain_side_effect(db, "position_assign", employee.id, position=position_name):
            on_assign(db, position_name)

    record_field_updates(db, employee.id, _diff(before, after))

    return get_employee(db, employee.id)


def delete_employee(db: Session, employee_id: str) -> None:
    """
    Delete (offboard) an employee

    Direct reports keep their records with the manager cleared. Workflow
    history stays in place.

    Args:
        db: Database session
        employee_id: ID of employee to delete

    Raises:
        NotFoundError: If employee not found
    """
    employee = get_employee(db, employee_id)
    if not employee:
        raise NotFoundError(f"Employee with id {employee_id} not found")

    department_id = employee.department_id
    department_name = employee.department.name if employee.department else None
    position = employee.position

    record_deletion(db, employee.id, department_name, position)

    report_ids = [report.id for report in employee.direct_reports]
    for report in employee.direct_reports:
        report.manager_id = None

    db.delete(employee)
    db.commit()
    logger.info("Employee %s deleted (direct reports detached: %s)", employee_id, report_ids or "none")

    with contain_side_effect(db, "department_recount", employee_id, department_id=department_id):
        recount_employees(db, department_id)

    if is_privileged_position(position):
        with contain_side_effect(db, "position_vacate", employee_id, position=position):
            on_vacate(db, employee_id, position)

    for report_id in report_ids:
        record_field_updates(db, report_id, [("manager", employee_id, None)])


# ====== READS ======

def get_employee(db: Session, employee_id: str) -> Optional[Employee]:
    """Get an employee by ID, joined with account, department, manager and workflows"""
    return (
        db.query(Employee)
        .options(
            joinedload(Employee.account),
            joinedload(Employee.department),
            joinedload(Employee.manager),
            selectinload(Employee.workflows),
        )
        .filter(Employee.id == employee_id)
        .first()
    )


def list_employees(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    department_id: Optional[int] = None,
    status: Optional[EmployeeStatus] = None
) -> List[Employee]:
    """
    List employees with optional filtering

    Args:
        db: Database session
        skip: Number of records to skip
        limit: Maximum number of records to return
        department_id: Filter by department ID
        status: Filter by employment status

    Returns:
        List of Employee instances ordered by ID
    """
    query = db.query(Employee).options(
        joinedload(Employee.account),
        joinedload(Employee.department),
        joinedload(Employee.manager),
        selectinload(Employee.workflows),
    )

    if department_id is not None:
        query = query.filter(Employee.department_id == department_id)

    if status is not None:
        query = query.filter(Employee.status == enum_to_str(status))

    return query.order_by(Employee.id.asc()).offset(skip).limit(limit).all()
