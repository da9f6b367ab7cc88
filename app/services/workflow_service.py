"""
Workflow service - append-only audit entries for employee and request events

record_* helpers are best effort: a failed write is rolled back, logged and
swallowed so it never undoes the mutation that triggered it.
"""
import logging
from typing import Any, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from app.constants import (
    WORKFLOW_ONBOARDING,
    WORKFLOW_TRANSFER,
    WORKFLOW_FIELD_UPDATES,
    WORKFLOW_EMPLOYEE_DELETED,
    WORKFLOW_REQUEST_PREFIX,
    NO_DEPARTMENT,
    UNASSIGNED_POSITION,
    NOT_AVAILABLE,
    NO_TRACKED_CHANGES,
)
from app.core.errors import ConflictError, NotFoundError, contain_side_effect
from app.models.employee import Employee
from app.models.request import Request
from app.models.workflow import Workflow, WorkflowStatus
from app.schemas.workflow import WorkflowCreate
from app.utils.datetime_utils import date_label
from app.utils.enums import enum_to_str
from app.utils.json_serializer import sanitize_for_json

logger = logging.getLogger(__name__)

# (field label, old display value, new display value)
FieldChange = Tuple[str, Any, Any]


# ====== DETAILS ======

def _display(value: Any) -> str:
    value = enum_to_str(value)
    return NOT_AVAILABLE if value in (None, "") else str(value)


def onboarding_details(employee: Employee) -> str:
    department = employee.department.name if employee.department else NO_DEPARTMENT
    position = employee.position or UNASSIGNED_POSITION
    hire_date = date_label(employee.hire_date) or NOT_AVAILABLE
    return f"Onboarded to {department} as {position} on {hire_date}"


def transfer_details(from_department: Optional[str], to_department: Optional[str]) -> str:
    return f"From: {_display(from_department)} → To: {_display(to_department)}"


def field_update_details(changes: Sequence[FieldChange]) -> str:
    """One 'field: old → new' entry per change, or a fallback line when nothing changed"""
    if not changes:
        return NO_TRACKED_CHANGES
    return "; ".join(f"{field}: {_display(old)} → {_display(new)}" for field, old, new in changes)


def deletion_details(department_name: Optional[str], position: Optional[str]) -> str:
    details = f"Removed from {department_name or NO_DEPARTMENT}"
    if position:
        details += f" (was {position})"
    return details


def request_details(request: Request) -> str:
    return f"{request.quantity} x {request.items} ({enum_to_str(request.status)})"


# ====== RECORDING ======

def record_workflow(
    db: Session,
    event_type: str,
    employee_id: str,
    details: Any,
    request_id: Optional[int] = None
) -> Optional[Workflow]:
    """
    Append one pending workflow entry

    Args:
        db: Database session
        event_type: Category, e.g. "Onboarding"
        employee_id: Employee the entry describes
        details: Readable text or a structured payload
        request_id: Related request (optional)

    Returns:
        The created Workflow, or None if the write failed
    """
    with contain_side_effect(db, f"workflow:{event_type}", employee_id, request_id=request_id):
        workflow = Workflow(
            employee_id=employee_id,
            request_id=request_id,
            type=event_type,
            details=sanitize_for_json(details),
            status=WorkflowStatus.PENDING.value,
        )
        db.add(workflow)
        db.commit()
        db.refresh(workflow)
        logger.info("Workflow %s recorded for employee %s: %s", event_type, employee_id, workflow.details)
        return workflow
    return None


def record_onboarding(db: Session, employee: Employee) -> Optional[Workflow]:
    with contain_side_effect(db, "workflow:details", employee.id):
        return record_workflow(db, WORKFLOW_ONBOARDING, employee.id, onboarding_details(employee))
    return None


def record_transfer(
    db: Session,
    employee_id: str,
    from_department: Optional[str],
    to_department: Optional[str]
) -> Optional[Workflow]:
    return record_workflow(db, WORKFLOW_TRANSFER, employee_id, transfer_details(from_department, to_department))


def record_field_updates(db: Session, employee_id: str, changes: Sequence[FieldChange]) -> Optional[Workflow]:
    """Coalesce every changed field of one update into a single entry"""
    return record_workflow(db, WORKFLOW_FIELD_UPDATES, employee_id, field_update_details(changes))


def record_deletion(
    db: Session,
    employee_id: str,
    department_name: Optional[str],
    position: Optional[str]
) -> Optional[Workflow]:
    return record_workflow(
        db, WORKFLOW_EMPLOYEE_DELETED, employee_id, deletion_details(department_name, position)
    )


def record_request_workflow(db: Session, request: Request) -> Optional[Workflow]:
    """
    Log a request event (type "Request-<Type>") against the requester's employee record

    Skipped when the requesting account has no employee.
    """
    employee = db.query(Employee).filter(Employee.account_id == request.account_id).first()
    if not employee:
        logger.info("Request %s: account %s has no employee; workflow not recorded", request.id, request.account_id)
        return None
    event_type = f"{WORKFLOW_REQUEST_PREFIX}{enum_to_str(request.type).capitalize()}"
    return record_workflow(db, event_type, employee.id, request_details(request), request_id=request.id)


# ====== QUERIES ======

def list_workflows(
    db: Session,
    employee_id: Optional[str] = None,
    status: Optional[WorkflowStatus] = None,
    skip: int = 0,
    limit: int = 100
) -> List[Workflow]:
    """List workflows, newest first, optionally for one employee and/or status"""
    query = db.query(Workflow)
    if employee_id is not None:
        query = query.filter(Workflow.employee_id == employee_id)
    if status is not None:
        query = query.filter(Workflow.status == enum_to_str(status))
    return query.order_by(Workflow.created_at.desc(), Workflow.id.desc()).offset(skip).limit(limit).all()


def get_workflow(db: Session, workflow_id: int) -> Optional[Workflow]:
    """Get a workflow by ID"""
    return db.query(Workflow).filter(Workflow.id == workflow_id).first()


# ====== MANUAL ENTRIES & TRANSITIONS ======

def create_workflow(db: Session, workflow_data: WorkflowCreate) -> Workflow:
    """
    Log a workflow entry by hand

    Unlike the record_* helpers this is a primary write, so failures propagate.

    Raises:
        NotFoundError: If the employee or request does not exist
    """
    employee = db.query(Employee).filter(Employee.id == workflow_data.employee_id).first()
    if not employee:
        raise NotFoundError(f"Employee {workflow_data.employee_id} not found")

    if workflow_data.request_id is not None:
        request = db.query(Request).filter(Request.id == workflow_data.request_id).first()
        if not request:
            raise NotFoundError(f"Request {workflow_data.request_id} not found")

    details = workflow_data.details
    if details is None:
        if workflow_data.type == WORKFLOW_ONBOARDING:
            details = onboarding_details(employee)
        else:
            details = "General workflow logged"

    workflow = Workflow(
        employee_id=employee.id,
        request_id=workflow_data.request_id,
        type=workflow_data.type,
        details=sanitize_for_json(details),
        status=enum_to_str(workflow_data.status),
    )
    db.add(workflow)
    db.commit()
    db.refresh(workflow)
    return workflow


def update_workflow_status(db: Session, workflow_id: int, new_status: WorkflowStatus) -> Workflow:
    """
    Move a pending workflow to approved, rejected or completed

    Raises:
        NotFoundError: If the workflow does not exist
        ConflictError: If the workflow is no longer pending
    """
    workflow = get_workflow(db, workflow_id)
    if not workflow:
        raise NotFoundError(f"Workflow {workflow_id} not found")

    if workflow.status != WorkflowStatus.PENDING.value:
        raise ConflictError(
            f"Workflow {workflow_id} is already {workflow.status}; only pending workflows can change status"
        )

    workflow.status = enum_to_str(new_status)
    db.commit()
    db.refresh(workflow)
    logger.info("Workflow %s for employee %s -> %s", workflow.id, workflow.employee_id, workflow.status)
    return workflow


def approve_workflow(db: Session, workflow_id: int) -> Workflow:
    return update_workflow_status(db, workflow_id, WorkflowStatus.APPROVED)


def reject_workflow(db: Session, workflow_id: int) -> Workflow:
    return update_workflow_status(db, workflow_id, WorkflowStatus.REJECTED)


def complete_workflow(db: Session, workflow_id: int) -> Workflow:
    return update_workflow_status(db, workflow_id, WorkflowStatus.COMPLETED)
