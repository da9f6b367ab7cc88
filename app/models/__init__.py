"""
Database models
"""
from app.models.account import Account, AccountStatus
from app.models.department import Department
from app.models.position import Position, PositionStatus
from app.models.employee import Employee, EmployeeStatus
from app.models.request import Request, RequestType, RequestStatus
from app.models.workflow import Workflow, WorkflowStatus

__all__ = [
    "Account",
    "AccountStatus",
    "Department",
    "Position",
    "PositionStatus",
    "Employee",
    "EmployeeStatus",
    "Request",
    "RequestType",
    "RequestStatus",
    "Workflow",
    "WorkflowStatus",
]
