"""
Employee schemas
"""
from datetime import date, datetime
from typing import Any, List, Optional
from pydantic import BaseModel, Field, field_validator, field_serializer, model_validator, ConfigDict
from app.models.employee import EmployeeStatus
from app.models.workflow import WorkflowStatus


def _strip_or_none(v):
    if v is None:
        return None
    v = str(v).strip()
    return v or None


class EmployeeCreate(BaseModel):
    """Schema for creating an employee. The account is referenced by id or email."""
    id: Optional[str] = Field(None, max_length=20, description="Explicit employee ID (generated when omitted)")
    account_id: Optional[int] = Field(None, description="Linked account ID")
    email: Optional[str] = Field(None, description="Linked account email (alternative to account_id)")
    position: Optional[str] = Field(None, max_length=100, description="Position name")
    department_id: Optional[int] = Field(None, description="Department ID")
    manager_id: Optional[str] = Field(None, max_length=20, description="Manager's employee ID")
    hire_date: Optional[date] = Field(None, description="Hire date")
    status: EmployeeStatus = Field(default=EmployeeStatus.ACTIVE, description="Employment status")

    @field_validator("id", "email", "position", "manager_id", mode="before")
    @classmethod
    def strip_blank(cls, v):
        """Trim whitespace; blank strings become None"""
        return _strip_or_none(v)

    @model_validator(mode="after")
    def require_account_reference(self):
        if self.account_id is None and not self.email:
            raise ValueError("Either account_id or email is required")
        return self


class EmployeeUpdate(BaseModel):
    """
    Schema for updating an employee.

    Only fields present in the payload are applied; an explicit null clears
    position, department and manager.
    """
    account_id: Optional[int] = Field(None, description="Re-link to this account ID")
    email: Optional[str] = Field(None, description="Re-link to the account with this email")
    position: Optional[str] = Field(None, max_length=100, description="Position name")
    department_id: Optional[int] = Field(None, description="Department ID")
    manager_id: Optional[str] = Field(None, max_length=20, description="Manager's employee ID")
    hire_date: Optional[date] = Field(None, description="Hire date")
    status: Optional[EmployeeStatus] = Field(None, description="Employment status")

    @field_validator("email", "position", "manager_id", mode="before")
    @classmethod
    def strip_blank(cls, v):
        """Trim whitespace; blank strings become None"""
        return _strip_or_none(v)


class AccountRef(BaseModel):
    """Minimal linked account"""
    id: int
    email: str
    first_name: str
    last_name: str

    model_config = ConfigDict(from_attributes=True)


class DepartmentRef(BaseModel):
    """Minimal department"""
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)


class ManagerRef(BaseModel):
    """Minimal manager"""
    id: str
    position: Optional[str] = None
    status: EmployeeStatus

    model_config = ConfigDict(from_attributes=True)


class WorkflowSummary(BaseModel):
    """Workflow entry attached to an employee"""
    id: int
    type: str
    details: Any
    status: WorkflowStatus
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", when_used="always")
    @classmethod
    def _ser_datetime(cls, dt):
        from app.utils.datetime_utils import iso_z
        return iso_z(dt)


class EmployeeOut(BaseModel):
    """Schema for employee output, joined with account, department, manager and workflows"""
    id: str
    account_id: int
    account: Optional[AccountRef] = None
    position: Optional[str] = None
    department_id: Optional[int] = None
    department: Optional[DepartmentRef] = None
    manager_id: Optional[str] = None
    manager: Optional[ManagerRef] = None
    hire_date: Optional[date] = None
    status: EmployeeStatus
    created_at: datetime
    updated_at: datetime
    workflows: List[WorkflowSummary] = []

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", "updated_at", when_used="always")
    @classmethod
    def _ser_datetime(cls, dt):
        from app.utils.datetime_utils import iso_z
        return iso_z(dt)


class NextEmployeeIdOut(BaseModel):
    """Schema for GET /employees/next-id"""
    next_id: str
