"""
Workflow schemas

Workflows are audit entries; the lifecycle writes them, HR reviews them here.
"""
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_serializer, ConfigDict

from app.models.workflow import WorkflowStatus


class WorkflowCreate(BaseModel):
    """Schema for a manually logged workflow entry"""

    employee_id: str = Field(..., max_length=20, description="Employee ID the entry belongs to")
    type: str = Field(..., min_length=1, max_length=50, description="Category, e.g. Onboarding or Request-Leave")
    details: Optional[Any] = Field(
        default=None,
        description="Readable text or structured payload; derived from the type when omitted",
    )
    request_id: Optional[int] = Field(default=None, description="Related request ID")
    status: WorkflowStatus = Field(default=WorkflowStatus.PENDING, description="Initial status")


class WorkflowOut(BaseModel):
    """Workflow output schema"""

    id: int
    employee_id: str
    request_id: Optional[int] = None
    type: str
    details: Any
    status: WorkflowStatus
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", "updated_at", when_used="always")
    @classmethod
    def _ser_datetime(cls, dt):
        from app.utils.datetime_utils import iso_z
        return iso_z(dt)
