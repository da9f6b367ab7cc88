"""
Department schemas
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, field_serializer, ConfigDict


class DepartmentOut(BaseModel):
    """Schema for department output. employee_count is recomputed on read when it has drifted."""
    id: int
    name: str
    description: Optional[str] = None
    employee_count: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", "updated_at", when_used="always")
    @classmethod
    def _ser_datetime(cls, dt):
        from app.utils.datetime_utils import iso_z
        return iso_z(dt)
