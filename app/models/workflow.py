"""
Workflow model - append-only audit record of an HR event
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
import enum
from app.db.base import Base
from app.utils.datetime_utils import now_utc


class WorkflowStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"


class Workflow(Base):
    __tablename__ = "workflows"

    id = Column(Integer, primary_key=True, index=True)
    # Employee identifier, not a foreign key: history outlives the employee row
    employee_id = Column(String(20), nullable=False, index=True)
    request_id = Column(Integer, ForeignKey("requests.id"), nullable=True, index=True)
    type = Column(String(50), nullable=False, index=True)  # e.g. "Onboarding", "Transfer", "Request-Leave"
    details = Column(JSON, nullable=False)  # Readable text or a structured payload
    status = Column(String(20), default=WorkflowStatus.PENDING.value, nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc, nullable=False)

    # Relationships
    request = relationship("Request")
