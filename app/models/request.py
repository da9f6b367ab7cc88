"""
Resource/leave request model (read by the workflow recorder)
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
import enum
from app.db.base import Base
from app.utils.datetime_utils import now_utc


class RequestType(str, enum.Enum):
    EQUIPMENT = "equipment"
    LEAVE = "leave"
    RESOURCES = "resources"


class RequestStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DISAPPROVED = "disapproved"
    REJECTED = "rejected"


class Request(Base):
    __tablename__ = "requests"

    id = Column(Integer, primary_key=True, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
    type = Column(String(20), nullable=False)
    items = Column(String(255), nullable=False)
    quantity = Column(Integer, default=1, nullable=False)
    status = Column(String(20), default=RequestStatus.PENDING.value, nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc, nullable=False)

    # Relationships
    account = relationship("Account")
