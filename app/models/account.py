"""
Account model

Login identity owned by the accounts module; the employee lifecycle only reads it.
"""
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
import enum
from app.db.base import Base
from app.utils.datetime_utils import now_utc


class AccountStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Account(Base):
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    title = Column(String, nullable=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    role = Column(String, default="User", nullable=False)
    status = Column(String, default=AccountStatus.ACTIVE.value, nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc, nullable=False)

    # Relationships
    employee = relationship("Employee", back_populates="account", uselist=False)

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
