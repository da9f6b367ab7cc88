"""
Employee model
"""
from sqlalchemy import Column, Integer, String, DateTime, Date, ForeignKey
from sqlalchemy.orm import relationship
import enum
from app.db.base import Base
from app.utils.datetime_utils import now_utc


class EmployeeStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Employee(Base):
    __tablename__ = "employees"

    # Human-readable identifier (EMP001), immutable once assigned
    id = Column(String(20), primary_key=True, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), unique=True, nullable=False, index=True)
    position = Column(String(100), nullable=True)
    department_id = Column(Integer, ForeignKey("departments.id"), nullable=True, index=True)
    manager_id = Column(String(20), ForeignKey("employees.id"), nullable=True)
    hire_date = Column(Date, nullable=True)
    status = Column(String(20), default=EmployeeStatus.ACTIVE.value, nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc, nullable=False)

    # Relationships
    account = relationship("Account", back_populates="employee")
    department = relationship("Department", back_populates="employees")
    manager = relationship("Employee", remote_side=[id], backref="direct_reports")
    workflows = relationship(
        "Workflow",
        primaryjoin="Employee.id == foreign(Workflow.employee_id)",
        order_by="Workflow.id",
        viewonly=True,
    )
