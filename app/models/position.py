"""
Position model

status "deactive" on the privileged position means it is already filled.
"""
from sqlalchemy import Column, Integer, String, DateTime
import enum
from app.db.base import Base
from app.utils.datetime_utils import now_utc


class PositionStatus(str, enum.Enum):
    ACTIVE = "active"
    DEACTIVE = "deactive"


class Position(Base):
    __tablename__ = "positions"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False, index=True)
    status = Column(String(20), default=PositionStatus.ACTIVE.value, nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc, nullable=False)
