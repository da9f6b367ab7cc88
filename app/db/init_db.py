"""
Database initialization
Seeds the position catalogue the employee lifecycle resolves names against
"""
import logging
from sqlalchemy.orm import Session
from app.core.config import settings
from app.models.position import Position, PositionStatus
from app.services.position_service import get_position_by_name

logger = logging.getLogger(__name__)


def seed_default_positions(db: Session) -> int:
    """
    Create the configured default positions that don't exist yet

    New positions start "active" (vacant). Existing rows are left untouched.

    Returns:
        Number of positions created
    """
    created = 0
    for name in settings.get_default_positions_list():
        if get_position_by_name(db, name):
            continue
        db.add(Position(name=name, status=PositionStatus.ACTIVE.value))
        created += 1
        logger.info("Created position: %s", name)

    if created:
        db.commit()
    return created
