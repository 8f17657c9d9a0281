from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session, Query

from .base import BaseRepository
from ..model.course import AssignmentOffering, utcnow


class AssignmentOfferingRepository(BaseRepository[AssignmentOffering]):
    """Repository for AssignmentOffering entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db, AssignmentOffering)

    def visible(self, now: Optional[datetime] = None) -> Query:
        """Assignment offerings that have opened"""
        now = now or utcnow()
        return self.db.query(AssignmentOffering).filter(
            AssignmentOffering.opens_at.isnot(None),
            AssignmentOffering.opens_at <= now
        )
