"""Repository for Initiative database operations."""

import logging
from typing import Iterable, List, Optional
from sqlalchemy.orm import Session

from roadmap.models.initiative import Initiative
from roadmap.database.models import InitiativeDB, ScheduledBlockDB

logger = logging.getLogger(__name__)


class InitiativeRepository:
    """Repository for Initiative database operations."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, initiative: Initiative) -> Initiative:
        """Create a new initiative."""
        try:
            initiative_db = InitiativeDB.from_pydantic(initiative)
            self.db.add(initiative_db)
            self.db.commit()
            self.db.refresh(initiative_db)
            logger.debug(f"Created initiative {initiative.id}: {initiative.title[:50]}")
            return initiative_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create initiative {initiative.id}: {type(e).__name__}: {str(e)}")
            raise

    def get(self, initiative_id: str) -> Optional[Initiative]:
        """Get initiative by ID."""
        row = self.db.query(InitiativeDB).filter(InitiativeDB.id == initiative_id).first()
        return row.to_pydantic() if row else None

    def get_all(self) -> List[Initiative]:
        """Get all initiatives ordered by title."""
        rows = self.db.query(InitiativeDB).order_by(InitiativeDB.title, InitiativeDB.id).all()
        return [row.to_pydantic() for row in rows]

    def get_many(self, initiative_ids: Iterable[str]) -> List[Initiative]:
        """Get the initiatives with the given IDs (missing IDs are skipped)."""
        ids = list(dict.fromkeys(initiative_ids))
        if not ids:
            return []
        rows = self.db.query(InitiativeDB).filter(InitiativeDB.id.in_(ids)).all()
        return [row.to_pydantic() for row in rows]

    def set_assignee(
        self,
        initiative_id: str,
        *,
        engineer_id: Optional[str] = None,
        squad_id: Optional[str] = None,
    ) -> Optional[Initiative]:
        """Set the initiative's default engineer or squad."""
        try:
            row = self.db.query(InitiativeDB).filter(InitiativeDB.id == initiative_id).first()
            if row is None:
                return None
            if engineer_id is not None:
                row.assigned_engineer_id = engineer_id
            if squad_id is not None:
                row.assigned_squad_id = squad_id
            self.db.commit()
            self.db.refresh(row)
            return row.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to set assignee of initiative {initiative_id}: {type(e).__name__}: {str(e)}")
            raise

    def delete(self, initiative_id: str) -> bool:
        """Delete an initiative together with all of its scheduled blocks."""
        try:
            row = self.db.query(InitiativeDB).filter(InitiativeDB.id == initiative_id).first()
            if row is None:
                return False
            deleted_blocks = (
                self.db.query(ScheduledBlockDB)
                .filter(ScheduledBlockDB.initiative_id == initiative_id)
                .delete(synchronize_session=False)
            )
            self.db.delete(row)
            self.db.commit()
            logger.debug(f"Deleted initiative {initiative_id} and {deleted_blocks} scheduled blocks")
            return True
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete initiative {initiative_id}: {type(e).__name__}: {str(e)}")
            raise
