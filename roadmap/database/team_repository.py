"""Repository for engineers, squads and time off."""

import logging
from datetime import date
from typing import List, Optional
from sqlalchemy.orm import Session

from roadmap.models.scheduled_block import UnavailabilityBlock
from roadmap.models.team import Engineer, Squad
from roadmap.database.models import EngineerDB, SquadDB, UnavailabilityBlockDB

logger = logging.getLogger(__name__)


class TeamRepository:
    """Repository for Engineer, Squad and UnavailabilityBlock database operations."""

    def __init__(self, db: Session):
        self.db = db

    def _add(self, row, label: str):
        try:
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
            logger.debug(f"Created {label} {row.id}")
            return row.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create {label} {row.id}: {type(e).__name__}: {str(e)}")
            raise

    def create_engineer(self, engineer: Engineer) -> Engineer:
        return self._add(EngineerDB.from_pydantic(engineer), "engineer")

    def create_squad(self, squad: Squad) -> Squad:
        return self._add(SquadDB.from_pydantic(squad), "squad")

    def create_unavailability(self, item: UnavailabilityBlock) -> UnavailabilityBlock:
        return self._add(UnavailabilityBlockDB.from_pydantic(item), "unavailability block")

    def get_engineer(self, engineer_id: str) -> Optional[Engineer]:
        row = self.db.query(EngineerDB).filter(EngineerDB.id == engineer_id).first()
        return row.to_pydantic() if row else None

    def get_squad(self, squad_id: str) -> Optional[Squad]:
        row = self.db.query(SquadDB).filter(SquadDB.id == squad_id).first()
        return row.to_pydantic() if row else None

    def list_engineers(self, active_only: bool = True) -> List[Engineer]:
        """Engineers ordered by name."""
        query = self.db.query(EngineerDB)
        if active_only:
            query = query.filter(EngineerDB.is_active.is_(True))
        return [row.to_pydantic() for row in query.order_by(EngineerDB.name, EngineerDB.id).all()]

    def list_squads(self) -> List[Squad]:
        """Squads ordered by name, with member IDs."""
        rows = self.db.query(SquadDB).order_by(SquadDB.name, SquadDB.id).all()
        return [row.to_pydantic() for row in rows]

    def list_unavailability(self, start: date, end: date) -> List[UnavailabilityBlock]:
        """Time off overlapping the inclusive window [start, end]."""
        rows = (
            self.db.query(UnavailabilityBlockDB)
            .filter(UnavailabilityBlockDB.start_date <= end, UnavailabilityBlockDB.end_date >= start)
            .order_by(UnavailabilityBlockDB.start_date, UnavailabilityBlockDB.id)
            .all()
        )
        return [row.to_pydantic() for row in rows]
