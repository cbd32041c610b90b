"""Repository for ScheduledBlock database operations."""

import logging
from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple
from sqlalchemy.orm import Session

from roadmap.engine.conflicts import BlockShift
from roadmap.engine.errors import BlockNotFoundError, SchedulingError, StaleScheduleError
from roadmap.models.audit_event import AuditEvent
from roadmap.models.scheduled_block import AssigneeKind, ScheduledBlock
from roadmap.database.models import AuditLogDB, InitiativeDB, ScheduledBlockDB

logger = logging.getLogger(__name__)


class ScheduledBlockRepository:
    """Repository for ScheduledBlock database operations."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, block: ScheduledBlock, audit: Optional[AuditEvent] = None) -> ScheduledBlock:
        """Create a new scheduled block (and its audit entry in the same commit)."""
        try:
            block_db = ScheduledBlockDB.from_pydantic(block)
            self.db.add(block_db)
            if audit is not None:
                self.db.add(AuditLogDB.from_pydantic(audit))
            self.db.commit()
            self.db.refresh(block_db)
            logger.debug(f"Created scheduled block {block.id}")
            return block_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create scheduled block {block.id}: {type(e).__name__}: {str(e)}")
            raise

    def get_by_id(self, block_id: str) -> Optional[ScheduledBlock]:
        """Get a scheduled block by ID."""
        row = self.db.query(ScheduledBlockDB).filter(ScheduledBlockDB.id == block_id).first()
        return row.to_pydantic() if row else None

    def get_all(self) -> List[ScheduledBlock]:
        """Get all scheduled blocks sorted by start date."""
        rows = self.db.query(ScheduledBlockDB).order_by(ScheduledBlockDB.start_date, ScheduledBlockDB.id).all()
        return [row.to_pydantic() for row in rows]

    def list_in_window(self, start: date, end: date) -> List[ScheduledBlock]:
        """Blocks overlapping the inclusive window [start, end]."""
        rows = (
            self.db.query(ScheduledBlockDB)
            .filter(ScheduledBlockDB.start_date <= end, ScheduledBlockDB.end_date >= start)
            .order_by(ScheduledBlockDB.start_date, ScheduledBlockDB.id)
            .all()
        )
        return [row.to_pydantic() for row in rows]

    def list_for_assignee(self, kind: AssigneeKind, assignee_id: str) -> List[ScheduledBlock]:
        """All blocks of one engineer or one squad."""
        column = ScheduledBlockDB.engineer_id if kind == AssigneeKind.ENGINEER else ScheduledBlockDB.squad_id
        rows = (
            self.db.query(ScheduledBlockDB)
            .filter(column == assignee_id)
            .order_by(ScheduledBlockDB.start_date, ScheduledBlockDB.id)
            .all()
        )
        return [row.to_pydantic() for row in rows]

    def apply_move(
        self,
        block_id: str,
        new_start: date,
        new_end: date,
        *,
        engineer_id: Optional[str],
        squad_id: Optional[str],
        shifts: Sequence[BlockShift] = (),
        expected_versions: Optional[Dict[str, int]] = None,
        initiative_engineer_id: Optional[str] = None,
        audit: Optional[AuditEvent] = None,
    ) -> Tuple[ScheduledBlock, List[ScheduledBlock]]:
        """Write a move and every pushed block in one transaction.

        Versions in `expected_versions` are compared against the rows before
        anything is written; a mismatch rejects the whole move. Every written
        block gets its version bumped.

        Args:
            block_id: Block being moved
            new_start: New start date
            new_end: New end date
            engineer_id: Target engineer (None for squad blocks)
            squad_id: Target squad (None for engineer blocks)
            shifts: Pushed blocks and their new dates
            expected_versions: Block id -> version the caller saw
            initiative_engineer_id: When set, becomes the initiative's assigned engineer
            audit: Audit entry written with the move

        Returns:
            (moved block, pushed blocks)

        Raises:
            BlockNotFoundError: A referenced block no longer exists
            StaleScheduleError: A block changed since the caller read it
        """
        try:
            ids = [block_id] + [s.block_id for s in shifts]
            rows = {
                row.id: row
                for row in self.db.query(ScheduledBlockDB).filter(ScheduledBlockDB.id.in_(ids)).all()
            }
            missing = [bid for bid in ids if bid not in rows]
            if missing:
                raise BlockNotFoundError(f"Scheduled block not found: {missing[0]}", {"block_ids": missing})

            for bid, version in (expected_versions or {}).items():
                row = rows.get(bid) or self.db.query(ScheduledBlockDB).filter(ScheduledBlockDB.id == bid).first()
                if row is None or row.version != version:
                    raise StaleScheduleError(
                        "The schedule changed since the conflict check; refresh and try again",
                        {"block_id": bid},
                    )

            moved = rows[block_id]
            moved.start_date = new_start
            moved.end_date = new_end
            moved.engineer_id = engineer_id
            moved.squad_id = squad_id
            moved.version = (moved.version or 1) + 1

            for shift in shifts:
                row = rows[shift.block_id]
                row.start_date = shift.start_date
                row.end_date = shift.end_date
                row.version = (row.version or 1) + 1

            if initiative_engineer_id is not None:
                initiative = self.db.query(InitiativeDB).filter(InitiativeDB.id == moved.initiative_id).first()
                if initiative is not None:
                    initiative.assigned_engineer_id = initiative_engineer_id

            if audit is not None:
                self.db.add(AuditLogDB.from_pydantic(audit))

            self.db.commit()
            for row in rows.values():
                self.db.refresh(row)
            logger.debug(f"Moved scheduled block {block_id} ({len(shifts)} pushed)")
            return moved.to_pydantic(), [rows[s.block_id].to_pydantic() for s in shifts]
        except SchedulingError:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to move scheduled block {block_id}: {type(e).__name__}: {str(e)}")
            raise

    def delete(self, block_id: str, audit: Optional[AuditEvent] = None) -> bool:
        """Delete a block. Returns False when it does not exist."""
        try:
            row = self.db.query(ScheduledBlockDB).filter(ScheduledBlockDB.id == block_id).first()
            if row is None:
                return False
            self.db.delete(row)
            if audit is not None:
                self.db.add(AuditLogDB.from_pydantic(audit))
            self.db.commit()
            logger.debug(f"Deleted scheduled block {block_id}")
            return True
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete scheduled block {block_id}: {type(e).__name__}: {str(e)}")
            raise

