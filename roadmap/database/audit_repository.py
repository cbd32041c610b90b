"""Read access to the schedule audit log.

Entries are written by the block repository in the same commit as the
change they describe.
"""

from typing import List
from sqlalchemy import desc
from sqlalchemy.orm import Session

from roadmap.models.audit_event import AuditEvent
from roadmap.database.models import AuditLogDB


class AuditRepository:
    """Repository for AuditEvent database operations."""

    def __init__(self, db: Session):
        self.db = db

    def list_for_entity(self, entity_id: str) -> List[AuditEvent]:
        """Audit events for one entity, newest first."""
        rows = (
            self.db.query(AuditLogDB)
            .filter(AuditLogDB.entity_id == entity_id)
            .order_by(desc(AuditLogDB.timestamp))
            .all()
        )
        return [row.to_pydantic() for row in rows]
