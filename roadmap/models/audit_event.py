"""AuditEvent data model for the roadmap timeline."""

from datetime import datetime
from enum import Enum
from typing import Dict, Any
from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Audit event type enumeration."""
    SCHEDULE = "schedule"
    MOVE = "move"
    MOVE_AND_REASSIGN = "move_and_reassign"
    DELETE = "delete"


class AuditEvent(BaseModel):
    """Audit event captures every committed schedule mutation."""

    id: str = Field(..., description="Unique audit event identifier")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Event timestamp")
    event_type: AuditEventType = Field(..., description="Type of audit event")
    entity_type: str = Field("scheduled_block", description="Kind of entity the event relates to")
    entity_id: str = Field(..., description="ID of the entity this event relates to")
    details: Dict[str, Any] = Field(default_factory=dict, description="Additional event details")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True
