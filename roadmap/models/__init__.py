"""Data models for the roadmap timeline."""

from roadmap.models.scheduled_block import (
    ScheduledBlock,
    UnavailabilityBlock,
    UnavailabilityType,
    AssigneeKind,
)
from roadmap.models.initiative import Initiative
from roadmap.models.team import Engineer, Squad
from roadmap.models.audit_event import AuditEvent, AuditEventType

__all__ = [
    "ScheduledBlock",
    "UnavailabilityBlock",
    "UnavailabilityType",
    "AssigneeKind",
    "Initiative",
    "Engineer",
    "Squad",
    "AuditEvent",
    "AuditEventType",
]
