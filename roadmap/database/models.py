"""SQLAlchemy database models for the roadmap scheduler."""

from datetime import datetime
import uuid
from sqlalchemy import Column, String, Integer, Float, Boolean, Date, DateTime, JSON, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from typing import Union, TypeVar, Type
from roadmap.database.database import Base
from roadmap.models.audit_event import AuditEventType
from roadmap.models.scheduled_block import UnavailabilityType

T = TypeVar('T')


def enum_to_value(enum_obj: Union[str, T]) -> str:
    """Convert enum to string value (handles both enum and string).

    Args:
        enum_obj: Enum instance or string value

    Returns:
        String value of the enum, or the string itself if already a string
    """
    if hasattr(enum_obj, 'value'):
        return enum_obj.value
    return str(enum_obj)


def value_to_enum(value: str, enum_class: Type[T], default: T) -> T:
    """Convert string to enum with fallback to default."""
    if not value:
        return default
    try:
        return enum_class(value)
    except ValueError:
        return default


class InitiativeDB(Base):
    """Database model for Initiative."""

    __tablename__ = "initiatives"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String, nullable=False)

    # Lock flags
    lock_dates = Column(Boolean, nullable=False, default=False)
    lock_assignment = Column(Boolean, nullable=False, default=False)

    # Effort estimate in weeks
    effort_estimate = Column(Float, nullable=True)

    assigned_engineer_id = Column(String, ForeignKey("engineers.id", ondelete="SET NULL"), nullable=True)
    assigned_squad_id = Column(String, ForeignKey("squads.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    blocks = relationship("ScheduledBlockDB", cascade="all, delete-orphan", passive_deletes=True)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from roadmap.models.initiative import Initiative
        return Initiative(
            id=self.id,
            title=self.title,
            lock_dates=self.lock_dates,
            lock_assignment=self.lock_assignment,
            effort_estimate=self.effort_estimate,
            assigned_engineer_id=self.assigned_engineer_id,
            assigned_squad_id=self.assigned_squad_id,
        )

    @classmethod
    def from_pydantic(cls, initiative):
        """Create database model from Pydantic model."""
        return cls(
            id=initiative.id,
            title=initiative.title,
            lock_dates=initiative.lock_dates,
            lock_assignment=initiative.lock_assignment,
            effort_estimate=initiative.effort_estimate,
            assigned_engineer_id=initiative.assigned_engineer_id,
            assigned_squad_id=initiative.assigned_squad_id,
        )


class EngineerDB(Base):
    """Database model for Engineer."""

    __tablename__ = "engineers"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    def to_pydantic(self):
        from roadmap.models.team import Engineer
        return Engineer(id=self.id, name=self.name, is_active=self.is_active)

    @classmethod
    def from_pydantic(cls, engineer):
        return cls(id=engineer.id, name=engineer.name, is_active=engineer.is_active)


class SquadMemberDB(Base):
    """Squad membership (engineer belongs to squad)."""

    __tablename__ = "squad_members"

    squad_id = Column(String, ForeignKey("squads.id", ondelete="CASCADE"), primary_key=True)
    engineer_id = Column(String, ForeignKey("engineers.id", ondelete="CASCADE"), primary_key=True)


class SquadDB(Base):
    """Database model for Squad."""

    __tablename__ = "squads"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)

    members = relationship("SquadMemberDB", cascade="all, delete-orphan", passive_deletes=True)

    def to_pydantic(self):
        from roadmap.models.team import Squad
        return Squad(
            id=self.id,
            name=self.name,
            member_ids=sorted(m.engineer_id for m in self.members),
        )

    @classmethod
    def from_pydantic(cls, squad):
        return cls(
            id=squad.id,
            name=squad.name,
            members=[SquadMemberDB(squad_id=squad.id, engineer_id=eid) for eid in squad.member_ids],
        )


class ScheduledBlockDB(Base):
    """Database model for ScheduledBlock."""

    __tablename__ = "scheduled_blocks"
    __table_args__ = (
        CheckConstraint("start_date <= end_date", name="ck_scheduled_block_date_order"),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    initiative_id = Column(String, ForeignKey("initiatives.id", ondelete="CASCADE"), nullable=False, index=True)

    # Exactly one assignee
    engineer_id = Column(String, ForeignKey("engineers.id", ondelete="CASCADE"), nullable=True, index=True)
    squad_id = Column(String, ForeignKey("squads.id", ondelete="CASCADE"), nullable=True, index=True)

    # Date-only, inclusive on both ends
    start_date = Column(Date, nullable=False, index=True)
    end_date = Column(Date, nullable=False, index=True)

    hours_allocated = Column(Float, nullable=False, default=0.0)
    is_at_risk = Column(Boolean, nullable=False, default=False)
    risk_reason = Column(String, nullable=True)

    # Optimistic concurrency stamp
    version = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from roadmap.models.scheduled_block import ScheduledBlock
        return ScheduledBlock(
            id=self.id,
            initiative_id=self.initiative_id,
            engineer_id=self.engineer_id,
            squad_id=self.squad_id,
            start_date=self.start_date,
            end_date=self.end_date,
            hours_allocated=self.hours_allocated,
            is_at_risk=self.is_at_risk,
            risk_reason=self.risk_reason,
            version=self.version or 1,
        )

    @classmethod
    def from_pydantic(cls, block):
        """Create database model from Pydantic model."""
        return cls(
            id=block.id,
            initiative_id=block.initiative_id,
            engineer_id=block.engineer_id,
            squad_id=block.squad_id,
            start_date=block.start_date,
            end_date=block.end_date,
            hours_allocated=block.hours_allocated,
            is_at_risk=block.is_at_risk,
            risk_reason=block.risk_reason,
            version=block.version,
        )


class UnavailabilityBlockDB(Base):
    """Database model for UnavailabilityBlock (time off)."""

    __tablename__ = "unavailability_blocks"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    engineer_id = Column(String, ForeignKey("engineers.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String, nullable=False, default=UnavailabilityType.PTO.value)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    notes = Column(String, nullable=True)

    def to_pydantic(self):
        from roadmap.models.scheduled_block import UnavailabilityBlock
        return UnavailabilityBlock(
            id=self.id,
            engineer_id=self.engineer_id,
            type=value_to_enum(self.type, UnavailabilityType, UnavailabilityType.OTHER),
            start_date=self.start_date,
            end_date=self.end_date,
            notes=self.notes,
        )

    @classmethod
    def from_pydantic(cls, item):
        return cls(
            id=item.id,
            engineer_id=item.engineer_id,
            type=enum_to_value(item.type),
            start_date=item.start_date,
            end_date=item.end_date,
            notes=item.notes,
        )


class AuditLogDB(Base):
    """Database model for AuditEvent."""

    __tablename__ = "audit_log"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    timestamp = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    event_type = Column(String, nullable=False)
    entity_type = Column(String, nullable=False, default="scheduled_block")
    entity_id = Column(String, nullable=False, index=True)
    details = Column(JSON, nullable=False, default=dict)

    def to_pydantic(self):
        from roadmap.models.audit_event import AuditEvent
        return AuditEvent(
            id=self.id,
            timestamp=self.timestamp,
            event_type=value_to_enum(self.event_type, AuditEventType, AuditEventType.MOVE),
            entity_type=self.entity_type,
            entity_id=self.entity_id,
            details=self.details or {},
        )

    @classmethod
    def from_pydantic(cls, event):
        return cls(
            id=event.id,
            timestamp=event.timestamp,
            event_type=enum_to_value(event.event_type),
            entity_type=event.entity_type,
            entity_id=event.entity_id,
            details=event.details,
        )
