"""Creating scheduled blocks from a selected date range."""

import logging
import uuid
from datetime import date
from typing import Optional, Tuple
from sqlalchemy.orm import Session

from roadmap.database.initiative_repository import InitiativeRepository
from roadmap.database.scheduled_block_repository import ScheduledBlockRepository
from roadmap.database.team_repository import TeamRepository
from roadmap.engine.calendar_grid import add_business_days, business_days_between
from roadmap.engine.errors import BlockNotFoundError, InvalidDateRangeError, SchedulingError
from roadmap.models.audit_event import AuditEvent, AuditEventType
from roadmap.models.constants import BUSINESS_DAYS_PER_WEEK, DEFAULT_EFFORT_WEEKS, HOURS_PER_DAY
from roadmap.models.initiative import Initiative
from roadmap.models.schedule_requests import NEW_INITIATIVE, BlockCreateRequest, BlockCreateResponse
from roadmap.models.scheduled_block import ScheduledBlock

logger = logging.getLogger(__name__)


def derive_end_date(start: date, end: Optional[date], effort_weeks: Optional[float]) -> date:
    """End date of a new block.

    A missing end date, or one equal to the start (a single click), is taken
    from the effort estimate: weeks * 5 business days counting the start day.
    Initiatives without an estimate get one week.
    """
    if end is not None and end != start:
        return end
    weeks = effort_weeks or DEFAULT_EFFORT_WEEKS
    days = max(1, int(weeks * BUSINESS_DAYS_PER_WEEK + 0.5))
    return add_business_days(start, days - 1)


def _resolve_assignee(
    db: Session, assignee_id: Optional[str], initiative: Optional[Initiative]
) -> Tuple[Optional[str], Optional[str]]:
    """(engineer_id, squad_id) for a new block."""
    team = TeamRepository(db)
    if assignee_id:
        if team.get_engineer(assignee_id) is not None:
            return assignee_id, None
        if team.get_squad(assignee_id) is not None:
            return None, assignee_id
        raise BlockNotFoundError(f"Assignee not found: {assignee_id}", {"assignee_id": assignee_id})
    if initiative is not None and initiative.assigned_engineer_id:
        return initiative.assigned_engineer_id, None
    if initiative is not None and initiative.assigned_squad_id:
        return None, initiative.assigned_squad_id
    raise SchedulingError("No assignee given and the initiative has no assigned engineer or squad")


def add_block(db: Session, request: BlockCreateRequest) -> BlockCreateResponse:
    """Schedule an initiative on an engineer or squad.

    Raises:
        SchedulingError: Missing title for a new initiative, or no assignee
        BlockNotFoundError: Unknown initiative or assignee
        InvalidDateRangeError: End date before start date
    """
    initiatives = InitiativeRepository(db)
    creating = request.initiative_id == NEW_INITIATIVE
    initiative: Optional[Initiative] = None
    if creating:
        title = (request.initiative_title or "").strip()
        if not title:
            raise SchedulingError("initiative_title is required when creating a new initiative")
    else:
        initiative = initiatives.get(request.initiative_id)
        if initiative is None:
            raise BlockNotFoundError(
                f"Initiative not found: {request.initiative_id}", {"initiative_id": request.initiative_id}
            )

    start = request.start_date
    end = derive_end_date(start, request.end_date, initiative.effort_estimate if initiative else None)
    if end < start:
        raise InvalidDateRangeError("end_date must be on or after start_date")
    engineer_id, squad_id = _resolve_assignee(db, request.assignee_id, initiative)

    if creating:
        initiative = initiatives.create(
            Initiative(
                id=str(uuid.uuid4()),
                title=title,
                assigned_engineer_id=engineer_id,
                assigned_squad_id=squad_id,
            )
        )
    elif not initiative.assigned_engineer_id and not initiative.assigned_squad_id:
        initiative = initiatives.set_assignee(initiative.id, engineer_id=engineer_id, squad_id=squad_id)

    block = ScheduledBlock(
        id=str(uuid.uuid4()),
        initiative_id=initiative.id,
        engineer_id=engineer_id,
        squad_id=squad_id,
        start_date=start,
        end_date=end,
        hours_allocated=business_days_between(start, end) * HOURS_PER_DAY,
    )
    audit = AuditEvent(
        id=str(uuid.uuid4()),
        event_type=AuditEventType.SCHEDULE,
        entity_id=block.id,
        details={
            "initiative_id": initiative.id,
            "assignee_id": block.assignee_id,
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
        },
    )
    created = ScheduledBlockRepository(db).create(block, audit=audit)
    logger.info(f"Scheduled initiative {initiative.id} on {block.assignee_id} from {start} to {end}")
    return BlockCreateResponse(success=True, scheduled_block=created, initiative_created=creating)


def delete_block(db: Session, block_id: str) -> None:
    """Remove a scheduled block.

    Raises:
        BlockNotFoundError: No such block
    """
    blocks = ScheduledBlockRepository(db)
    block = blocks.get_by_id(block_id)
    if block is None:
        raise BlockNotFoundError(f"Scheduled block not found: {block_id}", {"block_id": block_id})
    audit = AuditEvent(
        id=str(uuid.uuid4()),
        event_type=AuditEventType.DELETE,
        entity_id=block_id,
        details={
            "initiative_id": block.initiative_id,
            "assignee_id": block.assignee_id,
            "start_date": block.start_date.isoformat(),
            "end_date": block.end_date.isoformat(),
        },
    )
    blocks.delete(block_id, audit=audit)
    logger.info(f"Deleted scheduled block {block_id}")
