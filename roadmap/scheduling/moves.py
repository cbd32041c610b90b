"""Server side of the two-phase move protocol.

`check_move` reports overlaps without writing anything. `commit_move`
recomputes the plan from current state and writes it in one transaction,
so a commit never trusts what the client saw at check time.
"""

import logging
import uuid
from typing import Dict, List, Optional, Set, Tuple
from sqlalchemy.orm import Session

from roadmap.database.initiative_repository import InitiativeRepository
from roadmap.database.scheduled_block_repository import ScheduledBlockRepository
from roadmap.database.team_repository import TeamRepository
from roadmap.engine.conflicts import find_conflicts, plan_move
from roadmap.engine.errors import (
    AssignmentLockedError,
    BlockLockedError,
    BlockNotFoundError,
    StaleScheduleError,
)
from roadmap.models.audit_event import AuditEvent, AuditEventType
from roadmap.models.initiative import Initiative
from roadmap.models.schedule_requests import (
    BumpedBlock,
    ConflictCheckResponse,
    ConflictResolution,
    ConflictingBlock,
    MoveCheckRequest,
    MoveCommitRequest,
    MoveCommitResponse,
)
from roadmap.models.scheduled_block import AssigneeKind, ScheduledBlock

logger = logging.getLogger(__name__)


def _load(db: Session, block_id: str) -> Tuple[ScheduledBlock, Optional[Initiative]]:
    block = ScheduledBlockRepository(db).get_by_id(block_id)
    if block is None:
        raise BlockNotFoundError(f"Scheduled block not found: {block_id}", {"block_id": block_id})
    return block, InitiativeRepository(db).get(block.initiative_id)


def _target_assignee(db: Session, block: ScheduledBlock, new_assignee_id: Optional[str]) -> Tuple[str, bool]:
    """Resolve the destination assignee; the block keeps its assignee kind."""
    if not new_assignee_id or new_assignee_id == block.assignee_id:
        return block.assignee_id, False
    team = TeamRepository(db)
    if block.assignee_kind == AssigneeKind.ENGINEER:
        exists = team.get_engineer(new_assignee_id) is not None
    else:
        exists = team.get_squad(new_assignee_id) is not None
    if not exists:
        raise BlockNotFoundError(
            f"{block.assignee_kind.value.capitalize()} not found: {new_assignee_id}",
            {"assignee_id": new_assignee_id},
        )
    return new_assignee_id, True


def _check_locks(initiative: Optional[Initiative], reassigning: bool) -> None:
    if initiative is None:
        return
    if initiative.lock_dates:
        raise BlockLockedError(f"'{initiative.title}' has locked dates and cannot be moved")
    if reassigning and initiative.lock_assignment:
        raise AssignmentLockedError(f"'{initiative.title}' has a locked assignment and cannot be reassigned")


def _conflicting(db: Session, conflicts: List[ScheduledBlock]) -> List[ConflictingBlock]:
    titles: Dict[str, str] = {
        i.id: i.title for i in InitiativeRepository(db).get_many(b.initiative_id for b in conflicts)
    }
    return [
        ConflictingBlock(
            id=b.id,
            owner_title=titles.get(b.initiative_id, "Unknown"),
            start_date=b.start_date,
            end_date=b.end_date,
            version=b.version,
        )
        for b in conflicts
    ]


def _locked_block_ids(db: Session, blocks: List[ScheduledBlock]) -> Set[str]:
    locked = {i.id for i in InitiativeRepository(db).get_many(b.initiative_id for b in blocks) if i.lock_dates}
    return {b.id for b in blocks if b.initiative_id in locked}


def check_move(db: Session, request: MoveCheckRequest) -> ConflictCheckResponse:
    """Would the move overlap other blocks of the destination assignee?

    Raises:
        BlockNotFoundError: Unknown block or assignee
        BlockLockedError / AssignmentLockedError: The initiative forbids the move
    """
    block, initiative = _load(db, request.block_id)
    assignee_id, reassigning = _target_assignee(db, block, request.new_assignee_id)
    _check_locks(initiative, reassigning)

    assignee_blocks = ScheduledBlockRepository(db).list_for_assignee(block.assignee_kind, assignee_id)
    conflicts = find_conflicts(block.id, request.new_start_date, request.new_end_date, assignee_blocks)
    return ConflictCheckResponse(
        has_conflicts=bool(conflicts),
        conflicting_blocks=_conflicting(db, conflicts),
        block_version=block.version,
    )


def commit_move(db: Session, request: MoveCommitRequest) -> MoveCommitResponse:
    """Apply a move with the chosen resolution, atomically.

    Raises:
        BlockNotFoundError: Unknown block or assignee
        BlockLockedError / AssignmentLockedError: The initiative forbids the move
        CascadeLockedError: A push would have to move a block with locked dates
        StaleScheduleError: `none` was requested but the move now conflicts,
            or a block changed since the check
    """
    block, initiative = _load(db, request.block_id)
    assignee_id, reassigning = _target_assignee(db, block, request.new_assignee_id)
    _check_locks(initiative, reassigning)

    blocks = ScheduledBlockRepository(db)
    assignee_blocks = blocks.list_for_assignee(block.assignee_kind, assignee_id)
    plan = plan_move(
        block.id,
        request.new_start_date,
        request.new_end_date,
        assignee_blocks,
        request.resolution,
        locked_ids=_locked_block_ids(db, assignee_blocks),
    )
    if plan.resolution == ConflictResolution.NONE and plan.has_conflicts:
        conflicting = _conflicting(db, plan.conflicts)
        logger.warning(f"Rejected move of block {block.id}: {len(conflicting)} new conflict(s)")
        raise StaleScheduleError(
            "The move now conflicts with other blocks; choose stack or push",
            {"conflicting_blocks": [c.model_dump(mode="json") for c in conflicting]},
        )

    is_engineer = block.assignee_kind == AssigneeKind.ENGINEER
    audit = AuditEvent(
        id=str(uuid.uuid4()),
        event_type=AuditEventType.MOVE_AND_REASSIGN if reassigning else AuditEventType.MOVE,
        entity_id=block.id,
        details={
            "initiative_id": block.initiative_id,
            "previous_start_date": block.start_date.isoformat(),
            "previous_end_date": block.end_date.isoformat(),
            "new_start_date": plan.new_start_date.isoformat(),
            "new_end_date": plan.new_end_date.isoformat(),
            "previous_assignee_id": block.assignee_id,
            "new_assignee_id": assignee_id,
            "resolution": plan.resolution.value,
            "bumped_blocks": [
                {"id": s.block_id, "start_date": s.start_date.isoformat(), "end_date": s.end_date.isoformat()}
                for s in plan.shifts
            ],
        },
    )
    _, pushed = blocks.apply_move(
        block.id,
        plan.new_start_date,
        plan.new_end_date,
        engineer_id=assignee_id if is_engineer else None,
        squad_id=None if is_engineer else assignee_id,
        shifts=plan.shifts,
        expected_versions=request.expected_versions,
        initiative_engineer_id=assignee_id if (reassigning and is_engineer) else None,
        audit=audit,
    )
    logger.info(
        f"Moved block {block.id} to {plan.new_start_date}..{plan.new_end_date} "
        f"({plan.resolution.value}, {len(pushed)} pushed)"
    )
    return MoveCommitResponse(
        success=True,
        moved_block=block.id,
        assignee_changed=reassigning,
        bumped_blocks=[BumpedBlock(id=b.id, start_date=b.start_date, end_date=b.end_date) for b in pushed],
    )
