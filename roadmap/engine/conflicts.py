"""Conflict detection and resolution planning for block moves.

Pure functions over a snapshot of one assignee's blocks. The store calls
these inside a single transaction; the client never applies them locally.
"""

from dataclasses import dataclass, field
from datetime import date
from heapq import heapify, heappop, heappush
from typing import Dict, Iterable, List, Optional, Set, Tuple

from roadmap.engine.calendar_grid import add_business_days, business_days_between
from roadmap.engine.errors import CascadeLockedError, InvalidDateRangeError
from roadmap.engine.lanes import ranges_overlap
from roadmap.models.schedule_requests import ConflictResolution
from roadmap.models.scheduled_block import ScheduledBlock


@dataclass(frozen=True)
class BlockShift:
    """New dates for a block pushed out of the way."""
    block_id: str
    start_date: date
    end_date: date


@dataclass
class MovePlan:
    """Everything a commit writes for one move."""
    block_id: str
    new_start_date: date
    new_end_date: date
    resolution: ConflictResolution
    conflicts: List[ScheduledBlock] = field(default_factory=list)
    shifts: List[BlockShift] = field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)


def find_conflicts(
    block_id: str,
    new_start: date,
    new_end: date,
    assignee_blocks: Iterable[ScheduledBlock],
) -> List[ScheduledBlock]:
    """Blocks of the destination assignee that would overlap the moved block.

    Args:
        block_id: The block being moved (never conflicts with itself)
        new_start: Candidate start date
        new_end: Candidate end date
        assignee_blocks: Current blocks of the destination assignee

    Returns:
        Overlapping blocks ordered by (start_date, id)
    """
    if new_start > new_end:
        raise InvalidDateRangeError("new start date must be on or before new end date")
    conflicts = [
        b for b in assignee_blocks
        if b.id != block_id and ranges_overlap(new_start, new_end, b.start_date, b.end_date)
    ]
    return sorted(conflicts, key=lambda b: (b.start_date, b.id))


def plan_push(
    block_id: str,
    new_start: date,
    new_end: date,
    assignee_blocks: Iterable[ScheduledBlock],
    locked_ids: Optional[Set[str]] = None,
) -> List[BlockShift]:
    """Push conflicting blocks later until no touched block overlaps another.

    Each block that has to move starts one business day after the latest
    end among the already settled blocks it overlaps and keeps its length
    in business days. Blocks it then lands on are queued in turn. The work
    queue is a heap ordered by (start_date, id), so long chains of adjacent
    blocks are handled iteratively and the result is deterministic.

    Raises:
        CascadeLockedError: A block with locked dates would have to move;
            nothing is planned in that case
    """
    locked_ids = locked_ids or set()
    spans: Dict[str, Tuple[date, date]] = {
        b.id: (b.start_date, b.end_date) for b in assignee_blocks if b.id != block_id
    }
    settled: Dict[str, Tuple[date, date]] = {block_id: (new_start, new_end)}
    queue = [
        (start, bid) for bid, (start, end) in spans.items()
        if ranges_overlap(new_start, new_end, start, end)
    ]
    heapify(queue)
    shifts: List[BlockShift] = []

    while queue:
        _, bid = heappop(queue)
        if bid in settled:
            continue
        start, end = spans[bid]
        duration = max(1, business_days_between(start, end))
        moved = False
        while True:
            blocker_ends = [
                s_end for s_start, s_end in settled.values()
                if ranges_overlap(start, end, s_start, s_end)
            ]
            if not blocker_ends:
                break
            if bid in locked_ids:
                raise CascadeLockedError(
                    "Cannot push a block whose initiative has locked dates",
                    locked_block_ids=[bid],
                )
            start = add_business_days(max(blocker_ends), 1)
            end = add_business_days(start, duration - 1)
            moved = True

        settled[bid] = (start, end)
        spans[bid] = (start, end)
        if not moved:
            continue
        shifts.append(BlockShift(block_id=bid, start_date=start, end_date=end))
        for other_id, (other_start, other_end) in spans.items():
            if other_id not in settled and ranges_overlap(start, end, other_start, other_end):
                heappush(queue, (other_start, other_id))

    return shifts


def plan_move(
    block_id: str,
    new_start: date,
    new_end: date,
    assignee_blocks: Iterable[ScheduledBlock],
    resolution: ConflictResolution,
    locked_ids: Optional[Set[str]] = None,
) -> MovePlan:
    """Build the full write set for a move under the chosen resolution.

    `none` and `stack` only move the block itself; `push` adds the cascade.
    Whether `none` is acceptable (no conflicts) is decided by the caller.
    """
    assignee_blocks = list(assignee_blocks)
    plan = MovePlan(
        block_id=block_id,
        new_start_date=new_start,
        new_end_date=new_end,
        resolution=ConflictResolution(resolution),
        conflicts=find_conflicts(block_id, new_start, new_end, assignee_blocks),
    )
    if plan.resolution == ConflictResolution.PUSH and plan.conflicts:
        plan.shifts = plan_push(block_id, new_start, new_end, assignee_blocks, locked_ids)
    return plan
