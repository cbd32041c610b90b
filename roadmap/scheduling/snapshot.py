"""Read side: schedule snapshots and timeline layouts for a date window."""

from datetime import date
from typing import Optional
from sqlalchemy.orm import Session

from roadmap.database.initiative_repository import InitiativeRepository
from roadmap.database.scheduled_block_repository import ScheduledBlockRepository
from roadmap.database.team_repository import TeamRepository
from roadmap.engine.calendar_grid import CalendarGrid
from roadmap.engine.errors import InvalidDateRangeError, SchedulingError
from roadmap.engine.swimlanes import VIEW_KINDS
from roadmap.engine.timeline import TimelineLayout, build_timeline
from roadmap.models.constants import DEFAULT_TIMEFRAME
from roadmap.models.schedule_requests import ScheduleSnapshot


def load_snapshot(db: Session, start: date, end: date) -> ScheduleSnapshot:
    """Everything overlapping [start, end] that the timeline needs."""
    if start > end:
        raise InvalidDateRangeError(f"Invalid range: {start.isoformat()} is after {end.isoformat()}")
    team = TeamRepository(db)
    return ScheduleSnapshot(
        start_date=start,
        end_date=end,
        scheduled_blocks=ScheduledBlockRepository(db).list_in_window(start, end),
        unavailability=team.list_unavailability(start, end),
        initiatives=InitiativeRepository(db).get_all(),
        engineers=team.list_engineers(active_only=True),
        squads=team.list_squads(),
    )


def load_timeline(
    db: Session,
    view: str,
    anchor: date,
    timeframe: str = DEFAULT_TIMEFRAME,
    today: Optional[date] = None,
) -> TimelineLayout:
    """Timeline layout of one view ("engineers", "squads" or "initiatives") for a timeframe."""
    if view not in VIEW_KINDS:
        raise SchedulingError(f"Unknown view: {view!r} (expected one of {', '.join(VIEW_KINDS)})")
    grid = CalendarGrid.for_timeframe(timeframe, anchor)
    snapshot = load_snapshot(db, grid.start, grid.end)
    return build_timeline(
        grid,
        VIEW_KINDS[view],
        snapshot.scheduled_blocks,
        snapshot.initiatives,
        engineers=snapshot.engineers,
        squads=snapshot.squads,
        unavailability=snapshot.unavailability,
        today=today,
    )
