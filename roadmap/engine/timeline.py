"""Timeline layout for the roadmap view.

Turns a schedule snapshot into what the view draws: business-day columns,
one row per swimlane, and for every visible block its lane and pixel span.
"""

from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple
from pydantic import BaseModel, Field

from roadmap.engine.calendar_grid import CalendarGrid
from roadmap.engine.lanes import assign_lanes, lane_count, lane_top, row_height
from roadmap.engine.swimlanes import (
    SwimlaneKind,
    engineer_blocks,
    engineer_unavailability,
    initiative_blocks,
    squad_blocks,
)
from roadmap.models.initiative import Initiative
from roadmap.models.scheduled_block import ScheduledBlock, UnavailabilityBlock
from roadmap.models.team import Engineer, Squad


class TimelineBlock(BaseModel):
    """A positioned scheduled block."""
    id: str
    initiative_id: str
    title: str
    start_date: date
    end_date: date
    start_index: int
    end_index: int
    lane: int
    left: int
    top: int
    width: int
    is_at_risk: bool = False
    draggable: bool = True


class TimelineTimeOff(BaseModel):
    """A positioned unavailability block on an engineer row."""
    id: str
    type: str
    label: str
    start_date: date
    end_date: date
    left: int
    top: int
    width: int


class TimelineRow(BaseModel):
    """One swimlane."""
    kind: SwimlaneKind
    id: str
    name: str
    lane_count: int
    height: int
    blocks: List[TimelineBlock] = Field(default_factory=list)
    time_off: List[TimelineTimeOff] = Field(default_factory=list)


class TimelineLayout(BaseModel):
    """Everything the timeline view needs for one render."""
    start_date: date
    end_date: date
    days: List[date]
    today_index: Optional[int] = None
    rows: List[TimelineRow] = Field(default_factory=list)


def _row(
    grid: CalendarGrid,
    kind: SwimlaneKind,
    row_id: str,
    name: str,
    blocks: List[ScheduledBlock],
    initiatives: Dict[str, Initiative],
    time_off: Iterable[UnavailabilityBlock] = (),
) -> TimelineRow:
    # Only blocks that reach a business-day column take part in lane packing.
    spans: Dict[str, Tuple[int, int]] = {}
    for block in blocks:
        span = grid.block_span(block.start_date, block.end_date)
        if span is not None:
            spans[block.id] = span
    visible = [b for b in blocks if b.id in spans]
    lanes = assign_lanes(visible)
    work_lanes = lane_count(lanes)

    placed: List[TimelineBlock] = []
    for block in sorted(visible, key=lambda b: (b.start_date, b.id)):
        span = spans[block.id]
        left, width = grid.span_pixels(block.start_date, block.end_date)
        initiative = initiatives.get(block.initiative_id)
        placed.append(
            TimelineBlock(
                id=block.id,
                initiative_id=block.initiative_id,
                title=initiative.title if initiative else block.initiative_id,
                start_date=block.start_date,
                end_date=block.end_date,
                start_index=span[0],
                end_index=span[1],
                lane=lanes[block.id],
                left=left,
                top=lane_top(lanes[block.id]),
                width=width,
                is_at_risk=block.is_at_risk,
                draggable=initiative.is_draggable if initiative else True,
            )
        )

    # Time off gets its own lane below the work lanes.
    away: List[TimelineTimeOff] = []
    for item in time_off:
        pixels = grid.span_pixels(item.start_date, item.end_date)
        if pixels is None:
            continue
        away.append(
            TimelineTimeOff(
                id=item.id,
                type=item.type,
                label=item.label,
                start_date=item.start_date,
                end_date=item.end_date,
                left=pixels[0],
                top=lane_top(work_lanes),
                width=pixels[1],
            )
        )

    total_lanes = work_lanes + (1 if away else 0)
    return TimelineRow(
        kind=kind,
        id=row_id,
        name=name,
        lane_count=total_lanes,
        height=row_height(total_lanes),
        blocks=placed,
        time_off=away,
    )


def _initiative_order(initiatives: Iterable[Initiative], blocks: List[ScheduledBlock]) -> List[Initiative]:
    """Initiatives by earliest block start; unscheduled ones last."""
    earliest: Dict[str, date] = {}
    for b in blocks:
        if b.initiative_id not in earliest or b.start_date < earliest[b.initiative_id]:
            earliest[b.initiative_id] = b.start_date
    return sorted(
        initiatives,
        key=lambda i: (i.id not in earliest, earliest.get(i.id, date.max), i.title, i.id),
    )


def build_timeline(
    grid: CalendarGrid,
    view: SwimlaneKind,
    blocks: Iterable[ScheduledBlock],
    initiatives: Iterable[Initiative],
    engineers: Iterable[Engineer] = (),
    squads: Iterable[Squad] = (),
    unavailability: Iterable[UnavailabilityBlock] = (),
    today: Optional[date] = None,
) -> TimelineLayout:
    """Lay out a full snapshot for one view.

    Args:
        grid: Visible business-day window
        view: Which swimlane kind makes up the rows
        blocks: All scheduled blocks of the snapshot
        initiatives: Initiatives (titles and lock flags)
        engineers: Engineers for the engineer view
        squads: Squads for the squad view
        unavailability: Time off, drawn on engineer rows only
        today: Injected current date for the today marker

    Returns:
        TimelineLayout ready for rendering
    """
    blocks = list(blocks)
    initiatives = list(initiatives)
    by_id = {i.id: i for i in initiatives}
    unavailability = list(unavailability)
    rows: List[TimelineRow] = []

    if view == SwimlaneKind.ENGINEER:
        for engineer in engineers:
            if not engineer.is_active:
                continue
            rows.append(
                _row(
                    grid,
                    SwimlaneKind.ENGINEER,
                    engineer.id,
                    engineer.name,
                    engineer_blocks(blocks, engineer.id),
                    by_id,
                    engineer_unavailability(unavailability, engineer.id),
                )
            )
    elif view == SwimlaneKind.SQUAD:
        for squad in squads:
            rows.append(_row(grid, SwimlaneKind.SQUAD, squad.id, squad.name, squad_blocks(blocks, squad), by_id))
    else:
        for initiative in _initiative_order(initiatives, blocks):
            rows.append(
                _row(
                    grid,
                    SwimlaneKind.INITIATIVE,
                    initiative.id,
                    initiative.title,
                    initiative_blocks(blocks, initiative.id),
                    by_id,
                )
            )

    return TimelineLayout(
        start_date=grid.start,
        end_date=grid.end,
        days=list(grid.days),
        today_index=grid.today_index(today) if today is not None else None,
        rows=rows,
    )
