"""Timeline scheduling engine for the roadmap."""

from roadmap.engine.calendar_grid import (
    CalendarGrid,
    business_days,
    add_business_days,
    business_days_between,
    BEFORE_RANGE,
    AFTER_RANGE,
)
from roadmap.engine.lanes import assign_lanes, lane_count, row_height, ranges_overlap
from roadmap.engine.conflicts import find_conflicts, plan_push, plan_move, MovePlan, BlockShift
from roadmap.engine.interaction import DragController, RangeSelected, MoveRequested
from roadmap.engine.move_workflow import MoveWorkflow, MoveOutcome, MoveStatus
from roadmap.engine.timeline import build_timeline, TimelineLayout

__all__ = [
    "CalendarGrid",
    "business_days",
    "add_business_days",
    "business_days_between",
    "BEFORE_RANGE",
    "AFTER_RANGE",
    "assign_lanes",
    "lane_count",
    "row_height",
    "ranges_overlap",
    "find_conflicts",
    "plan_push",
    "plan_move",
    "MovePlan",
    "BlockShift",
    "DragController",
    "RangeSelected",
    "MoveRequested",
    "MoveWorkflow",
    "MoveOutcome",
    "MoveStatus",
    "build_timeline",
    "TimelineLayout",
]
