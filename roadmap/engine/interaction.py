"""Drag interaction state machine for the timeline.

Two independent flows share one state value:

- range selection on empty cells (Idle -> Selecting -> Idle), which emits
  `RangeSelected` for the block-creation workflow;
- block moves (Idle -> DraggingBlock -> Idle), which emits `MoveRequested`
  for the conflict check/commit workflow.

The state is an immutable value; every transition returns a new state and
at most one event. Nothing here talks to the store, so intermediate drag
positions are purely local and a drag abandoned by leaving the grid has no
side effects.
"""

from dataclasses import dataclass, replace
from datetime import date
from typing import Mapping, Optional, Union

from roadmap.engine.calendar_grid import CalendarGrid, add_business_days
from roadmap.engine.errors import BlockLockedError, BlockNotFoundError, InteractionBusyError
from roadmap.engine.swimlanes import SwimlaneKey, SwimlaneKind
from roadmap.models.constants import CELL_WIDTH
from roadmap.models.initiative import Initiative
from roadmap.models.scheduled_block import ScheduledBlock


@dataclass(frozen=True)
class Idle:
    """No drag in progress."""


@dataclass(frozen=True)
class Selecting:
    """Selecting a date range on empty cells of one swimlane."""
    anchor: int
    cursor: int
    swimlane: SwimlaneKey

    @property
    def start_index(self) -> int:
        return min(self.anchor, self.cursor)

    @property
    def end_index(self) -> int:
        return max(self.anchor, self.cursor)


@dataclass(frozen=True)
class DraggingBlock:
    """Moving an existing block (and possibly to another engineer row)."""
    block: ScheduledBlock
    original_index: int
    current_index: int
    original_assignee: str
    current_assignee: str

    @property
    def day_offset(self) -> int:
        return self.current_index - self.original_index

    @property
    def assignee_changed(self) -> bool:
        return self.current_assignee != self.original_assignee


DragState = Union[Idle, Selecting, DraggingBlock]

IDLE = Idle()


@dataclass(frozen=True)
class RangeSelected:
    """A date range was selected for a new assignment."""
    start_index: int
    end_index: int
    start_date: date
    end_date: date
    swimlane: SwimlaneKey


@dataclass(frozen=True)
class MoveRequested:
    """A block was dropped at a new position; hand off to the conflict workflow."""
    block: ScheduledBlock
    day_offset: int
    new_start_date: date
    new_end_date: date
    new_assignee_id: Optional[str]
    assignee_changed: bool


DragEvent = Union[RangeSelected, MoveRequested]


@dataclass(frozen=True)
class Transition:
    state: DragState
    event: Optional[DragEvent] = None


def press_cell(state: DragState, swimlane: SwimlaneKey, day_index: int, busy: bool = False) -> Transition:
    """Mouse down on an empty grid cell starts a range selection."""
    if busy:
        raise InteractionBusyError("Another schedule change is still pending")
    if not isinstance(state, Idle):
        return Transition(state)
    return Transition(Selecting(anchor=day_index, cursor=day_index, swimlane=swimlane))


def press_block(
    state: DragState,
    block: ScheduledBlock,
    day_index: int,
    initiative: Optional[Initiative],
    busy: bool = False,
) -> Transition:
    """Mouse down on a block starts moving it, unless its initiative is locked.

    Raises:
        InteractionBusyError: A previous move is still pending or unrefreshed
        BlockNotFoundError: The block's initiative is unknown, so its locks cannot be checked
        BlockLockedError: The initiative locks dates or assignment
    """
    if busy:
        raise InteractionBusyError("Another schedule change is still pending")
    if initiative is None:
        raise BlockNotFoundError(
            f"Initiative not loaded for block {block.id}: {block.initiative_id}",
            {"initiative_id": block.initiative_id},
        )
    if initiative.lock_dates:
        raise BlockLockedError(f"'{initiative.title}' has locked dates and cannot be moved")
    if initiative.lock_assignment:
        raise BlockLockedError(f"'{initiative.title}' has a locked assignment and cannot be moved")
    if not isinstance(state, Idle):
        return Transition(state)
    return Transition(
        DraggingBlock(
            block=block,
            original_index=day_index,
            current_index=day_index,
            original_assignee=block.assignee_id,
            current_assignee=block.assignee_id,
        )
    )


def enter_cell(state: DragState, swimlane: SwimlaneKey, day_index: int) -> Transition:
    """Mouse entered a cell while a drag may be active."""
    if isinstance(state, Selecting):
        return Transition(replace(state, cursor=day_index))
    if isinstance(state, DraggingBlock):
        assignee = state.current_assignee
        # Cross-row reassignment only between engineer rows.
        if swimlane.kind == SwimlaneKind.ENGINEER and state.block.engineer_id is not None:
            assignee = swimlane.id
        return Transition(replace(state, current_index=day_index, current_assignee=assignee))
    return Transition(state)


def release(state: DragState, grid: CalendarGrid) -> Transition:
    """Mouse up ends the drag and emits its result."""
    if isinstance(state, Selecting):
        start_index = grid.clamp_index(state.start_index)
        end_index = grid.clamp_index(state.end_index)
        return Transition(
            IDLE,
            RangeSelected(
                start_index=start_index,
                end_index=end_index,
                start_date=grid.date_at(start_index),
                end_date=grid.date_at(end_index),
                swimlane=state.swimlane,
            ),
        )
    if isinstance(state, DraggingBlock):
        offset = state.day_offset
        if offset == 0 and not state.assignee_changed:
            return Transition(IDLE)
        block = state.block
        new_start = add_business_days(block.start_date, offset) if offset else block.start_date
        new_end = add_business_days(block.end_date, offset) if offset else block.end_date
        return Transition(
            IDLE,
            MoveRequested(
                block=block,
                day_offset=offset,
                new_start_date=new_start,
                new_end_date=new_end,
                new_assignee_id=state.current_assignee if state.assignee_changed else None,
                assignee_changed=state.assignee_changed,
            ),
        )
    return Transition(state)


def leave_grid(state: DragState) -> Transition:
    """Leaving the grid cancels any drag without side effects."""
    return Transition(IDLE)


def drag_offset_px(state: DragState, block_id: str) -> int:
    """Horizontal render offset of a block that is being dragged."""
    if isinstance(state, DraggingBlock) and state.block.id == block_id:
        return state.day_offset * CELL_WIDTH
    return 0


def is_day_in_selection(state: DragState, swimlane: SwimlaneKey, day_index: int) -> bool:
    """Whether a cell should be highlighted as part of the current selection."""
    if not isinstance(state, Selecting) or state.swimlane != swimlane:
        return False
    return state.start_index <= day_index <= state.end_index


class DragController:
    """Holds the current drag state for one timeline view.

    Only one drag of either kind is active at a time, and none can start
    while `busy` is set by the move workflow.
    """

    def __init__(self, grid: CalendarGrid, initiatives: Mapping[str, Initiative]):
        self.grid = grid
        self.initiatives = dict(initiatives)
        self.state: DragState = IDLE
        self.busy = False

    def _apply(self, transition: Transition) -> Optional[DragEvent]:
        self.state = transition.state
        return transition.event

    def mouse_down_cell(self, swimlane: SwimlaneKey, day_index: int) -> None:
        self._apply(press_cell(self.state, swimlane, day_index, busy=self.busy))

    def mouse_down_block(self, block: ScheduledBlock, day_index: int) -> None:
        initiative = self.initiatives.get(block.initiative_id)
        self._apply(press_block(self.state, block, day_index, initiative, busy=self.busy))

    def mouse_enter(self, swimlane: SwimlaneKey, day_index: int) -> None:
        self._apply(enter_cell(self.state, swimlane, day_index))

    def mouse_up(self) -> Optional[DragEvent]:
        return self._apply(release(self.state, self.grid))

    def mouse_leave(self) -> None:
        self._apply(leave_grid(self.state))

    def drag_offset_px(self, block_id: str) -> int:
        return drag_offset_px(self.state, block_id)

    def is_day_in_selection(self, swimlane: SwimlaneKey, day_index: int) -> bool:
        return is_day_in_selection(self.state, swimlane, day_index)
