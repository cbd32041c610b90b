"""Tests for the drag interaction state machine."""

import pytest
from datetime import date

from roadmap.engine.calendar_grid import CalendarGrid
from roadmap.engine.errors import BlockLockedError, BlockNotFoundError, InteractionBusyError
from roadmap.engine.interaction import (
    IDLE,
    DragController,
    DraggingBlock,
    MoveRequested,
    RangeSelected,
    Selecting,
    press_cell,
)
from roadmap.engine.swimlanes import SwimlaneKey
from roadmap.models.initiative import Initiative
from roadmap.models.scheduled_block import ScheduledBlock


@pytest.fixture
def grid():
    return CalendarGrid(date(2025, 3, 1), date(2025, 3, 31))


@pytest.fixture
def block():
    # Thu Mar 6 .. Fri Mar 7
    return ScheduledBlock(
        id="blk", initiative_id="init", engineer_id="alice",
        start_date=date(2025, 3, 6), end_date=date(2025, 3, 7),
    )


@pytest.fixture
def controller(grid):
    return DragController(grid, {"init": Initiative(id="init", title="Search revamp")})


ALICE = SwimlaneKey.engineer("alice")
BOB = SwimlaneKey.engineer("bob")


class TestRangeSelection:
    def test_select_backwards_emits_ordered_range(self, controller):
        controller.mouse_down_cell(ALICE, 7)
        assert isinstance(controller.state, Selecting)
        controller.mouse_enter(ALICE, 3)
        assert controller.is_day_in_selection(ALICE, 5)
        assert not controller.is_day_in_selection(BOB, 5)

        event = controller.mouse_up()
        assert controller.state == IDLE
        assert event == RangeSelected(
            start_index=3,
            end_index=7,
            start_date=date(2025, 3, 6),
            end_date=date(2025, 3, 12),
            swimlane=ALICE,
        )

    def test_leaving_grid_cancels_without_event(self, controller):
        controller.mouse_down_cell(ALICE, 2)
        controller.mouse_leave()
        assert controller.state == IDLE
        assert controller.mouse_up() is None

    def test_pure_transition_does_not_mutate_state(self):
        state = IDLE
        transition = press_cell(state, ALICE, 4)
        assert state == IDLE
        assert transition.state == Selecting(anchor=4, cursor=4, swimlane=ALICE)
        assert transition.event is None


class TestBlockDrag:
    def test_drag_across_weekend(self, controller, block):
        # Grab Thu (index 3), drop two columns later.
        controller.mouse_down_block(block, 3)
        controller.mouse_enter(ALICE, 5)
        assert controller.drag_offset_px("blk") == 80
        assert controller.drag_offset_px("other") == 0

        event = controller.mouse_up()
        assert isinstance(event, MoveRequested)
        assert event.day_offset == 2
        assert event.new_start_date == date(2025, 3, 10)
        assert event.new_end_date == date(2025, 3, 11)
        assert event.new_assignee_id is None
        assert event.assignee_changed is False

    def test_drag_to_other_engineer(self, controller, block):
        controller.mouse_down_block(block, 3)
        controller.mouse_enter(BOB, 3)
        event = controller.mouse_up()
        assert event.day_offset == 0
        assert event.new_start_date == block.start_date
        assert event.new_assignee_id == "bob"
        assert event.assignee_changed is True

    def test_no_change_emits_nothing(self, controller, block):
        controller.mouse_down_block(block, 3)
        controller.mouse_enter(ALICE, 3)
        assert controller.mouse_up() is None
        assert controller.state == IDLE

    def test_squad_row_does_not_reassign(self, controller, block):
        controller.mouse_down_block(block, 3)
        controller.mouse_enter(SwimlaneKey.squad("platform"), 4)
        state = controller.state
        assert isinstance(state, DraggingBlock)
        assert state.current_assignee == "alice"

    def test_leave_cancels_drag(self, controller, block):
        controller.mouse_down_block(block, 3)
        controller.mouse_enter(ALICE, 8)
        controller.mouse_leave()
        assert controller.state == IDLE
        assert controller.drag_offset_px("blk") == 0

    @pytest.mark.parametrize("lock", ["lock_dates", "lock_assignment"])
    def test_locked_initiative_cannot_be_dragged(self, grid, block, lock):
        locked = DragController(grid, {"init": Initiative(id="init", title="Frozen", **{lock: True})})
        with pytest.raises(BlockLockedError):
            locked.mouse_down_block(block, 3)
        assert locked.state == IDLE

    def test_block_of_unknown_initiative_cannot_be_dragged(self, grid, block):
        controller = DragController(grid, {})
        with pytest.raises(BlockNotFoundError):
            controller.mouse_down_block(block, 3)
        assert controller.state == IDLE
        assert controller.mouse_up() is None

    def test_busy_controller_rejects_new_drags(self, controller, block):
        controller.busy = True
        with pytest.raises(InteractionBusyError):
            controller.mouse_down_block(block, 3)
        with pytest.raises(InteractionBusyError):
            controller.mouse_down_cell(ALICE, 3)
        assert controller.state == IDLE
