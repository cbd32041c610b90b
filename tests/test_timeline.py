"""Tests for swimlane projection and timeline layout."""

from datetime import date

from roadmap.engine.calendar_grid import CalendarGrid
from roadmap.engine.lanes import row_height
from roadmap.engine.swimlanes import SwimlaneKey, SwimlaneKind, squad_blocks, swimlane_blocks
from roadmap.engine.timeline import build_timeline
from roadmap.models.initiative import Initiative
from roadmap.models.scheduled_block import ScheduledBlock, UnavailabilityBlock
from roadmap.models.team import Engineer, Squad

GRID = CalendarGrid(date(2025, 3, 1), date(2025, 3, 31))

INITIATIVES = [
    Initiative(id="search", title="Search revamp"),
    Initiative(id="billing", title="Billing", lock_dates=True),
    Initiative(id="later", title="Later thing"),
]
ENGINEERS = [
    Engineer(id="alice", name="Alice"),
    Engineer(id="bob", name="Bob"),
    Engineer(id="carol", name="Carol", is_active=False),
]
SQUADS = [Squad(id="platform", name="Platform", member_ids=["alice"])]
BLOCKS = [
    ScheduledBlock(id="b1", initiative_id="search", engineer_id="alice",
                   start_date=date(2025, 3, 3), end_date=date(2025, 3, 7)),
    ScheduledBlock(id="b2", initiative_id="billing", engineer_id="alice",
                   start_date=date(2025, 3, 5), end_date=date(2025, 3, 12)),
    ScheduledBlock(id="b3", initiative_id="search", squad_id="platform",
                   start_date=date(2025, 3, 17), end_date=date(2025, 3, 21)),
    ScheduledBlock(id="b4", initiative_id="billing", engineer_id="bob",
                   start_date=date(2025, 5, 1), end_date=date(2025, 5, 2)),
]


def test_squad_row_includes_member_blocks():
    ids = {b.id for b in squad_blocks(BLOCKS, SQUADS[0])}
    assert ids == {"b1", "b2", "b3"}
    assert squad_blocks(BLOCKS, None) == []


def test_swimlane_blocks_by_key():
    assert {b.id for b in swimlane_blocks(SwimlaneKey.initiative("billing"), BLOCKS)} == {"b2", "b4"}
    assert {b.id for b in swimlane_blocks(SwimlaneKey.engineer("bob"), BLOCKS)} == {"b4"}
    assert {b.id for b in swimlane_blocks(SwimlaneKey.squad("platform"), BLOCKS, SQUADS)} == {"b1", "b2", "b3"}


def test_engineer_view_layout():
    layout = build_timeline(
        GRID, SwimlaneKind.ENGINEER, BLOCKS, INITIATIVES,
        engineers=ENGINEERS, today=date(2025, 3, 12),
    )
    assert len(layout.days) == 21
    assert layout.days[layout.today_index] == date(2025, 3, 12)
    # Inactive engineers are hidden.
    assert [r.id for r in layout.rows] == ["alice", "bob"]

    alice = layout.rows[0]
    assert alice.lane_count == 2
    assert alice.height == row_height(2)
    placed = {b.id: b for b in alice.blocks}
    assert placed["b1"].lane == 0 and placed["b2"].lane == 1
    assert placed["b1"].left == 2 and placed["b1"].width == 5 * 40 - 4
    assert placed["b1"].title == "Search revamp"
    assert placed["b2"].draggable is False

    # Bob's only block is outside the window; the row keeps one empty lane.
    bob = layout.rows[1]
    assert bob.blocks == []
    assert bob.lane_count == 1


def test_time_off_gets_its_own_lane():
    pto = UnavailabilityBlock(id="pto", engineer_id="bob",
                              start_date=date(2025, 3, 10), end_date=date(2025, 3, 11))
    layout = build_timeline(
        GRID, SwimlaneKind.ENGINEER, BLOCKS, INITIATIVES,
        engineers=ENGINEERS, unavailability=[pto],
    )
    bob = layout.rows[1]
    assert bob.lane_count == 2
    assert bob.time_off[0].label == "PTO"
    assert bob.time_off[0].top == 8 + 36
    assert layout.today_index is None


def test_initiative_view_orders_by_earliest_block():
    layout = build_timeline(GRID, SwimlaneKind.INITIATIVE, BLOCKS, INITIATIVES)
    assert [r.id for r in layout.rows] == ["search", "billing", "later"]
    assert [b.id for b in layout.rows[0].blocks] == ["b1", "b3"]


def test_squad_view():
    layout = build_timeline(GRID, SwimlaneKind.SQUAD, BLOCKS, INITIATIVES, squads=SQUADS)
    row = layout.rows[0]
    assert row.name == "Platform"
    assert {b.id for b in row.blocks} == {"b1", "b2", "b3"}
    assert row.lane_count == 2


def test_blocks_touching_only_the_leading_weekend_take_no_lane():
    # The March 2025 grid starts on Sat Mar 1; its first column is Mon Mar 3.
    edge = [
        ScheduledBlock(id="e1", initiative_id="later", engineer_id="bob",
                       start_date=date(2025, 2, 26), end_date=date(2025, 3, 1)),
        ScheduledBlock(id="e2", initiative_id="later", engineer_id="bob",
                       start_date=date(2025, 2, 28), end_date=date(2025, 3, 2)),
    ]
    layout = build_timeline(GRID, SwimlaneKind.ENGINEER, BLOCKS + edge, INITIATIVES, engineers=ENGINEERS)
    bob = layout.rows[1]
    assert bob.blocks == []
    assert bob.lane_count == 1
    assert bob.height == row_height(1)
