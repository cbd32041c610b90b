"""Tests for lane packing."""

import random
from datetime import date, timedelta

from roadmap.engine.lanes import (
    assign_lanes,
    blocks_overlap,
    lane_count,
    lane_top,
    max_overlap_depth,
    row_height,
)
from roadmap.models.scheduled_block import ScheduledBlock


def _block(block_id: str, start: date, end: date) -> ScheduledBlock:
    return ScheduledBlock(
        id=block_id, initiative_id="init", engineer_id="alice", start_date=start, end_date=end
    )


def _random_blocks(seed: int, count: int = 25):
    rng = random.Random(seed)
    base = date(2025, 3, 3)
    blocks = []
    for i in range(count):
        start = base + timedelta(days=rng.randint(0, 40))
        blocks.append(_block(f"b{i:02d}", start, start + timedelta(days=rng.randint(0, 12))))
    return blocks


def test_overlapping_blocks_never_share_a_lane():
    for seed in range(10):
        blocks = _random_blocks(seed)
        lanes = assign_lanes(blocks)
        for i, a in enumerate(blocks):
            for b in blocks[i + 1:]:
                if blocks_overlap(a, b):
                    assert lanes[a.id] != lanes[b.id]


def test_lane_count_equals_max_overlap_depth():
    for seed in range(10):
        blocks = _random_blocks(seed)
        assert lane_count(assign_lanes(blocks)) == max_overlap_depth(blocks)


def test_result_does_not_depend_on_input_order():
    blocks = _random_blocks(3)
    expected = assign_lanes(blocks)
    shuffled = list(blocks)
    random.Random(99).shuffle(shuffled)
    assert assign_lanes(shuffled) == expected
    assert assign_lanes(list(reversed(blocks))) == expected


def test_touching_blocks_overlap_on_shared_day():
    a = _block("a", date(2025, 3, 3), date(2025, 3, 5))
    b = _block("b", date(2025, 3, 5), date(2025, 3, 7))
    c = _block("c", date(2025, 3, 6), date(2025, 3, 7))
    lanes = assign_lanes([a, b, c])
    assert lanes == {"a": 0, "b": 1, "c": 0}


def test_equal_starts_are_ordered_by_id():
    lanes = assign_lanes([
        _block("z", date(2025, 3, 3), date(2025, 3, 4)),
        _block("m", date(2025, 3, 3), date(2025, 3, 4)),
    ])
    assert lanes == {"m": 0, "z": 1}


def test_window_skips_invisible_blocks():
    inside = _block("in", date(2025, 3, 3), date(2025, 3, 5))
    outside = _block("out", date(2025, 5, 1), date(2025, 5, 2))
    lanes = assign_lanes([inside, outside], window=(date(2025, 3, 1), date(2025, 3, 31)))
    assert lanes == {"in": 0}


def test_empty_swimlane_reserves_one_lane():
    assert lane_count({}) == 1
    assert row_height(0) == row_height(1) == 8 * 2 + 32


def test_row_height_and_lane_top():
    assert row_height(3) == 16 + 3 * 32 + 2 * 4
    assert lane_top(0) == 8
    assert lane_top(2) == 8 + 2 * 36
