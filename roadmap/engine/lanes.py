"""Lane packing for swimlane rendering.

Blocks in one swimlane may overlap in time (a "stack" resolution allows
it). Each block gets a small integer lane so that blocks sharing a lane
never overlap; the number of lanes equals the largest number of blocks
that overlap on any single day.
"""

from datetime import date
from typing import Dict, Iterable, List, Optional, Protocol, Tuple

from roadmap.models.constants import BLOCK_GAP, BLOCK_HEIGHT, ROW_PADDING


class DatedBlock(Protocol):
    id: str
    start_date: date
    end_date: date


def ranges_overlap(start1: date, end1: date, start2: date, end2: date) -> bool:
    """Inclusive date ranges overlap."""
    return start1 <= end2 and start2 <= end1


def blocks_overlap(block1: DatedBlock, block2: DatedBlock) -> bool:
    return ranges_overlap(block1.start_date, block1.end_date, block2.start_date, block2.end_date)


def _in_window(block: DatedBlock, window: Optional[Tuple[date, date]]) -> bool:
    if window is None:
        return True
    return ranges_overlap(block.start_date, block.end_date, window[0], window[1])


def assign_lanes(
    blocks: Iterable[DatedBlock],
    window: Optional[Tuple[date, date]] = None,
) -> Dict[str, int]:
    """Assign every block a lane (greedy interval colouring).

    Blocks are placed in (start_date, id) order and take the lowest lane
    not used by an already placed block they overlap. The result does not
    depend on input order.

    Args:
        blocks: Blocks of one swimlane
        window: Optional visible (start, end); blocks entirely outside are skipped

    Returns:
        Mapping of block id -> lane number (0-based)
    """
    ordered = sorted(
        (b for b in blocks if _in_window(b, window)),
        key=lambda b: (b.start_date, b.id),
    )
    lanes: Dict[str, int] = {}
    # Placed blocks whose end is still relevant; in start order, so a block
    # can only overlap placed blocks that end on or after its start.
    active: List[Tuple[date, int]] = []

    for block in ordered:
        active = [(end, lane) for end, lane in active if end >= block.start_date]
        used_lanes = {lane for _, lane in active}
        lane = 0
        while lane in used_lanes:
            lane += 1
        lanes[block.id] = lane
        active.append((block.end_date, lane))

    return lanes


def lane_count(lanes: Dict[str, int]) -> int:
    """Number of lanes a swimlane needs; an empty swimlane still reserves one."""
    if not lanes:
        return 1
    return max(lanes.values()) + 1


def row_height(num_lanes: int) -> int:
    """Pixel height of a swimlane row holding `num_lanes` lanes."""
    num_lanes = max(1, num_lanes)
    return ROW_PADDING * 2 + num_lanes * BLOCK_HEIGHT + (num_lanes - 1) * BLOCK_GAP


def lane_top(lane: int) -> int:
    """Pixel offset of a lane from the top of its row."""
    return ROW_PADDING + lane * (BLOCK_HEIGHT + BLOCK_GAP)


def max_overlap_depth(blocks: Iterable[DatedBlock]) -> int:
    """Largest number of blocks covering any single day."""
    events: List[Tuple[date, int]] = []
    for b in blocks:
        events.append((b.start_date, 0))  # opens sort before closes on the same key
        events.append((b.end_date, 1))
    depth = 0
    best = 0
    for _, kind in sorted(events):
        if kind == 0:
            depth += 1
            best = max(best, depth)
        else:
            depth -= 1
    return best
