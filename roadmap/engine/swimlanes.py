"""Swimlane projections over a schedule snapshot.

Swimlane membership is never stored; it is recomputed from the block set
(and squad membership) on every render.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

from roadmap.models.scheduled_block import ScheduledBlock, UnavailabilityBlock
from roadmap.models.team import Squad


class SwimlaneKind(str, Enum):
    """What a timeline row groups blocks by."""
    ENGINEER = "engineer"
    SQUAD = "squad"
    INITIATIVE = "initiative"


VIEW_KINDS = {
    "engineers": SwimlaneKind.ENGINEER,
    "squads": SwimlaneKind.SQUAD,
    "initiatives": SwimlaneKind.INITIATIVE,
}


@dataclass(frozen=True)
class SwimlaneKey:
    """Identifies one timeline row."""
    kind: SwimlaneKind
    id: str

    @classmethod
    def engineer(cls, engineer_id: str) -> "SwimlaneKey":
        return cls(SwimlaneKind.ENGINEER, engineer_id)

    @classmethod
    def squad(cls, squad_id: str) -> "SwimlaneKey":
        return cls(SwimlaneKind.SQUAD, squad_id)

    @classmethod
    def initiative(cls, initiative_id: str) -> "SwimlaneKey":
        return cls(SwimlaneKind.INITIATIVE, initiative_id)


def engineer_blocks(blocks: Iterable[ScheduledBlock], engineer_id: str) -> List[ScheduledBlock]:
    return [b for b in blocks if b.engineer_id == engineer_id]


def squad_blocks(blocks: Iterable[ScheduledBlock], squad: Optional[Squad]) -> List[ScheduledBlock]:
    """Blocks assigned to the squad directly or to any of its members."""
    if squad is None:
        return []
    member_ids = set(squad.member_ids)
    return [
        b for b in blocks
        if b.squad_id == squad.id or (b.engineer_id is not None and b.engineer_id in member_ids)
    ]


def initiative_blocks(blocks: Iterable[ScheduledBlock], initiative_id: str) -> List[ScheduledBlock]:
    return [b for b in blocks if b.initiative_id == initiative_id]


def engineer_unavailability(
    unavailability: Iterable[UnavailabilityBlock], engineer_id: str
) -> List[UnavailabilityBlock]:
    """Time off shown on an engineer row (its own lane, never lane-packed with work)."""
    return sorted(
        (u for u in unavailability if u.engineer_id == engineer_id),
        key=lambda u: (u.start_date, u.id),
    )


def swimlane_blocks(
    key: SwimlaneKey,
    blocks: Iterable[ScheduledBlock],
    squads: Iterable[Squad] = (),
) -> List[ScheduledBlock]:
    """Blocks that belong to a swimlane row."""
    if key.kind == SwimlaneKind.ENGINEER:
        return engineer_blocks(blocks, key.id)
    if key.kind == SwimlaneKind.SQUAD:
        squad = next((s for s in squads if s.id == key.id), None)
        return squad_blocks(blocks, squad)
    return initiative_blocks(blocks, key.id)
