"""Request and response models for the schedule store boundary.

Shared by the FastAPI endpoints and the HTTP client so both sides agree on
the wire shape. Dates travel as date-only "YYYY-MM-DD" strings.
"""

from datetime import date
from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, Field, field_validator, model_validator

from roadmap.models.dates import normalize_date
from roadmap.models.initiative import Initiative
from roadmap.models.scheduled_block import ScheduledBlock, UnavailabilityBlock
from roadmap.models.team import Engineer, Squad

NEW_INITIATIVE = "new"


class ConflictResolution(str, Enum):
    """How a proposed move is committed."""
    NONE = "none"
    STACK = "stack"
    PUSH = "push"


class MoveCheckRequest(BaseModel):
    """Would this block, placed here, overlap another block of the same assignee?"""
    block_id: str
    new_start_date: date
    new_end_date: date
    new_assignee_id: Optional[str] = None

    @field_validator("new_start_date", "new_end_date", mode="before")
    @classmethod
    def _date_only(cls, value):
        return normalize_date(value)

    @model_validator(mode="after")
    def _check_range(self):
        if self.new_start_date > self.new_end_date:
            raise ValueError("new_start_date must be on or before new_end_date")
        return self


class MoveCommitRequest(MoveCheckRequest):
    """Apply a move with the chosen resolution."""
    resolution: ConflictResolution = ConflictResolution.NONE
    expected_versions: Optional[Dict[str, int]] = Field(
        None, description="Block id -> version seen at check time; stale versions reject the commit"
    )


class ConflictingBlock(BaseModel):
    """A block the move would overlap."""
    id: str
    owner_title: str
    start_date: date
    end_date: date
    version: int = 1


class ConflictCheckResponse(BaseModel):
    has_conflicts: bool
    conflicting_blocks: List[ConflictingBlock] = Field(default_factory=list)
    block_version: int = 1


class BumpedBlock(BaseModel):
    """New dates of a block moved by a push resolution."""
    id: str
    start_date: date
    end_date: date


class MoveCommitResponse(BaseModel):
    success: bool
    moved_block: str
    assignee_changed: bool = False
    bumped_blocks: List[BumpedBlock] = Field(default_factory=list)


class BlockCreateRequest(BaseModel):
    """Schedule an initiative (existing, or "new" with a title) on an assignee."""
    initiative_id: str = Field(..., description="Initiative ID, or 'new' to create one")
    initiative_title: Optional[str] = Field(None, description="Title when initiative_id is 'new'")
    start_date: date
    end_date: Optional[date] = Field(None, description="Derived from the effort estimate when omitted")
    assignee_id: Optional[str] = Field(None, description="Engineer or squad ID")

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _date_only(cls, value):
        if value is None:
            return None
        return normalize_date(value)


class BlockCreateResponse(BaseModel):
    success: bool
    scheduled_block: ScheduledBlock
    initiative_created: bool = False


class ScheduleSnapshot(BaseModel):
    """Everything needed to render one date window."""
    start_date: date
    end_date: date
    scheduled_blocks: List[ScheduledBlock] = Field(default_factory=list)
    unavailability: List[UnavailabilityBlock] = Field(default_factory=list)
    initiatives: List[Initiative] = Field(default_factory=list)
    engineers: List[Engineer] = Field(default_factory=list)
    squads: List[Squad] = Field(default_factory=list)
