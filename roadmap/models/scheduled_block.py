"""ScheduledBlock and UnavailabilityBlock data models for the roadmap timeline."""

from datetime import date
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, field_validator, model_validator

from roadmap.models.dates import normalize_date


class AssigneeKind(str, Enum):
    """Who a block is assigned to."""
    ENGINEER = "engineer"
    SQUAD = "squad"


class UnavailabilityType(str, Enum):
    """Reason an engineer is not working."""
    PTO = "PTO"
    TRAVEL = "TRAVEL"
    SICK = "SICK"
    HOLIDAY = "HOLIDAY"
    OTHER = "OTHER"


UNAVAILABILITY_LABELS = {
    UnavailabilityType.PTO.value: "PTO",
    UnavailabilityType.TRAVEL.value: "Travel",
    UnavailabilityType.SICK.value: "Sick",
    UnavailabilityType.HOLIDAY.value: "Holiday",
    UnavailabilityType.OTHER.value: "Unavailable",
}


class ScheduledBlock(BaseModel):
    """A contiguous work assignment of one initiative to one engineer or squad."""

    id: str = Field(..., description="Unique scheduled block identifier")
    initiative_id: str = Field(..., description="Owning initiative")
    engineer_id: Optional[str] = Field(None, description="Assigned engineer (exclusive with squad_id)")
    squad_id: Optional[str] = Field(None, description="Assigned squad (exclusive with engineer_id)")
    start_date: date = Field(..., description="First day of the block (inclusive, date-only)")
    end_date: date = Field(..., description="Last day of the block (inclusive, date-only)")
    hours_allocated: float = Field(0.0, ge=0.0, description="Hours of work allocated")
    is_at_risk: bool = Field(False, description="Whether the block is flagged at risk")
    risk_reason: Optional[str] = Field(None, description="Why the block is at risk")
    version: int = Field(1, ge=1, description="Optimistic concurrency stamp, bumped on every write")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _date_only(cls, value):
        return normalize_date(value)

    @model_validator(mode="after")
    def _check_shape(self):
        if self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date")
        if (self.engineer_id is None) == (self.squad_id is None):
            raise ValueError("exactly one of engineer_id or squad_id must be set")
        return self

    @property
    def assignee_kind(self) -> AssigneeKind:
        return AssigneeKind.ENGINEER if self.engineer_id is not None else AssigneeKind.SQUAD

    @property
    def assignee_id(self) -> str:
        return self.engineer_id if self.engineer_id is not None else self.squad_id


class UnavailabilityBlock(BaseModel):
    """An engineer's non-working interval (informational, not a scheduling constraint)."""

    id: str = Field(..., description="Unique unavailability identifier")
    engineer_id: str = Field(..., description="Engineer who is unavailable")
    type: UnavailabilityType = Field(UnavailabilityType.PTO, description="Kind of absence")
    start_date: date = Field(..., description="First day away (inclusive)")
    end_date: date = Field(..., description="Last day away (inclusive)")
    notes: Optional[str] = Field(None, description="Free-form notes")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _date_only(cls, value):
        return normalize_date(value)

    @model_validator(mode="after")
    def _check_range(self):
        if self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date")
        return self

    @property
    def label(self) -> str:
        return UNAVAILABILITY_LABELS.get(self.type, "Unavailable")
