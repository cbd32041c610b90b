"""Engineer and Squad data models for the roadmap timeline."""

from typing import List
from pydantic import BaseModel, Field


class Engineer(BaseModel):
    """Engineer swimlane owner."""

    id: str = Field(..., description="Unique engineer identifier")
    name: str = Field(..., description="Display name")
    is_active: bool = Field(True, description="Inactive engineers are hidden from the timeline")


class Squad(BaseModel):
    """Squad swimlane owner; member engineers' blocks show on the squad row."""

    id: str = Field(..., description="Unique squad identifier")
    name: str = Field(..., description="Display name")
    member_ids: List[str] = Field(default_factory=list, description="Member engineer IDs")
