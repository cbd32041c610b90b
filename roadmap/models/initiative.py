"""Initiative data model for the roadmap timeline.

Only the fields the scheduler reads are modelled here; the rest of the
initiative record belongs to the data-entry side of the product.
"""

from typing import Optional
from pydantic import BaseModel, Field


class Initiative(BaseModel):
    """Initiative that owns scheduled blocks."""

    id: str = Field(..., description="Unique initiative identifier")
    title: str = Field(..., description="Initiative title")
    lock_dates: bool = Field(False, description="Blocks of this initiative may not be moved")
    lock_assignment: bool = Field(False, description="Blocks of this initiative may not be reassigned")
    effort_estimate: Optional[float] = Field(None, ge=0.0, description="Effort estimate in weeks")
    assigned_engineer_id: Optional[str] = Field(None, description="Default engineer")
    assigned_squad_id: Optional[str] = Field(None, description="Default squad")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True

    @property
    def is_draggable(self) -> bool:
        """Blocks are draggable only when neither dates nor assignment are locked."""
        return not (self.lock_dates or self.lock_assignment)
