"""Work model - one tracked infrastructure project."""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class Work(BaseModel):
    """Work record (only the columns the schedule sync reads)."""
    model_config = ConfigDict(extra="ignore")

    id: int = Field(..., description="Work ID")
    scheme_sr_no: Optional[str] = Field(None, description="Scheme serial number")
    work_name: Optional[str] = Field(None, description="Work name/description")
    zone: Optional[str] = None
    circle: Optional[str] = None
    division: Optional[str] = None
    sub_division: Optional[str] = None
    je_name: Optional[str] = Field(None, description="Junior engineer region")
    schedule_data: Optional[str] = Field(None, description="Raw Gantt schedule JSON")
