"""Activity model - one progress-trackable row derived from a schedule task."""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class WorkActivity(BaseModel):
    """Row of the work_activities table."""
    model_config = ConfigDict(extra="ignore")

    id: Optional[int] = Field(None, description="Surrogate key (assigned on insert)")
    work_id: int = Field(..., description="Owning work ID")
    activity_code: str = Field(..., description="Originating schedule task ID, stringified")
    activity_name: str = Field(default="", description="Activity name")
    parent_activity_id: Optional[int] = Field(None, description="Parent activity surrogate ID")
    is_main_activity: bool = Field(default=False)
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    duration: Optional[float] = None
    progress_percentage: float = Field(default=0.0, ge=0.0, le=100.0, description="Progress (0-100)")
    display_order: int = Field(default=0, ge=0, description="Position in the schedule task list")
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def to_insert_row(self) -> dict:
        """Columns sent on insert (database assigns id and timestamps)."""
        return self.model_dump(mode="json", exclude={"id", "created_at", "updated_at"})


class ActivityProgressUpdate(BaseModel):
    """One entry of a bulk progress update."""
    model_config = ConfigDict(populate_by_name=True)

    activity_code: str = Field(..., alias="activityCode")
    progress: float
