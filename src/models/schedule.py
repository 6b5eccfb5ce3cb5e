"""Schedule document models - the serialized Gantt chart stored per work."""

from enum import Enum
from typing import Any, Optional, Union
from pydantic import BaseModel, ConfigDict, Field


class ScheduleShape(str, Enum):
    """Historical top-level layouts of the schedule document."""
    DATA = "data"
    CUSTOM_TASKS = "customTasks"


class ScheduleTask(BaseModel):
    """Typed view over one task dict of a schedule document."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: Union[int, str] = Field(..., description="Task ID, unique within the document")
    text: Optional[str] = Field(default="", description="Display name")
    type: Optional[str] = Field(None, description="task, project or milestone")
    is_main_activity: Optional[bool] = Field(None, alias="isMainActivity")
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    duration: Optional[float] = None
    progress: Optional[float] = Field(None, description="Completion fraction (0-1)")
    parent: Optional[Union[int, str]] = None

    @property
    def activity_code(self) -> str:
        """Join key with the activity table."""
        return str(self.id)

    @property
    def parent_code(self) -> Optional[str]:
        # Gantt roots use 0 as the parent
        if self.parent in (None, 0, ""):
            return None
        return str(self.parent)

    @property
    def is_main(self) -> bool:
        return self.type == "project" or bool(self.is_main_activity)


class ScheduleDocument(BaseModel):
    """Decoded schedule document.

    ``tasks`` keeps the raw task dicts so that fields the backend does not
    understand are written back untouched. ``extra_fields`` holds every other
    top-level key (``links``, ``deletedTaskIds``, ...).
    """
    shape: ScheduleShape
    tasks: list[dict[str, Any]] = Field(default_factory=list)
    extra_fields: dict[str, Any] = Field(default_factory=dict)
