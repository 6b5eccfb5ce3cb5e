"""Uniform result envelopes returned by the sync operations."""

from typing import Any, Optional
from pydantic import BaseModel, Field

from src.utils.errors import WorkTrackerError


class OperationResult(BaseModel):
    """{success, data?, error?} envelope consumed by UI/API callers."""
    success: bool
    data: Any = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    message: Optional[str] = None
    warnings: list[str] = Field(default_factory=list)

    @classmethod
    def ok(cls, data: Any = None, message: Optional[str] = None,
           warnings: Optional[list[str]] = None) -> "OperationResult":
        return cls(success=True, data=data, message=message, warnings=warnings or [])

    @classmethod
    def fail(cls, error: Exception) -> "OperationResult":
        code = error.code if isinstance(error, WorkTrackerError) else "INTERNAL_ERROR"
        return cls(success=False, error=str(error) or error.__class__.__name__, error_code=code)

    def to_response(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class WorkInitError(BaseModel):
    work_id: int = Field(..., serialization_alias="workId")
    scheme_sr_no: Optional[str] = Field(None, serialization_alias="schemeSrNo")
    error: str


class ReinitializeSummary(BaseModel):
    """Aggregate outcome of a batch activity initialization."""
    total: int = 0
    success: int = 0
    skipped: int = 0
    failed: int = 0
    errors: list[WorkInitError] = Field(default_factory=list)
