"""Error handling utilities."""

from typing import Optional


class WorkTrackerError(Exception):
    """Base exception for the work tracker backend."""
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, work_id: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.work_id = work_id


class MalformedScheduleError(WorkTrackerError):
    """Schedule JSON is invalid or has no task list."""
    code = "MALFORMED_SCHEDULE"


class ValidationError(WorkTrackerError):
    """Input failed validation (progress range, missing ids)."""
    code = "VALIDATION_ERROR"


class NotFoundError(WorkTrackerError):
    """Work, schedule or activity does not exist."""
    code = "NOT_FOUND"


class AlreadyInitializedError(WorkTrackerError):
    """Activities already exist for the work."""
    code = "ALREADY_INITIALIZED"


class PersistenceError(WorkTrackerError):
    """Supabase operation error."""
    code = "PERSISTENCE_ERROR"


class PartialSyncFailure(WorkTrackerError):
    """Primary write succeeded but the derived store could not be synced."""
    code = "PARTIAL_SYNC_FAILURE"


class EmptyScheduleError(WorkTrackerError):
    """Schedule has no tasks. Callers treat this as a no-op."""
    code = "EMPTY_SCHEDULE"
