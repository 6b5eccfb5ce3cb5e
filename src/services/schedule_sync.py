"""Schedule/activity synchronization - the public schedule operations.

Each operation sequences the codec, projector and reconciler against a
``WorkStore`` and returns an ``OperationResult``; no exception escapes. The
primary write of an operation (the schedule on save, the activity row on a
progress update) is always reported. Failures of the derived sync that follows
it are logged and returned as warnings; the primary write is kept and can be
repaired with ``reinitialize_activities``.
"""

from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from src.models.activity import ActivityProgressUpdate, WorkActivity
from src.models.result import OperationResult, ReinitializeSummary, WorkInitError
from src.models.work import Work
from src.services import schedule_codec
from src.services.activity_projector import populate_activities
from src.services.cache import MemoryCache
from src.services.progress_reconciler import apply_on_load, sync_document_from_activities
from src.services.work_store import SupabaseWorkStore, WorkStore
from src.utils.config import SyncConfig
from src.utils.errors import (
    AlreadyInitializedError,
    EmptyScheduleError,
    MalformedScheduleError,
    NotFoundError,
    PartialSyncFailure,
    ValidationError,
    WorkTrackerError,
)
from src.utils.logging import get_structured_logger, log_timing

logger = get_structured_logger(__name__)

RevalidationHook = Callable[[int], None]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def validate_progress(progress: Any) -> float:
    """Check an activity progress percentage is a number in [0, 100]."""
    if isinstance(progress, bool) or not isinstance(progress, (int, float)):
        raise ValidationError(f"Progress must be a number, got {progress!r}")
    if not 0 <= progress <= 100:
        raise ValidationError(f"Progress must be between 0 and 100, got {progress}")
    return float(progress)


class ScheduleSyncService:
    """Keeps a work's schedule document and activity table consistent."""

    def __init__(
        self,
        store: WorkStore,
        cache: Optional[MemoryCache] = None,
        cache_ttl_ms: Optional[int] = None,
        revalidation_hooks: Optional[list[RevalidationHook]] = None
    ):
        self.store = store
        self.cache = cache
        self.cache_ttl_ms = cache_ttl_ms
        self.revalidation_hooks = list(revalidation_hooks or [])

    def add_revalidation_hook(self, hook: RevalidationHook) -> None:
        self.revalidation_hooks.append(hook)

    # Cache handling

    @staticmethod
    def _schedule_key(work_id: int) -> str:
        return f"work:{work_id}:schedule"

    @staticmethod
    def _activities_key(work_id: int) -> str:
        return f"work:{work_id}:activities"

    def _revalidate(self, work_id: int) -> None:
        if self.cache is not None:
            self.cache.delete_prefix(f"work:{work_id}:")
        for hook in self.revalidation_hooks:
            try:
                hook(work_id)
            except Exception as e:
                logger.warning("Revalidation hook failed", work_id=work_id, error=str(e))

    async def _guard(
        self,
        operation: str,
        work_id: Optional[int],
        func: Callable[[], Awaitable[OperationResult]]
    ) -> OperationResult:
        with log_timing(operation, logger=logger, work_id=work_id) as outcome:
            result = await self._run(operation, work_id, func)
            outcome["success"] = result.success
            if result.error_code:
                outcome["error_code"] = result.error_code
            if result.warnings:
                outcome["warning_count"] = len(result.warnings)
            return result

    async def _run(
        self,
        operation: str,
        work_id: Optional[int],
        func: Callable[[], Awaitable[OperationResult]]
    ) -> OperationResult:
        try:
            return await func()
        except WorkTrackerError as e:
            logger.warning(
                f"{operation} failed",
                work_id=work_id,
                error=str(e),
                error_code=e.code
            )
            return OperationResult.fail(e)
        except Exception as e:
            logger.exception(f"{operation} failed unexpectedly", work_id=work_id, error=str(e))
            return OperationResult.fail(e)

    def _partial_sync(self, stage: str, work_id: int, error: Exception) -> str:
        failure = PartialSyncFailure(f"{stage} failed: {error}", work_id=work_id)
        logger.error(
            "Derived sync failed after primary write",
            work_id=work_id,
            stage=stage,
            error=str(error),
            exc_info=True
        )
        return f"{failure.code}: {failure}"

    async def _require_work(self, work_id: int) -> Work:
        work = await self.store.get_work(work_id)
        if work is None:
            raise NotFoundError(f"Work {work_id} not found", work_id=work_id)
        return work

    async def _sync_document(self, work_id: int) -> list[str]:
        try:
            await sync_document_from_activities(self.store, work_id)
        except Exception as e:
            return [self._partial_sync("Schedule sync", work_id, e)]
        return []

    # Public operations

    async def save_schedule(self, work_id: int, schedule_data: Optional[str]) -> OperationResult:
        """Persist a schedule and rebuild the work's activities from it."""
        return await self._guard(
            "save_schedule", work_id, lambda: self._save_schedule(work_id, schedule_data)
        )

    async def _save_schedule(self, work_id: int, schedule_data: Optional[str]) -> OperationResult:
        work = await self.store.update_work(work_id, {"schedule_data": schedule_data})
        if work is None:
            raise NotFoundError(f"Work {work_id} not found", work_id=work_id)

        warnings = []
        activities = None
        try:
            tasks = schedule_codec.get_task_list(schedule_codec.decode(schedule_data))
            if tasks:
                activities = await populate_activities(self.store, work_id, tasks, force=True)
        except EmptyScheduleError:
            pass
        except Exception as e:
            warnings.append(self._partial_sync("Activity sync", work_id, e))
        finally:
            self._revalidate(work_id)

        activity_count = len(activities) if activities else 0
        return OperationResult.ok(
            data={"activityCount": activity_count},
            message=f"Schedule saved ({activity_count} activities synced)",
            warnings=warnings
        )

    async def load_schedule(self, work_id: int) -> OperationResult:
        """Schedule for the editor, with progress taken from the activity table."""
        return await self._guard("load_schedule", work_id, lambda: self._load_schedule(work_id))

    async def _load_schedule(self, work_id: int) -> OperationResult:
        key = self._schedule_key(work_id)
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                return OperationResult.ok(data=cached["schedule_data"])

        work = await self._require_work(work_id)
        activities = await self.store.list_activities(work_id)

        schedule_data = work.schedule_data
        if schedule_data and activities:
            try:
                doc = apply_on_load(schedule_codec.decode(schedule_data), activities)
            except MalformedScheduleError as e:
                # Stored as-is by save_schedule; the editor gets the raw text back
                logger.warning("Returning unreconciled schedule", work_id=work_id, error=str(e))
                doc = None
            if doc is not None:
                schedule_data = schedule_codec.encode(doc)

        if self.cache is not None:
            self.cache.set(key, {"schedule_data": schedule_data}, self.cache_ttl_ms)
        return OperationResult.ok(data=schedule_data)

    async def get_work_activities(self, work_id: int) -> OperationResult:
        """Activities of a work in display order."""
        return await self._guard("get_work_activities", work_id, lambda: self._get_work_activities(work_id))

    async def _get_work_activities(self, work_id: int) -> OperationResult:
        key = self._activities_key(work_id)
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                return OperationResult.ok(data=cached)

        activities = await self.store.list_activities(work_id)
        if self.cache is not None:
            self.cache.set(key, activities, self.cache_ttl_ms)
        return OperationResult.ok(data=activities)

    async def update_activity_progress(self, activity_id: int, progress: Any, work_id: int) -> OperationResult:
        """Set one activity's progress and mirror it into the schedule."""
        return await self._guard(
            "update_activity_progress",
            work_id,
            lambda: self._update_activity_progress(activity_id, progress, work_id)
        )

    async def _update_activity_progress(self, activity_id: int, progress: Any, work_id: int) -> OperationResult:
        progress = validate_progress(progress)

        activity = await self.store.get_activity(activity_id)
        if activity is None:
            raise NotFoundError(f"Activity {activity_id} not found", work_id=work_id)
        if activity.work_id != work_id:
            raise ValidationError(
                f"Activity {activity_id} does not belong to work {work_id}", work_id=work_id
            )

        updated = await self.store.update_activity(
            activity_id, {"progress_percentage": progress, "updated_at": _now()}
        )
        if updated is None:
            raise NotFoundError(f"Activity {activity_id} not found", work_id=work_id)

        try:
            warnings = await self._sync_document(work_id)
        finally:
            self._revalidate(work_id)

        return OperationResult.ok(data=updated, message="Activity progress updated", warnings=warnings)

    async def bulk_update_activities_progress(
        self,
        work_id: int,
        updates: list[Union[ActivityProgressUpdate, dict]]
    ) -> OperationResult:
        """Apply many progress updates by activity code, then sync the schedule once."""
        return await self._guard(
            "bulk_update_activities_progress",
            work_id,
            lambda: self._bulk_update_activities_progress(work_id, updates)
        )

    async def _bulk_update_activities_progress(
        self,
        work_id: int,
        updates: list[Union[ActivityProgressUpdate, dict]]
    ) -> OperationResult:
        activities = await self.store.list_activities(work_id)
        by_code = {activity.activity_code: activity for activity in activities}

        updated_codes = []
        skipped_codes = []
        failed = []
        for entry in updates:
            try:
                update = entry if isinstance(entry, ActivityProgressUpdate) else ActivityProgressUpdate.model_validate(entry)
            except PydanticValidationError as e:
                code = entry.get("activityCode") if isinstance(entry, dict) else None
                failed.append({"activityCode": code, "error": f"Invalid update: {e.errors()[0]['msg']}"})
                continue

            activity = by_code.get(update.activity_code)
            if activity is None:
                skipped_codes.append(update.activity_code)
                continue

            try:
                progress = validate_progress(update.progress)
                await self.store.update_activity(
                    activity.id, {"progress_percentage": progress, "updated_at": _now()}
                )
                updated_codes.append(update.activity_code)
            except WorkTrackerError as e:
                logger.warning(
                    "Activity progress update failed",
                    work_id=work_id,
                    activity_code=update.activity_code,
                    error=str(e)
                )
                failed.append({"activityCode": update.activity_code, "error": str(e)})

        warnings = []
        try:
            if updated_codes:
                warnings = await self._sync_document(work_id)
        finally:
            self._revalidate(work_id)

        if skipped_codes:
            logger.info("Skipped unmatched activity codes", work_id=work_id, activity_codes=skipped_codes)

        return OperationResult.ok(
            data={"updated": updated_codes, "skipped": skipped_codes, "failed": failed},
            message=f"Updated {len(updated_codes)} of {len(updates)} activities",
            warnings=warnings
        )

    async def initialize_activities_from_schedule(self, work_id: int) -> OperationResult:
        """Create activities for a work that has a schedule but none yet."""
        return await self._guard(
            "initialize_activities_from_schedule",
            work_id,
            lambda: self._initialize_activities(work_id)
        )

    async def _initialize_activities(self, work_id: int) -> OperationResult:
        work = await self._require_work(work_id)
        if not work.schedule_data:
            raise NotFoundError(f"No schedule data found for work {work_id}", work_id=work_id)
        if await self.store.has_activities(work_id):
            raise AlreadyInitializedError("Activities already initialized", work_id=work_id)
        try:
            return await self._project_schedule(work, force=False)
        finally:
            self._revalidate(work.id)

    async def reinitialize_activities(self, work_id: int) -> OperationResult:
        """Delete a work's activities and rebuild them from its schedule."""
        return await self._guard(
            "reinitialize_activities", work_id, lambda: self._reinitialize_activities(work_id)
        )

    async def _reinitialize_activities(self, work_id: int) -> OperationResult:
        work = await self._require_work(work_id)
        try:
            await self.store.delete_activities(work_id)
            if not work.schedule_data:
                raise NotFoundError(f"No schedule data found for work {work_id}", work_id=work_id)
            return await self._project_schedule(work, force=True)
        finally:
            self._revalidate(work.id)

    async def _project_schedule(self, work: Work, force: bool) -> OperationResult:
        tasks = schedule_codec.get_task_list(schedule_codec.decode(work.schedule_data))
        try:
            activities = await populate_activities(self.store, work.id, tasks, force=force)
        except EmptyScheduleError:
            return OperationResult.ok(data=[], message="No tasks in schedule data; nothing to initialize")

        if activities is None:
            raise AlreadyInitializedError("Activities already initialized", work_id=work.id)
        return OperationResult.ok(data=activities, message=f"Initialized {len(activities)} activities")

    async def reinitialize_all(self, force: bool = False) -> OperationResult:
        """Initialize activities for every work with a schedule.

        Works that already have activities are skipped unless ``force`` is set.
        One work failing does not stop the batch.
        """
        return await self._guard("reinitialize_all", None, lambda: self._reinitialize_all(force))

    async def _reinitialize_all(self, force: bool) -> OperationResult:
        works = await self.store.list_works_with_schedule()
        summary = ReinitializeSummary(total=len(works))

        for work in works:
            attempted = False
            try:
                tasks = schedule_codec.get_task_list(schedule_codec.decode(work.schedule_data))
                if not tasks:
                    summary.skipped += 1
                    continue

                attempted = True
                activities = await populate_activities(self.store, work.id, tasks, force=force)
                if activities is None:
                    summary.skipped += 1
                    continue

                summary.success += 1
            except Exception as e:
                logger.error(
                    "Failed to initialize work activities",
                    work_id=work.id,
                    scheme_sr_no=work.scheme_sr_no,
                    error=str(e),
                    exc_info=not isinstance(e, WorkTrackerError)
                )
                summary.failed += 1
                summary.errors.append(WorkInitError(work_id=work.id, scheme_sr_no=work.scheme_sr_no, error=str(e)))
            finally:
                if attempted:
                    self._revalidate(work.id)

        logger.info(
            "Activity initialization complete",
            total=summary.total,
            succeeded=summary.success,
            skipped=summary.skipped,
            failed=summary.failed,
            force=force
        )
        return OperationResult.ok(
            data=summary,
            message=(
                f"Initialized {summary.success} of {summary.total} works "
                f"({summary.skipped} skipped, {summary.failed} failed)"
            )
        )


# Process-wide service instance
_service: Optional[ScheduleSyncService] = None


def get_schedule_sync_service() -> ScheduleSyncService:
    """Get or create the Supabase-backed service for this process."""
    global _service
    if _service is None:
        cache = MemoryCache(SyncConfig.SCHEDULE_CACHE_TTL_MS) if SyncConfig.SCHEDULE_CACHE_ENABLED else None
        _service = ScheduleSyncService(SupabaseWorkStore(), cache=cache)
    return _service
