"""Progress reconciler - keep schedule task progress and activity progress in step.

The schedule stores progress as a 0-1 fraction per task; activity rows store a
0-100 percentage. Activity rows are the authoritative side for progress once
they exist, so reconciliation always copies activity progress into the
document, never the other way round.
"""

from typing import Optional

from src.models.activity import WorkActivity
from src.models.schedule import ScheduleDocument
from src.services import schedule_codec
from src.services.work_store import WorkStore
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)


def push_activity_progress_into_document(
    doc: ScheduleDocument,
    activities: list[WorkActivity]
) -> ScheduleDocument:
    """Return a copy of ``doc`` whose task progress mirrors the activities.

    Tasks without a matching activity are passed through unchanged.
    """
    by_code = {activity.activity_code: activity for activity in activities}
    updated_tasks = []
    for task in schedule_codec.get_task_list(doc):
        activity = by_code.get(str(task.get("id")))
        if activity is None:
            updated_tasks.append(task)
            continue
        updated_tasks.append({**task, "progress": activity.progress_percentage / 100})
    return doc.model_copy(update={"tasks": updated_tasks})


def apply_on_load(
    doc: Optional[ScheduleDocument],
    activities: list[WorkActivity]
) -> Optional[ScheduleDocument]:
    """Document as it should be shown to the schedule editor."""
    if doc is None or not activities:
        return doc
    return push_activity_progress_into_document(doc, activities)


async def sync_document_from_activities(store: WorkStore, work_id: int) -> bool:
    """Rewrite a work's stored schedule from its current activity progress.

    Returns False without writing when the work has no schedule or no
    activities yet.
    """
    activities = await store.list_activities(work_id)
    if not activities:
        logger.debug("No activities to sync into schedule", work_id=work_id)
        return False

    work = await store.get_work(work_id)
    doc = schedule_codec.decode(work.schedule_data) if work else None
    if doc is None:
        logger.debug("No schedule to sync", work_id=work_id)
        return False

    updated = push_activity_progress_into_document(doc, activities)
    await store.update_work(work_id, {"schedule_data": schedule_codec.encode(updated)})

    logger.info(
        "Synced schedule progress from activities",
        work_id=work_id,
        activity_count=len(activities),
        task_count=len(updated.tasks)
    )
    return True
