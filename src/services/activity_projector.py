"""Activity projector - derive work_activities rows from a schedule task list."""

from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from src.models.activity import WorkActivity
from src.models.schedule import ScheduleTask
from src.services.work_store import WorkStore
from src.utils.errors import EmptyScheduleError, ValidationError
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)


def to_progress_percentage(progress: Optional[float]) -> float:
    """Convert a schedule progress fraction to a 0-100 percentage.

    Values above 1 were written by older editors as percentages already.
    """
    value = progress or 0.0
    if value <= 1:
        value = value * 100
    return round(value, 4)


def parse_tasks(tasks: list[dict[str, Any]]) -> list[ScheduleTask]:
    """Validate raw task dicts into typed tasks."""
    parsed = []
    for index, task in enumerate(tasks):
        if task.get("id") in (None, ""):
            raise ValidationError(f"Schedule task at position {index} has no id")
        try:
            parsed.append(ScheduleTask.model_validate(task))
        except PydanticValidationError as e:
            raise ValidationError(f"Schedule task at position {index} is invalid: {e}")
    return parsed


def project(work_id: int, tasks: list[dict[str, Any]]) -> list[WorkActivity]:
    """Build one activity per task, in task-list order.

    Surrogate ids and parent links are left unset; they are known only after
    the rows are inserted.
    """
    activities = []
    for index, task in enumerate(parse_tasks(tasks)):
        activities.append(WorkActivity(
            work_id=work_id,
            activity_code=task.activity_code,
            activity_name=task.text or "",
            parent_activity_id=None,
            is_main_activity=task.is_main,
            start_date=task.start_date or None,
            end_date=task.end_date or None,
            duration=task.duration,
            progress_percentage=to_progress_percentage(task.progress),
            display_order=index,
        ))
    return activities


def resolve_parent_links(tasks: list[dict[str, Any]], inserted: list[WorkActivity]) -> list[tuple[int, int]]:
    """Match task ``parent`` references to inserted activity ids.

    Returns ``(child_id, parent_id)`` pairs. A reference whose child or parent
    is not among ``inserted`` is dropped.
    """
    by_code = {activity.activity_code: activity for activity in inserted}
    links = []
    for task in parse_tasks(tasks):
        parent_code = task.parent_code
        if parent_code is None:
            continue
        child = by_code.get(task.activity_code)
        parent = by_code.get(parent_code)
        if child is None or parent is None:
            logger.debug(
                "Unresolved schedule parent reference",
                activity_code=task.activity_code,
                parent_code=parent_code
            )
            continue
        links.append((child.id, parent.id))
    return links


async def populate_activities(
    store: WorkStore,
    work_id: int,
    tasks: list[dict[str, Any]],
    force: bool = False
) -> Optional[list[WorkActivity]]:
    """Rebuild a work's activity rows from its schedule tasks.

    Returns None (nothing done) when activities already exist and ``force`` is
    not set. With ``force`` the existing rows are deleted first; the rebuild is
    delete-all-then-insert, so activity ids change on every run. Raises
    ``EmptyScheduleError`` before touching storage when there are no tasks.
    """
    exists = await store.has_activities(work_id)
    if exists and not force:
        logger.info("Activities already exist, skipping projection", work_id=work_id)
        return None

    if not tasks:
        raise EmptyScheduleError("No tasks in schedule data", work_id=work_id)

    rows = project(work_id, tasks)

    if exists:
        await store.delete_activities(work_id)
        logger.info("Deleted existing activities", work_id=work_id)

    inserted = await store.insert_activities(rows)

    parent_ids = {}
    for child_id, parent_id in resolve_parent_links(tasks, inserted):
        await store.update_activity(child_id, {"parent_activity_id": parent_id})
        parent_ids[child_id] = parent_id

    activities = [
        activity.model_copy(update={"parent_activity_id": parent_ids[activity.id]})
        if activity.id in parent_ids else activity
        for activity in inserted
    ]

    logger.info(
        "Projected activities from schedule",
        work_id=work_id,
        activity_count=len(activities),
        parent_link_count=len(parent_ids)
    )
    return activities
