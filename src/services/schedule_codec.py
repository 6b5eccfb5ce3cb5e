"""Schedule codec - parse and serialize the per-work Gantt schedule JSON.

Two document layouts exist in stored data: the current ``{"data": [...],
"links": [...]}`` layout and the legacy ``{"customTasks": [...]}`` layout
written by older schedule editors. The layout is detected once in
``detect_shape`` and carried on the decoded document; everything downstream
works with ``ScheduleDocument.tasks``.
"""

import json
from typing import Any, Optional

from src.models.schedule import ScheduleDocument, ScheduleShape
from src.utils.errors import MalformedScheduleError
from src.utils.logging import get_structured_logger, preview_text

logger = get_structured_logger(__name__)


def detect_shape(payload: Any) -> ScheduleShape:
    """Return the layout of a parsed schedule, preferring ``customTasks``."""
    if isinstance(payload, dict):
        if isinstance(payload.get(ScheduleShape.CUSTOM_TASKS.value), list):
            return ScheduleShape.CUSTOM_TASKS
        if isinstance(payload.get(ScheduleShape.DATA.value), list):
            return ScheduleShape.DATA
    raise MalformedScheduleError("Schedule has neither a 'data' nor a 'customTasks' task array")


def decode(raw: Optional[str]) -> Optional[ScheduleDocument]:
    """Deserialize a stored schedule string. Empty input means no schedule."""
    if raw is None or not raw.strip():
        return None

    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning("Schedule is not valid JSON", error=str(e), raw_preview=preview_text(raw))
        raise MalformedScheduleError(f"Schedule is not valid JSON: {e}")

    shape = detect_shape(payload)
    tasks = payload[shape.value]
    if not all(isinstance(task, dict) for task in tasks):
        raise MalformedScheduleError("Schedule tasks must be JSON objects")

    extra_fields = {key: value for key, value in payload.items() if key != shape.value}
    return ScheduleDocument(shape=shape, tasks=tasks, extra_fields=extra_fields)


def get_task_list(doc: Optional[ScheduleDocument]) -> list[dict[str, Any]]:
    """Task list of a decoded document (empty when there is no document)."""
    if doc is None:
        return []
    return doc.tasks


def encode(doc: ScheduleDocument) -> str:
    """Serialize a document in the current ``data`` layout.

    A legacy ``customTasks`` document is written with its tasks under ``data``
    and the ``customTasks`` key dropped; all other top-level keys round-trip.
    """
    payload = {
        key: value for key, value in doc.extra_fields.items()
        if key not in (ScheduleShape.DATA.value, ScheduleShape.CUSTOM_TASKS.value)
    }
    payload[ScheduleShape.DATA.value] = doc.tasks
    return json.dumps(payload)
