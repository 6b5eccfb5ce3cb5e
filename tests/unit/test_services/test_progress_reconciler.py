"""Tests for progress reconciliation between schedule and activities."""

import json
import pytest

from src.services import schedule_codec
from src.services.activity_projector import project
from src.services.progress_reconciler import (
    apply_on_load,
    push_activity_progress_into_document,
    sync_document_from_activities,
)
from src.utils.errors import MalformedScheduleError
from tests.utils.assertions import assert_task_progress


@pytest.mark.unit
def test_push_rewrites_only_progress(store):
    doc = schedule_codec.decode(json.dumps({
        "data": [
            {"id": 1, "text": "Foundation", "progress": 0.1, "open": True},
            {"id": 2, "text": "Walls", "progress": 0.2},
        ],
        "links": [{"id": 1}],
    }))
    activities = [store.add_activity(work_id=42, activity_code="1", progress_percentage=75)]

    updated = push_activity_progress_into_document(doc, activities)

    assert updated.tasks == [
        {"id": 1, "text": "Foundation", "progress": 0.75, "open": True},
        {"id": 2, "text": "Walls", "progress": 0.2},
    ]
    assert updated.extra_fields == {"links": [{"id": 1}]}
    assert updated.shape == doc.shape


@pytest.mark.unit
def test_push_does_not_mutate_input(store):
    doc = schedule_codec.decode('{"data": [{"id": "a", "progress": 0}]}')
    activities = [store.add_activity(work_id=1, activity_code="a", progress_percentage=30)]

    push_activity_progress_into_document(doc, activities)

    assert doc.tasks == [{"id": "a", "progress": 0}]


@pytest.mark.unit
@pytest.mark.parametrize("percentage", [0, 1, 50, 99, 100])
def test_progress_round_trip(store, percentage):
    tasks = [{"id": 9, "progress": percentage / 100}]
    activity = project(1, tasks)[0]
    assert activity.progress_percentage == percentage

    doc = schedule_codec.decode(json.dumps({"data": [{"id": 9, "progress": 0.5}]}))
    updated = push_activity_progress_into_document(doc, [activity])

    assert updated.tasks[0]["progress"] == percentage / 100


@pytest.mark.unit
def test_apply_on_load_without_activities_returns_document():
    doc = schedule_codec.decode('{"data": [{"id": 1, "progress": 0.3}]}')
    assert apply_on_load(doc, []) is doc
    assert apply_on_load(None, []) is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_sync_document_rewrites_stored_schedule(store):
    store.add_work(42, schedule_data=json.dumps({"customTasks": [{"id": 1, "progress": 0.4}], "deletedTaskIds": []}))
    store.add_activity(work_id=42, activity_code="1", progress_percentage=75)

    assert await sync_document_from_activities(store, 42) is True

    stored = json.loads(store.works[42].schedule_data)
    assert stored == {"deletedTaskIds": [], "data": [{"id": 1, "progress": 0.75}]}


@pytest.mark.unit
@pytest.mark.asyncio
async def test_sync_document_without_schedule_is_noop(store):
    store.add_work(42, schedule_data=None)
    store.add_activity(work_id=42, activity_code="1", progress_percentage=10)

    assert await sync_document_from_activities(store, 42) is False
    assert store.calls_to("update_work") == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_sync_document_without_activities_is_noop(store):
    store.add_work(42, schedule_data='{"data": [{"id": 1, "progress": 0.4}]}')

    assert await sync_document_from_activities(store, 42) is False
    assert_task_progress(store.works[42].schedule_data, 1, 0.4)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_sync_document_malformed_schedule_raises(store):
    store.add_work(42, schedule_data="{broken")
    store.add_activity(work_id=42, activity_code="1")

    with pytest.raises(MalformedScheduleError):
        await sync_document_from_activities(store, 42)
