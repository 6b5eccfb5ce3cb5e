"""Tests for the schedule and activity function handlers."""

import pytest
from unittest.mock import patch

from api import schedule as schedule_api
from api.activities import initialize as initialize_api
from api.activities import progress as progress_api
from api.activities import reinitialize as reinitialize_api
from tests.utils.assertions import assert_task_progress, assert_valid_response
from tests.utils.factories import create_schedule_json, create_schedule_tasks
from tests.utils.helpers import create_request


@pytest.fixture
def patched_service(service):
    """Route every handler to the in-memory service."""
    with patch.object(schedule_api, "get_schedule_sync_service", return_value=service), \
            patch.object(progress_api, "get_schedule_sync_service", return_value=service), \
            patch.object(initialize_api, "get_schedule_sync_service", return_value=service), \
            patch.object(reinitialize_api, "get_schedule_sync_service", return_value=service):
        yield service


@pytest.mark.unit
def test_save_then_load_schedule(store, patched_service, foundation_schedule):
    store.add_work(42)

    saved = schedule_api.handler(create_request("POST", {"workId": 42, "scheduleData": foundation_schedule}))
    body = assert_valid_response(saved, 200)
    assert body["success"] is True
    assert body["data"] == {"activityCount": 1}

    loaded = schedule_api.handler(create_request("GET", query={"workId": "42"}))
    body = assert_valid_response(loaded, 200)
    assert_task_progress(body["data"], 1, 0.4)


@pytest.mark.unit
def test_load_schedule_unknown_work(patched_service):
    response = schedule_api.handler(create_request("GET", query={"workId": "5"}))

    body = assert_valid_response(response, 404)
    assert body["error_code"] == "NOT_FOUND"


@pytest.mark.unit
@pytest.mark.parametrize("request_args", [
    ("GET", None, {}),
    ("GET", None, {"workId": "abc"}),
    ("POST", {"scheduleData": "{}"}, None),
])
def test_schedule_requires_work_id(patched_service, request_args):
    method, body, query = request_args
    response = schedule_api.handler(create_request(method, body, query))
    assert_valid_response(response, 400)


@pytest.mark.unit
def test_schedule_rejects_non_string_payload(store, patched_service):
    store.add_work(42)

    response = schedule_api.handler(create_request("POST", {"workId": 42, "scheduleData": {"data": []}}))

    assert_valid_response(response, 400)


@pytest.mark.unit
def test_schedule_method_not_allowed(patched_service):
    assert schedule_api.handler(create_request("DELETE"))["statusCode"] == 405


@pytest.mark.unit
def test_update_single_activity(store, patched_service, foundation_schedule):
    store.add_work(42, schedule_data=foundation_schedule)
    store.add_activity(id=7, work_id=42, activity_code="1", progress_percentage=40)

    response = progress_api.handler(create_request("POST", {"workId": 42, "activityId": 7, "progress": 75}))

    body = assert_valid_response(response, 200)
    assert body["data"]["progress_percentage"] == 75
    assert_task_progress(store.works[42].schedule_data, 1, 0.75)


@pytest.mark.unit
def test_update_single_activity_out_of_range(store, patched_service):
    store.add_work(42)
    store.add_activity(id=7, work_id=42, activity_code="1")

    response = progress_api.handler(create_request("POST", {"workId": 42, "activityId": 7, "progress": 120}))

    assert assert_valid_response(response, 400)["error_code"] == "VALIDATION_ERROR"


@pytest.mark.unit
def test_bulk_update_activities(store, patched_service, foundation_schedule):
    store.add_work(42, schedule_data=foundation_schedule)
    store.add_activity(id=7, work_id=42, activity_code="1")

    response = progress_api.handler(create_request("POST", {
        "workId": 42,
        "updates": [{"activityCode": "1", "progress": 60}, {"activityCode": "999", "progress": 10}],
    }))

    body = assert_valid_response(response, 200)
    assert body["data"]["skipped"] == ["999"]


@pytest.mark.unit
def test_list_activities(store, patched_service):
    store.add_activity(work_id=42, activity_code="1")

    response = progress_api.handler(create_request("GET", query={"workId": "42"}))

    body = assert_valid_response(response, 200)
    assert [a["activity_code"] for a in body["data"]] == ["1"]


@pytest.mark.unit
def test_initialize_single_work_conflict(store, patched_service):
    store.add_work(42, schedule_data=create_schedule_json(create_schedule_tasks(2)))

    first = initialize_api.handler(create_request("POST", {"workId": 42}))
    second = initialize_api.handler(create_request("POST", {"workId": 42}))

    assert_valid_response(first, 200)
    assert assert_valid_response(second, 409)["error"] == "Activities already initialized"


@pytest.mark.unit
def test_initialize_all_with_force(store, patched_service):
    store.add_work(1, schedule_data=create_schedule_json(create_schedule_tasks(2)))
    store.add_activity(work_id=1, activity_code="old")

    response = initialize_api.handler(create_request("GET", query={"force": "true"}))

    body = assert_valid_response(response, 200)
    assert body["data"]["success"] == 1
    assert body["data"]["skipped"] == 0


@pytest.mark.unit
def test_reinitialize_requires_work_id(patched_service):
    response = reinitialize_api.handler(create_request("POST", {}))
    assert assert_valid_response(response, 400)["error"] == "Work ID is required"


@pytest.mark.unit
def test_reinitialize_work(store, patched_service):
    store.add_work(42, schedule_data=create_schedule_json(create_schedule_tasks(3)))
    store.add_activity(work_id=42, activity_code="stale")

    response = reinitialize_api.handler(create_request("POST", {"workId": 42}))

    body = assert_valid_response(response, 200)
    assert body["message"] == "Activities re-initialized successfully"
    assert len(store.activities_for(42)) == 3


@pytest.mark.unit
def test_correlation_id_header_is_read_case_insensitively():
    from src.utils.http import get_correlation_id_header

    assert get_correlation_id_header({"headers": {"x-correlation-id": "req_abc"}}) == "req_abc"
    assert get_correlation_id_header({"headers": {"content-type": "application/json"}}) is None
    assert get_correlation_id_header({}) is None
