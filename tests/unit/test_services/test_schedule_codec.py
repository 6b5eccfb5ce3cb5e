"""Tests for the schedule codec."""

import json
import pytest

from src.models.schedule import ScheduleShape
from src.services import schedule_codec
from src.utils.errors import MalformedScheduleError


@pytest.mark.unit
@pytest.mark.parametrize("raw", [None, "", "   "])
def test_decode_empty_is_none(raw):
    assert schedule_codec.decode(raw) is None


@pytest.mark.unit
def test_decode_invalid_json():
    with pytest.raises(MalformedScheduleError):
        schedule_codec.decode("{not json")


@pytest.mark.unit
@pytest.mark.parametrize("raw", [
    '{"links": []}',
    '{"data": "not a list"}',
    '[1, 2, 3]',
    '"just a string"',
])
def test_decode_without_task_array(raw):
    with pytest.raises(MalformedScheduleError):
        schedule_codec.decode(raw)


@pytest.mark.unit
def test_decode_rejects_non_object_tasks():
    with pytest.raises(MalformedScheduleError):
        schedule_codec.decode('{"data": [1, 2]}')


@pytest.mark.unit
def test_decode_data_shape():
    doc = schedule_codec.decode('{"data": [{"id": 1}], "links": [{"id": 1, "source": 1, "target": 2}]}')

    assert doc.shape == ScheduleShape.DATA
    assert schedule_codec.get_task_list(doc) == [{"id": 1}]
    assert doc.extra_fields == {"links": [{"id": 1, "source": 1, "target": 2}]}


@pytest.mark.unit
def test_decode_prefers_custom_tasks():
    raw = json.dumps({"customTasks": [{"id": "new"}], "data": [{"id": "stale"}]})

    doc = schedule_codec.decode(raw)

    assert doc.shape == ScheduleShape.CUSTOM_TASKS
    assert schedule_codec.get_task_list(doc) == [{"id": "new"}]


@pytest.mark.unit
def test_decode_falls_back_to_data_when_custom_tasks_not_a_list():
    doc = schedule_codec.decode(json.dumps({"customTasks": None, "data": [{"id": 1}]}))
    assert doc.shape == ScheduleShape.DATA


@pytest.mark.unit
def test_get_task_list_without_document():
    assert schedule_codec.get_task_list(None) == []


@pytest.mark.unit
def test_encode_preserves_unknown_top_level_keys():
    raw = json.dumps({"data": [{"id": 1, "custom": "x"}], "links": [], "version": 3})

    encoded = json.loads(schedule_codec.encode(schedule_codec.decode(raw)))

    assert encoded == {"data": [{"id": 1, "custom": "x"}], "links": [], "version": 3}


@pytest.mark.unit
def test_encode_writes_legacy_document_as_data():
    raw = json.dumps({"customTasks": [{"id": 1}], "deletedTaskIds": [7], "data": [{"id": "old"}]})

    encoded = json.loads(schedule_codec.encode(schedule_codec.decode(raw)))

    assert encoded == {"deletedTaskIds": [7], "data": [{"id": 1}]}
