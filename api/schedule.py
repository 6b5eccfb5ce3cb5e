"""Schedule endpoint - load (GET) and save (POST) a work's Gantt schedule."""

from src.services.schedule_sync import get_schedule_sync_service
from src.utils.http import (
    bad_request,
    get_correlation_id_header,
    get_int_param,
    json_response,
    parse_body,
    result_response,
    run_async,
)
from src.utils.logging import correlation_context, get_structured_logger, setup_logging

setup_logging()
logger = get_structured_logger(__name__)


def handler(request):
    """
    GET ?workId=42 returns the schedule with activity progress applied.
    POST {"workId": 42, "scheduleData": "<json>"} saves it and rebuilds activities.
    """
    with correlation_context(get_correlation_id_header(request)):
        method = (request.get("method") or "GET").upper()
        try:
            service = get_schedule_sync_service()

            if method == "GET":
                work_id = get_int_param(request.get("query") or {}, "workId")
                if work_id is None:
                    return bad_request("Work ID is required")
                return result_response(run_async(service.load_schedule(work_id)))

            if method == "POST":
                body = parse_body(request)
                work_id = get_int_param(body, "workId")
                if work_id is None:
                    return bad_request("Work ID is required")
                schedule_data = body.get("scheduleData")
                if schedule_data is not None and not isinstance(schedule_data, str):
                    return bad_request("scheduleData must be a JSON string")
                return result_response(run_async(service.save_schedule(work_id, schedule_data)))

            return json_response(405, {"success": False, "error": f"Method {method} not allowed"})

        except Exception as e:
            logger.error("Schedule request failed", exc_info=True, error=str(e))
            return json_response(500, {"success": False, "error": str(e)})
