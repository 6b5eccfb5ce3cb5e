"""Activity progress endpoint."""

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
    GET ?workId=42 lists the work's activities.
    POST {"workId": 42, "activityId": 7, "progress": 75} updates one activity.
    POST {"workId": 42, "updates": [{"activityCode": "1", "progress": 60}]} updates many.
    """
    with correlation_context(get_correlation_id_header(request)):
        method = (request.get("method") or "GET").upper()
        try:
            service = get_schedule_sync_service()

            if method == "GET":
                work_id = get_int_param(request.get("query") or {}, "workId")
                if work_id is None:
                    return bad_request("Work ID is required")
                return result_response(run_async(service.get_work_activities(work_id)))

            if method != "POST":
                return json_response(405, {"success": False, "error": f"Method {method} not allowed"})

            body = parse_body(request)
            work_id = get_int_param(body, "workId")
            if work_id is None:
                return bad_request("Work ID is required")

            if "updates" in body:
                updates = body["updates"]
                if not isinstance(updates, list):
                    return bad_request("updates must be a list")
                return result_response(run_async(service.bulk_update_activities_progress(work_id, updates)))

            activity_id = get_int_param(body, "activityId")
            if activity_id is None:
                return bad_request("Activity ID is required")
            return result_response(
                run_async(service.update_activity_progress(activity_id, body.get("progress"), work_id))
            )

        except Exception as e:
            logger.error("Activity progress request failed", exc_info=True, error=str(e))
            return json_response(500, {"success": False, "error": str(e)})
