"""Activity initialization endpoint (operator tool, can be called via cron)."""

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
    GET ?force=true initializes activities for every work with a schedule.
    POST {"workId": 42} initializes a single work.
    """
    with correlation_context(get_correlation_id_header(request)):
        method = (request.get("method") or "GET").upper()
        try:
            service = get_schedule_sync_service()

            if method == "GET":
                query_params = request.get("query") or {}
                force = str(query_params.get("force", "false")).lower() == "true"
                return result_response(run_async(service.reinitialize_all(force=force)))

            if method == "POST":
                work_id = get_int_param(parse_body(request), "workId")
                if work_id is None:
                    return bad_request("Work ID is required")
                return result_response(run_async(service.initialize_activities_from_schedule(work_id)))

            return json_response(405, {"success": False, "error": f"Method {method} not allowed"})

        except Exception as e:
            logger.error("Activity initialization failed", exc_info=True, error=str(e))
            return json_response(500, {"success": False, "error": str(e)})
