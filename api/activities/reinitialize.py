"""Activity re-initialization endpoint - rebuild one work's activities from its schedule."""

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
    """POST {"workId": 42}."""
    with correlation_context(get_correlation_id_header(request)):
        try:
            work_id = get_int_param(parse_body(request), "workId")
            if work_id is None:
                return bad_request("Work ID is required")

            result = run_async(get_schedule_sync_service().reinitialize_activities(work_id))
            if result.success:
                result.message = "Activities re-initialized successfully"
            return result_response(result)

        except Exception as e:
            logger.error("Failed to re-initialize activities", exc_info=True, error=str(e))
            return json_response(500, {"success": False, "error": str(e)})
