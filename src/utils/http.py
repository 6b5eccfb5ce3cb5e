"""Helpers shared by the serverless function handlers."""

import asyncio
import json
from typing import Any, Optional

from src.models.result import OperationResult
from src.utils.logging_config import LoggingConfig

ERROR_STATUS_CODES = {
    "VALIDATION_ERROR": 400,
    "NOT_FOUND": 404,
    "ALREADY_INITIALIZED": 409,
    "MALFORMED_SCHEDULE": 422,
}


def run_async(coro) -> Any:
    """Run a coroutine from a synchronous handler."""
    try:
        loop = asyncio.get_event_loop()
        if loop.is_closed():
            raise RuntimeError("Event loop is closed")
    except RuntimeError:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
    return loop.run_until_complete(coro)


def json_response(status_code: int, payload: dict) -> dict:
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(payload)
    }


def result_response(result: OperationResult) -> dict:
    """Map an operation result to a function response."""
    if result.success:
        status_code = 200
    else:
        status_code = ERROR_STATUS_CODES.get(result.error_code, 500)
    return json_response(status_code, result.to_response())


def parse_body(request: dict) -> dict:
    """Request body as a dict (accepts a JSON string or an already-parsed dict)."""
    body = request.get("body")
    if not body:
        return {}
    if isinstance(body, dict):
        return body
    try:
        parsed = json.loads(body)
    except json.JSONDecodeError:
        return {}
    return parsed if isinstance(parsed, dict) else {}


def get_int_param(params: dict, name: str) -> Optional[int]:
    """Read an integer parameter; None when missing or not an integer."""
    value = params.get(name)
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def bad_request(error: str) -> dict:
    return json_response(400, {"success": False, "error": error, "error_code": "VALIDATION_ERROR"})


def get_correlation_id_header(request: dict) -> Optional[str]:
    """Caller-supplied correlation ID, if any (header lookup is case-insensitive)."""
    wanted = LoggingConfig.LOG_CORRELATION_ID_HEADER.lower()
    for name, value in (request.get("headers") or {}).items():
        if name.lower() == wanted:
            return value or None
    return None
