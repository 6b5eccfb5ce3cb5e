"""Test helper functions."""

import json
from typing import Dict, Any, Optional


def create_request(
    method: str = "POST",
    body: Optional[Dict[str, Any]] = None,
    query: Optional[Dict[str, str]] = None
) -> Dict[str, Any]:
    """Create a serverless function request object for testing."""
    return {
        "method": method,
        "headers": {"content-type": "application/json"},
        "body": json.dumps(body) if body is not None else "",
        "query": query or {}
    }
