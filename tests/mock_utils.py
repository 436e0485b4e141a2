"""
Mock utilities for adapter and dispatcher testing.

Provides helpers for creating Google API errors shaped like the real thing.
"""

import json

from googleapiclient.errors import HttpError
from httplib2 import Response


def make_http_error(status: int, message: str = "Error") -> HttpError:
    """
    Create an HttpError for testing error handling.

    The body is the JSON error envelope Google APIs return, so the error's
    `reason` is `message` just as it would be in production.

    Args:
        status: HTTP status code (401, 403, 404, 429, 500, etc.)
        message: Error message

    Returns:
        HttpError that can be raised in mock side_effect

    Example:
        mock_api_chain(service, "files.get.execute",
                       side_effect=make_http_error(404, "File not found"))
    """
    resp = Response({"status": status})
    body = {"error": {"code": status, "message": message}}
    return HttpError(resp, json.dumps(body).encode())
