"""
Error classification for remote failures.

Maps whatever the Google client stack raises onto ErrorKind and a readable
reason. There is deliberately no retry here: a failed call surfaces once.
"""

from google.auth.exceptions import RefreshError

from models import ErrorKind, ScrivenerError


def get_http_status(exception: BaseException) -> int | None:
    """
    Extract HTTP status code from exception if available.

    Works with googleapiclient.errors.HttpError and similar.
    """
    # Check for resp.status attribute (googleapiclient.errors.HttpError)
    if hasattr(exception, "resp") and hasattr(exception.resp, "status"):
        status = exception.resp.status
        if isinstance(status, int):
            return status
        if isinstance(status, str) and status.isdigit():
            return int(status)

    # Check for status_code attribute (requests-style)
    if hasattr(exception, "status_code"):
        status = exception.status_code
        if isinstance(status, int):
            return status

    return None


def classify_error(exception: BaseException) -> ErrorKind:
    """Pick the ErrorKind for an exception raised during tool execution."""
    if isinstance(exception, ScrivenerError):
        return exception.kind

    if isinstance(exception, RefreshError):
        return ErrorKind.AUTH_EXPIRED

    # Check HTTP status first (more reliable than string matching)
    status = get_http_status(exception)
    if status is not None:
        if status == 401:
            return ErrorKind.AUTH_EXPIRED
        elif status == 403:
            return ErrorKind.PERMISSION_DENIED
        elif status == 404:
            return ErrorKind.NOT_FOUND
        elif status == 429:
            return ErrorKind.RATE_LIMITED
        elif status >= 500:
            return ErrorKind.NETWORK_ERROR
        elif 400 <= status < 500:
            return ErrorKind.INVALID_INPUT

    # Fall back to exception type
    if isinstance(exception, (ConnectionError, TimeoutError)):
        return ErrorKind.NETWORK_ERROR

    return ErrorKind.UNKNOWN


def describe_error(exception: BaseException) -> str:
    """
    Human-readable reason for a failure.

    HttpError carries the API's own message in `reason`; str(HttpError)
    also embeds the request URI, which is noise for the caller.
    """
    if isinstance(exception, ScrivenerError):
        return exception.message

    reason = getattr(exception, "reason", None)
    if isinstance(reason, str) and reason.strip():
        return reason.strip()

    text = str(exception).strip()
    return text or exception.__class__.__name__
