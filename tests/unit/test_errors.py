"""Tests for error classification and messages."""

from google.auth.exceptions import RefreshError

from errors import classify_error, describe_error, get_http_status
from models import ErrorKind, InitializationError, ToolError
from tests.mock_utils import make_http_error


class TestGetHttpStatus:
    def test_http_error(self) -> None:
        assert get_http_status(make_http_error(404)) == 404

    def test_status_code_attribute(self) -> None:
        class Response(Exception):
            status_code = 429

        assert get_http_status(Response()) == 429

    def test_plain_exception(self) -> None:
        assert get_http_status(ValueError("x")) is None


class TestClassifyError:
    """HTTP status first, then exception type."""

    def test_status_mapping(self) -> None:
        cases = {
            401: ErrorKind.AUTH_EXPIRED,
            403: ErrorKind.PERMISSION_DENIED,
            404: ErrorKind.NOT_FOUND,
            429: ErrorKind.RATE_LIMITED,
            400: ErrorKind.INVALID_INPUT,
            500: ErrorKind.NETWORK_ERROR,
            503: ErrorKind.NETWORK_ERROR,
        }
        for status, kind in cases.items():
            assert classify_error(make_http_error(status)) is kind, status

    def test_refresh_error_is_auth_expired(self) -> None:
        assert classify_error(RefreshError("invalid_grant")) is ErrorKind.AUTH_EXPIRED

    def test_connection_errors(self) -> None:
        assert classify_error(ConnectionError("reset")) is ErrorKind.NETWORK_ERROR
        assert classify_error(TimeoutError("timed out")) is ErrorKind.NETWORK_ERROR

    def test_own_errors_keep_their_kind(self) -> None:
        assert classify_error(ToolError("bad", kind=ErrorKind.NOT_FOUND)) is ErrorKind.NOT_FOUND
        assert classify_error(InitializationError("x")) is ErrorKind.AUTH_FAILED

    def test_unknown(self) -> None:
        assert classify_error(Exception("Quota exceeded")) is ErrorKind.UNKNOWN


class TestDescribeError:
    def test_http_error_uses_api_message(self) -> None:
        error = make_http_error(403, "The caller does not have permission")
        assert describe_error(error) == "The caller does not have permission"

    def test_plain_exception_text(self) -> None:
        assert describe_error(Exception("Quota exceeded")) == "Quota exceeded"

    def test_empty_exception_uses_class_name(self) -> None:
        assert describe_error(TimeoutError()) == "TimeoutError"

    def test_own_error_message(self) -> None:
        assert describe_error(ToolError("Tab not found")) == "Tab not found"
