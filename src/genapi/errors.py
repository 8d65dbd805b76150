"""Exception hierarchy for the GenAPI SDK."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .response import Response


class GenApiError(Exception):
    """Base error for all GenAPI SDK errors."""


class ApiError(GenApiError):
    """An error response returned by the API.

    Carries the status code, headers and raw body of the failed response.
    """

    status: int | None = None
    default_message = "Unknown Error"

    def __init__(
        self,
        message: str | None = None,
        status_code: int | None = None,
        headers: Mapping[str, str] | None = None,
        body: str = "",
    ) -> None:
        self.message = message or self.default_message
        self.status_code = status_code if status_code is not None else self.status
        self.headers = dict(headers or {})
        self.body = body
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status_code={self.status_code}, message={self.message!r})"


class BadRequestError(ApiError):
    """400 Bad Request."""

    status = 400
    default_message = "Bad Request"


class UnauthorizedError(ApiError):
    """401 Unauthorized."""

    status = 401
    default_message = "Unauthorized"


class NotFoundError(ApiError):
    """404 Not Found."""

    status = 404
    default_message = "Not Found"


class MethodNotAllowedError(ApiError):
    """405 Method Not Allowed."""

    status = 405
    default_message = "Method Not Allowed"


class UnprocessableEntityError(ApiError):
    """422 Unprocessable Entity."""

    status = 422
    default_message = "Unprocessable Entity"


class TooManyRequestsError(ApiError):
    """429 Too Many Requests."""

    status = 429
    default_message = "Too Many Requests"


class InternalServerError(ApiError):
    """500 Internal Server Error."""

    status = 500
    default_message = "Internal Server Error"


class UnknownError(ApiError):
    """Any other non-success status code."""


class ConfigurationError(GenApiError):
    """The client is not set up for the requested call."""

    default_message = "Invalid client configuration"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class MissingTokenError(ConfigurationError):
    """No bearer token is available for the Authorization header."""

    default_message = "Authorization header not set"


class StreamParameterNotSetError(ConfigurationError):
    """A streaming call was made without ``stream=True`` in its parameters."""

    default_message = "Stream parameter must be set to true for stream API calls"


class NetworkError(GenApiError):
    """Network / connection error."""


class StreamError(GenApiError):
    """SSE stream broke after it was established."""


_STATUS_ERRORS: dict[int, type[ApiError]] = {
    cls.status: cls  # type: ignore[misc]
    for cls in (
        BadRequestError,
        UnauthorizedError,
        NotFoundError,
        MethodNotAllowedError,
        UnprocessableEntityError,
        TooManyRequestsError,
        InternalServerError,
    )
}


def error_from_status(status: int, headers: Mapping[str, str] | None = None, body: str = "") -> ApiError:
    """Map an HTTP status code + headers + body to the appropriate error."""
    cls = _STATUS_ERRORS.get(status, UnknownError)
    return cls(status_code=status, headers=headers, body=body)


def error_from_response(response: Response) -> ApiError:
    """Map a failed response envelope to the appropriate error."""
    return error_from_status(response.status_code, response.headers, response.body)
