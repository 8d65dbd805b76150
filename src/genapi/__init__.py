"""GenAPI SDK: create and stream tasks on the GenAPI neural network platform."""

from ._config import Config, resolve_config
from .async_client import AsyncGenApi
from .client import GenApi
from .errors import (
    ApiError,
    BadRequestError,
    ConfigurationError,
    GenApiError,
    InternalServerError,
    MethodNotAllowedError,
    MissingTokenError,
    NetworkError,
    NotFoundError,
    StreamError,
    StreamParameterNotSetError,
    TooManyRequestsError,
    UnauthorizedError,
    UnknownError,
    UnprocessableEntityError,
    error_from_status,
)
from .response import Response
from .sse import SSEDecoder
from .transport import AsyncHttpTransport, AsyncTransport, HttpTransport, StreamHandle, Transport
from .types import ApiRequest, Endpoint, StreamEvent

__all__ = [
    "GenApi",
    "AsyncGenApi",
    "Config",
    "resolve_config",
    "Transport",
    "AsyncTransport",
    "HttpTransport",
    "AsyncHttpTransport",
    "StreamHandle",
    "Response",
    "ApiRequest",
    "Endpoint",
    "StreamEvent",
    "SSEDecoder",
    "GenApiError",
    "ApiError",
    "BadRequestError",
    "UnauthorizedError",
    "NotFoundError",
    "MethodNotAllowedError",
    "UnprocessableEntityError",
    "TooManyRequestsError",
    "InternalServerError",
    "UnknownError",
    "ConfigurationError",
    "MissingTokenError",
    "StreamParameterNotSetError",
    "NetworkError",
    "StreamError",
    "error_from_status",
]
