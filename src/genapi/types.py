"""Type definitions for the GenAPI SDK."""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Literal

from httpx_sse import ServerSentEvent
from pydantic import BaseModel, ConfigDict, Field

HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]

SSE_CONTENT_TYPE = "text/event-stream"


def _reject_constant(name: str) -> Any:
    # NaN and Infinity are not part of JSON
    raise ValueError(f"Invalid JSON constant: {name}")


class Endpoint(str, Enum):
    """API endpoint paths."""

    ME = "/api/v1/user"
    NETWORKS = "/api/v1/networks"
    FUNCTIONS = "/api/v1/functions"
    REQUEST = "/api/v1/request/get"

    def join(self, resource_id: str | int) -> str:
        return f"{self.value}/{resource_id}"


class ApiRequest(BaseModel):
    """Everything the transport needs to send one request."""

    model_config = ConfigDict(frozen=True)

    method: HttpMethod
    path: str
    params: dict[str, Any] = Field(default_factory=dict)
    headers: dict[str, str] = Field(default_factory=dict)
    body: str | None = None

    def as_stream(self) -> ApiRequest:
        """Return a copy of this request that asks for an SSE response."""
        return self.model_copy(update={"headers": {**self.headers, "Accept": SSE_CONTENT_TYPE}})


class StreamEvent(BaseModel):
    """SSE stream event.

    ``data`` is the raw payload; ``decoded`` is the payload parsed as JSON, or
    the raw string when it is not valid JSON.
    """

    event: str = "message"
    data: str
    decoded: Any = None
    id: str | None = None
    retry: int | None = None

    @classmethod
    def from_sse(cls, sse: ServerSentEvent) -> StreamEvent:
        try:
            decoded = json.loads(sse.data, parse_constant=_reject_constant)
        except (ValueError, TypeError):
            decoded = sse.data
        return cls(event=sse.event, data=sse.data, decoded=decoded, id=sse.id or None, retry=sse.retry)
