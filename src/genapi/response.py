"""Response envelope returned by the transport layer."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator


class Response(BaseModel):
    """An HTTP response: status code, headers and body text.

    Streaming calls produce an envelope with an empty body; the content is
    delivered through the event callback instead.
    """

    model_config = ConfigDict(frozen=True)

    status_code: int
    headers: Mapping[str, str] = Field(default_factory=dict, validate_default=True)
    body: str = ""

    @field_validator("headers", mode="after")
    @classmethod
    def freeze_headers(cls, value: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(value))

    @property
    def is_success(self) -> bool:
        """True for 2xx status codes."""
        return 200 <= self.status_code < 300

    @classmethod
    def from_httpx(cls, response: httpx.Response, *, body: str | None = None) -> Response:
        """Build an envelope from an httpx response.

        ``body`` overrides the response text, which is required for streamed
        responses whose content has not been read.
        """
        return cls(
            status_code=response.status_code,
            headers=dict(response.headers),
            body=response.text if body is None else body,
        )
