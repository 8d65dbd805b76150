"""HTTP transport for the GenAPI SDK.

The clients only talk to a :class:`Transport` (or :class:`AsyncTransport`):
``send`` returns a buffered :class:`~genapi.response.Response` for any HTTP
status, and ``stream`` opens a response whose body is consumed chunk by chunk.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Iterator
from contextlib import AbstractAsyncContextManager, AbstractContextManager, asynccontextmanager, contextmanager
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from ._config import Config
from .errors import NetworkError, StreamError
from .response import Response
from .types import ApiRequest

logger = logging.getLogger(__name__)

SDK_VERSION = "0.1.0"
USER_AGENT = f"genapi-python-sdk/{SDK_VERSION}"


@dataclass
class StreamHandle:
    """An open streaming response.

    ``response`` holds the initial status and headers (and the error body for
    non-2xx responses). ``chunks`` yields the body text; it is empty when the
    response is not a success.
    """

    response: Response
    chunks: Iterator[str]


@dataclass
class AsyncStreamHandle:
    """Async counterpart of :class:`StreamHandle`."""

    response: Response
    chunks: AsyncIterator[str]


class Transport(Protocol):
    def send(self, request: ApiRequest) -> Response: ...

    def stream(self, request: ApiRequest) -> AbstractContextManager[StreamHandle]: ...

    def close(self) -> None: ...


class AsyncTransport(Protocol):
    async def send(self, request: ApiRequest) -> Response: ...

    def stream(self, request: ApiRequest) -> AbstractAsyncContextManager[AsyncStreamHandle]: ...

    async def close(self) -> None: ...


def _network_error(e: httpx.TransportError) -> NetworkError:
    if isinstance(e, httpx.ConnectError):
        return NetworkError(f"Failed to connect: {e}")
    if isinstance(e, httpx.TimeoutException):
        return NetworkError(f"Request timed out: {e}")
    return NetworkError(f"Transport error: {e}")


def _http_options(config: Config) -> dict[str, Any]:
    return {
        "base_url": config.url,
        "headers": {"User-Agent": USER_AGENT},
        "timeout": config.timeout,
    }


def _stream_timeout(timeout: httpx.Timeout) -> httpx.Timeout:
    # Streams may stay quiet for a long time between events.
    return httpx.Timeout(timeout.connect, read=None)


class HttpTransport:
    """Transport backed by an :class:`httpx.Client`."""

    def __init__(self, http: httpx.Client) -> None:
        self._http = http

    @classmethod
    def from_config(cls, config: Config, **kwargs: Any) -> HttpTransport:
        """Create a transport with its own httpx client for ``config``."""
        return cls(httpx.Client(**{**_http_options(config), **kwargs}))

    def close(self) -> None:
        """Close the HTTP client."""
        self._http.close()

    def send(self, request: ApiRequest) -> Response:
        logger.debug("%s %s", request.method, request.path)
        try:
            response = self._http.send(self._build(request))
        except httpx.TransportError as e:
            raise _network_error(e) from e
        return Response.from_httpx(response)

    @contextmanager
    def stream(self, request: ApiRequest) -> Iterator[StreamHandle]:
        logger.debug("%s %s (stream)", request.method, request.path)
        http_request = self._build(request, timeout=_stream_timeout(self._http.timeout))
        try:
            response = self._http.send(http_request, stream=True)
        except httpx.TransportError as e:
            raise _network_error(e) from e

        try:
            if not response.is_success:
                try:
                    response.read()
                except httpx.TransportError as e:
                    raise _network_error(e) from e
                yield StreamHandle(Response.from_httpx(response), iter(()))
            else:
                yield StreamHandle(Response.from_httpx(response, body=""), self._iter_text(response))
        finally:
            response.close()
            logger.debug("Stream closed: %s %s", request.method, request.path)

    def _iter_text(self, response: httpx.Response) -> Iterator[str]:
        try:
            yield from response.iter_text()
        except httpx.TransportError as e:
            raise StreamError(f"Stream interrupted: {e}") from e

    def _build(self, request: ApiRequest, **kwargs: Any) -> httpx.Request:
        return self._http.build_request(
            request.method,
            request.path,
            params=request.params or None,
            headers=request.headers,
            content=request.body,
            **kwargs,
        )


class AsyncHttpTransport:
    """Transport backed by an :class:`httpx.AsyncClient`."""

    def __init__(self, http: httpx.AsyncClient) -> None:
        self._http = http

    @classmethod
    def from_config(cls, config: Config, **kwargs: Any) -> AsyncHttpTransport:
        """Create a transport with its own async httpx client for ``config``."""
        return cls(httpx.AsyncClient(**{**_http_options(config), **kwargs}))

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._http.aclose()

    async def send(self, request: ApiRequest) -> Response:
        logger.debug("%s %s", request.method, request.path)
        try:
            response = await self._http.send(self._build(request))
        except httpx.TransportError as e:
            raise _network_error(e) from e
        return Response.from_httpx(response)

    @asynccontextmanager
    async def stream(self, request: ApiRequest) -> AsyncIterator[AsyncStreamHandle]:
        logger.debug("%s %s (stream)", request.method, request.path)
        http_request = self._build(request, timeout=_stream_timeout(self._http.timeout))
        try:
            response = await self._http.send(http_request, stream=True)
        except httpx.TransportError as e:
            raise _network_error(e) from e

        try:
            if not response.is_success:
                try:
                    await response.aread()
                except httpx.TransportError as e:
                    raise _network_error(e) from e
                yield AsyncStreamHandle(Response.from_httpx(response), _empty())
            else:
                yield AsyncStreamHandle(Response.from_httpx(response, body=""), self._aiter_text(response))
        finally:
            await response.aclose()
            logger.debug("Stream closed: %s %s", request.method, request.path)

    async def _aiter_text(self, response: httpx.Response) -> AsyncIterator[str]:
        try:
            async for chunk in response.aiter_text():
                yield chunk
        except httpx.TransportError as e:
            raise StreamError(f"Stream interrupted: {e}") from e

    def _build(self, request: ApiRequest, **kwargs: Any) -> httpx.Request:
        return self._http.build_request(
            request.method,
            request.path,
            params=request.params or None,
            headers=request.headers,
            content=request.body,
            **kwargs,
        )


async def _empty() -> AsyncIterator[str]:
    return
    yield
