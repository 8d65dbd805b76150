"""Asynchronous client for the GenAPI HTTP API."""

from __future__ import annotations

import os
from collections.abc import AsyncIterator, Mapping
from types import TracebackType
from typing import Any

from ._config import Config, resolve_config
from .client import BaseClient, decode_data, encode_data, require_stream_flag
from .sse import iter_sse_async
from .streaming import AsyncEventCallback, stream_call_async
from .transport import AsyncHttpTransport, AsyncTransport
from .types import ApiRequest, Endpoint, HttpMethod, StreamEvent


class AsyncGenApi(BaseClient):
    """Asynchronous client for the GenAPI HTTP API.

    Calls made concurrently on one instance are independent: each streaming
    call owns its own decoder and outcome.

    Example::

        async with AsyncGenApi.from_env(api_key="...") as client:
            user = await client.get_me()
            print(user)
    """

    def __init__(self, transport: AsyncTransport, config: Config) -> None:
        super().__init__(config)
        self._transport = transport

    @classmethod
    def from_env(
        cls,
        url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        config_path: str | os.PathLike[str] | None = None,
    ) -> AsyncGenApi:
        """Create a client over the default async httpx transport."""
        config = resolve_config(url, api_key, timeout, config_path)
        return cls(AsyncHttpTransport.from_config(config), config)

    async def close(self) -> None:
        """Close the transport."""
        await self._transport.close()

    async def __aenter__(self) -> AsyncGenApi:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    # -- API methods --

    async def get_me(self) -> dict[str, Any]:
        """Get information about the current user."""
        return await self._request("GET", Endpoint.ME.value)

    async def create_network_task(
        self, network_id: str, parameters: Mapping[str, Any] | None = None
    ) -> dict[str, Any]:
        """Create a task for a neural network."""
        return await self._request("POST", Endpoint.NETWORKS.join(network_id), body=encode_data(parameters))

    async def create_function_task(
        self, function_id: str, parameters: Mapping[str, Any] | None = None
    ) -> dict[str, Any]:
        """Create a task for an AI function."""
        return await self._request("POST", Endpoint.FUNCTIONS.join(function_id), body=encode_data(parameters))

    async def get_request(self, request_id: int | str) -> dict[str, Any]:
        """Get the status and result of a task by its request ID."""
        return await self._request("GET", Endpoint.REQUEST.join(request_id))

    async def create_stream_network_task(
        self,
        network_id: str,
        parameters: Mapping[str, Any],
        callback: AsyncEventCallback,
    ) -> bool:
        """Create a network task and stream its output as SSE events.

        ``callback`` may be a coroutine function; it is awaited for each event
        before the next one is read.
        """
        require_stream_flag(parameters)
        request = self._build_request("POST", Endpoint.NETWORKS.join(network_id), body=encode_data(parameters))
        response = await stream_call_async(self._transport, request, callback)
        if not response.is_success:
            raise self._error(response)
        return True

    def stream_network_task(self, network_id: str, parameters: Mapping[str, Any]) -> AsyncIterator[StreamEvent]:
        """Create a network task and iterate over its SSE events.

        Example::

            async for event in client.stream_network_task("gpt-4o", {"stream": True, ...}):
                print(event.decoded)
        """
        require_stream_flag(parameters)
        request = self._build_request("POST", Endpoint.NETWORKS.join(network_id), body=encode_data(parameters))
        return self._aiter_stream(request)

    # -- Internal --

    async def _aiter_stream(self, request: ApiRequest) -> AsyncIterator[StreamEvent]:
        async with self._transport.stream(request.as_stream()) as handle:
            if not handle.response.is_success:
                raise self._error(handle.response)
            async for event in iter_sse_async(handle.chunks):
                yield event

    async def _request(
        self,
        method: HttpMethod,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        body: str | None = None,
    ) -> Any:
        response = await self._transport.send(self._build_request(method, path, params=params, body=body))
        if not response.is_success:
            raise self._error(response)
        return decode_data(response)
