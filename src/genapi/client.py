"""Synchronous client for the GenAPI HTTP API."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterator, Mapping
from typing import Any, TypeVar

from ._config import Config, resolve_config
from .errors import ApiError, MissingTokenError, StreamParameterNotSetError, error_from_response
from .response import Response
from .sse import iter_sse_sync
from .streaming import EventCallback, stream_call
from .transport import HttpTransport, Transport
from .types import ApiRequest, Endpoint, HttpMethod, StreamEvent

logger = logging.getLogger(__name__)

_C = TypeVar("_C", bound="BaseClient")

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


def encode_data(data: Mapping[str, Any] | None) -> str:
    """Serialize request parameters as compact JSON; no parameters is ``{}``."""
    if not data:
        return "{}"
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


def decode_data(response: Response) -> Any:
    """Parse a response body as JSON."""
    return json.loads(response.body)


def require_stream_flag(parameters: Mapping[str, Any] | None) -> None:
    """Raise unless ``parameters`` asks for a streamed response."""
    if not parameters or not parameters.get("stream"):
        raise StreamParameterNotSetError()


class BaseClient:
    """Request building and error mapping shared by the sync and async clients.

    The bearer token is read when each request is built; replacing it with
    :meth:`set_auth_token` while calls are in flight is last-writer-wins.
    """

    def __init__(self, config: Config) -> None:
        self.config = config
        self._token = config.api_key

    def set_auth_token(self: _C, token: str | None) -> _C:
        """Set the bearer token used for subsequent requests."""
        self._token = token
        return self

    def _headers(self) -> dict[str, str]:
        if not self._token:
            raise MissingTokenError()
        return {**DEFAULT_HEADERS, "Authorization": f"Bearer {self._token}"}

    def _build_request(
        self,
        method: HttpMethod,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        body: str | None = None,
    ) -> ApiRequest:
        return ApiRequest(
            method=method,
            path=path,
            params=dict(params or {}),
            headers=self._headers(),
            body=body,
        )

    def _error(self, response: Response) -> ApiError:
        logger.warning("API error: %s, body: %s", response.status_code, response.body)
        return error_from_response(response)


class GenApi(BaseClient):
    """Synchronous client for the GenAPI HTTP API.

    Example::

        with GenApi.from_env(api_key="...") as client:
            task = client.create_network_task("gpt-4o", {"messages": [...]})
            print(client.get_request(task["request_id"]))
    """

    def __init__(self, transport: Transport, config: Config) -> None:
        super().__init__(config)
        self._transport = transport

    @classmethod
    def from_env(
        cls,
        url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        config_path: str | os.PathLike[str] | None = None,
    ) -> GenApi:
        """Create a client over the default httpx transport.

        Settings come from the arguments, then ``GENAPI_*`` environment
        variables, then the configuration file, then the defaults.
        """
        config = resolve_config(url, api_key, timeout, config_path)
        return cls(HttpTransport.from_config(config), config)

    def close(self) -> None:
        """Close the transport."""
        self._transport.close()

    def __enter__(self) -> GenApi:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    # -- API methods --

    def get_me(self) -> dict[str, Any]:
        """Get information about the current user."""
        return self._request("GET", Endpoint.ME.value)

    def create_network_task(self, network_id: str, parameters: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Create a task for a neural network."""
        return self._request("POST", Endpoint.NETWORKS.join(network_id), body=encode_data(parameters))

    def create_function_task(self, function_id: str, parameters: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Create a task for an AI function."""
        return self._request("POST", Endpoint.FUNCTIONS.join(function_id), body=encode_data(parameters))

    def get_request(self, request_id: int | str) -> dict[str, Any]:
        """Get the status and result of a task by its request ID."""
        return self._request("GET", Endpoint.REQUEST.join(request_id))

    def create_stream_network_task(
        self,
        network_id: str,
        parameters: Mapping[str, Any],
        callback: EventCallback,
    ) -> bool:
        """Create a network task and stream its output as SSE events.

        Only for text networks; ``parameters`` must contain ``stream=True``.
        ``callback`` receives every :class:`StreamEvent` in arrival order.
        """
        require_stream_flag(parameters)
        request = self._build_request("POST", Endpoint.NETWORKS.join(network_id), body=encode_data(parameters))
        response = stream_call(self._transport, request, callback)
        if not response.is_success:
            raise self._error(response)
        return True

    def stream_network_task(self, network_id: str, parameters: Mapping[str, Any]) -> Iterator[StreamEvent]:
        """Create a network task and iterate over its SSE events.

        Example::

            for event in client.stream_network_task("gpt-4o", {"stream": True, ...}):
                print(event.decoded)
        """
        require_stream_flag(parameters)
        request = self._build_request("POST", Endpoint.NETWORKS.join(network_id), body=encode_data(parameters))
        return self._iter_stream(request)

    # -- Internal --

    def _iter_stream(self, request: ApiRequest) -> Iterator[StreamEvent]:
        with self._transport.stream(request.as_stream()) as handle:
            if not handle.response.is_success:
                raise self._error(handle.response)
            yield from iter_sse_sync(handle.chunks)

    def _request(
        self,
        method: HttpMethod,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        body: str | None = None,
    ) -> Any:
        response = self._transport.send(self._build_request(method, path, params=params, body=body))
        if not response.is_success:
            raise self._error(response)
        return decode_data(response)
