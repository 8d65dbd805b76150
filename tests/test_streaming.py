"""Tests for streaming calls against stub transports."""

from __future__ import annotations

import json
from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager, contextmanager

import httpx
import pytest

from genapi import (
    ApiRequest,
    AsyncGenApi,
    Config,
    GenApi,
    InternalServerError,
    Response,
    StreamError,
    StreamEvent,
    StreamHandle,
    StreamParameterNotSetError,
)
from genapi.streaming import stream_call, stream_call_async
from genapi.transport import AsyncStreamHandle, HttpTransport

CONFIG = Config(url="http://localhost:9999", api_key="test-token", timeout=5.0)
REQUEST = ApiRequest(method="POST", path="/api/v1/networks/gpt", body="{}")


class StubTransport:
    """Records calls and replays a scripted streaming response."""

    def __init__(self, response: Response, chunks: list[str] = (), error: Exception | None = None) -> None:
        self.response = response
        self.chunks = list(chunks)
        self.error = error
        self.requests: list[ApiRequest] = []
        self.log: list[str] = []
        self.closed = False

    def send(self, request: ApiRequest) -> Response:
        self.requests.append(request)
        return self.response

    @contextmanager
    def stream(self, request: ApiRequest) -> Iterator[StreamHandle]:
        self.requests.append(request)
        try:
            yield StreamHandle(self.response, self._chunks())
        finally:
            self.closed = True

    def _chunks(self) -> Iterator[str]:
        for chunk in self.chunks:
            self.log.append(f"chunk:{chunk!r}")
            yield chunk
        if self.error is not None:
            raise self.error

    def close(self) -> None:
        pass


class AsyncStubTransport(StubTransport):
    async def send(self, request: ApiRequest) -> Response:  # type: ignore[override]
        self.requests.append(request)
        return self.response

    @asynccontextmanager
    async def stream(self, request: ApiRequest) -> AsyncIterator[AsyncStreamHandle]:  # type: ignore[override]
        self.requests.append(request)
        try:
            yield AsyncStreamHandle(self.response, self._achunks())
        finally:
            self.closed = True

    async def _achunks(self) -> AsyncIterator[str]:
        for chunk in self._chunks():
            yield chunk

    async def close(self) -> None:  # type: ignore[override]
        pass


OK = Response(status_code=200, headers={"content-type": "text/event-stream"})


class TestStreamCall:
    def test_delivers_events_in_order(self) -> None:
        transport = StubTransport(OK, ["data: 1\n\ndata: 2\n\n", "data: 3\n\n"])
        events: list[StreamEvent] = []
        response = stream_call(transport, REQUEST, events.append)
        assert response is OK
        assert response.body == ""
        assert [e.decoded for e in events] == [1, 2, 3]
        assert transport.closed

    def test_events_delivered_before_next_chunk(self) -> None:
        transport = StubTransport(OK, ["data: a\n\n", "data: b\n\n"])
        stream_call(transport, REQUEST, lambda e: transport.log.append(f"event:{e.decoded}"))
        assert transport.log == ["chunk:'data: a\\n\\n'", "event:a", "chunk:'data: b\\n\\n'", "event:b"]

    def test_sends_sse_accept_header(self) -> None:
        transport = StubTransport(OK, [])
        stream_call(transport, REQUEST, lambda e: None)
        assert transport.requests[0].headers["Accept"] == "text/event-stream"
        assert "Accept" not in REQUEST.headers

    def test_error_status_returns_failed_envelope(self) -> None:
        failed = Response(status_code=500, body='{"error":"boom"}')
        transport = StubTransport(failed, ["data: 1\n\n"])
        events: list[StreamEvent] = []
        response = stream_call(transport, REQUEST, events.append)
        assert not response.is_success
        assert response.status_code == 500
        assert events == []
        assert transport.closed

    def test_trailing_partial_frame_is_discarded(self) -> None:
        transport = StubTransport(OK, ["data: 1\n\n", "data: partial"])
        events: list[StreamEvent] = []
        response = stream_call(transport, REQUEST, events.append)
        assert response.is_success
        assert [e.decoded for e in events] == [1]

    def test_mid_stream_failure_raises(self) -> None:
        transport = StubTransport(OK, ["data: 1\n\n"], error=StreamError("reset"))
        events: list[StreamEvent] = []
        with pytest.raises(StreamError):
            stream_call(transport, REQUEST, events.append)
        assert [e.decoded for e in events] == [1]
        assert transport.closed

    def test_callback_error_propagates_and_closes(self) -> None:
        transport = StubTransport(OK, ["data: 1\n\n"])

        def explode(event: StreamEvent) -> None:
            raise RuntimeError("callback failed")

        with pytest.raises(RuntimeError):
            stream_call(transport, REQUEST, explode)
        assert transport.closed


class TestStreamCallAsync:
    async def test_delivers_events(self) -> None:
        transport = AsyncStubTransport(OK, ['data: {"a"', ":1}\n\n", "data: x\n\n"])
        events: list[StreamEvent] = []
        response = await stream_call_async(transport, REQUEST, events.append)
        assert response.is_success
        assert [e.decoded for e in events] == [{"a": 1}, "x"]
        assert transport.closed

    async def test_awaits_coroutine_callback(self) -> None:
        transport = AsyncStubTransport(OK, ["data: 1\n\n", "data: 2\n\n"])
        seen: list[int] = []

        async def on_event(event: StreamEvent) -> None:
            seen.append(event.decoded)

        await stream_call_async(transport, REQUEST, on_event)
        assert seen == [1, 2]

    async def test_error_status_returns_failed_envelope(self) -> None:
        transport = AsyncStubTransport(Response(status_code=500), ["data: 1\n\n"])
        events: list[StreamEvent] = []
        response = await stream_call_async(transport, REQUEST, events.append)
        assert response.status_code == 500
        assert not response.is_success
        assert events == []

    async def test_mid_stream_failure_raises(self) -> None:
        transport = AsyncStubTransport(OK, ["data: 1\n\n"], error=StreamError("reset"))
        with pytest.raises(StreamError):
            await stream_call_async(transport, REQUEST, lambda e: None)
        assert transport.closed


class TestStreamFlag:
    @pytest.mark.parametrize("parameters", [{}, {"stream": False}, {"prompt": "hi"}, None])
    def test_sync_requires_stream_flag(self, parameters: dict | None) -> None:
        transport = StubTransport(OK)
        client = GenApi(transport, CONFIG)
        with pytest.raises(StreamParameterNotSetError):
            client.create_stream_network_task("gpt", parameters, lambda e: None)  # type: ignore[arg-type]
        with pytest.raises(StreamParameterNotSetError):
            client.stream_network_task("gpt", parameters)  # type: ignore[arg-type]
        assert transport.requests == []

    @pytest.mark.parametrize("parameters", [{}, {"stream": False}])
    async def test_async_requires_stream_flag(self, parameters: dict) -> None:
        transport = AsyncStubTransport(OK)
        client = AsyncGenApi(transport, CONFIG)
        with pytest.raises(StreamParameterNotSetError):
            await client.create_stream_network_task("gpt", parameters, lambda e: None)
        with pytest.raises(StreamParameterNotSetError):
            client.stream_network_task("gpt", parameters)
        assert transport.requests == []


class TestClientOverStub:
    def test_stream_task_returns_true(self) -> None:
        transport = StubTransport(OK, ["data: hello\n\n"])
        events: list[StreamEvent] = []
        assert GenApi(transport, CONFIG).create_stream_network_task("gpt", {"stream": True}, events.append) is True
        assert [e.decoded for e in events] == ["hello"]
        assert transport.requests[0].body == '{"stream":true}'

    def test_stream_task_raises_classified_error(self) -> None:
        transport = StubTransport(Response(status_code=500, body="oops"))
        with pytest.raises(InternalServerError) as exc_info:
            GenApi(transport, CONFIG).create_stream_network_task("gpt", {"stream": True}, lambda e: None)
        assert exc_info.value.body == "oops"

    def test_concurrent_requests_do_not_share_stream_mode(self) -> None:
        transport = StubTransport(Response(status_code=200, body="{}"), ["data: 1\n\n"])
        client = GenApi(transport, CONFIG)
        client.create_stream_network_task("gpt", {"stream": True}, lambda e: None)
        client.get_me()
        assert transport.requests[0].headers["Accept"] == "text/event-stream"
        assert transport.requests[1].headers["Accept"] == "application/json"


class BrokenStream(httpx.SyncByteStream):
    def __iter__(self) -> Iterator[bytes]:
        yield b"data: 1\n\n"
        raise httpx.ReadError("connection reset")


class TestHttpTransportStream:
    def test_read_error_becomes_stream_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, headers={"content-type": "text/event-stream"}, stream=BrokenStream())

        transport = HttpTransport(httpx.Client(base_url="http://test", transport=httpx.MockTransport(handler)))
        events: list[StreamEvent] = []
        with pytest.raises(StreamError):
            stream_call(transport, REQUEST, events.append)
        assert [e.decoded for e in events] == [1]

    def test_error_body_is_read(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(422, json={"error": "bad params"})

        transport = HttpTransport(httpx.Client(base_url="http://test", transport=httpx.MockTransport(handler)))
        response = stream_call(transport, REQUEST, lambda e: None)
        assert response.status_code == 422
        assert json.loads(response.body) == {"error": "bad params"}


class TestHttpTransportSend:
    def test_builds_url_with_query(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, text='{"ok":true}', headers={"X-Id": "1"})

        transport = HttpTransport(httpx.Client(base_url="http://test", transport=httpx.MockTransport(handler)))
        request = ApiRequest(method="GET", path="/api/v1/user", params={"page": 2}, headers={"Authorization": "Bearer t"})
        response = transport.send(request)
        assert response.is_success
        assert response.body == '{"ok":true}'
        assert response.headers["x-id"] == "1"
        assert str(seen[0].url) == "http://test/api/v1/user?page=2"
        assert seen[0].headers["authorization"] == "Bearer t"

    def test_stream_has_no_read_timeout(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, headers={"content-type": "text/event-stream"}, text="data: 1\n\n")

        http = httpx.Client(base_url="http://test", timeout=7.0, transport=httpx.MockTransport(handler))
        stream_call(HttpTransport(http), REQUEST, lambda e: None)
        HttpTransport(http).send(REQUEST)
        assert seen[0].extensions["timeout"]["read"] is None
        assert seen[0].extensions["timeout"]["connect"] == 7.0
        assert seen[1].extensions["timeout"]["read"] == 7.0
