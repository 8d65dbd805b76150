"""Streaming calls: feed an SSE response through the decoder into a callback."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from typing import Any

from .response import Response
from .sse import SSEDecoder
from .transport import AsyncTransport, Transport
from .types import ApiRequest, StreamEvent

logger = logging.getLogger(__name__)

EventCallback = Callable[[StreamEvent], Any]
AsyncEventCallback = Callable[[StreamEvent], Any]


def stream_call(transport: Transport, request: ApiRequest, on_event: EventCallback) -> Response:
    """Send ``request`` in stream mode and pass every SSE event to ``on_event``.

    Returns the response envelope: the failed response (with its body) if the
    server answered with a non-2xx status, otherwise the initial status and
    headers with an empty body once the stream has ended. Events are delivered
    in order, each before the next chunk is read. A connection failure after
    the stream started raises :class:`~genapi.errors.StreamError`.
    """
    with transport.stream(request.as_stream()) as handle:
        if not handle.response.is_success:
            return handle.response

        decoder = SSEDecoder()
        for chunk in handle.chunks:
            for event in decoder.feed(chunk):
                on_event(event)
        if decoder.pending:
            logger.debug("Discarding incomplete SSE frame at end of stream")
        return handle.response


async def stream_call_async(
    transport: AsyncTransport, request: ApiRequest, on_event: AsyncEventCallback
) -> Response:
    """Async variant of :func:`stream_call`.

    ``on_event`` may be a plain function or a coroutine function; awaitable
    results are awaited before the next event is delivered.
    """
    async with transport.stream(request.as_stream()) as handle:
        if not handle.response.is_success:
            return handle.response

        decoder = SSEDecoder()
        async for chunk in handle.chunks:
            for event in decoder.feed(chunk):
                result = on_event(event)
                if inspect.isawaitable(result):
                    await result
        if decoder.pending:
            logger.debug("Discarding incomplete SSE frame at end of stream")
        return handle.response
