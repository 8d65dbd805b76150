"""SSE stream parsing for the GenAPI SDK."""

from __future__ import annotations

import re
from collections.abc import AsyncIterable, AsyncIterator, Iterable, Iterator

from httpx_sse import ServerSentEvent

from .types import StreamEvent

_LINE_END = re.compile(r"\r\n|\r|\n")
_BOM = "\ufeff"


class SSEDecoder:
    """Incremental Server-Sent Events decoder.

    Text is fed in arbitrary chunks; complete frames are returned as soon as
    their terminating blank line has been seen. Partial lines and partial
    frames are kept until the next :meth:`feed`.

    Only frames with at least one ``data:`` line produce an event. Several
    ``data:`` lines in one frame are joined with ``\\n``.
    """

    def __init__(self) -> None:
        self._buffer = ""
        self._started = False
        self._event = ""
        self._data: list[str] = []
        self._id: str | None = None
        self._retry: int | None = None

    @property
    def pending(self) -> bool:
        """True if fed text has not yet formed a complete frame."""
        return bool(self._buffer) or bool(self._data) or bool(self._event)

    def feed(self, chunk: str) -> list[StreamEvent]:
        """Consume a chunk of text and return the events it completes."""
        if not self._started and chunk:
            self._started = True
            chunk = chunk.removeprefix(_BOM)
        self._buffer += chunk

        events: list[StreamEvent] = []
        consumed = 0
        for match in _LINE_END.finditer(self._buffer):
            # A lone \r at the very end may be the first half of \r\n.
            if match.group() == "\r" and match.end() == len(self._buffer):
                break
            line = self._buffer[consumed : match.start()]
            consumed = match.end()
            event = self._process_line(line)
            if event is not None:
                events.append(event)
        self._buffer = self._buffer[consumed:]
        return events

    def _process_line(self, line: str) -> StreamEvent | None:
        if not line:
            return self._dispatch()
        if line.startswith(":"):
            return None

        field, _, value = line.partition(":")
        value = value.removeprefix(" ")

        if field == "data":
            self._data.append(value)
        elif field == "event":
            self._event = value
        elif field == "id":
            if "\0" not in value:
                self._id = value
        elif field == "retry":
            if value.isdigit():
                self._retry = int(value)
        return None

    def _dispatch(self) -> StreamEvent | None:
        data, event = self._data, self._event
        self._data = []
        self._event = ""
        if not data:
            return None
        sse = ServerSentEvent(event=event, data="\n".join(data), id=self._id, retry=self._retry)
        return StreamEvent.from_sse(sse)


def iter_sse_sync(chunks: Iterable[str]) -> Iterator[StreamEvent]:
    """Parse SSE events from an iterable of text chunks."""
    decoder = SSEDecoder()
    for chunk in chunks:
        yield from decoder.feed(chunk)


async def iter_sse_async(chunks: AsyncIterable[str]) -> AsyncIterator[StreamEvent]:
    """Parse SSE events from an async iterable of text chunks."""
    decoder = SSEDecoder()
    async for chunk in chunks:
        for event in decoder.feed(chunk):
            yield event
