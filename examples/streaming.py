"""Streaming example for the GenAPI Python SDK."""

import sys

from genapi import GenApi, StreamEvent

client = GenApi.from_env()


def on_event(event: StreamEvent) -> None:
    if isinstance(event.decoded, dict):
        sys.stdout.write(str(event.decoded.get("delta", "")))
    else:
        print(f"\n[{event.event}] {event.decoded}")


client.create_stream_network_task(
    "gpt-4o",
    {"stream": True, "messages": [{"role": "user", "content": "Tell me a joke"}]},
    on_event,
)

# Or iterate over the events directly
for event in client.stream_network_task("gpt-4o", {"stream": True, "messages": [{"role": "user", "content": "Hi"}]}):
    print(event.decoded)
