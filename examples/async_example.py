"""Async example for the GenAPI Python SDK."""

import asyncio

from genapi import AsyncGenApi, StreamEvent


async def main() -> None:
    async with AsyncGenApi.from_env() as client:
        print("Me:", await client.get_me())

        # Two tasks at once
        first, second = await asyncio.gather(
            client.create_network_task("gpt-4o", {"messages": [{"role": "user", "content": "One"}]}),
            client.create_function_task("summarize", {"text": "A long text..."}),
        )
        print(first, second)

        # Async streaming with a coroutine callback
        async def on_event(event: StreamEvent) -> None:
            print(event.decoded)

        await client.create_stream_network_task(
            "gpt-4o",
            {"stream": True, "messages": [{"role": "user", "content": "Stream please"}]},
            on_event,
        )


asyncio.run(main())
