"""Example: Cancelling a streamed response. Run with: python examples/cancellable_stream.py

Demonstrates CancellationToken with abortable_stream and
handle_stream_with_errors: chunks are routed by kind, and the stream
ends cleanly as soon as the token is cancelled.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from typing import Any

from agent_governor import CancellationToken, StreamHandlers, handle_stream_with_errors
from agent_governor.resilience.cancellation import abortable_stream


async def fake_stream() -> AsyncIterator[Any]:
    """Yield text deltas with an interleaved tool error."""
    for i in range(20):
        if i == 3:
            yield {"type": "tool-error", "error": RuntimeError("exit 2"), "tool_name": "grep"}
        yield {"type": "text-delta", "text": f"token{i} "}
        await asyncio.sleep(0.01)


async def main() -> None:
    token = CancellationToken()
    token.on_cancel(lambda: print("\n[cancelled]"))
    received: list[str] = []

    def on_data(chunk: dict[str, Any]) -> None:
        received.append(chunk["text"])
        print(chunk["text"], end="", flush=True)

    handlers = StreamHandlers(
        on_error=lambda e: print(f"\n[stream error] {e}"),
        on_tool_error=lambda e, name: print(f"\n[tool {name} failed] {e}"),
    )

    # Simulate the user pressing stop after a short while.
    asyncio.get_running_loop().call_later(0.08, token.cancel, "user pressed stop")
    await handle_stream_with_errors(abortable_stream(fake_stream(), token), on_data, handlers)
    print(f"received {len(received)} chunks before cancellation ({token.reason})")


if __name__ == "__main__":
    asyncio.run(main())
