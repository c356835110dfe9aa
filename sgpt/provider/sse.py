"""Incremental server-sent-event decoding"""

from dataclasses import dataclass
from typing import AsyncIterator

DONE = "[DONE]"


@dataclass(frozen=True)
class ServerSentEvent:
    """One data line, tagged with the event name in effect when it arrived"""
    data: str
    event: str | None = None

    @property
    def is_done(self) -> bool:
        return self.data.strip() == DONE


def parse_field(line: str) -> tuple[str, str]:
    """Split an SSE line into (field, value), dropping one leading space"""
    field, _, value = line.partition(":")
    if value.startswith(" "):
        value = value[1:]
    return field, value


async def aiter_sse(lines: AsyncIterator[str]) -> AsyncIterator[ServerSentEvent]:
    """Yield every data line as soon as it is read.

    Data lines are not buffered until the blank line that ends an event, so
    tokens reach the caller without waiting for the dispatch boundary. A blank
    line clears the current event name.
    """
    event: str | None = None
    async for raw in lines:
        line = raw.rstrip("\r\n")
        if not line:
            event = None
            continue
        if line.startswith(":"):
            continue

        field, value = parse_field(line)
        if field == "event":
            event = value.strip()
        elif field == "data":
            yield ServerSentEvent(data=value, event=event)
