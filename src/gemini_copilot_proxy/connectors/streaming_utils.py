"""
Utilities for reading server-sent event streams from the backend.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterable, AsyncIterator

logger = logging.getLogger(__name__)


async def iter_sse_data(lines: AsyncIterable[str]) -> AsyncIterator[str]:
    """Yield the ``data`` payload of each server-sent event.

    Events are separated by blank lines. Multiple ``data:`` lines within one
    event are joined with newlines. Comment lines and events without data
    (``event:``/``id:``/``retry:`` only) yield nothing.

    Args:
        lines: Decoded lines of the event stream, without line terminators

    Yields:
        One data payload per event, in arrival order
    """
    data_lines: list[str] = []
    async for raw_line in lines:
        line = raw_line.rstrip("\r\n")
        if not line:
            if data_lines:
                yield "\n".join(data_lines)
                data_lines = []
            continue
        if line.startswith(":"):
            continue

        field, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]
        if field == "data":
            data_lines.append(value)
        else:
            logger.debug("Ignoring SSE field %r", field)

    # Stream ended without a trailing blank line
    if data_lines:
        yield "\n".join(data_lines)
