"""Streaming responses that surface start-of-stream failures as JSON errors."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator, AsyncIterator

from fastapi.responses import StreamingResponse

from gddforge.errors import GDDForgeError

logger = logging.getLogger(__name__)

TEXT_MEDIA_TYPE = "text/plain; charset=utf-8"


async def primed_stream_response(stream: AsyncGenerator[str, None]) -> StreamingResponse:
    """Pull the first chunk before any header goes out.

    Auth and network failures usually happen on the first read; raising
    here lets the exception handler answer with a JSON 5xx instead of a
    200 with an empty body. Failures after that only truncate the body.
    """
    first: str | None = None
    try:
        first = await anext(stream)
    except StopAsyncIteration:
        pass

    async def body() -> AsyncIterator[str]:
        try:
            if first is not None:
                yield first
            async for chunk in stream:
                yield chunk
        except GDDForgeError as e:
            logger.error("stream aborted after headers were sent: %s", e.code)
        finally:
            await stream.aclose()

    return StreamingResponse(body(), media_type=TEXT_MEDIA_TYPE)


async def collect(stream: AsyncGenerator[str, None]) -> str:
    """Drain a stream into one string."""
    parts: list[str] = []
    try:
        async for chunk in stream:
            parts.append(chunk)
    finally:
        await stream.aclose()
    return "".join(parts)
