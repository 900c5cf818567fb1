from __future__ import annotations

from collections.abc import AsyncGenerator, AsyncIterator

import httpx
from fastapi.responses import StreamingResponse

# Existing OpenAI-compatible clients of the proxy expect text/plain here.
STREAM_MEDIA_TYPE = "text/plain; charset=utf-8"


def sse_headers() -> dict[str, str]:
    # Centralize the streaming header contract used by the proxy.
    return {
        "Cache-Control": "no-cache",
        "Connection": "keep-alive",
    }


def streaming_response(
    *,
    stream: AsyncIterator[str],
    headers: dict[str, str] | None = None,
) -> StreamingResponse:
    return StreamingResponse(
        stream,
        media_type=STREAM_MEDIA_TYPE,
        headers=headers or sse_headers(),
    )


def with_upstream_release(
    *,
    original_stream: AsyncGenerator[str, None],
    upstream_response: httpx.Response,
) -> AsyncGenerator[str, None]:
    """Close the upstream response however the outgoing stream ends.

    This covers normal completion, upstream failure and the caller going
    away, which also aborts the in-flight upstream request.
    """

    async def _wrapped() -> AsyncGenerator[str, None]:
        try:
            async for chunk in original_stream:
                yield chunk
        finally:
            await original_stream.aclose()
            await upstream_response.aclose()

    return _wrapped()
