import pytest

from nim_proxy.api.services.streaming import (
    STREAM_MEDIA_TYPE,
    sse_headers,
    streaming_response,
    with_upstream_release,
)


class FakeUpstreamResponse:
    def __init__(self) -> None:
        self.closed = False

    async def aclose(self) -> None:
        self.closed = True


@pytest.mark.unit
@pytest.mark.asyncio
async def test_with_upstream_release_closes_after_completion():
    upstream = FakeUpstreamResponse()

    async def gen():
        yield "a"
        yield "b"

    out = [x async for x in with_upstream_release(original_stream=gen(), upstream_response=upstream)]

    assert out == ["a", "b"]
    assert upstream.closed


@pytest.mark.unit
@pytest.mark.asyncio
async def test_with_upstream_release_closes_when_consumer_stops_early():
    upstream = FakeUpstreamResponse()
    finished = []

    async def gen():
        try:
            yield "a"
            yield "b"
        finally:
            finished.append(True)

    wrapped = with_upstream_release(original_stream=gen(), upstream_response=upstream)
    assert await wrapped.__anext__() == "a"
    await wrapped.aclose()

    assert upstream.closed
    assert finished == [True]


@pytest.mark.unit
def test_streaming_response_headers():
    async def gen():
        yield "x"

    response = streaming_response(stream=gen(), headers=sse_headers())

    assert response.media_type == STREAM_MEDIA_TYPE
    assert response.headers["cache-control"] == "no-cache"
    assert response.headers["connection"] == "keep-alive"
