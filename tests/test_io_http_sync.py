"""Tests for the requests-backed request issuer."""

import asyncio

import pytest
import requests
from werkzeug import Request, Response

from rangesource.core.model import MetadataUnavailable, NotFound, TransportError
from rangesource.io.base import read_range
from rangesource.io.http_async import RangeRequestSource
from rangesource.io.http_sync import RequestsRequester

TEST_DATA = b"abcdefghijklmnopqrstuvwxyz" * 40  # 1040 bytes


def _handle_request(request: Request) -> Response:
    """Serve TEST_DATA with inclusive Range semantics."""
    range_header = request.headers.get("Range")
    if range_header:
        start, _, end = range_header.replace("bytes=", "").partition("-")
        start = int(start)
        end = int(end) if end else len(TEST_DATA) - 1
        return Response(TEST_DATA[start:end + 1], status=206)
    return Response(TEST_DATA, status=200)


@pytest.fixture
def session():
    with requests.Session() as s:
        yield s


class TestRequestsRequester:
    """Test RequestsRequester against a live server."""

    @pytest.mark.asyncio
    async def test_size_and_ranges(self, httpserver, session):
        """Test size probe and range reads."""
        httpserver.expect_request("/data").respond_with_handler(_handle_request)
        source = RangeRequestSource(RequestsRequester(session, chunk_size=100), httpserver.url_for("/data"))

        assert await source.size() == len(TEST_DATA)
        assert await read_range(source, 0, 25) == TEST_DATA[0:26]
        assert await read_range(source, 1000) == TEST_DATA[1000:]

    @pytest.mark.asyncio
    async def test_chunking(self, httpserver, session):
        """Test the body arrives in chunk_size pieces."""
        httpserver.expect_request("/data").respond_with_handler(_handle_request)
        source = RangeRequestSource(RequestsRequester(session, chunk_size=64), httpserver.url_for("/data"))

        stream = await source.stream(0)
        chunks = [chunk async for chunk in stream]
        assert len(chunks) > 1
        assert all(len(c) <= 64 for c in chunks)
        assert b"".join(chunks) == TEST_DATA

    @pytest.mark.asyncio
    async def test_concurrent_ranges(self, httpserver, session):
        """Test concurrent range reads through worker threads."""
        httpserver.expect_request("/data").respond_with_handler(_handle_request)
        source = RangeRequestSource(RequestsRequester(session), httpserver.url_for("/data"))

        a, b = await asyncio.gather(read_range(source, 0, 9), read_range(source, 500, 9))
        assert a == TEST_DATA[0:10]
        assert b == TEST_DATA[500:510]

    @pytest.mark.asyncio
    async def test_not_found(self, httpserver, session):
        """Test 404 maps to NotFound."""
        httpserver.expect_request("/gone").respond_with_data("nope", status=404)
        source = RangeRequestSource(RequestsRequester(session), httpserver.url_for("/gone"))

        with pytest.raises(NotFound):
            await source.stream(0, 10)

    @pytest.mark.asyncio
    async def test_missing_length(self, httpserver, session):
        """Test a streamed response without Content-Length."""
        def chunked(request: Request) -> Response:
            return Response(iter([b"abc", b"def"]), status=200)

        httpserver.expect_request("/chunked").respond_with_handler(chunked)
        source = RangeRequestSource(RequestsRequester(session), httpserver.url_for("/chunked"))

        with pytest.raises(MetadataUnavailable):
            await source.size()

    @pytest.mark.asyncio
    async def test_connection_refused(self, session):
        """Test connection failures map to TransportError."""
        source = RangeRequestSource(RequestsRequester(session, timeout=2), "http://127.0.0.1:1/x")

        with pytest.raises(TransportError):
            await source.size()
