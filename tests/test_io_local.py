"""Tests for local file I/O."""

import asyncio
import pytest
import tempfile
from pathlib import Path

from rangesource.io.base import read_all, read_range
from rangesource.io.local import LocalFileSource


class TestLocalFileSource:
    """Test the local file source."""

    @pytest.mark.asyncio
    async def test_size(self):
        """Test size reported by stat."""
        test_data = b"0123456789"

        with tempfile.NamedTemporaryFile() as f:
            f.write(test_data)
            f.flush()

            source = LocalFileSource(f.name)
            assert await source.size() == 10

    @pytest.mark.asyncio
    async def test_basic_ranges(self):
        """Test various slices."""
        test_data = b"0123456789"

        with tempfile.NamedTemporaryFile() as f:
            f.write(test_data)
            f.flush()

            source = LocalFileSource(f.name)
            assert await read_range(source, 0, 5) == b"01234"
            assert await read_range(source, 5, 5) == b"56789"
            assert await read_range(source, 2, 3) == b"234"
            assert await read_range(source, 4, 0) == b""

    @pytest.mark.asyncio
    async def test_length_omitted_reads_to_eof(self):
        """Test reading from an offset to the end of the file."""
        test_data = b"0123456789"

        with tempfile.NamedTemporaryFile() as f:
            f.write(test_data)
            f.flush()

            source = LocalFileSource(f.name)
            assert await read_range(source, 0) == test_data
            assert await read_range(source, 7) == b"789"
            assert await read_range(source, 10) == b""

    @pytest.mark.asyncio
    async def test_chunked_reads(self):
        """Test that small chunk sizes still yield the exact window."""
        test_data = bytes(range(256)) * 4

        with tempfile.NamedTemporaryFile() as f:
            f.write(test_data)
            f.flush()

            source = LocalFileSource(f.name, chunk_size=7)
            stream = await source.stream(100, 500)
            chunks = [chunk async for chunk in stream]

            assert all(len(c) <= 7 for c in chunks)
            assert b"".join(chunks) == test_data[100:600]

    @pytest.mark.asyncio
    async def test_path_source(self, tmp_path):
        """Test using Path as source."""
        temp_path = tmp_path / "data.bin"
        temp_path.write_bytes(b"0123456789")

        source = LocalFileSource(temp_path)
        assert source.path == temp_path
        assert await read_range(source, 3, 4) == b"3456"

    @pytest.mark.asyncio
    async def test_missing_file_size_fails_call(self, tmp_path):
        """Test that stat failures surface from size() itself."""
        source = LocalFileSource(tmp_path / "missing.bin")

        with pytest.raises(FileNotFoundError):
            await source.size()

    @pytest.mark.asyncio
    async def test_missing_file_stream_fails_mid_sequence(self, tmp_path):
        """Test that open failures surface while iterating, not from stream()."""
        source = LocalFileSource(tmp_path / "missing.bin")

        stream = await source.stream(0, 10)  # does not raise
        with pytest.raises(FileNotFoundError):
            await read_all(stream)

    @pytest.mark.asyncio
    async def test_handle_released_on_close(self, tmp_path, monkeypatch):
        """Test that an abandoned stream closes its file handle."""
        temp_path = tmp_path / "data.bin"
        temp_path.write_bytes(b"x" * 1000)
        opened = []

        real_open = open

        def tracking_open(*args, **kwargs):
            f = real_open(*args, **kwargs)
            opened.append(f)
            return f

        monkeypatch.setattr("builtins.open", tracking_open)

        source = LocalFileSource(temp_path, chunk_size=10)
        stream = await source.stream(0, 1000)
        first = await stream.__anext__()
        assert first == b"x" * 10
        assert len(opened) == 1 and not opened[0].closed

        await stream.aclose()
        assert opened[0].closed

    @pytest.mark.asyncio
    async def test_concurrent_disjoint_ranges(self, tmp_path):
        """Test concurrent streams against one source do not interfere."""
        test_data = bytes(range(256)) * 40
        temp_path = tmp_path / "data.bin"
        temp_path.write_bytes(test_data)

        source = LocalFileSource(temp_path, chunk_size=16)
        windows = [(0, 1000), (1000, 2000), (5000, 123), (9000, None)]
        results = await asyncio.gather(*(read_range(source, o, n) for o, n in windows))

        for (o, n), data in zip(windows, results):
            end = None if n is None else o + n
            assert data == test_data[o:end]
