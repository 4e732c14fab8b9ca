"""Exact-window reader layered over any Source."""

from typing import Any, Mapping, Optional

from .base import Source, read_range


class SourceReader:
    """Delivers exact byte windows from a Source and counts what it fetched.

    This is what an archive parser holds on to: it asks for `fetch(start,
    length)` and gets exactly that many bytes or an IOError.
    """

    def __init__(self, source: Source, options: Optional[Mapping[str, Any]] = None):
        self.source = source
        self.options = dict(options or {})
        self.bytes_fetched = 0  # running total
        self.requests_made = 0
        self._size: Optional[int] = None

    async def size(self) -> int:
        """Return the total size of the source, asking the backend only once."""
        if self._size is None:
            self.requests_made += 1
            self._size = await self.source.size()
        return self._size

    async def fetch(self, start: int, length: int) -> bytes:
        """Return exactly `length` bytes starting at absolute offset `start`."""
        if start < 0:
            raise IOError("Start offset cannot be negative")

        self.requests_made += 1
        data = await read_range(self.source, start, length)
        self.bytes_fetched += len(data)

        if len(data) < length:
            raise IOError(f"Not enough data: requested {length} bytes at offset {start}, "
                          f"got {len(data)}")
        return data[:length]

    async def tail(self, length: int) -> bytes:
        """Return the last `length` bytes (or the whole source if it is shorter)."""
        total = await self.size()
        start = max(total - length, 0)
        return await self.fetch(start, total - start)

    def __repr__(self) -> str:
        return f"SourceReader({self.source!r})"
