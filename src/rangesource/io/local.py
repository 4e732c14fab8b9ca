"""Local file source using positional reads in worker threads."""

import asyncio
import logging
import os
from pathlib import Path
from typing import Optional, Union

from .base import ByteStream, DEFAULT_CHUNK_SIZE

logger = logging.getLogger(__name__)


class LocalFileSource:
    """Source over a filesystem path.

    Nothing is held open between calls: `size()` stats the path and every
    `stream()` opens its own handle, which is closed once the stream is
    exhausted, fails, or is closed by the caller.
    """

    def __init__(self, path: Union[str, os.PathLike], chunk_size: int = DEFAULT_CHUNK_SIZE):
        self.path = Path(path)
        self.chunk_size = chunk_size

    async def size(self) -> int:
        """Return the file size reported by stat."""
        st = await asyncio.to_thread(os.stat, self.path)
        return st.st_size

    async def stream(self, offset: int, length: Optional[int] = None) -> ByteStream:
        """Return a lazy reader over [offset, offset+length) or [offset, EOF).

        The file is opened on first iteration, so a missing file or a bad
        offset surfaces as an error from the iterator, not from this call.
        """
        return self._read_range(offset, length)

    async def _read_range(self, offset: int, length: Optional[int]) -> ByteStream:
        logger.debug("Reading %s at offset %d (length=%s)", self.path, offset, length)
        f = await asyncio.to_thread(open, self.path, "rb")
        try:
            await asyncio.to_thread(f.seek, offset)
            remaining = length
            while remaining is None or remaining > 0:
                want = self.chunk_size if remaining is None else min(self.chunk_size, remaining)
                chunk = await asyncio.to_thread(f.read, want)
                if not chunk:
                    break
                if remaining is not None:
                    remaining -= len(chunk)
                yield chunk
        finally:
            f.close()

    def __repr__(self) -> str:
        return f"LocalFileSource({str(self.path)!r})"
