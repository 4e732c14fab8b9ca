"""In-memory byte source."""

from typing import Optional, Union

from .base import ByteStream


async def _single_chunk(data: bytes) -> ByteStream:
    yield data


class StaticSource:
    """Source over an immutable in-memory buffer."""

    def __init__(self, data: Union[bytes, bytearray, memoryview]):
        self._data = bytes(data)

    async def size(self) -> int:
        return len(self._data)

    async def stream(self, offset: int, length: Optional[int] = None) -> ByteStream:
        end = None if length is None else offset + length
        return _single_chunk(self._data[offset:end])

    def __repr__(self) -> str:
        return f"StaticSource(<{len(self._data)} bytes>)"
