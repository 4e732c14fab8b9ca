"""Base protocols and shared types for the source layer."""

from typing import AsyncIterator, Awaitable, Callable, Optional, Protocol, runtime_checkable


DEFAULT_CHUNK_SIZE = 64 * 1024  # 64 KiB

# Lazy, finite, non-restartable. Errors may be raised while iterating.
ByteStream = AsyncIterator[bytes]


@runtime_checkable
class Source(Protocol):
    """Protocol every backend adapter satisfies."""

    async def size(self) -> int:
        """Return the total length of the resource in bytes.
        If the backend cannot report it → raise MetadataUnavailable.
        """
        ...

    async def stream(self, offset: int, length: Optional[int] = None) -> ByteStream:
        """Return the bytes of [offset, offset+length) as an async iterator.
        `length=None` reads to the end of the resource. Failures before the
        transfer starts raise here; failures during it raise from iteration.
        """
        ...


class ClosingStream:
    """Byte stream that owns an already-open resource.

    `release` runs exactly once: when the chunks are exhausted, when
    iteration fails, or on `aclose()`, whether or not iteration started.
    """

    def __init__(self, chunks: AsyncIterator[bytes], release: Callable[[], Awaitable[None]]):
        self._chunks = chunks
        self._release = release
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self):
        return self

    async def __anext__(self) -> bytes:
        if self._closed:
            raise StopAsyncIteration
        try:
            return await self._chunks.__anext__()
        except BaseException:
            await self.aclose()
            raise

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            aclose = getattr(self._chunks, "aclose", None)
            if aclose is not None:
                await aclose()
        finally:
            await self._release()


async def read_all(stream: ByteStream) -> bytes:
    """Drain `stream` into a single bytes object, closing it on every exit path."""
    chunks = []
    try:
        async for chunk in stream:
            chunks.append(chunk)
    finally:
        aclose = getattr(stream, "aclose", None)
        if aclose is not None:
            await aclose()
    return b"".join(chunks)


async def read_range(source: Source, offset: int, length: Optional[int] = None) -> bytes:
    return await read_all(await source.stream(offset, length))
