"""I/O layer for rangesource - one Source adapter per backend."""

# Re-export these for import convenience
from .base import Source, ByteStream, ClosingStream, DEFAULT_CHUNK_SIZE, read_all, read_range
from .static import StaticSource
from .local import LocalFileSource
from .http_async import RangeRequestSource, HttpxRequester, open_http_source
from .http_sync import RequestsRequester
from .s3 import ObjectStorageSource, ClientVariant
from .reader import SourceReader


def open_source(target, *, sync: bool = False) -> Source:
    """Factory function to create the appropriate Source for a target."""
    if isinstance(target, (bytes, bytearray, memoryview)):
        return StaticSource(target)

    if isinstance(target, Source):  # already conforms
        return target

    target_str = str(target)
    if target_str.startswith(('http://', 'https://')):
        requester = RequestsRequester() if sync else HttpxRequester()
        return open_http_source(target_str, requester=requester)
    return LocalFileSource(target)
