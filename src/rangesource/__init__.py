"""rangesource - byte-range access to buffers, files, HTTP endpoints and S3 objects."""

from .core.model import (                                             # re-export
    Result, ConfigurationError, MetadataUnavailable, NotFound, TransportError,
)
from .core.consumer import ArchiveConsumer, consume
from .io import (
    Source, ByteStream, read_all, read_range, open_source,
    StaticSource, LocalFileSource, RangeRequestSource, ObjectStorageSource,
    ClientVariant, HttpxRequester, RequestsRequester, SourceReader,
)


def open_buffer(buffer, options=None, *, consumer: ArchiveConsumer | None = None):
    """Serve an in-memory buffer to the archive consumer."""
    return consume(StaticSource(buffer), options, consumer)


def open_file(path, options=None, *, consumer: ArchiveConsumer | None = None):
    """Serve a local file to the archive consumer."""
    return consume(LocalFileSource(path), options, consumer)


def open_url(request, params, options=None, *, consumer: ArchiveConsumer | None = None):
    """Serve an HTTP resource, fetched through `request`, to the archive consumer.

    `params` is either the URL or a mapping with at least `url` (and
    optionally `headers`); a missing URL raises ConfigurationError here.
    """
    return consume(RangeRequestSource(request, params), options, consumer)


def open_s3(client, params, options=None, *, consumer: ArchiveConsumer | None = None,
            variant: ClientVariant | None = None):
    """Serve an S3 object (`params` holds Bucket/Key) to the archive consumer."""
    return consume(ObjectStorageSource(client, params, variant=variant), options, consumer)


def open_custom(source, options=None, *, consumer: ArchiveConsumer | None = None):
    """Serve any object that already implements `size()` and `stream()`."""
    if not isinstance(source, Source):
        raise ConfigurationError(f"{source!r} does not provide size() and stream()")
    return consume(source, options, consumer)


__all__ = [
    "open_buffer", "open_file", "open_url", "open_s3", "open_custom", "open_source",
    "Source", "ByteStream", "read_all", "read_range", "SourceReader",
    "StaticSource", "LocalFileSource", "RangeRequestSource", "ObjectStorageSource",
    "ClientVariant", "HttpxRequester", "RequestsRequester",
    "Result", "ConfigurationError", "MetadataUnavailable", "NotFound", "TransportError",
]
