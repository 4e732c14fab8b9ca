"""Object-storage source for boto3-style and aiobotocore-style S3 clients."""

import asyncio
import enum
import functools
import inspect
import logging
from types import MappingProxyType
from typing import Any, Mapping, Optional

from ..core.model import ConfigurationError, MetadataUnavailable
from ..core.util import range_selector
from .base import ByteStream, ClosingStream, DEFAULT_CHUNK_SIZE

logger = logging.getLogger(__name__)

REQUIRED_PARAMS = ("Bucket", "Key")


class ClientVariant(enum.Enum):
    """Calling convention of an S3 client."""

    BLOCKING = "blocking"  # boto3 / botocore: plain methods, file-like Body
    ASYNC = "async"        # aiobotocore / aioboto3: coroutine methods, awaitable Body.read

    @classmethod
    def detect(cls, client) -> "ClientVariant":
        """Inspect `client.get_object` once and name its calling convention."""
        if inspect.iscoroutinefunction(client.get_object):
            return cls.ASYNC
        return cls.BLOCKING


class _BlockingDispatch:
    """Runs each blocking client call in a worker thread."""

    def __init__(self, client):
        self.client = client

    async def head_object(self, params: dict) -> Mapping[str, Any]:
        return await asyncio.to_thread(lambda: self.client.head_object(**params))

    async def get_object(self, params: dict) -> Mapping[str, Any]:
        return await asyncio.to_thread(lambda: self.client.get_object(**params))

    async def read(self, body, amount: int) -> bytes:
        return await asyncio.to_thread(body.read, amount)

    async def close(self, body) -> None:
        await asyncio.to_thread(body.close)


class _AsyncDispatch:
    """Awaits the client and its body directly."""

    def __init__(self, client):
        self.client = client

    async def head_object(self, params: dict) -> Mapping[str, Any]:
        return await self.client.head_object(**params)

    async def get_object(self, params: dict) -> Mapping[str, Any]:
        return await self.client.get_object(**params)

    async def read(self, body, amount: int) -> bytes:
        return await body.read(amount)

    async def close(self, body) -> None:
        # aiobotocore's StreamingBody.close() is synchronous in most releases
        result = body.close()
        if inspect.isawaitable(result):
            await result


_DISPATCH = {
    ClientVariant.BLOCKING: _BlockingDispatch,
    ClientVariant.ASYNC: _AsyncDispatch,
}


class ObjectStorageSource:
    """Source over one object in an S3-compatible store.

    `params` identifies the object (`Bucket`, `Key`, plus any extra
    arguments the client accepts such as `VersionId`). The client variant is
    fixed at construction; pass `variant` to skip detection.
    """

    def __init__(self, client, params: Mapping[str, Any], variant: Optional[ClientVariant] = None,
                 chunk_size: int = DEFAULT_CHUNK_SIZE):
        missing = [name for name in REQUIRED_PARAMS if not params.get(name)]
        if missing:
            raise ConfigurationError(f"Missing object parameters: {', '.join(missing)}")

        self.variant = variant if variant is not None else ClientVariant.detect(client)
        self.chunk_size = chunk_size
        self._params = MappingProxyType(dict(params))
        self._dispatch = _DISPATCH[self.variant](client)
        logger.debug("Using %s client for s3://%s/%s", self.variant.value, params["Bucket"], params["Key"])

    @property
    def params(self) -> Mapping[str, Any]:
        return self._params

    async def size(self) -> int:
        res = await self._dispatch.head_object(dict(self._params))
        content_length = res.get("ContentLength")
        if content_length is None:
            raise MetadataUnavailable(
                f"No ContentLength for s3://{self._params['Bucket']}/{self._params['Key']}"
            )
        return int(content_length)

    async def stream(self, offset: int, length: Optional[int] = None) -> ByteStream:
        params = dict(self._params)
        params["Range"] = range_selector(offset, length)
        res = await self._dispatch.get_object(params)
        body = res["Body"]
        return ClosingStream(self._read_chunks(body), functools.partial(self._dispatch.close, body))

    async def _read_chunks(self, body) -> ByteStream:
        while True:
            chunk = await self._dispatch.read(body, self.chunk_size)
            if not chunk:
                break
            yield chunk

    def __repr__(self) -> str:
        return f"ObjectStorageSource(s3://{self._params['Bucket']}/{self._params['Key']}, {self.variant.value})"
