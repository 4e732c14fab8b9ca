"""Range-request source and its httpx-based request issuer."""

import logging
from types import MappingProxyType
from typing import Any, AsyncIterator, Awaitable, Callable, Mapping, Optional, Protocol, Union

import httpx

from ..core.model import ConfigurationError, MetadataUnavailable, TransportError
from ..core.util import header_value, raise_for_status, range_selector
from .base import ByteStream, ClosingStream

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60.0


class Response(Protocol):
    """What a request issuer hands back: headers, a streaming body, and a way to abort."""

    headers: Mapping[str, str]

    def aiter_bytes(self) -> AsyncIterator[bytes]:
        ...

    async def aclose(self) -> None:
        ...


Requester = Callable[[Mapping[str, Any]], Awaitable[Response]]


# Global async client
_client: Optional[httpx.AsyncClient] = None


def _get_client() -> httpx.AsyncClient:
    """Get or create the global httpx AsyncClient."""
    global _client
    if _client is None:
        _client = httpx.AsyncClient(timeout=DEFAULT_TIMEOUT, follow_redirects=True)
    return _client


async def close_global_client():
    """Close the global httpx client. Call this at application shutdown."""
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None


class _HttpxResponse:
    """Streaming httpx response with transport errors mapped to TransportError."""

    def __init__(self, response: httpx.Response):
        self._response = response
        self.headers = response.headers
        self.status_code = response.status_code

    async def aiter_bytes(self) -> AsyncIterator[bytes]:
        try:
            async for chunk in self._response.aiter_bytes():
                yield chunk
        except httpx.TransportError as e:
            raise TransportError(f"Reading response body failed: {e}") from e

    async def aclose(self) -> None:
        await self._response.aclose()


class HttpxRequester:
    """Request issuer backed by an httpx.AsyncClient.

    Accepts a parameter mapping with `url`, optional `method` (default GET),
    `follow_redirects`, and the keywords in REQUEST_KEYS, which go to
    `AsyncClient.build_request`. Any other key raises ConfigurationError.
    The response is returned as soon as headers arrive; the body is left
    unread until the caller iterates it.
    """

    REQUEST_KEYS = frozenset(
        {"headers", "params", "content", "data", "files", "json", "cookies", "timeout", "extensions"}
    )

    def __init__(self, client: Optional[httpx.AsyncClient] = None, *, timeout: float = DEFAULT_TIMEOUT):
        self._client = client
        self.timeout = timeout

    async def __call__(self, params: Mapping[str, Any]) -> _HttpxResponse:
        params = dict(params)
        url = params.pop("url")
        method = params.pop("method", "GET")
        send_kwargs = {}
        if "follow_redirects" in params:
            send_kwargs["follow_redirects"] = params.pop("follow_redirects")
        unknown = sorted(set(params) - self.REQUEST_KEYS)
        if unknown:
            raise ConfigurationError(f"Unsupported request parameters: {', '.join(unknown)}")
        params.setdefault("timeout", self.timeout)

        client = self._client if self._client is not None else _get_client()
        request = client.build_request(method, url, **params)
        logger.debug("%s %s (range=%s)", method, url, request.headers.get("range"))
        try:
            response = await client.send(request, stream=True, **send_kwargs)
        except httpx.TransportError as e:
            raise TransportError(f"{method} {url} failed: {e}") from e

        if response.status_code >= 400:
            await response.aclose()
            raise_for_status(response.status_code, method, url)
        return _HttpxResponse(response)


class RangeRequestSource:
    """Source over an HTTP-like endpoint addressed with Range headers."""

    def __init__(self, request: Requester, params: Union[str, Mapping[str, Any]]):
        if isinstance(params, str):
            params = {"url": params}
        if not params or not params.get("url"):
            raise ConfigurationError("URL missing")

        base = dict(params)
        base["headers"] = MappingProxyType(dict(params.get("headers") or {}))
        self._request = request
        self._params = MappingProxyType(base)

    @property
    def url(self) -> str:
        return self._params["url"]

    @property
    def params(self) -> Mapping[str, Any]:
        return self._params

    def _request_params(self, selector: Optional[str] = None) -> dict:
        """Fresh parameter record for one call; the base record is never touched."""
        params = dict(self._params)
        headers = {k: v for k, v in self._params["headers"].items() if k.lower() != "range"}
        if selector is not None:
            headers["range"] = selector
        params["headers"] = headers
        return params

    async def size(self) -> int:
        """Learn the content length from response headers without reading the body."""
        logger.debug("Probing size of %s", self.url)
        response = await self._request(self._request_params())
        try:
            content_length = header_value(response.headers, "content-length")
        finally:
            await response.aclose()

        if content_length is None:
            raise MetadataUnavailable(f"Missing content length header for {self.url}")
        return int(content_length)

    async def stream(self, offset: int, length: Optional[int] = None) -> ByteStream:
        response = await self._request(self._request_params(range_selector(offset, length)))
        return ClosingStream(response.aiter_bytes(), response.aclose)

    def __repr__(self) -> str:
        return f"RangeRequestSource({self.url!r})"


def open_http_source(url: str, *, requester: Optional[Requester] = None) -> RangeRequestSource:
    """Create a range-request source, using httpx unless another issuer is given."""
    return RangeRequestSource(requester if requester is not None else HttpxRequester(), url)
