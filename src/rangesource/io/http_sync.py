"""Request issuer that drives a blocking requests.Session from async code."""

import asyncio
import logging
from typing import Any, AsyncIterator, Mapping, Optional

import requests

from ..core.model import TransportError
from ..core.util import raise_for_status
from .base import DEFAULT_CHUNK_SIZE

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30

# Module-level session for connection pooling
_session = None


def _get_session():
    """Get or create the global requests session."""
    global _session
    if _session is None:
        _session = requests.Session()
    return _session


class _RequestsResponse:
    """Adapts a streamed requests.Response to the async response shape."""

    def __init__(self, response: requests.Response, chunk_size: int):
        self._response = response
        self._chunk_size = chunk_size
        self.headers = response.headers
        self.status_code = response.status_code

    async def aiter_bytes(self) -> AsyncIterator[bytes]:
        chunks = self._response.iter_content(self._chunk_size)
        while True:
            try:
                chunk = await asyncio.to_thread(next, chunks, None)
            except requests.RequestException as e:
                raise TransportError(f"Reading response body failed: {e}") from e
            if chunk is None:
                break
            if chunk:
                yield chunk

    async def aclose(self) -> None:
        await asyncio.to_thread(self._response.close)


class RequestsRequester:
    """Request issuer backed by requests, each call run in a worker thread."""

    def __init__(self, session: Optional[requests.Session] = None, *,
                 timeout: float = DEFAULT_TIMEOUT, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self._session = session if session is not None else _get_session()
        self.timeout = timeout
        self.chunk_size = chunk_size

    async def __call__(self, params: Mapping[str, Any]) -> _RequestsResponse:
        return await asyncio.to_thread(self._send, dict(params))

    def _send(self, params: dict) -> _RequestsResponse:
        url = params.pop("url")
        method = params.pop("method", "GET")
        params.setdefault("timeout", self.timeout)
        logger.debug("%s %s (range=%s)", method, url, (params.get("headers") or {}).get("range"))

        try:
            response = self._session.request(method, url, stream=True, **params)
        except requests.RequestException as e:
            raise TransportError(f"{method} {url} failed: {e}") from e

        if response.status_code >= 400:
            response.close()
            raise_for_status(response.status_code, method, url)
        return _RequestsResponse(response, self.chunk_size)
