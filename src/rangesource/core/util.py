from __future__ import annotations
from typing import Dict, Any, Iterable, Mapping, Optional
from .model import NotFound, Result


def range_selector(offset: int, length: Optional[int] = None) -> str:
    """Build the `bytes=` selector sent as a Range header/parameter.

    The end bound is written as ``offset + length`` as-is; see DESIGN.md.
    """
    if length is None:
        return f"bytes={offset}-"
    return f"bytes={offset}-{offset + length}"


def header_value(headers: Mapping[str, Any], name: str) -> Any:
    """Case-insensitive header lookup that also works on plain dicts."""
    value = headers.get(name)
    if value is not None:
        return value
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


def result_asdict(res: Result, *, fields: Iterable[str] | None = None) -> Dict[str, Any]:
    """Return a JSON-serialisable dict (skip None) optionally filtered."""
    if not res.success or res.data is None:
        return {"success": False, "error": res.error, "bytes_fetched": res.bytes_fetched, "requests_made": res.requests_made}
    payload = {k: v for k, v in res.data.items() if v is not None}
    if fields:
        wanted = set(fields)
        payload = {k: v for k, v in payload.items() if k in wanted}
    payload.update({"success": True, "bytes_fetched": res.bytes_fetched, "requests_made": res.requests_made})
    return payload


def raise_for_status(status_code: int, method: str, url: str) -> None:
    """Map an HTTP error status onto NotFound / IOError."""
    if status_code in (404, 410):
        raise NotFound(f"{method} {url} failed with status {status_code}")
    if status_code >= 400:
        raise IOError(f"{method} request failed with status {status_code}")
