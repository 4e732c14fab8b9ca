from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict


@dataclass(slots=True)
class Result:
    success: bool
    data: Dict[str, Any] | None
    error: str | None
    bytes_fetched: int         # filled by SourceReader
    requests_made: int = 0


class ConfigurationError(ValueError):
    """Raised when a source is constructed with missing or invalid parameters."""
    pass


class MetadataUnavailable(IOError):
    """Raised when a backend cannot report the total size of a resource."""
    pass


class NotFound(FileNotFoundError):
    """Raised when a remote backend reports that the resource does not exist."""
    pass


class TransportError(IOError):
    """Raised when a request-based backend fails at the network layer."""
    pass
