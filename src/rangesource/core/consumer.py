from __future__ import annotations
from typing import Any, Callable, Mapping

from ..io.base import Source
from ..io.reader import SourceReader

# (source, options) -> whatever the archive layer builds from it
ArchiveConsumer = Callable[[Source, Mapping[str, Any]], Any]


def default_consumer(source: Source, options: Mapping[str, Any]) -> SourceReader:
    return SourceReader(source, options)


def consume(source: Source, options: Mapping[str, Any] | None, consumer: ArchiveConsumer | None) -> Any:
    """Hand a freshly built source to the archive consumer."""
    if consumer is None:
        consumer = default_consumer
    return consumer(source, dict(options or {}))
