"""CLI implementation for rangesource."""

import asyncio
import base64
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import typer

from .core.model import Result
from .core.util import result_asdict
from .io import SourceReader, open_source
from .io.http_async import close_global_client

app = typer.Typer(add_completion=False, help="Report sizes of, and read byte ranges from, files and URLs.")


def iter_sources(files: list[str]) -> list[str]:
    """Get list of sources from files argument or stdin."""
    if "-" in files:
        # stdin mode
        return [ln.strip() for ln in sys.stdin if ln.strip()]
    elif files:
        return list(files)
    return []


async def _probe(src: str, offset: Optional[int], length: Optional[int], sync: bool) -> Result:
    """Resolve the size of one source and optionally read a window from it."""
    reader = SourceReader(open_source(src, sync=sync))
    try:
        size = await reader.size()
        data = {"source": src, "size": size}
        if offset is not None:
            window = length if length is not None else max(size - offset, 0)
            # an empty window has no valid Range header
            chunk = await reader.fetch(offset, window) if window else b""
            data.update({"offset": offset, "length": len(chunk),
                         "data_b64": base64.b64encode(chunk).decode("ascii")})
        return Result(success=True, data=data, error=None,
                      bytes_fetched=reader.bytes_fetched, requests_made=reader.requests_made)
    except Exception as e:
        return Result(success=False, data=None, error=f"{src}: {e}",
                      bytes_fetched=reader.bytes_fetched, requests_made=reader.requests_made)


async def _batch_probe(sources: list[str], offset: Optional[int], length: Optional[int], sync: bool) -> list[Result]:
    """Probe all sources concurrently."""
    try:
        return list(await asyncio.gather(*(_probe(src, offset, length, sync) for src in sources)))
    finally:
        await close_global_client()


@app.command()
def main(
    files: list[str] = typer.Argument(None, help="Files or URLs to process, or '-' for stdin"),
    offset: Optional[int] = typer.Option(None, "--offset", min=0, help="Read a window starting at this byte (Base64)"),
    length: Optional[int] = typer.Option(None, "--length", min=0, help="Window length; default is to the end"),
    fields: Optional[str] = typer.Option(None, "--fields", help="Comma-separated subset of keys to emit"),
    jsonl: bool = typer.Option(False, "--jsonl", help="Force JSON-lines output"),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Write to PATH instead of stdout"),
    sync: bool = typer.Option(False, "--sync", help="Use the requests client for URLs instead of httpx"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log requests to stderr"),
):
    """Report the size of one or many local paths or URLs."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr,
                            format="%(asctime)s %(name)s %(levelname)s %(message)s")

    sel_fields = set(fields.split(",")) if fields else None
    sources = iter_sources(files or [])

    if not sources:
        typer.echo("No input files given.", err=True)
        raise typer.Exit(code=1)

    if length is not None and offset is None:
        offset = 0

    results = asyncio.run(_batch_probe(sources, offset, length, sync))

    # open output sink
    sink = open(output, "w", encoding="utf-8") if output else sys.stdout
    try:
        # choose output style
        if len(sources) == 1 and not jsonl:
            obj = result_asdict(results[0], fields=sel_fields)
            json.dump(obj, sink, indent=2)
            sink.write("\n")
        else:
            for res in results:
                obj = result_asdict(res, fields=sel_fields)
                sink.write(json.dumps(obj))
                sink.write("\n")
    finally:
        if output:
            sink.close()

    # exit code
    if any(not r.success for r in results):
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
