"""wikidump CLI — entry-point for all operations.

Usage:
    python cli/main.py --help

Commands:
    extract   run the page extractor on one record file
    ingest    split a dump, extract every page, build the index and trace
    index     search the page index / print an article
    trace     summarise a trace database
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from wikidump.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from typing import Optional

import typer

from wikidump.config import settings
from wikidump.db.index import IndexOpenError, open_index
from wikidump.db.trace import TraceError, open_trace
from wikidump.extractor import ParseFailure, extract_page
from wikidump.pipeline import ingest_dump

from cli.commands.index import index_app
from cli.commands.trace import trace_app

app = typer.Typer(
    name="wikidump",
    help="Extract, index and trace pages from wiki XML dumps.",
    no_args_is_help=True,
)
app.add_typer(index_app, name="index")
app.add_typer(trace_app, name="trace")

_PREVIEW_CHARS = 300


# ---------------------------------------------------------------------------
# extract
# ---------------------------------------------------------------------------

@app.command("extract")
def extract(
    path: Path = typer.Argument(..., help="File holding one <page> record."),
    all_namespaces: bool = typer.Option(
        False, "--all-namespaces", help="Do not reject non-mainspace pages."
    ),
    show_body: bool = typer.Option(False, "--show-body", help="Print the whole body."),
) -> None:
    """Run the page extractor on a single record and print the outcome."""
    if not path.is_file():
        typer.echo(f"[extract] File not found: {path}")
        raise typer.Exit(code=1)

    record = path.read_bytes()
    result = extract_page(record, mainspace_filter=not all_namespaces)

    if isinstance(result, ParseFailure):
        typer.echo(f"[extract] FAILED {result.name} ({result.code}): {result.detail}")
        raise typer.Exit(code=1)

    body = result.body_text
    typer.echo(f"[extract] Title     : {result.title_text}")
    typer.echo(f"[extract] Namespace : {result.namespace}")
    typer.echo(f"[extract] Redirect  : {'yes' if result.is_redirect else 'no'}")
    typer.echo(f"[extract] Body      : {len(result.body)} bytes")
    typer.echo("")
    if show_body or len(body) <= _PREVIEW_CHARS:
        typer.echo(body)
    else:
        typer.echo(body[:_PREVIEW_CHARS] + " …")


# ---------------------------------------------------------------------------
# ingest
# ---------------------------------------------------------------------------

@app.command("ingest")
def ingest(
    dump: Path = typer.Argument(..., help="Dump file (.xml or .xml.bz2)."),
    index_dir: Optional[Path] = typer.Option(
        None, "--index", help="Index directory (default: <workspace>/index)."
    ),
    trace_path: Optional[Path] = typer.Option(
        None, "--trace", help="Trace database (default: <workspace>/trace.db)."
    ),
    no_trace: bool = typer.Option(False, "--no-trace", help="Do not write a trace database."),
    all_namespaces: bool = typer.Option(
        False, "--all-namespaces", help="Index pages from every namespace."
    ),
    keep_redirects: bool = typer.Option(
        False, "--keep-redirects", help="Index redirect pages too."
    ),
    limit: Optional[int] = typer.Option(None, "--limit", help="Stop after N records."),
) -> None:
    """Split a dump into pages, extract them and build the search index."""
    if not dump.is_file():
        typer.echo(f"[ingest] Dump not found: {dump}")
        raise typer.Exit(code=1)

    settings.ensure_workspace()
    index_dir = index_dir or settings.index_dir

    try:
        index = open_index(index_dir, create=True)
    except IndexOpenError as exc:
        typer.echo(f"[ingest] {exc}")
        raise typer.Exit(code=1)

    trace = None
    failed = False
    try:
        if not no_trace:
            trace = open_trace(trace_path or settings.trace_db_path)
        stats = ingest_dump(
            dump,
            index,
            trace=trace,
            mainspace_only=False if all_namespaces else None,
            skip_redirects=False if keep_redirects else None,
            limit=limit,
        )
    except TraceError as exc:
        typer.echo(f"[ingest] Trace error: {exc}")
        failed = True
    except (OSError, EOFError) as exc:
        typer.echo(f"[ingest] Dump read error: {exc}")
        failed = True
    finally:
        # Whatever was indexed before a failure is committed, so its trace
        # rows must be flushed too.
        try:
            index.close()
        finally:
            if trace is not None:
                try:
                    trace.close()
                except TraceError as exc:
                    typer.echo(f"[ingest] Trace error: {exc}")
                    failed = True

    if failed:
        raise typer.Exit(code=1)

    typer.echo(f"[ingest] Index  : {index_dir}")
    typer.echo(f"[ingest] Result : {stats.summary()}")
    for name, count in stats.failures.most_common():
        typer.echo(f"  {name:<24} {count}")


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
