"""Trace commands: summarise the outcome of an ingest run."""

import sqlite3
from pathlib import Path
from typing import Optional

import typer

from wikidump.config import settings
from wikidump.db.connection import get_connection
from wikidump.db.trace import doc_totals, failure_counts

trace_app = typer.Typer(help="Inspect the trace database.", no_args_is_help=True)


@trace_app.command("stats")
def trace_stats(
    trace_path: Optional[Path] = typer.Option(None, "--trace", help="Trace database."),
) -> None:
    """Print document totals and failure counts per error."""
    path = trace_path or settings.trace_db_path
    if not path.is_file():
        typer.echo(f"❌ Trace database not found: {path}")
        raise typer.Exit(code=1)

    conn = None
    try:
        conn = get_connection(path)
        totals = doc_totals(conn)
        counts = failure_counts(conn)
    except sqlite3.Error as exc:
        typer.echo(f"❌ Not a trace database ({path}): {exc}")
        raise typer.Exit(code=1)
    finally:
        if conn is not None:
            conn.close()

    typer.echo(f"Documents          : {totals.docs}")
    typer.echo(f"Parsing failed     : {totals.parsing_failed}")
    typer.echo(f"Generation failed  : {totals.generation_failed}")
    if not counts:
        typer.echo("No failures recorded.")
        return
    typer.echo("Failures:")
    for c in counts:
        typer.echo(f"  {c.err_name:<24} ({c.err_code:>3})  {c.count}")
