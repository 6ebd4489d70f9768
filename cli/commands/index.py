"""Index commands: keyword search and article lookup."""

from pathlib import Path
from typing import Optional

import typer

from wikidump.config import settings
from wikidump.db.index import IndexOpenError, PageIndex, open_index
from wikidump.db.search import fts_search, get_page_by_title

index_app = typer.Typer(help="Query the page index.", no_args_is_help=True)


def _open(index_dir: Optional[Path]) -> PageIndex:
    try:
        return open_index(index_dir or settings.index_dir)
    except IndexOpenError as exc:
        typer.echo(f"❌ {exc}")
        typer.echo("Run 'wikidump ingest <dump>' first.")
        raise typer.Exit(code=1)


@index_app.command("search")
def index_search(
    query: str = typer.Argument(..., help="Search query."),
    top_k: int = typer.Option(10, "--top-k", help="Number of results."),
    offset: int = typer.Option(0, "--offset", help="Skip this many results."),
    index_dir: Optional[Path] = typer.Option(None, "--index", help="Index directory."),
) -> None:
    """Search page titles and bodies."""
    with _open(index_dir) as index:
        hits = fts_search(index.conn, query, top_k=top_k, offset=offset)

    if not hits:
        typer.echo(f"No results for {query!r}.")
        return
    for hit in hits:
        marker = " (redirect)" if hit.is_redirect else ""
        typer.echo(f"  {hit.id:>10}  {hit.title}{marker}")


@index_app.command("article")
def index_article(
    title: str = typer.Argument(..., help="Exact page title."),
    index_dir: Optional[Path] = typer.Option(None, "--index", help="Index directory."),
) -> None:
    """Print the wikitext of one article."""
    with _open(index_dir) as index:
        page = get_page_by_title(index.conn, title)

    if page is None:
        typer.echo(f"❌ Article not found: {title!r}")
        raise typer.Exit(code=1)
    typer.echo(page.body)
