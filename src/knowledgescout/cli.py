"""Command line interface for KnowledgeScout."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, NoReturn

import typer
from rich.console import Console
from rich.table import Table

from knowledgescout.cache import ResultCache
from knowledgescout.config import AppConfig
from knowledgescout.errors import KnowledgeScoutError
from knowledgescout.index.indexer import ChunkIndex
from knowledgescout.index.search import Searcher
from knowledgescout.index.storage import SQLiteChunkStore
from knowledgescout.ingestion.chunker import Chunker
from knowledgescout.ingestion.text_loader import load_text_document
from knowledgescout.utils.files import iter_text_paths
from knowledgescout.web.app import app as web_app


LOGGER = logging.getLogger(__name__)

console = Console()
app = typer.Typer(help="KnowledgeScout - keyword question answering over your documents")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _ensure_db_parent(db_path: Path) -> None:
    db_path.parent.mkdir(parents=True, exist_ok=True)


def _build_index(config: AppConfig, store: SQLiteChunkStore) -> ChunkIndex:
    return ChunkIndex(
        store,
        chunker=Chunker(chunk_size=config.chunk_size, chunk_overlap=config.chunk_overlap),
        relevance_threshold=config.relevance_threshold,
        max_workers=config.max_workers,
    )


def _open_existing(db: Path | None) -> tuple[AppConfig, SQLiteChunkStore]:
    config = AppConfig(db_path=db if db is not None else AppConfig().db_path)
    resolved_db = config.resolve_db_path(Path.cwd())
    if not resolved_db.exists():
        raise typer.BadParameter(f"Database not found: {resolved_db}")
    try:
        return config, SQLiteChunkStore(resolved_db)
    except KnowledgeScoutError as exc:
        _fail(exc)


def _fail(exc: Exception) -> NoReturn:
    console.print(f"[red]Error:[/red] {exc}")
    raise typer.Exit(1)


@app.command()
def index(
    inputs: List[Path] = typer.Argument(
        ..., help="Text files or folders to index.", resolve_path=True
    ),
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
    chunk_size: int = typer.Option(AppConfig().chunk_size, help="Chunk size in characters"),
    overlap: int = typer.Option(AppConfig().chunk_overlap, help="Chunk overlap"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Index one or more plain-text files."""
    _setup_logging(verbose)
    config = AppConfig(
        db_path=db if db is not None else AppConfig().db_path,
        chunk_size=chunk_size,
        chunk_overlap=overlap,
    )

    resolved_db = config.resolve_db_path(Path.cwd())
    _ensure_db_parent(resolved_db)

    paths = list(iter_text_paths(inputs))
    if not paths:
        console.print("[yellow]No text files found.[/yellow]")
        return

    try:
        store = SQLiteChunkStore(resolved_db)
    except KnowledgeScoutError as exc:
        _fail(exc)
    chunk_index = _build_index(config, store)
    console.print(f"Indexing into [bold]{resolved_db}[/bold]...")

    inserted = skipped = failed = 0
    try:
        for path in paths:
            try:
                document = load_text_document(path)
                if store.find_by_sha256(document.sha256) is not None:
                    skipped += 1
                    continue
                store.add_document(document)
                chunk_index.rebuild_document(document.id, document.text, document.pages)
                inserted += 1
            except (OSError, UnicodeDecodeError, KnowledgeScoutError) as exc:
                LOGGER.error("Failed to index %s: %s", path, exc)
                failed += 1
    finally:
        store.close()

    console.print(f"Inserted: {inserted}, skipped: {skipped}, failed: {failed}")


@app.command()
def ask(
    query: str = typer.Argument(..., help="Question to answer"),
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
    k: int = typer.Option(5, "-k", "--top-k", help="Number of chunks to consider (1-10)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Answer a question from the indexed documents."""
    _setup_logging(verbose)
    config, store = _open_existing(db)
    searcher = Searcher(
        _build_index(config, store),
        cache=ResultCache(config.cache_ttl),
        max_sources=config.max_sources_returned,
        max_k=config.max_k,
    )

    try:
        result = searcher.ask(query, k=k)
    except KnowledgeScoutError as exc:
        _fail(exc)
    finally:
        store.close()

    console.print(f"[bold]Intent:[/bold] {result.query_intent}")
    console.print(result.answer, soft_wrap=True)
    if not result.sources:
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Score")
    table.add_column("Document")
    table.add_column("Page")
    table.add_column("Chunk")
    table.add_column("Snippet")

    for source in result.sources:
        snippet = source.snippet.replace("\n", " ")
        table.add_row(
            source.relevance_score,
            source.document_id,
            str(source.page_number),
            str(source.chunk_index),
            snippet,
        )

    console.print(table)


@app.command()
def rebuild(
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Re-chunk every stored document."""
    _setup_logging(verbose)
    config, store = _open_existing(db)
    try:
        report = _build_index(config, store).rebuild_all()
    except KnowledgeScoutError as exc:
        _fail(exc)
    finally:
        store.close()

    console.print(f"{report.message}: processed {report.processed}/{report.total}")
    if report.failed:
        console.print(f"[yellow]{report.failed} document(s) failed.[/yellow]")


@app.command()
def stats(
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
) -> None:
    """Show index statistics from the last rebuild."""
    config, store = _open_existing(db)
    try:
        current = _build_index(config, store).stats()
    except KnowledgeScoutError as exc:
        _fail(exc)
    finally:
        store.close()

    last = current.last_rebuild.isoformat() if current.last_rebuild else "never"
    console.print(
        f"Documents: {current.total_documents}, chunks: {current.total_chunks}, "
        f"last rebuild: {last}"
    )


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Server port"),
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
) -> None:
    """Start the HTTP API."""
    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover
        raise typer.BadParameter(
            "uvicorn is not installed. Install the web extras with \"python -m pip install '.[web]'\""
        ) from exc

    if db is not None:
        web_app.state.db_path = db
    config = AppConfig(db_path=db if db is not None else AppConfig().db_path)
    resolved_db = config.resolve_db_path(Path.cwd())

    console.print(f"Starting API on http://{host}:{port} (database: {resolved_db})")
    uvicorn.run(
        web_app,
        host=host,
        port=port,
        reload=False,
        log_level="info",
    )
