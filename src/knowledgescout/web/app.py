"""FastAPI application exposing the KnowledgeScout API."""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from knowledgescout.cache import ResultCache
from knowledgescout.config import AppConfig
from knowledgescout.errors import StorageError, ValidationError
from knowledgescout.index.indexer import ChunkIndex
from knowledgescout.index.search import Searcher
from knowledgescout.index.storage import SQLiteChunkStore
from knowledgescout.ingestion.chunker import Chunker
from knowledgescout.ingestion.text_loader import document_from_text

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="KnowledgeScout API", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.state.db_path = None


class DocumentPayload(BaseModel):
    title: str = "Untitled"
    text: str
    pages: int = Field(1, ge=1)


class AskPayload(BaseModel):
    query: str
    k: int = 5


@dataclass
class Services:
    config: AppConfig
    store: SQLiteChunkStore
    index: ChunkIndex
    searcher: Searcher


_services: Services | None = None
_services_lock = threading.Lock()


def _ensure_db_parent(db_path: Path) -> None:
    db_path.parent.mkdir(parents=True, exist_ok=True)


def build_services(config: AppConfig) -> Services:
    resolved_db = config.resolve_db_path(Path.cwd())
    _ensure_db_parent(resolved_db)
    store = SQLiteChunkStore(resolved_db)
    index = ChunkIndex(
        store,
        chunker=Chunker(chunk_size=config.chunk_size, chunk_overlap=config.chunk_overlap),
        relevance_threshold=config.relevance_threshold,
        max_workers=config.max_workers,
    )
    searcher = Searcher(
        index,
        cache=ResultCache(config.cache_ttl),
        max_sources=config.max_sources_returned,
        max_k=config.max_k,
    )
    return Services(config=config, store=store, index=index, searcher=searcher)


def get_services() -> Services:
    """Process-wide services, created on first use."""
    global _services
    with _services_lock:
        if _services is None:
            db_path = app.state.db_path
            config = AppConfig(db_path=Path(db_path)) if db_path else AppConfig()
            _services = build_services(config)
        return _services


@app.on_event("startup")
async def startup_event() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


def _storage_failure(exc: StorageError) -> HTTPException:
    LOGGER.error("Storage failure: %s", exc)
    return HTTPException(status_code=500, detail=f"Storage failure: {exc}")


@app.post("/api/docs")
async def ingest_document(
    payload: DocumentPayload, services: Services = Depends(get_services)
) -> dict[str, Any]:
    if not payload.text.strip():
        raise HTTPException(status_code=400, detail="Document text is empty")

    document = document_from_text(payload.title, payload.text, payload.pages)

    def _ingest() -> int:
        services.store.add_document(document)
        return services.index.rebuild_document(document.id, document.text, document.pages)

    try:
        chunk_count = await asyncio.to_thread(_ingest)
    except StorageError as exc:
        raise _storage_failure(exc) from exc

    return {
        "id": document.id,
        "title": document.title,
        "pages": document.pages,
        "chunks": chunk_count,
    }


@app.get("/api/docs")
async def list_documents(
    limit: int = 10, offset: int = 0, services: Services = Depends(get_services)
) -> dict[str, Any]:
    limit = max(1, min(limit, 100))
    offset = max(0, offset)
    try:
        documents = services.store.list_documents(limit=limit, offset=offset)
        total = services.store.count_documents()
    except StorageError as exc:
        raise _storage_failure(exc) from exc

    return {
        "documents": documents,
        "pagination": {
            "total": total,
            "limit": limit,
            "offset": offset,
            "hasMore": offset + limit < total,
        },
    }


@app.get("/api/docs/{document_id}")
async def get_document(
    document_id: str, services: Services = Depends(get_services)
) -> dict[str, Any]:
    try:
        document = services.store.get_document(document_id)
        chunks = services.store.chunks_for(document_id) if document is not None else []
    except StorageError as exc:
        raise _storage_failure(exc) from exc

    if document is None:
        raise HTTPException(status_code=404, detail="Document not found")

    return {
        "id": document.id,
        "title": document.title,
        "pages": document.pages,
        "content": document.text,
        "chunks": len(chunks),
    }


@app.post("/api/ask")
async def ask(payload: AskPayload, services: Services = Depends(get_services)) -> dict[str, Any]:
    try:
        answer = await asyncio.to_thread(services.searcher.ask, payload.query, k=payload.k)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except StorageError as exc:
        raise _storage_failure(exc) from exc
    return answer.to_dict()


@app.post("/api/index/rebuild")
async def rebuild_index(services: Services = Depends(get_services)) -> dict[str, Any]:
    try:
        report = await asyncio.to_thread(services.index.rebuild_all)
    except StorageError as exc:
        raise _storage_failure(exc) from exc
    return report.to_dict()


@app.get("/api/index/stats")
async def index_stats(services: Services = Depends(get_services)) -> dict[str, Any]:
    try:
        return services.index.stats().to_dict()
    except StorageError as exc:
        raise _storage_failure(exc) from exc


@app.get("/api/config")
async def retrieval_options(services: Services = Depends(get_services)) -> dict[str, Any]:
    return services.config.options()
