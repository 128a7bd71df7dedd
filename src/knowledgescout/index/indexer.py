"""Chunk index: rebuilding document chunks and ranking them for a query."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Sequence

import numpy as np

from knowledgescout.embedding.vectorizer import vectorize
from knowledgescout.errors import ValidationError
from knowledgescout.index.scoring import RelevanceScorer
from knowledgescout.index.storage import ChunkStore
from knowledgescout.ingestion.chunker import Chunker
from knowledgescout.models import ChunkRecord, IndexStats, ScoredChunk

LOGGER = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class RebuildReport:
    processed: int = 0
    total: int = 0
    failed: int = 0

    @property
    def message(self) -> str:
        if self.total == 0:
            return "No documents to rebuild"
        if self.failed:
            return "Index rebuild completed with errors"
        return "Index rebuild completed"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "processed": self.processed,
            "total": self.total,
            "failed": self.failed,
        }


class ChunkIndex:
    """Coordinates chunking, vectorization and persistence of document chunks."""

    def __init__(
        self,
        store: ChunkStore,
        *,
        chunker: Chunker | None = None,
        scorer: RelevanceScorer | None = None,
        relevance_threshold: float = 0.5,
        max_workers: int = 4,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self.chunker = chunker or Chunker()
        self.scorer = scorer or RelevanceScorer()
        self.relevance_threshold = relevance_threshold
        self.max_workers = max_workers
        self.clock = clock

    def rebuild_document(self, document_id: str, text: str, pages: int) -> int:
        """Re-chunk a document and swap in its new chunk set.

        Returns the number of chunks written. The previous chunks stay in place
        if the store fails.
        """
        if pages < 1:
            raise ValidationError(f"pages must be at least 1, got {pages}")

        records = [
            ChunkRecord(
                document_id=document_id,
                index=draft.index,
                page=draft.page,
                text=draft.text,
                vector=vectorize(draft.text),
            )
            for draft in self.chunker.split(text, pages)
        ]
        self.store.replace_chunks(document_id, records)
        LOGGER.debug("Indexed %s: %d chunks", document_id, len(records))
        return len(records)

    def rebuild_all(self) -> RebuildReport:
        """Rebuild every known document in parallel and refresh the stats."""
        documents = self.store.iter_documents()
        report = RebuildReport(total=len(documents))

        if documents:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                futures = {
                    pool.submit(self.rebuild_document, doc.id, doc.text, doc.pages): doc.id
                    for doc in documents
                }
                done, _ = wait(futures)

            for future in done:
                report.processed += 1
                exc = future.exception()
                if exc is not None:
                    LOGGER.error("Rebuild failed for document %s: %s", futures[future], exc)
                    report.failed += 1

        stats = IndexStats(
            total_documents=len(documents),
            total_chunks=self.store.count_chunks(),
            last_rebuild=self.clock(),
        )
        self.store.save_stats(stats)
        LOGGER.info(
            "Rebuilt %d/%d documents (%d failed), %d chunks",
            report.processed,
            report.total,
            report.failed,
            stats.total_chunks,
        )
        return report

    def top_k(self, terms: Sequence[str], k: int, intent: str) -> List[ScoredChunk]:
        """Best chunks above the relevance threshold, highest score first."""
        chunks = self.store.load_chunks()
        if not chunks:
            return []

        scores = np.array(
            [self.scorer.score(terms, chunk.text, intent) for chunk in chunks], dtype="float64"
        )
        # Stable sort keeps storage order between equal scores
        order = np.argsort(-scores, kind="stable")
        ranked = [idx for idx in order if scores[idx] > self.relevance_threshold]

        return [ScoredChunk(chunk=chunks[idx], score=float(scores[idx])) for idx in ranked[:k]]

    def stats(self) -> IndexStats:
        return self.store.load_stats()
