"""Question answering over the chunk index."""

from __future__ import annotations

import logging
from typing import List

from knowledgescout.answer.composer import AnswerComposer
from knowledgescout.cache import ResultCache
from knowledgescout.errors import ValidationError
from knowledgescout.index.indexer import ChunkIndex
from knowledgescout.models import Answer, ScoredChunk, Source
from knowledgescout.query.analyzer import QueryAnalyzer
from knowledgescout.utils.text import truncate

LOGGER = logging.getLogger(__name__)

SNIPPET_CHARS = 150


class Searcher:
    """High-level API: cache lookup, retrieval, answer composition."""

    def __init__(
        self,
        index: ChunkIndex,
        *,
        analyzer: QueryAnalyzer | None = None,
        composer: AnswerComposer | None = None,
        cache: ResultCache | None = None,
        max_sources: int = 3,
        max_k: int = 10,
    ) -> None:
        self.index = index
        self.analyzer = analyzer or QueryAnalyzer()
        self.composer = composer or AnswerComposer()
        self.cache = cache if cache is not None else ResultCache()
        self.max_sources = max_sources
        self.max_k = max_k

    def ask(self, query: str, *, k: int = 5) -> Answer:
        if not query or not query.strip():
            raise ValidationError("Query is required")
        if not 1 <= k <= self.max_k:
            raise ValidationError(f"k must be between 1 and {self.max_k}, got {k}")

        cached = self.cache.get(query)
        if cached is not None:
            return cached

        terms = self.analyzer.expand(query)
        intent = self.analyzer.classify_intent(query)
        ranked = self.index.top_k(terms, k, intent)
        LOGGER.debug("Query %r (%s): %d chunks above threshold", query, intent, len(ranked))

        answer = Answer(
            query=query,
            answer=self.composer.compose(ranked, intent),
            sources=self._sources(ranked, intent),
            query_intent=intent,
        )
        return self.cache.put_if_absent(query, answer)

    def _sources(self, ranked: List[ScoredChunk], intent: str) -> List[Source]:
        return [
            Source(
                document_id=item.chunk.document_id,
                page_number=item.chunk.page,
                chunk_index=item.chunk.index,
                snippet=truncate(item.chunk.text, SNIPPET_CHARS),
                relevance_score=f"{item.score:.2f}",
                intent=intent,
            )
            for item in ranked[: self.max_sources]
        ]
