"""Core KnowledgeScout data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

Intent = Literal[
    "definition",
    "types",
    "examples",
    "how",
    "when",
    "where",
    "why",
    "comparison",
    "general",
]


@dataclass(slots=True)
class Document:
    """Extracted document text with its declared page count."""

    id: str
    title: str
    text: str
    pages: int = 1
    sha256: str = ""


@dataclass(slots=True)
class ChunkDraft:
    """Chunk produced by the chunker, before vectorization."""

    index: int
    page: int
    text: str


@dataclass(slots=True)
class ChunkRecord:
    """Stored chunk of document text paired with its term vector."""

    document_id: str
    index: int
    page: int
    text: str
    vector: Dict[str, float] = field(default_factory=dict)


@dataclass(slots=True)
class ScoredChunk:
    chunk: ChunkRecord
    score: float


@dataclass(slots=True)
class Source:
    """Reference to a chunk backing an answer."""

    document_id: str
    page_number: int
    chunk_index: int
    snippet: str
    relevance_score: str
    intent: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "documentId": self.document_id,
            "pageNumber": self.page_number,
            "chunkIndex": self.chunk_index,
            "snippet": self.snippet,
            "relevanceScore": self.relevance_score,
            "intent": self.intent,
        }


@dataclass(slots=True)
class Answer:
    """Payload returned by the ask pipeline and stored in the result cache."""

    query: str
    answer: str
    sources: List[Source]
    query_intent: str
    cached: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "query": self.query,
            "answer": self.answer,
            "sources": [source.to_dict() for source in self.sources],
            "cached": self.cached,
            "queryIntent": self.query_intent,
        }


@dataclass(slots=True)
class IndexStats:
    """Aggregate counters refreshed after every full rebuild."""

    total_documents: int = 0
    total_chunks: int = 0
    last_rebuild: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalDocuments": self.total_documents,
            "totalChunks": self.total_chunks,
            "lastRebuild": self.last_rebuild.isoformat() if self.last_rebuild else None,
        }
