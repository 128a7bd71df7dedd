"""Application configuration defaults."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict


def _get_default_db_path() -> Path:
    """Get the default database path for the current execution context."""
    # When running from source, prefer local data/ if it exists
    local_db = Path("data/knowledgescout.db")
    if local_db.exists():
        return local_db

    return Path.home() / "Documents" / "KnowledgeScout" / "knowledgescout.db"


@dataclass(slots=True)
class AppConfig:
    db_path: Path | None = None
    chunk_size: int = 400
    chunk_overlap: int = 100
    cache_ttl: float = 60.0
    relevance_threshold: float = 0.5
    max_sources_returned: int = 3
    max_k: int = 10
    max_workers: int = 4

    def __post_init__(self) -> None:
        if self.db_path is None:
            self.db_path = _get_default_db_path()

    def resolve_db_path(self, base_dir: Path | None = None) -> Path:
        if self.db_path is None:
            self.db_path = _get_default_db_path()
        if Path(self.db_path).is_absolute() or base_dir is None:
            return Path(self.db_path)
        return base_dir / self.db_path

    def options(self) -> Dict[str, Any]:
        """Named retrieval options as exposed over the API."""
        return {
            "chunkSize": self.chunk_size,
            "chunkOverlap": self.chunk_overlap,
            "cacheTTL": self.cache_ttl,
            "relevanceThreshold": self.relevance_threshold,
            "maxSourcesReturned": self.max_sources_returned,
        }
