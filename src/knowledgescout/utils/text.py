"""Text helpers shared by vectorization, query analysis and scoring."""

from __future__ import annotations

import hashlib
import re
from typing import List

_PUNCTUATION = re.compile(r"[^\w\s]")

MIN_TOKEN_LENGTH = 3


def tokenize(text: str) -> List[str]:
    """Lowercase, drop punctuation and keep whitespace-separated words of 3+ chars."""
    cleaned = _PUNCTUATION.sub("", text.lower())
    return [word for word in cleaned.split() if len(word) >= MIN_TOKEN_LENGTH]


def normalize_query(query: str) -> str:
    return query.strip().lower()


def query_digest(query: str) -> str:
    """Stable cache key for a query."""
    return hashlib.sha256(normalize_query(query).encode("utf-8")).hexdigest()


def truncate(text: str, limit: int, *, marker: str = "...") -> str:
    """Cut text to `limit` characters and append the marker."""
    return text[:limit] + marker
