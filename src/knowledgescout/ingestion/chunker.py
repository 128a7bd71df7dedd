"""Paragraph-aware chunking with overlap and sentence fallback."""

from __future__ import annotations

import logging
import math
import re
from typing import List

from knowledgescout.models import ChunkDraft

LOGGER = logging.getLogger(__name__)

_BLANK_LINE = re.compile(r"\n\s*\n")
_SENTENCE = re.compile(r"[^.!?]+[.!?]*")

MIN_SENTENCE_CHARS = 10
OVERFLOW_FACTOR = 1.5


class Chunker:
    """Split document text into ordered, overlapping chunks with page estimates."""

    def __init__(self, *, chunk_size: int = 400, chunk_overlap: int = 100) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if chunk_overlap < 0 or chunk_overlap >= chunk_size:
            raise ValueError("chunk_overlap must be in [0, chunk_size)")
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap

    def split(self, text: str, pages: int = 1) -> List[ChunkDraft]:
        pages = max(1, pages)
        paragraphs = [p.strip() for p in _BLANK_LINE.split(text) if p.strip()]
        chunks: List[ChunkDraft] = []
        buffer = ""

        def emit(content: str) -> str:
            stripped = content.strip()
            index = len(chunks)
            chunks.append(
                ChunkDraft(
                    index=index,
                    page=self._estimate_page(index, len(text), pages),
                    text=stripped,
                )
            )
            return stripped

        for paragraph in paragraphs:
            if buffer and len(buffer) + len(paragraph) > self.chunk_size:
                emitted = emit(buffer)
                tail = emitted[-self.chunk_overlap :] if self.chunk_overlap else ""
                buffer = f"{tail}\n\n{paragraph}" if tail else paragraph
            else:
                buffer = f"{buffer}\n\n{paragraph}" if buffer else paragraph

            if len(buffer) > self.chunk_size * OVERFLOW_FACTOR:
                buffer = self._split_sentences(buffer, emit)

        if buffer.strip():
            emit(buffer)

        LOGGER.debug("Split %d characters into %d chunks", len(text), len(chunks))
        return chunks

    def _split_sentences(self, buffer: str, emit) -> str:
        """Emit full sentence groups from an oversized buffer, return the remainder."""
        sentences = [
            s for s in _SENTENCE.findall(buffer) if len(s.strip()) >= MIN_SENTENCE_CHARS
        ]
        current = ""
        for sentence in sentences:
            if current.strip() and len(current) + len(sentence) > self.chunk_size:
                emit(current)
                current = sentence
            else:
                current += sentence
        return current.strip()

    def _estimate_page(self, index: int, text_length: int, pages: int) -> int:
        if text_length == 0:
            return 1
        chars_per_page = text_length / pages
        estimate = math.ceil(index * self.chunk_size / chars_per_page)
        return min(pages, max(1, estimate))
