"""Plain-text document loading."""

from __future__ import annotations

import hashlib
import logging
import math
import uuid
from pathlib import Path

from knowledgescout.models import Document

LOGGER = logging.getLogger(__name__)

CHARS_PER_PAGE = 2000


def estimate_pages(text: str) -> int:
    return max(1, math.ceil(len(text) / CHARS_PER_PAGE))


def document_from_text(title: str, text: str, pages: int | None = None) -> Document:
    """Wrap already-extracted text in a new document with a fresh id."""
    return Document(
        id=str(uuid.uuid4()),
        title=title,
        text=text,
        pages=pages if pages is not None else estimate_pages(text),
        sha256=hashlib.sha256(text.encode("utf-8")).hexdigest(),
    )


def load_text_document(path: Path) -> Document:
    """Read a UTF-8 text file into a new document."""
    text = path.read_text(encoding="utf-8")
    document = document_from_text(path.stem, text)
    LOGGER.debug("Loaded %s: %d characters, %d pages", path, len(text), document.pages)
    return document
