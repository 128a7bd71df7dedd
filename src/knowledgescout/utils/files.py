"""Utility helpers for working with files."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator

TEXT_SUFFIXES = (".txt", ".md")


def iter_text_paths(inputs: Iterable[Path]) -> Iterator[Path]:
    """Yield plain-text paths from input paths, descending into directories."""
    for item in inputs:
        if item.is_dir():
            yield from iter_text_paths(
                sorted(child for child in item.rglob("*") if child.is_file())
            )
        elif item.is_file() and item.suffix.lower() in TEXT_SUFFIXES:
            yield item

