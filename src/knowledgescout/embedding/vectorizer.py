"""Bag-of-words term-frequency vectors."""

from __future__ import annotations

from collections import Counter
from typing import Dict

from knowledgescout.utils.text import tokenize


def vectorize(text: str) -> Dict[str, float]:
    """Map each surviving word to its share of the text's tokens.

    Weights are plain term frequencies, so they sum to 1.0 for any text that
    has at least one token and the mapping is empty otherwise.
    """
    words = tokenize(text)
    if not words:
        return {}

    total = len(words)
    return {word: count / total for word, count in Counter(words).items()}
