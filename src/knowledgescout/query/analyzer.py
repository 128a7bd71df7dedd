"""Query expansion and intent classification."""

from __future__ import annotations

from typing import Mapping, Sequence, Tuple

from knowledgescout.models import Intent
from knowledgescout.query.vocabulary import INTENT_PATTERNS, SYNONYMS
from knowledgescout.utils.text import tokenize


class QueryAnalyzer:
    """Expands query terms with synonyms and guesses the question type."""

    def __init__(
        self,
        synonyms: Mapping[str, Sequence[str]] = SYNONYMS,
        intent_patterns: Sequence[Tuple[str, Sequence[str]]] = INTENT_PATTERNS,
    ) -> None:
        self.synonyms = synonyms
        self.intent_patterns = tuple(intent_patterns)

    def expand(self, query: str) -> Tuple[str, ...]:
        """Return the query tokens followed by their synonyms, without duplicates."""
        tokens = tokenize(query)
        expanded = list(tokens)
        for token in tokens:
            expanded.extend(self.synonyms.get(token, ()))
        return tuple(dict.fromkeys(expanded))

    def classify_intent(self, query: str) -> Intent:
        lowered = query.lower()
        for intent, keywords in self.intent_patterns:
            if any(keyword in lowered for keyword in keywords):
                return intent  # type: ignore[return-value]
        return "general"
