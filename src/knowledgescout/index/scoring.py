"""Keyword relevance scoring for chunks."""

from __future__ import annotations

from typing import Mapping, Sequence, Tuple

from knowledgescout.query.vocabulary import INTENT_BOOSTS
from knowledgescout.utils.text import tokenize

EXACT_MATCH_WEIGHT = 4
PARTIAL_MATCH_WEIGHT = 2
COVERAGE_WEIGHT = 2
LENGTH_PIVOT = 100
LENGTH_SCALE = 1000
MIN_LENGTH_FACTOR = 0.2


class RelevanceScorer:
    """Score a chunk against expanded query terms.

    The score combines weighted term matches, an intent-specific multiplier,
    a coverage bonus and a length penalty. It is unbounded and only
    comparable between chunks scored for the same query.
    """

    def __init__(
        self, intent_boosts: Mapping[str, Tuple[Sequence[str], float]] = INTENT_BOOSTS
    ) -> None:
        self.intent_boosts = intent_boosts

    def score(self, terms: Sequence[str], chunk_text: str, intent: str) -> float:
        if not terms:
            return 0.0

        words = tokenize(chunk_text)
        score = 0.0
        covered = 0
        for term in terms:
            matches = 0
            exact = 0
            for word in words:
                if word == term:
                    exact += 1
                    matches += 1
                elif term in word or word in term:
                    matches += 1
            if matches:
                covered += 1
                score += exact * EXACT_MATCH_WEIGHT + (matches - exact) * PARTIAL_MATCH_WEIGHT

        score *= self.intent_multiplier(chunk_text, intent)
        score *= 1 + (covered / len(terms)) * COVERAGE_WEIGHT
        score *= self.length_factor(chunk_text)
        return score

    def intent_multiplier(self, chunk_text: str, intent: str) -> float:
        boost = self.intent_boosts.get(intent)
        if boost is None:
            return 1.0
        markers, factor = boost
        lowered = chunk_text.lower()
        if any(marker in lowered for marker in markers):
            return factor
        return 1.0

    @staticmethod
    def length_factor(chunk_text: str) -> float:
        return max(MIN_LENGTH_FACTOR, 1 - (len(chunk_text) - LENGTH_PIVOT) / LENGTH_SCALE)
