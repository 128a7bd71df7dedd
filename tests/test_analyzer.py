"""Tests for query expansion and intent classification."""

from __future__ import annotations

import pytest

from knowledgescout.query.analyzer import QueryAnalyzer
from knowledgescout.query.vocabulary import SYNONYMS
from knowledgescout.utils.text import tokenize


@pytest.fixture
def analyzer() -> QueryAnalyzer:
    return QueryAnalyzer()


class TestExpand:
    """Test QueryAnalyzer.expand."""

    def test_superset_of_tokens(self, analyzer: QueryAnalyzer) -> None:
        query = "How do neural networks process data?"
        expanded = analyzer.expand(query)

        assert set(tokenize(query)) <= set(expanded)

    def test_adds_synonyms(self, analyzer: QueryAnalyzer) -> None:
        expanded = analyzer.expand("machine learning")

        assert expanded[:2] == ("machine", "learning")
        for term in ("algorithm", "model", "system", "automation", "education", "adaptation"):
            assert term in expanded

    def test_no_duplicates(self, analyzer: QueryAnalyzer) -> None:
        expanded = analyzer.expand("machine learning training")

        assert len(expanded) == len(set(expanded))
        assert expanded.count("learning") == 1

    def test_expansion_is_one_step(self, analyzer: QueryAnalyzer) -> None:
        """Re-expanding only adds the direct synonyms of the expanded terms."""
        first = analyzer.expand("deep learning")
        second = analyzer.expand(" ".join(first))

        direct = set(first)
        for term in first:
            direct.update(SYNONYMS.get(term, ()))
        assert set(second) == direct

    def test_short_tokens_not_expanded(self, analyzer: QueryAnalyzer) -> None:
        assert analyzer.expand("AI") == ()

    def test_empty_query(self, analyzer: QueryAnalyzer) -> None:
        assert analyzer.expand("") == ()

    def test_injected_synonyms(self) -> None:
        analyzer = QueryAnalyzer(synonyms={"cat": ("feline", "kitten")})
        assert analyzer.expand("cat food") == ("cat", "food", "feline", "kitten")


class TestClassifyIntent:
    """Test QueryAnalyzer.classify_intent."""

    @pytest.mark.parametrize(
        ("query", "intent"),
        [
            ("What is machine learning?", "definition"),
            ("What are the types of neural networks?", "types"),
            ("Give me some examples of robots", "examples"),
            ("How does training work?", "how"),
            ("When was the transistor invented?", "when"),
            ("Where is computer vision used?", "where"),
            ("Why should we care?", "why"),
            ("Python vs Java", "comparison"),
            ("Hello there", "general"),
        ],
    )
    def test_intents(self, analyzer: QueryAnalyzer, query: str, intent: str) -> None:
        assert analyzer.classify_intent(query) == intent

    def test_earlier_intent_wins(self, analyzer: QueryAnalyzer) -> None:
        assert analyzer.classify_intent("What is the difference between the types?") == "definition"

    def test_case_insensitive(self, analyzer: QueryAnalyzer) -> None:
        assert analyzer.classify_intent("DEFINE ENTROPY") == "definition"

    def test_injected_patterns(self) -> None:
        analyzer = QueryAnalyzer(intent_patterns=(("why", ("reason",)),))

        assert analyzer.classify_intent("What is the reason") == "why"
        assert analyzer.classify_intent("What is it") == "general"
