"""Answer assembly from ranked chunks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Mapping, Sequence

from knowledgescout.models import ScoredChunk
from knowledgescout.utils.text import truncate

NO_ANSWER = "No relevant information found in the documents."
MAX_ANSWER_CHARS = 800


@dataclass(frozen=True, slots=True)
class ExcerptRule:
    """How many follow-up chunks to append and how much of each."""

    max_excerpts: int
    min_ratio: float
    excerpt_chars: int


EXCERPT_RULES: Mapping[str, ExcerptRule] = {
    "definition": ExcerptRule(max_excerpts=1, min_ratio=0.7, excerpt_chars=200),
    "types": ExcerptRule(max_excerpts=2, min_ratio=0.6, excerpt_chars=150),
    "examples": ExcerptRule(max_excerpts=2, min_ratio=0.5, excerpt_chars=100),
}
DEFAULT_RULE = ExcerptRule(max_excerpts=1, min_ratio=0.6, excerpt_chars=200)


class AnswerComposer:
    def __init__(
        self,
        rules: Mapping[str, ExcerptRule] = EXCERPT_RULES,
        *,
        default_rule: ExcerptRule = DEFAULT_RULE,
        max_chars: int = MAX_ANSWER_CHARS,
    ) -> None:
        self.rules = rules
        self.default_rule = default_rule
        self.max_chars = max_chars

    def compose(self, ranked: Sequence[ScoredChunk], intent: str) -> str:
        if not ranked:
            return NO_ANSWER

        best = ranked[0]
        answer = best.chunk.text
        for extra in self._excerpts(ranked, intent):
            answer += " " + truncate(extra.chunk.text, self._rule(intent).excerpt_chars)

        if len(answer) > self.max_chars:
            answer = truncate(answer, self.max_chars)
        return answer

    def _rule(self, intent: str) -> ExcerptRule:
        return self.rules.get(intent, self.default_rule)

    def _excerpts(self, ranked: Sequence[ScoredChunk], intent: str) -> List[ScoredChunk]:
        best = ranked[0]
        rule = self._rule(intent)
        cutoff = best.score * rule.min_ratio

        if intent not in self.rules:
            # Only the runner-up is considered for general questions
            runner_up = ranked[1:2]
            return [c for c in runner_up if c.score > cutoff]

        candidates = [
            c for c in ranked[1:] if c.chunk.text != best.chunk.text and c.score > cutoff
        ]
        return candidates[: rule.max_excerpts]
