"""Fixed vocabulary tables used by query analysis and scoring.

All tables are read-only; pass replacements to `QueryAnalyzer` or
`RelevanceScorer` to customize them.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Tuple

SYNONYMS: Mapping[str, Tuple[str, ...]] = MappingProxyType(
    {
        "ai": ("artificial", "intelligence", "machine", "smart", "automated"),
        "machine": ("learning", "algorithm", "model", "system", "automation"),
        "neural": ("network", "deep", "learning", "brain", "cognitive"),
        "deep": ("learning", "neural", "network", "advanced", "sophisticated"),
        "nlp": ("natural", "language", "processing", "text", "linguistic"),
        "computer": ("vision", "image", "recognition", "visual", "optical"),
        "algorithm": ("method", "technique", "approach", "procedure", "process"),
        "data": ("dataset", "information", "training", "sample", "example"),
        "model": ("algorithm", "system", "network", "framework", "architecture"),
        "training": ("learning", "optimization", "fitting", "education", "development"),
        "intelligence": ("smart", "cognitive", "mental", "brain", "mind"),
        "learning": ("education", "training", "development", "improvement", "adaptation"),
        "vision": ("sight", "visual", "image", "optical", "perception"),
        "language": ("speech", "text", "communication", "linguistic", "verbal"),
        "processing": ("analysis", "computation", "handling", "manipulation", "treatment"),
    }
)

# Order matters: the first matching intent wins.
INTENT_PATTERNS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("definition", ("what is", "define", "definition", "meaning", "explain")),
    ("types", ("types", "kinds", "categories", "varieties", "different")),
    ("examples", ("examples", "instance", "case", "sample", "illustration")),
    ("how", ("how", "process", "method", "way", "procedure")),
    ("when", ("when", "history", "timeline", "evolution", "development")),
    ("where", ("where", "applications", "uses", "implementations", "deployments")),
    ("why", ("why", "benefits", "advantages", "importance", "significance")),
    ("comparison", ("vs", "versus", "compare", "difference", "contrast")),
)

# intent -> (marker phrases looked up in the chunk, score multiplier)
INTENT_BOOSTS: Mapping[str, Tuple[Tuple[str, ...], float]] = MappingProxyType(
    {
        "definition": (("is a", "refers to", "means", "defined as"), 2.0),
        "types": (("types", "categories", "kinds", "varieties"), 1.8),
        "examples": (("examples", "instance", "such as", "including"), 1.6),
        "how": (("how", "process", "method", "way"), 1.5),
        # applications tier
        "where": (("applications", "uses", "implementations", "deployments"), 1.7),
    }
)
