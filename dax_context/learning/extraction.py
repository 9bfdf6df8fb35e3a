"""
Measure and column references inside generated DAX queries.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from dax_context.knowledge.vocabulary import Vocabulary, default_vocabulary

_BRACKET_RE = re.compile(r"\[([A-Za-z_][A-Za-z0-9_]*)\]")
_QUALIFIED_COLUMN_RE = re.compile(r"'([^']+)'\[([^\]]+)\]")


@dataclass
class QueryReferences:
    measures: List[str] = field(default_factory=list)
    columns: List[str] = field(default_factory=list)


def extract_measures_and_columns(
    query_text: str,
    vocabulary: Optional[Vocabulary] = None,
) -> QueryReferences:
    """
    Split bracketed identifiers into measures and columns.

    `[Name]` is a measure when Name starts with a known measure prefix
    (QA_, Soma_, ...), otherwise it is kept as a column. `'Table'[Column]`
    is always a column, reported as `Table.Column`.
    """
    prefixes = (vocabulary or default_vocabulary()).measure_prefixes
    refs = QueryReferences()
    for m in _BRACKET_RE.finditer(query_text or ""):
        name = m.group(1)
        target = refs.measures if name.startswith(prefixes) else refs.columns
        if name not in target:
            target.append(name)
    for m in _QUALIFIED_COLUMN_RE.finditer(query_text or ""):
        full = f"{m.group(1)}.{m.group(2)}"
        if full not in refs.columns:
            refs.columns.append(full)
    return refs


def suggest_measures(
    history_queries: Iterable[str],
    training_queries: Iterable[str],
    *,
    history_weight: int = 1,
    training_weight: int = 2,
    top_n: int = 5,
    vocabulary: Optional[Vocabulary] = None,
) -> List[str]:
    """Most frequent measures across queries; training queries count double."""
    counts: Dict[str, int] = {}

    def _tally(queries: Iterable[str], weight: int) -> None:
        for text in queries:
            for name in extract_measures_and_columns(text, vocabulary).measures:
                counts[name] = counts.get(name, 0) + weight

    _tally(history_queries, history_weight)
    _tally(training_queries, training_weight)
    # sorted() is stable, so ties keep first-seen order.
    ranked: Sequence[tuple[str, int]] = sorted(counts.items(), key=lambda kv: -kv[1])
    return [name for name, _ in ranked[:top_n]]
