"""
Question-driven selection of the documentation excerpt sent to the model.

Relevance is plain keyword containment: an item is relevant when any
question keyword appears in its joined, normalized text. Each list is capped;
when nothing is relevant the first items of the source list are used
instead, so a non-empty document never yields an empty excerpt.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Set, TypeVar

from dax_context.knowledge.keywords import KeywordExtractor, normalize
from dax_context.knowledge.models import (
    CannedQuery,
    Example,
    Measure,
    ParsedDocumentation,
    Table,
)

from .config import OptimizerConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class OptimizedContext:
    """Documentation subset selected for one question."""

    base: Optional[str] = None
    measures: List[Measure] = field(default_factory=list)
    queries: List[CannedQuery] = field(default_factory=list)
    examples: List[Example] = field(default_factory=list)
    tables: List[Table] = field(default_factory=list)
    total_measures: int = 0
    total_queries: int = 0
    total_examples: int = 0
    keywords: Set[str] = field(default_factory=set)
    concepts: Set[str] = field(default_factory=set)

    @property
    def is_empty(self) -> bool:
        return not (self.base or self.measures or self.queries or self.examples or self.tables)


def _measure_text(m: Measure) -> str:
    return f"{m.name} {m.description} {m.when_to_use} {m.area}"


def _query_text(q: CannedQuery) -> str:
    return f"{q.id} {q.question} {' '.join(q.measures)}"


def _example_text(e: Example) -> str:
    return f"{e.question} {' '.join(e.measures)}"


def _select(
    items: Sequence[T],
    keywords: Set[str],
    text_of: Callable[[T], str],
    cap: int,
    fallback: int,
) -> List[T]:
    if not items:
        return []
    if not keywords:
        return list(items[:cap])
    relevant = [it for it in items if any(kw in normalize(text_of(it)) for kw in keywords)]
    if relevant:
        return relevant[:cap]
    return list(items[:fallback])


def summarize_tables(tables: Sequence[Table], columns_per_table: int) -> List[Table]:
    """Tables with only their first columns; tables without columns are dropped."""
    return [
        Table(table=t.table, description=t.description, columns=list(t.columns[:columns_per_table]))
        for t in tables
        if t.columns
    ]


def optimize(
    doc: Optional[ParsedDocumentation],
    question: str,
    config: Optional[OptimizerConfig] = None,
    extractor: Optional[KeywordExtractor] = None,
) -> OptimizedContext:
    """Select and cap the measures, queries and examples relevant to `question`."""
    if doc is None:
        return OptimizedContext()
    config = config or OptimizerConfig()
    extractor = extractor or KeywordExtractor()

    keywords = extractor.extract_keywords(question)
    concepts = extractor.identify_concepts(question)
    measures = doc.measures or []
    queries = doc.queries or []
    examples = doc.examples or []

    ctx = OptimizedContext(
        base=doc.base,
        measures=_select(
            measures, keywords, _measure_text, config.max_measures,
            min(config.fallback_measures, config.max_measures),
        ),
        queries=_select(queries, keywords, _query_text, config.max_queries, config.max_queries),
        examples=_select(examples, keywords, _example_text, config.max_examples, config.max_examples),
        tables=summarize_tables(doc.tables or [], config.columns_per_table),
        total_measures=len(measures),
        total_queries=len(queries),
        total_examples=len(examples),
        keywords=keywords,
        concepts=concepts,
    )
    logger.debug(
        "Optimized context: %s/%s measures, %s/%s queries, %s/%s examples (keywords=%s)",
        len(ctx.measures), len(measures), len(ctx.queries), len(queries),
        len(ctx.examples), len(examples), sorted(keywords),
    )
    return ctx
