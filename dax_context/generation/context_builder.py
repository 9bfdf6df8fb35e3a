"""
Prompt context assembly.

Renders, in fixed priority order, training examples, historical queries that
worked, suggested measures and the optimized documentation excerpt into one
text block. Curated examples come first so they outrank history and raw
documentation. Empty sections are left out and the result is cut to
`GenerationConfig.max_chars`, dropping from the end. The documentation
excerpt has its own, smaller limit.
"""

from __future__ import annotations

from typing import List, Optional

from dax_context.knowledge.vocabulary import Vocabulary
from dax_context.learning.extraction import extract_measures_and_columns
from dax_context.learning.service import QueryContext, ScoredExample, ScoredQuery
from dax_context.retrieval.optimizer import OptimizedContext

from .config import GenerationConfig
from .prompts import (
    COLUMNS_HEADER,
    DOCUMENTATION_HEADER,
    EXAMPLES_HEADER,
    HISTORY_FOOTER,
    HISTORY_HEADER,
    MEASURES_HEADER,
    QUERIES_HEADER,
    SUGGESTED_MEASURES_LINE,
    TRAINING_FOOTER,
    TRAINING_HEADER,
)

_TRUNCATION_MARK = "..."
# A cut section shorter than this is dropped instead of kept as a stub.
_MIN_TAIL_CHARS = 200


def _dax_block(query_text: str) -> List[str]:
    return ["```dax", query_text.strip(), "```"]


def render_training_examples(
    examples: List[ScoredExample],
    vocabulary: Optional[Vocabulary] = None,
) -> str:
    if not examples:
        return ""
    lines = [TRAINING_HEADER, ""]
    for i, scored in enumerate(examples, 1):
        ex = scored.record
        measures = extract_measures_and_columns(ex.query_text, vocabulary).measures
        lines.append(f'### {i}. "{ex.question_text}"')
        if measures:
            lines.append(f"Medidas: {', '.join(measures)}")
        lines.extend(_dax_block(ex.query_text))
        if ex.response_text:
            lines.append(f'Resposta: "{ex.response_text}"')
        lines.append("")
    lines.append(TRAINING_FOOTER)
    return "\n".join(lines)


def render_similar_queries(queries: List[ScoredQuery], max_items: int) -> str:
    if not queries or max_items <= 0:
        return ""
    lines = [HISTORY_HEADER, ""]
    for i, scored in enumerate(queries[:max_items], 1):
        q = scored.record
        lines.append(f'{i}. "{q.question_text}" (usada {q.times_reused}x)')
        lines.extend(_dax_block(q.query_text))
    lines.append(HISTORY_FOOTER)
    return "\n".join(lines)


def render_suggested_measures(measures: List[str]) -> str:
    if not measures:
        return ""
    return SUGGESTED_MEASURES_LINE.format(measures=", ".join(measures))


def render_documentation(ctx: OptimizedContext) -> List[str]:
    """Documentation excerpt as separate parts (base, measures, queries, examples, columns)."""
    if ctx.is_empty:
        return []
    parts: List[str] = [DOCUMENTATION_HEADER]
    if ctx.base:
        parts.append(ctx.base.strip())

    if ctx.measures:
        lines = [MEASURES_HEADER.format(shown=len(ctx.measures), total=ctx.total_measures), ""]
        for m in ctx.measures:
            lines.append(f"### {m.name}")
            lines.append(f"- **Descrição:** {m.description}")
            if m.when_to_use:
                lines.append(f"- **Quando usar:** {m.when_to_use}")
            if m.area:
                lines.append(f"- **Área:** {m.area}")
            if m.formula:
                lines.append(f"- **Fórmula:** `{m.formula}`")
            lines.append("")
        parts.append("\n".join(lines).rstrip())

    if ctx.queries:
        lines = [QUERIES_HEADER.format(shown=len(ctx.queries), total=ctx.total_queries), ""]
        for q in ctx.queries:
            lines.append(f"### {q.id}: {q.question}")
            lines.append(f"- **Medidas:** {', '.join(q.measures) or '-'}")
            lines.append(f"- **Agrupadores:** {', '.join(q.groupers) or '-'}")
            lines.append(f"- **Filtros:** {', '.join(q.filters) or '-'}")
            lines.append("")
        parts.append("\n".join(lines).rstrip())

    if ctx.examples:
        lines = [EXAMPLES_HEADER.format(shown=len(ctx.examples), total=ctx.total_examples), ""]
        for i, ex in enumerate(ctx.examples, 1):
            lines.append(f"### Exemplo {i}")
            lines.append(f"**Pergunta:** {ex.question}")
            lines.append(f"**Medidas:** {', '.join(ex.measures)}")
            if ex.groupers:
                lines.append(f"**Agrupadores:** {', '.join(ex.groupers)}")
            if ex.filters:
                lines.append(f"**Filtros:** {', '.join(ex.filters)}")
            lines.append(f"**Resposta modelo:** {ex.response}")
            lines.append("")
        parts.append("\n".join(lines).rstrip())

    if ctx.tables:
        lines = [COLUMNS_HEADER, ""]
        for t in ctx.tables:
            lines.append(f"### {t.table}")
            for col in t.columns:
                lines.append(f"- {col.name} ({col.type}) - {'/'.join(col.usage)}")
            lines.append("")
        parts.append("\n".join(lines).rstrip())

    if len(parts) == 1:
        return []
    return parts


def _fit(parts: List[str], max_chars: int) -> str:
    """Join parts with blank lines, cutting at `max_chars`."""
    out: List[str] = []
    used = 0
    for part in parts:
        sep = 2 if out else 0
        if used + sep + len(part) <= max_chars:
            out.append(part)
            used += sep + len(part)
            continue
        remaining = max_chars - used - sep - len(_TRUNCATION_MARK)
        if remaining >= _MIN_TAIL_CHARS:
            out.append(part[:remaining].rstrip() + _TRUNCATION_MARK)
        break
    return "\n\n".join(out)


def build_context(
    optimized: Optional[OptimizedContext],
    query_context: Optional[QueryContext],
    config: Optional[GenerationConfig] = None,
    vocabulary: Optional[Vocabulary] = None,
) -> str:
    """
    Assemble the bounded context handed to the model.

    Args:
        optimized: Documentation excerpt selected for the question.
        query_context: Learned queries, training examples and suggested measures.
        config: Size limits.
        vocabulary: Measure prefixes used to list the measures of training examples.

    Returns:
        The assembled text, or "" when there is nothing to say.
    """
    config = config or GenerationConfig()
    parts: List[str] = []
    if query_context is not None:
        parts.append(render_training_examples(query_context.training_examples, vocabulary))
        parts.append(render_similar_queries(query_context.similar_queries, config.max_similar_queries))
        parts.append(render_suggested_measures(query_context.suggested_measures))
    if optimized is not None:
        parts.append(_fit(render_documentation(optimized), config.max_documentation_chars))
    return _fit([p for p in parts if p], config.max_chars)
