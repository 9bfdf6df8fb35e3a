"""
Tests for prompt context assembly.
"""

from __future__ import annotations

import datetime as dt

import pytest

from dax_context.db.models import LearnedQuery, TrainingExample
from dax_context.generation import GenerationConfig, build_context, render_documentation
from dax_context.generation.prompts import DOCUMENTATION_HEADER, HISTORY_HEADER, TRAINING_HEADER
from dax_context.knowledge import QuestionIntent, Vocabulary, parse_documentation
from dax_context.learning import QueryContext, ScoredExample, ScoredQuery
from dax_context.retrieval import OptimizedContext, optimize

NOW = dt.datetime(2024, 3, 1, tzinfo=dt.timezone.utc)


@pytest.fixture
def query_context() -> QueryContext:
    example = TrainingExample(
        id="ex1",
        dataset_id="ds1",
        question_text="Faturamento do mês",
        query_text='EVALUATE ROW("Fat", [QA_Faturamento])',
        response_text="O faturamento do mês foi R$ 10.000,00",
        category="Faturamento",
        tags=[],
        is_validated=True,
        validation_count=1,
        last_used_at=None,
        created_at=NOW,
    )
    learned = [
        LearnedQuery(
            id=f"lq{i}",
            dataset_id="ds1",
            question_text=f"faturamento total {i}",
            intent="faturamento_total",
            query_text=f'EVALUATE ROW("Fat{i}", [QA_Faturamento])',
            query_hash=f"hash{i}",
            times_reused=i,
            success=True,
            source="chat",
            created_at=NOW,
        )
        for i in range(5)
    ]
    return QueryContext(
        intent=QuestionIntent.FATURAMENTO_TOTAL,
        similar_queries=[ScoredQuery(record=q, similarity=0.5) for q in learned],
        training_examples=[ScoredExample(record=example, score=7, concept_matches=1)],
        suggested_measures=["QA_Faturamento"],
    )


@pytest.fixture
def optimized(sample_documentation: str) -> OptimizedContext:
    return optimize(parse_documentation(sample_documentation), "Qual o faturamento total de fevereiro?")


def test_sections_in_priority_order(optimized: OptimizedContext, query_context: QueryContext):
    text = build_context(optimized, query_context)

    training = text.index(TRAINING_HEADER)
    history = text.index(HISTORY_HEADER)
    suggested = text.index("Medidas recomendadas: QA_Faturamento")
    documentation = text.index(DOCUMENTATION_HEADER)
    assert training < history < suggested < documentation


def test_training_example_rendering(optimized: OptimizedContext, query_context: QueryContext):
    text = build_context(optimized, query_context)

    assert '### 1. "Faturamento do mês"' in text
    assert "Medidas: QA_Faturamento" in text
    assert 'Resposta: "O faturamento do mês foi R$ 10.000,00"' in text
    assert "```dax" in text


def test_similar_queries_capped(optimized: OptimizedContext, query_context: QueryContext):
    text = build_context(optimized, query_context, GenerationConfig(max_similar_queries=2))

    assert '1. "faturamento total 0" (usada 0x)' in text
    assert '2. "faturamento total 1" (usada 1x)' in text
    assert "faturamento total 2" not in text


def test_documentation_excerpt_contents(optimized: OptimizedContext):
    parts = render_documentation(optimized)

    assert parts[0] == DOCUMENTATION_HEADER
    body = "\n".join(parts)
    assert "## MEDIDAS DISPONÍVEIS (1 de 2 total)" in body
    assert "### QA_Faturamento" in body
    assert "- **Fórmula:** `SUM(Vendas[Valor])`" in body
    assert "QA_TicketMedio" not in body
    assert "### Q1: Faturamento por filial" in body
    assert "## COLUNAS PRINCIPAIS" in body
    assert "- Filial.Nome (String) - filter/group" in body


def test_empty_sections_are_omitted(optimized: OptimizedContext):
    text = build_context(optimized, QueryContext())

    assert TRAINING_HEADER not in text
    assert HISTORY_HEADER not in text
    assert "Medidas recomendadas" not in text
    assert text.startswith(DOCUMENTATION_HEADER)


def test_nothing_to_say():
    assert build_context(None, None) == ""
    assert build_context(OptimizedContext(), QueryContext()) == ""
    assert render_documentation(OptimizedContext()) == []


def test_output_is_bounded(optimized: OptimizedContext, query_context: QueryContext):
    for max_chars in (50, 300, 800, 2000):
        text = build_context(optimized, query_context, GenerationConfig(max_chars=max_chars))
        assert len(text) <= max_chars

    full = build_context(optimized, query_context)
    text = build_context(optimized, query_context, GenerationConfig(max_chars=800))
    assert len(full) > 800
    assert text.startswith(TRAINING_HEADER)
    assert "## COLUNAS PRINCIPAIS" in full
    assert "## COLUNAS PRINCIPAIS" not in text


def test_documentation_has_its_own_limit(optimized: OptimizedContext):
    text = build_context(optimized, QueryContext(), GenerationConfig(max_documentation_chars=300))

    assert len(text) <= 300
    assert text.startswith(DOCUMENTATION_HEADER)
    assert "## COLUNAS PRINCIPAIS" not in text


def test_training_example_measures_follow_injected_vocabulary(optimized: OptimizedContext):
    example = TrainingExample(
        id="ex2",
        dataset_id="ds1",
        question_text="Total de KPIs",
        query_text='EVALUATE ROW("Total", [KPI_Total])',
        response_text="",
        tags=[],
        is_validated=True,
        created_at=NOW,
    )
    ctx = QueryContext(training_examples=[ScoredExample(record=example, score=3, concept_matches=0)])

    assert "Medidas: KPI_Total" not in build_context(optimized, ctx)
    text = build_context(optimized, ctx, vocabulary=Vocabulary(measure_prefixes=("KPI_",)))
    assert "Medidas: KPI_Total" in text
