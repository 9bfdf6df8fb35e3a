"""
Tests for intent classification, question similarity and the context optimizer.
"""

from __future__ import annotations

import re

import pytest

from dax_context.knowledge import (
    CannedQuery,
    Column,
    Example,
    Measure,
    ParsedDocumentation,
    QuestionIntent,
    Table,
    Vocabulary,
    parse_documentation,
)
from dax_context.retrieval import OptimizerConfig, classify_intent, optimize, similarity, summarize_tables


@pytest.mark.parametrize(
    "question, expected",
    [
        ("Qual o faturamento por filial em março?", QuestionIntent.FATURAMENTO_FILIAL),
        ("Faturamento por vendedor", QuestionIntent.FATURAMENTO_VENDEDOR),
        ("Qual o faturamento total de fevereiro?", QuestionIntent.FATURAMENTO_TOTAL),
        ("Quem mais vendeu esse mês?", QuestionIntent.TOP_VENDEDORES),
        ("Qual o ticket médio de ontem?", QuestionIntent.TICKET_MEDIO),
        ("Quanto temos a pagar amanhã?", QuestionIntent.CONTAS_PAGAR),
        ("Qual o saldo no banco?", QuestionIntent.SALDO),
        ("Bom dia", QuestionIntent.OUTROS),
        ("", QuestionIntent.OUTROS),
    ],
)
def test_classify_intent(question: str, expected: QuestionIntent):
    assert classify_intent(question) is expected


def test_classify_intent_uses_injected_rules():
    vocab = Vocabulary(
        intent_rules=((QuestionIntent.MARGEM, re.compile(r"rentabilidade")),),
        default_intent=QuestionIntent.SALDO,
    )
    assert classify_intent("Qual a rentabilidade?", vocab) is QuestionIntent.MARGEM
    assert classify_intent("Qual o faturamento?", vocab) is QuestionIntent.SALDO


def test_similarity_identity_symmetry_and_disjoint():
    a = "qual o faturamento total"
    b = "faturamento total de março"

    assert similarity(a, a) == 1.0
    assert similarity(a, b) == similarity(b, a)
    assert similarity("saldo banco", "ticket medio") == 0.0
    assert similarity("a b", "A c") == pytest.approx(1 / 3)


def test_similarity_empty_strings():
    assert similarity("", "") == 0.0
    assert similarity("", "faturamento") == 0.0


def test_optimize_selects_relevant_items(sample_documentation: str):
    doc = parse_documentation(sample_documentation)
    ctx = optimize(doc, "Qual o faturamento total de fevereiro?")

    assert ctx.keywords == {"faturamento", "total", "fevereiro"}
    assert [m.name for m in ctx.measures] == ["QA_Faturamento"]
    assert [q.id for q in ctx.queries] == ["Q1", "Q2"]
    assert [e.question for e in ctx.examples] == ["Qual o faturamento de ontem?"]
    assert ctx.total_measures == 2
    assert ctx.total_queries == 3
    assert ctx.total_examples == 2
    assert ctx.base is not None
    assert [t.table for t in ctx.tables] == ["Vendas", "Filial"]
    assert "faturamento" in ctx.concepts


def _large_document() -> ParsedDocumentation:
    return ParsedDocumentation(
        base="Base",
        measures=[Measure(name=f"QA_M{i}", description=f"Medida {i}") for i in range(30)],
        queries=[CannedQuery(id=f"Q{i}", question=f"Pergunta {i}", measures=[f"QA_M{i}"]) for i in range(20)],
        examples=[Example(question=f"Pergunta {i}", measures=[f"QA_M{i}"]) for i in range(10)],
        tables=[
            Table(table="Vendas", columns=[Column(name=f"Vendas.C{i}") for i in range(8)]),
            Table(table="Vazia"),
        ],
    )


def test_optimize_caps_relevant_lists():
    ctx = optimize(_large_document(), "Qual a medida?")

    assert len(ctx.measures) == 15
    assert len(ctx.queries) == 5
    assert len(ctx.examples) == 3
    assert ctx.total_measures == 30


def test_optimize_falls_back_to_first_items_when_nothing_matches():
    ctx = optimize(_large_document(), "xyzzy plugh")

    assert [m.name for m in ctx.measures] == [f"QA_M{i}" for i in range(10)]
    assert [q.id for q in ctx.queries] == [f"Q{i}" for i in range(5)]
    assert len(ctx.examples) == 3


def test_optimize_without_keywords_keeps_leading_items():
    ctx = optimize(_large_document(), "o que é?")

    assert ctx.keywords == set()
    assert len(ctx.measures) == 15
    assert ctx.measures[0].name == "QA_M0"


def test_optimize_respects_custom_caps():
    config = OptimizerConfig(max_measures=4, max_queries=2, max_examples=1, fallback_measures=3)
    relevant = optimize(_large_document(), "medida", config)
    fallback = optimize(_large_document(), "xyzzy", config)

    assert len(relevant.measures) == 4
    assert len(fallback.measures) == 3
    assert len(fallback.queries) == 2
    assert len(fallback.examples) == 1


def test_tables_are_summarized():
    ctx = optimize(_large_document(), "medida")

    assert [t.table for t in ctx.tables] == ["Vendas"]
    assert len(ctx.tables[0].columns) == 5
    assert len(summarize_tables(_large_document().tables, 2)[0].columns) == 2


def test_optimize_without_documentation():
    ctx = optimize(None, "Qual o faturamento?")
    assert ctx.is_empty
    assert ctx.measures == []
