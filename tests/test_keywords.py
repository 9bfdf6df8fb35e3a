"""
Tests for keyword and concept extraction.
"""

from __future__ import annotations

from dax_context.knowledge import KeywordExtractor, Vocabulary, extract_keywords, identify_concepts
from dax_context.knowledge.keywords import normalize


def test_normalize_strips_accents_and_case():
    assert normalize("Março ÁREA Inadimplência") == "marco area inadimplencia"
    assert normalize(None) == ""  # type: ignore[arg-type]


def test_extract_keywords_drops_stopwords_short_tokens_and_punctuation():
    assert extract_keywords("Qual o faturamento por filial em março?") == {"faturamento", "filial", "marco"}


def test_extract_keywords_empty_text():
    assert extract_keywords("") == set()
    assert extract_keywords("o a de em") == set()


def test_identify_concepts_by_trigger_substring():
    concepts = identify_concepts("Quais contas a pagar estão vencidas?")
    assert {"pagar", "vencimento"} <= concepts
    assert "margem" not in concepts


def test_identify_concepts_matches_accented_triggers():
    assert "inadimplencia" in identify_concepts("Qual a inadimplência dos clientes?")
    assert "tempo" in identify_concepts("Vendas de amanhã")


def test_identify_concepts_empty_for_unrelated_text():
    assert identify_concepts("xyz") == set()


def test_custom_vocabulary_is_injected():
    vocab = Vocabulary(
        stopwords=frozenset({"qual"}),
        concepts=(("estoque", ("estoque", "inventário")),),
    )
    extractor = KeywordExtractor(vocab)

    assert extractor.identify_concepts("Qual o inventario atual?") == {"estoque"}
    assert extractor.extract_keywords("Qual o estoque atual?") == {"estoque", "atual"}
    assert vocab.concept_names == ("estoque",)
