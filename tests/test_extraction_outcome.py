"""
Tests for DAX reference extraction and answer failure heuristics.
"""

from __future__ import annotations

import pytest

from dax_context.learning import (
    FailureReason,
    extract_measures_and_columns,
    identify_failure_reason,
    is_failure_response,
    suggest_measures,
)


def test_extract_measures_and_columns():
    query = (
        "EVALUATE SUMMARIZECOLUMNS('Filial'[Nome], \"Fat\", [QA_Faturamento], "
        "\"Qtd\", [Conta_Cupons], \"Fat2\", [QA_Faturamento])"
    )
    refs = extract_measures_and_columns(query)

    assert refs.measures == ["QA_Faturamento", "Conta_Cupons"]
    assert "Filial.Nome" in refs.columns
    assert "Nome" in refs.columns


def test_extract_from_empty_query():
    refs = extract_measures_and_columns("")
    assert refs.measures == []
    assert refs.columns == []


def test_suggest_measures_weights_training_over_history():
    history = ["[QA_Ticket]", "[QA_Ticket]"]
    training = ["[QA_Faturamento]", "[QA_Faturamento] [QA_Margem]"]

    assert suggest_measures(history, training) == ["QA_Faturamento", "QA_Ticket", "QA_Margem"]
    assert suggest_measures(history, training, top_n=1) == ["QA_Faturamento"]


def test_suggest_measures_ignores_columns():
    assert suggest_measures(["'Vendas'[Valor] [Data]"], []) == []


@pytest.mark.parametrize(
    "response",
    [
        "Não encontrei dados de vendas para esse período.",
        "Desculpe, não tenho acesso aos dados solicitados.",
        "Infelizmente não sei responder essa pergunta.",
    ],
)
def test_failure_responses(response: str):
    assert is_failure_response(response)


def test_successful_response():
    assert not is_failure_response("O faturamento de fevereiro foi R$ 152.340,00.")
    assert not is_failure_response("")


def test_late_failure_phrase_with_numbers_is_not_a_failure():
    response = "O faturamento total foi R$ 1.234,00. " + "Detalhe por filial. " * 15
    response += "Para a filial Norte não encontrei movimento."
    assert not is_failure_response(response)


def test_late_failure_phrase_without_numbers_is_a_failure():
    response = "Analisei todas as filiais. " * 12 + "Não encontrei movimento."
    assert is_failure_response(response)


def test_identify_failure_reason():
    assert identify_failure_reason("Não encontrei dados", True) is FailureReason.EXECUTION_ERROR
    assert identify_failure_reason("Não encontrei dados", False) is FailureReason.NO_DATA
    assert identify_failure_reason("Período sem dados", False) is FailureReason.NO_DATA
    assert identify_failure_reason("Não entendi a pergunta", False) is FailureReason.NO_QUERY_MATCH
    assert identify_failure_reason("Erro DAX na consulta", False) is FailureReason.EXECUTION_ERROR
    assert identify_failure_reason("Algo deu errado", False) is FailureReason.UNKNOWN
