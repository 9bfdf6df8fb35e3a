"""
Fixed business vocabulary: stopwords, concepts, intent rules, measure prefixes.

The vocabulary is plain immutable data. Extractors and classifiers receive it
at construction time so tests can swap in their own.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import Tuple


class QuestionIntent(str, enum.Enum):
    """Closed set of analytical question intents."""

    FATURAMENTO_FILIAL = "faturamento_filial"
    FATURAMENTO_VENDEDOR = "faturamento_vendedor"
    FATURAMENTO_PRODUTO = "faturamento_produto"
    FATURAMENTO_TOTAL = "faturamento_total"
    TOP_VENDEDORES = "top_vendedores"
    TOP_PRODUTOS = "top_produtos"
    TOP_FILIAIS = "top_filiais"
    TICKET_MEDIO = "ticket_medio"
    MARGEM = "margem"
    CMV = "cmv"
    CONTAS_PAGAR = "contas_pagar"
    CONTAS_RECEBER = "contas_receber"
    SALDO = "saldo"
    OUTROS = "outros"


IntentRule = Tuple[QuestionIntent, "re.Pattern[str]"]


def _rule(intent: QuestionIntent, pattern: str) -> IntentRule:
    return intent, re.compile(pattern)


# Order matters: combined patterns come before the single-keyword fallback
# of the same concept.
DEFAULT_INTENT_RULES: Tuple[IntentRule, ...] = (
    _rule(QuestionIntent.FATURAMENTO_FILIAL, r"faturamento.*(filial|loja|unidade)"),
    _rule(QuestionIntent.FATURAMENTO_VENDEDOR, r"faturamento.*(vendedor|garcom|funcionario)"),
    _rule(QuestionIntent.FATURAMENTO_PRODUTO, r"faturamento.*(produto|item)"),
    _rule(QuestionIntent.FATURAMENTO_TOTAL, r"faturamento|faturou|receita total|vendeu quanto"),
    _rule(QuestionIntent.FATURAMENTO_FILIAL, r"vendas?.*(filial|loja)"),
    _rule(QuestionIntent.FATURAMENTO_VENDEDOR, r"vendas?.*(vendedor|garcom|funcionario)"),
    _rule(QuestionIntent.FATURAMENTO_PRODUTO, r"vendas?.*(produto|item)"),
    _rule(
        QuestionIntent.TOP_VENDEDORES,
        r"top.*(vendedor|garcom|funcionario)|melhor vendedor|quem (mais )?vendeu",
    ),
    _rule(QuestionIntent.TOP_PRODUTOS, r"top.*(produto|item)|produto.*(mais|melhor)"),
    _rule(QuestionIntent.TOP_FILIAIS, r"top.*(filial|loja)|filial.*(mais|melhor)"),
    _rule(QuestionIntent.TICKET_MEDIO, r"ticket.*medio"),
    _rule(QuestionIntent.MARGEM, r"margem|lucro"),
    _rule(QuestionIntent.CMV, r"cmv|custo"),
    _rule(QuestionIntent.CONTAS_PAGAR, r"contas?.*(pagar|vencer)|a pagar"),
    _rule(QuestionIntent.CONTAS_RECEBER, r"contas?.*receber|a receber"),
    _rule(QuestionIntent.SALDO, r"saldo|caixa|banco"),
)

DEFAULT_STOPWORDS: frozenset[str] = frozenset(
    {
        "qual", "quais", "quanto", "quantos", "quantas", "como", "onde", "quando",
        "de", "da", "do", "das", "dos", "em", "na", "no", "nas", "nos",
        "a", "o", "as", "os", "um", "uma", "uns", "umas",
        "é", "são", "foi", "foram", "ser", "estar",
        "para", "por", "com", "sem", "sobre", "entre",
        "que", "quem", "cujo", "cuja", "cujos", "cujas",
        "me", "te", "se", "vos", "lhe", "lhes",
        "meu", "minha", "meus", "minhas", "teu", "tua", "teus", "tuas",
        "seu", "sua", "seus", "suas", "nosso", "nossa", "nossos", "nossas",
        "deles", "delas", "dela", "dele",
    }
)

DEFAULT_CONCEPTS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("pagar", ("pagar", "pagamento", "despesa", "saída", "contas a pagar", "cp", "fornecedor", "a pagar", "vencer")),
    ("receber", ("receber", "recebimento", "receita", "entrada", "contas a receber", "cr", "cliente", "a receber")),
    ("inadimplencia", ("inadimplência", "inadimplencia", "atraso", "atrasado", "vencido", "devendo", "dívida", "devedor")),
    ("saldo", ("saldo", "banco", "disponível", "caixa", "conta bancária", "posição")),
    ("fluxo", ("fluxo", "movimentação", "entradas e saídas", "dfc", "fluxo de caixa")),
    ("vencimento", ("vence", "vencimento", "vencer", "vencida", "vencidas")),
    ("tempo", ("hoje", "amanhã", "ontem", "semana", "mês", "ano", "dia", "período", "data")),
    ("ranking", ("top", "melhor", "pior", "maior", "menor", "ranking", "mais", "menos")),
    ("faturamento", ("faturamento", "faturou", "vendas", "receita", "vendeu")),
    ("margem", ("margem", "lucro", "lucratividade", "rentabilidade")),
)

# Bracketed identifiers starting with one of these are treated as measures.
DEFAULT_MEASURE_PREFIXES: Tuple[str, ...] = ("QA_", "Soma_", "Media_", "Conta_", "Max_", "Min_")


@dataclass(frozen=True)
class Vocabulary:
    """Immutable vocabulary injected into extractors and classifiers."""

    stopwords: frozenset[str] = DEFAULT_STOPWORDS
    concepts: Tuple[Tuple[str, Tuple[str, ...]], ...] = DEFAULT_CONCEPTS
    intent_rules: Tuple[IntentRule, ...] = DEFAULT_INTENT_RULES
    measure_prefixes: Tuple[str, ...] = DEFAULT_MEASURE_PREFIXES
    default_intent: QuestionIntent = field(default=QuestionIntent.OUTROS)

    @property
    def concept_names(self) -> Tuple[str, ...]:
        return tuple(name for name, _ in self.concepts)


_DEFAULT = Vocabulary()


def default_vocabulary() -> Vocabulary:
    """Portuguese business vocabulary used when none is injected."""
    return _DEFAULT
