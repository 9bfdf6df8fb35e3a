"""
Heuristics deciding whether a model answer counts as a failed generation.

The learning loop cannot verify answers; these rules only catch the model
openly saying it found nothing.
"""

from __future__ import annotations

import enum
import re

_FAILURE_PHRASES = (
    "não encontrei",
    "não consegui encontrar",
    "não tenho acesso aos dados",
    "não possuo acesso",
    "não foi possível consultar",
    "não tenho informações sobre",
    "não tenho dados sobre",
    "dados não disponíveis",
    "informação não disponível",
    "não localizei dados",
    "não há dados disponíveis",
    "não sei responder",
    "não posso responder a essa",
    "não consegui processar sua",
    "não foi possível encontrar dados",
    "não localizei informações sobre",
    "não tenho essa informação disponível",
)

# A failure phrase this close to the start wins even if numbers follow
# (the model often lists alternatives after saying it found nothing).
_LEADING_WINDOW = 250
_CURRENCY_RE = re.compile(r"r\$\s*[\d.,]+")
_GROUPED_NUMBER_RE = re.compile(r"\d{1,3}(\.\d{3})+(,\d{2})?")


class FailureReason(str, enum.Enum):
    EXECUTION_ERROR = "execution_error"
    NO_DATA = "no_data"
    NO_QUERY_MATCH = "no_query_match"
    UNKNOWN = "unknown"


def is_failure_response(response: str) -> bool:
    text = (response or "").lower()
    position = -1
    for phrase in _FAILURE_PHRASES:
        position = text.find(phrase)
        if position != -1:
            break
    if position == -1:
        return False
    if position < _LEADING_WINDOW:
        return True
    has_numbers = bool(_CURRENCY_RE.search(text) or _GROUPED_NUMBER_RE.search(text))
    return not has_numbers


def identify_failure_reason(response: str, has_query_error: bool) -> FailureReason:
    if has_query_error:
        return FailureReason.EXECUTION_ERROR
    text = (response or "").lower()
    if "não encontrei" in text or "sem dados" in text:
        return FailureReason.NO_DATA
    if "não localizei query" in text or "não entendi" in text:
        return FailureReason.NO_QUERY_MATCH
    if "erro ao executar" in text or "erro dax" in text:
        return FailureReason.EXECUTION_ERROR
    return FailureReason.UNKNOWN
