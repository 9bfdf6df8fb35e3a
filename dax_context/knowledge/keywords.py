"""
Keyword and concept extraction for Portuguese business questions.
"""

from __future__ import annotations

import string
import unicodedata
from typing import Optional, Set, Tuple

from .vocabulary import Vocabulary, default_vocabulary


def normalize(text: str) -> str:
    """Strip accents and lower-case."""
    decomposed = unicodedata.normalize("NFD", text or "")
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.lower()


class KeywordExtractor:
    """Keyword and concept extraction over a fixed vocabulary."""

    def __init__(self, vocabulary: Optional[Vocabulary] = None):
        self.vocabulary = vocabulary or default_vocabulary()
        # Stopwords and triggers are compared against normalized text, so
        # they are normalized once here.
        self._stopwords = frozenset(normalize(w) for w in self.vocabulary.stopwords)
        self._concepts: Tuple[Tuple[str, Tuple[str, ...]], ...] = tuple(
            (name, tuple(normalize(t) for t in triggers))
            for name, triggers in self.vocabulary.concepts
        )

    def extract_keywords(self, text: str) -> Set[str]:
        """Normalized tokens minus stopwords and tokens of length <= 2."""
        tokens = (tok.strip(string.punctuation) for tok in normalize(text).split())
        return {tok for tok in tokens if len(tok) > 2 and tok not in self._stopwords}

    def identify_concepts(self, text: str) -> Set[str]:
        """Every concept with at least one trigger contained in the text."""
        normalized = normalize(text)
        return {
            name
            for name, triggers in self._concepts
            if any(trigger in normalized for trigger in triggers)
        }


_default_extractor: Optional[KeywordExtractor] = None


def _default() -> KeywordExtractor:
    global _default_extractor
    if _default_extractor is None:
        _default_extractor = KeywordExtractor()
    return _default_extractor


def extract_keywords(text: str) -> Set[str]:
    return _default().extract_keywords(text)


def identify_concepts(text: str) -> Set[str]:
    return _default().identify_concepts(text)
