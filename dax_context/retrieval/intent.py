"""
Rule-based intent classification for analytical questions.
"""

from __future__ import annotations

from typing import Optional

from dax_context.knowledge.keywords import normalize
from dax_context.knowledge.vocabulary import QuestionIntent, Vocabulary, default_vocabulary


def classify_intent(question: str, vocabulary: Optional[Vocabulary] = None) -> QuestionIntent:
    """
    Return the first intent whose rule matches the normalized question.

    Rules are tried in vocabulary order; the vocabulary's default intent is
    returned when none match, so every string maps to exactly one label.
    """
    vocab = vocabulary or default_vocabulary()
    q = normalize(question)
    for intent, pattern in vocab.intent_rules:
        if pattern.search(q):
            return intent
    return vocab.default_intent
