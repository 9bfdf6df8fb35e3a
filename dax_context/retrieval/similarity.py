"""
Lexical similarity between questions.
"""

from __future__ import annotations


def similarity(a: str, b: str) -> float:
    """Jaccard similarity of the lower-cased whitespace token sets."""
    set_a = set((a or "").lower().split())
    set_b = set((b or "").lower().split())
    union = set_a | set_b
    if not union:
        return 0.0
    return len(set_a & set_b) / len(union)
