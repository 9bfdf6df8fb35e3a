"""Configuration for prompt context assembly."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class GenerationConfig:
    """Size limits for the assembled model context."""

    max_chars: int = 12000
    # The documentation excerpt is cut to this before the overall limit applies.
    max_documentation_chars: int = 10000
    max_similar_queries: int = 3
