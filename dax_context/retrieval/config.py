"""
Configuration for documentation context selection.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class OptimizerConfig:
    """Caps applied when selecting documentation for a question."""

    max_measures: int = 15
    max_queries: int = 5
    max_examples: int = 3
    # Measures included when keyword filtering matches nothing.
    fallback_measures: int = 10
    columns_per_table: int = 5
