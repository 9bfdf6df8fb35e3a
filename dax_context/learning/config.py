"""
Configuration for the query-learning service.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class LearningConfig:
    """Thresholds and weights used to rank learned queries and training examples."""

    similarity_threshold: float = 0.3
    # Candidates fetched per requested similar query, before similarity filtering.
    candidate_multiplier: int = 2
    training_pool_size: int = 50
    training_examples_limit: int = 3
    concept_weight: int = 5
    keyword_weight: int = 2
    tag_weight: int = 1
    suggested_measures: int = 5
    training_measure_weight: int = 2
    history_measure_weight: int = 1
    max_question_chars: int = 500
    max_error_chars: int = 500
