"""
Retrieval module: picks what the model gets to see for a question.

- Rule-based intent classification
- Jaccard question similarity
- Documentation context optimizer (keyword relevance with capped fallbacks)
"""

from .config import OptimizerConfig
from .intent import classify_intent
from .optimizer import OptimizedContext, optimize, summarize_tables
from .similarity import similarity

__all__ = [
    "OptimizedContext",
    "OptimizerConfig",
    "classify_intent",
    "optimize",
    "similarity",
    "summarize_tables",
]
