"""
dax_context: documentation-to-context retrieval and query learning for a
natural-language-to-DAX assistant.

- knowledge: documentation parser and business vocabulary
- retrieval: intent, similarity, documentation context optimizer
- learning: learned-query store and service
- generation: bounded context assembly
"""

from .engine import AssembledContext, ContextEngine, LearningOutcome
from .errors import DaxContextError

__all__ = [
    "AssembledContext",
    "ContextEngine",
    "DaxContextError",
    "LearningOutcome",
]
