"""
Learning module: persistent memory of generated queries and curated examples.

- Result-returning store interface (in-memory and SQLAlchemy implementations)
- Query learning service (record, reuse, similar lookup, feedback)
- Measure/column extraction from generated DAX
- Failure heuristics for model answers
"""

from .config import LearningConfig
from .extraction import QueryReferences, extract_measures_and_columns, suggest_measures
from .outcome import FailureReason, identify_failure_reason, is_failure_response
from .service import (
    FeedbackOutcome,
    QueryContext,
    QueryLearningService,
    ScoredExample,
    ScoredQuery,
    query_hash,
)
from .store import (
    DuplicateKeyError,
    InMemoryQueryLearningStore,
    QueryLearningStore,
    SqlAlchemyQueryLearningStore,
    StoreResult,
)

__all__ = [
    "DuplicateKeyError",
    "FailureReason",
    "FeedbackOutcome",
    "InMemoryQueryLearningStore",
    "LearningConfig",
    "QueryContext",
    "QueryLearningService",
    "QueryLearningStore",
    "QueryReferences",
    "ScoredExample",
    "ScoredQuery",
    "SqlAlchemyQueryLearningStore",
    "StoreResult",
    "extract_measures_and_columns",
    "identify_failure_reason",
    "is_failure_response",
    "query_hash",
    "suggest_measures",
]
