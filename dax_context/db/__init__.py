"""
Persistence for the query-learning tables.
"""

from .models import Base, LearnedQuery, TrainingExample, new_id

__all__ = ["Base", "LearnedQuery", "TrainingExample", "new_id"]
