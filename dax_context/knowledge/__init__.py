"""
Knowledge module: data-model documentation and the business vocabulary.

- Tagged-section documentation parser (measures, tables, canned queries, examples)
- Keyword and concept extraction over an injected vocabulary
"""

from .keywords import KeywordExtractor, extract_keywords, identify_concepts, normalize
from .models import (
    CannedQuery,
    Column,
    DocumentationStats,
    Example,
    Measure,
    ParsedDocumentation,
    Table,
)
from .parser import parse_documentation
from .vocabulary import QuestionIntent, Vocabulary, default_vocabulary

__all__ = [
    "CannedQuery",
    "Column",
    "DocumentationStats",
    "Example",
    "KeywordExtractor",
    "Measure",
    "ParsedDocumentation",
    "QuestionIntent",
    "Table",
    "Vocabulary",
    "default_vocabulary",
    "extract_keywords",
    "identify_concepts",
    "normalize",
    "parse_documentation",
]
