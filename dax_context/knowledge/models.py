"""
Typed entities extracted from a data-model documentation document.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


@dataclass
class Measure:
    """A documented measure; `name` is unique within a document."""

    name: str
    description: str = ""
    when_to_use: str = ""
    area: str = ""
    formula: str = ""
    source_table: str = ""
    columns: List[str] = field(default_factory=list)
    format: str = ""


@dataclass
class Column:
    """A column in `Table.Column` form with its usage flags."""

    name: str
    type: str = "String"
    usage: List[str] = field(default_factory=list)  # subset of {"filter", "group"}
    examples: List[str] = field(default_factory=list)


@dataclass
class Table:
    table: str
    description: str = ""
    columns: List[Column] = field(default_factory=list)


@dataclass
class CannedQuery:
    """Pre-configured question with the measures/groupers/filters it needs."""

    id: str
    question: str
    measures: List[str] = field(default_factory=list)
    groupers: List[str] = field(default_factory=list)
    filters: List[str] = field(default_factory=list)
    category: str = "Geral"


@dataclass
class Example:
    """Worked question/answer example."""

    question: str
    measures: List[str] = field(default_factory=list)
    groupers: List[str] = field(default_factory=list)
    filters: List[str] = field(default_factory=list)
    ordering: Optional[str] = None
    limit: Optional[str] = None
    response: str = ""


class DocumentationStats(BaseModel):
    """Section counts shown by documentation editing screens."""

    has_base: bool = False
    measures_count: int = 0
    tables_count: int = 0
    columns_count: int = 0
    queries_count: int = 0
    examples_count: int = 0
    errors: List[str] = Field(default_factory=list)


@dataclass(frozen=True)
class ParsedDocumentation:
    """
    Result of parsing one raw documentation string.

    Each list is None when its section was not found, otherwise non-empty.
    `errors` names the sections that were missing or empty.
    """

    base: Optional[str] = None
    measures: Optional[List[Measure]] = None
    tables: Optional[List[Table]] = None
    queries: Optional[List[CannedQuery]] = None
    examples: Optional[List[Example]] = None
    errors: List[str] = field(default_factory=list)

    def stats(self) -> DocumentationStats:
        return DocumentationStats(
            has_base=bool(self.base),
            measures_count=len(self.measures or []),
            tables_count=len(self.tables or []),
            columns_count=sum(len(t.columns) for t in self.tables or []),
            queries_count=len(self.queries or []),
            examples_count=len(self.examples or []),
            errors=list(self.errors),
        )

    def to_payload(self) -> Dict[str, Any]:
        """JSON-serialisable representation."""
        return dataclasses.asdict(self)
