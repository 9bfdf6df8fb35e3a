"""
Parser for semi-structured data-model documentation.

The document is markdown split into tagged sections (see `sections.py`):
BASE (free text), MEDIDAS (measures table plus `### Name` detail blocks),
TABELAS (`Table.Column` rows), QUERIES (canned question rows grouped under
`## Category` headings) and EXEMPLOS (`## Exemplo N` blocks with
`**Label:** value` lines).

Parsing is purely textual and never raises: missing or empty sections come
back as None with an entry in `errors`.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional

from .models import CannedQuery, Column, Example, Measure, ParsedDocumentation, Table
from .sections import scan_sections

logger = logging.getLogger(__name__)

# Canonical section name first, accepted aliases after.
BASE_SECTION = ("BASE",)
MEASURES_SECTION = ("MEDIDAS", "MEASURES")
TABLES_SECTION = ("TABELAS", "TABLES")
QUERIES_SECTION = ("QUERIES",)
EXAMPLES_SECTION = ("EXEMPLOS", "EXAMPLES")

_QUERY_ID_RE = re.compile(r"^Q\d+$", re.I)
_EXAMPLE_SPLIT_RE = re.compile(r"^##\s*(?:Exemplo|Example)\s+\d+.*$", re.I | re.M)
_DETAIL_BLOCK_RE = re.compile(r"^###\s+(\w+)[ \t]*\n(.*?)(?=^###|\Z)", re.M | re.S)
_FENCED_FORMULA_RE = re.compile(r"```dax\s*(.*?)```", re.I | re.S)
_INLINE_FORMULA_RE = re.compile(r"\*\*F[óo]rmula:\*\*\s*`([^`]+)`", re.I)


def parse_documentation(raw: str) -> ParsedDocumentation:
    """Parse one raw documentation string into typed collections."""
    scan = scan_sections(raw or "")
    errors: List[str] = list(scan.errors)

    base = scan.get(*BASE_SECTION) or None

    measures_raw = scan.get(*MEASURES_SECTION)
    measures = parse_measures(measures_raw) if measures_raw else []

    tables_raw = scan.get(*TABLES_SECTION)
    tables = parse_tables(tables_raw) if tables_raw else []

    queries_raw = scan.get(*QUERIES_SECTION)
    queries = parse_queries(queries_raw) if queries_raw else []

    examples_raw = scan.get(*EXAMPLES_SECTION)
    examples = parse_examples(examples_raw) if examples_raw else []

    if not base:
        errors.append("Seção BASE não encontrada")
    for name, items in (
        (MEASURES_SECTION[0], measures),
        (TABLES_SECTION[0], tables),
        (QUERIES_SECTION[0], queries),
        (EXAMPLES_SECTION[0], examples),
    ):
        if not items:
            errors.append(f"Seção {name} vazia ou não encontrada")

    logger.debug(
        "Parsed documentation: %s measures, %s tables, %s queries, %s examples, %s errors",
        len(measures), len(tables), len(queries), len(examples), len(errors),
    )
    return ParsedDocumentation(
        base=base,
        measures=measures or None,
        tables=tables or None,
        queries=queries or None,
        examples=examples or None,
        errors=errors,
    )


def _cells(line: str) -> List[str]:
    """Positional cells of a table row; an empty cell stays an empty string."""
    inner = line.strip()
    if inner.startswith("|"):
        inner = inner[1:]
    if inner.endswith("|"):
        inner = inner[:-1]
    return [c.strip() for c in inner.split("|")]


def _split_list(value: str) -> List[str]:
    """Comma-separated cell or label value; a literal '-' means empty."""
    value = (value or "").strip()
    if not value or value == "-":
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def _label(block: str, label: str) -> str:
    """Value of a `**Label:** value` line, or ''."""
    m = re.search(rf"\*\*{label}:\*\*\s*(.+)", block, re.I)
    return m.group(1).strip() if m else ""


def _formula(block: str) -> str:
    m = _INLINE_FORMULA_RE.search(block) or _FENCED_FORMULA_RE.search(block)
    return m.group(1).strip() if m else ""


def _detail_block(content: str, name: str) -> Optional[str]:
    pattern = re.compile(rf"^###\s+{re.escape(name)}[ \t]*$(.*?)(?=^###|\Z)", re.M | re.S)
    m = pattern.search(content)
    return m.group(1) if m else None


def _enrich_measure(measure: Measure, block: str) -> None:
    measure.formula = _formula(block)
    if not measure.area:
        measure.area = _label(block, "[ÁA]rea")
    measure.source_table = _label(block, "Tabela origem")
    measure.format = _label(block, "Formato")
    measure.columns = _split_list(_label(block, "Colunas usadas"))


def parse_measures(content: str) -> List[Measure]:
    """
    Measures from the summary table, enriched by `### Name` detail blocks.

    When the section has no table rows at all, measures are built from the
    detail blocks alone.
    """
    measures: List[Measure] = []
    in_table = False
    header_found = False

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line.startswith("|"):
            if line.startswith("#"):
                in_table = False
                header_found = False
            continue
        if "---" in line:
            in_table = True
            continue
        lower = line.lower()
        if not header_found and ("medida" in lower or "descri" in lower or "measure" in lower):
            header_found = True
            continue
        if not (in_table or header_found):
            continue

        cells = _cells(line)
        if len(cells) < 2 or not cells[0] or "medida" in cells[0].lower():
            continue
        measure = Measure(
            name=cells[0],
            description=cells[1],
            when_to_use=cells[2] if len(cells) > 2 else "",
            area=cells[3] if len(cells) > 3 else "",
        )
        block = _detail_block(content, measure.name)
        if block is not None:
            _enrich_measure(measure, block)
        measures.append(measure)

    if measures:
        return measures

    for m in _DETAIL_BLOCK_RE.finditer(content):
        block = m.group(2)
        measures.append(
            Measure(
                name=m.group(1),
                description=_label(block, "Descri[çc][ãa]o"),
                when_to_use=_label(block, "Quando usar"),
                area=_label(block, "[ÁA]rea"),
                formula=_formula(block),
            )
        )
    return measures


def _usage(cell: str) -> List[str]:
    lower = cell.lower()
    usage: List[str] = []
    if "filtro" in lower or "filter" in lower:
        usage.append("filter")
    if "agrup" in lower or "group" in lower:
        usage.append("group")
    return usage


def parse_tables(content: str) -> List[Table]:
    """Group `Table.Column` rows by table."""
    columns_by_table: Dict[str, List[Column]] = {}
    descriptions: Dict[str, str] = {}
    heading: Optional[str] = None

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if line.startswith("### "):
            heading = line[4:].strip().strip("'")
            continue
        if line.startswith("#"):
            heading = None
            continue
        if not line.startswith("|"):
            if heading and line and heading not in descriptions:
                descriptions[heading] = line
            continue
        if "---" in line:
            continue
        cells = _cells(line)
        if len(cells) < 3 or "." not in cells[0]:
            continue
        table = cells[0].split(".", 1)[0].strip("'")
        columns_by_table.setdefault(table, []).append(
            Column(
                name=cells[0],
                type=cells[1] or "String",
                usage=_usage(cells[2]),
                examples=[e.strip() for e in cells[3].split(",") if e.strip()] if len(cells) > 3 else [],
            )
        )

    return [
        Table(table=table, description=descriptions.get(table, ""), columns=columns)
        for table, columns in columns_by_table.items()
    ]


def parse_queries(content: str) -> List[CannedQuery]:
    """Rows whose first cell is a query id (Q1, Q2, ...) under category headings."""
    queries: List[CannedQuery] = []
    category = "Geral"

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if line.startswith("## "):
            category = line[3:].strip()
            if category.startswith("Queries "):
                category = category[len("Queries ") :].strip()
            continue
        if not line.startswith("|") or "---" in line:
            continue
        cells = _cells(line)
        if len(cells) < 4 or not _QUERY_ID_RE.match(cells[0]):
            continue
        queries.append(
            CannedQuery(
                id=cells[0],
                question=cells[1],
                measures=_split_list(cells[2]),
                groupers=_split_list(cells[3]),
                filters=_split_list(cells[4]) if len(cells) > 4 else [],
                category=category,
            )
        )
    return queries


def parse_examples(content: str) -> List[Example]:
    """`## Exemplo N` blocks with a question and at least one measure."""
    examples: List[Example] = []
    for block in _EXAMPLE_SPLIT_RE.split(content):
        if not block.strip():
            continue
        question = _label(block, "Pergunta")
        measures = [
            m.replace("[", "").replace("]", "").strip()
            for m in _split_list(_label(block, "Medidas"))
        ]
        measures = [m for m in measures if m]
        if not question or not measures:
            continue
        examples.append(
            Example(
                question=question,
                measures=measures,
                groupers=_split_list(_label(block, "Agrupadores")),
                filters=_split_list(_label(block, "Filtros")),
                ordering=_label(block, "Ordena[çc][ãa]o") or None,
                limit=_label(block, "Limite") or None,
                response=_label(block, "Resposta modelo").strip('"'),
            )
        )
    return examples
