"""
Tagged-section grammar for documentation documents.

A section is delimited by a start/end marker pair:

    <!-- SECTION:NAME -->
    ...body...
    <!-- END:NAME -->

Markers are validated before any body is read: a name whose markers are
missing, repeated, out of order or overlapping another section is rejected.
Markers must not be nested or reused.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

MARKER_RE = re.compile(r"<!--\s*(SECTION|END):([A-Za-z_]+)\s*-->")


@dataclass
class SectionScan:
    """Validated section bodies plus grammar problems found while scanning."""

    bodies: Dict[str, str] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)

    def get(self, *names: str) -> Optional[str]:
        """First body found among `names` (aliases), stripped."""
        for name in names:
            body = self.bodies.get(name)
            if body is not None:
                return body
        return None


def scan_sections(content: str) -> SectionScan:
    """Find every well-formed section in `content`."""
    starts: Dict[str, List[Tuple[int, int]]] = {}
    ends: Dict[str, List[Tuple[int, int]]] = {}
    for m in MARKER_RE.finditer(content or ""):
        kind, name = m.group(1), m.group(2).upper()
        target = starts if kind == "SECTION" else ends
        target.setdefault(name, []).append((m.start(), m.end()))

    scan = SectionScan()
    spans: Dict[str, Tuple[int, int, int, int]] = {}
    for name in sorted(set(starts) | set(ends)):
        s, e = starts.get(name, []), ends.get(name, [])
        if len(s) > 1 or len(e) > 1:
            scan.errors.append(f"Marcadores da seção {name} repetidos")
            continue
        if not s or not e:
            scan.errors.append(f"Seção {name} sem marcador de {'fim' if s else 'início'}")
            continue
        (s_start, s_end), (e_start, e_end) = s[0], e[0]
        if e_start < s_end:
            scan.errors.append(f"Seção {name} termina antes de começar")
            continue
        spans[name] = (s_start, s_end, e_start, e_end)

    rejected = _overlapping(spans)
    for name in sorted(rejected):
        scan.errors.append(f"Seção {name} aninhada ou sobreposta a outra seção")

    for name, (_, body_start, body_end, _) in spans.items():
        if name in rejected:
            continue
        scan.bodies[name] = content[body_start:body_end].strip()
    return scan


def _overlapping(spans: Dict[str, Tuple[int, int, int, int]]) -> set[str]:
    """Names whose spans intersect the span of another section."""
    ordered: Sequence[Tuple[str, Tuple[int, int, int, int]]] = sorted(
        spans.items(), key=lambda kv: kv[1][0]
    )
    bad: set[str] = set()
    for i, (name, span) in enumerate(ordered):
        for other, other_span in ordered[i + 1 :]:
            if other_span[0] >= span[3]:
                break
            bad.add(name)
            bad.add(other)
    return bad
