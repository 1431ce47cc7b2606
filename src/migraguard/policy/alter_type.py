"""Column type changes without an explicit USING conversion."""

from __future__ import annotations

import re

from migraguard.diagnostics import Diagnostic, codes
from migraguard.policy._text import line_of

# Heuristic: how far past the ALTER to look for USING. A long statement can
# hide its USING beyond the window, and a short one can borrow USING from the
# next statement.
USING_LOOKAHEAD = 200

_TYPE_CHANGE = re.compile(
    r"ALTER\s+TABLE\s+(?:ONLY\s+)?(?:IF\s+EXISTS\s+)?(?:\w+\.)?\"?\w+\"?\s+"
    r"ALTER\s+(?:COLUMN\s+)?\"?(\w+)\"?\s+(?:SET\s+DATA\s+)?TYPE\s+(\w+)",
    re.IGNORECASE,
)
_USING = re.compile(r"\bUSING\b", re.IGNORECASE)

OWNED_CODES = frozenset({codes.TYPE_CHANGE})


def detect_unsafe_type_changes(sql: str) -> list[Diagnostic]:
    found: list[Diagnostic] = []
    for match in _TYPE_CHANGE.finditer(sql):
        column, new_type = match.group(1), match.group(2)
        window = sql[match.start() : match.start() + USING_LOOKAHEAD]
        if _USING.search(window):
            continue
        found.append(
            Diagnostic.warning(
                codes.TYPE_CHANGE,
                f"Column '{column}' type changed to '{new_type}' without conversion",
            )
            .at_line(line_of(sql, match.start()))
            .suggest(
                f"Add USING clause: ALTER COLUMN {column} TYPE {new_type} "
                f"USING {column}::{new_type}"
            )
        )
    return found
