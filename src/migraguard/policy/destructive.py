"""Destructive DDL detection: DROP TABLE, DROP COLUMN, TRUNCATE."""

from __future__ import annotations

import re

from migraguard.diagnostics import Diagnostic, codes
from migraguard.policy._text import strip_line_comments

_CHECKS = (
    (
        codes.DROP_TABLE,
        re.compile(r"\bDROP\s+TABLE\b", re.IGNORECASE),
        "Destructive operation: DROP TABLE will permanently delete data",
        "Consider: 1) Rename table instead, 2) Add archived_at column for soft delete, "
        "3) Create backup first",
    ),
    (
        codes.DROP_COLUMN,
        re.compile(r"\bDROP\s+COLUMN\b", re.IGNORECASE),
        "Destructive operation: DROP COLUMN will permanently delete data",
        "Consider: 1) Rename column, 2) Migrate data first, 3) Use two-step migration",
    ),
    (
        codes.TRUNCATE,
        re.compile(r"\bTRUNCATE\b", re.IGNORECASE),
        "Destructive operation: TRUNCATE will delete all rows",
        "Use DELETE with WHERE clause if you need selective deletion",
    ),
)

OWNED_CODES = frozenset(code for code, *_ in _CHECKS)


def detect_destructive_operations(sql: str) -> list[Diagnostic]:
    """Return one error per destructive operation found, with its line number.

    Comments are stripped per line first, so `-- DROP TABLE x` is ignored while
    `SELECT 1; /* note */ DROP TABLE x` is still caught.
    """
    found: list[Diagnostic] = []
    for lineno, line in enumerate(sql.split("\n"), start=1):
        code_part = strip_line_comments(line)
        if not code_part:
            continue
        for code, pattern, message, suggestion in _CHECKS:
            if pattern.search(code_part):
                found.append(
                    Diagnostic.error(code, message).at_line(lineno).suggest(suggestion)
                )
    return found
