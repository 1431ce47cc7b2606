"""Tables created without Row Level Security."""

from __future__ import annotations

import re

from migraguard.diagnostics import Diagnostic, codes
from migraguard.policy._text import line_of, unquote

_IDENT = r'(?:"[^"]+"|\w+)'

_CREATE_TABLE = re.compile(
    rf"CREATE\s+TABLE\s+(?:IF\s+NOT\s+EXISTS\s+)?(?:{_IDENT}\.)?({_IDENT})",
    re.IGNORECASE,
)
_ENABLE_RLS = re.compile(
    rf"ALTER\s+TABLE\s+(?:ONLY\s+)?(?:IF\s+EXISTS\s+)?(?:{_IDENT}\.)?({_IDENT})"
    r"\s+ENABLE\s+ROW\s+LEVEL\s+SECURITY",
    re.IGNORECASE,
)

OWNED_CODES = frozenset({codes.MISSING_RLS})


def detect_missing_rls(sql: str) -> list[Diagnostic]:
    """Warn for every created table that never gets RLS enabled in the same migration.

    Names are compared unquoted and lower-cased; the schema qualifier is ignored.
    """
    created: dict[str, int] = {}
    for match in _CREATE_TABLE.finditer(sql):
        created.setdefault(unquote(match.group(1)), line_of(sql, match.start()))

    enabled = {unquote(match.group(1)) for match in _ENABLE_RLS.finditer(sql)}

    return [
        Diagnostic.warning(
            codes.MISSING_RLS, f"Table '{table}' created without Row Level Security"
        )
        .at_line(line)
        .suggest(
            f"Add: ALTER TABLE {table} ENABLE ROW LEVEL SECURITY; and CREATE POLICY statements"
        )
        for table, line in created.items()
        if table not in enabled
    ]
