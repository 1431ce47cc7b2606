"""Foreign key columns without a supporting index."""

from __future__ import annotations

import re

from migraguard.diagnostics import Diagnostic, codes
from migraguard.policy._text import line_of

_TABLE = r'(?:\w+\.)?"?\w+"?'

# A column definition starts after `(` or `,` in CREATE TABLE, or after ADD [COLUMN].
_COLUMN_START = r"(?:\(|,|\bADD(?:\s+COLUMN)?(?:\s+IF\s+NOT\s+EXISTS)?)"
_TYPE = r"\w+(?:\s*\(\s*\d+(?:\s*,\s*\d+)?\s*\))?(?:\[\])?"
_COLUMN_CONSTRAINT = (
    r"NOT\s+NULL|NULL|UNIQUE|PRIMARY\s+KEY|CONSTRAINT\s+\w+"
    r"|DEFAULT\s+(?:'[^']*'(?:::\w+)?|\w+\s*\(\s*\)|[\w.:]+)"
)

# `post_id uuid [NOT NULL | UNIQUE | DEFAULT ... ] REFERENCES posts(id)`
_INLINE_FK = re.compile(
    rf'{_COLUMN_START}\s*"?(\w+)"?\s+{_TYPE}((?:\s+(?:{_COLUMN_CONSTRAINT}))*)'
    rf"\s+REFERENCES\s+{_TABLE}\s*\(\s*\w+\s*\)",
    re.IGNORECASE,
)
_PRIMARY_KEY = re.compile(r"PRIMARY\s+KEY", re.IGNORECASE)
# `FOREIGN KEY (post_id) REFERENCES posts(id)`
_CONSTRAINT_FK = re.compile(
    r'FOREIGN\s+KEY\s*\(\s*"?(\w+)"?\s*(?:,[^)]*)?\)\s*REFERENCES',
    re.IGNORECASE,
)
# Only the leading index column helps FK lookups.
_INDEX = re.compile(
    r"CREATE\s+(?:UNIQUE\s+)?INDEX\s+(?:CONCURRENTLY\s+)?(?:IF\s+NOT\s+EXISTS\s+)?"
    rf"(?:\w+\s+)?ON\s+(?:ONLY\s+)?{_TABLE}\s*(?:USING\s+\w+\s*)?\(\s*\"?(\w+)\"?",
    re.IGNORECASE,
)

OWNED_CODES = frozenset({codes.MISSING_INDEX_FK})


def _fk_columns(sql: str) -> list[re.Match[str]]:
    inline = [
        m for m in _INLINE_FK.finditer(sql)
        # The primary key index already covers the column.
        if not _PRIMARY_KEY.search(m.group(2))
    ]
    return sorted([*inline, *_CONSTRAINT_FK.finditer(sql)], key=lambda m: m.start(1))


def detect_missing_fk_indexes(sql: str) -> list[Diagnostic]:
    """Warn for each foreign key column that no CREATE INDEX covers.

    Matching is by column name only; the owning table is not resolved.
    """
    fk_columns: dict[str, int] = {}
    for match in _fk_columns(sql):
        fk_columns.setdefault(match.group(1).lower(), line_of(sql, match.start(1)))

    indexed = {match.group(1).lower() for match in _INDEX.finditer(sql)}

    return [
        Diagnostic.warning(
            codes.MISSING_INDEX_FK, f"Foreign key column '{column}' does not have an index"
        )
        .at_line(line)
        .suggest(f"Add: CREATE INDEX idx_<table>_{column} ON <table>({column});")
        .note("unindexed foreign keys make joins and cascading deletes scan the whole table")
        for column, line in fk_columns.items()
        if column not in indexed
    ]
