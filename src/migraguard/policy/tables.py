"""Best-effort extraction of the tables a migration touches, via sqlglot."""

from __future__ import annotations

import sqlglot
from sqlglot import exp
from sqlglot.errors import ErrorLevel


def extract_tables(sql: str, *, dialect: str = "postgres") -> list[str]:
    """Return the sorted, de-duplicated table names referenced by the SQL.

    Statements sqlglot cannot model (ENABLE ROW LEVEL SECURITY, CREATE POLICY,
    DO blocks) parse as opaque commands and contribute nothing. SQL the
    tokenizer rejects outright yields an empty list.
    """
    try:
        statements = sqlglot.parse(sql, read=dialect, error_level=ErrorLevel.IGNORE)
    except Exception:
        # Tokenizer errors, and parser edge cases on DDL sqlglot does not model.
        return []

    tables: set[str] = set()
    for statement in statements:
        if statement is None:
            continue
        for node in statement.find_all(exp.Table):
            if node.name:
                tables.add(_qualified_name(node))
    return sorted(tables)


def _qualified_name(table: exp.Table) -> str:
    """Build schema.table or just table name."""
    if table.db:
        return f"{table.db}.{table.name}"
    return table.name
