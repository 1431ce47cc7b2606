"""Strict-mode hygiene: migrations should run inside an explicit transaction."""

from __future__ import annotations

import re

from migraguard.diagnostics import Diagnostic, codes

_TRANSACTION_MODE = (
    r"ISOLATION\s+LEVEL\s+(?:SERIALIZABLE|REPEATABLE\s+READ|READ\s+(?:UN)?COMMITTED)"
    r"|READ\s+(?:WRITE|ONLY)|(?:NOT\s+)?DEFERRABLE"
)
# `BEGIN;`, `BEGIN WORK;`, `START TRANSACTION ISOLATION LEVEL SERIALIZABLE;`.
# A plpgsql `BEGIN` inside a DO block is not followed by `;` and is not matched.
_BEGIN = re.compile(
    rf"\b(?:BEGIN(?:\s+(?:TRANSACTION|WORK))?|START\s+TRANSACTION)"
    rf"(?:\s*,?\s*(?:{_TRANSACTION_MODE}))*\s*;",
    re.IGNORECASE,
)
_END = re.compile(r"\b(?:COMMIT|ROLLBACK)\b", re.IGNORECASE)

OWNED_CODES = frozenset({codes.MISSING_TRANSACTION})


def detect_missing_transaction(sql: str) -> list[Diagnostic]:
    if not sql.strip():
        return []
    if _BEGIN.search(sql) and _END.search(sql):
        return []
    return [
        Diagnostic.warning(
            codes.MISSING_TRANSACTION, "Migration is not wrapped in a transaction"
        ).suggest("Wrap the statements in BEGIN; ... COMMIT; so a failure leaves no partial schema")
    ]
