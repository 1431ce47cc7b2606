"""Stable, searchable diagnostic code registry.

Codes are plain upper-case names so agents can grep for them in output.

Errors (block a migration):
- DROP_TABLE, DROP_COLUMN, TRUNCATE, FILE_UNREADABLE

Warnings (advisory):
- MISSING_RLS, MISSING_INDEX_FK, TYPE_CHANGE, MISSING_TRANSACTION
"""

from __future__ import annotations

from dataclasses import dataclass

_REGISTERED: set[str] = set()


@dataclass(frozen=True)
class DiagnosticCode:
    value: str

    def __str__(self) -> str:
        return self.value


def register(value: str) -> DiagnosticCode:
    """Create a code, refusing duplicates so every code stays globally unique."""
    if value in _REGISTERED:
        raise ValueError(f"diagnostic code {value!r} is already registered")
    _REGISTERED.add(value)
    return DiagnosticCode(value)


def registered() -> frozenset[str]:
    return frozenset(_REGISTERED)


# Destructive operations
DROP_TABLE = register("DROP_TABLE")
DROP_COLUMN = register("DROP_COLUMN")
TRUNCATE = register("TRUNCATE")

# Access control
MISSING_RLS = register("MISSING_RLS")

# Performance
MISSING_INDEX_FK = register("MISSING_INDEX_FK")

# Data conversion
TYPE_CHANGE = register("TYPE_CHANGE")

# Migration hygiene (strict mode)
MISSING_TRANSACTION = register("MISSING_TRANSACTION")

# Loader
FILE_UNREADABLE = register("FILE_UNREADABLE")
