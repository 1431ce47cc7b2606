"""Diagnostic values produced by migration rules.

A Diagnostic at ERROR level blocks a migration; WARNING level is advisory.
Diagnostics are immutable: the builder methods return new instances, so a
detector can hand out values without worrying about later mutation.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace

from migraguard.diagnostics.codes import DiagnosticCode


class Level(enum.IntEnum):
    WARNING = 1
    ERROR = 2


@dataclass(frozen=True)
class Diagnostic:
    level: Level
    code: DiagnosticCode
    message: str
    line: int | None = None
    suggestion: str | None = None
    notes: tuple[str, ...] = ()

    # -- Builder classmethods ---------------------------------------------------

    @classmethod
    def error(cls, code: DiagnosticCode, message: str) -> Diagnostic:
        return cls(level=Level.ERROR, code=code, message=message)

    @classmethod
    def warning(cls, code: DiagnosticCode, message: str) -> Diagnostic:
        return cls(level=Level.WARNING, code=code, message=message)

    # -- Builder chain methods --------------------------------------------------

    def at_line(self, line: int) -> Diagnostic:
        return replace(self, line=line)

    def suggest(self, suggestion: str) -> Diagnostic:
        return replace(self, suggestion=suggestion)

    def note(self, note: str) -> Diagnostic:
        return replace(self, notes=(*self.notes, note))

    # -- Query methods ----------------------------------------------------------

    @property
    def is_blocking(self) -> bool:
        return self.level == Level.ERROR


@dataclass
class ValidationReport:
    """All findings for one migration, in rule-registration order."""

    diagnostics: list[Diagnostic]
    migration: str | None = None
    tables: list[str] = field(default_factory=list)

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.level == Level.ERROR]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.level == Level.WARNING]

    @property
    def passed(self) -> bool:
        return not any(d.is_blocking for d in self.diagnostics)

