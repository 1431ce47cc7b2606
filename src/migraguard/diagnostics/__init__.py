"""Diagnostic system: codes, values, reports and rendering."""

from migraguard.diagnostics.codes import DiagnosticCode
from migraguard.diagnostics.types import Diagnostic, Level, ValidationReport

__all__ = [
    "Diagnostic",
    "DiagnosticCode",
    "Level",
    "ValidationReport",
]
