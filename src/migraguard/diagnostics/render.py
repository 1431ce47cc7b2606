"""Render validation reports for terminal (text) and agent (JSON) output."""

from __future__ import annotations

from migraguard.diagnostics.types import Diagnostic, ValidationReport


def render_json(report: ValidationReport) -> dict:
    """Render a ValidationReport as a JSON-serializable dict."""
    return {
        "migration": report.migration,
        "passed": report.passed,
        "errors": [diagnostic_to_dict(d) for d in report.errors],
        "warnings": [diagnostic_to_dict(d) for d in report.warnings],
        "tables": report.tables,
    }


def render_text(report: ValidationReport) -> str:
    """Render a ValidationReport as human-readable text."""
    lines: list[str] = []
    for d in report.diagnostics:
        location = f" line {d.line}" if d.line is not None else ""
        lines.append(f"{d.level.name.lower()}[{d.code}]{location}: {d.message}")
        for note in d.notes:
            lines.append(f"  = note: {note}")
        if d.suggestion:
            lines.append(f"  = help: {d.suggestion}")
    return "\n".join(lines)


def diagnostic_to_dict(d: Diagnostic) -> dict:
    data: dict = {"code": str(d.code), "message": d.message}
    if d.line is not None:
        data["line"] = d.line
    if d.suggestion is not None:
        data["suggestion"] = d.suggestion
    if d.notes:
        data["notes"] = list(d.notes)
    return data
