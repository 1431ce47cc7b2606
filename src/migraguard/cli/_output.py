"""Shared output helpers for CLI commands."""

from __future__ import annotations

import json
from typing import NoReturn

import click

from migraguard.diagnostics import ValidationReport
from migraguard.diagnostics.render import render_json, render_text
from migraguard.skill import SkillResult


def emit_json(data: object, *, err: bool = False) -> None:
    click.echo(json.dumps(data, indent=2, default=str), err=err)


def fail(error: str, hint: str | None = None, *, code: int = 1, **extra: object) -> NoReturn:
    """Write a failure payload to stderr and exit."""
    payload: dict[str, object] = {"success": False, "error": error, **extra}
    if hint:
        payload["hint"] = hint
    emit_json(payload, err=True)
    raise SystemExit(code)


def finish(result: SkillResult) -> NoReturn:
    """Successes go to stdout, failures to stderr; the exit code carries the verdict."""
    emit_json(result.payload, err=not result.success)
    raise SystemExit(result.exit_code)


def format_reports(reports: list[ValidationReport], *, output_format: str = "text") -> str:
    if output_format == "json":
        return json.dumps({
            "passed": all(r.passed for r in reports),
            "migrations": [render_json(r) for r in reports],
        }, indent=2)

    if not reports:
        return "no migrations found"
    blocks: list[str] = []
    for report in reports:
        body = render_text(report) or "ok"
        blocks.append(f"{report.migration}:\n{body}")
    return "\n\n".join(blocks)
