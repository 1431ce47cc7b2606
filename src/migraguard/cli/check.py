"""The `check` command: run the static migration checks without touching a database."""

from __future__ import annotations

from pathlib import Path

import click

from migraguard.cli._output import format_reports
from migraguard.cli._shared import load_skill_config, read_stdin_sql
from migraguard.migrations import check_paths, migration_paths
from migraguard.policy import DEFAULT_RULES, STRICT_RULES, validate_migration


def _expand(paths: tuple[Path, ...]) -> list[Path]:
    expanded: list[Path] = []
    for path in paths:
        if path.is_dir():
            expanded.extend(migration_paths(path))
        else:
            expanded.append(path)
    return expanded


@click.command("check")
@click.argument("paths", nargs=-1, type=click.Path(path_type=Path))
@click.option("--strict", is_flag=True, help="Also require migrations to run in a transaction.")
@click.option("--from-stdin", is_flag=True, help="Check SQL read from stdin.")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "text"]),
    default="json",
    help="Output format.",
)
def check_cmd(
    paths: tuple[Path, ...],
    strict: bool,
    from_stdin: bool,
    output_format: str,
) -> None:
    """Check migration files for unsafe changes.

    PATHS may be files or directories; with none, the configured migrations
    directory is checked. Exits 1 if any migration has an error.
    """
    if from_stdin:
        if paths:
            raise click.UsageError("Provide PATHS or --from-stdin, not both.")
        sql = read_stdin_sql()
        rules = STRICT_RULES if strict else DEFAULT_RULES
        reports = [validate_migration(sql, migration="<stdin>", rules=rules)]
    else:
        files = _expand(paths) if paths else migration_paths(load_skill_config().migrations_dir)
        reports = check_paths(files, strict=strict)

    click.echo(format_reports(reports, output_format=output_format))
    if not all(r.passed for r in reports):
        raise SystemExit(1)
