"""The `rls` command group: audit a live schema, scaffold policies for a table."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime

import click

from migraguard.cli._output import emit_json, fail
from migraguard.cli._shared import load_skill_config
from migraguard.rlsaudit import AuditError, audit_schema, render_text
from migraguard.scaffold import generate_policies, render_script, script_filename, write_script


@click.group("rls")
def rls_group() -> None:
    """Row Level Security tooling."""


@rls_group.command()
@click.option("--db", "dsn", required=True, envvar="DATABASE_URL", help="Postgres connection string.")
@click.option("--schema", default="public", show_default=True, help="Schema to audit.")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "text"]),
    default="json",
    help="Output format.",
)
@click.option("--verbose", "-v", is_flag=True, help="Include protected tables and exceptions.")
def audit(dsn: str, schema: str, output_format: str, verbose: bool) -> None:
    """Audit every table in a schema for RLS coverage. Exits 1 on any gap."""
    config = load_skill_config()
    try:
        result = asyncio.run(
            audit_schema(dsn, schema=schema, exceptions=config.rls_exceptions)
        )
    except AuditError as e:
        fail(str(e), "Check the --db connection string and that the database is running.")

    if output_format == "json":
        emit_json(result.to_dict())
    else:
        click.echo(render_text(result, verbose=verbose))
    if not result.success:
        raise SystemExit(1)


@rls_group.command()
@click.argument("table")
@click.option("--owner-column", default="user_id", show_default=True,
              help="Column holding the owning user's id.")
@click.option("--public-read", is_flag=True, help="Allow anonymous read access.")
@click.option("--allow-anon", is_flag=True,
              help="Mirror each policy for anon, gated on auth.role() = 'anon'.")
@click.option("--soft-deletes", is_flag=True, help="Hide rows with deleted_at set from reads.")
@click.option("--dry-run", is_flag=True, help="Print the script instead of writing a migration.")
def scaffold(
    table: str,
    owner_column: str,
    public_read: bool,
    allow_anon: bool,
    soft_deletes: bool,
    dry_run: bool,
) -> None:
    """Generate owner-scoped RLS policies for TABLE as a new migration."""
    try:
        policies = generate_policies(
            table, owner_column=owner_column, public_read=public_read,
            allow_anon=allow_anon, soft_deletes=soft_deletes,
        )
    except ValueError as e:
        fail(str(e), "Identifiers must match [a-zA-Z_][a-zA-Z0-9_]*.")

    now = datetime.now(UTC)
    script = render_script(table, policies, owner_column=owner_column, now=now)
    if dry_run:
        click.echo(script)
        return

    config = load_skill_config()
    try:
        path = write_script(config.migrations_dir, script_filename(table, now=now), script)
    except FileExistsError as e:
        fail(f"Migration already exists: {e.filename}", "Wait a second and retry.")
    except OSError as e:
        fail(f"Could not write migration: {e}")

    emit_json({
        "success": True,
        "message": f"Scaffolded {len(policies)} RLS policies for {table}",
        "file": str(path),
        "policies": [
            {"name": p.name, "operation": p.operation, "role": p.role} for p in policies
        ],
        "nextSteps": [
            "Review and customize the generated policies",
            "Check it with: migraguard check",
            "Apply it with: migraguard apply",
        ],
    })
