"""Generate owner-scoped RLS policies for a table as a new migration."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from pathlib import Path

_IDENT_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


@dataclass(frozen=True)
class Policy:
    name: str
    table: str
    operation: str  # SELECT, INSERT, UPDATE or DELETE
    role: str
    condition: str
    description: str

    def to_sql(self) -> str:
        lines = [
            f"-- {self.description}",
            f'CREATE POLICY "{self.name}" ON public.{self.table}',
            f"  FOR {self.operation}",
            f"  TO {self.role}",
        ]
        if self.operation != "INSERT":
            lines.append(f"  USING ({self.condition})")
        if self.operation in ("INSERT", "UPDATE"):
            lines.append(f"  WITH CHECK ({self.condition})")
        return "\n".join(lines) + ";"


def _check_identifier(value: str, label: str) -> None:
    if not _IDENT_RE.match(value):
        raise ValueError(f"Invalid {label}: {value!r}")


def generate_policies(
    table: str,
    *,
    owner_column: str = "user_id",
    public_read: bool = False,
    allow_anon: bool = False,
    soft_deletes: bool = False,
) -> list[Policy]:
    """Build the policy set for a table. Raises ValueError on unsafe identifiers."""
    _check_identifier(table, "table")
    _check_identifier(owner_column, "owner column")

    # Wrapping auth.uid() in a sub-select lets Postgres evaluate it once per query.
    owner = f"(SELECT auth.uid()) = {owner_column}"
    policies = [
        Policy(f"{table}_select_own", table, "SELECT", "authenticated", owner,
               "Users can read their own records"),
        Policy(f"{table}_insert_own", table, "INSERT", "authenticated", owner,
               "Users can create records for themselves"),
        Policy(f"{table}_update_own", table, "UPDATE", "authenticated", owner,
               "Users can update their own records"),
        Policy(f"{table}_delete_own", table, "DELETE", "authenticated", owner,
               "Users can delete their own records"),
    ]

    if public_read:
        policies.append(Policy(f"{table}_public_read", table, "SELECT", "anon", "true",
                               "Allow public read access"))

    if allow_anon:
        # auth.uid() is NULL for anon, so these fall back to a role check.
        policies.extend(
            replace(
                p,
                name=f"{p.name}_anon",
                role="anon",
                condition="auth.role() = 'anon'",
                description=f"{p.description} (anonymous users, role-based access)",
            )
            for p in policies
            if p.role == "authenticated"
        )

    if soft_deletes:
        policies = [
            replace(
                p,
                condition=f"{p.condition} AND deleted_at IS NULL",
                description=f"{p.description} (excluding soft-deleted records)",
            )
            if p.operation == "SELECT" else p
            for p in policies
        ]

    return policies


def render_script(
    table: str,
    policies: list[Policy],
    *,
    owner_column: str = "user_id",
    now: datetime | None = None,
) -> str:
    generated = (now or datetime.now(UTC)).isoformat()
    own = [p for p in policies if p.name.endswith("_own")]
    parts = [
        f"-- Row Level Security policies for {table}",
        f"-- Generated: {generated}",
        "-- Review and customize before applying",
        "",
        f"ALTER TABLE public.{table} ENABLE ROW LEVEL SECURITY;",
        f"ALTER TABLE public.{table} FORCE ROW LEVEL SECURITY;",
        "",
        "-- Drop existing policies (uncomment if recreating)",
        *(f'-- DROP POLICY IF EXISTS "{p.name}" ON public.{table};' for p in own),
        "",
        "\n\n".join(p.to_sql() for p in policies),
        "",
        "-- Index the columns policies filter on:",
        f"-- CREATE INDEX idx_{table}_{owner_column} ON public.{table}({owner_column});",
        "",
        "-- Admin override for service accounts (uncomment if needed):",
        f'-- CREATE POLICY "{table}_admin_all" ON public.{table}',
        "--   FOR ALL",
        "--   TO service_role",
        "--   USING (true);",
        "",
    ]
    return "\n".join(parts)


def script_filename(table: str, *, now: datetime | None = None) -> str:
    stamp = (now or datetime.now(UTC)).strftime("%Y%m%d%H%M%S")
    return f"{stamp}_rls_{table}.sql"


def write_script(directory: Path, filename: str, script: str) -> Path:
    """Write a new migration file. Raises FileExistsError rather than overwrite."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / filename
    with open(path, "x", encoding="utf-8") as f:
        f.write(script)
    return path
