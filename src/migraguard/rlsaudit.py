"""Whole-schema Row Level Security audit against a live Postgres database.

Reads RLS flags from pg_class and policies from pg_policies for one schema,
then classifies every table: gaps (no RLS, not an approved exception) fail
the audit; weaker setups (RLS not forced, no policies, uncovered CRUD
operations) are reported as warnings.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

import psycopg

from migraguard.config import DEFAULT_RLS_EXCEPTIONS

CRUD_OPERATIONS = ("SELECT", "INSERT", "UPDATE", "DELETE")

_TABLES_SQL = """
SELECT c.relname, c.relrowsecurity, c.relforcerowsecurity
FROM pg_class c
JOIN pg_namespace n ON n.oid = c.relnamespace
WHERE n.nspname = %s
  AND c.relkind IN ('r', 'p')
  AND left(c.relname, 3) <> 'pg_'
ORDER BY c.relname
"""

_POLICIES_SQL = """
SELECT tablename, policyname, cmd, roles
FROM pg_policies
WHERE schemaname = %s
ORDER BY tablename, policyname
"""


class AuditError(Exception):
    """Raised when the database cannot be reached or queried."""


@dataclass(frozen=True)
class PolicyInfo:
    policy_name: str
    operation: str  # SELECT, INSERT, UPDATE, DELETE or ALL
    roles: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {"policyName": self.policy_name, "operation": self.operation,
                "roles": list(self.roles)}


@dataclass
class TableStatus:
    schema: str
    table_name: str
    has_rls: bool
    rls_forced: bool
    policies: list[PolicyInfo] = field(default_factory=list)
    is_exception: bool = False
    warnings: list[str] = field(default_factory=list)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    @property
    def is_gap(self) -> bool:
        return not self.has_rls and not self.is_exception

    def to_dict(self) -> dict:
        return {
            "schema": self.schema,
            "tableName": self.table_name,
            "hasRLS": self.has_rls,
            "rlsForced": self.rls_forced,
            "policies": [p.to_dict() for p in self.policies],
            "isException": self.is_exception,
            "hasWarnings": self.has_warnings,
            "warnings": self.warnings,
        }


@dataclass
class RLSAuditResult:
    tables: list[TableStatus]
    summary: list[str]

    @property
    def gaps(self) -> list[TableStatus]:
        return [t for t in self.tables if t.is_gap]

    @property
    def with_warnings(self) -> list[TableStatus]:
        return [t for t in self.tables if t.has_warnings]

    @property
    def success(self) -> bool:
        return not self.gaps

    def to_dict(self) -> dict:
        with_rls = sum(1 for t in self.tables if t.has_rls)
        return {
            "success": self.success,
            "totalTables": len(self.tables),
            "tablesWithRLS": with_rls,
            "tablesWithoutRLS": len(self.gaps),
            "exceptionsCount": sum(1 for t in self.tables if t.is_exception),
            "gaps": [t.to_dict() for t in self.gaps],
            "warnings": [t.to_dict() for t in self.with_warnings],
            "summary": self.summary,
        }


def analyze_table(
    schema: str,
    table_name: str,
    *,
    has_rls: bool,
    rls_forced: bool,
    policies: Iterable[PolicyInfo] = (),
    exceptions: frozenset[str] = DEFAULT_RLS_EXCEPTIONS,
) -> TableStatus:
    # Policies on a table without RLS are inert, so they are not reported.
    policies = list(policies) if has_rls else []
    warnings: list[str] = []

    if has_rls and not rls_forced:
        warnings.append("RLS enabled but not forced (consider using FORCE ROW LEVEL SECURITY)")
    if has_rls and not policies:
        warnings.append("RLS enabled but no policies defined (table is inaccessible to all users)")
    if has_rls and policies:
        operations = {p.operation for p in policies}
        if "ALL" not in operations:
            missing = [op for op in CRUD_OPERATIONS if op not in operations]
            if missing:
                warnings.append(f"Missing policies for operations: {', '.join(missing)}")

    return TableStatus(
        schema=schema,
        table_name=table_name,
        has_rls=has_rls,
        rls_forced=rls_forced,
        policies=policies,
        is_exception=table_name in exceptions,
        warnings=warnings,
    )


def summarize(tables: list[TableStatus]) -> list[str]:
    if not tables:
        return ["No tables found"]
    gaps = [t for t in tables if t.is_gap]
    flagged = [t for t in tables if t.has_warnings]
    lines = [
        f"Total tables: {len(tables)}",
        f"Tables with RLS: {sum(1 for t in tables if t.has_rls)}",
        f"Tables without RLS: {len(gaps)}",
        f"Approved exceptions: {sum(1 for t in tables if t.is_exception)}",
    ]
    if gaps:
        lines.append(f"RLS GAPS FOUND: {len(gaps)} table(s) missing RLS")
    if flagged:
        lines.append(f"{len(flagged)} table(s) have warnings")
    return lines


def analyze_catalog(
    schema: str,
    table_rows: Iterable[tuple[str, bool, bool]],
    policy_rows: Iterable[tuple[str, str, str, list[str] | None]],
    *,
    exceptions: frozenset[str] = DEFAULT_RLS_EXCEPTIONS,
) -> RLSAuditResult:
    """Build the audit from raw catalog rows, as returned by the two queries."""
    policies: dict[str, list[PolicyInfo]] = {}
    for table_name, policy_name, cmd, roles in policy_rows:
        policies.setdefault(table_name, []).append(
            PolicyInfo(policy_name, cmd, tuple(roles or ()))
        )

    tables = [
        analyze_table(
            schema, name,
            has_rls=bool(has_rls), rls_forced=bool(forced),
            policies=policies.get(name, ()), exceptions=exceptions,
        )
        for name, has_rls, forced in table_rows
    ]
    return RLSAuditResult(tables=tables, summary=summarize(tables))


async def audit_schema(
    dsn: str,
    *,
    schema: str = "public",
    exceptions: frozenset[str] = DEFAULT_RLS_EXCEPTIONS,
) -> RLSAuditResult:
    try:
        conn = await psycopg.AsyncConnection.connect(
            dsn, autocommit=True, application_name="migraguard"
        )
    except Exception as e:
        raise AuditError(f"PostgreSQL connection failed: {e}") from e

    try:
        async with conn.cursor() as cur:
            await cur.execute(_TABLES_SQL, (schema,))
            table_rows = await cur.fetchall()
            await cur.execute(_POLICIES_SQL, (schema,))
            policy_rows = await cur.fetchall()
    except psycopg.Error as e:
        raise AuditError(f"RLS catalog query failed: {e}") from e
    finally:
        await conn.close()

    return analyze_catalog(schema, table_rows, policy_rows, exceptions=exceptions)


def render_text(result: RLSAuditResult, *, verbose: bool = False) -> str:
    lines: list[str] = []
    if result.gaps:
        lines.append("Tables WITHOUT RLS:")
        lines.extend(f"  - {t.table_name}" for t in result.gaps)
        lines.append("")

    if verbose:
        exceptions = [t for t in result.tables if t.is_exception]
        if exceptions:
            lines.append("Approved exceptions:")
            lines.extend(f"  - {t.table_name}" for t in exceptions)
            lines.append("")
        protected = [t for t in result.tables if t.has_rls and not t.is_exception]
        if protected:
            lines.append("Tables WITH RLS:")
            for t in protected:
                forced = "yes" if t.rls_forced else "no"
                lines.append(f"  - {t.table_name} (forced: {forced}, policies: {len(t.policies)})")
                lines.extend(f"      {p.policy_name} ({p.operation})" for p in t.policies)
            lines.append("")

    if result.with_warnings:
        lines.append("Warnings:")
        for t in result.with_warnings:
            lines.append(f"  - {t.table_name}:")
            lines.extend(f"      {w}" for w in t.warnings)
        lines.append("")

    lines.extend(result.summary)
    if not result.success:
        lines.append("")
        lines.append("help: enable RLS with `migraguard rls scaffold <table>`, "
                     "or add the table to rls_exceptions in migraguard.toml")
    return "\n".join(lines)
