"""Migration policy: run every rule over one migration and collect a report."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from migraguard.diagnostics import Diagnostic, ValidationReport
from migraguard.policy import alter_type, destructive, indexes, rls, transactions
from migraguard.policy._types import Rule, check_ownership
from migraguard.policy.tables import extract_tables

logger = logging.getLogger(__name__)

DEFAULT_RULES: tuple[Rule, ...] = check_ownership([
    Rule("destructive-operations", destructive.detect_destructive_operations,
         destructive.OWNED_CODES),
    Rule("missing-rls", rls.detect_missing_rls, rls.OWNED_CODES),
    Rule("missing-fk-index", indexes.detect_missing_fk_indexes, indexes.OWNED_CODES),
    Rule("unsafe-type-change", alter_type.detect_unsafe_type_changes,
         alter_type.OWNED_CODES),
])

STRICT_RULES: tuple[Rule, ...] = check_ownership([
    *DEFAULT_RULES,
    Rule("missing-transaction", transactions.detect_missing_transaction,
         transactions.OWNED_CODES),
])


def validate_migration(
    sql: str,
    *,
    migration: str | None = None,
    rules: Sequence[Rule] = DEFAULT_RULES,
) -> ValidationReport:
    """Run every rule over a migration's SQL and merge the findings.

    Rules run in registration order and their findings keep the order each
    rule produced them in. A rule that raises is logged and skipped so the
    remaining rules still report. The report blocks iff it holds an error.

    Args:
        sql: Raw migration text.
        migration: Name shown in the report (usually the file name).
        rules: Rule set to apply; STRICT_RULES adds hygiene checks.
    """
    diagnostics: list[Diagnostic] = []
    for rule in rules:
        try:
            found = rule.detect(sql)
        except Exception:
            logger.warning("rule %s failed on %s; skipping", rule.name,
                           migration or "<sql>", exc_info=True)
            continue
        diagnostics.extend(found)

    return ValidationReport(
        diagnostics=diagnostics,
        migration=migration,
        tables=extract_tables(sql),
    )


__all__ = ["DEFAULT_RULES", "STRICT_RULES", "Rule", "validate_migration"]
