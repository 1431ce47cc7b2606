"""Guarded migration operations.

Each operation checks its input, runs the migration tool through the bounded
runner, and condenses the outcome into a SkillResult: a process exit code
plus a JSON-ready payload. Guards that refuse an operation never spawn a
process.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from migraguard.config import SkillConfig
from migraguard.diagnostics.render import render_json
from migraguard.migrations import check_paths, migration_paths, validate_migration_name
from migraguard.runner import ExecOutcome, ExecStatus, run_command

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_BLOCKED = 2

Runner = Callable[..., ExecOutcome]


@dataclass(frozen=True)
class SkillResult:
    exit_code: int
    payload: dict
    outcome: ExecOutcome | None = None

    @property
    def success(self) -> bool:
        return self.exit_code == EXIT_OK


# Hints for a non-zero exit depend on what the tool was doing.
_EXIT_HINTS = {
    "create": "Run inside a Supabase project (one with a supabase/ directory); "
              "'supabase init' creates it.",
    "apply": "A migration failed to apply. Fix its SQL, make sure the local stack "
             "is running ('supabase start'), then apply again.",
    "rollback": "The reset failed. Make sure the local stack is running "
                "('supabase start') and retry.",
    "validate": "The schema linter reported problems. Set SKILL_VERBOSE=1 to see them.",
}


def _failure_hint(operation: str, outcome: ExecOutcome, config: SkillConfig) -> str:
    if outcome.status == ExecStatus.TIMEOUT:
        return (f"'{config.tool}' did not finish within {config.timeout_ms}ms. "
                "Check that the local database is reachable or raise SKILL_EXEC_TIMEOUT_MS.")
    if outcome.status == ExecStatus.OUTPUT_LIMIT:
        return (f"'{config.tool}' wrote more than {config.max_buffer} bytes. "
                "Raise SKILL_EXEC_MAX_BUFFER or run the command directly.")
    if outcome.status == ExecStatus.SIGNAL:
        return f"'{config.tool}' was killed by {outcome.signal}. Retry the operation."
    if outcome.status == ExecStatus.SPAWN_ERROR:
        return (f"Could not start '{config.tool}'. Install the Supabase CLI "
                "or point MIGRAGUARD_TOOL at it.")
    return _EXIT_HINTS[operation]


def _run(
    operation: str,
    args: list[str],
    config: SkillConfig,
    runner: Runner,
    *,
    message: str,
    next_steps: list[str],
) -> SkillResult:
    argv = [config.tool, *args]
    outcome = runner(argv, timeout_ms=config.timeout_ms, max_buffer=config.max_buffer)
    logger.info("%s: %s in %.0fms", operation, outcome.status.value, outcome.duration_ms)

    if outcome.ok:
        payload: dict = {"success": True, "message": message, "nextSteps": next_steps}
        if config.verbose:
            payload["output"] = outcome.stdout
        return SkillResult(EXIT_OK, payload, outcome)

    payload = {"success": False, "error": outcome.error or f"{operation} failed"}
    if outcome.returncode is not None:
        payload["status"] = outcome.returncode
    if outcome.error_code is not None:
        payload["code"] = outcome.error_code
    if outcome.signal is not None:
        payload["signal"] = outcome.signal
    if config.verbose:
        payload["stdout"] = outcome.stdout
        payload["stderr"] = outcome.stderr
    payload["hint"] = _failure_hint(operation, outcome, config)
    return SkillResult(EXIT_FAILURE, payload, outcome)


def create_migration(name: str, config: SkillConfig, *, runner: Runner = run_command) -> SkillResult:
    if not validate_migration_name(name):
        return SkillResult(EXIT_FAILURE, {
            "success": False,
            "error": f"Invalid migration name: {name!r}",
            "hint": "Use letters, digits and underscores only, e.g. add_posts_table.",
        })
    return _run(
        "create", ["migration", "new", name], config, runner,
        message=f"Created migration '{name}'",
        next_steps=[
            f"Write the SQL in {config.migrations_dir}/<timestamp>_{name}.sql",
            "Check it with: migraguard check",
            "Apply it with: migraguard apply",
        ],
    )


def apply_migrations(
    config: SkillConfig,
    *,
    skip_check: bool = False,
    runner: Runner = run_command,
) -> SkillResult:
    """Apply pending migrations, refusing if any migration fails the static check."""
    if not skip_check:
        reports = check_paths(migration_paths(config.migrations_dir))
        blocking = [r for r in reports if not r.passed]
        if blocking:
            return SkillResult(EXIT_BLOCKED, {
                "success": False,
                "error": f"{len(blocking)} migration(s) failed safety checks",
                "migrations": [render_json(r) for r in blocking],
                "hint": "Fix the reported errors, or pass --skip-check "
                        "if the destructive change is intended.",
            })
    return _run(
        "apply", ["migration", "up"], config, runner,
        message="Migrations applied",
        next_steps=[
            "Audit RLS coverage with: migraguard rls audit --db <dsn>",
            "Regenerate types if the schema changed: supabase gen types typescript --local",
        ],
    )


def rollback_database(config: SkillConfig, *, runner: Runner = run_command) -> SkillResult:
    """Reset the local database. Destructive, so it needs ALLOW_DB_ROLLBACK=1."""
    if not config.allow_rollback:
        return SkillResult(EXIT_BLOCKED, {
            "success": False,
            "error": "Rollback is disabled",
            "hint": "This runs 'supabase db reset', which drops and recreates the local "
                    "database. Set ALLOW_DB_ROLLBACK=1 to allow it.",
        })
    return _run(
        "rollback", ["db", "reset"], config, runner,
        message="Local database reset and migrations re-applied",
        next_steps=["Re-seed any data the seed file does not cover"],
    )


def validate_schema(config: SkillConfig, *, runner: Runner = run_command) -> SkillResult:
    return _run(
        "validate", ["db", "lint"], config, runner,
        message="Schema lint passed",
        next_steps=["Apply pending migrations with: migraguard apply"],
    )
