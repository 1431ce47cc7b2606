"""Guarded wrappers around the migration tool: create, apply, rollback, validate.

Every command prints one JSON document (stdout on success, stderr on
failure) and exits 0 on success, 1 on failure, 2 when a safety guard refused.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

import click

from migraguard.cli._output import finish
from migraguard.cli._shared import load_skill_config
from migraguard.config import SkillConfig
from migraguard.runlog import RunLog
from migraguard.runner import run_command
from migraguard.skill import (
    SkillResult,
    apply_migrations,
    create_migration,
    rollback_database,
    validate_schema,
)

logger = logging.getLogger(__name__)


def _run_logged(action: str, operation: Callable[[SkillConfig], SkillResult]) -> None:
    config = load_skill_config()
    result = operation(config)

    if config.run_log:
        outcome = result.outcome
        run_log = RunLog(config.run_log_dir)
        try:
            run_log.prune()
            run_log.record(
                action=action,
                exit_code=result.exit_code,
                success=result.success,
                duration_ms=outcome.duration_ms if outcome else None,
                status=None if outcome is None or outcome.ok else outcome.status.value,
                argv=list(outcome.argv) if outcome else None,
            )
        except OSError:
            logger.warning("could not write run log to %s", config.run_log_dir, exc_info=True)

    finish(result)


@click.command()
@click.argument("name")
def create(name: str) -> None:
    """Create a new, empty migration file named NAME."""
    _run_logged("create", lambda config: create_migration(name, config, runner=run_command))


@click.command()
@click.option(
    "--skip-check", is_flag=True,
    help="Apply even if a migration fails the static safety check.",
)
def apply(skip_check: bool) -> None:
    """Apply pending migrations to the local database."""
    _run_logged(
        "apply",
        lambda config: apply_migrations(config, skip_check=skip_check, runner=run_command),
    )


@click.command()
def rollback() -> None:
    """Reset the local database. Requires ALLOW_DB_ROLLBACK=1."""
    _run_logged("rollback", lambda config: rollback_database(config, runner=run_command))


@click.command()
def validate() -> None:
    """Lint the local database schema."""
    _run_logged("validate", lambda config: validate_schema(config, runner=run_command))
