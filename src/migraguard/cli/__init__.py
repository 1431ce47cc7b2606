"""CLI entry point."""

from __future__ import annotations

import logging

import click

from migraguard.cli.agents import agents_group
from migraguard.cli.check import check_cmd
from migraguard.cli.migrate import apply, create, rollback, validate
from migraguard.cli.rls import rls_group


@click.group()
@click.version_option(package_name="migraguard")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    envvar="MIGRAGUARD_LOG_LEVEL",
    help="Diagnostic logging threshold (written to stderr).",
)
def main(log_level: str) -> None:
    """migraguard: migration safety checks and guarded migration tooling for AI agents."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(levelname)s %(name)s: %(message)s",
        force=True,
    )
    # sqlglot warns on every DDL statement it falls back to parsing as a command.
    logging.getLogger("sqlglot").setLevel(logging.ERROR)


main.add_command(create)
main.add_command(apply)
main.add_command(rollback)
main.add_command(validate)
main.add_command(check_cmd)
main.add_command(rls_group)
main.add_command(agents_group)
