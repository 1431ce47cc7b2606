"""Shared helpers for CLI commands."""

from __future__ import annotations

import sys

import click

from migraguard.cli._output import fail
from migraguard.config import AgentConfig, ConfigError, SkillConfig


def read_stdin_sql() -> str:
    """Read migration SQL from piped stdin."""
    if sys.stdin.isatty():
        raise click.UsageError("--from-stdin requires piped input (stdin is a terminal).")
    text = sys.stdin.read().strip()
    if not text:
        raise click.UsageError("--from-stdin: stdin was empty.")
    return text


def load_skill_config() -> SkillConfig:
    try:
        return SkillConfig.from_env()
    except ConfigError as e:
        fail(str(e), "Fix the environment variable or migraguard.toml and retry.")


def load_agent_config() -> AgentConfig:
    try:
        return AgentConfig.from_env()
    except ConfigError as e:
        fail(str(e), "Fix the environment variable and retry.")
