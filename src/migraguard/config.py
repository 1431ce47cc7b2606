"""Process-wide configuration, read once at startup and passed down explicitly.

Sources, lowest precedence first:
    1. Built-in defaults
    2. ./migraguard.toml ([migraguard] table)
    3. Environment variables
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_TIMEOUT_MS = 120_000
DEFAULT_MAX_BUFFER = 10 * 1024 * 1024
DEFAULT_AGENT_TIMEOUT_MS = 60_000
DEFAULT_RLS_EXCEPTIONS = frozenset({"_health_check", "schema_migrations", "supabase_migrations"})
DEFAULT_RUN_LOG_DIR = Path(".logs/skill-usage")

CONFIG_FILE = Path("migraguard.toml")


class ConfigError(ValueError):
    """Raised for malformed configuration values."""


def _load_file(path: Path) -> dict:
    if not path.exists():
        return {}
    try:
        data = tomllib.loads(path.read_text())
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"{path}: {e}") from e
    section = data.get("migraguard", {})
    if not isinstance(section, dict):
        raise ConfigError(f"{path}: [migraguard] must be a table")
    return section


def _positive_int(environ: Mapping[str, str], key: str, default: int) -> int:
    raw = environ.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigError(f"{key} must be an integer, got {raw!r}") from e
    if value <= 0:
        raise ConfigError(f"{key} must be positive, got {value}")
    return value


def _truthy(value: str | None) -> bool:
    return value is not None and value.strip().lower() in {"1", "true"}


@dataclass(frozen=True)
class SkillConfig:
    """Settings for the guarded migration commands."""

    timeout_ms: int = DEFAULT_TIMEOUT_MS
    max_buffer: int = DEFAULT_MAX_BUFFER
    verbose: bool = False
    allow_rollback: bool = False
    tool: str = "supabase"
    migrations_dir: Path = Path("supabase/migrations")
    rls_exceptions: frozenset[str] = DEFAULT_RLS_EXCEPTIONS
    run_log: bool = True
    run_log_dir: Path = DEFAULT_RUN_LOG_DIR

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        *,
        config_file: Path = CONFIG_FILE,
    ) -> SkillConfig:
        env = os.environ if environ is None else environ
        file_values = _load_file(config_file)

        exceptions = file_values.get("rls_exceptions")
        if exceptions is not None and not isinstance(exceptions, list):
            raise ConfigError(f"{config_file}: rls_exceptions must be a list of table names")

        return cls(
            timeout_ms=_positive_int(env, "SKILL_EXEC_TIMEOUT_MS", DEFAULT_TIMEOUT_MS),
            max_buffer=_positive_int(env, "SKILL_EXEC_MAX_BUFFER", DEFAULT_MAX_BUFFER),
            verbose=_truthy(env.get("SKILL_VERBOSE")),
            # Only the literal "1" unlocks rollback ("true" does not).
            allow_rollback=env.get("ALLOW_DB_ROLLBACK") == "1",
            tool=env.get("MIGRAGUARD_TOOL") or str(file_values.get("tool", "supabase")),
            migrations_dir=Path(
                env.get("MIGRAGUARD_MIGRATIONS_DIR")
                or file_values.get("migrations_dir", "supabase/migrations")
            ),
            rls_exceptions=DEFAULT_RLS_EXCEPTIONS | frozenset(exceptions or ()),
            run_log=env.get("MIGRAGUARD_RUN_LOG", "1") != "0",
            run_log_dir=Path(
                env.get("MIGRAGUARD_RUN_LOG_DIR")
                or file_values.get("run_log_dir", DEFAULT_RUN_LOG_DIR)
            ),
        )


@dataclass(frozen=True)
class AgentConfig:
    """Settings for the LLM backend used by the sub-agent orchestrator."""

    base_url: str = "https://api.openai.com"
    model: str = "gpt-4o-mini"
    api_key: str = field(default="", repr=False)
    default_timeout_ms: int = DEFAULT_AGENT_TIMEOUT_MS

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> AgentConfig:
        env = os.environ if environ is None else environ
        return cls(
            base_url=env.get("MIGRAGUARD_LLM_URL") or cls.base_url,
            model=env.get("MIGRAGUARD_LLM_MODEL") or cls.model,
            api_key=env.get("MIGRAGUARD_LLM_API_KEY") or env.get("OPENAI_API_KEY", ""),
            default_timeout_ms=_positive_int(
                env, "MIGRAGUARD_AGENT_TIMEOUT_MS", DEFAULT_AGENT_TIMEOUT_MS
            ),
        )
