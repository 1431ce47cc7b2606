"""Migration files on disk: naming, loading, and batch validation."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from migraguard.diagnostics import Diagnostic, ValidationReport, codes
from migraguard.policy import DEFAULT_RULES, STRICT_RULES, validate_migration

_NAME_RE = re.compile(r"^[A-Za-z0-9_]+$")


@dataclass(frozen=True)
class MigrationFile:
    path: Path
    timestamp: str
    name: str
    sql: str

    @classmethod
    def read(cls, path: Path) -> MigrationFile:
        """Read a `<timestamp>_<name>.sql` file. Raises OSError if unreadable."""
        timestamp, name = split_filename(path.name)
        return cls(path=path, timestamp=timestamp, name=name,
                   sql=path.read_text(encoding="utf-8"))


def split_filename(filename: str) -> tuple[str, str]:
    """Split `20251004120000_add_posts.sql` into ("20251004120000", "add_posts")."""
    stem = filename.removesuffix(".sql")
    timestamp, _, name = stem.partition("_")
    return timestamp, name


def validate_migration_name(name: str) -> bool:
    return bool(_NAME_RE.match(name))


def migration_paths(directory: Path) -> list[Path]:
    """All .sql files in a migrations directory, in apply order (by filename)."""
    if not directory.is_dir():
        return []
    return sorted(p for p in directory.iterdir() if p.suffix == ".sql" and p.is_file())


def load_migrations(directory: Path) -> list[MigrationFile]:
    return [MigrationFile.read(p) for p in migration_paths(directory)]


def validate_migration_file(migration: MigrationFile, *, strict: bool = False) -> ValidationReport:
    return validate_migration(
        migration.sql,
        migration=migration.path.name,
        rules=STRICT_RULES if strict else DEFAULT_RULES,
    )


def check_paths(paths: Iterable[Path], *, strict: bool = False) -> list[ValidationReport]:
    """Validate each file. An unreadable file yields a blocking report of its own."""
    reports: list[ValidationReport] = []
    for path in paths:
        try:
            migration = MigrationFile.read(path)
        except (OSError, UnicodeDecodeError) as e:
            reports.append(
                ValidationReport(
                    diagnostics=[
                        Diagnostic.error(
                            codes.FILE_UNREADABLE, f"Unable to read migration file: {e}"
                        )
                    ],
                    migration=path.name,
                )
            )
            continue
        reports.append(validate_migration_file(migration, strict=strict))
    return reports
