"""Skill usage log kept inside the project.

Each guarded command appends one JSON line to `<directory>/YYYY-MM-DD.jsonl`.
The directory defaults to `.logs/skill-usage` under the working directory.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from pathlib import Path

DEFAULT_RETENTION_DAYS = 30


@dataclass(frozen=True)
class RunLog:
    directory: Path
    retention_days: int = DEFAULT_RETENTION_DAYS

    def path_for(self, day: date) -> Path:
        return self.directory / f"{day.isoformat()}.jsonl"

    def record(
        self,
        *,
        action: str,
        exit_code: int,
        success: bool,
        duration_ms: float | None = None,
        status: str | None = None,
        argv: list[str] | None = None,
        now: datetime | None = None,
    ) -> Path:
        """Append one entry and return the file it went to.

        `status` is the runner's failure status (timeout, signal, ...) and stays
        None for guard refusals, which never start a process.
        """
        now = now or datetime.now(UTC)
        entry = {
            "ts": now.isoformat(),
            "action": action,
            "exit_code": exit_code,
            "success": success,
            "duration_ms": duration_ms,
            "status": status,
            "argv": argv,
        }
        path = self.path_for(now.date())
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a") as f:
            f.write(json.dumps(entry) + "\n")
        return path

    def prune(self, *, today: date | None = None) -> list[Path]:
        """Remove day files older than the retention window; other files are left alone."""
        if not self.directory.is_dir():
            return []
        cutoff = (today or datetime.now(UTC).date()) - timedelta(days=self.retention_days)

        removed: list[Path] = []
        for path in sorted(self.directory.glob("*.jsonl")):
            try:
                day = date.fromisoformat(path.stem)
            except ValueError:
                continue
            if day < cutoff:
                path.unlink()
                removed.append(path)
        return removed
