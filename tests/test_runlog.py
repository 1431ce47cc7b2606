"""Test the project-local skill usage log."""

import json
from datetime import UTC, date, datetime

from migraguard.runlog import RunLog


def test_record_writes_daily_file(tmp_path):
    log = RunLog(tmp_path / ".logs" / "skill-usage")
    path = log.record(
        action="apply", exit_code=1, success=False, duration_ms=12.5,
        status="timeout", argv=["supabase", "migration", "up"],
        now=datetime(2025, 3, 14, 9, 30, tzinfo=UTC),
    )

    assert path == tmp_path / ".logs" / "skill-usage" / "2025-03-14.jsonl"
    entry = json.loads(path.read_text())
    assert entry == {
        "ts": "2025-03-14T09:30:00+00:00",
        "action": "apply",
        "exit_code": 1,
        "success": False,
        "duration_ms": 12.5,
        "status": "timeout",
        "argv": ["supabase", "migration", "up"],
    }


def test_record_appends(tmp_path):
    log = RunLog(tmp_path)
    log.record(action="create", exit_code=0, success=True)
    path = log.record(action="rollback", exit_code=2, success=False)

    lines = path.read_text().splitlines()
    assert [json.loads(line)["action"] for line in lines] == ["create", "rollback"]
    assert json.loads(lines[1])["argv"] is None


def test_prune_removes_days_past_retention(tmp_path):
    log = RunLog(tmp_path, retention_days=30)
    for name in ("2025-01-01.jsonl", "2025-02-20.jsonl", "notes.jsonl", "2025-01-01.txt"):
        (tmp_path / name).write_text("{}\n")

    removed = log.prune(today=date(2025, 3, 1))

    assert removed == [tmp_path / "2025-01-01.jsonl"]
    assert sorted(p.name for p in tmp_path.iterdir()) == [
        "2025-01-01.txt",
        "2025-02-20.jsonl",
        "notes.jsonl",
    ]


def test_prune_without_directory(tmp_path):
    assert RunLog(tmp_path / "missing").prune() == []
