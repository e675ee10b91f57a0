from __future__ import annotations

import json
from pathlib import Path

import pytest

from common.errors import BackendError, ErrorCode
from common.progress import ScanEventLog


def test_event_log_appends_jsonl(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "events.jsonl"
    log = ScanEventLog(path)

    log.emit("scan_started", path=Path("/tmp/input.txt"))
    log.emit("line_over_length", line_number=3, length=81)

    rows = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert [row["event"] for row in rows] == ["scan_started", "line_over_length"]
    assert rows[0]["path"] == "/tmp/input.txt"
    assert rows[1]["length"] == 81
    assert all("timestamp" in row for row in rows)


def test_disabled_event_log_writes_nothing(tmp_path: Path) -> None:
    log = ScanEventLog(None)
    log.emit("scan_started", path="ignored")
    assert list(tmp_path.iterdir()) == []


def test_unwritable_event_log_raises_config_error(tmp_path: Path) -> None:
    target = tmp_path / "as_dir"
    target.mkdir()

    with pytest.raises(BackendError) as exc:
        ScanEventLog(target)
    assert exc.value.code == ErrorCode.CONFIG_ERROR
    assert exc.value.context["path"] == str(target)
