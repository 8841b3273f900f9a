from __future__ import annotations

import json
import os
import time

from bettertodo.core.storage.jsonl import JsonlTable
from bettertodo.core.workspace.schemas import ArchivedDate


def test_corrupt_lines_are_skipped(tmp_path) -> None:
    path = tmp_path / "archived_dates.jsonl"
    path.write_text(
        "\n".join(
            [
                json.dumps({"user_id": "u1", "date": "2025-06-01"}),
                "{bad json",
                json.dumps({"user_id": "u1"}),
                "",
                json.dumps({"user_id": "u2", "date": "2025-06-02"}),
            ]
        )
        + "\n",
        encoding="utf-8",
    )

    records = JsonlTable(path, ArchivedDate).load_all()

    assert [(item.user_id, item.date) for item in records] == [("u1", "2025-06-01"), ("u2", "2025-06-02")]


def test_missing_file_loads_empty(tmp_path) -> None:
    assert JsonlTable(tmp_path / "nested" / "none.jsonl", ArchivedDate).load_all() == []


def test_rewrite_replaces_contents_and_releases_lock(tmp_path) -> None:
    table = JsonlTable(tmp_path / "archived_dates.jsonl", ArchivedDate)
    with table.locked():
        table.append(ArchivedDate(user_id="u1", date="2025-06-01"))
        table.append(ArchivedDate(user_id="u1", date="2025-06-02"))
        assert table.lock_path.exists()

    with table.locked():
        table.rewrite([item for item in table.load_all() if item.date != "2025-06-01"])

    assert not table.lock_path.exists()
    assert not table.file_path.with_suffix(".tmp").exists()
    assert [item.date for item in table.load_all()] == ["2025-06-02"]


def test_stale_lock_file_from_crashed_process_is_reclaimed(task_store) -> None:
    task = task_store.create(
        user_id="u1",
        source_id="todo-1",
        source_type="todo",
        source_content="x",
        provider="claude",
        task_type="expand",
    )
    lock_path = task_store.table.lock_path
    lock_path.touch()
    old = time.time() - 60
    os.utime(lock_path, (old, old))

    timings = []
    for _ in range(2):
        start = time.monotonic()
        task_store.mark_processing(task.id)
        timings.append(time.monotonic() - start)

    assert not lock_path.exists()
    assert max(timings) < 1.0
    assert task_store.get(task.id).status == "processing"


def test_fresh_lock_is_reclaimed_after_timeout(tmp_path, monkeypatch) -> None:
    monkeypatch.setattr("bettertodo.core.storage.jsonl._LOCK_TIMEOUT_S", 0.05)
    table = JsonlTable(tmp_path / "archived_dates.jsonl", ArchivedDate)
    table.lock_path.touch()

    with table.locked():
        table.append(ArchivedDate(user_id="u1", date="2025-06-01"))

    assert not table.lock_path.exists()

    with table.locked():
        table.append(ArchivedDate(user_id="u1", date="2025-06-02"))
    assert not table.lock_path.exists()
    assert len(table.load_all()) == 2
