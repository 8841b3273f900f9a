from __future__ import annotations

import pytest

from bettertodo.core.agent.errors import TaskBusy, TaskNotFound, TaskNotRetryable, TaskValidationError
from bettertodo.core.agent.schemas import ExecutionLogEntry
from bettertodo.core.agent.store import AgentTaskStore


def _create(store: AgentTaskStore, user_id: str = "u1", **overrides):
    params = {
        "user_id": user_id,
        "source_id": "todo-1",
        "source_type": "todo",
        "source_content": "Plan a trip to Lisbon",
        "provider": "claude",
        "task_type": "expand",
    }
    params.update(overrides)
    return store.create(**params)


def test_create_starts_pending(task_store) -> None:
    task = _create(task_store, folder_id="f1")

    stored = task_store.get(task.id)
    assert stored.status == "pending"
    assert stored.result is None
    assert stored.messages == []
    assert stored.folder_id == "f1"


def test_other_task_type_requires_instructions(task_store) -> None:
    with pytest.raises(TaskValidationError):
        _create(task_store, task_type="other", custom_instructions="   ")
    with pytest.raises(TaskValidationError):
        _create(task_store, task_type="other")

    assert task_store.list_for_user("u1") == []

    task = _create(task_store, task_type="other", custom_instructions="Translate to French")
    assert task_store.get(task.id).custom_instructions == "Translate to French"


def test_result_written_once(task_store) -> None:
    task = _create(task_store)
    task_store.mark_processing(task.id)
    task_store.mark_completed(task.id, "first answer", "claude")
    task_store.mark_completed(task.id, "second answer", "openai")

    stored = task_store.get(task.id)
    assert stored.result == "first answer"
    assert stored.actual_provider == "openai"


def test_transitions_on_deleted_task_are_noops(task_store) -> None:
    task = _create(task_store)
    task_store.delete(task.id, "u1")

    assert task_store.mark_processing(task.id) is None
    assert task_store.mark_completed(task.id, "late", "claude") is None
    assert task_store.mark_failed(task.id, "late") is None
    assert task_store.append_execution_log_entry(task.id, ExecutionLogEntry(tool_name="createTodo", tool_input="{}")) is None
    assert task_store.get(task.id) is None


def test_follow_up_rejected_while_busy(task_store) -> None:
    task = _create(task_store)

    with pytest.raises(TaskBusy):
        task_store.append_follow_up(task.id, "u1", "more please")

    task_store.mark_processing(task.id)
    with pytest.raises(TaskBusy):
        task_store.append_follow_up(task.id, "u1", "more please")

    assert task_store.get(task.id).messages == []


def test_second_follow_up_in_quick_succession_is_busy(task_store) -> None:
    task = _create(task_store)
    task_store.mark_completed(task.id, "answer", "claude")

    task_store.append_follow_up(task.id, "u1", "first question")
    with pytest.raises(TaskBusy):
        task_store.append_follow_up(task.id, "u1", "second question")

    stored = task_store.get(task.id)
    assert stored.status == "processing"
    assert [message.content for message in stored.messages] == ["first question"]


def test_follow_up_allowed_on_failed_task(task_store) -> None:
    task = _create(task_store)
    task_store.mark_failed(task.id, "boom")

    updated = task_store.append_follow_up(task.id, "u1", "try again?")

    assert updated.status == "processing"


def test_follow_up_on_other_users_task_is_not_found(task_store) -> None:
    task = _create(task_store)
    task_store.mark_completed(task.id, "answer", "claude")

    with pytest.raises(TaskNotFound):
        task_store.append_follow_up(task.id, "u2", "hi")


def test_messages_are_append_only_with_ordered_timestamps(task_store) -> None:
    task = _create(task_store)
    task_store.mark_completed(task.id, "answer", "claude")

    snapshots = []
    for index in range(3):
        task_store.append_follow_up(task.id, "u1", f"question {index}")
        task_store.append_assistant_reply(task.id, f"reply {index}", "openai")
        snapshots.append(task_store.get(task.id).messages)

    for before, after in zip(snapshots, snapshots[1:]):
        assert after[: len(before)] == before
        assert len(after) == len(before) + 2

    final = snapshots[-1]
    assert [message.ts_iso for message in final] == sorted(message.ts_iso for message in final)
    assert final[1].provider == "openai"
    assert task_store.get(task.id).result == "answer"


def test_follow_up_failure_keeps_task_completed(task_store) -> None:
    task = _create(task_store)
    task_store.mark_completed(task.id, "answer", "claude")
    task_store.append_follow_up(task.id, "u1", "question")

    task_store.mark_follow_up_failed(task.id, "provider down")

    stored = task_store.get(task.id)
    assert stored.status == "completed"
    assert stored.error == "provider down"
    assert stored.result == "answer"

    task_store.append_follow_up(task.id, "u1", "again")
    task_store.append_assistant_reply(task.id, "ok now", "claude")
    assert task_store.get(task.id).error is None


def test_execution_log_append_and_patch(task_store) -> None:
    task = _create(task_store, task_type="run")

    first = task_store.append_execution_log_entry(task.id, ExecutionLogEntry(tool_name="createTodo", tool_input='{"content": "a"}'))
    second = task_store.append_execution_log_entry(task.id, ExecutionLogEntry(tool_name="searchTodos", tool_input='{"query": "a"}'))
    task_store.update_execution_log_entry(task.id, second, "error", '{"error": "bad"}')
    task_store.update_execution_log_entry(task.id, first, "success", '{"success": true}')

    log = task_store.get(task.id).execution_log
    assert (first, second) == (0, 1)
    assert [(entry.tool_name, entry.status) for entry in log] == [("createTodo", "success"), ("searchTodos", "error")]
    assert log[1].tool_result == '{"error": "bad"}'


def test_delete_is_idempotent_and_owner_scoped(task_store) -> None:
    task = _create(task_store)

    task_store.delete(task.id, "someone-else")
    assert task_store.get(task.id) is not None

    task_store.delete(task.id, "u1")
    task_store.delete(task.id, "u1")
    assert task_store.get(task.id) is None


def test_delete_all_scoped_by_folder_or_date(task_store) -> None:
    _create(task_store, folder_id="f1")
    _create(task_store, date="2025-06-01")
    _create(task_store, date="2025-06-01")
    _create(task_store, user_id="u2", date="2025-06-01")

    assert task_store.delete_all("u1", folder_id="f1") == 1
    assert task_store.delete_all("u1", date="2025-06-01") == 2
    assert task_store.delete_all("u1") == 0
    assert len(task_store.list_for_user("u2")) == 1


def test_list_filters_and_counts(task_store) -> None:
    first = _create(task_store, date="2025-06-01")
    second = _create(task_store, date="2025-06-01")
    _create(task_store, folder_id="f1")
    task_store.mark_completed(first.id, "done", "claude")
    task_store.mark_failed(second.id, "nope")

    assert {task.id for task in task_store.list_for_user("u1", date="2025-06-01")} == {first.id, second.id}
    assert [task.id for task in task_store.list_for_user("u1", status="failed")] == [second.id]

    counts = task_store.counts("u1")
    assert (counts.pending, counts.processing, counts.completed, counts.failed, counts.total) == (1, 0, 1, 1, 3)


def test_reset_for_retry_only_for_failed_tasks(task_store) -> None:
    task = _create(task_store, task_type="run")
    task_store.append_execution_log_entry(task.id, ExecutionLogEntry(tool_name="createTodo", tool_input="{}"))
    task_store.mark_failed(task.id, "boom", "openai")

    reset = task_store.reset_for_retry(task.id, "u1")

    assert reset.status == "pending"
    assert reset.error is None
    assert reset.actual_provider is None
    assert reset.execution_log == []

    with pytest.raises(TaskNotRetryable):
        task_store.reset_for_retry(task.id, "u1")


def test_clear_conversation_keeps_result(task_store) -> None:
    task = _create(task_store)
    task_store.mark_completed(task.id, "answer", "claude")
    task_store.append_follow_up(task.id, "u1", "q")
    task_store.append_assistant_reply(task.id, "a", "claude")

    task_store.clear_conversation(task.id, "u1")

    stored = task_store.get(task.id)
    assert stored.messages == []
    assert stored.result == "answer"


def test_store_trims_oldest_terminal_tasks(tmp_path) -> None:
    store = AgentTaskStore(state_dir=tmp_path, max_records=2)
    oldest = _create(store)
    store.mark_completed(oldest.id, "a", "claude")
    busy = _create(store)
    newest = _create(store)

    remaining = {task.id for task in store.list_for_user("u1")}
    assert remaining == {busy.id, newest.id}
