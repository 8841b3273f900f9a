from __future__ import annotations

from bettertodo.core.agent.runners import FollowUpRunner
from bettertodo.core.providers import AssistantTurn, ProviderRequestFailed, UserTurn


def _completed_task(task_store, **overrides):
    params = {
        "user_id": "u1",
        "source_id": "todo-1",
        "source_type": "todo",
        "source_content": "Learn Rust",
        "provider": "claude",
        "task_type": "expand",
        "source_title": "Goals",
    }
    params.update(overrides)
    task = task_store.create(**params)
    task_store.mark_completed(task.id, "Here is a plan", "claude")
    return task


def test_transcript_reconstruction_and_reply(task_store, key_store, scripted_client) -> None:
    key_store.set_api_key("u1", "anthropic", "sk-ant-0123456789")
    task = _completed_task(task_store)
    task_store.append_follow_up(task.id, "u1", "Make it shorter")
    task_store.append_assistant_reply(task.id, "Short plan", "claude")
    task_store.append_follow_up(task.id, "u1", "Add resources")
    client = scripted_client(text_replies=["Resources: the book"])

    FollowUpRunner(task_store, key_store, client).run(task.id)

    call = client.calls[0]
    assert call["system"].startswith("You are a helpful AI assistant continuing a conversation.")
    assert "asked you to expand some content" in call["system"]
    assert call["turns"] == [
        UserTurn(text="Please expand the following:\n\nTitle: Goals\n\nContent:\nLearn Rust"),
        AssistantTurn(text="Here is a plan"),
        UserTurn(text="Make it shorter"),
        AssistantTurn(text="Short plan"),
        UserTurn(text="Add resources"),
    ]

    stored = task_store.get(task.id)
    assert stored.status == "completed"
    assert stored.result == "Here is a plan"
    assert [message.content for message in stored.messages][-1] == "Resources: the book"
    assert stored.messages[-1].provider == "claude"


def test_other_task_opening_uses_instructions(task_store, key_store, scripted_client) -> None:
    key_store.set_api_key("u1", "anthropic", "sk-ant-0123456789")
    task = _completed_task(task_store, task_type="other", custom_instructions="Make a packing list", source_title=None)
    task_store.append_follow_up(task.id, "u1", "Add snacks")
    client = scripted_client(text_replies=["ok"])

    FollowUpRunner(task_store, key_store, client).run(task.id)

    call = client.calls[0]
    assert "asked you to help with a task some content" in call["system"]
    assert call["turns"][0] == UserTurn(text="Instructions: Make a packing list\n\nLearn Rust")


def test_follow_up_resolves_provider_independently(task_store, key_store, scripted_client) -> None:
    key_store.set_api_key("u1", "openai", "sk-openai-0123456789")
    task = _completed_task(task_store)
    task_store.append_follow_up(task.id, "u1", "More?")
    client = scripted_client(text_replies=["More."])

    FollowUpRunner(task_store, key_store, client).run(task.id)

    assert client.calls[0]["provider"] == "openai"
    assert task_store.get(task.id).messages[-1].provider == "openai"


def test_follow_up_failure_leaves_task_completed(task_store, key_store, scripted_client) -> None:
    key_store.set_api_key("u1", "anthropic", "sk-ant-0123456789")
    task = _completed_task(task_store)
    task_store.append_follow_up(task.id, "u1", "More?")
    before = task_store.get(task.id).messages
    client = scripted_client(text_replies=[ProviderRequestFailed("Anthropic API error (529): Overloaded", 529)])

    FollowUpRunner(task_store, key_store, client).run(task.id)

    stored = task_store.get(task.id)
    assert stored.status == "completed"
    assert stored.error == "Anthropic API error (529): Overloaded"
    assert stored.result == "Here is a plan"
    assert stored.messages == before


def test_follow_up_without_keys_records_guidance(task_store, key_store, scripted_client) -> None:
    task = _completed_task(task_store)
    task_store.append_follow_up(task.id, "u1", "More?")
    client = scripted_client()

    FollowUpRunner(task_store, key_store, client).run(task.id)

    stored = task_store.get(task.id)
    assert stored.status == "completed"
    assert "API key" in stored.error
    assert client.calls == []
