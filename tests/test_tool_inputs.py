from __future__ import annotations

import pytest
from pydantic import ValidationError

from bettertodo.core.tools.inputs import (
    CreateTodoInput,
    GetTodosForDateInput,
    MoveTodosToDateInput,
    SearchTodosInput,
    UpdateTodoInput,
)


def test_boolean_strings_parse_to_bool() -> None:
    assert CreateTodoInput.model_validate({"content": "x", "pinned": "true"}).pinned is True
    assert CreateTodoInput.model_validate({"content": "x", "pinned": "FALSE"}).pinned is False
    assert CreateTodoInput.model_validate({"content": "x"}).pinned is False


def test_boolean_strings_reject_other_words() -> None:
    with pytest.raises(ValidationError):
        CreateTodoInput.model_validate({"content": "x", "pinned": "yes"})


def test_update_todo_pinned_is_optional_and_blank_means_unset() -> None:
    parsed = UpdateTodoInput.model_validate({"todoId": "t1", "pinned": ""})

    assert parsed.todo_id == "t1"
    assert parsed.pinned is None


def test_comma_separated_ids_become_a_list() -> None:
    parsed = MoveTodosToDateInput.model_validate({"todoIds": "a, b,,c ", "targetDate": "2025-03-04"})

    assert parsed.todo_ids == ["a", "b", "c"]
    assert parsed.target_date == "2025-03-04"


def test_empty_id_list_rejected() -> None:
    with pytest.raises(ValidationError):
        MoveTodosToDateInput.model_validate({"todoIds": " , ", "targetDate": "2025-03-04"})


def test_dates_must_be_calendar_dates() -> None:
    with pytest.raises(ValidationError):
        GetTodosForDateInput.model_validate({"date": "tomorrow"})
    with pytest.raises(ValidationError):
        GetTodosForDateInput.model_validate({"date": "2025-02-30"})


def test_optional_date_blank_is_none() -> None:
    parsed = SearchTodosInput.model_validate({"query": "milk", "date": "", "includeCompleted": "true"})

    assert parsed.date is None
    assert parsed.include_completed is True


def test_missing_required_and_unknown_fields_rejected() -> None:
    with pytest.raises(ValidationError):
        CreateTodoInput.model_validate({"date": "2025-03-04"})
    with pytest.raises(ValidationError):
        CreateTodoInput.model_validate({"content": "x", "priority": "high"})
