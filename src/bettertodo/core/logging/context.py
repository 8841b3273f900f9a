from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from types import MappingProxyType
from typing import Iterator, Mapping

_EMPTY: Mapping[str, str] = MappingProxyType({})
_fields: ContextVar[Mapping[str, str]] = ContextVar("bettertodo_log_fields", default=_EMPTY)


@contextmanager
def log_context(
    correlation_id: str | None = None,
    task_id: str | None = None,
    user_id: str | None = None,
    job_id: str | None = None,
) -> Iterator[None]:
    """Attach identifiers to every log line emitted inside the block.

    Nested blocks add to the enclosing fields; arguments left as ``None`` keep
    whatever the outer block set.
    """
    given = {"correlation_id": correlation_id, "task_id": task_id, "user_id": user_id, "job_id": job_id}
    merged = dict(_fields.get())
    merged.update({key: value for key, value in given.items() if value is not None})
    token = _fields.set(MappingProxyType(merged))
    try:
        yield
    finally:
        _fields.reset(token)


def get_log_context() -> dict[str, str]:
    return dict(_fields.get())
