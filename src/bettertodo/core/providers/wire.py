from __future__ import annotations

import json

from bettertodo.core.http import BetterTodoHTTPError, BetterTodoHTTPStatusError
from bettertodo.core.logging import redact_string

from .errors import ProviderRequestFailed


def stringify_arguments(raw: object) -> dict[str, str]:
    if not isinstance(raw, dict):
        return {}
    arguments: dict[str, str] = {}
    for key, value in raw.items():
        if value is None:
            continue
        if isinstance(value, bool):
            arguments[str(key)] = "true" if value else "false"
        elif isinstance(value, str):
            arguments[str(key)] = value
        elif isinstance(value, list) and all(isinstance(item, (str, int, float)) and not isinstance(item, bool) for item in value):
            # Id lists travel as comma-separated strings.
            arguments[str(key)] = ",".join(str(item) for item in value)
        elif isinstance(value, (dict, list)):
            arguments[str(key)] = json.dumps(value, ensure_ascii=False)
        else:
            arguments[str(key)] = str(value)
    return arguments


def _error_message_from_body(body: str) -> str | None:
    try:
        parsed = json.loads(body)
    except (json.JSONDecodeError, TypeError):
        return None
    if not isinstance(parsed, dict):
        return None
    error = parsed.get("error")
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if isinstance(error, str):
        return error
    return None


def provider_error(label: str, exc: BetterTodoHTTPError) -> ProviderRequestFailed:
    if isinstance(exc, BetterTodoHTTPStatusError):
        detail = _error_message_from_body(exc.body) or str(exc)
        message = f"{label} API error ({exc.status_code}): {detail}"
        return ProviderRequestFailed(redact_string(message), status_code=exc.status_code)
    return ProviderRequestFailed(redact_string(f"{label} request failed: {exc}"))
