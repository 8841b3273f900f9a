from __future__ import annotations

import re

_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"(?i)\b(x-api-key|api[_-]?key|token|secret)(\s*[=:]\s*)([^\s,;]+)"), r"\1\2***"),
    (re.compile(r"(?i)(bearer\s+)(\S+)"), r"\1***"),
    (re.compile(r"\bsk-(?:ant-)?[A-Za-z0-9_\-]{6,}"), "sk-***"),
)


def redact_string(s: str) -> str:
    """Mask API keys and bearer tokens before text reaches logs or task errors."""
    for pattern, replacement in _RULES:
        s = pattern.sub(replacement, s)
    return s
