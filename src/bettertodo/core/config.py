from __future__ import annotations

import os
from pathlib import Path
from zoneinfo import ZoneInfo


def env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def is_on(name: str, default: str = "off") -> bool:
    return os.getenv(name, default).strip().casefold() in {"1", "on", "true", "yes"}


def is_test_mode() -> bool:
    return is_on("BETTERTODO_TEST_MODE", "off")


def state_dir() -> Path:
    configured = os.getenv("BETTERTODO_STATE_DIR")
    if configured:
        return Path(configured).expanduser()
    return Path.home() / ".bettertodo"


def local_timezone() -> ZoneInfo:
    return ZoneInfo(os.getenv("BETTERTODO_TIMEZONE", "UTC"))
