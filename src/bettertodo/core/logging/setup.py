from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from bettertodo.core.config import env_int, is_on

from .json_formatter import JSONFormatter

_ROOT_LOGGER = "bettertodo"
_MARK = "_bettertodo_handler"
_QUIET_LOGGERS = ("apscheduler", "httpx", "httpcore")


def _marked(handler: logging.Handler) -> logging.Handler:
    handler.setFormatter(JSONFormatter())
    setattr(handler, _MARK, True)
    return handler


def _ours(logger: logging.Logger) -> list[logging.Handler]:
    return [handler for handler in logger.handlers if getattr(handler, _MARK, False)]


def _log_file(state_dir: Path) -> Path:
    log_dir = Path(os.getenv("BETTERTODO_LOG_DIR") or (state_dir / "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)
    return (log_dir / "bettertodo.log").resolve()


def configure_logging(state_dir: Path) -> logging.Logger:
    """Install JSON handlers on the ``bettertodo`` logger. Safe to call repeatedly."""
    logger = logging.getLogger(_ROOT_LOGGER)
    level_name = os.getenv("BETTERTODO_LOG_LEVEL", "INFO").strip().upper()
    logger.setLevel(getattr(logging, level_name, logging.INFO))
    logger.propagate = False

    existing = _ours(logger)
    if not any(type(handler) is logging.StreamHandler for handler in existing):
        logger.addHandler(_marked(logging.StreamHandler(stream=sys.stdout)))

    if is_on("BETTERTODO_LOG_TO_FILE", "on"):
        log_path = _log_file(state_dir)
        already = any(
            isinstance(handler, RotatingFileHandler) and Path(handler.baseFilename) == log_path for handler in existing
        )
        if not already:
            handler = RotatingFileHandler(
                filename=log_path,
                maxBytes=env_int("BETTERTODO_LOG_MAX_BYTES", 5_000_000),
                backupCount=env_int("BETTERTODO_LOG_BACKUP_COUNT", 5),
                encoding="utf-8",
            )
            logger.addHandler(_marked(handler))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger
