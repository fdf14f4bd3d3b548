"""Logging for tapedeck.

Records go to a rotating ``app.log`` and to stderr. The panel is drawn on
stderr too, so the console handlers are muted while it is on screen.
"""

from __future__ import annotations

from contextlib import contextmanager
import logging
from logging.handlers import RotatingFileHandler
import os
from pathlib import Path
from typing import Iterator, Optional

LOG_FORMAT = "%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s"
LOG_LEVEL_ENV = "TAPEDECK_LOG_LEVEL"
LOG_MAX_BYTES = 2_000_000
LOG_BACKUPS = 5


def _default_log_dir() -> Path:
    local_appdata = os.getenv("LOCALAPPDATA")
    if local_appdata:
        return Path(local_appdata) / "Tapedeck" / "logs"
    return Path.home() / ".tapedeck" / "logs"


def level_from_env(default: int = logging.INFO) -> int:
    """Level named by ``TAPEDECK_LOG_LEVEL``, or ``default`` if unset or unknown."""
    name = os.getenv(LOG_LEVEL_ENV)
    if not name:
        return default
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else default


def _is_console_handler(handler: logging.Handler) -> bool:
    return isinstance(handler, logging.StreamHandler) and not isinstance(
        handler, logging.FileHandler
    )


def _console_handlers() -> list[logging.Handler]:
    return [h for h in logging.getLogger().handlers if _is_console_handler(h)]


def _open_file_handler(log_path: Path) -> Optional[RotatingFileHandler]:
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        return RotatingFileHandler(
            log_path,
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUPS,
            encoding="utf-8",
        )
    except OSError:
        return None


def init_logging(log_dir: Optional[Path] = None) -> Path:
    """Attach the file and console handlers once and return the log path.

    When the log directory cannot be created, logging falls back to stderr
    only. The returned path is still where the log would have gone, so the
    stack dump file sits beside it.
    """
    log_path = (log_dir if log_dir is not None else _default_log_dir()) / "app.log"
    level = level_from_env()
    formatter = logging.Formatter(LOG_FORMAT)
    root = logging.getLogger()
    root.setLevel(level)

    if not any(isinstance(h, RotatingFileHandler) for h in root.handlers):
        file_handler = _open_file_handler(log_path)
        if file_handler is not None:
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)
    if not _console_handlers():
        console = logging.StreamHandler()
        console.setLevel(level)
        console.setFormatter(formatter)
        root.addHandler(console)

    logging.getLogger("tapedeck").info("Logging initialized at %s", log_path)
    return log_path


def set_console_level(level: int) -> int:
    """Set every console handler to ``level``; return the level they had."""
    previous = logging.NOTSET
    for handler in _console_handlers():
        previous = handler.level
        handler.setLevel(level)
    return previous


@contextmanager
def console_muted(level: int = logging.CRITICAL) -> Iterator[None]:
    """Keep console log lines off the terminal while the panel owns it."""
    previous = set_console_level(level)
    try:
        yield
    finally:
        set_console_level(previous)
