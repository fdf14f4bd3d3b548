"""Stack dumps for crashes and stalled panel redraws."""

from __future__ import annotations

import faulthandler
import logging
import threading
import time
from pathlib import Path
from typing import Callable, Optional, TextIO

logger = logging.getLogger(__name__)

_DUMP_FILE: Optional[TextIO] = None
_DUMP_PATH: Optional[Path] = None
_LOCK = threading.Lock()


def enable_faulthandler(log_path: Path) -> Path:
    """Send fatal-signal tracebacks to ``hangdump.log`` next to the log."""
    global _DUMP_FILE, _DUMP_PATH
    dump_path = log_path.parent / "hangdump.log"
    try:
        dump_path.parent.mkdir(parents=True, exist_ok=True)
        handle = open(dump_path, "a", encoding="utf-8")
    except OSError:
        logger.warning("Cannot open %s; stack dumps disabled", dump_path)
        return dump_path
    with _LOCK:
        _DUMP_FILE = handle
        _DUMP_PATH = dump_path
    faulthandler.enable(file=handle, all_threads=True)
    return dump_path


def dump_threads(label: str) -> None:
    """Append a labelled stack dump of every thread."""
    with _LOCK:
        handle = _DUMP_FILE
        if handle is None:
            return
        stamp = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime())
        try:
            handle.write(f"\n[{stamp}] {label}\n")
            faulthandler.dump_traceback(file=handle, all_threads=True)
            handle.flush()
        except (OSError, ValueError):
            logger.warning("Stack dump for %r failed", label)


class HangWatchdog:
    """Dumps stacks when the render loop stops producing frames."""

    def __init__(
        self,
        last_frame_at: Callable[[], float],
        *,
        threshold_seconds: float = 15.0,
        repeat_seconds: float = 30.0,
        poll_seconds: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._last_frame_at = last_frame_at
        self._threshold = threshold_seconds
        self._repeat = repeat_seconds
        self._poll = poll_seconds
        self._clock = clock
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._run, name="HangWatchdog", daemon=True
        )
        self._last_dump: Optional[float] = None

    def start(self) -> None:
        self._thread.start()

    def stop(self, timeout: float = 2.0) -> None:
        self._stop_event.set()
        thread = self._thread
        if thread.is_alive() and thread is not threading.current_thread():
            thread.join(timeout=timeout)

    def check(self) -> bool:
        """Dump stacks if frames are overdue; return True when a dump was made."""
        now = self._clock()
        stalled_for = now - self._last_frame_at()
        if stalled_for <= self._threshold:
            return False
        if self._last_dump is not None and now - self._last_dump <= self._repeat:
            return False
        self._last_dump = now
        logger.warning("No panel frame for %.1fs", stalled_for)
        dump_threads("render loop stalled")
        return True

    def _run(self) -> None:
        while not self._stop_event.is_set():
            self.check()
            self._stop_event.wait(self._poll)
