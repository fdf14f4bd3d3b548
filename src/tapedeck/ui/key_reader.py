"""Blocking keyboard reads isolated on a worker thread."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
import threading
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeyEvent:
    """A single key press.

    ``key`` is the printable character, or a lower-case name such as
    ``"up"`` or ``"escape"`` for special keys.
    """

    key: str
    ctrl: bool = False


def translate_keystroke(keystroke: Any) -> Optional[KeyEvent]:
    """Convert a blessed ``Keystroke`` into a :class:`KeyEvent`.

    Returns ``None`` for the empty keystroke blessed yields on timeout.
    """
    text = str(keystroke)
    if not text:
        return None
    if getattr(keystroke, "is_sequence", False):
        name = getattr(keystroke, "name", None) or ""
        if name.startswith("KEY_"):
            return KeyEvent(name[4:].lower())
        return KeyEvent(text)
    if len(text) == 1 and 0 < ord(text) < 27:
        return KeyEvent(chr(ord(text) + 96), ctrl=True)
    return KeyEvent(text)


_Item = Union[KeyEvent, BaseException]


class KeyReader:
    """Reads keys on a daemon thread and hands them to the event loop.

    Key order is preserved: each key is queued on the loop with
    ``call_soon_threadsafe`` as soon as it is read. A read error ends the
    thread and is re-raised by the next :meth:`next_event` call.
    """

    def __init__(self, term: Any, *, poll_seconds: float = 0.1) -> None:
        self._term = term
        self._poll_seconds = poll_seconds
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._queue: Optional[asyncio.Queue[_Item]] = None

    def start(self) -> None:
        if self._thread is not None:
            return
        self._loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue()
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="KeyReader", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        """Signal the reader thread and wait up to a few poll intervals.

        Blocks, so async callers run it with ``asyncio.to_thread``.
        """
        self._stop.set()
        thread = self._thread
        self._thread = None
        if thread is None or thread is threading.current_thread():
            return
        timeout = max(0.5, self._poll_seconds * 5)
        thread.join(timeout=timeout)
        if thread.is_alive():
            logger.warning("Key reader still blocked after %.1fs", timeout)

    async def next_event(self) -> KeyEvent:
        if self._queue is None:
            raise RuntimeError("KeyReader.start() must be called first")
        item = await self._queue.get()
        if isinstance(item, BaseException):
            raise item
        return item

    def _post(self, item: _Item) -> bool:
        loop, queue = self._loop, self._queue
        if loop is None or queue is None:
            return False
        try:
            loop.call_soon_threadsafe(queue.put_nowait, item)
        except RuntimeError:
            # Loop already closed.
            return False
        return True

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                keystroke = self._term.inkey(timeout=self._poll_seconds)
            except Exception as exc:
                logger.exception("Keyboard read failed")
                self._post(exc)
                return
            event = translate_keystroke(keystroke)
            if event is None:
                continue
            if not self._post(event):
                return
