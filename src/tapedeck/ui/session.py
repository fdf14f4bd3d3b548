"""Terminal session: set up the panel, run it, always restore the terminal."""

from __future__ import annotations

import asyncio
from contextlib import contextmanager
import logging
from typing import Iterator, Optional, Protocol

from tapedeck.commands import CommandChannel
from tapedeck.hangwatch import HangWatchdog
from tapedeck.tracks import PlayerView
from tapedeck.ui.input_dispatch import KeySource, dispatch_keys
from tapedeck.ui.key_reader import KeyReader
from tapedeck.ui.render_loop import RenderLoop
from tapedeck.ui.terminal import Screen

logger = logging.getLogger(__name__)


class StartableKeySource(KeySource, Protocol):
    def start(self) -> None:
        ...

    def stop(self) -> None:
        ...


@contextmanager
def terminal_session(screen: Screen, *, alternate: bool) -> Iterator[None]:
    """Raw mode and a hidden cursor for the duration of the block.

    Teardown runs on every exit path, including errors raised during
    setup.
    """
    with screen.raw_mode():
        try:
            screen.prepare()
            if alternate:
                screen.enter_alternate()
            yield
        finally:
            if alternate:
                screen.leave_alternate()
            screen.teardown()


async def _first_outcome(*tasks: asyncio.Task[None]) -> None:
    done, _pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
    for task in done:
        task.result()


async def run_session(
    player: PlayerView,
    channel: CommandChannel,
    *,
    alternate: bool = False,
    screen: Optional[Screen] = None,
    keys: Optional[StartableKeySource] = None,
    stall_seconds: Optional[float] = 15.0,
) -> None:
    """Show the panel and dispatch keys until the user quits.

    The render loop is stopped and awaited before the terminal is
    restored. A failure in either the render loop or the dispatcher ends
    the session and is re-raised after teardown.
    """
    screen = screen if screen is not None else Screen()
    keys = keys if keys is not None else KeyReader(screen.term)
    renderer = RenderLoop(player, screen)
    watchdog = (
        HangWatchdog(lambda: renderer.last_frame_at, threshold_seconds=stall_seconds)
        if stall_seconds
        else None
    )

    with terminal_session(screen, alternate=alternate):
        keys.start()
        render_task = asyncio.create_task(renderer.run(), name="render-loop")
        dispatch_task = asyncio.create_task(
            dispatch_keys(keys, channel, player), name="key-dispatch"
        )
        if watchdog is not None:
            watchdog.start()
        try:
            await _first_outcome(render_task, dispatch_task)
        finally:
            if watchdog is not None:
                watchdog.stop()
            renderer.stop()
            if not dispatch_task.done():
                dispatch_task.cancel()
            await asyncio.to_thread(keys.stop)
            await asyncio.wait({render_task, dispatch_task})
        error = None if render_task.cancelled() else render_task.exception()
        if error is not None:
            raise error
    logger.info("Session ended after %d frames", renderer.frames)
