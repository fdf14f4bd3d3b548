"""Periodic redraw of the status panel."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import timedelta
import logging
import time
from typing import Callable, Optional, Protocol, Sequence

from rich.text import Text

from tapedeck.tracks import PlayerView, TrackInfo
from tapedeck.ui.action_bar import action_bar_for, format_action_bar
from tapedeck.ui.tui_formatters import (
    compose_main_line,
    frame_box,
    render_key_legend,
    render_progress_line,
    volume_suffix,
)

logger = logging.getLogger(__name__)

FRAME_DELTA = 5.0 / 60.0


class PanelSurface(Protocol):
    def draw(self, lines: Sequence[Text]) -> None:
        ...


@dataclass(frozen=True)
class PanelSnapshot:
    track: Optional[TrackInfo]
    paused: bool
    volume: float
    elapsed: timedelta


def snapshot(player: PlayerView) -> PanelSnapshot:
    """Read the player state once for a single frame."""
    return PanelSnapshot(
        track=player.current_track(),
        paused=player.is_paused(),
        volume=player.volume(),
        elapsed=player.position(),
    )


def build_panel(state: PanelSnapshot) -> list[Text]:
    """Return the bordered panel lines for one frame."""
    main, main_len = format_action_bar(action_bar_for(state.track, state.paused))
    main_line = compose_main_line(main, main_len, volume_suffix(state.volume))
    duration = state.track.duration if state.track is not None else None
    progress = render_progress_line(state.elapsed, duration)
    return frame_box([main_line, progress, render_key_legend()])


class RenderLoop:
    """Redraws the panel every ``FRAME_DELTA`` seconds until stopped.

    The loop only observes the player. It checks the stop flag at its
    sleep point, so a stop request never interrupts a frame half drawn.
    """

    def __init__(
        self,
        player: PlayerView,
        surface: PanelSurface,
        *,
        frame_delta: float = FRAME_DELTA,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._player = player
        self._surface = surface
        self._frame_delta = frame_delta
        self._clock = clock
        self._stop = asyncio.Event()
        self._last_frame = clock()
        self.frames = 0

    @property
    def last_frame_at(self) -> float:
        return self._last_frame

    @property
    def stopping(self) -> bool:
        return self._stop.is_set()

    def stop(self) -> None:
        self._stop.set()

    def render_once(self) -> None:
        self._surface.draw(build_panel(snapshot(self._player)))
        self._last_frame = self._clock()
        self.frames += 1

    async def run(self) -> None:
        logger.debug("Render loop started")
        while not self._stop.is_set():
            self.render_once()
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self._frame_delta)
            except asyncio.TimeoutError:
                continue
        logger.debug("Render loop stopped after %d frames", self.frames)
