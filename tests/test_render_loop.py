from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Optional, Sequence

import pytest
from rich.text import Text

from tapedeck.tracks import TrackInfo
from tapedeck.ui.render_loop import (
    FRAME_DELTA,
    PanelSnapshot,
    RenderLoop,
    build_panel,
    snapshot,
)


@dataclass
class FakePlayer:
    track: Optional[TrackInfo] = None
    paused: bool = False
    level: float = 1.0
    elapsed: timedelta = timedelta(0)
    track_reads: int = 0

    def current_track(self) -> Optional[TrackInfo]:
        self.track_reads += 1
        return self.track

    def is_paused(self) -> bool:
        return self.paused

    def volume(self) -> float:
        return self.level

    def position(self) -> timedelta:
        return self.elapsed


@dataclass
class RecordingSurface:
    frames: list[list[str]] = field(default_factory=list)
    on_draw: Optional[object] = None

    def draw(self, lines: Sequence[Text]) -> None:
        self.frames.append([line.plain for line in lines])
        if callable(self.on_draw):
            self.on_draw()


def test_frame_delta_is_five_sixtieths() -> None:
    assert FRAME_DELTA == pytest.approx(5 / 60)


def test_snapshot_reads_track_once() -> None:
    track = TrackInfo(name="Song", duration=timedelta(seconds=125))
    player = FakePlayer(
        track=track, paused=True, level=0.42, elapsed=timedelta(seconds=65)
    )
    state = snapshot(player)
    assert player.track_reads == 1
    assert state == PanelSnapshot(
        track=track, paused=True, volume=0.42, elapsed=timedelta(seconds=65)
    )


def test_build_panel_loading() -> None:
    lines = [
        line.plain
        for line in build_panel(
            PanelSnapshot(track=None, paused=True, volume=1.0, elapsed=timedelta(0))
        )
    ]
    assert len(lines) == 5
    assert lines[1] == "│ loading" + " " * 22 + " Volume: 100% " + " │"
    assert lines[2] == "│  [" + " " * 27 + "] 00:00/00:00  │"
    assert lines[3] == "│ [s]kip    [p]ause    [q]uit    volume [+/-] │"
    assert {len(line) for line in lines} == {47}


def test_build_panel_playing_with_progress() -> None:
    track = TrackInfo(name="Song", duration=timedelta(seconds=125))
    lines = [
        line.plain
        for line in build_panel(
            PanelSnapshot(
                track=track, paused=False, volume=0.42, elapsed=timedelta(seconds=65)
            )
        )
    ]
    assert lines[1].startswith("│ playing Song ")
    assert lines[1].endswith(" Volume: 42%  │")
    assert "/" * 14 + " " * 13 + "] 01:05/02:05" in lines[2]


def test_render_once_draws_and_records_time() -> None:
    ticks = iter([1.0, 5.0])
    surface = RecordingSurface()
    loop = RenderLoop(
        FakePlayer(track=TrackInfo(name="Song")),
        surface,
        clock=lambda: next(ticks),
    )
    assert loop.last_frame_at == 1.0
    loop.render_once()
    assert loop.frames == 1
    assert loop.last_frame_at == 5.0
    assert "playing" in surface.frames[0][1]


def test_run_stops_at_sleep_point() -> None:
    surface = RecordingSurface()
    player = FakePlayer()

    async def scenario() -> RenderLoop:
        loop = RenderLoop(player, surface, frame_delta=0.001)

        def stop_after_three() -> None:
            if len(surface.frames) == 3:
                loop.stop()

        surface.on_draw = stop_after_three
        await asyncio.wait_for(loop.run(), timeout=5)
        return loop

    loop = asyncio.run(scenario())
    assert loop.frames == 3
    assert loop.stopping is True


def test_run_picks_up_state_changes_between_frames() -> None:
    surface = RecordingSurface()
    player = FakePlayer()

    async def scenario() -> None:
        loop = RenderLoop(player, surface, frame_delta=0.001)

        def change() -> None:
            if len(surface.frames) == 1:
                player.track = TrackInfo(name="Next")
                player.paused = True
            elif len(surface.frames) == 2:
                loop.stop()

        surface.on_draw = change
        await asyncio.wait_for(loop.run(), timeout=5)

    asyncio.run(scenario())
    assert "loading" in surface.frames[0][1]
    assert "paused Next" in surface.frames[1][1]


def test_run_propagates_terminal_errors() -> None:
    class BrokenSurface:
        def draw(self, lines: Sequence[Text]) -> None:
            raise OSError("terminal gone")

    loop = RenderLoop(FakePlayer(), BrokenSurface(), frame_delta=0.001)
    with pytest.raises(OSError, match="terminal gone"):
        asyncio.run(loop.run())
    assert loop.frames == 0
