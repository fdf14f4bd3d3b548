"""Minimal player: cycles through audio files and applies panel commands."""

from __future__ import annotations

import asyncio
from datetime import timedelta
import logging
from pathlib import Path
from typing import Callable, Iterable, Optional, Protocol

from tapedeck.commands import (
    AdjustVolume,
    Command,
    CommandChannel,
    SkipTrack,
    TogglePause,
)
from tapedeck.metadata import read_track_info
from tapedeck.tracks import TrackInfo, TrackSlot

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = {".mp3", ".flac", ".wav", ".ogg", ".m4a", ".aac", ".opus"}


class Sink(Protocol):
    def play(self, path: str) -> None:
        ...

    def stop(self) -> None:
        ...

    def is_paused(self) -> bool:
        ...

    def toggle_pause(self) -> None:
        ...

    def volume(self) -> float:
        ...

    def set_volume(self, fraction: float) -> None:
        ...

    def position(self) -> timedelta:
        ...

    def length(self) -> Optional[timedelta]:
        ...

    def consume_end_reached(self) -> bool:
        ...


def collect_tracks(paths: Iterable[Path]) -> list[Path]:
    """Expand directories into their audio files, keeping argument order."""
    tracks: list[Path] = []
    for path in paths:
        if path.is_dir():
            tracks.extend(
                sorted(
                    child
                    for child in path.rglob("*")
                    if child.is_file() and child.suffix.lower() in SUPPORTED_EXTENSIONS
                )
            )
        elif path.suffix.lower() in SUPPORTED_EXTENSIONS:
            tracks.append(path)
        else:
            logger.warning("Skipping unsupported file %s", path)
    return tracks


class Player:
    """Owns the current-track slot and the sink.

    The slot is cleared while the next track loads, so observers see no
    track (the panel's "loading" state) until the new one is playing.
    """

    def __init__(
        self,
        sink: Sink,
        tracks: Iterable[Path],
        *,
        load_info: Callable[[Path], TrackInfo] = read_track_info,
        poll_seconds: float = 0.25,
    ) -> None:
        self.sink = sink
        self.current = TrackSlot()
        self._tracks = list(tracks)
        self._index = -1
        self._load_info = load_info
        self._poll_seconds = poll_seconds

    def current_track(self) -> Optional[TrackInfo]:
        return self.current.load()

    def is_paused(self) -> bool:
        return self.sink.is_paused()

    def volume(self) -> float:
        return self.sink.volume()

    def position(self) -> timedelta:
        return self.sink.position()

    async def next_track(self) -> Optional[TrackInfo]:
        if not self._tracks:
            return None
        self.current.store(None)
        self._index = (self._index + 1) % len(self._tracks)
        path = self._tracks[self._index]
        info = await asyncio.to_thread(self._load_info, path)
        self.sink.play(str(path))
        if info.duration is None:
            info = TrackInfo(name=info.name, duration=self.sink.length())
        self.current.store(info)
        logger.info("Now playing %s", info.name)
        return info

    async def apply(self, command: Command) -> None:
        if isinstance(command, AdjustVolume):
            self.sink.set_volume(self.sink.volume() + command.delta)
        elif isinstance(command, TogglePause):
            self.sink.toggle_pause()
        elif isinstance(command, SkipTrack):
            await self.next_track()

    async def serve(self, channel: CommandChannel) -> None:
        async for command in channel:
            await self.apply(command)

    async def follow_queue(self) -> None:
        while True:
            if self.sink.consume_end_reached():
                await self.next_track()
            await asyncio.sleep(self._poll_seconds)

    async def run(self, channel: CommandChannel) -> None:
        """Play tracks and serve commands until cancelled."""
        try:
            await self.next_track()
            await asyncio.gather(self.serve(channel), self.follow_queue())
        finally:
            channel.close()
            self.sink.stop()
