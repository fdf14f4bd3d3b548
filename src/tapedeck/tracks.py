"""Track descriptors shared between the player and the status panel."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional, Protocol


@dataclass(frozen=True)
class TrackInfo:
    """Immutable description of the track being played."""

    name: str
    duration: Optional[timedelta] = None


class TrackSlot:
    """Holder for the current track, swapped as a whole reference.

    Readers call :meth:`load` once per use and work with the returned
    object; the slot never exposes a partially updated track.
    """

    def __init__(self, track: Optional[TrackInfo] = None) -> None:
        self._track = track

    def load(self) -> Optional[TrackInfo]:
        return self._track

    def store(self, track: Optional[TrackInfo]) -> None:
        self._track = track

    def swap(self, track: Optional[TrackInfo]) -> Optional[TrackInfo]:
        """Replace the current track and return the previous one."""
        previous, self._track = self._track, track
        return previous


class PlayerView(Protocol):
    """Read-only player state observed by the panel."""

    def current_track(self) -> Optional[TrackInfo]:
        ...

    def is_paused(self) -> bool:
        ...

    def volume(self) -> float:
        ...

    def position(self) -> timedelta:
        ...
