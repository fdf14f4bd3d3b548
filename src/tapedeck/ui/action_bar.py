"""Main status line state: loading, playing or paused."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from rich.text import Text
from typing_extensions import TypeAlias

from tapedeck.tracks import TrackInfo


@dataclass(frozen=True)
class Playing:
    track: TrackInfo


@dataclass(frozen=True)
class Paused:
    track: TrackInfo


@dataclass(frozen=True)
class Loading:
    pass


ActionBar: TypeAlias = Union[Playing, Paused, Loading]


def action_bar_for(track: Optional[TrackInfo], paused: bool) -> ActionBar:
    """Derive the action bar from a track snapshot and the pause flag."""
    if track is None:
        return Loading()
    if paused:
        return Paused(track)
    return Playing(track)


def format_action_bar(bar: ActionBar) -> tuple[Text, int]:
    """Return the styled action text and its visible length.

    The length counts characters only; bold styling does not contribute.
    """
    if isinstance(bar, Playing):
        word, track = "playing", bar.track
    elif isinstance(bar, Paused):
        word, track = "paused", bar.track
    else:
        return Text("loading"), len("loading")
    text = Text(f"{word} ")
    text.append(track.name, style="bold")
    return text, len(word) + 1 + len(track.name)
