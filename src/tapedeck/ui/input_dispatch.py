"""Key presses to playback commands."""

from __future__ import annotations

import logging
from typing import Optional, Protocol, Union

from tapedeck.commands import (
    AdjustVolume,
    Command,
    CommandChannel,
    SkipTrack,
    TogglePause,
)
from tapedeck.tracks import PlayerView
from tapedeck.ui.key_reader import KeyEvent

logger = logging.getLogger(__name__)


class ExitSession:
    """Marker returned by :func:`resolve_key` for the quit keys."""

    def __repr__(self) -> str:
        return "EXIT"


EXIT = ExitSession()

VOLUME_STEP = 0.1
VOLUME_FINE_STEP = 0.01

KEY_COMMANDS: dict[str, Command] = {
    "up": AdjustVolume(VOLUME_STEP),
    "right": AdjustVolume(VOLUME_STEP),
    "down": AdjustVolume(-VOLUME_STEP),
    "left": AdjustVolume(-VOLUME_STEP),
    "+": AdjustVolume(VOLUME_STEP),
    "=": AdjustVolume(VOLUME_STEP),
    "-": AdjustVolume(-VOLUME_STEP),
    "_": AdjustVolume(-VOLUME_STEP),
    ">": AdjustVolume(VOLUME_FINE_STEP),
    ".": AdjustVolume(VOLUME_FINE_STEP),
    "<": AdjustVolume(-VOLUME_FINE_STEP),
    ",": AdjustVolume(-VOLUME_FINE_STEP),
    "p": TogglePause(),
}


class KeySource(Protocol):
    async def next_event(self) -> KeyEvent:
        ...


def resolve_key(
    event: KeyEvent, *, has_track: bool
) -> Union[Command, ExitSession, None]:
    """Map one key press to a command, the exit marker, or nothing."""
    if event.ctrl:
        return EXIT if event.key == "c" else None
    if event.key == "q":
        return EXIT
    if event.key == "s":
        return SkipTrack() if has_track else None
    return KEY_COMMANDS.get(event.key)


async def dispatch_keys(
    keys: KeySource, channel: CommandChannel, player: PlayerView
) -> None:
    """Send a command for each key press until a quit key is pressed.

    Channel failures propagate to the caller.
    """
    while True:
        event = await keys.next_event()
        action: Optional[Union[Command, ExitSession]] = resolve_key(
            event, has_track=player.current_track() is not None
        )
        if action is None:
            continue
        if isinstance(action, ExitSession):
            logger.info("Quit requested with %r", event)
            return
        logger.debug("Key %r -> %r", event, action)
        await channel.send(action)
