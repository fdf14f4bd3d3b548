"""Playback commands and the channel that carries them to the player."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
from typing import AsyncIterator, Union

from typing_extensions import TypeAlias

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdjustVolume:
    """Relative volume change, as a signed fraction of full scale."""

    delta: float


@dataclass(frozen=True)
class SkipTrack:
    pass


@dataclass(frozen=True)
class TogglePause:
    pass


Command: TypeAlias = Union[AdjustVolume, SkipTrack, TogglePause]


class ChannelClosed(RuntimeError):
    """Raised when sending to a channel whose receiver has gone away."""


class CommandChannel:
    """Bounded FIFO of commands between the key dispatcher and the player.

    ``send`` waits while the channel is full, so commands are never
    dropped. Once the receiver calls :meth:`close`, further sends fail with
    :class:`ChannelClosed`.
    """

    def __init__(self, maxsize: int = 32) -> None:
        self._queue: asyncio.Queue[Command] = asyncio.Queue(maxsize=max(1, maxsize))
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if not self._closed:
            logger.debug("Command channel closed")
        self._closed = True

    async def send(self, command: Command) -> None:
        if self._closed:
            raise ChannelClosed(f"cannot send {command!r}: receiver is gone")
        await self._queue.put(command)

    async def receive(self) -> Command:
        return await self._queue.get()

    def pending(self) -> int:
        return self._queue.qsize()

    async def __aiter__(self) -> AsyncIterator[Command]:
        while True:
            yield await self.receive()
