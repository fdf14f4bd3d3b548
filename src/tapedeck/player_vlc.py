"""VLC-backed playback sink."""

from __future__ import annotations

from datetime import timedelta
import logging
import threading
from typing import Any, Optional, cast

logger = logging.getLogger(__name__)

vlc: Any | None = None
_VLC_IMPORT_ERROR: Optional[Exception] = None


def _load_vlc() -> None:
    global vlc
    global _VLC_IMPORT_ERROR
    if vlc is not None or _VLC_IMPORT_ERROR is not None:
        return
    try:
        import vlc as vlc_module  # type: ignore
    except Exception as exc:  # pragma: no cover - platform-dependent import
        vlc = None
        _VLC_IMPORT_ERROR = exc
    else:
        vlc = cast(Any, vlc_module)
        _VLC_IMPORT_ERROR = None


def clamp_volume(value: float) -> float:
    return max(0.0, min(1.0, value))


class VlcSink:
    """Playback handle over python-vlc's MediaPlayer.

    Volume is kept as a fraction in ``0.0..1.0`` and pushed to VLC as a
    percentage. Position is reported as elapsed time of the loaded media.
    """

    def __init__(self, volume: float = 1.0) -> None:
        _load_vlc()
        if vlc is None:
            raise RuntimeError(
                "VLC backend is unavailable. Install VLC and the python-vlc package."
            ) from _VLC_IMPORT_ERROR
        self._instance = cast(Any, vlc).Instance()
        self._player = self._instance.media_player_new()
        self._current_media: Optional[str] = None
        self._paused = False
        self._volume = clamp_volume(volume)
        self._end_reached = threading.Event()
        self._attach_end_reached_event()

    def _attach_end_reached_event(self) -> None:
        vlc_module = cast(Any, vlc)
        try:
            event_manager = self._player.event_manager()
            event_manager.event_attach(
                vlc_module.EventType.MediaPlayerEndReached, self._handle_end_reached
            )
        except AttributeError:
            logger.warning("VLC event manager unavailable; end of track not signalled")

    def _handle_end_reached(self, event: object) -> None:
        del event
        self._end_reached.set()

    @property
    def current_media(self) -> Optional[str]:
        return self._current_media

    def consume_end_reached(self) -> bool:
        """Return True once per end-of-media event."""
        if self._end_reached.is_set():
            self._end_reached.clear()
            return True
        return False

    def play(self, path: str) -> None:
        """Load ``path`` and start playing it from the beginning."""
        media = self._instance.media_new(path)
        self._player.set_media(media)
        self._current_media = path
        self._end_reached.clear()
        self._player.play()
        self._player.audio_set_volume(self.volume_percent)
        if self._paused:
            self._player.set_pause(1)

    def stop(self) -> None:
        self._player.stop()
        self._current_media = None

    def is_paused(self) -> bool:
        return self._paused

    def toggle_pause(self) -> None:
        self._paused = not self._paused
        self._player.set_pause(1 if self._paused else 0)

    def volume(self) -> float:
        return self._volume

    @property
    def volume_percent(self) -> int:
        return int(round(self._volume * 100))

    def set_volume(self, fraction: float) -> None:
        self._volume = clamp_volume(fraction)
        self._player.audio_set_volume(self.volume_percent)

    def position(self) -> timedelta:
        elapsed_ms = self._player.get_time()
        if elapsed_ms is None or elapsed_ms < 0:
            return timedelta(0)
        return timedelta(milliseconds=int(elapsed_ms))

    def length(self) -> Optional[timedelta]:
        length_ms = self._player.get_length()
        if length_ms is None or length_ms <= 0:
            return None
        return timedelta(milliseconds=int(length_ms))
