"""Audio file metadata for the status panel."""

from __future__ import annotations

from datetime import timedelta
import logging
from pathlib import Path
from typing import Optional

from tapedeck.tracks import TrackInfo

logger = logging.getLogger(__name__)

ARTIST_KEYS = ("artist", "ARTIST", "TPE1", "TPE2", "\xa9ART", "aART")
TITLE_KEYS = ("title", "TITLE", "TIT2", "\xa9nam")


def _extract_text(value: object | None) -> str | None:
    if value is None:
        return None
    value = getattr(value, "text", value)
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    if value is None:
        return None
    if isinstance(value, bytes):
        text = value.decode("utf-8", errors="replace")
    else:
        text = str(value)
    return text.strip() or None


def _read_tag(tags: object | None, keys: tuple[str, ...]) -> str | None:
    getter = getattr(tags, "get", None)
    if getter is None:
        return None
    for key in keys:
        try:
            value = getter(key)
        except (KeyError, ValueError):
            continue
        text = _extract_text(value)
        if text:
            return text
    return None


def _read_length(audio: object) -> Optional[timedelta]:
    length = getattr(getattr(audio, "info", None), "length", None)
    if not isinstance(length, (int, float)) or length <= 0:
        return None
    return timedelta(seconds=float(length))


def display_name(path: Path, artist: str | None, title: str | None) -> str:
    if title:
        return f"{artist} - {title}" if artist else title
    return path.stem or path.name


def read_track_info(path: Path) -> TrackInfo:
    """Best-effort track name and duration; falls back to the file name."""
    try:
        from mutagen import File as MutagenFile
    except ImportError:
        logger.warning("mutagen is unavailable; using file names only")
        return TrackInfo(name=display_name(path, None, None))
    try:
        audio = MutagenFile(path)
    except Exception:
        logger.exception("Failed to read tags from %s", path)
        return TrackInfo(name=display_name(path, None, None))
    if not audio:
        return TrackInfo(name=display_name(path, None, None))
    tags = getattr(audio, "tags", None)
    artist = _read_tag(tags, ARTIST_KEYS)
    title = _read_tag(tags, TITLE_KEYS)
    return TrackInfo(
        name=display_name(path, artist, title), duration=_read_length(audio)
    )
