from __future__ import annotations

from datetime import timedelta
import math
from typing import Optional, Sequence

from rich.text import Text

PANEL_WIDTH = 43
PROGRESS_WIDTH = PANEL_WIDTH - 16
ELLIPSIS = "..."


def round_half_up(value: float) -> int:
    """Round half away from zero, clamped at zero."""
    if math.isnan(value) or value <= 0:
        return 0
    return int(math.floor(value + 0.5))


def whole_seconds(value: Optional[timedelta]) -> int:
    if value is None:
        return 0
    return max(0, int(value.total_seconds()))


def format_duration(value: Optional[timedelta]) -> str:
    minutes, seconds = divmod(whole_seconds(value), 60)
    return f"{minutes:02d}:{seconds:02d}"


def volume_percent(fraction: float) -> int:
    return round_half_up(fraction * 100)


def volume_suffix(fraction: float) -> str:
    return f" Volume: {volume_percent(fraction)}% "


def compose_main_line(
    main: Text, main_len: int, suffix: str, width: int = PANEL_WIDTH
) -> Text:
    """Fit the action text and the volume suffix into exactly ``width`` cells.

    Text longer than ``width - len(suffix)`` is cut and ends with ``...``;
    shorter text is padded with spaces up to the suffix.
    """
    room = max(0, width - len(suffix))
    if main_len > room:
        keep = max(0, room - len(ELLIPSIS))
        line = main[:keep]
        line.append(ELLIPSIS[: room - keep])
    else:
        line = main.copy()
        line.append(" " * (room - main_len))
    line.append(suffix)
    return line


def progress_cells(
    elapsed: Optional[timedelta],
    duration: Optional[timedelta],
    width: int = PROGRESS_WIDTH,
) -> int:
    """Number of filled progress cells, always within ``0..width``."""
    if duration is None:
        return 0
    total = whole_seconds(duration)
    if total <= 0:
        return 0
    ratio = whole_seconds(elapsed) / total
    return min(width, round_half_up(ratio * width))


def render_progress_line(
    elapsed: Optional[timedelta],
    duration: Optional[timedelta],
    width: int = PROGRESS_WIDTH,
) -> Text:
    filled = progress_cells(elapsed, duration, width)
    bar = "/" * filled + " " * max(0, width - filled)
    return Text(
        f" [{bar}] {format_duration(elapsed)}/{format_duration(duration)} "
    )


def render_key_legend() -> Text:
    return Text.assemble(
        ("[s]", "bold"),
        "kip    ",
        ("[p]", "bold"),
        "ause    ",
        ("[q]", "bold"),
        "uit    volume ",
        ("[+/-]", "bold"),
    )


def frame_box(rows: Sequence[Text], width: int = PANEL_WIDTH) -> list[Text]:
    """Wrap panel rows in a single-line border, one ``Text`` per screen line."""
    lines = [Text(f"┌{'─' * (width + 2)}┐")]
    for row in rows:
        line = Text("│ ")
        line.append_text(row)
        line.append(" │")
        lines.append(line)
    lines.append(Text(f"└{'─' * (width + 2)}┘"))
    return lines
