"""Command-line interface for tapedeck."""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path
import sys
import threading
from types import TracebackType
from typing import Iterable, Optional, Tuple

from tapedeck.commands import ChannelClosed, CommandChannel
from tapedeck.config import load_config
from tapedeck.hangwatch import dump_threads, enable_faulthandler
from tapedeck.logging_setup import console_muted, init_logging
from tapedeck.playback import Player, collect_tracks
from tapedeck.player_vlc import VlcSink

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="tapedeck", description="Play audio files with a terminal status panel"
    )
    parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="Audio files or directories to play in a loop",
    )
    parser.add_argument(
        "--alternate",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Draw the panel on the alternate screen, hiding terminal history",
    )
    parser.add_argument(
        "--volume",
        type=int,
        default=None,
        help="Initial volume in percent (0-100)",
    )
    return parser


def _install_excepthooks() -> None:
    def excepthook(exc_type, exc, tb) -> None:
        logger.exception("Uncaught exception", exc_info=(exc_type, exc, tb))
        dump_threads("uncaught exception")

    sys.excepthook = excepthook

    def thread_hook(args: threading.ExceptHookArgs) -> None:
        exc_value = args.exc_value or RuntimeError("unknown")
        exc_info: Tuple[
            type[BaseException], BaseException, Optional[TracebackType]
        ] = (
            args.exc_type,
            exc_value,
            args.exc_traceback,
        )
        thread_name = args.thread.name if args.thread else "thread"
        logger.exception("Thread exception in %s", thread_name, exc_info=exc_info)
        dump_threads(f"thread exception in {thread_name}")

    threading.excepthook = thread_hook


async def _serve(player: Player, *, alternate: bool) -> None:
    from tapedeck.ui.session import run_session

    channel = CommandChannel()
    player_task = asyncio.create_task(player.run(channel), name="player")
    try:
        await run_session(player, channel, alternate=alternate)
    finally:
        player_task.cancel()
        await asyncio.wait({player_task})
    if not player_task.cancelled() and player_task.exception() is not None:
        logger.error("Player stopped early", exc_info=player_task.exception())


def _run_panel(player: Player, *, alternate: bool) -> int:
    with console_muted():
        try:
            asyncio.run(_serve(player, alternate=alternate))
        except (OSError, ChannelClosed) as exc:
            logger.exception("Session failed")
            print(f"tapedeck: {exc}", file=sys.stderr)
            return 1
    return 0


def main(argv: Optional[Iterable[str]] = None) -> int:
    """Entry point for the CLI."""
    log_path = init_logging()
    enable_faulthandler(log_path)
    logger.info("App start")
    _install_excepthooks()

    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    cfg = load_config()
    alternate = cfg.alternate_screen if args.alternate is None else args.alternate
    volume = cfg.volume if args.volume is None else max(0, min(100, args.volume))

    tracks = collect_tracks(args.paths)
    if not tracks:
        print("tapedeck: no playable audio files given", file=sys.stderr)
        return 1

    try:
        sink = VlcSink(volume=volume / 100)
    except RuntimeError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    exit_code = _run_panel(Player(sink, tracks), alternate=alternate)
    logger.info("App exit code=%s", exit_code)
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
