"""Terminal control surface for the status panel."""

from __future__ import annotations

from contextlib import AbstractContextManager
import sys
from typing import Optional, Sequence, TextIO

from blessed import Terminal
from rich.console import Console
from rich.text import Text


class Screen:
    """Writes control sequences and styled text to the terminal.

    Cursor and screen control strings come from ``blessed``; styled panel
    text is rendered to ANSI by a ``rich`` console bound to the same
    stream. Write errors propagate as ``OSError``.
    """

    def __init__(
        self,
        term: Optional[Terminal] = None,
        console: Optional[Console] = None,
    ) -> None:
        self.term = term if term is not None else Terminal(stream=sys.stderr)
        self.console = (
            console
            if console is not None
            else Console(
                file=self.stream,
                force_terminal=self.term.does_styling,
                highlight=False,
                markup=False,
                emoji=False,
                soft_wrap=True,
            )
        )

    @property
    def stream(self) -> TextIO:
        return self.term.stream

    def raw_mode(self) -> AbstractContextManager[None]:
        """Key capture without line buffering or signal keys."""
        return self.term.raw()

    def write(self, *chunks: str) -> None:
        self.stream.write("".join(chunks))
        self.stream.flush()

    def styled(self, text: Text) -> str:
        with self.console.capture() as capture:
            self.console.print(text, end="")
        return capture.get()

    def prepare(self) -> None:
        term = self.term
        self.write(term.restore, term.clear_eos, term.hide_cursor)

    def enter_alternate(self) -> None:
        self.write(self.term.enter_fullscreen, self.term.home)

    def leave_alternate(self) -> None:
        self.write(self.term.exit_fullscreen)

    def teardown(self) -> None:
        self.write(self.term.clear_eos, self.term.normal_cursor)

    def draw(self, lines: Sequence[Text]) -> None:
        """Redraw the panel in place and park the cursor on its first line."""
        term = self.term
        body = "\r\n".join(self.styled(line) for line in lines)
        self.write(
            term.clear_eos,
            term.move_x(0),
            body,
            term.move_x(0),
            term.move_up(max(0, len(lines) - 1)),
        )
