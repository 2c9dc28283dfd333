"""Small helper for controlling ANSI terminal output and pointer input."""

from __future__ import annotations

import os
import select
import shutil
import sys
import termios
import tty
from dataclasses import dataclass
from typing import List, Optional, Tuple

TermiosAttr = List[int | List[bytes | int]]

# Button-event mouse tracking, SGR coordinates and focus in/out reports.
_MOUSE_ON = "\033[?1002h\033[?1006h\033[?1004h"
_MOUSE_OFF = "\033[?1004l\033[?1006l\033[?1002l"


@dataclass(frozen=True, slots=True)
class InputEvent:
    """Pointer or key event delivered by the display surface.

    ``kind`` is one of ``press``, ``move``, ``release``, ``leave`` or ``key``.
    """

    kind: str
    x: int = 0
    y: int = 0
    key: Optional[str] = None


class TerminalController:
    """Context manager that prepares the terminal for smooth animations."""

    def __init__(
        self,
        *,
        clear: bool = True,
        mouse: bool = True,
        fixed_size: Optional[Tuple[int, int]] = None,
    ) -> None:
        self._clear = clear
        self._mouse = mouse
        self._fixed_size = fixed_size
        self._cursor_hidden = False
        self._mouse_enabled = False
        self._stdin_fd: Optional[int] = None
        self._termios_before: Optional[TermiosAttr] = None
        self._input_enabled = False
        self._last_shape: Optional[Tuple[int, int]] = None

    def __enter__(self) -> "TerminalController":
        if self._clear:
            sys.stdout.write("\033[2J")
        sys.stdout.write("\033[H")
        sys.stdout.write("\033[?25l")
        sys.stdout.flush()
        self._cursor_hidden = True

        if sys.stdin.isatty():
            fd = sys.stdin.fileno()
            self._stdin_fd = fd
            try:
                self._termios_before = termios.tcgetattr(fd)
                tty.setcbreak(fd)
                self._input_enabled = True
            except termios.error:
                self._termios_before = None
                self._stdin_fd = None
                self._input_enabled = False
        else:
            self._stdin_fd = None
            self._termios_before = None
            self._input_enabled = False

        if self._mouse and self._input_enabled:
            sys.stdout.write(_MOUSE_ON)
            sys.stdout.flush()
            self._mouse_enabled = True
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.restore()

    def restore(self) -> None:
        if self._mouse_enabled:
            sys.stdout.write(_MOUSE_OFF)
            self._mouse_enabled = False

        if self._cursor_hidden:
            sys.stdout.write("\033[0m")
            sys.stdout.write("\033[?25h")
            self._cursor_hidden = False
        sys.stdout.flush()

        if self._input_enabled and self._stdin_fd is not None and self._termios_before is not None:
            try:
                termios.tcsetattr(self._stdin_fd, termios.TCSADRAIN, self._termios_before)
            except termios.error:
                pass
        self._input_enabled = False
        self._stdin_fd = None
        self._termios_before = None

    def draw(self, frame: str) -> None:
        shape = self._frame_shape(frame)
        if self._last_shape is not None and shape != self._last_shape:
            # Wipe leftovers of a differently sized frame.
            sys.stdout.write("\033[2J")
        self._last_shape = shape
        sys.stdout.write("\033[H")
        sys.stdout.write(frame)
        sys.stdout.write("\033[0m")
        sys.stdout.flush()

    @staticmethod
    def _frame_shape(frame: str) -> Tuple[int, int]:
        lines = frame.split("\n")
        return len(lines), max(len(line) for line in lines)

    def get_size(self) -> os.terminal_size:
        return shutil.get_terminal_size(fallback=(80, 41))

    def size_tuple(self) -> Tuple[int, int]:
        if self._fixed_size is not None:
            return self._fixed_size
        size = self.get_size()
        # Frames start with a line break, which takes up one terminal row.
        return size.columns, size.lines - 1

    def poll_events(self) -> List[InputEvent]:
        if not self._input_enabled or self._stdin_fd is None:
            return []

        events: List[InputEvent] = []
        try:
            while True:
                readable, _, _ = select.select([sys.stdin], [], [], 0)
                if not readable:
                    break

                data = os.read(self._stdin_fd, 1)
                if not data:
                    break

                char = data.decode("utf-8", errors="ignore")
                if not char:
                    continue

                if char == "\x03":
                    raise KeyboardInterrupt

                if char == "\x1b":
                    sequence = self._read_escape_sequence()
                    event = self.parse_escape_sequence(sequence)
                    if event is not None:
                        events.append(event)
                    continue

                events.append(InputEvent("key", key=char))
        except OSError:
            return events

        return events

    def _read_escape_sequence(self) -> str:
        sequence = "\x1b"
        if self._stdin_fd is None:
            return sequence

        while True:
            readable, _, _ = select.select([sys.stdin], [], [], 0)
            if not readable:
                break
            data = os.read(self._stdin_fd, 1)
            if not data:
                break
            char = data.decode("utf-8", errors="ignore")
            if not char:
                continue
            sequence += char
            if char.isalpha() or char == "~":
                break
        return sequence

    @staticmethod
    def parse_escape_sequence(sequence: str) -> Optional[InputEvent]:
        if not sequence:
            return None
        if sequence.startswith("\x1b[<"):
            return TerminalController._parse_sgr_mouse(sequence)
        if sequence == "\x1b[O":
            return InputEvent("leave")
        mapping = {
            "\x1b[A": "UP",
            "\x1b[B": "DOWN",
            "\x1b[C": "RIGHT",
            "\x1b[D": "LEFT",
        }
        key = mapping.get(sequence)
        if key is None and sequence.startswith("\x1b[") and sequence[-1] in "ABCD":
            key = mapping.get("\x1b[" + sequence[-1])
        if key is None:
            return None
        return InputEvent("key", key=key)

    @staticmethod
    def _parse_sgr_mouse(sequence: str) -> Optional[InputEvent]:
        # ESC [ < button ; column ; row (M = press/motion, m = release)
        final = sequence[-1]
        if final not in "Mm":
            return None
        try:
            button, x, y = (int(part) for part in sequence[3:-1].split(";"))
        except ValueError:
            return None
        if final == "m":
            return InputEvent("release", x, y)
        if button & 64:
            # Wheel
            return None
        if button & 32:
            return InputEvent("move", x, y)
        return InputEvent("press", x, y)
