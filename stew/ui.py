"""Interactive terminal prompts and a loading spinner."""

from __future__ import annotations

import itertools
import sys
import threading
from typing import Iterable, Optional, Sequence, TextIO

from .constants import bold_color, green_color, yellow_color
from .errors import ExitUserSelectionError

_SPINNER_FRAMES = ("|", "/", "-", "\\")
_SPINNER_DELAY = 0.1
_CYAN = "\x1b[36m"
_RESET = "\x1b[0m"
_HIDE_CURSOR = "\x1b[?25l"
_SHOW_CURSOR = "\x1b[?25h"
_CLEAR_LINE = "\x1b[K"


def _is_terminal(stream: TextIO) -> bool:
    isatty = getattr(stream, "isatty", None)
    if isatty is None:
        return False
    try:
        return bool(isatty())
    except (ValueError, OSError):
        return False


class Spinner:
    """A cyan spinner drawn on a terminal while slow work runs; silent elsewhere."""

    def __init__(
        self,
        frames: Sequence[str] = _SPINNER_FRAMES,
        delay: float = _SPINNER_DELAY,
        stream: Optional[TextIO] = None,
    ) -> None:
        self._frames = tuple(frames)
        self._delay = delay
        self._stream = stream
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    @property
    def running(self) -> bool:
        return self._thread is not None

    def start(self) -> None:
        """Start spinning if the stream is a terminal and the spinner is idle."""
        with self._lock:
            if self._thread is not None:
                return
            stream = self.stream
            if not _is_terminal(stream):
                return
            self._stop_event.clear()
            stream.write(_HIDE_CURSOR)
            stream.flush()
            self._thread = threading.Thread(target=self._spin, args=(stream,), daemon=True)
            self._thread.start()

    def stop(self) -> None:
        """Stop spinning, clear the line and restore the cursor."""
        with self._lock:
            thread = self._thread
            if thread is None:
                return
            self._stop_event.set()
            thread.join()
            self._thread = None
            stream = self.stream
            stream.write("\r" + _CLEAR_LINE + _SHOW_CURSOR)
            stream.flush()

    def _spin(self, stream: TextIO) -> None:
        for frame in itertools.cycle(self._frames):
            stream.write(f"\r{_CYAN}{frame}{_RESET}")
            stream.flush()
            if self._stop_event.wait(self._delay):
                break

    def __enter__(self) -> "Spinner":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()


def _question_icon() -> str:
    return green_color("*")


def _warning_icon() -> str:
    return yellow_color("!")


def _read_line(prompt: str) -> str:
    try:
        return input(prompt)
    except (EOFError, KeyboardInterrupt, OSError) as exc:
        raise ExitUserSelectionError(exc) from exc


def _require_options(options: Iterable[str]) -> list[str]:
    choices = list(options)
    if not choices:
        raise ExitUserSelectionError(ValueError("please provide options to select from"))
    return choices


def _select(message: str, options: Iterable[str], icon: str) -> str:
    choices = _require_options(options)
    print(f"{icon} {bold_color(message)}")
    for number, option in enumerate(choices, start=1):
        print(f"  {number}) {option}")
    while True:
        answer = _read_line(f"Enter a number [1-{len(choices)}] (default 1): ").strip()
        if not answer:
            return choices[0]
        if answer in choices:
            return answer
        if answer.isdigit() and 1 <= int(answer) <= len(choices):
            return choices[int(answer) - 1]
        print(yellow_color(f"Invalid selection: {answer}"))


def _parse_numbers(answer: str, count: int) -> Optional[set[int]]:
    tokens = answer.replace(",", " ").split()
    if not all(token.isdigit() for token in tokens):
        return None
    numbers = {int(token) for token in tokens}
    if not all(1 <= number <= count for number in numbers):
        return None
    return numbers


def _input(message: str, default_input: str, icon: str) -> str:
    suffix = f" ({default_input})" if default_input else ""
    answer = _read_line(f"{icon} {bold_color(message)}{suffix} ").strip()
    return answer or default_input


def prompt_select(message: str, options: Iterable[str]) -> str:
    """Ask the user to pick one of options; Enter picks the first."""
    return _select(message, options, _question_icon())


def warning_prompt_select(message: str, options: Iterable[str]) -> str:
    """Like prompt_select, with warning styling."""
    return _select(message, options, _warning_icon())


def prompt_multi_select(
    message: str, options: Iterable[str], default_selections: Iterable[str]
) -> list[str]:
    """Ask the user to pick any number of options; Enter keeps the defaults."""
    choices = _require_options(options)
    defaults = set(default_selections)
    selected = [option for option in choices if option in defaults]
    print(f"{_question_icon()} {bold_color(message)}")
    for number, option in enumerate(choices, start=1):
        mark = "[x]" if option in defaults else "[ ]"
        print(f"  {number}) {mark} {option}")
    while True:
        answer = _read_line(
            "Enter numbers separated by spaces or commas, 'none' to clear (default: marked): "
        ).strip()
        if not answer:
            return selected
        if answer.lower() == "none":
            return []
        numbers = _parse_numbers(answer, len(choices))
        if numbers is not None:
            return [option for number, option in enumerate(choices, start=1) if number in numbers]
        print(yellow_color(f"Invalid selection: {answer}"))


def prompt_input(message: str, default_input: str) -> str:
    """Ask for a line of text; an empty answer gives default_input."""
    return _input(message, default_input, _question_icon())


def warning_prompt_input(message: str, default_input: str) -> str:
    """Like prompt_input, with warning styling."""
    return _input(message, default_input, _warning_icon())


def warning_prompt_confirm(message: str) -> bool:
    """Ask a yes/no question with warning styling; the default is no."""
    while True:
        answer = _read_line(f"{_warning_icon()} {bold_color(message)} (y/N) ").strip().lower()
        if not answer or answer in ("n", "no"):
            return False
        if answer in ("y", "yes"):
            return True
        print(yellow_color(f"Please answer yes or no: {answer}"))


def prompt_rename_binary(original_binary_name: str) -> str:
    """Ask for a new binary name, offering the original as the default."""
    return warning_prompt_input("Rename the binary?", original_binary_name)