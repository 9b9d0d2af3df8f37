"""Console output: plain info/error lines and colored build reports."""

import sys
from contextlib import contextmanager
from typing import Iterator, Optional, Sequence, TextIO


SEPARATOR = "-------------------------------------"


class Colors:
    OKBLUE = "\033[94m"
    OKGREEN = "\033[92m"
    FAIL = "\033[91m"
    ENDC = "\033[0m"


_color_enabled = True


def set_color_enabled(enabled: bool) -> None:
    global _color_enabled
    _color_enabled = enabled


def color_enabled() -> bool:
    return _color_enabled


def info(message: str) -> None:
    """Print a standard informational message."""
    print(f"[fxbuild] {message}")


def error(message: str) -> None:
    """Print a standardized error message to stderr."""
    print(f"error: {message}", file=sys.stderr)


@contextmanager
def terminal_color(color: str, stream: Optional[TextIO] = None) -> Iterator[None]:
    """Switch ``stream`` to ``color`` for the block and always switch it back."""
    out = stream if stream is not None else sys.stdout
    if not _color_enabled:
        yield
        return
    out.write(color)
    try:
        yield
    finally:
        out.write(Colors.ENDC)
        out.flush()


def print_with_color(
    color: str, message: str, stream: Optional[TextIO] = None
) -> None:
    out = stream if stream is not None else sys.stdout
    with terminal_color(color, out):
        out.write(message)
    out.write("\n")


def report_start(name: str) -> None:
    print_with_color(Colors.OKBLUE, f"Building {name}")


def report_success(output: str) -> None:
    print_with_color(Colors.OKGREEN, f"Build {output} successful. Ok")


def report_failure(output: str) -> None:
    print_with_color(Colors.FAIL, f"Build {output} failed.")


def report_invalid(tokens: Sequence[str]) -> None:
    print_with_color(Colors.FAIL, f"error: invalid command: {list(tokens)!r}")


def report_separator() -> None:
    print(SEPARATOR)
    print("")
