"""
Terminal styles.

ANSI codes are only emitted when the terminal can show them. The style used
for finished tasks is a plain value handed to the renderer, so callers can swap
it out (or pass an empty string) without touching module state.
"""

import os
import sys
from typing import TextIO


def _supports_color(stream: TextIO = None) -> bool:
    """Check if the terminal supports ANSI color codes."""
    if 'FORCE_COLOR' in os.environ:
        return True

    # https://no-color.org
    if 'NO_COLOR' in os.environ:
        return False

    stream = stream if stream is not None else sys.stdout
    if not hasattr(stream, 'isatty') or not stream.isatty():
        return False

    if os.environ.get('TERM', '') == 'dumb':
        return False

    return True


class Colors:
    """
    ANSI codes, blank when color is unsupported.

    Usage:
        from todolist.colors import Colors
        print(f"{Colors.RED}Failed{Colors.RESET}")
    """
    _enabled = _supports_color()

    RESET = "\033[0m" if _enabled else ""

    STRIKETHROUGH = "\033[9m" if _enabled else ""

    RED = "\033[31m" if _enabled else ""
    GREEN = "\033[32m" if _enabled else ""

    @classmethod
    def is_enabled(cls) -> bool:
        return cls._enabled

    @classmethod
    def done_style(cls) -> str:
        """Strike-through green, the default look of a finished task."""
        return f"{cls.STRIKETHROUGH}{cls.GREEN}"


def colorize(text: str, style: str) -> str:
    """Wrap text in a style; unchanged when the style is empty."""
    if not style:
        return text
    return f"{style}{text}{Colors.RESET}"
