"""
Console output helpers
Colored terminal lines for humans, stdlib logging for diagnostics
"""

import logging
import os
import sys
from typing import Optional, TextIO

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(message)s'

# ANSI color codes
COLORS = {
    'grey': '\033[90m',
    'red': '\033[91m',
    'green': '\033[32m',
    'yellow': '\033[33m',
    'magenta': '\033[95m',
    'cyan': '\033[36m',
    'bold': '\033[1m',
}
RESET = '\033[0m'

STATUS_COLORS = {
    'New': 'cyan',
    'To Do': 'cyan',
    'In Progress': 'yellow',
    'Review': 'magenta',
    'In Review': 'magenta',
    'Done': 'green',
}


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
    )


def use_color(stream: Optional[TextIO] = None) -> bool:
    """Colors only for interactive terminals without NO_COLOR"""
    stream = stream or sys.stdout
    if os.environ.get('NO_COLOR'):
        return False
    return hasattr(stream, 'isatty') and stream.isatty()


def colorize(text: str, color: str, stream: Optional[TextIO] = None) -> str:
    if not use_color(stream):
        return text
    return f"{COLORS.get(color, '')}{text}{RESET}"


def status_color(status: str) -> str:
    return STATUS_COLORS.get(status, 'grey')


def echo(text: str = "", color: Optional[str] = None, stream: Optional[TextIO] = None) -> None:
    stream = stream or sys.stdout
    if color:
        text = colorize(text, color, stream)
    print(text, file=stream)


def success(text: str) -> None:
    echo(f"✅ {text}", 'green')


def warn(text: str) -> None:
    echo(f"⚠️  {text}", 'yellow', sys.stderr)


def fail(text: str) -> None:
    echo(f"❌ {text}", 'red', sys.stderr)
