# console.py
"""
Interactive terminal front end: redraws the timing screen and forwards key
presses to the session controller.
"""
import logging
import os
import select
import sys
import termios
import tty
from typing import Optional

import config
from formatters import CLEAR_SCREEN

logger = logging.getLogger("F1Dash.Console")

ARROW_KEYS = {"A": "up", "B": "down", "C": "right", "D": "left"}
ESCAPE_SEQUENCE_TIMEOUT = 0.05

# key -> controller method; "esc" leaves the session
KEY_BINDINGS = {
    "up": "advance_minute",
    "ctrl+]": "advance_five_seconds",
    "right": "increment_lap",
    "p": "toggle_pause",
    "r": "toggle_mute",
    "t": "toggle_gap_mode",
    "s": "skip_to_session_start",
}


def _read_char(fd: int) -> str:
    return os.read(fd, 1).decode("utf-8", errors="replace")


def read_key(stream=None, timeout: float = 0.0) -> Optional[str]:
    """
    Read one key press if one arrives within ``timeout`` seconds.

    Arrow keys come back as ``up``/``down``/``left``/``right``, a lone escape
    as ``esc`` and Ctrl-] as ``ctrl+]``. Reads the file descriptor directly so
    escape sequences are never split by a text buffer.
    """
    stream = stream or sys.stdin
    fd = stream.fileno()
    ready, _, _ = select.select([fd], [], [], timeout)
    if not ready:
        return None

    char = _read_char(fd)
    if char == "\x1b":
        ready, _, _ = select.select([fd], [], [], ESCAPE_SEQUENCE_TIMEOUT)
        if not ready:
            return "esc"
        if _read_char(fd) != "[":
            return "esc"
        ready, _, _ = select.select([fd], [], [], ESCAPE_SEQUENCE_TIMEOUT)
        if not ready:
            return "esc"
        return ARROW_KEYS.get(_read_char(fd))
    if char == "\x1d":
        return "ctrl+]"
    return char.lower()


def handle_key(controller, key: Optional[str]) -> bool:
    """Dispatch ``key`` to the controller. Returns False when the user asked to leave."""
    if key == "esc":
        return False
    action = KEY_BINDINGS.get(key)
    if action is not None:
        logger.debug(f"Key '{key}' -> {action}")
        getattr(controller, action)()
    return True


def run_console(controller, stdin=None, stdout=None) -> None:
    """Own the terminal until the user presses Esc or Ctrl-C, then leave the session."""
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    fd = stdin.fileno()
    saved_attributes = termios.tcgetattr(fd)
    try:
        tty.setcbreak(fd)
        while True:
            stdout.write(CLEAR_SCREEN + controller.render_console())
            stdout.flush()
            if not handle_key(controller, read_key(stdin, config.UI_REFRESH_SECONDS)):
                break
    except KeyboardInterrupt:
        logger.info("Interrupted, leaving session.")
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, saved_attributes)
        controller.leave()
