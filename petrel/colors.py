"""
petrel/colors.py — Colorized log output for the server.
    - Per-level colored log prefixes
    - Method and status-code highlighting for request/response lines
    - Startup banner helpers
Color is disabled when NO_COLOR is set or stdout is not a terminal, and
forced on by FORCE_COLOR.
"""

import logging
import sys
import os
import datetime


def _supports_color() -> bool:
    """Return True if the terminal likely supports ANSI color codes."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("FORCE_COLOR"):
        return True
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


USE_COLOR = _supports_color()


class _ANSI:
    RESET   = "\033[0m"
    BOLD    = "\033[1m"
    DIM     = "\033[2m"

    RED     = "\033[31m"
    GREEN   = "\033[32m"
    YELLOW  = "\033[33m"
    BLUE    = "\033[34m"
    CYAN    = "\033[36m"
    WHITE   = "\033[37m"

    BRIGHT_CYAN = "\033[96m"
    BG_RED      = "\033[41m"


def _c(code: str, text: str) -> str:
    """Wrap *text* with ANSI *code* only when color is supported."""
    if not USE_COLOR:
        return text
    return f"{code}{text}{_ANSI.RESET}"


# ── Log level styling ───────────────────────────────────────────────────────

_LEVEL_COLORS = {
    "DEBUG":    _ANSI.DIM + _ANSI.CYAN,
    "INFO":     _ANSI.GREEN,
    "WARNING":  _ANSI.YELLOW,
    "ERROR":    _ANSI.BOLD + _ANSI.RED,
    "CRITICAL": _ANSI.BOLD + _ANSI.WHITE + _ANSI.BG_RED,
}


class ColorFormatter(logging.Formatter):
    """
    Format:  ``LEVEL    message``, with the level colored by severity.
    Timestamps are added when *show_timestamp* is set (debug level).
    Tracebacks attached with exc_info are appended below the message.
    """

    def __init__(self, show_timestamp: bool = False):
        super().__init__()
        self.show_timestamp = show_timestamp

    def format(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        if USE_COLOR:
            color = _LEVEL_COLORS.get(levelname, "")
            colored_level = f"{color}{levelname:<8}{_ANSI.RESET}"
        else:
            colored_level = f"{levelname:<8}"

        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"

        if self.show_timestamp:
            ts = datetime.datetime.fromtimestamp(record.created).strftime(
                "%Y-%m-%d %H:%M:%S"
            )
            return f"{colored_level} {_c(_ANSI.DIM, ts)} {message}"

        return f"{colored_level} {message}"


# ── HTTP method / status coloring ───────────────────────────────────────────

_METHOD_COLORS = {
    "GET":  _ANSI.BOLD + _ANSI.GREEN,
    "POST": _ANSI.BOLD + _ANSI.BLUE,
}


def color_method(method: str) -> str:
    """Methods the server does not route are shown plain bold."""
    color = _METHOD_COLORS.get(method.upper(), _ANSI.BOLD)
    return _c(color, f"{method:<4}")


def color_status(status_code: int) -> str:
    code_str = str(status_code)
    if 200 <= status_code < 300:
        return _c(_ANSI.BOLD + _ANSI.GREEN, code_str)
    elif 400 <= status_code < 500:
        return _c(_ANSI.BOLD + _ANSI.YELLOW, code_str)
    elif status_code >= 500:
        return _c(_ANSI.BOLD + _ANSI.RED, code_str)
    return _c(_ANSI.BOLD, code_str)


# ── Request / response log formatting ──────────────────────────────────────

def format_request_log(client_ip: str, client_port: int, method: str, path: str) -> str:
    """
    Example output:
        127.0.0.1:51234 - GET  /echo/abc
    """
    addr = _c(_ANSI.DIM, f"{client_ip}:{client_port}")
    return f"{addr} {_c(_ANSI.DIM, '-')} {color_method(method)} {_c(_ANSI.BOLD, path)}"


def format_response_log(
    client_ip: str,
    client_port: int,
    method: str,
    path: str,
    status_code: int,
) -> str:
    """
    Example output:
        127.0.0.1:51234 - GET  /echo/abc → 200
    """
    addr = _c(_ANSI.DIM, f"{client_ip}:{client_port}")
    m = color_method(method)
    p = _c(_ANSI.BOLD, path)
    arrow = _c(_ANSI.DIM, "→")
    return f"{addr} {_c(_ANSI.DIM, '-')} {m} {p} {arrow} {color_status(status_code)}"


# ── Startup banner helpers ──────────────────────────────────────────────────

def format_banner_line(label: str, value: str) -> str:
    colored_label = _c(_ANSI.DIM, f"  {label:<12}")
    return f"{colored_label} {value}"


def format_banner_title(name: str, version: str) -> str:
    return _c(_ANSI.BOLD + _ANSI.BRIGHT_CYAN, f"  {name}") + " " + _c(_ANSI.DIM, f"v{version}")


def format_banner_separator() -> str:
    return _c(_ANSI.DIM, "  " + "─" * 40)


def format_banner_tag(text: str, color: str = _ANSI.CYAN) -> str:
    """Format a tag in the banner (e.g. reload, contained paths)."""
    return _c(_ANSI.BOLD + color, text)
