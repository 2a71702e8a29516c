"""
Console logging helpers.

Level labels and inline value colors are rendered with colorama so a
backfill run reads the same way in every terminal.
"""

from datetime import date

import colorama
from colorama import Fore, Style

colorama.init(autoreset=True)

# Level tags (labels)
LABELS = {
    level: f"{color}[{level}]{Style.RESET_ALL}"
    for level, color in (
        ("INFO", Fore.GREEN),
        ("WARN", Fore.YELLOW),
        ("ERROR", Fore.RED),
        ("SUCCESS", Fore.GREEN),
        ("UPDATE", Fore.MAGENTA),
    )
}
INFO = LABELS["INFO"]
ERROR = LABELS["ERROR"]

# Inline value colors
COLOR_VAR  = Fore.CYAN
COLOR_TYPE = Fore.YELLOW
COLOR_REQ  = Fore.RED + "[REQUIRED]" + Style.RESET_ALL


def log(level: str, message: str) -> None:
    print(f"{LABELS.get(level, INFO)} {message}", flush=True)

def log_info(message: str) -> None:
    log("INFO", message)

def log_warn(message: str) -> None:
    log("WARN", message)

def log_error(message: str) -> None:
    log("ERROR", message)

def log_success(message: str) -> None:
    log("SUCCESS", message)

def log_update(message: str) -> None:
    log("UPDATE", message)


def _paint(color: str, x: object) -> str:
    return f"{color}{x}{Style.RESET_ALL}"

def c_rows(x: object) -> str:
    return _paint(Fore.RED, x)

def c_var(x: object) -> str:
    return _paint(COLOR_VAR, x)

def c_type(x: object) -> str:
    return _paint(COLOR_TYPE, x)

def c_desc(x: object) -> str:
    return _paint(Fore.MAGENTA, x)


def fmt_range(start: date, end: date) -> str:
    """Colored `start → end` for log lines."""
    return f"{_paint(Fore.MAGENTA, start.isoformat())} → {_paint(Fore.MAGENTA, end.isoformat())}"
