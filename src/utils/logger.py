import logging
import os
from typing import Dict, List

from rich.console import Console
from rich.logging import RichHandler

LOG_FILE_ENV = "SHOPVISTA_LOG_FILE"

_handlers: List[RichHandler] = []
_file_consoles: Dict[str, Console] = {}  # one open file per absolute path


class CenteredFormatter(logging.Formatter):
    longest_name_length = 12  # grows with the longest logger name seen

    def __init__(self, fmt=None, datefmt=None, style="%", initial_width=12):
        super().__init__(fmt, datefmt, style)
        CenteredFormatter.longest_name_length = initial_width

    def format(self, record):
        CenteredFormatter.longest_name_length = max(
            CenteredFormatter.longest_name_length, len(record.name)
        )
        width = CenteredFormatter.longest_name_length
        record.name = record.name.center(width)
        return super().format(record)


def _file_console(path: str) -> Console:
    path = os.path.abspath(path)
    console = _file_consoles.get(path)
    if console is None:
        log_dir = os.path.dirname(path)
        os.makedirs(log_dir, exist_ok=True)
        console = Console(file=open(path, "a", encoding="utf-8"), width=120)
        _file_consoles[path] = console
    return console


def _make_console() -> Console:
    log_file = os.getenv(LOG_FILE_ENV)
    if log_file:
        return _file_console(log_file)
    return Console(stderr=True)


def log_to_file(path: str) -> None:
    """
    Send every logger created so far, and every one created later, to a file.
    The TUI owns the terminal while it runs, so the app calls this on startup.
    Calling it again with the same path reuses the file already open.
    """
    os.environ[LOG_FILE_ENV] = path
    console = _file_console(path)
    for handler in _handlers:
        handler.console = console


def close_log_files() -> None:
    """Close every log file opened so far; loggers fall back to stderr."""
    stderr = Console(stderr=True)
    for handler in _handlers:
        if handler.console in _file_consoles.values():
            handler.console = stderr
    for console in _file_consoles.values():
        console.file.close()
    _file_consoles.clear()
    os.environ.pop(LOG_FILE_ENV, None)


def get_logger(name=None) -> logging.Logger:
    """
    Creates and returns a logger configured with RichHandler for rich output.
    """
    if name is None:
        name = "shopvista"
    logger = logging.getLogger(name)
    log_level = logging.DEBUG if os.getenv("DEBUG") else logging.INFO
    logger.setLevel(log_level)

    if not logger.handlers:
        formatter = CenteredFormatter("[%(name)s]  %(message)s")

        handler = RichHandler(
            console=_make_console(),
            show_time=True,
            show_level=True,
            show_path=False,
            rich_tracebacks=True,
            log_time_format="[%X]",
        )
        handler.setFormatter(formatter)
        handler.setLevel(log_level)
        logger.addHandler(handler)
        _handlers.append(handler)

        logger.propagate = False
        logger.debug(f"Logger for '{name}' initialized with RichHandler.")

    return logger
