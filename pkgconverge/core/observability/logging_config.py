"""
Logging setup for the pkgconverge CLI.

``main.cli`` calls ``setup_from_environment`` once per invocation; module
loggers (``logging.getLogger(__name__)``) pick the configuration up from
the root logger.

Console level: ``--debug`` / ``--verbose`` / ``--quiet``, else
``PKGC_LOG_LEVEL``, else WARNING. ``PKGC_LOG_FILE`` adds a file handler at
``PKGC_LOG_FILE_LEVEL`` (defaults to the console level). Native command
lines are logged at INFO, so ``-v`` shows every rpm invocation.
"""

from __future__ import annotations

import logging
import os
import sys

ENV_LEVEL = "PKGC_LOG_LEVEL"
ENV_FILE = "PKGC_LOG_FILE"
ENV_FILE_LEVEL = "PKGC_LOG_FILE_LEVEL"

_CLOCK = "%H:%M:%S"
_DETAILED = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d: %(message)s"

# (highest level the format applies to, format, datefmt), checked in order
_CONSOLE_FORMATS: tuple[tuple[int, str, str | None], ...] = (
    (logging.DEBUG, _DETAILED, _CLOCK),
    (logging.INFO, "%(asctime)s [%(name)s] %(message)s", _CLOCK),
    (logging.CRITICAL, "%(message)s", None),
)


def resolve_level(debug: bool = False, verbose: bool = False, quiet: bool = False) -> str:
    """Console level name for the given CLI flags."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return os.environ.get(ENV_LEVEL, "WARNING")


def _level_number(name: str | None) -> int:
    numeric = getattr(logging, name.upper(), None) if name else None
    return numeric if isinstance(numeric, int) else logging.WARNING


def _console_handler(level: int) -> logging.Handler:
    fmt, datefmt = _CONSOLE_FORMATS[-1][1:]
    for ceiling, candidate_fmt, candidate_datefmt in _CONSOLE_FORMATS:
        if level <= ceiling:
            fmt, datefmt = candidate_fmt, candidate_datefmt
            break

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    return handler


def _file_handler(path: str, level: int) -> logging.Handler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_DETAILED, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Replace the root logger's handlers.

    Args:
        level: Console level name; unknown names mean WARNING.
        log_file: Optional log file path.
        log_file_level: Level for the file; defaults to ``level``.
    """
    console_level = _level_number(level)
    handlers = [_console_handler(console_level)]

    if log_file:
        file_level = _level_number(log_file_level) if log_file_level else console_level
        handlers.append(_file_handler(log_file, file_level))

    root = logging.getLogger()
    root.handlers.clear()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(min(h.level for h in handlers))

    logging.raiseExceptions = False


def setup_from_environment(level: str) -> None:
    """``setup_logging`` with file output taken from the environment."""
    setup_logging(
        level=level,
        log_file=os.environ.get(ENV_FILE),
        log_file_level=os.environ.get(ENV_FILE_LEVEL),
    )
