"""Project-wide logging configuration for entrypoints.

Library modules only do `logger = logging.getLogger(__name__)`; the CLI calls
`setup_logging(...)` once. The console handler injects `record.shortname`
(last dotted component of the logger name) so console formats may use
`%(shortname)s`, e.g. `monte_carlo` instead of
`mc_pricer.options.engines.monte_carlo`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path


class _AddShortNameFilter(logging.Filter):
    """Inject `record.shortname` without touching `record.name`."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.shortname = record.name.rsplit(".", 1)[-1]
        return True


class _ColorFormatter(logging.Formatter):
    """Color only the level name with ANSI codes (console handler only)."""

    _RESET = "\033[0m"
    _LEVEL_COLOR: dict[int, str] = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[1;31m",
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self._LEVEL_COLOR.get(record.levelno)
        if not color:
            return super().format(record)

        original = record.levelname
        record.levelname = f"{color}{original}{self._RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


_LEVEL_ALIASES: dict[str, int] = {
    "CRITICAL": logging.CRITICAL,
    "FATAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
    "NOTSET": logging.NOTSET,
}


def coerce_level(level: int | str) -> int:
    """Accept `logging.INFO`, `"info"`, `"20"`...; raise on unknown names."""
    if isinstance(level, int):
        return level

    name = str(level).strip().upper()
    if not name:
        raise ValueError("Empty logging level")
    if name.isdigit():
        return int(name)

    try:
        return _LEVEL_ALIASES[name]
    except KeyError as e:
        raise ValueError(f"Unknown logging level: {level!r}") from e


def setup_logging(
    level: int | str = "INFO",
    *,
    fmt_console: str = "%(asctime)s %(levelname)s %(name)s - %(message)s",
    fmt_file: str = "%(asctime)s %(levelname)s %(name)s - %(message)s",
    datefmt: str = "%Y-%m-%d %H:%M:%S",
    log_file: str | Path | None = None,
    module_levels: Mapping[str, int | str] | None = None,
    colored: bool = False,
    quiet_loggers: Iterable[str] = ("numexpr",),
) -> None:
    """Configure root logging once per process.

    Parameters
    - level: Root level (int or name).
    - fmt_console / fmt_file: Formats for the console and optional file
      handlers.
    - log_file: Also write uncolored logs to this file (parents created).
    - module_levels: Per-logger level overrides, e.g.
      `{"mc_pricer.options.engines.monte_carlo": "DEBUG"}`.
    - colored: ANSI-color the console level names.
    - quiet_loggers: Third-party loggers capped at WARNING.

    Uses `force=True` so repeated calls (notebooks, tests) replace handlers.
    """
    root_level = coerce_level(level)
    handlers: list[logging.Handler] = []

    console = logging.StreamHandler()
    console.addFilter(_AddShortNameFilter())
    formatter_cls = _ColorFormatter if colored else logging.Formatter
    console.setFormatter(formatter_cls(fmt=fmt_console, datefmt=datefmt))
    handlers.append(console)

    if log_file is not None:
        p = Path(log_file)
        p.parent.mkdir(parents=True, exist_ok=True)

        fh = logging.FileHandler(p, encoding="utf-8")
        fh.addFilter(_AddShortNameFilter())
        fh.setFormatter(logging.Formatter(fmt=fmt_file, datefmt=datefmt))
        handlers.append(fh)

    logging.basicConfig(level=root_level, handlers=handlers, force=True)

    for name, lvl in (module_levels or {}).items():
        logging.getLogger(name).setLevel(coerce_level(lvl))

    for name in quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)
