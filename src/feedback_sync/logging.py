"""Loguru setup for the sync engine and the fbsync CLI.

Engine modules log through ``get_logger(__name__)``, or through
``bind_link``/``bind_provider`` when a record concerns one feedback item or
provider. Records from stdlib loggers (SQLAlchemy, httpx) are forwarded into
loguru so a single level governs all output.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from loguru import logger

if TYPE_CHECKING:
    from loguru import Logger, Record

LogLevel = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

CONSOLE_FORMAT = (
    "<dim>{time:HH:mm:ss}</dim> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan> - "
    "<level>{message}</level>"
)

FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
    "{extra[name]}:{function}:{line} | {extra} | {message}"
)


def _default_name(record: Record) -> None:
    # Forwarded stdlib records carry no bound name
    record["extra"].setdefault("name", record["name"])


class _StdlibBridge(logging.Handler):
    """Forwards stdlib log records to loguru, keeping the original caller."""

    def emit(self, record: logging.LogRecord) -> None:
        level: str | int
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame = logging.currentframe()
        depth = 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _route_stdlib(debug: bool) -> None:
    logging.basicConfig(handlers=[_StdlibBridge()], level=0, force=True)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if debug else logging.WARNING)
    # httpx request lines include Trello's key/token query params
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.DEBUG if debug else logging.WARNING)


def setup_logging(
    level: LogLevel = "INFO",
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
    serialize: bool = False,
) -> Logger:
    """Install the console sink (and optional rotating file sink).

    Args:
        level: Level from settings
        verbose: Force DEBUG (wins over ``quiet``)
        quiet: Force WARNING
        log_file: Optional file that receives DEBUG and above
        rotation: Loguru rotation policy for the file sink
        retention: Loguru retention policy for rotated files
        serialize: Write the file sink as JSON lines

    Returns:
        The configured loguru logger
    """
    effective: LogLevel = "DEBUG" if verbose else "WARNING" if quiet else level

    logger.remove()
    logger.configure(patcher=_default_name)
    logger.add(
        sys.stderr,
        level=effective,
        format=CONSOLE_FORMAT,
        colorize=True,
        backtrace=True,
        diagnose=False,
    )
    if log_file:
        logger.add(
            log_file,
            level="DEBUG",
            format=FILE_FORMAT,
            rotation=rotation,
            retention=retention,
            compression="gz",
            serialize=serialize,
        )

    _route_stdlib(debug=effective in ("TRACE", "DEBUG"))
    return logger


def reset_logging() -> None:
    """Drop every sink (tests call this between cases)."""
    logger.remove()


def get_logger(name: str) -> Logger:
    """Module logger; ``name`` shows in the console line."""
    return logger.bind(name=name)


def bind_provider(provider: str) -> Logger:
    """Logger for work spanning many items on one provider (bulk, browse)."""
    return logger.bind(name="sync", provider=provider)


def bind_link(feedback_id: int, provider: str) -> Logger:
    """Logger for one feedback item on one provider."""
    return logger.bind(name="sync", feedback_id=feedback_id, provider=provider)
