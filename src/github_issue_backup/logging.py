"""Logging setup for the backup, built on loguru.

Every module logs through ``get_logger(__name__)``. Work on one repository
or one issue/pull request binds that context (``bind_repo``,
``bind_entry``, ``LogContext``) and the console sink shows it after the
module name, e.g. ``prebid/prebid-server pull #123``.

The httpx/httpcore loggers githubkit talks through are routed into the
same sinks and kept quiet unless debugging.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

from loguru import logger

if TYPE_CHECKING:
    from loguru import Logger, Record

# Levels accepted from settings and the CLI
LogLevel = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# Loggers of the GitHub transport
TRANSPORT_LOGGERS = ("httpx", "httpcore")


class InterceptHandler(logging.Handler):
    """Send records of stdlib loggers (httpx, httpcore) to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        from types import FrameType

        # Get corresponding loguru level
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = str(record.levelno)

        # Find caller from where originated the logged message
        frame: FrameType | None = logging.currentframe()
        depth = 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _context_markup(extra: dict[str, Any]) -> str:
    """Template for the bound repository/entry context, empty if none is bound."""
    if "repo" not in extra:
        return ""
    if "kind" in extra and "number" in extra:
        return " <magenta>[{extra[repo]} {extra[kind]} #{extra[number]}]</magenta>"
    return " <magenta>[{extra[repo]}]</magenta>"


def _format_console(record: Record) -> str:
    # Intercepted stdlib records have no bound name, fall back to the module
    source = "{extra[name]}" if "name" in record["extra"] else "{name}"
    return (
        "<dim>{time:HH:mm:ss}</dim> | "
        "<level>{level: <8}</level> | "
        f"<cyan>{source}</cyan>{_context_markup(record['extra'])} - "
        "<level>{message}</level>\n{exception}"
    )


def _format_file(record: Record) -> str:
    source = "{extra[name]}" if "name" in record["extra"] else "{name}"
    return (
        "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
        "{level: <8} | "
        f"{source}:{{function}}:{{line}} | "
        "{extra} | "
        "{message}\n{exception}"
    )


def _effective_level(level: LogLevel, verbose: bool, quiet: bool) -> LogLevel:
    if verbose:
        return "DEBUG"
    if quiet:
        return "WARNING"
    return level


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
    """Configure the loguru sinks for a ``ghbackup`` invocation.

    Args:
        level: Base log level from settings (LOG_LEVEL)
        verbose: Use DEBUG regardless of ``level`` (-v)
        quiet: Use WARNING regardless of ``level`` (-q)
        log_file: Also log to this file, rotated and gzip-compressed
        rotation: When to rotate the log file (e.g. "10 MB", "1 day")
        retention: How long rotated files are kept
        serialize: Write the file sink as JSON lines

    Returns:
        The configured loguru logger

    Note:
        verbose wins over quiet if both are set.
    """
    # Determine effective level
    effective_level = _effective_level(level, verbose, quiet)

    # Clear any existing handlers
    logger.remove()

    # Console handler with repository/entry context
    logger.add(
        sys.stderr,
        level=effective_level,
        format=_format_console,
        colorize=True,
        backtrace=True,
        diagnose=True,
    )

    # Optional file handler with rotation
    if log_file:
        logger.add(
            log_file,
            level="DEBUG",
            format=_format_file,
            rotation=rotation,
            retention=retention,
            compression="gz",
            serialize=serialize,
        )

    # Intercept standard library logging
    _intercept_stdlib_logging(effective_level)

    return logger


def _intercept_stdlib_logging(level: LogLevel) -> None:
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    # httpx logs every GitHub request at INFO
    transport_level = logging.DEBUG if level in ("TRACE", "DEBUG") else logging.WARNING
    for name in TRANSPORT_LOGGERS:
        logging.getLogger(name).setLevel(transport_level)


def get_logger(name: str) -> Logger:
    """Get a logger with the module name bound.

    Usage:
        logger = get_logger(__name__)
        logger.info("Loaded {} issues", count)

        # With additional context binding
        logger.bind(page=3).debug("Listing page fetched")
    """
    return logger.bind(name=name)


def bind_repo(owner: str, repo: str) -> Logger:
    """Logger for work on one repository, shown as ``[owner/repo]``."""
    return logger.bind(name="backup", repo=f"{owner}/{repo}")


def bind_entry(owner: str, repo: str, kind: str, number: int) -> Logger:
    """Logger for one issue or pull request.

    Args:
        owner: Repository owner
        repo: Repository name
        kind: Entry kind ("issue" or "pull")
        number: Issue or pull request number

    Returns:
        Logger shown as ``[owner/repo kind #number]``
    """
    return logger.bind(name="backup", repo=f"{owner}/{repo}", kind=kind, number=number)


class LogContext:
    """Bind context to every log call made inside a ``with`` block.

    Usage:
        with LogContext(repo="prebid/prebid-server"):
            logger.info("Backup started")  # carries repo
        logger.info("Done")  # does not
    """

    def __init__(self, **context: Any) -> None:
        self._context = context
        self._token: Any = None

    def __enter__(self) -> Logger:
        self._token = logger.contextualize(**self._context)
        self._token.__enter__()
        return logger

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        if self._token:
            self._token.__exit__(exc_type, exc_val, exc_tb)


def reset_logging() -> None:
    """Remove all sinks (used between tests)."""
    logger.remove()
