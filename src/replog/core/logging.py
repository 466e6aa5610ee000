"""Logging helpers for :mod:`replog`'s own diagnostics.

These configure structlog on top of stdlib logging with a Rich console
handler. They are independent of :class:`replog.log.TerminalBackend`, which
renders application entries.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from rich.console import Console
from rich.logging import RichHandler
import structlog

Logger = structlog.stdlib.BoundLogger

_CONSOLE_PROCESSOR = structlog.dev.ConsoleRenderer(colors=False)
_TIMESTAMPER = structlog.processors.TimeStamper(fmt="iso", utc=True)


def _normalize_level(level: str) -> int:
    """Return the logging module level constant for ``level``.

    Raises:
        ValueError: If the level name is not recognized.
    """

    normalized = level.strip().upper()
    value = logging.getLevelName(normalized)
    if isinstance(value, str):  # ``getLevelName`` echoes unknown names.
        raise ValueError(f"Unsupported log level: {level!r}")
    return value


def _reset_root_logger(
    root: logging.Logger,
    handlers: Iterable[logging.Handler],
) -> None:
    """Replace root handlers with the provided ones."""

    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)


def _configure_structlog() -> None:
    """Apply the structlog configuration shared by console handlers."""

    structlog.reset_defaults()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            _TIMESTAMPER,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def _build_console_handler(
    level: int,
    console: Console | None = None,
) -> RichHandler:
    """Return a Rich-backed console handler for structured logging."""

    handler = RichHandler(
        console=console or Console(stderr=True),
        rich_tracebacks=True,
        show_path=False,
        markup=False,
        enable_link_path=False,
        log_time_format="%Y-%m-%d %H:%M:%S",
    )
    handler.setLevel(level)
    formatter = structlog.stdlib.ProcessorFormatter(
        processor=_CONSOLE_PROCESSOR,
        foreign_pre_chain=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            _TIMESTAMPER,
        ],
    )
    handler.setFormatter(formatter)
    return handler


def configure_logging(
    *,
    level: str = "INFO",
    console: Console | None = None,
) -> None:
    """Configure structlog alongside stdlib logging.

    Args:
        level: Log level name to apply to the root logger (case-insensitive).
        console: Optional Rich console override, primarily for testing.

    Raises:
        ValueError: If ``level`` is not a recognized log level name.

    Example:
        >>> configure_logging(level="debug")
        >>> logger = get_logger(__name__)
        >>> logger.debug("configured", example=True)  # doctest: +SKIP
    """

    log_level = _normalize_level(level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    _configure_structlog()
    _reset_root_logger(
        root_logger,
        [_build_console_handler(log_level, console=console)],
    )

    logging.captureWarnings(True)


def get_logger(name: str | None = None, **initial_context: Any) -> Logger:
    """Return a structured logger bound to an optional context.

    Example:
        >>> logger = get_logger(__name__, feature="emit")
        >>> hasattr(logger, "info")
        True
    """

    return structlog.get_logger(name).bind(**initial_context)


def get_library_logger(name: str, **initial_context: Any) -> Logger:
    """Return a structured logger that always routes through stdlib logging.

    Library modules use this so applications that never call
    :func:`configure_logging` receive events through their own logging
    setup, and disabled levels are dropped before any rendering.

    Example:
        >>> logger = get_library_logger("replog.example", feature="filter")
        >>> hasattr(logger, "warning")
        True
    """

    return structlog.wrap_logger(
        logging.getLogger(name),
        wrapper_class=structlog.stdlib.BoundLogger,
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.render_to_log_kwargs,
        ],
    ).bind(**initial_context)


__all__ = [
    "Logger",
    "configure_logging",
    "get_library_logger",
    "get_logger",
]
