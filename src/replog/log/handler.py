"""Bridge from :mod:`logging` records into a :class:`TerminalBackend`."""

from __future__ import annotations

import logging
from typing import Mapping

from replog.log.backend import TerminalBackend
from replog.log.entry import Entry, elapsed, make_location
from replog.log.types import Category, Severity

_STDLIB_SEVERITIES: tuple[tuple[int, Severity], ...] = (
    (logging.CRITICAL, Severity.CRITICAL),
    (logging.ERROR, Severity.ERROR),
    (logging.WARNING, Severity.WARNING),
    (logging.INFO, Severity.INFO),
    (logging.DEBUG, Severity.DEBUG),
)


def severity_for_level(levelno: int) -> Severity:
    """Map a stdlib level number onto the closest severity at or below it.

    Example:
        >>> severity_for_level(logging.WARNING)
        <Severity.WARNING: 3>
        >>> severity_for_level(5)
        <Severity.TRACE: 0>
    """

    for threshold, severity in _STDLIB_SEVERITIES:
        if levelno >= threshold:
            return severity
    return Severity.TRACE


class BackendHandler(logging.Handler):
    """Logging handler that renders records through a terminal backend.

    Logger names are mapped onto categories by longest dotted prefix, so a
    mapping of ``{"app.render": Category.RENDER}`` also covers
    ``app.render.gl``.

    Example:
        >>> import io
        >>> backend = TerminalBackend(io.StringIO())
        >>> handler = BackendHandler(backend, {"demo": Category.FRONTEND})
        >>> logger = logging.getLogger("demo.window")
        >>> logger.addHandler(handler)
        >>> logger.warning("resized to %dx%d", 800, 600)
        >>> "[Frontend] Warning" in backend.stream.getvalue()
        True
    """

    def __init__(
        self,
        backend: TerminalBackend,
        categories: Mapping[str, Category] | None = None,
        *,
        default_category: Category = Category.LOG,
        level: int = logging.NOTSET,
    ) -> None:
        super().__init__(level)
        self.backend = backend
        self.categories = dict(categories or {})
        self.default_category = default_category

    def category_for(self, logger_name: str) -> Category:
        """Return the category configured for ``logger_name``."""

        name = logger_name
        while name:
            category = self.categories.get(name)
            if category is not None:
                return category
            name, _, _ = name.rpartition(".")
        return self.default_category

    def build_entry(self, record: logging.LogRecord) -> Entry:
        """Translate ``record`` into an :class:`Entry`."""

        try:
            message = record.getMessage()
        except (TypeError, ValueError) as exc:
            message = (
                f"{record.msg} (format error: {type(exc).__name__}: {exc}; "
                f"args={record.args!r})"
            )
        if record.exc_info and not record.exc_text:
            record.exc_text = logging.Formatter().formatException(record.exc_info)
        if record.exc_text:
            # Keep one line per entry so repeat collapsing stays accurate.
            message = f"{message} | {record.exc_text.splitlines()[-1]}"

        return Entry(
            timestamp=elapsed(),
            category=self.category_for(record.name),
            severity=severity_for_level(record.levelno),
            location=make_location(
                record.pathname,
                record.lineno,
                record.funcName or "<module>",
                root=self.backend.source_root,
            ),
            message=message,
        )

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.backend.emit(self.build_entry(record))
        except RecursionError:
            raise
        except Exception:
            self.handleError(record)


__all__ = ["BackendHandler", "severity_for_level"]
