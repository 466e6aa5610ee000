"""Log entry model and the factory that builds entries at call sites.

An :class:`Entry` is created once per log call and handed straight to a
backend. Two entries describe the *same event* when their category,
severity, location and message match; timestamps and repeat counts are not
part of that identity, which is what lets a backend collapse repeats.

Example:
    >>> from datetime import timedelta
    >>> from replog.log.types import Category, Severity
    >>> first = Entry(timedelta(0), Category.CORE, Severity.INFO, "a.py:f:1", "hi")
    >>> second = Entry(timedelta(seconds=3), Category.CORE, Severity.INFO, "a.py:f:1", "hi")
    >>> first == second
    True
"""

from __future__ import annotations

import re
import threading
import time
from dataclasses import dataclass, replace
from datetime import timedelta
from typing import Any, Mapping, Sequence

from replog.log.types import Category, Severity

DEFAULT_SOURCE_ROOT = "src"

_PATH_SEPARATORS = re.compile(r"[/\\]")

_epoch_lock = threading.Lock()
_epoch_ns: int | None = None


@dataclass(frozen=True, slots=True, eq=False)
class Entry:
    """One structured log event.

    Attributes:
        timestamp: Time elapsed since the process-wide logging epoch.
        category: Subsystem that produced the event.
        severity: Importance of the event.
        location: ``file:function:line`` display string.
        message: Fully formatted message text.
        repeat_count: Number of identical entries collapsed into this one;
            zero for an entry that is not a repeat.
    """

    timestamp: timedelta
    category: Category
    severity: Severity
    location: str
    message: str
    repeat_count: int = 0

    def _identity(self) -> tuple[Category, Severity, str, str]:
        return (self.category, self.severity, self.location, self.message)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entry):
            return NotImplemented
        return self._identity() == other._identity()

    def __hash__(self) -> int:
        return hash(self._identity())

    def with_repeat_count(self, count: int) -> "Entry":
        """Return a copy of the entry stamped with ``count`` repeats."""

        return replace(self, repeat_count=count)


def equals_ignoring_timestamp(first: Entry, second: Entry) -> bool:
    """Return ``True`` when both entries describe the same event."""

    return first == second


def elapsed() -> timedelta:
    """Return the time since the logging epoch, captured on first use."""

    global _epoch_ns

    now = time.monotonic_ns()
    with _epoch_lock:
        if _epoch_ns is None:
            _epoch_ns = now
        start = _epoch_ns
    return timedelta(microseconds=max(0, now - start) // 1000)


def trim_source_path(path: str, root: str = DEFAULT_SOURCE_ROOT) -> str:
    """Strip everything up to and including the last ``root`` component.

    Components are split on both ``/`` and ``\\``. A path without a
    component equal to ``root`` is returned unchanged.

    Example:
        >>> trim_source_path("/build/src/foo/bar.cpp", "src")
        'foo/bar.cpp'
        >>> trim_source_path("/build/nomatch.cpp", "src")
        '/build/nomatch.cpp'
    """

    components = _PATH_SEPARATORS.split(path)
    if components and components[-1] == "":
        # A trailing separator does not start another component.
        components.pop()

    trimmed = path
    offset = 0
    for component in components:
        offset += len(component) + 1
        if component == root:
            trimmed = path[offset:]
    return trimmed


def make_location(
    filename: str,
    line: int,
    function: str,
    *,
    root: str = DEFAULT_SOURCE_ROOT,
) -> str:
    """Return the ``file:function:line`` display string for a call site.

    Example:
        >>> make_location("/work/src/core/boot.py", 42, "start")
        'core/boot.py:start:42'
    """

    return f"{trim_source_path(filename, root)}:{function}:{line}"


def format_message(
    template: str,
    args: Sequence[Any] = (),
    kwargs: Mapping[str, Any] | None = None,
) -> str:
    """Render ``template`` with ``str.format`` semantics.

    Templates without arguments are returned verbatim. A malformed template
    degrades to a literal message that still carries the arguments.

    Example:
        >>> format_message("loaded {} of {}", (3, 5))
        'loaded 3 of 5'
        >>> format_message("{missing}", (1,)).startswith("{missing} (format error")
        True
    """

    if not args and not kwargs:
        return template
    try:
        return template.format(*args, **(kwargs or {}))
    except Exception as exc:  # noqa: BLE001 - arguments run arbitrary __format__
        detail = f"{type(exc).__name__}: {_safe_str(exc)}"
        payload = _safe_repr(tuple(args))
        if kwargs:
            pairs = ", ".join(
                f"{key!r}: {_safe_repr(value)}" for key, value in kwargs.items()
            )
            payload = f"{payload}, kwargs={{{pairs}}}"
        return f"{template} (format error: {detail}; args={payload})"


def _safe_repr(value: Any) -> str:
    try:
        return repr(value)
    except Exception:  # noqa: BLE001
        if isinstance(value, tuple):
            items = [_safe_repr(item) for item in value]
            trailer = "," if len(items) == 1 else ""
            return "(" + ", ".join(items) + trailer + ")"
        return object.__repr__(value)


def _safe_str(exc: BaseException) -> str:
    try:
        return str(exc)
    except Exception:  # noqa: BLE001
        return object.__repr__(exc)


def create_entry(
    category: Category,
    severity: Severity,
    filename: str,
    line: int,
    function: str,
    template: str,
    *args: Any,
    root: str = DEFAULT_SOURCE_ROOT,
    **kwargs: Any,
) -> Entry:
    """Build an :class:`Entry` for a log call.

    Args:
        category: Subsystem emitting the message.
        severity: Severity of the message.
        filename: Source file of the call site.
        line: Line number of the call site.
        function: Function name of the call site.
        template: ``str.format`` template for the message.
        *args: Positional template arguments.
        root: Root marker stripped from ``filename``.
        **kwargs: Keyword template arguments.

    Returns:
        A fresh entry with ``repeat_count`` of zero.
    """

    return Entry(
        timestamp=elapsed(),
        category=category,
        severity=severity,
        location=make_location(filename, line, function, root=root),
        message=format_message(template, args, kwargs),
    )


__all__ = [
    "DEFAULT_SOURCE_ROOT",
    "Entry",
    "create_entry",
    "elapsed",
    "equals_ignoring_timestamp",
    "format_message",
    "make_location",
    "trim_source_path",
]
