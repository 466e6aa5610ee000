"""Plain-text rendering of log entries."""

from __future__ import annotations

import re
from datetime import timedelta
from typing import TextIO

from replog.log.entry import Entry
from replog.log.types import get_category_name, get_severity_name

DEFAULT_LINE_LIMIT = 4 * 1024

_MICROSECONDS_PER_SECOND = 1_000_000
_ONE_MICROSECOND = timedelta(microseconds=1)

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f-\x9f]")
_NAMED_ESCAPES = {"\n": "\\n", "\r": "\\r", "\t": "\\t"}


def _split_timestamp(entry: Entry) -> tuple[int, int]:
    total = entry.timestamp // _ONE_MICROSECOND
    return divmod(max(total, 0), _MICROSECONDS_PER_SECOND)


def _escape_control(match: re.Match[str]) -> str:
    char = match.group()
    return _NAMED_ESCAPES.get(char) or f"\\x{ord(char):02x}"


def escape_controls(text: str) -> str:
    """Return ``text`` with control characters shown as backslash escapes.

    Keeps a rendered entry on one row so its width can be measured.

    Example:
        >>> escape_controls("first\\nsecond\\x1b[2J")
        'first\\\\nsecond\\\\x1b[2J'
    """

    return _CONTROL_CHARS.sub(_escape_control, text)


def format_log_message(entry: Entry, limit: int = DEFAULT_LINE_LIMIT) -> str:
    """Render ``entry`` as a single line of at most ``limit - 1`` characters.

    Example:
        >>> from datetime import timedelta
        >>> from replog.log.types import Category, Severity
        >>> entry = Entry(
        ...     timedelta(seconds=1, microseconds=250),
        ...     Category.CORE,
        ...     Severity.INFO,
        ...     "core/boot.py:start:42",
        ...     "boot complete",
        ... )
        >>> format_log_message(entry)
        '[0001.000250][Core] Info core/boot.py:start:42: boot complete'
        >>> format_log_message(entry.with_repeat_count(3))
        '[0001.000250][Repeated 3x][Core] Info core/boot.py:start:42: boot complete'

    Raises:
        UnknownEnumerationError: If the entry carries an unknown category or
            severity.
    """

    seconds, fraction = _split_timestamp(entry)
    category_name = get_category_name(entry.category)
    severity_name = get_severity_name(entry.severity)

    repeat_marker = ""
    if entry.repeat_count:
        repeat_marker = f"[Repeated {entry.repeat_count}x]"

    text = (
        f"[{seconds:04d}.{fraction:06d}]{repeat_marker}[{category_name}] "
        f"{severity_name} {escape_controls(entry.location)}: "
        f"{escape_controls(entry.message)}"
    )
    # The last slot of the buffer is reserved for the terminator.
    return text[: max(limit - 1, 0)]


def print_message(
    entry: Entry,
    stream: TextIO,
    limit: int = DEFAULT_LINE_LIMIT,
) -> int:
    """Write ``entry`` and a newline to ``stream``.

    Returns:
        The number of characters written, excluding the line terminator.
    """

    text = format_log_message(entry, limit)
    stream.write(text)
    stream.write("\n")
    return len(text)


__all__ = [
    "DEFAULT_LINE_LIMIT",
    "escape_controls",
    "format_log_message",
    "print_message",
]
