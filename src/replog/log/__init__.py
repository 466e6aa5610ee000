"""Structured log entries rendered to the terminal with repeat collapsing.

Example:
    >>> import io
    >>> from replog.log import Category, Severity, TerminalBackend
    >>> backend = TerminalBackend(io.StringIO())
    >>> backend.log(Category.CORE, Severity.INFO, "boot complete")
    >>> "boot complete" in backend.stream.getvalue()
    True
"""

from __future__ import annotations

from .backend import RenderState, TerminalBackend
from .entry import Entry, create_entry, equals_ignoring_timestamp, trim_source_path
from .errors import FilterParseError, ReplogError, UnknownEnumerationError
from .filter import EntryFilter, Filter, parse_filter
from .handler import BackendHandler
from .terminal import AnsiTerminal, NativeConsole, PlainStream, Terminal, probe_terminal
from .text_formatter import format_log_message, print_message
from .types import Category, Severity, get_category_name, get_severity_name

__all__ = [
    "AnsiTerminal",
    "BackendHandler",
    "Category",
    "Entry",
    "EntryFilter",
    "Filter",
    "FilterParseError",
    "NativeConsole",
    "PlainStream",
    "RenderState",
    "ReplogError",
    "Severity",
    "Terminal",
    "TerminalBackend",
    "UnknownEnumerationError",
    "create_entry",
    "equals_ignoring_timestamp",
    "format_log_message",
    "get_category_name",
    "get_severity_name",
    "parse_filter",
    "print_message",
    "probe_terminal",
    "trim_source_path",
]
