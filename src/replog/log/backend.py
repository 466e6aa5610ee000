"""Repeat-collapsing terminal backend.

The backend turns a stream of entries into colored terminal lines. When an
entry repeats the previous one, the earlier line is erased and redrawn with
a ``[Repeated Nx]`` marker instead of printing a duplicate. Streams that are
not terminals never see cursor movement; repeats are appended there with the
count stamped on each line.

Example:
    >>> import io
    >>> from datetime import timedelta
    >>> from replog.log.entry import Entry
    >>> from replog.log.types import Category, Severity
    >>> buffer = io.StringIO()
    >>> backend = TerminalBackend(buffer)
    >>> entry = Entry(timedelta(0), Category.CORE, Severity.INFO, "x.py:f:1", "hi")
    >>> backend.emit(entry)
    >>> backend.emit(entry)
    >>> buffer.getvalue().splitlines()[1]
    '[0000.000000][Repeated 1x][Core] Info x.py:f:1: hi'
"""

from __future__ import annotations

import sys
import threading
from dataclasses import dataclass
from typing import Any, TextIO

from replog.core.logging import get_library_logger
from replog.log.entry import DEFAULT_SOURCE_ROOT, Entry, create_entry
from replog.log.filter import EntryFilter
from replog.log.terminal import Terminal, probe_terminal, rows_occupied
from replog.log.text_formatter import DEFAULT_LINE_LIMIT, print_message
from replog.log.types import Category, Severity

_logger = get_library_logger(__name__)


@dataclass(frozen=True, slots=True)
class RenderState:
    """Snapshot of what the backend last put on screen.

    Attributes:
        last_entry: Last accepted entry, without any repeat count.
        last_width: Characters written for the last line.
        last_columns: Terminal width at the time of the last write, or
            ``None`` when the stream was not measurable.
        repeat_count: Number of consecutive repeats of ``last_entry``.
    """

    last_entry: Entry | None = None
    last_width: int = 0
    last_columns: int | None = None
    repeat_count: int = 0

    @property
    def holding(self) -> bool:
        return self.last_entry is not None


class TerminalBackend:
    """Lock-guarded renderer owning the filter and the on-screen state.

    ``install`` and ``emit`` are the only operations that mutate the backend
    and both run under the same lock, so concurrent log calls never
    interleave within a line.

    Args:
        stream: Output stream; defaults to ``sys.stderr`` at call time.
        terminal: Terminal capability for ``stream``; probed when omitted.
        line_limit: Formatter buffer size, including the terminator slot.
        source_root: Root marker stripped from call-site file names.
    """

    def __init__(
        self,
        stream: TextIO | None = None,
        *,
        terminal: Terminal | None = None,
        line_limit: int = DEFAULT_LINE_LIMIT,
        source_root: str = DEFAULT_SOURCE_ROOT,
    ) -> None:
        if terminal is None:
            terminal = probe_terminal(stream if stream is not None else sys.stderr)
        self._terminal = terminal
        self._lock = threading.Lock()
        self._filter: EntryFilter | None = None
        self._state = RenderState()
        self.line_limit = line_limit
        self.source_root = source_root

    @property
    def terminal(self) -> Terminal:
        return self._terminal

    @property
    def stream(self) -> TextIO:
        return self._terminal.stream

    @property
    def filter(self) -> EntryFilter | None:
        """Currently installed filter, ``None`` meaning accept everything."""

        return self._filter

    @property
    def state(self) -> RenderState:
        return self._state

    def install(self, entry_filter: EntryFilter | None) -> None:
        """Replace the active filter; the last installed filter wins."""

        with self._lock:
            self._filter = entry_filter
        _logger.debug(
            "filter-installed",
            filter=type(entry_filter).__name__ if entry_filter else None,
        )

    def use_terminal(self, terminal: Terminal) -> None:
        """Switch to a different terminal and forget the rendered line."""

        with self._lock:
            self._terminal = terminal
            self._state = RenderState()

    def reset(self) -> None:
        """Forget the last rendered entry so the next one is appended."""

        with self._lock:
            self._state = RenderState()

    def emit(self, entry: Entry) -> None:
        """Filter, render and write ``entry``.

        Output failures are swallowed. An entry with an unknown category or
        severity raises :class:`~replog.log.errors.UnknownEnumerationError`.
        """

        with self._lock:
            active = self._filter
            if active is not None and not active.accept(entry):
                return

            state = self._state
            if state.holding and entry == state.last_entry:
                repeat_count = state.repeat_count + 1
                rendered = entry.with_repeat_count(repeat_count)
            else:
                repeat_count = 0
                rendered = entry.with_repeat_count(0)

            terminal = self._terminal
            columns = terminal.query_columns() if terminal.interactive else None
            rows = 0
            if repeat_count and columns:
                measured = columns if terminal.reflows else state.last_columns
                rows = rows_occupied(state.last_width, measured or columns)

            try:
                width = self._render(rendered, rows)
            except (OSError, ValueError):
                # Closed or broken streams; logging never fails the caller.
                width = 0

            self._state = RenderState(
                last_entry=rendered.with_repeat_count(0),
                last_width=width,
                last_columns=columns,
                repeat_count=repeat_count,
            )

    def _render(self, entry: Entry, erase_rows: int) -> int:
        terminal = self._terminal
        if erase_rows:
            terminal.erase_rows(erase_rows)
        terminal.set_color(entry.severity)
        try:
            width = print_message(entry, terminal.stream, self.line_limit)
        finally:
            terminal.restore_color()
        terminal.stream.flush()
        return width

    def log(
        self,
        category: Category,
        severity: Severity,
        template: str,
        *args: Any,
        stacklevel: int = 1,
        **kwargs: Any,
    ) -> None:
        """Build an entry for the calling frame and emit it.

        Example:
            >>> import io
            >>> backend = TerminalBackend(io.StringIO())
            >>> backend.log(Category.LOADER, Severity.WARNING, "{} missing", "rom")
            >>> "Warning" in backend.stream.getvalue()
            True
        """

        frame = sys._getframe(stacklevel)
        code = frame.f_code
        entry = create_entry(
            category,
            severity,
            code.co_filename,
            frame.f_lineno,
            code.co_name,
            template,
            *args,
            root=self.source_root,
            **kwargs,
        )
        self.emit(entry)


__all__ = ["RenderState", "TerminalBackend"]
