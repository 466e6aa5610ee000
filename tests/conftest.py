"""Shared pytest fixtures for backend rendering tests."""

from __future__ import annotations

import io
from collections.abc import Callable
from datetime import timedelta

import pytest

from replog.log.entry import Entry
from replog.log.terminal import AnsiTerminal
from replog.log.types import Category, Severity


class FixedWidthTerminal(AnsiTerminal):
    """ANSI terminal double reporting a configurable column width.

    ``columns`` may be changed between calls to simulate a resize, or set to
    ``None`` to simulate a failing width query.
    """

    def __init__(
        self,
        stream: io.StringIO,
        *,
        columns: int | None = 80,
        color: bool = False,
    ) -> None:
        super().__init__(stream, color=color)
        self.columns = columns

    def query_columns(self) -> int | None:
        return self.columns


class ReflowingTerminal(FixedWidthTerminal):
    """Terminal double that re-wraps earlier output on resize."""

    reflows = True


@pytest.fixture
def buffer() -> io.StringIO:
    """Return an in-memory output stream."""

    return io.StringIO()


@pytest.fixture
def terminal(buffer: io.StringIO) -> FixedWidthTerminal:
    """Return an 80 column ANSI terminal writing into ``buffer``."""

    return FixedWidthTerminal(buffer)


@pytest.fixture
def make_terminal(
    buffer: io.StringIO,
) -> Callable[..., FixedWidthTerminal]:
    """Build terminal doubles writing into ``buffer``."""

    def _make(
        *,
        columns: int | None = 80,
        color: bool = False,
        reflows: bool = False,
    ) -> FixedWidthTerminal:
        terminal_cls = ReflowingTerminal if reflows else FixedWidthTerminal
        return terminal_cls(buffer, columns=columns, color=color)

    return _make


@pytest.fixture
def make_entry() -> Callable[..., Entry]:
    """Build entries with sensible defaults for rendering tests."""

    def _make(
        message: str = "boot complete",
        *,
        category: Category = Category.CORE,
        severity: Severity = Severity.INFO,
        location: str = "core/boot.py:start:42",
        seconds: float = 0.0,
        repeat_count: int = 0,
    ) -> Entry:
        return Entry(
            timestamp=timedelta(seconds=seconds),
            category=category,
            severity=severity,
            location=location,
            message=message,
            repeat_count=repeat_count,
        )

    return _make
