"""Tests for :mod:`replog.log.terminal`."""

from __future__ import annotations

import io
import sys

import pytest

from replog.log.errors import UnknownEnumerationError
from replog.log.terminal import (
    AnsiTerminal,
    PlainStream,
    color_enabled,
    probe_terminal,
    rows_occupied,
)
from replog.log.types import Severity


class _TtyBuffer(io.StringIO):
    def isatty(self) -> bool:
        return True


@pytest.mark.parametrize(
    ("width", "columns", "rows"),
    [(0, 80, 0), (1, 80, 1), (80, 80, 1), (81, 80, 2), (100, 40, 3), (10, 0, 0)],
)
def test_rows_occupied(width: int, columns: int, rows: int) -> None:
    assert rows_occupied(width, columns) == rows


def test_probe_non_tty_returns_plain_stream() -> None:
    terminal = probe_terminal(io.StringIO())

    assert isinstance(terminal, PlainStream)
    assert not terminal.interactive
    assert terminal.color is False
    assert terminal.query_columns() is None


def test_probe_non_tty_can_force_color() -> None:
    terminal = probe_terminal(io.StringIO(), color="always")

    assert isinstance(terminal, PlainStream)
    assert terminal.color is True


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX terminal variant")
def test_probe_tty_returns_ansi_terminal(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("NO_COLOR", raising=False)

    terminal = probe_terminal(_TtyBuffer())

    assert type(terminal) is AnsiTerminal
    assert terminal.interactive
    assert terminal.color is True


def test_color_enabled_honors_no_color(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NO_COLOR", "1")

    assert not color_enabled("auto", interactive=True)
    assert color_enabled("always", interactive=False)
    assert not color_enabled("never", interactive=True)


def test_ansi_query_columns_without_file_descriptor() -> None:
    assert AnsiTerminal(io.StringIO()).query_columns() is None


@pytest.mark.parametrize(
    ("severity", "code"),
    [
        (Severity.TRACE, "\x1b[1;30m"),
        (Severity.DEBUG, "\x1b[0;36m"),
        (Severity.INFO, "\x1b[0;37m"),
        (Severity.WARNING, "\x1b[1;33m"),
        (Severity.ERROR, "\x1b[1;31m"),
        (Severity.CRITICAL, "\x1b[1;35m"),
    ],
)
def test_ansi_colors_per_severity(severity: Severity, code: str) -> None:
    stream = io.StringIO()
    terminal = AnsiTerminal(stream)

    terminal.set_color(severity)
    terminal.restore_color()

    assert stream.getvalue() == f"{code}\x1b[0m"


def test_ansi_without_color_writes_nothing() -> None:
    stream = io.StringIO()
    terminal = AnsiTerminal(stream, color=False)

    terminal.set_color(Severity.ERROR)
    terminal.restore_color()

    assert stream.getvalue() == ""


def test_unknown_severity_color_is_fatal() -> None:
    terminal = AnsiTerminal(io.StringIO(), color=False)

    with pytest.raises(UnknownEnumerationError):
        terminal.set_color(42)  # type: ignore[arg-type]


def test_ansi_erase_moves_up_and_clears() -> None:
    stream = io.StringIO()

    AnsiTerminal(stream).erase_rows(2)
    AnsiTerminal(stream).erase_rows(0)

    assert stream.getvalue() == "\x1b[2A\r\x1b[J"


def test_plain_stream_never_moves_the_cursor() -> None:
    stream = io.StringIO()

    PlainStream(stream).erase_rows(3)

    assert stream.getvalue() == ""
