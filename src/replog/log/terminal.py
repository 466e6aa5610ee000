"""Terminal capabilities used by the backend for color and line rewriting.

Three variants are provided and one is selected per output stream by
:func:`probe_terminal`:

* :class:`AnsiTerminal` drives VT100-style terminals with escape sequences.
* :class:`NativeConsole` drives the Windows console through its buffer API.
* :class:`PlainStream` is used for anything that is not a terminal (pipes,
  files, test buffers). It never moves the cursor.
"""

from __future__ import annotations

import ctypes
import io
import os
import sys
from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Mapping, TextIO

from replog.core.logging import get_library_logger
from replog.log.errors import UnknownEnumerationError
from replog.log.types import Severity

_logger = get_library_logger(__name__)

ESC = "\x1b"

_ANSI_RESET = f"{ESC}[0m"
_ANSI_CLEAR_TO_END = f"{ESC}[J"

_ANSI_COLORS: Mapping[Severity, str] = MappingProxyType(
    {
        Severity.TRACE: f"{ESC}[1;30m",  # grey
        Severity.DEBUG: f"{ESC}[0;36m",  # cyan
        Severity.INFO: f"{ESC}[0;37m",  # bright gray
        Severity.WARNING: f"{ESC}[1;33m",  # bright yellow
        Severity.ERROR: f"{ESC}[1;31m",  # bright red
        Severity.CRITICAL: f"{ESC}[1;35m",  # bright magenta
    }
)

_FOREGROUND_BLUE = 0x0001
_FOREGROUND_GREEN = 0x0002
_FOREGROUND_RED = 0x0004
_FOREGROUND_INTENSITY = 0x0008

_CONSOLE_ATTRIBUTES: Mapping[Severity, int] = MappingProxyType(
    {
        Severity.TRACE: _FOREGROUND_INTENSITY,
        Severity.DEBUG: _FOREGROUND_GREEN | _FOREGROUND_BLUE,
        Severity.INFO: _FOREGROUND_RED | _FOREGROUND_GREEN | _FOREGROUND_BLUE,
        Severity.WARNING: _FOREGROUND_RED
        | _FOREGROUND_GREEN
        | _FOREGROUND_INTENSITY,
        Severity.ERROR: _FOREGROUND_RED | _FOREGROUND_INTENSITY,
        Severity.CRITICAL: _FOREGROUND_RED
        | _FOREGROUND_BLUE
        | _FOREGROUND_INTENSITY,
    }
)


def _lookup_color(table: Mapping[Severity, object], severity: Severity):
    try:
        return table[severity]
    except (KeyError, TypeError) as exc:
        raise UnknownEnumerationError(
            f"No color for log severity: {severity!r}"
        ) from exc


def rows_occupied(width: int, columns: int) -> int:
    """Return how many terminal rows a line of ``width`` characters fills.

    Example:
        >>> rows_occupied(81, 80)
        2
        >>> rows_occupied(80, 80)
        1
    """

    if width <= 0 or columns <= 0:
        return 0
    return (width + columns - 1) // columns


class Terminal(ABC):
    """Color and cursor control for one output stream.

    Attributes:
        reflows: Whether the terminal re-wraps earlier output when resized.
            Terminals that reflow must measure the previous line against the
            current width; the others against the width it was written at.
    """

    reflows = False

    def __init__(self, stream: TextIO, *, color: bool = True) -> None:
        self.stream = stream
        self.color = color

    @property
    def interactive(self) -> bool:
        """Whether the cursor can be repositioned on this stream."""

        return True

    @abstractmethod
    def query_columns(self) -> int | None:
        """Return the current column width, or ``None`` when unavailable."""

    @abstractmethod
    def set_color(self, severity: Severity) -> None:
        """Switch the active text attribute to the color of ``severity``."""

    @abstractmethod
    def restore_color(self) -> None:
        """Restore the attribute that was active before :meth:`set_color`."""

    @abstractmethod
    def erase_rows(self, rows: int) -> None:
        """Move up ``rows`` rows to column 0 and clear to the end of screen."""


class AnsiTerminal(Terminal):
    """VT100-compatible terminal driven through escape sequences."""

    def query_columns(self) -> int | None:
        try:
            columns = os.get_terminal_size(self.stream.fileno()).columns
        except (AttributeError, ValueError, OSError, io.UnsupportedOperation):
            return None
        return columns or None

    def set_color(self, severity: Severity) -> None:
        code = _lookup_color(_ANSI_COLORS, severity)
        if self.color:
            self.stream.write(code)

    def restore_color(self) -> None:
        if self.color:
            self.stream.write(_ANSI_RESET)

    def erase_rows(self, rows: int) -> None:
        if rows <= 0:
            return
        self.stream.write(f"{ESC}[{rows}A\r{_ANSI_CLEAR_TO_END}")


class PlainStream(AnsiTerminal):
    """Non-interactive stream such as a pipe, file or in-memory buffer.

    Escape sequences for color are only written when explicitly requested.
    """

    def __init__(self, stream: TextIO, *, color: bool = False) -> None:
        super().__init__(stream, color=color)

    @property
    def interactive(self) -> bool:
        return False

    def query_columns(self) -> int | None:
        return None

    def erase_rows(self, rows: int) -> None:
        return None


class _Coord(ctypes.Structure):
    _fields_ = [("X", ctypes.c_short), ("Y", ctypes.c_short)]


class _SmallRect(ctypes.Structure):
    _fields_ = [
        ("Left", ctypes.c_short),
        ("Top", ctypes.c_short),
        ("Right", ctypes.c_short),
        ("Bottom", ctypes.c_short),
    ]


class _ConsoleScreenBufferInfo(ctypes.Structure):
    _fields_ = [
        ("dwSize", _Coord),
        ("dwCursorPosition", _Coord),
        ("wAttributes", ctypes.c_ushort),
        ("srWindow", _SmallRect),
        ("dwMaximumWindowSize", _Coord),
    ]


class NativeConsole(Terminal):
    """Windows console driven through the console screen buffer API.

    The Windows console re-wraps its buffer on resize, so the previous line
    is measured against the width at erase time.

    Raises:
        OSError: If the stream is not attached to a console buffer.
    """

    reflows = True

    def __init__(self, stream: TextIO, *, color: bool = True) -> None:
        super().__init__(stream, color=color)
        import msvcrt  # noqa: PLC0415 - only importable on Windows

        self._kernel32 = ctypes.WinDLL("kernel32", use_last_error=True)
        self._handle = ctypes.c_void_p(msvcrt.get_osfhandle(stream.fileno()))
        self._saved_attributes: int | None = None
        self._buffer_info()

    def _buffer_info(self) -> _ConsoleScreenBufferInfo:
        info = _ConsoleScreenBufferInfo()
        if not self._kernel32.GetConsoleScreenBufferInfo(
            self._handle, ctypes.byref(info)
        ):
            raise ctypes.WinError(ctypes.get_last_error())
        return info

    def query_columns(self) -> int | None:
        try:
            columns = self._buffer_info().dwSize.X
        except OSError:
            return None
        return columns or None

    def set_color(self, severity: Severity) -> None:
        attributes = _lookup_color(_CONSOLE_ATTRIBUTES, severity)
        if not self.color:
            return
        self.stream.flush()
        self._saved_attributes = self._buffer_info().wAttributes
        self._kernel32.SetConsoleTextAttribute(self._handle, attributes)

    def restore_color(self) -> None:
        if self._saved_attributes is None:
            return
        self.stream.flush()
        self._kernel32.SetConsoleTextAttribute(
            self._handle, self._saved_attributes
        )
        self._saved_attributes = None

    def erase_rows(self, rows: int) -> None:
        if rows <= 0:
            return
        self.stream.flush()
        info = self._buffer_info()
        origin = _Coord(0, max(info.dwCursorPosition.Y - rows, 0))
        written = ctypes.c_ulong(0)
        cells = rows * info.dwSize.X
        self._kernel32.FillConsoleOutputCharacterW(
            self._handle, ctypes.c_wchar(" "), cells, origin, ctypes.byref(written)
        )
        self._kernel32.FillConsoleOutputAttribute(
            self._handle, info.wAttributes, cells, origin, ctypes.byref(written)
        )
        self._kernel32.SetConsoleCursorPosition(self._handle, origin)


def _is_tty(stream: TextIO) -> bool:
    isatty = getattr(stream, "isatty", None)
    if isatty is None:
        return False
    try:
        return bool(isatty())
    except (OSError, ValueError):
        return False


def color_enabled(mode: str, *, interactive: bool) -> bool:
    """Resolve a ``auto``/``always``/``never`` color mode for a stream.

    ``auto`` honors the ``NO_COLOR`` convention.
    """

    normalized = str(mode).strip().lower()
    if normalized == "always":
        return True
    if normalized == "never":
        return False
    return interactive and not os.environ.get("NO_COLOR")


def probe_terminal(stream: TextIO, *, color: str = "auto") -> Terminal:
    """Select the terminal variant matching ``stream``.

    Example:
        >>> import io
        >>> type(probe_terminal(io.StringIO())).__name__
        'PlainStream'
    """

    interactive = _is_tty(stream)
    use_color = color_enabled(color, interactive=interactive)
    terminal: Terminal
    if not interactive:
        terminal = PlainStream(stream, color=use_color)
    elif sys.platform == "win32":
        try:
            terminal = NativeConsole(stream, color=use_color)
        except (OSError, AttributeError, ValueError, io.UnsupportedOperation):
            # Not a console buffer (e.g. mintty); those speak VT sequences.
            terminal = AnsiTerminal(stream, color=use_color)
    else:
        terminal = AnsiTerminal(stream, color=use_color)

    _logger.debug(
        "terminal-probed",
        variant=type(terminal).__name__,
        color=use_color,
    )
    return terminal


__all__ = [
    "AnsiTerminal",
    "NativeConsole",
    "PlainStream",
    "Terminal",
    "color_enabled",
    "probe_terminal",
    "rows_occupied",
]
