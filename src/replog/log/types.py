"""Category and severity enumerations with their display names."""

from __future__ import annotations

from enum import Enum, IntEnum, auto
from types import MappingProxyType
from typing import Mapping

from replog.log.errors import UnknownEnumerationError


class Category(Enum):
    """Subsystem tags attached to every log entry."""

    LOG = auto()
    COMMON = auto()
    COMMON_FILESYSTEM = auto()
    COMMON_MEMORY = auto()
    CORE = auto()
    CORE_TIMING = auto()
    CONFIG = auto()
    DEBUG = auto()
    DEBUG_BREAKPOINT = auto()
    KERNEL = auto()
    SERVICE = auto()
    SERVICE_FS = auto()
    SERVICE_HID = auto()
    SERVICE_NETWORK = auto()
    FRONTEND = auto()
    RENDER = auto()
    RENDER_SOFTWARE = auto()
    RENDER_OPENGL = auto()
    AUDIO = auto()
    AUDIO_SINK = auto()
    LOADER = auto()
    INPUT = auto()
    NETWORK = auto()


class Severity(IntEnum):
    """Ordered severity of a log entry."""

    TRACE = 0
    DEBUG = 1
    INFO = 2
    WARNING = 3
    ERROR = 4
    CRITICAL = 5


def _category_display_name(category: Category) -> str:
    parts = category.name.split("_")
    head = parts[0].capitalize()
    # Sub-category acronyms (FS, HID, OpenGL) keep their casing.
    tail = [
        _SUBCATEGORY_SPELLING.get(part, part.capitalize()) for part in parts[1:]
    ]
    return ".".join([head, *tail])


_SUBCATEGORY_SPELLING: Mapping[str, str] = {
    "FS": "FS",
    "HID": "HID",
    "OPENGL": "OpenGL",
}

_CATEGORY_NAMES: Mapping[Category, str] = MappingProxyType(
    {category: _category_display_name(category) for category in Category}
)

_SEVERITY_NAMES: Mapping[Severity, str] = MappingProxyType(
    {
        Severity.TRACE: "Trace",
        Severity.DEBUG: "Debug",
        Severity.INFO: "Info",
        Severity.WARNING: "Warning",
        Severity.ERROR: "Error",
        Severity.CRITICAL: "Critical",
    }
)


def get_category_name(category: Category) -> str:
    """Return the display name for ``category``.

    Sub-categories are separated by periods instead of underscores.

    Example:
        >>> get_category_name(Category.RENDER_OPENGL)
        'Render.OpenGL'

    Raises:
        UnknownEnumerationError: If ``category`` is not a known category.
    """

    try:
        return _CATEGORY_NAMES[category]
    except (KeyError, TypeError) as exc:
        raise UnknownEnumerationError(
            f"Unknown log category: {category!r}"
        ) from exc


def get_severity_name(severity: Severity) -> str:
    """Return the display name for ``severity``.

    Example:
        >>> get_severity_name(Severity.WARNING)
        'Warning'

    Raises:
        UnknownEnumerationError: If ``severity`` is not a known severity.
    """

    if not isinstance(severity, Severity):
        raise UnknownEnumerationError(f"Unknown log severity: {severity!r}")
    return _SEVERITY_NAMES[severity]


def iter_category_names() -> tuple[tuple[Category, str], ...]:
    """Return every category paired with its display name."""

    return tuple(_CATEGORY_NAMES.items())


def find_category(name: str) -> Category | None:
    """Return the category whose display name is ``name``, if any.

    Example:
        >>> find_category("Service.FS")
        <Category.SERVICE_FS: 12>
    """

    for category, display in _CATEGORY_NAMES.items():
        if display == name:
            return category
    return None


def find_severity(name: str) -> Severity | None:
    """Return the severity whose display name matches ``name`` (any case)."""

    wanted = name.strip().lower()
    for severity, display in _SEVERITY_NAMES.items():
        if display.lower() == wanted:
            return severity
    return None


__all__ = [
    "Category",
    "Severity",
    "find_category",
    "find_severity",
    "get_category_name",
    "get_severity_name",
    "iter_category_names",
]
