"""Custom exceptions for the terminal logging backend."""

from __future__ import annotations


class ReplogError(Exception):
    """Base error raised by :mod:`replog`."""


class UnknownEnumerationError(ReplogError, RuntimeError):
    """Raised when a category or severity has no entry in its lookup table.

    This always indicates a programming error at the call site and is never
    recovered from by the backend.
    """


class FilterParseError(ReplogError, ValueError):
    """Raised when a filter string contains an invalid rule."""

    def __init__(self, rule: str, reason: str) -> None:
        super().__init__(f"Invalid filter rule {rule!r}: {reason}")
        self.rule = rule
        self.reason = reason


__all__ = [
    "ReplogError",
    "UnknownEnumerationError",
    "FilterParseError",
]
