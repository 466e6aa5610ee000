"""Per-category severity filtering for log entries."""

from __future__ import annotations

from typing import Iterable, Mapping, Protocol, runtime_checkable

from replog.core.logging import get_library_logger
from replog.log.entry import Entry
from replog.log.errors import FilterParseError, UnknownEnumerationError
from replog.log.types import (
    Category,
    Severity,
    find_category,
    find_severity,
    get_category_name,
)

_logger = get_library_logger(__name__)

_WILDCARD = "*"
_SUBCATEGORY_SUFFIX = ".*"


@runtime_checkable
class EntryFilter(Protocol):
    """Policy deciding whether an entry reaches the terminal."""

    def accept(self, entry: Entry) -> bool:
        """Return ``True`` when ``entry`` should be rendered."""


class Filter:
    """Filter entries by a minimum severity tracked per category.

    Example:
        >>> f = Filter(Severity.WARNING)
        >>> f.parse("Render.*:Debug")
        >>> f.check(Category.RENDER_OPENGL, Severity.DEBUG)
        True
        >>> f.check(Category.CORE, Severity.INFO)
        False
    """

    def __init__(self, default_severity: Severity = Severity.INFO) -> None:
        self._levels: dict[Category, Severity] = {}
        self.reset_all(default_severity)

    def reset_all(self, severity: Severity) -> None:
        """Apply ``severity`` as the threshold of every category."""

        for category in Category:
            self._levels[category] = severity

    def set_category_severity(
        self,
        category: Category,
        severity: Severity,
    ) -> None:
        """Set the minimum severity accepted for ``category``."""

        self._levels[category] = severity

    def threshold(self, category: Category) -> Severity:
        """Return the minimum severity accepted for ``category``.

        Raises:
            UnknownEnumerationError: If ``category`` is not a known category.
        """

        try:
            return self._levels[category]
        except (KeyError, TypeError) as exc:
            raise UnknownEnumerationError(
                f"Unknown log category: {category!r}"
            ) from exc

    def thresholds(self) -> Mapping[Category, Severity]:
        """Return a snapshot of every category threshold."""

        return dict(self._levels)

    def check(self, category: Category, severity: Severity) -> bool:
        """Return ``True`` if ``severity`` passes the ``category`` threshold."""

        return severity >= self.threshold(category)

    def accept(self, entry: Entry) -> bool:
        return self.check(entry.category, entry.severity)

    def parse(self, text: str, *, strict: bool = False) -> None:
        """Apply a whitespace separated list of ``name:severity`` rules.

        ``*`` as a name resets every category. ``Name.*`` applies to the
        category and all of its sub-categories. Rules are applied in order,
        so later rules override earlier ones.

        Args:
            text: Filter string such as ``"*:Info Render.OpenGL:Debug"``.
            strict: Raise on the first invalid rule instead of skipping it.

        Raises:
            FilterParseError: If ``strict`` is set and a rule is invalid.
        """

        for rule in text.split():
            try:
                self._apply_rule(rule)
            except FilterParseError as exc:
                if strict:
                    raise
                _logger.warning(
                    "filter-rule-skipped",
                    rule=exc.rule,
                    reason=exc.reason,
                )

    def _apply_rule(self, rule: str) -> None:
        name, separator, severity_name = rule.rpartition(":")
        if not separator or not name:
            raise FilterParseError(rule, "expected <category>:<severity>")

        severity = find_severity(severity_name)
        if severity is None:
            raise FilterParseError(rule, f"unknown severity {severity_name!r}")

        if name == _WILDCARD:
            self.reset_all(severity)
            return

        for category in self._match_categories(rule, name):
            self._levels[category] = severity

    def _match_categories(self, rule: str, name: str) -> Iterable[Category]:
        if name.endswith(_SUBCATEGORY_SUFFIX):
            parent = name[: -len(_SUBCATEGORY_SUFFIX)]
            if find_category(parent) is None:
                raise FilterParseError(rule, f"unknown category {parent!r}")
            prefix = parent + "."
            return [
                category
                for category in Category
                if get_category_name(category) == parent
                or get_category_name(category).startswith(prefix)
            ]

        category = find_category(name)
        if category is None:
            raise FilterParseError(rule, f"unknown category {name!r}")
        return [category]


def parse_filter(
    text: str,
    *,
    default_severity: Severity = Severity.INFO,
    strict: bool = False,
) -> Filter:
    """Return a new :class:`Filter` configured from ``text``.

    Example:
        >>> parse_filter("*:Error").check(Category.CORE, Severity.WARNING)
        False
    """

    result = Filter(default_severity)
    result.parse(text, strict=strict)
    return result


__all__ = ["EntryFilter", "Filter", "parse_filter"]
