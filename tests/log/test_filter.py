"""Tests for :mod:`replog.log.filter`."""

from __future__ import annotations

import logging

import pytest

from replog.log.errors import FilterParseError, UnknownEnumerationError
from replog.log.filter import EntryFilter, Filter, parse_filter
from replog.log.types import Category, Severity


def test_default_filter_accepts_info_and_above(make_entry) -> None:
    entry_filter = Filter()

    assert entry_filter.accept(make_entry(severity=Severity.INFO))
    assert entry_filter.accept(make_entry(severity=Severity.CRITICAL))
    assert not entry_filter.accept(make_entry(severity=Severity.DEBUG))


def test_filter_satisfies_entry_filter_protocol() -> None:
    assert isinstance(Filter(), EntryFilter)


def test_set_category_severity_only_affects_that_category() -> None:
    entry_filter = Filter(Severity.WARNING)
    entry_filter.set_category_severity(Category.LOADER, Severity.TRACE)

    assert entry_filter.check(Category.LOADER, Severity.TRACE)
    assert not entry_filter.check(Category.CORE, Severity.INFO)
    assert entry_filter.threshold(Category.LOADER) is Severity.TRACE


def test_parse_applies_rules_in_order() -> None:
    entry_filter = parse_filter("*:Error Render.OpenGL:Debug")

    assert entry_filter.check(Category.RENDER_OPENGL, Severity.DEBUG)
    assert not entry_filter.check(Category.RENDER, Severity.WARNING)
    assert not entry_filter.check(Category.CORE, Severity.WARNING)


def test_wildcard_resets_earlier_rules() -> None:
    entry_filter = parse_filter("Core:Trace *:Critical")

    assert not entry_filter.check(Category.CORE, Severity.ERROR)


def test_subcategory_rule_covers_parent_and_children() -> None:
    entry_filter = parse_filter("*:Critical Service.*:Debug")

    assert entry_filter.check(Category.SERVICE, Severity.DEBUG)
    assert entry_filter.check(Category.SERVICE_FS, Severity.DEBUG)
    assert entry_filter.check(Category.SERVICE_HID, Severity.DEBUG)
    assert not entry_filter.check(Category.SERVICE, Severity.TRACE)
    assert not entry_filter.check(Category.CORE, Severity.ERROR)


def test_severity_names_are_case_insensitive() -> None:
    entry_filter = parse_filter("*:warning")

    assert entry_filter.threshold(Category.AUDIO) is Severity.WARNING


def test_invalid_rules_are_skipped_and_reported(
    caplog: pytest.LogCaptureFixture,
) -> None:
    with caplog.at_level(logging.WARNING, logger="replog.log.filter"):
        entry_filter = parse_filter("*:Warning Bogus:Debug Core:Loud Core Audio:Trace")

    assert entry_filter.threshold(Category.CORE) is Severity.WARNING
    assert entry_filter.threshold(Category.AUDIO) is Severity.TRACE
    skipped = [
        record for record in caplog.records if record.getMessage() == "filter-rule-skipped"
    ]
    assert len(skipped) == 3


@pytest.mark.parametrize(
    "rule",
    ["Bogus:Debug", "Core:Loud", "Core", ":Info", "Nope.*:Info"],
)
def test_strict_parsing_raises(rule: str) -> None:
    with pytest.raises(FilterParseError) as excinfo:
        parse_filter(rule, strict=True)

    assert excinfo.value.rule == rule


def test_thresholds_snapshot_is_detached() -> None:
    entry_filter = Filter()
    snapshot = entry_filter.thresholds()
    entry_filter.reset_all(Severity.ERROR)

    assert snapshot[Category.CORE] is Severity.INFO


def test_unknown_category_is_fatal(make_entry) -> None:
    entry = make_entry(category="Core")  # type: ignore[arg-type]

    with pytest.raises(UnknownEnumerationError):
        Filter().accept(entry)


@pytest.mark.parametrize("category", ["Core", 99, None])
def test_threshold_of_unknown_category_is_fatal(category: object) -> None:
    with pytest.raises(UnknownEnumerationError):
        Filter().threshold(category)  # type: ignore[arg-type]
