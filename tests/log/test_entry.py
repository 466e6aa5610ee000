"""Tests for :mod:`replog.log.entry`."""

from __future__ import annotations

from dataclasses import FrozenInstanceError
from datetime import timedelta

import pytest

from replog.log.entry import (
    create_entry,
    elapsed,
    equals_ignoring_timestamp,
    format_message,
    make_location,
    trim_source_path,
)
from replog.log.types import Category, Severity


def test_entries_differing_only_in_timestamp_are_equal(make_entry) -> None:
    first = make_entry(seconds=1.0)
    second = make_entry(seconds=9.5)

    assert equals_ignoring_timestamp(first, second)
    assert first == second
    assert hash(first) == hash(second)


def test_repeat_count_is_not_part_of_identity(make_entry) -> None:
    assert make_entry() == make_entry(repeat_count=4)


@pytest.mark.parametrize(
    "changes",
    [
        {"message": "boot failed"},
        {"category": Category.LOADER},
        {"severity": Severity.WARNING},
        {"location": "core/boot.py:start:43"},
    ],
)
def test_entries_differing_in_identity_fields_are_not_equal(
    make_entry,
    changes: dict,
) -> None:
    assert make_entry() != make_entry(**changes)


def test_entry_is_immutable(make_entry) -> None:
    entry = make_entry()

    with pytest.raises(FrozenInstanceError):
        entry.message = "changed"  # type: ignore[misc]


def test_with_repeat_count_returns_new_entry(make_entry) -> None:
    entry = make_entry()
    repeated = entry.with_repeat_count(3)

    assert repeated.repeat_count == 3
    assert entry.repeat_count == 0
    assert repeated.timestamp == entry.timestamp


@pytest.mark.parametrize(
    ("path", "root", "expected"),
    [
        ("/build/src/foo/bar.cpp", "src", "foo/bar.cpp"),
        ("/build/nomatch.cpp", "src", "/build/nomatch.cpp"),
        ("/a/src/b/src/c.py", "src", "c.py"),
        ("C:\\work\\src\\core\\boot.cpp", "src", "core\\boot.cpp"),
        ("/build/srcs/x.cpp", "src", "/build/srcs/x.cpp"),
        ("/build/x.cpp", "", "build/x.cpp"),
        ("a/src/", "src", ""),
        ("", "src", ""),
    ],
)
def test_trim_source_path(path: str, root: str, expected: str) -> None:
    assert trim_source_path(path, root) == expected


def test_make_location_trims_and_joins() -> None:
    location = make_location("/work/src/core/boot.py", 42, "start")

    assert location == "core/boot.py:start:42"


def test_format_message_applies_arguments() -> None:
    assert format_message("loaded {} of {}", (3, 5)) == "loaded 3 of 5"
    assert format_message("{name} ready", (), {"name": "gpu"}) == "gpu ready"


def test_format_message_without_arguments_is_verbatim() -> None:
    assert format_message("literal {braces}") == "literal {braces}"


@pytest.mark.parametrize(
    ("template", "args"),
    [
        ("{} and {}", (1,)),
        ("{missing}", (1,)),
        ("{:d}", ("text",)),
        ("unbalanced {", (1,)),
    ],
)
def test_format_message_degrades_on_malformed_template(
    template: str,
    args: tuple,
) -> None:
    message = format_message(template, args)

    assert message.startswith(template)
    assert "format error" in message
    assert repr(args) in message


class _Unprintable:
    def __str__(self) -> str:
        raise ValueError("no str")

    def __repr__(self) -> str:
        raise ValueError("no repr")


class _ExplodingFormat:
    def __format__(self, spec: str) -> str:
        raise RuntimeError("boom")

    def __repr__(self) -> str:
        return "<exploding>"


def test_format_message_survives_unrepresentable_arguments() -> None:
    message = format_message("value {}", (_Unprintable(),))

    assert message.startswith("value {} (format error: ValueError: no str")
    assert "_Unprintable object at 0x" in message


def test_format_message_survives_any_format_failure() -> None:
    message = format_message("value {}", (_ExplodingFormat(),))

    assert message == (
        "value {} (format error: RuntimeError: boom; args=(<exploding>,))"
    )


def test_format_message_guards_keyword_arguments() -> None:
    message = format_message("{a} {b}", (), {"a": _Unprintable(), "b": 2})

    assert "format error: ValueError" in message
    assert "'b': 2" in message


def test_elapsed_is_monotonic_and_non_negative() -> None:
    first = elapsed()
    second = elapsed()

    assert first >= timedelta(0)
    assert second >= first


def test_create_entry_builds_location_and_message() -> None:
    entry = create_entry(
        Category.RENDER_OPENGL,
        Severity.DEBUG,
        "/home/dev/project/src/video/gl.py",
        17,
        "draw",
        "frame {} took {:.1f}ms",
        12,
        3.5,
    )

    assert entry.category is Category.RENDER_OPENGL
    assert entry.severity is Severity.DEBUG
    assert entry.location == "video/gl.py:draw:17"
    assert entry.message == "frame 12 took 3.5ms"
    assert entry.repeat_count == 0
    assert entry.timestamp >= timedelta(0)


def test_create_entry_respects_custom_root() -> None:
    entry = create_entry(
        Category.CORE,
        Severity.INFO,
        "/opt/app/lib/core.py",
        1,
        "main",
        "hello",
        root="app",
    )

    assert entry.location == "lib/core.py:main:1"
