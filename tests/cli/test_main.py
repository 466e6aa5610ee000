"""Tests for the :mod:`replog.__main__` entrypoint."""

from __future__ import annotations

import sys

import pytest

from replog.__main__ import main


def test_main_invokes_cli(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.delenv("REPLOG_LOG_LEVEL", raising=False)
    monkeypatch.setenv("REPLOG_FILTER", "*:Trace")
    monkeypatch.setattr(
        sys,
        "argv",
        ["replog", "emit", "ready", "--stream", "stdout", "--color", "never"],
    )

    configured: dict[str, object] = {}

    def fake_configure_logging(*, level: str, console=None) -> None:
        configured["level"] = level

    monkeypatch.setattr("replog.cli.configure_logging", fake_configure_logging)

    with pytest.raises(SystemExit) as exc:
        main()

    assert exc.value.code == 0
    assert configured["level"] == "INFO"
    assert "[Log] Info" in capsys.readouterr().out
