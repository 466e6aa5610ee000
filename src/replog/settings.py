"""Apply configuration to a running terminal backend.

Configuration front ends (a settings dialog, a CLI, a reload signal) edit
several values and then commit them together. Committing rebuilds the
filter from the configured filter string and installs it, so verbosity
changes take effect on the next log call.

Example:
    >>> import io
    >>> from replog.core.config import ReplogConfig
    >>> backend = build_backend(ReplogConfig(), stream=io.StringIO())
    >>> session = SettingsSession(backend, ReplogConfig())
    >>> session.stage(log_filter="*:Error")
    >>> session.commit().log_filter
    '*:Error'
"""

from __future__ import annotations

import sys
from typing import Any, TextIO

from replog.core.config import ReplogConfig
from replog.core.logging import get_library_logger
from replog.log.backend import TerminalBackend
from replog.log.filter import Filter, parse_filter
from replog.log.terminal import probe_terminal


def _resolve_stream(config: ReplogConfig) -> TextIO:
    return sys.stdout if config.stream == "stdout" else sys.stderr


def build_backend(
    config: ReplogConfig,
    *,
    stream: TextIO | None = None,
) -> TerminalBackend:
    """Create a backend for ``config`` with its filter installed.

    Args:
        config: Validated configuration.
        stream: Output stream override; the configured standard stream is
            used when omitted.
    """

    target = stream if stream is not None else _resolve_stream(config)
    backend = TerminalBackend(
        terminal=probe_terminal(target, color=config.color.value),
        line_limit=config.line_limit,
        source_root=config.source_root,
    )
    backend.install(parse_filter(config.log_filter))
    return backend


def apply_settings(
    backend: TerminalBackend,
    config: ReplogConfig,
    *,
    previous: ReplogConfig | None = None,
) -> Filter:
    """Push ``config`` into ``backend`` and return the installed filter.

    The terminal is only re-probed when the color mode or stream changed,
    which keeps the on-screen repeat state otherwise intact.
    """

    logger = get_library_logger(__name__, action="apply-settings")

    backend.line_limit = config.line_limit
    backend.source_root = config.source_root

    if previous is not None and previous.stream != config.stream:
        target = _resolve_stream(config)
    else:
        target = backend.stream
    if previous is not None and (
        previous.color != config.color or target is not backend.stream
    ):
        backend.use_terminal(probe_terminal(target, color=config.color.value))

    entry_filter = parse_filter(config.log_filter)
    backend.install(entry_filter)
    logger.debug(
        "settings-applied",
        log_filter=config.log_filter,
        color=config.color.value,
        stream=config.stream,
    )
    return entry_filter


class SettingsSession:
    """Stage configuration edits and commit them as one batch.

    Staged values are not validated or applied until :meth:`commit`, so a
    front end can apply each of its pages in turn without triggering a
    filter reinstall per page.
    """

    def __init__(self, backend: TerminalBackend, config: ReplogConfig) -> None:
        self.backend = backend
        self.config = config
        self._staged: dict[str, Any] = {}

    @property
    def pending(self) -> dict[str, Any]:
        """Values staged since the last commit."""

        return dict(self._staged)

    def stage(self, **changes: Any) -> None:
        """Record ``changes`` for the next commit."""

        self._staged.update(changes)

    def discard(self) -> None:
        """Drop staged values without applying them."""

        self._staged.clear()

    def commit(self) -> ReplogConfig:
        """Validate staged values, apply them and return the new config.

        Raises:
            pydantic.ValidationError: If the staged values are invalid. The
                backend and the current configuration are left untouched.
        """

        payload = self.config.model_dump()
        payload.update(self._staged)
        updated = ReplogConfig(**payload)

        apply_settings(self.backend, updated, previous=self.config)
        self.config = updated
        self._staged.clear()
        get_library_logger(__name__).info(
            "settings-committed",
            log_filter=updated.log_filter,
        )
        return updated


__all__ = ["SettingsSession", "apply_settings", "build_backend"]
