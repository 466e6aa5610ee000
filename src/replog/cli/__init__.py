"""Command-line interface primitives for :mod:`replog`.

This module exposes the Typer application behind the ``replog`` console
script: emitting entries through a configured backend, inspecting category
and severity names, validating filter strings and rendering configuration.

Example:
    >>> import typer
    >>> from replog.cli import create_app
    >>> app = create_app()
    >>> isinstance(app, typer.Typer)
    True
"""

from __future__ import annotations

import os
import time
import tomllib
from pathlib import Path
from typing import Any

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from replog.core.config import (
    ReplogConfig,
    env_overrides,
    load_config,
    read_user_config,
    render_user_config,
)
from replog.core.logging import configure_logging, get_logger
from replog.log.errors import FilterParseError
from replog.log.filter import parse_filter
from replog.log.types import (
    Category,
    Severity,
    find_category,
    find_severity,
    get_category_name,
    get_severity_name,
    iter_category_names,
)
from replog.settings import build_backend

_app_help = (
    "Repeat-collapsing terminal log renderer."
    "\n\n"
    "Use `replog emit` to see how repeated entries collapse into one line."
)

_CONFIG_OPTION_HELP = "Path to a replog TOML configuration file."


def _fail(message: str) -> typer.Exit:
    """Report ``message`` on stderr and return the exit to raise."""

    typer.secho(message, fg=typer.colors.RED, err=True)
    return typer.Exit(code=1)


def _resolve_config(
    config_path: Path | None,
    cli_overrides: dict[str, Any] | None = None,
) -> ReplogConfig:
    """Load configuration from the file/env/CLI precedence stack."""

    user_config = None
    if config_path is not None:
        try:
            user_config = read_user_config(config_path)
        except (OSError, tomllib.TOMLDecodeError) as exc:
            raise _fail(f"Config error: {exc}") from exc

    overrides = {
        key: value
        for key, value in (cli_overrides or {}).items()
        if value is not None
    }
    try:
        return load_config(
            user_config=user_config,
            env_config=env_overrides(os.environ),
            cli_overrides=overrides,
        )
    except ValidationError as exc:
        raise _fail(f"Config error: {exc}") from exc


def _parse_category(raw: str) -> Category:
    category = find_category(raw.strip())
    if category is None:
        raise typer.BadParameter(
            f"Unknown category: {raw!r} (see `replog names`)",
            param_hint="--category",
        )
    return category


def _parse_severity(raw: str) -> Severity:
    severity = find_severity(raw)
    if severity is None:
        raise typer.BadParameter(
            f"Unknown severity: {raw!r} (see `replog names`)",
            param_hint="--severity",
        )
    return severity


def _build_names_table() -> Table:
    table = Table(title="Categories and severities")
    table.add_column("Kind")
    table.add_column("Name")
    for _, name in iter_category_names():
        table.add_row("category", name)
    for severity in Severity:
        table.add_row("severity", get_severity_name(severity))
    return table


def create_app() -> "typer.Typer":
    """Return the Typer application powering the ``replog`` CLI.

    Example:
        >>> import typer
        >>> from replog.cli import create_app
        >>> cli = create_app()
        >>> isinstance(cli, typer.Typer)
        True

    Returns:
        A configured Typer application ready to be invoked by ``replog``.
    """

    app = typer.Typer(
        help=_app_help,
        no_args_is_help=True,
        rich_markup_mode="rich",
        invoke_without_command=False,
        cls=typer.core.TyperGroup,
    )

    @app.callback()
    def main_callback() -> None:
        """Top-level CLI callback ensuring subcommands are dispatched."""

        return None

    @app.command("emit", help="Emit a message through the terminal backend.")
    def emit_command(  # noqa: PLR0913 - CLI surface area intentionally explicit
        message: str = typer.Argument(..., help="Message text to log."),
        category: str = typer.Option(
            "Log",
            "--category",
            "-c",
            help="Category display name, e.g. Render.OpenGL.",
        ),
        severity: str = typer.Option(
            "Info",
            "--severity",
            "-s",
            help="Trace, Debug, Info, Warning, Error or Critical.",
        ),
        repeat: int = typer.Option(
            1,
            "--repeat",
            "-n",
            min=1,
            help="Number of consecutive times to emit the message.",
        ),
        delay: float = typer.Option(
            0.0,
            "--delay",
            min=0.0,
            help="Seconds to wait between repeats.",
        ),
        log_filter: str | None = typer.Option(
            None,
            "--filter",
            "-f",
            help="Filter string overriding the configured one.",
        ),
        color: str | None = typer.Option(
            None,
            "--color",
            help="Color mode: auto, always or never.",
        ),
        stream: str | None = typer.Option(
            None,
            "--stream",
            help="Output stream: stderr or stdout.",
        ),
        config_path: Path | None = typer.Option(
            None,
            "--config",
            help=_CONFIG_OPTION_HELP,
        ),
    ) -> None:
        """Emit ``message`` one or more times.

        Example:
            >>> from typer.testing import CliRunner
            >>> runner = CliRunner()
            >>> result = runner.invoke(create_app(), ["emit", "--help"])
            >>> result.exit_code
            0
        """

        entry_category = _parse_category(category)
        entry_severity = _parse_severity(severity)
        config = _resolve_config(
            config_path,
            {"log_filter": log_filter, "color": color, "stream": stream},
        )

        configure_logging(level=config.log_level)
        logger = get_logger(__name__, command="emit")

        backend = build_backend(config)
        for index in range(repeat):
            if index and delay:
                time.sleep(delay)
            backend.log(entry_category, entry_severity, message)

        logger.debug(
            "emit-complete",
            category=get_category_name(entry_category),
            severity=get_severity_name(entry_severity),
            repeat=repeat,
        )

    @app.command("names", help="List category and severity display names.")
    def names_command() -> None:
        Console().print(_build_names_table())

    @app.command(
        "check-filter",
        help="Validate a filter string and show the resulting thresholds.",
    )
    def check_filter_command(
        filter_text: str = typer.Argument(
            ...,
            metavar="FILTER",
            help='Filter string such as "*:Info Render.*:Debug".',
        ),
    ) -> None:
        try:
            entry_filter = parse_filter(filter_text, strict=True)
        except FilterParseError as exc:
            raise _fail(f"Filter error: {exc}") from exc

        table = Table(title="Effective thresholds")
        table.add_column("Category")
        table.add_column("Minimum severity")
        for category, threshold in entry_filter.thresholds().items():
            table.add_row(
                get_category_name(category),
                get_severity_name(threshold),
            )
        Console().print(table)

    @app.command("config", help="Show or write the effective configuration.")
    def config_command(
        config_path: Path | None = typer.Option(
            None,
            "--config",
            help=_CONFIG_OPTION_HELP,
        ),
        write: Path | None = typer.Option(
            None,
            "--write",
            "-w",
            help="Write the rendered configuration to this path.",
        ),
    ) -> None:
        config = _resolve_config(config_path)
        rendered = render_user_config(config)
        if write is None:
            typer.echo(rendered, nl=False)
            return

        target = write.expanduser()
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(rendered, encoding="utf-8")
        typer.secho(f"Configuration written to {target}", fg=typer.colors.GREEN)

    return app


__all__ = ["create_app"]
