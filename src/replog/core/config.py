"""Configuration models and loaders for :mod:`replog`."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from enum import StrEnum
from pathlib import Path
from typing import Any, Literal, Mapping

import tomllib
import tomlkit
from pydantic import BaseModel, Field, field_validator, model_validator

from replog.log.entry import DEFAULT_SOURCE_ROOT
from replog.log.text_formatter import DEFAULT_LINE_LIMIT
from replog.resources import get_resource

DEFAULTS_RESOURCE_NAME = "replog.defaults.toml"

_ENV_KEYS: Mapping[str, str] = {
    "REPLOG_FILTER": "log_filter",
    "REPLOG_COLOR": "color",
    "REPLOG_STREAM": "stream",
    "REPLOG_LOG_LEVEL": "log_level",
}


class ColorMode(StrEnum):
    """When severity colors are written to the output stream."""

    AUTO = "auto"
    ALWAYS = "always"
    NEVER = "never"


class ReplogConfig(BaseModel):
    """Root configuration for the terminal logging backend."""

    log_filter: str = Field(
        default="*:Info",
        description="Filter string installed on the backend when applied.",
    )
    color: ColorMode = Field(
        default=ColorMode.AUTO,
        description="Color mode: auto, always or never.",
    )
    stream: Literal["stderr", "stdout"] = Field(
        default="stderr",
        description="Standard stream that receives rendered entries.",
    )
    source_root: str = Field(
        default=DEFAULT_SOURCE_ROOT,
        description="Path component marking the root of source locations.",
    )
    line_limit: int = Field(
        default=DEFAULT_LINE_LIMIT,
        ge=64,
        description="Maximum rendered line size, including the terminator.",
    )
    log_level: str = Field(
        default="INFO",
        description="Level for replog's own diagnostics.",
    )

    model_config = {
        "str_strip_whitespace": True,
        "validate_assignment": True,
        "extra": "forbid",
    }

    @field_validator("color", mode="before")
    @classmethod
    def _normalize_color(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @model_validator(mode="after")
    def _post_process(self) -> "ReplogConfig":
        """Normalize fields after validation."""

        object.__setattr__(self, "log_level", self.log_level.upper())
        return self


def read_packaged_defaults_text() -> str:
    """Return the raw packaged defaults TOML content.

    Example:
        >>> text = read_packaged_defaults_text()
        >>> text.startswith("#")
        True
    """

    resource = get_resource(DEFAULTS_RESOURCE_NAME)
    return resource.read_text(encoding="utf-8")


def load_packaged_defaults() -> dict[str, Any]:
    """Load the packaged defaults as a plain dictionary.

    Example:
        >>> defaults = load_packaged_defaults()
        >>> defaults["log_filter"]
        '*:Info'
    """

    text = read_packaged_defaults_text()
    data: dict[str, Any] = tomllib.loads(text)
    return data


def read_user_config(path: str | Path) -> dict[str, Any]:
    """Parse a user TOML configuration file.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        tomllib.TOMLDecodeError: If the file is not valid TOML.
    """

    text = Path(path).expanduser().read_text(encoding="utf-8")
    return tomllib.loads(text)


def env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    """Collect configuration overrides from ``REPLOG_*`` variables.

    Example:
        >>> env_overrides({"REPLOG_COLOR": "never", "HOME": "/root"})
        {'color': 'never'}
    """

    return {
        field: environ[key]
        for key, field in _ENV_KEYS.items()
        if environ.get(key)
    }


def _deep_merge(
    base: Mapping[str, Any],
    overlay: Mapping[str, Any],
) -> dict[str, Any]:
    """Recursively merge ``overlay`` into ``base`` returning a new dict."""

    merged: dict[str, Any] = dict(base)
    for key, value in overlay.items():
        if (
            key in merged
            and isinstance(merged[key], MappingABC)
            and isinstance(value, MappingABC)
        ):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(
    *,
    defaults: Mapping[str, Any] | None = None,
    user_config: Mapping[str, Any] | None = None,
    env_config: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> ReplogConfig:
    """Load configuration according to the precedence stack.

    Args:
        defaults: Packaged defaults; loaded from the package when omitted.
        user_config: Parsed user TOML content.
        env_config: Settings derived from environment variables.
        cli_overrides: Settings supplied via CLI flags.

    Returns:
        A validated :class:`ReplogConfig` instance.

    Raises:
        pydantic.ValidationError: If the merged values are invalid.
    """

    stack = dict(defaults if defaults is not None else load_packaged_defaults())
    for layer in (user_config, env_config, cli_overrides):
        if layer:
            stack = _deep_merge(stack, layer)
    return ReplogConfig(**stack)


def render_user_config(
    config: ReplogConfig,
    *,
    include_defaults: bool = True,
) -> str:
    """Render ``config`` as a TOML document users can customize.

    Args:
        config: Configuration instance to serialize.
        include_defaults: Whether to add the explanatory header comments.

    Returns:
        A TOML-formatted string ready to persist for the user.
    """

    document = tomlkit.document()

    if include_defaults:
        document.add(tomlkit.comment("Generated by replog config"))
        document.add(
            tomlkit.comment(
                "Precedence: CLI flags > env vars > user file > defaults"
            )
        )
        document.add(tomlkit.comment("Environment overrides:"))
        for key in _ENV_KEYS:
            document.add(tomlkit.comment(f"  {key}"))
        document.add(tomlkit.nl())

    document["log_filter"] = config.log_filter
    document["color"] = config.color.value
    document["stream"] = config.stream
    document["source_root"] = config.source_root
    document["line_limit"] = config.line_limit
    document["log_level"] = config.log_level

    return tomlkit.dumps(document)


__all__ = [
    "ColorMode",
    "DEFAULTS_RESOURCE_NAME",
    "ReplogConfig",
    "env_overrides",
    "load_config",
    "load_packaged_defaults",
    "read_packaged_defaults_text",
    "read_user_config",
    "render_user_config",
]
