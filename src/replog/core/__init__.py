"""Core utilities shared across :mod:`replog` modules.

The core namespace provides configuration loading and the logging setup for
replog's own diagnostics.

Example:
    >>> from replog.core import ReplogConfig
    >>> ReplogConfig().log_filter
    '*:Info'
"""

from __future__ import annotations

from .config import ColorMode, ReplogConfig, load_config
from .logging import configure_logging, get_logger

__all__ = [
    "ColorMode",
    "ReplogConfig",
    "configure_logging",
    "get_logger",
    "load_config",
]
