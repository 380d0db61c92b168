"""Runtime domain configuration (logging)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from NdlSearch.config.common import ConfigSection

LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


@dataclass(frozen=True, slots=True)
class RuntimeConfig:
    """Validated logging settings.

    Attributes:
        level: Console log level name.
        to_file: Also write a per-run DEBUG log file.
        dir: Directory holding the log files.
    """

    level: str = "INFO"
    to_file: bool = False
    dir: str = "log"  # noqa: A003 - config key name


def load_runtime(raw: Mapping[str, Any]) -> RuntimeConfig:
    """Load the ``log`` section; level names are case-insensitive."""
    section = ConfigSection.of(raw, "log", ("level", "to_file", "dir"))
    return RuntimeConfig(
        level=section.choice("level", "INFO", LOG_LEVELS, fold=str.upper),
        to_file=section.flag("to_file", False),
        dir=section.text("dir", "log"),
    )
