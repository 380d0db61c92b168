"""Output domain configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from NdlSearch.config.common import ConfigSection

OUTPUT_FORMATS = frozenset({"console", "json"})


@dataclass(frozen=True, slots=True)
class OutputConfig:
    """Output configuration.

    Attributes:
        base_dir: Root directory for file outputs.
        formats: Enabled writers (``console``, ``json``).
    """

    base_dir: str = "output"
    formats: tuple[str, ...] = ("console",)


def load_output(raw: Mapping[str, Any]) -> OutputConfig:
    """Load the ``output`` section.

    Raises:
        TypeError: If ``formats`` is not a list of strings.
        ValueError: On a blank base dir, no formats, or unknown formats.
    """
    section = ConfigSection.of(raw, "output", ("base_dir", "formats"))
    return OutputConfig(
        base_dir=section.text("base_dir", "output"),
        formats=section.choices("formats", ("console",), OUTPUT_FORMATS),
    )
