"""Output renderers for command results.

Exports the OutputWriter base for new output formats and a factory that
builds writers from configuration.
"""

from __future__ import annotations

from NdlSearch.config import OutputConfig
from NdlSearch.renderers.base import MultiOutputWriter, OutputWriter
from NdlSearch.renderers.console import ConsoleOutputWriter, render_text
from NdlSearch.renderers.json import JsonFileWriter, render_json


def create_output_writer(config: OutputConfig) -> OutputWriter:
    """Create the output writer for the configured formats.

    Raises:
        ValueError: If no writer is configured.
    """
    writers: list[OutputWriter] = []
    if "console" in config.formats:
        writers.append(ConsoleOutputWriter())
    if "json" in config.formats:
        writers.append(JsonFileWriter(config.base_dir))

    if not writers:
        raise ValueError("No output writers configured")
    return MultiOutputWriter(writers)


__all__ = [
    "OutputWriter",
    "ConsoleOutputWriter",
    "JsonFileWriter",
    "MultiOutputWriter",
    "render_json",
    "render_text",
    "create_output_writer",
]
