"""CLI package for NdlSearch command orchestration."""

from __future__ import annotations

__all__ = ["CommandRunner", "main"]

from NdlSearch.cli.runner import CommandRunner
from NdlSearch.cli.ui import cli


def main() -> None:
    """Run the NdlSearch CLI.

    Entry point referenced by the console script in pyproject.toml.
    """
    cli()
