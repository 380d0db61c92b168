"""Caller-side retry configuration used by the CLI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from NdlSearch.config.common import ConfigSection


@dataclass(frozen=True, slots=True)
class RetryConfig:
    """Backoff settings.

    Attributes:
        max_attempts: Total attempts including the first call (1 disables retry).
        base_pause: First pause in seconds; doubles per attempt.
        max_sleep: Upper bound of one pause in seconds.
    """

    max_attempts: int = 3
    base_pause: float = 1.5
    max_sleep: float = 20.0


def load_retry(raw: Mapping[str, Any]) -> RetryConfig:
    section = ConfigSection.of(raw, "retry", ("max_attempts", "base_pause", "max_sleep"))
    return RetryConfig(
        max_attempts=section.integer("max_attempts", 3, minimum=1),
        base_pause=section.number("base_pause", 1.5, minimum=0),
        max_sleep=section.number("max_sleep", 20.0),
    )


def check_retry(config: RetryConfig) -> None:
    """Check the cross-key constraint between pauses."""
    if config.max_sleep < config.base_pause:
        raise ValueError("retry.max_sleep must be >= retry.base_pause")
