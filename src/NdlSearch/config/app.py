"""Application config orchestration and YAML loading entrypoints."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from NdlSearch.config.opensearch import OpenSearchConfig, load_opensearch
from NdlSearch.config.output import OutputConfig, load_output
from NdlSearch.config.retry import RetryConfig, check_retry, load_retry
from NdlSearch.config.runtime import RuntimeConfig, load_runtime
from NdlSearch.config.sru import SruConfig, load_sru

DEFAULT_CONFIG_PATH = Path("config/default.yml")


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application root configuration."""

    runtime: RuntimeConfig
    sru: SruConfig
    opensearch: OpenSearchConfig
    retry: RetryConfig
    output: OutputConfig


def parse_config_dict(raw: Mapping[str, Any]) -> AppConfig:
    """Parse a normalized mapping into AppConfig.

    Raises:
        TypeError: If a value has the wrong type.
        ValueError: If a value violates its domain constraints.
    """
    runtime = load_runtime(raw)
    sru = load_sru(raw)
    opensearch = load_opensearch(raw)
    retry = load_retry(raw)
    output = load_output(raw)

    check_retry(retry)

    return AppConfig(runtime=runtime, sru=sru, opensearch=opensearch, retry=retry, output=output)


def load_config(path: Path) -> AppConfig:
    """Load a YAML config file without default merge."""
    return load_config_with_defaults(path, default_path=path)


def load_config_with_defaults(config_path: Path, default_path: Path = DEFAULT_CONFIG_PATH) -> AppConfig:
    """Load config by deep-merging an override onto the defaults file.

    A missing defaults file is treated as empty, so every section falls back
    to its built-in defaults.
    """
    base = parse_yaml(default_path.read_text(encoding="utf-8")) if default_path.exists() else {}
    if config_path == default_path:
        return parse_config_dict(base)
    override = parse_yaml(config_path.read_text(encoding="utf-8"))
    return parse_config_dict(merge_config_dicts(base, override))


def parse_yaml(text: str) -> dict[str, Any]:
    """Parse raw YAML text into a mapping."""
    data = yaml.safe_load(text) or {}
    if not isinstance(data, Mapping):
        raise ValueError("Config root must be a mapping/object")
    return dict(data)


def merge_config_dicts(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Deep-merge two config mappings; lists and scalars in ``override`` win."""
    merged: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], Mapping) and isinstance(value, Mapping):
            merged[key] = merge_config_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged
