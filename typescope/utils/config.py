"""Utility helpers for loading YAML configuration files."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from typescope.telemetry import get_logger

__all__ = ["OUTPUT_FORMATS", "OutputSettings", "deep_update", "load_config"]

OUTPUT_FORMATS = ("json", "yaml", "text")
DEFAULT_FORMAT = "text"
DEFAULT_INDENT = 2

_LOGGER = get_logger("typescope.config")


def load_config(path: str | Path) -> dict[str, Any]:
    """Return the parsed YAML document located at ``path``.

    An empty document yields ``{}``.  A missing file raises
    :class:`FileNotFoundError`; unparsable YAML or a root that is not a mapping
    raises :class:`ValueError`.
    """

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"configuration file not found: {config_path}")
    raw_text = config_path.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(raw_text)
    except yaml.YAMLError as exc:
        raise ValueError(f"failed to parse configuration: {exc}") from exc
    if data is None:
        _LOGGER.debug("configuration %s is empty", config_path)
        return {}
    if not isinstance(data, dict):
        raise ValueError("configuration root must be a mapping")
    _LOGGER.debug("loaded configuration from %s", config_path)
    return data


def deep_update(base: Mapping[str, Any], updates: Mapping[str, Any]) -> dict[str, Any]:
    """Return ``base`` with ``updates`` recursively merged."""

    result: dict[str, Any] = {key: value for key, value in base.items()}
    for key, value in updates.items():
        if isinstance(value, Mapping) and isinstance(result.get(key), Mapping):
            result[key] = deep_update(result[key], value)
        else:
            result[key] = value
    return result


@dataclass(slots=True, frozen=True)
class OutputSettings:
    """How the command-line tools render their results."""

    format: str = DEFAULT_FORMAT
    indent: int | None = DEFAULT_INDENT

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "OutputSettings":
        section = (data or {}).get("output") or {}
        if not isinstance(section, Mapping):
            raise ValueError("'output' section must be a mapping")
        fmt = str(section.get("format", DEFAULT_FORMAT))
        if fmt not in OUTPUT_FORMATS:
            raise ValueError(f"unsupported output format '{fmt}'")
        indent = section.get("indent", DEFAULT_INDENT)
        if indent is not None and (isinstance(indent, bool) or not isinstance(indent, int)):
            raise ValueError("'output.indent' must be an integer or null")
        return cls(format=fmt, indent=indent)
