from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.tickets import TicketKind
from ..services.aggregation import DEFAULT_CALIBRATION_THRESHOLD

"""Configuration loader.

Responsibilities:
- Load an optional YAML file (header alias extensions, thresholds, list sizes)
- Validate it against the bundled JSON schema (config_schema.json)
- Apply defaults for everything not given

Header aliases only extend the built-in candidate lists; they never replace
them, so a config file cannot make a previously recognised export unreadable.
"""

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")

DEFAULT_TOP_N = 3
DEFAULT_REPEAT_LIMIT = 5

_ALIAS_SECTIONS = {
    "fuel": TicketKind.FUEL,
    "after_sales": TicketKind.AFTER_SALES,
}


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class AnalyticsConfig:
    header_aliases: dict[TicketKind, dict[str, tuple[str, ...]]] = field(default_factory=dict)
    calibration_threshold: float = DEFAULT_CALIBRATION_THRESHOLD
    top_n: int = DEFAULT_TOP_N
    repeat_limit: int = DEFAULT_REPEAT_LIMIT

    def aliases_for(self, kind: TicketKind) -> dict[str, tuple[str, ...]]:
        return self.header_aliases.get(kind, {})


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the bundled JSON schema.

    Raises:
        ConfigError: the schema file is missing or broken, or the data
            violates it (unknown keys, wrong types, out-of-range values).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_config(path: Path | None = None) -> AnalyticsConfig:
    """Load configuration from ``path``; ``None`` returns the defaults."""
    if path is None:
        return AnalyticsConfig()
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)

    aliases_raw = data.get("header_aliases") or {}
    aliases = {
        _ALIAS_SECTIONS[section]: {name: tuple(headers) for name, headers in (table or {}).items()}
        for section, table in aliases_raw.items()
    }
    return AnalyticsConfig(
        header_aliases=aliases,
        calibration_threshold=float(data.get("calibration_threshold", DEFAULT_CALIBRATION_THRESHOLD)),
        top_n=int(data.get("top_n", DEFAULT_TOP_N)),
        repeat_limit=int(data.get("repeat_limit", DEFAULT_REPEAT_LIMIT)),
    )
