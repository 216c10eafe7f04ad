"""Configuration loading for SchemaDrift engine."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import yaml

from .exceptions import ConfigError
from .models import EngineConfig, LogLevel, ScoringConfig
from .scorer import validate_config


ENGINE_KEYS = ("max_depth", "max_payload_size_mb", "include_values", "log_level")
WEIGHT_KEYS = (
    "removed_field",
    "type_changed_structural",
    "type_changed_incompatible",
    "type_changed_compatible",
    "added_field",
)


def _check_keys(section: str, data: Any, allowed: tuple) -> dict:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(section, f"must be a mapping, got {type(data).__name__}")
    unknown = sorted(set(data) - set(allowed))
    if unknown:
        raise ConfigError(section, f"unknown keys {unknown}")
    return data


def scoring_config_from_dict(data: Optional[dict]) -> ScoringConfig:
    """
    Build a ScoringConfig from the ``scoring`` section of a config file.

    Example:
        scoring:
          weights: {removed_field: 40, added_field: 5}
          decay: 50
          thresholds: {low: 31, medium: 71}
    """
    data = _check_keys("scoring", data, ("weights", "decay", "thresholds"))
    config = ScoringConfig()

    weights = _check_keys("scoring.weights", data.get("weights"), WEIGHT_KEYS)
    for name, value in weights.items():
        setattr(config, name, value)

    if "decay" in data:
        config.decay = data["decay"]

    thresholds = _check_keys("scoring.thresholds", data.get("thresholds"), ("low", "medium"))
    if "low" in thresholds:
        config.low_threshold = thresholds["low"]
    if "medium" in thresholds:
        config.medium_threshold = thresholds["medium"]

    validate_config(config)
    return config


def engine_config_from_dict(data: Optional[dict]) -> EngineConfig:
    """Build an EngineConfig (including scoring) from a parsed config file."""
    data = _check_keys("<root>", data, ("engine", "scoring"))
    engine = _check_keys("engine", data.get("engine"), ENGINE_KEYS)

    config = EngineConfig(scoring=scoring_config_from_dict(data.get("scoring")))

    if "max_depth" in engine:
        max_depth = engine["max_depth"]
        if isinstance(max_depth, bool) or not isinstance(max_depth, int) or max_depth < 1:
            raise ConfigError("engine.max_depth", f"must be a positive integer, got {max_depth!r}")
        config.max_depth = max_depth

    if "max_payload_size_mb" in engine:
        size = engine["max_payload_size_mb"]
        if isinstance(size, bool) or not isinstance(size, (int, float)) or size <= 0:
            raise ConfigError("engine.max_payload_size_mb", f"must be a positive number, got {size!r}")
        config.max_payload_size_mb = size

    if "include_values" in engine:
        config.include_values = bool(engine["include_values"])

    if "log_level" in engine:
        try:
            config.log_level = LogLevel(str(engine["log_level"]).upper())
        except ValueError:
            raise ConfigError(
                "engine.log_level",
                f"expected one of {[level.value for level in LogLevel]}, got {engine['log_level']!r}"
            )

    return config


def load_config(path: str | Path) -> EngineConfig:
    """
    Load engine and scoring configuration from a YAML or JSON file.

    Missing sections keep their defaults; an empty file gives the defaults.

    Raises:
        ConfigError: file missing, unparseable, or holding invalid values
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(str(path), "config file not found")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            content = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(str(path), f"failed to read config file: {e}")

    # YAML also handles JSON since JSON is valid YAML
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(str(path), f"failed to parse config file: {e}")

    return engine_config_from_dict(data)
