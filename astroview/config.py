"""Conversion configuration with JSON serialization."""

from __future__ import annotations

import json
import numbers
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class ConversionConfig:
    """Immutable image-to-point-cloud configuration.

    Args:
        brightness_threshold: Normalized cut; pixels with brightness <= this are dropped
        z_scale: Multiplier applied to brightness (in 0-255 range) to get z
        point_size: Render hint applied to every output point
        max_points: Upper bound on output size (<= 0 = unbounded)
        image_path: Image loaded by the plugin on initialize, if it exists
        span: Width of the x/y extent; coordinates land in [-span/2, span/2]
        report_interval: Seconds of tick time between diagnostic reports
    """
    brightness_threshold: float = 0.1
    z_scale: float = 0.05
    point_size: float = 5.0
    max_points: int = 10000
    image_path: str | None = "./test_image.jpg"
    span: float = 10.0
    report_interval: float = 5.0

    def __post_init__(self) -> None:
        if isinstance(self.max_points, bool) or not isinstance(self.max_points, numbers.Integral):
            raise ValueError(f"max_points must be an integer, got {self.max_points!r}")
        object.__setattr__(self, "max_points", int(self.max_points))
        if self.span <= 0:
            raise ValueError(f"span must be positive, got {self.span}")
        if self.report_interval <= 0:
            raise ValueError(f"report_interval must be positive, got {self.report_interval}")

    def with_overrides(self, **overrides: Any) -> ConversionConfig:
        """Return a copy with the non-None overrides applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def to_dict(self) -> dict:
        return config_to_dict(self)


def config_to_dict(config: Any) -> dict:
    """
    Convert a dataclass config to a dictionary, handling nested configs.

    Args:
        config: Dataclass instance

    Returns:
        Dictionary representation
    """
    if hasattr(config, '__dataclass_fields__'):
        result = {}
        for field in fields(config):
            value = getattr(config, field.name)
            if hasattr(value, '__dataclass_fields__'):
                result[field.name] = config_to_dict(value)
            else:
                result[field.name] = value
        return result
    return config


def save_config(config: Any, path: str | Path) -> None:
    """
    Save configuration to JSON file.

    Args:
        config: Dataclass configuration
        path: Output JSON file path
    """
    config_dict = config_to_dict(config)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, 'w') as f:
        json.dump(config_dict, f, indent=2, default=str)


def load_config(path: str | Path, config_cls: type = ConversionConfig) -> Any:
    """
    Load configuration from JSON file.

    Keys that are not fields of `config_cls` are rejected so typos do not
    silently fall back to defaults.

    Args:
        path: JSON file path
        config_cls: Dataclass type to instantiate

    Returns:
        Instantiated config object
    """
    with open(path, 'r') as f:
        config_dict = json.load(f)

    known = {field.name for field in fields(config_cls)}
    unknown = set(config_dict) - known
    if unknown:
        raise ValueError(f"Unknown config keys: {sorted(unknown)}")

    return config_cls(**config_dict)
