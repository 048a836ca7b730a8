"""
config - Immutable configuration for the watercolor pipeline.

A `WatercolorConfig` is built once (from keyword arguments, a mapping or a
YAML file), validated, and then only read by the stages.
"""

import numbers
import os
import re
from dataclasses import dataclass, asdict, fields, replace
from typing import Any, Dict, Optional

import yaml

from .datatypes import ColorSpace, ConfigurationError, Precision


_IO_KEYS = ('input_file', 'output_file')

_INTEGER_FIELDS = ('posterize_levels',)
_OPTIONAL_INTEGER_FIELDS = ('seed', 'workers')
_BOOL_FIELDS = ('edge_preserve', 'multi_thread')


def _snake_case(name: str) -> str:
    """'colorBleedStrength' -> 'color_bleed_strength'"""
    return re.sub(r'(?<!^)(?=[A-Z])', '_', name).lower()


@dataclass(frozen=True)
class WatercolorConfig:
    # Blur / texture
    blur_radius: int = 2
    posterize_levels: int = 8
    noise_intensity: float = 20
    texture_strength: float = 0.25

    # Tone
    contrast: float = 1.1
    brightness: float = 15
    vibrance: float = 1.0
    saturation: float = 1.1

    # Watercolor
    color_bleed_strength: float = 0.4
    color_spread_max_offset: float = 4
    edge_threshold: float = 150
    edge_intensity: float = 35

    # Edge preservation
    edge_preserve: bool = True
    edge_detection_threshold: float = 25

    # Wet effects
    wet_in_wet_effect: float = 0.3
    granulation_intensity: float = 0.2
    bloom_radius: int = 3
    bloom_intensity: float = 0.15

    # Execution
    quality: float = 0.95
    multi_thread: bool = False
    precision: str = Precision.MEDIUM.value
    seed: Optional[int] = None
    workers: Optional[int] = None

    # Color management
    color_space: str = ColorSpace.SRGB.value

    @property
    def color_space_enum(self) -> ColorSpace:
        return ColorSpace(self.color_space)

    @property
    def precision_enum(self) -> Precision:
        return Precision(self.precision)

    @property
    def thread_count(self) -> int:
        """Number of worker threads the per-row stages may use."""
        if not self.multi_thread:
            return 1
        return max(1, self.workers or os.cpu_count() or 1)

    def validate(self) -> 'WatercolorConfig':
        """
        Checks every tunable the stages depend on.

        Raises:
            ConfigurationError: on the first invalid value.
        """
        self._check_types()
        try:
            color_space = ColorSpace(self.color_space)
        except ValueError:
            raise ConfigurationError(
                f"'{self.color_space}' is not a valid color space. "
                f"Available: {[e.value for e in ColorSpace]}"
            )
        try:
            Precision(self.precision)
        except ValueError:
            raise ConfigurationError(
                f"'{self.precision}' is not a valid precision. "
                f"Available: {[e.value for e in Precision]}"
            )

        if color_space == ColorSpace.SRGB and self.posterize_levels < 2:
            raise ConfigurationError(
                f"posterize_levels must be >= 2 in srgb mode, got {self.posterize_levels}"
            )
        if color_space == ColorSpace.LAB and self.posterize_levels < 1:
            raise ConfigurationError(
                f"posterize_levels must be >= 1 in lab mode, got {self.posterize_levels}"
            )
        if self.blur_radius < 0:
            raise ConfigurationError(f"blur_radius must be >= 0, got {self.blur_radius}")
        if self.bloom_radius < 0:
            raise ConfigurationError(f"bloom_radius must be >= 0, got {self.bloom_radius}")
        if self.color_spread_max_offset < 0:
            raise ConfigurationError(
                f"color_spread_max_offset must be >= 0, got {self.color_spread_max_offset}"
            )
        if self.workers is not None and self.workers < 1:
            raise ConfigurationError(f"workers must be >= 1, got {self.workers}")
        return self

    def _check_types(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name in ('color_space', 'precision'):
                continue
            if f.name in _BOOL_FIELDS:
                ok = isinstance(value, bool)
            elif f.name in _OPTIONAL_INTEGER_FIELDS:
                ok = value is None or (isinstance(value, numbers.Integral) and not isinstance(value, bool))
            elif f.name in _INTEGER_FIELDS:
                ok = isinstance(value, numbers.Integral) and not isinstance(value, bool)
            else:
                ok = isinstance(value, numbers.Real) and not isinstance(value, bool)
            if not ok:
                raise ConfigurationError(
                    f"{f.name} has invalid type {type(value).__name__}: {value!r}"
                )

    def with_overrides(self, **overrides) -> 'WatercolorConfig':
        """Returns a copy with some fields replaced. Keys may be camelCase."""
        return replace(self, **self._normalize_keys(overrides))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, params: Optional[Dict[str, Any]]) -> 'WatercolorConfig':
        """
        Builds a config from a mapping, filling the rest from the defaults.

        Both snake_case and camelCase option names
        (`blurRadius`, `colorSpace`, ...) are accepted.
        """
        return cls(**cls._normalize_keys(params or {}))

    @classmethod
    def from_yaml(cls, yaml_path: str) -> 'WatercolorConfig':
        """ Instantiation from a yaml file. Reads the `params` section if present. """
        with open(yaml_path, 'r', encoding='utf-8') as fp:
            yml = yaml.safe_load(fp) or {}
        if not isinstance(yml, dict):
            raise ConfigurationError(f"expected a mapping in {yaml_path}, got {type(yml).__name__}")
        if 'params' in yml:
            params = yml['params'] or {}
        else:
            params = {k: v for k, v in yml.items() if k not in _IO_KEYS}
        return cls.from_dict(params)

    @classmethod
    def _normalize_keys(cls, params: Dict[str, Any]) -> Dict[str, Any]:
        known = {f.name for f in fields(cls)}
        normalized = {}
        for key, value in params.items():
            name = _snake_case(key)
            if name not in known:
                raise ConfigurationError(f"Unknown configuration key '{key}'")
            normalized[name] = value
        return normalized


DEFAULTS = WatercolorConfig()
