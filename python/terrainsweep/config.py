# python/terrainsweep/config.py
# Typed, validated configuration for one animation job
# Exists to reject bad divisors, ranges and sizes before any frame is rendered
# RELEVANT FILES: python/terrainsweep/jobs.py, python/terrainsweep/render.py, tests/test_config.py
from __future__ import annotations

import dataclasses
import math
import numbers
from dataclasses import dataclass, field
from typing import Any, Mapping, Tuple, Union

from .errors import InvalidParameterError

DEFAULT_SURFACE_LEVEL = 2.0
DEFAULT_PERLIN_SEED = 1
DEFAULT_AMPLITUDE_DIVISOR = 4.0

DEFAULT_WIDTH = 500
DEFAULT_HEIGHT = 500
DEFAULT_FRAME_DELAY_MS = 50
DEFAULT_FRAME_COUNT = 157
DEFAULT_PITCH_SPEED_DIVISOR = 50.0
DEFAULT_X_RANGE = (-10.0, 10.0)
DEFAULT_Y_RANGE = (0.0, 6.0)
DEFAULT_Z_RANGE = (-10.0, 10.0)

DEFAULT_SCALE = 0.7
DEFAULT_YAW = 0.5
DEFAULT_STEP_DENSITY = 5.0
DEFAULT_MAX_LIGHT_LINES = 3

RangeLike = Union["AxisRange", Tuple[float, float]]


def _require_finite(value: Any, label: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidParameterError(f"{label} must be a number, got {value!r}") from exc
    if not math.isfinite(number):
        raise InvalidParameterError(f"{label} must be finite, got {value!r}")
    return number


def _require_positive_int(value: Any, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidParameterError(f"{label} must be an integer, got {value!r}")
    if value <= 0:
        raise InvalidParameterError(f"{label} must be > 0, got {value}")
    return int(value)


def _require_positive(value: Any, label: str) -> float:
    number = _require_finite(value, label)
    if number <= 0.0:
        raise InvalidParameterError(f"{label} must be > 0, got {value}")
    return number


@dataclass(frozen=True)
class AxisRange:
    """Half-open numeric range ``[start, end)`` bounding one plot axis."""

    start: float
    end: float

    def __post_init__(self) -> None:
        start = _require_finite(self.start, "range start")
        end = _require_finite(self.end, "range end")
        if not start < end:
            raise InvalidParameterError(f"range start must be < end, got {start}..{end}")
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "end", end)

    @classmethod
    def coerce(cls, value: RangeLike, label: str = "range") -> "AxisRange":
        if isinstance(value, AxisRange):
            return value
        try:
            start, end = value
        except (TypeError, ValueError) as exc:
            raise InvalidParameterError(f"{label} must be a (start, end) pair, got {value!r}") from exc
        return cls(start, end)

    @property
    def span(self) -> float:
        return self.end - self.start

    @property
    def mid(self) -> float:
        return 0.5 * (self.start + self.end)

    def as_tuple(self) -> Tuple[float, float]:
        return (self.start, self.end)


@dataclass(frozen=True)
class AnimationConfig:
    """Immutable settings shared read-only by every frame of one job.

    ``frame_count`` is the number of frames and also sets the sweep peak
    (``frame_count / 100`` radians); ``pitch_speed_divisor`` slows the sweep down.
    ``frame_delay_ms`` must be a multiple of 10 because GIF stores delays in
    centiseconds.
    """

    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    frame_delay_ms: int = DEFAULT_FRAME_DELAY_MS
    frame_count: int = DEFAULT_FRAME_COUNT
    pitch_speed_divisor: float = DEFAULT_PITCH_SPEED_DIVISOR
    x_range: AxisRange = field(default_factory=lambda: AxisRange(*DEFAULT_X_RANGE))
    y_range: AxisRange = field(default_factory=lambda: AxisRange(*DEFAULT_Y_RANGE))
    z_range: AxisRange = field(default_factory=lambda: AxisRange(*DEFAULT_Z_RANGE))

    # Rendering constants
    scale: float = DEFAULT_SCALE
    yaw: float = DEFAULT_YAW
    step_density: float = DEFAULT_STEP_DENSITY
    max_light_lines: int = DEFAULT_MAX_LIGHT_LINES

    def __post_init__(self) -> None:
        for name in ("width", "height", "frame_delay_ms", "frame_count"):
            object.__setattr__(self, name, _require_positive_int(getattr(self, name), name))
        if self.frame_delay_ms % 10:
            raise InvalidParameterError(
                f"frame_delay_ms must be a multiple of 10 (GIF centiseconds), got {self.frame_delay_ms}"
            )
        object.__setattr__(self, "pitch_speed_divisor", _require_positive(self.pitch_speed_divisor, "pitch_speed_divisor"))
        object.__setattr__(self, "x_range", AxisRange.coerce(self.x_range, "x_range"))
        object.__setattr__(self, "y_range", AxisRange.coerce(self.y_range, "y_range"))
        object.__setattr__(self, "z_range", AxisRange.coerce(self.z_range, "z_range"))
        object.__setattr__(self, "scale", _require_positive(self.scale, "scale"))
        object.__setattr__(self, "yaw", _require_finite(self.yaw, "yaw"))
        object.__setattr__(self, "step_density", _require_positive(self.step_density, "step_density"))
        # Same truncation as sampling.axis_samples
        for label in ("x_range", "z_range"):
            axis = getattr(self, label)
            count = int(axis.end * self.step_density) - int(axis.start * self.step_density) + 1
            if count < 2:
                raise InvalidParameterError(
                    f"{label} {axis.start:g}..{axis.end:g} gives {count} sample(s) at step_density "
                    f"{self.step_density:g}; the sampling grid needs at least 2x2 samples"
                )
        if isinstance(self.max_light_lines, bool) or not isinstance(self.max_light_lines, int) or self.max_light_lines < 0:
            raise InvalidParameterError(f"max_light_lines must be an integer >= 0, got {self.max_light_lines!r}")

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def replace(self, **changes: Any) -> "AnimationConfig":
        """Return a validated copy with ``changes`` applied."""
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> dict:
        data = {}
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            data[f.name] = list(value.as_tuple()) if isinstance(value, AxisRange) else value
        return data

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "AnimationConfig":
        """Build a config from a plain mapping, rejecting unknown keys."""
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(mapping) - known)
        if unknown:
            raise InvalidParameterError(f"Unknown animation config keys: {', '.join(unknown)}")
        kwargs = dict(mapping)
        for key in ("x_range", "y_range", "z_range"):
            if key in kwargs:
                kwargs[key] = AxisRange.coerce(kwargs[key], key)
        return cls(**kwargs)


ConfigSource = Union[AnimationConfig, Mapping[str, Any], None]


def load_animation_config(source: ConfigSource = None, **overrides: Any) -> AnimationConfig:
    """Resolve ``source`` (config, mapping or None for defaults) and apply overrides."""
    if source is None:
        config = AnimationConfig()
    elif isinstance(source, AnimationConfig):
        config = source
    elif isinstance(source, Mapping):
        config = AnimationConfig.from_mapping(source)
    else:
        raise InvalidParameterError(f"Unsupported config source: {type(source).__name__}")
    if overrides:
        merged = config.to_dict()
        merged.update(overrides)
        config = AnimationConfig.from_mapping(merged)
    return config


__all__ = [
    "AxisRange",
    "AnimationConfig",
    "ConfigSource",
    "load_animation_config",
    "DEFAULT_SURFACE_LEVEL",
    "DEFAULT_PERLIN_SEED",
    "DEFAULT_AMPLITUDE_DIVISOR",
    "DEFAULT_WIDTH",
    "DEFAULT_HEIGHT",
    "DEFAULT_FRAME_DELAY_MS",
    "DEFAULT_FRAME_COUNT",
    "DEFAULT_PITCH_SPEED_DIVISOR",
    "DEFAULT_X_RANGE",
    "DEFAULT_Y_RANGE",
    "DEFAULT_Z_RANGE",
    "DEFAULT_SCALE",
    "DEFAULT_YAW",
    "DEFAULT_STEP_DENSITY",
    "DEFAULT_MAX_LIGHT_LINES",
]
