# python/terrainsweep/schedule.py
# Triangular camera-pitch sweep over the frames of one animation
# Exists so the camera rises and falls continuously instead of wrapping
# RELEVANT FILES: python/terrainsweep/jobs.py, python/terrainsweep/projection.py, tests/test_schedule.py
from __future__ import annotations

import math
import numbers
from typing import Iterator

import numpy as np

from .errors import InvalidParameterError


class PitchSchedule:
    """Maps a frame index to a camera pitch (radians).

    ``pitch_base = frame_count / 100`` and
    ``angle(i) = pitch_base - |pitch_base - i / pitch_speed_divisor|``.
    The sweep rises linearly to ``pitch_base`` then falls back at the same
    rate. The peak and the last value are whatever the formula yields; it is
    not clamped or forced back to zero.
    """

    def __init__(self, frame_count: int, pitch_speed_divisor: float):
        if isinstance(frame_count, bool) or not isinstance(frame_count, numbers.Integral) or frame_count <= 0:
            raise InvalidParameterError(f"frame_count must be a positive integer, got {frame_count!r}")
        divisor = float(pitch_speed_divisor)
        if not math.isfinite(divisor) or divisor <= 0.0:
            raise InvalidParameterError(f"pitch_speed_divisor must be > 0, got {pitch_speed_divisor!r}")
        self.frame_count = int(frame_count)
        self.pitch_speed_divisor = divisor
        self.pitch_base = self.frame_count / 100.0

    @classmethod
    def from_config(cls, config) -> "PitchSchedule":
        return cls(config.frame_count, config.pitch_speed_divisor)

    def angle(self, index: int) -> float:
        if not 0 <= index < self.frame_count:
            raise IndexError(f"frame index {index} outside 0..{self.frame_count - 1}")
        return self.pitch_base - abs(self.pitch_base - index / self.pitch_speed_divisor)

    def angles(self) -> np.ndarray:
        i = np.arange(self.frame_count, dtype=np.float64)
        return self.pitch_base - np.abs(self.pitch_base - i / self.pitch_speed_divisor)

    @property
    def turn_point(self) -> float:
        """Fractional frame index where ``i / divisor`` reaches ``pitch_base``."""
        return self.pitch_base * self.pitch_speed_divisor

    @property
    def peak_index(self) -> int:
        """Index of the highest pitch actually reached (first one on ties)."""
        return int(np.argmax(self.angles()))

    def __len__(self) -> int:
        return self.frame_count

    def __iter__(self) -> Iterator[float]:
        for i in range(self.frame_count):
            yield self.angle(i)

    def __repr__(self) -> str:
        return (f"PitchSchedule(frames={self.frame_count}, divisor={self.pitch_speed_divisor:g}, "
                f"base={self.pitch_base:g})")


__all__ = ["PitchSchedule"]
