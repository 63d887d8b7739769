# python/terrainsweep/sampling.py
# Discrete horizontal sampling grid derived from axis ranges and a step density
# Exists to keep vertex placement identical across every frame of a job
# RELEVANT FILES: python/terrainsweep/render.py, python/terrainsweep/config.py, tests/test_sampling.py
from __future__ import annotations

import math
from typing import Tuple

import numpy as np

from .config import DEFAULT_STEP_DENSITY, AxisRange, RangeLike
from .errors import InvalidParameterError


def _check_density(density: float) -> float:
    density = float(density)
    if not math.isfinite(density) or density <= 0.0:
        raise InvalidParameterError(f"step density must be > 0, got {density}")
    return density


def axis_samples(axis: RangeLike, density: float = DEFAULT_STEP_DENSITY) -> np.ndarray:
    """Evenly spaced samples covering ``axis`` at ``1 / density`` spacing.

    Bounds are scaled by ``density`` and truncated toward zero, then every
    integer in between (both ends included) is divided back down, so the
    samples sit exactly on multiples of ``1 / density``.
    """
    axis = AxisRange.coerce(axis)
    density = _check_density(density)
    lo = int(axis.start * density)
    hi = int(axis.end * density)
    return np.arange(lo, hi + 1, dtype=np.int64) / density


class SamplingGrid:
    """The horizontal ``x`` by ``z`` lattice a height field is evaluated on."""

    def __init__(self, x_range: RangeLike, z_range: RangeLike, density: float = DEFAULT_STEP_DENSITY):
        self.x_range = AxisRange.coerce(x_range, "x_range")
        self.z_range = AxisRange.coerce(z_range, "z_range")
        self.density = _check_density(density)
        self.xs = axis_samples(self.x_range, self.density)
        self.zs = axis_samples(self.z_range, self.density)
        if self.xs.size < 2 or self.zs.size < 2:
            raise InvalidParameterError(
                f"sampling grid needs at least 2x2 samples, got {self.xs.size}x{self.zs.size}; "
                f"increase step density ({self.density})"
            )

    @property
    def step(self) -> float:
        return 1.0 / self.density

    @property
    def shape(self) -> Tuple[int, int]:
        """``(rows, cols)``: rows follow z, columns follow x."""
        return (self.zs.size, self.xs.size)

    @property
    def quad_count(self) -> int:
        rows, cols = self.shape
        return (rows - 1) * (cols - 1)

    def mesh(self) -> Tuple[np.ndarray, np.ndarray]:
        """Return ``(X, Z)`` coordinate arrays of shape :attr:`shape`."""
        return np.meshgrid(self.xs, self.zs, indexing="xy")

    def __repr__(self) -> str:
        rows, cols = self.shape
        return f"SamplingGrid({cols}x{rows}, step={self.step:g})"


__all__ = ["axis_samples", "SamplingGrid"]
