# python/terrainsweep/heightfield.py
# Height field capability interface and the built-in surface variants
# Exists so flat, stochastic, periodic and noise surfaces swap behind one evaluate(x, z)
# RELEVANT FILES: python/terrainsweep/noise.py, python/terrainsweep/render.py, tests/test_heightfield.py
"""
Height fields map a horizontal position ``(x, z)`` to an elevation ``y``.

Provides:
    HeightField          - Abstract interface (evaluate + vectorised sample)
    FlatField            - Constant baseline
    StochasticFlatField  - Baseline plus uniform [0, 1) jitter from an owned generator
    SineField            - Sum of two sines along x and z
    PerlinField          - Seeded gradient noise
    FunctionField        - Adapter for plain ``(x, z) -> y`` callables

Example:
    >>> from terrainsweep.heightfield import SineField
    >>> field = SineField(baseline=2.0, wavelength=1.0, amplitude_divisor=4.0)
    >>> field.evaluate(0.0, 0.0)
    2.0
"""

from __future__ import annotations

import abc
import math
from typing import Any, Callable, Dict, Optional

import numpy as np

from .config import DEFAULT_AMPLITUDE_DIVISOR, DEFAULT_PERLIN_SEED, DEFAULT_SURFACE_LEVEL
from .errors import InvalidParameterError
from .noise import perlin2d


def _finite(value: Any, label: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidParameterError(f"{label} must be a number, got {value!r}") from exc
    if not math.isfinite(number):
        raise InvalidParameterError(f"{label} must be finite, got {value!r}")
    return number


def _nonzero(value: Any, label: str) -> float:
    number = _finite(value, label)
    if number == 0.0:
        raise InvalidParameterError(f"{label} must be non-zero")
    return number


class HeightField(abc.ABC):
    """Pure mapping from a horizontal coordinate pair to an elevation."""

    #: True when repeated evaluation at the same point gives the same value.
    deterministic: bool = True

    @abc.abstractmethod
    def evaluate(self, x: float, z: float) -> float:
        """Return the elevation at ``(x, z)``."""

    def sample(self, xs: np.ndarray, zs: np.ndarray) -> np.ndarray:
        """Evaluate over broadcastable coordinate arrays.

        Subclasses override this with a vectorised form; the default loops
        over ``evaluate``.
        """
        xa, za = np.broadcast_arrays(np.asarray(xs, dtype=np.float64), np.asarray(zs, dtype=np.float64))
        out = np.empty(xa.shape, dtype=np.float64)
        for idx in np.ndindex(xa.shape):
            out[idx] = self.evaluate(float(xa[idx]), float(za[idx]))
        return out

    def __call__(self, x: float, z: float) -> float:
        return self.evaluate(x, z)

    def describe(self) -> Dict[str, Any]:
        return {"kind": type(self).__name__}

    def __repr__(self) -> str:
        params = ", ".join(f"{k}={v!r}" for k, v in self.describe().items() if k != "kind")
        return f"{type(self).__name__}({params})"


class FlatField(HeightField):
    """Returns ``baseline`` everywhere."""

    def __init__(self, baseline: float = DEFAULT_SURFACE_LEVEL):
        self.baseline = _finite(baseline, "baseline")

    def evaluate(self, x: float, z: float) -> float:
        return self.baseline

    def sample(self, xs: np.ndarray, zs: np.ndarray) -> np.ndarray:
        shape = np.broadcast_shapes(np.shape(xs), np.shape(zs))
        return np.full(shape, self.baseline, dtype=np.float64)

    def describe(self) -> Dict[str, Any]:
        return {"kind": "flat", "baseline": self.baseline}


class StochasticFlatField(HeightField):
    """Baseline plus a uniform ``[0, 1)`` draw per evaluation.

    Draws come from a generator owned by this instance, never from global
    state. Pass ``seed`` for reproducible output or ``rng`` to share a
    generator the caller manages.
    """

    deterministic = False

    def __init__(
        self,
        baseline: float = DEFAULT_SURFACE_LEVEL,
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        if seed is not None and rng is not None:
            raise InvalidParameterError("pass either seed or rng, not both")
        self.baseline = _finite(baseline, "baseline")
        self.seed = seed
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def evaluate(self, x: float, z: float) -> float:
        return self.baseline + float(self.rng.random())

    def sample(self, xs: np.ndarray, zs: np.ndarray) -> np.ndarray:
        shape = np.broadcast_shapes(np.shape(xs), np.shape(zs))
        return self.baseline + self.rng.random(shape)

    def describe(self) -> Dict[str, Any]:
        return {"kind": "stochastic_flat", "baseline": self.baseline, "seed": self.seed}


class SineField(HeightField):
    """``baseline + (sin(x / wavelength) + sin(z / wavelength)) / amplitude_divisor``."""

    def __init__(
        self,
        baseline: float = DEFAULT_SURFACE_LEVEL,
        wavelength: float = 1.0,
        amplitude_divisor: float = DEFAULT_AMPLITUDE_DIVISOR,
    ):
        self.baseline = _finite(baseline, "baseline")
        self.wavelength = _nonzero(wavelength, "wavelength")
        self.amplitude_divisor = _nonzero(amplitude_divisor, "amplitude_divisor")

    def evaluate(self, x: float, z: float) -> float:
        return self.baseline + (math.sin(x / self.wavelength) + math.sin(z / self.wavelength)) / self.amplitude_divisor

    def sample(self, xs: np.ndarray, zs: np.ndarray) -> np.ndarray:
        xa = np.asarray(xs, dtype=np.float64)
        za = np.asarray(zs, dtype=np.float64)
        return self.baseline + (np.sin(xa / self.wavelength) + np.sin(za / self.wavelength)) / self.amplitude_divisor

    def describe(self) -> Dict[str, Any]:
        return {
            "kind": "sine",
            "baseline": self.baseline,
            "wavelength": self.wavelength,
            "amplitude_divisor": self.amplitude_divisor,
        }


class PerlinField(HeightField):
    """``baseline + perlin2d(x / wavelength, z / wavelength, seed) / amplitude_divisor``."""

    def __init__(
        self,
        baseline: float = DEFAULT_SURFACE_LEVEL,
        wavelength: float = 1.0,
        amplitude_divisor: float = DEFAULT_AMPLITUDE_DIVISOR,
        seed: int = DEFAULT_PERLIN_SEED,
    ):
        self.baseline = _finite(baseline, "baseline")
        self.wavelength = _nonzero(wavelength, "wavelength")
        self.amplitude_divisor = _nonzero(amplitude_divisor, "amplitude_divisor")
        self.seed = int(seed)

    def evaluate(self, x: float, z: float) -> float:
        return self.baseline + perlin2d(x / self.wavelength, z / self.wavelength, self.seed) / self.amplitude_divisor

    def sample(self, xs: np.ndarray, zs: np.ndarray) -> np.ndarray:
        xa = np.asarray(xs, dtype=np.float64) / self.wavelength
        za = np.asarray(zs, dtype=np.float64) / self.wavelength
        return self.baseline + np.asarray(perlin2d(xa, za, self.seed)) / self.amplitude_divisor

    def describe(self) -> Dict[str, Any]:
        return {
            "kind": "perlin",
            "baseline": self.baseline,
            "wavelength": self.wavelength,
            "amplitude_divisor": self.amplitude_divisor,
            "seed": self.seed,
        }


class FunctionField(HeightField):
    """Adapts a plain callable ``(x, z) -> y``.

    The callable is treated as stochastic and resampled on every frame. Pass
    ``deterministic=True`` for a pure function so it is sampled once per job.
    It must be a module-level function to cross a process boundary.
    """

    def __init__(self, func: Callable[[float, float], float], deterministic: bool = False):
        if not callable(func):
            raise InvalidParameterError(f"height field must be callable, got {type(func).__name__}")
        self.func = func
        self.deterministic = bool(deterministic)

    def evaluate(self, x: float, z: float) -> float:
        return float(self.func(x, z))

    def describe(self) -> Dict[str, Any]:
        return {"kind": "function", "func": getattr(self.func, "__qualname__", repr(self.func))}


def as_height_field(obj: Any, deterministic: bool = False) -> HeightField:
    """Return ``obj`` as a HeightField, wrapping bare callables.

    ``deterministic`` only applies to callables; HeightField instances keep
    their own flag.
    """
    if isinstance(obj, HeightField):
        return obj
    if callable(obj):
        return FunctionField(obj, deterministic=deterministic)
    raise InvalidParameterError(f"Expected a HeightField or callable, got {type(obj).__name__}")


__all__ = [
    "HeightField",
    "FlatField",
    "StochasticFlatField",
    "SineField",
    "PerlinField",
    "FunctionField",
    "as_height_field",
]
