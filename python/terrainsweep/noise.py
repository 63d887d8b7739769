# python/terrainsweep/noise.py
# Seeded 2-D Perlin gradient noise and its fractal sum over NumPy arrays
# Exists so PerlinField gets coherent, repeatable elevations without a native dependency
# RELEVANT FILES: python/terrainsweep/heightfield.py, tests/test_noise.py
"""Seeded 2-D Perlin gradient noise, vectorised with NumPy.

Lattice corners are hashed together with the seed to pick one of four
diagonal gradients; the corner contributions are blended with Perlin's
quintic fade, so the field is continuous (C2), zero at every integer
lattice point and bounded to [-1, 1].
"""

from __future__ import annotations

from typing import Union

import numpy as np

ArrayLike = Union[float, np.ndarray]

_MASK32 = 0xFFFFFFFF


def _hash_wang(key: np.ndarray) -> np.ndarray:
    """Wang hash (Thomas Wang 2007) over uint32 arrays."""
    k = np.asarray(key, dtype=np.uint32)
    k = (k ^ np.uint32(61)) ^ (k >> np.uint32(16))
    k = k * np.uint32(9)
    k = k ^ (k >> np.uint32(4))
    k = k * np.uint32(0x27D4EB2D)
    k = k ^ (k >> np.uint32(15))
    return k


def _hash_corner(ix: np.ndarray, iy: np.ndarray, seed: np.uint32) -> np.ndarray:
    return _hash_wang(ix ^ _hash_wang(iy ^ _hash_wang(np.full_like(ix, seed))))


def _fade(t: np.ndarray) -> np.ndarray:
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


def _grad(hash_val: np.ndarray, dx: np.ndarray, dy: np.ndarray) -> np.ndarray:
    # Two low bits pick the gradient signs: (+-1, +-1)
    h = hash_val & np.uint32(3)
    gx = np.where(h & np.uint32(1), -1.0, 1.0)
    gy = np.where(h & np.uint32(2), -1.0, 1.0)
    # Diagonal gradients have length sqrt(2); halving keeps |noise| <= 1
    return 0.5 * (gx * dx + gy * dy)


def perlin2d(x: ArrayLike, y: ArrayLike, seed: int = 0) -> ArrayLike:
    """Evaluate gradient noise at ``(x, y)``.

    Args:
        x, y: Scalars or broadcastable arrays of sample coordinates.
        seed: Integer seed; different seeds give uncorrelated fields.

    Returns:
        float for scalar input, otherwise a float64 array of the broadcast shape.
    """
    scalar = np.ndim(x) == 0 and np.ndim(y) == 0
    xa, ya = np.broadcast_arrays(
        np.atleast_1d(np.asarray(x, dtype=np.float64)),
        np.atleast_1d(np.asarray(y, dtype=np.float64)),
    )

    fx0 = np.floor(xa)
    fy0 = np.floor(ya)
    fx = xa - fx0
    fy = ya - fy0

    # Wrap lattice indices into uint32 so negative coordinates hash cleanly
    ix = (fx0.astype(np.int64) & _MASK32).astype(np.uint32)
    iy = (fy0.astype(np.int64) & _MASK32).astype(np.uint32)
    s = np.uint32(int(seed) & _MASK32)
    one = np.uint32(1)

    g00 = _grad(_hash_corner(ix, iy, s), fx, fy)
    g10 = _grad(_hash_corner(ix + one, iy, s), fx - 1.0, fy)
    g01 = _grad(_hash_corner(ix, iy + one, s), fx, fy - 1.0)
    g11 = _grad(_hash_corner(ix + one, iy + one, s), fx - 1.0, fy - 1.0)

    u = _fade(fx)
    v = _fade(fy)
    x0 = g00 + u * (g10 - g00)
    x1 = g01 + u * (g11 - g01)
    out = x0 + v * (x1 - x0)

    if scalar:
        return float(out[0])
    return out


def fbm2d(
    x: ArrayLike,
    y: ArrayLike,
    seed: int = 0,
    octaves: int = 4,
    lacunarity: float = 2.0,
    gain: float = 0.5,
) -> ArrayLike:
    """Fractal Brownian motion: normalised sum of ``octaves`` noise layers."""
    if octaves < 1:
        raise ValueError("octaves must be >= 1")
    total = 0.0
    amplitude = 1.0
    frequency = 1.0
    norm = 0.0
    for i in range(octaves):
        total = total + amplitude * np.asarray(perlin2d(np.multiply(x, frequency), np.multiply(y, frequency), seed + i))
        norm += amplitude
        amplitude *= gain
        frequency *= lacunarity
    result = total / norm
    if np.ndim(result) == 0:
        return float(result)
    return result


__all__ = ["perlin2d", "fbm2d"]
