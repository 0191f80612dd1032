"""
Seedable 2D Perlin noise and fractal Brownian motion.

Functions accept Python floats or NumPy arrays; arrays are evaluated
element-wise with the same arithmetic as the scalar path, so a vectorized
grid build and a single-point query agree.
"""

from typing import Union

import numpy as np

from ..utils.random import AleaPRNG

ArrayLike = Union[float, np.ndarray]

PERMUTATION_SIZE = 256

# Eight gradient directions selected by hash & 7:
# x+y, x-y, -x+y, -x-y, x, -x, y, -y
_GRAD_X = np.array([1.0, 1.0, -1.0, -1.0, 1.0, -1.0, 0.0, 0.0])
_GRAD_Y = np.array([1.0, -1.0, 1.0, -1.0, 0.0, 0.0, 1.0, -1.0])


def fade(t: ArrayLike) -> ArrayLike:
    """Quintic fade curve 6t^5 - 15t^4 + 10t^3."""
    return t * t * t * (t * (t * 6 - 15) + 10)


def lerp(a: ArrayLike, b: ArrayLike, t: ArrayLike) -> ArrayLike:
    return a + t * (b - a)


def _grad(hash_value: np.ndarray, x: np.ndarray, y: np.ndarray) -> np.ndarray:
    h = hash_value & 7
    return _GRAD_X[h] * x + _GRAD_Y[h] * y


class PerlinNoise:
    """
    Classic 2D gradient noise driven by a seeded permutation table.

    The table holds a shuffle of 0..255 duplicated to 512 entries so corner
    hashing never needs a wrap. ``reseed`` swaps in a fresh table.
    """

    def __init__(self, seed: int = 1337):
        self.seed = seed
        self.perm = self._build_permutation(seed)

    @staticmethod
    def _build_permutation(seed: int) -> np.ndarray:
        table = AleaPRNG(seed).permutation(PERMUTATION_SIZE)
        return np.array(table + table, dtype=np.int64)

    def reseed(self, seed: int) -> None:
        """Replace the permutation table with the one derived from ``seed``."""
        self.perm = self._build_permutation(seed)
        self.seed = seed

    def noise_2d(self, x: ArrayLike, y: ArrayLike) -> ArrayLike:
        """Base Perlin noise, roughly in [-1, 1]."""
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)

        x_floor = np.floor(x)
        y_floor = np.floor(y)

        # Lattice cell modulo 256; float mod keeps huge inputs in range
        xi = np.mod(x_floor, PERMUTATION_SIZE).astype(np.int64)
        yi = np.mod(y_floor, PERMUTATION_SIZE).astype(np.int64)

        xf = x - x_floor
        yf = y - y_floor

        u = fade(xf)
        v = fade(yf)

        p = self.perm
        aa = p[p[xi] + yi]
        ab = p[p[xi] + yi + 1]
        ba = p[p[xi + 1] + yi]
        bb = p[p[xi + 1] + yi + 1]

        x1 = lerp(_grad(aa, xf, yf), _grad(ba, xf - 1, yf), u)
        x2 = lerp(_grad(ab, xf, yf - 1), _grad(bb, xf - 1, yf - 1), u)
        value = lerp(x1, x2, v)

        if value.ndim == 0:
            return float(value)
        return value

    def fbm_2d(
        self,
        x: ArrayLike,
        y: ArrayLike,
        octaves: int,
        lacunarity: float,
        persistence: float,
    ) -> ArrayLike:
        """
        Fractal Brownian motion: octaves of Perlin noise.

        The sum is divided by the accumulated amplitude so the result stays
        roughly in [-1, 1] independent of the octave count. If no amplitude
        accumulated (``octaves < 1``) the raw sum is returned.
        """
        amplitude = 1.0
        frequency = 1.0
        total = 0.0
        amplitude_sum = 0.0

        for _ in range(octaves):
            total = total + amplitude * self.noise_2d(x * frequency, y * frequency)
            amplitude_sum += amplitude
            amplitude *= persistence
            frequency *= lacunarity

        if amplitude_sum > 0.0:
            total = total / amplitude_sum
        return total
