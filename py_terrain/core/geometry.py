"""
Small vector helpers and the terrain's world transform.

All vectors are NumPy float64 arrays of length 3 (or ``(N, 3)`` stacks).
"""

import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np

# Squared-length threshold below which a vector is treated as degenerate
DEGENERATE_LENGTH_SQ = 1e-12

UP = np.array([0.0, 0.0, 1.0])


def up_vector() -> np.ndarray:
    return UP.copy()


def safe_normalize(v: np.ndarray) -> np.ndarray:
    """Unit vector along ``v``, or up when ``v`` is (near) zero."""
    v = np.asarray(v, dtype=np.float64)
    length_sq = float(np.dot(v, v))
    if not length_sq >= DEGENERATE_LENGTH_SQ:
        return up_vector()
    return v / math.sqrt(length_sq)


def safe_normalize_rows(vectors: np.ndarray) -> np.ndarray:
    """Row-wise ``safe_normalize`` for an ``(N, 3)`` array."""
    vectors = np.asarray(vectors, dtype=np.float64)
    length_sq = np.einsum("ij,ij->i", vectors, vectors)
    degenerate = ~(length_sq >= DEGENERATE_LENGTH_SQ)

    out = np.empty_like(vectors)
    out[degenerate] = UP
    good = ~degenerate
    out[good] = vectors[good] / np.sqrt(length_sq[good])[:, None]
    return out


@dataclass(frozen=True)
class TerrainTransform:
    """
    Placement of the terrain in the world: translation plus yaw about +Z.

    Terrain-local XY is centred on the origin; heights are local Z.
    """

    location: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    yaw_deg: float = 0.0

    @property
    def _cos_sin(self) -> Tuple[float, float]:
        yaw = math.radians(self.yaw_deg)
        return math.cos(yaw), math.sin(yaw)

    def to_local_xy(self, x: float, y: float) -> Tuple[float, float]:
        """World XY -> terrain-local XY."""
        c, s = self._cos_sin
        dx = x - self.location[0]
        dy = y - self.location[1]
        return c * dx + s * dy, -s * dx + c * dy

    def to_world_xy(self, x: float, y: float) -> Tuple[float, float]:
        """Terrain-local XY -> world XY."""
        c, s = self._cos_sin
        return c * x - s * y + self.location[0], s * x + c * y + self.location[1]

    def to_world_points(self, points: np.ndarray) -> np.ndarray:
        """Transform an ``(N, 3)`` array of local positions to world space."""
        return self.rotate_vectors(points) + np.asarray(self.location, dtype=np.float64)

    def rotate_vectors(self, vectors: np.ndarray) -> np.ndarray:
        """Rotate an ``(N, 3)`` array of local directions into world space."""
        c, s = self._cos_sin
        rotation = np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])
        return np.asarray(vectors, dtype=np.float64) @ rotation.T
