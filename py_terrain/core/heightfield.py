"""
Heightfield sampling: noise + flatten rules -> per-vertex heights.

The sampler owns the height cache produced by ``build_grid`` and answers
continuous height and normal queries over the grid. Queries read the cache
only while it is valid for the current configuration and seed; otherwise
every corner is re-evaluated from the noise, so results depend on
configuration alone and never on whether a mesh was built.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import numpy as np
import structlog

from ..config.terrain_config import FlattenRegion, GridConfig
from .geometry import TerrainTransform, safe_normalize
from .noise import ArrayLike, PerlinNoise

logger = structlog.get_logger()

# Fractional grid coordinates this close to an integer are snapped onto the vertex
_SNAP_EPSILON = 1e-9


class CacheState(str, Enum):
    """Lifecycle of the height cache."""

    UNBUILT = "unbuilt"
    VALID = "valid"


@dataclass
class HeightCache:
    """Row-major ``(verts_y, verts_x)`` heights plus the inputs they came from."""

    state: CacheState = CacheState.UNBUILT
    heights: Optional[np.ndarray] = None
    config: Optional[GridConfig] = None
    seed: Optional[int] = None

    @classmethod
    def built(cls, heights: np.ndarray, config: GridConfig, seed: int) -> "HeightCache":
        return cls(CacheState.VALID, heights, config, seed)

    def is_valid_for(self, config: GridConfig, seed: int) -> bool:
        """True only when the cache was built from exactly these inputs and has the right size."""
        if self.state is not CacheState.VALID or self.heights is None:
            return False
        if self.heights.shape != (config.verts_y, config.verts_x):
            return False
        return self.seed == seed and self.config == config


@dataclass
class HeightGrid:
    """Output of a full grid build."""

    vertices: np.ndarray  # (verts_x * verts_y, 3), row-major by y then x
    uvs: np.ndarray  # (verts_x * verts_y, 2)
    heights: np.ndarray  # (verts_y, verts_x)
    quads_x: int
    quads_y: int

    @property
    def verts_x(self) -> int:
        return self.quads_x + 1

    @property
    def verts_y(self) -> int:
        return self.quads_y + 1


def flatten_weight(local_x: ArrayLike, local_y: ArrayLike, region: FlattenRegion) -> ArrayLike:
    """
    Blend weight toward the flatten plane.

    1 inside the rectangle, smoothstep decay to 0 at ``falloff`` outside it.
    """
    cx, cy = region.center
    hx, hy = region.half_extents

    # Signed rectilinear distance: <= 0 inside, > 0 outside
    s = np.maximum(np.abs(local_x - cx) - hx, np.abs(local_y - cy) - hy)
    falloff = max(region.falloff, 1.0)
    t = np.clip(s / falloff, 0.0, 1.0)
    return 1.0 - (t * t * (3.0 - 2.0 * t))


def blend_toward(height: ArrayLike, target: float, weight: ArrayLike) -> ArrayLike:
    """Lerp that returns exactly ``target`` at weight 1 and ``height`` at weight 0."""
    return (1.0 - weight) * height + weight * target


class HeightfieldSampler:
    """
    Converts grid indices into heights and serves bilinear queries.

    Args:
        config: Grid and noise parameters
        noise: Noise evaluator, shared with (and reseeded by) the owning terrain
        transform: World placement used by the ``*_world_xy`` queries
    """

    def __init__(
        self,
        config: Optional[GridConfig],
        noise: PerlinNoise,
        transform: Optional[TerrainTransform] = None,
    ):
        self.config = config
        self.noise = noise
        self.transform = transform or TerrainTransform()
        self.cache = HeightCache()

    def configure(self, config: GridConfig) -> None:
        """Replace the configuration; the cache becomes stale."""
        self.config = config
        self.invalidate()

    def invalidate(self) -> None:
        self.cache = HeightCache()

    def _require_config(self) -> GridConfig:
        if self.config is None:
            raise ValueError("HeightfieldSampler queried before a GridConfig was set")
        return self.config

    @property
    def cache_valid(self) -> bool:
        config = self._require_config()
        return self.cache.is_valid_for(config, self.noise.seed)

    def local_xy_of_index(self, ix: ArrayLike, iy: ArrayLike) -> Tuple[ArrayLike, ArrayLike]:
        """Vertex position of a grid index, centred on the origin."""
        config = self._require_config()
        return (
            ix * config.spacing - config.half_width,
            iy * config.spacing - config.half_height,
        )

    def sample_height_at_index(
        self,
        ix: ArrayLike,
        iy: ArrayLike,
        local_x: Optional[ArrayLike] = None,
        local_y: Optional[ArrayLike] = None,
    ) -> ArrayLike:
        """
        Final height of grid index ``(ix, iy)``.

        Noise is sampled in index space, decoupled from grid spacing; the
        flatten blend uses local XY (computed from the index when omitted).
        """
        config = self._require_config()

        nx = (ix + config.noise_offset[0]) * config.feature_scale
        ny = (iy + config.noise_offset[1]) * config.feature_scale
        height = (
            self.noise.fbm_2d(nx, ny, config.octaves, config.lacunarity, config.persistence)
            * config.amplitude
        )

        if config.flatten is not None:
            if local_x is None or local_y is None:
                local_x, local_y = self.local_xy_of_index(ix, iy)
            weight = flatten_weight(local_x, local_y, config.flatten)
            height = blend_toward(height, config.flatten.height, weight)
            if np.ndim(height) == 0:
                height = float(height)

        return height

    def sample_tile(self, x0: int, x1: int, y0: int, y1: int) -> np.ndarray:
        """
        Heights for index columns ``x0..x1-1`` and rows ``y0..y1-1``.

        Pure function of the index range and the noise table, so tiles can be
        evaluated independently and stitched together.
        """
        gx, gy = np.meshgrid(
            np.arange(x0, x1, dtype=np.float64),
            np.arange(y0, y1, dtype=np.float64),
        )
        local_x, local_y = self.local_xy_of_index(gx, gy)
        return np.asarray(self.sample_height_at_index(gx, gy, local_x, local_y), dtype=np.float64)

    def build_grid(self) -> HeightGrid:
        """Evaluate every vertex once; the cache is valid only after completion."""
        config = self._require_config()
        self.invalidate()

        gx, gy = np.meshgrid(
            np.arange(config.verts_x, dtype=np.float64),
            np.arange(config.verts_y, dtype=np.float64),
        )
        local_x, local_y = self.local_xy_of_index(gx, gy)
        heights = self.sample_tile(0, config.verts_x, 0, config.verts_y)

        vertices = np.column_stack([local_x.ravel(), local_y.ravel(), heights.ravel()])
        uvs = np.column_stack([(gx / config.quads_x).ravel(), (gy / config.quads_y).ravel()])

        self.cache = HeightCache.built(heights.copy(), config, self.noise.seed)

        logger.debug(
            "Height grid built",
            verts_x=config.verts_x,
            verts_y=config.verts_y,
            min_height=float(heights.min()),
            max_height=float(heights.max()),
        )

        return HeightGrid(
            vertices=vertices,
            uvs=uvs,
            heights=heights,
            quads_x=config.quads_x,
            quads_y=config.quads_y,
        )

    def _corner_height(self, ix: int, iy: int, use_cache: bool) -> float:
        if use_cache:
            return float(self.cache.heights[iy, ix])
        local_x, local_y = self.local_xy_of_index(float(ix), float(iy))
        return float(self.sample_height_at_index(float(ix), float(iy), local_x, local_y))

    def height_at_local_xy(
        self, local_x: float, local_y: float, clamp_to_bounds: bool = True
    ) -> float:
        """
        Bilinear height at terrain-local XY.

        Outside the grid returns 0.0 when ``clamp_to_bounds`` is False,
        otherwise the point is clamped onto the grid edge.
        """
        config = self._require_config()

        u = (local_x + config.half_width) / config.spacing
        v = (local_y + config.half_height) / config.spacing

        if not clamp_to_bounds and (
            u < 0.0 or u > config.quads_x or v < 0.0 or v > config.quads_y
        ):
            return 0.0

        u = min(max(u, 0.0), float(config.quads_x))
        v = min(max(v, 0.0), float(config.quads_y))

        # Keep exact vertex hits exact despite round-off in the local->grid mapping
        if abs(u - round(u)) < _SNAP_EPSILON:
            u = float(round(u))
        if abs(v - round(v)) < _SNAP_EPSILON:
            v = float(round(v))

        ix = min(int(math.floor(u)), config.quads_x - 1)
        iy = min(int(math.floor(v)), config.quads_y - 1)
        tx = u - ix
        ty = v - iy

        use_cache = self.cache.is_valid_for(config, self.noise.seed)

        h00 = self._corner_height(ix, iy, use_cache)
        h10 = self._corner_height(ix + 1, iy, use_cache)
        h01 = self._corner_height(ix, iy + 1, use_cache)
        h11 = self._corner_height(ix + 1, iy + 1, use_cache)

        hx0 = h00 + (h10 - h00) * tx
        hx1 = h01 + (h11 - h01) * tx
        return hx0 + (hx1 - hx0) * ty

    def height_at_world_xy(self, x: float, y: float, clamp_to_bounds: bool = True) -> float:
        """World-space height: local query plus the terrain's Z placement."""
        local_x, local_y = self.transform.to_local_xy(x, y)
        return self.height_at_local_xy(local_x, local_y, clamp_to_bounds) + self.transform.location[2]

    def normal_at_world_xy(
        self, x: float, y: float, clamp_to_bounds: bool = True
    ) -> np.ndarray:
        """
        Surface normal from central differences at +-spacing along the world axes.

        Returns the up vector when the cross product degenerates.
        """
        config = self._require_config()
        d = config.spacing

        h_left = self.height_at_world_xy(x - d, y, clamp_to_bounds)
        h_right = self.height_at_world_xy(x + d, y, clamp_to_bounds)
        h_down = self.height_at_world_xy(x, y - d, clamp_to_bounds)
        h_up = self.height_at_world_xy(x, y + d, clamp_to_bounds)

        tangent_x = np.array([2.0 * d, 0.0, h_right - h_left])
        tangent_y = np.array([0.0, 2.0 * d, h_up - h_down])
        return safe_normalize(np.cross(tangent_x, tangent_y))
