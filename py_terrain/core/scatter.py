"""
Constrained scatter placement on a noise terrain.

For every spawn request the placer rejection-samples random positions on the
terrain (or a sub-region of it), filters them by elevation, water, flatten
pad, slope and minimum spacing, and hands each accepted transform to an
optional spawn sink. Each batch is bounded by a total try budget of
``max_tries_per_instance * count``; running out is a partial result, not an
error.

Process per batch:
1. draw a uniform local XY from the seeded stream
2. reject by height window, water level and flatten pad
3. compute the upward surface normal, reject by slope window
4. reject by spacing against the batch's accepted positions
5. draw yaw and scale, build the transform, hand it to the sink
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional, Sequence, Tuple

import numpy as np
import structlog
from pydantic import BaseModel, Field
from scipy.spatial.transform import Rotation

from ..config.config import settings
from ..utils.random import AleaPRNG
from .geometry import DEGENERATE_LENGTH_SQ, UP, safe_normalize
from .terrain import NoiseTerrain

logger = structlog.get_logger()


class SpawnRequest(BaseModel):
    """One scatter batch: what to place, how many, and under which constraints."""

    object_type: Any = Field(default=None, description="Handle passed to the spawn sink")
    count: int = Field(default=100, ge=0, description="Number of instances wanted")

    # Z constraints (inclusive)
    min_z: float = Field(default=-math.inf, description="Lowest accepted world height")
    max_z: float = Field(default=math.inf, description="Highest accepted world height")

    # Slope constraints (degrees)
    min_slope_deg: float = Field(default=0.0, ge=0.0, le=90.0, description="Minimum slope")
    max_slope_deg: float = Field(default=90.0, ge=0.0, le=90.0, description="Maximum slope")

    min_spacing: float = Field(
        default=0.0, ge=0.0, description="Minimum XY distance within the batch (0 disables)"
    )

    # Placement
    surface_offset: float = Field(default=0.0, description="Lift above the surface")
    random_yaw: bool = Field(default=True, description="Random spin in [0, 360)")
    uniform_scale_range: Tuple[float, float] = Field(
        default=(1.0, 1.0), description="Uniform scale drawn from this range"
    )
    align_to_surface_normal: bool = Field(
        default=True,
        description="Align the object's up axis to the surface normal; otherwise stay world-up",
    )

    max_tries_per_instance: int = Field(
        default=25, ge=1, description="Try budget multiplier for the whole batch"
    )

    disallow_below_water: bool = Field(
        default=False, description="Reject heights below the terrain's water level"
    )
    disallow_on_flatten_core: bool = Field(
        default=False, description="Reject points on the terrain's flatten pad"
    )
    flatten_core_extra: float = Field(
        default=0.0, ge=0.0, description="Inflation of each flatten pad half extent"
    )

    @property
    def has_slope_window(self) -> bool:
        return self.min_slope_deg > 0.0 or self.max_slope_deg < 90.0

    @property
    def max_tries(self) -> int:
        return max(1, self.max_tries_per_instance) * max(1, self.count)


class ScatterRegion(BaseModel):
    """Terrain-local rectangle that restricts sampling."""

    min_xy: Tuple[float, float] = Field(default=(-10000.0, -10000.0))
    max_xy: Tuple[float, float] = Field(default=(10000.0, 10000.0))


class BatchStatus(str, Enum):
    """Outcome of one spawn batch."""

    COMPLETE = "complete"
    PARTIAL = "partial"
    SKIPPED = "skipped"
    NO_TERRAIN = "no_terrain"


@dataclass
class PlacementTransform:
    """Location, rotation (quaternion x, y, z, w) and uniform scale of a placement."""

    location: np.ndarray
    rotation: np.ndarray
    scale: float
    normal: np.ndarray
    yaw_deg: float

    @property
    def up_axis(self) -> np.ndarray:
        """World direction of the object's local +Z."""
        return Rotation.from_quat(self.rotation).apply(UP)

    def to_dict(self) -> dict:
        return {
            "location": [float(v) for v in self.location],
            "rotation": [float(v) for v in self.rotation],
            "scale": float(self.scale),
            "normal": [float(v) for v in self.normal],
            "yaw_deg": float(self.yaw_deg),
        }


@dataclass
class BatchResult:
    """Report of one batch: how many were placed out of how many, and at what cost."""

    object_type: Any
    requested: int
    accepted: int = 0
    tries_used: int = 0
    max_tries: int = 0
    status: BatchStatus = BatchStatus.COMPLETE
    message: str = ""
    spawn_failures: int = 0
    placements: List[PlacementTransform] = field(default_factory=list)


SpawnSink = Callable[[Any, PlacementTransform], bool]


def align_up_to(normal: np.ndarray) -> Rotation:
    """Shortest-arc rotation taking +Z onto ``normal``."""
    axis = np.cross(UP, normal)
    sin_angle_sq = float(np.dot(axis, axis))
    if sin_angle_sq < DEGENERATE_LENGTH_SQ:
        return Rotation.identity()
    sin_angle = math.sqrt(sin_angle_sq)
    angle = math.atan2(sin_angle, float(normal[2]))
    return Rotation.from_rotvec(axis / sin_angle * angle)


def make_placement_transform(
    x: float,
    y: float,
    z: float,
    normal: np.ndarray,
    yaw_deg: float,
    scale: float,
    surface_offset: float = 0.0,
    align_to_surface_normal: bool = True,
) -> PlacementTransform:
    """
    Build the transform for an accepted point.

    Aligned: +Z follows the normal, then spins by yaw around the normal, and
    the lift runs along the normal. Unaligned: yaw about world +Z, lift along
    world +Z.
    """
    if align_to_surface_normal:
        up = normal
        spin = Rotation.from_rotvec(normal * math.radians(yaw_deg))
        rotation = spin * align_up_to(normal)
    else:
        up = UP
        rotation = Rotation.from_euler("z", yaw_deg, degrees=True)

    location = np.array([x, y, z]) + up * surface_offset
    return PlacementTransform(
        location=location,
        rotation=rotation.as_quat(),
        scale=scale,
        normal=normal.copy(),
        yaw_deg=yaw_deg,
    )


class ScatterPlacer:
    """
    Places batches of objects on a terrain by rejection sampling.

    Args:
        terrain: Terrain to query; None makes every batch report NO_TERRAIN
        seed: Seed of the random stream shared by all batches of a run
        region: Optional local rectangle restricting sampling
        spawn_sink: Called per accepted candidate; False means the spawn failed
    """

    def __init__(
        self,
        terrain: Optional[NoiseTerrain],
        seed: Optional[int] = None,
        region: Optional[ScatterRegion] = None,
        spawn_sink: Optional[SpawnSink] = None,
    ):
        self.terrain = terrain
        self.seed = settings.default_scatter_seed if seed is None else seed
        self.region = region
        self.spawn_sink = spawn_sink

    def sampling_bounds(self) -> Tuple[Tuple[float, float], Tuple[float, float]]:
        """Local sampling rectangle: terrain extent, or the region clamped into it."""
        half_w, half_h = self.terrain.local_extent()
        if self.region is None:
            return (-half_w, -half_h), (half_w, half_h)

        min_x = min(max(self.region.min_xy[0], -half_w), half_w)
        min_y = min(max(self.region.min_xy[1], -half_h), half_h)
        max_x = min(max(self.region.max_xy[0], -half_w), half_w)
        max_y = min(max(self.region.max_xy[1], -half_h), half_h)
        if max_x < min_x:
            min_x, max_x = max_x, min_x
        if max_y < min_y:
            min_y, max_y = max_y, min_y
        return (min_x, min_y), (max_x, max_y)

    def generate(self, requests: Sequence[SpawnRequest]) -> List[BatchResult]:
        """Run every request in order against one seeded stream."""
        if self.terrain is None:
            logger.warning("Scatter requested without a terrain", batches=len(requests))
            return [
                BatchResult(
                    object_type=request.object_type,
                    requested=request.count,
                    status=BatchStatus.NO_TERRAIN,
                    message="No terrain bound to the scatter placer",
                )
                for request in requests
            ]

        bounds = self.sampling_bounds()
        rng = AleaPRNG(self.seed)
        return [self._run_batch(request, rng, bounds) for request in requests]

    def _run_batch(
        self,
        request: SpawnRequest,
        rng: AleaPRNG,
        bounds: Tuple[Tuple[float, float], Tuple[float, float]],
    ) -> BatchResult:
        result = BatchResult(
            object_type=request.object_type,
            requested=request.count,
            max_tries=request.max_tries,
        )

        if request.object_type is None:
            result.status = BatchStatus.SKIPPED
            result.message = "Request has no object type"
            logger.info("Scatter batch skipped", reason=result.message)
            return result

        (min_x, min_y), (max_x, max_y) = bounds
        transform = self.terrain.transform
        placed: List[Tuple[float, float]] = []

        while result.accepted < request.count and result.tries_used < result.max_tries:
            result.tries_used += 1

            local_x = rng.uniform(min_x, max_x)
            local_y = rng.uniform(min_y, max_y)
            world_x, world_y = transform.to_world_xy(local_x, local_y)

            surface = self._accept_by_constraints(request, local_x, local_y, world_x, world_y)
            if surface is None:
                continue
            z, normal = surface

            if not self._respects_spacing(request, world_x, world_y, placed):
                continue

            yaw_deg = rng.uniform(0.0, 360.0) if request.random_yaw else 0.0
            scale = rng.uniform(*request.uniform_scale_range)

            placement = make_placement_transform(
                world_x,
                world_y,
                z,
                normal,
                yaw_deg,
                scale,
                request.surface_offset,
                request.align_to_surface_normal,
            )

            if self.spawn_sink is not None and not self.spawn_sink(request.object_type, placement):
                result.spawn_failures += 1
                logger.warning(
                    "Spawn sink rejected placement",
                    object_type=str(request.object_type),
                    location=placement.to_dict()["location"],
                )
                continue

            placed.append((world_x, world_y))
            result.placements.append(placement)
            result.accepted += 1

        if result.accepted < request.count:
            result.status = BatchStatus.PARTIAL
            result.message = "Try budget exhausted"
        else:
            result.message = "All instances placed"

        logger.info(
            "Scatter batch finished",
            object_type=str(request.object_type),
            accepted=result.accepted,
            requested=result.requested,
            tries=result.tries_used,
        )
        return result

    def _accept_by_constraints(
        self,
        request: SpawnRequest,
        local_x: float,
        local_y: float,
        world_x: float,
        world_y: float,
    ) -> Optional[Tuple[float, np.ndarray]]:
        """Height and upward normal when the point passes every surface constraint."""
        terrain = self.terrain
        z = terrain.height_at_world_xy(world_x, world_y, clamp_to_bounds=True)

        if z < request.min_z or z > request.max_z:
            return None

        if request.disallow_below_water and z < terrain.water_level:
            return None

        if request.disallow_on_flatten_core and terrain.is_on_flatten_core(
            local_x, local_y, request.flatten_core_extra
        ):
            return None

        # Always computed: the normal also drives alignment
        normal = safe_normalize(terrain.normal_at_world_xy(world_x, world_y, clamp_to_bounds=True))
        if normal[2] < 0.0:
            normal = -normal

        if request.has_slope_window:
            slope_deg = math.degrees(math.acos(min(max(float(normal[2]), -1.0), 1.0)))
            if slope_deg < request.min_slope_deg or slope_deg > request.max_slope_deg:
                return None

        return z, normal

    @staticmethod
    def _respects_spacing(
        request: SpawnRequest, x: float, y: float, placed: Sequence[Tuple[float, float]]
    ) -> bool:
        if request.min_spacing <= 0.0:
            return True
        min_dist_sq = request.min_spacing * request.min_spacing

        for px, py in placed:
            dx = x - px
            dy = y - py
            if dx * dx + dy * dy < min_dist_sq:
                return False
        return True
