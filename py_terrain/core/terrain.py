"""
Noise terrain: owns the noise, the heightfield sampler and the overlays.

``regenerate`` rebuilds every mesh section and pushes them to an optional
mesh sink; height and normal queries are served by the sampler and stay
available whether or not a mesh was ever built.
"""

from typing import Callable, Dict, Optional, Tuple

import numpy as np
import structlog

from ..config.terrain_config import GridConfig, TerrainSettings
from .debug_draw import sample_debug_normals
from .geometry import TerrainTransform
from .heightfield import HeightfieldSampler
from .mesh import (
    SLAB_SECTION,
    SURFACE_SECTION,
    WATER_SECTION,
    MeshSection,
    build_slab_section,
    build_surface_mesh,
    build_water_section,
)
from .noise import PerlinNoise

logger = structlog.get_logger()

MeshSink = Callable[[int, MeshSection], None]
DebugSink = Callable[[np.ndarray, np.ndarray, float], None]


class NoiseTerrain:
    """
    Procedural terrain built from seeded fBm noise.

    Args:
        settings: Grid, noise, seed and overlay settings
        transform: World placement of the terrain
    """

    def __init__(
        self,
        settings: Optional[TerrainSettings] = None,
        transform: Optional[TerrainTransform] = None,
    ):
        self.settings = settings or TerrainSettings()
        self.noise = PerlinNoise(self.settings.seed)
        self.sampler = HeightfieldSampler(self.settings.grid, self.noise, transform)
        self.sections: Dict[int, MeshSection] = {}

    @property
    def transform(self) -> TerrainTransform:
        return self.sampler.transform

    @transform.setter
    def transform(self, value: TerrainTransform) -> None:
        self.sampler.transform = value

    @property
    def grid(self) -> GridConfig:
        return self.settings.grid

    def configure(self, settings: TerrainSettings) -> None:
        """Swap in new settings; the height cache is dropped."""
        if settings.seed != self.noise.seed:
            self.noise.reseed(settings.seed)
        self.settings = settings
        self.sampler.configure(settings.grid)

    def reseed(self, seed: int) -> None:
        self.configure(self.settings.model_copy(update={"seed": seed}))

    def regenerate(
        self,
        mesh_sink: Optional[MeshSink] = None,
        debug_sink: Optional[DebugSink] = None,
    ) -> Dict[int, MeshSection]:
        """
        Rebuild the surface and overlay sections.

        Sections go to ``mesh_sink`` in index order (surface, slab, water);
        optional overlays whose extents collapse are skipped.
        """
        settings = self.settings
        self.noise.reseed(settings.seed)
        self.sampler.configure(settings.grid)

        grid = self.sampler.build_grid()
        sections: Dict[int, MeshSection] = {
            SURFACE_SECTION: build_surface_mesh(grid, settings.create_collision)
        }

        if settings.slab.show and settings.grid.flatten is not None:
            slab = build_slab_section(settings.grid.flatten, settings.slab)
            if slab is None:
                logger.debug("Slab section skipped, inset leaves no area")
            else:
                sections[SLAB_SECTION] = slab

        if settings.water.show:
            water = build_water_section(settings.grid, settings.water)
            if water is not None:
                sections[WATER_SECTION] = water

        self.sections = sections

        if mesh_sink is not None:
            for index in sorted(sections):
                mesh_sink(index, sections[index])

        if debug_sink is not None and settings.debug.draw_normals:
            surface = sections[SURFACE_SECTION]
            points, normals = sample_debug_normals(
                surface.vertices, surface.normals, settings.debug.max_samples
            )
            debug_sink(
                self.transform.to_world_points(points),
                self.transform.rotate_vectors(normals),
                settings.debug.normal_length,
            )

        logger.info(
            "Terrain regenerated",
            seed=settings.seed,
            vertices=sections[SURFACE_SECTION].vertex_count,
            triangles=sections[SURFACE_SECTION].triangle_count,
            sections=sorted(sections),
        )
        return sections

    def local_extent(self) -> Tuple[float, float]:
        """Half width and half height of the grid in local units."""
        return self.grid.half_width, self.grid.half_height

    @property
    def water_level(self) -> float:
        """World Z of the configured flood level."""
        return self.transform.location[2] + self.settings.water.z

    def height_at_world_xy(self, x: float, y: float, clamp_to_bounds: bool = True) -> float:
        return self.sampler.height_at_world_xy(x, y, clamp_to_bounds)

    def normal_at_world_xy(self, x: float, y: float, clamp_to_bounds: bool = True) -> np.ndarray:
        return self.sampler.normal_at_world_xy(x, y, clamp_to_bounds)

    def is_on_flatten_core(self, local_x: float, local_y: float, extra: float = 0.0) -> bool:
        """
        True when the local point lies on the flatten pad, each half extent
        inflated by ``extra``. Always False without a flatten region.
        """
        flatten = self.grid.flatten
        if flatten is None:
            return False

        hx, hy = flatten.half_extents
        cx, cy = flatten.center
        return abs(local_x - cx) <= hx + extra and abs(local_y - cy) <= hy + extra
