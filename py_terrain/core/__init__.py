"""
Core terrain functionality: noise, heightfield, mesh and scatter placement.
"""

from .noise import PerlinNoise
from .geometry import TerrainTransform
from .heightfield import CacheState, HeightCache, HeightfieldSampler, HeightGrid
from .mesh import MeshSection, build_surface_mesh, build_slab_section, build_water_section
from .terrain import NoiseTerrain
from .scatter import (
    BatchResult,
    BatchStatus,
    PlacementTransform,
    ScatterPlacer,
    ScatterRegion,
    SpawnRequest,
)

__all__ = ['PerlinNoise', 'TerrainTransform', 'CacheState', 'HeightCache', 'HeightfieldSampler',
           'HeightGrid', 'MeshSection', 'build_surface_mesh', 'build_slab_section',
           'build_water_section', 'NoiseTerrain', 'BatchResult', 'BatchStatus',
           'PlacementTransform', 'ScatterPlacer', 'ScatterRegion', 'SpawnRequest']
