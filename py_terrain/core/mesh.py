"""
Mesh construction from a height grid, plus the flat overlay quads.

Everything here is a pure transform: the same inputs always produce the
same arrays, and sections are rebuilt from scratch on every regeneration.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..config.terrain_config import FlattenRegion, GridConfig, SlabSettings, WaterSettings
from .geometry import UP, safe_normalize_rows
from .heightfield import HeightGrid

TANGENT = np.array([1.0, 0.0, 0.0])

# Fan indices shared by the single-quad overlays (corners BL, BR, TR, TL)
QUAD_INDICES = np.array([0, 2, 1, 0, 3, 2], dtype=np.int32)

SURFACE_SECTION = 0
SLAB_SECTION = 1
WATER_SECTION = 2


@dataclass
class MeshSection:
    """Geometry handed to a mesh sink."""

    vertices: np.ndarray  # (N, 3)
    triangles: np.ndarray  # (3T,) flat index list
    normals: np.ndarray  # (N, 3)
    uvs: np.ndarray  # (N, 2)
    tangents: np.ndarray  # (N, 3)
    create_collision: bool = False

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def triangle_count(self) -> int:
        return len(self.triangles) // 3


def build_triangles(quads_x: int, quads_y: int) -> np.ndarray:
    """
    Two triangles per quad, ``(v00, v11, v10)`` and ``(v00, v01, v11)``.

    Quads are emitted row by row (y outer, x inner); faces point to +Z.
    """
    verts_x = quads_x + 1
    qx, qy = np.meshgrid(np.arange(quads_x), np.arange(quads_y))
    v00 = (qy * verts_x + qx).ravel()
    v10 = v00 + 1
    v01 = v00 + verts_x
    v11 = v01 + 1

    return np.column_stack([v00, v11, v10, v00, v01, v11]).ravel().astype(np.int32)


def compute_vertex_normals(vertices: np.ndarray, triangles: np.ndarray) -> np.ndarray:
    """
    Smooth area-weighted vertex normals.

    Each triangle adds its unnormalized face cross product to its three
    corners, so larger faces weigh more. Degenerate sums fall back to up.
    """
    tris = np.asarray(triangles).reshape(-1, 3)
    a = vertices[tris[:, 0]]
    b = vertices[tris[:, 1]]
    c = vertices[tris[:, 2]]

    face_normals = np.cross(c - a, b - a)

    accumulated = np.zeros_like(vertices, dtype=np.float64)
    for corner in range(3):
        np.add.at(accumulated, tris[:, corner], face_normals)

    return safe_normalize_rows(accumulated)


def build_surface_mesh(grid: HeightGrid, create_collision: bool = True) -> MeshSection:
    """Triangulate a built height grid."""
    triangles = build_triangles(grid.quads_x, grid.quads_y)
    normals = compute_vertex_normals(grid.vertices, triangles)
    tangents = np.tile(TANGENT, (len(grid.vertices), 1))

    return MeshSection(
        vertices=grid.vertices,
        triangles=triangles,
        normals=normals,
        uvs=grid.uvs,
        tangents=tangents,
        create_collision=create_collision,
    )


def _flat_quad(
    min_x: float, min_y: float, max_x: float, max_y: float, z: float, uv_max: float
) -> MeshSection:
    vertices = np.array(
        [
            [min_x, min_y, z],  # BL
            [max_x, min_y, z],  # BR
            [max_x, max_y, z],  # TR
            [min_x, max_y, z],  # TL
        ]
    )
    uvs = np.array([[0.0, 0.0], [uv_max, 0.0], [uv_max, uv_max], [0.0, uv_max]])

    return MeshSection(
        vertices=vertices,
        triangles=QUAD_INDICES.copy(),
        normals=np.tile(UP, (4, 1)),
        uvs=uvs,
        tangents=np.tile(TANGENT, (4, 1)),
        create_collision=False,
    )


def build_slab_section(flatten: FlattenRegion, slab: SlabSettings) -> Optional[MeshSection]:
    """
    Visual pad on top of the flatten region, shrunk by ``slab.inset`` per side.

    Returns None when the inset leaves no area.
    """
    hx = 0.5 * max(0.0, flatten.size[0] - 2.0 * slab.inset)
    hy = 0.5 * max(0.0, flatten.size[1] - 2.0 * slab.inset)
    if hx <= 0.0 or hy <= 0.0:
        return None

    cx, cy = flatten.center
    z_top = flatten.height + slab.z_offset
    return _flat_quad(cx - hx, cy - hy, cx + hx, cy + hy, z_top, 1.0)


def build_water_section(config: GridConfig, water: WaterSettings) -> Optional[MeshSection]:
    """Water plane over the terrain extent plus padding, UVs tiled by ``uv_tile``."""
    half_w = config.half_width + water.padding
    half_h = config.half_height + water.padding
    if half_w <= 0.0 or half_h <= 0.0:
        return None

    z = water.z + water.z_offset
    return _flat_quad(-half_w, -half_h, half_w, half_h, z, water.uv_tile)
