#!/usr/bin/env python3
"""
Demo script: build a noise terrain with a flatten pad, scatter a few
object types on it, and render the result to a PNG.
"""

import numpy as np

from py_terrain.config import FlattenRegion, GridConfig, TerrainSettings, WaterSettings
from py_terrain.core import NoiseTerrain, ScatterPlacer, SpawnRequest, TerrainTransform
from py_terrain.core.debug_draw import plot_terrain
from py_terrain.core.mesh import SURFACE_SECTION
from py_terrain.utils import configure_logging


def main():
    """Demonstrate terrain generation and scatter placement."""
    configure_logging(level="WARNING", fmt="plain")

    print("Noise Terrain Demo")
    print("=" * 40)

    settings = TerrainSettings(
        grid=GridConfig(
            quads_x=120,
            quads_y=120,
            spacing=100.0,
            flatten=FlattenRegion(size=(2000.0, 2000.0), height=0.0, falloff=800.0),
        ),
        seed=1337,
        water=WaterSettings(z=-150.0),
    )
    terrain = NoiseTerrain(settings, TerrainTransform(location=(0.0, 0.0, 0.0)))

    debug = {}

    def debug_sink(points, normals, length):
        debug["points"] = points
        debug["normals"] = normals

    print(f"\nBuilding {settings.grid.quads_x}x{settings.grid.quads_y} quads (seed {settings.seed})...")
    sections = terrain.regenerate(debug_sink=debug_sink)
    surface = sections[SURFACE_SECTION]
    heights = terrain.sampler.cache.heights

    print(f"  Sections: {sorted(sections)}")
    print(f"  Vertices: {surface.vertex_count}")
    print(f"  Triangles: {surface.triangle_count}")
    print(f"  Height range: {heights.min():.1f} to {heights.max():.1f}")
    print(f"  Below water: {np.mean(heights < terrain.water_level) * 100:.1f}%")
    print(f"  Debug normals: {len(debug.get('points', []))}")

    requests = [
        SpawnRequest(
            object_type="pine",
            count=300,
            min_z=0.0,
            max_slope_deg=30.0,
            min_spacing=150.0,
            uniform_scale_range=(0.8, 1.3),
            disallow_below_water=True,
            disallow_on_flatten_core=True,
            flatten_core_extra=200.0,
        ),
        SpawnRequest(
            object_type="boulder",
            count=80,
            min_slope_deg=25.0,
            align_to_surface_normal=True,
            surface_offset=-10.0,
        ),
        SpawnRequest(
            object_type="reed",
            count=120,
            max_z=terrain.water_level + 40.0,
            min_z=terrain.water_level - 20.0,
            align_to_surface_normal=False,
        ),
    ]

    print("\nScattering...")
    placer = ScatterPlacer(terrain, seed=12345)
    results = placer.generate(requests)

    placements = []
    for result in results:
        print(
            f"  {result.object_type:<8} {result.accepted:4d}/{result.requested:<4d}"
            f" tries {result.tries_used:5d}/{result.max_tries:<5d} {result.status.value}"
        )
        placements.extend((p.location[0], p.location[1]) for p in result.placements)

    output = "terrain_demo.png"
    half_w, half_h = terrain.local_extent()
    points = debug.get("points")
    plot_terrain(
        heights,
        (-half_w, half_w, -half_h, half_h),
        placements=placements,
        normal_points=points,
        normals=debug.get("normals"),
        output_path=output,
        title=f"Noise terrain, seed {settings.seed}",
    )
    print(f"\nSaved {output}")


if __name__ == "__main__":
    main()
