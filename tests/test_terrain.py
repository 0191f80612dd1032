"""Tests for the NoiseTerrain orchestrator."""

import numpy as np
import pytest

from py_terrain.config.terrain_config import (
    DebugDrawSettings,
    FlattenRegion,
    GridConfig,
    SlabSettings,
    TerrainSettings,
    WaterSettings,
)
from py_terrain.core.geometry import TerrainTransform
from py_terrain.core.mesh import SLAB_SECTION, SURFACE_SECTION, WATER_SECTION
from py_terrain.core.terrain import NoiseTerrain


class TestNoiseTerrain:
    """Test regeneration, sinks and world-space queries."""

    @pytest.fixture
    def settings(self):
        return TerrainSettings(
            grid=GridConfig(
                quads_x=10,
                quads_y=10,
                spacing=100.0,
                flatten=FlattenRegion(size=(300.0, 300.0), height=20.0, falloff=100.0),
            ),
            seed=1337,
        )

    def test_regenerate_sections_in_order(self, settings):
        received = []
        terrain = NoiseTerrain(settings)
        sections = terrain.regenerate(mesh_sink=lambda index, section: received.append(index))

        assert received == [SURFACE_SECTION, SLAB_SECTION, WATER_SECTION]
        assert sorted(sections) == received
        assert terrain.sections is sections

    def test_surface_collision_flag(self, settings):
        sections = NoiseTerrain(settings).regenerate()
        assert sections[SURFACE_SECTION].create_collision
        assert not sections[WATER_SECTION].create_collision

        no_collision = settings.model_copy(update={"create_collision": False})
        assert not NoiseTerrain(no_collision).regenerate()[SURFACE_SECTION].create_collision

    def test_slab_needs_flatten(self, settings):
        grid = settings.grid.model_copy(update={"flatten": None})
        sections = NoiseTerrain(settings.model_copy(update={"grid": grid})).regenerate()
        assert SLAB_SECTION not in sections

    def test_overlays_can_be_hidden(self, settings):
        hidden = settings.model_copy(
            update={"slab": SlabSettings(show=False), "water": WaterSettings(show=False)}
        )
        assert list(NoiseTerrain(hidden).regenerate()) == [SURFACE_SECTION]

    def test_collapsed_slab_is_skipped(self, settings):
        wide_inset = settings.model_copy(update={"slab": SlabSettings(inset=500.0)})
        assert SLAB_SECTION not in NoiseTerrain(wide_inset).regenerate()

    def test_regenerate_is_deterministic(self, settings):
        a = NoiseTerrain(settings).regenerate()
        b = NoiseTerrain(settings).regenerate()
        assert np.array_equal(a[SURFACE_SECTION].vertices, b[SURFACE_SECTION].vertices)
        assert np.array_equal(a[SURFACE_SECTION].normals, b[SURFACE_SECTION].normals)

    def test_debug_sink_receives_bounded_sample(self):
        settings = TerrainSettings(grid=GridConfig(quads_x=40, quads_y=40), seed=7)
        calls = []

        def debug_sink(points, normals, length):
            calls.append((points, normals, length))

        NoiseTerrain(settings).regenerate(debug_sink=debug_sink)

        assert len(calls) == 1
        points, normals, length = calls[0]
        assert 0 < len(points) <= 512
        assert points.shape == normals.shape
        assert length == settings.debug.normal_length

    def test_debug_sink_disabled(self, settings):
        quiet = settings.model_copy(update={"debug": DebugDrawSettings(draw_normals=False)})
        calls = []
        NoiseTerrain(quiet).regenerate(debug_sink=lambda *args: calls.append(args))
        assert calls == []

    def test_debug_points_in_world_space(self, settings):
        transform = TerrainTransform(location=(5000.0, 0.0, 100.0))
        calls = []
        terrain = NoiseTerrain(settings, transform)
        sections = terrain.regenerate(debug_sink=lambda p, n, length: calls.append(p))

        first_vertex = sections[SURFACE_SECTION].vertices[0]
        np.testing.assert_allclose(calls[0][0], first_vertex + np.array([5000.0, 0.0, 100.0]))

    def test_reseed_changes_heights(self, settings):
        terrain = NoiseTerrain(settings)
        before = terrain.regenerate()[SURFACE_SECTION].vertices.copy()

        terrain.reseed(42)
        assert terrain.settings.seed == 42
        assert not terrain.sampler.cache_valid

        after = terrain.regenerate()[SURFACE_SECTION].vertices
        assert not np.array_equal(before, after)

    def test_queries_without_regenerate(self, settings):
        """Heights are available before any mesh is built."""
        built = NoiseTerrain(settings)
        built.regenerate()
        fresh = NoiseTerrain(settings)

        for x, y in [(0.0, 0.0), (321.0, -123.0), (-480.0, 499.0)]:
            assert fresh.height_at_world_xy(x, y) == pytest.approx(
                built.height_at_world_xy(x, y), abs=1e-6
            )

    def test_flatten_pad_height_in_world(self, settings):
        terrain = NoiseTerrain(settings, TerrainTransform(location=(0.0, 0.0, 30.0)))
        terrain.regenerate()
        assert terrain.height_at_world_xy(0.0, 0.0) == pytest.approx(50.0)

    def test_water_level_follows_transform(self, settings):
        water = settings.model_copy(update={"water": WaterSettings(z=15.0)})
        terrain = NoiseTerrain(water, TerrainTransform(location=(0.0, 0.0, -40.0)))
        assert terrain.water_level == pytest.approx(-25.0)

    def test_flatten_core_membership(self, settings):
        terrain = NoiseTerrain(settings)
        assert terrain.is_on_flatten_core(0.0, 0.0)
        assert terrain.is_on_flatten_core(150.0, -150.0)
        assert not terrain.is_on_flatten_core(151.0, 0.0)
        assert terrain.is_on_flatten_core(151.0, 0.0, extra=10.0)

    def test_flatten_core_without_region(self):
        terrain = NoiseTerrain(TerrainSettings(grid=GridConfig(quads_x=2, quads_y=2)))
        assert not terrain.is_on_flatten_core(0.0, 0.0, extra=1e6)

    def test_local_extent(self, settings):
        assert NoiseTerrain(settings).local_extent() == (500.0, 500.0)
