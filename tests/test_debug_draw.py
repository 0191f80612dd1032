"""Tests for debug normal sampling and the matplotlib renderer."""

import numpy as np
import pytest

from py_terrain.core.debug_draw import plot_terrain, sample_debug_normals


class TestDebugDraw:
    """Test sample striding and plot output."""

    @pytest.mark.parametrize("count", [1, 100, 512, 513, 1681, 40401])
    def test_sample_never_exceeds_limit(self, count):
        vertices = np.zeros((count, 3))
        normals = np.zeros((count, 3))
        points, sampled = sample_debug_normals(vertices, normals, 512)

        assert 0 < len(points) <= 512
        assert len(points) == len(sampled)

    def test_small_meshes_are_not_strided(self):
        vertices = np.arange(30, dtype=np.float64).reshape(10, 3)
        points, _ = sample_debug_normals(vertices, vertices.copy(), 512)
        assert np.array_equal(points, vertices)

    def test_even_stride(self):
        vertices = np.arange(1000 * 3, dtype=np.float64).reshape(1000, 3)
        points, _ = sample_debug_normals(vertices, vertices, 100)
        assert len(points) == 100
        assert np.array_equal(points[1], vertices[10])

    def test_empty_input(self):
        points, normals = sample_debug_normals(np.zeros((0, 3)), np.zeros((0, 3)))
        assert len(points) == 0 and len(normals) == 0

    def test_plot_terrain_writes_png(self, tmp_path):
        heights = np.random.default_rng(0).normal(size=(11, 11))
        points = np.column_stack([np.zeros(5), np.linspace(-400.0, 400.0, 5), np.zeros(5)])
        normals = np.tile([0.1, 0.0, 1.0], (5, 1))
        output = tmp_path / "terrain.png"

        fig = plot_terrain(
            heights,
            (-500.0, 500.0, -500.0, 500.0),
            placements=[(0.0, 0.0), (100.0, -250.0)],
            normal_points=points,
            normals=normals,
            output_path=output,
            title="Test terrain",
        )

        assert output.exists()
        assert output.stat().st_size > 0
        assert fig.axes[0].get_title() == "Test terrain"

    def test_plot_terrain_without_overlays(self):
        fig = plot_terrain(np.zeros((3, 3)), (0.0, 1.0, 0.0, 1.0))
        # Image axes plus colorbar axes
        assert len(fig.axes) == 2
