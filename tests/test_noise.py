"""
Tests for the seeded Perlin noise and fBm evaluator.
"""

import numpy as np
import pytest

from py_terrain.core.noise import PerlinNoise, fade


class TestPerlinNoise:
    """Test noise determinism, range and table handling."""

    @pytest.fixture
    def sample_points(self):
        """10,000 random points spread over many lattice cells."""
        rng = np.random.default_rng(2024)
        return rng.uniform(-500.0, 500.0, size=(2, 10_000))

    def test_permutation_is_duplicated_shuffle(self):
        """Test the table holds 0..255 twice, second half equal to the first."""
        noise = PerlinNoise(1337)

        assert noise.perm.shape == (512,)
        assert sorted(noise.perm[:256].tolist()) == list(range(256))
        assert np.array_equal(noise.perm[:256], noise.perm[256:])

    def test_same_seed_same_output(self, sample_points):
        """Test two evaluators with one seed agree bit for bit."""
        x, y = sample_points
        a = PerlinNoise(1337)
        b = PerlinNoise(1337)

        assert np.array_equal(a.noise_2d(x, y), b.noise_2d(x, y))
        assert np.array_equal(a.fbm_2d(x, y, 4, 2.0, 0.45), b.fbm_2d(x, y, 4, 2.0, 0.45))

    def test_repeated_calls_are_stable(self):
        """Test repeated scalar evaluation returns the same value."""
        noise = PerlinNoise(7)
        first = [noise.noise_2d(0.37 * i, 1.91 * i) for i in range(50)]
        second = [noise.noise_2d(0.37 * i, 1.91 * i) for i in range(50)]
        assert first == second

    def test_reseed_replaces_table(self, sample_points):
        """Test reseeding changes the output and reseeding back restores it."""
        x, y = sample_points
        noise = PerlinNoise(1337)
        original = noise.noise_2d(x, y)

        noise.reseed(42)
        assert noise.seed == 42
        assert not np.array_equal(noise.noise_2d(x, y), original)

        noise.reseed(1337)
        assert np.array_equal(noise.noise_2d(x, y), original)

    def test_noise_range(self, sample_points):
        """Test base noise stays within [-1, 1] up to float slack."""
        x, y = sample_points
        values = PerlinNoise(99).noise_2d(x, y)

        assert np.all(values >= -1.0001)
        assert np.all(values <= 1.0001)
        assert np.std(values) > 0.05

    @pytest.mark.parametrize("persistence", [0.0, 0.3, 0.45, 0.8, 1.0])
    def test_fbm_range(self, sample_points, persistence):
        """Test normalized fBm stays in the base noise range."""
        x, y = sample_points
        values = PerlinNoise(5).fbm_2d(x * 0.05, y * 0.05, 6, 2.0, persistence)

        assert np.all(np.abs(values) <= 1.0001)

    def test_fbm_single_octave_equals_noise(self):
        """Test one octave of fBm is the base noise."""
        noise = PerlinNoise(11)
        for x, y in [(0.3, 0.7), (12.25, -4.5), (-100.1, 3.3)]:
            assert noise.fbm_2d(x, y, 1, 2.0, 0.5) == noise.noise_2d(x, y)

    def test_fbm_without_octaves_returns_raw_sum(self):
        """Test zero octaves accumulates nothing and skips normalization."""
        assert PerlinNoise(1).fbm_2d(3.2, 4.1, 0, 2.0, 0.5) == 0.0

    def test_zero_at_lattice_points(self):
        """Test gradient noise vanishes on integer coordinates."""
        noise = PerlinNoise(3)
        for x, y in [(0, 0), (1, 5), (-7, 12), (255, 256)]:
            assert noise.noise_2d(float(x), float(y)) == 0.0

    def test_lattice_wraps_every_256(self):
        """Test coordinates 256 apart land on the same lattice cell."""
        noise = PerlinNoise(21)
        assert noise.noise_2d(3.25, 8.5) == pytest.approx(noise.noise_2d(259.25, 8.5), abs=1e-9)
        assert noise.noise_2d(-0.75, 2.5) == pytest.approx(noise.noise_2d(255.25, 2.5), abs=1e-9)

    def test_huge_inputs_stay_in_bounds(self):
        """Test very large finite inputs do not index outside the table."""
        noise = PerlinNoise(8)
        value = noise.noise_2d(1e12 + 0.3, -3e15)
        assert np.isfinite(value)

    def test_scalar_and_array_paths_agree(self):
        """Test array evaluation matches per-point scalar evaluation."""
        noise = PerlinNoise(1337)
        xs = np.linspace(-20.0, 20.0, 37)
        ys = np.linspace(5.0, -9.0, 37)

        vectorized = noise.fbm_2d(xs, ys, 4, 2.0, 0.45)
        scalar = [noise.fbm_2d(float(x), float(y), 4, 2.0, 0.45) for x, y in zip(xs, ys)]

        np.testing.assert_allclose(vectorized, scalar, rtol=0.0, atol=1e-12)
        assert isinstance(noise.noise_2d(0.5, 0.5), float)
        assert vectorized.shape == xs.shape

    def test_fade_curve(self):
        """Test the quintic fade endpoints and midpoint."""
        assert fade(0.0) == 0.0
        assert fade(1.0) == 1.0
        assert fade(0.5) == pytest.approx(0.5)
