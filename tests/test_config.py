"""Tests for terrain configuration models and environment settings."""

import pytest
from pydantic import ValidationError

from py_terrain.config.config import Settings, settings as app_settings
from py_terrain.config.terrain_config import FlattenRegion, GridConfig, TerrainSettings


class TestGridConfig:
    """Test defaults, derived sizes and validation."""

    def test_defaults(self):
        config = GridConfig()
        assert (config.quads_x, config.quads_y) == (200, 200)
        assert config.spacing == 100.0
        assert config.amplitude == 1200.0
        assert config.octaves == 4
        assert config.persistence == 0.45
        assert config.noise_offset == (37.123, 53.789)
        assert config.flatten is None

    def test_derived_sizes(self):
        config = GridConfig(quads_x=4, quads_y=6, spacing=50.0)
        assert config.verts_x == 5
        assert config.verts_y == 7
        assert config.total_verts == 35
        assert config.half_width == 100.0
        assert config.half_height == 150.0

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"quads_x": 0},
            {"quads_y": -3},
            {"spacing": 0.0},
            {"octaves": 0},
            {"persistence": 1.5},
            {"lacunarity": 0.0},
            {"feature_scale": -0.1},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValidationError):
            GridConfig(**kwargs)

    def test_frozen(self):
        config = GridConfig()
        with pytest.raises(ValidationError):
            config.spacing = 50.0

    def test_copy_with_update(self):
        config = GridConfig()
        changed = config.model_copy(update={"amplitude": 10.0})
        assert changed.amplitude == 10.0
        assert config.amplitude == 1200.0
        assert changed != config


class TestFlattenRegion:
    def test_half_extents(self):
        assert FlattenRegion(size=(300.0, 80.0)).half_extents == (150.0, 40.0)

    def test_negative_falloff_rejected(self):
        with pytest.raises(ValidationError):
            FlattenRegion(falloff=-1.0)


class TestSettings:
    """Test environment-driven application settings."""

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("PY_TERRAIN_DEFAULT_SCATTER_SEED", "7")
        monkeypatch.setenv("PY_TERRAIN_LOG_LEVEL", "DEBUG")
        settings = Settings()
        assert settings.default_scatter_seed == 7
        assert settings.log_level == "DEBUG"

    def test_terrain_seed_default(self):
        assert TerrainSettings().seed == app_settings.default_terrain_seed

    def test_terrain_settings_from_dict(self):
        settings = TerrainSettings.model_validate(
            {"grid": {"quads_x": 8, "flatten": {"size": [100, 100]}}, "seed": 9}
        )
        assert settings.grid.quads_x == 8
        assert settings.grid.flatten.size == (100.0, 100.0)
        assert settings.seed == 9
