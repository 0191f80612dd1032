"""
Terrain configuration models.

Every model here is frozen: a terrain build reads one consistent snapshot,
and changing a value means constructing a new model (``model_copy(update=...)``)
and handing it back to the terrain, which invalidates its height cache.
"""

from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .config import settings


class FlattenRegion(BaseModel):
    """Rectangular pad blended toward a constant height."""

    model_config = ConfigDict(frozen=True)

    center: Tuple[float, float] = Field(
        default=(0.0, 0.0), description="Pad center in terrain-local XY"
    )
    size: Tuple[float, float] = Field(
        default=(5000.0, 5000.0), description="Full width and depth of the pad"
    )
    height: float = Field(default=0.0, description="Z of the flat area")
    falloff: float = Field(
        default=800.0,
        ge=0.0,
        description="Feathering distance outside the pad edge (floored to 1 when used)",
    )

    @property
    def half_extents(self) -> Tuple[float, float]:
        return 0.5 * self.size[0], 0.5 * self.size[1]


class GridConfig(BaseModel):
    """Grid and noise parameters for one heightfield build."""

    model_config = ConfigDict(frozen=True)

    # Grid
    quads_x: int = Field(default=200, ge=1, description="Number of quads along X")
    quads_y: int = Field(default=200, ge=1, description="Number of quads along Y")
    spacing: float = Field(default=100.0, gt=0.0, description="Distance between vertices")

    # Noise
    amplitude: float = Field(default=1200.0, description="Height scale applied to fBm output")
    octaves: int = Field(default=4, ge=1, description="Number of fBm layers")
    lacunarity: float = Field(default=2.0, gt=0.0, description="Frequency multiplier per octave")
    persistence: float = Field(
        default=0.45, ge=0.0, le=1.0, description="Amplitude multiplier per octave"
    )
    feature_scale: float = Field(
        default=0.0125, gt=0.0, description="Index-space to noise-space scale"
    )
    noise_offset: Tuple[float, float] = Field(
        default=(37.123, 53.789), description="Index-space offset to avoid lattice corners"
    )

    flatten: Optional[FlattenRegion] = Field(default=None, description="Optional flatten pad")

    @property
    def verts_x(self) -> int:
        return self.quads_x + 1

    @property
    def verts_y(self) -> int:
        return self.quads_y + 1

    @property
    def total_verts(self) -> int:
        return self.verts_x * self.verts_y

    @property
    def half_width(self) -> float:
        return self.quads_x * self.spacing * 0.5

    @property
    def half_height(self) -> float:
        return self.quads_y * self.spacing * 0.5


class SlabSettings(BaseModel):
    """Visual slab drawn on top of the flatten pad."""

    model_config = ConfigDict(frozen=True)

    show: bool = Field(default=True, description="Build the slab section")
    z_offset: float = Field(default=1.0, description="Lift above the pad to avoid z-fighting")
    inset: float = Field(default=20.0, ge=0.0, description="Shrink per side inside the blended edge")


class WaterSettings(BaseModel):
    """Flat water plane covering the terrain."""

    model_config = ConfigDict(frozen=True)

    show: bool = Field(default=True, description="Build the water section")
    z: float = Field(default=0.0, description="Flood level")
    padding: float = Field(default=200.0, ge=0.0, description="Extension beyond terrain bounds")
    uv_tile: float = Field(default=1.0, ge=0.1, description="UV tiling factor")
    z_offset: float = Field(default=0.5, ge=0.0, description="Lift to avoid coplanar z-fight at shores")


class DebugDrawSettings(BaseModel):
    """Normal visualization handed to the debug sink."""

    model_config = ConfigDict(frozen=True)

    draw_normals: bool = Field(default=True, description="Send sampled normals to the debug sink")
    normal_length: float = Field(default=300.0, ge=10.0, description="Drawn normal length")
    max_samples: int = Field(default=512, ge=1, description="Upper bound on drawn normals")


class TerrainSettings(BaseModel):
    """Everything a terrain needs to regenerate itself."""

    model_config = ConfigDict(frozen=True)

    grid: GridConfig = Field(default_factory=GridConfig)
    seed: int = Field(
        default_factory=lambda: settings.default_terrain_seed, description="Noise seed"
    )
    create_collision: bool = Field(default=True, description="Request collision for the surface")
    slab: SlabSettings = Field(default_factory=SlabSettings)
    water: WaterSettings = Field(default_factory=WaterSettings)
    debug: DebugDrawSettings = Field(default_factory=DebugDrawSettings)
