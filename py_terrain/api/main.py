"""FastAPI application exposing terrain builds, queries and scatter runs."""

from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import structlog
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from .. import __version__
from ..config.config import settings
from ..config.terrain_config import TerrainSettings
from ..core.geometry import TerrainTransform
from ..core.scatter import ScatterPlacer, ScatterRegion, SpawnRequest
from ..core.terrain import NoiseTerrain
from ..utils.logging import configure_logging

configure_logging()

logger = structlog.get_logger()

app = FastAPI(
    title="Noise Terrain API",
    description="Procedural noise terrain and constrained scatter placement",
    version=__version__,
)


# Request/Response models
class TerrainRequest(BaseModel):
    """Terrain settings plus its placement in the world."""

    terrain: TerrainSettings = Field(default_factory=TerrainSettings)
    location: Tuple[float, float, float] = Field(
        default=(0.0, 0.0, 0.0), description="World translation of the terrain"
    )
    yaw_deg: float = Field(default=0.0, description="World yaw of the terrain")


class MeshRequest(TerrainRequest):
    """Request to build the terrain mesh."""

    include_heights: bool = Field(default=False, description="Return the height rows")


class SectionSummary(BaseModel):
    index: int
    vertex_count: int
    triangle_count: int
    create_collision: bool


class MeshResponse(BaseModel):
    seed: int
    verts_x: int
    verts_y: int
    min_height: float
    max_height: float
    sections: List[SectionSummary]
    heights: Optional[List[List[float]]] = None


class QueryRequest(TerrainRequest):
    """Height and normal queries at world XY points."""

    points: List[Tuple[float, float]] = Field(description="World XY points")
    clamp_to_bounds: bool = Field(default=True, description="Clamp points onto the grid")


class PointSample(BaseModel):
    x: float
    y: float
    height: float
    normal: Tuple[float, float, float]


class ScatterRunRequest(TerrainRequest):
    """Scatter batches on the described terrain."""

    seed: Optional[int] = Field(default=None, description="Scatter seed")
    region: Optional[ScatterRegion] = Field(default=None, description="Local sampling region")
    requests: List[SpawnRequest] = Field(description="Batches in placement order")


class BatchSummary(BaseModel):
    object_type: Any
    requested: int
    accepted: int
    tries_used: int
    max_tries: int
    status: str
    message: str
    placements: List[Dict[str, Any]]


def _build_terrain(request: TerrainRequest) -> NoiseTerrain:
    grid = request.terrain.grid
    limit = settings.max_quads_per_axis
    if grid.quads_x > limit or grid.quads_y > limit:
        raise HTTPException(
            status_code=422,
            detail=f"Quad counts above {limit} per axis are not served",
        )
    transform = TerrainTransform(location=request.location, yaw_deg=request.yaw_deg)
    return NoiseTerrain(request.terrain, transform)


# API endpoints
@app.get("/")
def root():
    """Root endpoint."""
    return {"message": "Noise Terrain API", "version": __version__, "status": "running"}


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.post("/terrain/mesh", response_model=MeshResponse)
def build_mesh(request: MeshRequest):
    """Build the terrain and summarize its mesh sections."""
    logger.info("Terrain mesh requested", seed=request.terrain.seed)
    terrain = _build_terrain(request)
    sections = terrain.regenerate()

    heights = terrain.sampler.cache.heights
    return MeshResponse(
        seed=terrain.settings.seed,
        verts_x=terrain.grid.verts_x,
        verts_y=terrain.grid.verts_y,
        min_height=float(np.min(heights)),
        max_height=float(np.max(heights)),
        sections=[
            SectionSummary(
                index=index,
                vertex_count=section.vertex_count,
                triangle_count=section.triangle_count,
                create_collision=section.create_collision,
            )
            for index, section in sorted(sections.items())
        ],
        heights=heights.tolist() if request.include_heights else None,
    )


@app.post("/terrain/query", response_model=List[PointSample])
def query_terrain(request: QueryRequest):
    """Sample heights and normals at world points."""
    terrain = _build_terrain(request)
    terrain.sampler.build_grid()

    samples = []
    for x, y in request.points:
        normal = terrain.normal_at_world_xy(x, y, request.clamp_to_bounds)
        samples.append(
            PointSample(
                x=x,
                y=y,
                height=terrain.height_at_world_xy(x, y, request.clamp_to_bounds),
                normal=tuple(float(v) for v in normal),
            )
        )
    return samples


@app.post("/scatter", response_model=List[BatchSummary])
def scatter(request: ScatterRunRequest):
    """Run scatter batches and return every accepted transform."""
    logger.info("Scatter requested", batches=len(request.requests), seed=request.seed)
    terrain = _build_terrain(request)
    terrain.sampler.build_grid()

    placer = ScatterPlacer(terrain, seed=request.seed, region=request.region)
    results = placer.generate(request.requests)

    return [
        BatchSummary(
            object_type=result.object_type,
            requested=result.requested,
            accepted=result.accepted,
            tries_used=result.tries_used,
            max_tries=result.max_tries,
            status=result.status.value,
            message=result.message,
            placements=[placement.to_dict() for placement in result.placements],
        )
        for result in results
    ]


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
