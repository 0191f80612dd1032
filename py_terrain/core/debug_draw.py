"""
Debug visualization helpers.

``sample_debug_normals`` picks the evenly strided subset of vertices sent to
a debug sink. ``plot_terrain`` is a matplotlib sink-side renderer for
inspecting a build offline: heightmap, normal quivers and scatter points.
"""

import math
from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

import numpy as np
from matplotlib.figure import Figure

DEFAULT_MAX_SAMPLES = 512


def sample_debug_normals(
    vertices: np.ndarray, normals: np.ndarray, max_samples: int = DEFAULT_MAX_SAMPLES
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Evenly strided subset of at most ``max_samples`` vertices and their normals.
    """
    count = len(vertices)
    if count == 0:
        return vertices[:0], normals[:0]

    step = max(1, math.ceil(count / max_samples))
    return vertices[::step], normals[::step]


def plot_terrain(
    heights: np.ndarray,
    extent: Tuple[float, float, float, float],
    placements: Optional[Sequence[Tuple[float, float]]] = None,
    normal_points: Optional[np.ndarray] = None,
    normals: Optional[np.ndarray] = None,
    output_path: Optional[Union[str, Path]] = None,
    title: str = "Terrain",
) -> Figure:
    """
    Render a heightmap with optional scatter placements and normal arrows.

    Args:
        heights: ``(verts_y, verts_x)`` heights
        extent: ``(min_x, max_x, min_y, max_y)`` in the same space as the points
        placements: XY positions of placed objects
        normal_points: ``(N, 3)`` positions for the normal arrows
        normals: ``(N, 3)`` normals drawn as their XY tilt
        output_path: Save a PNG here when given

    Returns:
        The matplotlib Figure
    """
    fig = Figure(figsize=(8, 7))
    ax = fig.subplots()

    image = ax.imshow(heights, origin="lower", extent=extent, cmap="terrain")
    fig.colorbar(image, ax=ax, label="Height")

    if normal_points is not None and normals is not None and len(normal_points):
        ax.quiver(
            normal_points[:, 0],
            normal_points[:, 1],
            normals[:, 0],
            normals[:, 1],
            color="cyan",
            angles="xy",
            width=0.002,
        )

    if placements:
        xy = np.asarray(placements, dtype=np.float64)
        ax.scatter(xy[:, 0], xy[:, 1], s=8, c="black", marker="^", label="placements")
        ax.legend(loc="upper right")

    ax.set_title(title)
    ax.set_xlabel("X")
    ax.set_ylabel("Y")

    if output_path is not None:
        fig.savefig(output_path, dpi=100)

    return fig
