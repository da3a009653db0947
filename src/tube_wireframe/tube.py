"""
Tube construction.

A tube is a cylinder along +Y with its base at the origin, rotated onto an
edge direction and moved to the edge start. Vertex layout:

1. Torso grid, (radius_segments + 1) x (length_segments + 1) vertices, rows
   running from the top ring down, with a duplicated seam column for UVs
2. Top cap: radius_segments centre vertices, then radius_segments + 1 rim
3. Bottom cap: same layout as the top cap

Caps are skipped when open_ended is set.
"""

import logging
from typing import List, Optional

import numpy as np

from .common.config import WireframeOptions
from .exceptions import DegenerateEdgeError
from .mesh import BufferMesh, index_dtype_for
from .orientation import (
    quat_from_direction,
    compose_matrix,
    apply_matrix,
    apply_normal_matrix,
)

logger = logging.getLogger(__name__)

# Edges shorter than this cannot define a tube axis
MIN_EDGE_LENGTH = 1e-10


def tube_vertex_count(radius_segments: int, length_segments: int, open_ended: bool = False) -> int:
    """Number of vertices build_tube emits per edge."""
    count = (radius_segments + 1) * (length_segments + 1)
    if not open_ended:
        count += 2 * (2 * radius_segments + 1)
    return count


def tube_index_count(radius_segments: int, length_segments: int, open_ended: bool = False) -> int:
    """Number of indices build_tube emits per edge."""
    count = 6 * radius_segments * length_segments
    if not open_ended:
        count += 2 * 3 * radius_segments
    return count


def cylinder_arrays(
    radius: float,
    height: float,
    radius_segments: int = 4,
    length_segments: int = 1,
    open_ended: bool = False
) -> dict:
    """
    Canonical cylinder centred on the origin, axis along Y.

    Returns:
        Dict with position (N, 3), normal (N, 3), uv (N, 2) and index (K,)
    """
    half = height / 2
    positions: List[np.ndarray] = []
    normals: List[np.ndarray] = []
    uvs: List[np.ndarray] = []
    indices: List[np.ndarray] = []

    # Torso
    u = np.arange(radius_segments + 1) / radius_segments
    v = np.arange(length_segments + 1) / length_segments
    theta = u * 2 * np.pi
    sin_t, cos_t = np.sin(theta), np.cos(theta)

    vv, _ = np.meshgrid(v, u, indexing='ij')
    ring = np.column_stack([radius * sin_t, np.zeros_like(theta), radius * cos_t])
    torso = np.repeat(ring[None, :, :], length_segments + 1, axis=0)
    torso[:, :, 1] = -vv * height + half
    positions.append(torso.reshape(-1, 3))

    # Equal radii, so the torso normal has no Y slope
    ring_normal = np.column_stack([sin_t, np.zeros_like(theta), cos_t])
    normals.append(np.tile(ring_normal, (length_segments + 1, 1)))

    uu, vv = np.meshgrid(u, v, indexing='xy')
    uvs.append(np.column_stack([uu.reshape(-1), 1 - vv.reshape(-1)]))

    grid = np.arange((length_segments + 1) * (radius_segments + 1)).reshape(
        length_segments + 1, radius_segments + 1
    )
    a = grid[:-1, :-1]
    b = grid[1:, :-1]
    c = grid[1:, 1:]
    d = grid[:-1, 1:]
    torso_faces = np.stack([
        np.stack([a, b, d], axis=-1),
        np.stack([b, c, d], axis=-1),
    ], axis=2)
    # (x, y) loop order: radial outer, length inner
    indices.append(torso_faces.transpose(1, 0, 2, 3).reshape(-1))

    offset = grid.size

    if not open_ended:
        for top in (True, False):
            sign = 1.0 if top else -1.0
            center_start = offset
            center_end = offset + radius_segments

            centers = np.tile([0.0, half * sign, 0.0], (radius_segments, 1))
            rim = np.column_stack([radius * sin_t, np.full_like(theta, half * sign), radius * cos_t])
            positions.append(np.vstack([centers, rim]))

            n_cap = 2 * radius_segments + 1
            normals.append(np.tile([0.0, sign, 0.0], (n_cap, 1)))

            center_uv = np.full((radius_segments, 2), 0.5)
            rim_uv = np.column_stack([cos_t * 0.5 + 0.5, sin_t * 0.5 * sign + 0.5])
            uvs.append(np.vstack([center_uv, rim_uv]))

            x = np.arange(radius_segments)
            c_idx = center_start + x
            i_idx = center_end + x
            if top:
                cap = np.column_stack([i_idx, i_idx + 1, c_idx])
            else:
                cap = np.column_stack([i_idx + 1, i_idx, c_idx])
            indices.append(cap.reshape(-1))

            offset += n_cap

    return {
        "position": np.vstack(positions),
        "normal": np.vstack(normals),
        "uv": np.vstack(uvs),
        "index": np.concatenate(indices).astype(np.int64),
    }


def build_tube(
    start,
    end,
    options: Optional[WireframeOptions] = None
) -> BufferMesh:
    """
    Build the tube for one edge.

    Args:
        start: Edge start position (3,)
        end: Edge end position (3,)
        options: thickness, radius_segments, length_segments, open_ended
            and the optional pre-transform matrix are read from here

    Returns:
        BufferMesh with position, normal, uv and basePosition attributes

    Raises:
        DegenerateEdgeError: start and end coincide
    """
    options = options or WireframeOptions()
    start = np.asarray(start, dtype=np.float64)
    end = np.asarray(end, dtype=np.float64)

    direction = end - start
    length = float(np.linalg.norm(direction))
    if length < MIN_EDGE_LENGTH:
        raise DegenerateEdgeError(start, end, length)

    cylinder = cylinder_arrays(
        radius=options.thickness,
        height=length,
        radius_segments=int(options.radius_segments),
        length_segments=int(options.length_segments),
        open_ended=options.open_ended,
    )
    local = cylinder["position"]
    local[:, 1] += length / 2

    quaternion = quat_from_direction(direction / length)
    matrix = compose_matrix(start, quaternion)
    if options.matrix is not None:
        matrix = np.asarray(options.matrix, dtype=np.float64) @ matrix

    n_vertices = len(local)
    return BufferMesh(
        attributes={
            "position": apply_matrix(local, matrix).astype(np.float32),
            "normal": apply_normal_matrix(cylinder["normal"], matrix).astype(np.float32),
            "uv": cylinder["uv"].astype(np.float32),
            "basePosition": local.astype(np.float32),
        },
        index=cylinder["index"].astype(index_dtype_for(n_vertices)),
    )
