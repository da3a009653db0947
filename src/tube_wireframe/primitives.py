"""
Input mesh primitives.

All grids are triangulated as quad pairs: for the quad a-b-c-d (a at
(ix, iy), b at (ix, iy+1), c at (ix+1, iy+1), d at (ix+1, iy)) the faces
are (a, b, d) followed by (b, c, d). Every pair mode in cells.py relies on
this ordering.
"""

import logging
from typing import Tuple

import numpy as np

from .mesh import FaceMesh

logger = logging.getLogger(__name__)


def quad_pair_faces(grid: np.ndarray) -> np.ndarray:
    """
    Faces for a (rows, cols) grid of vertex indices.

    Quads are emitted row by row (iy outer, ix inner), two faces each.
    """
    a = grid[:-1, :-1]
    b = grid[1:, :-1]
    c = grid[1:, 1:]
    d = grid[:-1, 1:]
    faces = np.stack([
        np.stack([a, b, d], axis=-1),
        np.stack([b, c, d], axis=-1),
    ], axis=2)
    return faces.reshape(-1, 3).astype(np.int64)


def create_plane(
    width: float = 1.0,
    height: float = 1.0,
    width_segments: int = 1,
    height_segments: int = 1
) -> FaceMesh:
    """Plane in the XY plane facing +Z, centred on the origin."""
    ix = np.arange(width_segments + 1)
    iy = np.arange(height_segments + 1)
    xx, yy = np.meshgrid(ix, iy, indexing='xy')

    x = xx * (width / width_segments) - width / 2
    y = yy * (height / height_segments) - height / 2
    vertices = np.column_stack([x.reshape(-1), -y.reshape(-1), np.zeros(xx.size)])

    uvs = np.column_stack([
        (xx / width_segments).reshape(-1),
        1 - (yy / height_segments).reshape(-1),
    ])
    normals = np.tile([0.0, 0.0, 1.0], (xx.size, 1))

    grid = np.arange(xx.size).reshape(height_segments + 1, width_segments + 1)
    return FaceMesh(
        vertices=vertices,
        faces=quad_pair_faces(grid),
        normals=normals,
        uvs=uvs,
    )


# (u axis, v axis, w axis, u dir, v dir, plane width, plane height, plane depth)
# Box sides in +x, -x, +y, -y, +z, -z order; dims are (width, height, depth)
_BOX_SIDES: Tuple[Tuple, ...] = (
    (2, 1, 0, -1, -1, 'd', 'h', 'w'),
    (2, 1, 0, 1, -1, 'd', 'h', '-w'),
    (0, 2, 1, 1, 1, 'w', 'd', 'h'),
    (0, 2, 1, 1, -1, 'w', 'd', '-h'),
    (0, 1, 2, 1, -1, 'w', 'h', 'd'),
    (0, 1, 2, -1, -1, 'w', 'h', '-d'),
)


def create_box(
    width: float = 1.0,
    height: float = 1.0,
    depth: float = 1.0,
    segments: int = 1,
    merge: bool = True
) -> FaceMesh:
    """
    Axis-aligned box centred on the origin.

    Each side is a segments x segments grid of quad pairs. With merge set,
    coincident corner vertices of neighbouring sides are welded, so a
    single-segment box has 8 vertices and 12 faces.
    """
    dims = {'w': width, 'h': height, 'd': depth}

    def dim(key: str) -> float:
        return -dims[key[1]] if key.startswith('-') else dims[key]

    vertices, normals, uvs, faces = [], [], [], []
    offset = 0

    for u_axis, v_axis, w_axis, u_dir, v_dir, pw, ph, pd in _BOX_SIDES:
        plane_w, plane_h, plane_d = dim(pw), dim(ph), dim(pd)
        ix = np.arange(segments + 1)
        xx, yy = np.meshgrid(ix, ix, indexing='xy')

        side = np.zeros((xx.size, 3))
        side[:, u_axis] = (xx * plane_w / segments - plane_w / 2).reshape(-1) * u_dir
        side[:, v_axis] = (yy * plane_h / segments - plane_h / 2).reshape(-1) * v_dir
        side[:, w_axis] = plane_d / 2
        vertices.append(side)

        normal = np.zeros(3)
        normal[w_axis] = 1.0 if plane_d > 0 else -1.0
        normals.append(np.tile(normal, (xx.size, 1)))

        uvs.append(np.column_stack([
            (xx / segments).reshape(-1),
            1 - (yy / segments).reshape(-1),
        ]))

        grid = offset + np.arange(xx.size).reshape(segments + 1, segments + 1)
        faces.append(quad_pair_faces(grid))
        offset += xx.size

    box = FaceMesh(
        vertices=np.vstack(vertices),
        faces=np.vstack(faces),
        normals=np.vstack(normals),
        uvs=np.vstack(uvs),
    )
    if merge:
        box = box.merge_vertices()
    return box


def create_torus(
    radius: float = 1.0,
    tube: float = 0.4,
    radial_segments: int = 8,
    tubular_segments: int = 6,
    arc: float = 2 * np.pi,
    merge: bool = True
) -> FaceMesh:
    """
    Torus around the Z axis.

    The vertex grid has a duplicated seam row and column; merge welds them.
    """
    i = np.arange(tubular_segments + 1)
    j = np.arange(radial_segments + 1)
    jj, ii = np.meshgrid(j, i, indexing='ij')

    u = ii / tubular_segments * arc
    v = jj / radial_segments * 2 * np.pi

    ring = radius + tube * np.cos(v)
    vertices = np.stack([ring * np.cos(u), ring * np.sin(u), tube * np.sin(v)], axis=-1).reshape(-1, 3)

    centers = np.stack([radius * np.cos(u), radius * np.sin(u), np.zeros_like(u)], axis=-1).reshape(-1, 3)
    normals = vertices - centers
    normals /= np.maximum(np.linalg.norm(normals, axis=1, keepdims=True), 1e-10)

    uvs = np.column_stack([(ii / tubular_segments).reshape(-1), (jj / radial_segments).reshape(-1)])

    # Quad (j, i): a=(j, i-1), b=(j-1, i-1), c=(j-1, i), d=(j, i)
    grid = np.arange(vertices.shape[0]).reshape(radial_segments + 1, tubular_segments + 1)
    a = grid[1:, :-1]
    b = grid[:-1, :-1]
    c = grid[:-1, 1:]
    d = grid[1:, 1:]
    faces = np.stack([
        np.stack([a, b, d], axis=-1),
        np.stack([b, c, d], axis=-1),
    ], axis=2).reshape(-1, 3).astype(np.int64)

    torus = FaceMesh(vertices=vertices, faces=faces, normals=normals, uvs=uvs)
    if merge:
        torus = torus.merge_vertices()
    logger.debug(f"Torus: {torus.n_vertices} verts, {torus.n_faces} faces")
    return torus


PRIMITIVES = {
    "plane": create_plane,
    "box": create_box,
    "torus": create_torus,
}
