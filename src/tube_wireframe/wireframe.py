"""
Tube wireframe transform.

mesh -> cells (pattern mode) -> unique edges -> one tube per edge -> merged mesh
"""

import logging
from typing import Iterable, List, Optional, Union

import numpy as np

from .cells import gather_cells
from .common.config import WireframeOptions
from .edges import dedupe_edges, Edge
from .mesh import (
    BUFFER_ATTRIBUTES,
    BufferMesh,
    FaceMesh,
    as_face_arrays,
    buffer_to_face_mesh,
    index_dtype_for,
)
from .tube import build_tube

logger = logging.getLogger(__name__)


def merge_tubes(tubes: Iterable[BufferMesh]) -> BufferMesh:
    """
    Concatenate tubes into one indexed buffer.

    Each tube's indices are offset by the number of vertices appended
    before it, so tube order fixes both attribute order and index values.
    """
    chunks = {name: [] for name in BUFFER_ATTRIBUTES}
    index_chunks: List[np.ndarray] = []
    offset = 0

    for tube in tubes:
        for name in BUFFER_ATTRIBUTES:
            chunks[name].append(tube.attributes[name])
        index_chunks.append(tube.index.astype(np.int64) + offset)
        offset += tube.n_vertices

    if not index_chunks:
        return BufferMesh.empty()

    dtype = index_dtype_for(offset)
    return BufferMesh(
        attributes={name: np.concatenate(parts).astype(np.float32) for name, parts in chunks.items()},
        index=np.concatenate(index_chunks).astype(dtype),
    )


def wireframe_edges(mesh, options: Optional[WireframeOptions] = None) -> List[Edge]:
    """Unique edges the wireframe of `mesh` would be built from."""
    options = options or WireframeOptions()
    _, faces = as_face_arrays(mesh)
    cells = gather_cells(faces, options.mode, options.filter)
    return dedupe_edges(cells)


def create_tube_wireframe(
    mesh,
    options: Optional[WireframeOptions] = None,
    **overrides
) -> Union[FaceMesh, BufferMesh]:
    """
    Replace every pattern edge of a mesh with a cylindrical tube.

    Args:
        mesh: Input mesh (FaceMesh, BufferMesh, trimesh.Trimesh, or any
            object with vertices and faces)
        options: WireframeOptions; keyword overrides are applied on top,
            e.g. create_tube_wireframe(mesh, mode="quad", thickness=0.03)

    Returns:
        BufferMesh if options.buffer is set, otherwise a FaceMesh

    Raises:
        MeshValidationError: malformed input arrays
        DegenerateEdgeError: an edge joins two coincident points
    """
    options = options or WireframeOptions()
    if overrides:
        options = options.replace(**overrides)
    options.validate()

    vertices, faces = as_face_arrays(mesh)
    cells = gather_cells(faces, options.mode, options.filter)
    edges = dedupe_edges(cells)

    logger.info(
        f"Tube wireframe: mode={options.mode}, {len(faces)} faces → "
        f"{len(cells)} cells → {len(edges)} edges"
    )

    def tubes():
        for a, b in edges:
            yield build_tube(vertices[a], vertices[b], options)

    merged = merge_tubes(tubes())
    logger.info(
        f"Merged {len(edges)} tubes: {merged.n_vertices} verts, "
        f"{merged.n_triangles} tris, index={merged.index.dtype}"
    )

    if options.buffer:
        return merged
    return buffer_to_face_mesh(merged)
