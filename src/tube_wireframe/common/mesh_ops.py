"""
Mesh operation utilities.

Statistics for logging and output metadata.
"""

from typing import Dict, Any, Union
import logging

import numpy as np
import trimesh

from ..mesh import FaceMesh, BufferMesh, buffer_to_face_mesh

logger = logging.getLogger(__name__)


def compute_mesh_stats(mesh: Union[FaceMesh, BufferMesh, "trimesh.Trimesh"]) -> Dict[str, Any]:
    """
    Compute mesh statistics.

    Args:
        mesh: FaceMesh, BufferMesh or trimesh mesh

    Returns:
        Dictionary of mesh statistics; bounds and extents are None for an
        empty mesh
    """
    if isinstance(mesh, BufferMesh):
        mesh = buffer_to_face_mesh(mesh)
    n_vertices = len(mesh.vertices)
    n_faces = len(mesh.faces)
    if n_vertices == 0:
        return {
            "n_vertices": 0,
            "n_faces": n_faces,
            "bounds": None,
            "extents": None,
            "max_extent": 0.0,
            "surface_area": 0.0,
        }

    tm = mesh.to_trimesh() if isinstance(mesh, FaceMesh) else mesh
    vertices = np.asarray(tm.vertices)
    lo = vertices.min(axis=0)
    hi = vertices.max(axis=0)
    extents = hi - lo
    return {
        "n_vertices": n_vertices,
        "n_faces": n_faces,
        "bounds": {
            "min": lo.tolist(),
            "max": hi.tolist()
        },
        "extents": extents.tolist(),
        "max_extent": float(extents.max()),
        "surface_area": float(tm.area),
    }
