"""
Mesh I/O utilities.

Loads input meshes and saves wireframe outputs with a JSON metadata sidecar.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Tuple, Union

import numpy as np
import trimesh

from .config import OutputMetadata
from ..mesh import FaceMesh, BufferMesh, buffer_to_face_mesh

logger = logging.getLogger(__name__)


def load_mesh(path: Path, merge: bool = False) -> FaceMesh:
    """
    Load a mesh file as a FaceMesh.

    Vertex order and face order are kept as stored in the file (trimesh's
    processing is disabled), because the pair modes depend on face order.

    Args:
        path: Path to any format trimesh can read (.obj, .ply, .stl, .glb, ...)
        merge: Weld coincident vertices after loading

    Returns:
        FaceMesh
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Mesh file not found: {path}")

    tm = trimesh.load(str(path), process=False, force="mesh")

    uvs = None
    uv = getattr(tm.visual, "uv", None)
    if uv is not None and len(uv) == len(tm.vertices):
        uvs = np.asarray(uv, dtype=np.float64)

    mesh = FaceMesh(
        vertices=np.asarray(tm.vertices, dtype=np.float64),
        faces=np.asarray(tm.faces, dtype=np.int64),
        uvs=uvs,
    )
    if merge:
        mesh = mesh.merge_vertices()

    logger.info(f"Loaded {path}: {mesh.n_vertices} verts, {mesh.n_faces} faces")
    return mesh


def save_mesh(
    mesh: Union[FaceMesh, BufferMesh],
    path: Path,
    metadata: Optional[OutputMetadata] = None
) -> Path:
    """
    Save mesh through trimesh with an optional metadata sidecar.

    Args:
        mesh: FaceMesh or BufferMesh
        path: Output path; the suffix picks the format
        metadata: OutputMetadata (saved as .json sidecar)

    Returns:
        Path of the written mesh
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    if isinstance(mesh, BufferMesh):
        mesh = buffer_to_face_mesh(mesh)

    # only glTF carries custom vertex attributes
    gltf = path.suffix.lower() in (".glb", ".gltf")
    mesh.to_trimesh(include_base_position=gltf).export(str(path))
    logger.info(f"Saved mesh: {path} ({mesh.n_vertices} verts, {mesh.n_faces} tris)")

    if metadata is not None:
        meta_path = path.with_suffix('.json')
        metadata.save(meta_path)
        logger.info(f"Saved metadata: {meta_path}")

    return path


def load_metadata(path: Path) -> Optional[OutputMetadata]:
    """Load the metadata sidecar of a saved mesh, or None if absent."""
    meta_path = Path(path).with_suffix('.json')
    if not meta_path.exists():
        return None
    with open(meta_path) as f:
        return OutputMetadata.from_dict(json.load(f))


def load_output(path: Path) -> Tuple[FaceMesh, Optional[OutputMetadata]]:
    """
    Load a saved wireframe and its metadata sidecar.

    Returns:
        Tuple of (mesh, metadata) - metadata may be None if not found
    """
    return load_mesh(path), load_metadata(path)
