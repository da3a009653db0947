"""
Mesh representations.

Two views over the same triangle geometry:
- FaceMesh: face-list view (vertices + Mx3 faces + per-vertex attributes)
- BufferMesh: indexed vertex-buffer view (named attribute arrays + flat index)

Conversions between them are pure and keep vertex order, so a round trip
preserves vertex and triangle counts.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Any, Tuple

import numpy as np
import trimesh

from .exceptions import MeshValidationError

logger = logging.getLogger(__name__)

# Vertex counts from this value on need 32-bit indices
WIDE_INDEX_THRESHOLD = 65536

BUFFER_ATTRIBUTES = ("position", "normal", "uv", "basePosition")


def index_dtype_for(vertex_count: int) -> np.dtype:
    """Smallest index dtype used for a buffer holding vertex_count vertices."""
    if vertex_count >= WIDE_INDEX_THRESHOLD:
        return np.dtype(np.uint32)
    return np.dtype(np.uint16)


@dataclass
class FaceMesh:
    """A triangle mesh in face-list form."""
    vertices: np.ndarray  # (N, 3) vertex positions
    faces: np.ndarray     # (M, 3) triangle indices
    normals: Optional[np.ndarray] = None  # (N, 3) vertex normals
    uvs: Optional[np.ndarray] = None  # (N, 2) texture coordinates
    base_positions: Optional[np.ndarray] = None  # (N, 3) pre-transform positions

    @property
    def n_vertices(self) -> int:
        return len(self.vertices)

    @property
    def n_faces(self) -> int:
        return len(self.faces)

    def compute_normals(self) -> None:
        """Compute area-weighted vertex normals from face normals."""
        normals = np.zeros_like(self.vertices, dtype=np.float64)
        if self.n_faces:
            v0, v1, v2 = (self.vertices[self.faces[:, k]] for k in range(3))
            face_normals = np.cross(v1 - v0, v2 - v0)
            for k in range(3):
                np.add.at(normals, self.faces[:, k], face_normals)

        norms = np.linalg.norm(normals, axis=1, keepdims=True)
        norms = np.maximum(norms, 1e-10)
        self.normals = normals / norms

    def merge_vertices(self, decimals: int = 4) -> "FaceMesh":
        """
        Weld vertices whose positions agree to `decimals` places.

        Welded vertices keep the first occurrence's attributes and the
        first-occurrence order; face order is unchanged. Trimesh.merge_vertices
        is not used because it does not keep first-occurrence vertex order,
        which would change the endpoint indices of every extracted edge.
        """
        if self.n_vertices == 0:
            return self.copy()

        # + 0.0 folds -0.0 into 0.0
        keys = np.round(self.vertices, decimals) + 0.0
        _, first, inverse = np.unique(keys, axis=0, return_index=True, return_inverse=True)
        inverse = inverse.reshape(-1)

        # np.unique sorts; renumber in first-occurrence order
        order = np.argsort(first)
        rank = np.empty_like(order)
        rank[order] = np.arange(len(order))
        keep = first[order]
        remap = rank[inverse]

        def pick(values):
            return None if values is None else values[keep].copy()

        merged = FaceMesh(
            vertices=self.vertices[keep].copy(),
            faces=remap[self.faces].astype(np.int64),
            normals=pick(self.normals),
            uvs=pick(self.uvs),
            base_positions=pick(self.base_positions),
        )
        logger.debug(f"Merged vertices: {self.n_vertices}→{merged.n_vertices}")
        return merged

    def copy(self) -> "FaceMesh":
        def dup(values):
            return None if values is None else values.copy()

        return FaceMesh(
            vertices=self.vertices.copy(),
            faces=self.faces.copy(),
            normals=dup(self.normals),
            uvs=dup(self.uvs),
            base_positions=dup(self.base_positions),
        )

    def to_trimesh(self, include_base_position: bool = True) -> trimesh.Trimesh:
        """
        Convert to trimesh without merging or reordering vertices.

        base_positions become the `base_position` vertex attribute, which the
        glTF exporter writes as the custom `_base_position` accessor.
        """
        kwargs: Dict[str, Any] = {}
        if self.normals is not None:
            kwargs["vertex_normals"] = self.normals
        if self.uvs is not None:
            kwargs["visual"] = trimesh.visual.TextureVisuals(uv=self.uvs)
        if include_base_position and self.base_positions is not None:
            kwargs["vertex_attributes"] = {"base_position": self.base_positions}
        return trimesh.Trimesh(
            vertices=self.vertices,
            faces=self.faces,
            process=False,
            **kwargs
        )


@dataclass
class BufferMesh:
    """
    A triangle mesh as named vertex attributes plus a flat index array.

    Attributes are keyed by BUFFER_ATTRIBUTES names; the index dtype is
    uint16 or uint32 (see index_dtype_for).
    """
    attributes: Dict[str, np.ndarray] = field(default_factory=dict)
    index: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=np.uint16))

    @property
    def position(self) -> np.ndarray:
        return self.attributes["position"]

    @property
    def n_vertices(self) -> int:
        position = self.attributes.get("position")
        return 0 if position is None else len(position)

    @property
    def n_triangles(self) -> int:
        return len(self.index) // 3

    @property
    def triangles(self) -> np.ndarray:
        """Index array reshaped to (M, 3)."""
        return self.index.reshape(-1, 3)

    @classmethod
    def empty(cls) -> "BufferMesh":
        return cls(
            attributes={
                "position": np.zeros((0, 3), dtype=np.float32),
                "normal": np.zeros((0, 3), dtype=np.float32),
                "uv": np.zeros((0, 2), dtype=np.float32),
                "basePosition": np.zeros((0, 3), dtype=np.float32),
            },
            index=np.zeros(0, dtype=np.uint16),
        )


def buffer_to_face_mesh(buffer: BufferMesh) -> FaceMesh:
    """Face-list view of an indexed buffer mesh."""
    attrs = buffer.attributes
    return FaceMesh(
        vertices=np.asarray(attrs["position"], dtype=np.float64).copy(),
        faces=buffer.triangles.astype(np.int64),
        normals=_maybe_copy(attrs.get("normal"), np.float64),
        uvs=_maybe_copy(attrs.get("uv"), np.float64),
        base_positions=_maybe_copy(attrs.get("basePosition"), np.float64),
    )


def face_to_buffer_mesh(mesh: FaceMesh) -> BufferMesh:
    """Indexed buffer view of a face-list mesh."""
    attributes = {"position": np.asarray(mesh.vertices, dtype=np.float32).copy()}
    if mesh.normals is not None:
        attributes["normal"] = np.asarray(mesh.normals, dtype=np.float32).copy()
    if mesh.uvs is not None:
        attributes["uv"] = np.asarray(mesh.uvs, dtype=np.float32).copy()
    if mesh.base_positions is not None:
        attributes["basePosition"] = np.asarray(mesh.base_positions, dtype=np.float32).copy()

    dtype = index_dtype_for(mesh.n_vertices)
    index = np.asarray(mesh.faces).reshape(-1).astype(dtype)
    return BufferMesh(attributes=attributes, index=index)


def _maybe_copy(values: Optional[np.ndarray], dtype) -> Optional[np.ndarray]:
    if values is None:
        return None
    return np.asarray(values, dtype=dtype).copy()


def as_face_arrays(mesh) -> Tuple[np.ndarray, np.ndarray]:
    """
    Extract (vertices, faces) from any supported input mesh and validate them.

    Accepts FaceMesh, BufferMesh, trimesh.Trimesh, or anything exposing
    `vertices` and `faces`.

    Raises:
        MeshValidationError: malformed arrays or out-of-range face indices
    """
    if isinstance(mesh, BufferMesh):
        vertices = mesh.attributes.get("position")
        faces = mesh.triangles
    else:
        vertices = getattr(mesh, "vertices", None)
        faces = getattr(mesh, "faces", None)

    if vertices is None or faces is None:
        raise MeshValidationError(
            f"Input of type {type(mesh).__name__} has no vertices/faces"
        )

    vertices = np.asarray(vertices, dtype=np.float64)
    faces = np.asarray(faces)

    if vertices.size == 0:
        vertices = vertices.reshape(0, 3)
    if faces.size == 0:
        faces = faces.reshape(0, 3).astype(np.int64)

    if vertices.ndim != 2 or vertices.shape[1] != 3:
        raise MeshValidationError(f"Vertices must be Nx3, got shape {vertices.shape}")
    if faces.ndim != 2 or faces.shape[1] != 3:
        raise MeshValidationError(f"Faces must be Mx3, got shape {faces.shape}")
    if not np.issubdtype(faces.dtype, np.integer):
        raise MeshValidationError(f"Face indices must be integers, got {faces.dtype}")

    if len(faces):
        lo, hi = int(faces.min()), int(faces.max())
        if lo < 0 or hi >= len(vertices):
            raise MeshValidationError(
                f"Face indices span [{lo}, {hi}] but mesh has {len(vertices)} vertices"
            )

    return vertices, faces.astype(np.int64)
