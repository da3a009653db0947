"""
Tube Wireframe - replace the edges of a mesh with cylindrical tubes.

Pipeline:
- cells: walk faces under a pattern mode (triangle, quad, cross-hatch, ...)
- edges: expand cells into unique edges, first occurrence wins
- tube/wireframe: one oriented cylinder per edge, merged into one mesh

Usage:
    from tube_wireframe import create_tube_wireframe, create_torus
    wire = create_tube_wireframe(create_torus(), mode="quad", thickness=0.03)
"""

from .common.config import MODES, WireframeOptions, OutputMetadata, DEFAULT_OPTIONS
from .cells import extract_cells
from .edges import dedupe_edges
from .exceptions import TubeWireframeError, MeshValidationError, DegenerateEdgeError
from .mesh import FaceMesh, BufferMesh, buffer_to_face_mesh, face_to_buffer_mesh, index_dtype_for
from .orientation import quat_from_direction
from .primitives import create_plane, create_box, create_torus
from .tube import build_tube
from .wireframe import create_tube_wireframe, merge_tubes, wireframe_edges

__version__ = "1.0.0"

__all__ = [
    'MODES', 'WireframeOptions', 'OutputMetadata', 'DEFAULT_OPTIONS',
    'extract_cells', 'dedupe_edges',
    'TubeWireframeError', 'MeshValidationError', 'DegenerateEdgeError',
    'FaceMesh', 'BufferMesh', 'buffer_to_face_mesh', 'face_to_buffer_mesh', 'index_dtype_for',
    'quat_from_direction',
    'create_plane', 'create_box', 'create_torus',
    'build_tube',
    'create_tube_wireframe', 'merge_tubes', 'wireframe_edges',
]
