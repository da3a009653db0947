"""
Common modules shared by the transform and the command line runner.
"""

from .config import MODES, WireframeOptions, OutputMetadata, DEFAULT_OPTIONS
from .io import load_mesh, save_mesh, load_metadata, load_output
from .mesh_ops import compute_mesh_stats

__all__ = [
    'MODES', 'WireframeOptions', 'OutputMetadata', 'DEFAULT_OPTIONS',
    'load_mesh', 'save_mesh', 'load_metadata', 'load_output',
    'compute_mesh_stats',
]
