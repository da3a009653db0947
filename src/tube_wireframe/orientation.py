"""
Tube orientation.

Quaternions are (x, y, z, w), the scalar-last order scipy uses.
"""

import numpy as np
from scipy.spatial.transform import Rotation

# Distance from +/-1 at which a direction counts as parallel to the Y axis
PARALLEL_EPS = 1e-5

IDENTITY_QUAT = np.array([0.0, 0.0, 0.0, 1.0])
FLIP_X_QUAT = np.array([1.0, 0.0, 0.0, 0.0])  # 180 degrees about X


def quat_from_direction(direction: np.ndarray) -> np.ndarray:
    """
    Minimal rotation taking +Y onto a unit direction.

    Rotation axis is up x dir = (dir.z, 0, -dir.x), angle acos(dir.y).

    Args:
        direction: Normalized 3-vector

    Returns:
        Quaternion (x, y, z, w)
    """
    dx, dy, dz = (float(c) for c in direction)

    if dy > 1.0 - PARALLEL_EPS:
        return IDENTITY_QUAT.copy()
    if dy < -1.0 + PARALLEL_EPS:
        return FLIP_X_QUAT.copy()

    axis = np.array([dz, 0.0, -dx])
    axis /= np.linalg.norm(axis)
    half = np.arccos(np.clip(dy, -1.0, 1.0)) / 2
    return np.concatenate([axis * np.sin(half), [np.cos(half)]])


def rotation_matrix(quaternion: np.ndarray) -> np.ndarray:
    """3x3 rotation matrix of a (x, y, z, w) quaternion."""
    return Rotation.from_quat(quaternion).as_matrix()


def compose_matrix(position: np.ndarray, quaternion: np.ndarray) -> np.ndarray:
    """4x4 object matrix: translate(position) @ rotate(quaternion)."""
    matrix = np.eye(4)
    matrix[:3, :3] = rotation_matrix(quaternion)
    matrix[:3, 3] = position
    return matrix


def normal_matrix(matrix: np.ndarray) -> np.ndarray:
    """Inverse transpose of the linear part of a 4x4 matrix."""
    return np.linalg.inv(matrix[:3, :3]).T


def apply_matrix(points: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """Transform (N, 3) points by a 4x4 affine matrix."""
    return points @ matrix[:3, :3].T + matrix[:3, 3]


def apply_normal_matrix(normals: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """Transform (N, 3) normals by the normal matrix of a 4x4 matrix."""
    transformed = normals @ normal_matrix(matrix).T
    norms = np.linalg.norm(transformed, axis=1, keepdims=True)
    return transformed / np.maximum(norms, 1e-10)
