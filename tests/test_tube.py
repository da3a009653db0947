"""
Tests for tube orientation and construction.

Tests cover:
- Minimal-rotation quaternion (parallel, anti-parallel, general)
- Canonical cylinder layout and counts
- Oriented tubes: placement, radius, normals, basePosition
- Pre-transform matrix
- Degenerate edges
"""

import pytest
import numpy as np
from pathlib import Path
import sys

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tube_wireframe.common.config import WireframeOptions
from tube_wireframe.exceptions import DegenerateEdgeError
from tube_wireframe.orientation import (
    FLIP_X_QUAT,
    IDENTITY_QUAT,
    compose_matrix,
    quat_from_direction,
    rotation_matrix,
)
from tube_wireframe.tube import (
    build_tube,
    cylinder_arrays,
    tube_index_count,
    tube_vertex_count,
)


# ============== Fixtures ==============

@pytest.fixture
def options():
    return WireframeOptions(thickness=0.25, radius_segments=6, length_segments=2)


@pytest.fixture
def random_directions():
    rng = np.random.default_rng(7)
    dirs = rng.normal(size=(50, 3))
    return dirs / np.linalg.norm(dirs, axis=1, keepdims=True)


def _distance_to_axis(points, start, end):
    axis = (end - start) / np.linalg.norm(end - start)
    rel = points - start
    along = rel @ axis
    return np.linalg.norm(rel - np.outer(along, axis), axis=1), along


# ============== Quaternion Tests ==============

class TestQuatFromDirection:

    def test_up_is_identity(self):
        np.testing.assert_array_equal(quat_from_direction(np.array([0.0, 1.0, 0.0])), IDENTITY_QUAT)

    def test_down_is_flip_about_x(self):
        np.testing.assert_array_equal(quat_from_direction(np.array([0.0, -1.0, 0.0])), FLIP_X_QUAT)

    def test_near_up_snaps_to_identity(self):
        d = np.array([1e-4, 1.0, 0.0])
        d /= np.linalg.norm(d)
        np.testing.assert_array_equal(quat_from_direction(d), [0, 0, 0, 1])

    def test_x_axis(self):
        q = quat_from_direction(np.array([1.0, 0.0, 0.0]))
        # 90 degrees about -Z
        np.testing.assert_allclose(q, [0, 0, -np.sqrt(0.5), np.sqrt(0.5)], atol=1e-12)

    def test_rotates_up_onto_direction(self, random_directions):
        up = np.array([0.0, 1.0, 0.0])
        for d in random_directions:
            rotated = rotation_matrix(quat_from_direction(d)) @ up
            np.testing.assert_allclose(rotated, d, atol=1e-9)

    def test_unit_length(self, random_directions):
        for d in random_directions:
            assert abs(np.linalg.norm(quat_from_direction(d)) - 1.0) < 1e-12

    def test_returns_fresh_arrays(self):
        q = quat_from_direction(np.array([0.0, 1.0, 0.0]))
        q[0] = 5.0
        np.testing.assert_array_equal(IDENTITY_QUAT, [0, 0, 0, 1])

    def test_compose_matrix(self):
        m = compose_matrix(np.array([1.0, 2.0, 3.0]), FLIP_X_QUAT)
        np.testing.assert_allclose(m[:3, 3], [1, 2, 3])
        np.testing.assert_allclose(m[:3, :3] @ [0, 1, 0], [0, -1, 0], atol=1e-12)
        np.testing.assert_allclose(m[3], [0, 0, 0, 1])


# ============== Cylinder Tests ==============

class TestCylinder:

    @pytest.mark.parametrize("radial,length", [(4, 1), (6, 2), (3, 5)])
    def test_counts(self, radial, length):
        c = cylinder_arrays(1.0, 2.0, radial, length)
        assert len(c["position"]) == tube_vertex_count(radial, length)
        assert len(c["normal"]) == len(c["position"])
        assert len(c["uv"]) == len(c["position"])
        assert len(c["index"]) == tube_index_count(radial, length)

    def test_default_counts(self):
        assert tube_vertex_count(4, 1) == 28
        assert tube_index_count(4, 1) == 48

    def test_open_ended_counts(self):
        c = cylinder_arrays(1.0, 2.0, 5, 3, open_ended=True)
        assert len(c["position"]) == 6 * 4
        assert len(c["index"]) == 6 * 5 * 3
        assert tube_vertex_count(5, 3, open_ended=True) == 24

    def test_centered_on_origin(self):
        c = cylinder_arrays(0.5, 3.0, 8, 1)
        y = c["position"][:, 1]
        assert y.min() == pytest.approx(-1.5)
        assert y.max() == pytest.approx(1.5)
        radial = np.linalg.norm(c["position"][:, [0, 2]], axis=1)
        assert radial.max() == pytest.approx(0.5)

    def test_torso_first_row_is_top(self):
        c = cylinder_arrays(1.0, 2.0, 4, 1)
        np.testing.assert_allclose(c["position"][:5, 1], 1.0)
        np.testing.assert_allclose(c["position"][5:10, 1], -1.0)
        # seam column repeats the first vertex
        np.testing.assert_allclose(c["position"][0], c["position"][4], atol=1e-12)

    def test_uv_range(self):
        c = cylinder_arrays(1.0, 2.0, 4, 2)
        assert c["uv"].min() >= 0.0
        assert c["uv"].max() <= 1.0

    def test_indices_in_range(self):
        c = cylinder_arrays(1.0, 2.0, 7, 3)
        assert c["index"].min() == 0
        assert c["index"].max() == len(c["position"]) - 1

    def test_cap_normals(self):
        c = cylinder_arrays(1.0, 2.0, 4, 1)
        torso = 10
        np.testing.assert_allclose(c["normal"][torso:torso + 9], [[0, 1, 0]] * 9)
        np.testing.assert_allclose(c["normal"][torso + 9:], [[0, -1, 0]] * 9)


# ============== Tube Tests ==============

class TestBuildTube:

    def test_vertical_tube_unrotated(self, options):
        tube = build_tube([0, 0, 0], [0, 2, 0], options)
        pos = tube.attributes["position"]
        np.testing.assert_allclose(pos, tube.attributes["basePosition"], atol=1e-6)
        assert pos[:, 1].min() == pytest.approx(0.0, abs=1e-6)
        assert pos[:, 1].max() == pytest.approx(2.0, abs=1e-6)

    def test_tube_spans_edge(self, options):
        start = np.array([1.0, 2.0, 3.0])
        end = np.array([4.0, -1.0, 5.0])
        tube = build_tube(start, end, options)
        dist, along = _distance_to_axis(tube.attributes["position"].astype(np.float64), start, end)
        length = np.linalg.norm(end - start)
        assert dist.max() == pytest.approx(options.thickness, rel=1e-5)
        assert along.min() == pytest.approx(0.0, abs=1e-5)
        assert along.max() == pytest.approx(length, rel=1e-5)

    def test_reversed_edge_same_axis(self, options):
        start = np.array([0.0, 0.0, 0.0])
        end = np.array([0.0, -3.0, 0.0])
        tube = build_tube(start, end, options)
        y = tube.attributes["position"][:, 1]
        assert y.min() == pytest.approx(-3.0, abs=1e-5)
        assert y.max() == pytest.approx(0.0, abs=1e-5)

    def test_base_position_is_local(self, options):
        tube = build_tube([5, 5, 5], [5, 5, 9], options)
        base = tube.attributes["basePosition"]
        assert base[:, 1].min() == pytest.approx(0.0, abs=1e-6)
        assert base[:, 1].max() == pytest.approx(4.0, abs=1e-6)
        radial = np.linalg.norm(base[:, [0, 2]], axis=1)
        assert radial.max() == pytest.approx(options.thickness, rel=1e-5)

    def test_normals_unit_and_radial(self, options):
        start = np.array([0.0, 0.0, 0.0])
        end = np.array([1.0, 1.0, 1.0])
        tube = build_tube(start, end, options)
        normals = tube.attributes["normal"].astype(np.float64)
        np.testing.assert_allclose(np.linalg.norm(normals, axis=1), 1.0, atol=1e-5)
        # torso normals are perpendicular to the axis
        n_torso = (options.radius_segments + 1) * (options.length_segments + 1)
        axis = (end - start) / np.linalg.norm(end - start)
        np.testing.assert_allclose(normals[:n_torso] @ axis, 0.0, atol=1e-5)

    def test_attribute_shapes_and_dtypes(self, options):
        tube = build_tube([0, 0, 0], [1, 0, 0], options)
        n = tube_vertex_count(options.radius_segments, options.length_segments)
        assert tube.attributes["position"].shape == (n, 3)
        assert tube.attributes["normal"].shape == (n, 3)
        assert tube.attributes["uv"].shape == (n, 2)
        assert tube.attributes["basePosition"].shape == (n, 3)
        assert tube.attributes["position"].dtype == np.float32
        assert tube.index.dtype == np.uint16
        assert len(tube.index) == tube_index_count(options.radius_segments, options.length_segments)

    def test_default_options(self):
        tube = build_tube([0, 0, 0], [0, 0, 1])
        assert tube.n_vertices == 28
        assert tube.n_triangles == 16

    def test_open_ended(self):
        tube = build_tube([0, 0, 0], [0, 0, 1], WireframeOptions(open_ended=True))
        assert tube.n_vertices == 10
        assert tube.n_triangles == 8

    def test_matrix_applied_after_orientation(self, options):
        shift = np.eye(4)
        shift[:3, 3] = [10.0, 0.0, -2.0]
        plain = build_tube([0, 0, 0], [1, 2, 0], options)
        moved = build_tube([0, 0, 0], [1, 2, 0], options.replace(matrix=shift))
        np.testing.assert_allclose(
            moved.attributes["position"], plain.attributes["position"] + [10.0, 0.0, -2.0], atol=1e-5
        )
        np.testing.assert_allclose(moved.attributes["normal"], plain.attributes["normal"], atol=1e-6)
        np.testing.assert_allclose(moved.attributes["basePosition"], plain.attributes["basePosition"])

    def test_matrix_scale_keeps_unit_normals(self, options):
        scale = np.diag([2.0, 1.0, 0.5, 1.0])
        tube = build_tube([0, 0, 0], [1, 1, 0], options.replace(matrix=scale))
        norms = np.linalg.norm(tube.attributes["normal"].astype(np.float64), axis=1)
        np.testing.assert_allclose(norms, 1.0, atol=1e-5)

    def test_degenerate_edge_raises(self, options):
        with pytest.raises(DegenerateEdgeError) as exc_info:
            build_tube([1, 1, 1], [1, 1, 1], options)
        assert exc_info.value.length == 0.0

    def test_degenerate_edge_is_value_error(self, options):
        with pytest.raises(ValueError):
            build_tube([0, 0, 0], [0, 0, 1e-12], options)
