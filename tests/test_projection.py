"""Tests for projecting quads onto a local 2D frame."""

import numpy as np
import pytest

from meshquality.geometry.projection import (
    DegenerateGeometryError,
    are_coplanar,
    project_onto_average_plane,
    project_quad_to_xy,
    quad_normal,
)

SQUARE = np.array([[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0]], dtype=np.float64)


def _rotation(axis, angle):
    """Rodrigues rotation matrix."""
    axis = np.asarray(axis, dtype=np.float64)
    axis = axis / np.linalg.norm(axis)
    k = np.array([
        [0, -axis[2], axis[1]],
        [axis[2], 0, -axis[0]],
        [-axis[1], axis[0], 0],
    ])
    return np.eye(3) + np.sin(angle) * k + (1 - np.cos(angle)) * (k @ k)


def _edge_lengths(points):
    return np.linalg.norm(np.roll(points, -1, axis=0) - points, axis=1)


def _signed_area(points):
    x, y = points[:, 0], points[:, 1]
    return 0.5 * np.sum(x * np.roll(y, -1) - np.roll(x, -1) * y)


class TestNormal:
    """Averaged quad normal."""

    def test_square_normal(self):
        """Counter-clockwise square in XY has a +Z normal."""
        normal = quad_normal(SQUARE)
        np.testing.assert_allclose(normal, [0, 0, 4])

    def test_wrong_shape(self):
        with pytest.raises(ValueError):
            quad_normal(np.zeros((3, 3)))


class TestCoplanarity:
    """Coplanarity check."""

    def test_square_is_coplanar(self):
        assert are_coplanar(SQUARE)

    def test_rotated_square_is_coplanar(self):
        rotated = SQUARE @ _rotation([1, 2, 3], 0.7).T + [5, -2, 3]
        assert are_coplanar(rotated)

    def test_warped_quad_is_not_coplanar(self):
        warped = SQUARE + np.array([[0, 0, 0.1], [0, 0, -0.1], [0, 0, 0.1], [0, 0, -0.1]])
        assert not are_coplanar(warped)


class TestProjection:
    """Projection onto the XY-plane."""

    def test_planar_square_in_xy(self):
        """Output lies in z = 0 and keeps its orientation."""
        projected = project_quad_to_xy(SQUARE)
        assert projected.shape == (4, 3)
        np.testing.assert_allclose(projected[:, 2], 0, atol=1e-12)
        np.testing.assert_allclose(projected[0], [0, 0, 0], atol=1e-12)
        assert _signed_area(projected) == pytest.approx(1.0)

    def test_distances_preserved(self):
        """A planar quad keeps its edge lengths and diagonals."""
        quad = np.array([[0, 0, 0], [3, 0, 0], [2.5, 1.5, 0], [0.2, 2, 0]])
        rotated = quad @ _rotation([0.3, -1, 0.5], 1.1).T + [10, 4, -7]

        projected = project_quad_to_xy(rotated)

        np.testing.assert_allclose(projected[:, 2], 0, atol=1e-9)
        np.testing.assert_allclose(_edge_lengths(projected), _edge_lengths(quad))
        np.testing.assert_allclose(
            np.linalg.norm(projected[2] - projected[0]),
            np.linalg.norm(quad[2] - quad[0]),
        )

    def test_orientation_is_counter_clockwise(self):
        """Winding maps to counter-clockwise whatever the 3D orientation."""
        flipped = SQUARE @ _rotation([1, 0, 0], np.pi).T
        assert _signed_area(project_quad_to_xy(flipped)) > 0

    def test_warped_quad_projection(self):
        """A warped quad lands in z = 0 with its order preserved."""
        warped = SQUARE + np.array([[0, 0, 0.2], [0, 0, -0.2], [0, 0, 0.2], [0, 0, -0.2]])
        projected = project_quad_to_xy(warped)

        np.testing.assert_allclose(projected[:, 2], 0, atol=1e-9)
        np.testing.assert_allclose(_edge_lengths(projected), 1.0)
        assert _signed_area(projected) == pytest.approx(1.0)

    def test_average_plane_contains_centroid(self):
        warped = SQUARE + np.array([[0, 0, 0.3], [0, 0, 0.0], [0, 0, 0.3], [0, 0, 0.0]])
        flat = project_onto_average_plane(warped)
        np.testing.assert_allclose(flat.mean(axis=0), warped.mean(axis=0))
        np.testing.assert_allclose(flat[:, 2], 0.15)


class TestDegenerate:
    """Degenerate input is reported, not accepted."""

    def test_collinear_points(self):
        line = np.array([[0, 0, 0], [1, 0, 0], [2, 0, 0], [3, 0, 0]], dtype=np.float64)
        with pytest.raises(DegenerateGeometryError):
            project_quad_to_xy(line)

    def test_coincident_points(self):
        with pytest.raises(DegenerateGeometryError):
            project_quad_to_xy(np.ones((4, 3)))
