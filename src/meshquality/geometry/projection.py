"""
Projection of quadrilaterals onto a local 2D frame.

The bilinear Jacobian needs the four corners of a quad expressed in a plane.
Corners of a warped (non-planar) quad are first projected onto an averaged
plane, then the plane is rigidly moved onto the XY-plane so that in-plane
distances and the winding orientation are preserved.
"""

from __future__ import annotations

import logging
import numpy as np
import trimesh

logger = logging.getLogger("meshquality.geometry")

# Absolute distance below which points count as lying in a plane
COPLANAR_TOLERANCE = 2.0 ** -32


class DegenerateGeometryError(ValueError):
    """Raised when a quad has no well-defined plane (zero-length normal)."""
    pass


def _check_quad(points) -> np.ndarray:
    points = np.asarray(points, dtype=np.float64)
    if points.shape != (4, 3):
        raise ValueError(f"Expected 4x3 corner points, got shape {points.shape}")
    return points


def _is_zero_normal(normal: np.ndarray, points: np.ndarray) -> bool:
    """Zero test for a cross-product normal, scaled by the element size."""
    scale = np.linalg.norm(points - points.mean(axis=0), axis=1).max()
    if scale == 0.0 or not np.isfinite(scale):
        return True
    return np.linalg.norm(normal) <= COPLANAR_TOLERANCE * scale * scale


def quad_normal(points) -> np.ndarray:
    """
    Newell-style averaged normal of a 4-point loop.

    At every corner the cross product of the vectors to its next and
    previous neighbours is taken; the four products are summed.
    """
    points = _check_quad(points)
    to_next = np.roll(points, -1, axis=0) - points
    to_prev = np.roll(points, 1, axis=0) - points
    return np.cross(to_next, to_prev).sum(axis=0)


def are_coplanar(points, tolerance: float = COPLANAR_TOLERANCE) -> bool:
    """Check whether the four points lie in one plane within ``tolerance``."""
    points = _check_quad(points)
    normal = quad_normal(points)
    if _is_zero_normal(normal, points):
        # All points on a line (or a single point) are trivially coplanar
        return True
    distances = trimesh.points.point_plane_distance(
        points, plane_normal=normal, plane_origin=points.mean(axis=0)
    )
    return bool(np.abs(distances).max() <= tolerance)


def project_onto_average_plane(points) -> np.ndarray:
    """
    Orthogonally project the four points onto the plane through their
    centroid along the averaged normal.

    Raises:
        DegenerateGeometryError: if the averaged normal has zero length
    """
    points = _check_quad(points)
    normal = quad_normal(points)
    if _is_zero_normal(normal, points):
        raise DegenerateGeometryError("Averaged quad normal has zero length")

    unit = normal / np.linalg.norm(normal)
    center = points.mean(axis=0)
    offsets = (points - center) @ unit
    return points - np.outer(offsets, unit)


def plane_to_xy_transform(points) -> np.ndarray:
    """
    4x4 rigid transform moving the plane of ``points`` onto the XY-plane.

    The plane passes through the first corner with normal
    ``(p1 - p0) x (p3 - p0)``, which maps to +Z so that a counter-clockwise
    loop stays counter-clockwise.
    """
    points = _check_quad(points)
    normal = np.cross(points[1] - points[0], points[-1] - points[0])
    if _is_zero_normal(normal, points):
        raise DegenerateGeometryError(
            "Edges at the first corner are parallel; plane is undefined"
        )
    return trimesh.geometry.plane_transform(origin=points[0], normal=normal)


def project_quad_to_xy(points) -> np.ndarray:
    """
    Map four 3D quad corners into a local 2D frame (z = 0).

    Args:
        points: 4x3 corner coordinates in winding order

    Returns:
        4x3 array with z ~ 0 and the input ordering preserved

    Raises:
        DegenerateGeometryError: no plane can be defined for the corners
    """
    points = _check_quad(points)

    if are_coplanar(points):
        plane_points = points
    else:
        logger.debug("Quad is not planar, projecting onto averaged plane")
        plane_points = project_onto_average_plane(points)

    transform = plane_to_xy_transform(plane_points)
    return trimesh.transformations.transform_points(plane_points, transform)
