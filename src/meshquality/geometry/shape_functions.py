"""
Isoparametric shape functions for 4-node and 8-node elements.

Natural coordinates follow the corner ordering of the element model:
quads (r, s) counter-clockwise from (-1, -1), hexahedra (r, s, t) with the
bottom face (t = -1) first.
"""

from __future__ import annotations

import numpy as np


QUAD_NATURAL_CORNERS = np.array([
    [-1.0, -1.0],
    [1.0, -1.0],
    [1.0, 1.0],
    [-1.0, 1.0],
])

HEX_NATURAL_CORNERS = np.array([
    [-1.0, -1.0, -1.0],
    [1.0, -1.0, -1.0],
    [1.0, 1.0, -1.0],
    [-1.0, 1.0, -1.0],
    [-1.0, -1.0, 1.0],
    [1.0, -1.0, 1.0],
    [1.0, 1.0, 1.0],
    [-1.0, 1.0, 1.0],
])


def quad_jacobian_determinant(local_points: np.ndarray, r: float, s: float) -> float:
    """
    Determinant of the bilinear 4-node Jacobian at natural point (r, s).

    Args:
        local_points: 4x2 (or 4x3, z ignored) in-plane corner coordinates
        r, s: natural coordinates in [-1, 1]
    """
    x = local_points[:, 0]
    y = local_points[:, 1]

    dx_dr = (1 - s) * (x[1] - x[0]) + (1 + s) * (x[2] - x[3])
    dy_ds = (1 - r) * (y[3] - y[0]) + (1 + r) * (y[2] - y[1])
    dy_dr = (1 - s) * (y[1] - y[0]) + (1 + s) * (y[2] - y[3])
    dx_ds = (1 - r) * (x[3] - x[0]) + (1 + r) * (x[2] - x[1])

    return 0.0625 * (dx_dr * dy_ds - dy_dr * dx_ds)


def quad_corner_determinants(local_points: np.ndarray) -> np.ndarray:
    """Bilinear Jacobian determinants at the four natural corners."""
    return np.array([
        quad_jacobian_determinant(local_points, r, s)
        for r, s in QUAD_NATURAL_CORNERS
    ])


def trilinear_derivatives(r: float, s: float, t: float) -> np.ndarray:
    """
    Partial derivatives of the eight trilinear shape functions.

    N_i = (1 + r r_i)(1 + s s_i)(1 + t t_i) / 8

    Returns:
        3x8 array, rows dN/dr, dN/ds, dN/dt
    """
    ri, si, ti = HEX_NATURAL_CORNERS.T
    return np.vstack([
        ri * (1 + s * si) * (1 + t * ti),
        si * (1 + r * ri) * (1 + t * ti),
        ti * (1 + r * ri) * (1 + s * si),
    ]) / 8.0


def hex_jacobian(corners: np.ndarray, r: float, s: float, t: float) -> np.ndarray:
    """3x3 Jacobian matrix d(x, y, z)/d(r, s, t) of an 8-node hexahedron."""
    return trilinear_derivatives(r, s, t) @ np.asarray(corners, dtype=np.float64)


def hex_corner_determinants(corners: np.ndarray) -> np.ndarray:
    """Trilinear Jacobian determinants at the eight natural corners."""
    return np.array([
        np.linalg.det(hex_jacobian(corners, r, s, t))
        for r, s, t in HEX_NATURAL_CORNERS
    ])
