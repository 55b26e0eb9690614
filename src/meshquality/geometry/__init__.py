"""Geometric helpers: quad projection and isoparametric shape functions."""

from meshquality.geometry.projection import (
    COPLANAR_TOLERANCE,
    DegenerateGeometryError,
    are_coplanar,
    project_quad_to_xy,
    quad_normal,
)
from meshquality.geometry.shape_functions import (
    hex_corner_determinants,
    quad_corner_determinants,
    trilinear_derivatives,
)

__all__ = [
    "COPLANAR_TOLERANCE",
    "DegenerateGeometryError",
    "are_coplanar",
    "project_quad_to_xy",
    "quad_normal",
    "hex_corner_determinants",
    "quad_corner_determinants",
    "trilinear_derivatives",
]
