"""
Element quality metrics.

Provides the three per-element measures used to judge a mesh:

- Aspect Ratio: smallest over largest characteristic distance, 1.0 ideal
- Skewness: deviation of the face angles from 90 degrees, 1.0 ideal
- Jacobian Ratio: smallest over largest isoparametric Jacobian determinant
  at the corner nodes, 1.0 ideal, negative for inverted elements

Every calculator returns ``(value, diagnostics)``. Bad geometry never raises;
it produces ``nan`` or an out-of-range value plus a diagnostic.
"""

from __future__ import annotations

import logging
import math
from typing import Union
import numpy as np
from scipy.spatial.distance import cdist

from meshquality.core.diagnostics import Diagnostic, DiagnosticCode, Severity
from meshquality.core.element import Element, Hex, Quad, MalformedElementError
from meshquality.geometry.projection import (
    COPLANAR_TOLERANCE,
    DegenerateGeometryError,
    project_quad_to_xy,
)
from meshquality.geometry.shape_functions import (
    hex_corner_determinants,
    quad_corner_determinants,
)

logger = logging.getLogger("meshquality.evaluation")

# Min/max distance ratio of a perfect cube (half-edge 0.5 vs half-diagonal)
IDEAL_ASPECT_RATIO = 0.5 / math.sqrt(0.75)
IDEAL_ANGLE = 90.0

# Slack for range checks so that 1.0000000001 on a perfect element passes
RANGE_TOLERANCE = 1e-9

MetricResult = tuple[float, list[Diagnostic]]


def _require_element(element) -> Union[Quad, Hex]:
    if not isinstance(element, (Quad, Hex)):
        raise MalformedElementError(
            f"Expected a Quad or Hex element, got {type(element).__name__}"
        )
    return element


def _degenerate(element: Element, metric: str, message: str) -> Diagnostic:
    return Diagnostic(
        code=DiagnosticCode.DEGENERATE_GEOMETRY,
        severity=Severity.WARNING,
        message=message,
        element_id=element.id,
        metric=metric,
    )


def aspect_ratio(element: Element) -> MetricResult:
    """
    Aspect ratio of an element.

    Quads use the four edge lengths (consecutive corners, wrapping around).
    Hexahedra use the corner-to-centroid and face-center-to-centroid
    distances, normalized so a perfect cube scores 1.0.
    """
    element = _require_element(element)
    diagnostics: list[Diagnostic] = []
    corners = element.corners

    if isinstance(element, Quad):
        distances = np.linalg.norm(np.roll(corners, -1, axis=0) - corners, axis=1)
        reference = 1.0
    else:
        center = element.centroid[np.newaxis, :]
        distances = np.concatenate([
            cdist(corners, center).ravel(),
            cdist(element.face_centers, center).ravel(),
        ])
        reference = IDEAL_ASPECT_RATIO

    max_distance = distances.max()
    if not max_distance > 0:
        diagnostics.append(_degenerate(
            element, "aspect_ratio", "All characteristic distances are zero"
        ))
        return float("nan"), diagnostics

    ar = float(distances.min() / max_distance / reference)

    if not (0.0 < ar <= 1.0 + RANGE_TOLERANCE):
        diagnostics.append(Diagnostic(
            code=DiagnosticCode.ASPECT_RATIO_OUT_OF_RANGE,
            severity=Severity.WARNING,
            message=f"Aspect ratio {ar:.4f} is outside (0, 1]; element may be degenerate",
            element_id=element.id,
            metric="aspect_ratio",
        ))

    return ar, diagnostics


def face_angles(element: Element) -> tuple[np.ndarray, list[Diagnostic]]:
    """
    Interior corner angles of every face, in degrees.

    At each corner the angle is measured between the edges towards the next
    and the previous corner of the face loop. Corners with a zero-length
    edge are skipped and reported.
    """
    element = _require_element(element)
    loops = element.face_loops  # (F, 4, 3)

    vec1 = loops - np.roll(loops, -1, axis=1)
    vec2 = loops - np.roll(loops, -3, axis=1)

    len1 = np.linalg.norm(vec1, axis=2)
    len2 = np.linalg.norm(vec2, axis=2)
    valid = (len1 > 0) & (len2 > 0)

    diagnostics: list[Diagnostic] = []
    if not valid.all():
        n_bad = int((~valid).sum())
        diagnostics.append(_degenerate(
            element, "skewness",
            f"{n_bad} face corner(s) have a zero-length edge; angle undefined",
        ))

    dots = np.einsum("fij,fij->fi", vec1, vec2)
    with np.errstate(divide="ignore", invalid="ignore"):
        cosines = np.clip(dots / (len1 * len2), -1.0, 1.0)
    angles = np.degrees(np.arccos(cosines[valid]))

    return angles, diagnostics


def skewness(element: Element) -> MetricResult:
    """
    Skewness of an element from the extreme face angles.

    SK = 1 - max((max_angle - 90) / 90, (90 - min_angle) / 90)
    """
    angles, diagnostics = face_angles(element)

    if angles.size == 0:
        return float("nan"), diagnostics

    min_angle = angles.min()
    max_angle = angles.max()
    sk = 1.0 - max(
        (max_angle - IDEAL_ANGLE) / (180.0 - IDEAL_ANGLE),
        (IDEAL_ANGLE - min_angle) / IDEAL_ANGLE,
    )
    return float(sk), diagnostics


def corner_determinants(element: Element) -> np.ndarray:
    """
    Jacobian determinants at the element's corner nodes.

    Raises:
        DegenerateGeometryError: a quad cannot be projected to a plane
    """
    element = _require_element(element)
    if isinstance(element, Quad):
        return quad_corner_determinants(project_quad_to_xy(element.corners))
    return hex_corner_determinants(element.corners)


def jacobian_ratio(element: Element) -> MetricResult:
    """
    Jacobian ratio from the corner-node determinants.

    Quads: min/max of the bilinear determinants of the projected corners.
    Hexahedra: min/max of the trilinear determinants, or max/min when any
    corner is inverted (negative determinant).

    Evaluating at the corners rather than at Gauss points catches concave
    and inverted elements but can miss distortion inside the element.
    """
    element = _require_element(element)
    diagnostics: list[Diagnostic] = []

    try:
        dets = corner_determinants(element)
    except DegenerateGeometryError as e:
        diagnostics.append(_degenerate(element, "jacobian_ratio", str(e)))
        return float("nan"), diagnostics

    inverted = isinstance(element, Hex) and bool((dets < 0).any())
    if inverted:
        numerator, denominator = dets.max(), dets.min()
    else:
        numerator, denominator = dets.min(), dets.max()

    if denominator == 0 or not np.isfinite(denominator):
        diagnostics.append(_degenerate(
            element, "jacobian_ratio", "Jacobian determinants vanish; element has no volume"
        ))
        return float("nan"), diagnostics

    ratio = float(numerator / denominator)

    # Zero at a corner: three collinear corners or a collapsed face
    vanishing = np.abs(dets) <= COPLANAR_TOLERANCE * np.abs(dets).max()
    if vanishing.any():
        diagnostics.append(_degenerate(
            element, "jacobian_ratio",
            f"{int(vanishing.sum())} corner Jacobian(s) vanish; "
            "corners are collinear or collapsed",
        ))

    if inverted:
        n_neg = int((dets < 0).sum())
        diagnostics.append(Diagnostic(
            code=DiagnosticCode.INVERTED_CORNERS,
            severity=Severity.WARNING,
            message=f"{n_neg} of 8 corner Jacobians are negative",
            element_id=element.id,
            metric="jacobian_ratio",
        ))
        if ratio < 0:
            diagnostics.append(Diagnostic(
                code=DiagnosticCode.INVERTED_ELEMENT,
                severity=Severity.ERROR,
                message=f"Jacobian ratio {ratio:.4f} is negative; element is self-intersecting",
                element_id=element.id,
                metric="jacobian_ratio",
            ))
    elif not (0.0 <= ratio <= 1.0 + RANGE_TOLERANCE):
        diagnostics.append(Diagnostic(
            code=DiagnosticCode.JACOBIAN_RATIO_OUT_OF_RANGE,
            severity=Severity.WARNING,
            message=(
                f"Jacobian ratio {ratio:.4f} is outside [0, 1]; "
                "a negative value may indicate a concave or self-intersecting element"
            ),
            element_id=element.id,
            metric="jacobian_ratio",
        ))

    return ratio, diagnostics
