"""
Colored mesh output for quality bands.

Builds a triangulated surface of every evaluated element with each face
painted in its band color, for viewing in any mesh viewer.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union
import numpy as np
import trimesh

from meshquality.evaluation.classify import Band
from meshquality.evaluation.quality import QualityReport

logger = logging.getLogger("meshquality.evaluation.visualize")

# Elements without a band
UNCLASSIFIED_RGBA = (200, 200, 200, 255)

# Two triangles per quad face loop
_QUAD_TRIANGLES = np.array([[0, 1, 2], [0, 2, 3]], dtype=np.int64)


def build_color_mesh(report: QualityReport) -> trimesh.Trimesh:
    """
    Triangulated mesh of all elements in ``report`` colored by band.

    Every face loop of every element gets its own four vertices, so
    neighbouring elements of different bands do not share colors.
    """
    bands: list[Optional[Band]] = report.bands or [None] * len(report.qualities)

    vertices = []
    faces = []
    colors = []
    offset = 0

    for quality, band in zip(report.qualities, bands):
        rgba = band.rgba if band is not None else UNCLASSIFIED_RGBA
        for loop in quality.element.face_loops:
            vertices.append(loop)
            faces.append(_QUAD_TRIANGLES + offset)
            colors.extend([rgba, rgba])
            offset += 4

    if not vertices:
        return trimesh.Trimesh()

    return trimesh.Trimesh(
        vertices=np.concatenate(vertices),
        faces=np.concatenate(faces),
        face_colors=np.array(colors, dtype=np.uint8),
        process=False,
    )


def export_color_mesh(report: QualityReport, path: Union[str, Path]) -> Path:
    """
    Write the band-colored mesh of ``report`` to ``path``.

    The format follows the file extension (PLY keeps face colors best).

    Raises:
        ValueError: if the report has no elements
    """
    path = Path(path)
    if not report.qualities:
        raise ValueError("Cannot export a color mesh of an empty report")

    mesh = build_color_mesh(report)
    path.parent.mkdir(parents=True, exist_ok=True)
    mesh.export(str(path))

    logger.info(f"Color mesh saved: {path} ({len(mesh.faces)} triangles)")
    return path
