"""Tests for band-colored mesh output."""

import numpy as np
import pytest
import trimesh

from meshquality.evaluation.classify import Band
from meshquality.evaluation.quality import evaluate_quality
from meshquality.evaluation.visualize import (
    UNCLASSIFIED_RGBA,
    build_color_mesh,
    export_color_mesh,
)
from meshquality.samples import create_cube, create_inverted_hex, create_square


class TestColorMesh:
    """Triangulated element surfaces with band colors."""

    def test_quads(self):
        report = evaluate_quality(
            [create_square(element_id=1), create_square(origin=(1, 0, 0), element_id=2)],
            metric=1,
        )
        mesh = build_color_mesh(report)

        assert len(mesh.vertices) == 8
        assert len(mesh.faces) == 4
        np.testing.assert_array_equal(mesh.visual.face_colors[:, :3], [Band.EXCELLENT.rgb] * 4)

    def test_hex_faces(self):
        """Each hex contributes six faces, twelve triangles."""
        report = evaluate_quality([create_cube(), create_inverted_hex(element_id=2)], metric=3)
        mesh = build_color_mesh(report)

        assert len(mesh.faces) == 24
        colors = mesh.visual.face_colors[:, :3]
        np.testing.assert_array_equal(colors[:12], [Band.EXCELLENT.rgb] * 12)
        np.testing.assert_array_equal(colors[12:], [Band.INVALID.rgb] * 12)

    def test_unclassified_color(self):
        report = evaluate_quality([create_square()])
        mesh = build_color_mesh(report)
        np.testing.assert_array_equal(mesh.visual.face_colors, [UNCLASSIFIED_RGBA] * 2)

    def test_export(self, tmp_path):
        report = evaluate_quality([create_cube()], metric=2)
        path = export_color_mesh(report, tmp_path / "colors" / "cube.ply")

        assert path.exists()
        loaded = trimesh.load(path, process=False)
        assert len(loaded.faces) == 12

    def test_export_empty(self, tmp_path):
        with pytest.raises(ValueError):
            export_color_mesh(evaluate_quality([]), tmp_path / "empty.ply")
