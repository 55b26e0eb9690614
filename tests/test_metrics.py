"""Tests for aspect ratio and skewness."""

import math

import numpy as np
import pytest

from meshquality.core.diagnostics import DiagnosticCode
from meshquality.core.element import Hex, MalformedElementError, Quad
from meshquality.evaluation.metrics import (
    IDEAL_ASPECT_RATIO,
    aspect_ratio,
    face_angles,
    skewness,
)
from meshquality.samples import (
    create_cube,
    create_hex_grid,
    create_quad_grid,
    create_skewed_quad,
    create_square,
)


def _codes(diagnostics):
    return {d.code for d in diagnostics}


class TestAspectRatio:
    """Aspect ratio for quads and hexahedra."""

    def test_square_is_ideal(self):
        ar, diagnostics = aspect_ratio(create_square())
        assert ar == pytest.approx(1.0)
        assert diagnostics == []

    def test_rectangle(self):
        """A 2x1 rectangle scores 0.5."""
        quad = Quad(id=1, corners=[[0, 0, 0], [2, 0, 0], [2, 1, 0], [0, 1, 0]])
        ar, _ = aspect_ratio(quad)
        assert ar == pytest.approx(0.5)

    def test_cube_is_ideal(self):
        """The cube normalization makes a perfect cube score 1.0."""
        ar, diagnostics = aspect_ratio(create_cube())
        assert ar == pytest.approx(1.0)
        assert diagnostics == []

    def test_ideal_constant(self):
        assert IDEAL_ASPECT_RATIO == pytest.approx(0.5 / math.sqrt(0.75))

    def test_box(self):
        """A 2x1x1 box: face distance 0.5 over corner distance sqrt(1.5)."""
        corners = create_cube().corners * np.array([2.0, 1.0, 1.0])
        ar, _ = aspect_ratio(Hex(id=1, corners=corners))
        assert ar == pytest.approx(math.sqrt(0.5))

    def test_scale_and_translation_invariant(self):
        quad = create_skewed_quad(70.0)
        moved = Quad(id=2, corners=quad.corners * 3.5 + [10, -4, 2])
        assert aspect_ratio(moved)[0] == pytest.approx(aspect_ratio(quad)[0])

    def test_collapsed_edge(self):
        """A zero-length edge gives 0 and an out-of-range warning."""
        quad = Quad(id=4, corners=[[0, 0, 0], [1, 0, 0], [1, 0, 0], [0, 1, 0]])
        ar, diagnostics = aspect_ratio(quad)
        assert ar == 0.0
        assert DiagnosticCode.ASPECT_RATIO_OUT_OF_RANGE in _codes(diagnostics)
        assert diagnostics[0].element_id == 4

    def test_single_point(self):
        """All corners in one point is degenerate, not a crash."""
        ar, diagnostics = aspect_ratio(Quad(id=1, corners=np.zeros((4, 3))))
        assert math.isnan(ar)
        assert DiagnosticCode.DEGENERATE_GEOMETRY in _codes(diagnostics)

    def test_values_in_range(self):
        for quad in create_quad_grid(5, 5, jitter=0.2, seed=3):
            ar, _ = aspect_ratio(quad)
            assert 0.0 < ar <= 1.0
        for cell in create_hex_grid(2, 2, 2):
            ar, _ = aspect_ratio(cell)
            assert ar == pytest.approx(1.0)

    def test_rejects_other_objects(self):
        with pytest.raises(MalformedElementError):
            aspect_ratio("not an element")


class TestSkewness:
    """Skewness from face angles."""

    def test_square_is_ideal(self):
        sk, diagnostics = skewness(create_square())
        assert sk == pytest.approx(1.0)
        assert diagnostics == []

    def test_cube_is_ideal(self):
        sk, _ = skewness(create_cube())
        assert sk == pytest.approx(1.0)

    def test_rhombus(self):
        """60/120 degree rhombus: 1 - 30/90."""
        sk, _ = skewness(create_skewed_quad(60.0))
        assert sk == pytest.approx(2.0 / 3.0)

    def test_rhombus_angles(self):
        angles, _ = face_angles(create_skewed_quad(60.0))
        assert sorted(np.round(angles, 6)) == [60.0, 60.0, 120.0, 120.0]

    def test_cube_has_24_angles(self):
        angles, _ = face_angles(create_cube())
        assert angles.shape == (24,)
        np.testing.assert_allclose(angles, 90.0)

    def test_symmetric_in_deviation(self):
        """A 45 degree rhombus and its mirror score the same."""
        assert skewness(create_skewed_quad(45.0))[0] == pytest.approx(
            skewness(create_skewed_quad(135.0))[0]
        )

    def test_zero_length_edge_skipped(self):
        quad = Quad(id=9, corners=[[0, 0, 0], [1, 0, 0], [1, 0, 0], [0, 1, 0]])
        sk, diagnostics = skewness(quad)
        assert math.isfinite(sk)
        assert DiagnosticCode.DEGENERATE_GEOMETRY in _codes(diagnostics)

    def test_single_point(self):
        sk, diagnostics = skewness(Quad(id=1, corners=np.ones((4, 3))))
        assert math.isnan(sk)
        assert diagnostics
