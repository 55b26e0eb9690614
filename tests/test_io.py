"""Tests for element and report files."""

import json

import numpy as np
import pytest
import yaml

from meshquality.core.element import Hex, MalformedElementError, Quad
from meshquality.core.io import (
    elements_from_dict,
    load_elements,
    save_elements,
    save_report,
)
from meshquality.evaluation.quality import evaluate_quality
from meshquality.samples import create_hex_grid, create_quad_grid, create_square

OBJ_TEXT = """\
# two quads and a triangle
v 0 0 0
v 1 0 0
v 2 0 0
v 0 1 0
v 1 1 0
v 2 1 0
f 1 2 5 4
f 2/1/1 3/2/1 6/3/1 5/4/1
f 1 2 5
"""


class TestElementFiles:
    """YAML and JSON element files."""

    @pytest.mark.parametrize("suffix", [".yaml", ".json"])
    def test_save_and_load(self, tmp_path, suffix):
        elements = create_quad_grid(2, 2) + create_hex_grid(1, 1, 2)
        path = save_elements(elements, tmp_path / f"elements{suffix}")

        loaded = load_elements(path)

        assert [e.id for e in loaded] == [e.id for e in elements]
        assert [type(e) for e in loaded] == [type(e) for e in elements]
        for a, b in zip(loaded, elements):
            np.testing.assert_allclose(a.corners, b.corners)

    def test_node_references(self, tmp_path):
        data = {
            "nodes": {1: [0, 0, 0], 2: [1, 0, 0], 3: [1, 1, 0], 4: [0, 1, 0]},
            "elements": [{"id": 10, "kind": "quad", "nodes": [1, 2, 3, 4]}],
        }
        path = tmp_path / "nodes.yaml"
        path.write_text(yaml.safe_dump(data))

        (quad,) = load_elements(path)

        assert isinstance(quad, Quad)
        assert quad.id == 10
        np.testing.assert_allclose(quad.corners, create_square().corners)

    def test_unknown_node(self):
        data = {"nodes": {"1": [0, 0, 0]}, "elements": [{"id": 1, "nodes": [1, 2, 3, 4]}]}
        with pytest.raises(ValueError, match="unknown node"):
            elements_from_dict(data)

    def test_missing_elements_key(self):
        with pytest.raises(ValueError):
            elements_from_dict({"nodes": {}})

    def test_entry_without_corners(self):
        with pytest.raises(ValueError, match="no corners"):
            elements_from_dict({"elements": [{"id": 1}]})

    def test_kind_mismatch(self):
        data = {"elements": [{"id": 1, "kind": "hex", "corners": [[0, 0], [1, 0], [1, 1], [0, 1]]}]}
        with pytest.raises(MalformedElementError):
            elements_from_dict(data)

    def test_default_ids(self):
        data = {"elements": [{"corners": np.zeros((8, 3)).tolist()}]}
        (cell,) = elements_from_dict(data)
        assert isinstance(cell, Hex)
        assert cell.id == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_elements(tmp_path / "nope.yaml")

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "mesh.stl"
        path.write_text("solid")
        with pytest.raises(ValueError, match="Unsupported"):
            load_elements(path)

    def test_save_rejects_other_suffix(self, tmp_path):
        with pytest.raises(ValueError):
            save_elements([create_square()], tmp_path / "out.obj")


class TestObj:
    """Quad-aware OBJ loading."""

    def test_quads_loaded_triangles_skipped(self, tmp_path):
        path = tmp_path / "strip.obj"
        path.write_text(OBJ_TEXT)

        elements = load_elements(path)

        assert [e.id for e in elements] == [1, 2]
        assert all(isinstance(e, Quad) for e in elements)
        np.testing.assert_allclose(elements[1].corners[0], [1, 0, 0])
        np.testing.assert_allclose(elements[1].corners[2], [2, 1, 0])

    def test_negative_indices(self, tmp_path):
        path = tmp_path / "neg.obj"
        path.write_text("v 0 0 0\nv 1 0 0\nv 1 1 0\nv 0 1 0\nf -4 -3 -2 -1\n")
        (quad,) = load_elements(path)
        np.testing.assert_allclose(quad.corners, create_square().corners)

    def test_missing_vertex(self, tmp_path):
        path = tmp_path / "bad.obj"
        path.write_text("v 0 0 0\nv 1 0 0\nv 1 1 0\nf 1 2 3 9\n")
        with pytest.raises(ValueError, match="missing vertex"):
            load_elements(path)

    def test_no_vertices(self, tmp_path):
        path = tmp_path / "empty.obj"
        path.write_text("# nothing\n")
        with pytest.raises(ValueError):
            load_elements(path)


class TestReports:
    """Report files."""

    def test_json_report(self, tmp_path):
        collapsed = Quad(id=2, corners=np.zeros((4, 3)))
        report = evaluate_quality([create_square(), collapsed], metric=3)

        path = save_report(report, tmp_path / "out" / "report.json")
        data = json.loads(path.read_text())

        assert data["metric"] == "jacobian_ratio"
        assert data["statistics"]["count"] == 2
        assert data["statistics"]["mean_aspect_ratio"] == 1.0
        assert data["elements"][0]["band"] == "excellent"
        # nan is written as null
        assert data["elements"][1]["aspect_ratio"] is None
        assert data["elements"][1]["band"] == "invalid"
        assert data["diagnostic_counts"]["warning"] > 0

    def test_yaml_report(self, tmp_path):
        report = evaluate_quality(create_quad_grid(2, 1))
        path = save_report(report, tmp_path / "report.yaml")
        data = yaml.safe_load(path.read_text())
        assert data["metric"] is None
        assert [e["element_id"] for e in data["elements"]] == [1, 2]
        assert all(e["band"] is None for e in data["elements"])
