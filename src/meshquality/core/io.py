"""
Element I/O utilities.

Supports loading element lists from OBJ (quads only) and from YAML/JSON
element files, and saving elements and quality reports.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Union
import numpy as np
import yaml

from meshquality.core.element import Element, make_element

if TYPE_CHECKING:
    from meshquality.evaluation.quality import QualityReport

logger = logging.getLogger("meshquality.io")

ELEMENT_FILE_SUFFIXES = (".yaml", ".yml", ".json")


def load_elements(filepath: Union[str, Path]) -> list[Element]:
    """
    Load elements from file.

    Supports: OBJ (4-vertex faces become quads), YAML, JSON

    Args:
        filepath: Path to element file

    Returns:
        Elements in file order

    Raises:
        FileNotFoundError: missing file
        ValueError: unsupported format or inconsistent content
        MalformedElementError: an element with the wrong corner count
    """
    filepath = Path(filepath)

    if not filepath.exists():
        raise FileNotFoundError(f"Element file not found: {filepath}")

    suffix = filepath.suffix.lower()
    if suffix == ".obj":
        return _load_obj_quads(filepath)
    if suffix in ELEMENT_FILE_SUFFIXES:
        with open(filepath, "r") as f:
            data = json.load(f) if suffix == ".json" else yaml.safe_load(f)
        return elements_from_dict(data, source=str(filepath))

    raise ValueError(
        f"Unsupported element file format '{suffix}'. "
        f"Use .obj or one of {', '.join(ELEMENT_FILE_SUFFIXES)}"
    )


def _load_obj_quads(path: Path) -> list[Element]:
    """Load OBJ faces with four vertices as quad elements."""
    vertices = []
    faces = []
    skipped = 0

    with open(path, "r") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            parts = line.split()
            if parts[0] == "v" and len(parts) >= 4:
                vertices.append([float(parts[1]), float(parts[2]), float(parts[3])])
            elif parts[0] == "f":
                # Handle v/vt/vn format - extract just vertex index
                face_verts = [int(p.split("/")[0]) for p in parts[1:]]
                if len(face_verts) == 4:
                    faces.append(face_verts)
                else:
                    skipped += 1

    if not vertices:
        raise ValueError(f"No vertices found in {path}")

    if skipped:
        logger.warning(f"Skipped {skipped} non-quad faces in {path}")

    vertices_arr = np.array(vertices, dtype=np.float64)
    n_verts = len(vertices_arr)

    elements = []
    for i, face in enumerate(faces, start=1):
        # OBJ is 1-indexed; negative indices count back from the end
        idx = [v - 1 if v > 0 else n_verts + v for v in face]
        if any(j < 0 or j >= n_verts for j in idx):
            raise ValueError(f"Face {i} in {path} references a missing vertex")
        elements.append(make_element(i, vertices_arr[idx], kind="quad"))

    logger.info(f"Loaded {len(elements)} quad elements from {path}")
    return elements


def elements_from_dict(data: dict, source: str = "<dict>") -> list[Element]:
    """
    Build elements from a mapping.

    Each entry of ``data["elements"]`` has an ``id`` and either inline
    ``corners`` or ``nodes`` referencing ``data["nodes"]`` (id -> [x, y, z]).
    An optional ``kind`` must match the corner count.
    """
    if not isinstance(data, dict) or "elements" not in data:
        raise ValueError(f"No 'elements' list found in {source}")

    nodes = {str(k): v for k, v in (data.get("nodes") or {}).items()}

    elements = []
    for i, entry in enumerate(data["elements"] or [], start=1):
        element_id = entry.get("id", i)

        if "corners" in entry:
            corners = entry["corners"]
        elif "nodes" in entry:
            try:
                corners = [nodes[str(n)] for n in entry["nodes"]]
            except KeyError as e:
                raise ValueError(
                    f"Element {element_id} in {source} references unknown node {e}"
                ) from e
        else:
            raise ValueError(f"Element {element_id} in {source} has no corners or nodes")

        elements.append(make_element(element_id, corners, kind=entry.get("kind")))

    logger.info(f"Loaded {len(elements)} elements from {source}")
    return elements


def elements_to_dict(elements: Iterable[Element]) -> dict:
    return {
        "elements": [
            {
                "id": e.id,
                "kind": e.kind,
                "corners": e.corners.tolist(),
            }
            for e in elements
        ]
    }


def _write_data(data: dict, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        if path.suffix.lower() == ".json":
            json.dump(data, f, indent=2)
        else:
            yaml.safe_dump(data, f, default_flow_style=None, sort_keys=False)


def save_elements(elements: Iterable[Element], filepath: Union[str, Path]) -> Path:
    """Save elements as YAML or JSON (by file extension)."""
    filepath = Path(filepath)
    if filepath.suffix.lower() not in ELEMENT_FILE_SUFFIXES:
        raise ValueError(f"Elements can only be saved as {', '.join(ELEMENT_FILE_SUFFIXES)}")
    _write_data(elements_to_dict(elements), filepath)
    return filepath


def save_report(report: QualityReport, filepath: Union[str, Path]) -> Path:
    """Save a quality report as JSON or YAML (by file extension)."""
    filepath = Path(filepath)
    if filepath.suffix.lower() not in ELEMENT_FILE_SUFFIXES:
        raise ValueError(f"Reports can only be saved as {', '.join(ELEMENT_FILE_SUFFIXES)}")
    _write_data(_plain(report.to_dict()), filepath)
    logger.info(f"Report saved: {filepath}")
    return filepath


def _plain(value):
    """Convert NaN/inf floats to None so JSON and YAML stay portable."""
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    if isinstance(value, float) and not np.isfinite(value):
        return None
    return value
