"""
Sample element generators.

Provides procedural quads and hexahedra with known quality properties for
testing and experimentation.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional
import numpy as np

from meshquality.core.element import Hex, Quad
from meshquality.core.io import save_elements


def create_square(
    size: float = 1.0,
    origin: tuple[float, float, float] = (0, 0, 0),
    element_id: int = 1,
) -> Quad:
    """Axis-aligned square in the XY-plane, counter-clockwise."""
    corners = np.array([
        [0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0],
    ], dtype=np.float64) * size + np.asarray(origin, dtype=np.float64)
    return Quad(id=element_id, corners=corners)


def create_cube(
    size: float = 1.0,
    origin: tuple[float, float, float] = (0, 0, 0),
    element_id: int = 1,
) -> Hex:
    """Axis-aligned cube; bottom face first, then the top face."""
    corners = np.array([
        [0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0],
        [0, 0, 1], [1, 0, 1], [1, 1, 1], [0, 1, 1],
    ], dtype=np.float64) * size + np.asarray(origin, dtype=np.float64)
    return Hex(id=element_id, corners=corners)


def _jitter(points: np.ndarray, amount: float, seed: Optional[int]) -> np.ndarray:
    if amount <= 0:
        return points
    rng = np.random.default_rng(seed)
    return points + rng.uniform(-amount, amount, size=points.shape)


def create_quad_grid(
    nx: int = 4,
    ny: int = 4,
    size: float = 1.0,
    jitter: float = 0.0,
    seed: Optional[int] = None,
) -> list[Quad]:
    """
    Structured grid of quads in the XY-plane.

    Args:
        nx, ny: Number of elements along x and y
        size: Edge length of an undistorted element
        jitter: Maximum random in-plane offset of interior nodes
        seed: Random seed for the jitter

    Returns:
        Quads numbered row by row from 1
    """
    xs = np.arange(nx + 1) * size
    ys = np.arange(ny + 1) * size
    nodes = np.zeros((ny + 1, nx + 1, 3))
    nodes[..., 0], nodes[..., 1] = np.meshgrid(xs, ys)

    # Only interior nodes move so the outline stays rectangular
    if jitter > 0 and nx > 1 and ny > 1:
        inner = nodes[1:-1, 1:-1, :2]
        nodes[1:-1, 1:-1, :2] = _jitter(inner, jitter * size, seed)

    quads = []
    for j in range(ny):
        for i in range(nx):
            corners = [nodes[j, i], nodes[j, i + 1], nodes[j + 1, i + 1], nodes[j + 1, i]]
            quads.append(Quad(id=len(quads) + 1, corners=corners))
    return quads


def create_hex_grid(
    nx: int = 2,
    ny: int = 2,
    nz: int = 2,
    size: float = 1.0,
    jitter: float = 0.0,
    seed: Optional[int] = None,
) -> list[Hex]:
    """Structured grid of hexahedra, numbered x fastest from 1."""
    axes = [np.arange(n + 1) * size for n in (nx, ny, nz)]
    gx, gy, gz = np.meshgrid(*axes, indexing="ij")
    nodes = np.stack([gx, gy, gz], axis=-1)

    if jitter > 0 and min(nx, ny, nz) > 1:
        inner = nodes[1:-1, 1:-1, 1:-1]
        nodes[1:-1, 1:-1, 1:-1] = _jitter(inner, jitter * size, seed)

    hexes = []
    for k in range(nz):
        for j in range(ny):
            for i in range(nx):
                corners = [
                    nodes[i, j, k], nodes[i + 1, j, k],
                    nodes[i + 1, j + 1, k], nodes[i, j + 1, k],
                    nodes[i, j, k + 1], nodes[i + 1, j, k + 1],
                    nodes[i + 1, j + 1, k + 1], nodes[i, j + 1, k + 1],
                ]
                hexes.append(Hex(id=len(hexes) + 1, corners=corners))
    return hexes


def create_skewed_quad(angle_degrees: float = 60.0, element_id: int = 1) -> Quad:
    """Unit rhombus whose corner angle at the first node is ``angle_degrees``."""
    a = np.radians(angle_degrees)
    d = np.array([np.cos(a), np.sin(a), 0.0])
    corners = [np.zeros(3), np.array([1.0, 0, 0]), np.array([1.0, 0, 0]) + d, d]
    return Quad(id=element_id, corners=corners)


def create_warped_quad(amplitude: float = 0.1, element_id: int = 1) -> Quad:
    """Unit square with alternate corners lifted by +/- ``amplitude``."""
    corners = [
        [0, 0, amplitude], [1, 0, -amplitude], [1, 1, amplitude], [0, 1, -amplitude],
    ]
    return Quad(id=element_id, corners=corners)


def create_inverted_hex(depth: float = 0.5, element_id: int = 1) -> Hex:
    """
    Unit cube whose first top corner is pushed down through the bottom face.

    The corner ends up ``depth`` below the bottom face, which inverts the
    Jacobian at that corner and at the bottom corner beneath it.
    """
    cube = create_cube()
    corners = cube.corners.copy()
    corners[4] = [0.0, 0.0, -depth]
    return Hex(id=element_id, corners=corners)


def save_samples(output_dir: str = "samples") -> list[Path]:
    """Write the sample element sets as YAML files."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    sets = {
        "quad_grid": create_quad_grid(4, 4),
        "quad_grid_jittered": create_quad_grid(6, 6, jitter=0.2, seed=0),
        "hex_grid": create_hex_grid(2, 2, 2),
        "hex_grid_jittered": create_hex_grid(3, 3, 3, jitter=0.15, seed=0),
        "distorted": [
            create_skewed_quad(45.0, element_id=1),
            create_warped_quad(0.2, element_id=2),
            create_inverted_hex(element_id=3),
        ],
    }

    paths = []
    for name, elements in sets.items():
        path = output_dir / f"{name}.yaml"
        save_elements(elements, path)
        paths.append(path)
        print(f"Saved {name}: {len(elements)} elements")

    return paths
