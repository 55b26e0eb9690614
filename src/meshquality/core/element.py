"""
Element data model for quality evaluation.

Elements are a tagged variant: a ``Quad`` has 4 corners and a single face,
a ``Hex`` has 8 corners and six quadrilateral faces. The variant is resolved
once at construction; metric code dispatches on the element type.

Corner ordering follows a fixed counter-clockwise convention per face. For a
hexahedron, corners 0-3 form the bottom face and corners 4-7 the top face,
each top corner sitting above the bottom corner with the same index minus 4.
Metrics silently compute nonsense when the winding is inconsistent, so the
caller must guarantee it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Sequence, Union
import numpy as np


QUAD_FACES: tuple[tuple[int, ...], ...] = ((0, 1, 2, 3),)

HEX_FACES: tuple[tuple[int, ...], ...] = (
    (0, 1, 5, 4),
    (1, 2, 6, 5),
    (2, 3, 7, 6),
    (3, 0, 4, 7),
    (0, 1, 2, 3),
    (4, 5, 6, 7),
)


class MalformedElementError(ValueError):
    """Raised when an element does not have the corner count of its kind."""
    pass


def _as_corner_array(corners, expected: int, kind: str) -> np.ndarray:
    """Coerce corners to a read-only (expected, 3) float array."""
    try:
        arr = np.array(corners, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise MalformedElementError(f"{kind} corners are not numeric: {e}") from e

    if arr.ndim != 2 or arr.shape[1] not in (2, 3):
        raise MalformedElementError(
            f"{kind} corners must be Nx2 or Nx3, got shape {arr.shape}"
        )
    if arr.shape[0] != expected:
        raise MalformedElementError(
            f"{kind} requires {expected} corners, got {arr.shape[0]}"
        )

    # Planar input is lifted to z = 0
    if arr.shape[1] == 2:
        arr = np.column_stack([arr, np.zeros(expected)])

    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class _Element:
    """Shared behaviour of the element variants."""
    id: int
    corners: np.ndarray

    kind: ClassVar[str] = ""
    num_corners: ClassVar[int] = 0
    faces: ClassVar[tuple[tuple[int, ...], ...]] = ()

    def __post_init__(self):
        object.__setattr__(
            self, "corners", _as_corner_array(self.corners, self.num_corners, self.kind)
        )

    @property
    def num_faces(self) -> int:
        return len(self.faces)

    @property
    def centroid(self) -> np.ndarray:
        return centroid(self.corners)

    @property
    def face_loops(self) -> np.ndarray:
        """(F, 4, 3) array of face corner loops."""
        return face_loops(self.corners, self.faces)

    @property
    def face_centers(self) -> np.ndarray:
        return face_centers(self.corners, self.faces)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id})"


@dataclass(frozen=True, eq=False, repr=False)
class Quad(_Element):
    """Four-node quadrilateral face element."""
    kind: ClassVar[str] = "quad"
    num_corners: ClassVar[int] = 4
    faces: ClassVar[tuple[tuple[int, ...], ...]] = QUAD_FACES


@dataclass(frozen=True, eq=False, repr=False)
class Hex(_Element):
    """Eight-node hexahedral volume element."""
    kind: ClassVar[str] = "hex"
    num_corners: ClassVar[int] = 8
    faces: ClassVar[tuple[tuple[int, ...], ...]] = HEX_FACES


Element = Union[Quad, Hex]

ELEMENT_TYPES = {"quad": Quad, "hex": Hex}


def centroid(corners: np.ndarray) -> np.ndarray:
    """Arithmetic mean of the corner points."""
    return np.asarray(corners, dtype=np.float64).mean(axis=0)


def face_loops(corners: np.ndarray, faces: Sequence[Sequence[int]]) -> np.ndarray:
    """Gather the corner loop of every face into an (F, 4, 3) array."""
    corners = np.asarray(corners, dtype=np.float64)
    return corners[np.asarray(faces, dtype=np.int64)]


def face_centers(corners: np.ndarray, faces: Sequence[Sequence[int]]) -> np.ndarray:
    """Arithmetic mean of each face's four corners, shape (F, 3)."""
    return face_loops(corners, faces).mean(axis=1)


def make_element(id: int, corners, kind: str = None) -> Element:
    """
    Build an element from its corners.

    Args:
        id: Element identifier
        corners: 4 or 8 corner points (Nx3, or Nx2 for planar input)
        kind: Optional declared kind ("quad" or "hex"). When omitted the
            kind is inferred from the corner count.

    Raises:
        MalformedElementError: unknown kind or corner count not matching it
    """
    if kind is None:
        n = len(corners)
        if n == Quad.num_corners:
            kind = Quad.kind
        elif n == Hex.num_corners:
            kind = Hex.kind
        else:
            raise MalformedElementError(
                f"Element {id}: cannot infer kind from {n} corners (expected 4 or 8)"
            )

    cls = ELEMENT_TYPES.get(str(kind).lower())
    if cls is None:
        raise MalformedElementError(f"Element {id}: unknown element kind '{kind}'")

    try:
        return cls(id=id, corners=corners)
    except MalformedElementError as e:
        raise MalformedElementError(f"Element {id}: {e}") from e
