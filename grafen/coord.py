"""
grafen/coord.py

Elementary coordinate types and geometric helpers.

All positions in grafen are in nanometers.  Bulk coordinate data (lattice
points, residue positions) is held in (N, 3) NumPy arrays; `Coord` is the
immutable value type used at API boundaries (offsets, origins, box corners).

Usage
-----
    from grafen.coord import Coord, BoundingBox, Direction

    shift = Coord(1.0, 0.0, 0.5)
    box = BoundingBox(Coord.ORIGO, Coord(2.0, 2.0, 1.0)).translate(shift)
    print(box.size, box.volume)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

import numpy as np


# ---------------------------------------------------------------------------
# Coord
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Coord:
    """A three-dimensional Cartesian coordinate (nm)."""

    x: float
    y: float
    z: float

    ORIGO: ClassVar["Coord"]

    def __add__(self, other: "Coord") -> "Coord":
        return Coord(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Coord") -> "Coord":
        return Coord(self.x - other.x, self.y - other.y, self.z - other.z)

    def __neg__(self) -> "Coord":
        return Coord(-self.x, -self.y, -self.z)

    def __mul__(self, value: float) -> "Coord":
        return Coord(self.x * value, self.y * value, self.z * value)

    __rmul__ = __mul__

    def __iter__(self):
        return iter((self.x, self.y, self.z))

    def distance(self, other: "Coord") -> float:
        """Euclidean distance to another coordinate."""
        return float(np.linalg.norm(self.to_array() - other.to_array()))

    def isclose(self, other: "Coord", atol: float = 1e-9) -> bool:
        """Component-wise equality within an absolute tolerance."""
        return (
            abs(self.x - other.x) < atol
            and abs(self.y - other.y) < atol
            and abs(self.z - other.z) < atol
        )

    def to_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)

    @classmethod
    def from_array(cls, values) -> "Coord":
        x, y, z = (float(v) for v in values)
        return cls(x, y, z)

    @classmethod
    def from_str(cls, text: str) -> "Coord":
        """
        Parse three whitespace separated floats, e.g. ``"0.1 1.0 -2.0"``.

        Raises
        ------
        ValueError
            If fewer than three values are present or any is not a float.
        """
        values = text.split()
        if len(values) < 3:
            raise ValueError(f"Expected three values for a coordinate, got '{text.strip()}'.")
        return cls(float(values[0]), float(values[1]), float(values[2]))

    def __str__(self) -> str:
        return f"({self.x:.1f}, {self.y:.1f}, {self.z:.1f})"


Coord.ORIGO = Coord(0.0, 0.0, 0.0)


def as_coord(value) -> Coord:
    """Accept a Coord or any 3-sequence and return a Coord."""
    if isinstance(value, Coord):
        return value
    return Coord.from_array(value)


# ---------------------------------------------------------------------------
# Directions and alignment
# ---------------------------------------------------------------------------

class Direction(str, Enum):
    """Component axis: the normal of a sheet or the axis of a cylinder."""

    X = "x"
    Y = "y"
    Z = "z"


# Column order that carries the z column of a z-built object onto each axis.
# The permutations are cyclic, so handedness is preserved.
_ALIGNMENT_COLUMNS = {
    Direction.X: [2, 0, 1],
    Direction.Y: [1, 2, 0],
    Direction.Z: [0, 1, 2],
}


def align_to_axis(coords: np.ndarray, axis: Direction) -> np.ndarray:
    """
    Rotate coordinates built along z so that z maps onto `axis`.

    Parameters
    ----------
    coords:
        (N, 3) array of coordinates whose normal/axis is z.
    axis:
        Target direction.

    Returns
    -------
    np.ndarray
        New (N, 3) array.  The input is not modified.
    """
    coords = np.asarray(coords, dtype=float).reshape(-1, 3)
    return coords[:, _ALIGNMENT_COLUMNS[Direction(axis)]].copy()


_WRAP_RTOL = 1e-12


def wrap_periodic(values: np.ndarray, length: float) -> np.ndarray:
    """
    Map values into the half-open interval [0, length).

    Values that land on (or within rounding error of) `length` after the
    modulo come from tiny negatives and are folded back to 0.
    """
    values = np.mod(np.asarray(values, dtype=float), length)
    values[values >= length * (1.0 - _WRAP_RTOL)] = 0.0
    return values


# ---------------------------------------------------------------------------
# Bounding box
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BoundingBox:
    """
    Axis-aligned box given by its lower and upper corners.

    The box is closed: points on a face are contained.
    """

    lower: Coord
    upper: Coord

    @classmethod
    def empty_at(cls, position: Coord) -> "BoundingBox":
        """A degenerate, zero-volume box at a single point."""
        return cls(position, position)

    @classmethod
    def from_positions(
        cls,
        positions: np.ndarray,
        fallback: Coord = Coord.ORIGO,
    ) -> "BoundingBox":
        """
        Smallest box enclosing every row of an (N, 3) array.

        An empty array gives a zero-volume box at `fallback`.
        """
        positions = np.asarray(positions, dtype=float).reshape(-1, 3)
        if len(positions) == 0:
            return cls.empty_at(fallback)
        return cls(
            Coord.from_array(positions.min(axis=0)),
            Coord.from_array(positions.max(axis=0)),
        )

    @property
    def size(self) -> Coord:
        return self.upper - self.lower

    @property
    def center(self) -> Coord:
        return (self.lower + self.upper) * 0.5

    @property
    def volume(self) -> float:
        size = self.size
        return size.x * size.y * size.z

    @property
    def is_degenerate(self) -> bool:
        """True if the box has zero extent along any axis."""
        return self.volume <= 0.0

    def contains(self, positions: np.ndarray) -> np.ndarray:
        """Boolean mask of the rows of an (N, 3) array inside the box."""
        positions = np.asarray(positions, dtype=float).reshape(-1, 3)
        lower = self.lower.to_array()
        upper = self.upper.to_array()
        return np.all((positions >= lower) & (positions <= upper), axis=1)

    def translate(self, offset: Coord) -> "BoundingBox":
        return BoundingBox(self.lower + offset, self.upper + offset)

    def union(self, other: "BoundingBox") -> "BoundingBox":
        corners = np.vstack([
            self.lower.to_array(), self.upper.to_array(),
            other.lower.to_array(), other.upper.to_array(),
        ])
        return BoundingBox.from_positions(corners)

    def __str__(self) -> str:
        return f"[{self.lower} -> {self.upper}]"
