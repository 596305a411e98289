"""
grafen/structure/volume.py

Cuboid volumes filled with residues, used for solvent boxes.

A volume of size (dx, dy, dz) is filled with n residues on a grid:

  1. The target cell is a cube of side (V / n)^(1/3).
  2. Each side of the cuboid is divided into ceil(side / target) cells,
     which gives at least n cells in total.
  3. n distinct cells are drawn at random and one residue is placed at
     the centre of each.

Residues are therefore never closer than the smallest cell side, and the
grid continues across the faces when the volume is replicated with
`pbc_multiply`.  The residue count is given directly or as a density in
residues per nm^3, rounded to the nearest integer.

Usage
-----
    from grafen.residue import Residue
    from grafen.structure import create_volume

    water = Residue.from_tuples("SOL", [
        ("OW", 0.0, 0.0, 0.0), ("HW1", 0.064, 0.037, 0.068), ("HW2", 0.1, -0.07, 0.001),
    ])
    box = create_volume(water, (3.0, 3.0, 3.0), density=33.4)
    print(box.describe())
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from grafen.coord import BoundingBox, Coord, as_coord
from grafen.errors import InvalidFootprint
from grafen.residue import Residue
from grafen.structure.component import BaseComponent, hull, placements_for

logger = logging.getLogger(__name__)


@dataclass(kw_only=True, eq=False)
class Volume(BaseComponent):
    """
    Residues filling a cuboid whose lower corner is the origin.

    `size` is the periodic cell of the filling.
    """

    residue: Residue | None = None
    size: Coord = Coord.ORIGO

    kind = "volume"

    @property
    def density(self) -> float:
        """Residues per nm^3 currently held."""
        volume = self.size.x * self.size.y * self.size.z
        return self.num_residues / volume if volume > 0.0 else 0.0

    def periodic_cell(self) -> Coord:
        return self.size

    def replicated_fields(self, nx: int, ny: int, nz: int) -> dict:
        return {"size": Coord(self.size.x * nx, self.size.y * ny, self.size.z * nz)}

    def describe(self) -> str:
        return (
            f"{self.label()} (volume of {self.num_residues} residues, "
            f"{self.size.x:.3f} x {self.size.y:.3f} x {self.size.z:.3f} nm, "
            f"density {self.density:.2f} / nm^3)"
        )


def fill_cuboid(size: Coord, num_points: int, rng: np.random.Generator) -> np.ndarray:
    """
    Spread `num_points` over the cell centres of a grid on a cuboid.

    Returns
    -------
    np.ndarray
        (num_points, 3) array, relative to the lower corner, ordered by
        cell index (x fastest).
    """
    if num_points == 0:
        return np.zeros((0, 3))

    lengths = size.to_array()
    target = np.cbrt(np.prod(lengths) / num_points)
    bins = np.maximum(np.ceil(lengths / target - 1e-9).astype(int), 1)
    while np.prod(bins) < num_points:
        bins[np.argmax(lengths / bins)] += 1

    chosen = np.sort(rng.choice(int(np.prod(bins)), size=num_points, replace=False))
    ix = chosen % bins[0]
    iy = (chosen // bins[0]) % bins[1]
    iz = chosen // (bins[0] * bins[1])

    return (np.column_stack([ix, iy, iz]) + 0.5) * (lengths / bins)


def create_volume(
    residue: Residue,
    size,
    density: float | None = None,
    num_residues: int | None = None,
    rng: np.random.Generator | None = None,
    name: str | None = None,
) -> Volume:
    """
    Fill a cuboid of `size` with copies of `residue`.

    Parameters
    ----------
    residue:
        Template placed in every chosen cell.
    size:
        (dx, dy, dz) of the cuboid in nm, as a Coord or a 3-sequence.
    density:
        Residues per nm^3.  Give this or `num_residues`.
    num_residues:
        Exact number of residues to place.
    rng:
        Random generator that picks the occupied cells.

    Raises
    ------
    InvalidFootprint
        If any side of `size` is non-positive.
    ValueError
        If not exactly one of `density` and `num_residues` is given, or the
        given one is negative.
    """
    size = as_coord(size)
    if min(size) <= 0.0:
        raise InvalidFootprint(
            f"Cannot create a volume of size {size}: every side must be positive."
        )
    if (density is None) == (num_residues is None):
        raise ValueError("A volume needs exactly one of 'density' or 'num_residues'.")
    if density is not None:
        if density < 0.0:
            raise ValueError(f"Volume density must be non-negative, got {density}.")
        num_residues = int(round(density * size.x * size.y * size.z))
    elif num_residues < 0:
        raise ValueError(f"Number of residues must be non-negative, got {num_residues}.")
    if rng is None:
        rng = np.random.default_rng()

    positions = fill_cuboid(size, num_residues, rng)
    box = hull(BoundingBox(Coord.ORIGO, size), positions)

    volume = Volume(
        residues=placements_for(residue, len(positions)),
        positions=positions,
        box=box,
        origin=Coord.ORIGO,
        name=name,
        residue=residue,
        size=size,
    )
    logger.info(
        "Volume '%s': %d residues in %.3f x %.3f x %.3f nm (%.2f / nm^3)",
        name or residue.name, volume.num_residues, size.x, size.y, size.z, volume.density,
    )
    return volume
