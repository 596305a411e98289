"""
grafen/structure/sheet.py

Flat sheet components built from a planar lattice.

A sheet is built in the xy plane with its normal along z: the lattice fills
exactly the requested footprint, is optionally displaced along z, and is
finally rotated so that the normal points along the requested direction.
One residue template is placed at every lattice site.  A sheet can be
replicated periodically with `pbc_multiply`, or cut to a disc with
`to_circle`.

Usage
-----
    from grafen.lattice import HexagonalLattice
    from grafen.residue import Residue
    from grafen.structure import create_sheet

    carbon = Residue.from_tuples("GRA", [("C", 0.0, 0.0, 0.0)])
    sheet = create_sheet(HexagonalLattice(), carbon, (4.0, 4.0))
    print(sheet.describe())
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

import numpy as np

from grafen.coord import BoundingBox, Coord, Direction, align_to_axis
from grafen.errors import InvalidFootprint
from grafen.residue import Residue
from grafen.structure.component import BaseComponent, hull, placements_for
from grafen.structure.edit import pbc_multiply

if TYPE_CHECKING:
    from grafen.lattice import LatticeType

logger = logging.getLogger(__name__)


@dataclass(kw_only=True, eq=False)
class Sheet(BaseComponent):
    """
    A planar lattice of residues.

    `size` is the (width, height) footprint.  Every site lies inside
    [0, width) x [0, height) of the sheet plane, measured from `origin`.
    A `periodic` sheet covers a whole periodic cell of its lattice, whose
    footprint was snapped for regular lattices, and can be replicated.
    """

    lattice: LatticeType | None = None
    residue: Residue | None = None
    size: tuple[float, float] = (0.0, 0.0)
    normal: Direction = Direction.Z
    periodic: bool = False

    kind = "sheet"

    def _plane_axes(self) -> tuple[int, int]:
        """Global axis indices of the sheet's width and height directions."""
        unit = align_to_axis(np.eye(3), self.normal)
        return int(np.argmax(unit[0])), int(np.argmax(unit[1]))

    def periodic_cell(self) -> Coord | None:
        if not self.periodic:
            return None
        width, height = self.size
        return Coord.from_array(align_to_axis(np.array([width, height, 0.0]), self.normal)[0])

    def replicated_fields(self, nx: int, ny: int, nz: int) -> dict:
        counts = (nx, ny, nz)
        iu, iv = self._plane_axes()
        return {"size": (self.size[0] * counts[iu], self.size[1] * counts[iv])}

    def to_circle(self, radius: float) -> "Sheet":
        """
        Keep the residues within `radius` of the footprint centre, measured
        in the sheet plane.

        A periodic sheet smaller than the circle is replicated first.  The
        result has a 2r x 2r footprint around the circle and is not periodic.

        Raises
        ------
        InvalidFootprint
            If `radius` is not positive, or a non-periodic sheet is too
            small to hold the circle.
        """
        if radius <= 0.0:
            raise InvalidFootprint(f"Cannot cut a circle of radius {radius} from a sheet.")

        diameter = 2.0 * radius
        width, height = self.size
        sheet = self
        if diameter > width or diameter > height:
            if not self.periodic:
                raise InvalidFootprint(
                    f"Sheet '{self.label()}' of size ({width:.3f}, {height:.3f}) is too small "
                    f"for a circle of radius {radius}."
                )
            tiles = align_to_axis(
                np.array([math.ceil(diameter / width), math.ceil(diameter / height), 1]),
                self.normal,
            )[0]
            sheet = pbc_multiply(self, *(int(n) for n in tiles))
            width, height = sheet.size

        center = align_to_axis(np.array([0.5 * width, 0.5 * height, 0.0]), self.normal)[0]
        corner = center - align_to_axis(np.array([radius, radius, 0.0]), self.normal)[0]
        delta = sheet.positions - (sheet.origin.to_array() + center)
        delta[:, "xyz".index(self.normal.value)] = 0.0

        circle = sheet.select(np.linalg.norm(delta, axis=1) <= radius)
        return replace(
            circle,
            origin=sheet.origin + Coord.from_array(corner),
            size=(diameter, diameter),
            periodic=False,
        )

    def describe(self) -> str:
        lattice = self.lattice.describe() if self.lattice is not None else "unknown lattice"
        variant = ", periodic" if self.periodic else ""
        return (
            f"{self.label()} (sheet of {self.num_residues} residues, "
            f"{self.size[0]:.3f} x {self.size[1]:.3f} nm, normal {self.normal.value}{variant}, "
            f"{lattice})"
        )


def check_std_z(std_z: float | None) -> None:
    if std_z is not None and std_z < 0.0:
        raise ValueError(f"z jitter must be non-negative, got {std_z}.")


def create_sheet(
    lattice: LatticeType,
    residue: Residue,
    size: tuple[float, float],
    normal: Direction = Direction.Z,
    z_offset: float = 0.0,
    std_z: float | None = None,
    periodic: bool = False,
    rng: np.random.Generator | None = None,
    name: str | None = None,
) -> Sheet:
    """
    Build a sheet by placing `residue` at every site of `lattice`.

    Parameters
    ----------
    lattice:
        Any lattice type from grafen.lattice.
    residue:
        Template placed at every site.
    size:
        Requested (width, height) footprint in nm.
    normal:
        Axis the sheet normal points along.
    z_offset:
        Uniform displacement of every site along the normal.
    std_z:
        If given, every site is further displaced along the normal by a
        uniform sample from [-std_z, std_z].
    periodic:
        Build a whole periodic cell of the lattice instead of filling
        exactly `size`.  Regular lattices snap the footprint to a multiple
        of their spacing, and the sheet can then be replicated with
        `pbc_multiply`.
    rng:
        Random generator used by Poisson-disc lattices and the jitter.

    Returns
    -------
    Sheet
        Bounding box spans the footprint (or the periodic cell) and every
        placement.

    Raises
    ------
    InvalidFootprint
        If either side of `size` is non-positive.
    """
    check_std_z(std_z)
    if rng is None:
        rng = np.random.default_rng()

    if periodic:
        points = lattice.generate(*size, rng=rng)
    else:
        points = lattice.fill(*size, rng=rng)
    width, height = points.box_size
    if std_z:
        points = points.with_z_distribution(std_z, rng=rng)

    coords = points.coords.copy()
    coords[:, 2] += z_offset
    positions = align_to_axis(coords, normal)

    cell = align_to_axis(
        np.array([[0.0, 0.0, z_offset], [width, height, z_offset]]),
        normal,
    )
    box = hull(BoundingBox.from_positions(cell), positions)

    logger.info(
        "Sheet '%s': %d residues on %.3f x %.3f nm%s",
        name or residue.name, len(positions), width, height, " (periodic)" if periodic else "",
    )

    return Sheet(
        residues=placements_for(residue, len(positions)),
        positions=positions,
        box=box,
        origin=Coord.ORIGO,
        name=name,
        lattice=lattice,
        residue=residue,
        size=(width, height),
        normal=Direction(normal),
        periodic=periodic,
    )
