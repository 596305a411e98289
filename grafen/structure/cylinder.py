"""
grafen/structure/cylinder.py

Cylinders folded from planar lattices.

A shell of radius r is made by generating a lattice on a footprint of
(2 * pi * r) x length and wrapping it around the z axis:

    (u, v)  ->  (R cos(u / R), R sin(u / R), v)

where R = width / (2 * pi) is recomputed from the generated box width.
Regular lattices snap the width to a multiple of their spacing, so R can
differ slightly from the request; using the generated width keeps the
wrap seamless and arc distances equal to the planar distances.

A filled cylinder stacks concentric shells at r, r - s, r - 2s, ... with s
the lattice spacing, stopping once the radius drops below s / 2.  A hollow
cylinder can be closed with discs cut from a sheet of the same lattice,
with a radius half a lattice spacing smaller than the shell.

The cylinder is built with its axis along z and its origin at the centre of
the bottom face, then rotated onto the requested alignment.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

import numpy as np

from grafen.coord import BoundingBox, Coord, Direction, align_to_axis
from grafen.errors import InvalidFootprint, InvalidSpacing
from grafen.residue import Residue
from grafen.structure.component import BaseComponent, hull, placements_for

if TYPE_CHECKING:
    from grafen.lattice import LatticeType

logger = logging.getLogger(__name__)


class CylinderCap(str, Enum):
    """Which ends of a hollow cylinder are closed."""

    BOTTOM = "bottom"
    TOP = "top"
    BOTH = "both"


@dataclass(kw_only=True, eq=False)
class Cylinder(BaseComponent):
    """
    Residues on one or more concentric cylindrical shells.

    `radius` and `length` are the generated outer radius and length, which
    may differ from the request for regular lattices.
    """

    lattice: LatticeType | None = None
    residue: Residue | None = None
    radius: float = 0.0
    length: float = 0.0
    filled: bool = False
    alignment: Direction = Direction.Z
    cap: CylinderCap | None = None
    num_shells: int = 1

    kind = "cylinder"

    def describe(self) -> str:
        variant = f"filled, {self.num_shells} shells" if self.filled else "hollow"
        if self.cap is not None:
            variant += f", capped {self.cap.value}"
        lattice = self.lattice.describe() if self.lattice is not None else "unknown lattice"
        return (
            f"{self.label()} (cylinder of {self.num_residues} residues, "
            f"radius {self.radius:.3f} nm, length {self.length:.3f} nm, "
            f"axis {self.alignment.value}, {variant}, {lattice})"
        )


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------

def shell_radii(radius: float, step: float) -> list[float]:
    """
    Radii of the concentric shells of a filled cylinder, outermost first.

    Raises
    ------
    InvalidSpacing
        If `step` is not positive.
    """
    if step <= 0.0:
        raise InvalidSpacing(f"Shell spacing must be positive, got {step}.")

    radii = []
    current = radius
    while current >= 0.5 * step:
        radii.append(current)
        current -= step
    return radii


def fold_shell(
    lattice: LatticeType,
    radius: float,
    length: float,
    rng: np.random.Generator,
) -> tuple[np.ndarray, float, float]:
    """
    Generate one shell around the z axis.

    Returns
    -------
    (coords, final_radius, final_length)
    """
    points = lattice.generate(2.0 * math.pi * radius, length, rng=rng)
    circumference, final_length = points.box_size
    final_radius = circumference / (2.0 * math.pi)

    u = points.coords[:, 0]
    v = points.coords[:, 1]
    theta = u / final_radius

    coords = np.column_stack([
        final_radius * np.cos(theta),
        final_radius * np.sin(theta),
        v,
    ])
    return coords, final_radius, final_length


def cut_disc(
    lattice: LatticeType,
    radius: float,
    rng: np.random.Generator,
) -> np.ndarray:
    """
    Sites of a disc of `radius` centred on the origin in the z = 0 plane.

    The lattice fills a 2r x 2r footprint centred on the origin, and the
    sites within `radius` of the centre are kept.
    """
    diameter = 2.0 * radius
    coords = lattice.fill(diameter, diameter, rng=rng).coords.copy()
    coords[:, 0] -= radius
    coords[:, 1] -= radius

    inside = np.hypot(coords[:, 0], coords[:, 1]) <= radius
    return coords[inside]


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

def create_cylinder(
    lattice: LatticeType,
    residue: Residue,
    radius: float,
    length: float,
    filled: bool = False,
    alignment: Direction = Direction.Z,
    cap: CylinderCap | str | None = None,
    rng: np.random.Generator | None = None,
    name: str | None = None,
) -> Cylinder:
    """
    Fold `lattice` into a hollow or filled cylinder of `residue` placements.

    Parameters
    ----------
    lattice:
        Any lattice type from grafen.lattice.  Its `spacing` is the radial
        step between the shells of a filled cylinder.
    residue:
        Template placed at every site.
    radius, length:
        Requested outer radius and length along the axis (nm).
    filled:
        Stack concentric shells down to the axis instead of a single shell.
    alignment:
        Axis the cylinder is aligned along.
    cap:
        Close the bottom, top or both ends of a hollow cylinder.

    Raises
    ------
    InvalidFootprint
        If `radius` or `length` is non-positive.
    ValueError
        If caps are requested for a filled cylinder.
    """
    if radius <= 0.0 or length <= 0.0:
        raise InvalidFootprint(
            f"Cannot create a cylinder of radius {radius} and length {length}: "
            "both must be positive."
        )
    if cap is not None:
        cap = CylinderCap(cap)
        if filled:
            raise ValueError("Caps can only close a hollow cylinder.")
    if rng is None:
        rng = np.random.default_rng()

    radii = shell_radii(radius, lattice.spacing) if filled else [radius]

    shells = []
    outer_radius = outer_length = 0.0
    for shell_radius in radii:
        coords, final_radius, final_length = fold_shell(lattice, shell_radius, length, rng)
        shells.append(coords)
        if not outer_radius:
            outer_radius, outer_length = final_radius, final_length

    # Rim sites of a cap stay at least half a spacing from the shell
    disc_radius = outer_radius - 0.5 * lattice.spacing
    if cap in (CylinderCap.BOTTOM, CylinderCap.BOTH) and disc_radius > 0.0:
        shells.append(cut_disc(lattice, disc_radius, rng))
    if cap in (CylinderCap.TOP, CylinderCap.BOTH) and disc_radius > 0.0:
        disc = cut_disc(lattice, disc_radius, rng)
        disc[:, 2] = outer_length
        shells.append(disc)

    coords = np.vstack(shells) if shells else np.zeros((0, 3))
    positions = align_to_axis(coords, alignment)

    envelope = align_to_axis(
        np.array([
            [-outer_radius, -outer_radius, 0.0],
            [outer_radius, outer_radius, outer_length],
        ]),
        alignment,
    )
    box = hull(BoundingBox.from_positions(envelope), positions)

    logger.info(
        "Cylinder '%s': %d residues, %d shell(s), radius %.3f nm, length %.3f nm",
        name or residue.name, len(positions), len(radii), outer_radius, outer_length,
    )

    return Cylinder(
        residues=placements_for(residue, len(positions)),
        positions=positions,
        box=box,
        origin=Coord.ORIGO,
        name=name,
        lattice=lattice,
        residue=residue,
        radius=outer_radius,
        length=outer_length,
        filled=filled,
        alignment=Direction(alignment),
        cap=cap,
        num_shells=len(radii),
    )
