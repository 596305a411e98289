"""
grafen/lattice/crystal.py

Regular two-dimensional lattices: hexagonal (honeycomb) and triclinic.

A crystal base is two vectors: `a` along x, and `b` at an angle `gamma` to
it.  Sites are integer combinations of the two vectors, with every row
placed at the middle of its strip of height dy.  Sites whose row offset
pushes them past the box edge are wrapped back into [0, width), which keeps
the lattice periodic along x.

Each lattice offers two ways to cover a footprint:

    generate    snaps the footprint to the closest multiple of the crystal
                spacing and returns the whole periodic cell.  Cylinders
                use it, since the shell circumference has to wrap seamlessly.
    fill        builds a periodic cell at least as large as the footprint
                and clips it to exactly [0, width) x [0, height).  Sheets
                and cap discs use it.

The hexagonal lattice is a triangular lattice (gamma = 120 degrees) with
every third site removed, shifted by one column per row.  This leaves a
honeycomb in which every site has three neighbours at distance `a`.  For
the removal pattern to tile, the number of columns is rounded up to a
multiple of 3 and the number of rows to a multiple of 2.

Usage
-----
    from grafen.lattice import HexagonalLattice

    lattice = HexagonalLattice(a=0.142)
    cell = lattice.generate(4.0, 4.0)     # periodic, box snapped
    sheet = lattice.fill(4.0, 4.0)        # box exactly 4 x 4
    print(cell.box_size, len(cell), len(sheet))
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np

from grafen.coord import wrap_periodic
from grafen.errors import InvalidFootprint, InvalidSpacing
from grafen.lattice.points import Points

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Spacing:
    """Distances derived from a crystal base."""

    dx: float           # between columns along x
    dy: float           # between rows along y
    dx_per_row: float   # x offset added per row


def crystal_spacing(a: float, b: float, gamma_deg: float) -> Spacing:
    gamma = math.radians(gamma_deg)
    return Spacing(dx=a, dy=b * math.sin(gamma), dx_per_row=b * math.cos(gamma))


def check_footprint(width: float, height: float) -> None:
    if width <= 0.0 or height <= 0.0:
        raise InvalidFootprint(
            f"Cannot create a lattice of size ({width}, {height}): "
            "both sides must be positive."
        )


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _covering_bins(spacing: Spacing, width: float, height: float) -> tuple[int, int]:
    """Fewest (columns, rows) whose periodic cell spans at least width x height."""
    check_footprint(width, height)
    return math.ceil(width / spacing.dx), math.ceil(height / spacing.dy)


def _lattice_sites(
    spacing: Spacing,
    nx: int,
    ny: int,
    honeycomb: bool,
) -> Points:
    box_width = nx * spacing.dx
    box_height = ny * spacing.dy

    rows, cols = np.meshgrid(np.arange(ny), np.arange(nx), indexing="ij")
    rows = rows.ravel()
    cols = cols.ravel()

    if honeycomb:
        keep = (cols + rows + 1) % 3 > 0
        rows = rows[keep]
        cols = cols[keep]

    x = cols * spacing.dx + rows * spacing.dx_per_row
    y = (rows + 0.5) * spacing.dy

    coords = np.zeros((len(x), 3))
    coords[:, 0] = wrap_periodic(x, box_width) if len(x) else x
    coords[:, 1] = y

    return Points(box_size=(box_width, box_height), coords=coords)


# ---------------------------------------------------------------------------
# Lattice types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HexagonalLattice:
    """
    Honeycomb lattice with nearest-neighbour distance `a` (nm).

    The default of 0.142 nm is the carbon-carbon bond length of graphene.
    """

    a: float = 0.142

    kind = "hexagonal"

    def __post_init__(self) -> None:
        if self.a <= 0.0:
            raise InvalidSpacing(f"Hexagonal lattice spacing must be positive, got {self.a}.")

    @property
    def spacing(self) -> float:
        return self.a

    def bins(self, width: float, height: float) -> tuple[int, int]:
        """Number of (columns, rows) used for a footprint, after periodic rounding."""
        check_footprint(width, height)
        spacing = crystal_spacing(self.a, self.a, 120.0)
        nx = max(1, _round_half_up(width / spacing.dx))
        ny = max(1, _round_half_up(height / spacing.dy))
        return 3 * math.ceil(nx / 3), 2 * math.ceil(ny / 2)

    def generate(
        self,
        width: float,
        height: float,
        rng: np.random.Generator | None = None,
    ) -> Points:
        """
        Generate honeycomb sites covering (approximately) width x height.

        `rng` is accepted for interface uniformity and is unused.
        """
        nx, ny = self.bins(width, height)
        points = _lattice_sites(crystal_spacing(self.a, self.a, 120.0), nx, ny, honeycomb=True)
        logger.debug(
            "Hexagonal lattice a=%.4f: %d x %d bins, %d sites, box (%.4f, %.4f)",
            self.a, nx, ny, len(points), *points.box_size,
        )
        return points

    def fill(
        self,
        width: float,
        height: float,
        rng: np.random.Generator | None = None,
    ) -> Points:
        """
        Honeycomb sites inside exactly [0, width) x [0, height).

        The covering cell keeps the 3-column and 2-row periodicity so that
        the removal pattern is the same as for `generate`.
        """
        spacing = crystal_spacing(self.a, self.a, 120.0)
        nx, ny = _covering_bins(spacing, width, height)
        nx, ny = 3 * math.ceil(nx / 3), 2 * math.ceil(ny / 2)
        points = _lattice_sites(spacing, nx, ny, honeycomb=True).clipped(width, height)
        logger.debug(
            "Hexagonal lattice a=%.4f: %d sites clipped to (%.4f, %.4f)",
            self.a, len(points), width, height,
        )
        return points

    def describe(self) -> str:
        return f"Hexagonal lattice (a = {self.a:.4f} nm)"


@dataclass(frozen=True)
class TriclinicLattice:
    """
    Lattice of base vectors with lengths `a` and `b` separated by `gamma` degrees.

    `b` defaults to `a`, giving the equal-length base used for silica.
    """

    a: float
    b: float | None = None
    gamma: float = 60.0

    kind = "triclinic"

    def __post_init__(self) -> None:
        if self.b is None:
            object.__setattr__(self, "b", self.a)
        if self.a <= 0.0 or self.b <= 0.0:
            raise InvalidSpacing(
                f"Triclinic lattice vectors must be positive, got a={self.a}, b={self.b}."
            )
        if not 0.0 < self.gamma < 180.0:
            raise InvalidSpacing(
                f"Triclinic lattice angle must be in (0, 180) degrees, got {self.gamma}."
            )

    @property
    def spacing(self) -> float:
        return self.a

    def bins(self, width: float, height: float) -> tuple[int, int]:
        check_footprint(width, height)
        spacing = crystal_spacing(self.a, self.b, self.gamma)
        nx = max(1, _round_half_up(width / spacing.dx))
        ny = max(1, _round_half_up(height / spacing.dy))
        return nx, ny

    def generate(
        self,
        width: float,
        height: float,
        rng: np.random.Generator | None = None,
    ) -> Points:
        nx, ny = self.bins(width, height)
        points = _lattice_sites(crystal_spacing(self.a, self.b, self.gamma), nx, ny, honeycomb=False)
        logger.debug(
            "Triclinic lattice a=%.4f b=%.4f gamma=%.1f: %d x %d sites, box (%.4f, %.4f)",
            self.a, self.b, self.gamma, nx, ny, *points.box_size,
        )
        return points

    def fill(
        self,
        width: float,
        height: float,
        rng: np.random.Generator | None = None,
    ) -> Points:
        spacing = crystal_spacing(self.a, self.b, self.gamma)
        nx, ny = _covering_bins(spacing, width, height)
        return _lattice_sites(spacing, nx, ny, honeycomb=False).clipped(width, height)

    def describe(self) -> str:
        return (
            f"Triclinic lattice (a = {self.a:.4f} nm, b = {self.b:.4f} nm, "
            f"gamma = {self.gamma:.1f} deg)"
        )
