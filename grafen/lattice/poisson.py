"""
grafen/lattice/poisson.py

Poisson-disc distributed sites on a periodic planar box.

Implements Bridson's algorithm:

    R. Bridson, "Fast Poisson disk sampling in arbitrary dimensions",
    ACM SIGGRAPH 2007 Sketches.

An active list is seeded with one random site.  Repeatedly a random active
site is picked and up to NUM_CANDIDATES candidates are drawn from the annulus
[rmin, 2 * rmin] around it.  The first candidate with no existing site
closer than rmin is accepted and becomes active; if every candidate is
rejected the active site is retired.  Sampling ends when no active sites
remain.

Neighbour lookup uses a uniform grid with cells at least rmin wide, so only
the 3 x 3 block of cells around a candidate has to be searched.  The box is
periodic: candidates are wrapped into it and distances use the minimum image,
so the distribution tiles without seams.

The sampler is deterministic for a given numpy Generator state.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np

from grafen.errors import InvalidSpacing
from grafen.lattice.crystal import check_footprint
from grafen.lattice.points import Points

logger = logging.getLogger(__name__)

#: Candidates tried around an active site before it is retired
NUM_CANDIDATES = 30


@dataclass(frozen=True)
class PoissonDiscLattice:
    """
    Randomised sites with a guaranteed minimum separation.

    Give either a `density` (sites per nm^2) or the minimum distance `rmin`
    (nm).  A density is converted with rmin = sqrt(2 / (pi * density)), which
    gives a good match between the requested and the generated density.
    """

    density: float | None = None
    rmin: float | None = None

    kind = "poisson"

    def __post_init__(self) -> None:
        if (self.density is None) == (self.rmin is None):
            raise InvalidSpacing("A Poisson-disc lattice needs exactly one of 'density' or 'rmin'.")
        if self.density is not None and self.density <= 0.0:
            raise InvalidSpacing(f"Poisson-disc density must be positive, got {self.density}.")
        if self.rmin is not None and self.rmin <= 0.0:
            raise InvalidSpacing(f"Poisson-disc minimum distance must be positive, got {self.rmin}.")

    @property
    def min_distance(self) -> float:
        if self.rmin is not None:
            return self.rmin
        return math.sqrt(2.0 / (math.pi * self.density))

    @property
    def spacing(self) -> float:
        return self.min_distance

    def generate(
        self,
        width: float,
        height: float,
        rng: np.random.Generator | None = None,
    ) -> Points:
        check_footprint(width, height)
        if rng is None:
            rng = np.random.default_rng()

        coords = poisson_disc_sample(self.min_distance, width, height, rng)
        logger.debug(
            "Poisson-disc rmin=%.4f on (%.4f, %.4f): %d sites",
            self.min_distance, width, height, len(coords),
        )
        return Points(box_size=(width, height), coords=coords)

    def fill(
        self,
        width: float,
        height: float,
        rng: np.random.Generator | None = None,
    ) -> Points:
        """The sampled box is the footprint itself, so this is `generate`."""
        return self.generate(width, height, rng=rng)

    def describe(self) -> str:
        if self.density is not None:
            return f"Poisson-disc distribution (density = {self.density:.2f} / nm^2)"
        return f"Poisson-disc distribution (rmin = {self.rmin:.4f} nm)"


# ---------------------------------------------------------------------------
# Sampler
# ---------------------------------------------------------------------------

class _PeriodicGrid:
    """Bucket grid over a periodic box with cells at least rmin wide."""

    def __init__(self, rmin: float, width: float, height: float):
        self.rmin = rmin
        self.width = width
        self.height = height
        self.nx = max(1, int(width // rmin))
        self.ny = max(1, int(height // rmin))
        self.cell_width = width / self.nx
        self.cell_height = height / self.ny
        self.cells: dict[tuple[int, int], list[int]] = {}
        self.points: list[tuple[float, float]] = []

    def _cell(self, x: float, y: float) -> tuple[int, int]:
        col = min(int(x / self.cell_width), self.nx - 1)
        row = min(int(y / self.cell_height), self.ny - 1)
        return col, row

    def _neighbour_cells(self, col: int, row: int) -> set[tuple[int, int]]:
        return {
            ((col + di) % self.nx, (row + dj) % self.ny)
            for di in (-1, 0, 1)
            for dj in (-1, 0, 1)
        }

    def collides(self, x: float, y: float) -> bool:
        rmin2 = self.rmin * self.rmin
        for cell in self._neighbour_cells(*self._cell(x, y)):
            for index in self.cells.get(cell, ()):
                px, py = self.points[index]
                dx = x - px
                dy = y - py
                dx -= self.width * round(dx / self.width)
                dy -= self.height * round(dy / self.height)
                if dx * dx + dy * dy < rmin2:
                    return True
        return False

    def add(self, x: float, y: float) -> int:
        index = len(self.points)
        self.points.append((x, y))
        self.cells.setdefault(self._cell(x, y), []).append(index)
        return index

    def wrap(self, x: float, y: float) -> tuple[float, float]:
        x %= self.width
        y %= self.height
        if x >= self.width:
            x = 0.0
        if y >= self.height:
            y = 0.0
        return x, y


def poisson_disc_sample(
    rmin: float,
    width: float,
    height: float,
    rng: np.random.Generator,
    num_candidates: int = NUM_CANDIDATES,
) -> np.ndarray:
    """
    Sample a periodic Poisson-disc point set.

    Parameters
    ----------
    rmin:
        Minimum distance between any two sites (nm).
    width, height:
        Size of the periodic box (nm).
    rng:
        NumPy random generator.  Identical generator states give identical
        ordered output.
    num_candidates:
        Attempts around an active site before it is retired.

    Returns
    -------
    np.ndarray
        (N, 3) array of sites in acceptance order, z = 0.
    """
    grid = _PeriodicGrid(rmin, width, height)

    first = grid.add(float(rng.uniform(0.0, width)), float(rng.uniform(0.0, height)))
    active = [first]

    while active:
        slot = int(rng.integers(len(active)))
        cx, cy = grid.points[active[slot]]

        for _ in range(num_candidates):
            radius = rng.uniform(rmin, 2.0 * rmin)
            angle = rng.uniform(0.0, 2.0 * math.pi)
            x, y = grid.wrap(cx + radius * math.cos(angle), cy + radius * math.sin(angle))

            if not grid.collides(x, y):
                active.append(grid.add(x, y))
                break
        else:
            active[slot] = active[-1]
            active.pop()

    coords = np.zeros((len(grid.points), 3))
    if grid.points:
        coords[:, :2] = np.array(grid.points)
    return coords
