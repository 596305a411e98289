"""
grafen/lattice/points.py

The planar point collection produced by every lattice generator.

Points are the placement sites onto which residues are broadcast.  Beyond
their creation (by a regular lattice or a Poisson-disc sampler) all
transformations of the raw points live here.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterator

import numpy as np


@dataclass(frozen=True)
class Points:
    """
    Sites generated on a planar box, periodic unless clipped.

    Attributes
    ----------
    box_size:
        (width, height) of the box in nm.  Every site lies within
        [0, width) x [0, height).
    coords:
        (N, 3) array of site positions.  z is 0 unless a distribution along
        z has been applied.
    """

    box_size: tuple[float, float]
    coords: np.ndarray

    def __len__(self) -> int:
        return len(self.coords)

    @property
    def area(self) -> float:
        return self.box_size[0] * self.box_size[1]

    def iter_points(self) -> Iterator[np.ndarray]:
        """Finite, non-restartable iterator over the site positions."""
        return iter(self.coords)

    def with_z_distribution(
        self,
        std_z: float,
        rng: np.random.Generator | None = None,
    ) -> "Points":
        """
        Return a copy with every site shifted along z by a uniform sample
        from [-std_z, std_z].
        """
        if rng is None:
            rng = np.random.default_rng()

        coords = self.coords.copy()
        coords[:, 2] += rng.uniform(-std_z, std_z, size=len(coords))
        return replace(self, coords=coords)

    def clipped(self, width: float, height: float) -> "Points":
        """
        Keep the sites inside [0, width) x [0, height) and make that the box.

        Used to cut a periodic cell that covers a footprint down to exactly
        the footprint.  The result is no longer periodic.
        """
        inside = (self.coords[:, 0] < width) & (self.coords[:, 1] < height)
        return Points(box_size=(width, height), coords=self.coords[inside])
