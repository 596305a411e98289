"""
grafen.lattice

Generators of planar placement sites.

Submodules
----------
points      The Points container shared by all generators
crystal     Hexagonal (honeycomb) and triclinic regular lattices
poisson     Periodic Poisson-disc sampling (Bridson's algorithm)

Every lattice type exposes `generate(width, height, rng=None) -> Points`
(a periodic cell, snapped for regular lattices), `fill(width, height,
rng=None) -> Points` (sites clipped to exactly the footprint) and a
`spacing` used as the radial step of filled cylinders.
"""

from typing import Union

from grafen.lattice.crystal import HexagonalLattice, TriclinicLattice
from grafen.lattice.points import Points
from grafen.lattice.poisson import PoissonDiscLattice

LatticeType = Union[HexagonalLattice, TriclinicLattice, PoissonDiscLattice]

__all__ = [
    "HexagonalLattice",
    "LatticeType",
    "Points",
    "PoissonDiscLattice",
    "TriclinicLattice",
]
