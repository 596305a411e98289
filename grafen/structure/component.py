"""
grafen/structure/component.py

The capability set shared by every component variant.

A component is a positioned collection of residue placements: for each
placement a reference to a shared Residue template and an absolute base
position.  Atoms are never stored; they are resolved lazily from the
placements when iterated.

Every variant (Sheet, Cylinder, Volume, LoadedStructure) inherits from
BaseComponent and only adds the fields that describe how it was built.
Variants built on a periodic cell report it through `periodic_cell`, which
is what `pbc_multiply` replicates.

Invariant
---------
`box` always encloses every residue position currently held.  Operations
that move, remove or replicate placements (translate, select,
pbc_multiply) shift or recompute it.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, replace
from typing import ClassVar, Iterator

import numpy as np

from grafen.coord import BoundingBox, Coord, as_coord
from grafen.residue import Atom, Residue


@dataclass(kw_only=True, eq=False)
class BaseComponent:
    """
    Placements of residue templates with a bounding box.

    Attributes
    ----------
    residues:
        One Residue reference per placement.  Generated components repeat a
        single shared template.
    positions:
        (N, 3) array of absolute placement positions (nm).
    box:
        Axis-aligned bounding box of the component.
    origin:
        Reference point of the component.  Moves with translations.
    name:
        Optional label, shown by describe().
    """

    residues: list[Residue]
    positions: np.ndarray
    box: BoundingBox
    origin: Coord = Coord.ORIGO
    name: str | None = None

    kind: ClassVar[str] = "component"

    def __post_init__(self) -> None:
        self.positions = np.asarray(self.positions, dtype=float).reshape(-1, 3)
        if len(self.residues) != len(self.positions):
            raise ValueError(
                f"{len(self.residues)} residues but {len(self.positions)} positions given."
            )

    # --- Counting ---------------------------------------------------------------

    @property
    def num_residues(self) -> int:
        return len(self.residues)

    @property
    def num_atoms(self) -> int:
        return sum(residue.num_atoms for residue in self.residues)

    def __len__(self) -> int:
        return self.num_residues

    # --- Iteration --------------------------------------------------------------

    def iter_residues(self) -> Iterator[tuple[Residue, Coord]]:
        """Yield (template, absolute position) for every placement in order."""
        for residue, position in zip(self.residues, self.positions):
            yield residue, Coord.from_array(position)

    def iter_atoms(self) -> Iterator[Atom]:
        """
        Yield the resolved atoms of every placement.

        Order is residue order, then template atom order.  Atom indices are
        placeholders (0); the System assigns the final numbering.
        """
        for residue, position in self.iter_residues():
            yield from residue.resolve(position)

    def atom_positions(self) -> np.ndarray:
        """(num_atoms, 3) array of absolute atom positions in iteration order."""
        if not self.residues:
            return np.zeros((0, 3))
        return np.vstack([
            residue.offsets + position
            for residue, position in zip(self.residues, self.positions)
        ])

    # --- Editing ----------------------------------------------------------------

    def translate(self, offset) -> None:
        """Shift every placement, the box and the origin by `offset` in place."""
        offset = as_coord(offset)
        self.positions = self.positions + offset.to_array()
        self.box = self.box.translate(offset)
        self.origin = self.origin + offset

    def select(self, mask: np.ndarray):
        """
        Return a copy keeping only the placements where `mask` is True.

        The box of the copy is recomputed from the surviving placements.  An
        empty selection gives a zero-volume box at the origin.
        """
        mask = np.asarray(mask, dtype=bool)
        positions = self.positions[mask]
        residues = [residue for residue, keep in zip(self.residues, mask) if keep]
        return replace(
            self,
            residues=residues,
            positions=positions,
            box=BoundingBox.from_positions(positions, fallback=self.origin),
        )

    def copy(self):
        """Copy with independent placement data.  Templates stay shared."""
        duplicate = copy.copy(self)
        duplicate.residues = list(self.residues)
        duplicate.positions = self.positions.copy()
        return duplicate

    # --- Periodicity ------------------------------------------------------------

    def periodic_cell(self) -> Coord | None:
        """Size of the cell the placements repeat in, or None if not periodic."""
        return None

    def replicated_fields(self, nx: int, ny: int, nz: int) -> dict:
        """Field updates for a copy replicated (nx, ny, nz) times by pbc_multiply."""
        return {}

    # --- Description ------------------------------------------------------------

    def label(self) -> str:
        return self.name or "Unnamed"

    def describe(self) -> str:
        return (
            f"{self.label()} ({self.kind}: {self.num_residues} residues, "
            f"{self.num_atoms} atoms, box {self.box})"
        )


def hull(box: BoundingBox, positions: np.ndarray) -> BoundingBox:
    """Smallest box enclosing both `box` and the rows of `positions`."""
    positions = np.asarray(positions, dtype=float).reshape(-1, 3)
    if len(positions) == 0:
        return box
    return box.union(BoundingBox.from_positions(positions))


def placements_for(residue: Residue, count: int) -> list[Residue]:
    """A placement list repeating one shared template `count` times."""
    return [residue] * count


