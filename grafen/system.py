"""
grafen/system.py

Composition of components into one indexed system.

A System is an ordered list of components, already positioned in absolute
coordinates, and a title.  Atoms are numbered only when the system is
iterated for output: components in order, then residues, then template
atoms, with atom and residue indices both running contiguously from 1.

Overlaps between components are not detected.

Usage
-----
    from grafen.system import System

    system = System("Graphene with water", [sheet, water])
    for atom in system.iter_atoms():
        print(atom.index, atom.residue_name, atom.atom_name, atom.position)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from ase import Atoms

from grafen.coord import BoundingBox, Coord
from grafen.io.ase_bridge import system_to_atoms


@dataclass(frozen=True)
class IndexedAtom:
    """One atom of a serialised system, with its global atom and residue index."""

    index: int
    residue_index: int
    residue_name: str
    atom_name: str
    position: Coord


@dataclass
class System:
    title: str = "System"
    components: list = field(default_factory=list)

    def add(self, component) -> None:
        self.components.append(component)

    def __len__(self) -> int:
        return len(self.components)

    @property
    def box(self) -> BoundingBox:
        """Union of every component box; a zero box at the origin when empty."""
        if not self.components:
            return BoundingBox.empty_at(Coord.ORIGO)
        box = self.components[0].box
        for component in self.components[1:]:
            box = box.union(component.box)
        return box

    @property
    def num_atoms(self) -> int:
        return sum(component.num_atoms for component in self.components)

    @property
    def num_residues(self) -> int:
        return sum(component.num_residues for component in self.components)

    def iter_atoms(self) -> Iterator[IndexedAtom]:
        atom_index = 0
        residue_index = 0
        for component in self.components:
            for residue, position in component.iter_residues():
                residue_index += 1
                for atom in residue.resolve(position):
                    atom_index += 1
                    yield IndexedAtom(
                        index=atom_index,
                        residue_index=residue_index,
                        residue_name=residue.name,
                        atom_name=atom.name,
                        position=atom.position,
                    )

    def to_atoms(self) -> Atoms:
        """The system as an ase.Atoms object (Angstrom) for export."""
        return system_to_atoms(self)

    def describe(self) -> str:
        lines = [f"{self.title}: {len(self.components)} components, "
                 f"{self.num_residues} residues, {self.num_atoms} atoms, box {self.box.size}"]
        lines += [f"  {component.describe()}" for component in self.components]
        return "\n".join(lines)
