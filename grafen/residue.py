"""
grafen/residue.py

Residue templates and atom records.

A Residue is a named, read-only template: an ordered list of atoms with
positions relative to the residue origin.  One template is shared by every
placement of it in a component; it is never copied per placement.

Atoms are used in two roles:
  - as template atoms, where `position` is the offset from the residue origin;
  - as resolved atoms, produced lazily from a placement, where `position` is
    absolute and `index` is a placeholder (0) until the System numbers it.

Usage
-----
    from grafen.residue import Residue

    water = Residue.from_tuples("SOL", [
        ("OW", 0.0, 0.0, 0.0),
        ("HW1", 0.0957, 0.0, 0.0),
        ("HW2", -0.024, 0.0927, 0.0),
    ])
    atoms = list(water.resolve(Coord(1.0, 1.0, 1.0)))
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator

import numpy as np

from grafen.coord import Coord, as_coord
from grafen.errors import EmptyResidueTemplate, InvalidResidueTemplate

# Field width of residue and atom names in fixed-column structure files
MAX_NAME_LENGTH = 5


@dataclass(frozen=True)
class Atom:
    """An atom name with a position, optionally tagged with its residue and index."""

    name: str
    position: Coord
    residue_name: str = ""
    index: int = 0


@dataclass(frozen=True)
class Residue:
    """
    A named residue template.

    Attributes
    ----------
    name:
        Residue name, at most five characters.
    atoms:
        Template atoms with positions relative to the residue origin.  Never
        empty; atom names are unique and at most five characters.
    """

    name: str
    atoms: tuple[Atom, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "atoms", tuple(self.atoms))
        _validate_name(self.name, "Residue")

        if not self.atoms:
            raise EmptyResidueTemplate(f"Residue '{self.name}' has no atoms.")

        names = [atom.name for atom in self.atoms]
        if len(set(names)) != len(names):
            raise InvalidResidueTemplate(
                f"Residue '{self.name}' has duplicate atom names: {names}"
            )
        for name in names:
            _validate_name(name, f"Atom in residue '{self.name}'")

    @classmethod
    def from_tuples(
        cls,
        name: str,
        atoms: Iterable[tuple[str, float, float, float]],
    ) -> "Residue":
        """Build a template from (atom name, x, y, z) tuples."""
        return cls(name, tuple(Atom(a, Coord(x, y, z)) for a, x, y, z in atoms))

    @property
    def num_atoms(self) -> int:
        return len(self.atoms)

    @property
    def atom_names(self) -> list[str]:
        return [atom.name for atom in self.atoms]

    @property
    def offsets(self) -> np.ndarray:
        """(n_atoms, 3) array of atom offsets from the residue origin."""
        return np.array([atom.position.to_tuple() for atom in self.atoms], dtype=float)

    def resolve(self, position) -> Iterator[Atom]:
        """Yield the atoms of one placement of this residue at `position`."""
        origin = as_coord(position)
        for atom in self.atoms:
            yield Atom(atom.name, origin + atom.position, residue_name=self.name)

    def describe(self) -> str:
        return f"{self.name} ({', '.join(self.atom_names)})"


def _validate_name(name: str, what: str) -> None:
    if not name or not name.strip():
        raise InvalidResidueTemplate(f"{what} has an empty name.")
    if len(name) > MAX_NAME_LENGTH:
        raise InvalidResidueTemplate(
            f"{what} name '{name}' is longer than {MAX_NAME_LENGTH} characters."
        )
