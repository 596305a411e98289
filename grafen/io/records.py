"""
grafen/io/records.py

Format-independent result of reading a structure file.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from grafen.coord import Coord


@dataclass
class ParsedResidue:
    """One residue as read from file: its name and absolute atom positions (nm)."""

    name: str
    atom_names: list[str] = field(default_factory=list)
    positions: list[np.ndarray] = field(default_factory=list)

    @property
    def coords(self) -> np.ndarray:
        return np.array(self.positions, dtype=float).reshape(-1, 3)


@dataclass
class StructureData:
    title: str
    residues: list[ParsedResidue]
    box_size: Coord | None = None

    @property
    def num_atoms(self) -> int:
        return sum(len(residue.atom_names) for residue in self.residues)
