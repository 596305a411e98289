"""
grafen/structure/loaded.py

Components read verbatim from structure files.

Every residue read from file becomes its own template: the first atom is
taken as the residue's reference point, which is also its placement
position, and the template offsets are relative to it.  Residues are not
regenerated, merged or reordered.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from grafen.coord import BoundingBox, Coord
from grafen.io import StructureData, read_structure
from grafen.residue import Atom, Residue
from grafen.structure.component import BaseComponent, hull

logger = logging.getLogger(__name__)


@dataclass(kw_only=True, eq=False)
class LoadedStructure(BaseComponent):
    """Residues read from an external file, with the file's title and path."""

    path: Path | None = None
    title: str = ""

    kind = "structure"

    @classmethod
    def from_data(
        cls,
        data: StructureData,
        path: Path | None = None,
        name: str | None = None,
    ) -> "LoadedStructure":
        residues = []
        positions = np.zeros((len(data.residues), 3))

        for i, parsed in enumerate(data.residues):
            coords = parsed.coords
            reference = coords[0]
            atoms = tuple(
                Atom(atom_name, Coord.from_array(offset))
                for atom_name, offset in zip(parsed.atom_names, coords - reference)
            )
            residues.append(Residue(parsed.name, atoms))
            positions[i] = reference

        box = BoundingBox.from_positions(positions)
        if data.box_size is not None:
            box = hull(BoundingBox(Coord.ORIGO, data.box_size), positions)

        return cls(
            residues=residues,
            positions=positions,
            box=box,
            origin=Coord.ORIGO,
            name=name,
            path=path,
            title=data.title,
        )

    @classmethod
    def from_file(cls, path: str | Path, name: str | None = None) -> "LoadedStructure":
        """
        Read a structure file: .gro natively, any other suffix through ASE.

        Raises
        ------
        FileNotFoundError
            If `path` does not exist.
        StructureFormatError
            If the file cannot be parsed.
        InvalidResidueTemplate
            If a residue in the file has duplicate or over-long atom names.
        """
        path = Path(path)
        structure = cls.from_data(read_structure(path), path=path, name=name)
        logger.info(
            "Loaded '%s': %d residues, %d atoms from %s",
            structure.label(), structure.num_residues, structure.num_atoms, path,
        )
        return structure

    def label(self) -> str:
        return self.name or self.title or "Unnamed"

    def describe(self) -> str:
        source = self.path.name if self.path is not None else "memory"
        return (
            f"{self.label()} (structure from {source}: {self.num_residues} residues, "
            f"{self.num_atoms} atoms)"
        )
