"""
grafen/io/ase_bridge.py

Read and write structure formats other than GROMOS87 through ASE.

ASE works in Angstrom; grafen in nanometers.  Positions are converted at
this boundary and nowhere else.

Residue information is carried in the per-atom arrays that ASE's PDB
reader fills in ('residuenames', 'residuenumbers', 'atomtypes').  Formats
without them are read as one residue per atom, named by its element.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
from ase import Atoms
from ase.data import chemical_symbols
from ase.io import read, write

from grafen.coord import Coord
from grafen.errors import StructureFormatError
from grafen.io.records import ParsedResidue, StructureData

if TYPE_CHECKING:
    from grafen.system import System

logger = logging.getLogger(__name__)

NM_TO_ANGSTROM = 10.0


# First letters of the elements whose atom names in biomolecular residues
# (CA, CD, HO, NE, OS, ...) collide with two-letter element symbols
_ORGANIC_INITIALS = frozenset("HCNO")


def guess_symbol(atom_name: str, residue_name: str | None = None) -> str:
    """
    Guess the chemical element of an atom from its name.

    Digits are dropped and the letters are matched against the periodic
    table.  A name starting with H, C, N or O is read as that single
    element ("CA" -> "C", "HO" -> "H", "OW" -> "O") unless the atom is a
    monatomic ion, i.e. its name equals `residue_name` ("CA" in residue
    "CA" -> "Ca").  Other names try the first two letters, then the first
    ("SI" -> "Si", "ZN" -> "Zn").  Unknown names map to "X".
    """
    letters = "".join(c for c in atom_name if c.isalpha())
    if not letters:
        return "X"

    ion = residue_name is not None and atom_name.strip().upper() == residue_name.strip().upper()
    single = letters[0].upper()
    pair = letters[:2].capitalize()

    if single in _ORGANIC_INITIALS and not ion:
        return single
    if len(letters) >= 2 and pair in chemical_symbols:
        return pair
    if single in chemical_symbols:
        return single
    return "X"


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------

def read_with_ase(path: str | Path) -> StructureData:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Structure file not found: {path}")

    try:
        atoms = read(str(path))
    except Exception as exc:
        raise StructureFormatError(f"{path}: could not be read by ASE: {exc}") from exc

    positions = atoms.get_positions() / NM_TO_ANGSTROM
    symbols = atoms.get_chemical_symbols()

    if "residuenumbers" in atoms.arrays:
        numbers = atoms.arrays["residuenumbers"]
        resnames = atoms.arrays.get("residuenames", np.array(symbols))
        names = atoms.arrays.get("atomtypes", np.array(symbols))
    else:
        numbers = np.arange(len(atoms))
        resnames = np.array(symbols)
        names = np.array(symbols)

    residues: list[ParsedResidue] = []
    current_key = None
    for number, resname, name, position in zip(numbers, resnames, names, positions):
        key = (int(number), str(resname).strip())
        if key != current_key:
            residues.append(ParsedResidue(key[1]))
            current_key = key
        residues[-1].atom_names.append(str(name).strip())
        residues[-1].positions.append(position)

    box_size = None
    cell = atoms.cell.array
    if np.any(cell):
        box_size = Coord.from_array(np.diag(cell) / NM_TO_ANGSTROM)

    logger.debug("Read %d atoms in %d residues from %s", len(atoms), len(residues), path)
    return StructureData(title=path.stem, residues=residues, box_size=box_size)


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------

def system_to_atoms(system: System) -> Atoms:
    """
    Convert a System to an ase.Atoms object in Angstrom.

    The cell is the size of the system box.  Residue and atom names are kept
    in the 'residuenames', 'residuenumbers' and 'atomtypes' arrays.
    """
    indexed = list(system.iter_atoms())
    positions = np.array([atom.position.to_tuple() for atom in indexed]).reshape(-1, 3)
    symbols = [guess_symbol(atom.atom_name, atom.residue_name) for atom in indexed]

    size = system.box.size
    atoms = Atoms(
        symbols=symbols,
        positions=positions * NM_TO_ANGSTROM,
        cell=np.array([size.x, size.y, size.z]) * NM_TO_ANGSTROM,
    )
    atoms.set_array("residuenames", np.array([a.residue_name for a in indexed], dtype=str))
    atoms.set_array("residuenumbers", np.array([a.residue_index for a in indexed], dtype=int))
    atoms.set_array("atomtypes", np.array([a.atom_name for a in indexed], dtype=str))
    atoms.info["title"] = system.title
    return atoms


def write_with_ase(system: System, path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    write(str(path), system_to_atoms(system))
    logger.info("Wrote %d atoms to %s", system.num_atoms, path)
    return path
