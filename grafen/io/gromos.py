"""
grafen/io/gromos.py

Reader and writer for the fixed-column GROMOS87 (.gro) structure format.

Layout
------
    line 1          title
    line 2          number of atoms
    one per atom    %5d%-5s%5s%5d%8.3f%8.3f%8.3f
                    residue number, residue name, atom name, atom number,
                    x, y, z (nm)
    last line       box vectors, %10.5f%10.5f%10.5f

Residue and atom numbers wrap modulo 100000 so that they always fit their
five-column fields.  A residue is read as a run of consecutive atom lines
that share both residue number and residue name.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

import numpy as np

from grafen.coord import Coord
from grafen.errors import StructureFormatError
from grafen.io.records import ParsedResidue, StructureData

if TYPE_CHECKING:
    from grafen.system import System

logger = logging.getLogger(__name__)

#: Residue and atom numbers wrap at this value
NUMBER_WRAP = 100000


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------

def _parse_atom_line(line: str, lineno: int) -> tuple[int, str, str, np.ndarray]:
    try:
        resnum = int(line[0:5])
        resname = line[5:10].strip()
        atomname = line[10:15].strip()
        position = np.array([float(line[20:28]), float(line[28:36]), float(line[36:44])])
    except ValueError as exc:
        raise StructureFormatError(f"Line {lineno}: malformed atom record: {line.rstrip()!r}") from exc
    return resnum, resname, atomname, position


def parse_gromos(lines: Iterable[str], source: str = "<string>") -> StructureData:
    """
    Parse the lines of a GROMOS87 file.

    Raises
    ------
    StructureFormatError
        If the header is missing, the atom count is not an integer, or the
        file has fewer atom lines than announced.
    """
    lines = list(lines)
    if len(lines) < 2:
        raise StructureFormatError(f"{source}: missing title or atom count line.")

    title = lines[0].strip()
    try:
        num_atoms = int(lines[1].strip())
    except ValueError as exc:
        raise StructureFormatError(
            f"{source}: line 2 should hold the number of atoms, got {lines[1].strip()!r}."
        ) from exc

    atom_lines = lines[2:2 + num_atoms]
    if len(atom_lines) < num_atoms:
        raise StructureFormatError(
            f"{source}: expected {num_atoms} atoms but found {len(atom_lines)} atom lines."
        )

    residues: list[ParsedResidue] = []
    current_key = None
    for lineno, line in enumerate(atom_lines, start=3):
        resnum, resname, atomname, position = _parse_atom_line(line, lineno)
        if (resnum, resname) != current_key:
            residues.append(ParsedResidue(resname, [], []))
            current_key = (resnum, resname)
        residues[-1].atom_names.append(atomname)
        residues[-1].positions.append(position)

    box_size = None
    box_lines = lines[2 + num_atoms:]
    if box_lines and box_lines[0].strip():
        try:
            box_size = Coord.from_str(box_lines[0])
        except ValueError as exc:
            raise StructureFormatError(f"{source}: malformed box line {box_lines[0].strip()!r}.") from exc

    return StructureData(title=title, residues=residues, box_size=box_size)


def read_gromos(path: str | Path) -> StructureData:
    """Read a .gro file from disk."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Structure file not found: {path}")

    with path.open() as handle:
        data = parse_gromos(handle.read().splitlines(), source=str(path))

    logger.debug("Read %d residues from %s", len(data.residues), path)
    return data


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------

def format_gromos(system: System) -> str:
    """Render a System as GROMOS87 text, ending with a newline."""
    lines = [system.title, f"{system.num_atoms:5d}"]
    for atom in system.iter_atoms():
        x, y, z = atom.position
        lines.append(
            f"{atom.residue_index % NUMBER_WRAP:5d}"
            f"{atom.residue_name:<5s}"
            f"{atom.atom_name:>5s}"
            f"{atom.index % NUMBER_WRAP:5d}"
            f"{x:8.3f}{y:8.3f}{z:8.3f}"
        )

    size = system.box.size
    lines.append(f"{size.x:10.5f}{size.y:10.5f}{size.z:10.5f}")
    return "\n".join(lines) + "\n"


def write_gromos(system: System, path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(format_gromos(system))
    logger.info("Wrote %d atoms to %s", system.num_atoms, path)
    return path
