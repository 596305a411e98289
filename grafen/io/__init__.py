"""
grafen.io

Structure file input and output.

GROMOS87 (.gro) files are read and written natively.  Every other suffix is
handed to ASE, which picks the format from the file name.

Usage
-----
    from grafen.io import read_structure, write_system

    data = read_structure("water.gro")
    write_system(system, "out.gro")
"""

from __future__ import annotations

from pathlib import Path

from grafen.io.ase_bridge import read_with_ase, system_to_atoms, write_with_ase
from grafen.io.gromos import format_gromos, parse_gromos, read_gromos, write_gromos
from grafen.io.records import ParsedResidue, StructureData

GROMOS_SUFFIX = ".gro"


def read_structure(path: str | Path) -> StructureData:
    path = Path(path)
    if path.suffix.lower() == GROMOS_SUFFIX:
        return read_gromos(path)
    return read_with_ase(path)


def write_system(system, path: str | Path) -> Path:
    path = Path(path)
    if path.suffix.lower() == GROMOS_SUFFIX:
        return write_gromos(system, path)
    return write_with_ase(system, path)


__all__ = [
    "ParsedResidue",
    "StructureData",
    "format_gromos",
    "parse_gromos",
    "read_gromos",
    "read_structure",
    "read_with_ase",
    "system_to_atoms",
    "write_gromos",
    "write_system",
    "write_with_ase",
]
