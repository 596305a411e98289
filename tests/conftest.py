"""
tests/conftest.py

Shared pytest fixtures for the grafen test suite.

All fixtures are pure geometry and small files written to temporary
directories.  No network access is required.

Fixture overview
----------------
Residues
    carbon              Single-atom graphene residue (GRA: C)
    water               Three-atom water residue (SOL: OW, HW1, HW2)
    silica              Three-atom silica residue (SIO: SI, O1, O2)

Lattices and components
    hex_lattice         HexagonalLattice with the graphene bond length
    graphene_sheet      4 x 4 nm graphene sheet
    make_mask           Factory for residue-free components with a given box

Files
    water_atoms         Rows of the three-water structure
    make_gro            Renders rows as GROMOS87 text
    water_gro           A .gro file with three water molecules
    database            A Database with residues and presets, written next to water.gro
    database_file       Path of the written database
    config_file         A system definition using the database
"""

from __future__ import annotations

import textwrap
from pathlib import Path

import numpy as np
import pytest

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

WATER_ATOMS = [
    # (residue number, atom name, x, y, z)
    (1, "OW", 0.126, 1.624, 1.679),
    (1, "HW1", 0.190, 1.661, 1.747),
    (1, "HW2", 0.177, 1.568, 1.613),
    (2, "OW", 1.275, 0.053, 0.622),
    (2, "HW1", 1.337, 0.002, 0.680),
    (2, "HW2", 1.326, 0.120, 0.568),
    (3, "OW", 0.962, 1.086, 1.460),
    (3, "HW1", 0.929, 1.174, 1.482),
    (3, "HW2", 1.022, 1.049, 1.526),
]


def gro_text(title: str, atoms, box=(1.86206, 1.86206, 1.86206), resname: str = "SOL") -> str:
    """Render (resnum, atom name, x, y, z) tuples as fixed-column GROMOS87 text."""
    lines = [title, f"{len(atoms):5d}"]
    for index, (resnum, name, x, y, z) in enumerate(atoms, start=1):
        lines.append(f"{resnum:5d}{resname:<5s}{name:>5s}{index:5d}{x:8.3f}{y:8.3f}{z:8.3f}")
    lines.append("{:10.5f}{:10.5f}{:10.5f}".format(*box))
    return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------------
# Residue fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def carbon():
    from grafen.residue import Residue
    return Residue.from_tuples("GRA", [("C", 0.0, 0.0, 0.0)])


@pytest.fixture(scope="session")
def water():
    from grafen.residue import Residue
    return Residue.from_tuples("SOL", [
        ("OW", 0.0, 0.0, 0.0),
        ("HW1", 0.064, 0.037, 0.068),
        ("HW2", 0.051, -0.056, -0.066),
    ])


@pytest.fixture(scope="session")
def silica():
    from grafen.residue import Residue
    return Residue.from_tuples("SIO", [
        ("SI", 0.0, 0.0, 0.0),
        ("O1", 0.0, 0.0, 0.16),
        ("O2", 0.0, 0.0, -0.16),
    ])


# ---------------------------------------------------------------------------
# Lattice and component fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def hex_lattice():
    from grafen.lattice import HexagonalLattice
    return HexagonalLattice(a=0.142)


@pytest.fixture
def graphene_sheet(hex_lattice, carbon):
    """A 4 x 4 nm graphene sheet in the xy plane.  Function-scoped: tests may mutate it."""
    from grafen.structure import create_sheet
    return create_sheet(hex_lattice, carbon, (4.0, 4.0), name="graphene")


@pytest.fixture
def make_mask():
    """
    Factory for a residue-free component whose only role is its box.

        mask = make_mask((1.0, 1.0, -1.0), (3.0, 3.0, 1.0))
    """
    from grafen.coord import BoundingBox, Coord
    from grafen.structure import BaseComponent

    def _make(lower, upper, name="mask"):
        return BaseComponent(
            residues=[],
            positions=np.zeros((0, 3)),
            box=BoundingBox(Coord(*lower), Coord(*upper)),
            name=name,
        )

    return _make


# ---------------------------------------------------------------------------
# File fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def water_atoms() -> list:
    """(residue number, atom name, x, y, z) rows of the three-water structure."""
    return list(WATER_ATOMS)


@pytest.fixture(scope="session")
def make_gro():
    """The GROMOS87 text renderer used to write the structure fixtures."""
    return gro_text


@pytest.fixture
def water_gro(tmp_path) -> Path:
    path = tmp_path / "water.gro"
    path.write_text(gro_text("Three waters", WATER_ATOMS))
    return path


@pytest.fixture
def database(tmp_path, water_gro, carbon, water, silica):
    """
    A database located at tmp_path/grafen.json with residue definitions
    GRA, SOL and SIO and the presets:

    graphene    hexagonal GRA sheet, 2 x 2 nm by default
    silica      triclinic SIO sheet (a = 0.45, gamma = 60), no default size
    nanotube    hollow hexagonal GRA cylinder, radius 0.5, length 2.0
    amorphous   Poisson-disc GRA sheet, density 10 / nm^2, 2 x 2 nm
    water       the water.gro structure, by relative path
    solvent     SOL volume, 1 x 1 x 1 nm at 30 residues / nm^3
    """
    from grafen.database import ComponentDefinition, Database, LatticeConfig, write_database

    db = Database()
    for residue in (carbon, water, silica):
        db.add_residue(residue)

    db.add_component(ComponentDefinition(
        name="graphene", type="sheet", residue="GRA",
        lattice=LatticeConfig(type="hexagonal"), size=(2.0, 2.0),
    ))
    db.add_component(ComponentDefinition(
        name="silica", type="sheet", residue="SIO",
        lattice=LatticeConfig(type="triclinic", a=0.45, gamma=60.0),
    ))
    db.add_component(ComponentDefinition(
        name="nanotube", type="cylinder", residue="GRA",
        lattice=LatticeConfig(type="hexagonal"), radius=0.5, length=2.0,
    ))
    db.add_component(ComponentDefinition(
        name="amorphous", type="sheet", residue="GRA",
        lattice=LatticeConfig(type="poisson", density=10.0), size=(2.0, 2.0),
    ))
    db.add_component(ComponentDefinition(name="water", type="structure", path="water.gro"))
    db.add_component(ComponentDefinition(
        name="solvent", type="volume", residue="SOL", dimensions=(1.0, 1.0, 1.0), density=30.0,
    ))

    write_database(db, tmp_path / "grafen.json")
    return db


@pytest.fixture
def database_file(database) -> Path:
    return database.path


@pytest.fixture
def config_file(tmp_path, database_file) -> Path:
    """
    A system definition: a graphene substrate, a nanotube at (1, 1, 0.5) and
    the water structure with the residues inside the nanotube box cut away.
    Only the third water has its reference atom inside that box.
    """
    path = tmp_path / "system.yaml"
    path.write_text(textwrap.dedent("""\
        title: Test system
        output: out.gro
        database: grafen.json
        seed: 7
        components:
          - preset: graphene
            name: substrate
          - preset: nanotube
            name: tube
            position: [1.0, 1.0, 0.5]
          - preset: water
            cut:
              mask: tube
              keep_inside: false
    """))
    return path
