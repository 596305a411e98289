"""
grafen/database.py

A JSON database of residue definitions and component presets.

Residue definitions are named residue templates.  Component definitions are
named construction presets:

    sheet       a lattice and a residue definition, with a default size
    cylinder    a lattice and a residue definition, with a default radius,
                length and hollow/filled variant
    volume      a residue definition filling a cuboid to a density or count
    structure   a structure file on disk

Relative structure paths are resolved against the directory of the
database file, so a database and its structure files can be moved together.

Usage
-----
    from grafen.database import read_database

    db = read_database("grafen.json")
    carbon = db.get_residue("GRA")
    preset = db.get_component("graphene")
    print(db.describe())

All models use pydantic v2 and are stored with `model_dump_json`.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from grafen.coord import Coord, Direction
from grafen.errors import DatabaseError
from grafen.lattice import HexagonalLattice, PoissonDiscLattice, TriclinicLattice
from grafen.residue import Atom, Residue
from grafen.structure.cylinder import CylinderCap

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Residues
# ---------------------------------------------------------------------------


class AtomDefinition(BaseModel):
    name: str
    position: tuple[float, float, float] = (0.0, 0.0, 0.0)   # offset from residue origin (nm)


class ResidueDefinition(BaseModel):
    """A residue template as stored on disk."""

    name: str
    atoms: list[AtomDefinition]

    def to_residue(self) -> Residue:
        """Raises InvalidResidueTemplate (or EmptyResidueTemplate) for a bad definition."""
        return Residue(
            self.name,
            tuple(Atom(atom.name, Coord(*atom.position)) for atom in self.atoms),
        )

    @classmethod
    def from_residue(cls, residue: Residue) -> "ResidueDefinition":
        return cls(
            name=residue.name,
            atoms=[AtomDefinition(name=a.name, position=a.position.to_tuple()) for a in residue.atoms],
        )

    def describe(self) -> str:
        return f"{self.name} ({', '.join(atom.name for atom in self.atoms)})"


# ---------------------------------------------------------------------------
# Lattices
# ---------------------------------------------------------------------------


class LatticeConfig(BaseModel):
    """
    A lattice definition.

    type options
    ------------
    "hexagonal"  – honeycomb with bond length `a` (default 0.142 nm)
    "triclinic"  – base vectors `a`, `b` (default `a`) at angle `gamma` (default 60)
    "poisson"    – Poisson-disc distribution with `density` or `rmin`
    """

    type: str
    a: float | None = None
    b: float | None = None
    gamma: float = 60.0
    density: float | None = None
    rmin: float | None = None

    @field_validator("type")
    @classmethod
    def _valid_type(cls, v: str) -> str:
        allowed = {"hexagonal", "triclinic", "poisson"}
        if v not in allowed:
            raise ValueError(f"lattice type must be one of {allowed}, got '{v}'.")
        return v

    @model_validator(mode="after")
    def _triclinic_needs_a(self) -> "LatticeConfig":
        if self.type == "triclinic" and self.a is None:
            raise ValueError("A triclinic lattice needs the base vector length 'a'.")
        return self

    def build(self):
        """Construct the lattice.  Raises InvalidSpacing for out-of-range values."""
        if self.type == "hexagonal":
            return HexagonalLattice() if self.a is None else HexagonalLattice(a=self.a)
        if self.type == "triclinic":
            return TriclinicLattice(a=self.a, b=self.b, gamma=self.gamma)
        return PoissonDiscLattice(density=self.density, rmin=self.rmin)


# ---------------------------------------------------------------------------
# Components
# ---------------------------------------------------------------------------


class ComponentDefinition(BaseModel):
    """
    A named construction preset.

    type options
    ------------
    "sheet"      – needs `residue` and `lattice`; `size` is the default footprint
    "cylinder"   – needs `residue` and `lattice`; `radius` and `length` are defaults
    "volume"     – needs `residue`; `dimensions` and `density` or `num_residues`
                   are defaults
    "structure"  – needs `path` to a structure file
    """

    name: str
    type: str
    residue: str | None = None          # name of a residue definition
    lattice: LatticeConfig | None = None

    # Sheet
    size: tuple[float, float] | None = None
    normal: Direction = Direction.Z
    z_offset: float = 0.0
    std_z: float | None = None
    periodic: bool = False

    # Cylinder
    radius: float | None = None
    length: float | None = None
    filled: bool = False
    alignment: Direction = Direction.Z
    cap: CylinderCap | None = None

    # Volume
    dimensions: tuple[float, float, float] | None = None
    density: float | None = None        # residues per nm^3
    num_residues: int | None = None

    # Structure
    path: str | None = None

    @field_validator("type")
    @classmethod
    def _valid_type(cls, v: str) -> str:
        allowed = {"sheet", "cylinder", "volume", "structure"}
        if v not in allowed:
            raise ValueError(f"component type must be one of {allowed}, got '{v}'.")
        return v

    @model_validator(mode="after")
    def _required_fields(self) -> "ComponentDefinition":
        if self.type == "structure":
            if self.path is None:
                raise ValueError(f"Component '{self.name}': a structure needs a 'path'.")
        elif self.type == "volume":
            if self.residue is None:
                raise ValueError(f"Component '{self.name}': a volume needs a 'residue'.")
            if self.density is not None and self.num_residues is not None:
                raise ValueError(
                    f"Component '{self.name}': give at most one of 'density' or 'num_residues'."
                )
        elif self.residue is None or self.lattice is None:
            raise ValueError(
                f"Component '{self.name}': a {self.type} needs both 'residue' and 'lattice'."
            )
        return self

    def describe(self) -> str:
        if self.type == "structure":
            return f"{self.name} (structure from '{self.path}')"

        if self.type == "volume":
            parts = [f"volume of {self.residue}"]
            if self.dimensions is not None:
                parts.append("size ({:.2f}, {:.2f}, {:.2f})".format(*self.dimensions))
            if self.density is not None:
                parts.append(f"density {self.density:.2f} / nm^3")
            if self.num_residues is not None:
                parts.append(f"{self.num_residues} residues")
            return f"{self.name} ({', '.join(parts)})"

        lattice = self.lattice.build().describe()
        if self.type == "sheet":
            size = "no default size" if self.size is None else (
                f"size ({self.size[0]:.2f}, {self.size[1]:.2f})"
            )
            periodic = ", periodic" if self.periodic else ""
            return f"{self.name} (sheet of {self.residue}, {size}{periodic}, {lattice})"

        variant = "filled" if self.filled else "hollow"
        dims = []
        if self.radius is not None:
            dims.append(f"radius {self.radius:.2f}")
        if self.length is not None:
            dims.append(f"length {self.length:.2f}")
        return (
            f"{self.name} ({variant} cylinder of {self.residue}"
            + (f", {', '.join(dims)}" if dims else "")
            + f", {lattice})"
        )


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


class Database(BaseModel):
    """Residue and component definitions, with the file they belong to."""

    residue_definitions: list[ResidueDefinition] = []
    component_definitions: list[ComponentDefinition] = []
    path: Path | None = Field(default=None, exclude=True)

    @model_validator(mode="after")
    def _unique_residue_names(self) -> "Database":
        names = [r.name for r in self.residue_definitions]
        if len(names) != len(set(names)):
            raise ValueError(f"Residue definition names must be unique, got: {names}")
        return self

    @model_validator(mode="after")
    def _unique_component_names(self) -> "Database":
        names = [c.name for c in self.component_definitions]
        if len(names) != len(set(names)):
            raise ValueError(f"Component definition names must be unique, got: {names}")
        return self

    # --- Lookup -----------------------------------------------------------------

    def get_residue(self, name: str) -> Residue:
        for definition in self.residue_definitions:
            if definition.name == name:
                return definition.to_residue()
        raise DatabaseError(
            f"No residue definition named '{name}' in database {self.path_pretty()}."
        )

    def get_component(self, name: str) -> ComponentDefinition:
        for definition in self.component_definitions:
            if definition.name == name:
                return definition
        raise DatabaseError(
            f"No component definition named '{name}' in database {self.path_pretty()}."
        )

    def resolve_path(self, path: str | Path) -> Path:
        """Resolve `path` against the directory of the database file."""
        path = Path(path)
        if path.is_absolute() or self.path is None:
            return path
        return self.path.parent / path

    # --- Editing ----------------------------------------------------------------

    def add_residue(self, residue: Residue) -> None:
        if any(r.name == residue.name for r in self.residue_definitions):
            raise DatabaseError(f"A residue definition named '{residue.name}' already exists.")
        self.residue_definitions.append(ResidueDefinition.from_residue(residue))

    def add_component(self, definition: ComponentDefinition) -> None:
        if any(c.name == definition.name for c in self.component_definitions):
            raise DatabaseError(f"A component definition named '{definition.name}' already exists.")
        self.component_definitions.append(definition)

    def set_path(self, path: str | Path) -> None:
        """
        Set the database location.  The suffix is always replaced by '.json'.

        Raises
        ------
        DatabaseError
            If `path` has no file name.
        """
        path = Path(path)
        if not path.stem:
            raise DatabaseError(f"Bad database path: '{path}' has no file name.")
        self.path = path.with_suffix(".json")

    # --- Description ------------------------------------------------------------

    def path_pretty(self) -> str:
        return f"'{self.path}'" if self.path is not None else "None"

    def describe(self) -> str:
        lines = [f"Database path: {self.path_pretty()}", "", "[ Component definitions ]"]
        lines += [f"{i:4d}. {c.describe()}" for i, c in enumerate(self.component_definitions)]
        lines += ["", "[ Residue definitions ]"]
        lines += [f"{i:4d}. {r.describe()}" for i, r in enumerate(self.residue_definitions)]
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Reading and writing
# ---------------------------------------------------------------------------


def read_database(path: str | Path) -> Database:
    """
    Read a JSON database.  The database remembers `path` as its location.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    DatabaseError
        If the content is not a valid database.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Database file not found: {path}")

    try:
        database = Database.model_validate_json(path.read_text(encoding="utf-8"))
    except ValidationError as exc:
        raise DatabaseError(f"Invalid database {path}:\n{exc}") from exc

    database.path = path
    logger.debug(
        "Read database %s: %d residues, %d components",
        path, len(database.residue_definitions), len(database.component_definitions),
    )
    return database


def write_database(database: Database, path: str | Path | None = None) -> Path:
    """
    Write a database as JSON, to `path` if given (which becomes its location).

    Raises
    ------
    DatabaseError
        If neither `path` nor the database's own path is set.
    """
    if path is not None:
        database.set_path(path)
    if database.path is None:
        raise DatabaseError("No path was set when trying to write the database to disk.")

    database.path.parent.mkdir(parents=True, exist_ok=True)
    database.path.write_text(
        database.model_dump_json(indent=2, exclude_none=True), encoding="utf-8"
    )
    logger.info("Wrote database to %s", database.path)
    return database.path
