from __future__ import annotations

from types import SimpleNamespace

import numpy as np
import pytest


def _fake_system(atoms, title="Fake", box_size=(1.0, 2.0, 3.0)):
    """Anything with title, num_atoms, iter_atoms() and box can be written."""
    from grafen.coord import BoundingBox, Coord

    return SimpleNamespace(
        title=title,
        num_atoms=len(atoms),
        iter_atoms=lambda: iter(atoms),
        box=BoundingBox(Coord.ORIGO, Coord(*box_size)),
    )


class TestFormat:

    def test_atom_line_columns(self):
        from grafen.coord import Coord
        from grafen.io import format_gromos
        from grafen.system import IndexedAtom

        atom = IndexedAtom(1, 1, "SOL", "OW", Coord(1.0, 2.0, 3.0))
        lines = format_gromos(_fake_system([atom])).splitlines()

        assert lines[0] == "Fake"
        assert lines[1] == "    1"
        assert lines[2] == "    1SOL     OW    1   1.000   2.000   3.000"
        assert lines[3] == "   1.00000   2.00000   3.00000"

    def test_numbers_wrap_at_five_digits(self):
        from grafen.coord import Coord
        from grafen.io import format_gromos
        from grafen.system import IndexedAtom

        atom = IndexedAtom(100001, 100002, "GRA", "C", Coord(0.0, 0.0, 0.0))
        line = format_gromos(_fake_system([atom])).splitlines()[2]

        assert line[0:5] == "    2"
        assert line[15:20] == "    1"
        assert len(line) == 44

    def test_system_output(self, hex_lattice, carbon):
        from grafen.io import format_gromos
        from grafen.structure import create_sheet
        from grafen.system import System

        system = System("Graphene", [create_sheet(hex_lattice, carbon, (1.0, 1.0))])
        lines = format_gromos(system).splitlines()

        assert len(lines) == system.num_atoms + 3
        assert int(lines[1]) == system.num_atoms
        assert lines[2][5:10] == "GRA  "
        assert lines[-2][15:20] == f"{system.num_atoms:5d}"

    def test_write_creates_parent_directories(self, tmp_path, graphene_sheet):
        from grafen.io import write_system
        from grafen.system import System

        path = write_system(System("Sheet", [graphene_sheet]), tmp_path / "out" / "sheet.gro")
        assert path.exists()
        assert path.read_text().startswith("Sheet\n")


class TestParse:

    def test_residues_grouped_by_number_and_name(self, water_gro):
        from grafen.io import read_gromos

        data = read_gromos(water_gro)
        assert data.title == "Three waters"
        assert len(data.residues) == 3
        assert data.num_atoms == 9
        assert data.residues[0].name == "SOL"
        assert data.residues[0].atom_names == ["OW", "HW1", "HW2"]
        assert np.allclose(data.residues[1].coords[0], [1.275, 0.053, 0.622])
        assert data.box_size.x == pytest.approx(1.86206)

    def test_same_number_different_name_starts_new_residue(self, make_gro):
        from grafen.io import parse_gromos

        text = make_gro("Mixed", [(1, "OW", 0, 0, 0), (1, "C", 1, 1, 1)])
        lines = text.splitlines()
        lines[3] = lines[3][:5] + "GRA  " + lines[3][10:]

        data = parse_gromos(lines)
        assert [r.name for r in data.residues] == ["SOL", "GRA"]

    def test_missing_box_line_is_allowed(self, make_gro):
        from grafen.io import parse_gromos

        lines = make_gro("No box", [(1, "C", 0.1, 0.2, 0.3)]).splitlines()[:-1]
        assert parse_gromos(lines).box_size is None

    def test_too_few_atom_lines_raises(self, make_gro, water_atoms):
        from grafen.errors import StructureFormatError
        from grafen.io import parse_gromos

        lines = make_gro("Short", water_atoms).splitlines()
        lines[1] = "   20"
        with pytest.raises(StructureFormatError):
            parse_gromos(lines[:12])

    def test_bad_atom_count_raises(self):
        from grafen.errors import StructureFormatError
        from grafen.io import parse_gromos

        with pytest.raises(StructureFormatError):
            parse_gromos(["title", "many", "    1SOL     OW    1   0.000   0.000   0.000"])

    def test_bad_coordinate_raises(self):
        from grafen.errors import StructureFormatError
        from grafen.io import parse_gromos

        with pytest.raises(StructureFormatError, match="Line 3"):
            parse_gromos(["title", "1", "    1SOL     OW    1   0.000   x.xxx   0.000"])

    def test_empty_file_raises(self):
        from grafen.errors import StructureFormatError
        from grafen.io import parse_gromos

        with pytest.raises(StructureFormatError):
            parse_gromos([])

    def test_missing_file_raises(self, tmp_path):
        from grafen.io import read_structure
        with pytest.raises(FileNotFoundError):
            read_structure(tmp_path / "missing.gro")


class TestLoadedStructure:

    def test_residues_relative_to_first_atom(self, water_gro):
        from grafen.coord import Coord
        from grafen.structure import LoadedStructure

        water = LoadedStructure.from_file(water_gro)
        assert water.num_residues == 3
        assert water.num_atoms == 9
        assert water.title == "Three waters"
        assert water.label() == "Three waters"

        residue = water.residues[0]
        assert residue.atoms[0].position == Coord.ORIGO
        assert np.allclose(water.positions[0], [0.126, 1.624, 1.679])
        assert np.allclose(residue.offsets[1], [0.064, 0.037, 0.068], atol=1e-9)

    def test_atoms_resolved_verbatim(self, water_gro, water_atoms):
        from grafen.structure import LoadedStructure

        water = LoadedStructure.from_file(water_gro)
        expected = np.array([atom[2:] for atom in water_atoms])
        assert np.allclose(water.atom_positions(), expected, atol=1e-9)

    def test_box_includes_file_box(self, water_gro):
        from grafen.coord import Coord
        from grafen.structure import LoadedStructure

        water = LoadedStructure.from_file(water_gro, name="water")
        assert water.box.lower == Coord.ORIGO
        assert water.box.upper.isclose(Coord(1.86206, 1.86206, 1.86206))
        assert water.label() == "water"

    def test_written_system_reads_back(self, tmp_path, hex_lattice, silica):
        from grafen.io import write_system
        from grafen.structure import LoadedStructure, create_sheet
        from grafen.system import System

        sheet = create_sheet(hex_lattice, silica, (1.0, 1.0))
        path = write_system(System("Silica", [sheet]), tmp_path / "silica.gro")
        loaded = LoadedStructure.from_file(path)

        assert loaded.num_residues == sheet.num_residues
        assert [a.name for a in loaded.residues[0].atoms] == ["SI", "O1", "O2"]
        assert np.allclose(loaded.atom_positions(), sheet.atom_positions(), atol=5e-4)


class TestAseFormats:

    def test_plain_xyz_reads_one_residue_per_atom(self, tmp_path):
        from grafen.structure import LoadedStructure

        path = tmp_path / "water.xyz"
        path.write_text("3\nwater\nO 0.0 0.0 0.0\nH 0.957 0.0 0.0\nH -0.24 0.927 0.0\n")

        loaded = LoadedStructure.from_file(path)
        assert loaded.num_residues == 3
        assert [r.name for r in loaded.residues] == ["O", "H", "H"]
        assert np.allclose(loaded.positions[1], [0.0957, 0.0, 0.0])

    def test_write_xyz(self, tmp_path, hex_lattice, carbon):
        from ase.io import read
        from grafen.io import write_system
        from grafen.structure import create_cylinder
        from grafen.system import System

        tube = create_cylinder(hex_lattice, carbon, radius=0.5, length=1.0)
        system = System("Tube", [tube])
        path = write_system(system, tmp_path / "tube.xyz")

        atoms = read(str(path))
        assert len(atoms) == system.num_atoms
        assert np.allclose(atoms.positions, tube.atom_positions() * 10.0, atol=1e-5)
