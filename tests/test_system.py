from __future__ import annotations

import numpy as np
import pytest


@pytest.fixture
def two_component_system(hex_lattice, carbon, water_gro):
    from grafen.structure import LoadedStructure, create_sheet, translate
    from grafen.system import System

    sheet = create_sheet(hex_lattice, carbon, (1.0, 1.0), name="sheet")
    water = translate(LoadedStructure.from_file(water_gro), (0.0, 0.0, 1.0))
    return System("Sheet and water", [sheet, water])


class TestIndexing:

    def test_atom_indices_contiguous_from_one(self, two_component_system):
        indices = [atom.index for atom in two_component_system.iter_atoms()]
        assert indices == list(range(1, two_component_system.num_atoms + 1))

    def test_residue_indices_contiguous_from_one(self, two_component_system):
        residue_indices = [atom.residue_index for atom in two_component_system.iter_atoms()]
        assert residue_indices[0] == 1
        assert residue_indices[-1] == two_component_system.num_residues
        assert set(np.diff(residue_indices)) <= {0, 1}

    def test_component_then_residue_then_atom_order(self, two_component_system):
        sheet, water = two_component_system.components
        atoms = list(two_component_system.iter_atoms())

        assert all(a.residue_name == "GRA" for a in atoms[:sheet.num_atoms])
        assert [a.atom_name for a in atoms[sheet.num_atoms:sheet.num_atoms + 3]] == ["OW", "HW1", "HW2"]
        assert atoms[-1].atom_name == "HW2"

    def test_counts_sum_over_components(self, two_component_system):
        sheet, water = two_component_system.components
        assert two_component_system.num_atoms == sheet.num_atoms + water.num_atoms == sheet.num_atoms + 9
        assert two_component_system.num_residues == sheet.num_residues + 3

    def test_positions_are_absolute(self, two_component_system):
        from grafen.coord import Coord

        atoms = list(two_component_system.iter_atoms())
        sheet = two_component_system.components[0]
        first_water = atoms[sheet.num_atoms]
        assert first_water.position.isclose(Coord(0.126, 1.624, 2.679))

    def test_indexing_restarts_on_each_iteration(self, two_component_system):
        first = [a.index for a in two_component_system.iter_atoms()]
        second = [a.index for a in two_component_system.iter_atoms()]
        assert first == second


class TestSystem:

    def test_box_is_union_of_component_boxes(self, two_component_system):
        sheet, water = two_component_system.components
        box = two_component_system.box
        assert box == sheet.box.union(water.box)

    def test_empty_system(self):
        from grafen.coord import Coord
        from grafen.system import System

        system = System("Empty")
        assert system.num_atoms == 0
        assert list(system.iter_atoms()) == []
        assert system.box.lower == system.box.upper == Coord.ORIGO

    def test_add(self, graphene_sheet):
        from grafen.system import System

        system = System("One")
        system.add(graphene_sheet)
        assert len(system) == 1
        assert system.num_atoms == graphene_sheet.num_atoms

    def test_to_atoms(self, two_component_system):
        atoms = two_component_system.to_atoms()
        indexed = list(two_component_system.iter_atoms())

        assert len(atoms) == two_component_system.num_atoms
        assert np.allclose(atoms.positions[0], indexed[0].position.to_array() * 10.0)
        symbols = atoms.get_chemical_symbols()
        assert set(symbols) == {"C", "O", "H"}
        assert list(atoms.arrays["residuenumbers"][:2]) == [1, 2]

    def test_describe(self, two_component_system):
        text = two_component_system.describe()
        assert text.startswith("Sheet and water")
        assert "sheet" in text


class TestGuessSymbol:

    @pytest.mark.parametrize("name, residue, symbol", [
        ("C", "GRA", "C"),
        ("OW", "SOL", "O"),
        ("HW1", "SOL", "H"),
        ("SI", "SIO", "Si"),
        ("O1", "SIO", "O"),
        ("ZN", "ZN", "Zn"),
        ("MG", "LIG", "Mg"),
        ("123", None, "X"),
    ])
    def test_guess(self, name, residue, symbol):
        from grafen.io.ase_bridge import guess_symbol
        assert guess_symbol(name, residue) == symbol

    @pytest.mark.parametrize("name, residue, symbol", [
        ("CA", "ALA", "C"),
        ("HO", "MOL", "H"),
        ("NA", "ARG", "N"),
        ("CL", None, "C"),
    ])
    def test_organic_names_read_as_single_element(self, name, residue, symbol):
        from grafen.io.ase_bridge import guess_symbol
        assert guess_symbol(name, residue) == symbol

    @pytest.mark.parametrize("name, symbol", [("CA", "Ca"), ("CL", "Cl"), ("NA", "Na")])
    def test_monatomic_ions_keep_two_letter_symbol(self, name, symbol):
        from grafen.io.ase_bridge import guess_symbol
        assert guess_symbol(name, residue_name=name) == symbol
