"""
grafen/builder.py

Construct a System from a validated system definition.

Components are built in definition order.  Each is created at the origin,
replicated periodically if requested, translated to its position and, if
requested, cut against the current box of an earlier component.
Components marked `include: false` are built (they can act as masks) but
left out of the system.

One random generator, seeded from the definition, is shared by every
component so that a seeded definition always builds the same system.
"""

from __future__ import annotations

import logging

import numpy as np

from grafen.config import ComponentConfig, SystemConfig
from grafen.database import ComponentDefinition, Database, read_database
from grafen.errors import DatabaseError
from grafen.structure import (
    LoadedStructure,
    create_cylinder,
    create_sheet,
    create_volume,
    cut,
    pbc_multiply,
    translate,
)
from grafen.system import System

logger = logging.getLogger(__name__)


def _pick(override, default):
    return default if override is None else override


def _required(value, what: str, label: str):
    if value is None:
        raise ValueError(f"Component '{label}': no {what} given and the preset has no default.")
    return value


def _from_preset(
    entry: ComponentConfig,
    definition: ComponentDefinition,
    database: Database,
    rng: np.random.Generator,
):
    label = entry.label

    if definition.type == "structure":
        return LoadedStructure.from_file(database.resolve_path(definition.path), name=label)

    residue = database.get_residue(definition.residue)

    if definition.type == "volume":
        density, num_residues = definition.density, definition.num_residues
        if entry.density is not None or entry.num_residues is not None:
            density, num_residues = entry.density, entry.num_residues
        if density is None and num_residues is None:
            raise ValueError(
                f"Component '{label}': no density or num_residues given "
                "and the preset has no default."
            )
        return create_volume(
            residue,
            _required(_pick(entry.dimensions, definition.dimensions), "dimensions", label),
            density=density,
            num_residues=num_residues,
            rng=rng,
            name=label,
        )

    lattice = definition.lattice.build()

    if definition.type == "sheet":
        return create_sheet(
            lattice,
            residue,
            _required(_pick(entry.size, definition.size), "size", label),
            normal=_pick(entry.normal, definition.normal),
            z_offset=_pick(entry.z_offset, definition.z_offset),
            std_z=_pick(entry.std_z, definition.std_z),
            periodic=_pick(entry.periodic, definition.periodic),
            rng=rng,
            name=label,
        )

    return create_cylinder(
        lattice,
        residue,
        radius=_required(_pick(entry.radius, definition.radius), "radius", label),
        length=_required(_pick(entry.length, definition.length), "length", label),
        filled=_pick(entry.filled, definition.filled),
        alignment=_pick(entry.alignment, definition.alignment),
        cap=_pick(entry.cap, definition.cap),
        rng=rng,
        name=label,
    )


def build_component(
    entry: ComponentConfig,
    config: SystemConfig,
    database: Database | None,
    rng: np.random.Generator,
):
    """
    Build one component at the origin.

    Raises
    ------
    DatabaseError
        If a preset is requested without a database, or is not defined in it.
    """
    if entry.path is not None:
        return LoadedStructure.from_file(config.resolve(entry.path), name=entry.label)

    if database is None:
        raise DatabaseError(
            f"Component '{entry.label}' uses preset '{entry.preset}' but no database is set."
        )
    return _from_preset(entry, database.get_component(entry.preset), database, rng)


def build_system(
    config: SystemConfig,
    database: Database | None = None,
    rng: np.random.Generator | None = None,
) -> System:
    """
    Build every component of `config` and compose the system.

    Parameters
    ----------
    config:
        Validated system definition.
    database:
        Database to take presets from.  Read from `config.database` if None.
    rng:
        Random generator.  Seeded from `config.seed` if None.
    """
    if database is None and config.database is not None:
        database = read_database(config.resolve(config.database))
    if rng is None:
        rng = np.random.default_rng(config.seed)

    system = System(title=config.title)
    built = {}

    for entry in config.components:
        component = build_component(entry, config, database, rng)
        if entry.replicate is not None:
            component = pbc_multiply(component, *entry.replicate)
        component = translate(component, entry.position)
        if entry.cut is not None:
            component = cut(component, built[entry.cut.mask], keep_inside=entry.cut.keep_inside)

        built[entry.label] = component
        if entry.include:
            system.add(component)

    logger.info(
        "Built '%s': %d components, %d residues, %d atoms",
        system.title, len(system), system.num_residues, system.num_atoms,
    )
    return system
