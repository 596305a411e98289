"""
grafen/structure/edit.py

Pure editing operations on components.

Every function returns a new component and leaves its inputs untouched;
the in-place `BaseComponent.translate` is used on a copy.

Cutting works on whole residues: a residue is kept or dropped depending on
where its reference point (placement position) lies relative to the mask
box.  Atoms of a kept residue near the boundary may therefore extend past
the mask.

Replication needs a periodic component (a volume, or a sheet built as a
periodic cell).  Copies are laid out along the positive axes, cell by cell,
with the placements of each copy in their original order.

Usage
-----
    from grafen.structure.edit import cut, pbc_multiply, translate

    moved = translate(sheet, (1.0, 1.0, 0.0))
    inner = cut(sheet, mask=moved, keep_inside=True)
    solvent = pbc_multiply(water_box, 2, 2, 1)
"""

from __future__ import annotations

import logging
from dataclasses import replace

import numpy as np

from grafen.coord import Coord
from grafen.errors import DegenerateCut

logger = logging.getLogger(__name__)


def translate(component, offset):
    """Return a copy of `component` with every placement and its box shifted by `offset`."""
    moved = component.copy()
    moved.translate(offset)
    return moved


def cut(component, mask, keep_inside: bool = True):
    """
    Keep the residues of `component` inside (or outside) the box of `mask`.

    Parameters
    ----------
    component:
        Component to cut.
    mask:
        Component whose bounding box is the cutting volume.  The box is
        closed, so residues on a face count as inside.
    keep_inside:
        Keep the residues inside the mask if True, else those outside.

    Returns
    -------
    A new component of the same type whose box is recomputed from the
    surviving residues.  Cutting away everything is valid and gives a
    zero-volume box at the component origin.

    Raises
    ------
    DegenerateCut
        If the mask box has zero volume.
    """
    if mask.box.is_degenerate:
        raise DegenerateCut(
            f"Cannot cut with '{mask.label()}': its bounding box {mask.box} has no volume."
        )

    inside = mask.box.contains(component.positions)
    keep = inside if keep_inside else ~inside
    result = component.select(keep)

    logger.info(
        "Cut '%s' %s '%s': kept %d of %d residues",
        component.label(), "inside" if keep_inside else "outside", mask.label(),
        result.num_residues, component.num_residues,
    )
    return result


def pbc_multiply(component, nx: int, ny: int, nz: int = 1):
    """
    Replicate a periodic component nx, ny and nz times along x, y and z.

    Returns
    -------
    A new component of the same type holding nx * ny * nz copies of the
    placements, with its periodic cell and box grown to match.

    Raises
    ------
    ValueError
        If a count is below 1, if the component has no periodic cell, or if
        it is replicated along an axis where its cell has no extent.
    """
    counts = np.array([nx, ny, nz])
    if np.any(counts < 1):
        raise ValueError(f"Replication counts must be at least 1, got ({nx}, {ny}, {nz}).")

    cell = component.periodic_cell()
    if cell is None:
        raise ValueError(f"Cannot replicate '{component.label()}': it has no periodic cell.")
    cell = cell.to_array()
    if np.any((counts > 1) & (cell <= 0.0)):
        raise ValueError(
            f"Cannot replicate '{component.label()}' ({nx}, {ny}, {nz}) times: "
            f"its periodic cell {tuple(cell)} has no extent along a replicated axis."
        )

    shifts = np.array([
        (i, j, k) for i in range(nx) for j in range(ny) for k in range(nz)
    ], dtype=float) * cell
    positions = (shifts[:, None, :] + component.positions[None, :, :]).reshape(-1, 3)
    box = component.box.union(component.box.translate(Coord.from_array(shifts[-1])))

    result = replace(
        component,
        residues=list(component.residues) * len(shifts),
        positions=positions,
        box=box,
        **component.replicated_fields(nx, ny, nz),
    )
    logger.info(
        "Replicated '%s' (%d, %d, %d) times: %d residues",
        component.label(), nx, ny, nz, result.num_residues,
    )
    return result
