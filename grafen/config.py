"""
grafen/config.py

Load and validate a system definition YAML file into typed models.

Usage
-----
    from grafen.config import load_config

    cfg = load_config("system.yaml")
    print(cfg.title)
    for component in cfg.components:
        print(component.label, component.position)

A system definition lists components in output order.  Each one is either
a preset from the database (`preset`) or a structure file (`path`), placed
at `position` and optionally cut against the box of an earlier component.
Relative paths are resolved against the directory of the YAML file.

All models use pydantic v2.
"""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from grafen.coord import Direction
from grafen.structure.cylinder import CylinderCap


# ---------------------------------------------------------------------------
# Sub-models
# ---------------------------------------------------------------------------


class CutConfig(BaseModel):
    """Cut a component against the bounding box of an earlier component."""

    mask: str                           # name of an earlier component
    keep_inside: bool = True            # False keeps the residues outside the mask


class ComponentConfig(BaseModel):
    """
    One component of the system.

    Give exactly one of `preset` (a component definition in the database) or
    `path` (a structure file).  Shape fields left unset fall back to the
    preset's values.
    """

    name: str | None = None
    preset: str | None = None
    path: str | None = None

    # Shape overrides
    size: tuple[float, float] | None = None
    normal: Direction | None = None
    z_offset: float | None = None
    std_z: float | None = None
    periodic: bool | None = None
    radius: float | None = None
    length: float | None = None
    filled: bool | None = None
    alignment: Direction | None = None
    cap: CylinderCap | None = None
    dimensions: tuple[float, float, float] | None = None
    density: float | None = None
    num_residues: int | None = None

    replicate: tuple[int, int, int] | None = None   # periodic copies along x, y, z
    position: tuple[float, float, float] = (0.0, 0.0, 0.0)
    cut: CutConfig | None = None
    include: bool = True                # False: build only to serve as a cut mask

    @model_validator(mode="after")
    def _preset_or_path(self) -> "ComponentConfig":
        if (self.preset is None) == (self.path is None):
            raise ValueError(
                f"Component '{self.label}': give exactly one of 'preset' or 'path'."
            )
        return self

    @model_validator(mode="after")
    def _one_fill_amount(self) -> "ComponentConfig":
        if self.density is not None and self.num_residues is not None:
            raise ValueError(
                f"Component '{self.label}': give at most one of 'density' or 'num_residues'."
            )
        return self

    @field_validator("replicate")
    @classmethod
    def _positive_counts(cls, v: tuple[int, int, int] | None) -> tuple[int, int, int] | None:
        if v is not None and min(v) < 1:
            raise ValueError(f"replicate counts must be at least 1, got {v}.")
        return v

    @field_validator("std_z")
    @classmethod
    def _non_negative_std_z(cls, v: float | None) -> float | None:
        if v is not None and v < 0:
            raise ValueError(f"std_z must be non-negative, got {v}.")
        return v

    @property
    def label(self) -> str:
        if self.name is not None:
            return self.name
        if self.preset is not None:
            return self.preset
        return Path(self.path).stem if self.path else "Unnamed"


# ---------------------------------------------------------------------------
# Root config model
# ---------------------------------------------------------------------------


class SystemConfig(BaseModel):
    """
    Root configuration object loaded from a system definition.

    Example
    -------
    .. code-block:: yaml

        title: Graphene with water
        output: system.gro
        database: grafen.json
        seed: 42

        components:
          - preset: nanotube
            name: tube
            radius: 0.8
            length: 3.0
          - path: water.gro
            position: [-1.5, -1.5, 0.0]
            cut:
              mask: tube
              keep_inside: false
    """

    title: str = "System"
    output: str = "system.gro"
    database: str | None = None
    seed: int | None = None
    components: list[ComponentConfig]

    base_dir: Path | None = Field(default=None, exclude=True)

    @model_validator(mode="after")
    def _at_least_one_component(self) -> "SystemConfig":
        if len(self.components) == 0:
            raise ValueError("At least one component must be defined.")
        return self

    @model_validator(mode="after")
    def _unique_component_names(self) -> "SystemConfig":
        labels = [c.label for c in self.components]
        if len(labels) != len(set(labels)):
            raise ValueError(
                f"Component names must be unique (set 'name' to tell repeated presets apart), "
                f"got: {labels}"
            )
        return self

    @model_validator(mode="after")
    def _masks_defined_earlier(self) -> "SystemConfig":
        seen: set[str] = set()
        for component in self.components:
            if component.cut is not None and component.cut.mask not in seen:
                raise ValueError(
                    f"Component '{component.label}' is cut by '{component.cut.mask}', "
                    "which must be a component defined before it."
                )
            seen.add(component.label)
        return self

    def resolve(self, path: str | Path) -> Path:
        """Resolve `path` against the directory of the configuration file."""
        path = Path(path)
        if path.is_absolute() or self.base_dir is None:
            return path
        return self.base_dir / path


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------


def load_config(path: str | Path) -> SystemConfig:
    """
    Load and validate a system definition file.

    Parameters
    ----------
    path:
        Path to the YAML file.

    Returns
    -------
    SystemConfig
        Validated configuration.  Relative paths in it resolve against the
        directory of `path`.

    Raises
    ------
    FileNotFoundError
        If the YAML file does not exist.
    ValueError
        If the file is empty or its top level is not a mapping.
    pydantic.ValidationError
        If the YAML content fails validation.
    yaml.YAMLError
        If the file is not valid YAML.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    if path.stat().st_size == 0:
        raise ValueError(
            f"Configuration file is empty: {path}\n"
            "Generate a template with: grafen init > system.yaml"
        )

    with path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)

    if raw is None:
        raise ValueError(
            f"{path} contains only comments or whitespace, no YAML keys found.\n"
            "Generate a template with: grafen init > system.yaml"
        )
    if not isinstance(raw, dict):
        raise ValueError(
            f"Expected a YAML mapping at the top level, got {type(raw).__name__}.  "
            "Make sure the file starts with a key like 'title:' at column 0."
        )

    config = SystemConfig.model_validate(raw)
    config.base_dir = path.parent
    return config


def generate_example_config() -> str:
    """
    Return a fully commented example system definition.

    Printed by `grafen init` when no configuration file is found.
    """
    return """\
# system.yaml: grafen system definition
# All paths are relative to this file's location unless absolute.

title: Graphene with water     # Title line of the output file
output: system.gro             # .gro is written natively, other suffixes through ASE
database: grafen.json          # Residue and component definitions
seed: 42                       # Seed for Poisson-disc lattices and z jitter (optional)

# ---------------------------------------------------------------------------
# Components, written in this order
# ---------------------------------------------------------------------------
components:
  - preset: graphene           # A sheet definition from the database
    name: substrate
    size: [4.0, 4.0]           # Footprint (nm), the lattice is clipped to it
    periodic: false            # true: whole periodic cell, footprint snapped to the lattice
    position: [0.0, 0.0, 0.0]

  - preset: nanotube           # A cylinder definition from the database
    name: tube
    radius: 0.8
    length: 3.0
    filled: false
    alignment: z
    cap: bottom                # bottom | top | both (hollow cylinders only)
    position: [2.0, 2.0, 0.5]

  - path: water.gro            # A structure file
    position: [0.0, 0.0, 1.0]
    cut:                       # Drop the water residues inside the nanotube box
      mask: tube
      keep_inside: false

  # A volume definition fills a box with residues, e.g. a solvent slab:
  # - preset: solvent
  #   dimensions: [2.0, 2.0, 1.0]  # Cuboid size (nm)
  #   density: 33.4                # Residues per nm^3, or num_residues: 130
  #   replicate: [2, 2, 1]         # Periodic copies along x, y, z
  #   position: [0.0, 0.0, 2.0]
"""
