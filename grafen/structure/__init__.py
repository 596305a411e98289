"""
grafen.structure

Components and the operations that build and edit them.

Submodules
----------
component   BaseComponent: the capability set shared by every variant
sheet       Sheet and create_sheet
cylinder    Cylinder, CylinderCap and create_cylinder
volume      Volume and create_volume, cuboids filled with residues
loaded      LoadedStructure, read from structure files
edit        translate, cut and pbc_multiply
"""

from typing import Union

from grafen.structure.component import BaseComponent
from grafen.structure.cylinder import Cylinder, CylinderCap, create_cylinder
from grafen.structure.edit import cut, pbc_multiply, translate
from grafen.structure.loaded import LoadedStructure
from grafen.structure.sheet import Sheet, create_sheet
from grafen.structure.volume import Volume, create_volume

Component = Union[Sheet, Cylinder, Volume, LoadedStructure]

__all__ = [
    "BaseComponent",
    "Component",
    "Cylinder",
    "CylinderCap",
    "LoadedStructure",
    "Sheet",
    "Volume",
    "create_cylinder",
    "create_sheet",
    "create_volume",
    "cut",
    "pbc_multiply",
    "translate",
]
