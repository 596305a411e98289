"""
grafen

Generate substrates (graphene sheets, silica monolayers, nanotubes) and
compose them with loaded structures into simulation systems.

Subpackages
-----------
lattice     Planar site generators: hexagonal, triclinic, Poisson-disc
structure   Components (sheets, cylinders, loaded structures) and editing
io          GROMOS87 reader/writer and the ASE bridge for other formats

Modules
-------
coord       Coordinates, directions and bounding boxes
residue     Residue templates and atoms
system      Composition and global atom indexing
database    JSON residue and component definitions
config      YAML system definitions
builder     System definition -> System
cli         The `grafen` command
"""

__version__ = "0.1.0"
