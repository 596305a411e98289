"""
grafen/errors.py

Exception hierarchy for grafen.

Every error raised deliberately by the library derives from GrafenError.
Errors caused by bad input values also derive from ValueError, so callers
that already guard with ``except ValueError`` keep working.
"""

from __future__ import annotations


class GrafenError(Exception):
    """Base class for all grafen errors."""


class InvalidSpacing(GrafenError, ValueError):
    """A lattice spacing or density is non-positive, or an angle is outside (0, 180) degrees."""


class InvalidFootprint(GrafenError, ValueError):
    """A requested width, height, radius or length is non-positive."""


class InvalidResidueTemplate(GrafenError, ValueError):
    """A residue template has duplicate or over-long atom names."""


class EmptyResidueTemplate(InvalidResidueTemplate):
    """A residue template has no atoms."""


class DegenerateCut(GrafenError, ValueError):
    """The mask used for a cut has a zero-volume bounding box."""


class StructureFormatError(GrafenError, ValueError):
    """A structure file could not be parsed."""


class DatabaseError(GrafenError):
    """A database definition is missing or the database path is unusable."""
