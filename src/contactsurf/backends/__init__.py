"""Geometry backends supplying selections, frames and SASA."""

from contactsurf.backends.base import GeometryBackend, SASAOracle
from contactsurf.backends.mdanalysis import MDAnalysisBackend
from contactsurf.backends.sasa import ShrakeRupleySASA, resolve_element

__all__ = [
    "GeometryBackend",
    "SASAOracle",
    "MDAnalysisBackend",
    "ShrakeRupleySASA",
    "resolve_element",
]
