"""Shrake-Rupley SASA oracle built on MDTraj.

MDTraj's ``shrake_rupley`` is significantly faster than the MDAnalysis
alternatives. It works in nanometres and needs a topology only to look up
per-element radii, so each call uses a single-residue topology holding
exactly the requested atoms, in index order. Those topologies are cached per
atom subset, so subsets that recur across frames are built once.
Coordinates come from the explicit :class:`FrameContext` (Angstroms) and are
converted to nm.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Mapping, Sequence

import mdtraj as md
import numpy as np
from mdtraj.geometry.sasa import _ATOMIC_RADII

from contactsurf.core.atomset import AtomSet, FrameContext
from contactsurf.core.constants import ANG_TO_NM, DEFAULT_N_SPHERE_POINTS, NM2_TO_ANG2
from contactsurf.exceptions import EmptySelectionError, GeometryEngineError

logger = logging.getLogger(__name__)

# Subset topologies kept per oracle
TOPOLOGY_CACHE_SIZE = 256


def resolve_element(symbol: str, name: str = "", guess: bool = True) -> md.element.Element:
    """Map an element symbol (or, failing that, an atom name) to an MDTraj element.

    Name-based guessing tries the one-letter symbol first, so ``CA`` is an
    alpha carbon rather than calcium. With ``guess=False`` the name is ignored.
    Unknown atoms map to ``md.element.virtual``; they need an explicit radius
    to take part in SASA.
    """
    candidates = []
    if symbol and symbol.strip():
        candidates.append(symbol.strip().capitalize())
    letters = "".join(c for c in name if c.isalpha()) if guess else ""
    if letters:
        candidates.extend([letters[:1].upper(), letters[:2].capitalize()])

    for candidate in candidates:
        try:
            return md.element.get_by_symbol(candidate)
        except KeyError:
            continue
    return md.element.virtual


class ShrakeRupleySASA:
    """SASA oracle for a fixed topology.

    Parameters
    ----------
    elements : sequence of md.element.Element
        Element of every atom in the topology.
    n_sphere_points : int
        Sphere points per atom. Higher is more accurate but slower.
    radii : mapping of str to float, optional
        Element symbol to van der Waals radius in Angstroms, overriding or
        extending MDTraj's table. Virtual sites (``VS``) only take part in
        SASA when given a radius here.
    """

    def __init__(
        self,
        elements: Sequence[md.element.Element],
        n_sphere_points: int = DEFAULT_N_SPHERE_POINTS,
        radii: Mapping[str, float] | None = None,
    ):
        self._elements = list(elements)
        self.n_sphere_points = int(n_sphere_points)
        self.radii = dict(radii or {})
        self._change_radii_nm = {k: v * ANG_TO_NM for k, v in self.radii.items()} or None
        self._topology_cache = lru_cache(maxsize=TOPOLOGY_CACHE_SIZE)(self._build_topology)

    @property
    def n_atoms(self) -> int:
        return len(self._elements)

    def missing_radii(self, atoms: AtomSet) -> list[str]:
        """Element symbols in *atoms* that have no SASA radius."""
        # MDTraj gives virtual sites a zero radius
        known = {symbol for symbol, radius in _ATOMIC_RADII.items() if radius > 0}
        known |= set(self.radii)
        symbols = {self._elements[i].symbol for i in atoms}
        return sorted(symbols - known)

    def check(self, atoms: AtomSet) -> None:
        """Raise GeometryEngineError when some atoms have no radius."""
        missing = self.missing_radii(atoms)
        if missing:
            raise GeometryEngineError(
                f"No SASA radius for element(s) {missing}; "
                "add them under 'sasa.radii' (Angstroms) in the configuration"
            )

    def _build_topology(self, indices: tuple[int, ...]) -> md.Topology:
        top = md.Topology()
        chain = top.add_chain()
        residue = top.add_residue("SUB", chain)
        for i in indices:
            top.add_atom(f"A{i}", self._elements[i], residue)
        return top

    def topology_for(self, atoms: AtomSet) -> md.Topology:
        """Single-residue topology of *atoms*, in index order."""
        return self._topology_cache(tuple(int(i) for i in atoms))

    def __call__(self, atoms: AtomSet, probe_radius: float, frame: FrameContext) -> float:
        if not atoms:
            raise EmptySelectionError("SASA requested for an empty atom subset")
        if atoms.indices[-1] >= frame.n_atoms:
            raise GeometryEngineError(
                f"Atom index {atoms.indices[-1]} out of range for frame with {frame.n_atoms} atoms"
            )

        xyz = frame.coordinates(atoms)[np.newaxis, :, :] * ANG_TO_NM
        traj = md.Trajectory(xyz=xyz, topology=self.topology_for(atoms))
        try:
            per_atom = md.shrake_rupley(
                traj,
                probe_radius=probe_radius * ANG_TO_NM,
                n_sphere_points=self.n_sphere_points,
                mode="atom",
                change_radii=self._change_radii_nm,
            )
        except (KeyError, ValueError, RuntimeError) as e:
            raise GeometryEngineError(
                f"Shrake-Rupley failed for {len(atoms)} atoms in frame {frame.index}: {e}"
            ) from e

        return float(np.sum(per_atom[0])) * NM2_TO_ANG2
