"""Proximity filters on explicit frame coordinates.

Uses MDAnalysis ``capped_distance`` (cell-list / KD-tree neighbour search)
so that reducing a large molecule against another stays O(N) per frame.
Periodic boxes carried by the :class:`FrameContext` are honoured.
"""

from __future__ import annotations

import logging

import numpy as np
from MDAnalysis.lib.distances import capped_distance
from numpy.typing import NDArray

from contactsurf.core.atomset import AtomSet, FrameContext

logger = logging.getLogger(__name__)


def within(
    subject: AtomSet,
    reference: AtomSet,
    cutoff: float,
    frame: FrameContext,
) -> AtomSet:
    """Members of *subject* within *cutoff* of any atom of *reference*.

    Parameters
    ----------
    subject : AtomSet
        Atoms to filter.
    reference : AtomSet
        Atoms the distance is measured against.
    cutoff : float
        Distance cutoff in Angstroms (inclusive).
    frame : FrameContext
        Coordinates to evaluate the distances on.

    Returns
    -------
    AtomSet
        Subset of *subject*; empty when either input is empty or no atom
        qualifies.
    """
    if cutoff <= 0:
        raise ValueError(f"cutoff must be positive, got {cutoff}")
    if not subject or not reference:
        return AtomSet.empty()

    pairs = capped_distance(
        frame.coordinates(subject),
        frame.coordinates(reference),
        max_cutoff=cutoff,
        box=frame.box,
        return_distances=False,
    )
    if len(pairs) == 0:
        return AtomSet.empty()

    hits = np.zeros(len(subject), dtype=bool)
    hits[np.asarray(pairs)[:, 0]] = True
    return subject.mask(hits)


def same_residue_as(
    atoms: AtomSet,
    pool: AtomSet,
    resindices: NDArray[np.int64],
) -> AtomSet:
    """Expand *atoms* to every member of *pool* sharing a residue with them.

    Parameters
    ----------
    atoms : AtomSet
        Seed atoms (normally a subset of *pool*).
    pool : AtomSet
        Atoms eligible for inclusion.
    resindices : NDArray[np.int64]
        Residue index of every atom in the topology.
    """
    if not atoms or not pool:
        return AtomSet.empty()
    residues = np.unique(resindices[atoms.indices])
    return pool.mask(np.isin(resindices[pool.indices], residues))


def interface_trim(
    sel_a: AtomSet,
    sel_b: AtomSet,
    cutoff: float | None,
    frame: FrameContext,
    resindices: NDArray[np.int64] | None = None,
) -> tuple[AtomSet, AtomSet]:
    """Coarse whole-molecule trim of A and B to their mutual interface.

    Each side is reduced to the atoms within *cutoff* of the other full
    selection and, when *resindices* is given, expanded back to whole
    residues. A *cutoff* of None disables the trim.
    """
    if cutoff is None:
        return sel_a, sel_b

    near_a = within(sel_a, sel_b, cutoff, frame)
    near_b = within(sel_b, sel_a, cutoff, frame)
    if resindices is not None:
        near_a = same_residue_as(near_a, sel_a, resindices)
        near_b = same_residue_as(near_b, sel_b, resindices)

    logger.debug(
        f"Frame {frame.index}: interface trim at {cutoff:.2f} A kept "
        f"{len(near_a)}/{len(sel_a)} A atoms, {len(near_b)}/{len(sel_b)} B atoms"
    )
    return near_a, near_b
