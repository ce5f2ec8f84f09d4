"""Decomposition of the A/B contact surface into interaction classes.

Per frame, A and B are split into polar (P) and nonpolar (NP) atoms and four
buried areas are measured::

    P:P    = area(PA, PB)
    NP:NP  = area(NPA, NPB)
    P:NP   = area(PA, NPB) + area(NPA, PB)
    total  = P:P + NP:NP + P:NP

The cross directions are summed rather than averaged: each is an
independent burial measurement between disjoint atom groups.

Modes
-----
``reduced``
    Before each pairwise area, both classified sets are reduced to the atoms
    within ``contact_cutoff`` of the opposite set (eight reduced sets for
    four pairs).
``direct``
    The classified selections are paired as they are. Cheaper, and tends to
    report larger P:NP cross terms than ``reduced``.
``total``
    No classification; a single area between the A and B atoms within
    ``contact_cutoff`` of each other.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

import numpy as np
from numpy.typing import NDArray

from contactsurf.core.atomset import AtomSet, FrameContext
from contactsurf.engine.area import ContactAreaEngine, ContactPair
from contactsurf.engine.classification import ClassifiedMolecule, classify
from contactsurf.engine.spatial import within
from contactsurf.results.contact_surface import DecompositionMode, InteractionClassAreas

logger = logging.getLogger(__name__)

PolarTest = Callable[[NDArray[np.int64]], NDArray[np.bool_]]


def reduce_pair(
    side_a: AtomSet,
    side_b: AtomSet,
    cutoff: float,
    frame: FrameContext,
    label: str = "",
) -> ContactPair:
    """Reduce both sides of a pair to the atoms in contact with the other side."""
    return ContactPair(
        side_a=within(side_a, side_b, cutoff, frame),
        side_b=within(side_b, side_a, cutoff, frame),
        label=label,
    )


def class_pairs(
    mol_a: ClassifiedMolecule,
    mol_b: ClassifiedMolecule,
    frame: FrameContext,
    contact_cutoff: float | None = None,
) -> tuple[ContactPair, ContactPair, ContactPair, ContactPair]:
    """Build the P:P, NP:NP, P:NP and NP:P ContactPairs.

    With *contact_cutoff* set, each pair is spatially reduced; otherwise the
    classified sets are used directly.
    """
    specs = (
        (mol_a.polar, mol_b.polar, "PA:PB"),
        (mol_a.nonpolar, mol_b.nonpolar, "NPA:NPB"),
        (mol_a.polar, mol_b.nonpolar, "PA:NPB"),
        (mol_a.nonpolar, mol_b.polar, "NPA:PB"),
    )
    if contact_cutoff is None:
        pairs = [ContactPair(a, b, label) for a, b, label in specs]
    else:
        pairs = [reduce_pair(a, b, contact_cutoff, frame, label) for a, b, label in specs]
    return pairs[0], pairs[1], pairs[2], pairs[3]


@dataclass(frozen=True)
class Decomposition:
    """Class areas of one frame plus the number of degraded terms."""

    areas: InteractionClassAreas
    n_failed_terms: int = 0


class DecompositionAggregator:
    """Drives the contact-area engine over the class pairs of a frame.

    Parameters
    ----------
    engine : ContactAreaEngine
        Buried-area engine (holds the SASA oracle, probe radius and policy).
    is_polar : callable
        Polar test mapping an index array to a boolean mask.
    contact_cutoff : float
        Per-class contact cutoff in Angstroms.
    mode : {"reduced", "direct"}
        Whether to apply the per-class spatial reduction.
    """

    def __init__(
        self,
        engine: ContactAreaEngine,
        is_polar: PolarTest,
        contact_cutoff: float,
        mode: DecompositionMode = "reduced",
    ):
        if mode not in ("reduced", "direct"):
            raise ValueError(f"mode must be 'reduced' or 'direct', got {mode!r}")
        if contact_cutoff <= 0:
            raise ValueError(f"contact_cutoff must be positive, got {contact_cutoff}")
        self.engine = engine
        self.is_polar = is_polar
        self.contact_cutoff = float(contact_cutoff)
        self.mode = mode

    def decompose_frame(self, sel_a: AtomSet, sel_b: AtomSet, frame: FrameContext) -> Decomposition:
        """Decompose the A/B contact surface of *frame*."""
        failures_before = self.engine.n_failures

        mol_a = classify(sel_a, self.is_polar)
        mol_b = classify(sel_b, self.is_polar)
        cutoff = self.contact_cutoff if self.mode == "reduced" else None
        pp, npnp, pa_npb, npa_pb = class_pairs(mol_a, mol_b, frame, cutoff)

        areas = InteractionClassAreas.from_pairs(
            polar_polar=self.engine.pair_area(pp, frame),
            nonpolar_nonpolar=self.engine.pair_area(npnp, frame),
            polar_a_nonpolar_b=self.engine.pair_area(pa_npb, frame),
            nonpolar_a_polar_b=self.engine.pair_area(npa_pb, frame),
        )
        return Decomposition(areas=areas, n_failed_terms=self.engine.n_failures - failures_before)

    def interface_area(self, sel_a: AtomSet, sel_b: AtomSet, frame: FrameContext) -> float:
        """Buried area between the unclassified A and B contact atoms."""
        pair = reduce_pair(sel_a, sel_b, self.contact_cutoff, frame, "A:B")
        return self.engine.pair_area(pair, frame)


def decompose(
    sel_a: AtomSet,
    sel_b: AtomSet,
    is_polar: PolarTest,
    contact_cutoff: float,
    probe_radius: float,
    sasa,
    frame: FrameContext,
    mode: DecompositionMode = "reduced",
    strict: bool = False,
) -> InteractionClassAreas:
    """Functional form of :meth:`DecompositionAggregator.decompose_frame`.

    Parameters
    ----------
    sel_a, sel_b : AtomSet
        Disjoint selections of molecules A and B.
    is_polar : callable
        Polar test mapping an index array to a boolean mask.
    contact_cutoff : float
        Per-class contact cutoff (Angstroms); unused in ``direct`` mode.
    probe_radius : float
        SASA probe radius (Angstroms).
    sasa : SASAOracle
        Callable ``(atoms, probe_radius, frame) -> float``.
    frame : FrameContext
        Frame to evaluate.
    mode : {"reduced", "direct"}
        Decomposition variant.
    strict : bool
        Propagate oracle failures.
    """
    engine = ContactAreaEngine(sasa, probe_radius, strict=strict)
    aggregator = DecompositionAggregator(engine, is_polar, contact_cutoff, mode=mode)
    return aggregator.decompose_frame(sel_a, sel_b, frame).areas
