"""Buried (contact) area from the SASA inclusion-exclusion identity.

For two disjoint atom subsets::

    area = 0.5 * (SASA(s1) + SASA(s2) - SASA(s1 | s2))

The union is passed to the SASA oracle as one combined subset: SASA is not
additive over disjoint subsets, and the burial between them is exactly what
the identity measures.

Failure policy
--------------
In tolerant mode (the default) a failing oracle call yields 0.0 for the
pair: the buried area between nothing and something is zero, and a long
trajectory run must not abort on one degenerate frame. Geometry failures
other than empty subsets are logged and counted so that data-quality loss
stays visible. In strict mode every failure propagates.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from contactsurf.core.atomset import AtomSet, FrameContext
from contactsurf.exceptions import EmptySelectionError, GeometryEngineError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContactPair:
    """Two disjoint AtomSets feeding one buried-area computation.

    Attributes
    ----------
    side_a : AtomSet
        Atoms attributed to molecule A.
    side_b : AtomSet
        Atoms attributed to molecule B.
    label : str
        Pair label for logging (e.g. ``"PA:PB"``).
    """

    side_a: AtomSet
    side_b: AtomSet
    label: str = ""

    def __post_init__(self) -> None:
        if not self.side_a.isdisjoint(self.side_b):
            overlap = self.side_a & self.side_b
            raise ValueError(
                f"ContactPair {self.label or ''} sides overlap on {len(overlap)} atom(s): {overlap!r}"
            )


class ContactAreaEngine:
    """Computes buried areas for atom pairs with a configurable failure policy.

    Parameters
    ----------
    sasa : SASAOracle
        Callable ``(atoms, probe_radius, frame) -> float``.
    probe_radius : float
        Probe radius in Angstroms.
    strict : bool
        Propagate oracle failures instead of reporting 0.0. Default False.

    Attributes
    ----------
    n_failures : int
        Number of pair computations degraded to 0.0 by a GeometryEngineError
        since construction (empty subsets are not counted).
    """

    def __init__(self, sasa, probe_radius: float, strict: bool = False):
        if probe_radius <= 0:
            raise ValueError(f"probe_radius must be positive, got {probe_radius}")
        self.sasa = sasa
        self.probe_radius = float(probe_radius)
        self.strict = strict
        self.n_failures = 0

    def contact_area(self, s1: AtomSet, s2: AtomSet, frame: FrameContext) -> float:
        """Buried area between *s1* and *s2* in A^2.

        Raises
        ------
        ValueError
            If *s1* and *s2* share atoms.
        EmptySelectionError
            In strict mode, if either subset is empty.
        GeometryEngineError
            In strict mode, if the oracle fails.
        """
        return self.pair_area(ContactPair(s1, s2), frame)

    def pair_area(self, pair: ContactPair, frame: FrameContext) -> float:
        """Buried area for a :class:`ContactPair`; see :meth:`contact_area`."""
        s1, s2 = pair.side_a, pair.side_b

        if not s1 or not s2:
            if self.strict:
                raise EmptySelectionError(
                    f"Frame {frame.index}: empty side in pair {pair.label or '(unlabelled)'} "
                    f"({len(s1)} vs {len(s2)} atoms)"
                )
            logger.debug(f"Frame {frame.index}: pair {pair.label} has an empty side, area = 0")
            return 0.0

        try:
            sasa1 = self.sasa(s1, self.probe_radius, frame)
            sasa2 = self.sasa(s2, self.probe_radius, frame)
            sasa12 = self.sasa(s1 | s2, self.probe_radius, frame)
        except EmptySelectionError:
            if self.strict:
                raise
            return 0.0
        except GeometryEngineError as e:
            if self.strict:
                raise
            self.n_failures += 1
            logger.warning(
                f"Frame {frame.index}: SASA failed for pair {pair.label or '(unlabelled)'}; "
                f"reporting 0.0 ({e})"
            )
            return 0.0

        area = 0.5 * (sasa1 + sasa2 - sasa12)
        logger.debug(
            f"Frame {frame.index}: {pair.label} SASA {sasa1:.2f} + {sasa2:.2f} - {sasa12:.2f} "
            f"-> {area:.2f} A^2"
        )
        return area


def contact_area(
    s1: AtomSet,
    s2: AtomSet,
    probe_radius: float,
    sasa,
    frame: FrameContext,
    strict: bool = False,
) -> float:
    """Functional form of :meth:`ContactAreaEngine.contact_area`.

    Examples
    --------
    >>> contact_area(a, b, 1.4, backend.sasa, backend.frame(0))
    """
    return ContactAreaEngine(sasa, probe_radius, strict=strict).contact_area(s1, s2, frame)
