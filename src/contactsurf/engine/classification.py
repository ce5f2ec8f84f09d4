"""Polar / nonpolar atom classification.

Classification is driven by a user-supplied predicate over static atom
attributes (names, elements, partial charges). Different force-field
representations need different rules, so no chemistry is hard-coded in the
engine itself; the built-in presets only reproduce the rules used for
all-atom and SIRAH coarse-grained systems.

The Strategy pattern allows swapping predicates without touching the
decomposition code:

>>> predicate = NamePatternPredicate(["N.*", "O.*"])
>>> classifier = AtomClassifier.from_topology(predicate, topology)
>>> molecule = classify(AtomSet(range(10)), classifier)
>>> len(molecule.polar) + len(molecule.nonpolar)
10
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Sequence

import numpy as np
from numpy.typing import NDArray

from contactsurf.core.atomset import AtomSet
from contactsurf.core.constants import (
    ALL_ATOM_POLAR_NAME_PATTERNS,
    SIRAH_POLAR_BEAD_NAMES,
    SIRAH_POLAR_CHARGE_THRESHOLD,
)
from contactsurf.exceptions import GeometryEngineError


@dataclass(frozen=True)
class TopologyAttributes:
    """Static per-atom attributes used by polarity predicates.

    All arrays are aligned with the topology's atom order.

    Attributes
    ----------
    names : NDArray[np.str_]
        Atom names.
    elements : NDArray[np.str_]
        Element symbols ("" where unknown).
    resnames : NDArray[np.str_]
        Residue name of each atom.
    resindices : NDArray[np.int64]
        0-based residue index of each atom.
    charges : NDArray[np.float64] or None
        Partial charges, or None when the topology carries none.
    selector : callable, optional
        Evaluates a static selection string to an index array. Provided by
        backends that understand a selection language.
    """

    names: NDArray[np.str_]
    elements: NDArray[np.str_]
    resnames: NDArray[np.str_]
    resindices: NDArray[np.int64]
    charges: NDArray[np.float64] | None = None
    selector: Callable[[str], NDArray[np.int64]] | None = None

    @property
    def n_atoms(self) -> int:
        return int(len(self.names))


@dataclass(frozen=True)
class ClassifiedMolecule:
    """Polar / nonpolar partition of one parent AtomSet.

    Invariant: ``polar & nonpolar`` is empty and ``polar | nonpolar`` equals
    the parent set.
    """

    polar: AtomSet
    nonpolar: AtomSet

    @property
    def parent(self) -> AtomSet:
        return self.polar | self.nonpolar


class PolarityPredicate(ABC):
    """Abstract rule deciding which atoms are polar."""

    @abstractmethod
    def evaluate(self, topology: TopologyAttributes) -> NDArray[np.bool_]:
        """Return a boolean polar mask over all atoms of *topology*.

        Raises
        ------
        GeometryEngineError
            If the topology lacks an attribute the rule needs.
        """
        ...

    @property
    @abstractmethod
    def label(self) -> str:
        """Short label for logging and result metadata."""
        ...

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.__class__.__name__, "label": self.label}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(label='{self.label}')"


class NamePatternPredicate(PolarityPredicate):
    """Polar if the atom name fully matches one of the regular expressions.

    The default patterns (``N.*``, ``O.*``, ``P.*``, ``S.*``) mark every
    nitrogen, oxygen, phosphorus and sulfur of an all-atom topology as polar.
    """

    def __init__(self, patterns: Sequence[str] = ALL_ATOM_POLAR_NAME_PATTERNS):
        if not patterns:
            raise ValueError("NamePatternPredicate requires at least one pattern")
        self.patterns = tuple(patterns)
        self._regex = re.compile("|".join(f"(?:{p})" for p in self.patterns))

    def evaluate(self, topology: TopologyAttributes) -> NDArray[np.bool_]:
        return np.fromiter(
            (self._regex.fullmatch(str(name)) is not None for name in topology.names),
            dtype=bool,
            count=topology.n_atoms,
        )

    @property
    def label(self) -> str:
        return "name " + " ".join(self.patterns)


class ElementPredicate(PolarityPredicate):
    """Polar if the element symbol belongs to *elements* (case-insensitive)."""

    def __init__(self, elements: Sequence[str] = ("N", "O", "P", "S")):
        if not elements:
            raise ValueError("ElementPredicate requires at least one element")
        self.elements = tuple(e.capitalize() for e in elements)

    def evaluate(self, topology: TopologyAttributes) -> NDArray[np.bool_]:
        symbols = np.char.capitalize(np.asarray(topology.elements, dtype=str))
        if topology.n_atoms and not np.any(symbols != ""):
            raise GeometryEngineError(
                "Element-based polarity rule requires element symbols, "
                "but the topology provides none"
            )
        return np.isin(symbols, self.elements)

    @property
    def label(self) -> str:
        return "element " + " ".join(self.elements)


class ChargeOrNamePredicate(PolarityPredicate):
    """Polar if ``|charge| >= threshold`` or the atom name is listed.

    This is the coarse-grained rule: charged beads plus a handful of
    hydrogen-bonding bead names (SIRAH ``GN l2 K3 K4`` by default).
    """

    def __init__(
        self,
        threshold: float = SIRAH_POLAR_CHARGE_THRESHOLD,
        names: Sequence[str] = SIRAH_POLAR_BEAD_NAMES,
    ):
        if threshold < 0:
            raise ValueError(f"threshold must be >= 0, got {threshold}")
        self.threshold = float(threshold)
        self.names = tuple(names)

    def evaluate(self, topology: TopologyAttributes) -> NDArray[np.bool_]:
        if topology.charges is None:
            raise GeometryEngineError(
                "Charge-based polarity rule requires partial charges, "
                "but the topology provides none (use a PSF/PRMTOP/TPR topology)"
            )
        charged = np.abs(np.asarray(topology.charges, dtype=float)) >= self.threshold
        named = np.isin(np.asarray(topology.names, dtype=str), self.names)
        return charged | named

    @property
    def label(self) -> str:
        names = " ".join(self.names)
        return f"|charge| >= {self.threshold:g} or name {names}".rstrip()


class SelectionPredicate(PolarityPredicate):
    """Polar if matched by a static selection string of the backend."""

    def __init__(self, selection: str):
        if not selection.strip():
            raise ValueError("SelectionPredicate requires a non-empty selection")
        self.selection = selection

    def evaluate(self, topology: TopologyAttributes) -> NDArray[np.bool_]:
        if topology.selector is None:
            raise GeometryEngineError(
                "Selection-based polarity rule needs a backend with a selection language"
            )
        mask = np.zeros(topology.n_atoms, dtype=bool)
        mask[np.asarray(topology.selector(self.selection), dtype=np.int64)] = True
        return mask

    @property
    def label(self) -> str:
        return self.selection


PRESETS: dict[str, Callable[[], PolarityPredicate]] = {
    "all_atom": NamePatternPredicate,
    "sirah": ChargeOrNamePredicate,
}


def get_preset(name: str) -> PolarityPredicate:
    """Return a fresh predicate for a named preset.

    Raises
    ------
    ValueError
        If *name* is not a known preset.
    """
    try:
        return PRESETS[name]()
    except KeyError:
        raise ValueError(f"Unknown polarity preset '{name}'. Available: {sorted(PRESETS)}") from None


class AtomClassifier:
    """Polar mask evaluated once for the whole topology.

    Instances are callables mapping an index array to a boolean polar mask,
    which is the ``is_polar`` contract expected by :func:`classify`.

    Parameters
    ----------
    polar_mask : NDArray[np.bool_]
        Polar flag for every atom in the topology.
    label : str
        Description of the rule that produced the mask.
    """

    def __init__(self, polar_mask: NDArray[np.bool_], label: str = "custom"):
        mask = np.array(polar_mask, dtype=bool, copy=True)
        if mask.ndim != 1:
            raise ValueError(f"polar_mask must be 1-D, got shape {mask.shape}")
        mask.flags.writeable = False
        self._mask = mask
        self.label = label

    @classmethod
    def from_topology(
        cls, predicate: PolarityPredicate, topology: TopologyAttributes
    ) -> "AtomClassifier":
        """Evaluate *predicate* against *topology* once."""
        mask = np.asarray(predicate.evaluate(topology), dtype=bool)
        if mask.shape != (topology.n_atoms,):
            raise GeometryEngineError(
                f"Polarity rule '{predicate.label}' returned a mask of shape {mask.shape}, "
                f"expected ({topology.n_atoms},)"
            )
        return cls(mask, label=predicate.label)

    @property
    def n_polar(self) -> int:
        return int(self._mask.sum())

    @property
    def n_atoms(self) -> int:
        return int(self._mask.size)

    def __call__(self, indices: NDArray[np.int64]) -> NDArray[np.bool_]:
        return self._mask[indices]

    def __repr__(self) -> str:
        return f"AtomClassifier(label='{self.label}', n_polar={self.n_polar}/{self.n_atoms})"


def classify(
    parent: AtomSet, is_polar: Callable[[NDArray[np.int64]], NDArray[np.bool_]]
) -> ClassifiedMolecule:
    """Split *parent* into polar and nonpolar AtomSets.

    Every atom of *parent* lands in exactly one of the two sets.

    Parameters
    ----------
    parent : AtomSet
        Atoms to classify.
    is_polar : callable
        Maps an index array to a boolean mask of the same length.

    Returns
    -------
    ClassifiedMolecule
    """
    if not parent:
        return ClassifiedMolecule(polar=AtomSet.empty(), nonpolar=AtomSet.empty())

    mask = np.asarray(is_polar(parent.indices), dtype=bool)
    if mask.shape != parent.indices.shape:
        raise ValueError(
            f"is_polar returned shape {mask.shape} for {len(parent)} atoms"
        )
    return ClassifiedMolecule(polar=parent.mask(mask), nonpolar=parent.mask(~mask))
