"""Abstract geometry backend.

The contact engine only needs three capabilities from a geometry engine:

- static atom selection (``select``) and static per-atom attributes
  (``topology_attributes``), evaluated once at startup;
- per-frame coordinates as explicit :class:`FrameContext` values
  (``frame`` / ``iter_frames``);
- solvent-accessible surface area of an arbitrary atom subset
  (``sasa``), the SASA oracle.

Any backend satisfying this interface can drive the analysis; the engine
never talks to a trajectory reader directly.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Iterable, Iterator, Protocol

from contactsurf.core.atomset import AtomSet, FrameContext
from contactsurf.engine.classification import TopologyAttributes


class SASAOracle(Protocol):
    """Callable returning the SASA (A^2) of *atoms* in *frame*.

    Implementations raise :class:`~contactsurf.exceptions.EmptySelectionError`
    for an empty subset and
    :class:`~contactsurf.exceptions.GeometryEngineError` for other failures.
    """

    def __call__(self, atoms: AtomSet, probe_radius: float, frame: FrameContext) -> float: ...


class GeometryBackend(ABC):
    """Abstract base class for geometry engines."""

    @property
    @abstractmethod
    def n_atoms(self) -> int:
        """Number of atoms in the topology."""
        ...

    @property
    @abstractmethod
    def n_frames(self) -> int:
        """Number of frames in the trajectory."""
        ...

    @abstractmethod
    def select(self, selection: str) -> AtomSet:
        """Evaluate a static selection string against the topology.

        Raises
        ------
        GeometryEngineError
            If the selection string cannot be evaluated.
        """
        ...

    @abstractmethod
    def topology_attributes(self) -> TopologyAttributes:
        """Static per-atom attributes for polarity predicates."""
        ...

    @abstractmethod
    def frame(self, index: int) -> FrameContext:
        """Return a FrameContext holding a copy of frame *index*."""
        ...

    def iter_frames(self, indices: Iterable[int]) -> Iterator[FrameContext]:
        """Yield FrameContexts for *indices* in order."""
        for index in indices:
            yield self.frame(index)

    @abstractmethod
    def sasa(self, atoms: AtomSet, probe_radius: float, frame: FrameContext) -> float:
        """Solvent-accessible surface area of *atoms* in A^2."""
        ...

    def check_sasa_support(self, atoms: AtomSet) -> None:
        """Raise GeometryEngineError if SASA cannot be computed for *atoms*.

        The default implementation accepts everything.
        """
        return None

    def describe(self) -> dict[str, Any]:
        """Provenance information stored with results."""
        return {"backend": self.__class__.__name__, "n_atoms": self.n_atoms, "n_frames": self.n_frames}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(n_atoms={self.n_atoms}, n_frames={self.n_frames})"
