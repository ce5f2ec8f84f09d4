"""MDAnalysis geometry backend.

MDAnalysis reads the topology and trajectory, evaluates static selection
strings and supplies per-atom attributes; SASA is delegated to the MDTraj
Shrake-Rupley oracle in :mod:`contactsurf.backends.sasa`.

Examples
--------
>>> backend = MDAnalysisBackend.from_files("complex.psf", ["production.dcd"])
>>> sel_a = backend.select("segid A and not name H*")
>>> frame = backend.frame(0)
>>> backend.sasa(sel_a, 1.4, frame)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Mapping, Sequence

import MDAnalysis as mda
import numpy as np
from MDAnalysis.exceptions import NoDataError, SelectionError
from numpy.typing import NDArray

from contactsurf.backends.base import GeometryBackend
from contactsurf.backends.sasa import ShrakeRupleySASA, resolve_element
from contactsurf.core.atomset import AtomSet, FrameContext
from contactsurf.core.constants import DEFAULT_N_SPHERE_POINTS
from contactsurf.engine.classification import TopologyAttributes
from contactsurf.exceptions import GeometryEngineError

if TYPE_CHECKING:
    from MDAnalysis.core.universe import Universe

logger = logging.getLogger(__name__)


def _optional_attribute(atoms: Any, name: str) -> NDArray | None:
    try:
        return np.asarray(getattr(atoms, name))
    except (NoDataError, AttributeError):
        return None


class MDAnalysisBackend(GeometryBackend):
    """Geometry backend over an MDAnalysis Universe.

    Parameters
    ----------
    universe : Universe
        Universe with topology and trajectory loaded.
    n_sphere_points : int
        Sphere points per atom for Shrake-Rupley SASA.
    radii : mapping of str to float, optional
        Element symbol to radius (Angstroms) overrides for SASA.
    guess_elements : bool
        Guess missing elements from atom names (logged as a warning). When
        False, atoms without an element become virtual sites and need a
        ``VS`` radius.
    """

    def __init__(
        self,
        universe: "Universe",
        n_sphere_points: int = DEFAULT_N_SPHERE_POINTS,
        radii: Mapping[str, float] | None = None,
        guess_elements: bool = True,
    ):
        self.universe = universe
        atoms = universe.atoms

        names = _optional_attribute(atoms, "names")
        if names is None:
            raise GeometryEngineError("Topology has no atom names")
        elements = _optional_attribute(atoms, "elements")
        if elements is None:
            elements = np.full(len(atoms), "", dtype=object)

        element_objects = []
        self.guessed_elements: dict[str, str] = {}
        for sym, name in zip(elements, names):
            sym, name = str(sym).strip(), str(name)
            element = resolve_element(sym, name, guess=guess_elements)
            if not sym and element.atomic_number > 0:
                self.guessed_elements[name] = element.symbol
            element_objects.append(element)

        if self.guessed_elements:
            shown = ", ".join(
                f"{name}->{symbol}" for name, symbol in sorted(self.guessed_elements.items())[:20]
            )
            more = len(self.guessed_elements) - 20
            logger.warning(
                f"No element for {len(self.guessed_elements)} atom name(s); SASA radii were "
                f"guessed from names: {shown}{f' (+{more} more)' if more > 0 else ''}. "
                "For coarse-grained beads set 'sasa.guess_elements: false' and give "
                "radii explicitly."
            )
        self._sasa = ShrakeRupleySASA(element_objects, n_sphere_points=n_sphere_points, radii=radii)

        resnames = _optional_attribute(atoms, "resnames")
        self._attributes = TopologyAttributes(
            names=names.astype(str),
            # virtual sites (atomic number 0) carry no element symbol
            elements=np.array(
                [e.symbol if e.atomic_number > 0 else "" for e in element_objects], dtype=str
            ),
            resnames=resnames.astype(str) if resnames is not None else np.full(len(atoms), "", dtype=str),
            resindices=np.asarray(atoms.resindices, dtype=np.int64),
            charges=_optional_attribute(atoms, "charges"),
            selector=self._select_indices,
        )

    @classmethod
    def from_files(
        cls,
        topology: str | Path,
        trajectory: str | Path | Sequence[str | Path] | None = None,
        n_sphere_points: int = DEFAULT_N_SPHERE_POINTS,
        radii: Mapping[str, float] | None = None,
        guess_elements: bool = True,
    ) -> "MDAnalysisBackend":
        """Load a Universe from files and wrap it.

        Multiple trajectory files are concatenated in order.

        Raises
        ------
        FileNotFoundError
            If the topology or a trajectory file does not exist.
        GeometryEngineError
            If MDAnalysis cannot read the files.
        """
        topology = Path(topology)
        if trajectory is None:
            traj_files: list[Path] = []
        elif isinstance(trajectory, (str, Path)):
            traj_files = [Path(trajectory)]
        else:
            traj_files = [Path(p) for p in trajectory]

        for path in [topology, *traj_files]:
            if not path.exists():
                raise FileNotFoundError(f"File not found: {path}")

        try:
            if traj_files:
                universe = mda.Universe(str(topology), [str(p) for p in traj_files])
            else:
                universe = mda.Universe(str(topology))
        except (OSError, ValueError, TypeError) as e:
            raise GeometryEngineError(f"Could not load {topology}: {e}") from e

        logger.info(
            f"Loaded {topology.name}: {len(universe.atoms)} atoms, "
            f"{len(universe.trajectory)} frames from {len(traj_files) or 1} file(s)"
        )
        return cls(
            universe,
            n_sphere_points=n_sphere_points,
            radii=radii,
            guess_elements=guess_elements,
        )

    @property
    def n_atoms(self) -> int:
        return len(self.universe.atoms)

    @property
    def n_frames(self) -> int:
        return len(self.universe.trajectory)

    def _select_indices(self, selection: str) -> NDArray[np.int64]:
        try:
            group = self.universe.select_atoms(selection)
        except (SelectionError, ValueError, NoDataError) as e:
            raise GeometryEngineError(f"Invalid selection '{selection}': {e}") from e
        return np.asarray(group.indices, dtype=np.int64)

    def select(self, selection: str) -> AtomSet:
        return AtomSet(self._select_indices(selection))

    def topology_attributes(self) -> TopologyAttributes:
        return self._attributes

    def frame(self, index: int) -> FrameContext:
        if index < 0 or index >= self.n_frames:
            raise IndexError(f"Frame {index} out of range [0, {self.n_frames})")
        ts = self.universe.trajectory[index]
        return FrameContext.from_arrays(index, ts.positions, ts.dimensions)

    def sasa(self, atoms: AtomSet, probe_radius: float, frame: FrameContext) -> float:
        return self._sasa(atoms, probe_radius, frame)

    def check_sasa_support(self, atoms: AtomSet) -> None:
        self._sasa.check(atoms)

    def describe(self) -> dict[str, Any]:
        info = super().describe()
        info["n_sphere_points"] = self._sasa.n_sphere_points
        if self._sasa.radii:
            info["radii"] = dict(self._sasa.radii)
        if self.guessed_elements:
            info["n_guessed_elements"] = len(self.guessed_elements)
        return info
