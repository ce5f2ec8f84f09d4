"""Shared fixtures: a pairwise-additive SASA oracle and an in-memory backend.

The fake oracle models every atom as exposing ``radius_area`` A^2, reduced
by ``overlap`` A^2 for each pair of atoms closer than ``contact_distance``.
Under that model the buried area between two disjoint sets is exactly
``0.5 * overlap`` per contacting cross pair, which gives closed-form
expectations for the engine tests.
"""

from __future__ import annotations

import numpy as np
import pytest

from contactsurf.backends.base import GeometryBackend
from contactsurf.core.atomset import AtomSet, FrameContext
from contactsurf.engine.classification import TopologyAttributes
from contactsurf.exceptions import EmptySelectionError, GeometryEngineError


class PairwiseSASA:
    """Pairwise-additive SASA model (A^2)."""

    def __init__(self, radius_area=50.0, overlap=20.0, contact_distance=4.0, fail_on=None):
        self.radius_area = radius_area
        self.overlap = overlap
        self.contact_distance = contact_distance
        self.fail_on = fail_on
        self.calls: list[AtomSet] = []

    def __call__(self, atoms, probe_radius, frame):
        self.calls.append(atoms)
        if not atoms:
            raise EmptySelectionError("empty subset")
        if self.fail_on is not None and self.fail_on(atoms):
            raise GeometryEngineError(f"synthetic failure on {atoms!r}")
        xyz = frame.coordinates(atoms).astype(float)
        diff = xyz[:, None, :] - xyz[None, :, :]
        dist = np.sqrt((diff**2).sum(axis=-1))
        n_contacts = int(np.triu(dist <= self.contact_distance, k=1).sum())
        return self.radius_area * len(atoms) - self.overlap * n_contacts


class InMemoryBackend(GeometryBackend):
    """Backend over explicit coordinates and named selections."""

    def __init__(
        self,
        frames,
        names,
        selections,
        resindices=None,
        charges=None,
        sasa=None,
        unsupported=(),
        box=None,
    ):
        self._frames = [np.asarray(f, dtype=float) for f in frames]
        self._selections = {k: list(v) for k, v in selections.items()}
        n_atoms = len(names)
        self._attributes = TopologyAttributes(
            names=np.array(names, dtype=str),
            elements=np.array([n[0] for n in names], dtype=str),
            resnames=np.full(n_atoms, "MOL", dtype=str),
            resindices=np.asarray(
                resindices if resindices is not None else np.arange(n_atoms), dtype=np.int64
            ),
            charges=None if charges is None else np.asarray(charges, dtype=float),
            selector=lambda s: self.select(s).indices,
        )
        self.oracle = sasa or PairwiseSASA()
        self.unsupported = set(unsupported)
        self.box = box

    @property
    def n_atoms(self):
        return self._attributes.n_atoms

    @property
    def n_frames(self):
        return len(self._frames)

    def select(self, selection):
        if selection not in self._selections:
            raise GeometryEngineError(f"Invalid selection '{selection}'")
        return AtomSet(self._selections[selection])

    def topology_attributes(self):
        return self._attributes

    def frame(self, index):
        return FrameContext.from_arrays(index, self._frames[index], self.box)

    def sasa(self, atoms, probe_radius, frame):
        return self.oracle(atoms, probe_radius, frame)

    def check_sasa_support(self, atoms):
        bad = sorted(set(atoms) & self.unsupported)
        if bad:
            raise GeometryEngineError(f"No SASA radius for atoms {bad}")


# Two-molecule toy complex. A = {N1, C1}, B = {O2, C2}; N1-O2 and C1-C2 sit
# 3 A apart, every other cross distance is ~5.83 A.
COMPLEX_NAMES = ["N1", "C1", "O2", "C2"]
COMPLEX_COORDS = np.array(
    [
        [0.0, 0.0, 0.0],
        [0.0, 5.0, 0.0],
        [3.0, 0.0, 0.0],
        [3.0, 5.0, 0.0],
    ]
)
COMPLEX_SELECTIONS = {"A": [0, 1], "B": [2, 3], "all": [0, 1, 2, 3], "none": []}


@pytest.fixture
def pairwise_sasa():
    """Factory for PairwiseSASA oracles."""
    return PairwiseSASA


@pytest.fixture
def make_frame():
    """Build a FrameContext from a coordinate list."""

    def _make(coords, index=0):
        return FrameContext.from_arrays(index, np.asarray(coords, dtype=float))

    return _make


@pytest.fixture
def make_backend():
    """Factory for InMemoryBackend, defaulting to the toy complex."""

    def _make(frames=None, names=None, selections=None, **kwargs):
        return InMemoryBackend(
            frames=frames if frames is not None else [COMPLEX_COORDS],
            names=names if names is not None else COMPLEX_NAMES,
            selections=selections if selections is not None else COMPLEX_SELECTIONS,
            **kwargs,
        )

    return _make


@pytest.fixture
def complex_coords():
    return COMPLEX_COORDS.copy()


# (name, resname, resid, segid, element, xyz) rows of the toy complex as a PDB
COMPLEX_PDB_ATOMS = [
    ("N1", "LIG", 1, "A", "N", (0.0, 0.0, 0.0)),
    ("C1", "LIG", 1, "A", "C", (0.0, 5.0, 0.0)),
    ("O2", "REC", 2, "B", "O", (3.0, 0.0, 0.0)),
    ("C2", "REC", 2, "B", "C", (3.0, 5.0, 0.0)),
]


@pytest.fixture
def write_pdb():
    """Write fixed-column PDB files for backend and CLI tests."""

    def _write(path, atoms=COMPLEX_PDB_ATOMS):
        lines = []
        for serial, (name, resname, resid, segid, element, (x, y, z)) in enumerate(atoms, 1):
            lines.append(
                f"ATOM  {serial:5d} {name:<4s} {resname:3s} {segid}{resid:4d}    "
                f"{x:8.3f}{y:8.3f}{z:8.3f}{1.0:6.2f}{0.0:6.2f}      {segid:<4s}{element:>2s}"
            )
        lines.append("END")
        path.write_text("\n".join(lines) + "\n")
        return path

    return _write
