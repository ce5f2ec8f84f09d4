"""Frame-local atom sets and frame contexts.

An :class:`AtomSet` is an immutable, order-irrelevant set of atom indices
into the fixed topology. Every selection, classification and reduction step
returns a new AtomSet; none is modified in place.

A :class:`FrameContext` carries one frame's coordinates explicitly, so spatial
and SASA computations never depend on a trajectory reader's "current frame".

Examples
--------
>>> a = AtomSet([4, 1, 2])
>>> b = AtomSet([2, 7])
>>> (a | b).indices.tolist()
[1, 2, 4, 7]
>>> a.isdisjoint(b)
False
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator

import numpy as np
from numpy.typing import NDArray


class AtomSet:
    """Immutable set of 0-based atom indices.

    Indices are stored sorted and unique in a read-only ``int64`` array.

    Parameters
    ----------
    indices : iterable of int
        Atom indices. Duplicates are removed and order is ignored.
    """

    __slots__ = ("_indices",)

    def __init__(self, indices: Iterable[int] | NDArray[np.integer] = ()):
        raw = indices if isinstance(indices, np.ndarray) else list(indices)
        arr = np.unique(np.asarray(raw, dtype=np.int64))
        if arr.size and arr[0] < 0:
            raise ValueError(f"Atom indices must be non-negative, got {int(arr[0])}")
        arr.flags.writeable = False
        self._indices = arr

    @classmethod
    def empty(cls) -> "AtomSet":
        """Return the empty AtomSet."""
        return cls(np.empty(0, dtype=np.int64))

    @classmethod
    def _from_sorted(cls, arr: NDArray[np.int64]) -> "AtomSet":
        # numpy set operations already return sorted unique arrays
        obj = cls.__new__(cls)
        arr = np.asarray(arr, dtype=np.int64)
        arr.flags.writeable = False
        obj._indices = arr
        return obj

    @property
    def indices(self) -> NDArray[np.int64]:
        """Sorted, read-only index array."""
        return self._indices

    def __len__(self) -> int:
        return int(self._indices.size)

    def __bool__(self) -> bool:
        return self._indices.size > 0

    def __iter__(self) -> Iterator[int]:
        return (int(i) for i in self._indices)

    def __contains__(self, index: object) -> bool:
        if not isinstance(index, (int, np.integer)):
            return False
        pos = np.searchsorted(self._indices, index)
        return bool(pos < self._indices.size and self._indices[pos] == index)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AtomSet):
            return NotImplemented
        return np.array_equal(self._indices, other._indices)

    def __hash__(self) -> int:
        return hash(self._indices.tobytes())

    def __or__(self, other: "AtomSet") -> "AtomSet":
        return AtomSet._from_sorted(np.union1d(self._indices, other._indices))

    def __and__(self, other: "AtomSet") -> "AtomSet":
        return AtomSet._from_sorted(
            np.intersect1d(self._indices, other._indices, assume_unique=True)
        )

    def __sub__(self, other: "AtomSet") -> "AtomSet":
        return AtomSet._from_sorted(
            np.setdiff1d(self._indices, other._indices, assume_unique=True)
        )

    def union(self, other: "AtomSet") -> "AtomSet":
        return self | other

    def intersection(self, other: "AtomSet") -> "AtomSet":
        return self & other

    def difference(self, other: "AtomSet") -> "AtomSet":
        return self - other

    def isdisjoint(self, other: "AtomSet") -> bool:
        return len(self & other) == 0

    def mask(self, submask: NDArray[np.bool_]) -> "AtomSet":
        """Return the members whose entry in *submask* is True.

        *submask* is aligned with :attr:`indices`.
        """
        submask = np.asarray(submask, dtype=bool)
        if submask.shape != self._indices.shape:
            raise ValueError(
                f"Mask shape {submask.shape} does not match AtomSet size {self._indices.shape}"
            )
        return AtomSet._from_sorted(self._indices[submask])

    def __repr__(self) -> str:
        if len(self) <= 6:
            return f"AtomSet({self._indices.tolist()})"
        head = ", ".join(str(i) for i in self._indices[:3])
        return f"AtomSet([{head}, ...], n_atoms={len(self)})"


@dataclass(frozen=True)
class FrameContext:
    """Coordinates of one trajectory frame.

    Attributes
    ----------
    index : int
        0-based frame index in the trajectory.
    positions : NDArray[np.float32]
        Atom positions in Angstroms, shape (n_atoms, 3). Held as a private,
        read-only copy so the reader can advance safely afterwards.
    box : NDArray[np.float32] or None
        Box dimensions in MDAnalysis format ``[lx, ly, lz, alpha, beta, gamma]``,
        or None for non-periodic systems.
    """

    index: int
    positions: NDArray[np.float32]
    box: NDArray[np.float32] | None = None

    @classmethod
    def from_arrays(
        cls,
        index: int,
        positions: NDArray[np.floating],
        box: NDArray[np.floating] | None = None,
    ) -> "FrameContext":
        """Build a context from (possibly shared) arrays, copying them."""
        pos = np.array(positions, dtype=np.float32, copy=True)
        if pos.ndim != 2 or pos.shape[1] != 3:
            raise ValueError(f"positions must have shape (n_atoms, 3), got {pos.shape}")
        pos.flags.writeable = False

        frozen_box = None
        if box is not None:
            frozen_box = np.array(box, dtype=np.float32, copy=True)
            # MDAnalysis reports missing boxes as zeros
            if frozen_box.size == 0 or not np.any(frozen_box[:3] > 0):
                frozen_box = None
            else:
                frozen_box.flags.writeable = False

        return cls(index=int(index), positions=pos, box=frozen_box)

    @property
    def n_atoms(self) -> int:
        return int(self.positions.shape[0])

    def coordinates(self, atoms: AtomSet) -> NDArray[np.float32]:
        """Positions of *atoms*, shape (len(atoms), 3)."""
        return self.positions[atoms.indices]
