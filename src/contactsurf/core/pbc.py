"""Periodic-boundary handling for the A:B complex.

The SASA oracle works on raw Cartesian coordinates and knows nothing about
the unit cell, while neighbour searches use minimum-image distances. Before a
periodic frame is measured, the two molecules are therefore assembled into
one contiguous complex:

1. **Make whole**: within each residue, every atom is placed at the minimum
   image of the previous atom, so residues split across the box edge become
   continuous.
2. **Cluster**: each residue of A is translated to the minimum image of A's
   first residue, then each residue of B to the minimum image of A's
   geometric centre.

The assembled frame carries no box, so distance cutoffs and SASA see the
same geometry. Only atoms of A and B are moved; the rest of the system is
left untouched.

Minimum image convention
------------------------
For a displacement Δr in a box with lattice-vector matrix H::

    Δs = H⁻¹ · Δr            # fractional coordinates
    Δs_mic = Δs - round(Δs)
    Δr_mic = H · Δs_mic
"""

from __future__ import annotations

import logging

import numpy as np
from numpy.typing import NDArray

from contactsurf.core.atomset import AtomSet, FrameContext

logger = logging.getLogger(__name__)


def box_dimensions_to_matrix(dimensions: NDArray[np.floating]) -> NDArray[np.float64]:
    """Convert ``[a, b, c, alpha, beta, gamma]`` (A, degrees) to a 3x3 box matrix.

    Lattice vectors are the columns, so ``r = H @ s`` maps fractional to
    Cartesian coordinates.
    """
    a, b, c = (float(x) for x in dimensions[:3])
    alpha, beta, gamma = np.radians(np.asarray(dimensions[3:6], dtype=np.float64))

    cos_alpha, cos_beta, cos_gamma = np.cos(alpha), np.cos(beta), np.cos(gamma)
    sin_gamma = np.sin(gamma)

    bx = b * cos_gamma
    by = b * sin_gamma
    cx = c * cos_beta
    cy = c * (cos_alpha - cos_beta * cos_gamma) / sin_gamma
    cz = np.sqrt(c**2 - cx**2 - cy**2)

    return np.array(
        [
            [a, bx, cx],
            [0.0, by, cy],
            [0.0, 0.0, cz],
        ]
    )


def minimum_image(
    displacement: NDArray[np.floating],
    box_matrix: NDArray[np.floating],
    box_matrix_inv: NDArray[np.floating],
) -> NDArray[np.float64]:
    """Minimum-image version of displacement vector(s), shape (3,) or (N, 3)."""
    fractional = displacement @ box_matrix_inv.T
    return (fractional - np.round(fractional)) @ box_matrix.T


def make_residues_whole(
    positions: NDArray[np.float64],
    atoms: AtomSet,
    resindices: NDArray[np.int64],
    box_matrix: NDArray[np.floating],
    box_matrix_inv: NDArray[np.floating],
) -> None:
    """Chain the atoms of every residue in *atoms* so no residue is split.

    *positions* is modified in place. Residues of equal size are processed
    together, one chain position at a time.
    """
    indices = atoms.indices
    if len(indices) < 2:
        return

    by_residue: dict[int, list[int]] = {}
    for idx in indices:
        by_residue.setdefault(int(resindices[idx]), []).append(int(idx))

    by_size: dict[int, list[list[int]]] = {}
    for members in by_residue.values():
        if len(members) > 1:
            by_size.setdefault(len(members), []).append(members)

    for size, groups in by_size.items():
        atom_indices = np.array(groups, dtype=np.int64)
        res_positions = positions[atom_indices]
        for i in range(1, size):
            step = res_positions[:, i, :] - res_positions[:, i - 1, :]
            res_positions[:, i, :] = res_positions[:, i - 1, :] + minimum_image(
                step, box_matrix, box_matrix_inv
            )
        positions[atom_indices.ravel()] = res_positions.reshape(-1, 3)


def cluster_residues(
    positions: NDArray[np.float64],
    atoms: AtomSet,
    resindices: NDArray[np.int64],
    reference_point: NDArray[np.floating],
    box_matrix: NDArray[np.floating],
    box_matrix_inv: NDArray[np.floating],
) -> None:
    """Translate each residue in *atoms* to the minimum image of *reference_point*.

    Residues move as rigid units, using their geometric centre. *positions*
    is modified in place.
    """
    indices = atoms.indices
    if len(indices) == 0:
        return

    residues, inverse = np.unique(resindices[indices], return_inverse=True)
    counts = np.bincount(inverse, minlength=len(residues))
    centres = np.column_stack(
        [np.bincount(inverse, weights=positions[indices, k], minlength=len(residues)) for k in range(3)]
    ) / counts[:, np.newaxis]

    offsets = centres - reference_point
    shifts = minimum_image(offsets, box_matrix, box_matrix_inv) - offsets
    positions[indices] += shifts[inverse]


def assemble_complex(
    frame: FrameContext,
    sel_a: AtomSet,
    sel_b: AtomSet,
    resindices: NDArray[np.int64],
) -> FrameContext:
    """Non-periodic copy of *frame* with A and B whole and adjacent.

    Frames without a box are returned unchanged.

    Examples
    --------
    >>> frame = FrameContext.from_arrays(0, [[1, 0, 0], [49, 0, 0]], [50, 50, 50, 90, 90, 90])
    >>> assembled = assemble_complex(frame, AtomSet([0]), AtomSet([1]), np.array([0, 1]))
    >>> assembled.positions[1].tolist()
    [-1.0, 0.0, 0.0]
    """
    if frame.box is None:
        return frame

    box_matrix = box_dimensions_to_matrix(frame.box)
    box_matrix_inv = np.linalg.inv(box_matrix)
    positions = frame.positions.astype(np.float64)

    both = sel_a | sel_b
    make_residues_whole(positions, both, resindices, box_matrix, box_matrix_inv)

    first_residue = resindices[sel_a.indices[0]]
    anchor_atoms = sel_a.indices[resindices[sel_a.indices] == first_residue]
    cluster_residues(
        positions, sel_a, resindices, positions[anchor_atoms].mean(axis=0), box_matrix, box_matrix_inv
    )
    centre_a = positions[sel_a.indices].mean(axis=0)
    cluster_residues(positions, sel_b, resindices, centre_a, box_matrix, box_matrix_inv)

    logger.debug(f"Frame {frame.index}: assembled {len(both)} atoms into a contiguous complex")
    return FrameContext.from_arrays(frame.index, positions, None)
