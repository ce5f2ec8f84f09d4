"""Tests for assembling A and B into a contiguous complex on periodic frames."""

from __future__ import annotations

import numpy as np
import pytest

from contactsurf.core.atomset import AtomSet, FrameContext
from contactsurf.core.pbc import (
    assemble_complex,
    box_dimensions_to_matrix,
    make_residues_whole,
    minimum_image,
)

CUBIC_50 = [50.0, 50.0, 50.0, 90.0, 90.0, 90.0]


def _cubic(length=50.0):
    h = box_dimensions_to_matrix([length, length, length, 90.0, 90.0, 90.0])
    return h, np.linalg.inv(h)


class TestBoxMath:
    def test_cubic_matrix(self):
        h = box_dimensions_to_matrix(CUBIC_50)
        assert np.allclose(h, np.diag([50.0, 50.0, 50.0]))

    def test_triclinic_lengths(self):
        h = box_dimensions_to_matrix([40.0, 50.0, 60.0, 80.0, 70.0, 60.0])
        assert np.allclose(np.linalg.norm(h, axis=0), [40.0, 50.0, 60.0])

    def test_minimum_image(self):
        h, h_inv = _cubic()
        result = minimum_image(np.array([[48.0, -30.0, 10.0]]), h, h_inv)
        assert np.allclose(result, [[-2.0, 20.0, 10.0]])


class TestMakeWhole:
    def test_split_residue_is_chained(self):
        h, h_inv = _cubic()
        positions = np.array([[1.0, 0.0, 0.0], [49.0, 0.0, 0.0], [25.0, 0.0, 0.0]])
        make_residues_whole(positions, AtomSet([0, 1]), np.array([0, 0, 1]), h, h_inv)
        assert np.allclose(positions[1], [-1.0, 0.0, 0.0])
        assert np.allclose(positions[2], [25.0, 0.0, 0.0])

    def test_only_selected_atoms_move(self):
        h, h_inv = _cubic()
        positions = np.array([[1.0, 0.0, 0.0], [49.0, 0.0, 0.0]])
        make_residues_whole(positions, AtomSet([0]), np.array([0, 0]), h, h_inv)
        assert np.allclose(positions[1], [49.0, 0.0, 0.0])


class TestAssembleComplex:
    def test_non_periodic_frame_unchanged(self, make_frame):
        frame = make_frame([[0, 0, 0], [3, 0, 0]])
        assert assemble_complex(frame, AtomSet([0]), AtomSet([1]), np.array([0, 1])) is frame

    def test_boundary_straddling_pair(self):
        frame = FrameContext.from_arrays(0, [[1.0, 0.0, 0.0], [49.0, 0.0, 0.0]], CUBIC_50)
        assembled = assemble_complex(frame, AtomSet([0]), AtomSet([1]), np.array([0, 1]))
        assert assembled.box is None
        assert np.linalg.norm(assembled.positions[1] - assembled.positions[0]) == pytest.approx(2.0)
        # input frame is not modified
        assert frame.positions[1, 0] == pytest.approx(49.0)

    def test_residues_move_as_units(self):
        # B is one residue split across the x boundary
        coords = [[10.0, 0.0, 0.0], [48.0, 0.0, 0.0], [1.0, 0.0, 0.0], [11.0, 0.0, 0.0]]
        frame = FrameContext.from_arrays(0, coords, CUBIC_50)
        assembled = assemble_complex(
            frame, AtomSet([0, 3]), AtomSet([1, 2]), np.array([0, 1, 1, 0])
        )
        pos = assembled.positions
        assert pos[2, 0] - pos[1, 0] == pytest.approx(3.0)
        assert pos[0, 0] == pytest.approx(10.0)
        assert np.all(np.abs(pos[[1, 2], 0] - pos[[0, 3], 0].mean()) <= 25.0)

    def test_untouched_atoms_outside_complex(self):
        coords = [[1.0, 0.0, 0.0], [49.0, 0.0, 0.0], [49.5, 0.0, 0.0]]
        frame = FrameContext.from_arrays(0, coords, CUBIC_50)
        assembled = assemble_complex(frame, AtomSet([0]), AtomSet([1]), np.array([0, 1, 2]))
        assert assembled.positions[2, 0] == pytest.approx(49.5)
