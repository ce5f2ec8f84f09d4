"""Tests for the MDAnalysis backend and the MDTraj Shrake-Rupley oracle."""

from __future__ import annotations

import math

import numpy as np
import pytest

mda = pytest.importorskip("MDAnalysis")
md = pytest.importorskip("mdtraj")

from MDAnalysis.coordinates.memory import MemoryReader  # noqa: E402

from contactsurf.backends.mdanalysis import MDAnalysisBackend  # noqa: E402
from contactsurf.backends.sasa import ShrakeRupleySASA, resolve_element  # noqa: E402
from contactsurf.core.atomset import AtomSet, FrameContext  # noqa: E402
from contactsurf.engine.area import contact_area  # noqa: E402
from contactsurf.exceptions import EmptySelectionError, GeometryEngineError  # noqa: E402

# Carbon (0.17 nm in MDTraj) plus a 1.4 A probe
ISOLATED_CARBON_SASA = 4 * math.pi * (1.7 + 1.4) ** 2


def _make_universe(frames, names, elements, charges=None, dimensions=None):
    """Two residues, segments A (atoms 0-1) and B (atoms 2-3)."""
    u = mda.Universe.empty(
        4,
        n_residues=2,
        n_segments=2,
        atom_resindex=[0, 0, 1, 1],
        residue_segindex=[0, 1],
        trajectory=True,
    )
    u.add_TopologyAttr("names", names)
    if elements is not None:
        u.add_TopologyAttr("elements", elements)
    u.add_TopologyAttr("resnames", ["LIG", "REC"])
    u.add_TopologyAttr("resids", [1, 2])
    u.add_TopologyAttr("segids", ["A", "B"])
    if charges is not None:
        u.add_TopologyAttr("charges", charges)
    u.load_new(np.asarray(frames, dtype=np.float32), format=MemoryReader, dimensions=dimensions)
    return u


def _far_apart():
    return [[0, 0, 0], [50, 0, 0], [0, 50, 0], [0, 0, 50]]


def _close():
    return [[0, 0, 0], [0, 5, 0], [3, 0, 0], [3, 5, 0]]


@pytest.fixture
def backend():
    u = _make_universe([_close(), _far_apart()], ["N1", "C1", "O2", "C2"], ["N", "C", "O", "C"])
    return MDAnalysisBackend(u)


class TestResolveElement:
    def test_symbol(self):
        assert resolve_element("C").symbol == "C"
        assert resolve_element("fe").symbol == "Fe"

    def test_name_prefers_one_letter(self):
        assert resolve_element("", "CA").symbol == "C"

    def test_name_two_letters(self):
        assert resolve_element("", "Zn1").symbol == "Zn"

    def test_unknown_is_virtual(self):
        assert resolve_element("", "XZ") is md.element.virtual

    def test_no_guessing(self):
        assert resolve_element("", "K3", guess=False) is md.element.virtual
        assert resolve_element("C", "K3", guess=False) is md.element.carbon


class TestMDAnalysisBackend:
    """Selections, attributes and frames."""

    def test_sizes(self, backend):
        assert backend.n_atoms == 4
        assert backend.n_frames == 2

    def test_select(self, backend):
        assert backend.select("segid A") == AtomSet([0, 1])
        assert backend.select("segid B and name O2") == AtomSet([2])
        assert not backend.select("name ZZ")

    def test_invalid_selection(self, backend):
        with pytest.raises(GeometryEngineError, match="Invalid selection"):
            backend.select("not_a_keyword 3")

    def test_topology_attributes(self, backend):
        attrs = backend.topology_attributes()
        assert attrs.names.tolist() == ["N1", "C1", "O2", "C2"]
        assert attrs.elements.tolist() == ["N", "C", "O", "C"]
        assert attrs.resindices.tolist() == [0, 0, 1, 1]
        assert attrs.charges is None
        assert attrs.selector("segid B").tolist() == [2, 3]

    def test_charges(self):
        u = _make_universe([_close()], ["N1", "C1", "O2", "C2"], ["N", "C", "O", "C"], [0.5, 0, -0.5, 0])
        attrs = MDAnalysisBackend(u).topology_attributes()
        assert attrs.charges.tolist() == [0.5, 0.0, -0.5, 0.0]

    def test_frame_is_a_copy(self, backend):
        frame = backend.frame(0)
        backend.frame(1)
        assert isinstance(frame, FrameContext)
        assert frame.index == 0
        assert frame.positions[2].tolist() == [3.0, 0.0, 0.0]
        assert frame.box is None

    def test_frame_out_of_range(self, backend):
        with pytest.raises(IndexError):
            backend.frame(2)

    def test_iter_frames(self, backend):
        assert [f.index for f in backend.iter_frames([1, 0])] == [1, 0]

    def test_describe(self, backend):
        info = backend.describe()
        assert info["backend"] == "MDAnalysisBackend"
        assert info["n_sphere_points"] == 960

    def test_from_files(self, tmp_path, write_pdb):
        path = write_pdb(tmp_path / "complex.pdb")
        backend = MDAnalysisBackend.from_files(path)
        assert backend.n_atoms == 4
        assert backend.n_frames == 1
        assert backend.select("segid A") == AtomSet([0, 1])

    def test_from_files_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            MDAnalysisBackend.from_files(tmp_path / "missing.pdb")


class TestShrakeRupley:
    """SASA oracle in A^2."""

    def test_isolated_atom(self, backend):
        area = backend.sasa(AtomSet([1]), 1.4, backend.frame(1))
        assert area == pytest.approx(ISOLATED_CARBON_SASA, rel=1e-3)

    def test_empty_subset(self, backend):
        with pytest.raises(EmptySelectionError):
            backend.sasa(AtomSet(), 1.4, backend.frame(0))

    def test_index_out_of_range(self, backend):
        frame = FrameContext.from_arrays(0, np.zeros((2, 3)))
        with pytest.raises(GeometryEngineError):
            backend.sasa(AtomSet([3]), 1.4, frame)

    def test_check_passes_for_known_elements(self, backend):
        backend.check_sasa_support(AtomSet([0, 1, 2, 3]))

    def test_missing_radii_reported(self):
        oracle = ShrakeRupleySASA([md.element.carbon])
        assert oracle.missing_radii(AtomSet([0])) == []


class TestContactAreaWithMDTraj:
    """Buried area on real Shrake-Rupley SASA."""

    def test_far_apart_is_zero(self, backend):
        area = contact_area(AtomSet([1]), AtomSet([3]), 1.4, backend.sasa, backend.frame(1))
        assert area == pytest.approx(0.0, abs=1e-6)

    def test_contact_is_positive_and_symmetric(self, backend):
        frame = backend.frame(0)
        ab = contact_area(AtomSet([0]), AtomSet([2]), 1.4, backend.sasa, frame)
        ba = contact_area(AtomSet([2]), AtomSet([0]), 1.4, backend.sasa, frame)
        assert ab > 0.0
        assert ab == pytest.approx(ba)


class TestElementGuessing:
    """Topologies without an element column, e.g. coarse-grained PSFs."""

    BEADS = ["GN", "K3", "BCA", "PX"]

    def test_guessed_elements_are_reported(self, caplog):
        u = _make_universe([_far_apart()], self.BEADS, None)
        with caplog.at_level("WARNING", logger="contactsurf.backends.mdanalysis"):
            backend = MDAnalysisBackend(u)
        assert backend.guessed_elements == {"K3": "K", "BCA": "B", "PX": "P"}
        assert "guessed from names" in caplog.text
        assert "K3->K" in caplog.text
        assert backend.describe()["n_guessed_elements"] == 3

    def test_beads_need_explicit_radius(self):
        u = _make_universe([_far_apart()], self.BEADS, None)
        backend = MDAnalysisBackend(u, guess_elements=False)
        assert backend.guessed_elements == {}
        with pytest.raises(GeometryEngineError, match="VS"):
            backend.check_sasa_support(AtomSet([0, 1, 2, 3]))

    def test_bead_radius(self):
        u = _make_universe([_far_apart()], self.BEADS, None)
        backend = MDAnalysisBackend(u, radii={"VS": 2.0}, guess_elements=False)
        backend.check_sasa_support(AtomSet([0, 1, 2, 3]))
        area = backend.sasa(AtomSet([1]), 1.4, backend.frame(0))
        assert area == pytest.approx(4 * math.pi * (2.0 + 1.4) ** 2, rel=1e-3)

    def test_virtual_site_has_no_radius(self):
        oracle = ShrakeRupleySASA([md.element.virtual])
        assert oracle.missing_radii(AtomSet([0])) == ["VS"]
        assert ShrakeRupleySASA([md.element.virtual], radii={"VS": 2.0}).missing_radii(
            AtomSet([0])
        ) == []


class TestTopologyCache:
    def test_subset_topology_reused(self):
        oracle = ShrakeRupleySASA([md.element.carbon] * 4)
        top = oracle.topology_for(AtomSet([1, 3]))
        assert oracle.topology_for(AtomSet([3, 1])) is top
        assert top.n_atoms == 2
        assert oracle.topology_for(AtomSet([1])) is not top


class TestPeriodicComplex:
    """Real Shrake-Rupley areas for a complex split by the box edge."""

    def test_straddling_complex_matches_contiguous(self):
        from contactsurf.analyzer import ContactSurfaceAnalyzer

        names, elements = ["N1", "C1", "O2", "C2"], ["N", "C", "O", "C"]
        contiguous = MDAnalysisBackend(_make_universe([_close()], names, elements))
        # mirror image of _close() across the x boundary
        straddling_coords = [[1, 0, 0], [1, 5, 0], [48, 0, 0], [48, 5, 0]]
        straddling = MDAnalysisBackend(
            _make_universe(
                [straddling_coords], names, elements, dimensions=[50, 50, 50, 90, 90, 90]
            )
        )

        expected = ContactSurfaceAnalyzer(contiguous, "segid A", "segid B").run().frames[0]
        frame = ContactSurfaceAnalyzer(straddling, "segid A", "segid B").run().frames[0]
        assert expected.total_area > 0.0
        assert frame.total_area == pytest.approx(expected.total_area, rel=1e-3)
