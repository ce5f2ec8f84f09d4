"""Tests for the per-frame table writer."""

from __future__ import annotations

import io

import pytest

from contactsurf.output import FrameTableWriter, format_row, table_columns
from contactsurf.results.contact_surface import FrameResult, InteractionClassAreas


def _frame_result(frame=0, interface=None):
    areas = InteractionClassAreas.from_pairs(10.0, 20.0, 2.5, 2.5)
    return FrameResult(
        frame=frame,
        areas=areas,
        total_area=areas.total,
        affinity=-0.675,
        interface_area=interface,
    )


class TestColumns:
    def test_decomposed(self):
        assert table_columns("reduced") == (
            "Frame",
            "Polar-Polar",
            "NoPolar-NoPolar",
            "Polar-NoPolar",
            "ContactSurface",
            "Affinity",
        )

    def test_interface_column(self):
        assert table_columns("direct", interface=True)[-1] == "InterfaceSurface"

    def test_total(self):
        assert table_columns("total") == ("Frame", "ContactSurface")
        assert table_columns("total", interface=True) == ("Frame", "ContactSurface")


class TestFormatRow:
    def test_decomposed_row(self):
        row = format_row(_frame_result(3), "reduced")
        assert row.split("\t") == ["3", "10.0000", "20.0000", "5.0000", "35.0000", "-0.6750"]

    def test_missing_interface_is_nan(self):
        row = format_row(_frame_result(), "reduced", interface=True)
        assert row.split("\t")[-1] == "nan"

    def test_total_row(self):
        row = format_row(FrameResult(frame=7, total_area=12.3456), "total")
        assert row == "7\t12.3456"


class TestFrameTableWriter:
    """Header once, one flushed row per frame."""

    def test_writes_file(self, tmp_path):
        path = tmp_path / "sub" / "cs.dat"
        with FrameTableWriter(path, mode="reduced") as writer:
            writer.write(_frame_result(0))
            writer.write(_frame_result(1))
        lines = path.read_text().splitlines()
        assert lines[0].startswith("Frame\tPolar-Polar")
        assert len(lines) == 3
        assert writer.n_rows == 2

    def test_rows_flushed_before_close(self, tmp_path):
        path = tmp_path / "cs.dat"
        with FrameTableWriter(path, mode="total") as writer:
            writer.write(FrameResult(frame=0, total_area=1.0))
            assert len(path.read_text().splitlines()) == 2

    def test_space_delimiter(self):
        stream = io.StringIO()
        with FrameTableWriter(stream, mode="total", delimiter="space") as writer:
            writer.write(FrameResult(frame=0, total_area=1.0))
        assert stream.getvalue().splitlines() == ["Frame    ContactSurface", "0    1.0000"]
        assert not stream.closed

    def test_interface_ignored_in_total_mode(self):
        stream = io.StringIO()
        with FrameTableWriter(stream, mode="total", interface=True):
            pass
        assert stream.getvalue() == "Frame\tContactSurface\n"

    def test_bad_delimiter(self):
        with pytest.raises(ValueError):
            FrameTableWriter(io.StringIO(), delimiter="comma")

    def test_write_outside_context(self):
        with pytest.raises(RuntimeError):
            FrameTableWriter(io.StringIO()).write(_frame_result())
