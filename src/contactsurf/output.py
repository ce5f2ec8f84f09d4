"""Per-frame table output.

One header line, then one row per frame, flushed as it is written so that
an interrupted run leaves a valid partial table. Column layouts:

- decomposed modes: ``Frame Polar-Polar NoPolar-NoPolar Polar-NoPolar
  ContactSurface Affinity`` (plus ``InterfaceSurface`` when measured)
- ``total`` mode: ``Frame ContactSurface``

Areas are in A^2 and affinities in kcal/mol.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import IO, Literal

from contactsurf.results.contact_surface import DecompositionMode, FrameResult

logger = logging.getLogger(__name__)

DECOMPOSED_COLUMNS = (
    "Frame",
    "Polar-Polar",
    "NoPolar-NoPolar",
    "Polar-NoPolar",
    "ContactSurface",
    "Affinity",
)
TOTAL_COLUMNS = ("Frame", "ContactSurface")
INTERFACE_COLUMN = "InterfaceSurface"

DELIMITERS = {"tab": "\t", "space": "    "}


def table_columns(mode: DecompositionMode, interface: bool = False) -> tuple[str, ...]:
    """Column names for *mode*."""
    if mode == "total":
        return TOTAL_COLUMNS
    if interface:
        return DECOMPOSED_COLUMNS + (INTERFACE_COLUMN,)
    return DECOMPOSED_COLUMNS


def format_row(
    result: FrameResult,
    mode: DecompositionMode,
    interface: bool = False,
    delimiter: str = "\t",
    precision: int = 4,
) -> str:
    """Format one FrameResult as a table row."""

    def fmt(value: float | None) -> str:
        return "nan" if value is None else f"{value:.{precision}f}"

    if mode == "total":
        return delimiter.join([str(result.frame), fmt(result.total_area)])

    areas = result.areas
    fields = [
        str(result.frame),
        fmt(areas.polar_polar if areas else None),
        fmt(areas.nonpolar_nonpolar if areas else None),
        fmt(areas.polar_nonpolar if areas else None),
        fmt(result.total_area),
        fmt(result.affinity),
    ]
    if interface:
        fields.append(fmt(result.interface_area))
    return delimiter.join(fields)


class FrameTableWriter:
    """Context manager writing FrameResults as a delimited table.

    Parameters
    ----------
    target : Path or str or text stream
        Output file path, or an open text stream (not closed on exit).
    mode : {"reduced", "direct", "total"}
        Decomposition mode, selects the column layout.
    interface : bool
        Add the ``InterfaceSurface`` column.
    delimiter : {"tab", "space"}
        Column delimiter.

    Examples
    --------
    >>> with FrameTableWriter("contact_surface.dat", mode="reduced") as writer:
    ...     for frame_result in results:
    ...         writer.write(frame_result)
    """

    def __init__(
        self,
        target: Path | str | IO[str],
        mode: DecompositionMode = "reduced",
        interface: bool = False,
        delimiter: Literal["tab", "space"] = "tab",
    ):
        if delimiter not in DELIMITERS:
            raise ValueError(f"delimiter must be one of {sorted(DELIMITERS)}, got {delimiter!r}")
        self.target = target
        self.mode = mode
        self.interface = interface and mode != "total"
        self.delimiter = DELIMITERS[delimiter]
        self._stream: IO[str] | None = None
        self._owns_stream = False
        self.n_rows = 0

    def __enter__(self) -> "FrameTableWriter":
        if isinstance(self.target, (str, Path)):
            path = Path(self.target)
            path.parent.mkdir(parents=True, exist_ok=True)
            self._stream = open(path, "w")
            self._owns_stream = True
        else:
            self._stream = self.target
        self._stream.write(self.delimiter.join(table_columns(self.mode, self.interface)) + "\n")
        self._stream.flush()
        return self

    def write(self, result: FrameResult) -> None:
        """Write and flush one row."""
        if self._stream is None:
            raise RuntimeError("FrameTableWriter must be used as a context manager")
        self._stream.write(
            format_row(result, self.mode, self.interface, self.delimiter) + "\n"
        )
        self._stream.flush()
        self.n_rows += 1

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._owns_stream and self._stream is not None:
            self._stream.close()
            if isinstance(self.target, (str, Path)):
                logger.info(f"Wrote {self.n_rows} row(s) to {self.target}")
        self._stream = None
