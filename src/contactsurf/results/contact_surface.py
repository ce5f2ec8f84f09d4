"""Per-frame contact-surface results.

- :class:`InteractionClassAreas`: P:P, NP:NP and P:NP buried areas of one frame.
- :class:`FrameResult`: one frame's areas, total, and affinity.
- :class:`ContactSurfaceResult`: the ordered frame results of a run plus
  provenance, saved to / loaded from JSON.
"""

from __future__ import annotations

from typing import Any, ClassVar, Literal

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, ConfigDict, Field

from contactsurf.results.base import BaseAnalysisResult

DecompositionMode = Literal["reduced", "direct", "total"]


class InteractionClassAreas(BaseModel):
    """Buried areas (A^2) per interaction class for one frame.

    ``polar_nonpolar`` is the sum of the two directional cross terms
    (A-polar with B-nonpolar, A-nonpolar with B-polar); the directional
    terms are kept when known. Values are nominally non-negative but may be
    zero or slightly negative under numerical noise.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    polar_polar: float = 0.0
    nonpolar_nonpolar: float = 0.0
    polar_nonpolar: float = 0.0
    polar_a_nonpolar_b: float | None = None
    nonpolar_a_polar_b: float | None = None

    @classmethod
    def from_pairs(
        cls,
        polar_polar: float,
        nonpolar_nonpolar: float,
        polar_a_nonpolar_b: float,
        nonpolar_a_polar_b: float,
    ) -> "InteractionClassAreas":
        """Build from the four pairwise areas, summing the cross directions."""
        return cls(
            polar_polar=polar_polar,
            nonpolar_nonpolar=nonpolar_nonpolar,
            polar_nonpolar=polar_a_nonpolar_b + nonpolar_a_polar_b,
            polar_a_nonpolar_b=polar_a_nonpolar_b,
            nonpolar_a_polar_b=nonpolar_a_polar_b,
        )

    @property
    def total(self) -> float:
        """Sum of the three class areas."""
        return self.polar_polar + self.nonpolar_nonpolar + self.polar_nonpolar

    def scaled(self, factor: float) -> "InteractionClassAreas":
        """Copy with every area multiplied by *factor*."""
        return InteractionClassAreas(
            polar_polar=self.polar_polar * factor,
            nonpolar_nonpolar=self.nonpolar_nonpolar * factor,
            polar_nonpolar=self.polar_nonpolar * factor,
            polar_a_nonpolar_b=None if self.polar_a_nonpolar_b is None else self.polar_a_nonpolar_b * factor,
            nonpolar_a_polar_b=None if self.nonpolar_a_polar_b is None else self.nonpolar_a_polar_b * factor,
        )


class FrameResult(BaseModel):
    """Contact-surface result for one trajectory frame.

    Attributes
    ----------
    frame : int
        0-based trajectory frame index.
    areas : InteractionClassAreas or None
        Class decomposition; None in ``total`` mode.
    total_area : float
        Total contact area (A^2): the sum of the class areas, or the direct
        interface area in ``total`` mode.
    affinity : float or None
        Weighted affinity estimate (kcal/mol); None in ``total`` mode.
    interface_area : float or None
        Direct buried area between the undifferentiated interface
        selections, when measured.
    n_failed_terms : int
        Pairwise terms degraded to 0.0 by a geometry failure in this frame.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    frame: int = Field(..., ge=0)
    areas: InteractionClassAreas | None = None
    total_area: float = 0.0
    affinity: float | None = None
    interface_area: float | None = None
    n_failed_terms: int = Field(0, ge=0)


class ContactSurfaceResult(BaseAnalysisResult):
    """Ordered per-frame contact-surface results of one run."""

    analysis_type: ClassVar[str] = "contact_surface"

    mode: DecompositionMode = "reduced"
    selection_a: str = ""
    selection_b: str = ""
    polar_rule: str = ""
    probe_radius: float = 1.4
    interface_cutoff: float | None = None
    contact_cutoff: float | None = None
    weights: dict[str, float] = Field(default_factory=dict)
    start_frame: int = 0
    stop_frame: int = 0
    step: int = 1
    frames: list[FrameResult] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def n_frames(self) -> int:
        return len(self.frames)

    @property
    def n_failed_terms(self) -> int:
        return sum(f.n_failed_terms for f in self.frames)

    def frame_indices(self) -> NDArray[np.int64]:
        return np.array([f.frame for f in self.frames], dtype=np.int64)

    def total_areas(self) -> NDArray[np.float64]:
        return np.array([f.total_area for f in self.frames], dtype=np.float64)

    def affinities(self) -> NDArray[np.float64]:
        """Affinity per frame (NaN where not computed)."""
        return np.array(
            [np.nan if f.affinity is None else f.affinity for f in self.frames], dtype=np.float64
        )

    def class_areas(self) -> NDArray[np.float64]:
        """Array of shape (n_frames, 3): P:P, NP:NP, P:NP (NaN without decomposition)."""
        rows = []
        for f in self.frames:
            if f.areas is None:
                rows.append([np.nan, np.nan, np.nan])
            else:
                rows.append([f.areas.polar_polar, f.areas.nonpolar_nonpolar, f.areas.polar_nonpolar])
        return np.array(rows, dtype=np.float64).reshape(len(rows), 3)

    def mean_total_area(self) -> float:
        return float(np.mean(self.total_areas())) if self.frames else 0.0

    def mean_affinity(self) -> float | None:
        values = self.affinities()
        if not self.frames or np.all(np.isnan(values)):
            return None
        return float(np.nanmean(values))

    def summary(self) -> str:
        lines = [
            f"Contact surface ({self.mode}) over {self.n_frames} frame(s) "
            f"[{self.start_frame}..{self.stop_frame} step {self.step}]",
            f"  Mean contact surface: {self.mean_total_area():.2f} A^2",
        ]
        mean_affinity = self.mean_affinity()
        if mean_affinity is not None:
            lines.append(f"  Mean affinity: {mean_affinity:.3f} kcal/mol")
        if self.n_failed_terms:
            lines.append(f"  Terms degraded to zero by geometry failures: {self.n_failed_terms}")
        return "\n".join(lines)
