"""
Configuration schema for ContactSurf runs.

This module defines Pydantic models for every configuration section,
providing validation, type safety, and YAML/JSON serialization support.
Numeric limits (positive probe radius and cutoffs, frame stride >= 1) are
enforced here so that invalid settings fail before any frame is processed.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from contactsurf.core.constants import (
    ALL_ATOM_POLAR_NAME_PATTERNS,
    DEFAULT_CONTACT_CUTOFF,
    DEFAULT_N_SPHERE_POINTS,
    DEFAULT_PROBE_RADIUS,
    SIRAH_POLAR_BEAD_NAMES,
    SIRAH_POLAR_CHARGE_THRESHOLD,
)
from contactsurf.engine.classification import (
    PRESETS,
    ChargeOrNamePredicate,
    ElementPredicate,
    NamePatternPredicate,
    PolarityPredicate,
    SelectionPredicate,
    get_preset,
)
from contactsurf.engine.scoring import WeightTable


# =============================================================================
# Selections
# =============================================================================


class SelectionsConfig(BaseModel):
    """Static atom selections for the two molecules.

    Selections are evaluated once against the topology (MDAnalysis
    selection syntax). Distance-dependent trimming is done per frame by the
    interface and contact cutoffs, not inside these strings.

    Attributes:
        a: Selection for molecule A
        b: Selection for molecule B
    """

    a: str = Field(..., min_length=1, description="Selection for molecule A")
    b: str = Field(..., min_length=1, description="Selection for molecule B")


# =============================================================================
# Polarity rules
# =============================================================================


class NamePatternRule(BaseModel):
    """Polar if the atom name fully matches one of the regular expressions."""

    kind: Literal["name_pattern"] = "name_pattern"
    patterns: List[str] = Field(
        default_factory=lambda: list(ALL_ATOM_POLAR_NAME_PATTERNS), min_length=1
    )

    def build(self) -> PolarityPredicate:
        return NamePatternPredicate(self.patterns)


class ElementRule(BaseModel):
    """Polar if the element symbol is listed."""

    kind: Literal["element"] = "element"
    elements: List[str] = Field(default_factory=lambda: ["N", "O", "P", "S"], min_length=1)

    def build(self) -> PolarityPredicate:
        return ElementPredicate(self.elements)


class ChargeRule(BaseModel):
    """Polar if |charge| >= threshold or the atom name is listed."""

    kind: Literal["charge"] = "charge"
    threshold: float = Field(SIRAH_POLAR_CHARGE_THRESHOLD, ge=0.0)
    names: List[str] = Field(default_factory=lambda: list(SIRAH_POLAR_BEAD_NAMES))

    def build(self) -> PolarityPredicate:
        return ChargeOrNamePredicate(self.threshold, self.names)


class SelectionRule(BaseModel):
    """Polar if matched by a static selection string."""

    kind: Literal["selection"] = "selection"
    selection: str = Field(..., min_length=1)

    def build(self) -> PolarityPredicate:
        return SelectionPredicate(self.selection)


PolarityRule = Annotated[
    Union[NamePatternRule, ElementRule, ChargeRule, SelectionRule],
    Field(discriminator="kind"),
]


# =============================================================================
# Frames, SASA, output
# =============================================================================


class FrameRangeConfig(BaseModel):
    """Inclusive frame range.

    Attributes:
        start: First frame (0-indexed)
        stop: Last frame, inclusive; negative means the last available frame
        step: Frame stride
    """

    start: int = Field(0, ge=0, description="First frame (0-indexed)")
    stop: int = Field(-1, description="Last frame (inclusive); < 0 means last frame")
    step: int = Field(1, ge=1, description="Frame stride")

    @model_validator(mode="after")
    def check_order(self) -> "FrameRangeConfig":
        if self.stop >= 0 and self.stop < self.start:
            raise ValueError(f"frames.stop ({self.stop}) must be >= frames.start ({self.start})")
        return self

    def resolve(self, n_frames: int) -> range:
        """Frame indices for a trajectory of *n_frames* frames.

        Raises
        ------
        ValueError
            If the range does not fit the trajectory.
        """
        if n_frames <= 0:
            raise ValueError("Trajectory has no frames")
        stop = n_frames - 1 if self.stop < 0 else self.stop
        if self.start >= n_frames:
            raise ValueError(f"frames.start={self.start} out of range [0, {n_frames})")
        if stop >= n_frames:
            raise ValueError(f"frames.stop={stop} out of range [0, {n_frames})")
        return range(self.start, stop + 1, self.step)


class SASASettings(BaseModel):
    """Shrake-Rupley settings.

    Attributes:
        n_sphere_points: Sphere points per atom
        radii: Element symbol -> radius (Angstrom) overrides, e.g. for
            coarse-grained beads
        guess_elements: Guess missing elements from atom names. Disable for
            coarse-grained topologies so beads become virtual sites (``VS``)
            instead of borrowing real element radii
    """

    n_sphere_points: int = Field(DEFAULT_N_SPHERE_POINTS, ge=1)
    radii: Dict[str, float] = Field(default_factory=dict)
    guess_elements: bool = Field(True, description="Guess missing elements from atom names")

    @field_validator("radii")
    @classmethod
    def positive_radii(cls, v: Dict[str, float]) -> Dict[str, float]:
        bad = {k: r for k, r in v.items() if r <= 0}
        if bad:
            raise ValueError(f"SASA radii must be positive, got {bad}")
        return v


class OutputConfig(BaseModel):
    """Output files.

    Attributes:
        table: Per-frame table path
        delimiter: Column delimiter, "tab" or "space"
        json_path: Optional path for the full JSON result
    """

    table: Path = Field(Path("contact_surface.dat"), description="Per-frame table path")
    delimiter: Literal["tab", "space"] = "tab"
    json_path: Optional[Path] = Field(None, alias="json", description="Full JSON result path")

    model_config = {"populate_by_name": True}


# =============================================================================
# Main Configuration
# =============================================================================


class ContactSurfaceConfig(BaseModel):
    """Complete configuration of a contact-surface run.

    Examples
    --------
    >>> config = ContactSurfaceConfig.from_yaml("contactsurf.yaml")
    >>> config.mode
    'reduced'
    """

    model_config = {"extra": "forbid"}

    topology: Path = Field(..., description="Topology file (PDB, PSF, GRO, PRMTOP, ...)")
    trajectory: List[Path] = Field(default_factory=list, description="Trajectory file(s)")
    selections: SelectionsConfig
    mode: Literal["reduced", "direct", "total"] = "reduced"
    probe_radius: float = Field(DEFAULT_PROBE_RADIUS, gt=0.0, description="SASA probe radius (A)")
    interface_cutoff: Optional[float] = Field(
        None, gt=0.0, description="Coarse whole-molecule trim (A); null disables"
    )
    same_residue: bool = Field(True, description="Expand the interface trim to whole residues")
    contact_cutoff: float = Field(
        DEFAULT_CONTACT_CUTOFF, gt=0.0, description="Per-class contact cutoff (A)"
    )
    polar_predicate: Union[str, PolarityRule] = Field(
        "all_atom", description="Preset name or explicit polarity rule"
    )
    weights: WeightTable = Field(default_factory=WeightTable)
    frames: FrameRangeConfig = Field(default_factory=FrameRangeConfig)
    sasa: SASASettings = Field(default_factory=SASASettings)
    strict: bool = Field(False, description="Abort on per-frame geometry failures")
    measure_interface: bool = Field(
        False, description="Also measure the undifferentiated interface area"
    )
    unwrap: bool = Field(
        True, description="Make A and B whole and adjacent on periodic frames"
    )
    output: OutputConfig = Field(default_factory=OutputConfig)

    @field_validator("trajectory", mode="before")
    @classmethod
    def ensure_list(cls, v):
        """Accept a single path or a list of paths."""
        if v is None:
            return []
        if isinstance(v, (str, Path)):
            return [v]
        return list(v)

    @field_validator("polar_predicate")
    @classmethod
    def known_preset(cls, v):
        if isinstance(v, str) and v not in PRESETS:
            raise ValueError(f"Unknown polarity preset '{v}'. Available: {sorted(PRESETS)}")
        return v

    def build_predicate(self) -> PolarityPredicate:
        """Instantiate the configured polarity rule."""
        if isinstance(self.polar_predicate, str):
            return get_preset(self.polar_predicate)
        return self.polar_predicate.build()

    @classmethod
    def from_yaml(cls, path: Path | str) -> "ContactSurfaceConfig":
        """Load and validate a YAML configuration (see :func:`load_config`)."""
        from contactsurf.config.loader import load_config

        return load_config(path)

    def to_yaml(self, path: Path | str) -> None:
        """Save to YAML (see :func:`save_config`)."""
        from contactsurf.config.loader import save_config

        save_config(self, path)
