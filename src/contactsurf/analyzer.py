"""Frame-by-frame contact-surface analysis.

The analyzer resolves the static selections once, builds the polar mask once,
and then for every frame:

1. copies the frame coordinates into a :class:`FrameContext` and, for
   periodic systems, assembles A and B into one contiguous complex;
2. optionally trims A and B to their interface (``interface_cutoff``);
3. decomposes the buried area into P:P, NP:NP and P:NP (or measures the
   single A:B area in ``total`` mode);
4. scores the class areas with the weight table;
5. writes and flushes one table row.

Examples
--------
>>> backend = MDAnalysisBackend.from_files("complex.psf", ["production.dcd"])
>>> analyzer = ContactSurfaceAnalyzer(
...     backend,
...     selection_a="segid A and not name H*",
...     selection_b="segid B and not name H*",
... )
>>> with FrameTableWriter("contact_surface.dat", mode=analyzer.mode) as writer:
...     result = analyzer.run(writer=writer)
>>> print(result.summary())
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Mapping

from pydantic import ValidationError

from contactsurf.backends.base import GeometryBackend
from contactsurf.core.atomset import AtomSet, FrameContext
from contactsurf.core.constants import DEFAULT_CONTACT_CUTOFF, DEFAULT_PROBE_RADIUS
from contactsurf.core.pbc import assemble_complex
from contactsurf.engine.area import ContactAreaEngine
from contactsurf.engine.classification import AtomClassifier, PolarityPredicate, get_preset
from contactsurf.engine.decomposition import DecompositionAggregator, reduce_pair
from contactsurf.engine.scoring import WeightTable, score
from contactsurf.engine.spatial import interface_trim
from contactsurf.exceptions import ConfigurationError, GeometryEngineError
from contactsurf.results.base import get_contactsurf_version
from contactsurf.results.contact_surface import (
    ContactSurfaceResult,
    DecompositionMode,
    FrameResult,
)

if TYPE_CHECKING:
    from contactsurf.config.schema import ContactSurfaceConfig
    from contactsurf.output import FrameTableWriter

logger = logging.getLogger(__name__)


class ContactSurfaceAnalyzer:
    """Per-frame contact-surface decomposition between molecules A and B.

    Parameters
    ----------
    backend : GeometryBackend
        Geometry engine supplying selections, frames and SASA.
    selection_a, selection_b : str
        Static selections for molecules A and B. Must be non-empty and
        disjoint.
    predicate : PolarityPredicate, optional
        Polarity rule. Default: the ``all_atom`` name-pattern preset.
    mode : {"reduced", "direct", "total"}
        Decomposition variant. Default "reduced".
    probe_radius : float
        SASA probe radius (A). Default 1.4.
    interface_cutoff : float, optional
        Coarse whole-molecule trim (A). None (default) disables it.
    same_residue : bool
        Expand the interface trim to whole residues. Default True.
    contact_cutoff : float
        Per-class contact cutoff (A). Default 6.1.
    weights : WeightTable or mapping, optional
        Affinity weights, either a table or a ``{"P:P": ..., "NP:NP": ...,
        "P:NP": ...}`` mapping. Default: the built-in table.
    strict : bool
        Propagate per-frame geometry failures. Default False.
    measure_interface : bool
        Also measure the undifferentiated A:B interface area per frame.
    unwrap : bool
        On periodic frames, make A and B whole and cluster them into one
        contiguous complex before measuring. Default True.

    Raises
    ------
    ConfigurationError
        If a numeric parameter, the mode or the weight table is invalid.
    """

    def __init__(
        self,
        backend: GeometryBackend,
        selection_a: str,
        selection_b: str,
        predicate: PolarityPredicate | None = None,
        mode: DecompositionMode = "reduced",
        probe_radius: float = DEFAULT_PROBE_RADIUS,
        interface_cutoff: float | None = None,
        same_residue: bool = True,
        contact_cutoff: float = DEFAULT_CONTACT_CUTOFF,
        weights: WeightTable | Mapping[str, float] | None = None,
        strict: bool = False,
        measure_interface: bool = False,
        unwrap: bool = True,
    ):
        if mode not in ("reduced", "direct", "total"):
            raise ConfigurationError(f"mode must be 'reduced', 'direct' or 'total', got {mode!r}")
        if probe_radius <= 0:
            raise ConfigurationError(f"probe_radius must be positive, got {probe_radius}")
        if contact_cutoff <= 0:
            raise ConfigurationError(f"contact_cutoff must be positive, got {contact_cutoff}")
        if interface_cutoff is not None and interface_cutoff <= 0:
            raise ConfigurationError(f"interface_cutoff must be positive, got {interface_cutoff}")

        self.backend = backend
        self.selection_a = selection_a
        self.selection_b = selection_b
        self.predicate = predicate or get_preset("all_atom")
        self.mode = mode
        self.probe_radius = float(probe_radius)
        self.interface_cutoff = interface_cutoff
        self.same_residue = same_residue
        self.contact_cutoff = float(contact_cutoff)
        if weights is None:
            weights = WeightTable()
        elif not isinstance(weights, WeightTable):
            weights = WeightTable.from_mapping(weights)
        self.weights = weights
        self.strict = strict
        self.measure_interface = measure_interface and mode != "total"
        self.unwrap = unwrap

        self.engine = ContactAreaEngine(backend.sasa, self.probe_radius, strict=strict)

        # Resolved lazily by prepare()
        self._sel_a: AtomSet | None = None
        self._sel_b: AtomSet | None = None
        self._classifier: AtomClassifier | None = None
        self._resindices = None
        self._all_resindices = None
        self._aggregator: DecompositionAggregator | None = None

    @classmethod
    def from_config(
        cls, config: "ContactSurfaceConfig", backend: GeometryBackend
    ) -> "ContactSurfaceAnalyzer":
        """Build an analyzer from a validated configuration."""
        return cls(
            backend,
            selection_a=config.selections.a,
            selection_b=config.selections.b,
            predicate=config.build_predicate(),
            mode=config.mode,
            probe_radius=config.probe_radius,
            interface_cutoff=config.interface_cutoff,
            same_residue=config.same_residue,
            contact_cutoff=config.contact_cutoff,
            weights=config.weights,
            strict=config.strict,
            measure_interface=config.measure_interface,
            unwrap=config.unwrap,
        )

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    def prepare(self) -> None:
        """Run the static startup checks and cache selections and masks.

        Raises
        ------
        GeometryEngineError
            If a selection cannot be evaluated or is empty, if A and B
            overlap, if the polarity rule cannot be evaluated, or if SASA
            is unsupported for some atoms.
        """
        if self._sel_a is not None:
            return

        sel_a = self.backend.select(self.selection_a)
        sel_b = self.backend.select(self.selection_b)
        if not sel_a:
            raise GeometryEngineError(f"Selection A matches no atoms: '{self.selection_a}'")
        if not sel_b:
            raise GeometryEngineError(f"Selection B matches no atoms: '{self.selection_b}'")
        overlap = sel_a & sel_b
        if overlap:
            raise GeometryEngineError(
                f"Selections A and B share {len(overlap)} atom(s); they must be disjoint"
            )

        self.backend.check_sasa_support(sel_a | sel_b)

        topology = self.backend.topology_attributes()
        if self.mode != "total":
            self._classifier = AtomClassifier.from_topology(self.predicate, topology)
            self._aggregator = DecompositionAggregator(
                self.engine, self._classifier, self.contact_cutoff, mode=self.mode
            )
        self._all_resindices = topology.resindices
        if self.same_residue:
            self._resindices = topology.resindices

        self._sel_a, self._sel_b = sel_a, sel_b
        logger.info(
            f"Selection A: {len(sel_a)} atoms, selection B: {len(sel_b)} atoms "
            f"(mode={self.mode}, probe={self.probe_radius:.2f} A)"
        )
        if self._classifier is not None:
            logger.info(
                f"Polarity rule '{self._classifier.label}': "
                f"{int(self._classifier(sel_a.indices).sum())} polar atoms in A, "
                f"{int(self._classifier(sel_b.indices).sum())} polar atoms in B"
            )

    def validate(self) -> dict[str, Any]:
        """Run the startup checks without raising.

        Returns
        -------
        dict
            Validation results with keys:
            - valid: bool
            - n_atoms_a, n_atoms_b: int (when the selections resolved)
            - n_polar_a, n_polar_b: int (decomposed modes)
            - n_frames: int
            - errors: list[str]
            - warnings: list[str]
        """
        errors: list[str] = []
        warnings: list[str] = []
        info: dict[str, Any] = {"n_frames": self.backend.n_frames}

        try:
            self.prepare()
        except GeometryEngineError as e:
            errors.append(str(e))
        else:
            info["n_atoms_a"] = len(self._sel_a)
            info["n_atoms_b"] = len(self._sel_b)
            if self._classifier is not None:
                n_polar_a = int(self._classifier(self._sel_a.indices).sum())
                n_polar_b = int(self._classifier(self._sel_b.indices).sum())
                info["n_polar_a"] = n_polar_a
                info["n_polar_b"] = n_polar_b
                for side, n_polar, n_total in (
                    ("A", n_polar_a, len(self._sel_a)),
                    ("B", n_polar_b, len(self._sel_b)),
                ):
                    if n_polar == 0 or n_polar == n_total:
                        warnings.append(
                            f"Selection {side} is entirely {'nonpolar' if n_polar == 0 else 'polar'} "
                            f"under rule '{self._classifier.label}'"
                        )

        if self.backend.n_frames < 10:
            warnings.append(
                f"Short trajectory ({self.backend.n_frames} frames). "
                "Averages may have limited statistical significance."
            )

        return {"valid": len(errors) == 0, **info, "errors": errors, "warnings": warnings}

    # ------------------------------------------------------------------
    # Per-frame computation
    # ------------------------------------------------------------------

    def compute_frame(self, frame: FrameContext) -> FrameResult:
        """Contact-surface result of a single frame."""
        self.prepare()
        failures_before = self.engine.n_failures
        if self.unwrap:
            frame = assemble_complex(frame, self._sel_a, self._sel_b, self._all_resindices)

        sel_a, sel_b = interface_trim(
            self._sel_a, self._sel_b, self.interface_cutoff, frame, self._resindices
        )

        if self.mode == "total":
            pair = reduce_pair(sel_a, sel_b, self.contact_cutoff, frame, "A:B")
            total = self.engine.pair_area(pair, frame)
            return FrameResult(
                frame=frame.index,
                total_area=total,
                n_failed_terms=self.engine.n_failures - failures_before,
            )

        decomposition = self._aggregator.decompose_frame(sel_a, sel_b, frame)
        interface = (
            self._aggregator.interface_area(sel_a, sel_b, frame) if self.measure_interface else None
        )
        areas = decomposition.areas
        return FrameResult(
            frame=frame.index,
            areas=areas,
            total_area=areas.total,
            affinity=score(areas, self.weights),
            interface_area=interface,
            n_failed_terms=self.engine.n_failures - failures_before,
        )

    # ------------------------------------------------------------------
    # Trajectory loop
    # ------------------------------------------------------------------

    def resolve_frames(self, start: int = 0, stop: int = -1, step: int = 1) -> range:
        """Inclusive frame range ``start..stop`` with stride *step*.

        Raises
        ------
        ConfigurationError
            If the range is invalid for the loaded trajectory.
        """
        from contactsurf.config.schema import FrameRangeConfig

        try:
            frames = FrameRangeConfig(start=start, stop=stop, step=step)
            return frames.resolve(self.backend.n_frames)
        except ValidationError as e:
            messages = "; ".join(err["msg"] for err in e.errors())
            raise ConfigurationError(f"Invalid frame range: {messages}") from e
        except ValueError as e:
            raise ConfigurationError(f"Invalid frame range: {e}") from e

    def run(
        self,
        start: int = 0,
        stop: int = -1,
        step: int = 1,
        progress_callback: Callable[[int, int], None] | None = None,
        writer: "FrameTableWriter | None" = None,
        config_hash: str = "unknown",
    ) -> ContactSurfaceResult:
        """Run the analysis over a trajectory.

        Parameters
        ----------
        start : int
            First frame (0-indexed). Default 0.
        stop : int
            Last frame, inclusive. Negative means the last frame. Default -1.
        step : int
            Frame stride. Default 1.
        progress_callback : callable, optional
            Function called with (current_frame, total_frames) for progress updates.
        writer : FrameTableWriter, optional
            Open table writer; one row is written and flushed per frame.
        config_hash : str
            Hash stored with the result for cache validation.

        Returns
        -------
        ContactSurfaceResult
            Ordered per-frame results.

        Raises
        ------
        ConfigurationError
            If the frame range is invalid (before any frame is processed).
        GeometryEngineError
            On startup geometry errors, or per-frame failures in strict mode.
        """
        frame_indices = self.resolve_frames(start, stop, step)
        self.prepare()

        n_frames = len(frame_indices)
        logger.info(
            f"Analyzing {n_frames} frame(s) [{frame_indices.start}..{frame_indices[-1]} "
            f"step {frame_indices.step}]"
        )

        results: list[FrameResult] = []
        report_every = max(1, n_frames // 10)
        for i, frame in enumerate(self.backend.iter_frames(frame_indices)):
            frame_result = self.compute_frame(frame)
            results.append(frame_result)
            if writer is not None:
                writer.write(frame_result)

            if progress_callback:
                progress_callback(i + 1, n_frames)
            if (i + 1) % report_every == 0:
                logger.info(f"  Frame {i + 1}/{n_frames}")

        result = ContactSurfaceResult(
            config_hash=config_hash,
            contactsurf_version=get_contactsurf_version(),
            mode=self.mode,
            selection_a=self.selection_a,
            selection_b=self.selection_b,
            polar_rule="" if self.mode == "total" else self.predicate.label,
            probe_radius=self.probe_radius,
            interface_cutoff=self.interface_cutoff,
            contact_cutoff=self.contact_cutoff,
            weights=self.weights.as_dict(),
            start_frame=frame_indices.start,
            stop_frame=frame_indices[-1],
            step=frame_indices.step,
            frames=results,
            metadata={
                "backend": self.backend.describe(),
                "strict": self.strict,
                "unwrap": self.unwrap,
            },
        )

        logger.info(f"Analysis complete: mean contact surface {result.mean_total_area():.2f} A^2")
        if result.n_failed_terms:
            logger.warning(
                f"{result.n_failed_terms} pairwise term(s) were reported as 0.0 "
                "after geometry failures"
            )
        return result

    def __repr__(self) -> str:
        return (
            f"ContactSurfaceAnalyzer(a='{self.selection_a}', b='{self.selection_b}', "
            f"mode={self.mode}, probe_radius={self.probe_radius})"
        )
