"""
ContactSurf: contact-surface decomposition for molecular dynamics trajectories.

Measures, frame by frame, the surface buried between two molecules A and B
using the SASA inclusion-exclusion identity, splits it into polar-polar,
nonpolar-nonpolar and polar-nonpolar contacts, and scores the split with an
empirical affinity estimate.

Example usage:
    >>> from contactsurf.config import load_config
    >>> config = load_config("contactsurf.yaml")

    >>> from contactsurf import ContactSurfaceAnalyzer, MDAnalysisBackend
    >>> backend = MDAnalysisBackend.from_files(config.topology, config.trajectory)
    >>> result = ContactSurfaceAnalyzer.from_config(config, backend).run()

Key modules:
    - config: Configuration management with YAML support
    - engine: Classification, spatial reduction, buried area, decomposition, scoring
    - backends: Geometry engines (MDAnalysis + MDTraj Shrake-Rupley)
    - results: Per-frame results with JSON persistence
    - output: Per-frame table writer

Note:
    Heavy modules (MDAnalysis, MDTraj) are imported lazily, so the
    configuration layer can be used without loading a trajectory stack.
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Configuration
    "ContactSurfaceConfig",
    "load_config",
    # Analysis
    "ContactSurfaceAnalyzer",
    "ContactSurfaceResult",
    "FrameTableWriter",
    # Geometry
    "MDAnalysisBackend",
]


def __getattr__(name: str):
    """Lazy import heavy modules only when accessed."""
    if name == "ContactSurfaceConfig":
        from contactsurf.config.schema import ContactSurfaceConfig

        return ContactSurfaceConfig

    if name == "load_config":
        from contactsurf.config.loader import load_config

        return load_config

    if name == "ContactSurfaceAnalyzer":
        from contactsurf.analyzer import ContactSurfaceAnalyzer

        return ContactSurfaceAnalyzer

    if name == "ContactSurfaceResult":
        from contactsurf.results.contact_surface import ContactSurfaceResult

        return ContactSurfaceResult

    if name == "FrameTableWriter":
        from contactsurf.output import FrameTableWriter

        return FrameTableWriter

    if name == "MDAnalysisBackend":
        from contactsurf.backends.mdanalysis import MDAnalysisBackend

        return MDAnalysisBackend

    raise AttributeError(f"module 'contactsurf' has no attribute {name!r}")


def __dir__():
    """Return list of available attributes for tab completion."""
    return __all__
