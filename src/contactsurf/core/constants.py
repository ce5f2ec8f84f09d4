"""Shared constants for the contact-surface engine and its configuration.

Centralizing them here keeps the config schema, the CLI template and the
engine defaults consistent.
"""

# Interaction-class labels, in output order.
POLAR_POLAR: str = "P:P"
NONPOLAR_NONPOLAR: str = "NP:NP"
POLAR_NONPOLAR: str = "P:NP"
INTERACTION_CLASSES: tuple[str, ...] = (POLAR_POLAR, NONPOLAR_NONPOLAR, POLAR_NONPOLAR)

# Empirical contact weights (kcal/mol/A^2). Negative means favorable burial.
DEFAULT_WEIGHTS: dict[str, float] = {
    POLAR_POLAR: -0.015,
    NONPOLAR_NONPOLAR: -0.025,
    POLAR_NONPOLAR: -0.005,
}

# Water probe radius for SASA (Angstroms).
DEFAULT_PROBE_RADIUS: float = 1.4

# Per-class contact cutoff (Angstroms), as used by the SIRAH decomposition.
DEFAULT_CONTACT_CUTOFF: float = 6.1

# Sphere points per atom for Shrake-Rupley (MDTraj default).
DEFAULT_N_SPHERE_POINTS: int = 960

# A^2 <-> nm^2 and A <-> nm conversion factors (MDTraj works in nm).
ANG_TO_NM: float = 0.1
NM2_TO_ANG2: float = 100.0

# Polar atom rules used by the built-in presets.
ALL_ATOM_POLAR_NAME_PATTERNS: tuple[str, ...] = ("N.*", "O.*", "P.*", "S.*")
SIRAH_POLAR_CHARGE_THRESHOLD: float = 0.2
SIRAH_POLAR_BEAD_NAMES: tuple[str, ...] = ("GN", "l2", "K3", "K4")
