"""Config hashing for result cache validation.

When results are written to JSON, a hash of the parameters that affect the
numbers is stored alongside them. If the configuration changes, the stored
hash no longer matches and cached results are recomputed.

Output paths, the delimiter and the strict flag do not change the computed
values and are excluded from the hash.
"""

import hashlib
import json
import warnings
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from contactsurf.config.schema import ContactSurfaceConfig


def compute_config_hash(config: "ContactSurfaceConfig") -> str:
    """Compute hash of config parameters that affect the results.

    Parameters
    ----------
    config : ContactSurfaceConfig
        Run configuration

    Returns
    -------
    str
        Hex digest of SHA-256 hash (first 16 characters for brevity)
    """
    hash_data = {
        "topology": str(config.topology),
        "trajectory": [str(p) for p in config.trajectory],
        "selections": config.selections.model_dump(),
        "mode": config.mode,
        "probe_radius": config.probe_radius,
        "interface_cutoff": config.interface_cutoff,
        "same_residue": config.same_residue,
        "contact_cutoff": config.contact_cutoff,
        "polar_predicate": (
            config.polar_predicate
            if isinstance(config.polar_predicate, str)
            else config.polar_predicate.model_dump()
        ),
        "weights": config.weights.as_dict(),
        "frames": config.frames.model_dump(),
        "sasa": config.sasa.model_dump(),
        "measure_interface": config.measure_interface,
        "unwrap": config.unwrap,
    }

    json_str = json.dumps(hash_data, sort_keys=True, default=str)
    return hashlib.sha256(json_str.encode()).hexdigest()[:16]


def validate_config_hash(
    stored_hash: str,
    current_config: "ContactSurfaceConfig",
    warn: bool = True,
) -> bool:
    """Check if a stored hash matches the current config.

    Parameters
    ----------
    stored_hash : str
        Hash stored in cached results
    current_config : ContactSurfaceConfig
        Current configuration
    warn : bool, optional
        If True (default), emit a UserWarning on mismatch

    Returns
    -------
    bool
        True if hashes match, False otherwise
    """
    current_hash = compute_config_hash(current_config)

    if stored_hash != current_hash:
        if warn:
            warnings.warn(
                f"Config hash mismatch (stored {stored_hash}, current {current_hash}): "
                "cached contact-surface results were computed with different settings "
                "and will be recomputed.",
                UserWarning,
            )
        return False

    return True
