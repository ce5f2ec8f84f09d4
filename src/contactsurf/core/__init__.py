"""Core data model and infrastructure.

- AtomSet / FrameContext value types
- Physical and default constants
- Periodic-boundary assembly of the A:B complex
- Config hashing for cache validation
- Logging setup
"""

from contactsurf.core.atomset import AtomSet, FrameContext
from contactsurf.core.config_hash import compute_config_hash, validate_config_hash
from contactsurf.core.logging_utils import ColoredFormatter, setup_logging
from contactsurf.core.pbc import assemble_complex

__all__ = [
    "AtomSet",
    "FrameContext",
    "assemble_complex",
    "compute_config_hash",
    "validate_config_hash",
    "ColoredFormatter",
    "setup_logging",
]
