"""Exception types raised by ContactSurf.

Three failure families are distinguished:

- ``EmptySelectionError``: a selection or reduced subset holds zero atoms
  in the current frame. Recoverable; the affected contact area is reported
  as 0.0 in tolerant mode.
- ``GeometryEngineError``: the geometry backend (selection evaluation or
  SASA) failed for another reason. Fatal when detected during startup
  checks, degraded to 0.0 (and counted) when it happens inside a frame.
- ``ConfigurationError``: invalid or incomplete configuration. Always fatal
  and always raised before any frame is processed.
"""

from __future__ import annotations


class ContactSurfaceError(Exception):
    """Base class for all ContactSurf errors."""

    pass


class EmptySelectionError(ContactSurfaceError):
    """Raised when an atom subset required for a computation is empty."""

    pass


class GeometryEngineError(ContactSurfaceError):
    """Raised when the geometry backend fails for a non-empty input."""

    pass


class ConfigurationError(ContactSurfaceError, ValueError):
    """Raised for invalid configuration values or files."""

    pass
