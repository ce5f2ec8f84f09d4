"""Result containers with JSON persistence."""

from contactsurf.results.base import BaseAnalysisResult, get_contactsurf_version
from contactsurf.results.contact_surface import (
    ContactSurfaceResult,
    FrameResult,
    InteractionClassAreas,
)

__all__ = [
    "BaseAnalysisResult",
    "get_contactsurf_version",
    "ContactSurfaceResult",
    "FrameResult",
    "InteractionClassAreas",
]
