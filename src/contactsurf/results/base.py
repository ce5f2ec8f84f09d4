"""Base class for analysis results.

Result types inherit from BaseAnalysisResult, which provides:
- Config hash for cache validation
- JSON serialization/deserialization
- Standard provenance fields (timestamp, package version)

Design Principles
-----------------
1. Results are immutable after creation
2. All results store the config hash for validation
3. Results can be saved/loaded from JSON
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import ClassVar, Self

from pydantic import BaseModel, Field


class BaseAnalysisResult(BaseModel, ABC):
    """Base class for result containers.

    Subclasses get ``save()`` and ``load()`` for free: ``save()`` writes
    ``model_dump(mode="json")`` and ``load()`` reconstructs the model with
    ``model_validate()``. Nested data objects should be plain
    ``pydantic.BaseModel`` subclasses.

    Attributes
    ----------
    analysis_type : str
        Type of analysis (class variable).
    config_hash : str
        Hash of the configuration used, ``"unknown"`` without config context.
    created_at : datetime
        Timestamp when the result was created.
    contactsurf_version : str
        Version of ContactSurf used.
    """

    analysis_type: ClassVar[str] = "base"

    config_hash: str = Field(
        default="unknown",
        description="SHA-256 hash of config for cache validation",
    )
    created_at: datetime = Field(
        default_factory=datetime.now, description="Timestamp of result creation"
    )
    contactsurf_version: str = Field(
        default="unknown", description="ContactSurf version used for analysis"
    )

    model_config = {"extra": "forbid"}

    def save(self, filepath: str | Path) -> Path:
        """Save result to a JSON file, creating parent directories.

        Returns
        -------
        Path
            Path to saved file
        """
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        with open(filepath, "w") as f:
            json.dump(self.model_dump(mode="json"), f, indent=2, default=str)

        return filepath

    @classmethod
    def load(cls, filepath: str | Path) -> Self:
        """Load result from a JSON file."""
        filepath = Path(filepath)
        with open(filepath) as f:
            data = json.load(f)

        return cls.model_validate(data)

    @abstractmethod
    def summary(self) -> str:
        """Return a human-readable summary of the result."""
        pass


def get_contactsurf_version() -> str:
    """Get the installed ContactSurf version."""
    try:
        from importlib.metadata import version

        return version("contactsurf")
    except Exception:
        return "unknown"
