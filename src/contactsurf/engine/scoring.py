"""Empirical affinity score from interaction-class areas.

::

    affinity = w[P:P] * area_PP + w[NP:NP] * area_NPNP + w[P:NP] * area_PNP

Weights are in kcal/mol/A^2; negative values denote favorable burial.
"""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from contactsurf.core.constants import (
    DEFAULT_WEIGHTS,
    INTERACTION_CLASSES,
    NONPOLAR_NONPOLAR,
    POLAR_NONPOLAR,
    POLAR_POLAR,
)
from contactsurf.exceptions import ConfigurationError
from contactsurf.results.contact_surface import InteractionClassAreas


class WeightTable(BaseModel):
    """Per-class contact weights (kcal/mol/A^2), read-only once built.

    Accepts either the class labels (``"P:P"``, ``"NP:NP"``, ``"P:NP"``) or
    the field names as keys. A table given explicitly must define all three
    classes.

    Examples
    --------
    >>> WeightTable()  # defaults
    WeightTable(polar_polar=-0.015, nonpolar_nonpolar=-0.025, polar_nonpolar=-0.005)
    >>> WeightTable.model_validate({"P:P": -0.02, "NP:NP": -0.03, "P:NP": 0.0})
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    polar_polar: float = Field(DEFAULT_WEIGHTS[POLAR_POLAR], alias=POLAR_POLAR)
    nonpolar_nonpolar: float = Field(DEFAULT_WEIGHTS[NONPOLAR_NONPOLAR], alias=NONPOLAR_NONPOLAR)
    polar_nonpolar: float = Field(DEFAULT_WEIGHTS[POLAR_NONPOLAR], alias=POLAR_NONPOLAR)

    @model_validator(mode="before")
    @classmethod
    def require_all_classes(cls, data: Any) -> Any:
        """An explicit weight table must cover every interaction class."""
        if isinstance(data, dict) and data:
            field_for = {
                POLAR_POLAR: "polar_polar",
                NONPOLAR_NONPOLAR: "nonpolar_nonpolar",
                POLAR_NONPOLAR: "polar_nonpolar",
            }
            missing = [
                label
                for label in INTERACTION_CLASSES
                if label not in data and field_for[label] not in data
            ]
            if missing:
                raise ValueError(f"Missing weight(s) for interaction class(es): {missing}")
        return data

    @classmethod
    def from_mapping(cls, data: Mapping[str, float]) -> "WeightTable":
        """Build a table from a label -> weight mapping.

        Raises
        ------
        ConfigurationError
            If a class is missing, a key is unknown or a weight is not a number.
        """
        try:
            return cls.model_validate(dict(data))
        except ValidationError as e:
            messages = "; ".join(err["msg"] for err in e.errors())
            raise ConfigurationError(f"Invalid weight table: {messages}") from e

    def as_dict(self) -> dict[str, float]:
        """Weights keyed by class label."""
        return {
            POLAR_POLAR: self.polar_polar,
            NONPOLAR_NONPOLAR: self.nonpolar_nonpolar,
            POLAR_NONPOLAR: self.polar_nonpolar,
        }

    def __getitem__(self, label: str) -> float:
        return self.as_dict()[label]


def score(areas: InteractionClassAreas, weights: WeightTable) -> float:
    """Weighted sum of the three class areas (kcal/mol).

    Examples
    --------
    >>> areas = InteractionClassAreas(polar_polar=10, nonpolar_nonpolar=20, polar_nonpolar=5)
    >>> round(score(areas, WeightTable()), 6)
    -0.675
    """
    return (
        weights.polar_polar * areas.polar_polar
        + weights.nonpolar_nonpolar * areas.nonpolar_nonpolar
        + weights.polar_nonpolar * areas.polar_nonpolar
    )
