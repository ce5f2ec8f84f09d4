"""Contact-surface engine: classification, spatial reduction, buried area,
decomposition and scoring."""

from contactsurf.engine.area import ContactAreaEngine, ContactPair, contact_area
from contactsurf.engine.classification import (
    PRESETS,
    AtomClassifier,
    ChargeOrNamePredicate,
    ClassifiedMolecule,
    ElementPredicate,
    NamePatternPredicate,
    PolarityPredicate,
    SelectionPredicate,
    TopologyAttributes,
    classify,
    get_preset,
)
from contactsurf.engine.decomposition import (
    Decomposition,
    DecompositionAggregator,
    class_pairs,
    decompose,
    reduce_pair,
)
from contactsurf.engine.scoring import WeightTable, score
from contactsurf.engine.spatial import interface_trim, same_residue_as, within

__all__ = [
    "ContactAreaEngine",
    "ContactPair",
    "contact_area",
    "PRESETS",
    "AtomClassifier",
    "ChargeOrNamePredicate",
    "ClassifiedMolecule",
    "ElementPredicate",
    "NamePatternPredicate",
    "PolarityPredicate",
    "SelectionPredicate",
    "TopologyAttributes",
    "classify",
    "get_preset",
    "Decomposition",
    "DecompositionAggregator",
    "class_pairs",
    "decompose",
    "reduce_pair",
    "WeightTable",
    "score",
    "interface_trim",
    "same_residue_as",
    "within",
]
