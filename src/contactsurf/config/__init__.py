"""Configuration management with YAML support and validation."""

from contactsurf.config.loader import (
    generate_config_template,
    load_config,
    load_config_dict,
    save_config,
)
from contactsurf.config.schema import (
    ChargeRule,
    ContactSurfaceConfig,
    ElementRule,
    FrameRangeConfig,
    NamePatternRule,
    OutputConfig,
    SASASettings,
    SelectionRule,
    SelectionsConfig,
)

__all__ = [
    "ContactSurfaceConfig",
    "SelectionsConfig",
    "NamePatternRule",
    "ElementRule",
    "ChargeRule",
    "SelectionRule",
    "FrameRangeConfig",
    "SASASettings",
    "OutputConfig",
    "load_config",
    "load_config_dict",
    "save_config",
    "generate_config_template",
]
