"""
YAML configuration loader and saver for ContactSurf.

This module provides functions to load and save ContactSurfaceConfig
objects from/to YAML files, with relative-path resolution against the
config file location and environment variable expansion. Every validation
failure is reported as a ConfigurationError.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Union

import yaml
from pydantic import ValidationError

from contactsurf.config.schema import ContactSurfaceConfig
from contactsurf.exceptions import ConfigurationError

PATH_KEYS = {"topology", "trajectory", "table", "json", "json_path"}


def _expand_paths(data: Dict[str, Any], base_path: Path) -> Dict[str, Any]:
    """Recursively expand relative paths in configuration data.

    Converts relative paths to absolute paths based on the config file location.
    Also expands environment variables in path strings.

    Args:
        data: Configuration dictionary
        base_path: Directory containing the config file

    Returns:
        Configuration with expanded paths
    """

    def expand_value(key: str, value: Any) -> Any:
        if key in PATH_KEYS and isinstance(value, str):
            path = Path(os.path.expandvars(value))
            if not path.is_absolute():
                path = base_path / path
            return str(path)
        elif isinstance(value, dict):
            return {k: expand_value(k, v) for k, v in value.items()}
        elif isinstance(value, list):
            return [expand_value(key, item) for item in value]
        return value

    return {k: expand_value(k, v) for k, v in data.items()}


def _convert_paths_to_relative(data: Dict[str, Any], base_path: Path) -> Dict[str, Any]:
    """Convert absolute paths to relative paths for saving.

    Args:
        data: Configuration dictionary with absolute paths
        base_path: Directory where config file will be saved

    Returns:
        Configuration with relative paths
    """

    def relativize_value(key: str, value: Any) -> Any:
        if key in PATH_KEYS and isinstance(value, str):
            path = Path(value)
            if path.is_absolute():
                try:
                    return str(path.relative_to(base_path))
                except ValueError:
                    # Not below base_path, keep absolute
                    return value
            return value
        elif isinstance(value, dict):
            return {k: relativize_value(k, v) for k, v in value.items()}
        elif isinstance(value, list):
            return [relativize_value(key, item) for item in value]
        return value

    return {k: relativize_value(k, v) for k, v in data.items()}


def _format_validation_error(error: ValidationError) -> str:
    lines = []
    for err in error.errors():
        location = ".".join(str(part) for part in err["loc"]) or "(root)"
        lines.append(f"{location}: {err['msg']}")
    return "; ".join(lines)


def load_config_dict(data: Dict[str, Any], base_path: Path | None = None) -> ContactSurfaceConfig:
    """Create a ContactSurfaceConfig from a dictionary.

    Args:
        data: Configuration dictionary
        base_path: Base path for resolving relative paths (default: cwd)

    Raises:
        ConfigurationError: If the configuration is invalid

    Example:
        >>> config = load_config_dict({
        ...     "topology": "complex.pdb",
        ...     "selections": {"a": "segid A", "b": "segid B"},
        ... })
    """
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration must be a mapping, got {type(data).__name__}")
    expanded = _expand_paths(data, base_path or Path.cwd())
    try:
        return ContactSurfaceConfig.model_validate(expanded)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {_format_validation_error(e)}") from e


def load_config(path: Union[str, Path]) -> ContactSurfaceConfig:
    """Load a ContactSurfaceConfig from a YAML file.

    Args:
        path: Path to the YAML configuration file

    Returns:
        Validated ContactSurfaceConfig instance

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ConfigurationError: If the YAML is malformed or the configuration is invalid

    Example:
        >>> config = load_config("contactsurf.yaml")
        >>> print(config.selections.a)
        "segid A and not name H*"
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path, "r") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Malformed YAML in {path}: {e}") from e

    if data is None:
        data = {}

    return load_config_dict(data, path.parent.absolute())


def save_config(
    config: ContactSurfaceConfig, path: Union[str, Path], relative_paths: bool = True
) -> None:
    """Save a ContactSurfaceConfig to a YAML file.

    Args:
        config: Configuration to save
        path: Destination path for the YAML file
        relative_paths: Whether to convert paths to relative (default: True)
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump(mode="json", by_alias=True)

    if relative_paths:
        data = _convert_paths_to_relative(data, path.parent.absolute())

    with open(path, "w") as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True, width=100)


def generate_config_template(preset: str = "all_atom") -> str:
    """Generate a template configuration file.

    Args:
        preset: "all_atom" (name-pattern polarity, interface trim at 15 A)
            or "sirah" (charge/bead-name polarity, per-class reduction)

    Returns:
        YAML template content
    """
    if preset == "sirah":
        selections = '  a: "segid A"\n  b: "segid B"'
        mode = "reduced"
        interface = "null"
        polar = "sirah"
        comment = "# SIRAH coarse-grained beads: |charge| >= 0.2 or name GN l2 K3 K4"
        guess = "false"
    elif preset == "all_atom":
        selections = '  a: "segid A and not name H*"\n  b: "segid B and not name H*"'
        mode = "direct"
        interface = "15.0"
        polar = "all_atom"
        comment = "# All-atom rule: atom names N* O* P* S* are polar"
        guess = "true"
    else:
        raise ValueError(f"Unknown template preset '{preset}'. Use 'all_atom' or 'sirah'.")

    return f'''\
# ============================================================================
# ContactSurf Configuration
# ============================================================================
# Per-frame contact surface between molecules A and B, decomposed into
# polar-polar, nonpolar-nonpolar and polar-nonpolar contacts.
#
# Run: contactsurf run -c contactsurf.yaml
# ============================================================================

topology: complex.pdb
trajectory:
  - production.dcd

# Static selections (evaluated once on the topology)
selections:
{selections}

# reduced: per-class contact reduction at contact_cutoff
# direct:  classify the (interface-trimmed) selections and pair them directly
# total:   single A:B contact area, no decomposition
mode: {mode}

probe_radius: 1.4        # Angstrom
interface_cutoff: {interface}   # Angstrom, coarse trim of A and B; null disables
same_residue: true       # expand the interface trim to whole residues
contact_cutoff: 6.1      # Angstrom, per-class contact cutoff

{comment}
polar_predicate: {polar}
# polar_predicate:
#   kind: charge
#   threshold: 0.2
#   names: [GN, l2, K3, K4]

# Empirical weights (kcal/mol/A^2); negative = favorable burial
weights:
  "P:P": -0.015
  "NP:NP": -0.025
  "P:NP": -0.005

frames:
  start: 0
  stop: -1               # -1 = last frame
  step: 1

sasa:
  n_sphere_points: 960
  radii: {{}}              # element -> radius (Angstrom), e.g. {{VS: 2.3}} for CG beads
  guess_elements: {guess}   # false: atoms without an element become VS beads

strict: false            # true: abort on per-frame geometry failures
measure_interface: false # also report the undifferentiated interface area
unwrap: true             # periodic frames: make A and B whole and adjacent

output:
  table: contact_surface.dat
  delimiter: tab
  json: null
'''
