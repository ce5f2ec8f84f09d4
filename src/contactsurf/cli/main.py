"""
ContactSurf Command Line Interface.

Usage:
    contactsurf --help
    contactsurf init -o contactsurf.yaml --preset sirah
    contactsurf validate -c contactsurf.yaml
    contactsurf run -c contactsurf.yaml --start 0 --stop 999 --json result.json
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from contactsurf import __version__

LOGGER = logging.getLogger("contactsurf")


@click.group()
@click.version_option(version=__version__, prog_name="contactsurf")
@click.option("-q", "--quiet", is_flag=True, help="Only show warnings and errors")
@click.option("--debug", is_flag=True, help="Enable DEBUG logging for troubleshooting")
def cli(quiet: bool, debug: bool) -> None:
    """ContactSurf: contact-surface decomposition for MD trajectories.

    Measures the buried surface between two molecules frame by frame,
    split into polar-polar, nonpolar-nonpolar and polar-nonpolar contacts,
    with an empirical affinity estimate.
    """
    from contactsurf.core.logging_utils import setup_logging

    setup_logging(quiet=quiet, debug=debug)


# =============================================================================
# Init Command
# =============================================================================


@cli.command()
@click.option(
    "-o",
    "--output",
    default="contactsurf.yaml",
    show_default=True,
    type=click.Path(),
    help="Path of the template to write",
)
@click.option(
    "--preset",
    type=click.Choice(["all_atom", "sirah"]),
    default="all_atom",
    show_default=True,
    help="Template flavour",
)
def init(output: str, preset: str) -> None:
    """Write a template configuration file."""
    from contactsurf.config.loader import generate_config_template

    path = Path(output)
    if path.exists():
        click.echo(
            click.style(f"Error: '{path}' already exists, refusing to overwrite.", fg="red"),
            err=True,
        )
        sys.exit(1)

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(generate_config_template(preset))
    click.echo(click.style(f"Wrote {preset} template to {path}", fg="green"))
    click.echo("Edit the topology, trajectory and selections, then run:")
    click.echo(f"  contactsurf run -c {path}")


# =============================================================================
# Validate Command
# =============================================================================


def _load_analyzer(config_path: str):
    """Load the config, the backend and the analyzer for *config_path*."""
    from contactsurf.analyzer import ContactSurfaceAnalyzer
    from contactsurf.backends.mdanalysis import MDAnalysisBackend
    from contactsurf.config.loader import load_config

    config = load_config(config_path)
    backend = MDAnalysisBackend.from_files(
        config.topology,
        config.trajectory,
        n_sphere_points=config.sasa.n_sphere_points,
        radii=config.sasa.radii,
        guess_elements=config.sasa.guess_elements,
    )
    return config, ContactSurfaceAnalyzer.from_config(config, backend)


@cli.command()
@click.option(
    "-c",
    "--config",
    required=True,
    type=click.Path(exists=True),
    help="Path to YAML configuration file",
)
def validate(config: str) -> None:
    """Validate a configuration file against its topology.

    Loads the configuration, resolves both selections, checks that they are
    non-empty and disjoint, evaluates the polarity rule and checks SASA
    radii, without processing any frame.
    """
    from contactsurf.exceptions import ContactSurfaceError

    click.echo(f"Validating configuration: {config}")

    try:
        cs_config, analyzer = _load_analyzer(config)
        analyzer.resolve_frames(cs_config.frames.start, cs_config.frames.stop, cs_config.frames.step)
        report = analyzer.validate()
    except (FileNotFoundError, ContactSurfaceError) as e:
        click.echo(click.style(f"Validation failed: {e}", fg="red"), err=True)
        sys.exit(1)

    for warning in report["warnings"]:
        click.echo(click.style(f"Warning: {warning}", fg="yellow"))
    if not report["valid"]:
        for error in report["errors"]:
            click.echo(click.style(f"Error: {error}", fg="red"), err=True)
        sys.exit(1)

    click.echo(click.style("Configuration is valid!", fg="green"))
    click.echo()
    click.echo("Summary:")
    click.echo(f"  Mode: {cs_config.mode}")
    click.echo(f"  Selection A: {cs_config.selections.a} ({report['n_atoms_a']} atoms)")
    click.echo(f"  Selection B: {cs_config.selections.b} ({report['n_atoms_b']} atoms)")
    if "n_polar_a" in report:
        click.echo(f"  Polar atoms: A={report['n_polar_a']}, B={report['n_polar_b']}")
    click.echo(f"  Frames in trajectory: {report['n_frames']}")
    click.echo(f"  Probe radius: {cs_config.probe_radius} A")
    click.echo(f"  Contact cutoff: {cs_config.contact_cutoff} A")
    interface = cs_config.interface_cutoff
    click.echo(f"  Interface cutoff: {'disabled' if interface is None else f'{interface} A'}")


# =============================================================================
# Run Command
# =============================================================================


@cli.command()
@click.option(
    "-c",
    "--config",
    required=True,
    type=click.Path(exists=True),
    help="Path to YAML configuration file",
)
@click.option("--start", type=int, default=None, help="First frame (overrides config)")
@click.option("--stop", type=int, default=None, help="Last frame, inclusive (overrides config)")
@click.option("--step", type=int, default=None, help="Frame stride (overrides config)")
@click.option(
    "-o",
    "--output",
    type=click.Path(),
    default=None,
    help="Per-frame table path (overrides config)",
)
@click.option(
    "--json",
    "json_path",
    type=click.Path(),
    default=None,
    help="Also save the full result as JSON",
)
@click.option("--strict", is_flag=True, help="Abort on per-frame geometry failures")
@click.option(
    "--recompute",
    is_flag=True,
    help="Recompute even if the JSON result matches the current config",
)
def run(
    config: str,
    start: Optional[int],
    stop: Optional[int],
    step: Optional[int],
    output: Optional[str],
    json_path: Optional[str],
    strict: bool,
    recompute: bool,
) -> None:
    """Run the contact-surface analysis."""
    from contactsurf.core.config_hash import compute_config_hash, validate_config_hash
    from contactsurf.exceptions import ContactSurfaceError
    from contactsurf.output import FrameTableWriter
    from contactsurf.results.contact_surface import ContactSurfaceResult

    try:
        cs_config, analyzer = _load_analyzer(config)
    except (FileNotFoundError, ContactSurfaceError) as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)

    frames = cs_config.frames.model_copy(
        update={
            k: v
            for k, v in {"start": start, "stop": stop, "step": step}.items()
            if v is not None
        }
    )
    cs_config = cs_config.model_copy(update={"frames": frames})
    if strict:
        analyzer.strict = strict
        analyzer.engine.strict = strict

    table_path = Path(output) if output else cs_config.output.table
    json_out = Path(json_path) if json_path else cs_config.output.json_path
    config_hash = compute_config_hash(cs_config)

    if json_out is not None and json_out.exists() and not recompute:
        cached = ContactSurfaceResult.load(json_out)
        if validate_config_hash(cached.config_hash, cs_config):
            click.echo(f"Results are up to date: {json_out} (use --recompute to force)")
            if not table_path.exists():
                # Output paths are not hashed; rebuild a missing table from the cache
                with FrameTableWriter(
                    table_path,
                    mode=cs_config.mode,
                    interface=cs_config.measure_interface,
                    delimiter=cs_config.output.delimiter,
                ) as writer:
                    for frame_result in cached.frames:
                        writer.write(frame_result)
                click.echo(click.style(f"Table written to {table_path} from cache", fg="green"))
            click.echo(cached.summary())
            return

    try:
        # Frame range and static checks fail before the table is opened
        analyzer.resolve_frames(frames.start, frames.stop, frames.step)
        analyzer.prepare()
        with FrameTableWriter(
            table_path,
            mode=cs_config.mode,
            interface=cs_config.measure_interface,
            delimiter=cs_config.output.delimiter,
        ) as writer:
            result = analyzer.run(
                start=frames.start,
                stop=frames.stop,
                step=frames.step,
                writer=writer,
                config_hash=config_hash,
            )
    except ContactSurfaceError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)

    click.echo(click.style(f"Table written to {table_path}", fg="green"))
    if json_out is not None:
        result.save(json_out)
        click.echo(click.style(f"Result saved to {json_out}", fg="green"))
    click.echo()
    click.echo(result.summary())


def main() -> int:
    """Main entry point."""
    try:
        cli()
        return 0
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 1
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
