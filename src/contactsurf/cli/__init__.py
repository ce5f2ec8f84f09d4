"""Command line interface."""

from contactsurf.cli.main import cli, main

__all__ = ["cli", "main"]
