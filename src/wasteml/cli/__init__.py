"""Command-line interface for wasteml."""

from wasteml.cli.cli import cli

__all__ = ["cli"]
