"""Allow ``python -m wasteml``."""

from wasteml.cli import cli

if __name__ == "__main__":
    cli()
