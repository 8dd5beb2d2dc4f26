"""
wasteml CLI - waste image classification
"""

import click

from wasteml import __version__

from .commands import config, dataset, models, run


@click.group()
@click.version_option(version=__version__, prog_name="wasteml")
@click.option(
    "--config",
    "config_path",
    type=click.Path(),
    default=None,
    help="Configuration file (highest priority in the config cascade)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(config_path: str, verbose: bool) -> None:
    """wasteml - train and apply a waste image classifier

    Use 'wasteml COMMAND --help' for more information on a command.
    """
    from wasteml.cli.service_helpers import exit_with_error
    from wasteml.core.config import load_config, set_config
    from wasteml.core.logger import set_level

    try:
        cfg = load_config(config_path)
    except FileNotFoundError as e:
        exit_with_error(str(e))
    except ValueError as e:
        # tomllib.TOMLDecodeError is a ValueError
        exit_with_error(f"Invalid configuration file {config_path}: {e}")

    set_config(cfg)
    try:
        set_level("DEBUG" if verbose else cfg.get("logging", "level", "WARNING"))
    except ValueError as e:
        exit_with_error(str(e))


cli.add_command(run)
cli.add_command(dataset)
cli.add_command(models)
cli.add_command(config)


if __name__ == "__main__":
    cli()
