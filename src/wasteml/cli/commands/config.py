"""Configuration management commands."""

from typing import Optional

import click


@click.group()
def config() -> None:
    """Configuration commands."""
    pass


@config.command("show")
def config_show() -> None:
    """Show the merged configuration."""
    from wasteml.cli.progress import console
    from wasteml.core.config import get_config

    config_obj = get_config()

    console.print("\n[bold]Current Configuration[/bold]")
    if config_obj.source:
        console.print(f"[dim]Source: {config_obj.source}[/dim]\n")
    else:
        console.print("[dim]Source: defaults (no config file found)[/dim]\n")

    for section_name, section in config_obj.to_dict().items():
        if section:
            console.print(f"[bold blue]\\[{section_name}][/bold blue]")
            for key, value in section.items():
                console.print(f"  {key} = {value!r}", markup=False, highlight=False)
            console.print()


@config.command("init")
@click.argument("path", required=False)
@click.option("--force", "-f", is_flag=True, help="Overwrite existing file")
def config_init(path: Optional[str], force: bool) -> None:
    """Write the default configuration to PATH (default: ./wasteml.toml)."""
    from pathlib import Path

    from wasteml.cli.progress import print_success
    from wasteml.cli.service_helpers import exit_with_error
    from wasteml.core.config import CONFIG_FILENAME, create_default_config_file

    target = path or CONFIG_FILENAME
    if Path(target).exists() and not force:
        exit_with_error(f"{target} already exists. Use --force to overwrite.")

    try:
        written = create_default_config_file(target)
    except OSError as e:
        exit_with_error(f"Cannot write {target}: {e}")

    print_success(f"Created configuration file: {written}")


@config.command("path")
def config_path() -> None:
    """Show configuration file search paths."""
    from wasteml.cli.progress import console
    from wasteml.core.config import get_config_locations

    console.print("\n[bold]Configuration File Search Paths[/bold]\n")
    console.print("Highest priority first; later files are overridden by earlier ones:\n")
    for i, location in enumerate(get_config_locations(), 1):
        state = "[green]exists[/green]" if location.exists() else "[dim]not found[/dim]"
        console.print(f"  {i}. {location} {state}")
    console.print()
