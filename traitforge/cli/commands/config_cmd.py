"""Config command for viewing and managing traitforge configuration."""

import typer

from ..app import app, console
from ... import config as config_module
from ...config import get_config, reset_config


VALID_KEYS = {
    "generation.max_attempts",
    "generation.budget_basis",
    "generation.cache_candidates",
    "format.weight_delimiter",
    "format.extension_delimiter",
    "format.key_separator",
    "defaults.output_folder",
    "defaults.image_extension",
}

INT_FIELDS = {"max_attempts"}
BOOL_FIELDS = {"cache_candidates"}
CHOICE_FIELDS = {"budget_basis": ("pool", "absolute")}


@app.command("config")
def config_command(
    action: str = typer.Argument(
        ...,
        help="Action: show, set, reset",
    ),
    key: str | None = typer.Argument(
        None,
        help="Config key (e.g. generation.max_attempts, defaults.output_folder)",
    ),
    value: str | None = typer.Argument(
        None,
        help="Value to set",
    ),
):
    """View or modify traitforge configuration.

    Examples:
        traitforge config show
        traitforge config set generation.max_attempts 50000
        traitforge config set generation.budget_basis absolute
        traitforge config reset
    """
    if action == "show":
        _show_config()
    elif action == "set":
        if not key or value is None:
            console.print("[red]Usage:[/red] traitforge config set <key> <value>")
            console.print()
            console.print("Available keys:")
            for k in sorted(VALID_KEYS):
                console.print(f"  {k}")
            raise typer.Exit(1)
        _set_config(key, value)
    elif action == "reset":
        _reset_config()
    else:
        console.print(f"[red]Unknown action:[/red] {action}")
        console.print("Valid actions: show, set, reset")
        raise typer.Exit(1)


def _show_config():
    """Display current resolved configuration."""
    config = get_config()

    console.print()
    console.print("[bold]traitforge Configuration[/bold]")
    console.print("─" * 40)

    console.print()
    console.print("[bold cyan]Generation[/bold cyan]")
    console.print(f"  max_attempts     = {config.generation.max_attempts}")
    console.print(f"  budget_basis     = {config.generation.budget_basis}")
    console.print(f"  cache_candidates = {config.generation.cache_candidates}")

    console.print()
    console.print("[bold cyan]Format[/bold cyan] (option names, e.g. gold#10.png)")
    console.print(f"  weight_delimiter    = {config.format.weight_delimiter!r}")
    console.print(f"  extension_delimiter = {config.format.extension_delimiter!r}")
    console.print(f"  key_separator       = {config.format.key_separator!r}")

    console.print()
    console.print("[bold cyan]Defaults[/bold cyan]")
    console.print(f"  output_folder   = {config.defaults.output_folder}")
    console.print(f"  image_extension = {config.defaults.image_extension}")

    console.print()
    config_file = config_module.CONFIG_FILE
    if config_file.exists():
        console.print(f"Config file: {config_file}")
    else:
        console.print(f"Config file: [dim]not created yet[/dim] ({config_file})")
    console.print()


def _set_config(key: str, value: str):
    """Set a config value and save."""
    if key not in VALID_KEYS:
        console.print(f"[red]Unknown key:[/red] {key}")
        console.print()
        console.print("Available keys:")
        for k in sorted(VALID_KEYS):
            console.print(f"  {k}")
        raise typer.Exit(1)

    config = get_config()
    zone, field_name = key.split(".", 1)
    target = getattr(config, zone)

    # Type coercion
    if field_name in INT_FIELDS:
        try:
            parsed = int(value)
        except ValueError:
            console.print(f"[red]Invalid integer value:[/red] {value}")
            raise typer.Exit(1)
        if parsed <= 0:
            console.print(f"[red]Value must be positive:[/red] {value}")
            raise typer.Exit(1)
        setattr(target, field_name, parsed)
    elif field_name in BOOL_FIELDS:
        setattr(target, field_name, value.lower() in ("1", "true", "yes"))
    elif field_name in CHOICE_FIELDS:
        choices = CHOICE_FIELDS[field_name]
        if value not in choices:
            console.print(
                f"[red]Invalid value:[/red] {value} (expected one of: {', '.join(choices)})"
            )
            raise typer.Exit(1)
        setattr(target, field_name, value)
    else:
        setattr(target, field_name, value)

    config.save()
    reset_config()  # Clear cached singleton so next get_config() reloads

    console.print(f"[green]✓[/green] Set {key} = {value}")
    console.print(f"  Saved to {config_module.CONFIG_FILE}")


def _reset_config():
    """Reset config to defaults."""
    config_file = config_module.CONFIG_FILE
    if config_file.exists():
        config_file.unlink()
        reset_config()
        console.print("[green]✓[/green] Config reset to defaults")
        console.print(f"  Removed {config_file}")
    else:
        console.print("Config already at defaults (no config file exists)")
