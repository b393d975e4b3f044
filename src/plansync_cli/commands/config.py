"""Configuration management commands."""

import typer

from plansync_cli.services.config_service import get_config_service
from plansync_cli.utils.exit_codes import ERROR_INVALID_ARGS
from plansync_cli.utils.typer_helpers import SuggestingGroup
from plansync_cli.utils.ui.console import get_console
from plansync_cli.utils.ui.formatters import format_error, format_output, format_success

from .decorators import command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="Configuration management commands")
console = get_console()


@app.command("view")
@command_wrapper
def view_config(
    output: str = typer.Option("table", "--output", "-o", help="Output format"),
) -> None:
    """View current configuration."""
    config = get_config_service().config.model_dump()
    # The store key is not secret, but long; show only its tail
    key = config["store"]["anon_key"]
    if key and output == "table":
        config["store"]["anon_key"] = f"...{key[-6:]}"
    if output == "table":
        for section, values in config.items():
            console.print(f"[bold cyan]{section}[/bold cyan]")
            format_output(values, output)
    else:
        format_output(config, output)


@app.command("get")
@command_wrapper
def get_config(
    key: str = typer.Argument(..., help="Configuration key (e.g., store.url)"),
) -> None:
    """Get a configuration value."""
    value = get_config_service().get(key)
    if value is None:
        format_error(f"Configuration key '{key}' not found")
        raise typer.Exit(1)
    console.print(value)


@app.command("set")
@command_wrapper
def set_config(
    key: str = typer.Argument(..., help="Configuration key (e.g., store.url)"),
    value: str = typer.Argument(..., help="Configuration value"),
) -> None:
    """Set a configuration value."""
    parsed_value: str | int | bool = value
    if value.lower() in ("true", "false"):
        parsed_value = value.lower() == "true"
    elif value.isdigit():
        parsed_value = int(value)

    try:
        get_config_service().set(key, parsed_value)
    except KeyError as e:
        format_error(str(e.args[0]))
        raise typer.Exit(ERROR_INVALID_ARGS) from e
    format_success(f"Configuration '{key}' set to '{parsed_value}'")


@app.command("reset")
@command_wrapper
def reset_config(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Reset configuration to defaults and sign out locally."""
    if not yes and not typer.confirm("Are you sure you want to reset the configuration?"):
        format_error("Cancelled")
        raise typer.Exit(0)

    get_config_service().reset_config()
    format_success("Configuration reset to defaults")
