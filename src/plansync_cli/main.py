"""Main entry point for PlanSync CLI."""

import typer
from rich.console import Console

from plansync_cli import __version__
from plansync_cli.commands import auth, config, projects
from plansync_cli.services.config_service import get_config_service
from plansync_cli.utils.typer_helpers import SuggestingGroup

# Create main app with custom group class
app = typer.Typer(
    name="plansync",
    cls=SuggestingGroup,
    help="Keep your project plans in sync with the cloud",
    no_args_is_help=True,
)

console = Console()


app.add_typer(auth.app, name="auth", help="Authentication commands")
app.add_typer(projects.app, name="projects", help="Project library commands")
app.add_typer(config.app, name="config", help="Configuration management")


@app.command()
def version() -> None:
    """Show version information and the configured store."""
    console.print(f"[bold]PlanSync CLI[/bold] version [cyan]{__version__}[/cyan]")

    config_service = get_config_service()
    store_url = config_service.config.store.url
    if store_url:
        console.print(f"[dim]Store: {store_url}[/dim]")
    else:
        console.print("[yellow]No store configured - run 'plansync config set store.url <url>'[/yellow]")

    if config_service.load_credentials() is None:
        console.print("[dim]Not signed in[/dim]")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
