"""Authentication commands."""

import typer
from rich.prompt import Prompt

from plansync_cli.app import app_session, build_app_services
from plansync_cli.utils.exit_codes import ERROR_INVALID_ARGS
from plansync_cli.utils.typer_helpers import SuggestingGroup
from plansync_cli.utils.ui.console import get_console
from plansync_cli.utils.ui.formatters import format_error, format_info, format_success

from .decorators import command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="Authentication commands")
console = get_console()


@app.command()
@command_wrapper
async def login(
    email: str | None = typer.Option(None, "--email", help="Email address"),
    password: str | None = typer.Option(None, "--password", help="Password"),
) -> None:
    """Sign in and load your project library."""
    if not email:
        email = Prompt.ask("Email")
    if not password:
        password = Prompt.ask("Password", password=True)

    async with app_session(require_identity=False, follow_session=True) as services:
        identity = (await services.identity.sign_in(email, password)).unwrap()
        format_success(f"Signed in as {identity.email}")

        if services.projects.last_error:
            format_error(f"Could not load projects: {services.projects.last_error}")
        else:
            count = len(services.projects.projects)
            console.print(f"[dim]{count} project(s) in your library[/dim]")


@app.command()
@command_wrapper
async def signup(
    email: str | None = typer.Option(None, "--email", help="Email address"),
    password: str | None = typer.Option(None, "--password", help="Password"),
    display_name: str | None = typer.Option(
        None, "--name", help="Display name shown to collaborators"
    ),
) -> None:
    """Create a new account."""
    if not display_name:
        display_name = Prompt.ask("Display name")
    if not email:
        email = Prompt.ask("Email")
    if not password:
        password = Prompt.ask("Password (6+ characters)", password=True)
        confirm_password = Prompt.ask("Confirm password", password=True)

        if password != confirm_password:
            format_error("Passwords do not match")
            raise typer.Exit(ERROR_INVALID_ARGS)

    async with app_session(require_identity=False) as services:
        identity = (
            await services.identity.sign_up(email, password, display_name)
        ).unwrap()

    if identity is None:
        format_success(f"Account created for {email}")
        format_info("Check your inbox and confirm your email address, then sign in.")
    else:
        format_success(f"Account created. Signed in as {identity.email}")


@app.command()
@command_wrapper
async def logout() -> None:
    """Sign out and forget the stored session."""
    # No session restore: signing out must work while the backend is down
    services = build_app_services(follow_session=False)
    try:
        if services.identity.session_token is None:
            format_info("Not signed in")
            return
        (await services.identity.sign_out()).unwrap()
    finally:
        await services.close()
    format_success("Signed out")


@app.command("reset-password")
@command_wrapper
async def reset_password(
    email: str | None = typer.Option(None, "--email", help="Account email address"),
) -> None:
    """Send a password-reset email."""
    if not email:
        email = Prompt.ask("Email")

    async with app_session(require_identity=False) as services:
        (await services.identity.reset_password(email)).unwrap()
    format_success(f"Password reset email sent to {email}")


@app.command()
@command_wrapper
async def whoami() -> None:
    """Show the signed-in user."""
    async with app_session() as services:
        identity = services.identity.identity
        name = identity.display_name or identity.email.split("@")[0]
        console.print(f"[bold]{name}[/bold] <{identity.email}>")
        console.print(f"[dim]User ID: {identity.id}[/dim]")
