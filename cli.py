"""CLI commands for NerdDinner development and administration."""

import asyncio
from datetime import UTC, datetime, timedelta

import typer
import uvicorn

from src.auth import create_access_token
from src.config.settings import settings
from src.dinners.controller import PAGE_SIZE
from src.dinners.dtos import DinnerNotFoundError
from src.dinners.forms import DinnerInput
from src.dinners.repository.read_models import SqlDinnerReadModel
from src.dinners.repository.write_models import SqlDinnerWriteModel

app = typer.Typer(help="CLI commands for NerdDinner development and administration")


@app.command()
def serve(
    host: str = typer.Option(settings.app_host, "--host", help="Interface to bind"),
    port: int = typer.Option(settings.app_port, "--port", help="Port to listen on"),
    reload: bool = typer.Option(False, "--reload", help="Restart on code changes"),
):
    """Run the API server."""
    typer.secho(f"Serving NerdDinner API on http://{host}:{port}", fg=typer.colors.GREEN)
    uvicorn.run("src.main:app", host=host, port=port, reload=reload)


@app.command()
def issue_token(
    identity: str = typer.Argument(..., help="Identity the token authenticates as"),
    expires_minutes: int = typer.Option(
        60 * 24,
        "--expires-minutes",
        "-e",
        help="Minutes until the token expires",
    ),
):
    """Issue a bearer token for a development identity."""
    token = create_access_token(identity, expires_minutes=expires_minutes)
    typer.secho(f"Bearer token for {identity}:", fg=typer.colors.GREEN)
    typer.echo(token)


@app.command()
def create_dinner(
    title: str = typer.Option(..., "--title", "-t", help="Dinner title"),
    host: str = typer.Option(..., "--host", "-o", help="Identity of the host"),
    days_ahead: int = typer.Option(
        7,
        "--days-ahead",
        "-d",
        help="Days from now until the dinner",
    ),
    description: str = typer.Option("Nerd dinner", "--description", help="Description"),
    contact_phone: str = typer.Option("555-0100", "--phone", "-p", help="Contact phone"),
    address: str = typer.Option("TBA", "--address", "-a", help="Address"),
    country: str = typer.Option(None, "--country", "-c", help="Country"),
):
    """Store a dinner directly, bypassing the event queue (seeding)."""
    dinner_input = DinnerInput(
        title=title,
        event_date=datetime.now(UTC) + timedelta(days=days_ahead),
        description=description,
        contact_phone=contact_phone,
        address=address,
        country=country,
        host_id=host,
    )
    # Typer doesn't support async directly, so use asyncio.run
    dinner = asyncio.run(SqlDinnerWriteModel().add_dinner(dinner_input.to_dto()))

    typer.secho("Dinner created!", fg=typer.colors.GREEN)
    typer.secho(f"  ID: {dinner.id}", fg=typer.colors.CYAN)
    typer.secho(f"  Title: {dinner.title}", fg=typer.colors.BLUE)
    typer.secho(f"  Date: {dinner.event_date.isoformat()}", fg=typer.colors.BLUE)
    typer.secho(f"  Host: {dinner.host_id}", fg=typer.colors.BLUE)


@app.command()
def list_upcoming(
    page: int = typer.Option(1, "--page", min=1, help="Page number"),
):
    """List upcoming dinners from the database, earliest first."""
    dinner_page = asyncio.run(
        SqlDinnerReadModel().get_upcoming_page(datetime.now(UTC), page, PAGE_SIZE)
    )

    if not dinner_page.items:
        typer.secho("No upcoming dinners.", fg=typer.colors.YELLOW)
        return

    for dinner in dinner_page.items:
        typer.secho(
            f"{dinner.id:>5}  {dinner.event_date:%Y-%m-%d %H:%M}  {dinner.title}"
            f"  ({dinner.host_id}, {dinner.rsvp_count} RSVPs)",
            fg=typer.colors.CYAN,
        )
    typer.secho(
        f"Page {dinner_page.page_number} of {dinner_page.page_count}"
        f" ({dinner_page.total_count} dinners)",
        fg=typer.colors.BLUE,
    )


@app.command()
def delete_dinner(
    dinner_id: int = typer.Argument(..., help="Id of the dinner to delete"),
):
    """Delete a dinner and its RSVPs regardless of host (administration)."""
    try:
        asyncio.run(SqlDinnerWriteModel().delete_dinner(dinner_id))
    except DinnerNotFoundError as e:
        typer.secho(str(e), fg=typer.colors.RED)
        raise typer.Exit(1)

    typer.secho(f"Dinner {dinner_id} deleted.", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()
