"""Short URL CLI commands."""

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from shortener.database import get_session_context
from shortener.services import auth as auth_service
from shortener.services import urls as url_service

console = Console()
app = typer.Typer(help="Short URL commands")


@app.command("list")
def list_urls(email: str = typer.Argument(..., help="Owner email")):
    """List the short URLs owned by a user."""

    async def _list():
        async with get_session_context() as session:
            user = await auth_service.get_user_by_email(session, email)
            if not user:
                console.print(f"[red]Error:[/red] User {email} not found")
                raise typer.Exit(1)

            mappings = await url_service.list_for_owner(session, user.id)

            table = Table(title=f"Short URLs for {user.email}")
            table.add_column("ID", style="cyan")
            table.add_column("Code", style="green")
            table.add_column("Long URL")

            for mapping in mappings:
                table.add_row(mapping.id, mapping.short_code, mapping.long_url)

            console.print(table)

    asyncio.run(_list())


@app.command("resolve")
def resolve(short_code: str = typer.Argument(..., help="Short code")):
    """Print the long URL behind a short code."""

    async def _resolve():
        async with get_session_context() as session:
            long_url = await url_service.resolve(session, short_code)

        if not long_url:
            console.print(f"[red]Error:[/red] {short_code} not found")
            raise typer.Exit(1)
        console.print(long_url)

    asyncio.run(_resolve())
