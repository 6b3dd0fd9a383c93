"""User management CLI commands."""

import asyncio

import typer
from rich.console import Console
from rich.table import Table
from sqlmodel import select

from shortener.config import load_settings
from shortener.database import get_session_context
from shortener.errors import ShortenerError
from shortener.models import User
from shortener.models.base import utcnow
from shortener.services import auth as auth_service
from shortener.services.email import EmailService, get_email_backend

console = Console()
app = typer.Typer(help="User management commands")


async def _get_user(session, email: str) -> User:
    user = await auth_service.get_user_by_email(session, email)
    if not user:
        console.print(f"[red]Error:[/red] User {email} not found")
        raise typer.Exit(1)
    return user


@app.command("list")
def list_users():
    """List all users."""

    async def _list():
        async with get_session_context() as session:
            stmt = select(User).order_by(User.email)
            result = await session.execute(stmt)
            users = result.scalars().all()

            table = Table(title="Users")
            table.add_column("ID", style="cyan")
            table.add_column("Name")
            table.add_column("Email", style="green")
            table.add_column("Verified", style="magenta")

            for user in users:
                verified = user.email_verified_at.strftime("%Y-%m-%d %H:%M") if user.email_verified_at else "No"
                table.add_row(user.id, user.name, user.email, verified)

            console.print(table)

    asyncio.run(_list())


@app.command("verification-url")
def verification_url(
    email: str = typer.Argument(..., help="User email"),
    send: bool = typer.Option(False, "--send", help="Also email the link to the user"),
):
    """Issue a fresh verification token and print its link."""

    async def _issue():
        settings = load_settings()
        email_service = EmailService(get_email_backend(settings), settings)

        async with get_session_context(settings) as session:
            user = await _get_user(session, email)
            if user.is_verified:
                console.print(f"[yellow]Warning:[/yellow] User {email} is already verified")
                return

            token = await auth_service.create_verification_token(session, settings, user.id)
            console.print(f"[green]Verification URL:[/green] {email_service.verification_link(token.id)}")
            console.print(f"[dim]Expires: {token.expires_at}[/dim]")

            if send:
                try:
                    await auth_service.send_verification_email(email_service, user.email, token.id)
                except ShortenerError as e:
                    console.print(f"[red]Error:[/red] {e.message}")
                    raise typer.Exit(1) from e
                console.print(f"[green]Sent to:[/green] {user.email}")

    asyncio.run(_issue())


@app.command("mark-verified")
def mark_verified(email: str = typer.Argument(..., help="User email")):
    """Mark a user's email as verified without a token."""

    async def _mark():
        async with get_session_context() as session:
            user = await _get_user(session, email)
            if user.is_verified:
                console.print(f"[yellow]Warning:[/yellow] User {email} is already verified")
                return

            user.email_verified_at = utcnow()
            await session.commit()
            console.print(f"[green]Verified:[/green] {email}")

    asyncio.run(_mark())
