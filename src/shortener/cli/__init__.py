"""CLI commands using Typer."""

import typer

from shortener.cli.db import app as db_app
from shortener.cli.urls import app as urls_app
from shortener.cli.users import app as users_app

app = typer.Typer(name="shortener", help="URL shortener CLI")

app.add_typer(db_app, name="db")
app.add_typer(users_app, name="users")
app.add_typer(urls_app, name="urls")


@app.command()
def version():
    """Show version information."""
    from shortener import __version__

    typer.echo(f"shortener v{__version__}")


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Host to bind to"),
    port: int = typer.Option(8000, help="Port to bind to"),
    reload: bool = typer.Option(False, help="Enable auto-reload"),
):
    """Run the API server."""
    import uvicorn

    from shortener.config import load_settings
    from shortener.logging import get_uvicorn_log_config, setup_logging

    settings = load_settings()
    setup_logging(settings)
    uvicorn.run(
        "shortener.main:app",
        host=host,
        port=port,
        reload=reload,
        log_config=get_uvicorn_log_config(settings),
    )


if __name__ == "__main__":
    app()
