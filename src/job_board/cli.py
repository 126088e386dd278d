"""Command-line interface for the Job Board."""

import typer
from rich.console import Console
from rich.table import Table

from job_board.config import settings
from job_board.core.errors import JobBoardError
from job_board.core.models import Role

app = typer.Typer(
    name="job-board",
    help="Job Board - job postings, applications and applicant review",
    add_completion=False,
)
console = Console()


def _database():
    from job_board.db.database import Database

    return Database(settings.database_url, echo=settings.database_echo)


@app.command()
def serve(
    host: str = typer.Option(settings.host, help="Host to bind to"),
    port: int = typer.Option(settings.port, help="Port to bind to"),
    reload: bool = typer.Option(settings.reload, help="Enable auto-reload"),
) -> None:
    """Start the API server."""
    import uvicorn

    console.print(f"🚀 Starting Job Board on {host}:{port}")
    uvicorn.run(
        "job_board.api.main:app",
        host=host,
        port=port,
        reload=reload,
    )


@app.command()
def config() -> None:
    """Show current configuration."""
    table = Table(title="Job Board Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    # Show non-sensitive settings
    table.add_row("Debug Mode", str(settings.debug))
    table.add_row("Log Level", settings.log_level)
    table.add_row("Database", settings.database_url.split("@")[-1])
    table.add_row("Default Page Size", str(settings.default_page_size))
    table.add_row("Max Page Size", str(settings.max_page_size))
    table.add_row("Blob Storage", "configured" if settings.cloudinary_api_key else "not configured")
    table.add_row("Resume Limit (bytes)", str(settings.resume_max_bytes))

    console.print(table)


@app.command("init-db")
def init_db() -> None:
    """Create database tables."""
    _database().create_all()
    console.print("✅ Database schema is up to date")


@app.command("create-user")
def create_user(
    email: str = typer.Option(..., help="Login email"),
    name: str = typer.Option(..., help="Display name"),
    role: Role = typer.Option(Role.USER, help="ADMIN for employers, USER for job seekers"),
) -> None:
    """Create an account and print its id."""
    from job_board.services.profiles import ProfileService

    with _database().session() as session:
        try:
            user = ProfileService(session).create_user({"email": email, "name": name, "role": role})
        except JobBoardError as e:
            console.print(f"❌ {e.message}")
            raise typer.Exit(code=1)

    console.print(f"✅ Created {user.role.value} {user.email} ({user.id})")


@app.command("issue-token")
def issue_token(email: str = typer.Option(..., help="Email of an existing user")) -> None:
    """Print a bearer token for an existing user."""
    from job_board.core.identity import TokenIdentityProvider
    from job_board.services.profiles import ProfileService

    with _database().session() as session:
        user = ProfileService(session).find_by_email(email)

    if user is None:
        console.print(f"❌ No user with email {email}")
        raise typer.Exit(code=1)

    provider = TokenIdentityProvider(
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
        expiration_hours=settings.jwt_expiration_hours,
    )
    console.print(provider.issue_token(user.id))


@app.command()
def version() -> None:
    """Show version information."""
    from job_board import __version__
    console.print(f"Job Board v{__version__}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
