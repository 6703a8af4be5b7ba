"""TeamSpace CLI - Typer-based command line interface."""

import asyncio
import json
import os
from datetime import timedelta
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from teamspace.models.team import Team

app = typer.Typer(
    name="teamspace",
    help="TeamSpace - teams, invite tokens and membership approval",
    no_args_is_help=True,
)

console = Console()


def _use_db(db_path: Path | None) -> None:
    if db_path:
        os.environ["TEAMSPACE_DB"] = str(db_path)


@app.command()
def serve(
    host: Annotated[str, typer.Option("--host", "-h", help="Host to bind to")] = "127.0.0.1",
    port: Annotated[int, typer.Option("--port", "-p", help="Port to listen on")] = 8080,
    reload: Annotated[bool, typer.Option("--reload", help="Enable auto-reload")] = False,
    db_path: Annotated[Path | None, typer.Option("--db", "-d", help="Database file path")] = None,
) -> None:
    """Start the TeamSpace web server."""
    import uvicorn

    _use_db(db_path)

    console.print("[green]Starting TeamSpace server[/green]")
    console.print(f"  Auth mode: {os.environ.get('TEAMSPACE_AUTH_MODE', 'principal')}")
    console.print(f"  URL: http://{host}:{port}")
    console.print(f"  API Docs: http://{host}:{port}/docs")
    console.print()

    uvicorn.run(
        "teamspace.api.server:app",
        host=host,
        port=port,
        reload=reload,
    )


@app.command("dev-token")
def dev_token(
    user_id: Annotated[str, typer.Argument(help="User ID to put in the token subject")],
    name: Annotated[str | None, typer.Option("--name", "-n", help="Display name")] = None,
    email: Annotated[str | None, typer.Option("--email", "-e", help="Email address")] = None,
    minutes: Annotated[
        int | None,
        typer.Option("--minutes", "-m", help="Token lifetime in minutes"),
    ] = None,
) -> None:
    """Print a bearer token for TEAMSPACE_AUTH_MODE=jwt."""
    from teamspace.security.jwt import create_access_token

    if os.environ.get("TEAMSPACE_ENV") == "production":
        console.print("[red]Error:[/red] dev-token is disabled in production.")
        raise typer.Exit(1)

    token = create_access_token(
        user_id,
        display_name=name,
        email=email,
        expires_delta=timedelta(minutes=minutes) if minutes else None,
    )
    print(token)


# Database subcommands
db_app = typer.Typer(help="Database management commands")
app.add_typer(db_app, name="db")


@db_app.command("init")
def db_init(
    db_path: Annotated[Path | None, typer.Option("--db", "-d", help="Database file path")] = None,
    force: Annotated[bool, typer.Option("--force", "-f", help="Drop and recreate tables")] = False,
) -> None:
    """Initialize the database and create all tables."""
    from teamspace.db import close_db, init_db
    from teamspace.db.database import get_database_url
    from teamspace.db.models import Base

    _use_db(db_path)
    db_url = get_database_url()

    async def _init():
        if force:
            console.print("[yellow]Dropping existing tables[/yellow]")
        await init_db(db_url, reset=force)
        await close_db()

    asyncio.run(_init())
    console.print(f"[green]Database initialized:[/green] {db_url}")
    console.print(f"  Tables: {', '.join(Base.metadata.tables.keys())}")


# Team subcommands
teams_app = typer.Typer(help="Inspect stored teams")
app.add_typer(teams_app, name="teams")


async def _list_teams() -> list[Team]:
    from teamspace.db import close_db, session_scope
    from teamspace.db.repositories import TeamRepository
    from teamspace.engine import build_dispatcher
    from teamspace.engine.commands import ListAllTeamsQuery

    try:
        async with session_scope() as session:
            dispatcher = build_dispatcher(TeamRepository(session))
            return await dispatcher.dispatch(ListAllTeamsQuery())
    finally:
        await close_db()


async def _get_team(team_id: str) -> Team | None:
    from teamspace.db import close_db, session_scope
    from teamspace.db.repositories import TeamRepository

    try:
        async with session_scope() as session:
            return await TeamRepository(session).get_by_id(team_id)
    finally:
        await close_db()


@teams_app.command("list")
def teams_list(
    db_path: Annotated[Path | None, typer.Option("--db", "-d", help="Database file path")] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """List all teams with member counts."""
    _use_db(db_path)
    teams = asyncio.run(_list_teams())

    if json_output:
        print(json.dumps([team.model_dump(mode="json") for team in teams], indent=2))
        return

    if not teams:
        console.print("[yellow]No teams found[/yellow]")
        return

    table = Table(title="Teams")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Admins", justify="right")
    table.add_column("Active", justify="right", style="green")
    table.add_column("Pending", justify="right", style="yellow")
    table.add_column("Invite")

    for team in teams:
        if team.invite_token is None:
            invite = "-"
        elif team.is_token_valid():
            invite = "[green]valid[/green]"
        else:
            invite = "[red]expired[/red]"
        table.add_row(
            team.id,
            team.name,
            str(len(team.admins)),
            str(len(team.active_members())),
            str(len(team.pending_members())),
            invite,
        )

    console.print(table)


@teams_app.command("show")
def teams_show(
    team_id: Annotated[str, typer.Argument(help="Team ID")],
    db_path: Annotated[Path | None, typer.Option("--db", "-d", help="Database file path")] = None,
) -> None:
    """Show a team and its members."""
    _use_db(db_path)
    team = asyncio.run(_get_team(team_id))

    if team is None:
        console.print(f"[red]Error:[/red] Team not found: {team_id}")
        raise typer.Exit(1)

    console.print(f"[bold]{team.name}[/bold] ({team.id})")
    if team.description:
        console.print(f"  {team.description}")
    console.print(f"  Admins: {', '.join(sorted(team.admins))}")
    if team.invite_token_expiry:
        console.print(f"  Invite expires: {team.invite_token_expiry:%Y-%m-%d %H:%M} UTC")
    console.print()

    table = Table(title="Members")
    table.add_column("Member ID", style="dim")
    table.add_column("User")
    table.add_column("Nickname")
    table.add_column("Status")
    table.add_column("Joined")

    status_style = {"pending": "yellow", "active": "green", "inactive": "red"}
    for member in team.members:
        style = status_style.get(member.status.value, "white")
        table.add_row(
            member.id,
            member.email or member.user_id,
            member.nickname,
            f"[{style}]{member.status.value}[/{style}]",
            f"{member.joined_at:%Y-%m-%d %H:%M}",
        )

    console.print(table)


if __name__ == "__main__":
    app()
