"""Command-line interface using Typer."""

import asyncio
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from replay_studio import __version__
from replay_studio.domain.enums import RecordingMode, Server
from replay_studio.domain.models import InvalidFilterError, ReplayFilter
from replay_studio.logging import setup_logging
from replay_studio.services.discovery import SearchOutcome

# Setup logging
setup_logging()

app = typer.Typer(
    name="replay-studio",
    help="Replay Studio - League of Legends replay discovery CLI",
    add_completion=False,
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"Replay Studio v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Replay Studio - Find high-elo replays and queue them for upload."""
    pass


async def _run_search(replay_filter: ReplayFilter) -> SearchOutcome:
    from replay_studio.services.session import StudioSession

    studio = StudioSession()
    try:
        return await studio.discovery.search(replay_filter)
    finally:
        # A continuous-mode follow-up search must not outlive the command
        await studio.close()


@app.command()
def search(
    server: Server = typer.Option(Server.KR, "--server", "-s", help="Game server"),
    tier: str = typer.Option("challenger", "--tier", "-t", help="Minimum tier"),
    min_duration: int = typer.Option(25, "--min-duration", "-d", help="Minimum minutes"),
    kda: float = typer.Option(2.0, "--kda", "-k", help="Minimum KDA ratio"),
    mode: RecordingMode = typer.Option(
        RecordingMode.RANDOM_PRO, "--mode", "-m", help="Recording mode"
    ),
    player: Optional[str] = typer.Option(None, "--player", help="Player for specific-pro"),
    champion: Optional[str] = typer.Option(
        None, "--champion", help="Champion for champion-tier"
    ),
    winners: bool = typer.Option(True, "--winners/--all-games", help="Only winning games"),
    verbose: bool = typer.Option(False, "--verbose", help="Log discovery details"),
) -> None:
    """Run one replay search and print the results."""
    if verbose:
        setup_logging(level="DEBUG")

    try:
        replay_filter = ReplayFilter(
            server=server,
            tier=tier,
            min_duration=min_duration,
            kda_threshold=kda,
            only_winners=winners,
            recording_mode=mode,
            specific_player=player,
            specific_champion=champion,
        )
    except InvalidFilterError as e:
        console.print(f"[bold red]Invalid filters: {e}[/bold red]")
        raise typer.Exit(code=1)

    console.print(f"[bold blue]Searching {replay_filter.describe()}...[/bold blue]")
    outcome = asyncio.run(_run_search(replay_filter))

    if not outcome.success:
        console.print(f"[bold red]✗ {outcome.message}[/bold red]")
        raise typer.Exit(code=1)

    if outcome.fallback:
        console.print(f"[yellow]Using generated replays: {outcome.error}[/yellow]")

    table = Table(title=f"Replays ({outcome.count})")
    table.add_column("ID", style="dim")
    table.add_column("Player", style="cyan")
    table.add_column("Champion")
    table.add_column("Rank")
    table.add_column("KDA")
    table.add_column("Duration")

    for replay in outcome.replays:
        table.add_row(
            replay.id,
            replay.player,
            replay.champion,
            replay.rank,
            replay.kda_display,
            replay.duration,
        )

    console.print(table)
    console.print(f"[bold green]✓ {outcome.message}[/bold green]")


@app.command()
def health() -> None:
    """Check the health of a running API server."""
    import httpx

    from replay_studio.config import settings

    url = f"http://{settings.api_host}:{settings.api_port}/health/ready"

    try:
        response = httpx.get(url, timeout=10)
        data = response.json()

        table = Table(title="Service Health")
        table.add_column("Component", style="cyan")
        table.add_column("Status")

        if data.get("database") is not None:
            table.add_row("Database", "✓" if data.get("database") else "✗")

        for component, healthy in (data.get("components") or {}).items():
            table.add_row(component, "✓" if healthy else "✗")

        console.print(table)

        if data.get("ready"):
            console.print("[bold green]All services healthy![/bold green]")
        else:
            console.print("[bold yellow]Some services unhealthy[/bold yellow]")
            raise typer.Exit(code=1)

    except httpx.RequestError as e:
        console.print(f"[bold red]Cannot connect to API: {e}[/bold red]")
        console.print("[dim]Is the API server running?[/dim]")
        raise typer.Exit(code=1)


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Bind port"),
) -> None:
    """Start the API server."""
    import uvicorn

    from replay_studio.config import settings

    console.print("[bold blue]Starting Replay Studio API...[/bold blue]")
    uvicorn.run(
        "replay_studio.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=settings.api_reload,
    )


if __name__ == "__main__":
    app()
