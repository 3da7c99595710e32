"""
Operator CLI for the linkhub service.

Runs the server and talks to a running instance's control plane to list
connected clients and broadcast payloads.
"""

import httpx
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

DEFAULT_URL = "http://localhost:8080"

typer_app = typer.Typer(
    name="linkhub-cli",
    help="linkhub operator CLI - run the server, inspect clients, broadcast payloads",
    add_completion=False,
)
console = Console()


def _fail(message: str) -> None:
    console.print(f"[bold red]Error:[/bold red] {message}")
    raise typer.Exit(code=1)


@typer_app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Interface to bind"),
    port: int = typer.Option(8080, help="Port for HTTP and WebSocket traffic"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
):
    """
    Run the service with uvicorn.

    Example:
        python cli.py serve --port 8080
    """
    import uvicorn

    uvicorn.run(
        "linkhub:application", factory=True, host=host, port=port, reload=reload
    )


@typer_app.command()
def clients(url: str = typer.Option(DEFAULT_URL, help="Service base URL")):
    """
    Display a table of connected clients.

    Example:
        python cli.py clients --url http://localhost:8080
    """
    try:
        response = httpx.get(f"{url}/api/clients", timeout=10)
        response.raise_for_status()
    except httpx.HTTPError as ex:
        _fail(f"Could not fetch clients: {ex}")

    entries = response.json()

    console.print()
    console.print(
        Panel.fit(
            "[bold cyan]Connected Clients[/bold cyan]", border_style="cyan"
        )
    )
    console.print()

    table = Table(
        "Identity",
        "Address",
        "User Agent",
        "Connected At",
        "Last Seen",
        show_lines=True,
    )
    for entry in entries:
        table.add_row(
            f"[green]{entry['identity'][:8]}...[/green]",
            entry["address"],
            f"[dim]{entry['user_agent']}[/dim]",
            entry["connected_at"],
            entry["last_seen_at"],
        )

    console.print(table)
    console.print()
    console.print(f"[bold]Summary:[/bold] {len(entries)} client(s) connected")


@typer_app.command()
def broadcast(
    payload: str = typer.Argument(..., help="Payload to send to every client"),
    url: str = typer.Option(DEFAULT_URL, help="Service base URL"),
):
    """
    Send a payload to every connected client and show the outcome.

    Example:
        python cli.py broadcast "refresh()"
    """
    try:
        response = httpx.post(
            f"{url}/api/broadcast", json={"payload": payload}, timeout=30
        )
    except httpx.HTTPError as ex:
        _fail(f"Could not reach service: {ex}")

    result = response.json()

    if not result.get("success"):
        _fail(result.get("error") or f"HTTP {response.status_code}")

    console.print(
        f"[green]✓[/green] {result['message']} "
        f"([bold]{result['successCount']}[/bold] ok, "
        f"[bold]{result['failureCount']}[/bold] failed)"
    )


if __name__ == "__main__":
    typer_app()
