"""Terminal front end for the navigator.

Usage:
    python main.py                                          # Interactive mode
    python main.py "Drive me from Los Angeles to San Francisco"  # Single query mode
"""

import asyncio
import json
import sys

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from navigator.config import configure_logging, settings
from navigator.errors import NavigationError
from navigator.models import TravelMode
from navigator.pipeline import NavigationSession, SelectionPhase, create_navigation_session
from navigator.utils import GEMINI_SLOT, GOOGLE_MAPS_SLOT, strip_html


console = Console()

HELP = """\
**Commands**

- `route` - enter start, destination and travel mode by hand
- `ask <request>` - describe the trip in your own words
- `go` - find routes for the current request
- `pick <n>` / `cancel` - choose one of the presented routes, or dismiss them
- `directions` - show step-by-step directions for the selected route
- `logs` / `clear-logs` - show or clear the API request log
- `keys` / `clear-keys` / `test-keys` - manage saved API keys
- `quit`
"""


def render_candidates(session: NavigationSession) -> None:
    """Show the presented route alternatives as a table."""
    table = Table(title="Choose your route", show_lines=True)
    table.add_column("#", justify="right")
    table.add_column("Route")
    table.add_column("Distance")
    table.add_column("Duration")
    table.add_column("Via")
    table.add_column("Major roads")
    table.add_column("Notes")

    for candidate in session.selection.candidates:
        notes = []
        if candidate.has_tolls:
            notes.append("[yellow]Tolls[/yellow]")
        if candidate.has_highway:
            notes.append("[blue]Highway[/blue]")
        notes.extend(f"[red]{warning}[/red]" for warning in candidate.warnings)
        notes.append(f"[dim]{candidate.step_count} steps[/dim]")

        table.add_row(
            str(candidate.index + 1),
            candidate.summary,
            candidate.distance_text,
            candidate.duration_text,
            ", ".join(candidate.via_points) or "-",
            ", ".join(candidate.major_roads) or "-",
            "\n".join(notes),
        )

    console.print(table)


def render_directions(session: NavigationSession) -> None:
    leg = session.selection.directions
    if leg is None:
        console.print("[dim]No route selected yet.[/dim]")
        return

    lines = [
        f"## {leg.start_address} → {leg.end_address}",
        "",
        f"**Distance:** {leg.distance.text}  **Duration:** {leg.duration.text}",
        "",
    ]
    for number, step in enumerate(leg.steps, start=1):
        lines.append(
            f"{number}. {strip_html(step.instructions) or '(continue)'} "
            f"*({step.distance.text}, {step.duration.text})*"
        )
    console.print(Markdown("\n".join(lines)))


def render_logs(session: NavigationSession) -> None:
    if not len(session.log):
        console.print("[dim]No API calls logged yet.[/dim]")
        return
    for entry in session.log.entries:
        color = "cyan" if entry.type.value == "REQUEST" else "green"
        console.print(Panel(
            json.dumps(entry.payload, indent=2, default=str),
            title=f"[{color}]{entry.type.value}[/{color}] #{entry.id} {entry.timestamp}",
            border_style=color,
        ))


def render_request(session: NavigationSession) -> None:
    request = session.request
    console.print(
        f"[green]✓[/green] From: {request.origin or '[dim]-[/dim]'}\n"
        f"[green]✓[/green] To: {request.destination or '[dim]-[/dim]'}\n"
        f"[green]✓[/green] Mode: {request.mode.value}"
    )


async def find_routes(session: NavigationSession) -> None:
    """Submit the pending request and present the outcome."""
    with console.status("[dim]Finding routes...[/dim]"):
        state = await session.navigate()

    if state.error is not None:
        console.print(Panel(str(state.error), title="Route error", border_style="red"))
    elif state.phase is SelectionPhase.PRESENTING_CANDIDATES:
        render_candidates(session)
        console.print("[dim]Use 'pick <n>' to choose a route or 'cancel'.[/dim]")


async def ask(session: NavigationSession, query: str) -> bool:
    """Fill the request from free text. Returns True on success."""
    with console.status("[dim]Parsing your request...[/dim]"):
        result = await session.interpret(query)
    if result is None:
        return False
    console.print("[green]Locations extracted successfully![/green]")
    render_request(session)
    return True


def enter_route(session: NavigationSession) -> None:
    request = session.request
    origin = Prompt.ask("Starting location", default=request.origin or None)
    destination = Prompt.ask("Destination", default=request.destination or None)
    mode = Prompt.ask(
        "Travel mode",
        choices=[m.value for m in TravelMode],
        default=request.mode.value,
    )
    session.update(origin=origin or "", destination=destination or "", mode=TravelMode(mode))


def manage_keys(session: NavigationSession) -> None:
    maps_key = Prompt.ask("Google Maps API key", default="", show_default=False, password=True)
    gemini_key = Prompt.ask("Gemini API key", default="", show_default=False, password=True)
    saved = [
        name for slot, name, value in (
            (GOOGLE_MAPS_SLOT, "Google Maps", maps_key),
            (GEMINI_SLOT, "Gemini", gemini_key),
        )
        if value and session.save_key(slot, value)
    ]
    if saved:
        console.print(f"[green]Saved {' and '.join(saved)} key(s); they will be remembered.[/green]")
    else:
        console.print("[dim]No keys saved.[/dim]")


async def test_keys(session: NavigationSession) -> None:
    """Check both keys against their services."""
    directions = session.selection.provider
    try:
        with console.status("[dim]Testing Directions API...[/dim]"):
            info = await directions.check_credential()
        console.print(f"[green]✓ Directions API is working![/green] New York → Boston. {info}")
    except NavigationError as e:
        console.print(f"[red]✗ Directions API: {e}[/red]")

    gemini_key = session.gemini_key()
    if not gemini_key:
        console.print("[yellow]Gemini API key not configured.[/yellow]")
        return
    try:
        with console.status("[dim]Testing Gemini API...[/dim]"):
            reply = await session.extractor.client.check_credential(gemini_key)
        console.print(f"[green]✓ Gemini API key is valid and working![/green] Response: {reply.strip()}")
    except NavigationError as e:
        console.print(f"[red]✗ Gemini API: {e}[/red]")


async def handle(session: NavigationSession, command: str, argument: str) -> None:
    if command == "route":
        enter_route(session)
        await find_routes(session)
    elif command == "ask":
        if await ask(session, argument or Prompt.ask("Where do you want to go?")):
            await find_routes(session)
    elif command == "go":
        await find_routes(session)
    elif command == "pick":
        try:
            index = int(argument) - 1
        except ValueError:
            console.print("[red]Please give a route number, e.g. 'pick 1'.[/red]")
            return
        session.selection.select(index)
        render_directions(session)
    elif command == "cancel":
        session.selection.cancel()
        console.print("[dim]Route selection dismissed.[/dim]")
    elif command == "directions":
        render_directions(session)
    elif command == "logs":
        render_logs(session)
    elif command == "clear-logs":
        session.log.clear()
        console.print("[dim]API log cleared.[/dim]")
    elif command == "keys":
        manage_keys(session)
    elif command == "clear-keys":
        if Confirm.ask("Are you sure you want to clear all saved API keys?"):
            session.clear_keys()
            console.print("[dim]All saved API keys cleared.[/dim]")
    elif command == "test-keys":
        await test_keys(session)
    else:
        console.print(Markdown(HELP))


async def interactive_mode():
    """Run interactive mode."""
    session = create_navigation_session()

    console.print("\n[bold blue]🧭 Navigator[/bold blue]\n")
    console.print(Panel(
        "Get turn-by-turn directions and compare route alternatives.\n\n"
        "[bold]Try:[/bold]\n"
        "  • ask Drive me from Los Angeles to San Francisco\n"
        "  • route\n\n"
        "[dim]Type 'help' for all commands, 'quit' to exit.[/dim]",
        title="Welcome",
        border_style="blue",
    ))

    missing = settings.validate_required()
    if missing and session.selection.provider.api_key is None:
        console.print(
            f"[yellow]Missing configuration: {', '.join(missing)}. "
            "Use 'keys' or copy .env.example to .env.[/yellow]"
        )

    while True:
        try:
            console.print()
            user_input = Prompt.ask("[bold green]You[/bold green]").strip()

            if user_input.lower() in ["quit", "exit", "q"]:
                console.print("\n[dim]Goodbye! Safe travels! 🧭[/dim]\n")
                break

            if not user_input:
                continue

            command, _, argument = user_input.partition(" ")
            await handle(session, command.lower(), argument.strip())

        except KeyboardInterrupt:
            console.print("\n\n[dim]Session interrupted. Goodbye![/dim]\n")
            break
        except NavigationError as e:
            console.print(f"\n[red]{e}[/red]")


async def single_query(query: str):
    """Run a single query."""
    session = create_navigation_session()
    try:
        if not await ask(session, query):
            return
        await find_routes(session)
        if session.selection.state.phase is not SelectionPhase.PRESENTING_CANDIDATES:
            return
        choice = Prompt.ask(
            "Route number (or 'c' to cancel)",
            choices=[str(c.index + 1) for c in session.selection.candidates] + ["c"],
            default="1",
        )
        if choice == "c":
            session.selection.cancel()
            return
        session.selection.select(int(choice) - 1)
        render_directions(session)
    except NavigationError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)


def main():
    """Main entry point."""
    configure_logging()

    if len(sys.argv) > 1:
        query = " ".join(sys.argv[1:])
        asyncio.run(single_query(query))
    else:
        asyncio.run(interactive_mode())


if __name__ == "__main__":
    main()
