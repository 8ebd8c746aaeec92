"""
plain.py

PURPOSE: Render UI events to the terminal.
DEPENDENCIES: rich, engine/events.py

ARCHITECTURE NOTES:
render_event() is an EventBus subscriber: it maps every UI event type to
Rich output. Debug log events are only shown when the renderer was asked
to show them (`--debug`).

The print_* helpers are also used directly by the CLI for things that
aren't game events (save confirmations, validation reports).
"""

import json

from pydantic import BaseModel
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.text import Text

from fiction_engine.engine.events import (
    CommandResultEvent,
    ConversationEvent,
    DebugLogEvent,
    EntityDescriptionEvent,
    GameOverEvent,
    GameStartEvent,
    InventoryDisplayEvent,
    LocationDisplayEvent,
    MessageDisplayEvent,
)

# Global console instance
console = Console()

CATEGORY_STYLES = {
    "info": None,
    "error": "red",
    "success": "green",
    "warning": "yellow",
}


def print_message(text: str) -> None:
    """Print a normal game message."""
    console.print(text)


def print_error(text: str) -> None:
    console.print(f"[red]{text}[/red]")


def print_success(text: str) -> None:
    console.print(f"[green]{text}[/green]")


def print_prompt() -> str:
    """Print the input prompt and get user input."""
    return console.input("[bold cyan]>[/bold cyan] ")


def print_title(title: str, author: str | None = None) -> None:
    """Print a game title in a panel."""
    panel = Panel(
        Text(title, justify="center", style="bold"),
        subtitle=f"by {author}" if author else None,
        border_style="blue",
    )
    console.print(panel)


def print_help(text: str) -> None:
    md = Markdown(text)
    console.print(md)


def print_debug(data: dict[str, object] | str) -> None:
    """Print debug information."""
    console.print("[dim]--- DEBUG ---[/dim]")
    if isinstance(data, dict):
        console.print(f"[dim]{json.dumps(data, indent=2, default=str)}[/dim]")
    else:
        console.print(f"[dim]{data}[/dim]")
    console.print("[dim]-------------[/dim]")


def print_game_over(won: bool, message: str) -> None:
    if won:
        style = "bold green"
        border = "green"
    else:
        style = "bold red"
        border = "red"

    panel = Panel(
        Text(message or ("You won!" if won else "The end."), justify="center", style=style),
        title="Game Over",
        border_style=border,
    )
    console.print(panel)


def _names(refs: list) -> str:
    return ", ".join(ref.name for ref in refs)


def render_event(event: BaseModel, show_debug: bool = False) -> None:
    """Print one UI event."""
    match event:
        case GameStartEvent(data=data):
            print_title(data.title, data.author)
        case LocationDisplayEvent(data=data):
            console.print(f"\n[bold]{data.name}[/bold]")
            if data.description:
                console.print(data.description)
            if data.objects:
                console.print(f"You can see: {_names(data.objects)}.")
            if data.characters:
                console.print(f"[cyan]Here: {_names(data.characters)}.[/cyan]")
            if data.exits:
                console.print(f"[dim]Exits: {', '.join(data.exits)}[/dim]")
            else:
                console.print("[dim]There are no obvious exits.[/dim]")
        case MessageDisplayEvent(data=data):
            style = CATEGORY_STYLES.get(data.category)
            console.print(Text(data.message, style=style) if style else data.message)
        case InventoryDisplayEvent(data=data):
            whose = "You are" if data.owner is None else f"{data.owner} is"
            if not data.items:
                console.print(f"{whose} carrying nothing.")
            else:
                console.print(f"{whose} carrying:")
                for item in data.items:
                    console.print(f"  - {item.name}")
        case EntityDescriptionEvent(data=data):
            console.print(data.description)
        case GameOverEvent(data=data):
            print_game_over(data.outcome == "victory", data.message)
        case ConversationEvent(data=data):
            console.print(f'[bold cyan]{data.character_name}[/bold cyan]: "{data.message}"')
            if data.topics:
                console.print(f"[dim]You could ask about: {', '.join(data.topics)}[/dim]")
        case DebugLogEvent(data=data):
            if show_debug:
                console.print(f"[dim][{data.level}] {data.message}[/dim]")
        case CommandResultEvent():
            # The message already went out as a message_display event
            pass


def clear_screen() -> None:
    console.clear()
