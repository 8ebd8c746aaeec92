"""
cli.py

PURPOSE: Command-line interface for playing and checking worlds.
DEPENDENCIES: typer, rich

ARCHITECTURE NOTES:
The CLI provides commands for:
- play: Play a world interactively (keyword parser offline, Claude otherwise)
- validate: Validate a world file and report soft problems
- config: Show the effective configuration

The CLI is a thin shell: the engine emits UI events and ui.plain renders
them. In-game slash commands (/save, /load, /saves, /help) are handled
here and never reach the engine.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console

from fiction_engine import __version__
from fiction_engine.config import Settings, get_settings
from fiction_engine.constants import EXIT_COMMANDS, HELP_COMMANDS
from fiction_engine.engine.commands import COMMAND_HELP
from fiction_engine.engine.engine import GameEngine
from fiction_engine.models.world import WorldDefinition
from fiction_engine.observability import init_telemetry, shutdown_telemetry
from fiction_engine.persistence import SaveError, SaveLoadSystem
from fiction_engine.ui import plain
from fiction_engine.validator import ValidationSeverity, validate_world

app = typer.Typer(
    name="fiction-engine",
    help="Play interactive fiction worlds defined in JSON.",
    add_completion=False,
)

console = Console()
logger = logging.getLogger(__name__)

SLASH_HELP = """**Game commands**

- `/save [name]` save the game (default name: quicksave)
- `/load name` load a saved game
- `/saves` list saved games
- `/help` show this message
- `quit` leave the game
"""


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"fiction-engine version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    _version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Fiction Engine - play interactive fiction worlds."""
    pass


def configure_logging(settings: Settings) -> None:
    level = logging.DEBUG if settings.debug else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def load_world_or_exit(world_file: Path) -> WorldDefinition:
    """Load a world file, printing validation errors field by field."""
    try:
        return WorldDefinition.from_file(world_file)
    except json.JSONDecodeError as e:
        plain.print_error(f"Invalid JSON at line {e.lineno}: {e.msg}")
        raise typer.Exit(1) from None
    except ValidationError as e:
        plain.print_error("Validation errors:")
        for error in e.errors():
            loc = " -> ".join(str(x) for x in error["loc"])
            plain.print_error(f"  {loc}: {error['msg']}")
        raise typer.Exit(1) from None


def handle_slash_command(line: str, saves: SaveLoadSystem) -> None:
    """Run /save, /load, /saves or /help."""
    command, _, argument = line[1:].partition(" ")
    argument = argument.strip()

    try:
        match command.lower():
            case "save":
                path = saves.save_to_file(saves.path_for(argument or "quicksave"))
                plain.print_success(f"Game saved to {path}")
            case "load":
                if not argument:
                    plain.print_error("Usage: /load name")
                    return
                saves.load_from_file(saves.path_for(argument))
                plain.print_success(f"Loaded {argument}.")
            case "saves":
                files = saves.list_save_files()
                if not files:
                    plain.print_message("No saved games.")
                for path in files:
                    plain.print_message(f"  {path.stem}")
            case "help":
                plain.print_help(SLASH_HELP)
            case _:
                plain.print_error(f"Unknown command /{command}. Try /help.")
    except SaveError as e:
        plain.print_error(str(e))


async def run_session(engine: GameEngine, saves: SaveLoadSystem, debug: bool) -> None:
    """Read-eval-render loop until quit or game over."""
    while not engine.game_over:
        try:
            user_input = plain.print_prompt().strip()
        except (EOFError, KeyboardInterrupt):
            console.print()
            break

        if not user_input:
            continue
        if user_input.lower() in EXIT_COMMANDS:
            break
        if user_input.lower() in HELP_COMMANDS:
            plain.print_help(f"```\n{COMMAND_HELP}\n```")
            continue
        if user_input.startswith("/"):
            handle_slash_command(user_input, saves)
            continue

        await engine.process_command(user_input)
        console.print()

        if debug:
            plain.print_debug(
                {
                    "location": engine.state.current_location,
                    "turn": engine.state.turn_count,
                    "inventory": engine.inventory.get_inventory_items("player"),
                    "flags": engine.state.flags,
                    "counters": engine.state.counters,
                }
            )

    plain.print_message("Thanks for playing!")


@app.command()
def play(
    world_file: Annotated[
        Path,
        typer.Argument(
            help="Path to the world JSON file",
            exists=True,
            readable=True,
        ),
    ],
    continue_game: Annotated[
        bool,
        typer.Option(
            "--continue",
            "-c",
            help="Resume the most recent save",
        ),
    ] = False,
    debug: Annotated[
        bool,
        typer.Option(
            "--debug",
            "-d",
            help="Show debug information after each turn",
        ),
    ] = False,
    offline: Annotated[
        bool,
        typer.Option(
            "--offline",
            help="Use the keyword parser even if an API key is set",
        ),
    ] = False,
) -> None:
    """Play a world interactively."""
    settings = get_settings()
    if debug:
        settings.debug = True
    configure_logging(settings)
    init_telemetry(settings.otel)

    world = load_world_or_exit(world_file)
    engine = GameEngine.from_settings(world, settings, offline=offline)
    engine.events.subscribe(lambda event: plain.render_event(event, show_debug=debug))
    saves = SaveLoadSystem(engine, settings.saves_dir())

    engine.start()
    if continue_game:
        try:
            if not saves.load_latest_save():
                plain.print_message("No saved game found; starting fresh.")
        except SaveError as e:
            plain.print_error(f"Could not resume: {e}")
    console.print()

    try:
        asyncio.run(run_session(engine, saves, debug))
    finally:
        shutdown_telemetry()


@app.command()
def validate(
    world_file: Annotated[
        Path,
        typer.Argument(
            help="Path to the world JSON file",
            exists=True,
            readable=True,
        ),
    ],
) -> None:
    """Validate a world JSON file."""
    world = load_world_or_exit(world_file)

    # Show validation success and stats
    plain.print_success(f"Valid world: {world.meta.title}")
    console.print(f"  Locations: {len(world.entities.locations)}")
    console.print(f"  Objects: {len(world.entities.objects)}")
    console.print(f"  Characters: {len(world.entities.characters)}")
    console.print(f"  Action rules: {len(world.rules.action_rules)}")
    console.print(f"  Event rules: {len(world.rules.event_rules)}")

    issues = validate_world(world)
    if issues:
        console.print()
        for issue in issues:
            if issue.severity == ValidationSeverity.ERROR:
                plain.print_error(str(issue))
            else:
                console.print(f"[yellow]{issue}[/yellow]")


@app.command("config")
def config_cmd(
    show: Annotated[
        bool,
        typer.Option(
            "--show",
            "-s",
            help="Show current configuration",
        ),
    ] = True,
) -> None:
    """Show or modify configuration."""
    if show:
        settings = get_settings()
        console.print("[bold]Current Configuration:[/bold]")
        console.print(f"  Data directory: {settings.data_dir}")
        console.print(f"  Saves directory: {settings.saves_dir()}")
        console.print(f"  Log level: {settings.log_level}")
        console.print(f"  Debug: {settings.debug}")
        console.print(f"  World model: {'spatial' if settings.use_spatial else 'flat (legacy)'}")
        console.print()
        console.print("[bold]LLM Settings:[/bold]")
        console.print(f"  Provider: {settings.llm.provider}")
        console.print(f"  Model: {settings.llm.model}")
        console.print(f"  Temperature: {settings.llm.temperature}")
        console.print(f"  Timeout: {settings.llm.timeout_seconds}s")
        api_key_status = "set" if settings.llm.anthropic_api_key else "not set"
        console.print(f"  API Key: {api_key_status}")
        console.print()
        console.print("[bold]OpenTelemetry Settings:[/bold]")
        console.print(f"  Enabled: {settings.otel.enabled}")
        console.print(f"  Service name: {settings.otel.service_name}")
        endpoint_status = settings.otel.endpoint if settings.otel.endpoint else "(console only)"
        console.print(f"  Endpoint: {endpoint_status}")


if __name__ == "__main__":
    app()
