"""Game engine: rules, command handlers, the world view and the turn loop."""

from fiction_engine.engine.commands import COMMAND_HELP, CommandContext, show_location
from fiction_engine.engine.engine import GameEngine
from fiction_engine.engine.events import EventBus, EventRecorder, UIEvent
from fiction_engine.engine.processor import CommandProcessor, populate_inventories
from fiction_engine.engine.results import CommandResult, TurnResult
from fiction_engine.engine.rules import RuleEngine
from fiction_engine.engine.world_view import (
    FlatWorld,
    SpatialWorld,
    WorldView,
    create_world_view,
)

__all__ = [
    "COMMAND_HELP",
    "CommandContext",
    "CommandProcessor",
    "CommandResult",
    "EventBus",
    "EventRecorder",
    "FlatWorld",
    "GameEngine",
    "RuleEngine",
    "SpatialWorld",
    "TurnResult",
    "UIEvent",
    "WorldView",
    "create_world_view",
    "populate_inventories",
    "show_location",
]
