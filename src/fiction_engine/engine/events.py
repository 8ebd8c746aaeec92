"""
events.py

PURPOSE: Typed outbound UI events and the bus that delivers them.
DEPENDENCIES: pydantic

ARCHITECTURE NOTES:
The engine never prints. Everything the player should see leaves as a UI
event; a renderer (ui/plain.py, or a test) subscribes to the EventBus.

Each event is {type, timestamp, data} with a typed payload. UIEvent is the
discriminated union over `type`, so a consumer can round-trip events
through JSON and get the right class back.
"""

import logging
import time
from collections.abc import Callable
from typing import Annotated, Literal

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class EntityRef(BaseModel):
    id: str
    name: str


# --- Payloads ---


class GameStartData(BaseModel):
    title: str
    author: str


class LocationDisplayData(BaseModel):
    id: str
    name: str
    description: str
    objects: list[EntityRef] = Field(default_factory=list)
    characters: list[EntityRef] = Field(default_factory=list)
    exits: list[str] = Field(default_factory=list)


MessageCategory = Literal["info", "error", "success", "warning"]


class MessageDisplayData(BaseModel):
    message: str
    category: MessageCategory = "info"


class InventoryDisplayData(BaseModel):
    items: list[EntityRef] = Field(default_factory=list)
    owner: str | None = Field(default=None, description="Whose bag; None means the player")


class EntityDescriptionData(BaseModel):
    id: str
    name: str
    description: str
    kind: Literal["object", "character", "location"]


class GameOverData(BaseModel):
    outcome: Literal["victory", "defeat"]
    message: str


class ConversationData(BaseModel):
    character_id: str
    character_name: str
    message: str
    topics: list[str] | None = None


class CommandResultData(BaseModel):
    success: bool
    action: str
    target: str | None = None
    message: str | None = None


class DebugLogData(BaseModel):
    message: str
    level: Literal["info", "warn", "error"] = "info"


# --- Events ---


def _now() -> float:
    return time.time()


class GameStartEvent(BaseModel):
    type: Literal["game_start"] = "game_start"
    timestamp: float = Field(default_factory=_now)
    data: GameStartData


class LocationDisplayEvent(BaseModel):
    type: Literal["location_display"] = "location_display"
    timestamp: float = Field(default_factory=_now)
    data: LocationDisplayData


class MessageDisplayEvent(BaseModel):
    type: Literal["message_display"] = "message_display"
    timestamp: float = Field(default_factory=_now)
    data: MessageDisplayData


class InventoryDisplayEvent(BaseModel):
    type: Literal["inventory_display"] = "inventory_display"
    timestamp: float = Field(default_factory=_now)
    data: InventoryDisplayData


class EntityDescriptionEvent(BaseModel):
    type: Literal["entity_description"] = "entity_description"
    timestamp: float = Field(default_factory=_now)
    data: EntityDescriptionData


class GameOverEvent(BaseModel):
    type: Literal["game_over"] = "game_over"
    timestamp: float = Field(default_factory=_now)
    data: GameOverData


class ConversationEvent(BaseModel):
    type: Literal["conversation"] = "conversation"
    timestamp: float = Field(default_factory=_now)
    data: ConversationData


class CommandResultEvent(BaseModel):
    type: Literal["command_result"] = "command_result"
    timestamp: float = Field(default_factory=_now)
    data: CommandResultData


class DebugLogEvent(BaseModel):
    type: Literal["debug_log"] = "debug_log"
    timestamp: float = Field(default_factory=_now)
    data: DebugLogData


UIEvent = Annotated[
    GameStartEvent
    | LocationDisplayEvent
    | MessageDisplayEvent
    | InventoryDisplayEvent
    | EntityDescriptionEvent
    | GameOverEvent
    | ConversationEvent
    | CommandResultEvent
    | DebugLogEvent,
    Field(discriminator="type"),
]

EventHandler = Callable[[BaseModel], None]


class EventBus:
    """
    Fan-out of UI events to subscribers.

    Convenience emitters (message, error, ...) build the event models so
    handlers in the engine stay one line long.
    """

    def __init__(self) -> None:
        self._handlers: list[EventHandler] = []

    def subscribe(self, handler: EventHandler) -> None:
        self._handlers.append(handler)

    def unsubscribe(self, handler: EventHandler) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    def emit(self, event: BaseModel) -> None:
        for handler in self._handlers:
            handler(event)

    # Convenience emitters

    def message(self, text: str, category: MessageCategory = "info") -> None:
        self.emit(MessageDisplayEvent(data=MessageDisplayData(message=text, category=category)))

    def error(self, text: str) -> None:
        self.message(text, "error")

    def success(self, text: str) -> None:
        self.message(text, "success")

    def debug(self, text: str, level: Literal["info", "warn", "error"] = "info") -> None:
        """Integrity problems: log them and let debug renderers show them."""
        logger.debug(text)
        self.emit(DebugLogEvent(data=DebugLogData(message=text, level=level)))


class EventRecorder:
    """Subscriber that keeps every event; handy for tests and replays."""

    def __init__(self) -> None:
        self.events: list[BaseModel] = []

    def __call__(self, event: BaseModel) -> None:
        self.events.append(event)

    def of_type(self, event_type: str) -> list[BaseModel]:
        return [e for e in self.events if getattr(e, "type", None) == event_type]

    def messages(self) -> list[str]:
        return [e.data.message for e in self.of_type("message_display")]

    def clear(self) -> None:
        self.events.clear()
