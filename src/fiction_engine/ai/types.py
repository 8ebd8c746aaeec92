"""
types.py

PURPOSE: Contracts between the engine and its AI collaborators.
DEPENDENCIES: pydantic

ARCHITECTURE NOTES:
Three collaborators, each an awaited request/response call:

    IntentParser           free text -> ParsedIntent
    Narrator               scene/action -> GeneratedDescription
    ConversationResponder  player line + character -> ConversationResponse

The engine builds a GameContext snapshot for every call so collaborators
never touch live state. All calls go through `guarded()`, which applies the
timeout and turns every expected failure into CollaboratorError; the engine
then falls back to a canned line.
"""

import asyncio
import logging
from collections.abc import Awaitable
from dataclasses import dataclass, field
from typing import Literal, Protocol, TypeVar

import anthropic
import httpx
from pydantic import BaseModel, Field

from fiction_engine.models.state import ConversationEntry
from fiction_engine.models.world import ConversationalProfile

logger = logging.getLogger(__name__)

T = TypeVar("T")

Mood = Literal["neutral", "tense", "mysterious", "peaceful", "exciting"]


class CollaboratorError(Exception):
    """An AI collaborator failed or took too long."""


@dataclass
class SceneEntity:
    id: str
    name: str
    description: str = ""


@dataclass
class GameContext:
    """Read-only snapshot of what the player can currently perceive."""

    location: SceneEntity
    exits: dict[str, str] = field(default_factory=dict)
    objects: list[SceneEntity] = field(default_factory=list)
    characters: list[SceneEntity] = field(default_factory=list)
    inventory: list[SceneEntity] = field(default_factory=list)
    turn_count: int = 0
    recent_actions: list[str] = field(default_factory=list)
    available_commands: str = ""

    def known_entities(self) -> list[SceneEntity]:
        return [*self.objects, *self.characters, *self.inventory]

    def resolve(self, name_or_id: str | None) -> str | None:
        """Map a name or id the player/LLM used back to an entity id."""
        if not name_or_id:
            return None
        wanted = name_or_id.strip().lower()
        for entity in self.known_entities():
            if entity.id.lower() == wanted:
                return entity.id
        for entity in self.known_entities():
            if entity.name.lower() == wanted:
                return entity.id
        return name_or_id


class ParsedIntent(BaseModel):
    """What the player meant, as action + arguments."""

    action: str = "unknown"
    target: str | None = None
    topic: str | None = None
    character_target: str | None = None
    player_item: str | None = None
    target_item: str | None = None
    is_conversation: bool = False
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)


class GeneratedDescription(BaseModel):
    text: str
    mood: Mood = "neutral"
    confidence: float = Field(default=0.8, ge=0.0, le=1.0)


class ConversationResponse(BaseModel):
    text: str
    confidence: float = Field(default=0.8, ge=0.0, le=1.0)
    action: str | None = None


@dataclass
class ConversationContext:
    character: SceneEntity
    profile: ConversationalProfile | None
    history: list[ConversationEntry]
    game: GameContext


class IntentParser(Protocol):
    async def parse_input(self, text: str, context: GameContext) -> ParsedIntent: ...


class Narrator(Protocol):
    async def describe_location(self, context: GameContext) -> GeneratedDescription: ...

    async def describe_action(
        self, action: str, target: str | None, context: GameContext
    ) -> GeneratedDescription: ...

    async def enhance_description(
        self, text: str, context: GameContext
    ) -> GeneratedDescription: ...


class ConversationResponder(Protocol):
    async def generate_character_response(
        self, message: str, context: ConversationContext
    ) -> ConversationResponse: ...


MOOD_WORDS: dict[Mood, tuple[str, ...]] = {
    "tense": ("danger", "shadow", "fear", "threat", "dark", "ominous"),
    "mysterious": ("mysterious", "strange", "whisper", "secret", "hidden"),
    "peaceful": ("calm", "serene", "gentle", "peaceful", "quiet", "soft"),
    "exciting": ("exciting", "adventure", "discovery", "bright", "energy"),
}


def detect_mood(text: str) -> Mood:
    """First mood whose keywords appear in the text, else neutral."""
    lowered = text.lower()
    for mood, words in MOOD_WORDS.items():
        if any(word in lowered for word in words):
            return mood
    return "neutral"


async def guarded(call: Awaitable[T], timeout: float, name: str) -> T:
    """
    Await a collaborator call with a time limit.

    Raises:
        CollaboratorError: On timeout, transport/API errors, or a reply that
            didn't fit the expected shape
    """
    try:
        return await asyncio.wait_for(call, timeout=timeout)
    except asyncio.TimeoutError as e:
        logger.warning(f"{name} timed out after {timeout}s")
        raise CollaboratorError(f"{name} timed out") from e
    except (anthropic.APIError, httpx.HTTPError, ValueError) as e:
        logger.warning(f"{name} failed: {e}")
        raise CollaboratorError(f"{name} failed: {e}") from e
