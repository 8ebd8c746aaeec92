"""
state.py

PURPOSE: Mutable game state that changes during play.
DEPENDENCIES: pydantic, world.py

ARCHITECTURE NOTES:
GameState is separate from the static WorldDefinition.
It tracks what has changed: player location, turn count, per-entity
key/value state, counters, flags and the two bounded logs.

Item ownership is NOT here; see inventory.py. Object placement is NOT
here either; the world view owns it.

Both logs have fixed caps and drop their oldest entries first.
"""

import time
from copy import deepcopy
from typing import Any, Literal

from pydantic import BaseModel, Field

from fiction_engine.constants import MAX_CONVERSATION_HISTORY, MAX_RECENT_ACTIONS
from fiction_engine.models.world import WorldDefinition


class ConversationEntry(BaseModel):
    """One line of dialogue with a character."""

    speaker: Literal["player", "character"]
    message: str
    timestamp: float = Field(default_factory=time.time)


class GameState(BaseModel):
    """
    Complete mutable state of a game in progress (minus inventories).

    This is what gets saved/loaded and modified during play.
    """

    current_location: str = Field(..., description="ID of the room the player is in")
    turn_count: int = Field(default=0, ge=0)
    game_over: bool = Field(default=False)
    entity_states: dict[str, dict[str, Any]] = Field(
        default_factory=dict,
        description="Entity ID -> key/value state",
    )
    counters: dict[str, int] = Field(default_factory=dict)
    flags: dict[str, bool] = Field(default_factory=dict)
    recent_actions: list[str] = Field(default_factory=list)
    conversation_history: dict[str, list[ConversationEntry]] = Field(default_factory=dict)

    @classmethod
    def from_world(cls, world: WorldDefinition) -> "GameState":
        """Initial state: player at the start location, character state copied in."""
        entity_states = {
            char.id: deepcopy(char.state) for char in world.entities.characters if char.state
        }
        return cls(
            current_location=world.meta.initial_player_location,
            entity_states=entity_states,
        )

    def set_current_location(self, location_id: str) -> None:
        self.current_location = location_id

    def increment_turn(self) -> None:
        self.turn_count += 1

    def set_game_over(self, game_over: bool = True) -> None:
        self.game_over = game_over

    def get_entity_state(self, entity_id: str, key: str) -> Any:
        """Look up a state value; None if unset."""
        return self.entity_states.get(entity_id, {}).get(key)

    def set_entity_state(self, entity_id: str, key: str, value: Any) -> None:
        self.entity_states.setdefault(entity_id, {})[key] = value

    def get_counter(self, key: str) -> int:
        return self.counters.get(key, 0)

    def set_counter(self, key: str, value: int) -> None:
        self.counters[key] = value

    def add_counter(self, key: str, amount: int) -> None:
        self.counters[key] = self.get_counter(key) + amount

    def get_flag(self, key: str) -> bool:
        return self.flags.get(key, False)

    def set_flag(self, key: str, value: bool) -> None:
        self.flags[key] = value

    def add_recent_action(self, action: str) -> None:
        self.recent_actions.append(action)
        if len(self.recent_actions) > MAX_RECENT_ACTIONS:
            del self.recent_actions[:-MAX_RECENT_ACTIONS]

    def add_conversation_entry(
        self,
        character_id: str,
        speaker: Literal["player", "character"],
        message: str,
    ) -> None:
        history = self.conversation_history.setdefault(character_id, [])
        history.append(ConversationEntry(speaker=speaker, message=message))
        if len(history) > MAX_CONVERSATION_HISTORY:
            del history[:-MAX_CONVERSATION_HISTORY]

    def get_conversation_history(self, character_id: str) -> list[ConversationEntry]:
        return list(self.conversation_history.get(character_id, []))

    def has_spoken_with(self, character_id: str) -> bool:
        return bool(self.conversation_history.get(character_id))

    def replace_with(self, other: "GameState") -> None:
        """Overwrite every field with `other`'s values (used by load)."""
        for name in type(self).model_fields:
            setattr(self, name, deepcopy(getattr(other, name)))
