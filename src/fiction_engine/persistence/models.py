"""
models.py

PURPOSE: The save-file document.
DEPENDENCIES: pydantic, models/state.py

ARCHITECTURE NOTES:
A flat JSON document. Loading validates the whole thing before the engine
touches any state, so a bad file can't leave a half-loaded game behind.

`placement` maps every thing in the world tree to its holder, holders
listed before what they hold. Saves written before it existed leave it
empty and load with the world's authored placement.
"""

import time
from typing import Any

from pydantic import BaseModel, Field

from fiction_engine.models.state import ConversationEntry


class SaveError(Exception):
    """A save file couldn't be written, read or validated."""


class SaveData(BaseModel):
    """Snapshot of a game in progress."""

    world_title: str | None = Field(default=None, description="Title of the world it was saved in")
    current_location: str
    turn_count: int = Field(default=0, ge=0)
    game_over: bool = False
    entity_states: dict[str, dict[str, Any]] = Field(default_factory=dict)
    counters: dict[str, int] = Field(default_factory=dict)
    flags: dict[str, bool] = Field(default_factory=dict)
    recent_actions: list[str] = Field(default_factory=list)
    conversation_history: dict[str, list[ConversationEntry]] = Field(default_factory=dict)
    inventories: dict[str, list[str]] = Field(default_factory=dict)
    placement: dict[str, str] = Field(default_factory=dict, description="Thing id -> holder id")
    thing_states: dict[str, dict[str, bool]] = Field(
        default_factory=dict, description="Open/locked containers and working vehicles"
    )
    timestamp: float = Field(default_factory=time.time)
