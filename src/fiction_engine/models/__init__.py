"""Domain models for interactive-fiction worlds."""

from fiction_engine.models.inventory import InventoryStore
from fiction_engine.models.state import ConversationEntry, GameState
from fiction_engine.models.world import (
    ActionRule,
    Character,
    Condition,
    Effect,
    EventRule,
    GameObject,
    Location,
    WorldDefinition,
)

__all__ = [
    "ActionRule",
    "Character",
    "Condition",
    "ConversationEntry",
    "Effect",
    "EventRule",
    "GameObject",
    "GameState",
    "InventoryStore",
    "Location",
    "WorldDefinition",
]
