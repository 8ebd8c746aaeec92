"""
rules.py

PURPOSE: Declarative rule matching, condition evaluation and effect application.
DEPENDENCIES: models/world.py, models/state.py, models/inventory.py, events.py,
world_view.py

ARCHITECTURE NOTES:
Conditions are pure reads; a rule's list is an AND, and an empty list holds.
Effects run in declared order, so a later effect sees what an earlier one
changed.

A rule whose conditions fail applies NOTHING: conditions are all checked
before the first effect runs.

Matching is first-declared-wins. Two lookups exist:

    find_action_rule(..., exact_target=True)   rule names this exact target
    find_action_rule(...)                      exact target or wildcard

The processor uses the first to let a rule override a built-in verb for
one specific object, and the second for verbs the engine doesn't know.
"""

import logging
from collections.abc import Callable

from fiction_engine.constants import PLAYER_ID, RULE_BLOCKED_MESSAGE
from fiction_engine.engine.events import EventBus, GameOverData, GameOverEvent
from fiction_engine.engine.results import CommandResult
from fiction_engine.engine.world_view import WorldView
from fiction_engine.models.inventory import InventoryStore
from fiction_engine.models.state import GameState
from fiction_engine.models.world import (
    ActionRule,
    AddCounter,
    AddToInventory,
    Condition,
    CounterEquals,
    CounterGreater,
    CounterLess,
    DisplayText,
    Effect,
    EndGame,
    EventRule,
    FlagIs,
    HasItem,
    LocationIs,
    MoveEntity,
    RemoveFromInventory,
    SetCounter,
    SetFlag,
    SetState,
    StateEquals,
    StateNotEquals,
)

logger = logging.getLogger(__name__)


class RuleEngine:
    """Evaluates action and event rules against live game state."""

    def __init__(
        self,
        action_rules: list[ActionRule],
        event_rules: list[EventRule],
        state: GameState,
        inventory: InventoryStore,
        world: WorldView,
        events: EventBus,
        on_player_moved: Callable[[], None] | None = None,
    ):
        self.action_rules = action_rules
        self.event_rules = event_rules
        self.state = state
        self.inventory = inventory
        self.world = world
        self.events = events
        self._on_player_moved = on_player_moved

    # --- Conditions ---

    def check_condition(self, condition: Condition) -> bool:
        match condition:
            case LocationIs(target=target, value=value):
                if target == PLAYER_ID:
                    return self.state.current_location == value
                return self.world.room_of(target) == value
            case HasItem(target=target, value=value):
                return self.inventory.has_item(target, value)
            case StateEquals(target=target, key=key, value=value):
                return self.state.get_entity_state(target, key) == value
            case StateNotEquals(target=target, key=key, value=value):
                return self.state.get_entity_state(target, key) != value
            case CounterEquals(key=key, value=value):
                return self.state.get_counter(key) == value
            case CounterGreater(key=key, value=value):
                return self.state.get_counter(key) > value
            case CounterLess(key=key, value=value):
                return self.state.get_counter(key) < value
            case FlagIs(key=key, value=value):
                return self.state.get_flag(key) == value
        return False

    def check_conditions(self, conditions: list[Condition]) -> bool:
        return all(self.check_condition(c) for c in conditions)

    # --- Effects ---

    def apply_effect(self, effect: Effect) -> None:
        match effect:
            case DisplayText(content=content):
                self.events.message(content)
            case MoveEntity(target=target, destination=destination):
                self._move_entity(target, destination)
            case SetState(target=target, key=key, value=value):
                self.state.set_entity_state(target, key, value)
            case AddToInventory(target=target, item=item):
                # Items in a bag are out of the world tree
                self.world.detach(item)
                self.inventory.add_item_to_inventory(target, item)
            case RemoveFromInventory(target=target, item=item):
                self.inventory.remove_item_from_inventory(target, item)
            case EndGame(outcome=outcome, message=message):
                self.state.set_game_over(True)
                self.events.emit(GameOverEvent(data=GameOverData(outcome=outcome, message=message)))
            case SetCounter(key=key, value=value):
                self.state.set_counter(key, value)
            case AddCounter(key=key, value=value):
                self.state.add_counter(key, value)
            case SetFlag(key=key, value=value):
                self.state.set_flag(key, value)

    def apply_effects(self, effects: list[Effect]) -> None:
        for effect in effects:
            self.apply_effect(effect)

    def _move_entity(self, target: str, destination: str) -> None:
        if target == PLAYER_ID:
            if self.world.get_room(destination) is None:
                self.events.debug(f"move_entity: unknown location {destination!r}", "warn")
                return
            self.state.set_current_location(destination)
            self.world.move_player(destination)
            if self._on_player_moved:
                self._on_player_moved()
            return

        # A refused placement leaves the item with whoever carried it
        if not self.world.place(target, destination):
            self.events.debug(f"move_entity: could not put {target!r} in {destination!r}", "warn")
            return
        owner = self.inventory.owner_of(target)
        if owner is not None:
            self.inventory.remove_item_from_inventory(owner, target)

    # --- Action rules ---

    def find_action_rule(
        self,
        action: str,
        target: str | None = None,
        secondary: str | None = None,
        topic: str | None = None,
        exact_target: bool = False,
    ) -> ActionRule | None:
        """First declared rule matching the intent, or None."""
        for rule in self.action_rules:
            if rule.action != action:
                continue
            if rule.is_wildcard:
                if exact_target:
                    continue
            elif rule.target != target:
                continue
            if rule.topic and rule.topic != topic:
                continue
            if rule.secondary_target and rule.secondary_target != secondary:
                continue
            return rule
        return None

    def execute_action_rule(self, rule: ActionRule) -> CommandResult:
        """Check all conditions, then apply all effects; or apply none."""
        if not self.check_conditions(rule.conditions):
            logger.debug(f"Rule {rule.id!r} blocked by its conditions")
            return CommandResult.fail(RULE_BLOCKED_MESSAGE)

        logger.debug(f"Rule {rule.id!r} fired")
        self.apply_effects(rule.effects)
        return CommandResult.ok()

    # --- Event rules ---

    def run_event_rules(self, entered_location: str | None = None) -> None:
        """
        Fire event rules after a successful turn.

        every_turn fires each turn, on_enter_location when the player arrived
        at its location this turn, timed_event when the turn count equals
        its value.
        """
        for rule in self.event_rules:
            if self.state.game_over:
                return
            trigger = rule.trigger
            match trigger.type:
                case "every_turn":
                    triggered = True
                case "on_enter_location":
                    triggered = entered_location is not None and entered_location == trigger.value
                case "timed_event":
                    triggered = self._turn_matches(trigger.value)

            if triggered and self.check_conditions(rule.conditions):
                logger.debug(f"Event rule {rule.id!r} fired")
                self.apply_effects(rule.effects)

    def _turn_matches(self, value: object) -> bool:
        try:
            return self.state.turn_count == int(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return False
