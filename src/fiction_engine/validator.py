"""
validator.py

PURPOSE: Validate world definitions for issues the schema can't catch.
DEPENDENCIES: models

ARCHITECTURE NOTES:
WorldDefinition already rejects worlds that can't be placed at all
(unknown start room, exits to nowhere, duplicate ids). The validator
looks for the softer problems that only show up mid-game:
- Rules that name objects, actors or rooms that don't exist
- Keys, climb/enter destinations and backdrop rooms that don't exist
- Property combinations that won't do what the author expects

Nothing here stops a world from loading; the CLI prints the report.
"""

from dataclasses import dataclass
from enum import Enum, auto

from fiction_engine.constants import OPPOSITE_DIRECTIONS, PLAYER_ID
from fiction_engine.models.world import (
    ActionRule,
    AddToInventory,
    Condition,
    Effect,
    EventRule,
    GameObject,
    HasItem,
    LocationIs,
    MoveEntity,
    RemoveFromInventory,
    SetState,
    StateEquals,
    StateNotEquals,
    WorldDefinition,
)


class ValidationSeverity(Enum):
    """Severity level for validation issues."""

    ERROR = auto()  # Will misbehave at runtime
    WARNING = auto()  # May cause unexpected behavior
    INFO = auto()  # Suggestion for improvement


@dataclass
class ValidationIssue:
    """A single validation issue found in a world."""

    severity: ValidationSeverity
    message: str
    location: str  # e.g., "object:brass_key", "action_rule:take_idol"

    def __str__(self) -> str:
        return f"[{self.severity.name}] {self.location}: {self.message}"


class WorldValidator:
    """
    Validates world definitions for common issues.

    Usage:
        validator = WorldValidator(world)
        issues = validator.validate()
        for issue in issues:
            print(issue)
    """

    def __init__(self, world: WorldDefinition):
        self.world = world
        self.issues: list[ValidationIssue] = []

        # Build lookup tables
        self.room_ids = {loc.id for loc in world.entities.locations}
        self.object_ids = {obj.id for obj in world.entities.objects}
        self.actor_ids = {PLAYER_ID} | {char.id for char in world.entities.characters}
        self.entity_ids = self.room_ids | self.object_ids | self.actor_ids

    def validate(self) -> list[ValidationIssue]:
        """
        Run all validation checks.

        Returns:
            List of ValidationIssue objects, sorted by severity.
        """
        self.issues = []

        for obj in self.world.entities.objects:
            self._validate_object(obj)
        self._validate_characters()
        for rule in self.world.rules.action_rules:
            self._validate_action_rule(rule)
        for event_rule in self.world.rules.event_rules:
            self._validate_event_rule(event_rule)

        # Sort by severity (errors first)
        self.issues.sort(key=lambda i: i.severity.value)
        return self.issues

    def _add(self, severity: ValidationSeverity, message: str, location: str) -> None:
        self.issues.append(ValidationIssue(severity=severity, message=message, location=location))

    def _validate_object(self, obj: GameObject) -> None:
        location = f"object:{obj.id}"
        props = obj.properties

        for field, key_id in (("unlocks_with", props.unlocks_with), ("required_key", props.required_key)):
            if key_id and key_id not in self.object_ids:
                self._add(
                    ValidationSeverity.ERROR,
                    f"{field} '{key_id}' does not exist.",
                    location,
                )

        for field, room_id in (
            ("climb_destination", props.climb_destination),
            ("enter_destination", props.enter_destination),
        ):
            if room_id and room_id not in self.room_ids:
                self._add(
                    ValidationSeverity.ERROR,
                    f"{field} '{room_id}' is not a location.",
                    location,
                )

        for room_id in props.present_in_rooms:
            if room_id not in self.room_ids:
                self._add(
                    ValidationSeverity.WARNING,
                    f"Backdrop lists unknown room '{room_id}'.",
                    location,
                )
        if props.present_in_rooms and not props.backdrop:
            self._add(
                ValidationSeverity.INFO,
                "present_in_rooms only applies to backdrops.",
                location,
            )

        if (props.locked or props.unlocks_with) and not props.container:
            self._add(
                ValidationSeverity.WARNING,
                "Object is lockable but not a container; lock state will be ignored.",
                location,
            )
        if props.climb_destination and not props.climbable:
            self._add(
                ValidationSeverity.WARNING,
                "climb_destination is set but the object isn't climbable.",
                location,
            )
        if props.readable and not obj.text_content:
            self._add(ValidationSeverity.INFO, "Readable object has no text_content.", location)

        if obj.initial_location.endswith("_bag"):
            owner = obj.initial_location.removesuffix("_bag")
            if owner not in self.actor_ids:
                self._add(
                    ValidationSeverity.ERROR,
                    f"Bag owner '{owner}' is not the player or a character.",
                    location,
                )

    def _validate_characters(self) -> None:
        for char in self.world.entities.characters:
            profile = char.conversational
            if profile is not None and not profile.greeting and not profile.topics:
                self._add(
                    ValidationSeverity.INFO,
                    "Conversational profile has no greeting or topics.",
                    f"character:{char.id}",
                )

    def _validate_action_rule(self, rule: ActionRule) -> None:
        location = f"action_rule:{rule.id}"

        if not rule.is_wildcard and rule.target not in self.entity_ids:
            if not (rule.action == "move" and rule.target in OPPOSITE_DIRECTIONS):
                self._add(
                    ValidationSeverity.WARNING,
                    f"Target '{rule.target}' does not exist; the rule can never fire.",
                    location,
                )
        if rule.secondary_target and rule.secondary_target not in self.entity_ids:
            self._add(
                ValidationSeverity.WARNING,
                f"Secondary target '{rule.secondary_target}' does not exist.",
                location,
            )

        for i, condition in enumerate(rule.conditions):
            self._validate_condition(condition, f"{location}/conditions[{i}]")
        for i, effect in enumerate(rule.effects):
            self._validate_effect(effect, f"{location}/effects[{i}]")

    def _validate_event_rule(self, rule: EventRule) -> None:
        location = f"event_rule:{rule.id}"
        trigger = rule.trigger

        match trigger.type:
            case "on_enter_location":
                if trigger.value not in self.room_ids:
                    self._add(
                        ValidationSeverity.ERROR,
                        f"Trigger location '{trigger.value}' does not exist.",
                        location,
                    )
            case "timed_event":
                if not isinstance(trigger.value, int) or isinstance(trigger.value, bool):
                    self._add(
                        ValidationSeverity.ERROR,
                        f"Timed trigger needs a turn number, got {trigger.value!r}.",
                        location,
                    )

        for i, condition in enumerate(rule.conditions):
            self._validate_condition(condition, f"{location}/conditions[{i}]")
        for i, effect in enumerate(rule.effects):
            self._validate_effect(effect, f"{location}/effects[{i}]")

    def _validate_condition(self, condition: Condition, location: str) -> None:
        match condition:
            case LocationIs(value=value) if value not in self.room_ids:
                self._add(ValidationSeverity.WARNING, f"Unknown location '{value}'.", location)
            case HasItem(target=target, value=value):
                if target not in self.actor_ids:
                    self._add(ValidationSeverity.WARNING, f"'{target}' has no inventory.", location)
                if value not in self.object_ids:
                    self._add(ValidationSeverity.WARNING, f"Unknown object '{value}'.", location)
            case StateEquals(target=target) | StateNotEquals(target=target):
                if target not in self.entity_ids:
                    self._add(ValidationSeverity.INFO, f"State of unknown entity '{target}'.", location)

    def _validate_effect(self, effect: Effect, location: str) -> None:
        match effect:
            case MoveEntity(target=target, destination=destination):
                if target != PLAYER_ID and target not in self.entity_ids:
                    self._add(ValidationSeverity.ERROR, f"Unknown entity '{target}'.", location)
                valid = self.room_ids if target == PLAYER_ID else self.room_ids | self.object_ids
                if destination not in valid:
                    self._add(
                        ValidationSeverity.ERROR,
                        f"Destination '{destination}' does not exist.",
                        location,
                    )
            case AddToInventory(target=target, item=item) | RemoveFromInventory(
                target=target, item=item
            ):
                if target not in self.actor_ids:
                    self._add(ValidationSeverity.ERROR, f"'{target}' has no inventory.", location)
                if item not in self.object_ids:
                    self._add(ValidationSeverity.ERROR, f"Unknown object '{item}'.", location)
            case SetState(target=target) if target not in self.entity_ids:
                self._add(ValidationSeverity.INFO, f"State of unknown entity '{target}'.", location)


def validate_world(world: WorldDefinition) -> list[ValidationIssue]:
    """
    Convenience function to validate a world.

    Returns:
        List of validation issues (empty if the world looks fine).
    """
    validator = WorldValidator(world)
    return validator.validate()
