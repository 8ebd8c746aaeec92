"""
world.py

PURPOSE: Pydantic models for the static world definition (locations, objects,
characters, rules).
DEPENDENCIES: pydantic

ARCHITECTURE NOTES:
These models define the STATIC world content as authored in a JSON file.
They never change during play; GameState and the spatial model carry what
changes. WorldDefinition is the root and is what the builder consumes.

Conditions and effects are closed tagged unions discriminated on `type`,
so an unknown rule shape is rejected at load time rather than silently
ignored during play.

Reference checks (rooms, initial locations, rule targets) are split:
references that would make the world unplayable raise here, the rest are
reported as warnings by fiction_engine.validator.
"""

import json
from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, model_validator

from fiction_engine.constants import BAG_SUFFIX, NOWHERE, PLAYER_ID

# --- Entities ---


class WorldMeta(BaseModel):
    """Metadata about the world itself."""

    title: str = Field(..., min_length=1)
    author: str = Field(default="Unknown")
    version: str = Field(default="1.0")
    initial_player_location: str = Field(..., min_length=1)


class Connection(BaseModel):
    """An exit from a location."""

    direction: str = Field(..., min_length=1)
    to: str = Field(..., min_length=1, description="Destination location ID")
    is_one_way: bool = Field(
        default=False,
        description="When False the builder adds the reverse exit if missing",
    )


class LocationProperties(BaseModel):
    is_dark: bool = False
    is_outdoors: bool = False


class Location(BaseModel):
    """A room in the world."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    description: str = Field(default="")
    connections: list[Connection] = Field(default_factory=list)
    properties: LocationProperties = Field(default_factory=LocationProperties)


class ObjectProperties(BaseModel):
    """
    Property bag for an object.

    The flags pick the Thing variant (backdrop > scenery > vehicle >
    enterable/climbable > container > supporter > plain) and tune it.
    Unset flags mean "use the variant's default".
    """

    portable: bool | None = None
    openable: bool | None = None
    is_open: bool | None = None
    locked: bool | None = None
    unlocks_with: str | None = None
    container: bool = False
    supporter: bool = False
    climbable: bool = False
    edible: bool = False
    readable: bool = False
    backdrop: bool = False
    scenery: bool = False
    vehicle: bool = False
    enterable: bool = False
    capacity: int | None = Field(default=None, ge=0)
    required_key: str | None = None
    present_in_rooms: list[str] = Field(default_factory=list)
    climb_destination: str | None = None
    enter_destination: str | None = None


class GameObject(BaseModel):
    """An object placed somewhere in the world at start."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    description: str = Field(default="")
    initial_location: str = Field(
        ...,
        description="Location ID, object ID, '<actor>_bag', or 'nowhere'",
    )
    properties: ObjectProperties = Field(default_factory=ObjectProperties)
    text_content: str | None = Field(default=None, description="Text shown by 'read'")


class ConversationalProfile(BaseModel):
    """How a character talks: canned replies plus hints for generated ones."""

    greeting: str | None = None
    topics: dict[str, str] = Field(default_factory=dict)
    farewell: str | None = None
    personality: str | None = None
    knowledge: list[str] = Field(default_factory=list)
    constraints: list[str] = Field(default_factory=list)


class Character(BaseModel):
    """A non-player character."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    description: str = Field(default="")
    initial_location: str = Field(..., min_length=1)
    initial_inventory: list[str] = Field(default_factory=list)
    state: dict[str, Any] = Field(default_factory=dict)
    conversational: ConversationalProfile | None = None


# --- Conditions ---


class LocationIs(BaseModel):
    type: Literal["location_is"]
    target: str = PLAYER_ID
    value: str


class HasItem(BaseModel):
    type: Literal["has_item"]
    target: str = PLAYER_ID
    value: str


class StateEquals(BaseModel):
    type: Literal["state_equals"]
    target: str
    key: str
    value: Any = None


class StateNotEquals(BaseModel):
    type: Literal["state_not_equals"]
    target: str
    key: str
    value: Any = None


class CounterEquals(BaseModel):
    type: Literal["counter_equals"]
    key: str
    value: int


class CounterGreater(BaseModel):
    type: Literal["counter_greater"]
    key: str
    value: int


class CounterLess(BaseModel):
    type: Literal["counter_less"]
    key: str
    value: int


class FlagIs(BaseModel):
    type: Literal["flag_is"]
    key: str
    value: bool


Condition = Annotated[
    LocationIs
    | HasItem
    | StateEquals
    | StateNotEquals
    | CounterEquals
    | CounterGreater
    | CounterLess
    | FlagIs,
    Field(discriminator="type"),
]


# --- Effects ---


class DisplayText(BaseModel):
    type: Literal["display_text"]
    content: str


class MoveEntity(BaseModel):
    type: Literal["move_entity"]
    target: str = PLAYER_ID
    destination: str


class SetState(BaseModel):
    type: Literal["set_state"]
    target: str
    key: str
    value: Any = None


class AddToInventory(BaseModel):
    type: Literal["add_to_inventory"]
    target: str = PLAYER_ID
    item: str


class RemoveFromInventory(BaseModel):
    type: Literal["remove_from_inventory"]
    target: str = PLAYER_ID
    item: str


class EndGame(BaseModel):
    type: Literal["end_game"]
    outcome: Literal["victory", "defeat"] = "victory"
    message: str = ""


class SetCounter(BaseModel):
    type: Literal["set_counter"]
    key: str
    value: int


class AddCounter(BaseModel):
    type: Literal["add_counter"]
    key: str
    value: int


class SetFlag(BaseModel):
    type: Literal["set_flag"]
    key: str
    value: bool


Effect = Annotated[
    DisplayText
    | MoveEntity
    | SetState
    | AddToInventory
    | RemoveFromInventory
    | EndGame
    | SetCounter
    | AddCounter
    | SetFlag,
    Field(discriminator="type"),
]


# --- Rules ---


class ActionRule(BaseModel):
    """
    A verb-triggered bundle of conditions and effects.

    An unset target (or "*") matches any target.
    """

    id: str = Field(..., min_length=1)
    action: str = Field(..., min_length=1)
    target: str | None = None
    secondary_target: str | None = None
    topic: str | None = None
    conditions: list[Condition] = Field(default_factory=list)
    effects: list[Effect] = Field(default_factory=list)

    @property
    def is_wildcard(self) -> bool:
        return self.target in (None, "", "*")


class EventTrigger(BaseModel):
    type: Literal["every_turn", "on_enter_location", "timed_event"]
    value: Any = None


class EventRule(BaseModel):
    """A trigger-driven bundle, evaluated after each successful turn."""

    id: str = Field(..., min_length=1)
    trigger: EventTrigger
    conditions: list[Condition] = Field(default_factory=list)
    effects: list[Effect] = Field(default_factory=list)


class Synonym(BaseModel):
    primary: str
    aliases: list[str] = Field(default_factory=list)


class SynonymTable(BaseModel):
    verbs: list[Synonym] = Field(default_factory=list)
    nouns: list[Synonym] = Field(default_factory=list)


class ParserHints(BaseModel):
    """Extra vocabulary for the offline intent parser."""

    synonyms: SynonymTable = Field(default_factory=SynonymTable)


class Entities(BaseModel):
    locations: list[Location] = Field(..., min_length=1)
    objects: list[GameObject] = Field(default_factory=list)
    characters: list[Character] = Field(default_factory=list)


class Rules(BaseModel):
    action_rules: list[ActionRule] = Field(default_factory=list)
    event_rules: list[EventRule] = Field(default_factory=list)


class WorldDefinition(BaseModel):
    """
    A complete world definition.

    This is the root model loaded from JSON and validated against this schema.
    """

    meta: WorldMeta
    entities: Entities
    rules: Rules = Field(default_factory=Rules)
    parser_hints: ParserHints | None = None

    @model_validator(mode="after")
    def validate_references(self) -> "WorldDefinition":
        """Ensure room references that placement depends on are valid."""
        room_ids = {loc.id for loc in self.entities.locations}
        object_ids = {obj.id for obj in self.entities.objects}
        actor_ids = {PLAYER_ID} | {char.id for char in self.entities.characters}
        bag_ids = {f"{actor_id}{BAG_SUFFIX}" for actor_id in actor_ids}

        if self.meta.initial_player_location not in room_ids:
            raise ValueError(
                f"Initial player location '{self.meta.initial_player_location}' not found"
            )

        for loc in self.entities.locations:
            for conn in loc.connections:
                if conn.to not in room_ids:
                    raise ValueError(
                        f"Location '{loc.id}' has exit '{conn.direction}' to unknown "
                        f"location '{conn.to}'"
                    )

        valid_object_locations = room_ids | object_ids | bag_ids | {NOWHERE}
        for obj in self.entities.objects:
            if obj.initial_location not in valid_object_locations:
                raise ValueError(
                    f"Object '{obj.id}' has invalid location '{obj.initial_location}'"
                )

        holders = {obj.id: obj.initial_location for obj in self.entities.objects}
        for obj in self.entities.objects:
            chain = [obj.id]
            holder = holders[obj.id]
            while holder in holders:
                if holder in chain:
                    raise ValueError(f"Objects placed inside each other: {' -> '.join(chain + [holder])}")
                chain.append(holder)
                holder = holders[holder]

        for char in self.entities.characters:
            if char.initial_location not in room_ids:
                raise ValueError(
                    f"Character '{char.id}' has invalid location '{char.initial_location}'"
                )
            for item_id in char.initial_inventory:
                if item_id not in object_ids:
                    raise ValueError(
                        f"Character '{char.id}' starts with unknown object '{item_id}'"
                    )

        all_ids = [loc.id for loc in self.entities.locations]
        all_ids += [obj.id for obj in self.entities.objects]
        all_ids += [char.id for char in self.entities.characters]
        seen: set[str] = set()
        for entity_id in all_ids:
            if entity_id in seen:
                raise ValueError(f"Duplicate entity id '{entity_id}'")
            if entity_id == PLAYER_ID:
                raise ValueError(f"Entity id '{PLAYER_ID}' is reserved")
            seen.add(entity_id)

        return self

    @classmethod
    def from_file(cls, path: Path | str) -> "WorldDefinition":
        """
        Load and validate a world JSON file.

        Raises:
            json.JSONDecodeError: The file isn't JSON
            pydantic.ValidationError: It doesn't describe a valid world
        """
        return cls.model_validate(json.loads(Path(path).read_text()))

    def get_location(self, location_id: str) -> Location | None:
        for loc in self.entities.locations:
            if loc.id == location_id:
                return loc
        return None

    def get_object(self, object_id: str) -> GameObject | None:
        for obj in self.entities.objects:
            if obj.id == object_id:
                return obj
        return None

    def get_character(self, character_id: str) -> Character | None:
        for char in self.entities.characters:
            if char.id == character_id:
                return char
        return None

    def characters_in(self, location_id: str) -> list[Character]:
        """Characters whose starting location is `location_id`."""
        return [c for c in self.entities.characters if c.initial_location == location_id]
