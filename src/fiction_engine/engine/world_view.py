"""
world_view.py

PURPOSE: The handler-facing view of "where things are", with two backends.
DEPENDENCIES: world/ (things, spatial, builder), models/world.py

ARCHITECTURE NOTES:
Command handlers are written once against WorldView. The backend is
chosen at load time by the `use_spatial` setting:

    SpatialWorld  ownership tree in a SpatialManager (default)
    FlatWorld     legacy flat table of thing id -> holder id, answered by
                  scanning the table

Both hold the same Thing objects (built by world.builder), so container
state (open/locked) and capacities behave identically; only how placement
is stored differs.

Visibility rules shared by both backends live here in the base class:
a thing is visible when it's in the observer's room and no closed
container sits between it and the room. Backdrops are visible wherever
their presence set says, regardless of ownership.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

from fiction_engine.constants import PLAYER_ID
from fiction_engine.models.world import WorldDefinition
from fiction_engine.world.builder import (
    build_player,
    build_spatial_manager,
    build_things,
    is_outside_world,
    place_initial,
)
from fiction_engine.world.spatial import SpatialManager, SpatialRelation
from fiction_engine.world.things import (
    Backdrop,
    Container,
    Enterable,
    Room,
    Scenery,
    Supporter,
    Thing,
    Vehicle,
)

logger = logging.getLogger(__name__)


def is_portable(thing: Thing) -> bool:
    """Can the player pick this up?"""
    return thing.is_portable and not thing.is_fixed_in_place


class WorldView(ABC):
    """Placement and visibility queries the command handlers rely on."""

    def __init__(self, character_ids: set[str]):
        self._character_ids = set(character_ids)

    # --- Backend primitives ---

    @abstractmethod
    def get_thing(self, thing_id: str) -> Thing | None: ...

    @abstractmethod
    def get_room(self, room_id: str) -> Room | None: ...

    @abstractmethod
    def all_things(self) -> list[Thing]: ...

    @abstractmethod
    def parent_of(self, thing_id: str) -> Thing | None:
        """The direct holder (room, container, ...) or None if unplaced."""

    @abstractmethod
    def children_of(self, thing_id: str) -> list[Thing]:
        """Direct contents in arrival order."""

    @abstractmethod
    def relocate(
        self,
        thing_id: str,
        destination_id: str,
        relation: SpatialRelation = SpatialRelation.IN,
    ) -> bool:
        """Move a thing IN or ON a destination; False leaves it where it was."""

    @abstractmethod
    def place_initial(self, thing_id: str, destination_id: str) -> bool:
        """Authored placement: like place(), but closed containers still take things."""

    @abstractmethod
    def detach(self, thing_id: str) -> bool:
        """Take a thing out of the world (e.g. into an inventory)."""

    @abstractmethod
    def backdrops_in(self, room_id: str) -> list[Thing]: ...

    @abstractmethod
    def export(self) -> dict[str, Any]:
        """Debug snapshot of placements."""

    # --- Shared queries ---

    def room_of(self, thing_id: str) -> str | None:
        """Id of the room a thing is in (through any nesting)."""
        current = self.get_thing(thing_id)
        while current is not None:
            if isinstance(current, Room):
                return current.id
            current = self.parent_of(current.id)
        return None

    def is_character(self, thing_id: str) -> bool:
        return thing_id in self._character_ids

    def is_reachable(self, thing_id: str) -> bool:
        """No closed container between the thing and its room."""
        current = self.parent_of(thing_id)
        while current is not None and not isinstance(current, Room):
            if isinstance(current, Container) and not current.is_open:
                return False
            current = self.parent_of(current.id)
        return True

    def can_see(self, observer_id: str, target_id: str) -> bool:
        target = self.get_thing(target_id)
        observer_room = self.room_of(observer_id)
        if target is None or observer_room is None:
            return False
        if isinstance(target, Backdrop):
            return target in self.backdrops_in(observer_room)
        return self.room_of(target_id) == observer_room and self.is_reachable(target_id)

    def visible_contents(self, thing_id: str) -> list[Thing]:
        """What you'd see in/on a thing when examining it."""
        thing = self.get_thing(thing_id)
        match thing:
            case Container() if thing.is_open or not thing.is_openable:
                return self.children_of(thing_id)
            case Supporter() | Enterable() | Vehicle():
                return self.children_of(thing_id)
        return []

    def objects_in_room(self, room_id: str) -> list[Thing]:
        """Things listed in a room: direct contents (minus people and scenery) plus backdrops."""
        listed = [
            thing
            for thing in self.children_of(room_id)
            if thing.id != PLAYER_ID
            and not self.is_character(thing.id)
            and not isinstance(thing, Scenery)
        ]
        return listed + self.backdrops_in(room_id)

    def characters_in_room(self, room_id: str) -> list[Thing]:
        return [
            thing for thing in self.children_of(room_id) if self.is_character(thing.id)
        ]

    def visible_things(self, room_id: str) -> list[Thing]:
        """Everything the player could refer to here (nested included)."""
        found: list[Thing] = []
        pending = list(self.children_of(room_id))
        while pending:
            thing = pending.pop(0)
            if thing.id == PLAYER_ID:
                pending.extend(self.children_of(thing.id))
                continue
            found.append(thing)
            if not isinstance(thing, Container) or thing.is_open or not thing.is_openable:
                pending.extend(self.children_of(thing.id))
        return found + self.backdrops_in(room_id)

    def find_visible(self, name_or_id: str, room_id: str) -> Thing | None:
        """Resolve an id or display name among the things visible in a room."""
        wanted = name_or_id.lower()
        candidates = self.visible_things(room_id)
        for thing in candidates:
            if thing.id == name_or_id:
                return thing
        for thing in candidates:
            if thing.name.lower() == wanted:
                return thing
        return None

    def place(self, thing_id: str, destination_id: str) -> bool:
        """Put a thing in a room/container, or on a supporter."""
        destination = self.get_thing(destination_id)
        relation = SpatialRelation.ON if isinstance(destination, Supporter) else SpatialRelation.IN
        return self.relocate(thing_id, destination_id, relation)

    def move_player(self, room_id: str) -> bool:
        return self.relocate(PLAYER_ID, room_id)

    def player_holder(self) -> Thing | None:
        """The enterable/vehicle the player is inside, if any."""
        holder = self.parent_of(PLAYER_ID)
        if holder is None or isinstance(holder, Room):
            return None
        return holder

    # --- Save support ---

    def placements(self) -> dict[str, str]:
        """Thing id -> holder id for everything in the world tree, holders first."""
        placed: dict[str, str] = {}
        pending = [thing for thing in self.all_things() if isinstance(thing, Room)]
        while pending:
            holder = pending.pop(0)
            for child in self.children_of(holder.id):
                placed[child.id] = holder.id
                pending.append(child)
        return placed

    def restore_placements(self, placements: dict[str, str]) -> None:
        """Put things back where `placements()` found them; anything unlisted leaves the world."""
        for thing in self.all_things():
            if not isinstance(thing, Room | Backdrop):
                self.detach(thing.id)
        for thing_id, holder_id in placements.items():
            if not self.place_initial(thing_id, holder_id):
                logger.warning(f"Could not put {thing_id!r} back in {holder_id!r}")

    def thing_states(self) -> dict[str, dict[str, bool]]:
        """Open/locked containers and working vehicles, by id."""
        states: dict[str, dict[str, bool]] = {}
        for thing in self.all_things():
            match thing:
                case Container():
                    states[thing.id] = {"is_open": thing.is_open, "is_locked": thing.is_locked}
                case Vehicle():
                    states[thing.id] = {"is_operational": thing.is_operational}
        return states

    def restore_thing_states(self, states: dict[str, dict[str, bool]]) -> None:
        for thing_id, values in states.items():
            match self.get_thing(thing_id):
                case Container() as container:
                    container.is_open = values.get("is_open", container.is_open)
                    container.is_locked = values.get("is_locked", container.is_locked)
                case Vehicle() as vehicle:
                    vehicle.set_operational(values.get("is_operational", vehicle.is_operational))


class SpatialWorld(WorldView):
    """Backend over the SpatialManager's ownership tree."""

    def __init__(self, manager: SpatialManager, character_ids: set[str]):
        super().__init__(character_ids)
        self.manager = manager

    @classmethod
    def from_world(cls, world: WorldDefinition) -> "SpatialWorld":
        return cls(
            build_spatial_manager(world),
            {char.id for char in world.entities.characters},
        )

    def get_thing(self, thing_id: str) -> Thing | None:
        return self.manager.get_thing(thing_id)

    def get_room(self, room_id: str) -> Room | None:
        return self.manager.get_room(room_id)

    def all_things(self) -> list[Thing]:
        return self.manager.things

    def parent_of(self, thing_id: str) -> Thing | None:
        thing = self.manager.get_thing(thing_id)
        return thing.parent if thing else None

    def children_of(self, thing_id: str) -> list[Thing]:
        thing = self.manager.get_thing(thing_id)
        return thing.children if thing else []

    def room_of(self, thing_id: str) -> str | None:
        room = self.manager.get_room_containing(thing_id)
        return room.id if room else None

    def relocate(
        self,
        thing_id: str,
        destination_id: str,
        relation: SpatialRelation = SpatialRelation.IN,
    ) -> bool:
        return self.manager.move_to(thing_id, destination_id, relation)

    def place_initial(self, thing_id: str, destination_id: str) -> bool:
        return place_initial(self.manager, thing_id, destination_id)

    def detach(self, thing_id: str) -> bool:
        return self.manager.detach(thing_id)

    def can_see(self, observer_id: str, target_id: str) -> bool:
        return self.manager.can_see(observer_id, target_id)

    def backdrops_in(self, room_id: str) -> list[Thing]:
        return list(self.manager.get_backdrops_in_room(room_id))

    def export(self) -> dict[str, Any]:
        return self.manager.export_spatial_data()


class FlatWorld(WorldView):
    """
    Legacy backend: a flat table of thing id -> holder id.

    Every query scans the table. Capability checks mirror the Things' own
    (open state, capacity, operational vehicles) but are computed from the
    table since the Things' child sets are never populated here.
    """

    def __init__(self, things: dict[str, Thing], character_ids: set[str]):
        super().__init__(character_ids)
        self._things = things
        self._placement: dict[str, str | None] = {}
        self._presence: dict[str, set[str]] = {}

    @classmethod
    def from_world(cls, world: WorldDefinition) -> "FlatWorld":
        things = build_things(world)
        things[PLAYER_ID] = build_player(world.meta.initial_player_location)
        flat = cls(things, {char.id for char in world.entities.characters})

        flat._placement[PLAYER_ID] = world.meta.initial_player_location
        for obj in world.entities.objects:
            if obj.properties.backdrop:
                rooms = obj.properties.present_in_rooms or [obj.initial_location]
                flat._presence[obj.id] = {r for r in rooms if isinstance(things.get(r), Room)}
            elif not is_outside_world(obj.initial_location):
                if not flat.place_initial(obj.id, obj.initial_location):
                    logger.warning(f"Could not place {obj.id!r} in {obj.initial_location!r}")
        for char in world.entities.characters:
            flat.relocate(char.id, char.initial_location)
        return flat

    def place_initial(self, thing_id: str, destination_id: str) -> bool:
        """
        Starting placement, held to the same rules as relocate except that
        closed or locked containers still take their authored contents.
        """
        destination = self._things.get(destination_id)
        if not isinstance(destination, Container) or destination.is_open or not destination.is_openable:
            relation = SpatialRelation.ON if isinstance(destination, Supporter) else SpatialRelation.IN
            return self.relocate(thing_id, destination_id, relation)

        if thing_id == destination_id or self._holds(thing_id, destination_id):
            return False
        if destination.capacity is not None and len(self.children_of(destination_id)) >= destination.capacity:
            return False
        self._placement[thing_id] = destination_id
        return True

    def get_thing(self, thing_id: str) -> Thing | None:
        return self._things.get(thing_id)

    def get_room(self, room_id: str) -> Room | None:
        thing = self._things.get(room_id)
        return thing if isinstance(thing, Room) else None

    def all_things(self) -> list[Thing]:
        return list(self._things.values())

    def parent_of(self, thing_id: str) -> Thing | None:
        holder_id = self._placement.get(thing_id)
        return self._things.get(holder_id) if holder_id else None

    def children_of(self, thing_id: str) -> list[Thing]:
        return [
            self._things[child_id]
            for child_id, holder_id in self._placement.items()
            if holder_id == thing_id
        ]

    def _holds(self, ancestor_id: str, thing_id: str) -> bool:
        holder_id = self._placement.get(thing_id)
        while holder_id is not None:
            if holder_id == ancestor_id:
                return True
            holder_id = self._placement.get(holder_id)
        return False

    def _accepts(self, destination: Thing, relation: SpatialRelation) -> bool:
        count = len(self.children_of(destination.id))
        match relation, destination:
            case SpatialRelation.ON, Supporter():
                return destination.capacity is None or count < destination.capacity
            case SpatialRelation.ON, _:
                return False
            case _, Room():
                return True
            case _, Container():
                if destination.is_openable and not destination.is_open:
                    return False
                return destination.capacity is None or count < destination.capacity
            case _, Vehicle():
                return destination.is_operational and count < destination.capacity
            case _, Enterable():
                return destination.capacity is None or count < destination.capacity
        return False

    def relocate(
        self,
        thing_id: str,
        destination_id: str,
        relation: SpatialRelation = SpatialRelation.IN,
    ) -> bool:
        thing = self._things.get(thing_id)
        destination = self._things.get(destination_id)
        if thing is None or destination is None or isinstance(thing, Room | Backdrop):
            return False
        if thing_id == destination_id or self._holds(thing_id, destination_id):
            return False
        if self._placement.get(thing_id) == destination_id:
            return True
        if not self._accepts(destination, relation):
            logger.debug(f"relocate: {destination_id!r} refused {thing_id!r}")
            return False

        # Re-insert so the table keeps arrival order
        self._placement.pop(thing_id, None)
        self._placement[thing_id] = destination_id
        if isinstance(destination, Room):
            thing.location = destination_id
        return True

    def detach(self, thing_id: str) -> bool:
        thing = self._things.get(thing_id)
        if thing is None:
            return False
        self._placement.pop(thing_id, None)
        thing.location = None
        return True

    def backdrops_in(self, room_id: str) -> list[Thing]:
        return [
            self._things[backdrop_id]
            for backdrop_id, rooms in self._presence.items()
            if room_id in rooms
        ]

    def export(self) -> dict[str, Any]:
        return {
            "placement": dict(self._placement),
            "backdrops": {b: sorted(rooms) for b, rooms in self._presence.items()},
        }


def create_world_view(world: WorldDefinition, use_spatial: bool = True) -> WorldView:
    """Pick the backend once, at load time."""
    if use_spatial:
        return SpatialWorld.from_world(world)
    logger.info("Using legacy flat world model")
    return FlatWorld.from_world(world)
