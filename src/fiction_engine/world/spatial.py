"""
spatial.py

PURPOSE: Single source of truth for "where is X" and "can Y see X".
DEPENDENCIES: things.py

ARCHITECTURE NOTES:
The SpatialManager is the arena: every Thing (rooms included) is
registered here by id, and all relocation goes through move_to().

move_to() asks the destination's capability BEFORE touching the thing, so
a refused move leaves it exactly where it was. Thing.add_child then does
the detach-then-attach in one step.

Backdrops never take part in ownership. Their multi-room presence is a
separate presence set (backdrop id -> room ids) consulted only by the
visibility and listing queries.
"""

import logging
from enum import Enum
from typing import Any

from fiction_engine.world.things import (
    Backdrop,
    Container,
    Enterable,
    Room,
    Supporter,
    Thing,
    ThingKind,
    Vehicle,
)

logger = logging.getLogger(__name__)


class SpatialRelation(Enum):
    """How a thing relates to its parent."""

    IN = "in"
    ON = "on"
    INSIDE = "inside"


class SpatialManager:
    """Registry of rooms and things plus placement and visibility queries."""

    def __init__(self) -> None:
        self._rooms: dict[str, Room] = {}
        self._things: dict[str, Thing] = {}
        self._presence: dict[str, set[str]] = {}

    # --- Registration ---

    def register_room(self, room: Room) -> None:
        self._rooms[room.id] = room
        self._things[room.id] = room

    def register_thing(self, thing: Thing) -> None:
        if isinstance(thing, Room):
            self.register_room(thing)
            return
        self._things[thing.id] = thing

    def get_room(self, room_id: str) -> Room | None:
        return self._rooms.get(room_id)

    def get_thing(self, thing_id: str) -> Thing | None:
        return self._things.get(thing_id)

    @property
    def rooms(self) -> list[Room]:
        return list(self._rooms.values())

    @property
    def things(self) -> list[Thing]:
        return list(self._things.values())

    # --- Placement ---

    def move_to(
        self,
        thing_id: str,
        destination_id: str,
        relation: SpatialRelation = SpatialRelation.IN,
    ) -> bool:
        """
        Relocate a thing IN/INSIDE or ON a destination.

        Returns False (and leaves the thing where it was) if either id is
        unknown, the thing is a room or backdrop, the destination refuses the
        thing, or the relation doesn't match the destination's capability.
        """
        thing = self._things.get(thing_id)
        destination = self._things.get(destination_id)
        if thing is None or destination is None:
            logger.debug(f"move_to: unknown id ({thing_id!r} -> {destination_id!r})")
            return False
        if isinstance(thing, Room | Backdrop):
            logger.debug(f"move_to: {thing_id!r} cannot be relocated")
            return False

        match relation:
            case SpatialRelation.IN | SpatialRelation.INSIDE:
                moved = self._place_inside(thing, destination)
            case SpatialRelation.ON:
                moved = self._place_on_top(thing, destination)

        if not moved:
            logger.debug(
                f"move_to: {destination_id!r} refused {thing_id!r} ({relation.value})"
            )
        return moved

    def _place_inside(self, thing: Thing, destination: Thing) -> bool:
        match destination:
            case Room():
                if not destination.add_child(thing):
                    return False
                thing.location = destination.id
                return True
            case Container():
                return destination.add_item(thing)
            case Vehicle():
                return destination.board(thing)
            case Enterable():
                return destination.enter(thing)
            case _ if destination.can_contain(thing):
                return destination.add_child(thing)
        return False

    def _place_on_top(self, thing: Thing, destination: Thing) -> bool:
        if isinstance(destination, Supporter):
            return destination.add_item(thing)
        if destination.can_support(thing):
            return destination.add_child(thing)
        return False

    def detach(self, thing_id: str) -> bool:
        """
        Take a thing out of the world tree entirely (e.g. into an inventory).

        Clears its location tag so no room claims it.
        """
        thing = self._things.get(thing_id)
        if thing is None:
            return False
        if thing.parent is not None:
            thing.parent.remove_child(thing)
        thing.location = None
        return True

    # --- Queries ---

    def get_spatial_relation(self, thing_id: str, other_id: str) -> SpatialRelation | None:
        """IN or ON if `other` is the thing's direct parent, else None."""
        thing = self._things.get(thing_id)
        other = self._things.get(other_id)
        if thing is None or other is None or thing.parent is not other:
            return None
        if other.kind is ThingKind.SUPPORTER:
            return SpatialRelation.ON
        if other.kind in (
            ThingKind.CONTAINER,
            ThingKind.ENTERABLE,
            ThingKind.VEHICLE,
            ThingKind.ROOM,
        ):
            return SpatialRelation.IN
        return None

    def get_room_containing(self, thing_id: str) -> Room | None:
        """Nearest Room ancestor, falling back to the root's location tag."""
        thing = self._things.get(thing_id)
        if thing is None:
            return None

        current: Thing | None = thing
        while current is not None:
            if isinstance(current, Room):
                return current
            current = current.parent

        top_location = thing.get_top_level_location()
        if top_location:
            return self._rooms.get(top_location)
        return None

    def get_all_things_in_room(self, room_id: str) -> list[Thing]:
        room = self._rooms.get(room_id)
        return room.get_all_contents() if room else []

    def get_direct_things_in_room(self, room_id: str) -> list[Thing]:
        room = self._rooms.get(room_id)
        return room.get_contents() if room else []

    def can_see(self, observer_id: str, target_id: str) -> bool:
        """
        True when both are in the same room and no closed container hides
        the target. Backdrops are visible wherever their presence set says.
        """
        observer = self._things.get(observer_id)
        target = self._things.get(target_id)
        if observer is None or target is None:
            return False

        observer_room = self.get_room_containing(observer_id)
        if observer_room is None:
            return False

        if isinstance(target, Backdrop):
            return self.is_backdrop_in_room(target_id, observer_room.id)

        if self.get_room_containing(target_id) is not observer_room:
            return False

        current = target.parent
        while current is not None and current is not observer_room:
            if isinstance(current, Container) and not current.is_open:
                return False
            current = current.parent
        return True

    def get_location_description(self, thing_id: str) -> str:
        thing = self._things.get(thing_id)
        if thing is None:
            return "unknown location"

        parent = thing.parent
        if parent is None:
            return f"in {thing.location}" if thing.location else "nowhere"

        match self.get_spatial_relation(thing_id, parent.id):
            case SpatialRelation.ON:
                return f"on {parent.name}"
            case SpatialRelation.IN if isinstance(parent, Room):
                return f"in {parent.name}"
            case SpatialRelation.IN:
                return f"inside {parent.name}"
        return f"with {parent.name}"

    # --- Backdrop presence ---

    def add_backdrop_to_room(self, backdrop_id: str, room_id: str) -> bool:
        if not isinstance(self._things.get(backdrop_id), Backdrop) or room_id not in self._rooms:
            return False
        self._presence.setdefault(backdrop_id, set()).add(room_id)
        return True

    def remove_backdrop_from_room(self, backdrop_id: str, room_id: str) -> bool:
        rooms = self._presence.get(backdrop_id)
        if not rooms or room_id not in rooms:
            return False
        rooms.discard(room_id)
        return True

    def is_backdrop_in_room(self, backdrop_id: str, room_id: str) -> bool:
        return room_id in self._presence.get(backdrop_id, ())

    def get_backdrops_in_room(self, room_id: str) -> list[Backdrop]:
        backdrops = []
        for backdrop_id, rooms in self._presence.items():
            backdrop = self._things[backdrop_id]
            if room_id in rooms and isinstance(backdrop, Backdrop):
                backdrops.append(backdrop)
        return backdrops

    def get_backdrop_rooms(self, backdrop_id: str) -> list[str]:
        return sorted(self._presence.get(backdrop_id, ()))

    # --- Debug ---

    def export_spatial_data(self) -> dict[str, Any]:
        """Snapshot of rooms, placements and presence sets for debug output."""
        return {
            "rooms": {
                room.id: {
                    "name": room.name,
                    "connections": dict(room.connections),
                    "is_dark": room.is_dark,
                    "is_outdoors": room.is_outdoors,
                }
                for room in self._rooms.values()
            },
            "things": {
                thing.id: {
                    "name": thing.name,
                    "kind": thing.kind.value,
                    "location": thing.location,
                    "parent_id": thing.parent_id,
                }
                for thing in self._things.values()
                if not isinstance(thing, Room)
            },
            "backdrops": {
                backdrop_id: sorted(rooms) for backdrop_id, rooms in self._presence.items()
            },
        }
