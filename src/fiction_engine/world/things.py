"""
things.py

PURPOSE: The Thing model and its closed set of capability variants.
DEPENDENCIES: None (pure Python)

ARCHITECTURE NOTES:
Every placeable entity (room, object, character, the player) is a Thing.
Variants form a CLOSED set, tagged by ThingKind, and differ only in the
three capability checks the rest of the engine relies on:

    can_contain(thing)       - may `thing` be put IN this?
    can_support(thing)       - may `thing` be put ON this?
    can_be_entered_by(thing) - may `thing` get inside this?

Ownership is a forest. add_child/remove_child are the only mutators of the
parent/children pointers and always update both sides. add_child detaches
the child from its previous owner first and refuses to create a cycle.

None of these operations raise: they return False and callers turn that
into a message for the player.
"""

from enum import Enum
from typing import Any


class ThingKind(Enum):
    """Tag for each Thing variant."""

    THING = "thing"
    ROOM = "room"
    CONTAINER = "container"
    SUPPORTER = "supporter"
    ENTERABLE = "enterable"
    VEHICLE = "vehicle"
    BACKDROP = "backdrop"
    SCENERY = "scenery"


class Thing:
    """
    Base class for every game entity.

    A Thing has at most one parent. When it has no parent, its `location`
    tag (usually a room id) records where it sits at top level.
    """

    kind: ThingKind = ThingKind.THING

    def __init__(
        self,
        thing_id: str,
        name: str,
        description: str = "",
        properties: dict[str, Any] | None = None,
    ):
        self.id = thing_id
        self.name = name
        self.description = description
        self.is_portable = True
        self.is_fixed_in_place = False
        self.properties: dict[str, Any] = dict(properties or {})
        self.location: str | None = None
        self._parent: Thing | None = None
        # Insertion-ordered so listings are stable
        self._children: dict[str, Thing] = {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r})"

    # Capability checks. The plain Thing refuses everything.

    def can_contain(self, thing: "Thing") -> bool:  # noqa: ARG002
        return False

    def can_support(self, thing: "Thing") -> bool:  # noqa: ARG002
        return False

    def can_be_entered_by(self, thing: "Thing") -> bool:  # noqa: ARG002
        return False

    # Ownership

    @property
    def parent(self) -> "Thing | None":
        return self._parent

    @property
    def parent_id(self) -> str | None:
        return self._parent.id if self._parent else None

    @property
    def children(self) -> list["Thing"]:
        """Direct children, in the order they arrived."""
        return list(self._children.values())

    def add_child(self, child: "Thing") -> bool:
        """
        Make `child` a direct child of this Thing.

        Detaches it from its previous owner first. Refuses to attach a Thing
        to itself or to one of its own descendants.
        """
        if child is self or self.is_inside(child):
            return False
        if child._parent is self:
            return True
        if child._parent is not None:
            child._parent.remove_child(child)
        self._children[child.id] = child
        child._parent = self
        return True

    def remove_child(self, child: "Thing") -> bool:
        """Detach a direct child. Returns False if it wasn't ours."""
        if self._children.get(child.id) is not child:
            return False
        del self._children[child.id]
        child._parent = None
        return True

    def contains(self, thing: "Thing") -> bool:
        """True if `thing` is a direct child."""
        return self._children.get(thing.id) is thing

    def get_all_descendants(self) -> list["Thing"]:
        """Every Thing in this subtree, depth first, excluding self."""
        descendants: list[Thing] = []
        for child in self._children.values():
            descendants.append(child)
            descendants.extend(child.get_all_descendants())
        return descendants

    def is_inside(self, other: "Thing") -> bool:
        """True if `other` is an ancestor of this Thing."""
        current = self._parent
        while current is not None:
            if current is other:
                return True
            current = current._parent
        return False

    def get_top_level_location(self) -> str | None:
        """The location tag of the root ancestor."""
        if self._parent is not None:
            return self._parent.get_top_level_location()
        return self.location

    def is_empty(self) -> bool:
        return not self._children


class Room(Thing):
    """A place. Contains anything, can be entered by anything, supports nothing."""

    kind = ThingKind.ROOM

    def __init__(
        self,
        thing_id: str,
        name: str,
        description: str = "",
        properties: dict[str, Any] | None = None,
    ):
        super().__init__(thing_id, name, description, properties)
        self.is_portable = False
        self.is_fixed_in_place = True
        self.connections: dict[str, str] = {}
        self.is_dark = False
        self.is_outdoors = False

    def can_contain(self, thing: Thing) -> bool:  # noqa: ARG002
        return True

    def can_be_entered_by(self, thing: Thing) -> bool:  # noqa: ARG002
        return True

    def add_connection(self, direction: str, room_id: str) -> None:
        self.connections[direction] = room_id

    def remove_connection(self, direction: str) -> None:
        self.connections.pop(direction, None)

    def get_connection(self, direction: str) -> str | None:
        return self.connections.get(direction)

    def has_exit(self, direction: str) -> bool:
        return direction in self.connections

    def get_exits(self) -> list[str]:
        return list(self.connections)

    def get_contents(self) -> list[Thing]:
        return self.children

    def get_all_contents(self) -> list[Thing]:
        return self.get_all_descendants()


class Container(Thing):
    """
    Something with an inside: a box, a chest, a drawer.

    State machine:
        closed --open()--> open --close()--> closed
        closed --lock(key)--> locked --unlock(key)--> closed

    Locking always closes. A non-openable container is permanently open.
    """

    kind = ThingKind.CONTAINER

    def __init__(
        self,
        thing_id: str,
        name: str,
        description: str = "",
        properties: dict[str, Any] | None = None,
    ):
        super().__init__(thing_id, name, description, properties)
        self.is_openable = True
        self.is_open = False
        self.is_locked = False
        self.unlocks_with_key: str | None = None
        self.capacity: int | None = None  # None means unbounded

    def can_contain(self, thing: Thing) -> bool:  # noqa: ARG002
        if self.is_openable and not self.is_open:
            return False
        return not self.is_full()

    def open(self) -> bool:
        if not self.is_openable or self.is_locked or self.is_open:
            return False
        self.is_open = True
        return True

    def close(self) -> bool:
        if not self.is_openable or not self.is_open:
            return False
        self.is_open = False
        return True

    def lock(self, key: str | None = None) -> bool:
        if not self.is_openable or self.is_locked:
            return False
        if self.unlocks_with_key and key != self.unlocks_with_key:
            return False
        self.is_locked = True
        self.is_open = False
        return True

    def unlock(self, key: str | None = None) -> bool:
        if not self.is_locked:
            return False
        if self.unlocks_with_key and key != self.unlocks_with_key:
            return False
        self.is_locked = False
        return True

    def add_item(self, item: Thing) -> bool:
        if not self.can_contain(item):
            return False
        return self.add_child(item)

    def remove_item(self, item: Thing) -> bool:
        return self.remove_child(item)

    def get_visible_contents(self) -> list[Thing]:
        if self.is_open or not self.is_openable:
            return self.children
        return []

    def is_full(self) -> bool:
        return self.capacity is not None and len(self._children) >= self.capacity

    def set_openable(self, openable: bool) -> None:
        self.is_openable = openable
        if not openable:
            self.is_open = True
            self.is_locked = False

    def set_capacity(self, capacity: int) -> None:
        self.capacity = max(0, capacity)

    def set_unlocks_with_key(self, key_id: str | None) -> None:
        self.unlocks_with_key = key_id


class Supporter(Thing):
    """A surface things rest on. Never hides what is on it."""

    kind = ThingKind.SUPPORTER

    def __init__(
        self,
        thing_id: str,
        name: str,
        description: str = "",
        properties: dict[str, Any] | None = None,
    ):
        super().__init__(thing_id, name, description, properties)
        self.capacity: int | None = None

    def can_support(self, thing: Thing) -> bool:  # noqa: ARG002
        return not self.is_full()

    def add_item(self, item: Thing) -> bool:
        if not self.can_support(item):
            return False
        return self.add_child(item)

    def remove_item(self, item: Thing) -> bool:
        return self.remove_child(item)

    def get_items_on_top(self) -> list[Thing]:
        return self.children

    def is_full(self) -> bool:
        return self.capacity is not None and len(self._children) >= self.capacity

    def set_capacity(self, capacity: int) -> None:
        self.capacity = max(0, capacity)


class Enterable(Thing):
    """
    Something with an interior that things (including the player) get into.

    Exiting puts the occupant wherever the Enterable itself is.
    """

    kind = ThingKind.ENTERABLE

    def __init__(
        self,
        thing_id: str,
        name: str,
        description: str = "",
        properties: dict[str, Any] | None = None,
    ):
        super().__init__(thing_id, name, description, properties)
        self.capacity: int | None = None

    def can_contain(self, thing: Thing) -> bool:  # noqa: ARG002
        return not self.is_full()

    def can_be_entered_by(self, thing: Thing) -> bool:  # noqa: ARG002
        return not self.is_full()

    def enter(self, thing: Thing) -> bool:
        if not self.can_be_entered_by(thing):
            return False
        return self.add_child(thing)

    def exit(self, thing: Thing) -> bool:
        if not self.contains(thing):
            return False
        self.remove_child(thing)
        _place_beside(self, thing)
        return True

    def get_contents(self) -> list[Thing]:
        return self.children

    def is_full(self) -> bool:
        return self.capacity is not None and len(self._children) >= self.capacity

    def set_capacity(self, capacity: int) -> None:
        self.capacity = max(0, capacity)


class Vehicle(Thing):
    """An enterable that is boarded, may be out of order, and may need a key to start."""

    kind = ThingKind.VEHICLE

    def __init__(
        self,
        thing_id: str,
        name: str,
        description: str = "",
        properties: dict[str, Any] | None = None,
    ):
        super().__init__(thing_id, name, description, properties)
        self.capacity = 1
        self.is_operational = True
        self.required_key: str | None = None

    def can_contain(self, thing: Thing) -> bool:  # noqa: ARG002
        return len(self._children) < self.capacity and self.is_operational

    def can_be_entered_by(self, thing: Thing) -> bool:  # noqa: ARG002
        return len(self._children) < self.capacity and self.is_operational

    def board(self, thing: Thing) -> bool:
        if not self.can_be_entered_by(thing):
            return False
        return self.add_child(thing)

    def disembark(self, thing: Thing) -> bool:
        if not self.contains(thing):
            return False
        self.remove_child(thing)
        _place_beside(self, thing)
        return True

    def start(self, key: str | None = None) -> bool:
        if not self.is_operational:
            return False
        if self.required_key and key != self.required_key:
            return False
        return True

    def get_passengers(self) -> list[Thing]:
        return self.children

    def is_full(self) -> bool:
        return len(self._children) >= self.capacity

    def set_capacity(self, capacity: int) -> None:
        self.capacity = max(1, capacity)

    def set_operational(self, operational: bool) -> None:
        self.is_operational = operational

    def set_required_key(self, key_id: str | None) -> None:
        self.required_key = key_id


class Backdrop(Thing):
    """
    Something seen from many rooms at once (the sky, a river).

    Which rooms it appears in is held by the SpatialManager's presence set,
    not by ownership.
    """

    kind = ThingKind.BACKDROP

    def __init__(
        self,
        thing_id: str,
        name: str,
        description: str = "",
        properties: dict[str, Any] | None = None,
    ):
        super().__init__(thing_id, name, description, properties)
        self.is_portable = False
        self.is_fixed_in_place = True


class Scenery(Thing):
    """Fixed decoration in a single room."""

    kind = ThingKind.SCENERY

    def __init__(
        self,
        thing_id: str,
        name: str,
        description: str = "",
        properties: dict[str, Any] | None = None,
    ):
        super().__init__(thing_id, name, description, properties)
        self.is_portable = False
        self.is_fixed_in_place = True


def _place_beside(holder: Thing, thing: Thing) -> None:
    """Put `thing` wherever `holder` is (its parent, or its location tag)."""
    if holder.parent is not None:
        holder.parent.add_child(thing)
    else:
        thing.location = holder.location


THING_CLASSES: dict[ThingKind, type[Thing]] = {
    ThingKind.THING: Thing,
    ThingKind.ROOM: Room,
    ThingKind.CONTAINER: Container,
    ThingKind.SUPPORTER: Supporter,
    ThingKind.ENTERABLE: Enterable,
    ThingKind.VEHICLE: Vehicle,
    ThingKind.BACKDROP: Backdrop,
    ThingKind.SCENERY: Scenery,
}


def create_thing(
    thing_id: str,
    name: str,
    description: str,
    kind: ThingKind = ThingKind.THING,
    properties: dict[str, Any] | None = None,
) -> Thing:
    """Build the Thing variant for `kind`."""
    return THING_CLASSES[kind](thing_id, name, description, properties)
