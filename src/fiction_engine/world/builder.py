"""
builder.py

PURPOSE: Turn a validated WorldDefinition into Things and place them.
DEPENDENCIES: models/world.py, things.py, spatial.py

ARCHITECTURE NOTES:
Variant selection follows a fixed precedence:

    backdrop > scenery > vehicle > enterable > container > supporter > plain

Connections get their reverse added on the destination room unless the
connection is one-way or the destination already has that direction.

Objects are created in one pass and placed in a second, so an object may
name a container declared later in the file. Objects starting in a bag or
"nowhere" are left outside the tree; the engine fills inventories.
"""

import logging
from typing import Any

from fiction_engine.constants import BAG_SUFFIX, NOWHERE, OPPOSITE_DIRECTIONS, PLAYER_ID
from fiction_engine.models.world import Character, GameObject, Location, WorldDefinition
from fiction_engine.world.spatial import SpatialManager, SpatialRelation
from fiction_engine.world.things import (
    Container,
    Enterable,
    Room,
    Supporter,
    Thing,
    ThingKind,
    Vehicle,
    create_thing,
)

logger = logging.getLogger(__name__)


def resolve_connections(world: WorldDefinition) -> dict[str, dict[str, str]]:
    """Room id -> {direction: destination}, reverse exits included."""
    connections: dict[str, dict[str, str]] = {
        loc.id: {conn.direction: conn.to for conn in loc.connections}
        for loc in world.entities.locations
    }
    for loc in world.entities.locations:
        for conn in loc.connections:
            if conn.is_one_way:
                continue
            reverse = OPPOSITE_DIRECTIONS.get(conn.direction)
            if reverse is None:
                continue
            connections[conn.to].setdefault(reverse, loc.id)
    return connections


def build_room(location: Location, connections: dict[str, str]) -> Room:
    room = Room(location.id, location.name, location.description)
    for direction, destination in connections.items():
        room.add_connection(direction, destination)
    room.is_dark = location.properties.is_dark
    room.is_outdoors = location.properties.is_outdoors
    return room


def object_kind(obj: GameObject) -> ThingKind:
    """Pick the Thing variant for an object from its property flags."""
    props = obj.properties
    if props.backdrop:
        return ThingKind.BACKDROP
    if props.scenery:
        return ThingKind.SCENERY
    if props.vehicle:
        return ThingKind.VEHICLE
    if props.enterable:
        return ThingKind.ENTERABLE
    if props.container:
        return ThingKind.CONTAINER
    if props.supporter:
        return ThingKind.SUPPORTER
    return ThingKind.THING


def build_object(obj: GameObject) -> Thing:
    """Create the Thing for an object and apply its property bag."""
    props = obj.properties
    bag: dict[str, Any] = props.model_dump(exclude_none=True)
    if obj.text_content is not None:
        bag["text_content"] = obj.text_content

    thing = create_thing(obj.id, obj.name, obj.description, object_kind(obj), bag)

    if props.portable is not None and thing.kind not in (ThingKind.BACKDROP, ThingKind.SCENERY):
        thing.is_portable = props.portable
        thing.is_fixed_in_place = not props.portable

    match thing:
        case Container():
            if props.openable is not None:
                thing.set_openable(props.openable)
            if props.is_open is not None and thing.is_openable:
                thing.is_open = props.is_open
            if props.locked:
                thing.is_locked = True
                thing.is_open = False
            thing.set_unlocks_with_key(props.unlocks_with)
            if props.capacity is not None:
                thing.set_capacity(props.capacity)
        case Vehicle():
            if props.capacity is not None:
                thing.set_capacity(props.capacity)
            thing.set_required_key(props.required_key)
        case Supporter() | Enterable():
            if props.capacity is not None:
                thing.set_capacity(props.capacity)

    return thing


def build_character(character: Character) -> Thing:
    """Characters are plain Things that can't be carried off."""
    thing = create_thing(character.id, character.name, character.description)
    thing.is_portable = False
    thing.is_fixed_in_place = True
    return thing


def build_player(location_id: str) -> Thing:
    player = create_thing(PLAYER_ID, "yourself", "As good-looking as ever.")
    player.is_portable = False
    player.location = location_id
    return player


def build_things(world: WorldDefinition) -> dict[str, Thing]:
    """Every room, object and character as an unplaced Thing, keyed by id."""
    connections = resolve_connections(world)
    things: dict[str, Thing] = {}
    for loc in world.entities.locations:
        things[loc.id] = build_room(loc, connections[loc.id])
    for obj in world.entities.objects:
        things[obj.id] = build_object(obj)
    for char in world.entities.characters:
        things[char.id] = build_character(char)
    return things


def is_outside_world(location_id: str) -> bool:
    """True for starting locations that aren't a place (bags, nowhere)."""
    return location_id == NOWHERE or location_id.endswith(BAG_SUFFIX)


def build_spatial_manager(world: WorldDefinition) -> SpatialManager:
    """
    Register and place everything in a fresh SpatialManager.

    A placement the destination refuses (a full vehicle, say) is logged
    and leaves the object unplaced rather than aborting the load.
    """
    manager = SpatialManager()
    for thing in build_things(world).values():
        manager.register_thing(thing)

    player = build_player(world.meta.initial_player_location)
    manager.register_thing(player)
    manager.move_to(PLAYER_ID, world.meta.initial_player_location)

    for obj in world.entities.objects:
        if obj.properties.backdrop:
            rooms = obj.properties.present_in_rooms or [obj.initial_location]
            for room_id in rooms:
                if not manager.add_backdrop_to_room(obj.id, room_id):
                    logger.debug(f"Backdrop {obj.id!r} names unknown room {room_id!r}")
            continue
        if is_outside_world(obj.initial_location):
            continue
        if not place_initial(manager, obj.id, obj.initial_location):
            logger.warning(f"Could not place {obj.id!r} in {obj.initial_location!r}")

    for char in world.entities.characters:
        manager.move_to(char.id, char.initial_location)

    return manager


def place_initial(manager: SpatialManager, thing_id: str, destination_id: str) -> bool:
    """
    Starting placement, which may put things inside closed or locked
    containers (authoring isn't bound by the player's rules).
    """
    destination = manager.get_thing(destination_id)
    thing = manager.get_thing(thing_id)
    if destination is None or thing is None:
        return False
    if isinstance(destination, Supporter):
        return manager.move_to(thing_id, destination_id, SpatialRelation.ON)
    if isinstance(destination, Container):
        if destination.is_full():
            return False
        return destination.add_child(thing)
    return manager.move_to(thing_id, destination_id, SpatialRelation.IN)
