"""World model: Things, their placement, and loading them from a definition."""

from fiction_engine.world.builder import build_spatial_manager, build_things
from fiction_engine.world.spatial import SpatialManager, SpatialRelation
from fiction_engine.world.things import (
    Backdrop,
    Container,
    Enterable,
    Room,
    Scenery,
    Supporter,
    Thing,
    ThingKind,
    Vehicle,
    create_thing,
)

__all__ = [
    "Backdrop",
    "Container",
    "Enterable",
    "Room",
    "Scenery",
    "SpatialManager",
    "SpatialRelation",
    "Supporter",
    "Thing",
    "ThingKind",
    "Vehicle",
    "build_spatial_manager",
    "build_things",
    "create_thing",
]
