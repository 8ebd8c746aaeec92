"""
TEST DOC: Core Models

WHAT: Tests for WorldDefinition, GameState and InventoryStore
WHY: Ensure Pydantic validation rejects unplayable worlds and that
     mutable state behaves as the engine expects
HOW: Test valid/invalid data, edge cases, and model methods

CASES:
- The sample world validates
- Broken references are rejected at load time
- Rule conditions/effects are a closed set
- GameState seeding, counters, flags and capped logs
- Inventory transfer and exchange

EDGE CASES:
- Reserved "player" id
- Objects authored inside each other
- Exchange when one side lacks its item
- Conversation history cap is per character
"""

import copy

import pytest
from pydantic import ValidationError

from fiction_engine.constants import MAX_CONVERSATION_HISTORY, MAX_RECENT_ACTIONS
from fiction_engine.models.inventory import InventoryStore
from fiction_engine.models.state import GameState
from fiction_engine.models.world import ActionRule, WorldDefinition


class TestWorldDefinition:
    """Tests for loading and reference validation."""

    def test_sample_world_valid(self, sample_world: WorldDefinition):
        """The fixture world loads with every section."""
        assert sample_world.meta.title == "The Hermit's Hollow"
        assert len(sample_world.entities.locations) == 5
        assert sample_world.get_object("chest").properties.locked
        assert sample_world.get_character("hermit").conversational.greeting == "Welcome, traveller."
        assert sample_world.parser_hints.synonyms.verbs[0].primary == "pull"

    def test_from_file(self, sample_world_path):
        """from_file reads and validates."""
        assert WorldDefinition.from_file(sample_world_path).meta.author == "Test Suite"

    def test_unknown_start_location(self, minimal_world_dict: dict):
        """The player must start in a real room."""
        minimal_world_dict["meta"]["initial_player_location"] = "room_z"
        with pytest.raises(ValidationError, match="room_z"):
            WorldDefinition.model_validate(minimal_world_dict)

    def test_exit_to_unknown_room(self, minimal_world_dict: dict):
        """Exits must lead to real rooms."""
        minimal_world_dict["entities"]["locations"][0]["connections"][0]["to"] = "room_z"
        with pytest.raises(ValidationError, match="unknown location"):
            WorldDefinition.model_validate(minimal_world_dict)

    def test_object_location(self, minimal_world_dict: dict):
        """Objects go in rooms, objects, bags or nowhere."""
        world = copy.deepcopy(minimal_world_dict)
        world["entities"]["objects"][0]["initial_location"] = "player_bag"
        WorldDefinition.model_validate(world)
        world["entities"]["objects"][0]["initial_location"] = "nowhere"
        WorldDefinition.model_validate(world)
        world["entities"]["objects"][0]["initial_location"] = "attic"
        with pytest.raises(ValidationError, match="invalid location"):
            WorldDefinition.model_validate(world)

    def test_objects_inside_each_other(self, minimal_world_dict: dict):
        """Two boxes can't start inside one another, nor a box inside itself."""
        minimal_world_dict["entities"]["objects"] += [
            {"id": "box_a", "name": "box", "initial_location": "box_b", "properties": {"container": True}},
            {"id": "box_b", "name": "crate", "initial_location": "box_a", "properties": {"container": True}},
        ]
        with pytest.raises(ValidationError, match="inside each other"):
            WorldDefinition.model_validate(minimal_world_dict)

        minimal_world_dict["entities"]["objects"][0]["initial_location"] = "key"
        del minimal_world_dict["entities"]["objects"][1:]
        with pytest.raises(ValidationError, match="key -> key"):
            WorldDefinition.model_validate(minimal_world_dict)

    def test_nested_placement_allowed(self, minimal_world_dict: dict):
        """A chain of holders ending in a room is fine."""
        minimal_world_dict["entities"]["objects"] += [
            {"id": "box", "name": "box", "initial_location": "crate", "properties": {"container": True}},
            {"id": "crate", "name": "crate", "initial_location": "room_a", "properties": {"container": True}},
        ]
        minimal_world_dict["entities"]["objects"][0]["initial_location"] = "box"
        WorldDefinition.model_validate(minimal_world_dict)

    def test_duplicate_ids(self, minimal_world_dict: dict):
        """Ids are unique across all entity kinds."""
        minimal_world_dict["entities"]["objects"][0]["id"] = "room_b"
        with pytest.raises(ValidationError, match="Duplicate"):
            WorldDefinition.model_validate(minimal_world_dict)

    def test_player_id_reserved(self, minimal_world_dict: dict):
        """Nothing else may be called 'player'."""
        minimal_world_dict["entities"]["objects"][0]["id"] = "player"
        with pytest.raises(ValidationError, match="reserved"):
            WorldDefinition.model_validate(minimal_world_dict)

    def test_character_inventory_must_exist(self, minimal_world_dict: dict):
        """initial_inventory names real objects."""
        minimal_world_dict["entities"]["characters"] = [
            {"id": "cat", "name": "Cat", "initial_location": "room_a", "initial_inventory": ["yarn"]}
        ]
        with pytest.raises(ValidationError, match="yarn"):
            WorldDefinition.model_validate(minimal_world_dict)

    def test_unknown_effect_type(self):
        """Effects are a closed set."""
        with pytest.raises(ValidationError):
            ActionRule.model_validate(
                {"id": "r", "action": "poke", "effects": [{"type": "explode"}]}
            )

    def test_wildcard_targets(self):
        """No target and '*' both match anything."""
        assert ActionRule(id="a", action="poke").is_wildcard
        assert ActionRule(id="b", action="poke", target="*").is_wildcard
        assert not ActionRule(id="c", action="poke", target="chest").is_wildcard


class TestGameState:
    """Tests for mutable state."""

    def test_from_world(self, sample_world: WorldDefinition):
        """Seeded from the world, with copied character state."""
        state = GameState.from_world(sample_world)
        assert state.current_location == "hall"
        state.set_entity_state("hermit", "mood", "cheerful")
        assert sample_world.get_character("hermit").state["mood"] == "grumpy"

    def test_counters_and_flags(self):
        """Unset reads are 0 and False."""
        state = GameState(current_location="hall")
        assert state.get_counter("x") == 0
        assert not state.get_flag("x")
        state.add_counter("x", 2)
        state.add_counter("x", -5)
        assert state.get_counter("x") == -3

    def test_recent_actions_cap(self):
        """Oldest actions drop first."""
        state = GameState(current_location="hall")
        for i in range(MAX_RECENT_ACTIONS + 2):
            state.add_recent_action(f"a{i}")
        assert state.recent_actions[0] == "a2"
        assert len(state.recent_actions) == MAX_RECENT_ACTIONS

    def test_conversation_cap_per_character(self):
        """Each character's history is capped separately."""
        state = GameState(current_location="hall")
        for i in range(MAX_CONVERSATION_HISTORY + 5):
            state.add_conversation_entry("hermit", "player", f"m{i}")
        state.add_conversation_entry("guard", "player", "hi")
        history = state.get_conversation_history("hermit")
        assert len(history) == MAX_CONVERSATION_HISTORY
        assert history[0].message == "m5"
        assert state.has_spoken_with("guard")
        assert not state.has_spoken_with("nobody")

    def test_replace_with(self):
        """replace_with copies every field, deeply."""
        state = GameState(current_location="hall")
        other = GameState(current_location="vault", turn_count=7, flags={"f": True})
        state.replace_with(other)
        other.flags["f"] = False
        assert state.current_location == "vault"
        assert state.turn_count == 7
        assert state.flags == {"f": True}


class TestInventoryStore:
    """Tests for ownership."""

    def test_order_and_duplicates(self):
        """Acquisition order is kept, adding twice is a no-op."""
        store = InventoryStore()
        store.add_item_to_inventory("player", "b")
        store.add_item_to_inventory("player", "a")
        store.add_item_to_inventory("player", "b")
        assert store.get_inventory_items("player") == ["b", "a"]

    def test_transfer(self):
        """Transfers need both inventories and the item."""
        store = InventoryStore()
        store.create_inventory("player")
        store.add_item_to_inventory("hermit", "map")
        assert store.transfer_item("hermit", "player", "map")
        assert store.owner_of("map") == "player"
        assert not store.transfer_item("hermit", "player", "map")
        assert not store.transfer_item("player", "ghost", "map")

    def test_exchange_is_all_or_nothing(self):
        """Both sides must hold their item or nothing moves."""
        store = InventoryStore()
        store.add_item_to_inventory("player", "coin")
        store.add_item_to_inventory("hermit", "map")
        assert not store.exchange_items("player", "coin", "hermit", "idol")
        assert store.get_inventory_items("player") == ["coin"]
        assert store.get_inventory_items("hermit") == ["map"]
        assert store.exchange_items("player", "coin", "hermit", "map")
        assert store.get_inventory_items("player") == ["map"]
        assert store.get_inventory_items("hermit") == ["coin"]

    def test_save_round_trip(self):
        """all_inventories is a copy that load_from_save_data accepts."""
        store = InventoryStore()
        store.add_item_to_inventory("player", "coin")
        saved = store.all_inventories()
        saved["player"].append("ghost")
        assert store.get_inventory_items("player") == ["coin"]
        store.load_from_save_data({"hermit": ["map"]})
        assert not store.has_inventory("player")
        assert store.has_item("hermit", "map")
