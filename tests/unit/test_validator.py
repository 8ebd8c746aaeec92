"""
TEST DOC: World Validator

WHAT: Tests for the soft checks run by `fiction-engine validate`
WHY: Authors need to hear about rules that can never fire before playing
HOW: Start from the minimal world, break one thing, look for the issue

CASES:
- The sample world is clean
- Unknown keys and destinations on objects
- Rule targets, condition and effect references
- Event trigger values

EDGE CASES:
- move rules may target a direction
- Boolean timed trigger values are rejected
- Issues come back errors first
"""

from fiction_engine.models.world import WorldDefinition
from fiction_engine.validator import ValidationSeverity, WorldValidator, validate_world


def issues_for(world_dict: dict) -> list[str]:
    world = WorldDefinition.model_validate(world_dict)
    return [str(issue) for issue in validate_world(world)]


def add_object(world_dict: dict, **properties) -> None:
    world_dict["entities"]["objects"].append(
        {
            "id": "thing",
            "name": "thing",
            "initial_location": "room_a",
            "properties": properties,
        }
    )


class TestCleanWorld:
    """Tests for worlds with nothing to report."""

    def test_sample_world(self, sample_world: WorldDefinition):
        """The fixture world has no issues."""
        assert validate_world(sample_world) == []


class TestObjects:
    """Tests for object property checks."""

    def test_unknown_key(self, minimal_world_dict: dict):
        """unlocks_with must name an object."""
        add_object(minimal_world_dict, container=True, unlocks_with="skeleton_key")
        assert any("unlocks_with 'skeleton_key'" in i for i in issues_for(minimal_world_dict))

    def test_unknown_climb_destination(self, minimal_world_dict: dict):
        """climb_destination must be a room."""
        add_object(minimal_world_dict, climbable=True, climb_destination="sky")
        assert any("climb_destination 'sky'" in i for i in issues_for(minimal_world_dict))

    def test_lockable_non_container(self, minimal_world_dict: dict):
        """Only containers lock."""
        add_object(minimal_world_dict, locked=True)
        assert any("not a container" in i for i in issues_for(minimal_world_dict))

    def test_readable_without_text(self, minimal_world_dict: dict):
        """Readable things should say something."""
        add_object(minimal_world_dict, readable=True)
        assert any("no text_content" in i for i in issues_for(minimal_world_dict))

    def test_backdrop_unknown_room(self, minimal_world_dict: dict):
        """Backdrop presence must name rooms."""
        add_object(minimal_world_dict, backdrop=True, present_in_rooms=["room_a", "room_z"])
        assert any("unknown room 'room_z'" in i for i in issues_for(minimal_world_dict))


class TestRules:
    """Tests for rule reference checks."""

    def test_unknown_target(self, minimal_world_dict: dict):
        """A rule for a missing target can never fire."""
        minimal_world_dict["rules"] = {"action_rules": [{"id": "r", "action": "take", "target": "ghost"}]}
        assert any("action_rule:r" in i and "'ghost'" in i for i in issues_for(minimal_world_dict))

    def test_move_rule_direction(self, minimal_world_dict: dict):
        """move rules may name a direction."""
        minimal_world_dict["rules"] = {"action_rules": [{"id": "r", "action": "move", "target": "north"}]}
        assert issues_for(minimal_world_dict) == []

    def test_effect_references(self, minimal_world_dict: dict):
        """Effects naming missing things are errors."""
        minimal_world_dict["rules"] = {
            "action_rules": [
                {
                    "id": "r",
                    "action": "poke",
                    "effects": [
                        {"type": "move_entity", "destination": "room_z"},
                        {"type": "add_to_inventory", "item": "ghost"},
                    ],
                }
            ]
        }
        found = issues_for(minimal_world_dict)
        assert any("effects[0]" in i and "room_z" in i for i in found)
        assert any("effects[1]" in i and "ghost" in i for i in found)

    def test_condition_references(self, minimal_world_dict: dict):
        """Conditions naming missing things are reported."""
        minimal_world_dict["rules"] = {
            "action_rules": [
                {
                    "id": "r",
                    "action": "poke",
                    "conditions": [{"type": "has_item", "target": "ghost", "value": "key"}],
                }
            ]
        }
        assert any("'ghost' has no inventory" in i for i in issues_for(minimal_world_dict))

    def test_event_triggers(self, minimal_world_dict: dict):
        """Trigger values are checked per trigger type."""
        minimal_world_dict["rules"] = {
            "event_rules": [
                {"id": "a", "trigger": {"type": "on_enter_location", "value": "room_z"}},
                {"id": "b", "trigger": {"type": "timed_event", "value": True}},
                {"id": "c", "trigger": {"type": "timed_event", "value": 4}},
            ]
        }
        found = issues_for(minimal_world_dict)
        assert any(i.startswith("[ERROR] event_rule:a") for i in found)
        assert any(i.startswith("[ERROR] event_rule:b") for i in found)
        assert not any("event_rule:c" in i for i in found)

    def test_errors_first(self, minimal_world_dict: dict):
        """Issues are sorted by severity."""
        add_object(minimal_world_dict, readable=True, container=True, unlocks_with="nope")
        world = WorldDefinition.model_validate(minimal_world_dict)
        severities = [issue.severity for issue in WorldValidator(world).validate()]
        assert severities == [ValidationSeverity.ERROR, ValidationSeverity.INFO]
