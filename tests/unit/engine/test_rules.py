"""
TEST DOC: Rule Engine

WHAT: Tests for condition checks, effects, rule matching and event rules
WHY: Worlds are scripted entirely through these rules
HOW: Drive engine.rules directly on the sample world

CASES:
- Each condition kind, true and false
- Effects apply in order and reach state, inventory and placement
- First declared rule wins; exact lookup skips wildcards
- Failed conditions apply nothing
- every_turn, on_enter_location and timed_event triggers

EDGE CASES:
- move_entity to an unknown room changes nothing
- move_entity into a locked container leaves a carried item carried
- Event rules stop once the game is over
- Non-integer timed values never fire
"""

from fiction_engine.constants import RULE_BLOCKED_MESSAGE
from fiction_engine.engine.engine import GameEngine
from fiction_engine.engine.events import EventRecorder
from fiction_engine.models.world import ActionRule, EventRule


def rule(**data) -> ActionRule:
    return ActionRule.model_validate({"id": "r", "action": "poke", **data})


class TestConditions:
    """Tests for check_condition."""

    def test_location_is(self, engine: GameEngine):
        """Player location and another entity's room."""
        rules = engine.rules
        assert rules.check_conditions(rule(conditions=[{"type": "location_is", "value": "hall"}]).conditions)
        cond = rule(conditions=[{"type": "location_is", "target": "hermit", "value": "garden"}]).conditions
        assert rules.check_conditions(cond)
        cond = rule(conditions=[{"type": "location_is", "target": "hermit", "value": "hall"}]).conditions
        assert not rules.check_conditions(cond)

    def test_has_item(self, engine: GameEngine):
        """Inventory membership per actor."""
        rules = engine.rules
        assert rules.check_conditions(rule(conditions=[{"type": "has_item", "value": "lantern"}]).conditions)
        cond = rule(conditions=[{"type": "has_item", "target": "hermit", "value": "compass"}]).conditions
        assert rules.check_conditions(cond)
        assert not rules.check_conditions(rule(conditions=[{"type": "has_item", "value": "map"}]).conditions)

    def test_state_equals_and_not_equals(self, engine: GameEngine):
        """Character state is seeded from the world file."""
        rules = engine.rules
        eq = rule(conditions=[{"type": "state_equals", "target": "hermit", "key": "mood", "value": "grumpy"}])
        ne = rule(conditions=[{"type": "state_not_equals", "target": "hermit", "key": "mood", "value": "grumpy"}])
        assert rules.check_conditions(eq.conditions)
        assert not rules.check_conditions(ne.conditions)

    def test_counters(self, engine: GameEngine):
        """Unset counters read as 0."""
        rules = engine.rules
        assert rules.check_conditions(rule(conditions=[{"type": "counter_equals", "key": "c", "value": 0}]).conditions)
        engine.state.set_counter("c", 5)
        assert rules.check_conditions(rule(conditions=[{"type": "counter_greater", "key": "c", "value": 4}]).conditions)
        assert not rules.check_conditions(rule(conditions=[{"type": "counter_less", "key": "c", "value": 5}]).conditions)

    def test_flags_default_false(self, engine: GameEngine):
        """Unset flags read as False."""
        cond = rule(conditions=[{"type": "flag_is", "key": "ghost", "value": False}]).conditions
        assert engine.rules.check_conditions(cond)

    def test_empty_conditions_hold(self, engine: GameEngine):
        """No conditions means the rule may fire."""
        assert engine.rules.check_conditions([])


class TestEffects:
    """Tests for apply_effects."""

    def test_effects_in_order(self, engine: GameEngine):
        """A later effect sees what an earlier one did."""
        effects = rule(
            effects=[
                {"type": "set_counter", "key": "n", "value": 2},
                {"type": "add_counter", "key": "n", "value": 3},
                {"type": "set_flag", "key": "done", "value": True},
                {"type": "set_state", "target": "hermit", "key": "mood", "value": "cheerful"},
            ]
        ).effects
        engine.rules.apply_effects(effects)
        assert engine.state.get_counter("n") == 5
        assert engine.state.get_flag("done")
        assert engine.state.get_entity_state("hermit", "mood") == "cheerful"

    def test_display_text(self, engine: GameEngine, recorder: EventRecorder):
        """display_text becomes a message event."""
        engine.rules.apply_effects(rule(effects=[{"type": "display_text", "content": "Boo."}]).effects)
        assert recorder.messages() == ["Boo."]

    def test_add_to_inventory_takes_out_of_world(self, engine: GameEngine):
        """Granted items leave the world tree."""
        engine.rules.apply_effects(rule(effects=[{"type": "add_to_inventory", "item": "brass_key"}]).effects)
        assert engine.inventory.has_item("player", "brass_key")
        assert engine.world.room_of("brass_key") is None

    def test_remove_from_inventory(self, engine: GameEngine):
        """Removed items simply leave the bag."""
        engine.rules.apply_effects(rule(effects=[{"type": "remove_from_inventory", "item": "lantern"}]).effects)
        assert not engine.inventory.has_item("player", "lantern")

    def test_move_player_shows_location(self, engine: GameEngine, recorder: EventRecorder):
        """Moving the player updates state, placement and the display."""
        engine.rules.apply_effects(rule(effects=[{"type": "move_entity", "destination": "vault"}]).effects)
        assert engine.state.current_location == "vault"
        assert engine.world.room_of("player") == "vault"
        assert recorder.of_type("location_display")[-1].data.id == "vault"

    def test_move_player_unknown_room_ignored(self, engine: GameEngine, recorder: EventRecorder):
        """An unknown destination is a debug event, not a crash."""
        engine.rules.apply_effects(rule(effects=[{"type": "move_entity", "destination": "moon"}]).effects)
        assert engine.state.current_location == "hall"
        assert recorder.of_type("debug_log")

    def test_move_object_out_of_inventory(self, engine: GameEngine):
        """Moving a carried object takes it out of the bag first."""
        effects = rule(effects=[{"type": "move_entity", "target": "lantern", "destination": "garden"}]).effects
        engine.rules.apply_effects(effects)
        assert not engine.inventory.has_item("player", "lantern")
        assert engine.world.room_of("lantern") == "garden"

    def test_move_object_refused_stays_carried(self, any_engine: GameEngine, recorder: EventRecorder):
        """The locked chest refuses the lantern, so the player keeps it."""
        effects = rule(effects=[{"type": "move_entity", "target": "lantern", "destination": "chest"}]).effects
        any_engine.rules.apply_effects(effects)
        assert any_engine.inventory.get_inventory_items("player") == ["lantern"]
        assert any_engine.world.parent_of("lantern") is None
        assert recorder.of_type("debug_log")

    def test_end_game(self, engine: GameEngine, recorder: EventRecorder):
        """end_game sets game over and emits the outcome."""
        effects = rule(effects=[{"type": "end_game", "outcome": "defeat", "message": "Alas"}]).effects
        engine.rules.apply_effects(effects)
        assert engine.state.game_over
        event = recorder.of_type("game_over")[0]
        assert event.data.outcome == "defeat"
        assert event.data.message == "Alas"


class TestMatching:
    """Tests for find_action_rule and execute_action_rule."""

    def test_first_declared_wins(self, engine: GameEngine):
        """Two rules for pull/lever: the first one is used."""
        assert engine.rules.find_action_rule("pull", "lever").id == "pull_lever"

    def test_wildcard_fallback(self, engine: GameEngine):
        """Other targets fall to the wildcard rule."""
        assert engine.rules.find_action_rule("pull", "statue").id == "pull_anything"

    def test_exact_lookup_skips_wildcards(self, engine: GameEngine):
        """exact_target never returns a wildcard rule."""
        assert engine.rules.find_action_rule("pull", "statue", exact_target=True) is None
        assert engine.rules.find_action_rule("pull", "lever", exact_target=True).id == "pull_lever"

    def test_topic_must_match(self, engine: GameEngine):
        """A rule with a topic only matches that topic."""
        assert engine.rules.find_action_rule("ask", "hermit", topic="treasure").id == "ask_treasure"
        assert engine.rules.find_action_rule("ask", "hermit", topic="river") is None

    def test_secondary_target_must_match(self, engine: GameEngine):
        """A secondary target narrows the match."""
        engine.rules.action_rules.insert(0, rule(target="chest", secondary_target="stick"))
        assert engine.rules.find_action_rule("poke", "chest", "stick").id == "r"
        assert engine.rules.find_action_rule("poke", "chest", "finger") is None

    def test_blocked_rule_applies_nothing(self, engine: GameEngine, recorder: EventRecorder):
        """Failed conditions: fail result, no effects at all."""
        take_idol = engine.rules.find_action_rule("take", "golden_idol")
        result = engine.rules.execute_action_rule(take_idol)
        assert not result.success
        assert result.message == RULE_BLOCKED_MESSAGE
        assert not engine.inventory.has_item("player", "golden_idol")
        assert not engine.state.game_over
        assert recorder.events == []

    def test_passing_rule_applies_all(self, engine: GameEngine):
        """Passing conditions: every effect runs."""
        result = engine.rules.execute_action_rule(engine.rules.find_action_rule("pull", "lever"))
        assert result.success
        assert engine.state.get_flag("trap_disarmed")
        assert engine.state.get_counter("pulls") == 1


class TestEventRules:
    """Tests for run_event_rules."""

    def test_every_turn(self, engine: GameEngine):
        """every_turn fires on each call."""
        engine.rules.run_event_rules()
        engine.rules.run_event_rules()
        assert engine.state.get_counter("clock") == 2

    def test_on_enter_only_for_that_room(self, engine: GameEngine):
        """on_enter_location needs the matching arrival."""
        engine.rules.run_event_rules("garden")
        assert not engine.state.get_flag("visited_vault")
        engine.rules.run_event_rules("vault")
        assert engine.state.get_flag("visited_vault")

    def test_timed_event(self, engine: GameEngine, recorder: EventRecorder):
        """timed_event fires on exactly that turn."""
        engine.state.turn_count = 2
        engine.rules.run_event_rules()
        assert "A bell tolls in the distance." not in recorder.messages()
        engine.state.turn_count = 3
        engine.rules.run_event_rules()
        assert recorder.messages().count("A bell tolls in the distance.") == 1

    def test_timed_event_bad_value(self, engine: GameEngine):
        """A non-numeric timed value never fires."""
        engine.rules.event_rules = [
            EventRule.model_validate(
                {
                    "id": "odd",
                    "trigger": {"type": "timed_event", "value": "soon"},
                    "effects": [{"type": "set_flag", "key": "odd", "value": True}],
                }
            )
        ]
        engine.rules.run_event_rules()
        assert not engine.state.get_flag("odd")

    def test_stops_after_game_over(self, engine: GameEngine):
        """Nothing fires once the game has ended."""
        engine.state.set_game_over(True)
        engine.rules.run_event_rules()
        assert engine.state.get_counter("clock") == 0

    def test_conditions_gate_event_rules(self, engine: GameEngine):
        """Event rule conditions are checked like action rules."""
        engine.rules.event_rules = [
            EventRule.model_validate(
                {
                    "id": "gated",
                    "trigger": {"type": "every_turn"},
                    "conditions": [{"type": "flag_is", "key": "open_sesame", "value": True}],
                    "effects": [{"type": "add_counter", "key": "gated", "value": 1}],
                }
            )
        ]
        engine.rules.run_event_rules()
        assert engine.state.get_counter("gated") == 0
        engine.state.set_flag("open_sesame", True)
        engine.rules.run_event_rules()
        assert engine.state.get_counter("gated") == 1
