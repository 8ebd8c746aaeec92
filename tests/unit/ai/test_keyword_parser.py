"""
TEST DOC: Keyword Intent Parser

WHAT: Tests for the offline text -> ParsedIntent parser
WHY: It is the default parser and the fallback when the LLM parser fails
HOW: Parse phrases against a hand-built GameContext

CASES:
- Directions and aliases
- Verb aliases and two-word verbs
- Prepositional forms: put, unlock-with, give, trade
- Conversation forms: talk to, ask about
- Noun resolution by id, name, unique word and declared synonym

EDGE CASES:
- Empty input
- Unknown verbs keep a low confidence
- Ambiguous nouns stay unresolved
"""

import pytest

from fiction_engine.ai.keyword_parser import KeywordIntentParser
from fiction_engine.ai.types import GameContext, SceneEntity
from fiction_engine.models.world import ParserHints


@pytest.fixture
def context() -> GameContext:
    return GameContext(
        location=SceneEntity(id="hall", name="Hall"),
        exits={"north": "library"},
        objects=[
            SceneEntity(id="brass_key", name="brass key"),
            SceneEntity(id="iron_key", name="iron key"),
            SceneEntity(id="chest", name="chest"),
            SceneEntity(id="table", name="long table"),
        ],
        characters=[SceneEntity(id="hermit", name="Hermit")],
        inventory=[SceneEntity(id="lantern", name="lantern")],
    )


@pytest.fixture
def parser() -> KeywordIntentParser:
    hints = ParserHints.model_validate(
        {
            "synonyms": {
                "verbs": [{"primary": "pull", "aliases": ["yank"]}],
                "nouns": [{"primary": "golden_idol", "aliases": ["statuette"]}],
            }
        }
    )
    return KeywordIntentParser(hints)


class TestMovement:
    """Tests for direction parsing."""

    @pytest.mark.parametrize("text", ["north", "n", "go north", "walk n", "North."])
    def test_north(self, parser: KeywordIntentParser, context: GameContext, text: str):
        """All the ways of saying north."""
        intent = parser.parse(text, context)
        assert intent.action == "move"
        assert intent.target == "north"

    def test_go_without_direction(self, parser: KeywordIntentParser, context: GameContext):
        """'go' alone is a move with no target."""
        intent = parser.parse("go", context)
        assert intent.action == "move"
        assert intent.target is None


class TestVerbs:
    """Tests for verb-object commands."""

    def test_take_by_name(self, parser: KeywordIntentParser, context: GameContext):
        """Articles drop out and the name resolves to an id."""
        intent = parser.parse("take the brass key", context)
        assert (intent.action, intent.target) == ("take", "brass_key")

    def test_pick_up(self, parser: KeywordIntentParser, context: GameContext):
        """'pick up' is take."""
        assert parser.parse("pick up lantern", context).action == "take"

    def test_look_at(self, parser: KeywordIntentParser, context: GameContext):
        """'look at X' is look with target X."""
        intent = parser.parse("look at chest", context)
        assert (intent.action, intent.target) == ("look", "chest")

    def test_aliases(self, parser: KeywordIntentParser, context: GameContext):
        """Single-letter and word aliases."""
        assert parser.parse("i", context).action == "inventory"
        assert parser.parse("x chest", context).action == "look"
        assert parser.parse("get in chest", context).action == "enter"
        assert parser.parse("get out", context).action == "exit"

    def test_unique_word_resolves(self, parser: KeywordIntentParser, context: GameContext):
        """'table' resolves to the long table by id."""
        assert parser.parse("climb table", context).target == "table"

    def test_ambiguous_word_unresolved(self, parser: KeywordIntentParser, context: GameContext):
        """Two keys in sight: 'key' stays as typed."""
        assert parser.parse("take key", context).target == "key"

    def test_declared_synonyms(self, parser: KeywordIntentParser, context: GameContext):
        """World-declared verb and noun synonyms apply."""
        intent = parser.parse("yank statuette", context)
        assert (intent.action, intent.target) == ("pull", "golden_idol")

    def test_unknown_verb_low_confidence(self, parser: KeywordIntentParser, context: GameContext):
        """World verbs pass through with lower confidence."""
        intent = parser.parse("dance", context)
        assert intent.action == "dance"
        assert 0.3 <= intent.confidence < 0.85

    def test_empty(self, parser: KeywordIntentParser, context: GameContext):
        """Nothing to parse."""
        intent = parser.parse("  the ", context)
        assert intent.action == "unknown"
        assert intent.confidence == 0.0


class TestPrepositions:
    """Tests for multi-object forms."""

    def test_put_on(self, parser: KeywordIntentParser, context: GameContext):
        """put X on Y."""
        intent = parser.parse("put lantern on table", context)
        assert intent.action == "put"
        assert (intent.target, intent.player_item, intent.topic) == ("lantern", "table", "on")

    def test_put_into(self, parser: KeywordIntentParser, context: GameContext):
        """'into' is IN."""
        assert parser.parse("put lantern into chest", context).topic == "in"

    def test_unlock_with(self, parser: KeywordIntentParser, context: GameContext):
        """unlock X with Y names the key."""
        intent = parser.parse("unlock chest with brass key", context)
        assert (intent.action, intent.target, intent.player_item) == ("unlock", "chest", "brass_key")

    def test_give(self, parser: KeywordIntentParser, context: GameContext):
        """give X to Y."""
        intent = parser.parse("give lantern to hermit", context)
        assert (intent.target, intent.character_target) == ("lantern", "hermit")

    def test_trade(self, parser: KeywordIntentParser, context: GameContext):
        """trade X for Y with Z."""
        intent = parser.parse("trade lantern for map with hermit", context)
        assert intent.action == "trade"
        assert (intent.player_item, intent.target_item, intent.character_target) == (
            "lantern",
            "map",
            "hermit",
        )

    def test_check_bag(self, parser: KeywordIntentParser, context: GameContext):
        """Own bag and someone else's."""
        assert parser.parse("check inventory", context).action == "check_my_inventory"
        intent = parser.parse("check hermit's bag", context)
        assert (intent.action, intent.character_target) == ("check_your_inventory", "hermit")


class TestConversation:
    """Tests for talk and ask."""

    def test_talk_to(self, parser: KeywordIntentParser, context: GameContext):
        """talk to X is a conversation intent."""
        intent = parser.parse("talk to hermit", context)
        assert intent.action == "talk"
        assert intent.character_target == "hermit"
        assert intent.topic is None
        assert intent.is_conversation

    def test_talk_about(self, parser: KeywordIntentParser, context: GameContext):
        """talk to X about T carries the topic."""
        assert parser.parse("talk to hermit about the river", context).topic == "river"

    def test_ask_about(self, parser: KeywordIntentParser, context: GameContext):
        """ask X about T."""
        intent = parser.parse("ask Hermit about treasure", context)
        assert (intent.action, intent.character_target, intent.topic) == ("ask", "hermit", "treasure")

    @pytest.mark.asyncio
    async def test_async_entry_point(self, parser: KeywordIntentParser, context: GameContext):
        """parse_input is the awaitable IntentParser face."""
        intent = await parser.parse_input("north", context)
        assert intent.target == "north"
