"""
keyword_parser.py

PURPOSE: Offline intent parser for plain English commands.
DEPENDENCIES: types.py, models/world.py

ARCHITECTURE NOTES:
Used when no API key is configured, and by tests. It understands the
classic "verb [object] [preposition object]" shape plus a few
conversation forms:

    north / n / go north          -> move north
    take the brass key            -> take brass_key
    put coin in chest             -> put coin (secondary: chest, topic: in)
    unlock chest with brass key   -> unlock chest (player_item: brass_key)
    talk to hermit about river    -> talk hermit (topic: river)
    ask hermit about river        -> ask hermit (topic: river)
    give coin to hermit           -> give coin (character_target: hermit)
    trade coin for map with hermit -> trade hermit (coin -> map)

Anything else becomes "<first word> <rest>" at lower confidence, so
world-defined verbs ("pull lever") still reach the action rules.
"""

import re

from fiction_engine.ai.types import GameContext, ParsedIntent
from fiction_engine.constants import ACTION_ALIASES, DIRECTION_ALIASES, OPPOSITE_DIRECTIONS
from fiction_engine.models.world import ParserHints

ARTICLES = {"the", "a", "an", "some", "my"}
DIRECTIONS = set(OPPOSITE_DIRECTIONS)

BUILTIN_VERBS = {
    "move",
    "look",
    "take",
    "drop",
    "put",
    "climb",
    "inventory",
    "check_my_inventory",
    "check_your_inventory",
    "talk",
    "ask",
    "give",
    "trade",
    "open",
    "close",
    "lock",
    "unlock",
    "read",
    "enter",
    "exit",
}

TRADE_PATTERN = re.compile(r"^trade (?P<give>.+?) for (?P<get>.+?) with (?P<who>.+)$")
ASK_PATTERN = re.compile(r"^ask (?P<who>.+?) about (?P<topic>.+)$")
TALK_PATTERN = re.compile(r"^(?:talk|speak|chat)(?: to| with)? (?P<who>.+?)(?: about (?P<topic>.+))?$")
GIVE_PATTERN = re.compile(r"^(?:give|hand|offer) (?P<item>.+?) to (?P<who>.+)$")
PUT_PATTERN = re.compile(r"^(?:put|place|set) (?P<item>.+?) (?P<prep>in|into|inside|on|onto) (?P<dest>.+)$")
KEY_PATTERN = re.compile(r"^(?P<verb>unlock|lock) (?P<target>.+?) with (?P<key>.+)$")
CHECK_BAG_PATTERN = re.compile(r"^check (?P<who>.+?)(?:'s)? (?:bag|inventory|items)$")


class KeywordIntentParser:
    """Rule-of-thumb parser; no network, deterministic."""

    def __init__(self, hints: ParserHints | None = None):
        self._verb_synonyms: dict[str, str] = dict(ACTION_ALIASES)
        self._noun_synonyms: dict[str, str] = {}
        if hints:
            for synonym in hints.synonyms.verbs:
                for alias in synonym.aliases:
                    self._verb_synonyms[alias.lower()] = synonym.primary
            for synonym in hints.synonyms.nouns:
                for alias in synonym.aliases:
                    self._noun_synonyms[alias.lower()] = synonym.primary

    async def parse_input(self, text: str, context: GameContext) -> ParsedIntent:
        return self.parse(text, context)

    def parse(self, text: str, context: GameContext) -> ParsedIntent:
        words = [w for w in text.lower().strip().rstrip(".!?").split() if w not in ARTICLES]
        if not words:
            return ParsedIntent(action="unknown", confidence=0.0)
        phrase = " ".join(words)

        direction = DIRECTION_ALIASES.get(phrase, phrase)
        if direction in DIRECTIONS:
            return ParsedIntent(action="move", target=direction, confidence=0.95)

        if match := TRADE_PATTERN.match(phrase):
            return ParsedIntent(
                action="trade",
                character_target=self._noun(match["who"], context),
                player_item=self._noun(match["give"], context),
                target_item=self._noun(match["get"], context),
                confidence=0.9,
            )
        if match := ASK_PATTERN.match(phrase):
            return ParsedIntent(
                action="ask",
                character_target=self._noun(match["who"], context),
                topic=match["topic"],
                is_conversation=True,
                confidence=0.9,
            )
        if match := TALK_PATTERN.match(phrase):
            return ParsedIntent(
                action="talk",
                character_target=self._noun(match["who"], context),
                topic=match["topic"],
                is_conversation=True,
                confidence=0.9,
            )
        if match := GIVE_PATTERN.match(phrase):
            return ParsedIntent(
                action="give",
                target=self._noun(match["item"], context),
                character_target=self._noun(match["who"], context),
                confidence=0.9,
            )
        if match := PUT_PATTERN.match(phrase):
            relation = "on" if match["prep"] in ("on", "onto") else "in"
            return ParsedIntent(
                action="put",
                target=self._noun(match["item"], context),
                player_item=self._noun(match["dest"], context),
                topic=relation,
                confidence=0.9,
            )
        if match := KEY_PATTERN.match(phrase):
            return ParsedIntent(
                action=match["verb"],
                target=self._noun(match["target"], context),
                player_item=self._noun(match["key"], context),
                confidence=0.9,
            )
        if phrase in ("check bag", "check inventory", "what do i have"):
            return ParsedIntent(action="check_my_inventory", confidence=0.9)
        if match := CHECK_BAG_PATTERN.match(phrase):
            return ParsedIntent(
                action="check_your_inventory",
                character_target=self._noun(match["who"], context),
                confidence=0.85,
            )

        return self._verb_object(words, context)

    def _verb_object(self, words: list[str], context: GameContext) -> ParsedIntent:
        verb, rest = words[0], words[1:]

        # Two-word verbs
        if verb in ("pick", "get") and rest[:1] == ["up"]:
            verb, rest = "take", rest[1:]
        elif verb == "get" and rest[:1] in (["in"], ["into"], ["on"]):
            verb, rest = "enter", rest[1:]
        elif verb in ("get", "climb") and rest[:1] == ["out"]:
            verb, rest = "exit", rest[1:]
        elif verb == "look" and rest[:1] in (["at"], ["in"], ["inside"]):
            rest = rest[1:]

        action = self._verb_synonyms.get(verb, verb)
        target_phrase = " ".join(rest)

        if action == "move":
            target = DIRECTION_ALIASES.get(target_phrase, target_phrase) or None
            return ParsedIntent(action="move", target=target, confidence=0.9)

        target = self._noun(target_phrase, context) if target_phrase else None
        confidence = 0.85 if action in BUILTIN_VERBS else 0.6
        return ParsedIntent(action=action, target=target, confidence=confidence)

    def _noun(self, phrase: str, context: GameContext) -> str:
        """Best entity id for a noun phrase; the phrase itself if nothing fits."""
        phrase = phrase.strip()
        phrase = self._noun_synonyms.get(phrase, phrase)

        resolved = context.resolve(phrase)
        if resolved != phrase:
            return resolved  # type: ignore[return-value]

        underscored = phrase.replace(" ", "_")
        for entity in context.known_entities():
            if entity.id == underscored:
                return entity.id

        # "key" -> "brass key" when it's the only match
        candidates = [
            entity.id
            for entity in context.known_entities()
            if phrase in entity.name.lower().split() or entity.name.lower().endswith(phrase)
        ]
        if len(candidates) == 1:
            return candidates[0]
        return underscored
