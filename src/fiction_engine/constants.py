"""
constants.py

PURPOSE: Engine-wide constants (log caps, aliases, fallback lines).
DEPENDENCIES: None

ARCHITECTURE NOTES:
Caps are fixed rather than configurable: the recent-actions log and each
character's conversation history trim oldest-first once they overflow.
"""

# The id the engine uses for the player's inventory and Thing
PLAYER_ID = "player"

# Legacy world files place items in a character's bag with this suffix
BAG_SUFFIX = "_bag"

# Object location meaning "not in the world yet"
NOWHERE = "nowhere"

MAX_RECENT_ACTIONS = 10
MAX_CONVERSATION_HISTORY = 20

# Intents below this confidence are treated as not understood
COMMAND_CONFIDENCE_THRESHOLD = 0.3

DEFAULT_COLLABORATOR_TIMEOUT = 30.0

DIRECTION_ALIASES: dict[str, str] = {
    "n": "north",
    "s": "south",
    "e": "east",
    "w": "west",
    "u": "up",
    "d": "down",
}

OPPOSITE_DIRECTIONS: dict[str, str] = {
    "north": "south",
    "south": "north",
    "east": "west",
    "west": "east",
    "up": "down",
    "down": "up",
    "in": "out",
    "out": "in",
}

ACTION_ALIASES: dict[str, str] = {
    "l": "look",
    "i": "inventory",
    "get": "take",
    "pick": "take",
    "grab": "take",
    "go": "move",
    "walk": "move",
    "x": "look",
    "examine": "look",
    "speak": "talk",
    "board": "enter",
    "leave": "exit",
    "shut": "close",
}

EXIT_COMMANDS = ("quit", "q")
HELP_COMMANDS = ("help", "?")

NOT_UNDERSTOOD_MESSAGE = "I don't understand that."
RULE_BLOCKED_MESSAGE = "You can't do that right now."
