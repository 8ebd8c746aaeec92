"""
prompts.py

PURPOSE: Prompt templates and JSON schemas for the AI collaborators.
DEPENDENCIES: None (pure Python)

ARCHITECTURE NOTES:
Prompts are built from a GameContext snapshot. Entity ids are always shown
next to names so the parser can answer with ids the engine understands.
INTENT_SCHEMA is used with Claude's tool use to force a structured reply.
"""

from fiction_engine.ai.types import ConversationContext, GameContext, SceneEntity

INTENT_SYSTEM_PROMPT = """You are the command parser for a text adventure game. You turn what the player typed into a single game action.

Rules:
- Use entity IDs (shown in parentheses) for target, character_target, player_item and target_item, never display names
- Directions for "move" are: north, south, east, west, up, down, in, out
- A greeting or question addressed to a character is "talk" with character_target set; put the subject in topic
- "give X to Y" is action "give", target X, character_target Y
- "trade X for Y with Z" is action "trade", character_target Z, player_item X, target_item Y
- "unlock X with K" is action "unlock", target X, player_item K
- "put X in/on Y" is action "put", target X, player_item Y, topic "in" or "on"
- Asking to see your own belongings is "check_my_inventory"; asking a character what they carry is "check_your_inventory"
- If you are unsure, use a low confidence rather than guessing wildly"""

INTENT_PROMPT_TEMPLATE = """Player input: "{text}"

Location: {location}
Exits:
{exits}

Objects here:
{objects}

Characters here:
{characters}

Carrying:
{inventory}

{commands}"""

NARRATOR_SYSTEM_PROMPT = """You are a skilled narrator for an immersive text adventure game. Your role is to enhance and expand descriptions to create atmosphere and engagement.

Guidelines:
- Keep descriptions concise but vivid (1-3 sentences)
- Focus on sensory details
- Mention every object and character listed in the prompt, and no others
- Use present tense, second person ("you see...")

Respond with only the description, no additional commentary."""

LOCATION_PROMPT_TEMPLATE = """Describe this place for the player.

Location: {name}
Author's description: {description}
Objects: {objects}
Characters: {characters}
Exits: {exits}"""

ACTION_PROMPT_TEMPLATE = """The player just performed "{action}"{target_clause} in {location}.

Recent actions: {recent}

Narrate the result in one or two sentences."""

ENHANCE_PROMPT_TEMPLATE = """Enhance this description with atmospheric detail while keeping its meaning:

"{text}"

Turn: {turn}
Recent actions: {recent}"""

CONVERSATION_SYSTEM_PROMPT = """You are playing a character in a text adventure game. Stay in character at all times.

- Answer in the character's own voice, one to three sentences
- If the conversation history shows you have already greeted the player, don't greet again
- If asked about something the character doesn't know, say so in character
- Reply with the character's words only, no narration or commentary"""

CONVERSATION_PROMPT_TEMPLATE = """Character: {name}
Description: {description}
Personality: {personality}
Greeting: {greeting}
Farewell: {farewell}

Knows about:
{knowledge}

Must not:
{constraints}

Topics with set answers:
{topics}

Location: {location} (turn {turn})

Recent conversation:
{history}

The player says: "{message}"
"""

INTENT_SCHEMA = {
    "title": "parsed_intent",
    "type": "object",
    "properties": {
        "action": {
            "type": "string",
            "description": "Game action, e.g. move, look, take, talk, trade, or a world-specific verb",
        },
        "target": {"type": "string", "description": "Entity ID or direction the action applies to"},
        "topic": {"type": "string", "description": "Conversation subject, or 'in'/'on' for put"},
        "character_target": {"type": "string", "description": "Character ID being addressed"},
        "player_item": {"type": "string", "description": "Item ID the player offers or uses"},
        "target_item": {"type": "string", "description": "Item ID the player wants in return"},
        "is_conversation": {"type": "boolean"},
        "confidence": {"type": "number", "minimum": 0, "maximum": 1},
    },
    "required": ["action", "confidence"],
}


def _entity_lines(entities: list[SceneEntity]) -> str:
    return "\n".join(f"- {e.name} ({e.id})" for e in entities) or "- none"


def _names(entities: list[SceneEntity]) -> str:
    return ", ".join(e.name for e in entities) or "none"


def build_intent_prompt(text: str, context: GameContext) -> str:
    exits = "\n".join(f"- {d}: {dest}" for d, dest in context.exits.items()) or "- none"
    return INTENT_PROMPT_TEMPLATE.format(
        text=text,
        location=context.location.name,
        exits=exits,
        objects=_entity_lines(context.objects),
        characters=_entity_lines(context.characters),
        inventory=_entity_lines(context.inventory),
        commands=context.available_commands,
    )


def build_location_prompt(context: GameContext) -> str:
    return LOCATION_PROMPT_TEMPLATE.format(
        name=context.location.name,
        description=context.location.description,
        objects=_names(context.objects),
        characters=_names(context.characters),
        exits=", ".join(context.exits) or "none",
    )


def build_action_prompt(action: str, target: str | None, context: GameContext) -> str:
    return ACTION_PROMPT_TEMPLATE.format(
        action=action,
        target_clause=f" on {target}" if target else "",
        location=context.location.name,
        recent=", ".join(context.recent_actions[-3:]) or "none",
    )


def build_enhance_prompt(text: str, context: GameContext) -> str:
    return ENHANCE_PROMPT_TEMPLATE.format(
        text=text,
        turn=context.turn_count,
        recent=", ".join(context.recent_actions[-3:]) or "none",
    )


def build_conversation_prompt(message: str, context: ConversationContext) -> str:
    profile = context.profile
    history = "\n".join(
        f"{'Player' if entry.speaker == 'player' else context.character.name}: {entry.message}"
        for entry in context.history[-5:]
    )
    topics = ""
    knowledge = ""
    constraints = ""
    if profile:
        topics = "\n".join(f"- {topic}: {answer}" for topic, answer in profile.topics.items())
        knowledge = "\n".join(f"- {k}" for k in profile.knowledge)
        constraints = "\n".join(f"- {c}" for c in profile.constraints)

    return CONVERSATION_PROMPT_TEMPLATE.format(
        name=context.character.name,
        description=context.character.description,
        personality=(profile.personality if profile else None) or "unremarkable",
        greeting=(profile.greeting if profile else None) or "none",
        farewell=(profile.farewell if profile else None) or "none",
        knowledge=knowledge or "- nothing in particular",
        constraints=constraints or "- none",
        topics=topics or "- none",
        location=context.game.location.name,
        turn=context.game.turn_count,
        history=history or "none",
        message=message,
    )
