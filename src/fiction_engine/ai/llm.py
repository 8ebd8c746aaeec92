"""
llm.py

PURPOSE: LLM-backed intent parser, narrator and conversation responder.
DEPENDENCIES: llm/client.py, prompts.py, types.py

ARCHITECTURE NOTES:
Each collaborator wraps an LLMClient (Anthropic in production, a scripted
fake in tests). They do NOT catch transport errors: the engine calls them
through ai.types.guarded(), which applies the timeout and converts
failures into CollaboratorError in one place.

The intent parser post-processes the reply: names are mapped back to ids
and a bare "talk" is pointed at the first character present.
"""

import logging

from fiction_engine.ai.prompts import (
    CONVERSATION_SYSTEM_PROMPT,
    INTENT_SCHEMA,
    INTENT_SYSTEM_PROMPT,
    NARRATOR_SYSTEM_PROMPT,
    build_action_prompt,
    build_conversation_prompt,
    build_enhance_prompt,
    build_intent_prompt,
    build_location_prompt,
)
from fiction_engine.ai.types import (
    ConversationContext,
    ConversationResponse,
    GameContext,
    GeneratedDescription,
    ParsedIntent,
    detect_mood,
)
from fiction_engine.llm.client import LLMClient, LLMRequest

logger = logging.getLogger(__name__)


class LLMIntentParser:
    """Free text -> ParsedIntent via a structured (tool-use) completion."""

    def __init__(self, client: LLMClient, max_tokens: int = 512):
        self._client = client
        self._max_tokens = max_tokens

    async def parse_input(self, text: str, context: GameContext) -> ParsedIntent:
        request = LLMRequest.user(
            build_intent_prompt(text, context),
            system=INTENT_SYSTEM_PROMPT,
            temperature=0.0,
            max_tokens=self._max_tokens,
        )
        data = await self._client.complete_json(request, INTENT_SCHEMA)
        logger.debug(f"Intent for {text!r}: {data}")

        intent = ParsedIntent.model_validate(data)
        intent.target = context.resolve(intent.target)
        intent.character_target = context.resolve(intent.character_target)
        intent.player_item = context.resolve(intent.player_item)
        intent.target_item = context.resolve(intent.target_item)

        if intent.action == "talk" and not intent.character_target and context.characters:
            intent.character_target = context.characters[0].id
        return intent


class LLMNarrator:
    """Atmospheric descriptions; mood is inferred from the wording."""

    def __init__(self, client: LLMClient, max_tokens: int = 300):
        self._client = client
        self._max_tokens = max_tokens

    async def _narrate(self, prompt: str) -> GeneratedDescription:
        response = await self._client.complete(
            LLMRequest.user(prompt, system=NARRATOR_SYSTEM_PROMPT, max_tokens=self._max_tokens)
        )
        text = response.content.strip()
        if not text:
            raise ValueError("Narrator returned an empty description")
        return GeneratedDescription(text=text, mood=detect_mood(text), confidence=0.8)

    async def describe_location(self, context: GameContext) -> GeneratedDescription:
        return await self._narrate(build_location_prompt(context))

    async def describe_action(
        self, action: str, target: str | None, context: GameContext
    ) -> GeneratedDescription:
        return await self._narrate(build_action_prompt(action, target, context))

    async def enhance_description(self, text: str, context: GameContext) -> GeneratedDescription:
        return await self._narrate(build_enhance_prompt(text, context))


class LLMConversationResponder:
    """In-character replies built from the profile and recent history."""

    def __init__(self, client: LLMClient, max_tokens: int = 300):
        self._client = client
        self._max_tokens = max_tokens

    async def generate_character_response(
        self, message: str, context: ConversationContext
    ) -> ConversationResponse:
        response = await self._client.complete(
            LLMRequest.user(
                build_conversation_prompt(message, context),
                system=CONVERSATION_SYSTEM_PROMPT,
                max_tokens=self._max_tokens,
            )
        )
        text = response.content.strip().strip('"')
        if not text:
            raise ValueError(f"{context.character.name} produced an empty reply")
        return ConversationResponse(text=text, confidence=0.8)
