"""
factory.py

PURPOSE: Pick the collaborator set for a session from settings.
DEPENDENCIES: config.py, llm, keyword_parser.py, llm.py (ai)
"""

import logging
from dataclasses import dataclass

from fiction_engine.ai.keyword_parser import KeywordIntentParser
from fiction_engine.ai.llm import LLMConversationResponder, LLMIntentParser, LLMNarrator
from fiction_engine.ai.types import ConversationResponder, IntentParser, Narrator
from fiction_engine.config import LLMSettings
from fiction_engine.llm.anthropic import create_anthropic_client
from fiction_engine.models.world import ParserHints

logger = logging.getLogger(__name__)


@dataclass
class Collaborators:
    intent_parser: IntentParser
    narrator: Narrator | None = None
    conversation: ConversationResponder | None = None


def build_collaborators(
    settings: LLMSettings,
    hints: ParserHints | None = None,
    offline: bool = False,
) -> Collaborators:
    """
    Claude-backed collaborators when an API key is available, otherwise the
    keyword parser alone (no narration, canned dialogue only).
    """
    if offline or not settings.anthropic_api_key:
        logger.info("Using offline keyword parser")
        return Collaborators(intent_parser=KeywordIntentParser(hints))

    client = create_anthropic_client(settings)
    logger.info(f"Using {client.model_name} for parsing, narration and dialogue")
    return Collaborators(
        intent_parser=LLMIntentParser(client),
        narrator=LLMNarrator(client, max_tokens=min(settings.max_tokens, 300)),
        conversation=LLMConversationResponder(client, max_tokens=min(settings.max_tokens, 300)),
    )
