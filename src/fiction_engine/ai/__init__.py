"""
ai/__init__.py

PURPOSE: AI collaborators (intent parsing, narration, character dialogue).
DEPENDENCIES: llm (for the Claude-backed implementations)

ARCHITECTURE NOTES:
The engine depends only on the Protocols in types.py. build_collaborators()
picks the LLM-backed trio when an API key is configured and the offline
keyword parser (with no narrator or responder) otherwise.
"""

from fiction_engine.ai.factory import Collaborators, build_collaborators
from fiction_engine.ai.keyword_parser import KeywordIntentParser
from fiction_engine.ai.llm import LLMConversationResponder, LLMIntentParser, LLMNarrator
from fiction_engine.ai.types import (
    CollaboratorError,
    ConversationContext,
    ConversationResponder,
    ConversationResponse,
    GameContext,
    GeneratedDescription,
    IntentParser,
    Narrator,
    ParsedIntent,
    SceneEntity,
    detect_mood,
    guarded,
)

__all__ = [
    "CollaboratorError",
    "Collaborators",
    "ConversationContext",
    "ConversationResponder",
    "ConversationResponse",
    "GameContext",
    "GeneratedDescription",
    "IntentParser",
    "KeywordIntentParser",
    "LLMConversationResponder",
    "LLMIntentParser",
    "LLMNarrator",
    "Narrator",
    "ParsedIntent",
    "SceneEntity",
    "build_collaborators",
    "detect_mood",
    "guarded",
]
