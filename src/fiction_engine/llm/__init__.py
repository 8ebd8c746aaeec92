"""Language-model transport for the AI collaborators (Anthropic by default)."""

from fiction_engine.llm.anthropic import TOOL_NAME, AnthropicClient, create_anthropic_client
from fiction_engine.llm.client import LLMClient, LLMMessage, LLMRequest, LLMResponse

__all__ = [
    "TOOL_NAME",
    "AnthropicClient",
    "LLMClient",
    "LLMMessage",
    "LLMRequest",
    "LLMResponse",
    "create_anthropic_client",
]
