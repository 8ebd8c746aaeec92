"""
client.py

PURPOSE: Provider-neutral LLM client interface used by the AI collaborators.
DEPENDENCIES: None (pure Python + typing)

ARCHITECTURE NOTES:
The intent parser, narrator and conversation responder only ever see an
LLMClient. Tests substitute a scripted client; production wires up the
Anthropic one. Collaborators make short, single-turn requests, so
LLMRequest.user() covers nearly every call site.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass
class LLMResponse:
    """Response from an LLM call."""

    content: str
    model: str
    input_tokens: int = 0
    output_tokens: int = 0
    stop_reason: str | None = None
    raw_response: Any = None


@dataclass
class LLMMessage:
    """A message in a conversation."""

    role: str  # "user" or "assistant"
    content: str


@dataclass
class LLMRequest:
    """Request to an LLM."""

    messages: list[LLMMessage] = field(default_factory=list)
    system: str | None = None
    temperature: float | None = None
    max_tokens: int = 1024

    @classmethod
    def user(
        cls,
        prompt: str,
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int = 1024,
    ) -> "LLMRequest":
        """A single user turn."""
        return cls(
            messages=[LLMMessage(role="user", content=prompt)],
            system=system,
            temperature=temperature,
            max_tokens=max_tokens,
        )


class LLMClient(ABC):
    """Abstract base class for LLM clients."""

    @abstractmethod
    async def complete(self, request: LLMRequest) -> LLMResponse:
        """Send a completion request and return the generated text."""
        ...

    @abstractmethod
    async def complete_json(
        self,
        request: LLMRequest,
        schema: dict[str, Any],
    ) -> dict[str, Any]:
        """
        Request a JSON-structured response.

        Raises:
            ValueError: If no structured response could be extracted
        """
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        ...
