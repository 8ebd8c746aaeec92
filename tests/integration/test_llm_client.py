"""
TEST DOC: LLM Client

WHAT: Tests for the Anthropic client behind the AI collaborators
WHY: Ensure LLM integration works correctly with mocked responses
HOW: Use respx to mock HTTP calls to Anthropic API

CASES:
- Basic completion
- System prompt and temperature reach the request
- JSON structured output via a forced tool call
- Error handling

EDGE CASES:
- Text JSON instead of a tool call
- Invalid JSON response
- HTTP error status
"""

import json

import anthropic
import pytest
import respx
from httpx import Response

from fiction_engine.config import LLMSettings
from fiction_engine.llm.anthropic import TOOL_NAME, AnthropicClient, create_anthropic_client
from fiction_engine.llm.client import LLMRequest

MODEL = "claude-sonnet-4-20250514"


def message(content: list[dict], stop_reason: str = "end_turn") -> dict:
    return {
        "id": "msg_123",
        "type": "message",
        "role": "assistant",
        "model": MODEL,
        "content": content,
        "stop_reason": stop_reason,
        "usage": {"input_tokens": 10, "output_tokens": 5},
    }


@pytest.fixture
def mock_anthropic():
    """Set up respx mock for Anthropic API."""
    with respx.mock(base_url="https://api.anthropic.com") as respx_mock:
        yield respx_mock


@pytest.fixture
def client():
    """Create a test client with a dummy API key."""
    return AnthropicClient(api_key="test-api-key", model=MODEL, temperature=0.7)


class TestAnthropicClient:
    """Tests for the Anthropic client."""

    @pytest.mark.asyncio
    async def test_complete_basic(self, mock_anthropic, client):
        """Basic completion returns response."""
        mock_anthropic.post("/v1/messages").mock(
            return_value=Response(200, json=message([{"type": "text", "text": "A cold wind blows."}]))
        )

        response = await client.complete(LLMRequest.user("Describe the hall"))

        assert response.content == "A cold wind blows."
        assert response.model == MODEL
        assert response.input_tokens == 10
        assert response.output_tokens == 5
        assert response.stop_reason == "end_turn"

    @pytest.mark.asyncio
    async def test_request_shape(self, mock_anthropic, client):
        """System prompt, temperature and messages are sent."""
        route = mock_anthropic.post("/v1/messages").mock(
            return_value=Response(200, json=message([{"type": "text", "text": "Arr."}]))
        )

        await client.complete(LLMRequest.user("Who are you?", system="You are a pirate.", max_tokens=50))

        body = json.loads(route.calls.last.request.content)
        assert body["system"] == "You are a pirate."
        assert body["temperature"] == 0.7
        assert body["max_tokens"] == 50
        assert body["messages"] == [{"role": "user", "content": "Who are you?"}]

    @pytest.mark.asyncio
    async def test_complete_json(self, mock_anthropic, client):
        """JSON completion with a forced tool call works."""
        route = mock_anthropic.post("/v1/messages").mock(
            return_value=Response(
                200,
                json=message(
                    [
                        {
                            "type": "tool_use",
                            "id": "tool_123",
                            "name": TOOL_NAME,
                            "input": {"action": "take", "target": "brass_key", "confidence": 0.9},
                        }
                    ],
                    stop_reason="tool_use",
                ),
            )
        )

        schema = {
            "type": "object",
            "properties": {"action": {"type": "string"}, "target": {"type": "string"}},
            "required": ["action"],
        }
        result = await client.complete_json(LLMRequest.user("take the key"), schema)

        assert result == {"action": "take", "target": "brass_key", "confidence": 0.9}
        body = json.loads(route.calls.last.request.content)
        assert body["tool_choice"] == {"type": "tool", "name": TOOL_NAME}
        assert body["tools"][0]["input_schema"] == schema

    @pytest.mark.asyncio
    async def test_model_name(self, client):
        """Model name property returns correct value."""
        assert client.model_name == MODEL

    @pytest.mark.asyncio
    async def test_complete_json_fallback_text(self, mock_anthropic, client):
        """JSON completion falls back to text parsing."""
        mock_anthropic.post("/v1/messages").mock(
            return_value=Response(
                200, json=message([{"type": "text", "text": '{"action": "look"}'}])
            )
        )

        result = await client.complete_json(LLMRequest.user("look"), {"type": "object"})

        assert result == {"action": "look"}

    @pytest.mark.asyncio
    async def test_complete_json_invalid_response(self, mock_anthropic, client):
        """Invalid JSON response raises error."""
        mock_anthropic.post("/v1/messages").mock(
            return_value=Response(200, json=message([{"type": "text", "text": "Not valid JSON"}]))
        )

        with pytest.raises(ValueError, match="Failed to get structured JSON"):
            await client.complete_json(LLMRequest.user("look"), {"type": "object"})

    @pytest.mark.asyncio
    async def test_api_error_propagates(self, mock_anthropic):
        """HTTP errors surface as anthropic.APIError."""
        mock_anthropic.post("/v1/messages").mock(
            return_value=Response(
                400,
                json={"type": "error", "error": {"type": "invalid_request_error", "message": "bad"}},
            )
        )
        client = AnthropicClient(api_key="test-api-key", model=MODEL)

        with pytest.raises(anthropic.APIError):
            await client.complete(LLMRequest.user("hello"))


class TestClientFactory:
    """Tests for building a client from settings."""

    def test_from_settings(self):
        """Model and key come from LLMSettings."""
        client = create_anthropic_client(
            LLMSettings(anthropic_api_key="test-api-key", model="claude-haiku-test")
        )
        assert client.model_name == "claude-haiku-test"
