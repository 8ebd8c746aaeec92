"""
anthropic.py

PURPOSE: Anthropic Claude implementation of LLMClient.
DEPENDENCIES: anthropic SDK

ARCHITECTURE NOTES:
- complete(): plain text blocks concatenated
- complete_json(): forces a single tool call whose input_schema is the
  caller's schema, so the reply is structured without prompt tricks
- Both calls run inside an OpenTelemetry span (no-op unless enabled)

SDK errors propagate. The AI collaborators catch them at their boundary
and fall back; this layer doesn't guess what a good fallback is.
"""

import json
import logging
import time
from typing import Any

import anthropic

from fiction_engine.config import LLMSettings
from fiction_engine.llm.client import LLMClient, LLMRequest, LLMResponse
from fiction_engine.observability import get_tracer

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)

TOOL_NAME = "structured_response"


class AnthropicClient(LLMClient):
    """LLM client using Anthropic's Claude API."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "claude-sonnet-4-20250514",
        temperature: float | None = None,
        timeout: float | None = None,
    ):
        """
        Args:
            api_key: Anthropic API key. If None, the SDK reads ANTHROPIC_API_KEY.
            model: Model to use for completions.
            temperature: Default temperature when a request doesn't set one.
            timeout: HTTP timeout in seconds for each call.
        """
        kwargs: dict[str, Any] = {"api_key": api_key}
        if timeout is not None:
            kwargs["timeout"] = timeout
        self._client = anthropic.AsyncAnthropic(**kwargs)
        self._model = model
        self._temperature = temperature

    @property
    def model_name(self) -> str:
        return self._model

    def _build_kwargs(self, request: LLMRequest) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "model": self._model,
            "max_tokens": request.max_tokens,
            "messages": [
                {"role": msg.role, "content": msg.content}
                for msg in request.messages
                if msg.role != "system"
            ],
        }
        temperature = request.temperature if request.temperature is not None else self._temperature
        if temperature is not None:
            kwargs["temperature"] = temperature
        if request.system:
            kwargs["system"] = request.system
        return kwargs

    async def complete(self, request: LLMRequest) -> LLMResponse:
        with tracer.start_as_current_span("llm.complete") as span:
            span.set_attribute("llm.model", self._model)
            span.set_attribute("llm.max_tokens", request.max_tokens)
            span.set_attribute("llm.message_count", len(request.messages))

            start_time = time.perf_counter()
            logger.debug(f"Sending request to {self._model}")

            try:
                response = await self._client.messages.create(**self._build_kwargs(request))
            except anthropic.APIError as e:
                span.record_exception(e)
                raise

            content = "".join(block.text for block in response.content if block.type == "text")

            span.set_attribute("llm.input_tokens", response.usage.input_tokens)
            span.set_attribute("llm.output_tokens", response.usage.output_tokens)
            span.set_attribute("llm.latency_ms", (time.perf_counter() - start_time) * 1000)
            span.set_attribute("llm.stop_reason", response.stop_reason or "unknown")

            logger.debug(
                f"Response: {response.usage.input_tokens} in, {response.usage.output_tokens} out"
            )

            return LLMResponse(
                content=content,
                model=response.model,
                input_tokens=response.usage.input_tokens,
                output_tokens=response.usage.output_tokens,
                stop_reason=response.stop_reason,
                raw_response=response,
            )

    async def complete_json(
        self,
        request: LLMRequest,
        schema: dict[str, Any],
    ) -> dict[str, Any]:
        """
        Request a JSON-structured response via a forced tool call.

        Falls back to parsing a text block as JSON if the model answers in
        prose anyway.

        Raises:
            ValueError: If neither a tool call nor JSON text came back
        """
        with tracer.start_as_current_span("llm.complete_json") as span:
            span.set_attribute("llm.model", self._model)
            span.set_attribute("llm.schema_name", schema.get("title", "unknown"))

            kwargs = self._build_kwargs(request)
            kwargs["tools"] = [
                {
                    "name": TOOL_NAME,
                    "description": "Return the structured response",
                    "input_schema": schema,
                }
            ]
            kwargs["tool_choice"] = {"type": "tool", "name": TOOL_NAME}

            start_time = time.perf_counter()
            logger.debug(f"Sending JSON request to {self._model}")

            try:
                response = await self._client.messages.create(**kwargs)
            except anthropic.APIError as e:
                span.record_exception(e)
                raise

            span.set_attribute("llm.input_tokens", response.usage.input_tokens)
            span.set_attribute("llm.output_tokens", response.usage.output_tokens)
            span.set_attribute("llm.latency_ms", (time.perf_counter() - start_time) * 1000)

            for block in response.content:
                if block.type == "tool_use" and block.name == TOOL_NAME:
                    span.set_attribute("llm.response_type", "tool_use")
                    return dict(block.input)

            for block in response.content:
                if block.type == "text":
                    try:
                        result: dict[str, Any] = json.loads(block.text)
                    except json.JSONDecodeError:
                        continue
                    span.set_attribute("llm.response_type", "text_json")
                    return result

            span.set_attribute("llm.response_type", "failed")
            raise ValueError("Failed to get structured JSON response from Claude")


def create_anthropic_client(settings: LLMSettings) -> AnthropicClient:
    """Build a client from LLM settings."""
    return AnthropicClient(
        api_key=settings.anthropic_api_key or None,
        model=settings.model,
        temperature=settings.temperature,
        timeout=settings.timeout_seconds,
    )
