"""
conftest.py

Shared pytest fixtures for fiction_engine tests.
"""

import asyncio
import json
from pathlib import Path
from typing import Any

import pytest

from fiction_engine.engine.engine import GameEngine
from fiction_engine.engine.events import EventRecorder
from fiction_engine.llm.client import LLMClient, LLMRequest, LLMResponse
from fiction_engine.models.world import WorldDefinition

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def sample_world_path() -> Path:
    """Path to the sample world JSON file."""
    return FIXTURES_DIR / "sample_world.json"


@pytest.fixture
def sample_world_dict(sample_world_path: Path) -> dict:
    """Load sample world as a dictionary."""
    with open(sample_world_path) as f:
        return json.load(f)


@pytest.fixture
def sample_world(sample_world_dict: dict) -> WorldDefinition:
    """Load and validate the sample world."""
    return WorldDefinition.model_validate(sample_world_dict)


@pytest.fixture
def minimal_world_dict() -> dict:
    """Room A with Room B to its north, and a key in A."""
    return {
        "meta": {"title": "Minimal", "initial_player_location": "room_a"},
        "entities": {
            "locations": [
                {
                    "id": "room_a",
                    "name": "Room A",
                    "description": "The first room.",
                    "connections": [{"direction": "north", "to": "room_b"}],
                },
                {"id": "room_b", "name": "Room B", "description": "The second room."},
            ],
            "objects": [
                {
                    "id": "key",
                    "name": "key",
                    "description": "A key.",
                    "initial_location": "room_a",
                    "properties": {"portable": True},
                }
            ],
        },
    }


@pytest.fixture
def minimal_world(minimal_world_dict: dict) -> WorldDefinition:
    return WorldDefinition.model_validate(minimal_world_dict)


@pytest.fixture
def recorder() -> EventRecorder:
    return EventRecorder()


@pytest.fixture
def engine(sample_world: WorldDefinition, recorder: EventRecorder) -> GameEngine:
    """Offline engine on the spatial backend, with every event recorded."""
    game = GameEngine(sample_world)
    game.events.subscribe(recorder)
    return game


@pytest.fixture(params=[True, False], ids=["spatial", "flat"])
def any_engine(request, sample_world: WorldDefinition, recorder: EventRecorder) -> GameEngine:
    """The same engine on both world view backends."""
    game = GameEngine(sample_world, use_spatial=request.param)
    game.events.subscribe(recorder)
    return game


# ============================================================================
# Scripted LLM client for collaborator tests
# ============================================================================


class ScriptedLLMClient(LLMClient):
    """
    LLMClient that replays canned replies instead of calling an API.

    Each entry in `texts`/`payloads` is consumed in order; an Exception
    instance is raised instead of returned. `delay` makes every call slow,
    for timeout tests.
    """

    def __init__(
        self,
        texts: list[str | Exception] | None = None,
        payloads: list[dict[str, Any] | Exception] | None = None,
        delay: float = 0.0,
    ):
        self.texts = list(texts or [])
        self.payloads = list(payloads or [])
        self.delay = delay
        self.requests: list[LLMRequest] = []

    @property
    def model_name(self) -> str:
        return "scripted"

    async def complete(self, request: LLMRequest) -> LLMResponse:
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        reply = self.texts.pop(0) if self.texts else ""
        if isinstance(reply, Exception):
            raise reply
        return LLMResponse(content=reply, model="scripted")

    async def complete_json(self, request: LLMRequest, schema: dict[str, Any]) -> dict[str, Any]:  # noqa: ARG002
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        if not self.payloads:
            raise ValueError("No scripted payload left")
        payload = self.payloads.pop(0)
        if isinstance(payload, Exception):
            raise payload
        return payload


@pytest.fixture
def scripted_llm() -> type[ScriptedLLMClient]:
    """The scripted client class; tests build one with their own script."""
    return ScriptedLLMClient


@pytest.fixture(autouse=True)
def _no_anthropic_base_url(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep an ambient ANTHROPIC_BASE_URL from redirecting SDK calls past respx mocks."""
    monkeypatch.delenv("ANTHROPIC_BASE_URL", raising=False)
