"""
engine.py

PURPOSE: Core game engine that turns player input into turns.
DEPENDENCIES: models, world_view.py, rules.py, processor.py, events.py, ai

ARCHITECTURE NOTES:
The GameEngine is the central coordinator:
- Loads a WorldDefinition and builds the world view, state and inventories
- Asks the intent parser what the player meant
- Hands the intent to the CommandProcessor
- Does the turn bookkeeping and fires event rules after a successful turn
- Emits every outcome as UI events on its EventBus

The engine is the "server": it is authoritative over game state. It never
prints; a renderer subscribes to `engine.events`.

Only a successful command advances the turn and lands in the
recent-actions log. A failed one leaves state exactly as it was.
"""

import logging
from typing import Any

from fiction_engine.ai.factory import Collaborators, build_collaborators
from fiction_engine.ai.keyword_parser import KeywordIntentParser
from fiction_engine.ai.types import CollaboratorError, ParsedIntent, guarded
from fiction_engine.config import Settings
from fiction_engine.constants import (
    COMMAND_CONFIDENCE_THRESHOLD,
    DEFAULT_COLLABORATOR_TIMEOUT,
    NOT_UNDERSTOOD_MESSAGE,
    PLAYER_ID,
)
from fiction_engine.engine.commands import CommandContext, show_location
from fiction_engine.engine.events import (
    CommandResultData,
    CommandResultEvent,
    EventBus,
    GameStartData,
    GameStartEvent,
)
from fiction_engine.engine.processor import CommandProcessor, populate_inventories
from fiction_engine.engine.results import TurnResult
from fiction_engine.engine.rules import RuleEngine
from fiction_engine.engine.world_view import create_world_view
from fiction_engine.models.inventory import InventoryStore
from fiction_engine.models.state import GameState
from fiction_engine.models.world import WorldDefinition
from fiction_engine.observability import get_tracer
from fiction_engine.persistence.models import SaveData

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)


class GameEngine:
    """
    The core game engine.

    Owns the game state, inventories and world view for one session.
    """

    def __init__(
        self,
        world: WorldDefinition,
        collaborators: Collaborators | None = None,
        *,
        use_spatial: bool = True,
        timeout: float = DEFAULT_COLLABORATOR_TIMEOUT,
    ):
        """
        Initialize the engine with a world definition.

        Args:
            world: The world to play
            collaborators: Intent parser, narrator and conversation responder.
                Defaults to the offline keyword parser alone.
            use_spatial: Spatial (True) or legacy flat (False) world view
            timeout: Seconds to wait on any collaborator call
        """
        self.world_def = world
        self.use_spatial = use_spatial
        self.timeout = timeout
        self.collaborators = collaborators or Collaborators(
            intent_parser=KeywordIntentParser(world.parser_hints)
        )
        self._fallback_parser = KeywordIntentParser(world.parser_hints)

        self.events = EventBus()
        self.state = GameState.from_world(world)
        self.inventory = InventoryStore()
        populate_inventories(world, self.inventory)
        self.world = create_world_view(world, use_spatial)

        self.ctx = CommandContext(
            world_def=world,
            world=self.world,
            state=self.state,
            inventory=self.inventory,
            events=self.events,
            conversation=self.collaborators.conversation,
            timeout=timeout,
        )
        self.rules = RuleEngine(
            world.rules.action_rules,
            world.rules.event_rules,
            self.state,
            self.inventory,
            self.world,
            self.events,
            on_player_moved=lambda: show_location(self.ctx),
        )
        self.processor = CommandProcessor(self.ctx, self.rules)

    @classmethod
    def from_settings(
        cls, world: WorldDefinition, settings: Settings, offline: bool = False
    ) -> "GameEngine":
        collaborators = build_collaborators(settings.llm, world.parser_hints, offline=offline)
        return cls(
            world,
            collaborators,
            use_spatial=settings.use_spatial,
            timeout=settings.llm.timeout_seconds,
        )

    # --- Session lifecycle ---

    def start(self) -> None:
        """Announce the game and show the opening location."""
        meta = self.world_def.meta
        self.events.emit(GameStartEvent(data=GameStartData(title=meta.title, author=meta.author)))
        show_location(self.ctx)

    @property
    def game_over(self) -> bool:
        return self.state.game_over

    async def _parse(self, text: str) -> ParsedIntent:
        """Ask the intent parser; fall back to keywords if it fails."""
        context = self.ctx.game_context()
        parser = self.collaborators.intent_parser
        if isinstance(parser, KeywordIntentParser):
            return parser.parse(text, context)
        try:
            return await guarded(parser.parse_input(text, context), self.timeout, "intent parser")
        except CollaboratorError:
            return self._fallback_parser.parse(text, context)

    async def process_command(self, text: str) -> TurnResult:
        """
        Process a line of player input.

        This is the main entry point for the game loop.

        Args:
            text: Raw text from the player

        Returns:
            TurnResult; the details went out as UI events
        """
        if self.state.game_over:
            self.events.message("The game is over.", "warning")
            return TurnResult(success=False, game_over=True, turn=self.state.turn_count)

        with tracer.start_as_current_span("engine.process_command") as span:
            span.set_attribute("engine.turn", self.state.turn_count)

            text = text.strip()
            intent = await self._parse(text) if text else ParsedIntent(confidence=0.0)
            span.set_attribute("engine.action", intent.action)

            if intent.action == "unknown" or intent.confidence < COMMAND_CONFIDENCE_THRESHOLD:
                logger.debug(f"Not understood: {text!r} ({intent.confidence:.2f})")
                self.events.error(NOT_UNDERSTOOD_MESSAGE)
                self._emit_result(False, intent, NOT_UNDERSTOOD_MESSAGE)
                return TurnResult(success=False, message=NOT_UNDERSTOOD_MESSAGE, turn=self.state.turn_count)

            location_before = self.state.current_location
            self.ctx.raw_input = text
            result = await self.processor.execute(intent)
            span.set_attribute("engine.success", result.success)

            if result.message:
                if result.success:
                    self.events.message(result.message)
                else:
                    self.events.error(result.message)

            if result.success:
                self.state.increment_turn()
                self.state.add_recent_action(text)
                moved = self.state.current_location != location_before
                entered = self.state.current_location if moved else None
                self.rules.run_event_rules(entered)
                if moved or (intent.action == "look" and not intent.target):
                    await self._narrate_location()

            self._emit_result(result.success, intent, result.message)
            return TurnResult(
                success=result.success,
                action=intent.action,
                message=result.message,
                game_over=self.state.game_over,
                turn=self.state.turn_count,
            )

    def _emit_result(self, success: bool, intent: ParsedIntent, message: str | None) -> None:
        self.events.emit(
            CommandResultEvent(
                data=CommandResultData(
                    success=success,
                    action=intent.action,
                    target=intent.target or intent.character_target,
                    message=message,
                )
            )
        )

    async def _narrate_location(self) -> None:
        """Optional atmospheric line on top of the authored description."""
        narrator = self.collaborators.narrator
        if narrator is None or self.state.game_over:
            return
        try:
            description = await guarded(
                narrator.describe_location(self.ctx.game_context()), self.timeout, "narrator"
            )
        except CollaboratorError:
            return
        self.events.message(description.text)

    # --- Persistence hooks ---

    def snapshot(self) -> SaveData:
        """Everything a save file records."""
        return SaveData(
            world_title=self.world_def.meta.title,
            current_location=self.state.current_location,
            turn_count=self.state.turn_count,
            game_over=self.state.game_over,
            entity_states=self.state.entity_states,
            counters=self.state.counters,
            flags=self.state.flags,
            recent_actions=self.state.recent_actions,
            conversation_history=self.state.conversation_history,
            inventories=self.inventory.all_inventories(),
            placement=self.world.placements(),
            thing_states=self.world.thing_states(),
        ).model_copy(deep=True)

    def restore(self, save: SaveData) -> None:
        """
        Replace all state with a validated save.

        The world is rebuilt from its definition, then every thing goes back
        where the save recorded it. Saves without placement keep the authored
        layout: carried items are pulled out of it and the player is put back
        in the saved room.
        """
        self.state.replace_with(
            GameState(
                current_location=save.current_location,
                turn_count=save.turn_count,
                game_over=save.game_over,
                entity_states=save.entity_states,
                counters=save.counters,
                flags=save.flags,
                recent_actions=save.recent_actions,
                conversation_history=save.conversation_history,
            )
        )
        self.inventory.load_from_save_data(save.inventories)

        self.world = create_world_view(self.world_def, self.use_spatial)
        self.ctx.world = self.world
        self.rules.world = self.world
        if save.placement:
            self.world.restore_placements(save.placement)
            if self.world.room_of(PLAYER_ID) != self.state.current_location:
                self.world.move_player(self.state.current_location)
        else:
            for items in save.inventories.values():
                for item_id in items:
                    self.world.detach(item_id)
            self.world.move_player(self.state.current_location)
        self.world.restore_thing_states(save.thing_states)

        logger.info(f"Restored game at turn {self.state.turn_count}")
        show_location(self.ctx)

    # --- Debugging ---

    def debug_state(self) -> dict[str, Any]:
        """State, inventories and placement in one dict, for /debug output."""
        return {
            "state": self.state.model_dump(mode="json"),
            "inventories": self.inventory.all_inventories(),
            "world": self.world.export(),
            "player_room": self.world.room_of(PLAYER_ID),
        }
