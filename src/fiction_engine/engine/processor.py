"""
processor.py

PURPOSE: Resolve a parsed intent to a rule or a built-in handler and run it.
DEPENDENCIES: commands.py, rules.py, models/inventory.py

ARCHITECTURE NOTES:
Resolution order for one intent:

    1. an action rule naming this action AND this exact target
    2. the built-in handler for the verb
    3. the first action rule matching (exact or wildcard target)
    4. "ask" with no rule -> the talk handler, which may consult the
       conversation collaborator
    5. "I don't understand that."

Step 1 lets a world take over a built-in verb for one object (a
`take golden_idol` rule governs taking the idol) while wildcard rules
never shadow the built-ins.
"""

import inspect
import logging

from fiction_engine.ai.types import ParsedIntent
from fiction_engine.constants import BAG_SUFFIX, NOT_UNDERSTOOD_MESSAGE, PLAYER_ID
from fiction_engine.engine.commands import BUILTIN_HANDLERS, CommandContext, handle_talk
from fiction_engine.engine.results import CommandResult
from fiction_engine.engine.rules import RuleEngine
from fiction_engine.models.inventory import InventoryStore
from fiction_engine.models.world import WorldDefinition

logger = logging.getLogger(__name__)


def populate_inventories(world: WorldDefinition, inventory: InventoryStore) -> None:
    """
    Create every actor's inventory and fill the starting bags.

    Items reach a bag through an `<actor>_bag` initial location or a
    character's initial_inventory list.
    """
    inventory.create_inventory(PLAYER_ID)
    for char in world.entities.characters:
        inventory.create_inventory(char.id)

    for obj in world.entities.objects:
        if obj.initial_location.endswith(BAG_SUFFIX):
            owner = obj.initial_location.removesuffix(BAG_SUFFIX)
            inventory.add_item_to_inventory(owner, obj.id)

    for char in world.entities.characters:
        for item_id in char.initial_inventory:
            inventory.add_item_to_inventory(char.id, item_id)


class CommandProcessor:
    """Runs one intent to completion against the shared command context."""

    def __init__(self, ctx: CommandContext, rules: RuleEngine):
        self.ctx = ctx
        self.rules = rules

    @staticmethod
    def rule_arguments(intent: ParsedIntent) -> tuple[str | None, str | None]:
        """(target, secondary) as action rules see them."""
        target = intent.target or intent.character_target
        if intent.player_item:
            secondary = intent.player_item
        elif intent.target and intent.character_target:
            secondary = intent.character_target
        else:
            secondary = None
        return target, secondary

    async def execute(self, intent: ParsedIntent) -> CommandResult:
        action = intent.action
        target, secondary = self.rule_arguments(intent)

        if target:
            rule = self.rules.find_action_rule(
                action, target, secondary, intent.topic, exact_target=True
            )
            if rule is not None:
                return self.rules.execute_action_rule(rule)

        handler = BUILTIN_HANDLERS.get(action)
        if handler is not None:
            result = handler(intent, self.ctx)
            if inspect.isawaitable(result):
                result = await result
            return result

        rule = self.rules.find_action_rule(action, target, secondary, intent.topic)
        if rule is not None:
            return self.rules.execute_action_rule(rule)

        if action == "ask":
            return await handle_talk(intent, self.ctx)

        logger.debug(f"No handler or rule for {action!r}")
        return CommandResult.fail(NOT_UNDERSTOOD_MESSAGE)
