"""
inventory.py

PURPOSE: Per-actor item ownership (player and every character).
DEPENDENCIES: None

ARCHITECTURE NOTES:
Each inventory is an ordered set of item ids (a dict with None values) so
listings come out in the order items were acquired.

Failure is a False return with no mutation. exchange_items checks both
sides before touching either, so a partial swap can't happen.
"""

from collections.abc import Iterable


class InventoryStore:
    """Actor id -> owned item ids."""

    def __init__(self) -> None:
        self._inventories: dict[str, dict[str, None]] = {}

    def create_inventory(self, actor_id: str) -> None:
        """Create an empty inventory; an existing one is left alone."""
        self._inventories.setdefault(actor_id, {})

    def has_inventory(self, actor_id: str) -> bool:
        return actor_id in self._inventories

    def add_item_to_inventory(self, actor_id: str, item_id: str) -> None:
        """Add an item, creating the inventory if needed. Adding twice is a no-op."""
        self._inventories.setdefault(actor_id, {})[item_id] = None

    def remove_item_from_inventory(self, actor_id: str, item_id: str) -> bool:
        inventory = self._inventories.get(actor_id)
        if inventory is None or item_id not in inventory:
            return False
        del inventory[item_id]
        return True

    def get_inventory_items(self, actor_id: str) -> list[str]:
        return list(self._inventories.get(actor_id, {}))

    def has_item(self, actor_id: str, item_id: str) -> bool:
        return item_id in self._inventories.get(actor_id, {})

    def owner_of(self, item_id: str) -> str | None:
        """The actor holding `item_id`, if any."""
        for actor_id, items in self._inventories.items():
            if item_id in items:
                return actor_id
        return None

    def transfer_item(self, from_actor: str, to_actor: str, item_id: str) -> bool:
        if from_actor not in self._inventories or to_actor not in self._inventories:
            return False
        source = self._inventories[from_actor]
        if item_id not in source:
            return False
        del source[item_id]
        self._inventories[to_actor][item_id] = None
        return True

    def exchange_items(self, actor_a: str, item_a: str, actor_b: str, item_b: str) -> bool:
        """Swap item_a (held by actor_a) with item_b (held by actor_b), or do nothing."""
        if actor_a not in self._inventories or actor_b not in self._inventories:
            return False
        inventory_a = self._inventories[actor_a]
        inventory_b = self._inventories[actor_b]
        if item_a not in inventory_a or item_b not in inventory_b:
            return False

        del inventory_a[item_a]
        del inventory_b[item_b]
        inventory_a[item_b] = None
        inventory_b[item_a] = None
        return True

    def all_inventories(self) -> dict[str, list[str]]:
        """A copy of every inventory, for saving."""
        return {actor_id: list(items) for actor_id, items in self._inventories.items()}

    def load_from_save_data(self, inventories: dict[str, Iterable[str]]) -> None:
        """Replace every inventory with the saved ones."""
        self._inventories = {
            actor_id: dict.fromkeys(items) for actor_id, items in inventories.items()
        }
