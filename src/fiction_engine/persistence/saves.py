"""
saves.py

PURPOSE: Save and load games, in memory and as JSON files.
DEPENDENCIES: pydantic, persistence/models.py, engine/engine.py

ARCHITECTURE NOTES:
Save files live in one directory (Settings.saves_dir()), one JSON document
per save, newest found by modification time.

Every failure mode (missing file, bad JSON, a document that doesn't
validate, ids this world doesn't know) raises SaveError BEFORE the engine
is touched. The running game stays valid whatever happens here.
"""

import json
import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from fiction_engine.constants import PLAYER_ID
from fiction_engine.persistence.models import SaveData, SaveError

if TYPE_CHECKING:
    from fiction_engine.engine.engine import GameEngine

logger = logging.getLogger(__name__)

SAVE_SUFFIX = ".json"


def save_file_name(name: str) -> str:
    """A filesystem-safe file name for a save slot."""
    slug = re.sub(r"[^A-Za-z0-9_-]+", "-", name.strip()).strip("-") or "save"
    return f"{slug}{SAVE_SUFFIX}"


class SaveLoadSystem:
    """Moves engine state to and from SaveData documents."""

    def __init__(self, engine: "GameEngine", saves_dir: Path | str):
        self.engine = engine
        self.saves_dir = Path(saves_dir)

    # --- In memory ---

    def save(self) -> SaveData:
        return self.engine.snapshot()

    def validate(self, data: SaveData | dict[str, Any]) -> SaveData:
        """Parse a document and check it against the loaded world."""
        try:
            save = data if isinstance(data, SaveData) else SaveData.model_validate(data)
        except ValidationError as e:
            raise SaveError(f"Invalid save data: {e.error_count()} problem(s)") from e

        world = self.engine.world_def
        if world.get_location(save.current_location) is None:
            raise SaveError(f"Save refers to unknown location '{save.current_location}'")
        carried: set[str] = set()
        for actor_id, items in save.inventories.items():
            for item_id in items:
                if world.get_object(item_id) is None:
                    raise SaveError(f"Inventory of '{actor_id}' holds unknown object '{item_id}'")
            carried.update(items)

        movable = {obj.id for obj in world.entities.objects}
        holders = movable | {loc.id for loc in world.entities.locations}
        movable |= {PLAYER_ID} | {char.id for char in world.entities.characters}
        for thing_id, holder_id in save.placement.items():
            if thing_id not in movable or holder_id not in holders:
                raise SaveError(f"Save places unknown '{thing_id}' in '{holder_id}'")
            if thing_id in carried:
                raise SaveError(f"Save has '{thing_id}' both carried and placed")
        for thing_id in save.thing_states:
            if world.get_object(thing_id) is None:
                raise SaveError(f"Save has state for unknown object '{thing_id}'")
        return save

    def load(self, data: SaveData | dict[str, Any]) -> None:
        """Replace all engine state with a save; nothing changes if it's invalid."""
        save = self.validate(data)
        self.engine.restore(save)

    # --- Files ---

    def path_for(self, name: str) -> Path:
        return self.saves_dir / save_file_name(name)

    def save_to_file(self, file_path: Path | str) -> Path:
        path = Path(file_path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(self.save().model_dump_json(indent=2))
        except OSError as e:
            raise SaveError(f"Could not write {path}: {e}") from e
        logger.info(f"Saved game to {path}")
        return path

    def load_from_file(self, file_path: Path | str) -> None:
        path = Path(file_path)
        try:
            data = json.loads(path.read_text())
        except OSError as e:
            raise SaveError(f"Could not read {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise SaveError(f"{path} is not valid JSON: {e}") from e
        self.load(data)
        logger.info(f"Loaded game from {path}")

    def list_save_files(self) -> list[Path]:
        """Save files, newest first."""
        if not self.saves_dir.exists():
            return []
        return sorted(
            self.saves_dir.glob(f"*{SAVE_SUFFIX}"),
            key=lambda p: p.stat().st_mtime,
            reverse=True,
        )

    def get_latest_save_file(self) -> Path | None:
        files = self.list_save_files()
        return files[0] if files else None

    def load_latest_save(self) -> bool:
        """Load the newest save; False if there isn't one."""
        latest = self.get_latest_save_file()
        if latest is None:
            return False
        self.load_from_file(latest)
        return True
