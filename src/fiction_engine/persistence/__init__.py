"""Saving and loading games."""

from fiction_engine.persistence.models import SaveData, SaveError
from fiction_engine.persistence.saves import SaveLoadSystem, save_file_name

__all__ = [
    "SaveData",
    "SaveError",
    "SaveLoadSystem",
    "save_file_name",
]
