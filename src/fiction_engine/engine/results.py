"""
results.py

PURPOSE: Outcome values for command handlers and turns.
DEPENDENCIES: None

ARCHITECTURE NOTES:
Domain failures are values, not exceptions. A handler returns
CommandResult(success=False, message=...) and the processor shows the
message; only a successful result advances the turn.
"""

from dataclasses import dataclass


@dataclass
class CommandResult:
    """Result of executing one resolved intent."""

    success: bool
    message: str | None = None  # Shown to the player (error on failure)

    @classmethod
    def ok(cls, message: str | None = None) -> "CommandResult":
        return cls(success=True, message=message)

    @classmethod
    def fail(cls, message: str) -> "CommandResult":
        return cls(success=False, message=message)


@dataclass
class TurnResult:
    """Result of processing a line of player input."""

    success: bool
    action: str | None = None
    message: str | None = None
    game_over: bool = False
    turn: int = 0
