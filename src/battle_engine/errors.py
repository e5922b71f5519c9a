"""Recoverable battle-resolution conditions.

None of these are fatal. Each public operation catches them at its boundary,
returns the untouched input state with a zero-magnitude result, and puts the
diagnostic in the returned log line.
"""
from __future__ import annotations

from typing import Any


class BattleEngineError(ValueError):
    """Base class for every condition raised inside the engine."""

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message


class InvalidCombatant(BattleEngineError):
    """An attack was requested with a side lacking derived battle stats."""


class InvalidItemApplication(BattleEngineError):
    """A tool or spell call is missing its creature, item, or stat data."""


class InvalidEffectParams(BattleEngineError):
    """An effect instance lacks the fields its progression kind requires."""
