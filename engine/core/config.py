"""
Battle configuration.

Recognised options:
    max_actions_per_turn (maxActionsPerTurn): selections a side may queue
        in one turn before further picks are rejected (default 4)
    turn_pacing_ms (turnPacingMs): delay inserted between one action's
        completion and the next action's start, consumed by update(dt)
        (default 0, which resolves a whole turn synchronously)
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

logger = logging.getLogger(__name__)

# Option aliases accepted from presentation layers (camelCase) -> attribute
_OPTION_ALIASES = {
    "maxActionsPerTurn": "max_actions_per_turn",
    "max_actions_per_turn": "max_actions_per_turn",
    "turnPacingMs": "turn_pacing_ms",
    "turn_pacing_ms": "turn_pacing_ms",
}


class BattleConfig:
    """Configuration for the battle engine."""

    def __init__(
        self,
        max_actions_per_turn: int = 4,
        turn_pacing_ms: int = 0,
    ):
        if max_actions_per_turn < 1:
            raise ValueError(f"max_actions_per_turn must be >= 1, got {max_actions_per_turn}")
        if turn_pacing_ms < 0:
            raise ValueError(f"turn_pacing_ms must be >= 0, got {turn_pacing_ms}")

        self.max_actions_per_turn = max_actions_per_turn
        self.turn_pacing_ms = turn_pacing_ms

    @property
    def turn_pacing_seconds(self) -> float:
        """Pacing delay in seconds, the unit update(dt) works in."""
        return self.turn_pacing_ms / 1000.0

    @classmethod
    def from_options(cls, options: Mapping[str, Any] | None) -> BattleConfig:
        """Build a config from an options mapping (camelCase or snake_case keys)."""
        return cls().merged(options)

    def merged(self, options: Mapping[str, Any] | None) -> BattleConfig:
        """
        Return a copy with per-battle overrides applied.

        Unknown keys are logged and ignored.
        """
        values = self.as_dict()
        for key, value in (options or {}).items():
            attr = _OPTION_ALIASES.get(key)
            if attr is None:
                logger.warning("Ignoring unknown battle option %r", key)
                continue
            values[attr] = value
        return BattleConfig(**values)

    def as_dict(self) -> dict[str, Any]:
        return {
            "max_actions_per_turn": self.max_actions_per_turn,
            "turn_pacing_ms": self.turn_pacing_ms,
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BattleConfig):
            return NotImplemented
        return self.as_dict() == other.as_dict()

    def __repr__(self) -> str:
        return (
            f"BattleConfig(max_actions_per_turn={self.max_actions_per_turn}, "
            f"turn_pacing_ms={self.turn_pacing_ms})"
        )
