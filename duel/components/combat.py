"""
Combat components - offensive/defensive stats, status effects, cooldowns.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pydantic import Field

from engine.core.component import Component, register_component


@dataclass
class StatusEffect:
    """
    A single timed status effect instance.

    Attributes:
        duration: Remaining duration in turns (always > 0 while stored)
        value: Effect magnitude, e.g. the percentage of a damage boost
        start_turn: Turn the effect was applied on
    """
    duration: int
    value: Optional[int] = None
    start_turn: int = 0


@register_component
class CombatStats(Component):
    """
    Combat stats and timed state for one fighter.

    Attributes:
        attack: Added to an action's power when dealing damage
        defense: Subtracted from incoming damage
        status_effects: Active effects keyed by effect id
        cooldowns: Remaining cooldown turns keyed by action id

    Entries in status_effects and cooldowns are pruned as soon as they
    reach zero, so presence of a key means the effect/cooldown is live.
    """
    attack: int = Field(default=10, ge=0)
    defense: int = Field(default=5, ge=0)
    status_effects: dict[str, StatusEffect] = Field(default_factory=dict)
    cooldowns: dict[str, int] = Field(default_factory=dict)

    def has_status(self, effect_id: str) -> bool:
        """Check if an effect is active."""
        effect = self.status_effects.get(effect_id)
        return effect is not None and effect.duration > 0

    def get_status(self, effect_id: str) -> Optional[StatusEffect]:
        return self.status_effects.get(effect_id)

    def cooldown_for(self, action_id: str) -> int:
        """Remaining cooldown turns for an action (0 when ready)."""
        return self.cooldowns.get(action_id, 0)

    def clear_all_status(self) -> None:
        """Remove all status effects and cooldowns."""
        self.status_effects.clear()
        self.cooldowns.clear()
