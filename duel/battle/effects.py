"""
Effect tracker - timed status effects and action cooldowns.
"""

from __future__ import annotations

from typing import Optional

from duel.components import StatusEffect
from duel.battle.fighter import Fighter


class EffectTracker:
    """
    Applies, queries and expires status effects and cooldowns.

    Everything is turn-indexed: tick_turn_end() is called once per fighter
    after all of a turn's actions have executed. Entries that reach zero are
    deleted, so a stored effect or cooldown is always positive.
    """

    def add_effect(
        self,
        fighter: Fighter,
        effect_id: str,
        duration: int,
        value: Optional[int] = None,
        turn: int = 0,
    ) -> Optional[StatusEffect]:
        """
        Apply (or refresh) an effect.

        Returns:
            The stored effect, or None when duration is not positive
        """
        if duration <= 0:
            fighter.combat.status_effects.pop(effect_id, None)
            return None
        effect = StatusEffect(duration=duration, value=value, start_turn=turn)
        fighter.combat.status_effects[effect_id] = effect
        return effect

    def remove_effect(self, fighter: Fighter, effect_id: str) -> bool:
        """Remove an effect. Returns True if it was present."""
        return fighter.combat.status_effects.pop(effect_id, None) is not None

    def has_active_effect(self, fighter: Fighter, effect_id: str) -> bool:
        return fighter.combat.has_status(effect_id)

    def get_effect_value(self, fighter: Fighter, effect_id: str) -> Optional[int]:
        effect = fighter.combat.get_status(effect_id)
        return effect.value if effect else None

    def start_cooldown(self, fighter: Fighter, action_id: str, turns: int) -> None:
        """Put an action on cooldown; non-positive values are ignored."""
        if turns > 0:
            fighter.combat.cooldowns[action_id] = turns

    def cooldown_remaining(self, fighter: Fighter, action_id: str) -> int:
        return fighter.combat.cooldown_for(action_id)

    def tick_turn_end(self, fighter: Fighter) -> list[str]:
        """
        Decrement every effect duration and cooldown by one turn.

        Returns:
            Ids of effects that expired this tick
        """
        combat = fighter.combat

        expired = []
        for effect_id, effect in list(combat.status_effects.items()):
            effect.duration -= 1
            if effect.duration <= 0:
                del combat.status_effects[effect_id]
                expired.append(effect_id)

        for action_id, remaining in list(combat.cooldowns.items()):
            if remaining - 1 <= 0:
                del combat.cooldowns[action_id]
            else:
                combat.cooldowns[action_id] = remaining - 1

        return expired
