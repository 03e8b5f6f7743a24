"""
Duel components - data-only building blocks of a fighter.

All components are Pydantic models; battle rules live in duel.battle.
"""

from duel.components.vitals import Health, Energy
from duel.components.combat import CombatStats, StatusEffect

__all__ = [
    # Vitals
    "Health",
    "Energy",
    # Combat
    "CombatStats",
    "StatusEffect",
]
