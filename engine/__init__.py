"""
Duel Engine - shared infrastructure.

Event bus, data component base, battle configuration and the JSON data
loader used by the turn-based battle core in the ``duel`` package.

Quick Start:
    from engine.core import EventBus, BattleConfig
    from duel.battle import BattleSystem, Side

    events = EventBus()
    battle = BattleSystem(events, config=BattleConfig(turn_pacing_ms=0))
    battle.start_battle(player_template, enemy_template)
    battle.select_action(Side.FIGHTER_A, "light_attack")
"""

__version__ = "0.1.0"
__author__ = "Developer"

# Re-export core components for convenience
from engine.core import (
    Component,
    register_component,
    EventBus,
    Event,
    BattleConfig,
)

__all__ = [
    "Component",
    "register_component",
    "EventBus",
    "Event",
    "BattleConfig",
]
