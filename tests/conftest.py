import os
import random
import sys
import pytest

# Ensure engine modules can be imported
sys.path.append(os.getcwd())

@pytest.fixture
def event_bus():
    """Fresh EventBus for each test."""
    from engine.core.events import EventBus
    return EventBus()

@pytest.fixture
def catalog():
    """Catalog with the six stock actions."""
    from duel.battle.actions import default_catalog
    return default_catalog()

@pytest.fixture
def rng():
    return random.Random(1234)

@pytest.fixture
def fighter_a_template():
    """Player-side template: hp 100, atk 10, def 5."""
    return {
        "name": "Alpha",
        "maxHp": 100,
        "maxEnergy": 20,
        "attack": 10,
        "defense": 5,
        "actions": ["defend", "heal", "powerup", "light_attack", "heavy_attack", "restore_energy"],
    }

@pytest.fixture
def fighter_b_template():
    """Opponent-side template: hp 100, atk 8, def 5."""
    return {
        "name": "Bravo",
        "maxHp": 100,
        "maxEnergy": 20,
        "attack": 8,
        "defense": 5,
        "actions": ["defend", "heal", "powerup", "light_attack", "heavy_attack", "restore_energy"],
    }

@pytest.fixture
def fighter_a(fighter_a_template, catalog):
    from duel.battle.fighter import initialize_fighter
    return initialize_fighter(fighter_a_template, catalog, fighter_id="fighterA")

@pytest.fixture
def fighter_b(fighter_b_template, catalog):
    from duel.battle.fighter import initialize_fighter
    return initialize_fighter(fighter_b_template, catalog, fighter_id="fighterB")

@pytest.fixture
def battle_system(event_bus, catalog, rng):
    """BattleSystem with no pacing and a seeded RNG."""
    from duel.battle.system import BattleSystem
    return BattleSystem(event_bus, catalog=catalog, rng=rng)

@pytest.fixture
def recorder(event_bus):
    """Records every battle event as (event_type, data) in publish order."""
    from duel.battle.system import BattleEvent

    received = []
    def handler(event):
        received.append((event.type, dict(event.data)))

    for event_type in BattleEvent:
        event_bus.subscribe(event_type, handler, weak=False)
    return received
