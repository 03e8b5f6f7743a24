import pytest
from duel.battle.fighter import Side
from duel.battle.selector import ActionSelector, available_actions
from duel.battle.errors import (
    ActionNotFoundError,
    ActionOnCooldownError,
    InsufficientEnergyError,
    SelectionLimitReachedError,
)

@pytest.fixture
def selector():
    return ActionSelector(max_actions_per_turn=2)

def test_select_records_copy(selector, fighter_a):
    selected = selector.select(Side.FIGHTER_A, fighter_a, "light_attack")

    assert selected.side is Side.FIGHTER_A
    assert selected.action_id == "light_attack"
    assert selected.action == fighter_a.get_action("light_attack")
    assert selected.action is not fighter_a.get_action("light_attack")
    assert selector.count(Side.FIGHTER_A) == 1
    assert not selector.both_selected

def test_unknown_action(selector, fighter_a):
    with pytest.raises(ActionNotFoundError):
        selector.select(Side.FIGHTER_A, fighter_a, "fireball")
    assert selector.count(Side.FIGHTER_A) == 0

def test_insufficient_energy(selector, fighter_a):
    fighter_a.energy.current = 3
    with pytest.raises(InsufficientEnergyError) as exc:
        selector.select(Side.FIGHTER_A, fighter_a, "heavy_attack")

    assert exc.value.required == 4
    assert exc.value.available == 3
    assert fighter_a.current_energy == 3
    assert not selector.has_selection(Side.FIGHTER_A)

def test_on_cooldown(selector, fighter_a):
    fighter_a.combat.cooldowns["heal"] = 1
    with pytest.raises(ActionOnCooldownError) as exc:
        selector.select(Side.FIGHTER_A, fighter_a, "heal")
    assert exc.value.remaining == 1

def test_selection_limit(selector, fighter_a):
    selector.select(Side.FIGHTER_A, fighter_a, "light_attack")
    selector.select(Side.FIGHTER_A, fighter_a, "defend")

    with pytest.raises(SelectionLimitReachedError):
        selector.select(Side.FIGHTER_A, fighter_a, "light_attack")
    assert selector.count(Side.FIGHTER_A) == 2

def test_validation_order(selector, fighter_a):
    # Unaffordable and on cooldown: energy is reported first
    fighter_a.energy.current = 0
    fighter_a.combat.cooldowns["heal"] = 1
    with pytest.raises(InsufficientEnergyError):
        selector.select(Side.FIGHTER_A, fighter_a, "heal")

def test_limit_is_per_side(selector, fighter_a, fighter_b):
    selector.select(Side.FIGHTER_A, fighter_a, "light_attack")
    selector.select(Side.FIGHTER_A, fighter_a, "light_attack")
    selector.select(Side.FIGHTER_B, fighter_b, "defend")

    assert selector.both_selected
    assert [s.action_id for s in selector.in_selection_order()] == ["light_attack", "light_attack", "defend"]

def test_can_select(selector, fighter_a):
    assert selector.can_select(Side.FIGHTER_A, fighter_a, "light_attack")
    assert not selector.can_select(Side.FIGHTER_A, fighter_a, "fireball")

def test_clear(selector, fighter_a, fighter_b):
    selector.select(Side.FIGHTER_A, fighter_a, "light_attack")
    selector.select(Side.FIGHTER_B, fighter_b, "defend")
    selector.clear()

    assert selector.count(Side.FIGHTER_A) == 0
    assert selector.in_selection_order() == []

def test_available_actions(fighter_a):
    fighter_a.energy.current = 2
    fighter_a.combat.cooldowns["restore_energy"] = 1

    assert available_actions(fighter_a) == ["defend", "powerup", "light_attack"]
