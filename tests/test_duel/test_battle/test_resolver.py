import pytest
from duel.battle.actions import ActionDefinition, ActionType, EffectTag
from duel.battle.effects import EffectTracker
from duel.battle.fighter import Side, initialize_fighter
from duel.battle.resolver import TurnResolver, damage_against
from duel.battle.selector import SelectedAction

@pytest.fixture
def tracker():
    return EffectTracker()

@pytest.fixture
def resolver(tracker):
    return TurnResolver(tracker)

def pick(fighter, side, action_id):
    return SelectedAction(side=side, action_id=action_id, action=fighter.get_action(action_id).copy_for_battle())

def make_fighter(catalog, attack, defense=5, hp=100, side=Side.FIGHTER_A):
    return initialize_fighter({
        "name": side.value,
        "maxHp": hp,
        "maxEnergy": 20,
        "attack": attack,
        "defense": defense,
        "actions": catalog.ids(),
    }, catalog, fighter_id=side.value)

def test_plain_attack(resolver, fighter_a, fighter_b):
    # power 25 + attack 10 - defense 5
    outcome = resolver.execute(pick(fighter_a, Side.FIGHTER_A, "light_attack"), fighter_a, fighter_b)

    assert outcome.damage == 30
    assert fighter_b.hp == 70
    assert not outcome.blocked
    assert fighter_a.current_energy == 18
    assert outcome.energy_spent == 2

def test_block_halves_damage_once(resolver, tracker, catalog):
    attacker = make_fighter(catalog, attack=5)
    defender = make_fighter(catalog, attack=5, side=Side.FIGHTER_B)
    tracker.add_effect(defender, EffectTag.BLOCK_NEXT_ATTACK.value, 1)

    outcome = resolver.execute(pick(attacker, Side.FIGHTER_A, "light_attack"), attacker, defender)

    # raw 30 halved to 15, minus defense 5
    assert outcome.damage == 10
    assert outcome.blocked
    assert defender.hp == 90
    assert not tracker.has_active_effect(defender, EffectTag.BLOCK_NEXT_ATTACK.value)

    second = resolver.execute(pick(attacker, Side.FIGHTER_A, "light_attack"), attacker, defender)
    assert second.damage == 25
    assert not second.blocked

def test_boost_multiplies_raw_damage(resolver, tracker, catalog):
    attacker = make_fighter(catalog, attack=5)
    defender = make_fighter(catalog, attack=5, side=Side.FIGHTER_B)
    tracker.add_effect(attacker, EffectTag.BOOST_DAMAGE.value, 3, value=50)

    outcome = resolver.execute(pick(attacker, Side.FIGHTER_A, "light_attack"), attacker, defender)

    # raw 30 * 1.5 = 45, minus defense 5
    assert outcome.damage == 40
    assert outcome.boosted
    assert defender.hp == 60

def test_minimum_damage_is_one(catalog):
    attacker = make_fighter(catalog, attack=0)
    defender = make_fighter(catalog, attack=0, defense=100, side=Side.FIGHTER_B)

    assert damage_against(attacker, defender, 25) == 1
    assert damage_against(attacker, defender, 25, blocked=True) == 1

def test_damage_floors_hp_at_zero(resolver, fighter_a, fighter_b):
    fighter_b.health.current = 10
    outcome = resolver.execute(pick(fighter_a, Side.FIGHTER_A, "heavy_attack"), fighter_a, fighter_b)

    assert fighter_b.hp == 0
    assert outcome.damage == 10
    assert fighter_b.is_defeated

def test_heal_caps_at_max(resolver, fighter_a, fighter_b):
    fighter_a.health.current = 90
    outcome = resolver.execute(pick(fighter_a, Side.FIGHTER_A, "heal"), fighter_a, fighter_b)

    assert outcome.healing == 10
    assert fighter_a.hp == 100
    assert fighter_a.combat.cooldowns["heal"] == 1

def test_heal_amount_floors(resolver, catalog):
    fighter = make_fighter(catalog, attack=1, hp=55)
    other = make_fighter(catalog, attack=1, side=Side.FIGHTER_B)
    fighter.health.current = 1

    outcome = resolver.execute(pick(fighter, Side.FIGHTER_A, "heal"), fighter, other)

    # 55 * 30 / 100 = 16.5
    assert outcome.healing == 16
    assert fighter.hp == 17

def test_restore_energy(resolver, fighter_a, fighter_b):
    fighter_a.energy.current = 5
    outcome = resolver.execute(pick(fighter_a, Side.FIGHTER_A, "restore_energy"), fighter_a, fighter_b)

    # 40% of 20
    assert outcome.energy_restored == 8
    assert fighter_a.current_energy == 13
    assert fighter_a.combat.cooldowns["restore_energy"] == 1

def test_restore_energy_caps_at_max(resolver, fighter_a, fighter_b):
    fighter_a.energy.current = 18
    outcome = resolver.execute(pick(fighter_a, Side.FIGHTER_A, "restore_energy"), fighter_a, fighter_b)

    assert outcome.energy_restored == 2
    assert fighter_a.current_energy == 20

def test_defend_sets_one_turn_block(resolver, tracker, fighter_a, fighter_b):
    resolver.execute(pick(fighter_a, Side.FIGHTER_A, "defend"), fighter_a, fighter_b)

    assert tracker.has_active_effect(fighter_a, EffectTag.BLOCK_NEXT_ATTACK.value)
    assert fighter_a.combat.status_effects["block_next_attack"].duration == 1

def test_powerup_sets_boost(resolver, tracker, fighter_a, fighter_b):
    resolver.execute(pick(fighter_a, Side.FIGHTER_A, "powerup"), fighter_a, fighter_b, turn=4)

    effect = fighter_a.combat.status_effects["boost_damage"]
    assert effect.value == 50
    assert effect.duration == 3
    assert effect.start_turn == 4

def test_boost_lasts_configured_turns(resolver, tracker, fighter_a, fighter_b):
    resolver.execute(pick(fighter_a, Side.FIGHTER_A, "powerup"), fighter_a, fighter_b)

    boosted_turns = 0
    for _ in range(5):
        outcome = resolver.execute(pick(fighter_a, Side.FIGHTER_A, "light_attack"), fighter_a, fighter_b)
        fighter_b.health.current = 100
        fighter_a.energy.current = 20
        boosted_turns += outcome.boosted
        tracker.tick_turn_end(fighter_a)

    assert boosted_turns == 3

def test_energy_deduction_floors_at_zero(resolver, fighter_a, fighter_b):
    selected = pick(fighter_a, Side.FIGHTER_A, "heavy_attack")
    fighter_a.energy.current = 1

    outcome = resolver.execute(selected, fighter_a, fighter_b)

    assert fighter_a.current_energy == 0
    assert outcome.energy_spent == 1

def test_multiple_effect_tags(resolver, tracker, catalog):
    shield = ActionDefinition(
        id="frost_shield", name="Frost Shield", type=ActionType.DEFENSE,
        energy_cost=2, power=10, effects=(EffectTag.BLOCK_NEXT_ATTACK, EffectTag.RESTORE_HP),
    )
    fighter = make_fighter(catalog, attack=1)
    other = make_fighter(catalog, attack=1, side=Side.FIGHTER_B)
    fighter.health.current = 50

    outcome = resolver.execute(SelectedAction(Side.FIGHTER_A, "frost_shield", shield), fighter, other)

    assert outcome.healing == 10
    assert tracker.has_active_effect(fighter, EffectTag.BLOCK_NEXT_ATTACK.value)

def test_order_by_priority_then_selection(resolver, fighter_a, fighter_b):
    selections = [
        pick(fighter_a, Side.FIGHTER_A, "heavy_attack"),
        pick(fighter_b, Side.FIGHTER_B, "light_attack"),
        pick(fighter_b, Side.FIGHTER_B, "heal"),
        pick(fighter_a, Side.FIGHTER_A, "powerup"),
        pick(fighter_b, Side.FIGHTER_B, "defend"),
    ]

    ordered = [(s.side, s.action_id) for s in resolver.order(selections)]

    assert ordered == [
        (Side.FIGHTER_B, "defend"),
        (Side.FIGHTER_A, "powerup"),
        (Side.FIGHTER_B, "heal"),
        (Side.FIGHTER_A, "heavy_attack"),
        (Side.FIGHTER_B, "light_attack"),
    ]

def test_same_turn_defend_blocks_attack(resolver, fighter_a, fighter_b):
    fighters = {Side.FIGHTER_A: fighter_a, Side.FIGHTER_B: fighter_b}
    selections = [
        pick(fighter_a, Side.FIGHTER_A, "light_attack"),
        pick(fighter_b, Side.FIGHTER_B, "defend"),
    ]

    results = list(resolver.resolve(selections, fighters))

    assert [s.action_id for s, _ in results] == ["defend", "light_attack"]
    attack_outcome = results[1][1]
    assert attack_outcome.blocked
    # raw 35 halved to 17, minus defense 5
    assert attack_outcome.damage == 12

def test_resolve_stops_after_defeat(resolver, fighter_a, fighter_b):
    fighters = {Side.FIGHTER_A: fighter_a, Side.FIGHTER_B: fighter_b}
    fighter_b.health.current = 5
    selections = [
        pick(fighter_a, Side.FIGHTER_A, "light_attack"),
        pick(fighter_b, Side.FIGHTER_B, "heavy_attack"),
    ]

    results = list(resolver.resolve(selections, fighters))

    assert len(results) == 1
    assert fighter_b.is_defeated
    assert fighter_a.hp == 100
    assert fighter_b.current_energy == 20

def test_resolve_is_lazy(resolver, fighter_a, fighter_b):
    fighters = {Side.FIGHTER_A: fighter_a, Side.FIGHTER_B: fighter_b}
    steps = resolver.resolve([pick(fighter_a, Side.FIGHTER_A, "light_attack")], fighters)

    assert fighter_b.hp == 100
    next(steps)
    assert fighter_b.hp == 70
