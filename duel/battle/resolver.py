"""
Turn resolver - orders a turn's selections and executes them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Iterator, Mapping

from duel.battle.actions import ActionDefinition, EffectTag
from duel.battle.effects import EffectTracker
from duel.battle.fighter import Fighter, Side
from duel.battle.selector import SelectedAction

logger = logging.getLogger(__name__)

BLOCK_EFFECT = EffectTag.BLOCK_NEXT_ATTACK.value
BOOST_EFFECT = EffectTag.BOOST_DAMAGE.value

# A raised guard lasts for the rest of the turn it was raised in
BLOCK_DURATION = 1


@dataclass
class ActionOutcome:
    """Result of executing a single action."""
    action_id: str
    actor: Side
    target: Side
    damage: int = 0
    healing: int = 0
    energy_restored: int = 0
    energy_spent: int = 0
    blocked: bool = False
    boosted: bool = False
    messages: list[str] = field(default_factory=list)


@dataclass
class _Execution:
    """Everything an effect handler needs for one action."""
    action: ActionDefinition
    actor: Fighter
    target: Fighter
    outcome: ActionOutcome
    turn: int


EffectHandler = Callable[[_Execution], None]


def damage_against(attacker: Fighter, defender: Fighter, power: int, boost: int = 0, blocked: bool = False) -> int:
    """
    Damage one hit deals.

    raw = power + attack, scaled by the boost percentage, halved by a block,
    then reduced by defense. A hit always deals at least 1.
    """
    raw = power + attacker.attack
    if boost:
        raw = raw * (100 + boost) // 100
    if blocked:
        raw = raw // 2
    return max(1, raw - defender.defense)


class TurnResolver:
    """
    Orders and executes selected actions.

    Ordering is a stable sort by action type priority, so picks of the same
    type keep the order they were made in. Each effect tag has one handler;
    an action with several tags runs them in the order listed.
    """

    def __init__(self, effects: EffectTracker | None = None):
        self.effects = effects or EffectTracker()
        self._handlers: dict[EffectTag, EffectHandler] = {
            EffectTag.DAMAGE: self._apply_damage,
            EffectTag.RESTORE_HP: self._apply_restore_hp,
            EffectTag.RESTORE_ENERGY: self._apply_restore_energy,
            EffectTag.BLOCK_NEXT_ATTACK: self._apply_block,
            EffectTag.BOOST_DAMAGE: self._apply_boost,
        }
        missing = set(EffectTag) - set(self._handlers)
        if missing:
            raise RuntimeError(f"No handler for effect tags: {sorted(t.value for t in missing)}")

    def order(self, selections: Iterable[SelectedAction]) -> list[SelectedAction]:
        """Selections in execution order."""
        return sorted(selections, key=lambda s: s.priority)

    def execute(self, selected: SelectedAction, actor: Fighter, target: Fighter, turn: int = 0) -> ActionOutcome:
        """
        Execute one action.

        Spends energy, starts the cooldown, then applies each effect tag.
        """
        action = selected.action
        outcome = ActionOutcome(
            action_id=selected.action_id,
            actor=selected.side,
            target=selected.side.opponent,
        )

        outcome.energy_spent = actor.energy.spend(action.energy_cost)
        self.effects.start_cooldown(actor, selected.action_id, action.cooldown)

        execution = _Execution(action=action, actor=actor, target=target, outcome=outcome, turn=turn)
        for tag in action.effects:
            self._handlers[tag](execution)

        logger.debug(
            "%s used %s: damage=%d healing=%d energy=%d blocked=%s",
            actor.name, action.name, outcome.damage, outcome.healing,
            outcome.energy_restored, outcome.blocked,
        )
        return outcome

    def resolve(
        self,
        selections: Iterable[SelectedAction],
        fighters: Mapping[Side, Fighter],
        turn: int = 0,
    ) -> Iterator[tuple[SelectedAction, ActionOutcome]]:
        """
        Execute a turn's selections one at a time.

        Yields after each action so the caller can check for the end of the
        battle or pace execution. Stops without executing the rest as soon
        as either fighter is defeated.
        """
        for selected in self.order(selections):
            if any(f.is_defeated for f in fighters.values()):
                return
            actor = fighters[selected.side]
            target = fighters[selected.side.opponent]
            yield selected, self.execute(selected, actor, target, turn)

    # Effect handlers

    def _apply_damage(self, ex: _Execution) -> None:
        boost = 0
        if self.effects.has_active_effect(ex.actor, BOOST_EFFECT):
            boost = self.effects.get_effect_value(ex.actor, BOOST_EFFECT) or 0
            ex.outcome.boosted = boost > 0

        blocked = self.effects.has_active_effect(ex.target, BLOCK_EFFECT)
        if blocked:
            self.effects.remove_effect(ex.target, BLOCK_EFFECT)
            ex.outcome.blocked = True
            ex.outcome.messages.append(f"{ex.target.name} blocked the attack")

        amount = damage_against(ex.actor, ex.target, ex.action.power, boost=boost, blocked=blocked)
        dealt = ex.target.health.take_damage(amount)
        ex.outcome.damage += dealt
        ex.outcome.messages.append(f"{ex.actor.name} dealt {dealt} damage to {ex.target.name}")

    def _apply_restore_hp(self, ex: _Execution) -> None:
        amount = ex.actor.max_hp * ex.action.power // 100
        healed = ex.actor.health.heal(amount)
        ex.outcome.healing += healed
        ex.outcome.messages.append(f"{ex.actor.name} recovered {healed} HP")

    def _apply_restore_energy(self, ex: _Execution) -> None:
        amount = ex.actor.max_energy * ex.action.power // 100
        restored = ex.actor.energy.restore(amount)
        ex.outcome.energy_restored += restored
        ex.outcome.messages.append(f"{ex.actor.name} recovered {restored} energy")

    def _apply_block(self, ex: _Execution) -> None:
        self.effects.add_effect(ex.actor, BLOCK_EFFECT, BLOCK_DURATION, turn=ex.turn)
        ex.outcome.messages.append(f"{ex.actor.name} is guarding")

    def _apply_boost(self, ex: _Execution) -> None:
        duration = ex.action.boost_duration
        self.effects.add_effect(ex.actor, BOOST_EFFECT, duration, value=ex.action.power, turn=ex.turn)
        ex.outcome.messages.append(f"{ex.actor.name} is powered up for {duration} turns")
