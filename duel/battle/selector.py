"""
Action selector - validates and records each side's picks for a turn.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from duel.battle.actions import ActionDefinition
from duel.battle.fighter import Fighter, Side
from duel.battle.errors import (
    ActionNotFoundError,
    ActionRejectedError,
    ActionOnCooldownError,
    InsufficientEnergyError,
    SelectionLimitReachedError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectedAction:
    """
    A queued pick.

    Holds a copy of the definition captured at selection time, so later
    catalog or fighter changes never alter what executes.
    """
    side: Side
    action_id: str
    action: ActionDefinition

    @property
    def priority(self) -> int:
        return self.action.priority


class ActionSelector:
    """
    Per-turn selection lists for both sides.

    Validation order: the action exists for the fighter, the fighter can
    pay for it, it is off cooldown, and the side is below the per-turn cap.
    A rejected pick raises and leaves the lists untouched.
    """

    def __init__(self, max_actions_per_turn: int = 4):
        self.max_actions_per_turn = max_actions_per_turn
        self._selections: dict[Side, list[SelectedAction]] = {
            Side.FIGHTER_A: [],
            Side.FIGHTER_B: [],
        }
        # Every pick from both sides, in the order it was made
        self._order: list[SelectedAction] = []

    def validate(self, side: Side, fighter: Fighter, action_id: str) -> ActionDefinition:
        """
        Check a pick without recording it.

        Returns:
            The fighter's definition for the action

        Raises:
            ActionRejectedError subclass describing the first failed check
        """
        action = fighter.get_action(action_id)
        if action is None:
            raise ActionNotFoundError(action_id)

        if not fighter.can_afford(action):
            raise InsufficientEnergyError(action_id, action.energy_cost, fighter.current_energy)

        remaining = fighter.combat.cooldown_for(action_id)
        if remaining > 0:
            raise ActionOnCooldownError(action_id, remaining)

        if len(self._selections[side]) >= self.max_actions_per_turn:
            raise SelectionLimitReachedError(action_id, self.max_actions_per_turn)

        return action

    def select(self, side: Side, fighter: Fighter, action_id: str) -> SelectedAction:
        """Validate and record a pick."""
        action = self.validate(side, fighter, action_id)
        selected = SelectedAction(side=side, action_id=action_id, action=action.copy_for_battle())
        self._selections[side].append(selected)
        self._order.append(selected)
        logger.debug("%s selected %s (%d queued)", fighter.name, action_id, len(self._selections[side]))
        return selected

    def can_select(self, side: Side, fighter: Fighter, action_id: str) -> bool:
        try:
            self.validate(side, fighter, action_id)
        except ActionRejectedError:
            return False
        return True

    def selections_for(self, side: Side) -> list[SelectedAction]:
        return list(self._selections[side])

    def count(self, side: Side) -> int:
        return len(self._selections[side])

    def has_selection(self, side: Side) -> bool:
        return bool(self._selections[side])

    @property
    def both_selected(self) -> bool:
        return all(self._selections.values())

    def in_selection_order(self) -> list[SelectedAction]:
        """All picks from both sides in the order they were made."""
        return list(self._order)

    def clear(self) -> None:
        for picks in self._selections.values():
            picks.clear()
        self._order.clear()


def available_actions(fighter: Fighter) -> list[str]:
    """Action ids the fighter can currently pay for and that are off cooldown."""
    available = []
    for action_id in fighter.actions:
        action = fighter.action_definitions.get(action_id)
        if action is None:
            continue
        if fighter.can_afford(action) and not fighter.is_on_cooldown(action_id):
            available.append(action_id)
    return available
