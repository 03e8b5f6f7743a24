"""
Outcome evaluation - end-of-battle detection and the final result.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional

from duel.battle.fighter import Fighter, Side


class Winner(str, Enum):
    """Who won a finished battle."""
    FIGHTER_A = Side.FIGHTER_A.value
    FIGHTER_B = Side.FIGHTER_B.value
    DRAW = "draw"


@dataclass(frozen=True)
class FighterSnapshot:
    """
    Read-only copy of a fighter's state.

    Handed to event subscribers and stored in results; changing the fighter
    afterwards never changes a snapshot.
    """
    id: str
    name: str
    hp: int
    max_hp: int
    energy: int
    max_energy: int
    attack: int
    defense: int
    status_effects: Mapping[str, int]
    cooldowns: Mapping[str, int]

    @classmethod
    def from_fighter(cls, fighter: Fighter) -> FighterSnapshot:
        return cls(
            id=fighter.id,
            name=fighter.name,
            hp=fighter.hp,
            max_hp=fighter.max_hp,
            energy=fighter.current_energy,
            max_energy=fighter.max_energy,
            attack=fighter.attack,
            defense=fighter.defense,
            status_effects=MappingProxyType({
                effect_id: effect.duration
                for effect_id, effect in fighter.combat.status_effects.items()
            }),
            cooldowns=MappingProxyType(dict(fighter.combat.cooldowns)),
        )

    @property
    def is_defeated(self) -> bool:
        return self.hp <= 0

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "hp": self.hp,
            "max_hp": self.max_hp,
            "energy": self.energy,
            "max_energy": self.max_energy,
            "attack": self.attack,
            "defense": self.defense,
            "status_effects": dict(self.status_effects),
            "cooldowns": dict(self.cooldowns),
        }


@dataclass(frozen=True)
class BattleResult:
    """Terminal artifact of a battle. Created once, never modified."""
    winner: Winner
    reason: str
    turns: int
    fighter_a: FighterSnapshot
    fighter_b: FighterSnapshot

    @property
    def is_draw(self) -> bool:
        return self.winner is Winner.DRAW

    @property
    def final_stats(self) -> dict[str, FighterSnapshot]:
        return {
            Side.FIGHTER_A.value: self.fighter_a,
            Side.FIGHTER_B.value: self.fighter_b,
        }


class OutcomeEvaluator:
    """Decides whether a battle is over and who won."""

    def check_end(self, fighter_a: Fighter, fighter_b: Fighter, turn: int) -> Optional[BattleResult]:
        """
        Check the end condition.

        Returns:
            The result when at least one fighter is at 0 HP, else None
        """
        a_down = fighter_a.is_defeated
        b_down = fighter_b.is_defeated

        if a_down and b_down:
            return self.build_result(Winner.DRAW, "Both fighters defeated", fighter_a, fighter_b, turn)
        if b_down:
            return self.build_result(Winner.FIGHTER_A, f"{fighter_b.name} defeated", fighter_a, fighter_b, turn)
        if a_down:
            return self.build_result(Winner.FIGHTER_B, f"{fighter_a.name} defeated", fighter_a, fighter_b, turn)
        return None

    def build_result(
        self,
        winner: Winner,
        reason: str,
        fighter_a: Fighter,
        fighter_b: Fighter,
        turn: int,
    ) -> BattleResult:
        return BattleResult(
            winner=winner,
            reason=reason,
            turns=turn,
            fighter_a=FighterSnapshot.from_fighter(fighter_a),
            fighter_b=FighterSnapshot.from_fighter(fighter_b),
        )
