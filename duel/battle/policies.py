"""
Opponent decision policies.

A policy decides which action the opponent side picks once the player side
has selected. Policies are pure decision logic: they read both fighters and
return an action id (or None to pick nothing this turn); they never mutate
battle state.
"""

from __future__ import annotations

import logging
import random
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional, Sequence

from duel.battle.fighter import Fighter
from duel.battle.selector import available_actions

logger = logging.getLogger(__name__)

HEAL_ACTION = "heal"
ENERGY_ACTION = "restore_energy"
HEAVY_ATTACK_ACTION = "heavy_attack"
LIGHT_ATTACK_ACTION = "light_attack"
DEFEND_ACTION = "defend"


class OpponentPolicy(ABC):
    """Strategy interface for opponent action selection."""

    @abstractmethod
    def choose_action(
        self,
        opponent: Fighter,
        player: Fighter,
        rng: random.Random,
    ) -> Optional[str]:
        """
        Pick an action for the opponent.

        Args:
            opponent: The fighter this policy controls
            player: The other fighter
            rng: Random source owned by the battle

        Returns:
            An action id the opponent can select, or None to pick nothing
        """

    def _fallback(self, opponent: Fighter, rng: random.Random) -> Optional[str]:
        """Uniform pick among affordable, off-cooldown actions."""
        choices = available_actions(opponent)
        if not choices:
            return None
        return rng.choice(choices)

    def _resolve_choice(self, preferred: Optional[str], opponent: Fighter, rng: random.Random) -> Optional[str]:
        """Keep the preferred pick when usable, otherwise fall back to a random usable one."""
        choices = available_actions(opponent)
        if preferred in choices:
            return preferred
        if not choices:
            logger.debug("%s has no usable action this turn", opponent.name)
            return None
        return rng.choice(choices)


def _can_afford(fighter: Fighter, action_id: str) -> bool:
    action = fighter.get_action(action_id)
    return action is not None and fighter.can_afford(action)


class PriorityPolicy(OpponentPolicy):
    """
    Default opponent behavior.

    1. Low on health (< 30%) and able to pay for a heal: heal
    2. Low on energy (< 50%): restore energy
    3. Player healthy (> 70%) and a heavy attack is affordable: heavy attack
    4. A light attack is affordable: light attack
    5. Otherwise: defend

    An unaffordable or cooling-down pick falls back to a random usable
    action; with nothing usable the opponent picks nothing.
    """

    def __init__(
        self,
        low_hp_ratio: float = 0.3,
        low_energy_ratio: float = 0.5,
        healthy_player_ratio: float = 0.7,
    ):
        self.low_hp_ratio = low_hp_ratio
        self.low_energy_ratio = low_energy_ratio
        self.healthy_player_ratio = healthy_player_ratio

    def preferred_action(self, opponent: Fighter, player: Fighter) -> str:
        """The priority chain before availability is considered."""
        if opponent.hp < opponent.max_hp * self.low_hp_ratio and _can_afford(opponent, HEAL_ACTION):
            return HEAL_ACTION
        if opponent.current_energy < opponent.max_energy * self.low_energy_ratio:
            return ENERGY_ACTION
        if player.hp > player.max_hp * self.healthy_player_ratio and _can_afford(opponent, HEAVY_ATTACK_ACTION):
            return HEAVY_ATTACK_ACTION
        if _can_afford(opponent, LIGHT_ATTACK_ACTION):
            return LIGHT_ATTACK_ACTION
        return DEFEND_ACTION

    def choose_action(self, opponent: Fighter, player: Fighter, rng: random.Random) -> Optional[str]:
        return self._resolve_choice(self.preferred_action(opponent, player), opponent, rng)


class RandomPolicy(OpponentPolicy):
    """Uniformly random among usable actions."""

    def choose_action(self, opponent: Fighter, player: Fighter, rng: random.Random) -> Optional[str]:
        return self._fallback(opponent, rng)


class ScriptedPolicy(OpponentPolicy):
    """
    Plays a fixed sequence of action ids, cycling when it runs out.

    When the scripted pick is unusable the fallback policy decides instead
    (the script still advances).
    """

    def __init__(self, script: Sequence[str], fallback: Optional[OpponentPolicy] = None, loop: bool = True):
        if not script:
            raise ValueError("ScriptedPolicy needs at least one action id")
        self.script = list(script)
        self.fallback = fallback or RandomPolicy()
        self.loop = loop
        self._index = 0

    def reset(self) -> None:
        self._index = 0

    def choose_action(self, opponent: Fighter, player: Fighter, rng: random.Random) -> Optional[str]:
        if self._index >= len(self.script):
            if not self.loop:
                return self.fallback.choose_action(opponent, player, rng)
            self._index = 0

        action_id = self.script[self._index]
        self._index += 1

        if action_id in available_actions(opponent):
            return action_id
        logger.debug("Scripted action %s unusable for %s, deferring to fallback", action_id, opponent.name)
        return self.fallback.choose_action(opponent, player, rng)


class Difficulty(str, Enum):
    """Opponent skill tiers."""
    SIMPLE = "simple"
    MODERATE = "moderate"
    SMART = "smart"


class DifficultyPolicy(OpponentPolicy):
    """
    Difficulty-scaled opponent.

    simple: rests when drained, otherwise mostly light attacks.
    moderate: rests early, turtles or swings big when hurt, finishes a weak
        player with heavy attacks, otherwise a weighted mix.
    smart: manages energy by ratio, defends when badly hurt, presses a weak
        player, and weighs its own health and energy before committing.
    """

    def __init__(self, difficulty: Difficulty | str = Difficulty.MODERATE):
        self.difficulty = Difficulty(difficulty)

    def choose_action(self, opponent: Fighter, player: Fighter, rng: random.Random) -> Optional[str]:
        if self.difficulty is Difficulty.SIMPLE:
            preferred = self._simple(opponent, rng)
        elif self.difficulty is Difficulty.MODERATE:
            preferred = self._moderate(opponent, player, rng)
        else:
            preferred = self._smart(opponent, player, rng)
        return self._resolve_choice(preferred, opponent, rng)

    def _simple(self, opponent: Fighter, rng: random.Random) -> str:
        if opponent.current_energy < 2:
            return ENERGY_ACTION
        return LIGHT_ATTACK_ACTION if rng.random() < 0.7 else HEAVY_ATTACK_ACTION

    def _moderate(self, opponent: Fighter, player: Fighter, rng: random.Random) -> str:
        if opponent.current_energy < 4:
            return ENERGY_ACTION
        if opponent.hp_percent < 0.4:
            return DEFEND_ACTION if rng.random() < 0.5 else HEAVY_ATTACK_ACTION
        if player.hp_percent < 0.3:
            return HEAVY_ATTACK_ACTION

        roll = rng.random()
        if roll < 0.4:
            return LIGHT_ATTACK_ACTION
        if roll < 0.7:
            return HEAVY_ATTACK_ACTION
        if roll < 0.9:
            return DEFEND_ACTION
        return ENERGY_ACTION

    def _smart(self, opponent: Fighter, player: Fighter, rng: random.Random) -> str:
        hp_ratio = opponent.hp_percent
        energy_ratio = opponent.energy_percent

        if energy_ratio < 0.3:
            return ENERGY_ACTION
        if hp_ratio < 0.25:
            return DEFEND_ACTION if rng.random() < 0.6 else HEAVY_ATTACK_ACTION
        if player.hp_percent < 0.3:
            return HEAVY_ATTACK_ACTION if _can_afford(opponent, HEAVY_ATTACK_ACTION) else LIGHT_ATTACK_ACTION
        if hp_ratio > 0.7 and energy_ratio > 0.6:
            return HEAVY_ATTACK_ACTION if rng.random() < 0.6 else LIGHT_ATTACK_ACTION
        if hp_ratio < 0.5:
            return DEFEND_ACTION if rng.random() < 0.4 else LIGHT_ATTACK_ACTION

        roll = rng.random()
        if roll < 0.3:
            return LIGHT_ATTACK_ACTION
        if roll < 0.6:
            return HEAVY_ATTACK_ACTION
        if roll < 0.8:
            return DEFEND_ACTION
        return ENERGY_ACTION
