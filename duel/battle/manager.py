"""
Battle manager - game-side bookkeeping around a BattleSystem.

Holds fighter and enemy templates, builds fighters from them (including
level-scaled random enemies), queues battles, and keeps statistics and a
short battle history by listening to the system's events.
"""

from __future__ import annotations

import itertools
import logging
import math
import random
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

from pydantic.alias_generators import to_camel

from engine.core.events import Event
from duel.battle.errors import TemplateNotFoundError
from duel.battle.fighter import Side, validate_template
from duel.battle.outcome import BattleResult, Winner
from duel.battle.system import BattleEvent, BattleSystem

logger = logging.getLogger(__name__)

TemplateRef = Union[str, Mapping[str, Any]]

DIFFICULTY_MULTIPLIERS: dict[str, float] = {
    "easy": 0.8,
    "normal": 1.0,
    "hard": 1.3,
    "nightmare": 1.6,
}

# Stat growth per player level above 1
LEVEL_SCALING = 0.1

_SCALED_STATS = ("maxHp", "maxEnergy", "attack", "defense")


DEFAULT_FIGHTER_TEMPLATES: dict[str, dict[str, Any]] = {
    "default": {
        "name": "Fighter",
        "maxHp": 100,
        "maxEnergy": 20,
        "attack": 10,
        "defense": 5,
        "actions": ["light_attack", "heavy_attack", "defend", "powerup"],
        "description": "A balanced fighter with standard abilities",
    },
    "defender": {
        "name": "Guardian",
        "maxHp": 120,
        "maxEnergy": 18,
        "attack": 8,
        "defense": 8,
        "actions": ["light_attack", "heavy_attack", "defend", "heal"],
        "customActions": {
            "defend": {
                "name": "Shield Wall",
                "type": "defense",
                "energyCost": 1,
                "power": 0,
                "effects": ["block_next_attack"],
                "cooldown": 0,
                "description": "Create an impenetrable barrier that blocks the next attack",
                "icon": "🛡️",
            },
        },
        "description": "A defensive specialist focused on protection and healing",
    },
    "berserker": {
        "name": "Berserker",
        "maxHp": 90,
        "maxEnergy": 22,
        "attack": 15,
        "defense": 3,
        "actions": ["light_attack", "heavy_attack", "powerup", "restore_energy"],
        "customActions": {
            "heavy_attack": {
                "name": "Rage Strike",
                "type": "attack",
                "energyCost": 5,
                "power": 60,
                "effects": ["damage"],
                "cooldown": 0,
                "description": "A devastating attack fueled by pure rage",
                "icon": "💥",
            },
        },
        "description": "An aggressive fighter that deals massive damage",
    },
    "mage": {
        "name": "Battle Mage",
        "maxHp": 80,
        "maxEnergy": 25,
        "attack": 12,
        "defense": 4,
        "actions": ["light_attack", "heavy_attack", "heal", "powerup"],
        "customActions": {
            "heavy_attack": {
                "name": "Fireball",
                "type": "attack",
                "energyCost": 4,
                "power": 45,
                "effects": ["damage"],
                "cooldown": 0,
                "description": "A blazing magical attack",
                "icon": "🔥",
            },
            "heal": {
                "name": "Healing Light",
                "type": "recovery",
                "energyCost": 3,
                "power": 35,
                "effects": ["restore_hp"],
                "cooldown": 1,
                "description": "Restore health with divine magic",
                "icon": "✨",
            },
        },
        "description": "A spellcaster with powerful magic abilities",
    },
}

DEFAULT_ENEMY_TEMPLATES: dict[str, dict[str, Any]] = {
    "basic": {
        "name": "Training Dummy",
        "maxHp": 80,
        "maxEnergy": 15,
        "attack": 8,
        "defense": 4,
        "actions": ["light_attack", "defend"],
        "description": "A simple opponent for practice",
    },
    "warrior": {
        "name": "Warrior",
        "maxHp": 100,
        "maxEnergy": 20,
        "attack": 12,
        "defense": 6,
        "actions": ["light_attack", "heavy_attack", "defend", "powerup"],
        "description": "A balanced opponent with varied tactics",
    },
    "boss": {
        "name": "Champion",
        "maxHp": 150,
        "maxEnergy": 25,
        "attack": 15,
        "defense": 8,
        "actions": ["light_attack", "heavy_attack", "powerup", "heal"],
        "description": "A powerful boss enemy with advanced abilities",
    },
    "rogue": {
        "name": "Shadow Rogue",
        "maxHp": 85,
        "maxEnergy": 22,
        "attack": 14,
        "defense": 5,
        "actions": ["light_attack", "heavy_attack", "restore_energy"],
        "description": "A fast, agile opponent with quick strikes",
    },
}


@dataclass
class BattleStats:
    """Running totals across battles, seen from fighter A's side."""
    battles_won: int = 0
    battles_lost: int = 0
    draws: int = 0
    total_turns: int = 0
    total_battle_turns: int = 0
    total_damage_dealt: int = 0
    total_damage_taken: int = 0
    action_usage: Counter = field(default_factory=Counter)

    @property
    def total_battles(self) -> int:
        return self.battles_won + self.battles_lost + self.draws

    @property
    def average_battle_length(self) -> float:
        if not self.total_battles:
            return 0.0
        return self.total_battle_turns / self.total_battles

    @property
    def favorite_action(self) -> Optional[str]:
        if not self.action_usage:
            return None
        return self.action_usage.most_common(1)[0][0]

    @property
    def win_rate(self) -> float:
        """Percentage of decided battles won (draws excluded)."""
        decided = self.battles_won + self.battles_lost
        if not decided:
            return 0.0
        return round(self.battles_won / decided * 100, 1)

    def as_dict(self) -> dict[str, Any]:
        return {
            "battles_won": self.battles_won,
            "battles_lost": self.battles_lost,
            "draws": self.draws,
            "total_battles": self.total_battles,
            "total_turns": self.total_turns,
            "average_battle_length": self.average_battle_length,
            "total_damage_dealt": self.total_damage_dealt,
            "total_damage_taken": self.total_damage_taken,
            "action_usage": dict(self.action_usage),
            "favorite_action": self.favorite_action,
            "win_rate": self.win_rate,
        }


@dataclass
class BattleRecord:
    """One battle started through the manager."""
    id: int
    fighter_a: dict[str, Any]
    fighter_b: dict[str, Any]
    options: dict[str, Any] = field(default_factory=dict)
    status: str = "active"
    current_turn: int = 1
    result: Optional[BattleResult] = None
    end_reason: Optional[str] = None


@dataclass
class QueuedBattle:
    fighter_a: TemplateRef
    fighter_b: TemplateRef
    options: dict[str, Any] = field(default_factory=dict)


class BattleManager:
    """
    Templates, queue, statistics and history for a BattleSystem.

    Usage:
        manager = BattleManager(BattleSystem(event_bus))
        manager.start_battle("berserker", "warrior")
        manager.system.select_action(Side.FIGHTER_A, "heavy_attack")
    """

    def __init__(
        self,
        system: BattleSystem,
        max_battle_history: int = 10,
        rng: Optional[random.Random] = None,
        load_defaults: bool = True,
    ):
        self.system = system
        self.max_battle_history = max_battle_history
        self.rng = rng or random.Random()

        self._fighter_templates: dict[str, dict[str, Any]] = {}
        self._enemy_templates: dict[str, dict[str, Any]] = {}

        self.current_battle: Optional[BattleRecord] = None
        self._history: list[BattleRecord] = []
        self._queue: list[QueuedBattle] = []
        self._battle_ids = itertools.count(1)

        self.stats = BattleStats()

        if load_defaults:
            self.load_default_templates()

        events = system.events
        events.subscribe(BattleEvent.TURN_START, self._on_turn_start)
        events.subscribe(BattleEvent.TURN_END, self._on_turn_end)
        events.subscribe(BattleEvent.ACTION_SELECTED, self._on_action_selected)
        events.subscribe(BattleEvent.ACTION_EXECUTED, self._on_action_executed)
        events.subscribe(BattleEvent.BATTLE_END, self._on_battle_end)

    # Templates

    def load_default_templates(self) -> None:
        for template_id, template in DEFAULT_FIGHTER_TEMPLATES.items():
            self.add_fighter_template(template_id, template)
        for template_id, template in DEFAULT_ENEMY_TEMPLATES.items():
            self.add_enemy_template(template_id, template)

    def add_fighter_template(self, template_id: str, template: Mapping[str, Any]) -> None:
        """
        Register a player-side template.

        Raises:
            InvalidFighterError: The template is missing a required field
        """
        validate_template(template)
        self._fighter_templates[template_id] = dict(template)
        logger.debug("Fighter template added: %s", template_id)

    def add_enemy_template(self, template_id: str, template: Mapping[str, Any]) -> None:
        """
        Register an opponent template.

        Raises:
            InvalidFighterError: The template is missing a required field
        """
        validate_template(template)
        self._enemy_templates[template_id] = dict(template)
        logger.debug("Enemy template added: %s", template_id)

    def get_fighter_templates(self) -> dict[str, dict[str, Any]]:
        return {k: dict(v) for k, v in self._fighter_templates.items()}

    def get_enemy_templates(self) -> dict[str, dict[str, Any]]:
        return {k: dict(v) for k, v in self._enemy_templates.items()}

    def create_fighter(self, template_id: str, **overrides: Any) -> dict[str, Any]:
        """
        Fighter template with overrides applied.

        Overrides may use snake_case (max_hp) or camelCase (maxHp) names.

        Raises:
            TemplateNotFoundError: No fighter template with that id
        """
        return self._create(self._fighter_templates, "Fighter", template_id, overrides)

    def create_enemy(self, template_id: str, **overrides: Any) -> dict[str, Any]:
        """
        Enemy template with overrides applied.

        Raises:
            TemplateNotFoundError: No enemy template with that id
        """
        return self._create(self._enemy_templates, "Enemy", template_id, overrides)

    def generate_random_enemy(self, player_level: int = 1, difficulty: str = "normal") -> dict[str, Any]:
        """
        Random enemy template scaled to the player.

        Stats are multiplied by the difficulty multiplier and by
        1 + (player_level - 1) * 0.1, then floored.
        """
        if not self._enemy_templates:
            raise TemplateNotFoundError("No enemy templates registered")

        multiplier = DIFFICULTY_MULTIPLIERS.get(difficulty)
        if multiplier is None:
            logger.warning("Unknown difficulty %r, using normal", difficulty)
            multiplier = DIFFICULTY_MULTIPLIERS["normal"]
        final_multiplier = multiplier * (1 + (player_level - 1) * LEVEL_SCALING)

        template_id = self.rng.choice(sorted(self._enemy_templates))
        base = self._enemy_templates[template_id]

        overrides = {stat: math.floor(base[stat] * final_multiplier) for stat in _SCALED_STATS}
        overrides["maxHp"] = max(1, overrides["maxHp"])
        overrides["name"] = f"{base['name']} (Lv.{player_level})"
        return self.create_enemy(template_id, **overrides)

    # Battles

    def start_battle(
        self,
        fighter_a: TemplateRef,
        fighter_b: TemplateRef,
        options: Optional[Mapping[str, Any]] = None,
    ) -> BattleRecord:
        """
        Start a battle from template ids or template mappings.

        A string for fighter_a names a fighter template, a string for
        fighter_b an enemy template.
        """
        template_a = self.create_fighter(fighter_a) if isinstance(fighter_a, str) else dict(fighter_a)
        template_b = self.create_enemy(fighter_b) if isinstance(fighter_b, str) else dict(fighter_b)

        self.system.start_battle(template_a, template_b, options)

        self.current_battle = BattleRecord(
            id=next(self._battle_ids),
            fighter_a=template_a,
            fighter_b=template_b,
            options=dict(options or {}),
        )
        logger.info("Battle %d started: %s vs %s", self.current_battle.id, template_a["name"], template_b["name"])
        return self.current_battle

    def end_battle(self, reason: str = "manual") -> bool:
        """Abort the running battle and file it in the history."""
        if self.current_battle is None or not self.system.abort_battle(reason):
            return False
        record = self.current_battle
        record.status = "aborted"
        record.end_reason = reason
        self._add_to_history(record)
        self.current_battle = None
        return True

    def pause_battle(self, paused: bool) -> None:
        self.system.set_paused(paused)
        if self.current_battle is not None:
            self.current_battle.status = "paused" if paused else "active"

    def queue_battle(
        self,
        fighter_a: TemplateRef,
        fighter_b: TemplateRef,
        options: Optional[Mapping[str, Any]] = None,
    ) -> int:
        """Queue a battle. Returns the queue length."""
        self._queue.append(QueuedBattle(fighter_a, fighter_b, dict(options or {})))
        return len(self._queue)

    def start_next_battle(self) -> Optional[BattleRecord]:
        """Start the oldest queued battle, or return None if the queue is empty."""
        if not self._queue:
            return None
        queued = self._queue.pop(0)
        return self.start_battle(queued.fighter_a, queued.fighter_b, queued.options)

    @property
    def queued_battles(self) -> int:
        return len(self._queue)

    # History / stats

    def get_battle_history(self, limit: Optional[int] = None) -> list[BattleRecord]:
        """Finished battles, newest first."""
        if limit:
            return self._history[:limit]
        return list(self._history)

    def clear_battle_history(self) -> None:
        self._history.clear()

    def get_stats(self) -> dict[str, Any]:
        stats = self.stats.as_dict()
        stats["battle_history_count"] = len(self._history)
        stats["queued_battles"] = len(self._queue)
        return stats

    def reset(self, keep_templates: bool = True) -> None:
        """Clear statistics, history and queue."""
        self.stats = BattleStats()
        self.current_battle = None
        self._queue.clear()
        self._history.clear()
        if not keep_templates:
            self._fighter_templates.clear()
            self._enemy_templates.clear()
            self.load_default_templates()

    def _create(
        self,
        templates: dict[str, dict[str, Any]],
        kind: str,
        template_id: str,
        overrides: Mapping[str, Any],
    ) -> dict[str, Any]:
        template = templates.get(template_id)
        if template is None:
            raise TemplateNotFoundError(f"{kind} template not found: {template_id}")

        fighter = dict(template)
        for key, value in overrides.items():
            fighter[to_camel(key) if "_" in key else key] = value
        fighter["templateId"] = template_id
        return fighter

    def _add_to_history(self, record: BattleRecord) -> None:
        self._history.insert(0, record)
        del self._history[self.max_battle_history:]

    # Event handlers

    def _on_turn_start(self, event: Event) -> None:
        if self.current_battle is not None:
            self.current_battle.current_turn = event["turn"]

    def _on_turn_end(self, event: Event) -> None:
        self.stats.total_turns += 1

    def _on_action_selected(self, event: Event) -> None:
        if event["side"] is Side.FIGHTER_A:
            self.stats.action_usage[event["action"].id] += 1

    def _on_action_executed(self, event: Event) -> None:
        outcome = event["outcome"]
        if outcome.damage <= 0:
            return
        if outcome.actor is Side.FIGHTER_A:
            self.stats.total_damage_dealt += outcome.damage
        else:
            self.stats.total_damage_taken += outcome.damage

    def _on_battle_end(self, event: Event) -> None:
        result: BattleResult = event["result"]

        if result.winner is Winner.FIGHTER_A:
            self.stats.battles_won += 1
        elif result.winner is Winner.FIGHTER_B:
            self.stats.battles_lost += 1
        else:
            self.stats.draws += 1
        self.stats.total_battle_turns += result.turns

        if self.current_battle is not None:
            record = self.current_battle
            record.status = "ended"
            record.result = result
            record.end_reason = result.reason
            self._add_to_history(record)
            self.current_battle = None

        logger.info(
            "Battle finished: %s (record %d-%d-%d)",
            result.reason, self.stats.battles_won, self.stats.battles_lost, self.stats.draws,
        )
