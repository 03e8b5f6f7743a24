"""
Battle module - turn-based duel core.

Provides:
- Action catalog (definitions, effect tags, priorities)
- Fighters (templates, validation, per-battle state)
- Action selection and opponent policies
- Turn resolution and status effect/cooldown tracking
- End detection and the final battle result
- Battle manager (templates, queue, statistics, history)
"""

from duel.battle.errors import (
    BattleError,
    InvalidFighterError,
    BattleStateError,
    TemplateNotFoundError,
    ActionRejectedError,
    ActionNotFoundError,
    InsufficientEnergyError,
    ActionOnCooldownError,
    SelectionLimitReachedError,
)
from duel.battle.actions import (
    ActionType,
    EffectTag,
    ActionDefinition,
    ActionCatalog,
    DEFAULT_ACTIONS,
    default_catalog,
)
from duel.battle.fighter import (
    Side,
    Fighter,
    FighterTemplate,
    validate_template,
    initialize_fighter,
)
from duel.battle.effects import EffectTracker
from duel.battle.selector import ActionSelector, SelectedAction, available_actions
from duel.battle.policies import (
    OpponentPolicy,
    PriorityPolicy,
    RandomPolicy,
    ScriptedPolicy,
    Difficulty,
    DifficultyPolicy,
)
from duel.battle.resolver import TurnResolver, ActionOutcome
from duel.battle.outcome import (
    OutcomeEvaluator,
    BattleResult,
    FighterSnapshot,
    Winner,
)
from duel.battle.system import BattleSystem, BattleState, BattleEvent
from duel.battle.manager import BattleManager, BattleStats, BattleRecord

__all__ = [
    # Errors
    "BattleError",
    "InvalidFighterError",
    "BattleStateError",
    "TemplateNotFoundError",
    "ActionRejectedError",
    "ActionNotFoundError",
    "InsufficientEnergyError",
    "ActionOnCooldownError",
    "SelectionLimitReachedError",
    # Actions
    "ActionType",
    "EffectTag",
    "ActionDefinition",
    "ActionCatalog",
    "DEFAULT_ACTIONS",
    "default_catalog",
    # Fighters
    "Side",
    "Fighter",
    "FighterTemplate",
    "validate_template",
    "initialize_fighter",
    # Selection / resolution
    "EffectTracker",
    "ActionSelector",
    "SelectedAction",
    "available_actions",
    "OpponentPolicy",
    "PriorityPolicy",
    "RandomPolicy",
    "ScriptedPolicy",
    "Difficulty",
    "DifficultyPolicy",
    "TurnResolver",
    "ActionOutcome",
    # Outcome
    "OutcomeEvaluator",
    "BattleResult",
    "FighterSnapshot",
    "Winner",
    # System
    "BattleSystem",
    "BattleState",
    "BattleEvent",
    # Manager
    "BattleManager",
    "BattleStats",
    "BattleRecord",
]
