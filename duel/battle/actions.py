"""
Battle actions - action definitions and the action catalog.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Iterator, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from duel.battle.errors import ActionNotFoundError

logger = logging.getLogger(__name__)


class ActionType(str, Enum):
    """Types of battle actions."""
    ATTACK = "attack"
    DEFENSE = "defense"
    BUFF = "buff"
    RECOVERY = "recovery"
    UTILITY = "utility"


class EffectTag(str, Enum):
    """What happens when an action executes."""
    DAMAGE = "damage"
    RESTORE_HP = "restore_hp"
    RESTORE_ENERGY = "restore_energy"
    BLOCK_NEXT_ATTACK = "block_next_attack"
    BOOST_DAMAGE = "boost_damage"


# Resolution order within a turn; lower goes first
ACTION_PRIORITY: dict[ActionType, int] = {
    ActionType.DEFENSE: 0,
    ActionType.BUFF: 1,
    ActionType.RECOVERY: 2,
    ActionType.UTILITY: 3,
    ActionType.ATTACK: 4,
}

DEFAULT_BOOST_DURATION = 3


class ActionDefinition(BaseModel):
    """
    Static data for an action.

    Immutable once built. Accepts snake_case or camelCase keys, so JSON
    definitions using ``energyCost`` style keys load as-is.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra='ignore',
    )

    id: str
    name: str
    type: ActionType
    energy_cost: int = Field(default=0, ge=0)
    power: int = Field(default=0, ge=0)
    effects: tuple[EffectTag, ...] = ()
    cooldown: int = Field(default=0, ge=0)
    duration: Optional[int] = Field(default=None, ge=1)

    # Display
    description: str = ""
    icon: str = ""

    @property
    def priority(self) -> int:
        """Resolution priority (lower resolves first)."""
        return ACTION_PRIORITY[self.type]

    @property
    def boost_duration(self) -> int:
        """Turns a boost from this action persists."""
        return self.duration or DEFAULT_BOOST_DURATION

    def has_effect(self, tag: EffectTag) -> bool:
        return tag in self.effects

    def copy_for_battle(self) -> ActionDefinition:
        """Independent copy handed to a fighter or a selection."""
        return self.model_copy(deep=True)


DEFAULT_ACTIONS: tuple[ActionDefinition, ...] = (
    ActionDefinition(
        id="defend",
        name="Defend",
        type=ActionType.DEFENSE,
        energy_cost=1,
        power=0,
        effects=(EffectTag.BLOCK_NEXT_ATTACK,),
        cooldown=0,
        description="Block the next incoming attack and reduce damage by 50%",
        icon="🛡️",
    ),
    ActionDefinition(
        id="heal",
        name="Heal",
        type=ActionType.RECOVERY,
        energy_cost=3,
        power=30,
        effects=(EffectTag.RESTORE_HP,),
        cooldown=1,
        description="Restore 30% of maximum health",
        icon="💚",
    ),
    ActionDefinition(
        id="powerup",
        name="Power Up",
        type=ActionType.BUFF,
        energy_cost=2,
        power=50,
        effects=(EffectTag.BOOST_DAMAGE,),
        duration=3,
        cooldown=0,
        description="Increase damage by 50% for 3 turns",
        icon="⚡",
    ),
    ActionDefinition(
        id="light_attack",
        name="Quick Strike",
        type=ActionType.ATTACK,
        energy_cost=2,
        power=25,
        effects=(EffectTag.DAMAGE,),
        cooldown=0,
        description="Fast attack with moderate damage",
        icon="👊",
    ),
    ActionDefinition(
        id="heavy_attack",
        name="Power Strike",
        type=ActionType.ATTACK,
        energy_cost=4,
        power=50,
        effects=(EffectTag.DAMAGE,),
        cooldown=0,
        description="Slow attack with high damage",
        icon="💥",
    ),
    ActionDefinition(
        id="restore_energy",
        name="Focus",
        type=ActionType.RECOVERY,
        energy_cost=0,
        power=40,
        effects=(EffectTag.RESTORE_ENERGY,),
        cooldown=1,
        description="Restore 40% of maximum energy",
        icon="🔄",
    ),
)


class ActionCatalog:
    """
    Registry of action definitions.

    No validation beyond presence: type and cost semantics are enforced by
    the selector and resolver.
    """

    def __init__(self, actions: Optional[list[ActionDefinition]] = None):
        self._actions: dict[str, ActionDefinition] = {}
        for action in actions or []:
            self.register(action.id, action)

    def register(self, action_id: str, definition: ActionDefinition | dict) -> ActionDefinition:
        """Register (or replace) an action definition."""
        if isinstance(definition, dict):
            definition = ActionDefinition.model_validate({**definition, "id": action_id})
        if action_id in self._actions:
            logger.debug("Replacing action definition %r", action_id)
        self._actions[action_id] = definition
        return definition

    def get(self, action_id: str) -> Optional[ActionDefinition]:
        """Get an action definition, or None when not registered."""
        return self._actions.get(action_id)

    def require(self, action_id: str) -> ActionDefinition:
        """Get an action definition or raise ActionNotFoundError."""
        action = self._actions.get(action_id)
        if action is None:
            raise ActionNotFoundError(action_id)
        return action

    def ids(self) -> list[str]:
        """Registered action ids in registration order."""
        return list(self._actions)

    def copy(self) -> ActionCatalog:
        """Catalog holding independent copies of every definition."""
        clone = ActionCatalog()
        for action_id, action in self._actions.items():
            clone.register(action_id, action.copy_for_battle())
        return clone

    def as_dict(self) -> dict[str, ActionDefinition]:
        return dict(self._actions)

    def __contains__(self, action_id: object) -> bool:
        return action_id in self._actions

    def __iter__(self) -> Iterator[ActionDefinition]:
        return iter(self._actions.values())

    def __len__(self) -> int:
        return len(self._actions)


def default_catalog() -> ActionCatalog:
    """Catalog of the six stock actions."""
    return ActionCatalog(list(DEFAULT_ACTIONS))
