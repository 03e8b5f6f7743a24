"""
Battle fighters - templates and the per-battle fighter record.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, ValidationError
from pydantic.alias_generators import to_camel

from duel.components import CombatStats, Energy, Health
from duel.battle.actions import ActionCatalog, ActionDefinition, default_catalog
from duel.battle.errors import InvalidFighterError

logger = logging.getLogger(__name__)

# Number of catalog actions a fighter gets when its template lists none
DEFAULT_ACTION_SLOTS = 4


class Side(str, Enum):
    """The two sides of a duel. Fighter A is the player side."""
    FIGHTER_A = "fighterA"
    FIGHTER_B = "fighterB"

    @property
    def opponent(self) -> Side:
        return Side.FIGHTER_B if self is Side.FIGHTER_A else Side.FIGHTER_A


class FighterTemplate(BaseModel):
    """
    Externally supplied fighter definition.

    Required: name, max_hp, max_energy, attack, defense (strict types, so a
    numeric string or a bool is rejected rather than coerced).
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra='ignore',
    )

    name: StrictStr
    max_hp: StrictInt = Field(ge=1)
    max_energy: StrictInt = Field(ge=0)
    attack: StrictInt = Field(ge=0)
    defense: StrictInt = Field(ge=0)

    id: Optional[str] = None
    hp: Optional[StrictInt] = None
    energy: Optional[StrictInt] = None
    actions: Optional[list[str]] = None
    custom_actions: dict[str, dict[str, Any]] = Field(default_factory=dict)


@dataclass
class Fighter:
    """
    A participant in a duel.

    Owns its mutable state (health, energy, effects, cooldowns) for the
    duration of the battle; only the turn resolver and effect tracker
    mutate it.
    """
    id: str
    name: str
    health: Health
    energy: Energy
    combat: CombatStats

    # Action ids this fighter may select, in display order
    actions: list[str] = field(default_factory=list)
    # Per-fighter copies of the definitions (catalog merged with overrides)
    action_definitions: dict[str, ActionDefinition] = field(default_factory=dict)

    @property
    def hp(self) -> int:
        return self.health.current

    @property
    def max_hp(self) -> int:
        return self.health.max_hp

    @property
    def current_energy(self) -> int:
        return self.energy.current

    @property
    def max_energy(self) -> int:
        return self.energy.max_energy

    @property
    def attack(self) -> int:
        return self.combat.attack

    @property
    def defense(self) -> int:
        return self.combat.defense

    @property
    def is_defeated(self) -> bool:
        return self.health.is_depleted

    @property
    def hp_percent(self) -> float:
        return self.health.percent

    @property
    def energy_percent(self) -> float:
        return self.energy.percent

    def get_action(self, action_id: str) -> Optional[ActionDefinition]:
        """Definition of an action this fighter may use, else None."""
        if action_id not in self.actions:
            return None
        return self.action_definitions.get(action_id)

    def can_afford(self, action: ActionDefinition) -> bool:
        return self.energy.can_afford(action.energy_cost)

    def is_on_cooldown(self, action_id: str) -> bool:
        return self.combat.cooldown_for(action_id) > 0


def validate_template(template: FighterTemplate | Mapping[str, Any]) -> FighterTemplate:
    """
    Validate a fighter template.

    Raises:
        InvalidFighterError: a required field is missing or malformed
    """
    if isinstance(template, FighterTemplate):
        return template
    if not isinstance(template, Mapping):
        raise InvalidFighterError(f"Fighter template must be a mapping, got {type(template).__name__}")
    try:
        return FighterTemplate.model_validate(dict(template))
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise InvalidFighterError(f"Invalid fighter template ({fields})") from e


def initialize_fighter(
    template: FighterTemplate | Mapping[str, Any],
    catalog: Optional[ActionCatalog] = None,
    fighter_id: Optional[str] = None,
) -> Fighter:
    """
    Create a battle-ready fighter from a template.

    Missing hp/energy start at their max values. Action definitions are the
    catalog merged with the template's custom actions, copied so that later
    catalog changes never reach a fighter mid-battle.
    """
    parsed = validate_template(template)
    catalog = catalog or default_catalog()

    definitions: dict[str, ActionDefinition] = {
        action_id: action.copy_for_battle()
        for action_id, action in catalog.as_dict().items()
    }
    for action_id, override in parsed.custom_actions.items():
        try:
            definitions[action_id] = ActionDefinition.model_validate({**override, "id": action_id})
        except ValidationError as e:
            raise InvalidFighterError(f"Invalid custom action {action_id!r} for {parsed.name}") from e

    actions = list(parsed.actions) if parsed.actions is not None else catalog.ids()[:DEFAULT_ACTION_SLOTS]

    hp = parsed.max_hp if parsed.hp is None else min(max(parsed.hp, 0), parsed.max_hp)
    energy = parsed.max_energy if parsed.energy is None else min(max(parsed.energy, 0), parsed.max_energy)

    fighter = Fighter(
        id=fighter_id or parsed.id or parsed.name,
        name=parsed.name,
        health=Health(current=hp, max_hp=parsed.max_hp),
        energy=Energy(current=energy, max_energy=parsed.max_energy),
        combat=CombatStats(attack=parsed.attack, defense=parsed.defense),
        actions=actions,
        action_definitions=definitions,
    )
    logger.debug("Initialized fighter %s (%d hp, %d energy)", fighter.name, fighter.hp, fighter.current_energy)
    return fighter
