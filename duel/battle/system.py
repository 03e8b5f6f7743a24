"""
Battle system - duel controller.

Drives a two-fighter battle through its states:

    IDLE -> SELECT -> RESOLVING -> SELECT ... -> ENDED

Selections arrive through select_action(). Once both sides have picked (or
the opponent policy has nothing to pick), the turn resolves. With no pacing
configured the whole turn resolves inside select_action(); otherwise one
action runs immediately and the rest are spaced out by update(dt).
"""

from __future__ import annotations

import logging
import random
from enum import Enum, auto
from typing import Any, Iterator, Mapping, Optional

from engine.core.config import BattleConfig
from engine.core.events import EventBus
from duel.battle.actions import ActionCatalog, default_catalog
from duel.battle.effects import EffectTracker
from duel.battle.errors import ActionRejectedError, BattleStateError
from duel.battle.fighter import Fighter, FighterTemplate, Side, initialize_fighter
from duel.battle.outcome import BattleResult, FighterSnapshot, OutcomeEvaluator
from duel.battle.policies import OpponentPolicy, PriorityPolicy
from duel.battle.resolver import ActionOutcome, TurnResolver
from duel.battle.selector import ActionSelector, SelectedAction, available_actions

logger = logging.getLogger(__name__)


class BattleEvent(Enum):
    """Lifecycle notifications published on the event bus."""
    TURN_START = auto()
    ACTION_SELECTED = auto()
    ACTION_EXECUTED = auto()
    TURN_END = auto()
    BATTLE_END = auto()


class BattleState(Enum):
    """State of the battle."""
    IDLE = auto()
    SELECT = auto()
    RESOLVING = auto()
    ENDED = auto()


class BattleSystem:
    """
    Turn-based duel controller.

    Manages:
    - Battle initialization from fighter templates
    - Selection for both sides (the opponent via a pluggable policy)
    - Ordered, paced action execution
    - End detection after every action
    - Event emission for presentation layers

    Subscribers receive FighterSnapshot payloads and must not mutate the
    battle from inside a handler.
    """

    def __init__(
        self,
        events: EventBus,
        config: Optional[BattleConfig] = None,
        catalog: Optional[ActionCatalog] = None,
        opponent_policy: Optional[OpponentPolicy] = None,
        rng: Optional[random.Random] = None,
        auto_opponent: bool = True,
    ):
        """
        Args:
            events: Bus lifecycle events are published on
            config: Defaults for every battle (per-battle options override)
            catalog: Actions fighters are built from
            opponent_policy: Picks fighter B's actions (PriorityPolicy if None)
            rng: Random source for policies
            auto_opponent: If False, fighter B is driven through
                select_action() like fighter A
        """
        self.events = events
        self.config = config or BattleConfig()
        self.catalog = catalog or default_catalog()
        self.opponent_policy = opponent_policy or PriorityPolicy()
        self.rng = rng or random.Random()
        self.auto_opponent = auto_opponent

        self.effects = EffectTracker()
        self.resolver = TurnResolver(self.effects)
        self.evaluator = OutcomeEvaluator()

        # State
        self.state = BattleState.IDLE
        self._fighters: dict[Side, Fighter] = {}
        self._battle_config = self.config
        self._selector = ActionSelector(self.config.max_actions_per_turn)
        self._turn = 0
        self._result: Optional[BattleResult] = None
        self._outcomes: list[ActionOutcome] = []

        # Resolution / pacing
        self._pending: Optional[Iterator[tuple[SelectedAction, ActionOutcome]]] = None
        self._remaining = 0
        self._pace_timer = 0.0
        self._paused = False

    # Inbound API

    def start_battle(
        self,
        template_a: FighterTemplate | Mapping[str, Any],
        template_b: FighterTemplate | Mapping[str, Any],
        options: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """
        Start a battle.

        Both templates are validated before any state changes, so a bad
        template leaves the system exactly as it was.

        Args:
            template_a: Player side fighter template
            template_b: Opponent side fighter template
            options: Per-battle overrides (maxActionsPerTurn, turnPacingMs)

        Raises:
            BattleStateError: A battle is already in progress
            InvalidFighterError: A template is missing or malforms a field
        """
        if self.is_active:
            raise BattleStateError("A battle is already in progress")

        battle_config = self.config.merged(options)
        fighter_a = initialize_fighter(template_a, self.catalog, fighter_id=Side.FIGHTER_A.value)
        fighter_b = initialize_fighter(template_b, self.catalog, fighter_id=Side.FIGHTER_B.value)

        self._fighters = {Side.FIGHTER_A: fighter_a, Side.FIGHTER_B: fighter_b}
        self._battle_config = battle_config
        self._selector = ActionSelector(battle_config.max_actions_per_turn)
        self._turn = 1
        self._result = None
        self._outcomes = []
        self._pending = None
        self._remaining = 0
        self._pace_timer = 0.0
        self._paused = False
        self.state = BattleState.SELECT

        logger.info("Battle started: %s vs %s", fighter_a.name, fighter_b.name)
        self._publish_turn(BattleEvent.TURN_START)

    def select_action(self, side: Side | str, action_id: str) -> SelectedAction:
        """
        Queue an action for a side.

        Selecting for fighter A lets the opponent policy pick for fighter B;
        the turn then resolves automatically.

        Raises:
            BattleStateError: Not in the selection phase
            ActionRejectedError: The pick failed validation (state unchanged)
        """
        side = Side(side)
        if self.state is not BattleState.SELECT:
            raise BattleStateError(f"Cannot select actions while battle is {self.state.name.lower()}")

        selected = self._record_selection(side, action_id)

        forfeited = False
        if self.auto_opponent and side is Side.FIGHTER_A and not self._selector.has_selection(Side.FIGHTER_B):
            forfeited = not self._select_for_opponent()

        if self._selector.both_selected or forfeited:
            self._begin_resolution()
        return selected

    def update(self, dt: float) -> None:
        """
        Advance paced resolution.

        Args:
            dt: Seconds since the last update
        """
        if self.state is not BattleState.RESOLVING or self._paused or self._pending is None:
            return

        self._pace_timer -= dt
        while self._pace_timer <= 0 and self.state is BattleState.RESOLVING:
            if not self._advance():
                break
            self._pace_timer += self._battle_config.turn_pacing_seconds

    def abort_battle(self, reason: str = "Battle aborted") -> bool:
        """
        Abandon the current battle without a result.

        Returns:
            True if a battle was in progress
        """
        if not self.is_active:
            return False

        logger.info("Battle aborted on turn %d: %s", self._turn, reason)
        self._pending = None
        self._selector.clear()
        self._fighters = {}
        self.state = BattleState.IDLE
        return True

    def set_paused(self, paused: bool) -> None:
        """Freeze or resume the pacing countdown. Never changes state."""
        self._paused = paused

    def get_state(self) -> dict[str, Any]:
        """Read-only view of the battle for presentation layers."""
        return {
            "state": self.state,
            "turn": self._turn,
            "paused": self._paused,
            "fighters": {
                side.value: FighterSnapshot.from_fighter(fighter)
                for side, fighter in self._fighters.items()
            },
            "selections": {
                side.value: [s.action_id for s in self._selector.selections_for(side)]
                for side in Side
            },
            "result": self._result,
        }

    # Properties

    @property
    def is_active(self) -> bool:
        return self.state in (BattleState.SELECT, BattleState.RESOLVING)

    @property
    def is_paused(self) -> bool:
        return self._paused

    @property
    def result(self) -> Optional[BattleResult]:
        return self._result

    @property
    def turn(self) -> int:
        return self._turn

    @property
    def fighters(self) -> dict[Side, Fighter]:
        return dict(self._fighters)

    @property
    def battle_config(self) -> BattleConfig:
        """Config in effect for the current (or last) battle."""
        return self._battle_config

    @property
    def turn_outcomes(self) -> list[ActionOutcome]:
        """Outcomes of actions executed so far this turn."""
        return list(self._outcomes)

    def get_fighter(self, side: Side | str) -> Optional[Fighter]:
        return self._fighters.get(Side(side))

    def available_actions(self, side: Side | str) -> list[str]:
        fighter = self._fighters.get(Side(side))
        return available_actions(fighter) if fighter else []

    # Selection

    def _record_selection(self, side: Side, action_id: str) -> SelectedAction:
        selected = self._selector.select(side, self._fighters[side], action_id)
        self.events.publish(
            BattleEvent.ACTION_SELECTED,
            side=side,
            action=selected.action,
            selected_count=self._selector.count(side),
        )
        return selected

    def _select_for_opponent(self) -> bool:
        """
        Let the policy pick for fighter B.

        Returns:
            False if the opponent ends up with no selection this turn
        """
        opponent = self._fighters[Side.FIGHTER_B]
        player = self._fighters[Side.FIGHTER_A]

        action_id = self.opponent_policy.choose_action(opponent, player, self.rng)
        if action_id is None:
            logger.debug("%s has nothing to select on turn %d", opponent.name, self._turn)
            return False

        try:
            self._record_selection(Side.FIGHTER_B, action_id)
        except ActionRejectedError as e:
            logger.warning("Opponent policy picked an unusable action for %s: %s", opponent.name, e)
            return False
        return True

    # Resolution

    def _begin_resolution(self) -> None:
        self.state = BattleState.RESOLVING
        selections = self._selector.in_selection_order()
        self._outcomes = []
        self._remaining = len(selections)
        self._pending = self.resolver.resolve(selections, self._fighters, self._turn)
        self._pace_timer = self._battle_config.turn_pacing_seconds

        if self._battle_config.turn_pacing_ms == 0:
            while self._advance():
                pass
        else:
            # First action runs now, the rest wait on update(dt)
            self._advance()

    def _advance(self) -> bool:
        """
        Execute the next queued action.

        Returns:
            True while further actions remain this turn
        """
        step = next(self._pending, None)
        if step is None:
            self._finish_turn()
            return False

        selected, outcome = step
        self._remaining -= 1
        self._outcomes.append(outcome)

        actor = self._fighters[selected.side]
        target = self._fighters[selected.side.opponent]
        self.events.publish(
            BattleEvent.ACTION_EXECUTED,
            action=selected.action,
            outcome=outcome,
            actor=FighterSnapshot.from_fighter(actor),
            target=FighterSnapshot.from_fighter(target),
        )

        result = self.evaluator.check_end(self._fighters[Side.FIGHTER_A], self._fighters[Side.FIGHTER_B], self._turn)
        if result is not None:
            self._end_battle(result)
            return False

        if self._remaining <= 0:
            self._finish_turn()
            return False
        return True

    def _finish_turn(self) -> None:
        self._pending = None

        # Nothing executes against a fighter already at 0 HP
        result = self.evaluator.check_end(self._fighters[Side.FIGHTER_A], self._fighters[Side.FIGHTER_B], self._turn)
        if result is not None:
            self._end_battle(result)
            return

        for fighter in self._fighters.values():
            expired = self.effects.tick_turn_end(fighter)
            if expired:
                logger.debug("Effects expired on %s: %s", fighter.name, ", ".join(expired))

        self._publish_turn(BattleEvent.TURN_END)

        self._turn += 1
        self._selector.clear()
        self.state = BattleState.SELECT
        self._publish_turn(BattleEvent.TURN_START)

    def _end_battle(self, result: BattleResult) -> None:
        self._pending = None
        self._result = result
        self._selector.clear()
        self.state = BattleState.ENDED

        logger.info("Battle ended on turn %d: %s (%s)", result.turns, result.winner.value, result.reason)
        self.events.publish(
            BattleEvent.BATTLE_END,
            winner=result.winner,
            reason=result.reason,
            turns=result.turns,
            final_stats=result.final_stats,
            result=result,
        )

    def _publish_turn(self, event_type: BattleEvent) -> None:
        self.events.publish(
            event_type,
            turn=self._turn,
            fighter_a=FighterSnapshot.from_fighter(self._fighters[Side.FIGHTER_A]),
            fighter_b=FighterSnapshot.from_fighter(self._fighters[Side.FIGHTER_B]),
        )
