"""Battle exceptions."""


class BattleError(Exception):
    """Base exception for the battle core."""


class InvalidFighterError(BattleError):
    """Raised when a fighter template is missing or has malformed required fields."""


class BattleStateError(BattleError):
    """Raised when an operation is not valid in the battle's current state."""


class TemplateNotFoundError(BattleError):
    """Raised when a fighter or enemy template id is not registered."""


class ActionRejectedError(BattleError):
    """
    Raised when a selection attempt is rejected.

    The battle state is left untouched; the caller corrects and resubmits.
    """

    def __init__(self, action_id: str, reason: str):
        super().__init__(f"{action_id}: {reason}")
        self.action_id = action_id
        self.reason = reason


class ActionNotFoundError(ActionRejectedError):
    """Raised when the action id is unknown for the fighter."""

    def __init__(self, action_id: str):
        super().__init__(action_id, "Action not found")


class InsufficientEnergyError(ActionRejectedError):
    """Raised when the fighter cannot pay the action's energy cost."""

    def __init__(self, action_id: str, required: int, available: int):
        super().__init__(action_id, f"Not enough energy ({available}/{required})")
        self.required = required
        self.available = available


class ActionOnCooldownError(ActionRejectedError):
    """Raised when the action is still cooling down."""

    def __init__(self, action_id: str, remaining: int):
        super().__init__(action_id, f"Action is on cooldown ({remaining} turns left)")
        self.remaining = remaining


class SelectionLimitReachedError(ActionRejectedError):
    """Raised when the side already queued the maximum actions this turn."""

    def __init__(self, action_id: str, limit: int):
        super().__init__(action_id, f"Maximum actions selected ({limit})")
        self.limit = limit
