"""
Vital components - health and energy pools.
"""

from __future__ import annotations

from pydantic import Field

from engine.core.component import Component, register_component


@register_component
class Health(Component):
    """
    Health points tracking.

    Attributes:
        current: Current HP, always within [0, max_hp]
        max_hp: Maximum HP
    """
    current: int = Field(default=100, ge=0)
    max_hp: int = Field(default=100, ge=1)

    def model_post_init(self, __context):
        """Ensure current doesn't exceed max."""
        if self.current > self.max_hp:
            self.current = self.max_hp

    @property
    def percent(self) -> float:
        """Get health as percentage (0-1)."""
        return self.current / self.max_hp

    @property
    def is_depleted(self) -> bool:
        """True once HP has reached zero."""
        return self.current <= 0

    def take_damage(self, amount: int) -> int:
        """
        Take damage.

        Args:
            amount: Damage to take

        Returns:
            HP actually removed (HP never drops below zero)
        """
        actual = min(max(0, amount), self.current)
        self.current -= actual
        return actual

    def heal(self, amount: int) -> int:
        """
        Heal health.

        Args:
            amount: Amount to heal

        Returns:
            Actual amount healed (capped at max_hp)
        """
        old = self.current
        self.current = min(self.current + max(0, amount), self.max_hp)
        return self.current - old


@register_component
class Energy(Component):
    """
    Energy tracking. Actions spend energy; recovery actions restore it.

    Attributes:
        current: Current energy, always within [0, max_energy]
        max_energy: Maximum energy
    """
    current: int = Field(default=20, ge=0)
    max_energy: int = Field(default=20, ge=0)

    def model_post_init(self, __context):
        if self.current > self.max_energy:
            self.current = self.max_energy

    @property
    def percent(self) -> float:
        """Get energy as percentage (0-1)."""
        if self.max_energy <= 0:
            return 0.0
        return self.current / self.max_energy

    def can_afford(self, cost: int) -> bool:
        return self.current >= cost

    def spend(self, amount: int) -> int:
        """
        Spend energy, flooring at zero.

        Returns:
            Energy actually spent
        """
        actual = min(max(0, amount), self.current)
        self.current -= actual
        return actual

    def restore(self, amount: int) -> int:
        """
        Restore energy.

        Returns:
            Actual amount restored (capped at max_energy)
        """
        old = self.current
        self.current = min(self.current + max(0, amount), self.max_energy)
        return self.current - old
