"""
Component base class for data components.

Components are small pydantic models holding one concern of a battle
participant's state (health, energy, combat modifiers). Keeping them as
validated models makes:
- invariant checks automatic on every assignment
- snapshots and deep copies trivial
- testing easier

Usage:
    class Health(Component):
        current: int = 100
        max_hp: int = 100
"""

from __future__ import annotations

from typing import ClassVar

from pydantic import BaseModel, ConfigDict


class Component(BaseModel):
    """
    Base class for all components.

    Components use Pydantic for:
    - Automatic validation
    - JSON serialization
    - Type hints
    - Default values

    Mutating helpers on a component must keep the component's own
    invariants (e.g. ``0 <= current <= max``); cross-component rules belong
    to the battle systems.
    """

    model_config = ConfigDict(
        # Allow arbitrary types (for references)
        arbitrary_types_allowed=True,
        # Validate on assignment
        validate_assignment=True,
        # Unknown fields are a programming error
        extra='forbid',
    )

    # Class variable: component type name (used for serialization)
    _type_name: ClassVar[str] = ""

    @classmethod
    def get_type_name(cls) -> str:
        """Get the component type name for serialization."""
        return cls._type_name or cls.__name__

    def clone(self) -> Component:
        """Create a deep copy of this component."""
        return self.model_copy(deep=True)


# Registry of component types for deserialization
_component_registry: dict[str, type[Component]] = {}


def register_component(cls: type[Component]) -> type[Component]:
    """
    Decorator to register a component type.

    Usage:
        @register_component
        class Health(Component):
            current: int
            max_hp: int
    """
    type_name = cls.get_type_name()
    _component_registry[type_name] = cls
    return cls


def get_component_type(type_name: str) -> type[Component] | None:
    """Get component class by type name."""
    return _component_registry.get(type_name)


def get_all_component_types() -> dict[str, type[Component]]:
    """Get all registered component types."""
    return _component_registry.copy()
