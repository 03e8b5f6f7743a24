"""
Core engine module.

Exports:
- Component, register_component: Component base and registration
- EventBus, Event: Event system
- BattleConfig: Battle configuration
"""

from engine.core.component import (
    Component,
    register_component,
    get_component_type,
    get_all_component_types,
)
from engine.core.events import EventBus, Event, EventHandler
from engine.core.config import BattleConfig

__all__ = [
    # Components
    "Component",
    "register_component",
    "get_component_type",
    "get_all_component_types",
    # Events
    "EventBus",
    "Event",
    "EventHandler",
    # Config
    "BattleConfig",
]
