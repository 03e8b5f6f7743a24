import pytest
from pydantic import ValidationError
from engine.core.component import Component, register_component, get_component_type, get_all_component_types

@register_component
class Shield(Component):
    charges: int = 1

def test_registry_lookup():
    assert get_component_type("Shield") is Shield
    assert "Shield" in get_all_component_types()
    assert get_component_type("Nope") is None

def test_clone_is_independent():
    shield = Shield(charges=2)
    copy = shield.clone()
    copy.charges = 5

    assert shield.charges == 2
    assert copy.charges == 5

def test_unknown_fields_rejected():
    with pytest.raises(ValidationError):
        Shield(charges=1, color="red")

def test_assignment_is_validated():
    shield = Shield()
    with pytest.raises(ValidationError):
        shield.charges = "lots"

def test_duel_components_registered():
    import duel.components  # noqa: F401

    for name in ("Health", "Energy", "CombatStats"):
        assert get_component_type(name) is not None
