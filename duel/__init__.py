"""
Duel module.

Provides the turn-based battle core built on top of the engine:
- Components (data-only, Pydantic models)
- Battle (catalog, fighters, selection, resolution, outcome)
- Manager (templates, battle queue, statistics)
"""
