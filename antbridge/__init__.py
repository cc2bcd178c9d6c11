"""
Ant Bridge - Rules engine for a deck-building construction card game.

Players draw hands from personal decks, play ants for resources or attack,
buy from a shared trade row, build shared construction objectives and
attack each other's constructions. The package provides:
- A catalog of cards and objectives (JSON loadable, validated)
- Game state, rules and a validate-then-commit command reducer
- Pending interactive events (scout, sabotage, forced discard, trash)
- A transport-safe serialization adapter
- An authoritative session processor and optional FastAPI server
"""

__version__ = "0.1.0"
