"""
Colosseum package root.

Holds the turn-based battle engine (``colosseum.combat``) plus the thin
roster, archive and CLI layers that feed it combatants and consume its
event log.
"""

__version__ = "0.1.0"

__all__ = [
    "combat",
]
