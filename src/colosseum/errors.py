from __future__ import annotations


class ColosseumError(Exception):
    """Base error for all colosseum failures."""


class CombatantValidationError(ColosseumError, ValueError):
    """Raised when a combatant definition breaks its construction invariants."""


class UnknownFighterError(ColosseumError, KeyError):
    """Raised when a battle state operation receives a name it does not track."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown fighter: {name!r}")

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the readable message instead.
        return self.args[0]


class RosterError(ColosseumError):
    """Raised for unreadable, malformed or conflicting roster files."""


class ArchiveError(ColosseumError):
    """Raised for battle archive problems (missing ids, bad files)."""


class ConfigError(ColosseumError):
    """Raised when configuration values are out of range."""
