from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple

from colosseum.combat.combatant import Combatant
from colosseum.combat.events import CompletionReason, HpDepleted, MaxTurnsReached
from colosseum.errors import UnknownFighterError

logger = logging.getLogger(__name__)


class BattleState:
    """HP ledger and termination bookkeeping for a single battle.

    The fighter passed first is the "first-listed" fighter for every
    tie-break (simultaneous knockout, equal HP and max HP). Initiative order
    does not change that.

    Once a completion reason is recorded it is cached and never re-evaluated.
    """

    def __init__(self, fighter1: Combatant, fighter2: Combatant, max_turns: int = 10) -> None:
        if fighter1.name == fighter2.name:
            raise ValueError(f"Combatants must have distinct names, both are {fighter1.name!r}")
        if max_turns < 1:
            raise ValueError("max_turns must be >= 1")
        self.fighter1 = fighter1.name
        self.fighter2 = fighter2.name
        self._hp: Dict[str, int] = {fighter1.name: fighter1.health, fighter2.name: fighter2.health}
        self._max_hp: Dict[str, int] = {fighter1.name: fighter1.health, fighter2.name: fighter2.health}
        self.turn: int = 0
        self.max_turns = max_turns
        self.completed: bool = False
        self.completion_reason: Optional[CompletionReason] = None

    @property
    def names(self) -> Tuple[str, str]:
        return self.fighter1, self.fighter2

    def _require(self, name: str) -> None:
        if name not in self._hp:
            raise UnknownFighterError(name)

    def hp(self, name: str) -> int:
        self._require(name)
        return self._hp[name]

    def max_hp(self, name: str) -> int:
        self._require(name)
        return self._max_hp[name]

    def opponent_of(self, name: str) -> str:
        self._require(name)
        return self.fighter2 if name == self.fighter1 else self.fighter1

    def advance_turn(self, turn: int) -> None:
        self.turn = turn

    def apply_damage(self, name: str, amount: int) -> int:
        """Subtract ``amount`` from ``name``'s HP, never below 0. Returns the new HP."""
        self._require(name)
        before = self._hp[name]
        self._hp[name] = max(0, before - max(0, amount))
        logger.debug("Damage on %s: requested=%d, hp %d -> %d", name, amount, before, self._hp[name])
        return self._hp[name]

    def apply_healing(self, name: str, amount: int) -> int:
        """Add ``amount`` to ``name``'s HP, never above its max. Returns the new HP."""
        self._require(name)
        before = self._hp[name]
        self._hp[name] = min(self._max_hp[name], before + max(0, amount))
        logger.debug("Healing on %s: requested=%d, hp %d -> %d", name, amount, before, self._hp[name])
        return self._hp[name]

    def check_completion(self) -> Optional[CompletionReason]:
        if self.completion_reason is not None:
            return self.completion_reason

        reason: Optional[CompletionReason] = None
        for name in self.names:
            if self._hp[name] == 0:
                reason = HpDepleted(loser=name)
                break
        if reason is None and self.turn >= self.max_turns:
            reason = MaxTurnsReached(turns=self.turn)

        if reason is not None:
            self.completion_reason = reason
            self.completed = True
            logger.info("Battle complete at turn %d: %s", self.turn, reason)
        return reason

    def get_winner_loser(self) -> Optional[Tuple[str, str]]:
        """Return ``(winner, loser)`` once complete, else None.

        Higher HP wins; on equal HP the higher max HP wins; on a full tie the
        first-listed fighter wins.
        """
        if not self.completed:
            return None
        a, b = self.names
        key_a = (self._hp[a], self._max_hp[a])
        key_b = (self._hp[b], self._max_hp[b])
        if key_b > key_a:
            return b, a
        return a, b
