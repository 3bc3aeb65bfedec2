from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from colosseum.core.random import SupportsRandom

logger = logging.getLogger(__name__)

DIE_SIDES = 20
POSITIVE_CRIT = 20
NEGATIVE_CRIT = 1


class RollPurpose(str, Enum):
    """Why a die was rolled. Serialized by value."""

    ATTACK = "attack"
    DEFENSE = "defense"
    HEAL = "heal"
    INITIATIVE = "initiative"


def roll_d20(rng: SupportsRandom) -> int:
    """Return a uniform integer in [1, 20] drawn from ``rng``."""
    return rng.randint(1, DIE_SIDES)


@dataclass(frozen=True)
class DieRoll:
    """A single d20 result plus the flat modifier added to it."""

    value: int
    modifier: int = 0

    @property
    def total(self) -> int:
        return self.value + self.modifier

    @property
    def positive_crit(self) -> bool:
        return self.value == POSITIVE_CRIT

    @property
    def negative_crit(self) -> bool:
        return self.value == NEGATIVE_CRIT


def roll(rng: SupportsRandom, modifier: int = 0) -> DieRoll:
    result = DieRoll(value=roll_d20(rng), modifier=modifier)
    logger.debug("Rolled d20=%d (+%d) -> %d", result.value, modifier, result.total)
    return result


def apply_crit(amount: int, die: DieRoll) -> int:
    """Double on a natural 20, zero on a natural 1. Zeroing wins."""
    if die.negative_crit:
        return 0
    if die.positive_crit:
        return amount * 2
    return amount
