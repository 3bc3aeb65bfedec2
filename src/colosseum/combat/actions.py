from __future__ import annotations

import logging
from dataclasses import dataclass

from colosseum.combat.combatant import Behavior
from colosseum.core.random import SupportsRandom

logger = logging.getLogger(__name__)


class Action:
    pass


@dataclass(frozen=True)
class AttackAction(Action):
    pass


@dataclass(frozen=True)
class HealAction(Action):
    pass


@dataclass(frozen=True)
class UseAbilityAction(Action):
    index: int


def choose_action(behavior: Behavior, draw: float) -> Action:
    """Map a uniform draw in [0, 1) onto an action.

    [0, 1) is split into consecutive intervals: attack, then heal, then each
    ability in declaration order, each as wide as its probability. If float
    drift leaves the draw past the last interval the result is an attack.
    """
    cumulative = behavior.attack_chance
    if draw < cumulative:
        return AttackAction()
    cumulative += behavior.heal_chance
    if draw < cumulative:
        return HealAction()
    for index, chance in enumerate(behavior.ability_chances):
        cumulative += chance
        if draw < cumulative:
            return UseAbilityAction(index)
    logger.warning("Action draw %r fell past cumulative %r; falling back to attack", draw, cumulative)
    return AttackAction()


def select_action(behavior: Behavior, rng: SupportsRandom) -> Action:
    return choose_action(behavior, rng.random())
