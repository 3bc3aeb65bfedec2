from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from colosseum.combat.actions import select_action
from colosseum.combat.combatant import Combatant
from colosseum.combat.dice import RollPurpose, roll
from colosseum.combat.events import BattleEndedEvent, BattleEvent
from colosseum.combat.log import BattleLog
from colosseum.combat.resolver import resolve_turn, roll_event
from colosseum.combat.state import BattleState
from colosseum.core.random import SupportsRandom

logger = logging.getLogger(__name__)

DEFAULT_MAX_TURNS = 10
INITIATIVE_TURN = 0


class BattleEngine:
    """Runs one battle between two combatants to completion.

    The battle is a pure function of the two combatants, the turn cap and
    the draws taken from ``rng``. Draw order: initiative pairs (fighter1
    then fighter2) until they differ, then per turn one ``random()`` for the
    action followed by the dice that action needs.
    """

    def __init__(
        self,
        fighter1: Combatant,
        fighter2: Combatant,
        rng: SupportsRandom,
        max_turns: int = DEFAULT_MAX_TURNS,
    ) -> None:
        self.fighter1 = fighter1
        self.fighter2 = fighter2
        self.rng = rng
        self.state = BattleState(fighter1, fighter2, max_turns=max_turns)
        self.log = BattleLog()
        self.first: Optional[Combatant] = None
        self.second: Optional[Combatant] = None

    def roll_initiative(self) -> Tuple[Combatant, Combatant]:
        """Both fighters roll until one is strictly higher; that one goes first.

        There is no cap on re-rolls.
        """
        while True:
            roll1 = roll(self.rng)
            roll2 = roll(self.rng)
            self.log.append(roll_event(INITIATIVE_TURN, self.fighter1.name, roll1, RollPurpose.INITIATIVE))
            self.log.append(roll_event(INITIATIVE_TURN, self.fighter2.name, roll2, RollPurpose.INITIATIVE))
            if roll1.value != roll2.value:
                break
            logger.debug("Initiative tie at %d; re-rolling", roll1.value)

        if roll1.value > roll2.value:
            order = (self.fighter1, self.fighter2)
        else:
            order = (self.fighter2, self.fighter1)
        self.first, self.second = order
        logger.info("Initiative: %s (%d) vs %s (%d); %s goes first",
                    self.fighter1.name, roll1.value, self.fighter2.name, roll2.value, order[0].name)
        return order

    def run(self) -> List[BattleEvent]:
        if self.state.completed:
            raise RuntimeError("Battle has already been run")
        logger.info("Battle start: %s vs %s (max_turns=%d)",
                    self.fighter1.name, self.fighter2.name, self.state.max_turns)

        first, second = self.roll_initiative()
        actors = (first, second)
        turn = 0
        reason = None
        while reason is None:
            actor = actors[turn % 2]
            target = actors[(turn + 1) % 2]
            turn += 1
            self.state.advance_turn(turn)
            action = select_action(actor.behavior, self.rng)
            logger.debug("Turn %d: %s chooses %s", turn, actor.name, action)
            self.log.extend(resolve_turn(actor, target, action, turn, self.rng, self.state))
            reason = self.state.check_completion()

        outcome = self.state.get_winner_loser()
        if outcome is None:
            raise RuntimeError("Battle loop ended without a completion reason")
        winner, loser = outcome
        ending = BattleEndedEvent(
            turn=self.state.turn,
            winner=winner,
            loser=loser,
            winner_hp=self.state.hp(winner),
            loser_hp=self.state.hp(loser),
            reason=reason,
        )
        self.log.append(ending)
        logger.info("Battle end: %s defeats %s at turn %d (%s)", winner, loser, self.state.turn, reason)
        return self.log.events()


def run_battle(
    fighter1: Combatant,
    fighter2: Combatant,
    rng: SupportsRandom,
    max_turns: int = DEFAULT_MAX_TURNS,
) -> List[BattleEvent]:
    """Run a full battle and return its event log."""
    return BattleEngine(fighter1, fighter2, rng, max_turns=max_turns).run()
