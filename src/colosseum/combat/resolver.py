from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from colosseum.combat.actions import Action, AttackAction, HealAction, UseAbilityAction
from colosseum.combat.combatant import Combatant
from colosseum.combat.dice import DieRoll, RollPurpose, apply_crit, roll
from colosseum.combat.events import (
    AbilityUsedEvent,
    AttackEvent,
    BattleEvent,
    HealEvent,
    HealthChangedEvent,
    RollEvent,
)
from colosseum.combat.state import BattleState
from colosseum.core.random import SupportsRandom

logger = logging.getLogger(__name__)

UNKNOWN_ABILITY = "Unknown"


def roll_event(turn: int, actor: str, die: DieRoll, purpose: RollPurpose) -> RollEvent:
    return RollEvent(
        turn=turn,
        actor=actor,
        die=die.value,
        total=die.total,
        positive_crit=die.positive_crit,
        negative_crit=die.negative_crit,
        purpose=purpose,
    )


def effective_defense(defense: DieRoll) -> int:
    """Defense total used in the subtraction. A natural 20 on defense doubles it."""
    if defense.positive_crit:
        return defense.total * 2
    return defense.total


def compute_damage(attack: DieRoll, defense: DieRoll) -> int:
    """Net damage of an attack roll against a defense roll.

    The attack die's crit flags decide the outcome: a natural 20 doubles the
    net damage (which may be zero), a natural 1 zeroes it. The defense die
    never zeroes or doubles the damage itself.
    """
    raw = max(0, attack.total - effective_defense(defense))
    return apply_crit(raw, attack)


@dataclass(frozen=True)
class Resolution:
    """Dice and action events of one turn, plus the HP change still to apply.

    Attributes:
        events: Roll/Attack/Heal/AbilityUsed events, in emission order.
        fighter: Whose HP changes, or None.
        damage: HP to remove from ``fighter``.
        healing: HP to restore to ``fighter``.
    """

    events: Tuple[BattleEvent, ...]
    fighter: Optional[str] = None
    damage: int = 0
    healing: int = 0


def resolve_attack(actor: Combatant, target: Combatant, turn: int, rng: SupportsRandom) -> Resolution:
    attack = roll(rng, actor.base_attack)
    defense = roll(rng, target.base_defense)
    damage = compute_damage(attack, defense)
    logger.debug("Turn %d: %s attacks %s for %d", turn, actor.name, target.name, damage)
    return Resolution(
        events=(
            roll_event(turn, actor.name, attack, RollPurpose.ATTACK),
            roll_event(turn, target.name, defense, RollPurpose.DEFENSE),
            AttackEvent(
                turn=turn,
                attacker=actor.name,
                target=target.name,
                attack_total=attack.total,
                defense_total=effective_defense(defense),
                damage=damage,
            ),
        ),
        fighter=target.name,
        damage=damage,
    )


def resolve_heal(actor: Combatant, turn: int, rng: SupportsRandom) -> Resolution:
    die = roll(rng)
    amount = apply_crit(actor.heal_amount, die)
    logger.debug("Turn %d: %s heals for %d", turn, actor.name, amount)
    return Resolution(
        events=(
            roll_event(turn, actor.name, die, RollPurpose.HEAL),
            HealEvent(turn=turn, actor=actor.name, amount=amount),
        ),
        fighter=actor.name,
        healing=amount,
    )


def resolve_ability(actor: Combatant, target: Combatant, index: int, turn: int) -> Resolution:
    # Effects are not resolved; only the use is recorded.
    name = actor.ability_name(index)
    if name is None:
        logger.warning(
            "%s selected ability index %d of %d; using %r",
            actor.name, index, len(actor.abilities), UNKNOWN_ABILITY,
        )
        name = UNKNOWN_ABILITY
    return Resolution(events=(AbilityUsedEvent(turn=turn, actor=actor.name, target=target.name, ability=name),))


def apply_resolution(resolution: Resolution, turn: int, state: BattleState) -> List[BattleEvent]:
    """Apply the HP change to ``state``; return the events with any HealthChanged appended."""
    events: List[BattleEvent] = list(resolution.events)
    if resolution.fighter is None:
        return events
    if resolution.damage > 0:
        before = state.hp(resolution.fighter)
        after = state.apply_damage(resolution.fighter, resolution.damage)
        events.append(HealthChangedEvent(fighter=resolution.fighter, old_hp=before, new_hp=after, turn=turn))
    if resolution.healing > 0:
        before = state.hp(resolution.fighter)
        after = state.apply_healing(resolution.fighter, resolution.healing)
        events.append(HealthChangedEvent(fighter=resolution.fighter, old_hp=before, new_hp=after, turn=turn))
    return events


def resolve_turn(
    actor: Combatant,
    target: Combatant,
    action: Action,
    turn: int,
    rng: SupportsRandom,
    state: BattleState,
) -> List[BattleEvent]:
    """Resolve one action by ``actor`` against ``target``, apply it, and return its events."""
    if isinstance(action, AttackAction):
        resolution = resolve_attack(actor, target, turn, rng)
    elif isinstance(action, HealAction):
        resolution = resolve_heal(actor, turn, rng)
    elif isinstance(action, UseAbilityAction):
        resolution = resolve_ability(actor, target, action.index, turn)
    else:
        raise TypeError(f"Unsupported action: {action!r}")
    return apply_resolution(resolution, turn, state)
